"""
API endpoints for candidate intake.

Handles resume uploads (upload gate + ingestion), candidate retrieval,
CV file viewing with reference repair, keyword scans and reconciliation.
"""

import io
import logging
import os
from typing import Optional
from fastapi import APIRouter, UploadFile, File, Form, Depends, HTTPException
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session
from cvintake.core.config import settings
from cvintake.core.database import get_db
from cvintake.core.errors import IngestionFailure
from cvintake.core.storage import StorageBackend, get_storage
from cvintake.crud import candidate as candidate_crud
from cvintake.schemas.candidate import (
    CandidateListResponse,
    CandidateResponse,
    CandidateUploadResponse,
    KeywordScanResponse,
)
from cvintake.services.filename_resolver import ResolutionStatus, resolve_candidate_file
from cvintake.services.ingestion import IngestionOrchestrator, RawDocument
from cvintake.services.keyword_scan import parse_keywords, scan_candidates
from cvintake.tasks import resume_tasks

router = APIRouter(prefix="/candidates", tags=["Candidates"])
logger = logging.getLogger(__name__)

CONTENT_TYPES = {
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".txt": "text/plain",
}


@router.post("/upload", response_model=CandidateUploadResponse)
def upload_resume(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    storage: StorageBackend = Depends(get_storage)
):
    """
    Upload a resume and create a candidate from it.

    Flow:
    1. Validate extension (PDF, TXT, DOC, DOCX) and size (MAX_UPLOAD_SIZE)
    2. Store the file in the upload directory
    3. Run the ingestion pipeline (text -> fields -> filename -> database)
    4. The uploaded file is removed by the pipeline whatever the outcome

    Declared sync so FastAPI runs it in the threadpool, off the event loop.

    Raises:
        HTTPException 400: Unsupported extension or file too large
        HTTPException 422: The resume could not be analyzed
        HTTPException 500: The file could not be saved
    """
    file_ext = os.path.splitext(file.filename or "")[1].lower()
    if file_ext not in settings.ALLOWED_EXTENSIONS:
        logger.info(f"[UPLOAD] Rejected extension: {file_ext or 'none'}")
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported extension: {file_ext or 'none'}. Allowed: {', '.join(settings.ALLOWED_EXTENSIONS)}"
        )

    content = file.file.read()
    if len(content) > settings.MAX_UPLOAD_SIZE:
        raise HTTPException(
            status_code=400,
            detail=f"File too large (max {settings.MAX_UPLOAD_SIZE // (1024 * 1024)}MB)"
        )

    try:
        file_path = storage.store(io.BytesIO(content), file.filename)
    except OSError as e:
        logger.error(f"[UPLOAD] Failed to save file: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to save file: {str(e)}")

    logger.info(f"[UPLOAD] Received {file.filename}")
    document = RawDocument(
        path=file_path,
        extension=file_ext,
        size=len(content),
        original_filename=file.filename
    )

    try:
        result = IngestionOrchestrator(db, storage).ingest(document)
    except IngestionFailure as e:
        raise HTTPException(status_code=422, detail=f"Unable to analyze the CV ({e.step}): {e.cause}")

    return {
        "candidate_id": result.candidate_id,
        "cv_filename": result.stored_filename,
        "fields": result.fields,
        "message": "CV analyzed successfully"
    }


@router.get("/", response_model=list[CandidateListResponse])
def list_candidates(skip: int = 0, limit: int = 100, db: Session = Depends(get_db)):
    """List candidates with pagination (max 100 per page)."""
    if limit > 100:
        limit = 100
    return candidate_crud.get_multi(db, skip=skip, limit=limit)


@router.get("/{candidate_id}", response_model=CandidateResponse)
def get_candidate(candidate_id: int, db: Session = Depends(get_db)):
    """Get a candidate's full record, including the extracted text."""
    candidate = candidate_crud.get_by_id(db, candidate_id)
    if not candidate:
        raise HTTPException(status_code=404, detail=f"Candidate {candidate_id} not found")
    return candidate


@router.get("/{candidate_id}/file")
def get_candidate_file(
    candidate_id: int,
    db: Session = Depends(get_db),
    storage: StorageBackend = Depends(get_storage)
):
    """
    View a candidate's CV file.

    If the recorded file is missing, a similarly named file in the upload
    directory is served instead and the record is updated to point at it
    (X-CV-Status: REPAIRED).

    Raises:
        HTTPException 404: Candidate not found, or no CV available
    """
    resolution = resolve_candidate_file(db, storage, candidate_id)
    if resolution is None:
        raise HTTPException(status_code=404, detail=f"Candidate {candidate_id} not found")

    if resolution.status == ResolutionStatus.NOT_FOUND:
        raise HTTPException(status_code=404, detail=resolution.message)

    file_ext = os.path.splitext(resolution.filename)[1].lower()
    return FileResponse(
        path=resolution.path,
        filename=resolution.filename,
        media_type=CONTENT_TYPES.get(file_ext, "application/octet-stream"),
        content_disposition_type="inline",
        headers={"X-CV-Status": resolution.status.value}
    )


@router.post("/scan", response_model=KeywordScanResponse)
def scan_keywords(keywords: Optional[str] = Form(None), db: Session = Depends(get_db)):
    """
    Rank all candidates by the share of comma-separated keywords they match.

    Raises:
        HTTPException 400: No keyword given
    """
    keyword_list = parse_keywords(keywords)
    if not keyword_list:
        raise HTTPException(status_code=400, detail="Please enter at least one keyword.")

    return {"keywords": keyword_list, "results": scan_candidates(db, keyword_list)}


@router.post("/reconcile", status_code=202)
def reconcile_files():
    """Queue a background check of every candidate's CV file reference."""
    task = resume_tasks.reconcile_candidate_files_task.delay()
    logger.info(f"Queued reconciliation task {task.id}")
    return {"task_id": task.id, "message": "Reconciliation queued"}

"""
Background resume processing.

- ingest_resume_task: run an uploaded file through the ingestion pipeline
- reconcile_candidate_files_task: repair every candidate whose CV file no
  longer resolves in the upload directory

Each task opens its own database session and closes it when done.
"""

import logging
from cvintake.core.celery_app import celery_app
from cvintake.core.config import settings
from cvintake.core.database import SessionLocal
from cvintake.core.errors import IngestionFailure
from cvintake.core.storage import LocalStorage
from cvintake.services.filename_resolver import reconcile_all
from cvintake.services.ingestion import IngestionOrchestrator, RawDocument

logger = logging.getLogger(__name__)


@celery_app.task(name="cvintake.tasks.resume_tasks.ingest_resume_task", bind=True)
def ingest_resume_task(self, file_path: str, original_filename: str = None):
    """
    Extract, parse and persist an uploaded resume.

    The file must already be in the upload directory; it is deleted once
    the task finishes, whether ingestion succeeded or not.

    Args:
        self: Celery task instance (when bind=True)
        file_path: Path of the uploaded file
        original_filename: Name the file was uploaded under

    Returns:
        dict: Processing result with status, candidate id and stored filename
    """
    logger.info(f"[Task {self.request.id}] Ingesting {file_path}")

    db = SessionLocal()
    storage = LocalStorage(settings.UPLOAD_DIR)

    try:
        document = RawDocument.from_path(file_path, original_filename)
        result = IngestionOrchestrator(db, storage).ingest(document)

        logger.info(f"[Task {self.request.id}] Created candidate {result.candidate_id}")
        return {
            "status": "success",
            "candidate_id": result.candidate_id,
            "cv_filename": result.stored_filename,
            "fields": result.fields.model_dump(),
        }

    except FileNotFoundError as e:
        logger.error(f"[Task {self.request.id}] File not found: {e}")
        return {"status": "error", "message": f"File not found: {e}"}

    except IngestionFailure as e:
        logger.error(f"[Task {self.request.id}] Ingestion failed during {e.step}: {e.cause}")
        return {"status": "error", "step": e.step, "message": str(e.cause)}

    finally:
        db.close()


@celery_app.task(name="cvintake.tasks.resume_tasks.reconcile_candidate_files_task", bind=True)
def reconcile_candidate_files_task(self):
    """
    Check every candidate's CV reference against the upload directory.

    Returns:
        dict: counts of checked, found, repaired and missing references
    """
    logger.info(f"[Task {self.request.id}] Reconciling candidate CV files")

    db = SessionLocal()
    try:
        summary = reconcile_all(db, LocalStorage(settings.UPLOAD_DIR))
        return {"status": "success", **summary}
    finally:
        db.close()

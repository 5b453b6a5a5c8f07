"""
Resume ingestion pipeline.

RECEIVED -> TEXT_EXTRACTED -> FIELDS_EXTRACTED -> FILENAME_DERIVED -> PERSISTED -> DONE
                                      |
                                   FAILED (at any step)

The candidate row is the only write and happens last, so a failed ingestion
never leaves a partial record. The uploaded document is removed from the
upload directory whatever the outcome.
"""

import enum
import logging
import os
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, Optional
from sqlalchemy.orm import Session
from cvintake.core.errors import IngestionFailure
from cvintake.core.storage import StorageBackend
from cvintake.crud import candidate as candidate_crud
from cvintake.schemas.candidate import ExtractedFields
from cvintake.services.field_extractor import extract_fields
from cvintake.services.filename_resolver import derive_filename
from cvintake.services.text_extractor import extract_text

logger = logging.getLogger(__name__)


class IngestionStep(str, enum.Enum):
    RECEIVED = "RECEIVED"
    TEXT_EXTRACTED = "TEXT_EXTRACTED"
    FIELDS_EXTRACTED = "FIELDS_EXTRACTED"
    FILENAME_DERIVED = "FILENAME_DERIVED"
    PERSISTED = "PERSISTED"
    DONE = "DONE"
    FAILED = "FAILED"


@dataclass
class RawDocument:
    """An uploaded file waiting to be ingested."""
    path: str
    extension: str
    size: int
    original_filename: Optional[str] = None

    @classmethod
    def from_path(cls, path: str, original_filename: Optional[str] = None) -> "RawDocument":
        return cls(
            path=os.path.abspath(path),
            extension=os.path.splitext(original_filename or path)[1].lower(),
            size=os.path.getsize(path),
            original_filename=original_filename,
        )

    @property
    def stored_name(self) -> str:
        return os.path.basename(self.path)


@dataclass
class IngestionResult:
    candidate_id: int
    fields: ExtractedFields
    stored_filename: str


@contextmanager
def scoped_document(storage: StorageBackend, document: RawDocument) -> Iterator[RawDocument]:
    """
    Yield the document and delete it from the upload directory on exit.

    Cleanup problems are logged and never replace the result or the error
    of the block.
    """
    try:
        yield document
    finally:
        try:
            if storage.delete(document.stored_name):
                logger.info(f"[CLEANUP] Deleted file: {document.path}")
            else:
                logger.info(f"[CLEANUP] File already gone: {document.path}")
        except Exception as e:
            logger.warning(f"[CLEANUP] Error deleting file {document.path}: {e}")


class IngestionOrchestrator:
    """
    Runs one uploaded resume through extraction and persistence.

    Collaborators are passed in explicitly so tests (and workers) can swap
    the database session, the upload directory or the extractors.
    """

    def __init__(
        self,
        db: Session,
        storage: StorageBackend,
        text_extractor: Callable[[str, str], str] = extract_text,
        field_extractor: Callable[..., ExtractedFields] = extract_fields,
    ):
        self.db = db
        self.storage = storage
        self.text_extractor = text_extractor
        self.field_extractor = field_extractor

    def ingest(self, document: RawDocument) -> IngestionResult:
        """
        Extract, parse and persist a resume.

        Returns:
            IngestionResult with the new candidate id, the extracted fields
            and the stored filename

        Raises:
            IngestionFailure: carrying the failed step and the underlying error
        """
        logger.info(f"[PARSE] Starting analysis of {document.path} ({document.size} bytes)")

        # Cleanup deletes by name inside the upload directory, so anything
        # elsewhere is refused before the scoped block
        if os.path.abspath(document.path) != self.storage.path_for(document.stored_name):
            logger.error(f"[PARSE] {document.path} is outside the upload directory")
            raise IngestionFailure(
                "received", ValueError(f"{document.path} is not in the upload directory")
            )

        with scoped_document(self.storage, document):
            state = IngestionStep.RECEIVED
            step = "text_extraction"
            try:
                full_text = self.text_extractor(document.path, document.extension)
                state = IngestionStep.TEXT_EXTRACTED
                logger.info(f"[PARSE] Extracted {len(full_text)} characters")

                step = "field_extraction"
                fields = self.field_extractor(full_text, fallback_filename=document.original_filename)
                state = IngestionStep.FIELDS_EXTRACTED

                step = "filename_derivation"
                stored_filename = derive_filename(
                    fields.name,
                    document.extension,
                    document.original_filename or document.stored_name,
                )
                state = IngestionStep.FILENAME_DERIVED

                step = "persistence"
                candidate = candidate_crud.create(self.db, fields, full_text, stored_filename)
                state = IngestionStep.PERSISTED
            except Exception as e:
                logger.error(f"[PARSE] Analysis failed during {step} (last state {state.value}): {e}")
                raise IngestionFailure(step, e) from e

        logger.info(f"[DB] Candidate saved with ID {candidate.id}, file {stored_filename}")
        logger.debug(f"[PARSE] {document.path}: {IngestionStep.DONE.value}")
        return IngestionResult(candidate_id=candidate.id, fields=fields, stored_filename=stored_filename)

"""
CRUD operations for the Candidate model.

Implements the Repository pattern for the record store consumed by the
ingestion pipeline and the filename resolver. Write failures surface as
StoreFailure so callers never see driver-specific exceptions.
"""

from typing import List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from cvintake.core.errors import StoreFailure
from cvintake.models.candidate import Candidate
from cvintake.schemas.candidate import ExtractedFields


def create(
    db: Session,
    fields: ExtractedFields,
    full_text: str,
    cv_filename: Optional[str]
) -> Candidate:
    """
    Create a new candidate in the database.

    Args:
        db: Database session
        fields: Extracted identity and keyword fields
        full_text: Complete extracted resume text
        cv_filename: Name of the CV file in the upload directory

    Returns:
        Created Candidate instance with id

    Raises:
        StoreFailure: On constraint violation or database I/O error
    """
    db_candidate = Candidate(
        name=fields.name,
        email=fields.email,
        phone=fields.phone,
        skills=fields.skills,
        languages=fields.languages,
        full_text=full_text,
        cv_filename=cv_filename
    )

    try:
        db.add(db_candidate)
        db.commit()
        db.refresh(db_candidate)
    except SQLAlchemyError as e:
        db.rollback()
        raise StoreFailure(f"Failed to create candidate: {e}") from e

    return db_candidate


def get_by_id(db: Session, candidate_id: int) -> Optional[Candidate]:
    """
    Retrieve a candidate by its ID.

    Returns:
        Candidate instance if found, None otherwise
    """
    return db.query(Candidate).filter(Candidate.id == candidate_id).first()


def get_all(db: Session) -> List[Candidate]:
    """Retrieve every candidate in insertion order."""
    return db.query(Candidate).order_by(Candidate.id).all()


def get_multi(db: Session, skip: int = 0, limit: int = 100) -> List[Candidate]:
    """
    Retrieve multiple candidates with pagination.

    Args:
        db: Database session
        skip: Number of records to skip (offset)
        limit: Maximum number of records to return
    """
    return db.query(Candidate).order_by(Candidate.id).offset(skip).limit(limit).all()


def get_with_cv_filename(db: Session) -> List[Candidate]:
    """Candidates that have a recorded CV file."""
    return db.query(Candidate).filter(Candidate.cv_filename.isnot(None)).order_by(Candidate.id).all()


def update_stored_filename(db: Session, candidate_id: int, cv_filename: str) -> Optional[Candidate]:
    """
    Point a candidate at a different file in the upload directory.

    Returns:
        Updated Candidate instance if found, None otherwise

    Raises:
        StoreFailure: If the update could not be committed
    """
    candidate = get_by_id(db, candidate_id)
    if not candidate:
        return None

    candidate.cv_filename = cv_filename

    try:
        db.commit()
        db.refresh(candidate)
    except SQLAlchemyError as e:
        db.rollback()
        raise StoreFailure(f"Failed to update cv_filename for candidate {candidate_id}: {e}") from e

    return candidate

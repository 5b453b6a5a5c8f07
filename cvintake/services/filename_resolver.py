"""
Stored filename derivation and repair.

derive_filename() builds the CV_<name>.<ext> reference recorded at ingestion.

When a candidate's recorded file is missing from the upload directory,
resolve_candidate_file() scores every entry in the directory against the
candidate (name words, compact full name, email local part, tokens of the
old filename) and retargets the record to the best plausible match.

The repair is read-then-write without locking: two concurrent repairs of the
same candidate both write, and the last write wins.
"""

import enum
import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional
from sqlalchemy.orm import Session
from cvintake.core.errors import StoreFailure
from cvintake.core.storage import StorageBackend
from cvintake.crud import candidate as candidate_crud
from cvintake.schemas.candidate import NOT_AVAILABLE

logger = logging.getLogger(__name__)

GENERIC_CV_PATTERN = re.compile(r"cv\d*\.pdf")
IGNORED_ENTRIES = {"images"}

NAME_WORD_POINTS = 100
FULL_NAME_POINTS = 200
EMAIL_POINTS = 80
STORED_TOKEN_POINTS = 30
GENERIC_PENALTY = 50


class ResolutionStatus(str, enum.Enum):
    FOUND = "FOUND"          # Recorded file exists
    REPAIRED = "REPAIRED"    # Recorded file missing, a similar file was found
    NOT_FOUND = "NOT_FOUND"  # No CV available for this candidate


@dataclass
class FileResolution:
    status: ResolutionStatus
    filename: Optional[str] = None
    path: Optional[str] = None
    message: str = ""


def derive_filename(name: str, extension: str, original_filename: str) -> str:
    """
    Build the stored filename for a candidate.

    Examples:
        ("Marie Curie", ".txt", "upload_123.txt") -> "CV_marie_curie.txt"
        ("N/A", ".pdf", "upload_123.pdf") -> "upload_123.pdf"
    """
    if not name or name == NOT_AVAILABLE:
        return original_filename

    # Keep letters (diacritics included), digits, whitespace and hyphens
    slug = re.sub(r"[^\w\s-]|_", "", name.lower())
    slug = re.sub(r"\s+", "_", slug.strip())
    if not slug:
        return original_filename

    return f"CV_{slug}{extension.lower()}"


def _present(value: Optional[str]) -> str:
    return "" if not value or value == NOT_AVAILABLE else value.lower()


def _email_local_part(email: Optional[str]) -> str:
    return _present(email).split("@")[0]


def score_filename(
    filename: str,
    name: Optional[str],
    email: Optional[str],
    stored_filename: Optional[str]
) -> int:
    """
    Score how likely a directory entry is the candidate's CV.

    +100 per name word (longer than 2 chars) in the filename
    +200 if the full name without spaces is in the filename
    +80 if the email local part is in the filename
    +30 per token (longer than 2 chars) of the previously stored filename
    -50 for generic names like cv.pdf, cv2.pdf or anything containing "cv1"
    """
    file_lower = filename.lower()
    candidate_name = _present(name)
    email_local = _email_local_part(email)
    score = 0

    for word in candidate_name.split():
        if len(word) > 2 and word in file_lower:
            score += NAME_WORD_POINTS

    compact_name = re.sub(r"\s+", "", candidate_name)
    if compact_name and compact_name in file_lower:
        score += FULL_NAME_POINTS

    if email_local and email_local in file_lower:
        score += EMAIL_POINTS

    for part in re.split(r"[_\s]+", _present(stored_filename)):
        if len(part) > 2 and part in file_lower:
            score += STORED_TOKEN_POINTS

    if "cv1" in file_lower or GENERIC_CV_PATTERN.fullmatch(file_lower):
        score -= GENERIC_PENALTY

    logger.debug(f"[SCORE] {filename}: {score}")
    return score


def _has_signal(
    filename: str,
    name: Optional[str],
    email: Optional[str],
    stored_filename: Optional[str]
) -> bool:
    """Pre-filter: the entry shares at least one identifying fragment with the candidate."""
    file_lower = filename.lower()
    candidate_name = _present(name)
    email_local = _email_local_part(email)
    stored_prefix = _present(stored_filename).split("_")[0]
    compact_name = re.sub(r"\s+", "", candidate_name)

    return (
        any(len(word) > 2 and word in file_lower for word in candidate_name.split())
        or bool(compact_name and compact_name in file_lower)
        or bool(email_local and email_local in file_lower)
        or bool(len(stored_prefix) > 2 and stored_prefix in file_lower)
    )


def find_best_match(
    filenames: Iterable[str],
    name: Optional[str],
    email: Optional[str],
    stored_filename: Optional[str]
) -> Optional[str]:
    """
    Pick the directory entry most likely to be the candidate's CV.

    Ties keep directory listing order. Returns None when nothing shares a
    signal with the candidate or the best score is not positive.
    """
    possible: List[str] = [
        f for f in filenames
        if f not in IGNORED_ENTRIES and "." in f and _has_signal(f, name, email, stored_filename)
    ]
    if not possible:
        return None

    scored = sorted(
        ((score_filename(f, name, email, stored_filename), f) for f in possible),
        key=lambda pair: pair[0],
        reverse=True,
    )
    best_score, best = scored[0]
    if best_score <= 0:
        logger.info(f"[REPAIR] Best candidate {best} scored {best_score}, not accepted")
        return None
    return best


def resolve_candidate_file(db: Session, storage: StorageBackend, candidate_id: int) -> Optional[FileResolution]:
    """
    Locate a candidate's CV, repairing the stored reference if needed.

    Returns:
        None if the candidate does not exist, otherwise a FileResolution.
        On REPAIRED the candidate's cv_filename has been updated (best effort:
        a failed update is logged and the resolved file is still returned).
    """
    candidate = candidate_crud.get_by_id(db, candidate_id)
    if not candidate:
        return None

    if not candidate.cv_filename:
        logger.warning(f"[CV VIEW] No cv_filename for candidate {candidate_id}")
        return FileResolution(status=ResolutionStatus.NOT_FOUND, message="No CV available")

    if storage.exists(candidate.cv_filename):
        return FileResolution(
            status=ResolutionStatus.FOUND,
            filename=candidate.cv_filename,
            path=storage.path_for(candidate.cv_filename),
        )

    logger.warning(f"[CV VIEW] CV file missing for candidate {candidate_id}: {candidate.cv_filename}")

    try:
        files = storage.list_files()
    except OSError as e:
        logger.error(f"[CV VIEW] Unable to list upload directory: {e}")
        return FileResolution(status=ResolutionStatus.NOT_FOUND, message="CV not found on the server")

    match = find_best_match(files, candidate.name, candidate.email, candidate.cv_filename)
    if match is None:
        return FileResolution(
            status=ResolutionStatus.NOT_FOUND,
            filename=candidate.cv_filename,
            message=f"CV not found: {candidate.cv_filename}",
        )

    logger.info(f"[CV VIEW] Using alternative file for candidate {candidate_id}: {match}")
    try:
        candidate_crud.update_stored_filename(db, candidate_id, match)
    except StoreFailure as e:
        logger.warning(f"[CV VIEW] Unable to update cv_filename: {e}")

    return FileResolution(
        status=ResolutionStatus.REPAIRED,
        filename=match,
        path=storage.path_for(match),
        message="CV recovered under a corrected file name",
    )


def reconcile_all(db: Session, storage: StorageBackend) -> dict:
    """
    Run the resolver over every candidate that has a recorded CV file.

    Returns:
        dict: counts of found, repaired and missing references
    """
    summary = {"checked": 0, "found": 0, "repaired": 0, "missing": 0}

    for candidate in candidate_crud.get_with_cv_filename(db):
        resolution = resolve_candidate_file(db, storage, candidate.id)
        if resolution is None:
            # deleted since the listing
            continue
        summary["checked"] += 1
        if resolution.status == ResolutionStatus.FOUND:
            summary["found"] += 1
        elif resolution.status == ResolutionStatus.REPAIRED:
            summary["repaired"] += 1
        else:
            summary["missing"] += 1

    logger.info(
        f"[RECONCILE] {summary['checked']} checked: {summary['found']} found, "
        f"{summary['repaired']} repaired, {summary['missing']} missing"
    )
    return summary

"""
Keyword scan over stored candidates.

Ranks every candidate by the share of recruiter keywords found in its
extracted fields (name, email, phone, skills, languages).
"""

import logging
from typing import List
from sqlalchemy.orm import Session
from cvintake.crud import candidate as candidate_crud
from cvintake.schemas.candidate import KeywordMatch

logger = logging.getLogger(__name__)


def parse_keywords(raw: str) -> List[str]:
    """Split a comma-separated keyword string: "Python, react ," -> ["python", "react"]"""
    return [k.strip().lower() for k in (raw or "").split(",") if k.strip()]


def scan_candidates(db: Session, keywords: List[str]) -> List[KeywordMatch]:
    """
    Score every stored candidate against the keywords.

    Raises:
        ValueError: if no keyword is given
    """
    if not keywords:
        raise ValueError("At least one keyword is required")

    results = []
    for candidate in candidate_crud.get_all(db):
        content = " ".join(
            value or "" for value in (
                candidate.name, candidate.email, candidate.phone, candidate.skills, candidate.languages
            )
        ).lower()

        match_count = sum(1 for keyword in keywords if keyword in content)
        results.append(KeywordMatch(
            id=candidate.id,
            name=candidate.name,
            email=candidate.email,
            score=round(match_count / len(keywords) * 100),
            match_count=match_count,
            total_keywords=len(keywords),
            cv_filename=candidate.cv_filename,
        ))

    results.sort(key=lambda r: r.score, reverse=True)
    logger.info(f"[SCAN] Scanned {len(results)} candidates for {len(keywords)} keywords")
    return results

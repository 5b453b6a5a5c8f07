"""
Heuristic field extraction from resume text.

Every field is extracted independently; a field that cannot be found keeps
the NOT_AVAILABLE placeholder without affecting the others. Pure functions,
no I/O.
"""

import logging
import os
import re
from typing import Iterable, List, Optional
from cvintake.schemas.candidate import ExtractedFields, NOT_AVAILABLE
from cvintake.services.vocabulary import (
    LANGUAGE_GROUPS,
    PHONE_PATTERN_SETS,
    SKILL_KEYWORDS,
    PhonePatternSet,
)

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")

# Resume boilerplate that never appears in a name line
NAME_EXCLUDED_TERMS = (
    "cv", "curriculum", "vitae", "resume", "téléphone", "phone",
    "email", "mail", "adresse", "address", "http", "www",
)

# Letters of any script (diacritics included), whitespace, hyphens, apostrophes, periods
NAME_PATTERN = re.compile(r"^(?:[^\W\d_]|[\s\-'’.])+$")

STRICT_NAME_LINES = 15
PERMISSIVE_NAME_LINES = 20
MAX_NAME_LENGTH = 80


def _join(values: Iterable[str]) -> str:
    """Deduplicate preserving order, join for storage, placeholder if empty."""
    unique = list(dict.fromkeys(values))
    return ", ".join(unique) if unique else NOT_AVAILABLE


def extract_email(text: str) -> str:
    match = EMAIL_PATTERN.search(text)
    return match.group(0) if match else NOT_AVAILABLE


def extract_phone(text: str, pattern_sets: Optional[List[PhonePatternSet]] = None) -> str:
    """
    Find the first phone number, trying country pattern sets in priority order.

    The first set producing a normalizable match wins; later sets are not tried.
    """
    for pattern_set in pattern_sets if pattern_sets is not None else PHONE_PATTERN_SETS:
        for pattern in pattern_set.patterns:
            match = pattern.search(text)
            if not match:
                continue
            try:
                phone = pattern_set.normalize(match.group(0))
            except ValueError as e:
                logger.warning(f"[PHONE] Error normalizing phone: {e}")
                continue
            logger.info(f"[PHONE] Detected {pattern_set.label} ({pattern_set.code}) number: {phone}")
            return phone
    return NOT_AVAILABLE


def _non_blank_lines(text: str) -> List[str]:
    return [line.strip() for line in text.splitlines() if line.strip()]


def _is_strict_name(line: str) -> bool:
    lowered = line.lower()
    if (
        "@" in line
        or re.search(r"\d{6,}", line)
        or any(term in lowered for term in NAME_EXCLUDED_TERMS)
        or len(line) > MAX_NAME_LENGTH
    ):
        return False

    if not NAME_PATTERN.match(line):
        return False

    words = line.split()
    return len(words) >= 2 or (len(words) == 1 and len(words[0]) > 3)


def _is_permissive_name(line: str) -> bool:
    lowered = line.lower()
    return (
        3 <= len(line) <= 100
        and "@" not in line
        and not re.search(r"\d{4,}", line)
        and "http" not in lowered
        and "www" not in lowered
        and not re.fullmatch(r"[\d\s\W_]+", line)
    )


def name_from_filename(filename: str) -> str:
    """
    Guess a name from an uploaded file name, e.g. "CV_jean_dupont_2024.pdf" -> "jean dupont".
    """
    base = os.path.splitext(os.path.basename(filename))[0]
    base = re.sub(r"^cv_", "", base, flags=re.IGNORECASE)
    base = re.sub(r"\d+", "", base.replace("_", " "))
    cleaned = " ".join(base.split())
    return cleaned if len(cleaned) > 2 else NOT_AVAILABLE


def extract_name(text: str, fallback_filename: Optional[str] = None) -> str:
    """
    Find the candidate name near the top of the document.

    Pass 1 looks for a clean name-shaped line in the first 15 lines, pass 2
    accepts any plausible line in the first 20, and as a last resort the
    original upload's file name is used.
    """
    lines = _non_blank_lines(text)
    logger.debug(f"[NAME] Analyzing {len(lines)} lines for name extraction")

    for index, line in enumerate(lines[:STRICT_NAME_LINES]):
        if len(line) < 2:
            continue
        if _is_strict_name(line):
            logger.debug(f"[NAME] Found name at line {index}: {line!r}")
            return line

    logger.debug("[NAME] First pass failed, trying permissive approach")
    for index, line in enumerate(lines[:PERMISSIVE_NAME_LINES]):
        if _is_permissive_name(line):
            logger.debug(f"[NAME] Permissive match at line {index}: {line!r}")
            return line

    if fallback_filename:
        name = name_from_filename(fallback_filename)
        if name != NOT_AVAILABLE:
            logger.info(f"[NAME] Using filename-based name: {name!r}")
        return name

    return NOT_AVAILABLE


def _keyword_found(keyword: str, text: str, text_lower: str) -> bool:
    """Whole-word, case-insensitive test; substring test if the regex cannot be built."""
    try:
        pattern = re.compile(r"(?<!\w)" + re.escape(keyword) + r"(?!\w)", re.IGNORECASE)
    except re.error as e:
        logger.warning(f"[SKILLS] Regex error for skill {keyword!r}: {e}")
        return keyword.lower() in text_lower
    return pattern.search(text) is not None


def extract_skills(text: str, keywords: Iterable[str] = SKILL_KEYWORDS) -> str:
    text_lower = text.lower()
    found = [
        keyword for keyword in keywords
        # cheap substring check first, most keywords are absent
        if keyword.lower() in text_lower and _keyword_found(keyword, text, text_lower)
    ]
    return _join(found)


def extract_languages(text: str) -> str:
    return _join(group.name for group in LANGUAGE_GROUPS if group.pattern.search(text))


def extract_fields(text: str, fallback_filename: Optional[str] = None) -> ExtractedFields:
    """
    Run every heuristic pass over a resume's text.

    Args:
        text: Raw extracted text
        fallback_filename: Original upload name, used only when no name line is found

    Returns:
        ExtractedFields with NOT_AVAILABLE for anything not found
    """
    fields = ExtractedFields(
        name=extract_name(text, fallback_filename),
        email=extract_email(text),
        phone=extract_phone(text),
        skills=extract_skills(text),
        languages=extract_languages(text),
    )
    logger.info(f"[PARSE] Extracted name={fields.name!r} email={fields.email!r} phone={fields.phone!r}")
    return fields

"""
Resume text extraction.

Turns a stored file into raw text, dispatching on the declared extension:
- PDF: text layer via pdfplumber
- DOCX: raw text via docx2txt
- TXT and anything else: read as UTF-8

Undecodable bytes are replaced with U+FFFD rather than failing, so plain
text never aborts an ingestion on encoding alone. An unrecognized extension
whose content turns out to be binary (NUL bytes, e.g. a legacy .doc) is
rejected with UnsupportedFormat.

The source file is only read, never modified or removed.
"""

import logging
from cvintake.core.errors import CapabilityMissing, ExtractionFailure, UnsupportedFormat

try:
    import pdfplumber
except ImportError:  # pragma: no cover - reported per call as CapabilityMissing
    pdfplumber = None

try:
    import docx2txt
except ImportError:  # pragma: no cover - reported per call as CapabilityMissing
    docx2txt = None

logger = logging.getLogger(__name__)


def extract_pdf_text(file_path: str) -> str:
    """Extract the text layer of every page, one page per block."""
    if pdfplumber is None:
        raise CapabilityMissing(".pdf", "pdfplumber")

    extracted_text = ""
    try:
        with pdfplumber.open(file_path) as pdf:
            for page_num, page in enumerate(pdf.pages, 1):
                text = page.extract_text()
                if text:
                    extracted_text += text + "\n"
                    logger.debug(f"[PDF] Extracted {len(text)} chars from page {page_num}")
    except Exception as e:
        raise ExtractionFailure(f"Unable to read PDF {file_path}: {e}") from e

    logger.info(f"[PDF] Extracted {len(extracted_text)} chars")
    return extracted_text


def extract_docx_text(file_path: str) -> str:
    """Extract raw text from a Word (.docx) document."""
    if docx2txt is None:
        raise CapabilityMissing(".docx", "docx2txt")

    try:
        extracted_text = docx2txt.process(file_path)
    except Exception as e:
        raise ExtractionFailure(f"Unable to read Word document {file_path}: {e}") from e

    logger.info(f"[WORD] Extracted {len(extracted_text)} chars")
    return extracted_text


def read_plain_text(file_path: str) -> str:
    """Read a file as UTF-8, replacing undecodable bytes."""
    try:
        with open(file_path, "rb") as f:
            raw = f.read()
    except OSError as e:
        raise ExtractionFailure(f"Unable to read {file_path}: {e}") from e

    return raw.decode("utf-8", errors="replace")


def extract_text(file_path: str, extension: str) -> str:
    """
    Extract raw text from a resume file.

    Args:
        file_path: Path of the stored file
        extension: Declared extension, with or without the leading dot

    Returns:
        The extracted text (may be empty for an image-only PDF)

    Raises:
        CapabilityMissing: The PDF or DOCX backend is not installed
        ExtractionFailure: The backend failed on the file or it could not be read
        UnsupportedFormat: Unknown extension and the content is not text
    """
    file_ext = extension.lower()
    if file_ext and not file_ext.startswith("."):
        file_ext = f".{file_ext}"

    if file_ext == ".pdf":
        return extract_pdf_text(file_path)

    if file_ext == ".docx":
        return extract_docx_text(file_path)

    if file_ext == ".txt":
        return read_plain_text(file_path)

    logger.warning(f"[PARSE] Unrecognized file type ({file_ext or 'none'}), reading as UTF-8")
    text = read_plain_text(file_path)
    if "\x00" in text:
        raise UnsupportedFormat(
            f"Unsupported file format: {file_ext or 'none'}. Only PDF, DOCX and TXT files can be read."
        )
    return text

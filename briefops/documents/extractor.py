"""Plain-text extraction for the document formats BriefOps summarizes."""

import csv
import io
import logging
from pathlib import Path
from typing import Callable, Optional

import pypdf
from docx import Document

logger = logging.getLogger(__name__)

TRUNCATION_MARKER = "\n\n[Document truncated...]"

MIME_EXTENSIONS = {
    "application/pdf": ".pdf",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": ".docx",
    "text/csv": ".csv",
    "text/plain": ".txt",
    "text/markdown": ".md",
}


class ExtractionError(Exception):
    """A file could not be turned into text."""


def _join_blocks(blocks) -> str:
    return "\n\n".join(block.strip() for block in blocks if block and block.strip())


def extract_pdf(content: bytes) -> str:
    """Text of every page that has any, separated by blank lines."""
    try:
        reader = pypdf.PdfReader(io.BytesIO(content))
        return _join_blocks(page.extract_text() for page in reader.pages)
    except Exception as e:
        logger.warning("PDF extraction failed", extra={"error": str(e)})
        raise ExtractionError(f"Failed to extract PDF: {e}") from e


def extract_docx(content: bytes) -> str:
    try:
        doc = Document(io.BytesIO(content))
        return _join_blocks(p.text for p in doc.paragraphs)
    except Exception as e:
        logger.warning("DOCX extraction failed", extra={"error": str(e)})
        raise ExtractionError(f"Failed to extract DOCX: {e}") from e


def extract_text(content: bytes, encoding: str = "utf-8") -> str:
    """Decode a plain text file, retrying as latin-1 when ``encoding`` fails."""
    for candidate in (encoding, "latin-1"):
        try:
            return content.decode(candidate).strip()
        except UnicodeDecodeError:
            continue
    raise ExtractionError(f"Failed to decode text as {encoding} or latin-1")


def extract_csv(content: bytes) -> str:
    """One comma separated line per non-empty row."""
    try:
        rows = list(csv.reader(io.StringIO(extract_text(content))))
    except csv.Error as e:
        raise ExtractionError(f"Failed to parse CSV: {e}") from e
    return "\n".join(", ".join(cell.strip() for cell in row) for row in rows if any(row))


_EXTRACTORS: dict[str, Callable[[bytes], str]] = {
    ".pdf": extract_pdf,
    ".docx": extract_docx,
    ".csv": extract_csv,
    ".txt": extract_text,
    ".md": extract_text,
    ".markdown": extract_text,
}


def extract_from_file(content: bytes, filename: str, mimetype: Optional[str] = None) -> str:
    """Pick an extractor by MIME type, then by file extension.

    Raises:
        ExtractionError: Unsupported format, or the content is unreadable
    """
    ext = MIME_EXTENSIONS.get(mimetype or "") or Path(filename).suffix.lower()
    extractor = _EXTRACTORS.get(ext)
    if extractor is None:
        raise ExtractionError(f"Unsupported file type: {ext or mimetype or 'unknown'}")
    return extractor(content)


def normalize_for_llm(text: str, max_length: Optional[int] = None) -> str:
    """Collapse runs of whitespace and drop blank lines.

    When ``max_length`` is set, longer text is cut and ends with a marker.
    """
    lines = (" ".join(line.split()) for line in text.splitlines())
    normalized = "\n".join(line for line in lines if line)

    if max_length is not None and len(normalized) > max_length:
        normalized = normalized[: max_length - 50] + TRUNCATION_MARKER
    return normalized

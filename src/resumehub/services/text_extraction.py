import asyncio
import io
import logging
import re
from collections.abc import Callable
from pathlib import Path

import pdfplumber
from docx import Document

from resumehub.core.config import DOCX_CONTENT_TYPE, PDF_CONTENT_TYPE
from resumehub.core.exceptions import ExtractionError, UnsupportedMediaTypeError

logger = logging.getLogger(__name__)

DocumentSource = Path | bytes

_MANY_NEWLINES = re.compile(r"\n{3,}")
_HORIZONTAL_WHITESPACE_RUN = re.compile(r"[^\S\n]{2,}")


def _open(source: DocumentSource) -> Path | io.BytesIO:
    return io.BytesIO(source) if isinstance(source, bytes) else source


def extract_text_from_pdf(source: DocumentSource) -> str:
    try:
        with pdfplumber.open(_open(source)) as pdf:
            pages = [page.extract_text() or "" for page in pdf.pages]
            return "\n\n".join(pages)
    except Exception as e:
        raise ExtractionError(f"PDF extraction failed: {e}") from e


def extract_text_from_docx(source: DocumentSource) -> str:
    try:
        doc = Document(io.BytesIO(source) if isinstance(source, bytes) else str(source))
        return "\n\n".join(para.text for para in doc.paragraphs if para.text.strip())
    except Exception as e:
        raise ExtractionError(f"DOCX extraction failed: {e}") from e


EXTRACTORS: dict[str, Callable[[DocumentSource], str]] = {
    PDF_CONTENT_TYPE: extract_text_from_pdf,
    DOCX_CONTENT_TYPE: extract_text_from_docx,
}


def clean_extracted_text(text: str | None) -> str:
    """Normalize line endings and whitespace in extracted text.

    CRLF and CR become LF, three or more newlines collapse to a blank line,
    runs of spaces/tabs collapse to one space, and the result is stripped.
    Applying it twice gives the same result as applying it once.
    """
    if not text:
        return ""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _MANY_NEWLINES.sub("\n\n", text)
    text = _HORIZONTAL_WHITESPACE_RUN.sub(" ", text)
    return text.strip()


def ensure_supported(content_type: str) -> None:
    if content_type not in EXTRACTORS:
        raise UnsupportedMediaTypeError(f"Unsupported file type: {content_type}")


def extract_text(source: DocumentSource, content_type: str) -> str:
    ensure_supported(content_type)
    raw = EXTRACTORS[content_type](source)
    text = clean_extracted_text(raw)
    logger.debug("Extracted %d characters from %s document", len(text), content_type)
    return text


async def extract_text_async(source: DocumentSource, content_type: str) -> str:
    return await asyncio.to_thread(extract_text, source, content_type)

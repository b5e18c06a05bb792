"""
extraction_service.py — Document text extraction
PDF via pypdf, DOCX via mammoth (HTML with images inlined as data URIs),
plain text as UTF-8.
"""

import base64
import html
import logging
import os
import re

import mammoth
from pypdf import PdfReader

from errors import UnsupportedFormat, ExtractionError
from models.note import TITLE_MAX_LENGTH

logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
TEXT_MIME = "text/plain"

SUPPORTED_MIME_TYPES = {
    PDF_MIME: "PDF",
    DOCX_MIME: "DOCX",
    TEXT_MIME: "Text",
}

_MARKUP = re.compile(r"<[^>]*>")
_WHITESPACE = re.compile(r"\s+")


def base_mime_type(mime_type: str | None) -> str:
    """'text/plain; charset=utf-8' → 'text/plain'."""
    return (mime_type or "").split(";", 1)[0].strip().lower()


def is_supported(mime_type: str | None) -> bool:
    return base_mime_type(mime_type) in SUPPORTED_MIME_TYPES


def title_from_filename(filename: str) -> str:
    name = os.path.basename(filename or "")
    stem, _ = os.path.splitext(name)
    return (stem or name)[:TITLE_MAX_LENGTH]


def extract_pdf(path: str) -> str:
    reader = PdfReader(path)
    return "\n".join(page.extract_text() or "" for page in reader.pages)


def _inline_image(image) -> dict:
    with image.open() as image_bytes:
        encoded = base64.b64encode(image_bytes.read()).decode("ascii")
    return {"src": f"data:{image.content_type};base64,{encoded}"}


def extract_docx(path: str) -> str:
    with open(path, "rb") as docx_file:
        result = mammoth.convert_to_html(docx_file, convert_image=mammoth.images.img_element(_inline_image))
    if result.messages:
        logger.info("Mammoth conversion warnings: %s", [m.message for m in result.messages])
    return result.value


def extract_plain_text(path: str) -> str:
    with open(path, "rb") as text_file:
        return text_file.read().decode("utf-8", errors="replace")


_EXTRACTORS = {
    PDF_MIME: extract_pdf,
    DOCX_MIME: extract_docx,
    TEXT_MIME: extract_plain_text,
}


def extract_text(path: str, mime_type: str | None) -> str:
    """Extract the document's text (HTML for DOCX) by declared MIME type."""
    mime = base_mime_type(mime_type)
    extractor = _EXTRACTORS.get(mime)
    if extractor is None:
        raise UnsupportedFormat("Unsupported file format. Please upload PDF, DOCX or text files.")

    file_type = SUPPORTED_MIME_TYPES[mime]
    try:
        text = extractor(path)
    except Exception as e:
        logger.error("Error extracting content from %s: %s", file_type, e)
        raise ExtractionError(f"Failed to extract text from {file_type}: {e}") from e

    logger.info("Extracted %d characters from %s file", len(text), file_type)
    return text


def analysis_text(content: str, mime_type: str | None) -> str:
    """Readable text of extracted content, for tagging and the model.

    DOCX content is HTML; its markup (and with it the inline image data
    URIs) is dropped and entities decoded. Other types pass through.
    """
    if base_mime_type(mime_type) != DOCX_MIME:
        return content
    text = html.unescape(_MARKUP.sub(" ", content))
    return _WHITESPACE.sub(" ", text).strip()

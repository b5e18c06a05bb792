"""
ingestion_service.py — Upload pipeline
extract → tag → summarize → store, one stage after another.
"""

import logging

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from errors import ExtractionError
from models.note import Note
from services.ai_service import AIService
from services.extraction_service import (
    extract_text, analysis_text, title_from_filename, base_mime_type, SUPPORTED_MIME_TYPES,
)
from services.note_service import NoteService
from services.tagging_service import generate_tags

logger = logging.getLogger(__name__)


async def ingest_file(db: Session, user_id: int, path: str, filename: str,
                      mime_type: str, ai_service: AIService) -> tuple[Note, str]:
    """Turn an uploaded file into a note. Returns (note, file type label)."""
    # Parsers are blocking; keep them off the event loop
    content = await run_in_threadpool(extract_text, path, mime_type)
    file_type = SUPPORTED_MIME_TYPES[base_mime_type(mime_type)]
    if not content.strip():
        raise ExtractionError(f"No text could be extracted from the {file_type} file")

    # Tags and summary come from the readable text; the note keeps the full content
    text = analysis_text(content, mime_type)
    tags = generate_tags(text)
    summary = await ai_service.generate_summary(text)

    note = NoteService.create(db, user_id, {
        "title": title_from_filename(filename),
        "content": content,
        "summary": summary,
        "tags": tags,
    })
    logger.info("Created note %s from %s upload with tags %s", note.id, file_type, tags)
    return note, file_type

import logging
import os
import time

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session
from typing import Optional

from auth import get_current_user
from config import UPLOAD_DIR
from database import get_db
from errors import UnsupportedFormat, ValidationError
from services.ai_service import AIService, get_ai_service
from services.extraction_service import is_supported
from services.ingestion_service import ingest_file
from services.note_service import serialize_note

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Upload"])

CHUNK_SIZE = 1024 * 1024


def _upload_path(filename: str) -> str:
    os.makedirs(UPLOAD_DIR, exist_ok=True)
    safe_name = os.path.basename(filename or "upload")
    return os.path.join(UPLOAD_DIR, f"{int(time.time() * 1000)}-{safe_name}")


async def _save_upload(file: UploadFile, path: str):
    with open(path, "wb") as out:
        while chunk := await file.read(CHUNK_SIZE):
            out.write(chunk)


@router.post("/upload", status_code=201)
async def upload_file(
    file: Optional[UploadFile] = File(None),
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
    ai_service: AIService = Depends(get_ai_service),
):
    """Create a note from an uploaded PDF, DOCX or text file."""
    if file is None or not file.filename:
        raise ValidationError("No file uploaded")
    # Reject before anything touches the disk
    if not is_supported(file.content_type):
        raise UnsupportedFormat("Unsupported file format. Please upload PDF, DOCX or text files.")

    path = _upload_path(file.filename)
    try:
        # Inside the try so a partial write is removed too
        await _save_upload(file, path)
        note, file_type = await ingest_file(db, user_id, path, file.filename, file.content_type, ai_service)
    finally:
        if os.path.exists(path):
            os.remove(path)
        await file.close()

    return {"message": f"Successfully processed {file_type} file", "note": serialize_note(note)}

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional

from auth import get_current_user
from database import get_db
from services.note_service import NoteService, serialize_note

router = APIRouter(prefix="/api", tags=["Search"])


@router.get("/tags")
async def list_tags(user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    """Tags on the caller's notes with usage counts, most used first."""
    return NoteService.list_tags(db, user_id)


@router.get("/search")
async def search_notes(
    q: Optional[str] = None,
    tags: Optional[str] = None,
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Full-text-ish search; ?tags=a,b only matches notes carrying every listed tag."""
    tag_list = [t.strip() for t in (tags or "").split(",") if t.strip()]
    notes = NoteService.search(db, user_id, q, tag_list)
    return [serialize_note(n) for n in notes]

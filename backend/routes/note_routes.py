from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session
from typing import Any, Optional, List

from auth import get_current_user
from database import get_db
from errors import NotFound, ValidationError
from services.ai_service import AIService, get_ai_service, is_content_sufficient
from services.note_service import NoteService, serialize_note, format_deck
from services.tagging_service import generate_tags

router = APIRouter(prefix="/api/notes", tags=["Notes"])


class NoteWrite(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    summary: Optional[str] = None
    tags: Optional[List[str]] = None
    # [{question, answer}], [{fields: {Front, Back}}] or {"notes": [...]}
    flashcards: Optional[Any] = None


async def _with_defaults(body: NoteWrite, ai_service: AIService) -> dict:
    """Fill in the summary and tags the client left out."""
    if not (body.title or "").strip() or not body.content:
        raise ValidationError("Title and content are required")

    data = {"title": body.title, "content": body.content}
    data["summary"] = body.summary or await ai_service.generate_summary(body.content)
    data["tags"] = body.tags if body.tags is not None else generate_tags(body.content)
    if body.flashcards is not None:
        data["flashcards"] = body.flashcards
    return data


@router.get("")
async def list_notes(user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    return [serialize_note(n) for n in NoteService.get_all(db, user_id)]


@router.post("", status_code=201)
async def create_note(
    body: NoteWrite,
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
    ai_service: AIService = Depends(get_ai_service),
):
    data = await _with_defaults(body, ai_service)
    note = NoteService.create(db, user_id, data)
    return serialize_note(note)


@router.get("/{note_id}")
async def get_note(note_id: int, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    return serialize_note(NoteService.get(db, user_id, note_id))


@router.put("/{note_id}")
async def update_note(
    note_id: int,
    body: NoteWrite,
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
    ai_service: AIService = Depends(get_ai_service),
):
    # Verify ownership before spending a model call on the summary
    NoteService.get(db, user_id, note_id)
    data = await _with_defaults(body, ai_service)
    note = NoteService.update(db, user_id, note_id, data)
    return serialize_note(note)


@router.delete("/{note_id}")
async def delete_note(note_id: int, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    NoteService.delete(db, user_id, note_id)
    return {"message": "Note deleted successfully"}


# ── Flashcards ────────────────────────────────────────────────────
def _stored_deck(db: Session, user_id: int, note_id: int) -> dict:
    note = NoteService.get(db, user_id, note_id)
    if not note.flashcards:
        raise NotFound("No flashcards found for this note")
    return format_deck([(c.question, c.answer) for c in note.flashcards], [t.name for t in note.tags])


@router.get("/{note_id}/flashcards")
async def get_flashcards(note_id: int, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    """Stored flashcards only; never triggers generation."""
    return _stored_deck(db, user_id, note_id)


@router.get("/{note_id}/flashcards/{card_index}")
async def get_flashcard(
    note_id: int,
    card_index: int,
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """One card for the study view; out-of-range indexes get the whole deck."""
    deck = _stored_deck(db, user_id, note_id)
    cards = deck["notes"]
    if 0 <= card_index < len(cards):
        return {"card": cards[card_index], "total": len(cards), "currentIndex": card_index}
    return deck


@router.post("/{note_id}/flashcards/generate")
async def generate_flashcards(
    note_id: int,
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
    ai_service: AIService = Depends(get_ai_service),
):
    note = NoteService.get(db, user_id, note_id)
    if not is_content_sufficient(note.content):
        raise ValidationError("Failed to generate flashcards. Please ensure your note has enough content.")

    deck = await ai_service.generate_flashcards(
        note.content, note.title, [t.name for t in note.tags], force=True,
    )
    NoteService.replace_flashcards(db, user_id, note_id, deck)
    return deck


@router.post("/{note_id}/regenerate-summary")
async def regenerate_summary(
    note_id: int,
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
    ai_service: AIService = Depends(get_ai_service),
):
    note = NoteService.get(db, user_id, note_id)
    if not is_content_sufficient(note.content):
        raise ValidationError("Failed to regenerate summary. Please ensure your note has enough content.")

    summary = await ai_service.generate_summary(note.content)
    note = NoteService.update(db, user_id, note_id, {"summary": summary})
    return {"message": "Summary regenerated successfully", "note": serialize_note(note)}

"""
note_service.py — Notes, tags and flashcards
CRUD over the notes schema with get-or-create tags, destructive tag and
flashcard replacement, and tag-aware search. Every query is scoped to the
owning user; a note owned by someone else is indistinguishable from a
missing one.
"""

import logging
from datetime import timedelta

from sqlalchemy import or_, func, desc
from sqlalchemy.orm import Session

from database import utcnow
from errors import ValidationError, NotFound
from models.note import Note, TITLE_MAX_LENGTH
from models.tag import Tag, note_tags
from models.flashcard import Flashcard

logger = logging.getLogger(__name__)

_NOTE_FIELDS = ("title", "content", "summary")


# ── Helpers ───────────────────────────────────────────────────────
def clean_tag_names(tags) -> list[str]:
    """Strip, drop blanks and de-duplicate while keeping order."""
    names = []
    for tag in tags or []:
        name = str(tag).strip()
        if name and name not in names:
            names.append(name)
    return names


def normalize_flashcards(payload) -> list[tuple[str, str]]:
    """Flatten either flashcard shape into (question, answer) pairs.

    Accepts a list of {question, answer} dicts, a list of
    {fields: {Front, Back}} dicts, or the deck shape {"notes": [...]}.
    Items missing either side are skipped.
    """
    if isinstance(payload, dict):
        payload = payload.get("notes") or []
    if not isinstance(payload, list):
        return []

    pairs = []
    for card in payload:
        if not isinstance(card, dict):
            logger.warning("Skipping invalid flashcard: %r", card)
            continue
        question, answer = card.get("question"), card.get("answer")
        if not (question and answer) and isinstance(card.get("fields"), dict):
            question, answer = card["fields"].get("Front"), card["fields"].get("Back")
        if question and answer:
            pairs.append((str(question), str(answer)))
        else:
            logger.warning("Skipping invalid flashcard format: %r", card)
    return pairs


def format_deck(pairs, tags=None) -> dict:
    """Deck shape consumed by the frontend flashcard viewer."""
    return {
        "notes": [
            {"fields": {"Front": question, "Back": answer}, "tags": list(tags or [])}
            for question, answer in pairs
        ]
    }


def serialize_note(note: Note) -> dict:
    return {
        "id": note.id,
        "title": note.title,
        "content": note.content,
        "summary": note.summary,
        "user_id": note.user_id,
        "created_at": note.created_at.isoformat() if note.created_at else None,
        "updated_at": note.updated_at.isoformat() if note.updated_at else None,
        "tags": [t.name for t in note.tags],
    }


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _check_title_length(title: str):
    if len(title) > TITLE_MAX_LENGTH:
        raise ValidationError(f"Title must be at most {TITLE_MAX_LENGTH} characters")


def _touch(note: Note):
    """Move updated_at forward, even when the clock has not."""
    now = utcnow()
    if note.updated_at is not None and now <= note.updated_at:
        now = note.updated_at + timedelta(microseconds=1)
    note.updated_at = now


class NoteService:
    @staticmethod
    def get_or_create_tag(db: Session, name: str) -> Tag:
        tag = db.query(Tag).filter(Tag.name == name).first()
        if tag is None:
            tag = Tag(name=name)
            db.add(tag)
            db.flush()
        return tag

    @staticmethod
    def _set_tags(db: Session, note: Note, tags):
        note.tags = [NoteService.get_or_create_tag(db, name) for name in clean_tag_names(tags)]

    @staticmethod
    def _set_flashcards(db: Session, note: Note, flashcards):
        pairs = normalize_flashcards(flashcards)
        note.flashcards = [Flashcard(question=q, answer=a) for q, a in pairs]
        if pairs:
            logger.info("Stored %d flashcards on note %s", len(pairs), note.id)

    # ------------------------------------------------------------------
    @staticmethod
    def create(db: Session, user_id: int, data: dict) -> Note:
        """Create a note with its tags and flashcards in one transaction."""
        title = (data.get("title") or "").strip()
        content = data.get("content") or ""
        if not title or not content:
            raise ValidationError("Title and content are required")
        _check_title_length(title)

        now = utcnow()
        note = Note(
            user_id=user_id,
            title=title,
            content=content,
            summary=data.get("summary"),
            created_at=now,
            updated_at=now,
        )
        try:
            db.add(note)
            db.flush()
            NoteService._set_tags(db, note, data.get("tags"))
            if data.get("flashcards"):
                NoteService._set_flashcards(db, note, data["flashcards"])
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(note)
        return note

    @staticmethod
    def get(db: Session, user_id: int, note_id: int) -> Note:
        note = db.query(Note).filter_by(id=note_id, user_id=user_id).first()
        if note is None:
            raise NotFound("Note not found")
        return note

    @staticmethod
    def get_all(db: Session, user_id: int) -> list[Note]:
        return (
            db.query(Note)
            .filter(Note.user_id == user_id)
            .order_by(desc(Note.updated_at), desc(Note.id))
            .all()
        )

    @staticmethod
    def update(db: Session, user_id: int, note_id: int, data: dict) -> Note:
        """Update the given fields. Tags and flashcards, when present, replace the old set."""
        note = NoteService.get(db, user_id, note_id)

        if "title" in data and not (data["title"] or "").strip():
            raise ValidationError("Title cannot be empty")
        if "title" in data:
            _check_title_length(data["title"].strip())
        if "content" in data and not data["content"]:
            raise ValidationError("Content cannot be empty")

        try:
            for field in _NOTE_FIELDS:
                if field in data:
                    value = data[field]
                    setattr(note, field, value.strip() if field == "title" else value)
            if data.get("tags") is not None:
                NoteService._set_tags(db, note, data["tags"])
            if data.get("flashcards") is not None:
                NoteService._set_flashcards(db, note, data["flashcards"])
            _touch(note)
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(note)
        return note

    @staticmethod
    def delete(db: Session, user_id: int, note_id: int):
        note = NoteService.get(db, user_id, note_id)
        db.delete(note)
        db.commit()
        logger.info("Deleted note %s", note_id)

    @staticmethod
    def search(db: Session, user_id: int, term: str | None = None, tags=None) -> list[Note]:
        """Substring search over title/content/summary/tag names.

        Every tag in ``tags`` must be on the note (AND, not OR).
        """
        query = db.query(Note).filter(Note.user_id == user_id)

        term = (term or "").strip()
        if term:
            pattern = f"%{_escape_like(term.lower())}%"
            query = query.filter(or_(
                func.lower(Note.title).like(pattern, escape="\\"),
                func.lower(Note.content).like(pattern, escape="\\"),
                func.lower(func.coalesce(Note.summary, "")).like(pattern, escape="\\"),
                Note.tags.any(func.lower(Tag.name).like(pattern, escape="\\")),
            ))

        for name in clean_tag_names(tags):
            query = query.filter(Note.tags.any(Tag.name == name))

        return query.order_by(desc(Note.updated_at), desc(Note.id)).all()

    @staticmethod
    def list_tags(db: Session, user_id: int) -> list[dict]:
        """Tag names with usage counts over the caller's notes, most used first."""
        count = func.count(note_tags.c.note_id).label("count")
        rows = (
            db.query(Tag.name, count)
            .join(note_tags, note_tags.c.tag_id == Tag.id)
            .join(Note, Note.id == note_tags.c.note_id)
            .filter(Note.user_id == user_id)
            .group_by(Tag.id, Tag.name)
            .order_by(desc(count), Tag.name)
            .all()
        )
        return [{"name": name, "count": n} for name, n in rows]

    @staticmethod
    def get_flashcards(db: Session, user_id: int, note_id: int) -> list[Flashcard]:
        note = NoteService.get(db, user_id, note_id)
        return list(note.flashcards)

    @staticmethod
    def replace_flashcards(db: Session, user_id: int, note_id: int, flashcards) -> Note:
        return NoteService.update(db, user_id, note_id, {"flashcards": flashcards})

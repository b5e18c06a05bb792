# Import all models so they register with SQLAlchemy Base.metadata
# This ensures Base.metadata.create_all() creates all tables

from models.user import User
from models.tag import Tag, note_tags
from models.note import Note
from models.flashcard import Flashcard

__all__ = [
    "User",
    "Tag",
    "note_tags",
    "Note",
    "Flashcard",
]

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from database import Base, utcnow
from models.tag import note_tags

TITLE_MAX_LENGTH = 500


class Note(Base):
    __tablename__ = "notes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(TITLE_MAX_LENGTH), nullable=False)
    content = Column(Text, nullable=False)  # HTML for DOCX uploads, plain text otherwise
    summary = Column(Text, nullable=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, index=True)

    owner = relationship("User", back_populates="notes")
    tags = relationship("Tag", secondary=note_tags, back_populates="notes", passive_deletes=True)
    flashcards = relationship(
        "Flashcard",
        back_populates="note",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Flashcard.id",
    )

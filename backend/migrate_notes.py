"""Import legacy JSON notes into the database.

Each ``*.json`` file in the import directory holds one note:
``{title, content, summary, tags, flashcards}``. Files that fail to parse or
validate are logged and skipped.

Usage:
  python migrate_notes.py --email someone@notenova.io
  python migrate_notes.py --email someone@notenova.io --dir ./old-notes --yes
"""

import argparse
import json
import logging
import os
import sys

from sqlalchemy.orm import Session

from config import NOTES_IMPORT_DIR
from database import SessionLocal, init_db
from errors import NoteNovaError
from models.user import User
from services.auth_service import normalize_email
from services.note_service import NoteService

logger = logging.getLogger(__name__)


def load_note_file(path: str) -> dict:
    with open(path, encoding="utf-8") as f:
        note = json.load(f)
    if not isinstance(note, dict):
        raise ValueError("note file must contain a JSON object")
    return {
        "title": note.get("title"),
        "content": note.get("content") or "",
        "summary": note.get("summary") or "",
        "tags": note.get("tags") or [],
        "flashcards": note.get("flashcards") or [],
    }


def migrate_notes(db: Session, user_id: int, directory: str) -> tuple[int, int]:
    """Import every JSON note in ``directory``. Returns (migrated, failed)."""
    if not os.path.isdir(directory):
        logger.info("No notes directory found at %s, skipping migration", directory)
        return 0, 0

    migrated = failed = 0
    for filename in sorted(os.listdir(directory)):
        if not filename.endswith(".json"):
            continue
        path = os.path.join(directory, filename)
        try:
            note = NoteService.create(db, user_id, load_note_file(path))
        except (OSError, ValueError, NoteNovaError) as e:
            logger.error("Error migrating note file %s: %s", filename, e)
            failed += 1
            continue
        logger.info("Migrated note: %s", note.title)
        migrated += 1

    return migrated, failed


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Import legacy JSON notes for one user.")
    parser.add_argument("--email", required=True, help="Owner of the imported notes")
    parser.add_argument("--dir", default=NOTES_IMPORT_DIR, help="Directory of *.json note files")
    parser.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    init_db()

    db = SessionLocal()
    try:
        user = db.query(User).filter(User.email == normalize_email(args.email)).first()
        if user is None:
            print(f"No user registered with email {args.email}")
            return 1

        if not args.yes:
            answer = input(f"Migrate notes from {args.dir} to user {user.username} (id {user.id})? (yes/no) ")
            if answer.strip().lower() not in ("y", "yes"):
                print("Migration aborted.")
                return 0

        migrated, failed = migrate_notes(db, user.id, args.dir)
        print("Migration completed:")
        print(f"- Successfully migrated: {migrated} notes")
        print(f"- Failed to migrate: {failed} notes")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())

"""Reset a NoteNova installation: every user, note and stored file is removed.

Usage:
  python cleanup.py          # asks for confirmation
  python cleanup.py --yes
"""

import argparse
import logging
import os
import shutil
import sys

from sqlalchemy.orm import Session

from config import UPLOAD_DIR, NOTES_IMPORT_DIR
from database import SessionLocal, init_db
from models import User, Note, Tag, Flashcard, note_tags

logger = logging.getLogger(__name__)


def clear_database(db: Session) -> dict:
    """Delete all rows, child tables first, in one transaction. Returns per-table counts."""
    counts = {}
    try:
        counts["flashcards"] = db.query(Flashcard).delete(synchronize_session=False)
        counts["note_tags"] = db.execute(note_tags.delete()).rowcount
        counts["tags"] = db.query(Tag).delete(synchronize_session=False)
        counts["notes"] = db.query(Note).delete(synchronize_session=False)
        counts["users"] = db.query(User).delete(synchronize_session=False)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return counts


def clear_directory(path: str) -> int:
    """Remove everything inside ``path`` (the directory itself stays). Returns entries removed."""
    if not os.path.isdir(path):
        return 0
    removed = 0
    for name in os.listdir(path):
        entry = os.path.join(path, name)
        if os.path.isdir(entry) and not os.path.islink(entry):
            shutil.rmtree(entry)
        else:
            os.remove(entry)
        removed += 1
    return removed


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Delete all NoteNova users, notes and files.")
    parser.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    print("=== NOTENOVA CLEANUP UTILITY ===")
    if not args.yes:
        answer = input("This deletes all users, notes and files. Continue? (yes/no) ")
        if answer.strip().lower() not in ("y", "yes"):
            print("Cleanup aborted.")
            return 0

    print("\n[STEP 1] Clearing files...")
    for directory in (UPLOAD_DIR, NOTES_IMPORT_DIR):
        print(f"- {directory}: {clear_directory(directory)} entries removed")

    print("\n[STEP 2] Clearing database...")
    init_db()
    db = SessionLocal()
    try:
        counts = clear_database(db)
    finally:
        db.close()
    for table, count in counts.items():
        print(f"- {table}: {count} rows deleted")

    print("\n=== CLEANUP COMPLETE ===")
    return 0


if __name__ == "__main__":
    sys.exit(main())

import os
import logging
from datetime import datetime, timezone

from sqlalchemy import create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, declarative_base

from config import DATABASE_URL

logger = logging.getLogger(__name__)

Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp; both backends store timestamps without a zone."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class StorageBackend:
    """Engine options and connection setup for one database driver."""

    name = "base"

    def __init__(self, url: str):
        self.url = url

    def engine_args(self) -> dict:
        return {}

    def prepare(self):
        """Hook run once before the engine is created."""

    def configure(self, engine):
        """Hook run once after the engine is created."""


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


class SQLiteBackend(StorageBackend):
    name = "sqlite"

    def engine_args(self) -> dict:
        return {"connect_args": {"check_same_thread": False}}

    def prepare(self):
        # Create the data/ directory for file databases
        path = make_url(self.url).database
        if path and path != ":memory:":
            directory = os.path.dirname(os.path.abspath(path))
            os.makedirs(directory, exist_ok=True)

    def configure(self, engine):
        # Per-connection setup: SQLite ignores ON DELETE CASCADE unless foreign keys are switched on
        @event.listens_for(engine, "connect")
        def _on_connect(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()
            # Built-in lower() only folds ASCII; match PostgreSQL for non-ASCII titles
            dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)


class PostgresBackend(StorageBackend):
    name = "postgres"

    def engine_args(self) -> dict:
        # Production settings for PostgreSQL
        return {
            "pool_size": 5,
            "max_overflow": 10,
            "pool_timeout": 30,
            "pool_recycle": 1800,
            "pool_pre_ping": True,
        }


_BACKENDS = {
    "sqlite": SQLiteBackend,
    "postgresql": PostgresBackend,
}


def get_backend(url: str) -> StorageBackend:
    """Pick the storage backend for a database URL by its scheme."""
    scheme = make_url(url).get_backend_name()
    backend_class = _BACKENDS.get(scheme)
    if backend_class is None:
        raise ValueError(f"Unsupported database backend: {scheme}")
    return backend_class(url)


def build_engine(url: str = DATABASE_URL):
    backend = get_backend(url)
    backend.prepare()
    engine = create_engine(url, **backend.engine_args(), echo=False)
    backend.configure(engine)
    logger.info("Using %s storage backend", backend.name)
    return engine


engine = build_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """FastAPI dependency — yields a database session and closes it after use."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """Create all tables on the given engine (the application engine by default)."""
    # Import all models so they register with Base.metadata
    import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database initialized successfully.")

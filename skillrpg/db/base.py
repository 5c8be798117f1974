import logging
import os
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

logger = logging.getLogger(__name__)

# Absolute path to project root
BASE_DIR = Path(__file__).resolve().parent.parent.parent


def _build_database_url() -> str:
    """
    Determine the database URL for the profile store.

    - Prefer DATABASE_URL from the environment.
    - Fallback to a local SQLite file.
    - Normalize legacy postgres:// URLs to SQLAlchemy's postgresql+psycopg2://.
    """
    url = os.getenv("DATABASE_URL", "sqlite:///./skillrpg.db").strip()

    if url.startswith("postgres://"):
        # SQLAlchemy 2.x expects a driver-qualified URL
        url = url.replace("postgres://", "postgresql+psycopg2://", 1)

    return url


def build_engine(url: str):
    connect_args = {}
    if url.startswith("sqlite"):
        connect_args = {"check_same_thread": False}
    return create_engine(url, connect_args=connect_args, future=True)


DATABASE_URL = _build_database_url()

engine = build_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def log_database_info() -> None:
    """Log which backend the store is using; never raises."""
    try:
        url_safe = engine.url.render_as_string(hide_password=True)
        backend = engine.url.get_backend_name()
        logger.info("[DB] Using database backend=%s url=%s", backend, url_safe)

        if backend == "sqlite" and engine.url.database:
            db_path = Path(engine.url.database).resolve()
            exists = db_path.exists()
            size = db_path.stat().st_size if exists else 0
            logger.info("[DB] SQLite path=%s exists=%s size_bytes=%s", db_path, exists, size)
    except Exception as exc:
        logger.warning("[DB] Failed to log DB diagnostics: %r", exc)

from contextlib import contextmanager

from skillrpg.db.base import Base, SessionLocal, engine


def init_db(bind=None) -> None:
    """Create the store tables (scripts and tests; in production prefer Alembic)."""
    # Import so create_all picks the models up
    from skillrpg.storage import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


@contextmanager
def session_scope(factory=SessionLocal):
    """Yield a session and always close it; roll back if the block raised."""
    db = factory()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

import os

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Keep the module-level engine off the developer's real database file.
os.environ.setdefault("DATABASE_URL", "sqlite://")

from skillrpg.db.session import init_db  # noqa: E402
from skillrpg.tasks.models import Assignee, AssigneeSkill, TaskStatus, WorkItem  # noqa: E402

DAY_MS = 86_400_000
NOW = 1_760_000_000_000


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


def make_task(
    title="Night recon patrol",
    fighter_id="f1",
    skill_id="s1",
    difficulty=3,
    status=TaskStatus.DONE,
    created_at=NOW - DAY_MS,
    submitted_at=None,
    approved_at=None,
    task_id=None,
):
    return WorkItem(
        id=task_id or f"task_{title}_{created_at}",
        title=title,
        difficulty=difficulty,
        status=status,
        created_at=created_at,
        submitted_at=submitted_at,
        approved_at=approved_at,
        assignees=[Assignee(fighter_id=fighter_id, skills=[AssigneeSkill(skill_id, "c1", 15)])],
    )

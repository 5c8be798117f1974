"""
Profile-scoped key-value store over SQLAlchemy.

Values are whole JSON blobs: get/set/remove replace the entire value for a
key. Reads never raise; a missing, undecodable or badly shaped value yields
the caller's default.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Callable, Optional, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from skillrpg.core import config
from skillrpg.storage.models import Profile, ProfileBlob

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Logical keys
TREE_KEY = "tree"
FIGHTERS_KEY = "fighters"
XP_KEY = "xp"
SKILL_LEVELS_KEY = "fighter_skill_levels"
FIGHTER_SKILLS_KEY = "fighter_skills"
TASKS_KEY = "tasks_v2"


class ProfileStore:
    def __init__(self, db: Session, profile: str = config.DEFAULT_PROFILE):
        self.db = db
        self.profile = profile

    def _row(self, key: str) -> Optional[ProfileBlob]:
        return self.db.query(ProfileBlob).filter(
            ProfileBlob.profile == self.profile,
            ProfileBlob.key == key,
        ).first()

    def get(self, key: str, default: T, parser: Optional[Callable[[Any], T]] = None) -> T:
        """Load *key*; *parser* validates/converts the decoded JSON before it is trusted."""
        try:
            row = self._row(key)
            if row is None:
                return default
            data = json.loads(row.value)
            return parser(data) if parser else data
        except (SQLAlchemyError, ValueError, KeyError, TypeError, ArithmeticError) as exc:
            logger.error("[STORE] Failed to load profile=%s key=%s: %r", self.profile, key, exc)
            return default

    def set(self, key: str, value: Any) -> bool:
        try:
            serialized = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            logger.error("[STORE] Value for key=%s is not JSON-serializable: %r", key, exc)
            return False

        try:
            row = self._row(key)
            if row is None:
                self.db.add(ProfileBlob(profile=self.profile, key=key, value=serialized))
            else:
                row.value = serialized
            self.db.commit()
            return True
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("[STORE] Failed to save profile=%s key=%s: %r", self.profile, key, exc)
            return False

    def remove(self, key: str) -> None:
        try:
            row = self._row(key)
            if row is not None:
                self.db.delete(row)
                self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("[STORE] Failed to remove profile=%s key=%s: %r", self.profile, key, exc)

    def keys(self) -> list[str]:
        rows = self.db.query(ProfileBlob.key).filter(ProfileBlob.profile == self.profile).all()
        return sorted(r[0] for r in rows)


# ---------------------------------------------------------------------------
# PROFILE REGISTRY
# ---------------------------------------------------------------------------

def list_profiles(db: Session) -> list[str]:
    names = [r[0] for r in db.query(Profile.name).order_by(Profile.id).all()]
    return names or [config.DEFAULT_PROFILE]


def ensure_profile_exists(db: Session, name: str) -> Profile:
    """Get existing profile record or create one."""
    profile = db.query(Profile).filter(Profile.name == name).first()
    if not profile:
        profile = Profile(name=name, is_active=False)
        db.add(profile)
        db.commit()
        db.refresh(profile)
        logger.info("[STORE] created profile '%s'", name)
    return profile


def get_active_profile(db: Session) -> str:
    profile = db.query(Profile).filter(Profile.is_active.is_(True)).first()
    return profile.name if profile else config.DEFAULT_PROFILE


def set_active_profile(db: Session, name: str) -> Profile:
    target = ensure_profile_exists(db, name)
    db.query(Profile).filter(Profile.id != target.id).update({Profile.is_active: False})
    target.is_active = True
    db.commit()
    db.refresh(target)
    return target

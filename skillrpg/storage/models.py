"""
Profile store tables.
Each named profile holds whole-value JSON blobs keyed by logical name
(tree, fighters, xp, fighter_skill_levels, fighter_skills, tasks_v2).
"""
from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text, UniqueConstraint
from sqlalchemy.sql import func

from skillrpg.db.base import Base


class Profile(Base):
    """Known profiles; at most one is marked active."""
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, unique=True)
    is_active = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())


class ProfileBlob(Base):
    """One JSON value per profile per logical key."""
    __tablename__ = "profile_blobs"

    id = Column(Integer, primary_key=True, index=True)

    profile = Column(String(255), nullable=False, index=True)
    key = Column(String(64), nullable=False)

    # Serialized JSON; decoded (and shape-checked) by ProfileStore.get
    value = Column(Text, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Unique constraint: one blob per profile per key
    __table_args__ = (
        UniqueConstraint('profile', 'key', name='uq_profile_key'),
    )

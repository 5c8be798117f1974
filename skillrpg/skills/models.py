"""
Skill tree: categories -> skills -> template levels (1..5) -> checklist items.

ChecklistItem is the template "task" inside a skill level. It has nothing to
do with XP; assignable work lives in tasks.models.WorkItem.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

TREE_VERSION = 2


@dataclass
class ChecklistItem:
    id: str
    text: str
    done: bool = False
    description: Optional[str] = None
    difficulty: Optional[int] = None

    def to_dict(self) -> dict:
        data = {"id": self.id, "text": self.text, "done": self.done}
        if self.description is not None:
            data["description"] = self.description
        if self.difficulty is not None:
            data["difficulty"] = self.difficulty
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "ChecklistItem":
        return cls(
            id=data["id"],
            text=data.get("text", ""),
            done=bool(data.get("done", False)),
            description=data.get("description"),
            difficulty=data.get("difficulty"),
        )


@dataclass
class SkillLevel:
    level: int
    title: str
    tasks: list[ChecklistItem] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"level": self.level, "title": self.title, "tasks": [t.to_dict() for t in self.tasks]}

    @classmethod
    def from_dict(cls, data: dict) -> "SkillLevel":
        return cls(
            level=data["level"],
            title=data.get("title", ""),
            tasks=[ChecklistItem.from_dict(t) for t in data.get("tasks", [])],
        )


@dataclass
class Skill:
    id: str
    name: str
    levels: list[SkillLevel] = field(default_factory=list)
    description: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    is_archived: bool = False
    updated_at: Optional[int] = None

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "levels": [lvl.to_dict() for lvl in self.levels],
            "tags": list(self.tags),
            "isArchived": self.is_archived,
        }
        if self.description is not None:
            data["description"] = self.description
        if self.updated_at is not None:
            data["updatedAt"] = self.updated_at
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Skill":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            levels=[SkillLevel.from_dict(lvl) for lvl in data.get("levels", [])],
            description=data.get("description"),
            tags=list(data.get("tags") or []),
            is_archived=bool(data.get("isArchived", False)),
            updated_at=data.get("updatedAt"),
        )


@dataclass
class Category:
    id: str
    name: str
    skills: list[Skill] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "skills": [s.to_dict() for s in self.skills]}

    @classmethod
    def from_dict(cls, data: dict) -> "Category":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            skills=[Skill.from_dict(s) for s in data.get("skills", [])],
        )


@dataclass
class SkillTree:
    categories: list[Category] = field(default_factory=list)
    version: int = TREE_VERSION

    def to_dict(self) -> dict:
        return {"categories": [c.to_dict() for c in self.categories], "version": self.version}

    @classmethod
    def from_dict(cls, data: dict) -> "SkillTree":
        return cls(
            categories=[Category.from_dict(c) for c in data.get("categories", [])],
            version=data.get("version", TREE_VERSION),
        )

"""
Work items: assignable units of work carrying suggested/approved XP.

Not to be confused with skills.models.ChecklistItem, the template checklist
entries that live inside a skill level.

Persisted shape is plain JSON with camelCase field names; to_dict/from_dict
convert between the two.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class TaskStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    VALIDATION = "validation"
    DONE = "done"
    ARCHIVED = "archived"


# Only credited or credit-pending work counts towards repetition
CREDITED_STATUSES = frozenset({TaskStatus.DONE, TaskStatus.VALIDATION})


def _status(value: Any) -> TaskStatus:
    try:
        return TaskStatus(value)
    except ValueError:
        # Legacy statuses from the single-assignee task model
        return {
            "draft": TaskStatus.TODO,
            "submitted": TaskStatus.VALIDATION,
            "approved": TaskStatus.DONE,
        }.get(value, TaskStatus.TODO)


@dataclass
class AssigneeSkill:
    skill_id: str
    category_id: str
    xp_suggested: int = 0
    xp_approved: Optional[int] = None

    def to_dict(self) -> dict:
        data = {
            "skillId": self.skill_id,
            "categoryId": self.category_id,
            "xpSuggested": self.xp_suggested,
        }
        if self.xp_approved is not None:
            data["xpApproved"] = self.xp_approved
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "AssigneeSkill":
        return cls(
            skill_id=data["skillId"],
            category_id=data.get("categoryId", ""),
            xp_suggested=data.get("xpSuggested", 0),
            xp_approved=data.get("xpApproved"),
        )


@dataclass
class Assignee:
    fighter_id: str
    skills: list[AssigneeSkill] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"fighterId": self.fighter_id, "skills": [s.to_dict() for s in self.skills]}

    @classmethod
    def from_dict(cls, data: dict) -> "Assignee":
        return cls(
            fighter_id=data["fighterId"],
            skills=[AssigneeSkill.from_dict(s) for s in data.get("skills", [])],
        )


@dataclass
class StatusChange:
    from_status: Optional[TaskStatus]
    to_status: TaskStatus
    changed_at: int

    def to_dict(self) -> dict:
        return {
            "fromStatus": self.from_status.value if self.from_status else None,
            "toStatus": self.to_status.value,
            "changedAt": self.changed_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "StatusChange":
        from_status = data.get("fromStatus")
        return cls(
            from_status=_status(from_status) if from_status else None,
            to_status=_status(data["toStatus"]),
            changed_at=data["changedAt"],
        )


@dataclass
class TaskComment:
    id: str
    author: str
    message: str
    created_at: int
    read_at: Optional[int] = None

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "author": self.author,
            "message": self.message,
            "createdAt": self.created_at,
        }
        if self.read_at is not None:
            data["readAt"] = self.read_at
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "TaskComment":
        return cls(
            id=data["id"],
            author=data.get("author", ""),
            message=data.get("message", ""),
            created_at=data.get("createdAt", 0),
            read_at=data.get("readAt"),
        )


@dataclass
class WorkItem:
    id: str
    title: str
    difficulty: int
    created_at: int
    status: TaskStatus = TaskStatus.TODO
    description: Optional[str] = None
    is_priority: bool = False
    assignees: list[Assignee] = field(default_factory=list)
    submitted_at: Optional[int] = None
    approved_at: Optional[int] = None
    task_number: Optional[int] = None
    history: list[StatusChange] = field(default_factory=list)
    comments: list[TaskComment] = field(default_factory=list)
    has_unread_comments: bool = False

    @property
    def effective_timestamp(self) -> int:
        """approved_at, else submitted_at, else created_at."""
        if self.approved_at is not None:
            return self.approved_at
        if self.submitted_at is not None:
            return self.submitted_at
        return self.created_at

    def has_line(self, fighter_id: str, skill_id: str) -> bool:
        """True if a single assignee record carries both the fighter and the skill."""
        return any(
            a.fighter_id == fighter_id and any(s.skill_id == skill_id for s in a.skills)
            for a in self.assignees
        )

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "title": self.title,
            "difficulty": self.difficulty,
            "assignees": [a.to_dict() for a in self.assignees],
            "status": self.status.value,
            "createdAt": self.created_at,
            "isPriority": self.is_priority,
            "history": [h.to_dict() for h in self.history],
            "comments": [c.to_dict() for c in self.comments],
            "hasUnreadComments": self.has_unread_comments,
        }
        for key, value in (
            ("description", self.description),
            ("submittedAt", self.submitted_at),
            ("approvedAt", self.approved_at),
            ("taskNumber", self.task_number),
        ):
            if value is not None:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "WorkItem":
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            description=data.get("description"),
            difficulty=data.get("difficulty", 1),
            is_priority=bool(data.get("isPriority", False)),
            status=_status(data.get("status", "todo")),
            assignees=[Assignee.from_dict(a) for a in data.get("assignees", [])],
            created_at=data.get("createdAt", 0),
            submitted_at=data.get("submittedAt"),
            approved_at=data.get("approvedAt"),
            task_number=data.get("taskNumber"),
            history=[StatusChange.from_dict(h) for h in data.get("history") or []],
            comments=[TaskComment.from_dict(c) for c in data.get("comments") or []],
            has_unread_comments=bool(data.get("hasUnreadComments", False)),
        )

"""
Work item lifecycle on the task board.

Pipeline: todo -> in_progress -> validation -> done, with manual regression
allowed between those four. archived is a side branch reachable only from
done; restore_task brings it back to done.

All functions are copy-on-write over a list of WorkItem (newest first) and
return the input unchanged for unknown ids or no-op transitions.

Deleting a work item never retracts XP already merged into a ledger.
"""
from __future__ import annotations

import copy
import logging
from dataclasses import replace
from typing import Iterable, Mapping, Optional

from skillrpg.core.ids import generate_id, now_ms
from skillrpg.core.undo import DELETE_TASK, UndoAction
from skillrpg.fighters.sync import LedgerMap, merge_approved_xp
from skillrpg.levels.leveling import normalize_xp
from skillrpg.tasks.models import (
    Assignee,
    StatusChange,
    TaskComment,
    TaskStatus,
    WorkItem,
)
from skillrpg.tasks.xp import clamp_difficulty

logger = logging.getLogger(__name__)

DEFAULT_COMMENT_AUTHOR = "Commander"


def _find(tasks: list[WorkItem], task_id: str) -> Optional[WorkItem]:
    return next((t for t in tasks if t.id == task_id), None)


def _swap(tasks: list[WorkItem], updated: WorkItem) -> list[WorkItem]:
    return [updated if t.id == updated.id else t for t in tasks]


def _transition(task: WorkItem, status: TaskStatus, timestamp: int) -> WorkItem:
    return replace(
        task,
        status=status,
        submitted_at=timestamp if status == TaskStatus.VALIDATION else task.submitted_at,
        approved_at=timestamp if status == TaskStatus.DONE else task.approved_at,
        history=[*task.history, StatusChange(task.status, status, timestamp)],
    )


# ---------------------------------------------------------------------------
# CREATE / EDIT
# ---------------------------------------------------------------------------

def create_task(
    tasks: list[WorkItem],
    title: str,
    difficulty: int,
    assignees: Iterable[Assignee],
    description: Optional[str] = None,
    is_priority: bool = False,
    now: Optional[int] = None,
) -> tuple[list[WorkItem], WorkItem]:
    timestamp = now_ms() if now is None else now
    next_number = max((t.task_number or 0 for t in tasks), default=0) + 1
    task = WorkItem(
        id=generate_id("task"),
        title=title,
        description=description,
        difficulty=clamp_difficulty(difficulty),
        is_priority=bool(is_priority),
        assignees=copy.deepcopy(list(assignees)),
        status=TaskStatus.TODO,
        created_at=timestamp,
        task_number=next_number,
        history=[StatusChange(None, TaskStatus.TODO, timestamp)],
    )
    logger.info("[TASK] created #%s id=%s difficulty=%s assignees=%s",
                next_number, task.id, task.difficulty, len(task.assignees))
    return [task, *tasks], task


def update_task_details(
    tasks: list[WorkItem],
    task_id: str,
    title: Optional[str] = None,
    difficulty: Optional[int] = None,
    **updates,
) -> list[WorkItem]:
    """Edit title/difficulty and, when passed explicitly, description/is_priority."""
    task = _find(tasks, task_id)
    if task is None:
        return tasks
    changes = {}
    if isinstance(title, str):
        changes["title"] = title
    if difficulty:
        changes["difficulty"] = clamp_difficulty(difficulty)
    if "description" in updates:
        changes["description"] = updates["description"]
    if "is_priority" in updates:
        changes["is_priority"] = bool(updates["is_priority"])
    if not changes:
        return tasks
    return _swap(tasks, replace(task, **changes))


def update_task_assignees(tasks: list[WorkItem], task_id: str, fighter_ids: Iterable[str]) -> list[WorkItem]:
    """Keep existing assignee records for retained fighters; new fighters start with no skill lines."""
    task = _find(tasks, task_id)
    if task is None:
        return tasks
    targets = list(dict.fromkeys(fighter_ids))
    kept = [a for a in task.assignees if a.fighter_id in targets]
    kept_ids = {a.fighter_id for a in kept}
    created = [Assignee(fighter_id=f, skills=[]) for f in targets if f not in kept_ids]
    return _swap(tasks, replace(task, assignees=kept + created))


def remove_fighter_assignments(tasks: list[WorkItem], fighter_id: str) -> list[WorkItem]:
    """Strip a deleted fighter from every assignee list."""
    if not any(a.fighter_id == fighter_id for t in tasks for a in t.assignees):
        return tasks
    return [
        replace(t, assignees=[a for a in t.assignees if a.fighter_id != fighter_id])
        if any(a.fighter_id == fighter_id for a in t.assignees) else t
        for t in tasks
    ]


# ---------------------------------------------------------------------------
# STATUS
# ---------------------------------------------------------------------------

def update_task_status(
    tasks: list[WorkItem], task_id: str, status, now: Optional[int] = None
) -> list[WorkItem]:
    """Move between todo/in_progress/validation/done. Use archive_task/restore_task for the archive."""
    status = TaskStatus(status)
    task = _find(tasks, task_id)
    if task is None or task.status == status:
        return tasks
    if status == TaskStatus.ARCHIVED:
        return archive_task(tasks, task_id, now=now)
    if task.status == TaskStatus.ARCHIVED:
        logger.warning("[TASK] id=%s is archived; restore it before changing status", task_id)
        return tasks
    timestamp = now_ms() if now is None else now
    return _swap(tasks, _transition(task, status, timestamp))


def archive_task(tasks: list[WorkItem], task_id: str, now: Optional[int] = None) -> list[WorkItem]:
    task = _find(tasks, task_id)
    if task is None or task.status != TaskStatus.DONE:
        return tasks
    timestamp = now_ms() if now is None else now
    return _swap(tasks, _transition(task, TaskStatus.ARCHIVED, timestamp))


def restore_task(tasks: list[WorkItem], task_id: str, now: Optional[int] = None) -> list[WorkItem]:
    task = _find(tasks, task_id)
    if task is None or task.status != TaskStatus.ARCHIVED:
        return tasks
    timestamp = now_ms() if now is None else now
    # Restoring must not re-stamp approved_at; the award happened earlier.
    restored = replace(
        task,
        status=TaskStatus.DONE,
        history=[*task.history, StatusChange(TaskStatus.ARCHIVED, TaskStatus.DONE, timestamp)],
    )
    return _swap(tasks, restored)


def approve_task(
    tasks: list[WorkItem],
    ledger: LedgerMap,
    task_id: str,
    approved: Optional[Mapping[str, Mapping[str, int]]] = None,
    now: Optional[int] = None,
) -> tuple[list[WorkItem], LedgerMap]:
    """
    Promote suggested XP to approved XP, mark the item done and merge the
    award into the ledger. *approved* overrides per fighter/skill; lines
    without an override keep their suggested value.
    """
    task = _find(tasks, task_id)
    if task is None:
        return tasks, ledger
    approved = approved or {}
    timestamp = now_ms() if now is None else now

    new_ledger = merge_approved_xp(ledger, task.assignees, approved)

    assignees = [
        replace(
            a,
            skills=[
                replace(s, xp_approved=normalize_xp(approved.get(a.fighter_id, {}).get(s.skill_id, s.xp_suggested)))
                for s in a.skills
            ],
        )
        for a in task.assignees
    ]
    done = replace(
        task,
        status=TaskStatus.DONE,
        approved_at=timestamp,
        assignees=assignees,
        history=[*task.history, StatusChange(task.status, TaskStatus.DONE, timestamp)],
    )
    logger.info("[TASK] approved id=%s lines=%s", task_id, sum(len(a.skills) for a in assignees))
    return _swap(tasks, done), new_ledger


def delete_task(tasks: list[WorkItem], task_id: str) -> tuple[list[WorkItem], Optional[UndoAction]]:
    task = _find(tasks, task_id)
    if task is None:
        return tasks, None
    action = UndoAction(
        type=DELETE_TASK,
        description=f'Deleted task "{task.title}"',
        data={"task": copy.deepcopy(task)},
    )
    return [t for t in tasks if t.id != task_id], action


def restore_deleted_task(tasks: list[WorkItem], task: WorkItem) -> list[WorkItem]:
    if _find(tasks, task.id) is not None:
        return tasks
    return [copy.deepcopy(task), *tasks]


# ---------------------------------------------------------------------------
# COMMENTS
# ---------------------------------------------------------------------------

def add_task_comment(
    tasks: list[WorkItem],
    task_id: str,
    message: str,
    author: str = DEFAULT_COMMENT_AUTHOR,
    now: Optional[int] = None,
) -> list[WorkItem]:
    trimmed = (message or "").strip()
    task = _find(tasks, task_id)
    if not trimmed or task is None:
        return tasks
    comment = TaskComment(
        id=generate_id("comment"),
        author=author,
        message=trimmed,
        created_at=now_ms() if now is None else now,
    )
    return _swap(tasks, replace(task, comments=[*task.comments, comment], has_unread_comments=True))


def mark_task_comments_read(tasks: list[WorkItem], task_id: str, now: Optional[int] = None) -> list[WorkItem]:
    task = _find(tasks, task_id)
    if task is None:
        return tasks
    unread = [c for c in task.comments if c.read_at is None]
    if not unread and not task.has_unread_comments:
        return tasks
    timestamp = now_ms() if now is None else now
    comments = [c if c.read_at is not None else replace(c, read_at=timestamp) for c in task.comments]
    return _swap(tasks, replace(task, comments=comments, has_unread_comments=False))

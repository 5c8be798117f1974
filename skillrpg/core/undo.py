"""
Undo capture for destructive operations (fighter/task/skill/category delete).

The engine only produces UndoAction records; applying them back is up to the
caller (see state.SkillRpgState.undo).
"""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Optional

from skillrpg.core import config
from skillrpg.core.ids import generate_id, now_ms

DELETE_FIGHTER = "delete_fighter"
DELETE_TASK = "delete_task"
DELETE_SKILL = "delete_skill"
DELETE_CATEGORY = "delete_category"


@dataclass
class UndoAction:
    type: str
    description: str
    data: dict[str, Any]
    id: str = field(default_factory=lambda: generate_id("undo"))
    timestamp: int = field(default_factory=now_ms)


class UndoManager:
    """Bounded LIFO stack; the oldest record is dropped once full."""

    def __init__(self, max_size: int = config.UNDO_STACK_SIZE):
        self._stack: deque[UndoAction] = deque(maxlen=max_size)

    def push(self, action: UndoAction) -> None:
        self._stack.append(action)

    def pop(self) -> Optional[UndoAction]:
        return self._stack.pop() if self._stack else None

    def peek(self) -> Optional[UndoAction]:
        return self._stack[-1] if self._stack else None

    def clear(self) -> None:
        self._stack.clear()

    @property
    def size(self) -> int:
        return len(self._stack)

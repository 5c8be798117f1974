"""
Near-duplicate detection for work item titles, and the repetition
(anti-exploit) count built on top of it.

A previous work item counts as a repetition of the line being composed
only when ALL hold:
  - status is done or validation
  - effective timestamp is within window_days before now
  - difficulty differs by at most 1
  - one assignee record carries both the fighter and the skill
  - title Jaccard similarity >= SIMILARITY_THRESHOLD
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Optional

from skillrpg.core import config
from skillrpg.core.ids import DAY_MS, now_ms
from skillrpg.tasks.models import CREDITED_STATUSES, WorkItem
from skillrpg.tasks.xp import diminishing_returns

_NON_WORD = re.compile(r"[^a-zа-яіїєґё0-9\s]")

MIN_TOKEN_LENGTH = 3


def tokenize(text: Optional[str]) -> set[str]:
    """Lowercase, keep Latin/Cyrillic letters and digits, drop tokens shorter than 3."""
    cleaned = _NON_WORD.sub(" ", (text or "").lower())
    return {token for token in cleaned.split() if len(token) >= MIN_TOKEN_LENGTH}


def jaccard(a: set[str], b: set[str]) -> float:
    """Intersection over union. Two empty sets are identical (1.0)."""
    if not a and not b:
        return 1.0
    intersection = len(a & b)
    union = len(a) + len(b) - intersection
    return 1.0 if union == 0 else intersection / union


def count_similar_for_task_line(
    tasks: Iterable[WorkItem],
    fighter_id: str,
    skill_id: str,
    difficulty: int,
    title: str = "",
    window_days: int = config.REPETITION_WINDOW_DAYS,
    now: Optional[int] = None,
) -> int:
    """How many recent, credited, similar items this fighter already did for this skill."""
    now = now_ms() if now is None else now
    window_ms = window_days * DAY_MS
    title_tokens = tokenize(title)

    count = 0
    for task in tasks:
        if task.status not in CREDITED_STATUSES:
            continue
        if now - task.effective_timestamp > window_ms:
            continue
        if abs(task.difficulty - difficulty) > 1:
            continue
        if not task.has_line(fighter_id, skill_id):
            continue
        if jaccard(title_tokens, tokenize(task.title)) >= config.SIMILARITY_THRESHOLD:
            count += 1
    return count


@dataclass(frozen=True)
class RepetitionResult:
    count: int
    factor: float


def repetition_factor_from_tasks(
    tasks: Iterable[WorkItem],
    fighter_id: str,
    skill_id: str,
    difficulty: int,
    title: str = "",
    window_days: int = config.REPETITION_WINDOW_DAYS,
    free_quota: int = config.REPETITION_FREE_QUOTA,
    step: float = config.REPETITION_STEP,
    min_factor: float = config.REPETITION_MIN_FACTOR,
    now: Optional[int] = None,
) -> RepetitionResult:
    """Similar-work count plus the diminishing-returns factor derived from it."""
    count = count_similar_for_task_line(
        tasks,
        fighter_id=fighter_id,
        skill_id=skill_id,
        difficulty=difficulty,
        title=title,
        window_days=window_days,
        now=now,
    )
    return RepetitionResult(count=count, factor=diminishing_returns(count, free_quota, step, min_factor))

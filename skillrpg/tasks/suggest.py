"""
Suggested XP for a work item being composed.

Two diminishing-returns layers are stacked:
  1. the window repetition count (floored at 1) feeds compute_suggested_xp,
     which applies its own quota-based factor;
  2. the window repetition factor is then applied on top.
Both layers stay independently testable (tasks.xp, tasks.similarity).
"""
from __future__ import annotations

from typing import Iterable, Mapping, Optional

from skillrpg.levels.leveling import round_half_up
from skillrpg.tasks.models import Assignee, AssigneeSkill, WorkItem
from skillrpg.tasks.similarity import repetition_factor_from_tasks
from skillrpg.tasks.xp import compute_suggested_xp, is_novice


def suggest_line_xp(
    tasks: Iterable[WorkItem],
    fighter_skill_levels: Mapping[str, Mapping[str, int]],
    fighter_id: str,
    skill_id: str,
    difficulty: int,
    title: str = "",
    now: Optional[int] = None,
) -> int:
    level = fighter_skill_levels.get(fighter_id, {}).get(skill_id, 0)
    rep = repetition_factor_from_tasks(
        tasks,
        fighter_id=fighter_id,
        skill_id=skill_id,
        difficulty=difficulty,
        title=title,
        now=now,
    )
    base = compute_suggested_xp(
        difficulty=difficulty,
        is_novice=is_novice(level),
        repetition_count=max(1, rep.count),
    )
    return round_half_up(base * rep.factor)


def suggest_assignees(
    tasks: Iterable[WorkItem],
    fighter_skill_levels: Mapping[str, Mapping[str, int]],
    selection: Mapping[str, Iterable[str]],
    skill_categories: Mapping[str, str],
    difficulty: int,
    title: str = "",
    now: Optional[int] = None,
) -> list[Assignee]:
    """
    Build assignee lines with suggested XP.

    *selection* maps fighter id -> selected skill ids; *skill_categories* maps
    skill id -> owning category id (see skills.tree.skill_category_index).
    Skills missing from the index are skipped.
    """
    history = list(tasks)
    assignees = []
    for fighter_id, skill_ids in selection.items():
        lines = []
        for skill_id in skill_ids:
            category_id = skill_categories.get(skill_id)
            if category_id is None:
                continue
            xp = suggest_line_xp(
                history, fighter_skill_levels, fighter_id, skill_id, difficulty, title, now=now
            )
            lines.append(AssigneeSkill(skill_id=skill_id, category_id=category_id, xp_suggested=xp))
        assignees.append(Assignee(fighter_id=fighter_id, skills=lines))
    return assignees

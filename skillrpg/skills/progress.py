"""
Checklist completion rollups per skill and per category.
Operates on template checklist items only; XP and work items play no part.
"""
from dataclasses import dataclass

from skillrpg.levels.leveling import round_half_up
from skillrpg.skills.models import Category, Skill


@dataclass(frozen=True)
class Progress:
    total: int
    done: int
    pct: int


def _pct(done: int, total: int) -> int:
    return 0 if total == 0 else round_half_up(done / total * 100)


def get_skill_progress(skill: Skill) -> Progress:
    total = sum(len(level.tasks) for level in skill.levels)
    done = sum(1 for level in skill.levels for item in level.tasks if item.done)
    return Progress(total=total, done=done, pct=_pct(done, total))


def get_category_progress(category: Category) -> Progress:
    """Same rollup over non-archived skills; archived skills are excluded entirely."""
    totals = [get_skill_progress(skill) for skill in category.skills if not skill.is_archived]
    total = sum(p.total for p in totals)
    done = sum(p.done for p in totals)
    return Progress(total=total, done=done, pct=_pct(done, total))

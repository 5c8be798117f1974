"""
Shape checks for persisted blobs.

Each parse_* takes raw decoded JSON and returns typed values, or the caller's
fallback when the shape is wrong. Bad data is logged, never raised.
"""
from __future__ import annotations

import logging
import math
from typing import Any, TypeVar

from skillrpg.fighters.models import Fighter
from skillrpg.skills.models import SkillTree
from skillrpg.tasks.models import WorkItem

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _is_number(value: Any) -> bool:
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # ints too large for a float
        return False


def _is_str(value: Any) -> bool:
    return isinstance(value, str)


def _optional(value: Any, check) -> bool:
    return value is None or check(value)


def is_checklist_item(value: Any) -> bool:
    return (
        isinstance(value, dict)
        and _is_str(value.get("id"))
        and _is_str(value.get("text"))
        and isinstance(value.get("done"), bool)
        and _optional(value.get("description"), _is_str)
        and _optional(value.get("difficulty"), _is_number)
    )


def is_skill_level(value: Any) -> bool:
    return (
        isinstance(value, dict)
        and _is_number(value.get("level"))
        and _is_str(value.get("title"))
        and isinstance(value.get("tasks"), list)
        and all(is_checklist_item(t) for t in value["tasks"])
    )


def is_skill(value: Any) -> bool:
    return (
        isinstance(value, dict)
        and _is_str(value.get("id"))
        and _is_str(value.get("name"))
        and isinstance(value.get("levels"), list)
        and all(is_skill_level(lvl) for lvl in value["levels"])
    )


def is_category(value: Any) -> bool:
    return (
        isinstance(value, dict)
        and _is_str(value.get("id"))
        and _is_str(value.get("name"))
        and isinstance(value.get("skills"), list)
        and all(is_skill(s) for s in value["skills"])
    )


def is_skill_tree(value: Any) -> bool:
    return (
        isinstance(value, dict)
        and isinstance(value.get("categories"), list)
        and all(is_category(c) for c in value["categories"])
    )


def is_fighter(value: Any) -> bool:
    return isinstance(value, dict) and _is_str(value.get("id")) and _is_str(value.get("name"))


def is_fighters_array(value: Any) -> bool:
    return isinstance(value, list) and all(is_fighter(f) for f in value)


def is_assignee_skill(value: Any) -> bool:
    return (
        isinstance(value, dict)
        and _is_str(value.get("skillId"))
        and _is_str(value.get("categoryId"))
        and _is_number(value.get("xpSuggested"))
        and _optional(value.get("xpApproved"), _is_number)
    )


def is_assignee(value: Any) -> bool:
    return (
        isinstance(value, dict)
        and _is_str(value.get("fighterId"))
        and isinstance(value.get("skills"), list)
        and all(is_assignee_skill(s) for s in value["skills"])
    )


def is_work_item(value: Any) -> bool:
    return (
        isinstance(value, dict)
        and _is_str(value.get("id"))
        and _is_str(value.get("title"))
        and _is_number(value.get("difficulty"))
        and _is_str(value.get("status"))
        and _is_number(value.get("createdAt"))
        and isinstance(value.get("assignees"), list)
        and all(is_assignee(a) for a in value["assignees"])
    )


def is_work_items_array(value: Any) -> bool:
    return isinstance(value, list) and all(is_work_item(t) for t in value)


def is_xp_ledger_record(value: Any) -> bool:
    return isinstance(value, dict) and all(
        isinstance(ledger, dict) and all(_is_number(xp) for xp in ledger.values())
        for ledger in value.values()
    )


def is_skill_levels_record(value: Any) -> bool:
    return isinstance(value, dict) and all(
        isinstance(levels, dict) and all(
            isinstance(lvl, int) and not isinstance(lvl, bool) and 0 <= lvl <= 10
            for lvl in levels.values()
        )
        for levels in value.values()
    )


def is_fighter_skills_record(value: Any) -> bool:
    return isinstance(value, dict) and all(
        isinstance(flags, dict) and all(isinstance(flag, bool) for flag in flags.values())
        for flags in value.values()
    )


# ---------------------------------------------------------------------------
# PARSERS (validator + typed conversion + fallback)
# ---------------------------------------------------------------------------

def parse_skill_tree(value: Any, fallback: SkillTree) -> SkillTree:
    if is_skill_tree(value):
        return SkillTree.from_dict(value)
    logger.warning("[STORE] Invalid skill tree payload encountered, falling back to default.")
    return fallback


def parse_fighters(value: Any, fallback: list[Fighter]) -> list[Fighter]:
    if is_fighters_array(value):
        return [Fighter.from_dict(f) for f in value]
    logger.warning("[STORE] Invalid fighters payload encountered, falling back to default.")
    return fallback


def parse_work_items(value: Any, fallback: list[WorkItem]) -> list[WorkItem]:
    if is_work_items_array(value):
        return [WorkItem.from_dict(t) for t in value]
    logger.warning("[STORE] Invalid tasks payload encountered, falling back to default.")
    return fallback


def parse_xp_ledger(value: Any, fallback: dict) -> dict:
    if is_xp_ledger_record(value):
        return {f: dict(ledger) for f, ledger in value.items()}
    logger.warning("[STORE] Invalid XP ledger payload encountered, falling back to default.")
    return fallback


def parse_skill_levels(value: Any, fallback: dict) -> dict:
    if is_skill_levels_record(value):
        return {f: dict(levels) for f, levels in value.items()}
    logger.warning("[STORE] Invalid fighter skill levels payload encountered, falling back to default.")
    return fallback


def parse_fighter_skills(value: Any, fallback: dict) -> dict:
    if is_fighter_skills_record(value):
        return {f: dict(flags) for f, flags in value.items()}
    logger.warning("[STORE] Invalid fighter skills payload encountered, falling back to default.")
    return fallback

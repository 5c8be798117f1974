from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping

from skillrpg.fighters.models import Fighter
from skillrpg.levels.leveling import clamp_level

NO_UNIT = "No unit"


@dataclass
class SkillUsage:
    count: int = 0
    max_level: int = 0


@dataclass
class SkillStats:
    fighters: list[tuple[Fighter, int]] = field(default_factory=list)
    average: float = 0.0
    count: int = 0
    by_unit: dict[str, int] = field(default_factory=dict)


def build_skill_usage(
    fighters: Iterable[Fighter],
    fighter_skill_levels: Mapping[str, Mapping[str, int]],
) -> dict[str, SkillUsage]:
    """skill id -> how many fighters hold it (level > 0) and the best level among them."""
    usage: dict[str, SkillUsage] = {}
    for fighter in fighters:
        for skill_id, level in fighter_skill_levels.get(fighter.id, {}).items():
            entry = usage.setdefault(skill_id, SkillUsage())
            level = clamp_level(level)
            if level > 0:
                entry.count += 1
                entry.max_level = max(entry.max_level, level)
    return usage


def calculate_skill_stats(
    skill_id: str,
    fighters: Iterable[Fighter],
    fighter_skill_levels: Mapping[str, Mapping[str, int]],
) -> SkillStats:
    """Fighters holding *skill_id*, best first, with the average level and a per-unit count."""
    holders = [
        (fighter, clamp_level(fighter_skill_levels.get(fighter.id, {}).get(skill_id, 0)))
        for fighter in fighters
    ]
    holders = sorted((h for h in holders if h[1] > 0), key=lambda h: h[1], reverse=True)

    by_unit: dict[str, int] = {}
    for fighter, _ in holders:
        unit = (fighter.unit or NO_UNIT).strip()
        by_unit[unit] = by_unit.get(unit, 0) + 1

    average = round(sum(level for _, level in holders) / len(holders), 1) if holders else 0.0
    return SkillStats(fighters=holders, average=average, count=len(holders), by_unit=by_unit)

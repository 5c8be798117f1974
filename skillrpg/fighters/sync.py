"""
Keeps per-fighter skill levels, XP ledgers and assignment flags consistent.
Core rules:
  - XP changed      -> level = level_from_xp(xp), written only when different
  - Level changed   -> XP raised to xp_threshold_for_level(level) when below, never lowered
  - New skill       -> every fighter gains a level entry (0) and a matching ledger entry
  - Fighter added   -> both maps seeded from the initial levels
  - Fighter removed -> cascade across all three maps + assignee-strip hook
  - Orphaned entries (skills no longer in the tree) are kept, never pruned

Every pass is copy-on-write and returns the *same* object when it made no
writes, so callers (and reconcile) can detect "nothing changed" by identity.
"""
from __future__ import annotations

import copy
import logging
import math
from dataclasses import dataclass, field, replace
from typing import Callable, Iterable, Mapping, Optional

from skillrpg.core.ids import generate_id
from skillrpg.core.undo import DELETE_FIGHTER, UndoAction
from skillrpg.fighters.models import FIGHTER_META_FIELDS, Fighter
from skillrpg.levels.leveling import clamp_level, level_from_xp, normalize_xp, xp_threshold_for_level
from skillrpg.tasks.models import Assignee

logger = logging.getLogger(__name__)

LevelMap = dict[str, dict[str, int]]
LedgerMap = dict[str, dict[str, int]]
AssignmentMap = dict[str, dict[str, bool]]

# What a caller tells reconcile() it just changed
CHANGED_LEVELS = "levels"
CHANGED_XP = "xp"
CHANGED_TREE = "tree"
CHANGED_FIGHTERS = "fighters"

# level->xp and xp->level each settle in one pass; anything past this is a bug
MAX_ROUNDS = 4


@dataclass(frozen=True)
class FighterState:
    levels: LevelMap = field(default_factory=dict)
    xp: LedgerMap = field(default_factory=dict)
    skills: AssignmentMap = field(default_factory=dict)


def _as_number(value) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


# ---------------------------------------------------------------------------
# PASSES
# ---------------------------------------------------------------------------

def ensure_skill_entries(state: FighterState, skill_ids: Iterable[str]) -> FighterState:
    """Add missing skills (level 0) to every fighter; ledger entries seeded at the level's floor."""
    skill_ids = list(skill_ids)
    if not skill_ids:
        return state

    levels: Optional[LevelMap] = None
    ledger: Optional[LedgerMap] = None
    for fighter_id in list(state.levels) + [f for f in state.xp if f not in state.levels]:
        current_levels = state.levels.get(fighter_id)
        current_xp = state.xp.get(fighter_id)
        missing_levels = [s for s in skill_ids if current_levels is None or s not in current_levels]
        missing_xp = [s for s in skill_ids if current_xp is None or s not in current_xp]

        if missing_levels:
            levels = levels if levels is not None else dict(state.levels)
            updated = dict(current_levels or {})
            for skill_id in missing_levels:
                updated[skill_id] = 0
            levels[fighter_id] = updated

        if missing_xp:
            ledger = ledger if ledger is not None else dict(state.xp)
            fighter_levels = (levels or state.levels).get(fighter_id, {})
            updated = dict(current_xp or {})
            for skill_id in missing_xp:
                updated[skill_id] = xp_threshold_for_level(clamp_level(fighter_levels.get(skill_id, 0)))
            ledger[fighter_id] = updated

    if levels is None and ledger is None:
        return state
    return replace(
        state,
        levels=levels if levels is not None else state.levels,
        xp=ledger if ledger is not None else state.xp,
    )


def ensure_fighter_entries(state: FighterState, fighter_ids: Iterable[str]) -> FighterState:
    """Every known fighter gets (possibly empty) level and ledger maps."""
    missing_levels = [f for f in fighter_ids if f not in state.levels]
    missing_xp = [f for f in set(state.levels) | set(missing_levels) if f not in state.xp]
    if not missing_levels and not missing_xp:
        return state
    levels = {**state.levels, **{f: {} for f in missing_levels}}
    ledger = {**state.xp, **{f: {} for f in missing_xp}}
    return replace(state, levels=levels, xp=ledger)


def sync_levels_from_xp(state: FighterState) -> FighterState:
    """Recompute levels from the ledger; writes only where the derived level differs."""
    levels: Optional[LevelMap] = None
    for fighter_id, ledger in state.xp.items():
        current = state.levels.get(fighter_id, {})
        updated = None
        for skill_id, xp in ledger.items():
            derived = level_from_xp(xp)
            if current.get(skill_id) != derived:
                if updated is None:
                    updated = dict(current)
                old = current.get(skill_id, 0)
                updated[skill_id] = derived
                if derived > (old or 0):
                    logger.info("[LEVEL-UP] fighter=%s skill=%s %s -> %s", fighter_id, skill_id, old, derived)
        if updated is not None:
            levels = levels if levels is not None else dict(state.levels)
            levels[fighter_id] = updated

    if levels is None:
        return state
    return replace(state, levels=levels)


def enforce_xp_floor(state: FighterState) -> FighterState:
    """For every level > 0, raise ledger XP to that level's threshold when below."""
    ledger: Optional[LedgerMap] = None
    for fighter_id, fighter_levels in state.levels.items():
        current = state.xp.get(fighter_id, {})
        updated = None
        for skill_id, level in fighter_levels.items():
            level = clamp_level(level)
            if level <= 0:
                continue
            min_xp = xp_threshold_for_level(level)
            xp = _as_number(current.get(skill_id, 0))
            if xp is None or xp < min_xp:
                if updated is None:
                    updated = dict(current)
                updated[skill_id] = min_xp
        if updated is not None:
            ledger = ledger if ledger is not None else dict(state.xp)
            ledger[fighter_id] = updated
            logger.debug("[SYNC] raised XP floor fighter=%s", fighter_id)

    if ledger is None:
        return state
    return replace(state, xp=ledger)


def reconcile(
    state: FighterState,
    changed: Iterable[str],
    skill_ids: Iterable[str] = (),
    fighter_ids: Iterable[str] = (),
) -> tuple[FighterState, int]:
    """
    Run the passes implied by *changed* until nothing moves.

    Returns (new_state, rounds_with_writes). A consistent state comes back as
    the same object with 0.
    """
    skill_ids = list(skill_ids)
    fighter_ids = list(fighter_ids)
    pending = set(changed)
    writes = 0

    for _ in range(MAX_ROUNDS):
        if not pending:
            break
        step, pending = pending, set()
        before = state

        if CHANGED_FIGHTERS in step:
            state = ensure_fighter_entries(state, fighter_ids)
        if CHANGED_TREE in step:
            state = ensure_skill_entries(state, skill_ids)
        if state is not before:
            step |= {CHANGED_LEVELS, CHANGED_XP}

        if CHANGED_LEVELS in step:
            floored = enforce_xp_floor(state)
            if floored is not state:
                pending.add(CHANGED_XP)
            state = floored

        if CHANGED_XP in step:
            synced = sync_levels_from_xp(state)
            if synced is not state:
                pending.add(CHANGED_LEVELS)
            state = synced

        if state is not before:
            writes += 1
    else:
        if pending:
            logger.warning("[SYNC] did not settle after %s rounds (pending=%s)", MAX_ROUNDS, sorted(pending))

    return state, writes


# ---------------------------------------------------------------------------
# OPERATIONS
# ---------------------------------------------------------------------------

def set_fighter_level(state: FighterState, fighter_id: str, skill_id: str, level) -> FighterState:
    """Manual level override; the ledger is raised to justify it."""
    level = clamp_level(level)
    current = state.levels.get(fighter_id, {})
    if current.get(skill_id) == level:
        return state
    levels = {**state.levels, fighter_id: {**current, skill_id: level}}
    new_state, _ = reconcile(replace(state, levels=levels), [CHANGED_LEVELS])
    return new_state


def set_skill_assigned(state: FighterState, fighter_id: str, skill_id: str, assigned: bool) -> FighterState:
    current = state.skills.get(fighter_id, {})
    if current.get(skill_id) == bool(assigned):
        return state
    return replace(state, skills={**state.skills, fighter_id: {**current, skill_id: bool(assigned)}})


def add_fighter(
    state: FighterState,
    fighters: list[Fighter],
    name: str,
    skill_ids: Iterable[str],
    initial_levels: Optional[Mapping[str, int]] = None,
    **meta,
) -> tuple[list[Fighter], FighterState, Fighter]:
    """Create a fighter with a full level map and a ledger seeded at each level's threshold."""
    initial_levels = initial_levels or {}
    unknown = set(meta) - FIGHTER_META_FIELDS
    if unknown:
        raise TypeError(f"unknown fighter fields: {sorted(unknown)}")

    fighter = Fighter(id=generate_id("fighter"), name=name, **meta)
    levels: dict[str, int] = {}
    ledger: dict[str, int] = {}
    for skill_id in skill_ids:
        level = clamp_level(initial_levels.get(skill_id, 0))
        levels[skill_id] = level
        ledger[skill_id] = xp_threshold_for_level(level)

    new_state = replace(
        state,
        levels={**state.levels, fighter.id: levels},
        xp={**state.xp, fighter.id: ledger},
    )
    logger.info("[FIGHTER] added id=%s name=%r skills=%s", fighter.id, name, len(levels))
    return [*fighters, fighter], new_state, fighter


def delete_fighter(
    state: FighterState,
    fighters: list[Fighter],
    fighter_id: str,
    on_remove_assignments: Optional[Callable[[str], None]] = None,
) -> tuple[list[Fighter], FighterState, Optional[UndoAction]]:
    """Cascade delete across levels, ledger and assignment flags."""
    fighter = next((f for f in fighters if f.id == fighter_id), None)

    action = None
    if fighter is not None:
        action = UndoAction(
            type=DELETE_FIGHTER,
            description=f'Deleted fighter "{fighter.callsign or fighter.name}"',
            data={
                "fighter": copy.deepcopy(fighter),
                "levels": copy.deepcopy(state.levels.get(fighter_id)),
                "xp": copy.deepcopy(state.xp.get(fighter_id)),
                "skills": copy.deepcopy(state.skills.get(fighter_id)),
            },
        )

    new_state = FighterState(
        levels={k: v for k, v in state.levels.items() if k != fighter_id},
        xp={k: v for k, v in state.xp.items() if k != fighter_id},
        skills={k: v for k, v in state.skills.items() if k != fighter_id},
    )
    if on_remove_assignments is not None:
        on_remove_assignments(fighter_id)

    logger.info("[FIGHTER] deleted id=%s", fighter_id)
    return [f for f in fighters if f.id != fighter_id], new_state, action


def restore_fighter(
    state: FighterState, fighters: list[Fighter], action: UndoAction
) -> tuple[list[Fighter], FighterState]:
    """Put back what delete_fighter captured (the caller re-adds task assignments, if any)."""
    fighter: Fighter = action.data["fighter"]
    if any(f.id == fighter.id for f in fighters):
        return fighters, state
    new_state = FighterState(
        levels={**state.levels, fighter.id: dict(action.data.get("levels") or {})},
        xp={**state.xp, fighter.id: dict(action.data.get("xp") or {})},
        skills={**state.skills, fighter.id: dict(action.data.get("skills") or {})},
    )
    return [*fighters, fighter], new_state


def merge_approved_xp(
    ledger: LedgerMap,
    assignees: Iterable[Assignee],
    approved: Mapping[str, Mapping[str, int]],
) -> LedgerMap:
    """
    Union-merge approved XP into the ledger.

    Per line: new = max(0, current - previously_approved + approved), so
    re-approving a work item replaces its earlier award instead of adding twice.
    Lines missing from *approved* fall back to their suggested XP.
    """
    nxt = dict(ledger)
    for assignee in assignees:
        fighter_ledger = dict(nxt.get(assignee.fighter_id, {}))
        for line in assignee.skills:
            previous = normalize_xp(line.xp_approved)
            granted = normalize_xp(approved.get(assignee.fighter_id, {}).get(line.skill_id, line.xp_suggested))
            current = normalize_xp(_as_number(fighter_ledger.get(line.skill_id, 0)))
            fighter_ledger[line.skill_id] = max(0, current - previous + granted)
        nxt[assignee.fighter_id] = fighter_ledger
    return nxt

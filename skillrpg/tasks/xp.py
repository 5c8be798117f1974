"""
XP award calculator.

    award = round(base[difficulty] * clamp(1 + novice + challenge + quality) * dr(repetition_count))

The anti-exploit factor here is the local quota guard. The window-based
repetition factor (tasks.similarity) is a separate layer; see
tasks.suggest for how the two are stacked.
"""
from skillrpg.levels.leveling import normalize_xp

BASE_XP_BY_DIFFICULTY: dict[int, int] = {
    1: 5,
    2: 10,
    3: 15,
    4: 20,
    5: 25,
}

NOVICE_BOOST = 0.2
# Fighters at or below this level on a skill get the novice boost
NOVICE_MAX_LEVEL = 1

MIN_MODIFIER = 0.7
MAX_MODIFIER = 1.4


def clamp_difficulty(difficulty) -> int:
    try:
        value = int(difficulty)
    except (TypeError, ValueError):
        return 1
    return max(1, min(5, value))


def clamp_modifier(mod: float, min_mod: float = MIN_MODIFIER, max_mod: float = MAX_MODIFIER) -> float:
    return max(min_mod, min(max_mod, mod))


def diminishing_returns(
    count_within_window: int,
    free_quota: int = 3,
    step: float = 0.1,
    min_factor: float = 0.5,
) -> float:
    """1.0 up to the free quota, then linear decay by *step*, floored at *min_factor*."""
    if count_within_window <= free_quota:
        return 1.0
    penalty = (count_within_window - free_quota) * step
    return max(min_factor, 1 - penalty)


def is_novice(level) -> bool:
    try:
        return int(level) <= NOVICE_MAX_LEVEL
    except (TypeError, ValueError):
        return True


def compute_suggested_xp(
    difficulty: int,
    is_novice: bool = False,
    challenge: float = 0,
    quality_adj: float = 0,
    repetition_count: int = 1,
) -> int:
    """Suggested (not yet approved) XP for one fighter/skill line."""
    base = BASE_XP_BY_DIFFICULTY[clamp_difficulty(difficulty)]
    novice_boost = NOVICE_BOOST if is_novice else 0
    mod = clamp_modifier(1 + novice_boost + challenge + quality_adj)
    anti_exploit = diminishing_returns(repetition_count)
    return normalize_xp(base * mod * anti_exploit)

"""
XP <-> level lookup.
Core rules:
  - Levels run 0..10; level 0 means "not assigned / no progress"
  - Index = level, value = minimum cumulative XP required for that level
  - level_from_xp is a floor: highest level whose threshold is <= xp
"""
import math

MAX_LEVEL = 10

XP_THRESHOLDS: tuple[int, ...] = (
    0,     # 0
    40,    # 1
    120,   # 2
    240,   # 3
    400,   # 4
    600,   # 5
    900,   # 6
    1300,  # 7
    1800,  # 8
    2400,  # 9
    3000,  # 10
)


def xp_threshold_for_level(level) -> int:
    """Minimum XP for *level*. Anything outside 0..10 maps to 0."""
    if isinstance(level, bool) or not isinstance(level, int):
        return 0
    if level < 0 or level > MAX_LEVEL:
        return 0
    return XP_THRESHOLDS[level]


def level_from_xp(xp) -> int:
    """Highest level reached with *xp*. Negative or non-finite XP counts as 0."""
    try:
        value = float(xp)
    except (TypeError, ValueError, OverflowError):
        return 0
    if not math.isfinite(value):
        return 0

    level = 0
    for lvl, threshold in enumerate(XP_THRESHOLDS):
        if value >= threshold:
            level = lvl
    return level


def clamp_level(level) -> int:
    """Coerce a stored/user-supplied level into 0..10."""
    try:
        value = int(level)
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(0, min(MAX_LEVEL, value))


def normalize_xp(xp) -> int:
    """Non-negative integer XP; junk becomes 0."""
    try:
        value = float(xp)
    except (TypeError, ValueError, OverflowError):
        return 0
    if not math.isfinite(value):
        return 0
    return max(0, round_half_up(value))


def round_half_up(value: float) -> int:
    """Round halves up: 2.5 -> 3, -2.5 -> -2."""
    return int(math.floor(value + 0.5))

import math

from skillrpg.levels.leveling import (
    XP_THRESHOLDS,
    clamp_level,
    level_from_xp,
    normalize_xp,
    xp_threshold_for_level,
)


def test_threshold_roundtrip_for_every_level():
    for level in range(0, 11):
        assert level_from_xp(xp_threshold_for_level(level)) == level


def test_level_is_monotonic_in_xp():
    previous = 0
    for xp in range(0, 3200, 7):
        level = level_from_xp(xp)
        assert level >= previous
        previous = level


def test_level_is_floor_between_thresholds():
    assert level_from_xp(39) == 0
    assert level_from_xp(40) == 1
    assert level_from_xp(399) == 3
    assert level_from_xp(400) == 4
    assert level_from_xp(10_000) == 10


def test_thresholds_strictly_increasing():
    assert XP_THRESHOLDS[0] == 0
    assert all(a < b for a, b in zip(XP_THRESHOLDS, XP_THRESHOLDS[1:]))


def test_out_of_range_levels_fall_back_to_zero():
    assert xp_threshold_for_level(-1) == 0
    assert xp_threshold_for_level(11) == 0
    assert xp_threshold_for_level(None) == 0
    assert xp_threshold_for_level(True) == 0


def test_bad_xp_is_treated_as_zero():
    assert level_from_xp(-50) == 0
    assert level_from_xp(math.nan) == 0
    assert level_from_xp(math.inf) == 0
    assert level_from_xp("junk") == 0


def test_clamp_and_normalize():
    assert clamp_level(42) == 10
    assert clamp_level(-3) == 0
    assert clamp_level("x") == 0
    assert normalize_xp(-4.2) == 0
    assert normalize_xp(14.5) == 15
    assert normalize_xp(float("nan")) == 0


def test_oversized_integers_count_as_zero():
    huge = 10 ** 400
    assert level_from_xp(huge) == 0
    assert normalize_xp(huge) == 0

import math

from skillrpg.core.undo import DELETE_FIGHTER
from skillrpg.fighters import sync
from skillrpg.fighters.models import Fighter
from skillrpg.fighters.sync import FighterState
from skillrpg.tasks.models import Assignee, AssigneeSkill


def test_manual_level_raises_xp_to_threshold():
    state = FighterState(levels={"f1": {"s1": 0}}, xp={"f1": {"s1": 50}})
    new_state = sync.set_fighter_level(state, "f1", "s1", 4)
    assert new_state.xp["f1"]["s1"] == 400
    assert new_state.levels["f1"]["s1"] == 4


def test_manual_level_never_lowers_existing_xp():
    state = FighterState(levels={"f1": {"s1": 0}}, xp={"f1": {"s1": 500}})
    new_state = sync.set_fighter_level(state, "f1", "s1", 4)
    assert new_state.xp["f1"]["s1"] == 500
    assert new_state.levels["f1"]["s1"] == 4


def test_manual_level_is_clamped():
    state = FighterState(levels={"f1": {}}, xp={"f1": {}})
    assert sync.set_fighter_level(state, "f1", "s1", 99).levels["f1"]["s1"] == 10


def test_xp_change_recomputes_levels():
    state = FighterState(levels={"f1": {"s1": 1, "s2": 0}}, xp={"f1": {"s1": 130, "s2": 0}})
    new_state, writes = sync.reconcile(state, [sync.CHANGED_XP])
    assert new_state.levels["f1"] == {"s1": 2, "s2": 0}
    assert writes == 1


def test_non_numeric_xp_is_raised_to_floor():
    state = FighterState(levels={"f1": {"s1": 2}}, xp={"f1": {"s1": "junk"}})
    assert sync.enforce_xp_floor(state).xp["f1"]["s1"] == 120


def test_passes_are_idempotent_on_consistent_state():
    state = FighterState(
        levels={"f1": {"s1": 3, "s2": 0}},
        xp={"f1": {"s1": 250, "s2": 0}},
        skills={"f1": {"s1": True}},
    )
    assert sync.sync_levels_from_xp(state) is state
    assert sync.enforce_xp_floor(state) is state
    assert sync.ensure_skill_entries(state, ["s1", "s2"]) is state
    assert sync.ensure_fighter_entries(state, ["f1"]) is state

    everything = [sync.CHANGED_TREE, sync.CHANGED_FIGHTERS, sync.CHANGED_LEVELS, sync.CHANGED_XP]
    again, writes = sync.reconcile(state, everything, skill_ids=["s1", "s2"], fighter_ids=["f1"])
    assert again is state
    assert writes == 0


def test_reconcile_settles_and_then_stays_put():
    state = FighterState(levels={"f1": {"s1": 4}}, xp={"f1": {"s1": 10}})
    settled, _ = sync.reconcile(state, [sync.CHANGED_LEVELS, sync.CHANGED_XP])
    assert settled.xp["f1"]["s1"] == 400
    assert settled.levels["f1"]["s1"] == 4
    again, writes = sync.reconcile(settled, [sync.CHANGED_LEVELS, sync.CHANGED_XP])
    assert again is settled and writes == 0


def test_new_skill_is_added_to_every_fighter():
    state = FighterState(levels={"f1": {"s1": 2}, "f2": {}}, xp={"f1": {"s1": 120}, "f2": {}})
    new_state = sync.ensure_skill_entries(state, ["s1", "s2"])
    assert new_state.levels == {"f1": {"s1": 2, "s2": 0}, "f2": {"s1": 0, "s2": 0}}
    assert new_state.xp == {"f1": {"s1": 120, "s2": 0}, "f2": {"s1": 0, "s2": 0}}


def test_orphaned_entries_are_kept():
    state = FighterState(levels={"f1": {"gone": 3}}, xp={"f1": {"gone": 240}})
    new_state, _ = sync.reconcile(state, [sync.CHANGED_TREE], skill_ids=["s1"])
    assert new_state.levels["f1"]["gone"] == 3
    assert new_state.xp["f1"]["gone"] == 240


def test_add_fighter_seeds_levels_and_xp():
    fighters, state, fighter = sync.add_fighter(
        FighterState(), [], "Ivan", ["s1", "s2"], {"s1": 2}, callsign="Hawk", unit="Alpha"
    )
    assert fighters == [fighter]
    assert fighter.callsign == "Hawk"
    assert state.levels[fighter.id] == {"s1": 2, "s2": 0}
    assert state.xp[fighter.id] == {"s1": 120, "s2": 0}


def test_delete_fighter_cascades_and_notifies():
    fighter = Fighter(id="f1", name="Ivan", callsign="Hawk")
    state = FighterState(
        levels={"f1": {"s1": 1}, "f2": {"s1": 0}},
        xp={"f1": {"s1": 40}, "f2": {"s1": 0}},
        skills={"f1": {"s1": True}},
    )
    removed = []
    fighters, new_state, action = sync.delete_fighter(state, [fighter], "f1", removed.append)

    assert fighters == []
    assert "f1" not in new_state.levels and "f1" not in new_state.xp and "f1" not in new_state.skills
    assert "f2" in new_state.levels
    assert removed == ["f1"]
    assert action.type == DELETE_FIGHTER
    assert action.data["xp"] == {"s1": 40}
    assert "Hawk" in action.description

    restored_fighters, restored = sync.restore_fighter(new_state, fighters, action)
    assert restored_fighters == [fighter]
    assert restored.xp["f1"] == {"s1": 40}


def test_assignment_flags_are_independent_of_levels():
    state = FighterState(levels={"f1": {"s1": 0}}, xp={"f1": {"s1": 0}})
    new_state = sync.set_skill_assigned(state, "f1", "s1", True)
    assert new_state.skills == {"f1": {"s1": True}}
    assert new_state.levels["f1"]["s1"] == 0
    assert sync.set_skill_assigned(new_state, "f1", "s1", True) is new_state


def test_merge_approved_xp_replaces_previous_award():
    ledger = {"f1": {"s1": 100}}
    line = AssigneeSkill("s1", "c1", xp_suggested=20)
    merged = sync.merge_approved_xp(ledger, [Assignee("f1", [line])], {})
    assert merged == {"f1": {"s1": 120}}
    assert ledger == {"f1": {"s1": 100}}

    line.xp_approved = 20
    remerged = sync.merge_approved_xp(merged, [Assignee("f1", [line])], {"f1": {"s1": 30}})
    assert remerged["f1"]["s1"] == 130


def test_merge_rounds_fractional_awards():
    line = [Assignee("f1", [AssigneeSkill("s1", "c1", 15)])]
    assert sync.merge_approved_xp({"f1": {"s1": 0}}, line, {"f1": {"s1": 12.9}}) == {"f1": {"s1": 13}}
    assert sync.merge_approved_xp({"f1": {"s1": 0}}, line, {"f1": {"s1": 12.4}}) == {"f1": {"s1": 12}}


def test_merge_treats_non_finite_awards_as_zero():
    line = [Assignee("f1", [AssigneeSkill("s1", "c1", 15)])]
    for bad in (math.nan, math.inf, -math.inf, "junk", None):
        assert sync.merge_approved_xp({"f1": {"s1": 100}}, line, {"f1": {"s1": bad}}) == {"f1": {"s1": 100}}

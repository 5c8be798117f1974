from skillrpg.core.undo import DELETE_CATEGORY, DELETE_SKILL, UndoAction, UndoManager
from skillrpg.fighters.models import Fighter
from skillrpg.skills import tree as tree_ops
from skillrpg.skills.seed import build_seed_tree
from skillrpg.skills.stats import NO_UNIT, build_skill_usage, calculate_skill_stats


def test_lookups_on_seed_tree():
    tree = build_seed_tree()
    assert tree_ops.all_skill_ids(tree) == ["skill_recon", "skill_comms", "skill_first_aid"]
    assert tree_ops.skill_category_index(tree)["skill_first_aid"] == "cat_medical"
    category, skill = tree_ops.find_skill(tree, "skill_comms")
    assert category.id == "cat_tactical"
    assert skill.name == "Communications"
    assert tree_ops.find_skill(tree, "nope") == (None, None)


def test_add_skill_uses_five_level_template():
    tree = build_seed_tree()
    nxt, skill = tree_ops.add_skill(tree, "cat_medical", "Evacuation")
    assert [lvl.title for lvl in skill.levels] == [f"Level {n}" for n in range(1, 6)]
    assert skill.id in tree_ops.all_skill_ids(nxt)
    assert skill.id not in tree_ops.all_skill_ids(tree)

    same, missing = tree_ops.add_skill(tree, "cat_unknown", "Ghost")
    assert same is tree
    assert missing is None


def test_delete_and_restore_skill():
    tree = build_seed_tree()
    nxt, action = tree_ops.delete_skill(tree, "skill_recon")
    assert action.type == DELETE_SKILL
    assert action.data["categoryId"] == "cat_tactical"
    assert "skill_recon" not in tree_ops.all_skill_ids(nxt)

    restored = tree_ops.restore_skill(nxt, action.data["skill"], action.data["categoryId"])
    assert "skill_recon" in tree_ops.all_skill_ids(restored)
    assert tree_ops.restore_skill(restored, action.data["skill"], "cat_tactical") is restored
    assert tree_ops.delete_skill(tree, "nope") == (tree, None)


def test_delete_and_restore_category():
    tree = build_seed_tree()
    nxt, action = tree_ops.delete_category(tree, "cat_tactical")
    assert action.type == DELETE_CATEGORY
    assert "(2 skills)" in action.description
    assert tree_ops.all_skill_ids(nxt) == ["skill_first_aid"]

    restored = tree_ops.restore_category(nxt, action.data["category"])
    assert set(tree_ops.all_skill_ids(restored)) == set(tree_ops.all_skill_ids(tree))


def test_move_rename_archive_toggle():
    tree = build_seed_tree()
    moved = tree_ops.move_skill_to_category(tree, "skill_recon", "cat_medical")
    assert tree_ops.skill_category_index(moved)["skill_recon"] == "cat_medical"
    assert tree_ops.move_skill_to_category(tree, "skill_recon", "nope") is tree

    renamed = tree_ops.rename_category(tree, "cat_medical", "Medicine")
    assert tree_ops.find_category(renamed, "cat_medical").name == "Medicine"
    assert tree_ops.find_category(tree, "cat_medical").name == "Medical"

    archived = tree_ops.set_skill_archived(tree, "skill_comms", True)
    assert tree_ops.find_skill(archived, "skill_comms")[1].is_archived
    assert tree_ops.set_skill_archived(archived, "skill_comms", True) is archived

    toggled = tree_ops.toggle_checklist_item(tree, "skill_recon", "skill_recon_l1_1")
    item = tree_ops.find_skill(toggled, "skill_recon")[1].levels[0].tasks[0]
    assert item.done is True
    assert tree_ops.toggle_checklist_item(tree, "skill_recon", "missing") is tree


def test_undo_manager_is_bounded_lifo():
    manager = UndoManager(max_size=2)
    assert manager.pop() is None
    for n in range(3):
        manager.push(UndoAction(type=DELETE_SKILL, description=f"#{n}", data={}))
    assert manager.size == 2
    assert manager.peek().description == "#2"
    assert manager.pop().description == "#2"
    assert manager.pop().description == "#1"
    assert manager.pop() is None


def _fighters():
    return [
        Fighter(id="f1", name="Ivan", unit="Alpha"),
        Fighter(id="f2", name="Petro", unit="Alpha"),
        Fighter(id="f3", name="Oleh"),
        Fighter(id="f4", name="Taras", unit="Bravo"),
    ]


def test_calculate_skill_stats():
    levels = {
        "f1": {"s1": 2},
        "f2": {"s1": 5},
        "f3": {"s1": 3},
        "f4": {"s1": 0},
    }
    stats = calculate_skill_stats("s1", _fighters(), levels)
    assert [(f.id, lvl) for f, lvl in stats.fighters] == [("f2", 5), ("f3", 3), ("f1", 2)]
    assert stats.count == 3
    assert stats.average == 3.3
    assert stats.by_unit == {"Alpha": 2, NO_UNIT: 1}


def test_calculate_skill_stats_with_no_holders():
    stats = calculate_skill_stats("s9", _fighters(), {})
    assert stats.count == 0
    assert stats.average == 0.0
    assert stats.fighters == []


def test_build_skill_usage():
    levels = {"f1": {"s1": 2, "s2": 0}, "f2": {"s1": 4}, "f4": {"s2": 1}}
    usage = build_skill_usage(_fighters(), levels)
    assert (usage["s1"].count, usage["s1"].max_level) == (2, 4)
    assert (usage["s2"].count, usage["s2"].max_level) == (1, 1)

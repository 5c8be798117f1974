from skillrpg.skills.models import Category, ChecklistItem, Skill, SkillLevel
from skillrpg.skills.progress import Progress, get_category_progress, get_skill_progress


def _skill(skill_id, done_flags, archived=False):
    items = [ChecklistItem(id=f"{skill_id}_{i}", text=f"item {i}", done=d) for i, d in enumerate(done_flags)]
    levels = [SkillLevel(level=1, title="Level 1", tasks=items[:2]), SkillLevel(level=2, title="Level 2", tasks=items[2:])]
    return Skill(id=skill_id, name=skill_id, levels=levels, is_archived=archived)


def test_skill_progress_counts_across_levels():
    assert get_skill_progress(_skill("s1", [True, False, True])) == Progress(total=3, done=2, pct=67)


def test_skill_without_items_is_zero_percent():
    assert get_skill_progress(Skill(id="s", name="s")) == Progress(0, 0, 0)


def test_category_excludes_archived_skills():
    category = Category(id="c", name="c", skills=[
        _skill("s1", [True, True]),
        _skill("s2", [False, False, False, False], archived=True),
    ])
    assert get_category_progress(category) == Progress(total=2, done=2, pct=100)


def test_category_with_only_archived_skill():
    category = Category(id="c", name="c", skills=[_skill("s1", [True], archived=True)])
    assert get_category_progress(category) == Progress(total=0, done=0, pct=0)


def test_percentage_rounds_half_up():
    # 1/8 = 12.5%
    assert get_skill_progress(_skill("s1", [True] + [False] * 7)).pct == 13

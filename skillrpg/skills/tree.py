"""
Skill tree editing.

Every operation is copy-on-write: it returns a new SkillTree and leaves the
input untouched. Unknown ids are ignored and the input tree is returned.
Deletes also return the UndoAction capture payload (or None).
"""
from __future__ import annotations

import copy
from typing import Optional

from skillrpg.core.ids import generate_id, now_ms
from skillrpg.core.undo import DELETE_CATEGORY, DELETE_SKILL, UndoAction
from skillrpg.skills.models import Category, Skill, SkillLevel, SkillTree

TEMPLATE_LEVELS = (1, 2, 3, 4, 5)


# ---------------------------------------------------------------------------
# LOOKUPS
# ---------------------------------------------------------------------------

def all_skill_ids(tree: SkillTree) -> list[str]:
    """Every skill id in display order, without duplicates."""
    seen: dict[str, None] = {}
    for category in tree.categories:
        for skill in category.skills:
            seen.setdefault(skill.id, None)
    return list(seen)


def skill_category_index(tree: SkillTree) -> dict[str, str]:
    """skill id -> owning category id."""
    return {skill.id: category.id for category in tree.categories for skill in category.skills}


def find_skill(tree: SkillTree, skill_id: str) -> tuple[Optional[Category], Optional[Skill]]:
    for category in tree.categories:
        for skill in category.skills:
            if skill.id == skill_id:
                return category, skill
    return None, None


def find_category(tree: SkillTree, category_id: str) -> Optional[Category]:
    return next((c for c in tree.categories if c.id == category_id), None)


# ---------------------------------------------------------------------------
# SKILLS
# ---------------------------------------------------------------------------

def new_skill(name: str) -> Skill:
    return Skill(
        id=generate_id("skill"),
        name=name,
        description="",
        tags=[],
        is_archived=False,
        updated_at=now_ms(),
        levels=[SkillLevel(level=lvl, title=f"Level {lvl}") for lvl in TEMPLATE_LEVELS],
    )


def add_skill(tree: SkillTree, category_id: str, name: str) -> tuple[SkillTree, Optional[Skill]]:
    if find_category(tree, category_id) is None:
        return tree, None
    nxt = copy.deepcopy(tree)
    skill = new_skill(name)
    find_category(nxt, category_id).skills.append(skill)
    return nxt, skill


def update_skill(tree: SkillTree, updated: Skill) -> SkillTree:
    nxt = copy.deepcopy(tree)
    for category in nxt.categories:
        for index, skill in enumerate(category.skills):
            if skill.id == updated.id:
                replacement = copy.deepcopy(updated)
                replacement.updated_at = now_ms()
                category.skills[index] = replacement
                return nxt
    return tree


def delete_skill(tree: SkillTree, skill_id: str) -> tuple[SkillTree, Optional[UndoAction]]:
    category, skill = find_skill(tree, skill_id)
    if skill is None:
        return tree, None

    nxt = copy.deepcopy(tree)
    target = find_category(nxt, category.id)
    target.skills = [s for s in target.skills if s.id != skill_id]

    action = UndoAction(
        type=DELETE_SKILL,
        description=f'Deleted skill "{skill.name}"',
        data={"skill": copy.deepcopy(skill), "categoryId": category.id},
    )
    return nxt, action


def move_skill_to_category(tree: SkillTree, skill_id: str, target_category_id: str) -> SkillTree:
    source, skill = find_skill(tree, skill_id)
    if skill is None or find_category(tree, target_category_id) is None:
        return tree
    nxt = copy.deepcopy(tree)
    src = find_category(nxt, source.id)
    moved = next(s for s in src.skills if s.id == skill_id)
    src.skills.remove(moved)
    find_category(nxt, target_category_id).skills.append(moved)
    return nxt


def restore_skill(tree: SkillTree, skill: Skill, category_id: str) -> SkillTree:
    category = find_category(tree, category_id)
    if category is None or any(s.id == skill.id for s in category.skills):
        return tree
    nxt = copy.deepcopy(tree)
    find_category(nxt, category_id).skills.append(copy.deepcopy(skill))
    return nxt


def set_skill_archived(tree: SkillTree, skill_id: str, archived: bool) -> SkillTree:
    _, skill = find_skill(tree, skill_id)
    if skill is None or skill.is_archived == archived:
        return tree
    updated = copy.deepcopy(skill)
    updated.is_archived = archived
    return update_skill(tree, updated)


def toggle_checklist_item(tree: SkillTree, skill_id: str, item_id: str) -> SkillTree:
    _, skill = find_skill(tree, skill_id)
    if skill is None:
        return tree
    updated = copy.deepcopy(skill)
    for level in updated.levels:
        for item in level.tasks:
            if item.id == item_id:
                item.done = not item.done
                return update_skill(tree, updated)
    return tree


# ---------------------------------------------------------------------------
# CATEGORIES
# ---------------------------------------------------------------------------

def add_category(tree: SkillTree, name: str) -> tuple[SkillTree, Category]:
    nxt = copy.deepcopy(tree)
    category = Category(id=generate_id("cat"), name=name, skills=[])
    nxt.categories.append(category)
    return nxt, category


def rename_category(tree: SkillTree, category_id: str, new_name: str) -> SkillTree:
    if find_category(tree, category_id) is None:
        return tree
    nxt = copy.deepcopy(tree)
    find_category(nxt, category_id).name = new_name
    return nxt


def delete_category(tree: SkillTree, category_id: str) -> tuple[SkillTree, Optional[UndoAction]]:
    category = find_category(tree, category_id)
    if category is None:
        return tree, None

    nxt = copy.deepcopy(tree)
    nxt.categories = [c for c in nxt.categories if c.id != category_id]

    action = UndoAction(
        type=DELETE_CATEGORY,
        description=f'Deleted category "{category.name}" ({len(category.skills)} skills)',
        data={"category": copy.deepcopy(category)},
    )
    return nxt, action


def restore_category(tree: SkillTree, category: Category) -> SkillTree:
    if find_category(tree, category.id) is not None:
        return tree
    nxt = copy.deepcopy(tree)
    nxt.categories.append(copy.deepcopy(category))
    return nxt

"""
Starter skill tree for new profiles.
"""
from skillrpg.skills.models import Category, ChecklistItem, Skill, SkillLevel, SkillTree


def _skill(skill_id: str, name: str, checklist: dict[int, list[str]]) -> Skill:
    levels = []
    for lvl in range(1, 6):
        items = [
            ChecklistItem(id=f"{skill_id}_l{lvl}_{i}", text=text)
            for i, text in enumerate(checklist.get(lvl, []), start=1)
        ]
        levels.append(SkillLevel(level=lvl, title=f"Level {lvl}", tasks=items))
    return Skill(id=skill_id, name=name, description="", levels=levels)


def build_seed_tree() -> SkillTree:
    return SkillTree(categories=[
        Category(id="cat_tactical", name="Tactical", skills=[
            _skill("skill_recon", "Reconnaissance", {
                1: ["Read a topographic map", "Report using SALUTE format"],
                2: ["Plan a patrol route"],
            }),
            _skill("skill_comms", "Communications", {
                1: ["Radio check procedure"],
                2: ["Set up a relay"],
            }),
        ]),
        Category(id="cat_medical", name="Medical", skills=[
            _skill("skill_first_aid", "First aid", {
                1: ["Apply a tourniquet", "Recovery position"],
                2: ["Wound packing"],
            }),
        ]),
    ])

"""
Application state for one profile.

SkillRpgState is the caller the engine expects: it loads whole values from
an injected ProfileStore, applies pure engine operations, runs the
synchronizer after every mutation. Nothing is persisted until save() is
called. The engine modules themselves hold no state.
"""
from __future__ import annotations

import logging
from typing import Iterable, Mapping, Optional

from skillrpg.core.undo import (
    DELETE_CATEGORY,
    DELETE_FIGHTER,
    DELETE_SKILL,
    DELETE_TASK,
    UndoAction,
    UndoManager,
)
from skillrpg.fighters import sync
from skillrpg.fighters.models import Fighter
from skillrpg.fighters.sync import FighterState
from skillrpg.skills import tree as tree_ops
from skillrpg.skills.models import SkillTree
from skillrpg.storage import validators
from skillrpg.storage.export import ExportData, export_to_json, import_from_json
from skillrpg.storage.repository import (
    FIGHTER_SKILLS_KEY,
    FIGHTERS_KEY,
    SKILL_LEVELS_KEY,
    TASKS_KEY,
    TREE_KEY,
    XP_KEY,
    ProfileStore,
)
from skillrpg.tasks import board
from skillrpg.tasks.models import WorkItem
from skillrpg.tasks.suggest import suggest_assignees, suggest_line_xp

logger = logging.getLogger(__name__)


class SkillRpgState:
    def __init__(self, store: ProfileStore, undo_manager: Optional[UndoManager] = None,
                 seed: Optional[SkillTree] = None):
        self.store = store
        self.undo_manager = undo_manager or UndoManager()
        self._seed = seed or SkillTree()
        self.load()

    # -----------------------------------------------------------------------
    # LOAD / SAVE
    # -----------------------------------------------------------------------

    def load(self) -> None:
        get = self.store.get
        self.tree: SkillTree = get(TREE_KEY, SkillTree.from_dict(self._seed.to_dict()),
                                   lambda d: validators.parse_skill_tree(d, SkillTree.from_dict(self._seed.to_dict())))
        self.fighters: list[Fighter] = get(FIGHTERS_KEY, [], lambda d: validators.parse_fighters(d, []))
        self.tasks: list[WorkItem] = get(TASKS_KEY, [], lambda d: validators.parse_work_items(d, []))
        self.fighter_state = FighterState(
            levels=get(SKILL_LEVELS_KEY, {}, lambda d: validators.parse_skill_levels(d, {})),
            xp=get(XP_KEY, {}, lambda d: validators.parse_xp_ledger(d, {})),
            skills=get(FIGHTER_SKILLS_KEY, {}, lambda d: validators.parse_fighter_skills(d, {})),
        )
        self._reconcile([sync.CHANGED_TREE, sync.CHANGED_FIGHTERS, sync.CHANGED_XP, sync.CHANGED_LEVELS])

    def save(self) -> bool:
        results = [
            self.store.set(TREE_KEY, self.tree.to_dict()),
            self.store.set(FIGHTERS_KEY, [f.to_dict() for f in self.fighters]),
            self.store.set(TASKS_KEY, [t.to_dict() for t in self.tasks]),
            self.store.set(SKILL_LEVELS_KEY, self.fighter_state.levels),
            self.store.set(XP_KEY, self.fighter_state.xp),
            self.store.set(FIGHTER_SKILLS_KEY, self.fighter_state.skills),
        ]
        return all(results)

    def _reconcile(self, changed: Iterable[str]) -> int:
        self.fighter_state, writes = sync.reconcile(
            self.fighter_state,
            changed,
            skill_ids=tree_ops.all_skill_ids(self.tree),
            fighter_ids=[f.id for f in self.fighters],
        )
        return writes

    # -----------------------------------------------------------------------
    # SKILL TREE
    # -----------------------------------------------------------------------

    def add_category(self, name: str):
        self.tree, category = tree_ops.add_category(self.tree, name)
        return category

    def add_skill(self, category_id: str, name: str):
        self.tree, skill = tree_ops.add_skill(self.tree, category_id, name)
        if skill is not None:
            self._reconcile([sync.CHANGED_TREE])
        return skill

    def delete_skill(self, skill_id: str) -> Optional[UndoAction]:
        self.tree, action = tree_ops.delete_skill(self.tree, skill_id)
        if action:
            self.undo_manager.push(action)
        return action

    def delete_category(self, category_id: str) -> Optional[UndoAction]:
        self.tree, action = tree_ops.delete_category(self.tree, category_id)
        if action:
            self.undo_manager.push(action)
        return action

    # -----------------------------------------------------------------------
    # FIGHTERS
    # -----------------------------------------------------------------------

    def add_fighter(self, name: str, initial_levels: Optional[Mapping[str, int]] = None, **meta) -> Fighter:
        self.fighters, self.fighter_state, fighter = sync.add_fighter(
            self.fighter_state, self.fighters, name, tree_ops.all_skill_ids(self.tree), initial_levels, **meta
        )
        self._reconcile([sync.CHANGED_LEVELS, sync.CHANGED_XP])
        return fighter

    def delete_fighter(self, fighter_id: str) -> Optional[UndoAction]:
        def strip(fid: str) -> None:
            self.tasks = board.remove_fighter_assignments(self.tasks, fid)

        self.fighters, self.fighter_state, action = sync.delete_fighter(
            self.fighter_state, self.fighters, fighter_id, on_remove_assignments=strip
        )
        if action:
            self.undo_manager.push(action)
        return action

    def set_level(self, fighter_id: str, skill_id: str, level) -> None:
        self.fighter_state = sync.set_fighter_level(self.fighter_state, fighter_id, skill_id, level)

    def set_assigned(self, fighter_id: str, skill_id: str, assigned: bool) -> None:
        self.fighter_state = sync.set_skill_assigned(self.fighter_state, fighter_id, skill_id, assigned)

    # -----------------------------------------------------------------------
    # TASKS
    # -----------------------------------------------------------------------

    def suggest_xp(self, fighter_id: str, skill_id: str, difficulty: int, title: str = "",
                   now: Optional[int] = None) -> int:
        return suggest_line_xp(self.tasks, self.fighter_state.levels, fighter_id, skill_id, difficulty, title, now=now)

    def create_task(self, title: str, difficulty: int, selection: Mapping[str, Iterable[str]],
                    description: Optional[str] = None, is_priority: bool = False,
                    now: Optional[int] = None) -> WorkItem:
        """Create a work item; *selection* maps fighter id -> skill ids to credit."""
        assignees = suggest_assignees(
            self.tasks,
            self.fighter_state.levels,
            selection,
            tree_ops.skill_category_index(self.tree),
            difficulty,
            title,
            now=now,
        )
        self.tasks, task = board.create_task(
            self.tasks, title, difficulty, assignees, description=description, is_priority=is_priority, now=now
        )
        return task

    def update_task_status(self, task_id: str, status, now: Optional[int] = None) -> None:
        self.tasks = board.update_task_status(self.tasks, task_id, status, now=now)

    def approve_task(self, task_id: str, approved: Optional[Mapping[str, Mapping[str, int]]] = None,
                     now: Optional[int] = None) -> None:
        self.tasks, ledger = board.approve_task(self.tasks, self.fighter_state.xp, task_id, approved, now=now)
        if ledger is not self.fighter_state.xp:
            self.fighter_state = FighterState(levels=self.fighter_state.levels, xp=ledger,
                                              skills=self.fighter_state.skills)
            self._reconcile([sync.CHANGED_XP])

    def delete_task(self, task_id: str) -> Optional[UndoAction]:
        self.tasks, action = board.delete_task(self.tasks, task_id)
        if action:
            self.undo_manager.push(action)
        return action

    # -----------------------------------------------------------------------
    # UNDO / EXPORT
    # -----------------------------------------------------------------------

    def undo(self) -> Optional[UndoAction]:
        """Re-apply the most recent delete capture."""
        action = self.undo_manager.pop()
        if action is None:
            return None
        if action.type == DELETE_FIGHTER:
            self.fighters, self.fighter_state = sync.restore_fighter(self.fighter_state, self.fighters, action)
            self._reconcile([sync.CHANGED_FIGHTERS, sync.CHANGED_TREE])
        elif action.type == DELETE_TASK:
            self.tasks = board.restore_deleted_task(self.tasks, action.data["task"])
        elif action.type == DELETE_SKILL:
            self.tree = tree_ops.restore_skill(self.tree, action.data["skill"], action.data["categoryId"])
            self._reconcile([sync.CHANGED_TREE])
        elif action.type == DELETE_CATEGORY:
            self.tree = tree_ops.restore_category(self.tree, action.data["category"])
            self._reconcile([sync.CHANGED_TREE])
        logger.info("[UNDO] %s", action.description)
        return action

    def export_json(self) -> str:
        return export_to_json(ExportData(
            tree=self.tree,
            fighters=self.fighters,
            fighter_skill_levels=self.fighter_state.levels,
            xp_ledger=self.fighter_state.xp,
            tasks=self.tasks,
        ))

    def import_json(self, json_string: str) -> bool:
        """Replace the profile with an export; assignment flags survive only for imported fighters."""
        data = import_from_json(json_string)
        if data is None:
            return False
        self.tree = data.tree
        self.fighters = data.fighters
        self.tasks = data.tasks
        fighter_ids = {f.id for f in data.fighters}
        skills = {fid: flags for fid, flags in self.fighter_state.skills.items() if fid in fighter_ids}
        self.fighter_state = FighterState(levels=data.fighter_skill_levels, xp=data.xp_ledger, skills=skills)
        self._reconcile([sync.CHANGED_TREE, sync.CHANGED_FIGHTERS, sync.CHANGED_XP, sync.CHANGED_LEVELS])
        return True

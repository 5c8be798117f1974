"""
Re-run the level/XP synchronizer over a stored profile.

This script:
1. Loads the profile's tree, fighters, levels and XP ledger
2. Adds missing skill entries and raises XP floors for manually-set levels
3. Recomputes levels from XP and saves everything back

Orphaned entries (skills no longer in the tree) are kept.

Usage:
    python scripts/resync_profile.py [profile]
"""
import logging
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from skillrpg.core import config
from skillrpg.db.base import log_database_info
from skillrpg.db.session import init_db, session_scope
from skillrpg.state import SkillRpgState
from skillrpg.storage.repository import SKILL_LEVELS_KEY, XP_KEY, ProfileStore


def resync_profile(profile: str) -> None:
    log_database_info()
    init_db()

    try:
        with session_scope() as db:
            store = ProfileStore(db, profile)
            before_levels = store.get(SKILL_LEVELS_KEY, {})
            before_xp = store.get(XP_KEY, {})

            state = SkillRpgState(store)  # load() reconciles
            print(f"Profile '{profile}': {len(state.fighters)} fighters, {len(state.tasks)} tasks", flush=True)

            changed_levels = state.fighter_state.levels != before_levels
            changed_xp = state.fighter_state.xp != before_xp
            if not (changed_levels or changed_xp):
                print("Already consistent, nothing to write.", flush=True)
                return

            if not state.save():
                raise RuntimeError("store rejected one or more values")
            print(f"✅ Resync complete (levels changed={changed_levels}, xp changed={changed_xp})", flush=True)

    except Exception as e:
        print(f"❌ Error during resync: {e}", flush=True)
        raise


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    resync_profile(sys.argv[1] if len(sys.argv) > 1 else config.DEFAULT_PROFILE)

"""
Seed a profile with the starter skill tree.

- Creates the store tables if they don't exist yet
- SAFE to run multiple times: an existing tree is left untouched
- Pass --force to overwrite the tree with the seed (fighters, XP and tasks are kept)

Usage:
    python scripts/seed_profile.py [profile] [--force]
"""
import logging
import sys
import os

# Add the parent directory to the path so we can import skillrpg modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from skillrpg.core import config
from skillrpg.db.base import log_database_info
from skillrpg.db.session import SessionLocal, init_db
from skillrpg.skills.seed import build_seed_tree
from skillrpg.storage.repository import TREE_KEY, ProfileStore, ensure_profile_exists


def seed_profile(profile: str, force: bool = False) -> bool:
    log_database_info()
    init_db()
    db = SessionLocal()

    try:
        ensure_profile_exists(db, profile)
        store = ProfileStore(db, profile)

        if store.get(TREE_KEY, None) is not None and not force:
            print(f"Profile '{profile}' already has a skill tree, skipping (use --force to overwrite).")
            return True

        ok = store.set(TREE_KEY, build_seed_tree().to_dict())
        if ok:
            print(f"✅ Seeded profile '{profile}'")
        else:
            print(f"❌ Failed to write skill tree for profile '{profile}'")
        return ok

    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    args = [a for a in sys.argv[1:] if not a.startswith("--")]
    name = args[0] if args else config.DEFAULT_PROFILE
    if not seed_profile(name, force="--force" in sys.argv):
        sys.exit(1)

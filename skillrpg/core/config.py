"""
Configuration constants for the engine and its persistence layer.
"""
import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file if it exists
env_path = Path(__file__).resolve().parent.parent.parent / '.env'
load_dotenv(dotenv_path=env_path)


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


# Profile used when nothing has been marked active in the store yet.
DEFAULT_PROFILE = os.getenv("SKILLRPG_PROFILE", "default").strip() or "default"

# Anti-exploit window: similar work inside this many days counts as repetition.
REPETITION_WINDOW_DAYS = _env_int("REPETITION_WINDOW_DAYS", 3)
REPETITION_FREE_QUOTA = _env_int("REPETITION_FREE_QUOTA", 3)
REPETITION_STEP = _env_float("REPETITION_STEP", 0.1)
REPETITION_MIN_FACTOR = _env_float("REPETITION_MIN_FACTOR", 0.5)

# Titles at or above this Jaccard score are treated as the same kind of task.
SIMILARITY_THRESHOLD = _env_float("SIMILARITY_THRESHOLD", 0.5)

UNDO_STACK_SIZE = _env_int("UNDO_STACK_SIZE", 10)

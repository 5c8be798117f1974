import secrets
import string
import time

_ALPHABET = string.ascii_lowercase + string.digits

DAY_MS = 86_400_000


def now_ms() -> int:
    """Current time as epoch milliseconds (the unit every stored timestamp uses)."""
    return int(time.time() * 1000)


def generate_id(prefix: str | None = None) -> str:
    """Unique id: <prefix>_<timestamp>_<random>."""
    random_part = "".join(secrets.choice(_ALPHABET) for _ in range(9))
    stamp = now_ms()
    return f"{prefix}_{stamp}_{random_part}" if prefix else f"{stamp}_{random_part}"

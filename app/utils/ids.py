"""Identifier helpers."""
import secrets
import string
import time

_BASE36 = string.digits + string.ascii_lowercase


def epoch_millis() -> int:
    return int(time.time() * 1000)


def random_suffix(length: int = 9) -> str:
    return "".join(secrets.choice(_BASE36) for _ in range(length))


def generate_id(prefix: str) -> str:
    """``<prefix>_<epoch ms>_<9 base36 chars>``, e.g. ``user_1700000000000_k3j9x0a1b``."""
    return f"{prefix}_{epoch_millis()}_{random_suffix()}"

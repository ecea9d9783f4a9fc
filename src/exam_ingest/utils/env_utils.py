"""Helpers for reading run settings from the environment and ``.env`` files."""

from __future__ import annotations

import os
from typing import Optional

from dotenv import load_dotenv

from .logger import debug_detail

TRUTHY = ("1", "true", "True", "yes", "on")


def load_env(path: str = ".env") -> bool:
    """Populate :data:`os.environ` from ``path`` without overriding existing values.

    Returns ``True`` when the file existed and was read.
    """
    if not path or not os.path.exists(path):
        debug_detail(f"No env file at {path or '<unset>'}")
        return False
    loaded = load_dotenv(path, override=False)
    debug_detail(f"Loaded environment defaults from {path}")
    return bool(loaded)


def env_str(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip() in TRUTHY


__all__ = ["load_env", "env_str", "env_flag"]

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    # Codec selection; empty means "infer from the file suffix"
    format: str | None

    # Persistence
    flush_on_write: bool
    replace_strategy: str
    fsync: bool

    # Output
    sort_keys: bool


def get_settings(env_file: str | None = None) -> Settings:
    """
    Read store defaults from FLATSTORE_* environment variables.

    When `env_file` is given it is loaded first with python-dotenv; variables
    already present in the environment win.
    """
    if env_file:
        load_dotenv(env_file)

    fmt = os.getenv("FLATSTORE_FORMAT", "").strip().lower() or None

    flush_on_write = _env_bool("FLATSTORE_FLUSH_ON_WRITE", False)
    replace_strategy = os.getenv("FLATSTORE_REPLACE_STRATEGY", "rename").strip().lower()

    # Turning this off trades crash durability for speed (tests, tmpfs).
    fsync = _env_bool("FLATSTORE_FSYNC", True)

    sort_keys = _env_bool("FLATSTORE_SORT_KEYS", True)

    return Settings(
        format=fmt,
        flush_on_write=flush_on_write,
        replace_strategy=replace_strategy,
        fsync=fsync,
        sort_keys=sort_keys,
    )

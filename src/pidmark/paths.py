"""Default locations for pidfiles and configuration."""

from __future__ import annotations

import os
from pathlib import Path

from platformdirs import user_config_dir, user_runtime_dir

APP_NAME = "pidmark"


def get_runtime_dir() -> Path:
    """Get the directory holding pidfiles (``$PIDMARK_RUNTIME_DIR`` overrides)."""
    override = os.environ.get("PIDMARK_RUNTIME_DIR")
    if override:
        return Path(override).resolve()
    return Path(user_runtime_dir(APP_NAME))


def get_config_path() -> Path:
    """Get the default config file (``$PIDMARK_CONFIG`` overrides)."""
    override = os.environ.get("PIDMARK_CONFIG")
    if override:
        return Path(override).resolve()
    return Path(user_config_dir(APP_NAME)) / "config.toml"


def default_pidfile_path(name: str) -> Path:
    """Get the pidfile path for a program called *name*."""
    if name in {"", ".", ".."} or "/" in name or "\\" in name:
        msg = f"Invalid pidfile name: {name!r}"
        raise ValueError(msg)
    return get_runtime_dir() / f"{name}.pid"


def ensure_runtime_dir() -> Path:
    """Create the runtime directory if needed and return it."""
    runtime_dir = get_runtime_dir()
    runtime_dir.mkdir(parents=True, exist_ok=True)
    return runtime_dir

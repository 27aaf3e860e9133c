"""Configuration loader for pidmark."""

from __future__ import annotations

import tomllib
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from pidmark.paths import APP_NAME, default_pidfile_path, get_config_path
from pidmark.pidfile import DEFAULT_LOCK_TIMEOUT_SECONDS


class PidfileConfig(BaseModel):
    """Pidfile settings."""

    path: Path | None = Field(
        default=None, description="Explicit pidfile path (None = derived from name)"
    )
    name: str = Field(default=APP_NAME, description="Program name used for the default path")
    allow_overwrite: bool = Field(
        default=False, description="Replace pidfiles left behind by dead processes"
    )
    lock_timeout_seconds: float = Field(
        default=DEFAULT_LOCK_TIMEOUT_SECONDS,
        description="Seconds to wait for the advisory lock on locked writes",
    )

    @field_validator("lock_timeout_seconds", mode="before")
    @classmethod
    def validate_lock_timeout_seconds(cls, value: object) -> float:
        """Coerce negative or non-numeric timeouts to the default."""
        match value:
            case bool():
                pass
            case int() | float() as seconds if seconds >= 0:
                return float(seconds)
            case _:
                pass
        return DEFAULT_LOCK_TIMEOUT_SECONDS

    def resolved_path(self) -> Path:
        if self.path is not None:
            return self.path.expanduser()
        return default_pidfile_path(self.name)


class PidmarkConfig(BaseModel):
    """Root configuration model."""

    pidfile: PidfileConfig = Field(default_factory=PidfileConfig)

    @classmethod
    def load(cls, config_path: Path | None = None) -> PidmarkConfig:
        """Load configuration from TOML file or use defaults."""
        if config_path is None:
            config_path = get_config_path()

        if config_path.exists():
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
            return cls.model_validate(data)

        return cls()

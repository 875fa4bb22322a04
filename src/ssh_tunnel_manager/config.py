"""Application configuration model."""

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

ENV_PREFIX = "SSH_TUNNEL_MANAGER_"

DEFAULT_SSH_CONFIG = Path("~/.ssh/config")


class AppConfig(BaseModel):
    """Runtime settings for the tunnel manager.

    There are no command-line flags; every field has a default and may be
    overridden through ``SSH_TUNNEL_MANAGER_<FIELD>`` environment variables.
    """

    model_config = ConfigDict(
        str_strip_whitespace=True, validate_assignment=True, extra="forbid"
    )

    ssh_binary: str = Field(
        default="ssh", min_length=1, description="ssh client executable"
    )
    ssh_config_path: Path = Field(
        default=DEFAULT_SSH_CONFIG, description="ssh client configuration file"
    )
    bind_address: str = Field(
        default="127.0.0.1", min_length=1, description="Local bind address"
    )
    log_capacity: int = Field(
        default=100, ge=1, le=10000, description="Log lines kept per tunnel"
    )
    visible_log_lines: int = Field(
        default=100, ge=1, description="Log lines rendered in the output pane"
    )
    connect_delay: float = Field(
        default=2.0, ge=0.0, le=30.0, description="Seconds to show connecting state"
    )
    log_level: str = Field(default="INFO", description="Application log level")
    log_file: Path | None = Field(default=None, description="Application log file")

    @field_validator("ssh_config_path", "log_file")
    @classmethod
    def expand_user(cls, v: Path | None) -> Path | None:
        """Expand ``~`` in configured paths."""
        return v.expanduser() if v is not None else None

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "AppConfig":
        """Build configuration from ``SSH_TUNNEL_MANAGER_*`` variables.

        Args:
            environ: Mapping to read from (defaults to ``os.environ``)

        Returns:
            Validated configuration
        """
        environ = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for name in cls.model_fields:
            raw = environ.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is not None and raw != "":
                values[name] = raw
        return cls(**values)

"""Common utilities and shared functionality."""

from .exceptions import (
    InputValidationError,
    ProcessError,
    SpawnFailedError,
    TunnelManagerError,
    TunnelNotFoundError,
    TunnelStartError,
)
from .logging import get_logger, setup_logging
from .utils import (
    MAX_PORT,
    MIN_PORT,
    random_tag,
    stamp_line,
    timestamp,
    validate_host,
    validate_non_empty_string,
    validate_port,
)

__all__ = [
    # Exceptions
    "TunnelManagerError",
    "ProcessError",
    "TunnelStartError",
    "SpawnFailedError",
    "TunnelNotFoundError",
    "InputValidationError",
    # Logging
    "get_logger",
    "setup_logging",
    # Utils
    "validate_port",
    "validate_host",
    "validate_non_empty_string",
    "timestamp",
    "stamp_line",
    "random_tag",
    "MIN_PORT",
    "MAX_PORT",
]

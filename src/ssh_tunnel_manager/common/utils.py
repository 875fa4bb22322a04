"""Utility functions for the SSH tunnel manager."""

import random
from datetime import datetime

from .exceptions import InputValidationError

# Port range constants
MIN_PORT = 1
MAX_PORT = 65535

LOG_TIME_FORMAT = "%H:%M:%S"

_TAG_ADJECTIVES = (
    "brave", "calm", "clever", "eager", "fancy", "gentle", "happy", "jolly",
    "keen", "lively", "lucky", "mellow", "nimble", "proud", "quiet", "rapid",
    "shiny", "silly", "sleepy", "swift", "tender", "witty", "zealous", "bold",
)

_TAG_NOUNS = (
    "badger", "beaver", "falcon", "ferret", "gecko", "heron", "koala", "lemur",
    "lynx", "marmot", "narwhal", "otter", "panda", "pelican", "puffin",
    "raccoon", "salmon", "sparrow", "tapir", "walrus", "wombat", "yak", "zebra",
)


def validate_port(port: int | str, port_name: str = "Port") -> int:
    """Validate a port number, accepting digit strings from text input.

    Args:
        port: Port number or string of digits
        port_name: Name of the port for error messages

    Returns:
        The port as an integer

    Raises:
        InputValidationError: If port is empty, not numeric or out of range
    """
    if isinstance(port, str):
        value = port.strip()
        if not value:
            raise InputValidationError(f"{port_name} cannot be empty")
        if not value.isdigit():
            raise InputValidationError(f"{port_name} must be a number")
        port = int(value)

    if isinstance(port, bool) or not isinstance(port, int):
        raise InputValidationError(
            f"{port_name} must be between {MIN_PORT} and {MAX_PORT}"
        )
    if not (MIN_PORT <= port <= MAX_PORT):
        raise InputValidationError(
            f"{port_name} must be between {MIN_PORT} and {MAX_PORT}"
        )
    return port


def validate_non_empty_string(value: str, field_name: str) -> str:
    """Validate that a string is not empty or only whitespace.

    Args:
        value: String value to validate
        field_name: Name of the field for error messages

    Returns:
        Stripped string value

    Raises:
        InputValidationError: If string is empty or only whitespace
    """
    if not value or not value.strip():
        raise InputValidationError(f"{field_name} cannot be empty")
    return value.strip()


def validate_host(host: str) -> str:
    """Validate an ssh destination (``user@host``, host or alias).

    ssh would read a leading ``-`` as an option, and whitespace would split
    the destination into several arguments.

    Returns:
        Stripped host

    Raises:
        InputValidationError: If host is empty, starts with '-' or has whitespace
    """
    host = validate_non_empty_string(host, "Host")
    if host.startswith("-"):
        raise InputValidationError("Host cannot start with '-'")
    if any(ch.isspace() for ch in host):
        raise InputValidationError("Host cannot contain whitespace")
    return host


def timestamp(now: datetime | None = None) -> str:
    """Format a wall-clock time with second resolution."""
    return (now or datetime.now()).strftime(LOG_TIME_FORMAT)


def stamp_line(line: str, now: datetime | None = None) -> str:
    """Prefix a log line with its capture time, e.g. ``[14:03:09] text``."""
    return f"[{timestamp(now)}] {line}"


def random_tag(rng: random.Random | None = None) -> str:
    """Generate a readable tag such as ``happy-otter`` for unnamed tunnels."""
    rng = rng or random
    return f"{rng.choice(_TAG_ADJECTIVES)}-{rng.choice(_TAG_NOUNS)}"

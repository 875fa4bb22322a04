"""Host directory backed by the ssh client configuration file."""

import re
from pathlib import Path

from .common.logging import get_logger
from .config import DEFAULT_SSH_CONFIG

logger = get_logger(__name__)

_HOST_RE = re.compile(r"^\s*Host\s+(.+)$", re.IGNORECASE)
_HOSTNAME_RE = re.compile(r"^\s*HostName\s+(.+)$", re.IGNORECASE)


def _is_pattern(value: str) -> bool:
    return "*" in value or "?" in value


def list_hosts(config_path: Path | str | None = None) -> list[str]:
    """List connection targets from an ssh config file.

    Every ``Host`` alias is listed. When the block carries a ``HostName``, an
    extra ``"<alias> <hostname>"`` entry follows so the user can pick either.

    Args:
        config_path: Path to the ssh config (defaults to ``~/.ssh/config``)

    Returns:
        Entries in file order, or an empty list if the file is unavailable
    """
    path = Path(config_path or DEFAULT_SSH_CONFIG).expanduser()
    try:
        lines = path.read_text(encoding="utf-8", errors="replace").splitlines()
    except OSError as e:
        logger.debug("ssh config not readable", path=str(path), error=str(e))
        return []

    entries: list[str] = []
    current_host = ""
    for line in lines:
        if match := _HOST_RE.match(line):
            current_host = match.group(1).strip()
            if current_host and not _is_pattern(current_host):
                entries.append(current_host)
            else:
                current_host = ""
        elif (match := _HOSTNAME_RE.match(line)) and current_host:
            hostname = match.group(1).strip()
            if hostname and not hostname.startswith("*"):
                entries.append(f"{current_host} {hostname}")

    logger.debug("Loaded host entries", path=str(path), count=len(entries))
    return entries


def extract_hostname(entry: str) -> str:
    """Return the connection target of a directory entry (its last field)."""
    parts = entry.split()
    if len(parts) >= 2:
        return parts[-1]
    return entry


def extract_all_hostnames(entry: str) -> list[str]:
    """Return every field of a multi-field entry, or an empty list otherwise."""
    parts = entry.split()
    if len(parts) <= 1:
        return []
    return parts

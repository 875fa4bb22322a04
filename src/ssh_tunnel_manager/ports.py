"""Local port probe."""

import errno
import shutil
import socket
import subprocess

from .common.logging import get_logger
from .common.utils import MAX_PORT, MIN_PORT

logger = get_logger(__name__)

SS_COMMAND = ("ss", "-tuln")


def _probe_with_ss(port: str) -> bool:
    output = subprocess.run(
        list(SS_COMMAND),
        capture_output=True,
        text=True,
        check=True,
        timeout=5.0,
    ).stdout
    return f":{port} " in output


def _probe_with_bind(port: str, host: str = "127.0.0.1") -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        try:
            sock.bind((host, int(port)))
        except OSError as e:
            return e.errno == errno.EADDRINUSE
    return False


def is_port_bound(port: int | str) -> bool:
    """Check whether a local TCP/UDP port is already listening.

    The listening-socket table is read with ``ss -tuln``. Hosts without
    ``ss`` fall back to a loopback bind probe.

    Args:
        port: Port number or digit string

    Returns:
        True if something already listens on the port
    """
    port = str(port).strip()
    if not port.isdigit() or not (MIN_PORT <= int(port) <= MAX_PORT):
        return False

    if shutil.which(SS_COMMAND[0]) is None:
        logger.debug("ss not available, probing with bind", port=port)
        return _probe_with_bind(port)

    try:
        bound = _probe_with_ss(port)
    except (OSError, subprocess.SubprocessError) as e:
        logger.warning("Port probe failed", port=port, error=str(e))
        return False

    logger.debug("Port probed", port=port, bound=bound)
    return bound

"""Process management for a single ssh forwarding client."""

import subprocess
from typing import IO

from ..common.exceptions import SpawnFailedError
from ..common.logging import get_logger

logger = get_logger(__name__)


def build_ssh_command(
    host: str,
    local_port: int,
    remote_port: int,
    verbose: bool = False,
    ssh_binary: str = "ssh",
    bind_address: str = "127.0.0.1",
) -> list[str]:
    """Build the argv for a local port forward.

    Args:
        host: Target host (``user@host``, bare host or ssh config alias)
        local_port: Port bound on ``bind_address``
        remote_port: Port reached as ``localhost`` on the remote side
        verbose: Add ``-v`` for ssh diagnostics
        ssh_binary: ssh client executable
        bind_address: Local address the forward listens on

    Returns:
        Command line suitable for ``subprocess.Popen``
    """
    args = [
        ssh_binary,
        "-N",
        "-L",
        f"{bind_address}:{local_port}:localhost:{remote_port}",
    ]
    if verbose:
        args.append("-v")
    args.append(host)
    return args


class SSHProcess:
    """Owns one ssh subprocess and its stderr pipe."""

    def __init__(self, command: list[str]):
        """Initialize SSHProcess with the command to run

        Args:
            command: Full argv, normally from ``build_ssh_command``
        """
        self.command = command
        self._process: subprocess.Popen[str] | None = None

    def start(self) -> None:
        """Spawn the ssh client with stderr piped

        Raises:
            SpawnFailedError: If the process or its stderr pipe cannot be created
        """
        logger.info("Starting ssh process", command=" ".join(self.command))
        try:
            process = subprocess.Popen(
                self.command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
                bufsize=1,
            )
        except (OSError, ValueError) as e:
            logger.error("Failed to start ssh process", error=str(e))
            raise SpawnFailedError(f"Failed to start ssh: {e}") from e

        if process.stderr is None:
            process.kill()
            raise SpawnFailedError("Failed to open ssh stderr pipe")

        self._process = process
        logger.info("ssh process started", pid=process.pid)

    @property
    def stderr(self) -> IO[str]:
        """Diagnostic stream of the running process."""
        if self._process is None or self._process.stderr is None:
            raise RuntimeError("ssh process has not been started")
        return self._process.stderr

    @property
    def pid(self) -> int | None:
        """Process ID if started"""
        if self._process is None:
            return None
        return self._process.pid

    def is_running(self) -> bool:
        """Check if process is currently running"""
        if self._process is None:
            return False
        return self._process.poll() is None

    def kill(self) -> None:
        """Force kill the process. ssh has no clean shutdown handshake."""
        if self._process is None:
            return
        if not self.is_running():
            logger.debug("Process already exited", pid=self._process.pid)
            return
        logger.info("Killing ssh process", pid=self._process.pid)
        try:
            self._process.kill()
        except ProcessLookupError:
            logger.debug("Process vanished before kill", pid=self._process.pid)

    def wait(self) -> int | None:
        """Reap the process and return its exit code."""
        if self._process is None:
            return None
        return self._process.wait()

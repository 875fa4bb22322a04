"""Tunnel supervisor for lifecycle management and log capture."""

from __future__ import annotations

import itertools
import threading
from collections.abc import Callable
from types import TracebackType
from typing import Literal

from ..common.exceptions import TunnelNotFoundError
from ..common.logging import get_logger
from ..common.utils import stamp_line
from ..config import AppConfig
from .models import Tunnel, TunnelRequest, TunnelSummary
from .process import SSHProcess, build_ssh_command

logger = get_logger(__name__)

TunnelListener = Callable[[int], None]


class TunnelSupervisor:
    """Owns every tunnel, its ssh process and its log capture worker.

    Public operations are meant for a single control thread. Capture workers
    only append to their own tunnel's log buffer and mark it inactive when
    the ssh stderr stream closes.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        listener: TunnelListener | None = None,
    ):
        """Initialize the supervisor.

        Args:
            config: Application settings (defaults used if None)
            listener: Called with a tunnel id after every log line and state
                change. May be called from capture worker threads.
        """
        self.config = config or AppConfig()
        self.listener = listener
        self._tunnels: dict[int, Tunnel] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()
        logger.info(
            "TunnelSupervisor initialized",
            ssh_binary=self.config.ssh_binary,
            log_capacity=self.config.log_capacity,
        )

    def start(self, request: TunnelRequest) -> int:
        """Launch an ssh local forward for ``request``.

        Args:
            request: Validated tunnel parameters

        Returns:
            The new tunnel id

        Raises:
            SpawnFailedError: If ssh could not be spawned; nothing is registered
        """
        command = build_ssh_command(
            host=request.host,
            local_port=request.local_port,
            remote_port=request.remote_port,
            verbose=request.verbose,
            ssh_binary=self.config.ssh_binary,
            bind_address=self.config.bind_address,
        )
        process = SSHProcess(command)
        process.start()

        with self._lock:
            tunnel_id = next(self._ids)
            tunnel = Tunnel(tunnel_id, request, process, self.config.log_capacity)
            self._tunnels[tunnel_id] = tunnel

        worker = threading.Thread(
            target=self._capture_logs,
            args=(tunnel,),
            name=f"tunnel-{tunnel_id}-logs",
            daemon=True,
        )
        tunnel.worker = worker
        worker.start()

        logger.info(
            "Tunnel started",
            tunnel_id=tunnel_id,
            tag=request.tag,
            host=request.host,
            local_port=request.local_port,
            remote_port=request.remote_port,
            pid=process.pid,
        )
        self._notify(tunnel_id)
        return tunnel_id

    def stop(self, tunnel_id: int) -> None:
        """Kill the tunnel's ssh process. Stopping an inactive tunnel is a no-op.

        Raises:
            TunnelNotFoundError: If the id is unknown
        """
        tunnel = self._get(tunnel_id)
        if not tunnel.active:
            logger.debug("Tunnel already inactive", tunnel_id=tunnel_id)
            return

        logger.info("Stopping tunnel", tunnel_id=tunnel_id, pid=tunnel.process.pid)
        tunnel.process.kill()
        tunnel.deactivate()
        self._notify(tunnel_id)

    def remove(self, tunnel_id: int) -> TunnelSummary:
        """Stop the tunnel if needed and forget it.

        The process is signalled but not waited for; its capture worker reaps
        it once stderr closes.

        Returns:
            Final snapshot of the removed tunnel

        Raises:
            TunnelNotFoundError: If the id is unknown
        """
        self.stop(tunnel_id)
        with self._lock:
            tunnel = self._tunnels.pop(tunnel_id, None)
        if tunnel is None:
            raise TunnelNotFoundError(tunnel_id)

        logger.info("Removed tunnel", tunnel_id=tunnel_id)
        self._notify(tunnel_id)
        return tunnel.summary()

    def list(self) -> list[TunnelSummary]:
        """Snapshot every tunnel in creation order."""
        with self._lock:
            tunnels = list(self._tunnels.values())
        return [tunnel.summary() for tunnel in tunnels]

    def get(self, tunnel_id: int) -> TunnelSummary:
        """Snapshot a single tunnel.

        Raises:
            TunnelNotFoundError: If the id is unknown
        """
        return self._get(tunnel_id).summary()

    def logs(self, tunnel_id: int, max_lines: int) -> list[str]:
        """Return up to ``max_lines`` most recent log lines, oldest first.

        Raises:
            TunnelNotFoundError: If the id is unknown
        """
        return self._get(tunnel_id).logs.tail(max_lines)

    def wait_for_logs(
        self, tunnel_id: int, count: int, timeout: float | None = None
    ) -> bool:
        """Block until the tunnel has received ``count`` log lines in total.

        The seed "Tunnel started" line counts as the first one.

        Returns:
            True if reached, False on timeout
        """
        return self._get(tunnel_id).logs.wait_for(count, timeout)

    @property
    def active_count(self) -> int:
        """Number of tunnels whose ssh process is considered alive."""
        with self._lock:
            tunnels = list(self._tunnels.values())
        return sum(1 for tunnel in tunnels if tunnel.active)

    def shutdown_all(self) -> None:
        """Signal every active tunnel. Does not wait for the processes to exit."""
        with self._lock:
            tunnels = list(self._tunnels.values())

        stopped = 0
        for tunnel in tunnels:
            if not tunnel.active:
                continue
            try:
                self.stop(tunnel.id)
                stopped += 1
            except TunnelNotFoundError:
                logger.debug("Tunnel vanished during shutdown", tunnel_id=tunnel.id)

        logger.info("Shutdown all tunnels", stopped=stopped)

    def _get(self, tunnel_id: int) -> Tunnel:
        with self._lock:
            tunnel = self._tunnels.get(tunnel_id)
        if tunnel is None:
            raise TunnelNotFoundError(tunnel_id)
        return tunnel

    def _notify(self, tunnel_id: int) -> None:
        if self.listener is None:
            return
        try:
            self.listener(tunnel_id)
        except Exception as e:
            logger.error("Tunnel listener failed", tunnel_id=tunnel_id, error=str(e))

    def _capture_logs(self, tunnel: Tunnel) -> None:
        """Copy ssh stderr into the tunnel's log buffer until end of stream."""
        log = logger.bind(tunnel_id=tunnel.id)
        stream = tunnel.process.stderr
        log.debug("Capture worker started")
        try:
            for raw_line in stream:
                line = raw_line.rstrip("\r\n")
                if not line:
                    continue
                tunnel.logs.append(stamp_line(line))
                self._notify(tunnel.id)
        except (OSError, ValueError) as e:
            log.warning("Capture worker read failed", error=str(e))
        finally:
            try:
                stream.close()
            except OSError as e:
                log.debug("Closing stderr failed", error=str(e))

        exit_code = tunnel.process.wait()
        tunnel.deactivate()
        log.info(
            "Capture worker finished",
            exit_code=exit_code,
            lines_captured=tunnel.logs.total_appended - 1,
        )
        self._notify(tunnel.id)

    def __enter__(self) -> "TunnelSupervisor":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> Literal[False]:
        """Context manager exit - stop every tunnel

        Returns:
            False to propagate any exception
        """
        try:
            self.shutdown_all()
        except Exception as e:
            logger.error("Error during supervisor shutdown", error=str(e))
        return False

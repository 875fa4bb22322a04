"""Tunnel models.

``TunnelRequest`` and ``TunnelSummary`` are immutable pydantic models that
cross the supervisor boundary. ``Tunnel`` is the live entity that only the
supervisor holds.
"""

import threading
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..common.exceptions import InputValidationError
from ..common.utils import stamp_line, validate_host
from .logbuffer import DEFAULT_CAPACITY, LogBuffer
from .process import SSHProcess


class TunnelRequest(BaseModel):
    """Parameters for a new tunnel, produced by the wizard."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True, extra="forbid")

    host: str = Field(min_length=1, description="user@host, host or ssh alias")
    remote_port: int = Field(ge=1, le=65535, description="Port on the remote side")
    local_port: int = Field(ge=1, le=65535, description="Port bound locally")
    tag: str = Field(default="", description="Display label, not unique")
    verbose: bool = Field(default=False, description="Pass -v to ssh")

    @field_validator("host")
    @classmethod
    def check_host(cls, v: str) -> str:
        """Reject hosts that ssh would parse as options or split."""
        try:
            return validate_host(v)
        except InputValidationError as e:
            raise ValueError(str(e)) from e


class TunnelSummary(BaseModel):
    """Read-only snapshot of a tunnel."""

    model_config = ConfigDict(frozen=True)

    id: int
    tag: str
    host: str
    local_port: int
    remote_port: int
    verbose: bool
    active: bool
    pid: int | None = None
    started_at: datetime
    log_count: int = 0


class Tunnel:
    """A live forwarding session backed by one ssh process.

    ``logs`` has its own lock inside ``LogBuffer``; ``_lock`` guards
    ``active``. Neither is shared with other tunnels.
    """

    def __init__(
        self,
        tunnel_id: int,
        request: TunnelRequest,
        process: SSHProcess,
        log_capacity: int = DEFAULT_CAPACITY,
    ):
        self.id = tunnel_id
        self.tag = request.tag
        self.host = request.host
        self.local_port = request.local_port
        self.remote_port = request.remote_port
        self.verbose = request.verbose
        self.process = process
        self.started_at = datetime.now()
        self.logs = LogBuffer(log_capacity)
        self.logs.append(stamp_line("Tunnel started", self.started_at))
        self.worker: threading.Thread | None = None
        self._active = True
        self._lock = threading.Lock()

    @property
    def active(self) -> bool:
        with self._lock:
            return self._active

    def deactivate(self) -> bool:
        """Mark inactive. Returns True if this call changed the state."""
        with self._lock:
            was_active = self._active
            self._active = False
            return was_active

    def summary(self) -> TunnelSummary:
        """Take a snapshot for callers outside the supervisor."""
        return TunnelSummary(
            id=self.id,
            tag=self.tag,
            host=self.host,
            local_port=self.local_port,
            remote_port=self.remote_port,
            verbose=self.verbose,
            active=self.active,
            pid=self.process.pid,
            started_at=self.started_at,
            log_count=len(self.logs),
        )

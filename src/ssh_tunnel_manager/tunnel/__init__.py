"""Tunnel supervision: models, ssh processes, log buffers and the supervisor."""

from .logbuffer import DEFAULT_CAPACITY, LogBuffer
from .models import Tunnel, TunnelRequest, TunnelSummary
from .process import SSHProcess, build_ssh_command
from .supervisor import TunnelListener, TunnelSupervisor

__all__ = [
    # Models
    "TunnelRequest",
    "TunnelSummary",
    "Tunnel",
    # Logs
    "LogBuffer",
    "DEFAULT_CAPACITY",
    # Process management
    "SSHProcess",
    "build_ssh_command",
    # Supervisor
    "TunnelSupervisor",
    "TunnelListener",
]

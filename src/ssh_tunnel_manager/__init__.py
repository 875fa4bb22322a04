"""SSH Tunnel Manager - supervise local ssh port forwards from the terminal."""

from .common.exceptions import (
    InputValidationError,
    ProcessError,
    SpawnFailedError,
    TunnelManagerError,
    TunnelNotFoundError,
    TunnelStartError,
)
from .common.logging import get_logger, setup_logging
from .config import AppConfig
from .hosts import extract_all_hostnames, extract_hostname, list_hosts
from .ports import is_port_bound
from .tunnel import (
    LogBuffer,
    TunnelRequest,
    TunnelSummary,
    TunnelSupervisor,
    build_ssh_command,
)
from .wizard import TunnelWizard, WizardEvent, WizardStep

__all__ = [
    # Supervisor
    "TunnelSupervisor",
    "TunnelRequest",
    "TunnelSummary",
    "LogBuffer",
    "build_ssh_command",
    # Collaborators
    "list_hosts",
    "extract_hostname",
    "extract_all_hostnames",
    "is_port_bound",
    "TunnelWizard",
    "WizardStep",
    "WizardEvent",
    # Configuration
    "AppConfig",
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
]

__version__ = "0.1.0"

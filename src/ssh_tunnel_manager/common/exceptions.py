"""Custom exceptions for the SSH tunnel manager."""


class TunnelManagerError(Exception):
    """Base exception for all tunnel manager errors."""

    pass


class ProcessError(TunnelManagerError):
    """Raised when ssh process operations fail."""

    pass


class TunnelStartError(TunnelManagerError):
    """Raised when a tunnel could not be started. Nothing is registered."""

    pass


class SpawnFailedError(TunnelStartError, ProcessError):
    """Raised when the ssh subprocess or its stderr pipe could not be created."""

    pass


class TunnelNotFoundError(TunnelManagerError):
    """Raised when a tunnel id is unknown (never created or already removed)."""

    def __init__(self, tunnel_id: int):
        self.tunnel_id = tunnel_id
        super().__init__(f"Tunnel '{tunnel_id}' not found")


class InputValidationError(TunnelManagerError):
    """Raised when wizard input is rejected. The message is shown to the user."""

    pass

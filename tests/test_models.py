"""Tests for tunnel models and exceptions."""

import pytest
from pydantic import ValidationError

from ssh_tunnel_manager.common.exceptions import (
    InputValidationError,
    SpawnFailedError,
    TunnelManagerError,
    TunnelNotFoundError,
    TunnelStartError,
)
from ssh_tunnel_manager.tunnel import TunnelRequest


class TestTunnelRequest:
    """Test cases for TunnelRequest validation"""

    def test_valid(self):
        request = TunnelRequest(host="admin@db", remote_port="5432", local_port=15432)

        assert request.remote_port == 5432
        assert request.tag == ""
        assert request.verbose is False

    @pytest.mark.parametrize("host", ["", "-oProxyCommand=x", "db host"])
    def test_invalid_host(self, host):
        with pytest.raises(ValidationError):
            TunnelRequest(host=host, remote_port=22, local_port=2222)

    @pytest.mark.parametrize("port", [0, 65536])
    def test_port_range(self, port):
        with pytest.raises(ValidationError):
            TunnelRequest(host="db", remote_port=port, local_port=2222)
        with pytest.raises(ValidationError):
            TunnelRequest(host="db", remote_port=22, local_port=port)

    def test_frozen(self):
        request = TunnelRequest(host="db", remote_port=22, local_port=2222)
        with pytest.raises(ValidationError):
            request.host = "other"


class TestExceptions:
    """Test cases for the exception hierarchy"""

    def test_hierarchy(self):
        assert issubclass(TunnelStartError, TunnelManagerError)
        assert issubclass(SpawnFailedError, TunnelStartError)
        assert issubclass(TunnelNotFoundError, TunnelManagerError)
        assert issubclass(InputValidationError, TunnelManagerError)

    def test_not_found_message(self):
        error = TunnelNotFoundError(5)
        assert error.tunnel_id == 5
        assert str(error) == "Tunnel '5' not found"

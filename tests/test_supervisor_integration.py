"""Integration tests running the supervisor against a real subprocess.

A small shell script stands in for ssh: it echoes its arguments to stderr
and stays alive until killed.
"""

import os
import stat
import sys

import pytest

from ssh_tunnel_manager.common.exceptions import SpawnFailedError
from ssh_tunnel_manager.config import AppConfig
from ssh_tunnel_manager.tunnel import TunnelRequest, TunnelSupervisor

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(sys.platform == "win32", reason="needs a POSIX shell"),
]

FAKE_SSH = """\
#!/bin/sh
echo "fake-ssh $*" >&2
echo "" >&2
echo "Warning: remote host key changed" >&2
exec sleep 30
"""

EXITING_SSH = """\
#!/bin/sh
echo "ssh: connect to host nowhere port 22: Connection refused" >&2
exit 255
"""


def write_script(path, content):
    path.write_text(content)
    path.chmod(path.stat().st_mode | stat.S_IXUSR)
    return str(path)


@pytest.fixture
def real_supervisor(tmp_path):
    config = AppConfig(
        ssh_binary=write_script(tmp_path / "ssh", FAKE_SSH),
        ssh_config_path=tmp_path / "config",
    )
    with TunnelSupervisor(config) as sup:
        yield sup


def message(line: str) -> str:
    return line.split("] ", 1)[1]


class TestSupervisorIntegration:
    """Test cases for the full spawn, capture and kill cycle"""

    def test_captures_stderr_of_running_process(self, real_supervisor):
        request = TunnelRequest(
            host="db.example.com", remote_port=5432, local_port=15432, tag="happy-otter"
        )

        tunnel_id = real_supervisor.start(request)

        assert real_supervisor.wait_for_logs(tunnel_id, 3, timeout=10)
        lines = [message(line) for line in real_supervisor.logs(tunnel_id, 100)]
        assert lines == [
            "Tunnel started",
            "fake-ssh -N -L 127.0.0.1:15432:localhost:5432 db.example.com",
            "Warning: remote host key changed",
        ]
        summary = real_supervisor.get(tunnel_id)
        assert summary.active is True
        assert summary.pid is not None

    def test_stop_kills_process(self, real_supervisor):
        tunnel_id = real_supervisor.start(
            TunnelRequest(host="bastion", remote_port=80, local_port=18080)
        )
        pid = real_supervisor.get(tunnel_id).pid
        assert real_supervisor.wait_for_logs(tunnel_id, 2, timeout=10)

        real_supervisor.stop(tunnel_id)

        worker = real_supervisor._get(tunnel_id).worker
        worker.join(timeout=10)
        assert not worker.is_alive()
        assert real_supervisor.get(tunnel_id).active is False
        with pytest.raises(ProcessLookupError):
            os.kill(pid, 0)

    def test_process_exit_marks_inactive(self, tmp_path):
        config = AppConfig(
            ssh_binary=write_script(tmp_path / "ssh", EXITING_SSH),
            ssh_config_path=tmp_path / "config",
        )
        with TunnelSupervisor(config) as sup:
            tunnel_id = sup.start(
                TunnelRequest(host="nowhere", remote_port=22, local_port=12222)
            )
            worker = sup._get(tunnel_id).worker
            worker.join(timeout=10)

            assert sup.get(tunnel_id).active is False
            assert message(sup.logs(tunnel_id, 1)[0]).endswith("Connection refused")

    def test_missing_binary(self, tmp_path):
        config = AppConfig(
            ssh_binary=str(tmp_path / "no-such-ssh"),
            ssh_config_path=tmp_path / "config",
        )
        with TunnelSupervisor(config) as sup:
            with pytest.raises(SpawnFailedError):
                sup.start(TunnelRequest(host="db", remote_port=1, local_port=2))
            assert sup.list() == []

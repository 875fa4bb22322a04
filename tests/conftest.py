"""Shared pytest fixtures for ssh tunnel manager tests."""

import itertools
import os
import threading

import pytest

from ssh_tunnel_manager.config import AppConfig
from ssh_tunnel_manager.tunnel.supervisor import TunnelSupervisor


class FakeSSHProcess:
    """Stand-in for ``subprocess.Popen`` running ssh.

    ``stderr`` is the read end of a real pipe, so the capture worker blocks
    and streams exactly as it does against a live process. Tests feed it
    with ``emit`` and end it with ``exit`` or ``kill``.
    """

    _pids = itertools.count(40000)

    def __init__(self, args, **kwargs):
        self.args = args
        self.kwargs = kwargs
        self.pid = next(self._pids)
        self.returncode = None
        self.kill_calls = 0
        read_fd, write_fd = os.pipe()
        self.stderr = open(read_fd, encoding="utf-8", errors="replace")
        self._writer = open(write_fd, "w", encoding="utf-8")
        self._lock = threading.Lock()

    def emit(self, *lines: str) -> None:
        with self._lock:
            for line in lines:
                self._writer.write(line + "\n")
            self._writer.flush()

    def exit(self, code: int = 0) -> None:
        with self._lock:
            if self.returncode is None:
                self.returncode = code
            self._writer.close()

    def kill(self) -> None:
        self.kill_calls += 1
        self.exit(-9)

    def poll(self):
        return self.returncode

    def wait(self, timeout=None):
        return self.returncode


class FakePopen:
    """Records every spawned FakeSSHProcess."""

    def __init__(self):
        self.processes: list[FakeSSHProcess] = []
        self.side_effect: BaseException | None = None

    def __call__(self, args, **kwargs):
        if self.side_effect is not None:
            raise self.side_effect
        process = FakeSSHProcess(args, **kwargs)
        self.processes.append(process)
        return process

    @property
    def last(self) -> FakeSSHProcess:
        return self.processes[-1]

    def close_all(self) -> None:
        for process in self.processes:
            process.exit()


@pytest.fixture
def fake_popen(monkeypatch):
    """Replace subprocess.Popen with a pipe-backed fake ssh.

    Returns:
        FakePopen: Factory holding every spawned process
    """
    popen = FakePopen()
    monkeypatch.setattr("subprocess.Popen", popen)
    yield popen
    popen.close_all()


@pytest.fixture
def app_config(tmp_path):
    """Settings isolated from the user's real ssh config.

    Returns:
        AppConfig: Config with no connect delay
    """
    return AppConfig(ssh_config_path=tmp_path / "ssh_config", connect_delay=0)


@pytest.fixture
def supervisor(app_config, fake_popen):
    """Create a TunnelSupervisor backed by fake ssh processes.

    Returns:
        TunnelSupervisor: Supervisor that is shut down after the test
    """
    with TunnelSupervisor(app_config) as sup:
        yield sup


@pytest.fixture
def join_worker():
    """Return a helper that waits for a tunnel's capture worker to finish."""

    def join(supervisor: TunnelSupervisor, tunnel_id: int) -> None:
        worker = supervisor._get(tunnel_id).worker
        assert worker is not None
        worker.join(timeout=5)
        assert not worker.is_alive()

    return join

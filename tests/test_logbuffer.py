"""Tests for the bounded per-tunnel log buffer."""

import threading

import pytest

from ssh_tunnel_manager.tunnel.logbuffer import DEFAULT_CAPACITY, LogBuffer


class TestLogBuffer:
    """Test cases for LogBuffer"""

    def test_default_capacity(self):
        """Buffers keep 100 lines unless told otherwise"""
        assert LogBuffer().capacity == DEFAULT_CAPACITY == 100

    def test_rejects_zero_capacity(self):
        """A buffer must hold at least one line"""
        with pytest.raises(ValueError):
            LogBuffer(0)

    def test_evicts_oldest_lines(self):
        """Appending 150 lines keeps the last 100 in order"""
        buffer = LogBuffer()
        for n in range(1, 151):
            buffer.append(f"line {n}")

        assert len(buffer) == 100
        assert buffer.snapshot() == [f"line {n}" for n in range(51, 151)]
        assert buffer.total_appended == 150

    def test_tail(self):
        buffer = LogBuffer(capacity=5)
        for n in range(3):
            buffer.append(str(n))

        assert buffer.tail(2) == ["1", "2"]
        assert buffer.tail(10) == ["0", "1", "2"]
        assert buffer.tail(0) == []
        assert buffer.tail(-1) == []

    def test_tail_returns_copy(self):
        """Mutating a returned list does not touch the buffer"""
        buffer = LogBuffer()
        buffer.append("a")

        lines = buffer.tail(10)
        lines.append("b")

        assert buffer.snapshot() == ["a"]

    def test_wait_for_times_out(self):
        buffer = LogBuffer()
        assert buffer.wait_for(1, timeout=0.05) is False

    def test_wait_for_already_reached(self):
        buffer = LogBuffer()
        buffer.append("a")
        assert buffer.wait_for(1, timeout=0) is True

    def test_wait_for_wakes_on_append(self):
        """A waiter is released by an append from another thread"""
        buffer = LogBuffer()
        writer = threading.Timer(0.05, buffer.append, args=("late",))
        writer.start()
        try:
            assert buffer.wait_for(1, timeout=5) is True
        finally:
            writer.join()

    def test_concurrent_readers_see_consistent_snapshots(self):
        """Readers never observe a gap or a reordering while a writer appends"""
        buffer = LogBuffer(capacity=50)
        total = 2000
        errors: list[str] = []

        def write():
            for n in range(total):
                buffer.append(str(n))

        def read():
            while buffer.total_appended < total:
                lines = [int(line) for line in buffer.tail(50)]
                if not lines:
                    continue
                if len(lines) > 50:
                    errors.append(f"too many lines: {len(lines)}")
                if lines != list(range(lines[0], lines[0] + len(lines))):
                    errors.append(f"non-contiguous snapshot starting at {lines[0]}")

        readers = [threading.Thread(target=read) for _ in range(3)]
        for reader in readers:
            reader.start()
        write()
        for reader in readers:
            reader.join(timeout=10)

        assert errors == []
        assert buffer.snapshot() == [str(n) for n in range(total - 50, total)]

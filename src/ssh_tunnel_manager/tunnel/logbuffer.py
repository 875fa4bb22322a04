"""Bounded, thread-safe log buffer for a single tunnel."""

import threading
from collections import deque

DEFAULT_CAPACITY = 100


class LogBuffer:
    """Fixed-capacity FIFO of log lines shared by one writer and many readers.

    Appending past capacity evicts the oldest line. Readers get copies taken
    under the lock, so they never see a partial update. Waiters are woken on
    every append through a condition variable.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._lines: deque[str] = deque(maxlen=capacity)
        self._total = 0
        self._cond = threading.Condition(threading.Lock())

    def append(self, line: str) -> None:
        """Append a line, evicting the oldest one when full."""
        with self._cond:
            self._lines.append(line)
            self._total += 1
            self._cond.notify_all()

    def tail(self, max_lines: int) -> list[str]:
        """Return up to ``max_lines`` most recent lines, oldest first."""
        if max_lines <= 0:
            return []
        return self.snapshot()[-max_lines:]

    def snapshot(self) -> list[str]:
        """Return every retained line, oldest first."""
        with self._cond:
            return list(self._lines)

    @property
    def total_appended(self) -> int:
        """Number of lines ever appended, including evicted ones."""
        with self._cond:
            return self._total

    def wait_for(self, count: int, timeout: float | None = None) -> bool:
        """Block until at least ``count`` lines have ever been appended.

        Args:
            count: Target value of ``total_appended``
            timeout: Seconds to wait, or None to wait forever

        Returns:
            True if the target was reached, False on timeout
        """
        with self._cond:
            return self._cond.wait_for(lambda: self._total >= count, timeout)

    def __len__(self) -> int:
        with self._cond:
            return len(self._lines)

"""Scrolling CPU/memory history behind the sparkline."""

from __future__ import annotations

from collections import deque

MAX_WIDTH = 512  # backing capacity; the sparkline never shows more columns
HISTORY_DIVISOR = 4  # push one point every N ticks


class HistoryWindow:
    """Two parallel fixed-capacity series, oldest first.

    Starts zero-filled so the graph spans the full width from the first
    frame. Pushing when full drops the oldest sample of both series.
    """

    def __init__(self, capacity: int = MAX_WIDTH, divisor: int = HISTORY_DIVISOR) -> None:
        self._cpu: deque[float] = deque([0.0] * capacity, maxlen=capacity)
        self._mem: deque[float] = deque([0.0] * capacity, maxlen=capacity)
        self._divisor = max(1, divisor)
        self._ticks = 0

    @property
    def capacity(self) -> int:
        return self._cpu.maxlen or 0

    @property
    def cpu(self) -> list[float]:
        return list(self._cpu)

    @property
    def mem(self) -> list[float]:
        return list(self._mem)

    def push(self, cpu_pct: float, mem_pct: float) -> None:
        self._cpu.append(cpu_pct)
        self._mem.append(mem_pct)

    def offer(self, cpu_pct: float, mem_pct: float) -> bool:
        """Count one tick and push on every ``divisor``-th, starting with the first."""
        pushed = self._ticks == 0
        if pushed:
            self.push(cpu_pct, mem_pct)
        self._ticks = (self._ticks + 1) % self._divisor
        return pushed

    def window(self, width: int) -> tuple[list[float], list[float]]:
        """Newest *width* samples of each series, oldest first."""
        width = max(0, min(width, self.capacity))
        if width == 0:
            return [], []
        return list(self._cpu)[-width:], list(self._mem)[-width:]

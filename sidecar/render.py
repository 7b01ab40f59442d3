"""Frame composition for the sidecar dashboard.

Everything here builds plain strings; ``Screen`` is the only thing that
touches the terminal. Layout, top to bottom:

    History (CPU=█, RAM=░)
    <sparkline, HISTORY_HEIGHT + 1 rows>

    ┌> ■■■■■■        cpu
    └>  12.5%
     > s=0.0% | i=0.3% | 1=0.08 | 5=0.03 | 15=0.05
     > [2/278] :: (87% on ac)
    ┌> ■■■■■■■■■■    mem
    └>  41.0%
     > tail: /path/to/file
    <most recent debug lines that fit>
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import TextIO

from sidecar.history import HistoryWindow
from sidecar.samplers import LoadSnapshot, MemoryPoint, PowerSnapshot, UsagePoint
from sidecar.tail import DebugLogBuffer
from sidecar.terminal import TerminalGeometry

# ── Constants ──────────────────────────────────────────────────────────────

HISTORY_HEIGHT = 10

CLEAR_SCREEN = "\033[2J"
CURSOR_HOME = "\033[H"
ERASE_LINE = "\033[K"

BAR_FILL = "■"
BAR_EMPTY = " "
SPARK_CPU = "█"
SPARK_MEM = "░"
SPARK_BOTH = "▓"
SPARK_NONE = " "


@dataclass
class FrameData:
    """Everything one frame shows."""

    usage: UsagePoint = field(default_factory=UsagePoint)
    memory: MemoryPoint = field(default_factory=MemoryPoint)
    load: LoadSnapshot = field(default_factory=LoadSnapshot)
    power: PowerSnapshot = field(default_factory=PowerSnapshot)
    load_stale: bool = False
    tail_path: str | None = None
    tail_lines: DebugLogBuffer | None = None


# ── Primitives ─────────────────────────────────────────────────────────────


def bar_cells(pct: float, width: int) -> int:
    """Filled cells for *pct* on a bar *width* cells wide."""
    return max(0, min(width, int(pct / 100.0 * width)))


def draw_bar(label: str, pct: float, width: int) -> list[str]:
    """Two-line bar: the cells plus label, then the percentage."""
    filled = bar_cells(pct, width)
    cells = BAR_FILL * filled + BAR_EMPTY * (width - filled)
    return [f"┌> {cells}{label:<3s}", f"└> {pct:5.1f}%"]


def spark_level(pct: float) -> int:
    return int(pct / 100.0 * HISTORY_HEIGHT)


def spark_cell(cpu_level: int, mem_level: int, row: int) -> str:
    cpu_on = cpu_level >= row
    mem_on = mem_level >= row
    if cpu_on and mem_on:
        return SPARK_BOTH
    if cpu_on:
        return SPARK_CPU
    if mem_on:
        return SPARK_MEM
    return SPARK_NONE


def draw_sparkline(cpu: list[float], mem: list[float]) -> list[str]:
    """Rows HISTORY_HEIGHT..0 of the merged CPU/memory history.

    Each cell is decided on its own (row, column) since one glyph has to
    stand for both series.
    """
    cpu_levels = [spark_level(v) for v in cpu]
    mem_levels = [spark_level(v) for v in mem]
    return [
        "".join(spark_cell(c, m, row) for c, m in zip(cpu_levels, mem_levels))
        for row in range(HISTORY_HEIGHT, -1, -1)
    ]


def truncate(text: str, cols: int) -> str:
    """Clip *text* so it never wraps onto the next row."""
    return text[: max(1, cols - 1)]


# ── Text lines ─────────────────────────────────────────────────────────────


def summary_lines(data: FrameData) -> list[str]:
    load = data.load
    stale = " (stale)" if data.load_stale else ""
    battery = data.power.battery_percent if data.power.battery_percent is not None else 0
    source = "on ac)  " if data.power.on_ac else "on batt)"
    return [
        f" > s={data.memory.swap_percent:.1f}% | i={data.usage.iowait_percent:.1f}%"
        f" | 1={load.load_1min:.2f} | 5={load.load_5min:.2f} | 15={load.load_15min:.2f}"
        f"{stale}",
        f" > [{load.running_processes}/{load.total_processes}] :: ({battery}% {source}",
    ]


def render_frame(
    geometry: TerminalGeometry, history: HistoryWindow, data: FrameData
) -> str:
    """Build one full frame as text.

    *geometry* is copied up front so a resize landing mid-frame only shows
    up on the next one.
    """
    geo = geometry.snapshot()
    cpu_hist, mem_hist = history.window(geo.graph_width)

    lines = ["History (CPU=█, RAM=░)"]
    lines.extend(draw_sparkline(cpu_hist, mem_hist))
    lines.append("")
    lines.extend(draw_bar("cpu", data.usage.cpu_percent, geo.graph_width))
    lines.extend(summary_lines(data))
    lines.extend(draw_bar("mem", data.memory.mem_percent, geo.graph_width))

    if data.tail_lines is not None:
        lines.append(truncate(f" > tail: {data.tail_path}", geo.cols))
        # Keep the last terminal row free so the frame never scrolls
        room = geo.rows - len(lines) - 1
        lines.extend(truncate(line, geo.cols) for line in data.tail_lines.tail(room))

    return "\n".join(lines) + "\n"


# ── Output ─────────────────────────────────────────────────────────────────


class Screen:
    """Writes frames to the terminal, clearing only when asked.

    Without a clear the frame is drawn over the previous one, so each row
    erases to its end; a row that got shorter leaves nothing behind.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream if stream is not None else sys.stdout

    def paint(self, frame: str, clear: bool = False) -> None:
        if clear:
            self._stream.write(CLEAR_SCREEN)
        self._stream.write(CURSOR_HOME)
        self._stream.write(frame.replace("\n", ERASE_LINE + "\n"))
        self._stream.flush()

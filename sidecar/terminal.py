"""Terminal size tracking and the SIGWINCH handoff to the main loop."""

from __future__ import annotations

import logging
import os
import signal
import sys
from dataclasses import dataclass
from types import FrameType

from sidecar.history import MAX_WIDTH

logger = logging.getLogger(__name__)

DEFAULT_COLS = 80
DEFAULT_ROWS = 24
MIN_GRAPH_WIDTH = 20
GRAPH_MARGIN = 12  # columns reserved beside the graph for labels


def graph_width_for(cols: int) -> int:
    return max(MIN_GRAPH_WIDTH, min(cols - GRAPH_MARGIN, MAX_WIDTH))


@dataclass
class TerminalGeometry:
    cols: int = DEFAULT_COLS
    rows: int = DEFAULT_ROWS
    graph_width: int = graph_width_for(DEFAULT_COLS)

    def update(self, cols: int, rows: int) -> None:
        self.cols = cols
        self.rows = rows
        self.graph_width = graph_width_for(cols)

    def snapshot(self) -> TerminalGeometry:
        return TerminalGeometry(self.cols, self.rows, self.graph_width)


class ResizeFlag:
    """Single boolean set from signal context, cleared by the main loop."""

    def __init__(self) -> None:
        self.pending = False

    def set(self) -> None:
        self.pending = True

    def clear(self) -> None:
        """Called once the redraw the resize asked for is on screen."""
        self.pending = False


def query_size() -> tuple[int, int] | None:
    """(cols, rows) of the controlling terminal, or None if stdout isn't one."""
    try:
        size = os.get_terminal_size(sys.stdout.fileno())
    except (OSError, ValueError):
        return None
    return size.columns, size.lines


def refresh_geometry(geometry: TerminalGeometry) -> None:
    size = query_size()
    if size is not None:
        geometry.update(*size)


def install_resize_handler(geometry: TerminalGeometry, flag: ResizeFlag) -> None:
    """Route SIGWINCH into *geometry* and *flag*.

    The handler only re-reads the size and sets the flag; redrawing is the
    main loop's job.
    """

    def _on_winch(signum: int, frame: FrameType | None) -> None:
        refresh_geometry(geometry)
        flag.set()

    if not hasattr(signal, "SIGWINCH"):
        logger.info("SIGWINCH not available, terminal resizes won't be tracked")
        return
    signal.signal(signal.SIGWINCH, _on_winch)
    # Pick up the starting size the same way a resize would
    _on_winch(signal.SIGWINCH, None)

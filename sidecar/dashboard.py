"""Sidecar: a small live resource dashboard that can follow a log file.

Meant to sit in a narrow terminal next to your work. Shows a scrolling
CPU/RAM history, CPU and memory bars, swap, iowait, load average, process
counts and battery state, with the tail of an optional file underneath.

Usage:
    sidecar
    sidecar /path/to/debug.log
"""

from __future__ import annotations

import argparse
import logging
import sys
import time

from sidecar.config import load_config
from sidecar.history import HistoryWindow
from sidecar.logsetup import setup_logging
from sidecar.provider import (
    DEFAULT_PROC_ROOT,
    DEFAULT_SYSFS_ROOT,
    CpuSnapshot,
    HostProvider,
    ProviderError,
)
from sidecar.render import FrameData, Screen, render_frame
from sidecar.samplers import (
    LoadavgParseError,
    MetricsProvider,
    sample_cpu,
    sample_loadavg,
    sample_memory,
    sample_power,
)
from sidecar.tail import TailFile
from sidecar.terminal import (
    ResizeFlag,
    TerminalGeometry,
    install_resize_handler,
    refresh_geometry,
)

logger = logging.getLogger(__name__)

REFRESH_SECONDS = 0.5


class Dashboard:
    """All dashboard state, owned by the poll loop.

    The resize flag is the one piece written from outside the loop (by the
    SIGWINCH handler); it's only cleared here, after the redraw it asks for.
    """

    def __init__(
        self,
        provider: MetricsProvider,
        screen: Screen,
        tail: TailFile | None = None,
        geometry: TerminalGeometry | None = None,
        resize: ResizeFlag | None = None,
        history: HistoryWindow | None = None,
    ) -> None:
        self.provider = provider
        self.screen = screen
        self.tail = tail
        self.geometry = geometry if geometry is not None else TerminalGeometry()
        self.resize = resize if resize is not None else ResizeFlag()
        self.history = history if history is not None else HistoryWindow()
        self.prev_cpu: CpuSnapshot | None = None
        self.data = FrameData(
            tail_path=tail.path if tail is not None else None,
            tail_lines=tail.buffer if tail is not None else None,
        )
        self._needs_clear = True

    def prime(self) -> None:
        """Take the baseline readings.

        Raises:
            ProviderError: CPU or memory counters can't be read at all.
        """
        self.prev_cpu = self.provider.fetch_cpu()
        self.data.memory = sample_memory(self.provider)
        self._update_load()
        self._update_power()

    # ── Per-tick sampling ──────────────────────────────────────────────

    def _update_cpu(self) -> None:
        try:
            self.data.usage, self.prev_cpu = sample_cpu(self.provider, self.prev_cpu)
        except ProviderError as e:
            logger.warning("keeping last CPU reading: %s", e)

    def _update_memory(self) -> None:
        try:
            self.data.memory = sample_memory(self.provider)
        except ProviderError as e:
            logger.warning("keeping last memory reading: %s", e)

    def _update_load(self) -> None:
        try:
            self.data.load = sample_loadavg(self.provider)
            self.data.load_stale = False
        except (ProviderError, LoadavgParseError) as e:
            if not self.data.load_stale:
                logger.warning("load average unavailable, showing last good values: %s", e)
            self.data.load_stale = True

    def _update_power(self) -> None:
        try:
            self.data.power = sample_power(self.provider)
        except ProviderError as e:
            logger.debug("keeping last power status: %s", e)

    def _drain_tail(self) -> int:
        if self.tail is None:
            return 0
        try:
            return self.tail.drain()
        except OSError as e:
            logger.warning("reading %s failed: %s", self.tail.path, e)
            return 0

    # ── Loop ───────────────────────────────────────────────────────────

    def tick(self) -> str:
        """Run one sample-and-redraw pass and return the frame painted."""
        self._update_cpu()
        self._update_memory()
        self._update_load()
        self._update_power()
        new_lines = self._drain_tail()

        self.history.offer(self.data.usage.cpu_percent, self.data.memory.mem_percent)

        clear = self._needs_clear or new_lines > 0
        resized = self.resize.pending
        if resized:
            refresh_geometry(self.geometry)
            logger.debug(
                "resized to %dx%d, graph width %d",
                self.geometry.cols,
                self.geometry.rows,
                self.geometry.graph_width,
            )
            clear = True
        self._needs_clear = False

        frame = render_frame(self.geometry, self.history, self.data)
        self.screen.paint(frame, clear=clear)
        if resized:
            self.resize.clear()
        return frame

    def run(self, interval: float = REFRESH_SECONDS) -> None:
        """Redraw every *interval* seconds until the process is stopped."""
        while True:
            self.tick()
            time.sleep(interval)


# ── CLI entry point ────────────────────────────────────────────────────────


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="sidecar",
        description="Watch system resources while following a file tail -f style.",
    )
    parser.add_argument(
        "file",
        nargs="?",
        default=None,
        help="Optional file to follow under the graphs",
    )
    args = parser.parse_args(argv)

    config = load_config()
    setup_logging(config.get("log_file"), config.get("log_level", "INFO"))
    sources = config.get("sources", {})
    provider = HostProvider(
        proc_root=sources.get("proc_root", DEFAULT_PROC_ROOT),
        sysfs_root=sources.get("sysfs_root", DEFAULT_SYSFS_ROOT),
    )

    tail = TailFile.open(args.file) if args.file else None

    geometry = TerminalGeometry()
    resize = ResizeFlag()
    install_resize_handler(geometry, resize)

    dashboard = Dashboard(provider, Screen(), tail=tail, geometry=geometry, resize=resize)
    try:
        dashboard.prime()
    except ProviderError as e:
        print(f"sidecar: {e}", file=sys.stderr)
        raise SystemExit(1) from e

    logger.info("started, %dx%d terminal", geometry.cols, geometry.rows)
    try:
        dashboard.run()
    except KeyboardInterrupt:
        pass
    finally:
        if tail is not None:
            tail.close()


if __name__ == "__main__":
    main()

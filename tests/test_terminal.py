"""Tests for sidecar.terminal."""

from __future__ import annotations

import os
import signal
from unittest.mock import MagicMock, patch

import pytest

from sidecar.history import MAX_WIDTH
from sidecar.terminal import (
    MIN_GRAPH_WIDTH,
    ResizeFlag,
    TerminalGeometry,
    graph_width_for,
    install_resize_handler,
    query_size,
    refresh_geometry,
)


@pytest.mark.parametrize(
    ("cols", "expected"),
    [
        (80, 68),
        (120, 108),
        (10, MIN_GRAPH_WIDTH),
        (32, MIN_GRAPH_WIDTH),
        (33, 21),
        (2000, MAX_WIDTH),
    ],
)
def test_graph_width_for(cols: int, expected: int) -> None:
    assert graph_width_for(cols) == expected


class TestTerminalGeometry:
    def test_defaults(self) -> None:
        geo = TerminalGeometry()
        assert (geo.cols, geo.rows, geo.graph_width) == (80, 24, 68)

    def test_resize_80x24_to_120x40(self) -> None:
        geo = TerminalGeometry()
        geo.update(120, 40)
        assert (geo.cols, geo.rows) == (120, 40)
        assert geo.graph_width == 108
        assert MIN_GRAPH_WIDTH <= geo.graph_width <= MAX_WIDTH

    def test_snapshot_is_independent(self) -> None:
        geo = TerminalGeometry()
        snap = geo.snapshot()
        geo.update(200, 60)
        assert (snap.cols, snap.rows, snap.graph_width) == (80, 24, 68)


class TestResizeFlag:
    def test_set_then_clear(self) -> None:
        flag = ResizeFlag()
        assert flag.pending is False
        flag.set()
        assert flag.pending is True
        flag.clear()
        assert flag.pending is False


class TestQuerySize:
    @patch("sidecar.terminal.os.get_terminal_size")
    def test_reports_size(self, mock_size: MagicMock) -> None:
        mock_size.return_value = os.terminal_size((132, 50))
        assert query_size() == (132, 50)

    @patch("sidecar.terminal.os.get_terminal_size", side_effect=OSError)
    def test_not_a_terminal(self, mock_size: MagicMock) -> None:
        assert query_size() is None

    @patch("sidecar.terminal.query_size", return_value=None)
    def test_refresh_keeps_geometry_without_terminal(self, mock_query: MagicMock) -> None:
        geo = TerminalGeometry()
        refresh_geometry(geo)
        assert (geo.cols, geo.rows) == (80, 24)


@pytest.mark.skipif(not hasattr(signal, "SIGWINCH"), reason="needs SIGWINCH")
class TestResizeHandler:
    def test_sigwinch_updates_geometry_and_sets_flag(self) -> None:
        geo = TerminalGeometry()
        flag = ResizeFlag()
        previous = signal.getsignal(signal.SIGWINCH)
        try:
            with patch("sidecar.terminal.query_size", return_value=(100, 30)):
                install_resize_handler(geo, flag)
                # Installing primes geometry like a resize would
                assert geo.cols == 100
                assert flag.pending is True
                flag.clear()

            with patch("sidecar.terminal.query_size", return_value=(120, 40)):
                os.kill(os.getpid(), signal.SIGWINCH)
            assert (geo.cols, geo.rows, geo.graph_width) == (120, 40, 108)
            assert flag.pending is True
        finally:
            signal.signal(signal.SIGWINCH, previous)

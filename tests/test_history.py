"""Tests for sidecar.history."""

from __future__ import annotations

from sidecar.history import HISTORY_DIVISOR, MAX_WIDTH, HistoryWindow


def test_starts_zero_filled() -> None:
    h = HistoryWindow(capacity=5)
    assert h.cpu == [0.0] * 5
    assert h.mem == [0.0] * 5
    assert h.capacity == 5


def test_default_capacity() -> None:
    assert HistoryWindow().capacity == MAX_WIDTH


def test_push_keeps_last_capacity_values_in_order() -> None:
    h = HistoryWindow(capacity=8)
    for i in range(20):
        h.push(float(i), float(100 - i))
    assert h.cpu == [float(i) for i in range(12, 20)]
    assert h.mem == [float(100 - i) for i in range(12, 20)]


def test_push_partial_fill_keeps_zeros_oldest() -> None:
    h = HistoryWindow(capacity=4)
    h.push(10.0, 20.0)
    h.push(30.0, 40.0)
    assert h.cpu == [0.0, 0.0, 10.0, 30.0]
    assert h.mem == [0.0, 0.0, 20.0, 40.0]


def test_offer_pushes_every_nth_tick() -> None:
    h = HistoryWindow(capacity=10, divisor=HISTORY_DIVISOR)
    pushed = [h.offer(float(i), 0.0) for i in range(9)]
    assert pushed == [True, False, False, False, True, False, False, False, True]
    assert h.cpu[-3:] == [0.0, 4.0, 8.0]


def test_offer_divisor_one_pushes_always() -> None:
    h = HistoryWindow(capacity=3, divisor=1)
    assert all(h.offer(1.0, 1.0) for _ in range(5))


class TestWindow:
    def test_rightmost_slice(self) -> None:
        h = HistoryWindow(capacity=6)
        for i in range(6):
            h.push(float(i), float(i * 10))
        cpu, mem = h.window(3)
        assert cpu == [3.0, 4.0, 5.0]
        assert mem == [30.0, 40.0, 50.0]

    def test_width_clamped_to_capacity(self) -> None:
        h = HistoryWindow(capacity=4)
        cpu, mem = h.window(100)
        assert len(cpu) == 4
        assert len(mem) == 4

    def test_zero_width(self) -> None:
        assert HistoryWindow(capacity=4).window(0) == ([], [])

    def test_shrinking_window_keeps_history(self) -> None:
        h = HistoryWindow(capacity=6)
        for i in range(6):
            h.push(float(i), 0.0)
        h.window(2)
        cpu, _ = h.window(6)
        assert cpu == [0.0, 1.0, 2.0, 3.0, 4.0, 5.0]

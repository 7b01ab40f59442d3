"""Samplers that turn raw host counters into dashboard percentages.

Each sampler takes a provider (anything with the ``HostProvider`` fetch
methods) and returns one typed snapshot. CPU is the only stateful one: the
caller keeps the previous ``CpuSnapshot`` and hands it back every tick.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from sidecar.provider import CpuSnapshot, PowerSupply


# Device types and name fragments that identify an AC adapter
AC_TYPES = ("Mains", "ADP1")
AC_NAME_MARKERS = ("ADP", "AC")


class MetricsProvider(Protocol):
    def fetch_cpu(self) -> CpuSnapshot: ...

    def fetch_memory(self) -> dict[str, int]: ...

    def fetch_loadavg(self) -> str: ...

    def enumerate_power_supplies(self) -> list[PowerSupply]: ...


class LoadavgParseError(ValueError):
    """A load average line didn't have the six expected fields."""


# ── Data types ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class UsagePoint:
    cpu_percent: float = 0.0
    iowait_percent: float = 0.0


@dataclass(frozen=True)
class MemoryPoint:
    mem_percent: float = 0.0
    swap_percent: float = 0.0


@dataclass(frozen=True)
class LoadSnapshot:
    load_1min: float = 0.0
    load_5min: float = 0.0
    load_15min: float = 0.0
    running_processes: int = 0
    total_processes: int = 0
    last_pid: int = 0


@dataclass(frozen=True)
class PowerSnapshot:
    """Battery charge and AC state. ``battery_percent`` is None without a battery."""

    battery_percent: int | None = None
    on_ac: bool = False


# ── CPU ────────────────────────────────────────────────────────────────────


def _pct(part: float, whole: float) -> float:
    return min(100.0, max(0.0, part / whole * 100.0))


def calc_cpu_usage(prev: CpuSnapshot | None, curr: CpuSnapshot) -> UsagePoint:
    """Compute busy% and iowait% between two CPU snapshots.

    No previous snapshot, no elapsed ticks, or any counter going backwards
    (a reset) all yield 0% rather than a bogus figure.
    """
    if prev is None:
        return UsagePoint()
    total = curr.total - prev.total
    idle = curr.idle_like - prev.idle_like
    iowait = curr.iowait - prev.iowait
    if total <= 0 or idle < 0 or iowait < 0 or curr.busy < prev.busy:
        return UsagePoint()
    return UsagePoint(
        cpu_percent=_pct(total - idle, total),
        iowait_percent=_pct(iowait, total),
    )


def sample_cpu(
    provider: MetricsProvider, prev: CpuSnapshot | None
) -> tuple[UsagePoint, CpuSnapshot]:
    """Read fresh CPU counters; return the usage since *prev* and the new snapshot."""
    curr = provider.fetch_cpu()
    return calc_cpu_usage(prev, curr), curr


# ── Memory ─────────────────────────────────────────────────────────────────


def calc_memory_usage(table: dict[str, int]) -> MemoryPoint:
    """Used memory and swap as percentages of their totals.

    used = MemTotal - MemFree - Buffers - Cached, clamped at zero because
    some kernels report free+cached above the total for a moment.
    """
    mem_total = table.get("MemTotal", 0)
    used = mem_total - table.get("MemFree", 0) - table.get("Buffers", 0) - table.get("Cached", 0)
    mem_pct = _pct(max(0, used), mem_total) if mem_total > 0 else 0.0

    swap_total = table.get("SwapTotal", 0)
    swap_used = swap_total - table.get("SwapFree", 0)
    swap_pct = _pct(max(0, swap_used), swap_total) if swap_total > 0 else 0.0
    return MemoryPoint(mem_percent=mem_pct, swap_percent=swap_pct)


def sample_memory(provider: MetricsProvider) -> MemoryPoint:
    return calc_memory_usage(provider.fetch_memory())


# ── Load average ───────────────────────────────────────────────────────────


def parse_loadavg(line: str) -> LoadSnapshot:
    """Parse ``"0.08 0.03 0.05 2/278 1234"`` into a LoadSnapshot.

    Raises:
        LoadavgParseError: fewer than six fields could be read.
    """
    fields = line.split()
    if len(fields) < 5:
        raise LoadavgParseError(f"too few fields in load average line {line!r}")
    running, sep, total = fields[3].partition("/")
    if not sep:
        raise LoadavgParseError(f"bad process count field {fields[3]!r}")
    try:
        return LoadSnapshot(
            load_1min=float(fields[0]),
            load_5min=float(fields[1]),
            load_15min=float(fields[2]),
            running_processes=int(running),
            total_processes=int(total),
            last_pid=int(fields[4]),
        )
    except ValueError as e:
        raise LoadavgParseError(f"malformed load average line {line!r}") from e


def sample_loadavg(provider: MetricsProvider) -> LoadSnapshot:
    return parse_loadavg(provider.fetch_loadavg())


# ── Power ──────────────────────────────────────────────────────────────────


def _read_int(supply: PowerSupply, attr: str) -> int:
    """Integer attribute value, or -1 if missing or unparsable."""
    try:
        return int(supply.attributes[attr])
    except (KeyError, ValueError):
        return -1


def _is_ac(supply: PowerSupply) -> bool:
    if supply.type in AC_TYPES:
        return True
    return any(marker in supply.name for marker in AC_NAME_MARKERS)


def calc_power_status(supplies: list[PowerSupply]) -> PowerSnapshot:
    """Pick the first battery and the first online AC adapter.

    Many battery-only layouts have no separate AC node, so when none is
    found a battery reporting ``Charging`` counts as being on AC.
    """
    battery: int | None = None
    on_ac = False

    for supply in supplies:
        if supply.type == "Battery":
            if battery is None:
                capacity = _read_int(supply, "capacity")
                if capacity >= 0:
                    battery = capacity
        elif not on_ac and _is_ac(supply):
            on_ac = _read_int(supply, "online") > 0

    if not on_ac and battery is not None:
        first_battery = next(s for s in supplies if s.type == "Battery")
        on_ac = first_battery.attributes.get("status") == "Charging"

    return PowerSnapshot(battery_percent=battery, on_ac=on_ac)


def sample_power(provider: MetricsProvider) -> PowerSnapshot:
    return calc_power_status(provider.enumerate_power_supplies())

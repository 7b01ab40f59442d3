"""Raw counter sources for the sidecar dashboard.

CPU times and memory/swap totals come from psutil; load average and power
supply state are read straight from /proc and /sys so each tick is a
handful of small reads with no sleeps. Every failure surfaces as
``ProviderError``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

import psutil

logger = logging.getLogger(__name__)

DEFAULT_PROC_ROOT = "/proc"
DEFAULT_SYSFS_ROOT = "/sys/class/power_supply"

# Per-device attributes the power sampler looks at
POWER_ATTRIBUTES = ("capacity", "online", "status")

CPU_FIELDS = ("user", "nice", "system", "idle", "iowait", "irq", "softirq", "steal")


class ProviderError(Exception):
    """A counter source could not be read or decoded."""


@dataclass(frozen=True)
class CpuSnapshot:
    """Cumulative aggregate CPU time counters. Only deltas mean anything."""

    user: float = 0.0
    nice: float = 0.0
    system: float = 0.0
    idle: float = 0.0
    iowait: float = 0.0
    irq: float = 0.0
    softirq: float = 0.0
    steal: float = 0.0

    @property
    def idle_like(self) -> float:
        return self.idle + self.iowait

    @property
    def busy(self) -> float:
        return self.user + self.nice + self.system + self.irq + self.softirq + self.steal

    @property
    def total(self) -> float:
        return self.idle_like + self.busy


@dataclass(frozen=True)
class PowerSupply:
    """One entry under the power_supply class directory."""

    name: str
    type: str
    attributes: dict[str, str] = field(default_factory=lambda: dict[str, str]())


def _read_text(path: str) -> str:
    with open(path, encoding="utf-8", errors="replace") as f:
        return f.read()


class HostProvider:
    """Reads kernel-exposed counters for the local host."""

    def __init__(
        self,
        proc_root: str = DEFAULT_PROC_ROOT,
        sysfs_root: str = DEFAULT_SYSFS_ROOT,
    ) -> None:
        self.proc_root = proc_root
        self.sysfs_root = sysfs_root
        # psutil reads its Linux counters from here too
        psutil.PROCFS_PATH = proc_root

    def fetch_cpu(self) -> CpuSnapshot:
        """Aggregate cumulative CPU times.

        Fields the platform doesn't report (iowait, steal, ... off Linux)
        come back as 0.
        """
        try:
            times = psutil.cpu_times()
        except (OSError, psutil.Error) as e:
            raise ProviderError(f"cannot read CPU times: {e}") from e
        return CpuSnapshot(**{name: float(getattr(times, name, 0.0)) for name in CPU_FIELDS})

    def fetch_memory(self) -> dict[str, int]:
        """Memory and swap counters as ``{"MemTotal": bytes, ...}``.

        Keys follow /proc/meminfo naming. Buffers and Cached are Linux-only
        and come back as 0 elsewhere.
        """
        try:
            ram = psutil.virtual_memory()
            swap = psutil.swap_memory()
        except (OSError, psutil.Error) as e:
            raise ProviderError(f"cannot read memory counters: {e}") from e
        return {
            "MemTotal": int(ram.total),
            "MemFree": int(ram.free),
            "Buffers": int(getattr(ram, "buffers", 0)),
            "Cached": int(getattr(ram, "cached", 0)),
            "SwapTotal": int(swap.total),
            "SwapFree": int(swap.free),
        }

    def fetch_loadavg(self) -> str:
        """Return the first line of /proc/loadavg, unparsed."""
        path = os.path.join(self.proc_root, "loadavg")
        try:
            with open(path, encoding="utf-8", errors="replace") as f:
                return f.readline()
        except OSError as e:
            raise ProviderError(f"cannot read {path}: {e}") from e

    def enumerate_power_supplies(self) -> list[PowerSupply]:
        """List power supply devices with their type and known attributes.

        A missing class directory means the host has no power supply
        reporting at all, which is an empty list rather than an error.
        """
        try:
            entries = sorted(os.listdir(self.sysfs_root))
        except FileNotFoundError:
            return []
        except OSError as e:
            raise ProviderError(f"cannot list {self.sysfs_root}: {e}") from e

        supplies: list[PowerSupply] = []
        for name in entries:
            if name.startswith("."):
                continue
            device = os.path.join(self.sysfs_root, name)
            try:
                dev_type = _read_text(os.path.join(device, "type")).strip()
            except OSError:
                continue

            attributes: dict[str, str] = {}
            for attr in POWER_ATTRIBUTES:
                try:
                    attributes[attr] = _read_text(os.path.join(device, attr)).strip()
                except OSError:
                    continue
            supplies.append(PowerSupply(name=name, type=dev_type, attributes=attributes))

        logger.debug("found %d power supply device(s)", len(supplies))
        return supplies

"""CPU and memory statistics from /proc/stat and /proc/meminfo.

CPU utilization is derived from two snapshots of the cumulative per-CPU
jiffy counters; memory figures are looked up by key name, so extra or
reordered meminfo lines do not matter.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, ClassVar

from ..errors import DivisionUndefined, IOUnavailable, MalformedData

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CpuSnapshot:
    """The first seven /proc/stat counters of one CPU at one instant."""

    cpu_id: int
    user: int
    nice: int
    system: int
    idle: int
    iowait: int
    irq: int
    softirq: int

    @property
    def idle_time(self) -> int:
        return self.idle + self.iowait

    @property
    def busy_time(self) -> int:
        return self.user + self.nice + self.system + self.irq + self.softirq

    @property
    def total(self) -> int:
        return self.idle_time + self.busy_time

    def counters(self) -> tuple[int, int, int, int, int, int, int]:
        """Return the counters in /proc/stat column order."""
        return (
            self.user,
            self.nice,
            self.system,
            self.idle,
            self.iowait,
            self.irq,
            self.softirq,
        )


@dataclass(frozen=True)
class CpuLoad:
    """Utilization of one CPU over a sampling window."""

    cpu_id: int
    prev: CpuSnapshot
    curr: CpuSnapshot
    load: float | None  # Percent busy, None when the window is unusable
    reason: str = ""  # Why load is None


def calculate_load(prev: CpuSnapshot, curr: CpuSnapshot) -> float:
    """Return the percentage of the window between two snapshots spent busy.

    Only the deltas matter: the counters are cumulative since boot, so the
    absolute split of either snapshot says nothing about the current rate.

    Raises:
        ValueError: if the snapshots belong to different CPUs.
        DivisionUndefined: if no ticks elapsed between the snapshots.
        MalformedData: if the total went backwards, or the idle delta falls
            outside 0..total (e.g. an iowait counter that dipped).
    """
    if prev.cpu_id != curr.cpu_id:
        raise ValueError(f"snapshots of cpu{prev.cpu_id} and cpu{curr.cpu_id}")

    total_delta = curr.total - prev.total
    idle_delta = curr.idle_time - prev.idle_time

    if total_delta == 0:
        raise DivisionUndefined(
            f"cpu{curr.cpu_id}: no ticks elapsed between samples"
        )
    if total_delta < 0:
        raise MalformedData(f"cpu{curr.cpu_id}: counters went backwards")
    if idle_delta < 0 or idle_delta > total_delta:
        raise MalformedData(
            f"cpu{curr.cpu_id}: idle delta {idle_delta} outside 0..{total_delta}"
        )

    return (total_delta - idle_delta) / total_delta * 100.0


def parse_stat(text: str) -> dict[int, CpuSnapshot]:
    """Parse the per-CPU ``cpuN`` lines of /proc/stat.

    The aggregate ``cpu`` line and non-CPU lines are ignored.

    Raises:
        MalformedData: if a ``cpuN`` line has fewer than seven counters.
    """
    snapshots: dict[int, CpuSnapshot] = {}
    for line in text.splitlines():
        parts = line.split()
        if not parts or not parts[0].startswith("cpu"):
            continue
        suffix = parts[0][3:]
        if not suffix.isdigit():
            continue
        cpu_id = int(suffix)
        try:
            values = [int(p) for p in parts[1:8]]
        except ValueError:
            raise MalformedData(f"bad counter in /proc/stat line {line!r}") from None
        if len(values) < 7:
            raise MalformedData(
                f"expected 7 counters for cpu{cpu_id}, got {len(values)}"
            )
        snapshots[cpu_id] = CpuSnapshot(cpu_id, *values)
    return snapshots


def parse_meminfo(text: str) -> dict[str, int]:
    """Parse ``Key:   value kB`` lines of /proc/meminfo into a dict of ints."""
    result: dict[str, int] = {}
    for line in text.splitlines():
        parts = line.split()
        if len(parts) < 2 or not parts[0].endswith(":"):
            continue
        try:
            result[parts[0][:-1]] = int(parts[1])
        except ValueError:
            log.debug("skipping meminfo line %r", line)
    return result


class ProcfsReader:
    """Read CPU counters and memory totals from procfs."""

    RAM_KEYS: ClassVar[tuple[str, ...]] = ("MemTotal", "MemFree", "MemAvailable")
    SWAP_KEYS: ClassVar[tuple[str, ...]] = ("SwapTotal", "SwapFree")
    CMA_KEYS: ClassVar[tuple[str, ...]] = ("CmaTotal", "CmaFree")

    def __init__(self, proc_root: str | Path = "/proc") -> None:
        self._stat_path = Path(proc_root) / "stat"
        self._meminfo_path = Path(proc_root) / "meminfo"

    @staticmethod
    def _read(path: Path) -> str:
        try:
            return path.read_text()
        except OSError as exc:
            raise IOUnavailable.from_oserror(exc, path) from exc

    def cpu_snapshots(self) -> dict[int, CpuSnapshot]:
        """Snapshot every CPU listed in /proc/stat.

        Raises:
            IOUnavailable: if /proc/stat cannot be read.
            MalformedData: if a CPU line does not parse.
        """
        snapshots = parse_stat(self._read(self._stat_path))
        if not snapshots:
            raise MalformedData(f"{self._stat_path}: no per-CPU lines")
        return snapshots

    def meminfo(self) -> dict[str, int]:
        """Return every numeric /proc/meminfo field, in kB.

        Raises:
            IOUnavailable: if /proc/meminfo cannot be read.
        """
        return parse_meminfo(self._read(self._meminfo_path))

    def sample_utilization(
        self,
        interval: float = 1.0,
        wait: Callable[[float], object] = time.sleep,
    ) -> list[CpuLoad]:
        """Sample every CPU, wait once, sample again and compute each load.

        All CPUs share one window, so the wall-clock cost is *interval*
        regardless of the CPU count.  CPUs that disappear between the two
        samples are dropped.  A CPU whose counters did not advance, or moved
        inconsistently, gets ``load=None`` and a ``reason``.
        """
        before = self.cpu_snapshots()
        wait(interval)
        after = self.cpu_snapshots()

        loads: list[CpuLoad] = []
        for cpu_id in sorted(before):
            if cpu_id not in after:
                log.debug("cpu%d vanished between samples", cpu_id)
                continue
            prev, curr = before[cpu_id], after[cpu_id]
            load: float | None = None
            reason = ""
            try:
                load = calculate_load(prev, curr)
            except DivisionUndefined:
                log.debug("cpu%d: zero-width window", cpu_id)
                reason = "no ticks elapsed"
            except MalformedData as exc:
                log.warning("%s", exc)
                reason = "inconsistent counters"
            loads.append(
                CpuLoad(cpu_id=cpu_id, prev=prev, curr=curr, load=load, reason=reason)
            )
        return loads

"""CPU frequency readings.

Reads per-CPU scaling_cur_freq (KHz) from sysfs cpufreq and reports MHz.
Boards without a cpufreq driver fall back to the ``cpu MHz`` lines of
/proc/cpuinfo where the architecture provides them.
"""

from __future__ import annotations

import logging
from pathlib import Path

log = logging.getLogger(__name__)


class CpufreqReader:
    """Read current CPU frequencies in MHz."""

    def __init__(
        self,
        sysfs_root: str | Path = "/sys/devices/system/cpu",
        proc_root: str | Path = "/proc",
    ) -> None:
        self._root = Path(sysfs_root)
        self._cpuinfo_path = Path(proc_root) / "cpuinfo"

    def _sysfs_mhz(self, cpu_id: int) -> float | None:
        path = self._root / f"cpu{cpu_id}" / "cpufreq" / "scaling_cur_freq"
        try:
            return int(path.read_text().strip()) / 1000.0
        except (OSError, ValueError):
            return None

    def _cpuinfo_mhz(self) -> dict[int, float]:
        """Map processor number to the ``cpu MHz`` value of its block."""
        try:
            text = self._cpuinfo_path.read_text()
        except OSError:
            log.debug("unable to read %s", self._cpuinfo_path)
            return {}

        result: dict[int, float] = {}
        processor: int | None = None
        for line in text.splitlines():
            key, sep, value = line.partition(":")
            if not sep:
                continue
            key = key.strip()
            if key == "processor":
                try:
                    processor = int(value.strip())
                except ValueError:
                    processor = None
            elif key == "cpu MHz" and processor is not None:
                try:
                    result[processor] = float(value.strip())
                except ValueError:
                    log.debug("bad cpu MHz value %r", value)
        return result

    def read(self, cpu_ids: list[int]) -> dict[int, float | None]:
        """Return MHz per CPU, or None where neither source has a value."""
        result: dict[int, float | None] = {
            cpu_id: self._sysfs_mhz(cpu_id) for cpu_id in cpu_ids
        }
        if any(mhz is None for mhz in result.values()):
            fallback = self._cpuinfo_mhz()
            for cpu_id, mhz in result.items():
                if mhz is None:
                    result[cpu_id] = fallback.get(cpu_id)
        return result

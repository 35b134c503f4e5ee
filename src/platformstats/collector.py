"""Report orchestration with signal handling.

Runs each collector in turn and prints its block.  CPU utilization, RAM
and swap are mandatory: if one fails the run still completes, but the exit
status is the errno of the first failure.  Power rails, CMA and CPU
frequency are optional and only ever print a notice.
"""

from __future__ import annotations

import contextlib
import errno
import logging
import signal
import socket
import sys
import threading
from typing import TYPE_CHECKING, Iterator, TextIO

from . import report
from .errors import IOUnavailable, MalformedData
from .registry import DEFAULT_VARIANTS, PlatformVariant, load_variants, select_variant
from .sensors.cpufreq import CpufreqReader
from .sensors.hwmon import HwmonEnumerator
from .sensors.power import PowerReader
from .sensors.procfs import ProcfsReader

if TYPE_CHECKING:
    from .config import StatsConfig

log = logging.getLogger(__name__)


def _status_of(exc: Exception) -> int:
    code = getattr(exc, "errno", None)
    return code if isinstance(code, int) and code > 0 else errno.EIO


class StatsCollector:
    """Produce platform statistics reports for one configuration."""

    def __init__(
        self,
        config: StatsConfig,
        variants: tuple[PlatformVariant, ...] = DEFAULT_VARIANTS,
        stop_event: threading.Event | None = None,
    ) -> None:
        self._config = config
        self._variants = variants
        self._stop = stop_event or threading.Event()
        self._procfs = ProcfsReader(config.proc_root)
        self._cpufreq = CpufreqReader(config.cpu_sysfs_root, config.proc_root)
        self._hwmon = HwmonEnumerator(config.hwmon_root)

    def hostname(self) -> str:
        return self._config.hostname or socket.gethostname()

    def run_once(self, out: TextIO) -> int:
        """Print one full report and return its exit status."""
        cfg = self._config
        status = 0

        # CPU utilization (mandatory)
        cpu_ids: list[int] = []
        try:
            loads = self._procfs.sample_utilization(cfg.interval, self._stop.wait)
        except (IOUnavailable, MalformedData) as exc:
            log.error("CPU utilization: %s", exc)
            report.print_unavailable("CPU Utilization", exc, out)
            status = status or _status_of(exc)
        else:
            report.print_cpu_utilization(loads, out, cfg.verbose, cfg.interval)
            cpu_ids = [load.cpu_id for load in loads]

        # RAM and swap (mandatory), CMA (optional) from one meminfo read
        meminfo: dict[str, int] | None
        try:
            meminfo = self._procfs.meminfo()
        except IOUnavailable as exc:
            log.error("memory: %s", exc)
            report.print_unavailable("RAM Utilization", exc, out)
            report.print_unavailable("Swap Mem Utilization", exc, out)
            status = status or _status_of(exc)
            meminfo = None
        else:
            report.print_memory(
                "RAM Utilization",
                {key: meminfo.get(key) for key in ProcfsReader.RAM_KEYS},
                out,
            )
            report.print_memory(
                "Swap Mem Utilization",
                {key: meminfo.get(key) for key in ProcfsReader.SWAP_KEYS},
                out,
            )

        # Power rails (optional)
        self._report_power(out)

        if meminfo is not None:
            cma = {key: meminfo.get(key) for key in ProcfsReader.CMA_KEYS}
            if any(v is not None for v in cma.values()):
                report.print_memory("CMA Mem Utilization", cma, out)
            else:
                report.print_unavailable(
                    "CMA Mem Utilization", "not provided by this kernel", out
                )

        # CPU frequency (optional)
        if cpu_ids:
            report.print_cpu_frequency(self._cpufreq.read(cpu_ids), out)
        else:
            report.print_unavailable("CPU Frequency", "no CPUs listed", out)

        return status

    def _report_power(self, out: TextIO) -> None:
        cfg = self._config
        hostname = self.hostname()
        if cfg.verbose:
            print(f"hostname={hostname}", file=out)
        variant = select_variant(hostname, self._variants)
        if variant is None:
            report.print_unavailable(
                "Power Utilization:", f"no sensor table for host {hostname!r}", out
            )
            return

        reader = PowerReader(self._hwmon, cfg.workers, cfg.read_timeout)
        readings = reader.read(variant.sensors)
        failed = sum(1 for r in readings if not r.ok)
        if failed:
            log.warning(
                "%s: %d of %d rails unavailable", variant.name, failed, len(readings)
            )
        report.print_power(readings, variant, out, cfg.verbose)

    def print_inventory(self, out: TextIO) -> int:
        """Print the hwmon inventory; non-zero only if hwmon is unreadable."""
        try:
            devices = self._hwmon.inventory()
        except IOUnavailable as exc:
            report.print_unavailable("hwmon Inventory", exc, out)
            return _status_of(exc)
        report.print_inventory(devices, out)
        return 0


@contextlib.contextmanager
def _open_output(config: StatsConfig) -> Iterator[TextIO]:
    if config.output is None:
        yield sys.stdout
        return
    config.output.parent.mkdir(parents=True, exist_ok=True)
    with open(config.output, "w") as fh:
        yield fh


def run_collector(config: StatsConfig) -> int:
    """Produce ``config.count`` reports (0 = until signalled).

    Returns:
        0, or the errno of the first failed mandatory collector.

    Raises:
        OSError: if the platforms file or output file cannot be opened.
        MalformedData: if the platforms file is invalid.
    """
    variants = DEFAULT_VARIANTS
    if config.platforms_file is not None:
        variants = load_variants(config.platforms_file)

    stop = threading.Event()

    def _signal_handler(signum: int, frame: object) -> None:
        stop.set()

    previous = {
        sig: signal.signal(sig, _signal_handler)
        for sig in (signal.SIGTERM, signal.SIGINT)
    }

    collector = StatsCollector(config, variants, stop)
    status = 0
    try:
        with _open_output(config) as out:
            if config.list_sensors:
                return collector.print_inventory(out)

            done = 0
            while not stop.is_set():
                result = collector.run_once(out)
                status = status or result
                out.flush()
                done += 1
                if config.count and done >= config.count:
                    break
            if stop.is_set():
                print(f"\nInterrupted after {done} report(s).", file=sys.stderr)
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)
    return status

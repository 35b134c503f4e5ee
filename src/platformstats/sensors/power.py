"""Power, voltage and temperature rails from PMBus regulators via hwmon.

Each descriptor of the selected platform table is resolved to its channel
file for this boot and read.  Failures are recorded per rail; one missing
regulator never hides the others.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence

from ..errors import EnumerationError, IOUnavailable, MalformedData
from .hwmon import HwmonEnumerator, read_value, scale_value
from .resolver import ChannelResolver, ResolvedChannel

if TYPE_CHECKING:
    from ..registry import SensorDescriptor

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PowerReading:
    """Outcome of reading one descriptor."""

    descriptor: SensorDescriptor
    channel: ResolvedChannel | None  # None when resolution failed
    raw: int | None = None  # Integer as read from the input file
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.raw is not None

    @property
    def value(self) -> int | None:
        """The raw reading divided by the descriptor's scale."""
        if self.raw is None:
            return None
        return scale_value(self.raw, self.descriptor.scale)


class PowerReader:
    """Resolve and read a table of hwmon descriptors.

    With ``workers > 1`` descriptors are resolved on daemon threads that
    share one deadline, ``read_timeout`` seconds after the batch starts.
    Rails without a result by then are reported as timed out, and a thread
    stuck on a dead device is abandoned without holding up exit.  Results
    keep table order.
    """

    def __init__(
        self,
        enumerator: HwmonEnumerator,
        workers: int = 1,
        read_timeout: float = 2.0,
    ) -> None:
        self._resolver = ChannelResolver(enumerator)
        self._workers = max(1, workers)
        self._read_timeout = read_timeout

    def read_one(self, descriptor: SensorDescriptor) -> PowerReading:
        """Resolve and read a single descriptor, never raising for I/O."""
        try:
            channel = self._resolver.resolve(descriptor)
        except EnumerationError as exc:
            return PowerReading(descriptor, None, error=str(exc))

        if channel is None:
            return PowerReading(descriptor, None, error="not found")

        try:
            raw = read_value(channel.path)
        except (IOUnavailable, MalformedData) as exc:
            log.debug("%s: %s", descriptor.key, exc)
            return PowerReading(descriptor, channel, error=str(exc))
        return PowerReading(descriptor, channel, raw=raw)

    def read(self, descriptors: Sequence[SensorDescriptor]) -> list[PowerReading]:
        """Read every descriptor, in order."""
        if self._workers == 1 or len(descriptors) <= 1:
            return [self.read_one(d) for d in descriptors]

        pending: queue.SimpleQueue[int] = queue.SimpleQueue()
        for i in range(len(descriptors)):
            pending.put(i)
        results: list[PowerReading | None] = [None] * len(descriptors)
        expired = threading.Event()

        def worker() -> None:
            while not expired.is_set():
                try:
                    i = pending.get_nowait()
                except queue.Empty:
                    return
                results[i] = self.read_one(descriptors[i])

        threads = [
            threading.Thread(
                target=worker, name=f"platformstats-hwmon-{n}", daemon=True
            )
            for n in range(min(self._workers, len(descriptors)))
        ]
        deadline = time.monotonic() + self._read_timeout
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=max(0.0, deadline - time.monotonic()))
        # Workers still running finish their current rail and pick up no more
        expired.set()

        readings: list[PowerReading] = []
        for descriptor, reading in zip(descriptors, list(results), strict=True):
            if reading is None:
                log.warning(
                    "%s: no result after %.1fs", descriptor.key, self._read_timeout
                )
                reading = PowerReading(
                    descriptor, None, error=f"timed out after {self._read_timeout:g}s"
                )
            readings.append(reading)
        return readings

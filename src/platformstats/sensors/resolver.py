"""Resolve sensor descriptors to hwmon channel files for the current boot.

hwmon indices are handed out in probe order and change between boots and
kernel builds, so a descriptor is never mapped to a fixed path.  Instead
each lookup:

1. walks every ``hwmon{N}`` and reads ``hwmon{N}/device/driver/{address}/name``
   until one names the descriptor's driver (a :class:`DeviceHandle`);
2. re-derives the device's own hwmon index M from
   ``hwmon{N}/device/driver/{address}/hwmon/hwmon{M}``, since the driver
   directory reached through N may belong to a sibling device;
3. returns ``hwmon{M}/{channel}`` directly, or scans ``hwmon{M}/*_label``
   for the descriptor's label and returns the paired ``*_input`` file.

Channels discovered by label are cached per resolver, keyed by
``(device, address, label)``.  Descriptors themselves are never modified.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Iterator

from .hwmon import INPUT_SUFFIX, LABEL_SUFFIX, DeviceHandle, HwmonEnumerator

if TYPE_CHECKING:
    from ..registry import SensorDescriptor

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedChannel:
    """Where a descriptor's value lives on this boot."""

    path: Path  # Full path to the *_input file
    device: DeviceHandle
    index: int  # hwmon index the channel files live under
    channel: str  # Input file name, e.g. "power3_input"


class ChannelResolver:
    """Turn :class:`SensorDescriptor` objects into :class:`ResolvedChannel`.

    One resolver should be used per collection run; its label cache assumes
    hwmon numbering does not change while it is alive.
    """

    def __init__(self, enumerator: HwmonEnumerator) -> None:
        self._enumerator = enumerator
        self._cache: dict[tuple[str, str, str], str] = {}
        self._lock = threading.Lock()

    @property
    def cached_channels(self) -> dict[tuple[str, str, str], str]:
        """Snapshot of channels discovered by label so far."""
        with self._lock:
            return dict(self._cache)

    def clear_cache(self) -> None:
        """Forget label lookups, e.g. after hwmon devices were re-probed."""
        with self._lock:
            self._cache.clear()

    def candidates(self, descriptor: SensorDescriptor) -> Iterator[DeviceHandle]:
        """Yield hwmon entries bound to the descriptor's driver and address.

        Raises:
            EnumerationError: if the hwmon root cannot be listed.
        """
        for handle_id in self._enumerator.list_devices():
            name = self._enumerator.read_device_name(handle_id, descriptor.address)
            log.debug(
                "hwmon%d/device/driver/%s/name => %r",
                handle_id,
                descriptor.address,
                name,
            )
            if name == descriptor.device:
                yield DeviceHandle(
                    handle_id=handle_id, driver_name=name, address=descriptor.address
                )

    def locate(
        self, descriptor: SensorDescriptor
    ) -> tuple[DeviceHandle, int] | None:
        """Find the first matching device and the hwmon index of its channels.

        A device whose index cannot be derived is skipped in favour of the
        next candidate.
        """
        for handle in self.candidates(descriptor):
            index = self._enumerator.device_index(handle.handle_id, handle.address)
            if index is not None:
                return handle, index
            log.debug(
                "%s: hwmon%d has no hwmon index for %s",
                descriptor.key,
                handle.handle_id,
                handle.address,
            )
        return None

    def find_label(self, index: int, label: str) -> str | None:
        """Return the input file paired with the label file containing *label*.

        Label files are visited in sorted name order and compared exactly
        (after stripping whitespace), so ``pout1`` never matches ``pout10``.
        """
        base = self._enumerator.device_dir(index)
        for fname in self._enumerator.channels(index):
            if not fname.endswith(LABEL_SUFFIX):
                continue
            try:
                content = (base / fname).read_text().strip()
            except OSError:
                log.debug("unable to read %s", base / fname)
                continue
            if content == label:
                return fname.removesuffix(LABEL_SUFFIX) + INPUT_SUFFIX
        return None

    def resolve(self, descriptor: SensorDescriptor) -> ResolvedChannel | None:
        """Resolve *descriptor* to a channel file path.

        A fixed ``channel`` is returned without checking that the file
        exists; the read reports that.  Label lookups return ``None`` when no
        label file matches.

        Returns:
            The resolved channel, or ``None`` if no device or label matched.

        Raises:
            EnumerationError: if the hwmon root cannot be listed.
        """
        located = self.locate(descriptor)
        if located is None:
            log.debug("%s: no hwmon device bound at that address", descriptor.key)
            return None
        handle, index = located

        channel = descriptor.channel
        if not channel:
            key = (descriptor.device, descriptor.address, descriptor.label)
            with self._lock:
                channel = self._cache.get(key, "")
            if not channel:
                log.debug("%s: searching hwmon%d for label", descriptor.key, index)
                found = self.find_label(index, descriptor.label)
                if found is None:
                    log.debug("%s: no label file matched", descriptor.key)
                    return None
                channel = found
                with self._lock:
                    self._cache[key] = channel

        resolved = ResolvedChannel(
            path=self._enumerator.device_dir(index) / channel,
            device=handle,
            index=index,
            channel=channel,
        )
        log.debug("%s => %s", descriptor.key, resolved.path)
        return resolved

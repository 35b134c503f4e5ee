"""Hardware monitor devices from the sysfs hwmon interface.

Enumerates /sys/class/hwmon/hwmon*/ entries, reads device identity files,
cross-references the driver+address view of a device back to its hwmon
index, and reads integer channel values.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from ..errors import EnumerationError, IOUnavailable, MalformedData

log = logging.getLogger(__name__)

_HWMON_RE = re.compile(r"^hwmon(\d+)$")

LABEL_SUFFIX = "_label"
INPUT_SUFFIX = "_input"


@dataclass(frozen=True)
class DeviceHandle:
    """A hwmon device located by driver name and bus address."""

    handle_id: int  # N of the hwmon{N} entry it was found through
    driver_name: str  # Contents of device/driver/{address}/name
    address: str  # Bus address, e.g. "6-0043"


@dataclass(frozen=True)
class HwmonChannel:
    """One ``*_input`` file of a hwmon device with its optional label."""

    name: str  # e.g. "power1_input"
    label: str  # Contents of the paired *_label file, or "" when absent


@dataclass
class HwmonDevice:
    """Inventory entry for a hwmon device."""

    index: int
    name: str
    channels: list[HwmonChannel] = field(default_factory=list)


class HwmonEnumerator:
    """List and inspect the devices registered under the hwmon class root."""

    def __init__(self, root: str | Path = "/sys/class/hwmon") -> None:
        self._root = Path(root)

    def device_dir(self, index: int) -> Path:
        """Return the directory of ``hwmon{index}``."""
        return self._root / f"hwmon{index}"

    def list_devices(self) -> list[int]:
        """Return the numeric ids of all ``hwmon{N}`` entries.

        Ids are sorted for reproducible output, but they are assigned by the
        kernel at probe time and must not be treated as stable identities.

        Raises:
            EnumerationError: if the hwmon root cannot be listed.  This is
                distinct from an empty list, which means no device is
                registered.
        """
        try:
            names = [entry.name for entry in self._root.iterdir()]
        except OSError as exc:
            raise EnumerationError(
                f"unable to open {self._root}: {exc.strerror or exc}",
                exc.errno,
                str(self._root),
            ) from exc

        ids: list[int] = []
        for name in names:
            m = _HWMON_RE.match(name)
            if m:
                ids.append(int(m.group(1)))
        return sorted(ids)

    def read_device_name(self, handle_id: int, address: str | None = None) -> str:
        """Read a device's identity file.

        Without an address this is ``hwmon{N}/name``.  With an address it is
        the name of the bus device bound to the same driver at that address,
        ``hwmon{N}/device/driver/{address}/name``.

        Returns:
            The stripped name, or an empty string if the file is missing or
            unreadable.
        """
        base = self.device_dir(handle_id)
        if address:
            name_file = base / "device" / "driver" / address / "name"
        else:
            name_file = base / "name"
        try:
            text = name_file.read_text()
        except OSError:
            log.debug("no identity file %s", name_file)
            return ""
        tokens = text.split()
        return tokens[0] if tokens else ""

    def device_index(self, handle_id: int, address: str) -> int | None:
        """Re-derive the hwmon index of the device bound at *address*.

        The driver directory reached through ``hwmon{handle_id}`` lists every
        bus device using that driver; the one at *address* has its own
        ``hwmon/hwmon{M}`` child, and M is the index its channel files live
        under.  M need not equal *handle_id*.
        """
        driver_dir = self.device_dir(handle_id) / "device" / "driver"
        hwmon_dir = driver_dir / address / "hwmon"
        try:
            names = [entry.name for entry in hwmon_dir.iterdir()]
        except OSError:
            log.debug("unable to list %s", hwmon_dir)
            return None

        indices = sorted(int(m.group(1)) for m in map(_HWMON_RE.match, names) if m)
        if not indices:
            log.debug("no hwmon entry under %s", hwmon_dir)
            return None
        return indices[0]

    def channels(self, index: int) -> list[str]:
        """Return the sorted file names under ``hwmon{index}``."""
        try:
            return sorted(entry.name for entry in self.device_dir(index).iterdir())
        except OSError:
            log.debug("unable to list %s", self.device_dir(index))
            return []

    def inventory(self) -> list[HwmonDevice]:
        """Describe every device with its input channels and labels."""
        devices: list[HwmonDevice] = []
        for index in self.list_devices():
            device = HwmonDevice(
                index=index, name=self.read_device_name(index) or f"hwmon{index}"
            )
            base = self.device_dir(index)
            for fname in self.channels(index):
                if not fname.endswith(INPUT_SUFFIX):
                    continue
                stem = fname.removesuffix(INPUT_SUFFIX)
                try:
                    label = (base / f"{stem}{LABEL_SUFFIX}").read_text().strip()
                except OSError:
                    label = ""
                device.channels.append(HwmonChannel(name=fname, label=label))
            devices.append(device)
        return devices


def read_value(path: str | Path) -> int:
    """Read a single integer token from a sysfs value file.

    Raises:
        IOUnavailable: if the file cannot be opened or read.
        MalformedData: if the content is empty or not an integer.
    """
    try:
        text = Path(path).read_text()
    except OSError as exc:
        raise IOUnavailable.from_oserror(exc, path) from exc

    tokens = text.split()
    if not tokens:
        raise MalformedData(f"{path}: empty value file")
    try:
        return int(tokens[0])
    except ValueError:
        raise MalformedData(f"{path}: not an integer: {tokens[0]!r}") from None


def scale_value(raw: int, scale: int) -> int:
    """Divide *raw* by *scale*, truncating toward zero."""
    if scale < 1:
        raise ValueError(f"scale must be >= 1, got {scale}")
    quotient = abs(raw) // scale
    return -quotient if raw < 0 else quotient

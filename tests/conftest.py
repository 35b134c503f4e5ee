"""Shared fake procfs/sysfs trees for the platformstats tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

SAMPLE_STAT = """\
cpu  220 0 110 1620 20 10 10 0 0 0
cpu0 100 0 50 800 10 5 5 0 0 0
cpu1 120 0 60 820 10 5 5 0 0 0
intr 12345678 50 0 0 0 0 0 0 0
ctxt 98765432
btime 1700000000
procs_running 3
procs_blocked 1
"""

SAMPLE_MEMINFO = """\
MemTotal:        4021128 kB
MemFree:         3250412 kB
MemAvailable:    3512008 kB
Buffers:           15480 kB
Cached:           315896 kB
SwapCached:            0 kB
SwapTotal:       1048572 kB
SwapFree:        1048000 kB
CmaTotal:         262144 kB
CmaFree:          260000 kB
"""


class FakeSysfs:
    """Build an i2c/hwmon sysfs layout with the same symlinks as the kernel.

    ``class/hwmon/hwmon{N}/device`` links to ``bus/i2c/devices/{addr}``,
    whose ``driver`` links to ``bus/i2c/drivers/{driver}``, which in turn
    links every bound address back to its device directory.
    """

    def __init__(self, root: Path) -> None:
        self.hwmon = root / "class" / "hwmon"
        self.devices = root / "bus" / "i2c" / "devices"
        self.drivers = root / "bus" / "i2c" / "drivers"
        for d in (self.hwmon, self.devices, self.drivers):
            d.mkdir(parents=True, exist_ok=True)

    def add_plain(self, index: int, name: str, files: dict[str, str]) -> Path:
        """Add a hwmon device with no bus device behind it (e.g. coretemp)."""
        hwmon_dir = self.hwmon / f"hwmon{index}"
        hwmon_dir.mkdir()
        (hwmon_dir / "name").write_text(f"{name}\n")
        for fname, content in files.items():
            (hwmon_dir / fname).write_text(f"{content}\n")
        return hwmon_dir

    def add_pmbus(
        self, index: int, driver: str, address: str, files: dict[str, str]
    ) -> Path:
        """Add a hwmon device backed by an i2c device bound to *driver*."""
        hwmon_dir = self.add_plain(index, driver, files)

        dev_dir = self.devices / address
        (dev_dir / "hwmon" / f"hwmon{index}").mkdir(parents=True)
        (dev_dir / "name").write_text(f"{driver}\n")

        drv_dir = self.drivers / driver
        drv_dir.mkdir(exist_ok=True)
        (drv_dir / address).symlink_to(dev_dir, target_is_directory=True)
        (dev_dir / "driver").symlink_to(drv_dir, target_is_directory=True)
        (hwmon_dir / "device").symlink_to(dev_dir, target_is_directory=True)
        return hwmon_dir


def _irps5401_files(base: int = 1000000) -> dict[str, str]:
    """Channel files of an irps5401: five labelled outputs and a temperature."""
    files: dict[str, str] = {
        "in1_label": "vin",
        "in1_input": "12000",
        "curr1_label": "iin",
        "curr1_input": "800",
        "temp1_label": "temp1",
        "temp1_input": "45000",
    }
    for i in range(1, 6):
        files[f"power{i}_label"] = f"pout{i}"
        files[f"power{i}_input"] = str(base * i + 123)
    return files


@pytest.fixture()
def irps5401_files():
    """Factory for irps5401 channel files, keyed by file name."""
    return _irps5401_files


@pytest.fixture()
def fake_sysfs(tmp_path: Path) -> FakeSysfs:
    if sys.platform == "win32":
        pytest.skip("sysfs symlink layout needs a POSIX filesystem")
    return FakeSysfs(tmp_path / "sys")


@pytest.fixture()
def pmbus_sysfs(fake_sysfs: FakeSysfs) -> FakeSysfs:
    """coretemp at hwmon0 plus two irps5401 regulators probed out of order.

    6-0044 was probed first and got hwmon1; 6-0043 got hwmon3.
    """
    fake_sysfs.add_plain(0, "coretemp", {"temp1_input": "51000"})
    fake_sysfs.add_pmbus(1, "irps5401", "6-0044", _irps5401_files(base=2000000))
    fake_sysfs.add_pmbus(3, "irps5401", "6-0043", _irps5401_files(base=1000000))
    return fake_sysfs


@pytest.fixture()
def fake_proc(tmp_path: Path) -> Path:
    """Create a fake /proc with stat and meminfo."""
    proc = tmp_path / "proc"
    proc.mkdir()
    (proc / "stat").write_text(SAMPLE_STAT)
    (proc / "meminfo").write_text(SAMPLE_MEMINFO)
    return proc

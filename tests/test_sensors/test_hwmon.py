"""Tests for hwmon enumeration and value reads."""

from __future__ import annotations

import errno
from pathlib import Path

import pytest

from platformstats.errors import EnumerationError, IOUnavailable, MalformedData
from platformstats.sensors.hwmon import HwmonEnumerator, read_value, scale_value


class TestListDevices:
    """Tests for HwmonEnumerator.list_devices()."""

    def test_lists_numeric_ids(self, pmbus_sysfs) -> None:
        enum = HwmonEnumerator(pmbus_sysfs.hwmon)
        assert enum.list_devices() == [0, 1, 3]

    def test_ignores_entries_without_digits(self, pmbus_sysfs) -> None:
        (pmbus_sysfs.hwmon / "hwmon").mkdir()
        (pmbus_sysfs.hwmon / "hwmonX").mkdir()
        (pmbus_sysfs.hwmon / "thermal0").mkdir()
        enum = HwmonEnumerator(pmbus_sysfs.hwmon)
        assert enum.list_devices() == [0, 1, 3]

    def test_sorts_numerically(self, fake_sysfs) -> None:
        for i in (10, 2, 1):
            fake_sysfs.add_plain(i, f"dev{i}", {})
        enum = HwmonEnumerator(fake_sysfs.hwmon)
        assert enum.list_devices() == [1, 2, 10]

    def test_empty_root_is_not_an_error(self, fake_sysfs) -> None:
        enum = HwmonEnumerator(fake_sysfs.hwmon)
        assert enum.list_devices() == []

    def test_missing_root_raises(self, tmp_path: Path) -> None:
        enum = HwmonEnumerator(tmp_path / "nonexistent")
        with pytest.raises(EnumerationError) as excinfo:
            enum.list_devices()
        assert excinfo.value.errno == errno.ENOENT
        assert isinstance(excinfo.value, IOUnavailable)


class TestDeviceIdentity:
    """Tests for read_device_name() and device_index()."""

    def test_plain_name(self, pmbus_sysfs) -> None:
        enum = HwmonEnumerator(pmbus_sysfs.hwmon)
        assert enum.read_device_name(0) == "coretemp"

    def test_address_qualified_name(self, pmbus_sysfs) -> None:
        enum = HwmonEnumerator(pmbus_sysfs.hwmon)
        # hwmon1 is 6-0044, but its driver also lists 6-0043
        assert enum.read_device_name(1, "6-0043") == "irps5401"
        assert enum.read_device_name(1, "6-0044") == "irps5401"

    def test_missing_name_is_empty(self, pmbus_sysfs) -> None:
        enum = HwmonEnumerator(pmbus_sysfs.hwmon)
        assert enum.read_device_name(0, "6-0043") == ""
        assert enum.read_device_name(1, "6-0099") == ""
        assert enum.read_device_name(42) == ""

    def test_device_index_cross_reference(self, pmbus_sysfs) -> None:
        enum = HwmonEnumerator(pmbus_sysfs.hwmon)
        assert enum.device_index(1, "6-0043") == 3
        assert enum.device_index(1, "6-0044") == 1
        assert enum.device_index(3, "6-0044") == 1

    def test_device_index_unknown_address(self, pmbus_sysfs) -> None:
        enum = HwmonEnumerator(pmbus_sysfs.hwmon)
        assert enum.device_index(1, "6-0099") is None
        assert enum.device_index(0, "6-0043") is None


class TestInventory:
    """Tests for HwmonEnumerator.inventory()."""

    def test_lists_channels_with_labels(self, pmbus_sysfs) -> None:
        devices = HwmonEnumerator(pmbus_sysfs.hwmon).inventory()
        assert [d.index for d in devices] == [0, 1, 3]
        assert devices[0].name == "coretemp"
        assert [(c.name, c.label) for c in devices[0].channels] == [
            ("temp1_input", "")
        ]
        labels = {c.name: c.label for c in devices[2].channels}
        assert labels["power3_input"] == "pout3"
        assert labels["temp1_input"] == "temp1"


class TestReadValue:
    """Tests for read_value() and scale_value()."""

    def test_reads_integer(self, tmp_path: Path) -> None:
        path = tmp_path / "power1_input"
        path.write_text("1234567\n")
        assert read_value(path) == 1234567

    def test_reads_first_token(self, tmp_path: Path) -> None:
        path = tmp_path / "in1_input"
        path.write_text("  -42 trailing\n")
        assert read_value(path) == -42

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(IOUnavailable) as excinfo:
            read_value(tmp_path / "nonexistent")
        assert excinfo.value.errno == errno.ENOENT

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty"
        path.write_text("")
        with pytest.raises(MalformedData):
            read_value(path)

    def test_non_integer(self, tmp_path: Path) -> None:
        path = tmp_path / "bad"
        path.write_text("12.5\n")
        with pytest.raises(MalformedData):
            read_value(path)

    @pytest.mark.parametrize(
        ("raw", "scale", "expected"),
        [
            (1234567, 1000, 1234),
            (999, 1000, 0),
            (-1500, 1000, -1),
            (800, 1, 800),
        ],
    )
    def test_scale_truncates_toward_zero(
        self, raw: int, scale: int, expected: int
    ) -> None:
        assert scale_value(raw, scale) == expected

    def test_scale_rejects_zero(self) -> None:
        with pytest.raises(ValueError):
            scale_value(10, 0)

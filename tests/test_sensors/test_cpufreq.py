"""Tests for the CPU frequency reader."""

from __future__ import annotations

from pathlib import Path

import pytest

from platformstats.sensors.cpufreq import CpufreqReader

SAMPLE_CPUINFO = """\
processor\t: 0
vendor_id\t: GenuineIntel
cpu MHz\t\t: 2394.454
cache size\t: 8192 KB

processor\t: 1
vendor_id\t: GenuineIntel
cpu MHz\t\t: 1800.000
cache size\t: 8192 KB
"""


@pytest.fixture()
def fake_cpufreq(tmp_path: Path) -> Path:
    """Create a fake /sys/devices/system/cpu tree with cpufreq."""
    root = tmp_path / "cpu"
    for i in range(2):
        cpu_dir = root / f"cpu{i}" / "cpufreq"
        cpu_dir.mkdir(parents=True)
        (cpu_dir / "scaling_cur_freq").write_text(f"{1199999 + i * 100000}\n")

    # cpu2 has no cpufreq
    (root / "cpu2").mkdir()
    return root


class TestCpufreqReader:
    """Tests for CpufreqReader.read()."""

    def test_sysfs_values(self, fake_cpufreq: Path, tmp_path: Path) -> None:
        reader = CpufreqReader(fake_cpufreq, tmp_path / "proc")
        data = reader.read([0, 1])
        assert data[0] == pytest.approx(1199.999)
        assert data[1] == pytest.approx(1299.999)

    def test_missing_everywhere(self, fake_cpufreq: Path, tmp_path: Path) -> None:
        reader = CpufreqReader(fake_cpufreq, tmp_path / "proc")
        assert reader.read([2]) == {2: None}

    def test_cpuinfo_fallback(self, tmp_path: Path) -> None:
        proc = tmp_path / "proc"
        proc.mkdir()
        (proc / "cpuinfo").write_text(SAMPLE_CPUINFO)
        reader = CpufreqReader(tmp_path / "nonexistent", proc)
        data = reader.read([0, 1, 2])
        assert data[0] == pytest.approx(2394.454)
        assert data[1] == pytest.approx(1800.0)
        assert data[2] is None

    def test_sysfs_preferred(self, fake_cpufreq: Path, tmp_path: Path) -> None:
        proc = tmp_path / "proc"
        proc.mkdir()
        (proc / "cpuinfo").write_text(SAMPLE_CPUINFO)
        data = CpufreqReader(fake_cpufreq, proc).read([0, 2])
        assert data[0] == pytest.approx(1199.999)
        assert data[2] is None

    def test_malformed_sysfs_value(self, fake_cpufreq: Path, tmp_path: Path) -> None:
        (fake_cpufreq / "cpu0" / "cpufreq" / "scaling_cur_freq").write_text("n/a\n")
        reader = CpufreqReader(fake_cpufreq, tmp_path / "proc")
        assert reader.read([0]) == {0: None}

    def test_empty_list(self, fake_cpufreq: Path) -> None:
        assert CpufreqReader(fake_cpufreq).read([]) == {}

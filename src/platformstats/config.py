"""Configuration for platformstats."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass
class StatsConfig:
    """Runtime configuration for a platformstats run."""

    # Emit raw samples, host/variant selection and resolution traces
    verbose: bool = False

    # Utilization sampling window in seconds
    interval: float = 1.0

    # Write the report here instead of stdout (None = stdout)
    output: Path | None = None

    # Number of reports to produce (0 = until interrupted)
    count: int = 1

    # Host name used to pick the sensor table (None = socket.gethostname())
    hostname: str | None = None

    # JSON file replacing the built-in platform sensor tables
    platforms_file: Path | None = None

    # Worker threads for power rail resolution (1 = sequential)
    workers: int = 1

    # Per-sensor bound in seconds when resolving through the worker pool
    read_timeout: float = 2.0

    # Print the hwmon inventory and exit
    list_sensors: bool = False

    # Pseudo-filesystem roots, overridable for tests
    proc_root: Path = Path("/proc")
    hwmon_root: Path = Path("/sys/class/hwmon")
    cpu_sysfs_root: Path = Path("/sys/devices/system/cpu")

    def __post_init__(self) -> None:
        self.proc_root = Path(self.proc_root)
        self.hwmon_root = Path(self.hwmon_root)
        self.cpu_sysfs_root = Path(self.cpu_sysfs_root)
        if self.output is not None:
            self.output = Path(self.output)
        if self.platforms_file is not None:
            self.platforms_file = Path(self.platforms_file)
        if self.interval < 0:
            raise ValueError(f"interval must be >= 0, got {self.interval}")
        if self.count < 0:
            raise ValueError(f"count must be >= 0, got {self.count}")
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")

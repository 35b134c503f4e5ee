"""Command-line interface for platformstats."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config import StatsConfig


def _non_negative_float(text: str) -> float:
    value = float(text)
    if value < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {text}")
    return value


def _non_negative_int(text: str) -> int:
    value = int(text)
    if value < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {text}")
    return value


def parse_args(argv: list[str] | None = None) -> StatsConfig:
    """Parse command-line arguments and return a StatsConfig."""
    parser = argparse.ArgumentParser(
        prog="platformstats",
        description=(
            "Report CPU utilization and frequency, RAM, swap, CMA and "
            "hwmon power rails"
        ),
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Print raw CPU samples, platform selection and sensor resolution",
    )
    parser.add_argument(
        "-i",
        "--interval",
        type=_non_negative_float,
        default=1.0,
        help="CPU utilization sampling window in seconds (default: 1.0)",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Write the report to this file instead of stdout",
    )
    parser.add_argument(
        "-n",
        "--count",
        type=_non_negative_int,
        default=1,
        help="Number of reports, 0 to run until interrupted (default: 1)",
    )
    parser.add_argument(
        "--hostname",
        default=None,
        help="Host name used to select the sensor table (default: this host)",
    )
    parser.add_argument(
        "--platforms",
        type=Path,
        default=None,
        help="JSON file replacing the built-in platform sensor tables",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Threads used to resolve power rails (default: 1)",
    )
    parser.add_argument(
        "--read-timeout",
        type=_non_negative_float,
        default=2.0,
        help="Per-rail time limit in seconds when --workers > 1 (default: 2.0)",
    )
    parser.add_argument(
        "--list-sensors",
        action="store_true",
        help="List every hwmon device with its channels and labels, then exit",
    )
    parser.add_argument("--proc-root", type=Path, default=Path("/proc"))
    parser.add_argument("--hwmon-root", type=Path, default=Path("/sys/class/hwmon"))
    parser.add_argument(
        "--cpu-sysfs-root", type=Path, default=Path("/sys/devices/system/cpu")
    )

    args = parser.parse_args(argv)
    if args.workers < 1:
        parser.error("--workers must be >= 1")

    return StatsConfig(
        verbose=args.verbose,
        interval=args.interval,
        output=args.output,
        count=args.count,
        hostname=args.hostname,
        platforms_file=args.platforms,
        workers=args.workers,
        read_timeout=args.read_timeout,
        list_sensors=args.list_sensors,
        proc_root=args.proc_root,
        hwmon_root=args.hwmon_root,
        cpu_sysfs_root=args.cpu_sysfs_root,
    )


def main(argv: list[str] | None = None) -> int:
    """Entry point for the platformstats CLI."""
    config = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if config.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    # Import here so --help works without touching the sensor modules
    from .collector import run_collector
    from .errors import MalformedData

    try:
        return run_collector(config)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return 0
    except (OSError, MalformedData) as exc:
        print(f"platformstats: {exc}", file=sys.stderr)
        return 2

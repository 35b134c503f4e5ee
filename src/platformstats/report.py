"""Plain-text report blocks, one per statistic category."""

from __future__ import annotations

from typing import TYPE_CHECKING, Mapping, Sequence, TextIO

if TYPE_CHECKING:
    from .registry import PlatformVariant
    from .sensors.hwmon import HwmonDevice
    from .sensors.power import PowerReading
    from .sensors.procfs import CpuLoad, CpuSnapshot


def _snapshot_line(snap: CpuSnapshot) -> str:
    return f"CPU{snap.cpu_id}: " + " ".join(str(c) for c in snap.counters())


def print_cpu_utilization(
    loads: Sequence[CpuLoad], out: TextIO, verbose: bool = False, interval: float = 1.0
) -> None:
    print("\nCPU Utilization", file=out)
    for cpu in loads:
        if verbose:
            print(f"cpu_id={cpu.cpu_id}", file=out)
            print("Stats at t0", file=out)
            print(_snapshot_line(cpu.prev), file=out)
            print(f"Stats at t1 after {interval:g}s", file=out)
            print(_snapshot_line(cpu.curr), file=out)
        if cpu.load is None:
            print(f"CPU{cpu.cpu_id}\t:     undefined ({cpu.reason})", file=out)
        else:
            print(f"CPU{cpu.cpu_id}\t:     {cpu.load:f}%", file=out)


def print_memory(title: str, values: Mapping[str, int | None], out: TextIO) -> None:
    """Print a block of meminfo fields; missing fields show as ``n/a``."""
    print(f"\n{title}", file=out)
    width = max((len(key) for key in values), default=0)
    for key, kb in values.items():
        shown = "n/a" if kb is None else f"{kb} kB"
        print(f"{key:<{width}}  :     {shown}", file=out)


def print_power(
    readings: Sequence[PowerReading],
    variant: PlatformVariant,
    out: TextIO,
    verbose: bool = False,
) -> None:
    print("\nPower Utilization:", file=out)
    if verbose:
        print(variant.name, file=out)
    for i, reading in enumerate(readings):
        d = reading.descriptor
        if verbose:
            print(
                f"[{i}] {d.device},{d.address},{d.label},{d.channel},{d.unit}",
                file=out,
            )
            if reading.channel is not None:
                print(f"\t{d.key} => {reading.channel.path}", file=out)
        if reading.ok:
            print(f"\t{d.key} ({d.alias}) = {reading.value} {d.unit}", file=out)
        else:
            print(f"\t{d.key} ({d.alias}) = unavailable: {reading.error}", file=out)


def print_cpu_frequency(freqs: Mapping[int, float | None], out: TextIO) -> None:
    print("\nCPU Frequency", file=out)
    for cpu_id, mhz in sorted(freqs.items()):
        shown = "n/a" if mhz is None else f"{mhz:f} MHz"
        print(f"CPU{cpu_id}\t:    {shown}", file=out)


def print_unavailable(title: str, reason: object, out: TextIO) -> None:
    """Print a category header followed by why it could not be collected."""
    print(f"\n{title}", file=out)
    print(f"\t{reason}", file=out)


def print_inventory(devices: Sequence[HwmonDevice], out: TextIO) -> None:
    """Print every hwmon device with its input channels and labels."""
    print("=== hwmon Inventory ===", file=out)
    if not devices:
        print("  (no hwmon devices)", file=out)
    for device in devices:
        print(f"  hwmon{device.index}: {device.name}", file=out)
        for channel in device.channels:
            label = f"  [{channel.label}]" if channel.label else ""
            print(f"    {channel.name}{label}", file=out)

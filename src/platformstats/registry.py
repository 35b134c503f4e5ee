"""Per-platform tables of hwmon sensor descriptors.

Each board variant lists the PMBus regulators it carries and the rails to
report for each.  A variant is selected at startup by a substring of the
host name; the tables can be replaced wholesale by a JSON file of the form::

    {"variants": [
        {"name": "Ultra96-V2", "match": "u96v2",
         "sensors": [{"device": "irps5401", "address": "6-0043",
                      "label": "pout1", "alias": "VCCAUX",
                      "unit": "mW", "scale": 1000}]}
    ]}
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from .errors import MalformedData


@dataclass(frozen=True)
class SensorDescriptor:
    """A logical hwmon channel: which device, where, and how to display it.

    When ``channel`` is set it names the input file directly and ``label`` is
    only used for display; otherwise the channel is found by matching
    ``label`` against the device's ``*_label`` files.
    """

    device: str  # Driver name, e.g. "irps5401"
    address: str  # Bus address, e.g. "6-0043"
    channel: str = ""  # Fixed input file name, e.g. "temp1_input"
    label: str = ""  # Label file content to match, e.g. "pout1"
    alias: str = ""  # Display name
    unit: str = ""  # Display unit
    scale: int = 1  # Integer divisor applied before display

    def __post_init__(self) -> None:
        if not self.device or not self.address:
            raise ValueError("descriptor needs both device and address")
        if not self.channel and not self.label:
            raise ValueError(
                f"descriptor {self.device}@{self.address} needs a channel or a label"
            )
        if self.scale < 1:
            raise ValueError(f"scale must be >= 1, got {self.scale}")

    @property
    def key(self) -> str:
        """Short identity used in report lines, e.g. ``irps5401@6-0043-pout1``."""
        return f"{self.device}@{self.address}-{self.label or self.channel}"


@dataclass(frozen=True)
class PlatformVariant:
    """A board and the sensor table to report on it."""

    name: str
    match: str  # Substring of the host name identifying this board
    sensors: tuple[SensorDescriptor, ...]


def _pout(
    device: str, address: str, rails: Iterable[tuple[str, str]]
) -> list[SensorDescriptor]:
    return [
        SensorDescriptor(
            device, address, label=label, alias=alias, unit="mW", scale=1000
        )
        for label, alias in rails
    ]


def _temp(device: str, address: str) -> SensorDescriptor:
    return SensorDescriptor(
        device,
        address,
        channel="temp1_input",
        label="temp1",
        alias="Temperature",
        unit="C",
        scale=1000,
    )


ULTRA96V2 = PlatformVariant(
    name="Ultra96-V2",
    match="u96v2",
    sensors=(
        # ir38060-i2c-6-45
        *_pout("ir38060", "6-0045", [("pout1", "5V")]),
        SensorDescriptor("ir38060", "6-0045", label="iout1", alias="5V", unit="mA"),
        SensorDescriptor("ir38060", "6-0045", label="vout1", alias="5V", unit="mV"),
        _temp("ir38060", "6-0045"),
        # irps5401-i2c-6-43
        *_pout(
            "irps5401",
            "6-0043",
            [
                ("pout1", "VCCAUX"),
                ("pout2", "VCCO 1.2V"),
                ("pout3", "VCCO 1.1V"),
                ("pout4", "VCCINT"),
                ("pout5", "3.3V DP"),
            ],
        ),
        _temp("irps5401", "6-0043"),
        # irps5401-i2c-6-44
        *_pout(
            "irps5401",
            "6-0044",
            [
                ("pout1", "VCCPSAUX"),
                ("pout2", "PSINT_LP"),
                ("pout3", "VCCO 3.3V"),
                ("pout4", "PSINT_FP"),
                ("pout5", "PSPLL 1.2V"),
            ],
        ),
        _temp("irps5401", "6-0044"),
    ),
)

UZ7EV_EVCC = PlatformVariant(
    name="UltraZed-7EV-EVCC",
    match="uz7ev",
    sensors=(
        *_pout("ir38063", "6-004c", [("pout1", "Carrier 3V3")]),
        *_pout("ir38063", "6-004b", [("pout1", "Carrier 1V8")]),
        # pout4 is not connected on this carrier
        *_pout(
            "irps5401",
            "6-004a",
            [
                ("pout1", "Carrier 0V9 MGTAVCC"),
                ("pout2", "Carrier 1V2 MGTAVTT"),
                ("pout3", "Carrier 1V1 HDMI"),
                ("pout5", "Carrier 1V8 MGTVCCAUX LDO"),
            ],
        ),
        *_pout(
            "irps5401",
            "6-0049",
            [
                ("pout1", "Carrier 0V85 MGTRAVCC"),
                ("pout2", "Carrier 1V8 VCCO"),
                ("pout3", "Carrier 3V3 VCCO"),
                ("pout4", "Carrier 5V MAIN"),
                ("pout5", "Carrier 1V8 MGTRAVTT LDO"),
            ],
        ),
        _temp("irps5401", "6-0049"),
        *_pout("ir38063", "6-0048", [("pout1", "SOM 0V85 VCCINT")]),
        *_pout(
            "irps5401",
            "6-0047",
            [
                ("pout1", "SOM 1V8 VCCAUX"),
                ("pout2", "SOM 3V3"),
                ("pout3", "SOM 0V9 VCUINT"),
                ("pout4", "SOM 1V2 VCCO_HP_66"),
                ("pout5", "SOM 1V8 PSDDR_PLL LDO"),
            ],
        ),
        _temp("irps5401", "6-0047"),
        *_pout(
            "irps5401",
            "6-0046",
            [
                ("pout1", "SOM 1V2 VCCO_PSIO"),
                ("pout2", "SOM 0V85 VCC_PSINTLP"),
                ("pout3", "SOM 1V2 VCCO_PSDDR4_504"),
                ("pout4", "SOM 0V85 VCC_PSINTFP"),
                ("pout5", "SOM 1V2 VCC_PSPLL LDO"),
            ],
        ),
        _temp("irps5401", "6-0046"),
    ),
)

UZ3EG = PlatformVariant(
    name="UltraZed-3EG",
    match="uz3eg",
    sensors=(
        *_pout(
            "irps5401",
            "6-0043",
            [
                ("pout1", "PSIO"),
                ("pout2", "VCCAUX"),
                ("pout3", "PSINTLP"),
                ("pout4", "PSINTFP"),
                ("pout5", "PSPLL"),
            ],
        ),
        _temp("irps5401", "6-0043"),
        *_pout(
            "irps5401",
            "6-0044",
            [
                ("pout1", "PSDDR4"),
                ("pout2", "INT_IO"),
                ("pout3", "3.3V"),
                ("pout4", "INT"),
                ("pout5", "PSDDRPLL"),
            ],
        ),
        _temp("irps5401", "6-0044"),
        *_pout(
            "irps5401",
            "6-0045",
            [
                ("pout1", "MGTAVCC"),
                ("pout2", "5V"),
                ("pout3", "3.3V"),
                ("pout4", "VCCO 1.8V"),
                ("pout5", "MGTAVTT"),
            ],
        ),
        _temp("irps5401", "6-0045"),
    ),
)

DEFAULT_VARIANTS: tuple[PlatformVariant, ...] = (ULTRA96V2, UZ7EV_EVCC, UZ3EG)


def select_variant(
    hostname: str, variants: Iterable[PlatformVariant] = DEFAULT_VARIANTS
) -> PlatformVariant | None:
    """Return the first variant whose ``match`` occurs in *hostname*.

    Only one table is reported per host, even when the host name contains
    the ``match`` of several variants; earlier variants take precedence.
    """
    for variant in variants:
        if variant.match and variant.match in hostname:
            return variant
    return None


_DESCRIPTOR_FIELDS = ("device", "address", "channel", "label", "alias", "unit", "scale")


def _parse_descriptor(raw: object, where: str) -> SensorDescriptor:
    if not isinstance(raw, dict):
        raise MalformedData(f"{where}: expected an object, got {type(raw).__name__}")
    unknown = set(raw) - set(_DESCRIPTOR_FIELDS)
    if unknown:
        raise MalformedData(f"{where}: unknown fields {sorted(unknown)}")
    try:
        return SensorDescriptor(
            device=str(raw.get("device", "")),
            address=str(raw.get("address", "")),
            channel=str(raw.get("channel", "")),
            label=str(raw.get("label", "")),
            alias=str(raw.get("alias", "")),
            unit=str(raw.get("unit", "")),
            scale=int(raw.get("scale", 1)),
        )
    except (TypeError, ValueError) as exc:
        raise MalformedData(f"{where}: {exc}") from None


def load_variants(path: str | Path) -> tuple[PlatformVariant, ...]:
    """Load platform sensor tables from a JSON file.

    Raises:
        OSError: if the file cannot be read.
        MalformedData: if the document does not describe valid variants.
    """
    path = Path(path)
    try:
        doc = json.loads(path.read_text())
    except json.JSONDecodeError as exc:
        raise MalformedData(f"{path}: invalid JSON: {exc}") from None

    raw_variants = doc.get("variants") if isinstance(doc, dict) else None
    if not isinstance(raw_variants, list):
        raise MalformedData(f"{path}: expected a top-level 'variants' list")

    variants: list[PlatformVariant] = []
    for i, raw in enumerate(raw_variants):
        where = f"{path}: variants[{i}]"
        if not isinstance(raw, dict):
            raise MalformedData(f"{where}: expected an object")
        name = raw.get("name")
        match = raw.get("match")
        sensors = raw.get("sensors", [])
        if not isinstance(name, str) or not isinstance(match, str) or not match:
            raise MalformedData(f"{where}: 'name' and non-empty 'match' are required")
        if not isinstance(sensors, list):
            raise MalformedData(f"{where}: 'sensors' must be a list")
        variants.append(
            PlatformVariant(
                name=name,
                match=match,
                sensors=tuple(
                    _parse_descriptor(s, f"{where}.sensors[{j}]")
                    for j, s in enumerate(sensors)
                ),
            )
        )
    return tuple(variants)

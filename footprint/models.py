from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Literal, Optional, Union

from .factors import DEFAULT_VEHICLE_ID

ManufacturingMode = Literal["perUnit", "totalAllocated"]
EntryId = Union[int, str]

DEFAULT_YEAR = 2024
DEFAULT_TOTAL_OUTPUT = 1000.0


def as_number(value) -> float:
    """Numeric cast for form values: blanks, junk and NaN count as 0."""
    if value is None or value == "":
        return 0.0
    try:
        num = float(value)
    except (TypeError, ValueError):
        return 0.0
    return 0.0 if math.isnan(num) else num


@dataclass
class MaterialEntry:
    id: EntryId
    name: str = ""
    weight: float = 0.0  # kg per unit of product
    factor_id: str = ""
    custom_factor: float = 0.0  # kg CO2e / kg, used when use_db is False
    use_db: bool = True


@dataclass
class TransportEntry:
    id: EntryId
    # Weak reference to a MaterialEntry of the same product.
    material_id: Optional[EntryId] = None
    weight: float = 0.0  # kg
    distance: float = 0.0  # km
    vehicle_id: str = DEFAULT_VEHICLE_ID


@dataclass
class Manufacturing:
    mode: ManufacturingMode = "perUnit"
    electricity_usage: float = 0.0  # kWh (per unit, or for the whole run when totalAllocated)
    total_output: float = DEFAULT_TOTAL_OUTPUT


@dataclass
class DownstreamTransport:
    weight: float = 0.0  # kg
    distance: float = 0.0  # km
    vehicle_id: str = DEFAULT_VEHICLE_ID


@dataclass
class Product:
    id: int
    name: str
    year: int = DEFAULT_YEAR
    # Full supplier data available: skip the stage model and report total_override.
    has_full_data: bool = False
    total_override: float = 0.0
    materials: List[MaterialEntry] = field(default_factory=list)
    upstream_transport: List[TransportEntry] = field(default_factory=list)
    manufacturing: Manufacturing = field(default_factory=Manufacturing)
    downstream_transport: DownstreamTransport = field(default_factory=DownstreamTransport)

    def material_ids(self) -> List[EntryId]:
        return [m.id for m in self.materials]


@dataclass
class Contract:
    id: int
    name: str
    products: List[Product] = field(default_factory=list)


@dataclass(frozen=True)
class CalculationResult:
    A: float = 0.0
    B: float = 0.0
    C: float = 0.0
    D: float = 0.0
    total: float = 0.0

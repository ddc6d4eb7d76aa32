from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Sequence, Tuple


@dataclass(frozen=True)
class MaterialFactor:
    id: str
    name: str
    factor: float  # kg CO2e per kg
    unit1: str = "kgCO2e"
    unit2: str = "kg"


@dataclass(frozen=True)
class TransportFactor:
    id: str
    name: str
    factor: float  # kg CO2e per tonne-km
    unit: str = "kgCO2e/t-km"


# Grid electricity (kg CO2e / kWh) by reporting year.
_ELECTRICITY_EF_KG_PER_KWH: Dict[int, float] = {
    2023: 0.495,
    2024: 0.494,
    2025: 0.474,
    2026: 0.455,
}

# Used when the product year has no published factor.
_FALLBACK_ELECTRICITY_EF_KG_PER_KWH = 0.495

_TRANSPORT_FACTORS: Tuple[TransportFactor, ...] = (
    TransportFactor("t1", "大貨車 (柴油)", 0.131),
    TransportFactor("t2", "小貨車 (柴油)", 0.587),
    TransportFactor("t3", "小貨車 (汽油)", 0.683),
    TransportFactor("t4", "國際海運貨物運輸服務", 1.98),
    TransportFactor("t5", "國際航運", 1.16),
)

_BUILTIN_MATERIALS: Tuple[MaterialFactor, ...] = (
    MaterialFactor("m1", "鋁合金 (Aluminum)", 6.7),
    MaterialFactor("m2", "不鏽鋼 (Stainless Steel)", 6.1),
    MaterialFactor("m3", "銅 (Copper)", 3.8),
)

# Public constants (used by UI defaults)
ELECTRICITY_FACTORS = dict(_ELECTRICITY_EF_KG_PER_KWH)
FALLBACK_ELECTRICITY_FACTOR = _FALLBACK_ELECTRICITY_EF_KG_PER_KWH
TRANSPORT_FACTORS = _TRANSPORT_FACTORS
INITIAL_MATERIAL_DB = _BUILTIN_MATERIALS
ELECTRICITY_YEARS = tuple(sorted(_ELECTRICITY_EF_KG_PER_KWH.keys()))
DEFAULT_VEHICLE_ID = _TRANSPORT_FACTORS[0].id

__all__ = [
    "MaterialFactor",
    "TransportFactor",
    "ELECTRICITY_FACTORS",
    "ELECTRICITY_YEARS",
    "FALLBACK_ELECTRICITY_FACTOR",
    "TRANSPORT_FACTORS",
    "INITIAL_MATERIAL_DB",
    "DEFAULT_VEHICLE_ID",
    "material_factor",
    "transport_factor",
    "electricity_factor",
    "find_by_id",
]


def find_by_id(items: Iterable, item_id) -> Optional[object]:
    """First item whose ``id`` equals ``item_id``, or None."""
    for item in items:
        if item.id == item_id:
            return item
    return None


def material_factor(material_db: Sequence[MaterialFactor], factor_id: str) -> float:
    """kg CO2e per kg for ``factor_id``; 0 when the id is not in the table."""
    found = find_by_id(material_db, factor_id)
    return float(found.factor) if found is not None and found.factor else 0.0


def transport_factor(vehicle_id: str, transport_db: Sequence[TransportFactor] = TRANSPORT_FACTORS) -> float:
    """kg CO2e per tonne-km for ``vehicle_id``; 0 when unknown."""
    found = find_by_id(transport_db, vehicle_id)
    return float(found.factor) if found is not None and found.factor else 0.0


def electricity_factor(year, electricity_factors: Optional[Dict[int, float]] = None) -> float:
    """kg CO2e per kWh for ``year``, falling back to the 2023 grid value."""
    table = ELECTRICITY_FACTORS if electricity_factors is None else electricity_factors
    try:
        key = int(year)
    except (TypeError, ValueError):
        return _FALLBACK_ELECTRICITY_EF_KG_PER_KWH
    ef = table.get(key)
    return float(ef) if ef else _FALLBACK_ELECTRICITY_EF_KG_PER_KWH

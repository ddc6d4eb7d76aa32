from __future__ import annotations

from typing import Iterable, Sequence

from .factors import MaterialFactor, material_factor
from .models import MaterialEntry, as_number

__all__ = [
    "entry_factor",
    "material_entry_kgco2e",
    "material_emissions_kgco2e",
]


def entry_factor(entry: MaterialEntry, material_db: Sequence[MaterialFactor]) -> float:
    """Emission factor (kg CO2e / kg) that applies to one material entry.

    Entries flagged ``use_db`` resolve ``factor_id`` against the material table
    (0 when it is not there); others carry their own supplier factor.
    """
    if entry.use_db:
        return material_factor(material_db, entry.factor_id)
    return as_number(entry.custom_factor)


def material_entry_kgco2e(entry: MaterialEntry, material_db: Sequence[MaterialFactor]) -> float:
    return float(as_number(entry.weight) * entry_factor(entry, material_db))


def material_emissions_kgco2e(
    materials: Iterable[MaterialEntry],
    material_db: Sequence[MaterialFactor],
) -> float:
    """Stage A: raw material acquisition, kg CO2e per unit of product."""
    return float(sum(material_entry_kgco2e(m, material_db) for m in materials))

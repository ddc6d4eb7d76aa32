"""Per-unit product carbon footprint calculator (cradle-to-customer).

Splits the footprint of one product into four lifecycle stages:
- A: raw material acquisition (material weight * material factor)
- B: upstream transport of materials (tonne-km * vehicle factor)
- C: manufacturing electricity (kWh per unit * grid factor for the year)
- D: downstream transport of the finished product (tonne-km * vehicle factor)

Products with full supplier data skip the stage model and report the supplied
total directly. Missing factors never raise; they contribute 0.

All functions return kg CO2e per unit of product.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from .factors import (
    TRANSPORT_FACTORS,
    MaterialFactor,
    TransportFactor,
    electricity_factor,
    transport_factor,
)
from .Manufacturing_energy import allocated_electricity_kwh, manufacturing_emissions_kgco2e
from .MaterialEmissions import entry_factor, material_emissions_kgco2e
from .models import CalculationResult, Product, as_number
from .TransportEmissions import downstream_transport_kgco2e, upstream_transport_kgco2e

_DECIMALS = 4

STAGE_LABELS = {
    "A": "Raw materials",
    "B": "Raw material transport",
    "C": "Manufacturing",
    "D": "Product transport",
}


def calculate(
    product: Optional[Product],
    material_db: Sequence[MaterialFactor],
    *,
    transport_db: Sequence[TransportFactor] = TRANSPORT_FACTORS,
    electricity_factors: Optional[Dict[int, float]] = None,
) -> CalculationResult:
    """Return the A/B/C/D subtotals and total for ``product``."""
    if product is None:
        return CalculationResult()
    if product.has_full_data:
        return CalculationResult(total=as_number(product.total_override))

    a = material_emissions_kgco2e(product.materials, material_db)
    b = upstream_transport_kgco2e(product.upstream_transport, transport_db)
    c = manufacturing_emissions_kgco2e(product.manufacturing, product.year, electricity_factors)
    d = downstream_transport_kgco2e(product.downstream_transport, transport_db)

    # total is summed before rounding the subtotals
    return CalculationResult(
        A=round(a, _DECIMALS),
        B=round(b, _DECIMALS),
        C=round(c, _DECIMALS),
        D=round(d, _DECIMALS),
        total=round(a + b + c + d, _DECIMALS),
    )


def stage_shares(result: CalculationResult) -> List[Dict[str, Any]]:
    """Share of the total per stage; stages with no contribution are left out."""
    if result.total == 0:
        return []
    rows = []
    for stage, label in STAGE_LABELS.items():
        value = float(getattr(result, stage))
        share = value / result.total
        if share > 0:
            rows.append({"stage": stage, "label": label, "kgco2e": value, "share": share})
    return rows


def footprint_report(
    product: Product,
    material_db: Sequence[MaterialFactor],
    *,
    transport_db: Sequence[TransportFactor] = TRANSPORT_FACTORS,
    electricity_factors: Optional[Dict[int, float]] = None,
) -> Dict[str, Any]:
    """Calculation result plus the factors that were resolved to get there."""
    result = calculate(
        product,
        material_db,
        transport_db=transport_db,
        electricity_factors=electricity_factors,
    )

    resolved_inputs: Dict[str, Any] = {"has_full_data": bool(product.has_full_data)}
    if product.has_full_data:
        resolved_inputs["total_override"] = as_number(product.total_override)
    else:
        resolved_inputs["materials"] = [
            {
                "id": m.id,
                "name": m.name,
                "weight_kg": as_number(m.weight),
                "source": "db" if m.use_db else "custom",
                "factor_id": m.factor_id if m.use_db else None,
                "factor_kgco2e_per_kg": entry_factor(m, material_db),
            }
            for m in product.materials
        ]
        resolved_inputs["upstream_transport"] = [
            {
                "id": t.id,
                "material_id": t.material_id,
                "weight_kg": as_number(t.weight),
                "distance_km": as_number(t.distance),
                "vehicle_id": t.vehicle_id,
                "factor_kgco2e_per_tkm": transport_factor(t.vehicle_id, transport_db),
            }
            for t in product.upstream_transport
        ]
        resolved_inputs["manufacturing"] = {
            "mode": product.manufacturing.mode,
            "year": product.year,
            "kwh_per_unit": allocated_electricity_kwh(product.manufacturing),
            "electricity_factor_kgco2e_per_kwh": electricity_factor(product.year, electricity_factors),
        }
        down = product.downstream_transport
        resolved_inputs["downstream_transport"] = {
            "weight_kg": as_number(down.weight),
            "distance_km": as_number(down.distance),
            "vehicle_id": down.vehicle_id,
            "factor_kgco2e_per_tkm": transport_factor(down.vehicle_id, transport_db),
        }

    return {
        "product_id": product.id,
        "product_name": product.name,
        "total_kgco2e": result.total,
        "breakdown_kgco2e": {"A": result.A, "B": result.B, "C": result.C, "D": result.D},
        "shares": stage_shares(result),
        "inputs": resolved_inputs,
    }

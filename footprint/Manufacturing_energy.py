from __future__ import annotations

from typing import Dict, Optional

from .factors import electricity_factor
from .models import Manufacturing, as_number


def allocated_electricity_kwh(mfg: Manufacturing) -> float:
    """Electricity attributed to one unit of product (kWh).

    Steps:
    1) perUnit: the recorded usage is already per unit
    2) totalAllocated: spread the run's usage over its output, never dividing by less than 1
    """
    usage = as_number(mfg.electricity_usage)
    if mfg.mode == "perUnit":
        return usage
    output = max(as_number(mfg.total_output), 1.0)
    return usage / output


def manufacturing_emissions_kgco2e(
    mfg: Manufacturing,
    year,
    electricity_factors: Optional[Dict[int, float]] = None,
) -> float:
    """Stage C: manufacturing electricity, kg CO2e per unit."""
    ef = electricity_factor(year, electricity_factors)
    return float(allocated_electricity_kwh(mfg) * ef)

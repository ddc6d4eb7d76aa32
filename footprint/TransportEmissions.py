from __future__ import annotations

from typing import Iterable, Sequence

from .factors import TRANSPORT_FACTORS, TransportFactor, transport_factor
from .models import DownstreamTransport, TransportEntry, as_number

_KG_PER_TONNE = 1000.0

__all__ = [
    "transport_emissions_kgco2e",
    "upstream_transport_kgco2e",
    "downstream_transport_kgco2e",
]


def transport_emissions_kgco2e(
    weight_kg,
    distance_km,
    vehicle_id: str,
    transport_db: Sequence[TransportFactor] = TRANSPORT_FACTORS,
) -> float:
    """Tonne-km based freight emissions: (kg / 1000) * km * kgCO2e/t-km.

    Unknown vehicles have a factor of 0.
    """
    tonnes = as_number(weight_kg) / _KG_PER_TONNE
    return float(tonnes * as_number(distance_km) * transport_factor(vehicle_id, transport_db))


def upstream_transport_kgco2e(
    entries: Iterable[TransportEntry],
    transport_db: Sequence[TransportFactor] = TRANSPORT_FACTORS,
) -> float:
    """Stage B: moving raw materials to the factory."""
    return float(
        sum(transport_emissions_kgco2e(t.weight, t.distance, t.vehicle_id, transport_db) for t in entries)
    )


def downstream_transport_kgco2e(
    downstream: DownstreamTransport,
    transport_db: Sequence[TransportFactor] = TRANSPORT_FACTORS,
) -> float:
    """Stage D: shipping the finished product."""
    return transport_emissions_kgco2e(
        downstream.weight, downstream.distance, downstream.vehicle_id, transport_db
    )

import json

from footprint.calculator import footprint_report
from footprint.factors import INITIAL_MATERIAL_DB
from footprint.models import DownstreamTransport, Manufacturing, MaterialEntry, Product, TransportEntry
from ui.config import settings
from ui.logging_config import setup_logging

setup_logging(settings.LOG_LEVEL)

product = Product(
    id=1,
    name="手機背蓋",
    year=2024,
    materials=[
        MaterialEntry(id="al", name="Aluminium frame", weight=0.12, factor_id="m1"),
        MaterialEntry(id="cu", name="Copper trace", weight=0.01, use_db=False, custom_factor=4.1),
    ],
    upstream_transport=[
        TransportEntry(id="leg1", material_id="al", weight=0.12, distance=350, vehicle_id="t1"),
    ],
    manufacturing=Manufacturing(mode="totalAllocated", electricity_usage=5200, total_output=40000),
    downstream_transport=DownstreamTransport(weight=0.2, distance=9000, vehicle_id="t4"),
)

# Built-in table: the ids above (m1) are not in the published sheet.
print(json.dumps(footprint_report(product, INITIAL_MATERIAL_DB), indent=2, ensure_ascii=False))

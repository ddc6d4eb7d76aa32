import pytest

from footprint.calculator import calculate, footprint_report, stage_shares
from footprint.factors import INITIAL_MATERIAL_DB, MaterialFactor
from footprint.models import (
    CalculationResult,
    DownstreamTransport,
    Manufacturing,
    MaterialEntry,
    Product,
    TransportEntry,
)


def empty_product(**kwargs):
    return Product(id=1, name="Back cover", **kwargs)


def test_no_product_is_all_zero():
    assert calculate(None, INITIAL_MATERIAL_DB) == CalculationResult()


def test_empty_product_totals_zero():
    result = calculate(empty_product(), INITIAL_MATERIAL_DB)
    assert result.total == 0
    assert (result.A, result.B, result.C, result.D) == (0, 0, 0, 0)


def test_override_ignores_entries():
    product = empty_product(
        has_full_data=True,
        total_override="12.34567",
        materials=[MaterialEntry(id=1, weight=10, factor_id="m1")],
        downstream_transport=DownstreamTransport(weight=1000, distance=10, vehicle_id="t1"),
    )
    result = calculate(product, INITIAL_MATERIAL_DB)
    assert result == CalculationResult(total=12.34567)


def test_material_from_table():
    product = empty_product(materials=[MaterialEntry(id=1, weight=10, factor_id="m1")])
    assert calculate(product, INITIAL_MATERIAL_DB).A == pytest.approx(67.0)


def test_material_custom_factor_and_unknown_id():
    product = empty_product(
        materials=[
            MaterialEntry(id=1, weight=2, use_db=False, custom_factor=1.5),
            MaterialEntry(id=2, weight=5, factor_id="missing"),
        ]
    )
    assert calculate(product, INITIAL_MATERIAL_DB).A == pytest.approx(3.0)


def test_material_is_linear_in_weight():
    db = [MaterialFactor("x", "Resin", 2.3)]
    one = calculate(empty_product(materials=[MaterialEntry(id=1, weight=4, factor_id="x")]), db)
    two = calculate(empty_product(materials=[MaterialEntry(id=1, weight=8, factor_id="x")]), db)
    assert two.A == pytest.approx(2 * one.A)


def test_upstream_transport():
    product = empty_product(
        upstream_transport=[TransportEntry(id=1, weight=1000, distance=100, vehicle_id="t1")]
    )
    assert calculate(product, INITIAL_MATERIAL_DB).B == pytest.approx(13.1)


def test_transport_zero_distance_is_zero():
    product = empty_product(
        upstream_transport=[TransportEntry(id=1, weight=5000, distance=0, vehicle_id="t4")],
        downstream_transport=DownstreamTransport(weight=5000, distance=0, vehicle_id="t4"),
    )
    result = calculate(product, INITIAL_MATERIAL_DB)
    assert result.B == 0
    assert result.D == 0


def test_unknown_vehicle_is_zero():
    product = empty_product(
        downstream_transport=DownstreamTransport(weight=500, distance=100, vehicle_id="rocket")
    )
    assert calculate(product, INITIAL_MATERIAL_DB).D == 0


def test_downstream_transport():
    product = empty_product(
        downstream_transport=DownstreamTransport(weight=200, distance=1000, vehicle_id="t4")
    )
    assert calculate(product, INITIAL_MATERIAL_DB).D == pytest.approx(0.2 * 1000 * 1.98)


def test_manufacturing_per_unit_uses_year_factor():
    product = empty_product(year=2025, manufacturing=Manufacturing(mode="perUnit", electricity_usage=2))
    assert calculate(product, INITIAL_MATERIAL_DB).C == pytest.approx(0.948)


def test_manufacturing_unknown_year_falls_back():
    product = empty_product(year=2030, manufacturing=Manufacturing(mode="perUnit", electricity_usage=10))
    assert calculate(product, INITIAL_MATERIAL_DB).C == pytest.approx(4.95)


def test_manufacturing_allocated_zero_output_treated_as_one():
    product = empty_product(
        year=2024,
        manufacturing=Manufacturing(mode="totalAllocated", electricity_usage=1000, total_output=0),
    )
    assert calculate(product, INITIAL_MATERIAL_DB).C == pytest.approx(494.0)


def test_manufacturing_allocated_spreads_over_output():
    product = empty_product(
        year=2024,
        manufacturing=Manufacturing(mode="totalAllocated", electricity_usage=1000, total_output=500),
    )
    assert calculate(product, INITIAL_MATERIAL_DB).C == pytest.approx(0.988)


def test_form_strings_are_cast_and_blanks_count_as_zero():
    product = empty_product(
        materials=[
            MaterialEntry(id=1, weight="10", factor_id="m1"),
            MaterialEntry(id=2, weight="", factor_id="m2"),
            MaterialEntry(id=3, weight="abc", factor_id="m3"),
        ]
    )
    assert calculate(product, INITIAL_MATERIAL_DB).A == pytest.approx(67.0)


def test_subtotals_rounded_to_four_decimals():
    db = [MaterialFactor("x", "Glass", 0.123456789)]
    product = empty_product(materials=[MaterialEntry(id=1, weight=1, factor_id="x")])
    result = calculate(product, db)
    assert result.A == 0.1235
    assert result.total == 0.1235


def test_total_is_sum_of_stages():
    product = empty_product(
        year=2024,
        materials=[MaterialEntry(id=1, weight=10, factor_id="m1")],
        upstream_transport=[TransportEntry(id=2, material_id=1, weight=1000, distance=100, vehicle_id="t1")],
        manufacturing=Manufacturing(mode="perUnit", electricity_usage=1),
        downstream_transport=DownstreamTransport(weight=1000, distance=10, vehicle_id="t2"),
    )
    result = calculate(product, INITIAL_MATERIAL_DB)
    assert result.total == pytest.approx(67.0 + 13.1 + 0.494 + 5.87)


def test_stage_shares_skip_empty_stages():
    shares = stage_shares(CalculationResult(A=3.0, B=0.0, C=1.0, D=0.0, total=4.0))
    assert [s["stage"] for s in shares] == ["A", "C"]
    assert shares[0]["share"] == pytest.approx(0.75)
    assert stage_shares(CalculationResult()) == []


def test_report_lists_resolved_factors():
    product = empty_product(
        year=2026,
        materials=[MaterialEntry(id=1, name="Frame", weight=1, factor_id="m2")],
        upstream_transport=[TransportEntry(id=2, material_id=1, weight=1, distance=1, vehicle_id="t5")],
    )
    report = footprint_report(product, INITIAL_MATERIAL_DB)
    assert report["total_kgco2e"] == report["breakdown_kgco2e"]["A"] + report["breakdown_kgco2e"]["B"]
    assert report["inputs"]["materials"][0]["factor_kgco2e_per_kg"] == pytest.approx(6.1)
    assert report["inputs"]["upstream_transport"][0]["factor_kgco2e_per_tkm"] == pytest.approx(1.16)
    assert report["inputs"]["manufacturing"]["electricity_factor_kgco2e_per_kwh"] == pytest.approx(0.455)


def test_report_for_override_has_no_stage_inputs():
    report = footprint_report(empty_product(has_full_data=True, total_override=5), INITIAL_MATERIAL_DB)
    assert report["total_kgco2e"] == 5
    assert report["inputs"] == {"has_full_data": True, "total_override": 5.0}
    assert report["shares"] == []

from __future__ import annotations

import json
from typing import Callable, List, Optional

import streamlit as st

from footprint.calculator import footprint_report
from footprint.factors import (
    ELECTRICITY_YEARS,
    INITIAL_MATERIAL_DB,
    TRANSPORT_FACTORS,
    MaterialFactor,
    electricity_factor,
)
from footprint.MaterialEmissions import material_entry_kgco2e
from footprint.models import Product, as_number
from footprint.TransportEmissions import transport_emissions_kgco2e
from footprint.workspace import Workspace

from ui.config import settings
from ui.logging_config import setup_logging
from ui.material_sheet import MaterialSheetResult, load_material_db
from ui.search import filter_options, find_option, option_label

setup_logging(settings.LOG_LEVEL)

st.set_page_config(page_title="ISO 14067 Product Carbon Footprint", layout="wide")

VEHICLE_IDS = [v.id for v in TRANSPORT_FACTORS]
VEHICLE_NAMES = {v.id: f"{v.name} ({v.factor} {v.unit})" for v in TRANSPORT_FACTORS}


# --------- Helpers ---------
@st.cache_data(ttl=settings.MATERIAL_SHEET_TTL_S, show_spinner="Loading material factor sheet...")
def material_table() -> MaterialSheetResult:
    if not settings.MATERIAL_SHEET_ENABLED:
        return MaterialSheetResult(materials=INITIAL_MATERIAL_DB, source="builtin")
    return load_material_db(settings.MATERIAL_SHEET_URL, timeout_s=settings.MATERIAL_SHEET_TIMEOUT_S)


def workspace() -> Workspace:
    if "workspace" not in st.session_state:
        st.session_state["workspace"] = Workspace()
    return st.session_state["workspace"]


def run_action(action: Callable, *args) -> None:
    """Apply a workspace edit, keeping refusals for display on the next run."""
    try:
        action(*args)
    except ValueError as e:
        st.session_state["flash"] = str(e)


@st.dialog("Confirm deletion")
def confirm_delete(message: str, action: Callable, *args) -> None:
    st.write(message)
    c1, c2 = st.columns(2)
    if c1.button("Delete", type="primary", width="stretch"):
        run_action(action, *args)
        st.rerun()
    if c2.button("Cancel", width="stretch"):
        st.rerun()


def vehicle_index(vehicle_id: str) -> int:
    return VEHICLE_IDS.index(vehicle_id) if vehicle_id in VEHICLE_IDS else 0


ws = workspace()
sheet = material_table()
material_db: List[MaterialFactor] = list(sheet.materials)

flash = st.session_state.pop("flash", None)
if flash:
    st.warning(flash)
if sheet.warning:
    st.warning(sheet.warning)

# --------- Sidebar: contracts and products ---------
with st.sidebar:
    st.header("Contracts")
    st.caption(f"Material factors: {len(material_db)} ({sheet.source})")

    for contract in list(ws.contracts):
        is_active = contract.id == ws.active_contract_id
        c1, c2 = st.columns([5, 1])
        if c1.button(
            f"{'▸ ' if is_active else ''}{contract.name}",
            key=f"contract_{contract.id}",
            width="stretch",
        ):
            ws.select(contract.id)
            st.rerun()
        if c2.button("✕", key=f"del_contract_{contract.id}", help="Delete contract"):
            if len(ws.contracts) <= 1:
                st.session_state["flash"] = "At least one contract must be kept."
                st.rerun()
            confirm_delete(
                "Delete this contract and every product in it? This cannot be undone.",
                ws.delete_contract,
                contract.id,
            )

        for product in contract.products:
            p1, p2 = st.columns([5, 1])
            label = product.name or "(unnamed product)"
            if product.id == ws.active_product_id:
                label = f"● {label}"
            if p1.button(label, key=f"product_{product.id}", width="stretch"):
                ws.select(contract.id, product.id)
                st.rerun()
            if p2.button("✕", key=f"del_product_{product.id}", help="Delete product"):
                confirm_delete(
                    "Remove this product and its carbon footprint data?",
                    ws.delete_product,
                    contract.id,
                    product.id,
                )
        if st.button("+ Add product", key=f"add_product_{contract.id}"):
            ws.add_product(contract.id)
            st.rerun()
        st.divider()

    if st.button("+ New contract", width="stretch"):
        ws.add_contract()
        st.rerun()

    active = ws.active_contract
    if active is not None:
        name = st.text_input("Contract name", value=active.name, key=f"contract_name_{active.id}")
        if name != active.name:
            ws.rename_contract(active.id, name)
            st.rerun()

product: Optional[Product] = ws.active_product
if product is None:
    st.title("ISO 14067 Product Carbon Footprint")
    st.info("Select a product from the sidebar.")
    st.stop()

header = st.container()

# --------- Product settings ---------
st.subheader("Product")
c1, c2, c3 = st.columns([3, 1, 2])
with c1:
    ws.update_product("name", st.text_input("Product name", value=product.name, key=f"name_{product.id}"))
with c2:
    years = sorted(set(ELECTRICITY_YEARS) | {int(as_number(product.year))})
    year = st.selectbox(
        "Year",
        years,
        index=years.index(int(as_number(product.year))),
        key=f"year_{product.id}",
        help="Selects the grid electricity factor.",
    )
    ws.update_product("year", year)
with c3:
    has_full_data = st.checkbox(
        "Supplier provides the full footprint",
        value=product.has_full_data,
        key=f"full_{product.id}",
        help="If checked, the stage inputs below are ignored and the supplied total is reported.",
    )
    ws.update_product("has_full_data", has_full_data)
    if has_full_data:
        ws.update_product(
            "total_override",
            st.number_input(
                "Supplied total (kgCO2e per unit)",
                min_value=0.0,
                value=float(as_number(product.total_override)),
                key=f"override_{product.id}",
            ),
        )

# --------- A: raw materials ---------
st.divider()
section_a = st.container()
search = st.text_input("Search material factor table", value="", key=f"search_{product.id}")
matches = filter_options(material_db, search)

for idx, m in enumerate(list(product.materials)):
    c1, c2, c3, c4, c5 = st.columns([3, 1, 1, 4, 1])
    with c1:
        ws.update_material(idx, "name", st.text_input("Material name", value=m.name, key=f"m_name_{m.id}"))
    with c2:
        ws.update_material(
            idx,
            "weight",
            st.number_input("Weight (kg)", min_value=0.0, value=float(as_number(m.weight)), format="%.4f", key=f"m_w_{m.id}"),
        )
    with c3:
        use_db = st.checkbox("Use table", value=m.use_db, key=f"m_db_{m.id}")
        ws.update_material(idx, "use_db", use_db)
    with c4:
        if use_db:
            options = list(matches)
            selected = find_option(material_db, m.factor_id)
            if selected is not None and selected not in options:
                options.insert(0, selected)
            ids = [""] + [o.id for o in options]
            labels = {o.id: option_label(o) for o in options}
            labels[""] = "Search..." if search else "(select a factor)"
            factor_id = st.selectbox(
                "Emission factor table",
                ids,
                index=ids.index(m.factor_id) if m.factor_id in ids else 0,
                format_func=lambda i, labels=labels: labels.get(i, i),
                key=f"m_factor_{m.id}",
            )
            ws.update_material(idx, "factor_id", factor_id)
        else:
            ws.update_material(
                idx,
                "custom_factor",
                st.number_input(
                    "Custom factor (kgCO2e/kg)",
                    min_value=0.0,
                    value=float(as_number(m.custom_factor)),
                    format="%.4f",
                    key=f"m_custom_{m.id}",
                ),
            )
    with c5:
        st.caption(f"{material_entry_kgco2e(m, material_db):.4f}")
        if st.button("✕", key=f"del_m_{m.id}", help="Delete material"):
            confirm_delete(
                "Removing this material also deletes its linked transport records. Continue?",
                ws.delete_material,
                idx,
            )

if st.button("+ Add material", key=f"add_m_{product.id}"):
    ws.add_material()
    st.rerun()

# --------- B: upstream transport ---------
st.divider()
section_b = st.container()
material_names = {m.id: (m.name or f"(unnamed #{m.id})") for m in product.materials}
material_choices = [None] + list(material_names)

for idx, t in enumerate(list(product.upstream_transport)):
    c1, c2, c3, c4, c5 = st.columns([3, 1, 1, 4, 1])
    with c1:
        material_id = st.selectbox(
            "Material",
            material_choices,
            index=material_choices.index(t.material_id) if t.material_id in material_choices else 0,
            format_func=lambda i: "(not linked)" if i is None else material_names[i],
            key=f"t_mat_{t.id}",
        )
        run_action(ws.update_transport, idx, "material_id", material_id)
    with c2:
        ws.update_transport(
            idx,
            "weight",
            st.number_input("Weight (kg)", min_value=0.0, value=float(as_number(t.weight)), key=f"t_w_{t.id}"),
        )
    with c3:
        ws.update_transport(
            idx,
            "distance",
            st.number_input("Distance (km)", min_value=0.0, value=float(as_number(t.distance)), key=f"t_d_{t.id}"),
        )
    with c4:
        ws.update_transport(
            idx,
            "vehicle_id",
            st.selectbox(
                "Vehicle",
                VEHICLE_IDS,
                index=vehicle_index(t.vehicle_id),
                format_func=VEHICLE_NAMES.get,
                key=f"t_v_{t.id}",
            ),
        )
    with c5:
        st.caption(f"{transport_emissions_kgco2e(t.weight, t.distance, t.vehicle_id):.4f}")
        if st.button("✕", key=f"del_t_{t.id}", help="Delete transport leg"):
            ws.delete_transport(idx)
            st.rerun()

if st.button("+ Add transport leg", key=f"add_t_{product.id}"):
    first = product.materials[0].id if product.materials else None
    ws.add_transport(material_id=first)
    st.rerun()

# --------- C: manufacturing ---------
st.divider()
section_c = st.container()
mfg = product.manufacturing
c1, c2, c3 = st.columns(3)
with c1:
    mode = st.radio(
        "Electricity basis",
        ["perUnit", "totalAllocated"],
        index=0 if mfg.mode == "perUnit" else 1,
        format_func={"perUnit": "Per unit (kWh/unit)", "totalAllocated": "Total run, allocated by output"}.get,
        key=f"mode_{product.id}",
    )
    ws.update_manufacturing("mode", mode)
with c2:
    ws.update_manufacturing(
        "electricity_usage",
        st.number_input("Electricity (kWh)", min_value=0.0, value=float(as_number(mfg.electricity_usage)), key=f"kwh_{product.id}"),
    )
with c3:
    if mode == "totalAllocated":
        ws.update_manufacturing(
            "total_output",
            st.number_input("Total output (units)", min_value=0.0, value=float(as_number(mfg.total_output)), key=f"out_{product.id}"),
        )
    st.caption(f"Grid factor {product.year}: {electricity_factor(product.year)} kgCO2e/kWh")

# --------- D: downstream transport ---------
st.divider()
section_d = st.container()
down = product.downstream_transport
c1, c2, c3 = st.columns([1, 1, 3])
with c1:
    ws.update_downstream(
        "weight",
        st.number_input("Product weight (kg)", min_value=0.0, value=float(as_number(down.weight)), key=f"d_w_{product.id}"),
    )
with c2:
    ws.update_downstream(
        "distance",
        st.number_input("Distance (km)", min_value=0.0, value=float(as_number(down.distance)), key=f"d_d_{product.id}"),
    )
with c3:
    ws.update_downstream(
        "vehicle_id",
        st.selectbox(
            "Vehicle",
            VEHICLE_IDS,
            index=vehicle_index(down.vehicle_id),
            format_func=VEHICLE_NAMES.get,
            key=f"d_v_{product.id}",
        ),
    )

# --------- Results (rendered above the inputs) ---------
report = footprint_report(product, material_db)
breakdown = report["breakdown_kgco2e"]

section_a.subheader(f"A. Raw material acquisition: {breakdown['A']} kgCO2e")
section_b.subheader(f"B. Raw material transport: {breakdown['B']} kgCO2e")
section_c.subheader(f"C. Manufacturing: {breakdown['C']} kgCO2e")
section_d.subheader(f"D. Product transport: {breakdown['D']} kgCO2e")

with header:
    st.title(product.name or "(unnamed product)")
    m1, m2, m3, m4, m5 = st.columns(5)
    m1.metric("Total (kgCO2e/unit)", f"{report['total_kgco2e']:,.4f}")
    m2.metric("A", f"{breakdown['A']:,.4f}")
    m3.metric("B", f"{breakdown['B']:,.4f}")
    m4.metric("C", f"{breakdown['C']:,.4f}")
    m5.metric("D", f"{breakdown['D']:,.4f}")

    if report["shares"]:
        rows = [
            {"stage": s["label"], "kgCO2e": f"{s['kgco2e']:,.4f}", "share": f"{s['share']:.1%}"}
            for s in report["shares"]
        ]
        st.table(rows)

    st.download_button(
        "Download result JSON",
        data=json.dumps(report, indent=2, ensure_ascii=False),
        file_name=f"footprint_{product.id}.json",
        mime="application/json",
    )
    st.download_button(
        "Download workspace JSON",
        data=json.dumps(ws.to_dict(), indent=2, ensure_ascii=False),
        file_name="contracts.json",
        mime="application/json",
    )

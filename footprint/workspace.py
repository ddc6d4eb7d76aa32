"""Editing session for contracts and their products.

The Workspace owns the contract list plus the active contract/product
selection, and applies the structural rules of the data model:
- at least one contract is always kept
- deleting a material entry deletes the upstream transport entries that reference it
- a transport entry can only reference a material entry of the same product
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import asdict, fields
from typing import Any, Dict, List, Optional, Sequence

from .calculator import calculate
from .factors import DEFAULT_VEHICLE_ID, MaterialFactor
from .models import (
    CalculationResult,
    Contract,
    DownstreamTransport,
    EntryId,
    Manufacturing,
    MaterialEntry,
    Product,
    TransportEntry,
)

logger = logging.getLogger(__name__)

DEFAULT_CONTRACT_NAME = "年度採購主合約"
DEFAULT_PRODUCT_NAME = "新採購項目 - 手機背蓋"
NEW_CONTRACT_NAME = "新契約草稿"
NEW_PRODUCT_NAME = "新建產品項目"

# Nested sections have their own editing operations.
_PRODUCT_FIELDS = {f.name for f in fields(Product)} - {
    "id", "materials", "upstream_transport", "manufacturing", "downstream_transport",
}
_MATERIAL_FIELDS = {f.name for f in fields(MaterialEntry)} - {"id"}
_TRANSPORT_FIELDS = {f.name for f in fields(TransportEntry)} - {"id"}
_MANUFACTURING_FIELDS = {f.name for f in fields(Manufacturing)}
_DOWNSTREAM_FIELDS = {f.name for f in fields(DownstreamTransport)}


def _check_field(name: str, allowed: set, section: str) -> None:
    if name not in allowed:
        raise ValueError(f"Unknown {section} field '{name}'. Expected one of {sorted(allowed)}.")


def _check_index(items: list, index: int, section: str) -> None:
    if not 0 <= index < len(items):
        raise ValueError(f"{section} index {index} out of range (0..{len(items) - 1})")


class Workspace:
    """Contracts of one application session plus the current selection."""

    def __init__(self, seed: bool = True):
        self._ids = itertools.count(1)
        self.contracts: List[Contract] = []
        self.active_contract_id: Optional[int] = None
        self.active_product_id: Optional[int] = None
        if seed:
            contract = Contract(id=self._next_id(), name=DEFAULT_CONTRACT_NAME)
            self.contracts.append(contract)
            self.active_contract_id = contract.id
            self.add_product(contract.id, DEFAULT_PRODUCT_NAME)

    def _next_id(self) -> int:
        return next(self._ids)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    def get_contract(self, contract_id: int) -> Contract:
        for c in self.contracts:
            if c.id == contract_id:
                return c
        raise ValueError(f"Unknown contract id {contract_id}")

    def get_product(self, contract_id: int, product_id: int) -> Product:
        for p in self.get_contract(contract_id).products:
            if p.id == product_id:
                return p
        raise ValueError(f"Unknown product id {product_id} in contract {contract_id}")

    @property
    def active_contract(self) -> Optional[Contract]:
        for c in self.contracts:
            if c.id == self.active_contract_id:
                return c
        return None

    @property
    def active_product(self) -> Optional[Product]:
        contract = self.active_contract
        if contract is None or self.active_product_id is None:
            return None
        for p in contract.products:
            if p.id == self.active_product_id:
                return p
        return None

    def _require_active_product(self) -> Product:
        product = self.active_product
        if product is None:
            raise ValueError("No product selected")
        return product

    def select(self, contract_id: int, product_id: Optional[int] = None) -> None:
        self.get_contract(contract_id)
        if product_id is not None:
            self.get_product(contract_id, product_id)
        self.active_contract_id = contract_id
        self.active_product_id = product_id

    # ------------------------------------------------------------------
    # Contracts and products
    # ------------------------------------------------------------------
    def add_contract(self, name: str = NEW_CONTRACT_NAME) -> Contract:
        contract = Contract(id=self._next_id(), name=name)
        self.contracts.append(contract)
        self.active_contract_id = contract.id
        self.active_product_id = None
        return contract

    def rename_contract(self, contract_id: int, name: str) -> None:
        self.get_contract(contract_id).name = name

    def delete_contract(self, contract_id: int) -> None:
        contract = self.get_contract(contract_id)
        if len(self.contracts) <= 1:
            raise ValueError("At least one contract must be kept")
        self.contracts = [c for c in self.contracts if c.id != contract_id]
        logger.info("Deleted contract %s with %d product(s)", contract_id, len(contract.products))
        if self.active_contract_id == contract_id:
            self.active_contract_id = self.contracts[0].id
            self.active_product_id = None

    def new_product(self, name: str = NEW_PRODUCT_NAME) -> Product:
        """A product with one blank material line and default stage settings."""
        return Product(
            id=self._next_id(),
            name=name,
            materials=[MaterialEntry(id=self._next_id())],
            manufacturing=Manufacturing(),
            downstream_transport=DownstreamTransport(vehicle_id=DEFAULT_VEHICLE_ID),
        )

    def add_product(self, contract_id: int, name: str = NEW_PRODUCT_NAME) -> Product:
        contract = self.get_contract(contract_id)
        product = self.new_product(name)
        contract.products.append(product)
        self.active_contract_id = contract_id
        self.active_product_id = product.id
        return product

    def delete_product(self, contract_id: int, product_id: int) -> None:
        contract = self.get_contract(contract_id)
        self.get_product(contract_id, product_id)
        contract.products = [p for p in contract.products if p.id != product_id]
        if self.active_product_id == product_id:
            self.active_product_id = None

    def update_product(self, field: str, value: Any) -> None:
        _check_field(field, _PRODUCT_FIELDS, "product")
        setattr(self._require_active_product(), field, value)

    # ------------------------------------------------------------------
    # Material entries (stage A)
    # ------------------------------------------------------------------
    def add_material(self, **values: Any) -> MaterialEntry:
        for key in values:
            _check_field(key, _MATERIAL_FIELDS, "material")
        product = self._require_active_product()
        entry = MaterialEntry(id=self._next_id(), **values)
        product.materials.append(entry)
        return entry

    def update_material(self, index: int, field: str, value: Any) -> None:
        _check_field(field, _MATERIAL_FIELDS, "material")
        product = self._require_active_product()
        _check_index(product.materials, index, "material")
        setattr(product.materials[index], field, value)

    def delete_material(self, index: int) -> MaterialEntry:
        product = self._require_active_product()
        _check_index(product.materials, index, "material")
        removed = product.materials.pop(index)
        kept = [t for t in product.upstream_transport if t.material_id != removed.id]
        dropped = len(product.upstream_transport) - len(kept)
        product.upstream_transport = kept
        if dropped:
            logger.info("Material %s removed with %d linked transport entries", removed.id, dropped)
        return removed

    # ------------------------------------------------------------------
    # Upstream transport entries (stage B)
    # ------------------------------------------------------------------
    def _check_material_ref(self, product: Product, material_id: Optional[EntryId]) -> None:
        if material_id is not None and material_id not in product.material_ids():
            raise ValueError(f"Material {material_id} does not belong to product {product.id}")

    def add_transport(
        self,
        material_id: Optional[EntryId] = None,
        weight: float = 0.0,
        distance: float = 0.0,
        vehicle_id: str = DEFAULT_VEHICLE_ID,
    ) -> TransportEntry:
        product = self._require_active_product()
        self._check_material_ref(product, material_id)
        entry = TransportEntry(
            id=self._next_id(),
            material_id=material_id,
            weight=weight,
            distance=distance,
            vehicle_id=vehicle_id,
        )
        product.upstream_transport.append(entry)
        return entry

    def update_transport(self, index: int, field: str, value: Any) -> None:
        _check_field(field, _TRANSPORT_FIELDS, "transport")
        product = self._require_active_product()
        _check_index(product.upstream_transport, index, "transport")
        if field == "material_id":
            self._check_material_ref(product, value)
        setattr(product.upstream_transport[index], field, value)

    def delete_transport(self, index: int) -> TransportEntry:
        product = self._require_active_product()
        _check_index(product.upstream_transport, index, "transport")
        return product.upstream_transport.pop(index)

    # ------------------------------------------------------------------
    # Manufacturing (stage C) and downstream transport (stage D)
    # ------------------------------------------------------------------
    def update_manufacturing(self, field: str, value: Any) -> None:
        _check_field(field, _MANUFACTURING_FIELDS, "manufacturing")
        if field == "mode" and value not in ("perUnit", "totalAllocated"):
            raise ValueError("mode must be 'perUnit' or 'totalAllocated'")
        setattr(self._require_active_product().manufacturing, field, value)

    def update_downstream(self, field: str, value: Any) -> None:
        _check_field(field, _DOWNSTREAM_FIELDS, "downstream transport")
        setattr(self._require_active_product().downstream_transport, field, value)

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------
    def calculate(self, material_db: Sequence[MaterialFactor]) -> CalculationResult:
        """Footprint of the active product; all zeros when nothing is selected."""
        return calculate(self.active_product, material_db)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "active_contract_id": self.active_contract_id,
            "active_product_id": self.active_product_id,
            "contracts": [asdict(c) for c in self.contracts],
        }

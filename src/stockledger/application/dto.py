"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI (or any other collaborator) and the
application layer without exposing domain internals.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class LocationBalanceDTO:
    location: str
    qty: Decimal


@dataclass(frozen=True)
class StockStateDTO:
    item_id: str
    sku: str
    quantity_on_hand: Decimal
    average_unit_cost: Decimal
    low_stock: bool


@dataclass(frozen=True)
class MoveLineDTO:
    """Output: one row of the move history."""

    id: int
    item_id: str
    sku: str
    move_type: str
    qty: Decimal
    unit_cost: Decimal
    location: str
    reference: str | None
    created_at: datetime


@dataclass(frozen=True)
class InventoryRowDTO:
    item_id: str
    sku: str
    name: str
    unit_of_measure: str
    quantity: Decimal
    low_stock_threshold: Decimal | None
    average_unit_cost: Decimal
    total_value: Decimal
    low_stock: bool
    locations: list[LocationBalanceDTO] = field(default_factory=list)

    @property
    def locations_text(self) -> str:
        return " | ".join(f"{loc.location}: {loc.qty}" for loc in self.locations)


@dataclass(frozen=True)
class InventoryViewDTO:
    rows: list[InventoryRowDTO]
    total_quantity: Decimal
    total_value: Decimal  # rounded to 2dp


@dataclass(frozen=True)
class InvoiceLineSpec:
    """Input: one line of an invoice about to be posted."""

    item_id: str
    qty: Decimal
    unit_price: Decimal
    tax_rate: Decimal = Decimal("0")
    description: str = ""


@dataclass(frozen=True)
class EstimateLineDTO:
    sku: str
    name: str
    qty: int
    unit_price: str  # formatted, e.g. "₹ 130.00"
    line_total: str


@dataclass(frozen=True)
class EstimateDTO:
    lines: list[EstimateLineDTO]
    total: str

"""Application service: Show Inventory use case (query).

One row per item with quantity, average cost, stock value and the
per-location breakdown, plus filters for search text, low stock and a
selected location.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum

from stockledger.application.dto import (
    InventoryRowDTO,
    InventoryViewDTO,
    LocationBalanceDTO,
)
from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.move import Move
from stockledger.domain.model.value_objects import round2
from stockledger.domain.repository.ledger_repository import LedgerRepository
from stockledger.domain.service.ledger_aggregator import location_balances


class LocationScope(Enum):
    ALL_ITEMS = "all_items"
    HAS_STOCK = "has_stock"
    APPEARS_ANY = "appears_any"

    @staticmethod
    def parse(raw: str | LocationScope) -> LocationScope:
        if isinstance(raw, LocationScope):
            return raw
        try:
            return LocationScope(raw.strip().lower())
        except ValueError:
            raise ValidationError(f"Invalid location scope '{raw}'") from None


class ShowInventoryHandler:

    def __init__(self, ledger_repo: LedgerRepository) -> None:
        self._ledger_repo = ledger_repo

    def handle(
        self,
        search: str | None = None,
        low_only: bool = False,
        location: str | None = None,
        scope: str | LocationScope = LocationScope.ALL_ITEMS,
        include_zero_locations: bool = False,
    ) -> InventoryViewDTO:
        scope = LocationScope.parse(scope)
        needle = (search or "").strip().lower()
        location = (location or "").strip() or None

        moves_by_item: dict[str, list[Move]] = {}
        for move in self._ledger_repo.all_moves():
            moves_by_item.setdefault(move.item_id, []).append(move)

        rows: list[InventoryRowDTO] = []
        for item in self._ledger_repo.list_items():
            balances = location_balances(moves_by_item.get(item.id, []))
            shown = [
                LocationBalanceDTO(location=loc, qty=qty)
                for loc, qty in balances.items()
                if include_zero_locations or qty != 0
            ]
            row = InventoryRowDTO(
                item_id=item.id,
                sku=item.sku,
                name=item.name,
                unit_of_measure=item.unit_of_measure or "",
                quantity=item.quantity_on_hand,
                low_stock_threshold=item.low_stock_threshold,
                average_unit_cost=item.average_unit_cost,
                total_value=item.stock_value,
                low_stock=item.is_low_stock,
                locations=shown,
            )

            if needle and not (
                needle in row.sku.lower()
                or needle in row.name.lower()
                or needle in row.locations_text.lower()
            ):
                continue
            if low_only and not row.low_stock:
                continue
            if location is not None and not self._in_scope(balances, location, scope):
                continue
            rows.append(row)

        total_qty = sum((r.quantity for r in rows), Decimal("0"))
        total_value = sum((r.total_value for r in rows), Decimal("0"))
        return InventoryViewDTO(
            rows=rows,
            total_quantity=total_qty,
            total_value=round2(total_value),
        )

    @staticmethod
    def _in_scope(
        balances: dict[str, Decimal], location: str, scope: LocationScope
    ) -> bool:
        if scope is LocationScope.HAS_STOCK:
            return balances.get(location, Decimal("0")) > 0
        if scope is LocationScope.APPEARS_ANY:
            return location in balances
        return True

"""Application service: read projections over the ledger (queries).

Reads never take item locks; they see the last committed write.
"""

from __future__ import annotations

from stockledger.application.dto import (
    LocationBalanceDTO,
    MoveLineDTO,
    StockStateDTO,
)
from stockledger.domain.exceptions import ItemNotFound
from stockledger.domain.model.item import Item
from stockledger.domain.repository.ledger_repository import LedgerRepository
from stockledger.domain.service import ledger_aggregator


def find_item_by_code(
    ledger_repo: LedgerRepository, code: str, include_barcode: bool = True
) -> Item:
    """Resolve a SKU (case-insensitive), or a barcode when enabled."""
    code = (code or "").strip()
    if not code:
        raise ItemNotFound("Item code is required")
    items = ledger_repo.list_items()
    for item in items:
        if item.matches_code(code, include_barcode=False):
            return item
    if include_barcode:
        for item in items:
            if item.matches_code(code, include_barcode=True):
                return item
    raise ItemNotFound(f"No item with SKU or barcode '{code}'")


class LedgerQueries:

    def __init__(
        self,
        ledger_repo: LedgerRepository,
        barcode_lookup_enabled: bool = True,
    ) -> None:
        self._ledger_repo = ledger_repo
        self._barcode_lookup_enabled = barcode_lookup_enabled

    def current_state(self, item_id: str) -> StockStateDTO:
        item = self._get_item(item_id)
        return StockStateDTO(
            item_id=item.id,
            sku=item.sku,
            quantity_on_hand=item.quantity_on_hand,
            average_unit_cost=item.average_unit_cost,
            low_stock=item.is_low_stock,
        )

    def location_balances(self, item_id: str) -> list[LocationBalanceDTO]:
        item = self._get_item(item_id)
        balances = ledger_aggregator.location_balances(
            self._ledger_repo.moves_for_item(item.id)
        )
        return [LocationBalanceDTO(location=loc, qty=qty) for loc, qty in balances.items()]

    def all_locations(self) -> list[str]:
        return ledger_aggregator.distinct_locations(self._ledger_repo.all_moves())

    def low_stock(self, item_id: str) -> bool:
        return self._get_item(item_id).is_low_stock

    def low_stock_items(self) -> list[StockStateDTO]:
        return [
            self.current_state(item.id)
            for item in self._ledger_repo.list_items()
            if item.is_low_stock
        ]

    def move_history(self, item_id: str | None = None, limit: int = 50) -> list[MoveLineDTO]:
        """Most recent moves first."""
        if item_id is not None:
            moves = self._ledger_repo.moves_for_item(self._get_item(item_id).id)
        else:
            moves = self._ledger_repo.all_moves()
        skus = {item.id: item.sku for item in self._ledger_repo.list_items()}
        recent = sorted(moves, key=lambda m: m.id, reverse=True)[: max(limit, 0)]
        return [
            MoveLineDTO(
                id=m.id,
                item_id=m.item_id,
                sku=skus.get(m.item_id, m.item_id),
                move_type=m.move_type.value,
                qty=m.qty,
                unit_cost=m.unit_cost,
                location=m.location,
                reference=m.reference,
                created_at=m.created_at,
            )
            for m in recent
        ]

    def lookup_item(self, code: str) -> Item:
        return find_item_by_code(
            self._ledger_repo, code, include_barcode=self._barcode_lookup_enabled
        )

    def _get_item(self, item_id: str) -> Item:
        item = self._ledger_repo.get_item(item_id)
        if item is None:
            raise ItemNotFound(f"Item '{item_id}' not found")
        return item

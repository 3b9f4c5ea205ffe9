"""Application service: Register Item use case."""

from __future__ import annotations

import logging
from decimal import Decimal

from stockledger.domain.model.item import Item
from stockledger.domain.model.value_objects import to_decimal
from stockledger.domain.repository.ledger_repository import LedgerRepository

logger = logging.getLogger(__name__)


def _optional(value: str | int | Decimal | None, label: str) -> Decimal | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return to_decimal(value, label=label)


class RegisterItemHandler:

    def __init__(self, ledger_repo: LedgerRepository) -> None:
        self._ledger_repo = ledger_repo

    def handle(
        self,
        sku: str,
        name: str,
        low_stock_threshold: str | int | Decimal | None = None,
        unit_of_measure: str | None = None,
        barcode: str | None = None,
        purchase_price: str | int | Decimal | None = None,
        gst_percent: str | int | Decimal | None = None,
        margin_percent: str | int | Decimal | None = None,
    ) -> Item:
        """Register a new SKU with an empty ledger aggregate (0 on hand, 0 cost)."""
        item = Item.register(
            item_id=self._ledger_repo.next_item_id(),
            sku=sku,
            name=name,
            low_stock_threshold=_optional(low_stock_threshold, "low-stock threshold"),
            unit_of_measure=unit_of_measure,
            barcode=barcode,
            purchase_price=_optional(purchase_price, "purchase price"),
            gst_percent=_optional(gst_percent, "GST percent"),
            margin_percent=_optional(margin_percent, "margin percent"),
        )
        self._ledger_repo.add_item(item)
        logger.info("Registered item %s (%s)", item.id, item.sku)
        return item

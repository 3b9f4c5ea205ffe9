"""Item aggregate — a stock-keeping unit and its ledger-owned figures.

``quantity_on_hand`` and ``average_unit_cost`` are written only by
``apply_move``; the mutation gateway is the only caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.move import Move, MoveType
from stockledger.domain.service.costing import apply_delta, weighted_average


def sku_key(sku: str) -> str:
    """SKUs are unique case-insensitively."""
    return sku.strip().casefold()


@dataclass
class Item:
    """Aggregate root for one SKU.

    Use ``Item.register()`` for new items; ``__init__`` stays plain so
    repositories can reconstitute stored items as-is.
    """

    id: str
    sku: str
    name: str
    quantity_on_hand: Decimal = Decimal("0")
    average_unit_cost: Decimal = Decimal("0")
    low_stock_threshold: Decimal | None = None
    unit_of_measure: str | None = None
    barcode: str | None = None
    purchase_price: Decimal | None = None
    gst_percent: Decimal | None = None
    margin_percent: Decimal | None = None

    # --- Factory (used for NEW items only) ------------------------------------

    @staticmethod
    def register(
        item_id: str,
        sku: str,
        name: str,
        low_stock_threshold: Decimal | None = None,
        unit_of_measure: str | None = None,
        barcode: str | None = None,
        purchase_price: Decimal | None = None,
        gst_percent: Decimal | None = None,
        margin_percent: Decimal | None = None,
    ) -> Item:
        """Create a new item with an empty ledger aggregate."""
        if not sku or not sku.strip():
            raise ValidationError("SKU is required")
        if low_stock_threshold is not None and low_stock_threshold < 0:
            raise ValidationError("Low-stock threshold cannot be negative")
        if purchase_price is not None and purchase_price < 0:
            raise ValidationError("Purchase price cannot be negative")
        return Item(
            id=item_id,
            sku=sku.strip(),
            name=(name or "").strip() or sku.strip(),
            low_stock_threshold=low_stock_threshold,
            unit_of_measure=(unit_of_measure or "").strip() or None,
            barcode=(barcode or "").strip() or None,
            purchase_price=purchase_price,
            gst_percent=gst_percent,
            margin_percent=margin_percent,
        )

    # --- Ledger-owned mutation ------------------------------------------------

    def apply_move(self, move: Move) -> None:
        """Fold one committed move into the aggregate."""
        if move.move_type is MoveType.RECEIVE:
            self.quantity_on_hand, self.average_unit_cost = weighted_average(
                self.quantity_on_hand,
                self.average_unit_cost,
                move.qty,
                move.unit_cost,
            )
        else:
            self.quantity_on_hand, self.average_unit_cost = apply_delta(
                self.quantity_on_hand, self.average_unit_cost, move.signed_delta
            )

    # --- Computed properties --------------------------------------------------

    @property
    def is_low_stock(self) -> bool:
        threshold = self.low_stock_threshold
        return (
            threshold is not None
            and threshold > 0
            and self.quantity_on_hand <= threshold
        )

    @property
    def stock_value(self) -> Decimal:
        return self.quantity_on_hand * self.average_unit_cost

    def matches_code(self, code: str, include_barcode: bool = True) -> bool:
        if sku_key(self.sku) == sku_key(code):
            return True
        return include_barcode and self.barcode is not None and self.barcode == code.strip()

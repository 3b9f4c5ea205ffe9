"""Application service: Quote Estimate use case (query).

Prices a basket without touching stock. Each unit price goes through the
same GST-then-margin ceiling as the invoice screen, so an estimate and
the invoice that follows it agree to the rupee.
"""

from __future__ import annotations

from decimal import Decimal

from stockledger.application.dto import EstimateDTO, EstimateLineDTO
from stockledger.application.ledger_queries import find_item_by_code
from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.item import Item
from stockledger.domain.model.value_objects import Money
from stockledger.domain.repository.ledger_repository import LedgerRepository
from stockledger.domain.service.pricing import price_from_cost


class QuoteEstimateHandler:

    def __init__(
        self,
        ledger_repo: LedgerRepository,
        barcode_lookup_enabled: bool = True,
        currency: str = "INR",
    ) -> None:
        self._ledger_repo = ledger_repo
        self._barcode_lookup_enabled = barcode_lookup_enabled
        self._currency = currency

    def handle(self, requests: list[tuple[str, int]]) -> EstimateDTO:
        """Price ``[(code, qty), ...]``; the same item twice merges into one line."""
        if not requests:
            raise ValidationError("Estimate must contain at least one item")

        basket: dict[str, tuple[Item, int]] = {}
        for code, qty in requests:
            if isinstance(qty, bool) or not isinstance(qty, int) or qty <= 0:
                raise ValidationError(f"Quantity for '{code}' must be a positive whole number")
            item = find_item_by_code(
                self._ledger_repo, code, include_barcode=self._barcode_lookup_enabled
            )
            _, already = basket.get(item.id, (item, 0))
            basket[item.id] = (item, already + qty)

        lines: list[EstimateLineDTO] = []
        total = Money.zero(self._currency)
        for item, qty in basket.values():
            unit_price = Money(self.unit_price(item), self._currency)
            line_total = unit_price * qty
            total = total + line_total
            lines.append(
                EstimateLineDTO(
                    sku=item.sku,
                    name=item.name,
                    qty=qty,
                    unit_price=str(unit_price),
                    line_total=str(line_total),
                )
            )
        return EstimateDTO(lines=lines, total=str(total))

    @staticmethod
    def unit_price(item: Item) -> Decimal:
        base = item.purchase_price if item.purchase_price is not None else item.average_unit_cost
        return price_from_cost(
            max(base, Decimal("0")),
            item.gst_percent or Decimal("0"),
            item.margin_percent or Decimal("0"),
        )

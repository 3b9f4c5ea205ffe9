"""Currency rounding policy ("rupee ceiling").

Every amount shown to a counterparty is rounded UP to the next whole
currency unit, line by line, before anything is summed. Estimate and
invoice screens call these same functions so their totals match the
engine's exactly.
"""

from __future__ import annotations

from decimal import ROUND_CEILING, Decimal

from stockledger.domain.model.value_objects import WHOLE_UNIT, to_decimal

_HUNDRED = Decimal("100")


def ceil_currency(amount: str | int | float | Decimal) -> Decimal:
    """``ceil(amount)`` to a whole currency unit."""
    return to_decimal(amount, label="amount").quantize(WHOLE_UNIT, rounding=ROUND_CEILING)


def with_gst(base_cost: str | int | float | Decimal, gst_percent: str | int | float | Decimal = 0) -> Decimal:
    """GST-inclusive figure, already ceiling-rounded."""
    base = to_decimal(base_cost, label="base cost")
    gst = to_decimal(gst_percent, label="GST percent")
    return ceil_currency(base * (1 + gst / _HUNDRED))


def price_from_cost(
    base_cost: str | int | float | Decimal,
    gst_percent: str | int | float | Decimal = 0,
    margin_percent: str | int | float | Decimal = 0,
) -> Decimal:
    """``ceil(ceil(base * (1 + gst/100)) * (1 + margin/100))``.

    GST is rounded first and margin applied to that rounded figure; the
    two steps are not interchangeable.
    """
    margin = to_decimal(margin_percent, label="margin percent")
    return ceil_currency(with_gst(base_cost, gst_percent) * (1 + margin / _HUNDRED))


def line_tax(line_amount: Decimal, tax_rate: Decimal) -> Decimal:
    return ceil_currency(line_amount * tax_rate / _HUNDRED)

"""Domain service: weighted-average costing.

Only receipts move the average. Everything else changes quantity and
leaves the cost basis at the last known average.
"""

from __future__ import annotations

from decimal import Decimal

from stockledger.domain.model.value_objects import quantize_cost


def weighted_average(
    old_qty: Decimal,
    old_avg_cost: Decimal,
    received_qty: Decimal,
    received_unit_cost: Decimal,
) -> tuple[Decimal, Decimal]:
    """Apply a receipt to ``(old_qty, old_avg_cost)``.

    Returns ``(new_qty, new_avg_cost)``::

        Q1 = Q0 + q
        C1 = c                           if Q1 == 0
        C1 = (Q0 * C0 + q * c) / Q1      otherwise

    A negative ``old_qty`` (prior oversell) goes through the same
    arithmetic unchanged.
    """
    new_qty = old_qty + received_qty
    if new_qty == 0:
        return new_qty, quantize_cost(received_unit_cost)
    total_value = old_qty * old_avg_cost + received_qty * received_unit_cost
    return new_qty, quantize_cost(total_value / new_qty)


def apply_delta(
    old_qty: Decimal,
    old_avg_cost: Decimal,
    delta: Decimal,
) -> tuple[Decimal, Decimal]:
    """Issue / return / adjust: quantity moves, average cost does not."""
    return old_qty + delta, old_avg_cost

"""Domain service: Ledger Aggregator.

Pure folds over a move history. The mutation gateway keeps the item
aggregate current on every append; these folds exist for the read
projections that are derived rather than stored (location balances,
location pickers) and for the replay used by reconciliation.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from stockledger.domain.model.item import Item
from stockledger.domain.model.move import Move, MoveType
from stockledger.domain.service.costing import apply_delta, weighted_average


@dataclass(frozen=True)
class StockState:
    quantity_on_hand: Decimal
    average_unit_cost: Decimal


def in_commit_order(moves: Iterable[Move]) -> list[Move]:
    # ids are handed out at commit time, so id order is commit order
    return sorted(moves, key=lambda m: m.id)


def replay_state(moves: Iterable[Move]) -> StockState:
    """Recompute ``(quantity_on_hand, average_unit_cost)`` from scratch."""
    qty, cost = Decimal("0"), Decimal("0")
    for move in in_commit_order(moves):
        if move.move_type is MoveType.RECEIVE:
            qty, cost = weighted_average(qty, cost, move.qty, move.unit_cost)
        else:
            qty, cost = apply_delta(qty, cost, move.signed_delta)
    return StockState(quantity_on_hand=qty, average_unit_cost=cost)


def location_balances(moves: Iterable[Move]) -> dict[str, Decimal]:
    """Net signed quantity per location, sorted by location name.

    Locations that net to zero stay in the map; hiding them is up to
    the caller.
    """
    balances: dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
    for move in moves:
        balances[move.location] += move.signed_delta
    return {loc: balances[loc] for loc in sorted(balances)}


def distinct_locations(moves: Iterable[Move]) -> list[str]:
    return sorted({move.location for move in moves})


def find_discrepancies(item: Item, moves: list[Move]) -> list[str]:
    """Compare a stored aggregate against a full replay of its moves.

    Returns human-readable mismatch descriptions; an empty list means the
    aggregate is consistent.
    """
    problems: list[str] = []
    replayed = replay_state(moves)
    if item.quantity_on_hand != replayed.quantity_on_hand:
        problems.append(
            f"quantity_on_hand is {item.quantity_on_hand}, "
            f"replay gives {replayed.quantity_on_hand}"
        )
    if item.average_unit_cost != replayed.average_unit_cost:
        problems.append(
            f"average_unit_cost is {item.average_unit_cost}, "
            f"replay gives {replayed.average_unit_cost}"
        )
    location_total = sum(location_balances(moves).values(), Decimal("0"))
    if location_total != item.quantity_on_hand:
        problems.append(
            f"location balances sum to {location_total}, "
            f"quantity_on_hand is {item.quantity_on_hand}"
        )
    return problems

"""Move record — one immutable fact about inventory changing hands.

Moves are append-only. The ``Move`` dataclass is frozen; the only way to
create a committed one is through the mutation gateway
(``stockledger.application.append_move``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from stockledger.domain.exceptions import InvalidMoveType

UNASSIGNED_LOCATION = "(unassigned)"


class MoveType(Enum):
    RECEIVE = "receive"
    ISSUE = "issue"
    RETURN = "return"
    ADJUST = "adjust"

    @staticmethod
    def parse(raw: str | MoveType) -> MoveType:
        """Resolve a move-type string; anything outside the vocabulary is rejected."""
        if isinstance(raw, MoveType):
            return raw
        if not isinstance(raw, str):
            raise InvalidMoveType(f"Invalid move type: {raw!r}")
        try:
            return MoveType(raw.strip().lower())
        except ValueError:
            allowed = " | ".join(m.value for m in MoveType)
            raise InvalidMoveType(
                f"Invalid move type '{raw}'. Expected one of: {allowed}"
            ) from None

    def signed_delta(self, qty: Decimal) -> Decimal:
        """Quantity change contributed to on-hand stock.

        ``qty`` is a magnitude for receive/issue/return and an already
        signed delta for adjust.
        """
        if self is MoveType.ISSUE:
            return -abs(qty)
        if self in (MoveType.RECEIVE, MoveType.RETURN):
            return abs(qty)
        return qty


def normalize_location(location: str | None) -> str:
    cleaned = (location or "").strip()
    return cleaned or UNASSIGNED_LOCATION


def _clean_text(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None


@dataclass(frozen=True)
class MoveRequest:
    """Normalized parameters of one ``append_move`` call.

    Two requests carrying the same client transaction id must compare
    equal for the second one to be treated as a replay.
    """

    item_id: str
    move_type: MoveType
    qty: Decimal
    unit_cost: Decimal | None = None
    location: str = UNASSIGNED_LOCATION
    reference: str | None = None
    reason: str | None = None

    @staticmethod
    def create(
        item_id: str,
        move_type: MoveType,
        qty: Decimal,
        unit_cost: Decimal | None = None,
        location: str | None = None,
        reference: str | None = None,
        reason: str | None = None,
    ) -> MoveRequest:
        return MoveRequest(
            item_id=item_id,
            move_type=move_type,
            qty=qty,
            # unit cost is only meaningful on receipts
            unit_cost=unit_cost if move_type is MoveType.RECEIVE else None,
            location=normalize_location(location),
            reference=_clean_text(reference),
            reason=_clean_text(reason),
        )

    @property
    def signed_delta(self) -> Decimal:
        return self.move_type.signed_delta(self.qty)

    def to_dict(self) -> dict:
        return {
            "item_id": self.item_id,
            "move_type": self.move_type.value,
            "qty": str(self.qty),
            "unit_cost": None if self.unit_cost is None else str(self.unit_cost),
            "location": self.location,
            "reference": self.reference,
            "reason": self.reason,
        }

    @staticmethod
    def from_dict(raw: dict) -> MoveRequest:
        return MoveRequest(
            item_id=raw["item_id"],
            move_type=MoveType(raw["move_type"]),
            qty=Decimal(raw["qty"]),
            unit_cost=None if raw.get("unit_cost") is None else Decimal(raw["unit_cost"]),
            location=raw.get("location") or UNASSIGNED_LOCATION,
            reference=raw.get("reference"),
            reason=raw.get("reason"),
        )


@dataclass(frozen=True)
class Move:
    """A committed move.

    ``unit_cost`` is the received cost for ``receive`` moves and, for every
    other type, the item's average cost at the moment of the move (audit
    copy; it never feeds back into costing).
    """

    id: int
    item_id: str
    move_type: MoveType
    qty: Decimal
    unit_cost: Decimal
    location: str = UNASSIGNED_LOCATION
    reference: str | None = None
    reason: str | None = None
    client_transaction_id: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def signed_delta(self) -> Decimal:
        return self.move_type.signed_delta(self.qty)


@dataclass(frozen=True)
class MoveResult:
    """What the gateway hands back for an applied (or replayed) move."""

    move: Move
    quantity_on_hand: Decimal
    average_unit_cost: Decimal
    # a replay returns the recorded result; the marker does not affect equality
    replayed: bool = field(default=False, compare=False)


@dataclass(frozen=True)
class AppliedTransaction:
    """Idempotency record: the request a client transaction id was bound to
    and the result it produced."""

    client_transaction_id: str
    request: MoveRequest
    result: MoveResult

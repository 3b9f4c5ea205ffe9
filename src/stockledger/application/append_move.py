"""Application service: Append Move — the mutation gateway.

The only way a move enters the ledger. Validates move-type preconditions,
serializes on the item, applies the move to the aggregate and persists
move + aggregate + idempotency record in one write.

A client transaction id makes the call at-most-once: a repeat with the
same parameters returns the recorded result, a repeat with different
parameters fails with TransactionConflict.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from stockledger.domain.exceptions import (
    InvalidCost,
    InvalidQuantity,
    ItemNotFound,
    NegativeStockRejected,
    NoOpAdjustment,
    TransactionConflict,
    ValidationError,
)
from stockledger.domain.model.move import (
    AppliedTransaction,
    Move,
    MoveRequest,
    MoveResult,
    MoveType,
)
from stockledger.domain.model.value_objects import to_decimal
from stockledger.domain.repository.ledger_repository import LedgerRepository

logger = logging.getLogger(__name__)

Number = str | int | float | Decimal


class AppendMoveHandler:

    def __init__(
        self,
        ledger_repo: LedgerRepository,
        allow_negative_stock: bool = True,
        lock_timeout: float = 5.0,
    ) -> None:
        self._ledger_repo = ledger_repo
        self._allow_negative_stock = allow_negative_stock
        self._lock_timeout = lock_timeout

    def handle(
        self,
        item_id: str,
        move_type: str | MoveType,
        qty: Number,
        unit_cost: Number | None = None,
        location: str | None = None,
        reference: str | None = None,
        reason: str | None = None,
        client_transaction_id: str | None = None,
        timeout: float | None = None,
    ) -> MoveResult:
        """Append one move and return the resulting aggregate.

        Raises InvalidMoveType, InvalidQuantity, InvalidCost,
        NoOpAdjustment, NegativeStockRejected, ItemNotFound,
        TransactionConflict or StorageUnavailable. Nothing is written
        when any of them is raised.
        """
        try:
            request = self._build_request(
                item_id, move_type, qty, unit_cost, location, reference, reason
            )
        except ValidationError as exc:
            logger.warning("Rejected move for item %s: %s", item_id, exc)
            raise

        key = (client_transaction_id or "").strip() or None
        wait = self._lock_timeout if timeout is None else timeout

        with self._ledger_repo.item_lock(request.item_id, wait):
            if key is not None:
                replay = self._replay(key, request)
                if replay is not None:
                    return replay

            item = self._ledger_repo.get_item(request.item_id)
            if item is None:
                raise ItemNotFound(f"Item '{request.item_id}' not found")

            delta = request.signed_delta
            if (
                not self._allow_negative_stock
                and delta < 0
                and item.quantity_on_hand + delta < 0
            ):
                logger.warning(
                    "Rejected %s of %s for %s: on hand %s",
                    request.move_type.value, request.qty, item.sku, item.quantity_on_hand,
                )
                raise NegativeStockRejected(
                    f"Cannot {request.move_type.value} {abs(delta)} of {item.sku} "
                    f"(only {item.quantity_on_hand} on hand)"
                )

            move = Move(
                id=self._ledger_repo.next_move_id(),
                item_id=item.id,
                move_type=request.move_type,
                qty=request.qty,
                # receipts carry their own cost; everything else records the
                # average it left (or came back) at
                unit_cost=(
                    request.unit_cost
                    if request.move_type is MoveType.RECEIVE
                    else item.average_unit_cost
                ),
                location=request.location,
                reference=request.reference,
                reason=request.reason,
                client_transaction_id=key,
            )
            item.apply_move(move)

            result = MoveResult(
                move=move,
                quantity_on_hand=item.quantity_on_hand,
                average_unit_cost=item.average_unit_cost,
            )
            transaction = (
                AppliedTransaction(client_transaction_id=key, request=request, result=result)
                if key is not None
                else None
            )
            self._ledger_repo.append(move, item, transaction)

        logger.info(
            "Appended %s move #%s for %s: qty=%s on_hand=%s avg_cost=%s",
            move.move_type.value, move.id, item.sku, move.qty,
            result.quantity_on_hand, result.average_unit_cost,
            extra={"item_id": item.id, "client_transaction_id": key},
        )
        return result

    # --- Internal helpers -----------------------------------------------------

    def _replay(self, key: str, request: MoveRequest) -> MoveResult | None:
        applied = self._ledger_repo.get_transaction(key)
        if applied is None:
            return None
        if applied.request != request:
            logger.warning("Client transaction %s reused with different parameters", key)
            raise TransactionConflict(key)
        logger.info("Replayed client transaction %s (move #%s)", key, applied.result.move.id)
        return MoveResult(
            move=applied.result.move,
            quantity_on_hand=applied.result.quantity_on_hand,
            average_unit_cost=applied.result.average_unit_cost,
            replayed=True,
        )

    @staticmethod
    def _build_request(
        item_id: str,
        move_type: str | MoveType,
        qty: Number,
        unit_cost: Number | None,
        location: str | None,
        reference: str | None,
        reason: str | None,
    ) -> MoveRequest:
        kind = MoveType.parse(move_type)
        amount = to_decimal(qty, InvalidQuantity, "quantity")

        if kind is MoveType.ADJUST:
            if amount == 0:
                raise NoOpAdjustment("Adjustment delta cannot be zero")
        elif amount <= 0:
            raise InvalidQuantity(
                f"Quantity for {kind.value} must be greater than zero, got {amount}"
            )

        cost: Decimal | None = None
        if kind is MoveType.RECEIVE:
            cost = to_decimal(unit_cost, InvalidCost, "unit cost")
            if cost < 0:
                raise InvalidCost(f"Unit cost cannot be negative, got {cost}")

        return MoveRequest.create(
            item_id=str(item_id).strip(),
            move_type=kind,
            qty=amount,
            unit_cost=cost,
            location=location,
            reference=reference,
            reason=reason,
        )

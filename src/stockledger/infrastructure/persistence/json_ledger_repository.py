"""JSON-file-backed implementation of LedgerRepository.

The whole ledger (items, moves, idempotency records, id counters) lives in
one document that is rewritten through a temp file and ``os.replace``.
A move, its aggregate update and its idempotency record therefore reach
disk together or not at all, and readers never see a half-written file.

Writers hold a sidecar file lock for the whole read-modify-write, so
several processes can share one ledger file without losing updates.
"""

from __future__ import annotations

import json
import logging
import time
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import ContextManager, Iterator

from stockledger.domain.exceptions import (
    DuplicateSku,
    StorageUnavailable,
    TransactionConflict,
    ValidationError,
)
from stockledger.domain.model.item import Item, sku_key
from stockledger.domain.model.move import (
    AppliedTransaction,
    Move,
    MoveRequest,
    MoveResult,
    MoveType,
)
from stockledger.domain.repository.ledger_repository import LedgerRepository
from stockledger.infrastructure.locking import ItemLocks, file_lock_for, hold_file_lock
from stockledger.infrastructure.persistence.atomic_file import write_atomically

logger = logging.getLogger(__name__)


def _dec(raw: str | None) -> Decimal | None:
    return None if raw is None else Decimal(raw)


def _str(value: Decimal | None) -> str | None:
    return None if value is None else str(value)


class JsonLedgerRepository(LedgerRepository):

    def __init__(self, file_path: Path, lock_timeout: float = 5.0) -> None:
        self._file_path = file_path
        self._lock_timeout = lock_timeout
        self._item_locks = ItemLocks()
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        self._file_lock = file_lock_for(file_path)
        self._ensure_file()

    @property
    def file_path(self) -> Path:
        return self._file_path

    # --- LedgerRepository interface: items --------------------------------------

    def next_item_id(self) -> str:
        items = self._load()["items"]
        if not items:
            return "1"
        return str(max(int(raw["id"]) for raw in items) + 1)

    def get_item(self, item_id: str) -> Item | None:
        for raw in self._load()["items"]:
            if raw["id"] == item_id:
                return self._item_to_domain(raw)
        return None

    def list_items(self) -> list[Item]:
        items = [self._item_to_domain(raw) for raw in self._load()["items"]]
        return sorted(items, key=lambda i: sku_key(i.sku))

    def add_item(self, item: Item) -> None:
        with self._writing():
            doc = self._load()
            for raw in doc["items"]:
                if raw["id"] == item.id:
                    raise ValidationError(f"Item ID '{item.id}' already exists")
                if sku_key(raw["sku"]) == sku_key(item.sku):
                    raise DuplicateSku(f"SKU '{item.sku}' already exists")
            doc["items"].append(self._item_to_raw(item))
            self._persist(doc)

    # --- LedgerRepository interface: moves --------------------------------------

    def moves_for_item(self, item_id: str) -> list[Move]:
        return [m for m in self.all_moves() if m.item_id == item_id]

    def all_moves(self) -> list[Move]:
        # appends can land out of id order across items
        moves = [self._move_to_domain(raw) for raw in self._load()["moves"]]
        return sorted(moves, key=lambda m: m.id)

    def get_transaction(self, client_transaction_id: str) -> AppliedTransaction | None:
        doc = self._load()
        raw = doc["transactions"].get(client_transaction_id)
        if raw is None:
            return None
        return self._transaction_to_domain(client_transaction_id, raw, doc["moves"])

    def item_lock(self, item_id: str, timeout: float) -> ContextManager[None]:
        return self._critical_section(item_id, timeout)

    def next_move_id(self) -> int:
        # read under the file lock; stays valid while item_lock is held
        with self._writing():
            return self._load()["next_move_id"]

    def append(
        self,
        move: Move,
        item: Item,
        transaction: AppliedTransaction | None = None,
    ) -> None:
        with self._writing():
            doc = self._load()

            if move.id != doc["next_move_id"]:
                raise StorageUnavailable(
                    f"Move #{move.id} is stale; the ledger is at #{doc['next_move_id']}"
                )

            if transaction is not None:
                key = transaction.client_transaction_id
                if key in doc["transactions"]:
                    raise TransactionConflict(key)
                doc["transactions"][key] = self._transaction_to_raw(transaction)

            for i, raw in enumerate(doc["items"]):
                if raw["id"] == item.id:
                    doc["items"][i] = self._item_to_raw(item)
                    break
            else:
                raise StorageUnavailable(f"Item '{item.id}' vanished from the ledger")

            doc["moves"].append(self._move_to_raw(move))
            doc["next_move_id"] = move.id + 1
            self._persist(doc)

    # --- Serialization ----------------------------------------------------------

    @staticmethod
    def _item_to_raw(item: Item) -> dict:
        return {
            "id": item.id,
            "sku": item.sku,
            "name": item.name,
            "quantity_on_hand": str(item.quantity_on_hand),
            "average_unit_cost": str(item.average_unit_cost),
            "low_stock_threshold": _str(item.low_stock_threshold),
            "unit_of_measure": item.unit_of_measure,
            "barcode": item.barcode,
            "purchase_price": _str(item.purchase_price),
            "gst_percent": _str(item.gst_percent),
            "margin_percent": _str(item.margin_percent),
        }

    @staticmethod
    def _item_to_domain(raw: dict) -> Item:
        return Item(
            id=raw["id"],
            sku=raw["sku"],
            name=raw["name"],
            quantity_on_hand=Decimal(raw["quantity_on_hand"]),
            average_unit_cost=Decimal(raw["average_unit_cost"]),
            low_stock_threshold=_dec(raw.get("low_stock_threshold")),
            unit_of_measure=raw.get("unit_of_measure"),
            barcode=raw.get("barcode"),
            purchase_price=_dec(raw.get("purchase_price")),
            gst_percent=_dec(raw.get("gst_percent")),
            margin_percent=_dec(raw.get("margin_percent")),
        )

    @staticmethod
    def _move_to_raw(move: Move) -> dict:
        return {
            "id": move.id,
            "item_id": move.item_id,
            "move_type": move.move_type.value,
            "qty": str(move.qty),
            "unit_cost": str(move.unit_cost),
            "location": move.location,
            "reference": move.reference,
            "reason": move.reason,
            "client_transaction_id": move.client_transaction_id,
            "created_at": move.created_at.isoformat(),
        }

    @staticmethod
    def _move_to_domain(raw: dict) -> Move:
        return Move(
            id=raw["id"],
            item_id=raw["item_id"],
            move_type=MoveType(raw["move_type"]),
            qty=Decimal(raw["qty"]),
            unit_cost=Decimal(raw["unit_cost"]),
            location=raw["location"],
            reference=raw.get("reference"),
            reason=raw.get("reason"),
            client_transaction_id=raw.get("client_transaction_id"),
            created_at=datetime.fromisoformat(raw["created_at"]),
        )

    @staticmethod
    def _transaction_to_raw(transaction: AppliedTransaction) -> dict:
        result = transaction.result
        return {
            "request": transaction.request.to_dict(),
            "move_id": result.move.id,
            "quantity_on_hand": str(result.quantity_on_hand),
            "average_unit_cost": str(result.average_unit_cost),
        }

    def _transaction_to_domain(
        self, client_transaction_id: str, raw: dict, raw_moves: list[dict]
    ) -> AppliedTransaction:
        move_raw = next(m for m in raw_moves if m["id"] == raw["move_id"])
        return AppliedTransaction(
            client_transaction_id=client_transaction_id,
            request=MoveRequest.from_dict(raw["request"]),
            result=MoveResult(
                move=self._move_to_domain(move_raw),
                quantity_on_hand=Decimal(raw["quantity_on_hand"]),
                average_unit_cost=Decimal(raw["average_unit_cost"]),
            ),
        )

    # --- File helpers -----------------------------------------------------------

    @contextmanager
    def _critical_section(self, item_id: str, timeout: float) -> Iterator[None]:
        deadline = time.monotonic() + timeout
        with self._item_locks.hold(item_id, timeout):
            with hold_file_lock(self._file_lock, deadline - time.monotonic()):
                yield

    def _writing(self) -> ContextManager[None]:
        return hold_file_lock(self._file_lock, self._lock_timeout)

    def _load(self) -> dict:
        try:
            return json.loads(self._file_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.error("Cannot read ledger file %s: %s", self._file_path, exc)
            raise StorageUnavailable(f"Cannot read ledger: {exc}") from exc

    def _persist(self, doc: dict) -> None:
        try:
            write_atomically(self._file_path, json.dumps(doc, indent=2) + "\n")
        except OSError as exc:
            logger.error("Cannot write ledger file %s: %s", self._file_path, exc)
            raise StorageUnavailable(f"Cannot write ledger: {exc}") from exc

    def _ensure_file(self) -> None:
        with self._writing():
            if self._file_path.exists():
                return
            self._persist(
                {
                    "next_move_id": 1,
                    "items": [],
                    "moves": [],
                    "transactions": {},
                }
            )

"""In-memory fake repositories for testing.

These implement the same abstract interfaces as the JSON repositories
but keep everything in dicts. No file I/O, no side effects.
"""

from __future__ import annotations

import copy
from contextlib import contextmanager
from decimal import Decimal
from threading import Lock, RLock
from typing import ContextManager, Iterator

from stockledger.domain.exceptions import DuplicateSku, TransactionConflict
from stockledger.domain.model.invoice import Invoice
from stockledger.domain.model.item import Item, sku_key
from stockledger.domain.model.move import AppliedTransaction, Move
from stockledger.domain.repository.invoice_repository import InvoiceRepository
from stockledger.domain.repository.ledger_repository import LedgerRepository
from stockledger.infrastructure.locking import ItemLocks


class FakeLedgerRepository(LedgerRepository):

    def __init__(self, items: list[Item] | None = None) -> None:
        self._items: dict[str, Item] = {}
        self._moves: list[Move] = []
        self._transactions: dict[str, AppliedTransaction] = {}
        self._locks = ItemLocks()
        self._guard = Lock()
        self._next_move_id = 1
        self.append_calls = 0
        for item in items or []:
            self._items[item.id] = copy.deepcopy(item)

    # --- Items ----------------------------------------------------------------

    def next_item_id(self) -> str:
        return str(len(self._items) + 1)

    def get_item(self, item_id: str) -> Item | None:
        # copies, so handlers cannot mutate stored state without append()
        item = self._items.get(item_id)
        return copy.deepcopy(item) if item is not None else None

    def list_items(self) -> list[Item]:
        return sorted(
            (copy.deepcopy(i) for i in self._items.values()),
            key=lambda i: sku_key(i.sku),
        )

    def add_item(self, item: Item) -> None:
        for existing in self._items.values():
            if sku_key(existing.sku) == sku_key(item.sku):
                raise DuplicateSku(f"SKU '{item.sku}' already exists")
        self._items[item.id] = copy.deepcopy(item)

    # --- Moves ----------------------------------------------------------------

    def moves_for_item(self, item_id: str) -> list[Move]:
        return [m for m in self.all_moves() if m.item_id == item_id]

    def all_moves(self) -> list[Move]:
        return sorted(self._moves, key=lambda m: m.id)

    def get_transaction(self, client_transaction_id: str) -> AppliedTransaction | None:
        return self._transactions.get(client_transaction_id)

    def item_lock(self, item_id: str, timeout: float) -> ContextManager[None]:
        return self._locks.hold(item_id, timeout)

    def next_move_id(self) -> int:
        with self._guard:
            move_id = self._next_move_id
            self._next_move_id += 1
            return move_id

    def append(
        self,
        move: Move,
        item: Item,
        transaction: AppliedTransaction | None = None,
    ) -> None:
        with self._guard:
            if transaction is not None:
                if transaction.client_transaction_id in self._transactions:
                    raise TransactionConflict(transaction.client_transaction_id)
                self._transactions[transaction.client_transaction_id] = transaction
            self._items[item.id] = copy.deepcopy(item)
            self._moves.append(move)
            self.append_calls += 1

    # --- Test helpers ---------------------------------------------------------

    def corrupt(self, item_id: str, quantity_on_hand: Decimal) -> None:
        self._items[item_id].quantity_on_hand = quantity_on_hand


class FakeInvoiceRepository(InvoiceRepository):

    def __init__(self) -> None:
        self._store: dict[str, Invoice] = {}
        self._exclusive = RLock()

    def get_by_no(self, invoice_no: str) -> Invoice | None:
        return self._store.get(invoice_no)

    def list_all(self) -> list[Invoice]:
        return list(self._store.values())

    def save(self, invoice: Invoice) -> None:
        self._store[invoice.invoice_no] = invoice

    @contextmanager
    def exclusive(self) -> Iterator[None]:
        with self._exclusive:
            yield

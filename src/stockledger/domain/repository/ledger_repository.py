"""Abstract repository for the stock ledger: items, moves and applied
client transactions.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (JSON file, in-memory) live
elsewhere.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ContextManager

from stockledger.domain.model.item import Item
from stockledger.domain.model.move import AppliedTransaction, Move


class LedgerRepository(ABC):

    # --- Items ----------------------------------------------------------------

    @abstractmethod
    def next_item_id(self) -> str:
        """Generate the next unique item ID."""

    @abstractmethod
    def get_item(self, item_id: str) -> Item | None:
        """Return an item by its ID, or None if not found."""

    @abstractmethod
    def list_items(self) -> list[Item]:
        """Return every item, sorted by SKU."""

    @abstractmethod
    def add_item(self, item: Item) -> None:
        """Persist a newly registered item.

        Raises DuplicateSku if the SKU is taken (case-insensitive).
        """

    # --- Moves ----------------------------------------------------------------

    @abstractmethod
    def moves_for_item(self, item_id: str) -> list[Move]:
        """Return the item's moves in commit order."""

    @abstractmethod
    def all_moves(self) -> list[Move]:
        """Return every move of every item in commit order."""

    @abstractmethod
    def get_transaction(self, client_transaction_id: str) -> AppliedTransaction | None:
        """Return the idempotency record for a client transaction id, or None."""

    @abstractmethod
    def item_lock(self, item_id: str, timeout: float) -> ContextManager[None]:
        """Serialize mutations on one item, across every process sharing
        the store.

        Raises StorageUnavailable if the lock is not acquired within
        *timeout* seconds.
        """

    @abstractmethod
    def next_move_id(self) -> int:
        """Return the id the next appended move must carry.

        Ids only ever increase. The value is only guaranteed unique while
        ``item_lock`` is held.
        """

    @abstractmethod
    def append(
        self,
        move: Move,
        item: Item,
        transaction: AppliedTransaction | None = None,
    ) -> None:
        """Persist *move*, the updated *item* aggregate and the optional
        idempotency record as one all-or-nothing write.

        Raises TransactionConflict if the transaction id is already
        recorded, and StorageUnavailable if the write fails; in both cases
        nothing is stored.
        """

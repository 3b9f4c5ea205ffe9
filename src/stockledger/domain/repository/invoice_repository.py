"""Abstract repository for saved invoice documents."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ContextManager

from stockledger.domain.model.invoice import Invoice


class InvoiceRepository(ABC):

    @abstractmethod
    def get_by_no(self, invoice_no: str) -> Invoice | None:
        """Return an invoice by its number, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Invoice]:
        """Return every stored invoice."""

    @abstractmethod
    def save(self, invoice: Invoice) -> None:
        """Persist a new invoice or replace the one with the same number."""

    @abstractmethod
    def exclusive(self) -> ContextManager[None]:
        """Hold off every other writer for a read-modify-write.

        ``save`` may be called while it is held. Raises StorageUnavailable
        if access is not granted in time.
        """

"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display the message verbatim.
Only StorageUnavailable is safe to retry, and only with the same
client transaction id.
"""


class DomainException(Exception):
    """Base class for all domain errors."""

    retryable = False


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


# --- Not found ----------------------------------------------------------------


class ItemNotFound(EntityNotFoundError):
    """No item with the given id (or SKU / barcode)."""


class InvoiceNotFound(EntityNotFoundError):
    """No stored invoice with the given number."""


# --- Validation ---------------------------------------------------------------


class InvalidMoveType(ValidationError):
    """Move type outside the receive | issue | return | adjust vocabulary."""


class InvalidQuantity(ValidationError):
    """Quantity missing, non-numeric, or not allowed for the move type."""


class InvalidCost(ValidationError):
    """Unit cost missing, non-numeric, or negative."""


class NoOpAdjustment(ValidationError):
    """An adjustment with a zero delta."""


class NegativeStockRejected(ValidationError):
    """The move would take on-hand stock below zero while oversell is disabled."""


class DuplicateSku(ValidationError):
    """Another item already uses this SKU (case-insensitive)."""


# --- Concurrency / storage ----------------------------------------------------


class TransactionConflict(DomainException):
    """A client transaction id was reused with different parameters."""

    def __init__(self, client_transaction_id: str, message: str | None = None) -> None:
        self.client_transaction_id = client_transaction_id
        super().__init__(
            message
            or f"Client transaction '{client_transaction_id}' was already applied "
            f"with different parameters"
        )


class StorageUnavailable(DomainException):
    """The backing store could not be reached or locked in time."""

    retryable = True


class AggregateInconsistent(DomainException):
    """Stored aggregate disagrees with a replay of the move history."""

    def __init__(self, item_id: str, details: list[str]) -> None:
        self.item_id = item_id
        self.details = list(details)
        super().__init__(
            f"Aggregate for item '{item_id}' is inconsistent: " + "; ".join(details)
        )

"""Invoice documents and their frozen line snapshots.

Lines copy price, tax rate and the item's average cost as of the moment
the invoice was saved. Reports read these copies; they are never
recomputed from current cost.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from enum import Enum

from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.move import MoveType


class DocumentType(Enum):
    SALE = "sale"
    RETURN = "return"

    @staticmethod
    def parse(raw: str | DocumentType) -> DocumentType:
        if isinstance(raw, DocumentType):
            return raw
        try:
            return DocumentType(str(raw).strip().lower())
        except ValueError:
            raise ValidationError(
                f"Invalid document type '{raw}'. Expected sale or return"
            ) from None

    @property
    def sign(self) -> int:
        return -1 if self is DocumentType.RETURN else 1

    @property
    def move_type(self) -> MoveType:
        return MoveType.RETURN if self is DocumentType.RETURN else MoveType.ISSUE


@dataclass(frozen=True)
class InvoiceLineSnapshot:
    """One invoice line as frozen at save time.

    Either ``base_cost_at_sale`` or ``margin_percent`` carries the cost
    basis; when only the margin is known the cost is backed out of the
    unit price.
    """

    item_id: str
    qty: Decimal
    unit_price: Decimal
    tax_rate: Decimal = Decimal("0")
    base_cost_at_sale: Decimal | None = None
    margin_percent: Decimal | None = None
    description: str = ""

    @property
    def line_total(self) -> Decimal:
        return self.qty * self.unit_price

    @property
    def cost_basis(self) -> Decimal:
        if self.base_cost_at_sale is not None:
            return self.base_cost_at_sale
        if self.margin_percent is not None:
            return self.unit_price / (1 + self.margin_percent / 100)
        return Decimal("0")


class PaymentDirection(Enum):
    IN = "in"
    OUT = "out"

    @staticmethod
    def parse(raw: str | PaymentDirection) -> PaymentDirection:
        if isinstance(raw, PaymentDirection):
            return raw
        try:
            return PaymentDirection(str(raw).strip().lower())
        except ValueError:
            raise ValidationError(
                f"Invalid payment direction '{raw}'. Expected in or out"
            ) from None


@dataclass(frozen=True)
class Payment:
    """Money received from (``in``) or refunded to (``out``) the customer.

    Payments are never deleted; a mistaken one is voided and then ignored
    by every total.
    """

    amount: Decimal
    direction: PaymentDirection = PaymentDirection.IN
    is_void: bool = False


@dataclass
class Invoice:
    """A saved sale or return document."""

    invoice_no: str
    doc_type: DocumentType
    lines: list[InvoiceLineSnapshot]
    issued_at: date = field(default_factory=date.today)
    notes: str | None = None
    payments: list[Payment] = field(default_factory=list)

    @staticmethod
    def create(
        invoice_no: str,
        doc_type: DocumentType,
        lines: list[InvoiceLineSnapshot],
        issued_at: date | None = None,
        notes: str | None = None,
    ) -> Invoice:
        if not invoice_no or not invoice_no.strip():
            raise ValidationError("Invoice number is required")
        if not lines:
            raise ValidationError("Invoice must contain at least one line")
        return Invoice(
            invoice_no=invoice_no.strip(),
            doc_type=doc_type,
            lines=list(lines),
            issued_at=issued_at or date.today(),
            notes=notes,
        )

    # --- Payments -------------------------------------------------------------

    def record_payment(self, payment: Payment) -> None:
        if payment.amount <= 0:
            raise ValidationError(
                f"Payment amount must be greater than zero, got {payment.amount}"
            )
        self.payments.append(payment)

    def void_payment(self, number: int) -> Payment:
        """Void the *number*-th payment (1-based) and return the voided copy."""
        if not 1 <= number <= len(self.payments):
            raise ValidationError(
                f"Invoice {self.invoice_no} has no payment #{number}"
            )
        current = self.payments[number - 1]
        if current.is_void:
            raise ValidationError(f"Payment #{number} is already void")
        voided = replace(current, is_void=True)
        self.payments[number - 1] = voided
        return voided

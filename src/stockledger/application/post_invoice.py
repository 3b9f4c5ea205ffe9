"""Application service: Post Invoice use case.

Turns a sale (or return) document into issue (or return) moves through
the mutation gateway and stores the document with its lines frozen at
the cost each move recorded.

Every line carries its own client transaction id derived from the
invoice number, so posting the same invoice twice moves stock once.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from stockledger.application.append_move import AppendMoveHandler
from stockledger.application.dto import InvoiceLineSpec
from stockledger.domain.exceptions import ItemNotFound, ValidationError
from stockledger.domain.model.invoice import (
    DocumentType,
    Invoice,
    InvoiceLineSnapshot,
)
from stockledger.domain.model.value_objects import to_decimal
from stockledger.domain.repository.invoice_repository import InvoiceRepository
from stockledger.domain.repository.ledger_repository import LedgerRepository

logger = logging.getLogger(__name__)


def line_transaction_id(invoice_no: str, index: int, item_id: str) -> str:
    return f"{invoice_no}-{index}-{item_id}"


class PostInvoiceHandler:

    def __init__(
        self,
        ledger_repo: LedgerRepository,
        invoice_repo: InvoiceRepository,
        gateway: AppendMoveHandler,
    ) -> None:
        self._ledger_repo = ledger_repo
        self._invoice_repo = invoice_repo
        self._gateway = gateway

    def handle(
        self,
        invoice_no: str,
        doc_type: str | DocumentType,
        lines: list[InvoiceLineSpec],
        issued_at: date | None = None,
        notes: str | None = None,
    ) -> Invoice:
        """Post the document and return it as stored.

        Steps:
        1. Validate every line up front (item exists, qty > 0, price and
           tax rate non-negative) so a bad line moves nothing.
        2. Append one move per line; the move's recorded cost becomes the
           line's frozen cost basis.
        3. Upsert the document by invoice number.
        """
        kind = DocumentType.parse(doc_type)
        invoice_no = (invoice_no or "").strip()
        if not invoice_no:
            raise ValidationError("Invoice number is required")
        if not lines:
            raise ValidationError("Invoice must contain at least one line")

        checked = [self._check_line(i, spec) for i, spec in enumerate(lines, start=1)]

        snapshots: list[InvoiceLineSnapshot] = []
        for index, (spec, qty, price, rate) in enumerate(checked, start=1):
            result = self._gateway.handle(
                item_id=spec.item_id,
                move_type=kind.move_type,
                qty=qty,
                reference=invoice_no,
                reason=kind.value,
                client_transaction_id=line_transaction_id(invoice_no, index, spec.item_id),
            )
            item = self._ledger_repo.get_item(spec.item_id)
            snapshots.append(
                InvoiceLineSnapshot(
                    item_id=spec.item_id,
                    qty=qty,
                    unit_price=price,
                    tax_rate=rate,
                    base_cost_at_sale=result.move.unit_cost,
                    margin_percent=item.margin_percent if item is not None else None,
                    description=spec.description or (item.name if item is not None else ""),
                )
            )

        invoice = Invoice.create(
            invoice_no=invoice_no,
            doc_type=kind,
            lines=snapshots,
            issued_at=issued_at,
            notes=notes,
        )
        with self._invoice_repo.exclusive():
            existing = self._invoice_repo.get_by_no(invoice.invoice_no)
            if existing is not None:
                # re-posting keeps the payments already taken against it
                invoice.payments = list(existing.payments)
            self._invoice_repo.save(invoice)

        logger.info(
            "Posted %s invoice %s with %d line(s)", kind.value, invoice_no, len(snapshots)
        )
        return invoice

    def _check_line(
        self, index: int, spec: InvoiceLineSpec
    ) -> tuple[InvoiceLineSpec, Decimal, Decimal, Decimal]:
        if self._ledger_repo.get_item(spec.item_id) is None:
            raise ItemNotFound(f"Line {index}: item '{spec.item_id}' not found")
        qty = to_decimal(spec.qty, label=f"quantity on line {index}")
        if qty <= 0:
            raise ValidationError(f"Line {index}: quantity must be greater than zero")
        price = to_decimal(spec.unit_price, label=f"unit price on line {index}")
        if price < 0:
            raise ValidationError(f"Line {index}: unit price cannot be negative")
        rate = to_decimal(spec.tax_rate, label=f"tax rate on line {index}")
        if rate < 0:
            raise ValidationError(f"Line {index}: tax rate cannot be negative")
        return spec, qty, price, rate

"""Application service: record and void payments against a saved invoice."""

from __future__ import annotations

import logging
from decimal import Decimal

from stockledger.domain.exceptions import InvoiceNotFound
from stockledger.domain.model.invoice import Invoice, Payment, PaymentDirection
from stockledger.domain.model.value_objects import to_decimal
from stockledger.domain.repository.invoice_repository import InvoiceRepository

logger = logging.getLogger(__name__)


class RecordPaymentHandler:

    def __init__(self, invoice_repo: InvoiceRepository) -> None:
        self._invoice_repo = invoice_repo

    def handle(
        self,
        invoice_no: str,
        amount: str | int | Decimal,
        direction: str | PaymentDirection = PaymentDirection.IN,
    ) -> Payment:
        payment = Payment(
            amount=to_decimal(amount, label="payment amount"),
            direction=PaymentDirection.parse(direction),
        )
        with self._invoice_repo.exclusive():
            invoice = self._get(invoice_no)
            invoice.record_payment(payment)
            self._invoice_repo.save(invoice)

        logger.info(
            "Recorded %s payment of %s on invoice %s",
            payment.direction.value, payment.amount, invoice.invoice_no,
        )
        return payment

    def void(self, invoice_no: str, number: int) -> Payment:
        """Void payment *number* (1-based, in the order recorded)."""
        with self._invoice_repo.exclusive():
            invoice = self._get(invoice_no)
            voided = invoice.void_payment(number)
            self._invoice_repo.save(invoice)

        logger.info("Voided payment #%d on invoice %s", number, invoice.invoice_no)
        return voided

    def _get(self, invoice_no: str) -> Invoice:
        invoice = self._invoice_repo.get_by_no((invoice_no or "").strip())
        if invoice is None:
            raise InvoiceNotFound(f"Invoice '{invoice_no}' not found")
        return invoice

"""Application service: invoice reports (queries).

Figures come from the frozen line snapshots only; changing an item's
cost after the fact never changes an existing report.
"""

from __future__ import annotations

from datetime import date
from stockledger.domain.exceptions import InvoiceNotFound, ValidationError
from stockledger.domain.model.invoice import Invoice
from stockledger.domain.repository.invoice_repository import InvoiceRepository
from stockledger.domain.service.reporting_projector import (
    DocumentReport,
    PaymentSummary,
    PeriodReport,
    ReceiptTotals,
    project_document,
    project_period,
    receipt_totals,
    summarize_payments,
)


class InvoiceReportHandler:

    def __init__(self, invoice_repo: InvoiceRepository) -> None:
        self._invoice_repo = invoice_repo

    def document(self, invoice_no: str) -> DocumentReport:
        return project_document(self.get(invoice_no))

    def receipt(self, invoice_no: str) -> ReceiptTotals:
        return receipt_totals(self.get(invoice_no).lines)

    def payments(self, invoice_no: str) -> PaymentSummary:
        """Paid in, paid out and balance due against the receipt total."""
        invoice = self.get(invoice_no)
        totals = receipt_totals(invoice.lines)
        return summarize_payments(totals.grand_total, invoice.payments)

    def period(self, start: date | None = None, end: date | None = None) -> PeriodReport:
        """Sum every document issued in ``[start, end]`` (both inclusive)."""
        if start is not None and end is not None and start > end:
            raise ValidationError(f"Period start {start} is after end {end}")
        return project_period(
            inv for inv in self._invoice_repo.list_all() if _within(inv, start, end)
        )

    def get(self, invoice_no: str) -> Invoice:
        invoice = self._invoice_repo.get_by_no((invoice_no or "").strip())
        if invoice is None:
            raise InvoiceNotFound(f"Invoice '{invoice_no}' not found")
        return invoice


def _within(invoice: Invoice, start: date | None, end: date | None) -> bool:
    if start is not None and invoice.issued_at < start:
        return False
    if end is not None and invoice.issued_at > end:
        return False
    return True

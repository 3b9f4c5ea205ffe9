"""Domain service: Reporting Projector.

Derives cost / margin / subtotal / tax figures from the frozen invoice
line snapshots. Each line figure is ceiling-rounded on its own; document
figures are sums of already-rounded lines, and the return sign is applied
once, to the whole document.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from stockledger.domain.model.invoice import (
    DocumentType,
    Invoice,
    InvoiceLineSnapshot,
    Payment,
    PaymentDirection,
)
from stockledger.domain.service.pricing import ceil_currency, line_tax

_ZERO = Decimal("0")


@dataclass(frozen=True)
class Figures:
    original_cost: Decimal = _ZERO
    margin: Decimal = _ZERO
    subtotal: Decimal = _ZERO
    tax: Decimal = _ZERO

    @property
    def grand_total(self) -> Decimal:
        return self.subtotal + self.tax

    def __add__(self, other: Figures) -> Figures:
        return Figures(
            original_cost=self.original_cost + other.original_cost,
            margin=self.margin + other.margin,
            subtotal=self.subtotal + other.subtotal,
            tax=self.tax + other.tax,
        )

    def signed(self, sign: int) -> Figures:
        return Figures(
            original_cost=self.original_cost * sign,
            margin=self.margin * sign,
            subtotal=self.subtotal * sign,
            tax=self.tax * sign,
        )


@dataclass(frozen=True)
class DocumentReport:
    invoice_no: str
    doc_type: DocumentType
    figures: Figures
    lines: tuple[Figures, ...]


@dataclass(frozen=True)
class PeriodReport:
    document_count: int
    figures: Figures


@dataclass(frozen=True)
class PaymentSummary:
    paid_in: Decimal
    paid_out: Decimal
    net_paid: Decimal
    balance: Decimal


def project_line(line: InvoiceLineSnapshot) -> Figures:
    """Unsigned, ceiling-rounded figures for one line."""
    subtotal = ceil_currency(line.qty * line.unit_price)
    unit_margin = max(_ZERO, line.unit_price - line.cost_basis)
    return Figures(
        original_cost=ceil_currency(line.qty * line.cost_basis),
        margin=ceil_currency(line.qty * unit_margin),
        subtotal=subtotal,
        tax=line_tax(subtotal, line.tax_rate),
    )


def project_document(invoice: Invoice) -> DocumentReport:
    lines = tuple(project_line(line) for line in invoice.lines)
    unsigned = Figures()
    for figures in lines:
        unsigned = unsigned + figures
    return DocumentReport(
        invoice_no=invoice.invoice_no,
        doc_type=invoice.doc_type,
        figures=unsigned.signed(invoice.doc_type.sign),
        lines=lines,
    )


def project_period(invoices: Iterable[Invoice]) -> PeriodReport:
    """Sum document reports; returns are already negative."""
    count = 0
    total = Figures()
    for invoice in invoices:
        total = total + project_document(invoice).figures
        count += 1
    return PeriodReport(document_count=count, figures=total)


def summarize_payments(total: Decimal, payments: Iterable[Payment]) -> PaymentSummary:
    """Balance due = total - paid in + paid out; void payments are ignored."""
    paid_in = _ZERO
    paid_out = _ZERO
    for payment in payments:
        if payment.is_void:
            continue
        if payment.direction is PaymentDirection.IN:
            paid_in += payment.amount
        else:
            paid_out += payment.amount
    paid_in = ceil_currency(paid_in)
    paid_out = ceil_currency(paid_out)
    return PaymentSummary(
        paid_in=paid_in,
        paid_out=paid_out,
        net_paid=ceil_currency(paid_in - paid_out),
        balance=ceil_currency(total - paid_in + paid_out),
    )


@dataclass(frozen=True)
class ReceiptTotals:
    subtotal: Decimal
    tax: Decimal

    @property
    def grand_total(self) -> Decimal:
        return self.subtotal + self.tax


def receipt_totals(lines: Iterable[InvoiceLineSnapshot]) -> ReceiptTotals:
    """Totals as printed on a receipt: each line and its tax ceiled first."""
    subtotal = _ZERO
    tax = _ZERO
    for line in lines:
        amount = ceil_currency(line.line_total)
        subtotal += amount
        tax += line_tax(amount, line.tax_rate)
    return ReceiptTotals(subtotal=subtotal, tax=tax)

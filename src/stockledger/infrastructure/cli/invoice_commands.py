"""CLI commands for posting invoices and reading their reports."""

from __future__ import annotations

from datetime import datetime

import click

from stockledger.application.dto import InvoiceLineSpec
from stockledger.domain.exceptions import DomainException
from stockledger.domain.model.invoice import DocumentType, PaymentDirection
from stockledger.domain.service.reporting_projector import Figures
from stockledger.infrastructure.bootstrap import (
    invoice_report_handler,
    ledger_queries,
    post_invoice_handler,
    record_payment_handler,
)


def _parse_lines(raw: str, tax_rate: str) -> list[tuple[str, InvoiceLineSpec]]:
    """Parse 'SKU:Qty:Price,SKU:Qty:Price' into (code, InvoiceLineSpec) pairs."""
    queries = ledger_queries()
    specs: list[tuple[str, InvoiceLineSpec]] = []
    for chunk in raw.split(","):
        chunk = chunk.strip()
        parts = chunk.split(":")
        if len(parts) != 3:
            raise click.BadParameter(
                f"Invalid line format '{chunk}'. Expected 'SKU:Qty:Price'."
            )
        code, qty, price = (p.strip() for p in parts)
        try:
            item = queries.lookup_item(code)
        except DomainException as exc:
            raise click.ClickException(str(exc))
        specs.append(
            (code, InvoiceLineSpec(item_id=item.id, qty=qty, unit_price=price, tax_rate=tax_rate))
        )
    return specs


def _parse_date(raw: str | None):
    if raw is None:
        return None
    try:
        return datetime.strptime(raw, "%Y-%m-%d").date()
    except ValueError:
        raise click.BadParameter(f"Invalid date '{raw}'. Expected YYYY-MM-DD.")


def _display_figures(figures: Figures) -> None:
    click.echo(f"  {'Original cost':<16} {str(figures.original_cost):>12}")
    click.echo(f"  {'Margin':<16} {str(figures.margin):>12}")
    click.echo(f"  {'Subtotal':<16} {str(figures.subtotal):>12}")
    click.echo(f"  {'Tax':<16} {str(figures.tax):>12}")
    click.echo(f"  {'Grand total':<16} {str(figures.grand_total):>12}")


@click.command("post")
@click.option("--no", "invoice_no", required=True, help="Invoice number.")
@click.option(
    "--type", "doc_type",
    type=click.Choice([d.value for d in DocumentType]),
    default=DocumentType.SALE.value,
    show_default=True,
)
@click.option("--lines", required=True, help="Lines as 'SKU:Qty:Price,SKU:Qty:Price'.")
@click.option("--tax", "tax_rate", default="0", show_default=True, help="Tax rate percent for every line.")
@click.option("--date", "issued_at", default=None, help="Issue date, YYYY-MM-DD (default today).")
def invoice_post(invoice_no: str, doc_type: str, lines: str, tax_rate: str, issued_at: str | None) -> None:
    """Post a sale or return; stock moves once even if posted twice."""
    specs = _parse_lines(lines, tax_rate)

    try:
        invoice = post_invoice_handler().handle(
            invoice_no=invoice_no,
            doc_type=doc_type,
            lines=[spec for _, spec in specs],
            issued_at=_parse_date(issued_at),
        )
        report = invoice_report_handler().document(invoice.invoice_no)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Invoice {invoice.invoice_no} posted ({invoice.doc_type.value})")
    for (code, _), line in zip(specs, invoice.lines):
        click.echo(f"  {code:<12} {str(line.qty):>6} x {str(line.unit_price):>10}  cost {line.base_cost_at_sale}")
    _display_figures(report.figures)


@click.command("report")
@click.option("--no", "invoice_no", default=None, help="Single invoice to report on.")
@click.option("--from", "start", default=None, help="Period start, YYYY-MM-DD.")
@click.option("--to", "end", default=None, help="Period end, YYYY-MM-DD.")
def invoice_report(invoice_no: str | None, start: str | None, end: str | None) -> None:
    """Cost, margin, subtotal and tax for one invoice or a period."""
    handler = invoice_report_handler()

    try:
        if invoice_no:
            report = handler.document(invoice_no)
            click.echo(f"Invoice {report.invoice_no} ({report.doc_type.value})")
            _display_figures(report.figures)
            return
        period = handler.period(_parse_date(start), _parse_date(end))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Documents: {period.document_count}")
    _display_figures(period.figures)


@click.command("pay")
@click.option("--no", "invoice_no", required=True, help="Invoice number.")
@click.option("--amount", required=True, help="Amount received or refunded.")
@click.option(
    "--direction",
    type=click.Choice([d.value for d in PaymentDirection]),
    default=PaymentDirection.IN.value,
    show_default=True,
    help="'in' from the customer, 'out' back to them.",
)
def invoice_pay(invoice_no: str, amount: str, direction: str) -> None:
    """Record a payment against an invoice."""
    try:
        payment = record_payment_handler().handle(invoice_no, amount, direction)
        summary = invoice_report_handler().payments(invoice_no)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Payment {payment.direction.value} {payment.amount} recorded on {invoice_no}")
    click.echo(f"  Balance due: {summary.balance}")


@click.command("void-payment")
@click.option("--no", "invoice_no", required=True, help="Invoice number.")
@click.option("--payment", "number", required=True, type=int, help="Payment number, from 1.")
def invoice_void_payment(invoice_no: str, number: int) -> None:
    """Void a payment; it stays on record but no longer counts."""
    try:
        record_payment_handler().void(invoice_no, number)
        summary = invoice_report_handler().payments(invoice_no)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Payment #{number} on {invoice_no} voided")
    click.echo(f"  Balance due: {summary.balance}")


@click.command("receipt")
@click.option("--no", "invoice_no", required=True, help="Invoice number.")
def invoice_receipt(invoice_no: str) -> None:
    """Customer-facing totals and what has been paid."""
    handler = invoice_report_handler()

    try:
        invoice = handler.get(invoice_no)
        totals = handler.receipt(invoice_no)
        summary = handler.payments(invoice_no)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Receipt {invoice_no}")
    click.echo(f"  {'Subtotal':<16} {str(totals.subtotal):>12}")
    click.echo(f"  {'Tax':<16} {str(totals.tax):>12}")
    click.echo(f"  {'Grand total':<16} {str(totals.grand_total):>12}")
    for number, payment in enumerate(invoice.payments, start=1):
        marker = " (void)" if payment.is_void else ""
        click.echo(f"  #{number} {payment.direction.value:<3} {str(payment.amount):>12}{marker}")
    click.echo(f"  {'Paid in':<16} {str(summary.paid_in):>12}")
    click.echo(f"  {'Paid out':<16} {str(summary.paid_out):>12}")
    click.echo(f"  {'Balance due':<16} {str(summary.balance):>12}")

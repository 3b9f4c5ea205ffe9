"""Unit tests for the reporting projector."""

from datetime import date
from decimal import Decimal

from stockledger.domain.model.invoice import (
    DocumentType,
    Invoice,
    InvoiceLineSnapshot,
    Payment,
    PaymentDirection,
)
from stockledger.domain.service.reporting_projector import (
    Figures,
    project_document,
    project_line,
    project_period,
    receipt_totals,
    summarize_payments,
)

D = Decimal


def _line(qty="2", price="10.40", rate="5", cost="7.25", margin=None) -> InvoiceLineSnapshot:
    return InvoiceLineSnapshot(
        item_id="1",
        qty=D(qty),
        unit_price=D(price),
        tax_rate=D(rate),
        base_cost_at_sale=None if cost is None else D(cost),
        margin_percent=None if margin is None else D(margin),
    )


def _invoice(no: str, doc_type: DocumentType, *lines: InvoiceLineSnapshot) -> Invoice:
    return Invoice.create(no, doc_type, list(lines), issued_at=date(2026, 1, 15))


# ── Lines ────────────────────────────────────────────────────────────────────


class TestProjectLine:

    def test_each_figure_is_ceiled(self):
        figures = project_line(_line())
        # 2 x 10.40 = 20.80 -> 21; cost 14.50 -> 15; margin 2 x 3.15 = 6.30 -> 7
        assert figures.subtotal == D("21")
        assert figures.original_cost == D("15")
        assert figures.margin == D("7")
        # 21 x 5% = 1.05 -> 2
        assert figures.tax == D("2")
        assert figures.grand_total == D("23")

    def test_selling_below_cost_clamps_margin_to_zero(self):
        assert project_line(_line(price="5", cost="7")).margin == D("0")

    def test_cost_backed_out_of_margin_percent(self):
        line = _line(qty="1", price="110", rate="0", cost=None, margin="10")
        figures = project_line(line)
        assert figures.original_cost == D("100")
        assert figures.margin == D("10")

    def test_unknown_cost_counts_as_zero(self):
        figures = project_line(_line(qty="1", price="10", rate="0", cost=None))
        assert figures.original_cost == D("0")
        assert figures.margin == D("10")


# ── Documents & periods ──────────────────────────────────────────────────────


class TestProjectDocument:

    def test_sale_sums_rounded_lines(self):
        report = project_document(_invoice("S-1", DocumentType.SALE, _line(), _line()))
        assert report.figures.subtotal == D("42")
        assert report.figures.tax == D("4")
        assert len(report.lines) == 2

    def test_return_is_negated_once(self):
        report = project_document(_invoice("R-1", DocumentType.RETURN, _line()))
        assert report.figures == Figures(
            original_cost=D("-15"), margin=D("-7"), subtotal=D("-21"), tax=D("-2")
        )
        # line figures stay unsigned
        assert report.lines[0].subtotal == D("21")


class TestProjectPeriod:

    def test_returns_reduce_period_totals(self):
        period = project_period(
            [
                _invoice("S-1", DocumentType.SALE, _line(), _line()),
                _invoice("R-1", DocumentType.RETURN, _line()),
            ]
        )
        assert period.document_count == 2
        assert period.figures.subtotal == D("21")
        assert period.figures.grand_total == D("23")

    def test_empty_period(self):
        period = project_period([])
        assert period.document_count == 0
        assert period.figures == Figures()


# ── Receipts & payments ──────────────────────────────────────────────────────


class TestReceiptTotals:

    def test_line_then_tax_ceiled(self):
        totals = receipt_totals([_line(qty="3", price="3.30", rate="12")])
        # 9.90 -> 10; 10 x 12% = 1.2 -> 2
        assert totals.subtotal == D("10")
        assert totals.tax == D("2")
        assert totals.grand_total == D("12")


class TestSummarizePayments:

    def test_void_payments_ignored(self):
        summary = summarize_payments(
            D("100"),
            [
                Payment(D("60.20")),
                Payment(D("500"), is_void=True),
                Payment(D("5.50"), PaymentDirection.OUT),
            ],
        )
        assert summary.paid_in == D("61")
        assert summary.paid_out == D("6")
        assert summary.net_paid == D("55")
        assert summary.balance == D("45")

    def test_no_payments(self):
        summary = summarize_payments(D("99.5"), [])
        assert summary.balance == D("100")
        assert summary.net_paid == D("0")

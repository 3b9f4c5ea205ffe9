"""Integration tests for posting invoices and reading their reports."""

from datetime import date
from decimal import Decimal

import pytest

from stockledger.application.append_move import AppendMoveHandler
from stockledger.application.dto import InvoiceLineSpec
from stockledger.application.invoice_report import InvoiceReportHandler
from stockledger.application.post_invoice import PostInvoiceHandler
from stockledger.domain.exceptions import InvoiceNotFound, ItemNotFound, ValidationError
from stockledger.domain.model.invoice import DocumentType, Payment
from stockledger.domain.model.item import Item
from tests.fakes import FakeInvoiceRepository, FakeLedgerRepository

D = Decimal


def _setup():
    ledger_repo = FakeLedgerRepository(
        [
            Item(id="1", sku="SOAP", name="Soap"),
            Item(id="2", sku="PASTE", name="Toothpaste", margin_percent=D("20")),
        ]
    )
    invoice_repo = FakeInvoiceRepository()
    gateway = AppendMoveHandler(ledger_repo)
    gateway.handle("1", "receive", 20, "18.40")
    gateway.handle("2", "receive", 10, "45")
    post = PostInvoiceHandler(ledger_repo, invoice_repo, gateway)
    reports = InvoiceReportHandler(invoice_repo)
    return ledger_repo, invoice_repo, gateway, post, reports


def _lines():
    return [
        InvoiceLineSpec(item_id="1", qty=D("3"), unit_price=D("25"), tax_rate=D("5")),
        InvoiceLineSpec(item_id="2", qty=D("2"), unit_price=D("60.50")),
    ]


# ── Posting ──────────────────────────────────────────────────────────────────


class TestPostInvoice:

    def test_sale_issues_stock_and_freezes_cost(self):
        ledger_repo, invoice_repo, _, post, _ = _setup()

        invoice = post.handle("INV-1", "sale", _lines(), issued_at=date(2026, 3, 1))

        assert ledger_repo.get_item("1").quantity_on_hand == D("17")
        assert ledger_repo.get_item("2").quantity_on_hand == D("8")
        assert [line.base_cost_at_sale for line in invoice.lines] == [D("18.40"), D("45")]
        assert invoice.lines[1].margin_percent == D("20")
        assert invoice.lines[0].description == "Soap"
        assert invoice_repo.get_by_no("INV-1") is invoice

    def test_moves_carry_reference_reason_and_line_keys(self):
        ledger_repo, _, _, post, _ = _setup()
        post.handle("INV-1", "sale", _lines())

        move = ledger_repo.moves_for_item("2")[-1]
        assert move.reference == "INV-1"
        assert move.reason == "sale"
        assert move.client_transaction_id == "INV-1-2-2"

    def test_reposting_moves_stock_once(self):
        ledger_repo, invoice_repo, _, post, _ = _setup()

        post.handle("INV-1", "sale", _lines())
        post.handle("INV-1", "sale", _lines())

        assert ledger_repo.get_item("1").quantity_on_hand == D("17")
        assert len(invoice_repo.list_all()) == 1

    def test_return_puts_stock_back(self):
        ledger_repo, _, _, post, _ = _setup()
        post.handle("INV-1", DocumentType.SALE, _lines())

        post.handle("RET-1", DocumentType.RETURN, [_lines()[0]])

        assert ledger_repo.get_item("1").quantity_on_hand == D("20")
        assert ledger_repo.moves_for_item("1")[-1].reason == "return"

    def test_frozen_cost_survives_later_receipts(self):
        ledger_repo, invoice_repo, gateway, post, reports = _setup()
        post.handle("INV-1", "sale", _lines())
        before = reports.document("INV-1")

        gateway.handle("1", "receive", 100, "99")

        assert reports.document("INV-1") == before
        assert invoice_repo.get_by_no("INV-1").lines[0].base_cost_at_sale == D("18.40")

    def test_bad_line_moves_nothing(self):
        ledger_repo, invoice_repo, _, post, _ = _setup()
        lines = _lines() + [InvoiceLineSpec(item_id="1", qty=D("0"), unit_price=D("1"))]

        with pytest.raises(ValidationError, match="Line 3"):
            post.handle("INV-1", "sale", lines)

        assert ledger_repo.get_item("1").quantity_on_hand == D("20")
        assert invoice_repo.list_all() == []

    def test_unknown_item_moves_nothing(self):
        ledger_repo, _, _, post, _ = _setup()
        with pytest.raises(ItemNotFound):
            post.handle("INV-1", "sale", [_lines()[0], InvoiceLineSpec("9", D("1"), D("1"))])
        assert ledger_repo.append_calls == 2

    def test_requires_number_and_lines(self):
        _, _, _, post, _ = _setup()
        with pytest.raises(ValidationError, match="Invoice number"):
            post.handle("  ", "sale", _lines())
        with pytest.raises(ValidationError, match="at least one line"):
            post.handle("INV-1", "sale", [])

    def test_unknown_document_type(self):
        _, _, _, post, _ = _setup()
        with pytest.raises(ValidationError, match="document type"):
            post.handle("INV-1", "quote", _lines())


# ── Reports ──────────────────────────────────────────────────────────────────


class TestInvoiceReports:

    def test_document_figures(self):
        _, _, _, post, reports = _setup()
        post.handle("INV-1", "sale", _lines())

        figures = reports.document("INV-1").figures

        # soap: 75 sub, 55.20 -> 56 cost, 3 x 6.60 = 19.80 -> 20 margin, 3.75 -> 4 tax
        # paste: 121 sub, 90 cost, 2 x 15.50 = 31 margin, 0 tax
        assert figures.subtotal == D("196")
        assert figures.original_cost == D("146")
        assert figures.margin == D("51")
        assert figures.tax == D("4")
        assert figures.grand_total == D("200")

    def test_period_nets_returns(self):
        _, _, _, post, reports = _setup()
        post.handle("INV-1", "sale", _lines(), issued_at=date(2026, 3, 1))
        post.handle("RET-1", "return", [_lines()[1]], issued_at=date(2026, 3, 2))
        post.handle("INV-2", "sale", [_lines()[1]], issued_at=date(2026, 4, 1))

        march = reports.period(date(2026, 3, 1), date(2026, 3, 31))

        assert march.document_count == 2
        assert march.figures.subtotal == D("75")
        assert reports.period().document_count == 3

    def test_period_bounds_checked(self):
        _, _, _, _, reports = _setup()
        with pytest.raises(ValidationError, match="after end"):
            reports.period(date(2026, 4, 1), date(2026, 3, 1))

    def test_receipt_and_payments(self):
        _, invoice_repo, _, post, reports = _setup()
        post.handle("INV-1", "sale", _lines())

        assert reports.receipt("INV-1").grand_total == D("200")
        invoice_repo.get_by_no("INV-1").record_payment(Payment(D("150.50")))
        summary = reports.payments("INV-1")
        assert summary.paid_in == D("151")
        assert summary.balance == D("49")

    def test_unknown_invoice(self):
        _, _, _, _, reports = _setup()
        with pytest.raises(InvoiceNotFound):
            reports.document("NOPE")

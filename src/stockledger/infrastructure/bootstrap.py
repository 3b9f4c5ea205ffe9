"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from stockledger.application.append_move import AppendMoveHandler
from stockledger.application.invoice_report import InvoiceReportHandler
from stockledger.application.ledger_queries import LedgerQueries
from stockledger.application.post_invoice import PostInvoiceHandler
from stockledger.application.quote_estimate import QuoteEstimateHandler
from stockledger.application.reconcile_ledger import ReconcileLedgerHandler
from stockledger.application.record_payment import RecordPaymentHandler
from stockledger.application.register_item import RegisterItemHandler
from stockledger.application.show_inventory import ShowInventoryHandler
from stockledger.infrastructure.config import get_settings
from stockledger.infrastructure.persistence.json_invoice_repository import (
    JsonInvoiceRepository,
)
from stockledger.infrastructure.persistence.json_ledger_repository import (
    JsonLedgerRepository,
)

# One ledger repository per process so every handler shares its item locks.
_ledger_repo: JsonLedgerRepository | None = None


def ledger_repository() -> JsonLedgerRepository:
    global _ledger_repo
    path = get_settings().data_dir / "ledger.json"
    if _ledger_repo is None or _ledger_repo.file_path != path:
        _ledger_repo = JsonLedgerRepository(
            path, lock_timeout=get_settings().lock_timeout_seconds
        )
    return _ledger_repo


def invoice_repository() -> JsonInvoiceRepository:
    settings = get_settings()
    return JsonInvoiceRepository(
        settings.data_dir / "invoices.json", lock_timeout=settings.lock_timeout_seconds
    )


def append_move_handler() -> AppendMoveHandler:
    settings = get_settings()
    return AppendMoveHandler(
        ledger_repo=ledger_repository(),
        allow_negative_stock=settings.allow_negative_stock,
        lock_timeout=settings.lock_timeout_seconds,
    )


def ledger_queries() -> LedgerQueries:
    return LedgerQueries(
        ledger_repo=ledger_repository(),
        barcode_lookup_enabled=get_settings().barcode_lookup_enabled,
    )


def register_item_handler() -> RegisterItemHandler:
    return RegisterItemHandler(ledger_repo=ledger_repository())


def show_inventory_handler() -> ShowInventoryHandler:
    return ShowInventoryHandler(ledger_repo=ledger_repository())


def post_invoice_handler() -> PostInvoiceHandler:
    return PostInvoiceHandler(
        ledger_repo=ledger_repository(),
        invoice_repo=invoice_repository(),
        gateway=append_move_handler(),
    )


def invoice_report_handler() -> InvoiceReportHandler:
    return InvoiceReportHandler(invoice_repo=invoice_repository())


def quote_estimate_handler() -> QuoteEstimateHandler:
    settings = get_settings()
    return QuoteEstimateHandler(
        ledger_repo=ledger_repository(),
        barcode_lookup_enabled=settings.barcode_lookup_enabled,
        currency=settings.currency,
    )


def reconcile_ledger_handler() -> ReconcileLedgerHandler:
    return ReconcileLedgerHandler(ledger_repo=ledger_repository())


def record_payment_handler() -> RecordPaymentHandler:
    return RecordPaymentHandler(invoice_repo=invoice_repository())

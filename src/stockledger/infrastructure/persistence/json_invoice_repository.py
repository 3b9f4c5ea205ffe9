"""JSON-file-backed implementation of InvoiceRepository."""

from __future__ import annotations

import json
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import ContextManager

from stockledger.domain.exceptions import StorageUnavailable
from stockledger.domain.model.invoice import (
    DocumentType,
    Invoice,
    InvoiceLineSnapshot,
    Payment,
    PaymentDirection,
)
from stockledger.domain.repository.invoice_repository import InvoiceRepository
from stockledger.infrastructure.locking import file_lock_for, hold_file_lock
from stockledger.infrastructure.persistence.atomic_file import write_atomically


def _dec(raw: str | None) -> Decimal | None:
    return None if raw is None else Decimal(raw)


class JsonInvoiceRepository(InvoiceRepository):

    def __init__(self, file_path: Path, lock_timeout: float = 5.0) -> None:
        self._file_path = file_path
        self._lock_timeout = lock_timeout
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        self._file_lock = file_lock_for(file_path)
        self._ensure_file()

    # --- InvoiceRepository interface --------------------------------------------

    def get_by_no(self, invoice_no: str) -> Invoice | None:
        for raw in self._load_raw():
            if raw["invoice_no"] == invoice_no:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[Invoice]:
        return [self._to_domain(raw) for raw in self._load_raw()]

    def exclusive(self) -> ContextManager[None]:
        return hold_file_lock(self._file_lock, self._lock_timeout)

    def save(self, invoice: Invoice) -> None:
        with self.exclusive():
            invoices = self._load_raw()

            # Upsert: replace if exists, otherwise append
            replaced = False
            for i, raw in enumerate(invoices):
                if raw["invoice_no"] == invoice.invoice_no:
                    invoices[i] = self._to_raw(invoice)
                    replaced = True
                    break
            if not replaced:
                invoices.append(self._to_raw(invoice))

            self._persist_raw(invoices)

    # --- Serialization ----------------------------------------------------------

    @staticmethod
    def _to_raw(invoice: Invoice) -> dict:
        return {
            "invoice_no": invoice.invoice_no,
            "doc_type": invoice.doc_type.value,
            "issued_at": invoice.issued_at.isoformat(),
            "notes": invoice.notes,
            "lines": [
                {
                    "item_id": line.item_id,
                    "description": line.description,
                    "qty": str(line.qty),
                    "unit_price": str(line.unit_price),
                    "tax_rate": str(line.tax_rate),
                    "base_cost_at_sale": None
                    if line.base_cost_at_sale is None
                    else str(line.base_cost_at_sale),
                    "margin_percent": None
                    if line.margin_percent is None
                    else str(line.margin_percent),
                }
                for line in invoice.lines
            ],
            "payments": [
                {
                    "amount": str(p.amount),
                    "direction": p.direction.value,
                    "is_void": p.is_void,
                }
                for p in invoice.payments
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Invoice:
        lines = [
            InvoiceLineSnapshot(
                item_id=ln["item_id"],
                description=ln.get("description") or "",
                qty=Decimal(ln["qty"]),
                unit_price=Decimal(ln["unit_price"]),
                tax_rate=Decimal(ln.get("tax_rate") or "0"),
                base_cost_at_sale=_dec(ln.get("base_cost_at_sale")),
                margin_percent=_dec(ln.get("margin_percent")),
            )
            for ln in raw["lines"]
        ]
        payments = [
            Payment(
                amount=Decimal(p["amount"]),
                direction=PaymentDirection(p["direction"]),
                is_void=bool(p.get("is_void", False)),
            )
            for p in raw.get("payments", [])
        ]
        return Invoice(
            invoice_no=raw["invoice_no"],
            doc_type=DocumentType(raw["doc_type"]),
            lines=lines,
            issued_at=date.fromisoformat(raw["issued_at"]),
            notes=raw.get("notes"),
            payments=payments,
        )

    # --- File helpers -----------------------------------------------------------

    def _load_raw(self) -> list[dict]:
        try:
            return json.loads(self._file_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise StorageUnavailable(f"Cannot read invoices: {exc}") from exc

    def _persist_raw(self, invoices: list[dict]) -> None:
        try:
            write_atomically(self._file_path, json.dumps(invoices, indent=2) + "\n")
        except OSError as exc:
            raise StorageUnavailable(f"Cannot write invoices: {exc}") from exc

    def _ensure_file(self) -> None:
        with self.exclusive():
            if not self._file_path.exists():
                self._persist_raw([])

"""Application service: Reconcile Ledger use case.

Replays each item's move history and compares it with the stored
aggregate. Reports only; a mismatch is never repaired here.
"""

from __future__ import annotations

import logging

from stockledger.domain.exceptions import AggregateInconsistent, ItemNotFound
from stockledger.domain.repository.ledger_repository import LedgerRepository
from stockledger.domain.service.ledger_aggregator import find_discrepancies

logger = logging.getLogger(__name__)


class ReconcileLedgerHandler:

    def __init__(self, ledger_repo: LedgerRepository) -> None:
        self._ledger_repo = ledger_repo

    def handle(self, item_id: str | None = None) -> dict[str, list[str]]:
        """Return ``{item_id: [problem, ...]}`` for inconsistent items only."""
        if item_id is not None:
            item = self._ledger_repo.get_item(item_id)
            if item is None:
                raise ItemNotFound(f"Item '{item_id}' not found")
            items = [item]
        else:
            items = self._ledger_repo.list_items()

        report: dict[str, list[str]] = {}
        for item in items:
            problems = find_discrepancies(item, self._ledger_repo.moves_for_item(item.id))
            if problems:
                logger.error(
                    "Ledger mismatch for %s (%s): %s",
                    item.sku, item.id, "; ".join(problems),
                    extra={"item_id": item.id},
                )
                report[item.id] = problems
        return report

    def verify_item(self, item_id: str) -> None:
        problems = self.handle(item_id).get(item_id)
        if problems:
            raise AggregateInconsistent(item_id, problems)

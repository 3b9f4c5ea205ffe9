"""End-to-end tests for the click CLI against a temporary data directory."""

import logging

import pytest
from click.testing import CliRunner

from stockledger.infrastructure.cli.main import cli
from stockledger.infrastructure.config import get_settings


@pytest.fixture
def run(tmp_path, monkeypatch):
    monkeypatch.setenv("STOCKLEDGER_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("STOCKLEDGER_LOG_LEVEL", "WARNING")
    get_settings.cache_clear()
    runner = CliRunner()

    def invoke(*args: str):
        return runner.invoke(cli, list(args))

    yield invoke

    get_settings.cache_clear()
    # drop the handler bound to the runner's captured stderr
    logging.getLogger("stockledger").handlers.clear()


def _seed(run):
    assert run("item", "add", "--sku", "TEA", "--name", "Tea", "--threshold", "5",
               "--barcode", "8901").exit_code == 0
    assert run("stock", "receive", "TEA", "--qty", "10", "--cost", "100",
               "--location", "Back").exit_code == 0
    assert run("stock", "receive", "TEA", "--qty", "10", "--cost", "200",
               "--location", "Front").exit_code == 0


class TestItemCommands:

    def test_add_and_show(self, run):
        result = run("item", "add", "--sku", "TEA", "--name", "Tea")
        assert result.exit_code == 0
        assert "Item #1 'TEA' registered" in result.output

        result = run("item", "show", "tea")
        assert result.exit_code == 0
        assert "Tea" in result.output

    def test_duplicate_sku_is_an_error(self, run):
        run("item", "add", "--sku", "TEA")
        result = run("item", "add", "--sku", "tea")
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_lookup_by_barcode(self, run):
        _seed(run)
        result = run("item", "lookup", "8901")
        assert result.output.strip() == "1"


class TestStockCommands:

    def test_receipts_blend_average(self, run):
        _seed(run)
        result = run("stock", "issue", "TEA", "--qty", "5")
        assert result.exit_code == 0
        assert "On hand: 15  avg cost: 150" in result.output

    def test_retry_with_same_txn_is_replayed(self, run):
        _seed(run)
        first = run("stock", "issue", "TEA", "--qty", "2", "--txn", "pos-1")
        again = run("stock", "issue", "TEA", "--qty", "2", "--txn", "pos-1")
        assert first.exit_code == 0
        assert again.exit_code == 0
        assert again.output.startswith("Already applied")
        assert "On hand: 18" in again.output

    def test_conflicting_txn_is_an_error(self, run):
        _seed(run)
        run("stock", "issue", "TEA", "--qty", "2", "--txn", "pos-1")
        result = run("stock", "issue", "TEA", "--qty", "3", "--txn", "pos-1")
        assert result.exit_code == 1
        assert "different parameters" in result.output

    def test_zero_adjustment_is_an_error(self, run):
        _seed(run)
        result = run("stock", "adjust", "TEA", "--delta", "0")
        assert result.exit_code == 1
        assert "cannot be zero" in result.output

    def test_history_and_locations(self, run):
        _seed(run)
        run("stock", "adjust", "TEA", "--delta", "-1", "--location", "Back", "--reason", "broken")

        history = run("stock", "history", "TEA", "--limit", "2")
        assert history.exit_code == 0
        lines = [ln for ln in history.output.splitlines() if "TEA" in ln]
        assert len(lines) == 2
        assert "adjust" in lines[0]

        locations = run("stock", "locations", "TEA")
        assert "Back" in locations.output
        assert "Front" in locations.output


class TestInventoryCommands:

    def test_show_and_low(self, run):
        _seed(run)
        result = run("inventory", "show")
        assert result.exit_code == 0
        assert "Back: 10 | Front: 10" in result.output
        assert "3000.00" in result.output

        run("stock", "issue", "TEA", "--qty", "16")
        assert "TEA" in run("inventory", "low").output


class TestInvoiceCommands:

    def test_post_and_report(self, run):
        _seed(run)
        result = run("invoice", "post", "--no", "INV-1", "--lines", "TEA:2:180", "--tax", "5",
                     "--date", "2026-05-01")
        assert result.exit_code == 0
        assert "Invoice INV-1 posted (sale)" in result.output

        again = run("invoice", "post", "--no", "INV-1", "--lines", "TEA:2:180", "--tax", "5",
                    "--date", "2026-05-01")
        assert again.exit_code == 0

        state = run("stock", "issue", "TEA", "--qty", "1")
        assert "On hand: 17" in state.output

        report = run("invoice", "report", "--no", "INV-1")
        assert "360" in report.output

        period = run("invoice", "report", "--from", "2026-05-01", "--to", "2026-05-31")
        assert "Documents: 1" in period.output

    def test_bad_line_format(self, run):
        _seed(run)
        result = run("invoice", "post", "--no", "INV-1", "--lines", "TEA:2")
        assert result.exit_code == 2

    def test_unknown_invoice(self, run):
        result = run("invoice", "report", "--no", "NOPE")
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_pay_void_and_receipt(self, run):
        _seed(run)
        assert run("invoice", "post", "--no", "INV-1", "--lines", "TEA:2:180", "--tax", "5").exit_code == 0

        paid = run("invoice", "pay", "--no", "INV-1", "--amount", "100")
        assert paid.exit_code == 0
        assert "Balance due: 278" in paid.output
        assert run("invoice", "pay", "--no", "INV-1", "--amount", "50").exit_code == 0
        assert run("invoice", "void-payment", "--no", "INV-1", "--payment", "2").exit_code == 0

        receipt = run("invoice", "receipt", "--no", "INV-1")
        assert receipt.exit_code == 0
        assert "378" in receipt.output
        assert "(void)" in receipt.output
        assert "Balance due" in receipt.output and "278" in receipt.output

    def test_pay_rejects_non_positive_amount(self, run):
        _seed(run)
        assert run("invoice", "post", "--no", "INV-1", "--lines", "TEA:2:180").exit_code == 0

        result = run("invoice", "pay", "--no", "INV-1", "--amount", "0")

        assert result.exit_code == 1
        assert "greater than zero" in result.output


class TestPriceAndLedgerCommands:

    def test_price_from_cost(self, run):
        result = run("price", "from-cost", "100", "--gst", "18", "--margin", "10")
        assert result.exit_code == 0
        assert result.output.strip() == "130"

    def test_estimate(self, run):
        run("item", "add", "--sku", "BULB", "--purchase-price", "100", "--gst", "18",
            "--margin", "10")
        result = run("price", "estimate", "--items", "BULB:2")
        assert result.exit_code == 0
        assert "₹ 260.00" in result.output

    def test_reconcile_clean_ledger(self, run):
        _seed(run)
        result = run("ledger", "reconcile")
        assert result.exit_code == 0
        assert "consistent" in result.output

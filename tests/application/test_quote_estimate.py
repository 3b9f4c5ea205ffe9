"""Integration tests for the QuoteEstimate use case."""

from decimal import Decimal

import pytest

from stockledger.application.append_move import AppendMoveHandler
from stockledger.application.quote_estimate import QuoteEstimateHandler
from stockledger.domain.exceptions import ItemNotFound, ValidationError
from stockledger.domain.model.item import Item
from tests.fakes import FakeLedgerRepository

D = Decimal


def _setup():
    repo = FakeLedgerRepository(
        [
            Item(
                id="1",
                sku="BULB",
                name="LED Bulb",
                barcode="555",
                purchase_price=D("100"),
                gst_percent=D("18"),
                margin_percent=D("10"),
            ),
            Item(id="2", sku="WIRE", name="Copper Wire", margin_percent=D("25")),
        ]
    )
    AppendMoveHandler(repo).handle("2", "receive", 10, "39.99")
    return repo, QuoteEstimateHandler(repo)


class TestQuoteEstimate:

    def test_prices_from_purchase_price(self):
        _, handler = _setup()

        estimate = handler.handle([("BULB", 2)])

        assert estimate.lines[0].unit_price == "₹ 130.00"
        assert estimate.lines[0].line_total == "₹ 260.00"
        assert estimate.total == "₹ 260.00"

    def test_falls_back_to_average_cost(self):
        _, handler = _setup()
        # ceil(39.99) = 40 -> 40 x 1.25 = 50
        assert handler.handle([("wire", 1)]).lines[0].unit_price == "₹ 50.00"

    def test_same_item_merges(self):
        _, handler = _setup()

        estimate = handler.handle([("BULB", 1), ("WIRE", 1), ("555", 2)])

        assert [(line.sku, line.qty) for line in estimate.lines] == [("BULB", 3), ("WIRE", 1)]
        assert estimate.total == "₹ 440.00"

    def test_does_not_move_stock(self):
        repo, handler = _setup()
        handler.handle([("WIRE", 3)])
        assert repo.get_item("2").quantity_on_hand == D("10")

    def test_rejects_bad_quantity(self):
        _, handler = _setup()
        with pytest.raises(ValidationError, match="positive whole number"):
            handler.handle([("BULB", 0)])

    def test_rejects_unknown_code(self):
        _, handler = _setup()
        with pytest.raises(ItemNotFound):
            handler.handle([("LAMP", 1)])

    def test_rejects_empty_basket(self):
        _, handler = _setup()
        with pytest.raises(ValidationError):
            handler.handle([])

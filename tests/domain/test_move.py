"""Unit tests for the move record."""

from decimal import Decimal

import pytest

from stockledger.domain.exceptions import InvalidMoveType
from stockledger.domain.model.move import (
    UNASSIGNED_LOCATION,
    MoveRequest,
    MoveType,
)


class TestMoveType:

    @pytest.mark.parametrize("raw", ["receive", " ISSUE ", "Return", "adjust"])
    def test_parse_accepts_vocabulary(self, raw):
        assert MoveType.parse(raw).value == raw.strip().lower()

    @pytest.mark.parametrize("raw", ["transfer", "", None, 3])
    def test_parse_rejects_anything_else(self, raw):
        with pytest.raises(InvalidMoveType):
            MoveType.parse(raw)

    def test_signed_delta(self):
        assert MoveType.RECEIVE.signed_delta(Decimal("3")) == Decimal("3")
        assert MoveType.ISSUE.signed_delta(Decimal("3")) == Decimal("-3")
        assert MoveType.RETURN.signed_delta(Decimal("3")) == Decimal("3")
        assert MoveType.ADJUST.signed_delta(Decimal("-2")) == Decimal("-2")


class TestMoveRequest:

    def test_blank_location_becomes_unassigned(self):
        req = MoveRequest.create("1", MoveType.ISSUE, Decimal("1"), location="   ")
        assert req.location == UNASSIGNED_LOCATION

    def test_unit_cost_dropped_for_non_receipts(self):
        req = MoveRequest.create("1", MoveType.ISSUE, Decimal("1"), unit_cost=Decimal("9"))
        assert req.unit_cost is None

    def test_equal_after_normalization(self):
        a = MoveRequest.create("1", MoveType.RECEIVE, Decimal("5"), Decimal("2"), " A ", " PO-1 ")
        b = MoveRequest.create("1", MoveType.RECEIVE, Decimal("5.0"), Decimal("2.00"), "A", "PO-1")
        assert a == b

    def test_dict_round_trip(self):
        req = MoveRequest.create(
            "7", MoveType.RECEIVE, Decimal("5"), Decimal("2.5"), "Shelf", "PO-9", "restock"
        )
        assert MoveRequest.from_dict(req.to_dict()) == req

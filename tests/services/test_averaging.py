from decimal import Decimal
from types import SimpleNamespace

import pytest

from perp_journal.models.enums import FillSide, PositionSide
from perp_journal.services.averaging import (
    avg_entry_price,
    avg_exit_price,
    is_increasing_fill,
    side_for_opening_fill,
    weighted_average,
)


def _fill(side, quantity, price):
    return SimpleNamespace(id=None, side=side, quantity=quantity, price=price)


def test_classification_matches_position_side():
    assert is_increasing_fill(PositionSide.LONG, _fill("BUY", 1, 1))
    assert not is_increasing_fill(PositionSide.LONG, _fill("SELL", 1, 1))
    assert is_increasing_fill(PositionSide.SHORT, _fill(FillSide.SELL, 1, 1))
    assert not is_increasing_fill(PositionSide.SHORT, _fill("buy", 1, 1))


def test_opening_side():
    assert side_for_opening_fill(_fill("BUY", 1, 1)) is PositionSide.LONG
    assert side_for_opening_fill(_fill("SELL", 1, 1)) is PositionSide.SHORT


def test_unknown_side_rejected():
    with pytest.raises(ValueError):
        side_for_opening_fill(_fill("HOLD", 1, 1))


def test_weighted_average_by_value():
    fills = [_fill("BUY", 1, 100), _fill("BUY", 3, 200)]
    assert weighted_average(fills) == Decimal("175")


def test_zero_quantity_is_undefined_not_error():
    assert weighted_average([_fill("BUY", 0, 100)]) is None
    assert weighted_average([]) is None


def test_entry_and_exit_use_same_classification():
    fills = [_fill("SELL", 2, 50), _fill("SELL", 2, 60), _fill("BUY", 1, 40)]

    assert avg_entry_price(fills, PositionSide.SHORT) == Decimal("55")
    assert avg_exit_price(fills, PositionSide.SHORT) == Decimal("40")
    assert avg_exit_price(fills[:2], PositionSide.SHORT) is None

from perp_journal.models.enums import FillSide, PositionSide
from perp_journal.utils.side_parser import parse_fill_side, parse_position_side


def test_fill_side_variants():
    assert parse_fill_side("BUY") is FillSide.BUY
    assert parse_fill_side(" bid ") is FillSide.BUY
    assert parse_fill_side("Market Buy") is FillSide.BUY
    assert parse_fill_side("sell") is FillSide.SELL
    assert parse_fill_side("ASK") is FillSide.SELL
    assert parse_fill_side("limit sell") is FillSide.SELL
    assert parse_fill_side(FillSide.SELL) is FillSide.SELL


def test_fill_side_unknown():
    assert parse_fill_side(None) is None
    assert parse_fill_side("") is None
    assert parse_fill_side("hold") is None
    assert parse_fill_side("Close Long") is None


def test_position_side():
    assert parse_position_side("long") is PositionSide.LONG
    assert parse_position_side("Short") is PositionSide.SHORT
    assert parse_position_side("flat") is None

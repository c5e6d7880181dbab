from datetime import datetime, timezone
from decimal import Decimal

from perp_journal.models.enums import PositionSide, PositionStatus
from perp_journal.schemas.live import LivePosition
from perp_journal.services.live_reconciler import (
    keep_previous,
    parse_decimal,
    reconcile_live_positions,
)
from perp_journal.services.position_builder import Position


def _open_position(symbol="BTC", side=PositionSide.LONG, qty="2"):
    return Position(
        id=f"pos-{symbol}",
        symbol=symbol,
        side=side,
        status=PositionStatus.OPEN,
        opened_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
        total_quantity=Decimal(qty),
        avg_entry_price=Decimal("100"),
        total_entry_cost=Decimal("200"),
    )


def test_parse_decimal_results():
    assert parse_decimal("1.5").value == Decimal("1.5")
    assert parse_decimal(" 2 ").ok
    assert not parse_decimal(None).ok
    assert not parse_decimal("").ok
    assert not parse_decimal("abc").ok
    assert not parse_decimal("NaN").ok


def test_keep_previous_on_failure():
    assert keep_previous(parse_decimal("oops"), Decimal("7")) == Decimal("7")
    assert keep_previous(parse_decimal("3"), Decimal("7")) == Decimal("3")


def test_overlay_applied_for_matching_symbol_and_side():
    pos = _open_position()
    live = [
        LivePosition(
            market_id=1,
            side="long",
            size="2.5",
            mark_price="110",
            position_value="275",
            liquidation_price="60",
            margin="50",
            leverage="5",
            funding="-0.3",
            unrealized_pnl="25",
        )
    ]

    matched = reconcile_live_positions([pos], live)

    assert matched == [pos]
    assert pos.total_quantity == Decimal("2.5")
    assert pos.current_price == Decimal("110")
    assert pos.position_size_usd == Decimal("275")
    assert pos.liquidation_price == Decimal("60")
    assert pos.margin == Decimal("50")
    assert pos.leverage == Decimal("5")
    assert pos.funding == Decimal("-0.3")
    assert pos.unrealized_pnl == Decimal("25")
    assert pos.unrealized_pnl_percent == Decimal("50")  # 25 / 50 * 100


def test_side_mismatch_leaves_position_alone():
    pos = _open_position()
    live = [LivePosition(market_id=1, side="SHORT", size="2", mark_price="110")]

    assert reconcile_live_positions([pos], live) == []
    assert pos.current_price is None
    assert pos.total_quantity == Decimal("2")


def test_malformed_numbers_are_skipped_per_field():
    pos = _open_position()
    live = [
        LivePosition(
            market_id=1,
            side="LONG",
            size="not-a-number",
            mark_price="105",
            margin="??",
            unrealized_pnl="10",
        )
    ]

    reconcile_live_positions([pos], live)

    assert pos.total_quantity == Decimal("2")  # kept Builder figure
    assert pos.current_price == Decimal("105")
    assert pos.margin is None
    assert pos.unrealized_pnl == Decimal("10")
    assert pos.unrealized_pnl_percent is None


def test_zero_margin_gives_no_percent():
    pos = _open_position()
    live = [LivePosition(market_id=1, side="long", margin="0", unrealized_pnl="10")]

    reconcile_live_positions([pos], live)

    assert pos.unrealized_pnl_percent is None


def test_negative_size_for_short_uses_magnitude():
    pos = _open_position(symbol="ETH", side=PositionSide.SHORT)
    live = [LivePosition(market_id=0, side="short", size="-3")]

    reconcile_live_positions([pos], live)

    assert pos.total_quantity == Decimal("3")


def test_empty_feed_sets_no_overlay():
    pos = _open_position()

    assert reconcile_live_positions([pos], []) == []
    assert reconcile_live_positions([pos], None) == []

    assert pos.current_price is None
    assert pos.margin is None
    assert pos.unrealized_pnl is None
    assert pos.unrealized_pnl_percent is None


def test_unknown_market_resolves_to_placeholder_symbol():
    pos = _open_position(symbol="MKT-999")
    live = [LivePosition(market_id=999, side="long", mark_price="1")]

    reconcile_live_positions([pos], live)

    assert pos.current_price == Decimal("1")

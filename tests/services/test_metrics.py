from datetime import datetime, timedelta, timezone
from decimal import Decimal

from perp_journal.models.enums import PositionSide, PositionStatus
from perp_journal.services.growth_projection import project_growth
from perp_journal.services.metrics import compute_position_metrics
from perp_journal.services.position_builder import Position

T0 = datetime(2025, 1, 1, tzinfo=timezone.utc)


def _closed(pnl, opened_days, closed_days):
    return Position(
        id=f"p{opened_days}",
        symbol="BTC",
        side=PositionSide.LONG,
        status=PositionStatus.CLOSED,
        opened_at=T0 + timedelta(days=opened_days),
        closed_at=T0 + timedelta(days=closed_days),
        realized_pnl=Decimal(pnl),
    )


def _open():
    return Position(
        id="open",
        symbol="ETH",
        side=PositionSide.SHORT,
        status=PositionStatus.OPEN,
        opened_at=T0,
        realized_pnl=Decimal("999"),
    )


def test_metrics_over_closed_positions_only():
    positions = [
        _closed("300", 0, 10),
        _closed("-100", 20, 30),
        _closed("100", 40, 60),
        _open(),
    ]

    m = compute_position_metrics(positions, starting_capital=Decimal("10000"))

    assert m["total_positions"] == 3
    assert m["winning_positions"] == 2
    assert m["losing_positions"] == 1
    assert m["win_rate_pct"] == 66.67
    assert m["total_pnl"] == 300.0
    assert m["total_pnl_pct"] == 3.0
    assert m["avg_pnl"] == 100.0
    assert m["avg_win"] == 200.0
    assert m["avg_loss"] == 100.0
    assert m["profit_factor"] == 4.0
    assert m["largest_win"] == 300.0
    assert m["largest_loss"] == -100.0
    # 60 days -> 2 months
    assert m["avg_monthly_gain"] == 150.0
    assert m["avg_monthly_gain_pct"] == 1.5


def test_metrics_without_history():
    m = compute_position_metrics([_open()])

    assert m["total_positions"] == 0
    assert m["win_rate_pct"] == 0
    assert m["profit_factor"] == 0
    assert m["avg_monthly_gain"] == 0


def test_short_history_counts_as_one_month():
    m = compute_position_metrics([_closed("50", 0, 3)], starting_capital=1000)

    assert m["avg_monthly_gain"] == 50.0
    assert m["avg_monthly_gain_pct"] == 5.0


def test_projection_compounds_scenarios():
    # +1000 over exactly one month on 10k -> 10% per month
    result = project_growth([_closed("1000", 0, 30)], starting_capital=Decimal("10000"), months=2)

    assert result["current_value"] == 11000.0
    assert result["avg_monthly_return_pct"] == 10.0

    now, first, second = result["points"]
    assert now["month"] == "Now"
    assert now["is_projection"] is False
    assert now["average"] == 11000.0

    assert first["month"] == "+1mo"
    assert first["actual"] is None
    assert first["conservative"] == 11550.0  # 5%
    assert first["average"] == 12100.0       # 10%
    assert first["optimistic"] == 12650.0    # 15%
    assert second["average"] == 13310.0


def test_projection_without_history():
    result = project_growth([], starting_capital=5000)

    assert result == {"current_value": 5000.0, "avg_monthly_return_pct": 0.0, "points": []}

from decimal import Decimal
from typing import Any, Dict, Iterable, List

from perp_journal.models.enums import PositionStatus
from perp_journal.services.averaging import as_decimal
from perp_journal.services.position_builder import as_utc

DEFAULT_STARTING_CAPITAL = Decimal("10000")

# a "month" for the monthly-gain figures
DAYS_PER_MONTH = 30


def _round2(x) -> float:
    return round(float(x), 2)


def closed_positions(positions: Iterable) -> List:
    return [
        p for p in positions
        if p.status is PositionStatus.CLOSED and p.realized_pnl is not None
    ]


def months_elapsed(closed: List) -> Decimal:
    """
    Months from the earliest open to the latest close, never less than 1.
    """
    if not closed:
        return Decimal("1")

    first_open = min(as_utc(p.opened_at) for p in closed)
    last_close = max(as_utc(p.closed_at or p.opened_at) for p in closed)
    days = Decimal(str((last_close - first_open).total_seconds())) / Decimal("86400")
    return max(Decimal("1"), days / DAYS_PER_MONTH)


def compute_position_metrics(
    positions: Iterable,
    starting_capital: Decimal | float = DEFAULT_STARTING_CAPITAL,
) -> Dict[str, Any]:
    """
    Performance figures over closed positions.

    - win/loss by realized P&L sign (zero counts as neither)
    - total P&L % is against starting capital
    - profit factor = gross wins / gross losses (0 without losses)
    """
    capital = as_decimal(starting_capital)
    closed = closed_positions(positions)

    pnl_list = [as_decimal(p.realized_pnl) for p in closed]
    wins = [x for x in pnl_list if x > 0]
    losses = [x for x in pnl_list if x < 0]

    total_pnl = sum(pnl_list, Decimal("0"))
    gross_wins = sum(wins, Decimal("0"))
    gross_losses = abs(sum(losses, Decimal("0")))

    total_pnl_pct = total_pnl / capital * 100 if capital > 0 else Decimal("0")
    months = months_elapsed(closed)

    return {
        "total_positions": len(closed),
        "winning_positions": len(wins),
        "losing_positions": len(losses),
        "win_rate_pct": _round2(Decimal(len(wins)) / len(closed) * 100) if closed else 0,
        "total_pnl": _round2(total_pnl),
        "total_pnl_pct": _round2(total_pnl_pct),
        "avg_pnl": _round2(total_pnl / len(closed)) if closed else 0,
        "avg_win": _round2(gross_wins / len(wins)) if wins else 0,
        "avg_loss": _round2(gross_losses / len(losses)) if losses else 0,
        "profit_factor": _round2(gross_wins / gross_losses) if gross_losses > 0 else 0,
        "largest_win": _round2(max(wins)) if wins else 0,
        "largest_loss": _round2(min(losses)) if losses else 0,
        "avg_monthly_gain": _round2(total_pnl / months),
        "avg_monthly_gain_pct": _round2(total_pnl_pct / months),
    }

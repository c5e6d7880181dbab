from decimal import Decimal
from typing import Any, Dict, Iterable

from perp_journal.services.averaging import as_decimal
from perp_journal.services.metrics import DEFAULT_STARTING_CAPITAL, closed_positions, months_elapsed

PROJECTION_MONTHS = 12

# scenario -> share of the historical monthly return
SCENARIOS = {
    "conservative": Decimal("0.5"),
    "average": Decimal("1"),
    "optimistic": Decimal("1.5"),
}


def project_growth(
    positions: Iterable,
    starting_capital: Decimal | float = DEFAULT_STARTING_CAPITAL,
    months: int = PROJECTION_MONTHS,
) -> Dict[str, Any]:
    """
    Compound the historical average monthly return forward.

    Returns the current value, the monthly return used, and one point per
    month ("Now", "+1mo", ...) with a value per scenario.
    """
    capital = as_decimal(starting_capital)
    closed = closed_positions(positions)

    if not closed:
        return {
            "current_value": float(capital),
            "avg_monthly_return_pct": 0.0,
            "points": [],
        }

    total_pnl = sum((as_decimal(p.realized_pnl) for p in closed), Decimal("0"))
    current_value = capital + total_pnl
    total_return_pct = total_pnl / capital * 100 if capital > 0 else Decimal("0")
    monthly_pct = total_return_pct / months_elapsed(closed)

    points = [
        {
            "month": "Now",
            "actual": round(float(current_value), 2),
            "is_projection": False,
            **{name: round(float(current_value), 2) for name in SCENARIOS},
        }
    ]

    for i in range(1, months + 1):
        point = {"month": f"+{i}mo", "actual": None, "is_projection": True}
        for name, share in SCENARIOS.items():
            rate = 1 + monthly_pct * share / 100
            point[name] = round(float(current_value * rate ** i), 2)
        points.append(point)

    return {
        "current_value": round(float(current_value), 2),
        "avg_monthly_return_pct": round(float(monthly_pct), 2),
        "points": points,
    }

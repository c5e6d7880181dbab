# perp_journal/services/averaging.py

from decimal import Decimal
from typing import Callable, Iterable

from perp_journal.models.enums import FillSide, PositionSide
from perp_journal.utils.side_parser import parse_fill_side

ZERO = Decimal("0")


def as_decimal(x) -> Decimal:
    if x is None:
        return ZERO
    if isinstance(x, Decimal):
        return x
    return Decimal(str(x))


def fill_side_of(fill) -> FillSide:
    side = parse_fill_side(getattr(fill, "side", None))
    if side is None:
        raise ValueError(f"Fill {getattr(fill, 'id', None)!r} has unknown side {fill.side!r}")
    return side


def side_for_opening_fill(fill) -> PositionSide:
    return PositionSide.LONG if fill_side_of(fill) is FillSide.BUY else PositionSide.SHORT


def is_increasing_fill(side: PositionSide, fill) -> bool:
    """
    Buy on LONG or sell on SHORT grows the position; anything else reduces it.
    Replay and the final averages both classify through this function.
    """
    fill_side = fill_side_of(fill)
    if side is PositionSide.LONG:
        return fill_side is FillSide.BUY
    return fill_side is FillSide.SELL


def weighted_average(
    fills: Iterable,
    include: Callable[[object], bool] = lambda f: True,
) -> Decimal | None:
    """
    Value-weighted mean price over the selected fills.
    None when nothing is selected or the selected quantity sums to zero.
    """
    total_value = ZERO
    total_qty = ZERO

    for f in fills:
        if not include(f):
            continue
        qty = as_decimal(f.quantity)
        total_value += as_decimal(f.price) * qty
        total_qty += qty

    if total_qty == 0:
        return None
    return total_value / total_qty


def avg_entry_price(fills: Iterable, side: PositionSide) -> Decimal | None:
    return weighted_average(fills, lambda f: is_increasing_fill(side, f))


def avg_exit_price(fills: Iterable, side: PositionSide) -> Decimal | None:
    return weighted_average(fills, lambda f: not is_increasing_fill(side, f))

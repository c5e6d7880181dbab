# perp_journal/services/position_builder.py

import hashlib
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple, Union

from perp_journal.errors import FlatPositionReductionError
from perp_journal.models.enums import PositionSide, PositionStatus
from perp_journal.services.averaging import (
    ZERO,
    as_decimal,
    avg_entry_price,
    avg_exit_price,
    is_increasing_fill,
    side_for_opening_fill,
)

logger = logging.getLogger(__name__)

# Quantities drift in the last decimals; anything at or below this is flat.
QTY_EPSILON = Decimal("0.0001")

# Persisted closed positions match a recomputed one if opened within this window.
MATCH_TOLERANCE_SECONDS = 1.0

DEFAULT_EXCHANGE = "Lighter"


@dataclass
class Position:
    id: str
    symbol: str
    side: PositionSide
    status: PositionStatus
    opened_at: datetime
    market_id: Optional[int] = None
    exchange: str = DEFAULT_EXCHANGE

    total_quantity: Decimal = ZERO
    avg_entry_price: Decimal | None = None
    avg_exit_price: Decimal | None = None
    total_entry_cost: Decimal = ZERO
    total_exit_revenue: Decimal = ZERO
    realized_pnl: Decimal = ZERO
    realized_pnl_percent: Decimal | None = None

    closed_at: datetime | None = None

    # live overlay, open positions only
    current_price: Decimal | None = None
    position_size_usd: Decimal | None = None
    liquidation_price: Decimal | None = None
    margin: Decimal | None = None
    leverage: Decimal | None = None
    funding: Decimal | None = None
    unrealized_pnl: Decimal | None = None
    unrealized_pnl_percent: Decimal | None = None

    journal: str | None = None
    category: str | None = None

    fills: list = field(default_factory=list)

    @property
    def fills_count(self) -> int:
        return len(self.fills)

    @property
    def is_open(self) -> bool:
        return self.status is PositionStatus.OPEN


# -------------------------------------------------
# Replay state
# -------------------------------------------------
@dataclass(frozen=True)
class NoPosition:
    """Flat. The next fill opens a new position."""


@dataclass
class Accumulating:
    symbol: str
    side: PositionSide
    opening_fill: object
    running_qty: Decimal = ZERO
    running_entry_cost: Decimal = ZERO
    running_exit_revenue: Decimal = ZERO
    running_realized_pnl: Decimal = ZERO
    fills: list = field(default_factory=list)

    @property
    def opened_at(self) -> datetime:
        return self.opening_fill.timestamp


ReplayState = Union[NoPosition, Accumulating]

FLAT = NoPosition()


def step(state: ReplayState, fill, symbol: str) -> Tuple[ReplayState, Optional[Accumulating]]:
    """
    Advance the replay by one fill.

    Returns (next_state, closed) where closed is the finished
    Accumulating run when this fill brought quantity back to flat.
    """
    if isinstance(state, NoPosition):
        state = Accumulating(
            symbol=symbol,
            side=side_for_opening_fill(fill),
            opening_fill=fill,
        )

    qty = as_decimal(fill.quantity)
    price = as_decimal(fill.price)

    if is_increasing_fill(state.side, fill):
        state.running_qty += qty
        state.running_entry_cost += price * qty
    else:
        if state.running_qty <= 0:
            raise FlatPositionReductionError(symbol, getattr(fill, "id", None))

        avg_entry = state.running_entry_cost / state.running_qty
        if state.side is PositionSide.LONG:
            pnl = (price - avg_entry) * qty
        else:
            pnl = (avg_entry - price) * qty

        state.running_realized_pnl += pnl
        state.running_exit_revenue += price * qty
        state.running_qty -= qty

        if state.running_qty < -QTY_EPSILON:
            logger.warning(
                "Fill %r on %s reduces past flat by %s; closing position",
                getattr(fill, "id", None),
                symbol,
                -state.running_qty,
            )

    state.fills.append(fill)

    if state.running_qty <= QTY_EPSILON:
        return FLAT, state
    return state, None


# -------------------------------------------------
# Identity + metadata carry-over
# -------------------------------------------------
def position_key(symbol: str, opening_fill) -> str:
    """Stable id derived from the symbol and the fill that opened the position."""
    anchor = getattr(opening_fill, "id", None)
    if anchor is None:
        anchor = as_utc(opening_fill.timestamp).isoformat()
    digest = hashlib.sha1(f"{symbol}:{anchor}".encode("utf-8")).hexdigest()
    return f"pos-{digest[:24]}"


def as_utc(dt: datetime) -> datetime:
    # sqlite hands back naive datetimes; treat them as UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def _status_value(status) -> str:
    return str(getattr(status, "value", status) or "").lower()


class MetadataMatcher:
    """
    Finds the persisted record a recomputed position descends from.

    Records whose id is the key of any position in this replay are
    reserved for that position; the time-window and open-status
    heuristics only see the rest. Each record is handed out at most once.
    """

    def __init__(self, symbol: str, persisted: Iterable = (), keys: Iterable[str] = ()):
        self._candidates = [p for p in persisted if (p.symbol or "") == symbol]
        self._claimed: set = set()
        self._reserved: set = set(keys)

    def _unclaimed(self):
        return [p for p in self._candidates if p.id not in self._claimed]

    def _fallback_candidates(self):
        return [p for p in self._unclaimed() if p.id not in self._reserved]

    def _claim(self, record):
        if record is not None:
            self._claimed.add(record.id)
        return record

    def _by_id(self, key: str):
        for p in self._unclaimed():
            if p.id == key:
                return p
        return None

    def match_closed(self, key: str, opened_at: datetime):
        exact = self._by_id(key)
        if exact is not None:
            return self._claim(exact)

        best = None
        best_gap = None
        for p in self._fallback_candidates():
            if p.opened_at is None:
                continue
            gap = abs((as_utc(p.opened_at) - as_utc(opened_at)).total_seconds())
            if gap < MATCH_TOLERANCE_SECONDS and (best_gap is None or gap < best_gap):
                best, best_gap = p, gap

        return self._claim(best)

    def match_open(self, key: str):
        exact = self._by_id(key)
        if exact is not None:
            return self._claim(exact)

        for p in self._fallback_candidates():
            if _status_value(p.status) == PositionStatus.OPEN.value:
                return self._claim(p)
        return None


def _carry_over(position: Position, record) -> None:
    if record is None:
        return
    position.id = record.id
    position.journal = record.journal or None
    position.category = record.category or None


# -------------------------------------------------
# Finalization
# -------------------------------------------------
def _base_position(run: Accumulating, status: PositionStatus) -> Position:
    opening = run.opening_fill
    return Position(
        id=position_key(run.symbol, opening),
        symbol=run.symbol,
        side=run.side,
        status=status,
        opened_at=run.opened_at,
        market_id=getattr(opening, "market_id", None),
        exchange=getattr(opening, "exchange", None) or DEFAULT_EXCHANGE,
        avg_entry_price=avg_entry_price(run.fills, run.side),
        total_entry_cost=run.running_entry_cost,
        total_exit_revenue=run.running_exit_revenue,
        realized_pnl=run.running_realized_pnl,
        fills=list(run.fills),
    )


def finalize_closed(run: Accumulating, matcher: MetadataMatcher) -> Position:
    pos = _base_position(run, PositionStatus.CLOSED)
    pos.total_quantity = ZERO
    pos.closed_at = run.fills[-1].timestamp
    pos.avg_exit_price = avg_exit_price(run.fills, run.side)
    pos.realized_pnl_percent = (
        run.running_realized_pnl / run.running_entry_cost * 100
        if run.running_entry_cost > 0
        else ZERO
    )
    _carry_over(pos, matcher.match_closed(pos.id, pos.opened_at))
    return pos


def finalize_open(run: Accumulating, matcher: MetadataMatcher) -> Position:
    pos = _base_position(run, PositionStatus.OPEN)
    pos.total_quantity = run.running_qty
    pos.realized_pnl_percent = (
        run.running_realized_pnl / run.running_entry_cost * 100
        if run.running_entry_cost > 0
        else None
    )
    _carry_over(pos, matcher.match_open(pos.id))
    return pos


def build_positions(symbol: str, fills: Iterable, persisted: Iterable = ()) -> List[Position]:
    """
    Replay one symbol's fills (already sorted oldest first) into positions.

    Each position runs from a flat state to the next flat state.
    The result is the closed positions in order, followed by at most
    one open position.
    """
    closed_runs: List[Accumulating] = []
    state: ReplayState = FLAT

    for f in fills:
        state, closed = step(state, f, symbol)
        if closed is not None:
            closed_runs.append(closed)

    open_run = state if isinstance(state, Accumulating) else None

    runs = closed_runs + ([open_run] if open_run is not None else [])
    matcher = MetadataMatcher(
        symbol,
        persisted,
        keys=[position_key(symbol, run.opening_fill) for run in runs],
    )

    positions = [finalize_closed(run, matcher) for run in closed_runs]
    if open_run is not None:
        positions.append(finalize_open(open_run, matcher))

    return positions

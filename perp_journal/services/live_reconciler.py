# perp_journal/services/live_reconciler.py

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Iterable, List, Optional

from perp_journal.schemas.live import LivePosition
from perp_journal.services.markets import symbol_for_market
from perp_journal.services.position_builder import Position
from perp_journal.utils.side_parser import parse_position_side

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParseResult:
    value: Decimal | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def parse_decimal(raw) -> ParseResult:
    if raw is None:
        return ParseResult(error="missing")

    text = str(raw).strip()
    if not text:
        return ParseResult(error="empty")

    try:
        value = Decimal(text)
    except (InvalidOperation, ValueError):
        return ParseResult(error=f"not a number: {text!r}")

    if not value.is_finite():
        return ParseResult(error=f"not finite: {text!r}")

    return ParseResult(value=value)


def keep_previous(result: ParseResult, previous):
    return result.value if result.ok else previous


def find_live_position(position: Position, live: Iterable[LivePosition]) -> Optional[LivePosition]:
    for lp in live:
        if symbol_for_market(lp.market_id) != position.symbol:
            continue
        if parse_position_side(lp.side) is position.side:
            return lp
    return None


def apply_live_data(position: Position, lp: LivePosition) -> None:
    """
    Overlay the live view onto an open position.
    Unparseable fields leave whatever the position already had.
    """
    size = parse_decimal(lp.size)
    if size.ok and size.value != 0:
        # exchange reports signed size for shorts
        position.total_quantity = abs(size.value)
    elif not size.ok:
        logger.debug("Live size for %s unusable (%s)", position.symbol, size.error)

    position.current_price = keep_previous(parse_decimal(lp.mark_price), position.current_price)
    position.position_size_usd = keep_previous(parse_decimal(lp.position_value), position.position_size_usd)
    position.liquidation_price = keep_previous(parse_decimal(lp.liquidation_price), position.liquidation_price)
    position.margin = keep_previous(parse_decimal(lp.margin), position.margin)
    position.leverage = keep_previous(parse_decimal(lp.leverage), position.leverage)
    position.funding = keep_previous(parse_decimal(lp.funding), position.funding)
    position.unrealized_pnl = keep_previous(parse_decimal(lp.unrealized_pnl), position.unrealized_pnl)

    if position.unrealized_pnl is not None and position.margin is not None and position.margin > 0:
        position.unrealized_pnl_percent = position.unrealized_pnl / position.margin * 100


def reconcile_live_positions(open_positions: Iterable[Position], live: Optional[Iterable[LivePosition]]) -> List[Position]:
    """Mutates the given open positions in place and returns the ones that matched."""
    live = list(live or [])
    matched: List[Position] = []

    if not live:
        return matched

    for pos in open_positions:
        if not pos.is_open:
            continue
        lp = find_live_position(pos, live)
        if lp is None:
            logger.info("No live data for open %s %s", pos.symbol, pos.side.value)
            continue
        apply_live_data(pos, lp)
        matched.append(pos)

    return matched

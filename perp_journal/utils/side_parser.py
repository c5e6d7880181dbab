import re
from typing import Optional

from perp_journal.models.enums import FillSide, PositionSide

_ws_re = re.compile(r"\s+", flags=re.UNICODE)


def _normalize_text(s: Optional[str]) -> str:
    if s is None:
        return ""

    # Replace common odd whitespace + dashes
    s = s.replace("\u00A0", " ")   # NBSP
    s = s.replace("\u200B", "")   # zero-width space
    s = s.replace("\u200C", "")   # zero-width non-joiner
    s = s.replace("\u200D", "")   # zero-width joiner
    s = s.replace("\u2014", "-").replace("\u2013", "-")

    # Strip non-printing control chars (keep normal unicode letters)
    s = "".join(ch for ch in s if ch.isprintable())

    s = s.strip()
    s = _ws_re.sub(" ", s)
    return s


_re_buy = re.compile(r"\b(buy|bid)\b", re.I)
_re_sell = re.compile(r"\b(sell|ask)\b", re.I)


def parse_fill_side(side) -> Optional[FillSide]:
    """
    "BUY", "buy", "Bid" -> BUY; "SELL", "ask" -> SELL.
    Anything else -> None.
    """
    if isinstance(side, FillSide):
        return side

    s = _normalize_text(side)
    if not s:
        return None

    if _re_buy.search(s):
        return FillSide.BUY
    if _re_sell.search(s):
        return FillSide.SELL
    return None


def parse_position_side(side) -> Optional[PositionSide]:
    """Live feeds report "long"/"short" in any case."""
    if isinstance(side, PositionSide):
        return side

    s = _normalize_text(side).upper()
    try:
        return PositionSide(s)
    except ValueError:
        return None

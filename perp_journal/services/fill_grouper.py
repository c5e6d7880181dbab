import logging
from typing import Dict, Iterable, List

logger = logging.getLogger(__name__)


def group_fills_by_symbol(fills: Iterable) -> Dict[str, List]:
    """
    Partition fills by symbol, keeping insertion order inside each group.
    Fills without a symbol land under "" (logged, not rejected).
    """
    grouped: Dict[str, List] = {}
    missing = 0

    for f in fills:
        symbol = f.symbol or ""
        if not symbol:
            missing += 1
        grouped.setdefault(symbol, []).append(f)

    if missing:
        logger.warning("%d fill(s) have no symbol; grouped under ''", missing)

    return grouped

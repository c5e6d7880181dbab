# Lighter market id -> symbol
MARKET_SYMBOLS: dict[int, str] = {
    0: "ETH",
    1: "BTC",
    2: "SOL",
    3: "DOGE",
    7: "XRP",
    9: "AVAX",
    16: "SUI",
    21: "FARTCOIN",
    24: "HYPE",
    25: "BNB",
    29: "ENA",
    32: "SEI",
    39: "ADA",
    45: "PUMP",
    47: "PENGU",
    49: "EIGEN",
    58: "BCH",
    71: "XPL",
    83: "ASTER",
    90: "ZEC",
    120: "LIT",
}


def symbol_for_market(market_id) -> str:
    try:
        key = int(market_id)
    except (TypeError, ValueError):
        return f"MKT-{market_id}"
    return MARKET_SYMBOLS.get(key, f"MKT-{key}")

import httpx
import pytest

from perp_journal.config import Settings
from perp_journal.services.live_feed import LighterLiveFeed, NullLiveFeed, live_feed_from_settings

WALLET = "0xAbCdEf0000000000000000000000000000000001"


def _feed(handler):
    return LighterLiveFeed(
        base_url="https://lighter.test",
        wallet_address=WALLET,
        api_key="secret",
        timeout=1.0,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_fetches_positions_of_first_account():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        seen["api_key"] = request.headers.get("x-api-key")
        return httpx.Response(
            200,
            json={
                "accounts": [
                    {
                        "index": 7,
                        "positions": [
                            {"market_id": 1, "side": "long", "size": "0.5", "mark_price": "60000", "margin": 1000},
                            {"market_id": 0, "side": "short", "size": "-2", "unrealized_pnl": "-12.5"},
                        ],
                    }
                ]
            },
        )

    live = await _feed(handler).fetch_open_positions()

    assert seen["path"] == "/api/v1/account"
    assert seen["params"] == {"by": "l1_address", "value": WALLET}
    assert seen["api_key"] == "secret"
    assert [(p.market_id, p.side) for p in live] == [(1, "long"), (0, "short")]
    assert live[0].margin == "1000"


@pytest.mark.asyncio
async def test_server_error_means_no_live_data():
    feed = _feed(lambda request: httpx.Response(502, text="bad gateway"))

    assert await feed.fetch_open_positions() == []


@pytest.mark.asyncio
async def test_transport_error_means_no_live_data():
    def handler(request):
        raise httpx.ConnectError("boom", request=request)

    assert await _feed(handler).fetch_open_positions() == []


@pytest.mark.asyncio
async def test_non_json_body_means_no_live_data():
    feed = _feed(lambda request: httpx.Response(200, text="<html>maintenance</html>"))

    assert await feed.fetch_open_positions() == []


@pytest.mark.asyncio
async def test_unexpected_shape_means_no_live_data():
    feed = _feed(lambda request: httpx.Response(200, json={"accounts": {"oops": 1}}))
    assert await feed.fetch_open_positions() == []

    feed = _feed(lambda request: httpx.Response(200, json={"accounts": []}))
    assert await feed.fetch_open_positions() == []


@pytest.mark.asyncio
async def test_malformed_entries_are_skipped():
    payload = {"accounts": [{"positions": [{"side": "long"}, {"market_id": 2, "side": "long", "size": "1"}]}]}
    feed = _feed(lambda request: httpx.Response(200, json=payload))

    live = await feed.fetch_open_positions()

    assert [p.market_id for p in live] == [2]


def test_unconfigured_settings_give_null_feed():
    settings = Settings(
        database_url="sqlite+aiosqlite://",
        database_echo=False,
        lighter_api_url="https://lighter.test",
        lighter_api_key="",
        lighter_wallet_address="",
        live_feed_timeout_sec=1.0,
        starting_capital=10000,
        log_level="INFO",
        cors_origins=["*"],
    )

    assert isinstance(live_feed_from_settings(settings), NullLiveFeed)

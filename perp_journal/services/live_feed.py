# perp_journal/services/live_feed.py

import logging
from typing import List, Protocol

import httpx
from pydantic import ValidationError

from perp_journal.config import Settings, get_settings
from perp_journal.schemas.live import LivePosition

logger = logging.getLogger(__name__)


class LiveFeed(Protocol):
    async def fetch_open_positions(self) -> List[LivePosition]: ...


class NullLiveFeed:
    """Used when no wallet is configured; open positions keep their fill-derived values."""

    async def fetch_open_positions(self) -> List[LivePosition]:
        return []


class StaticLiveFeed:
    """Serves a fixed snapshot of live positions, e.g. one captured earlier."""

    def __init__(self, positions):
        self._positions = list(positions)

    async def fetch_open_positions(self) -> List[LivePosition]:
        return list(self._positions)


class LighterLiveFeed:
    """
    Open positions for one wallet from the Lighter account endpoint.

    Never raises: transport errors, bad status codes and unexpected
    payloads all come back as an empty list.
    """

    def __init__(
        self,
        base_url: str,
        wallet_address: str,
        api_key: str = "",
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.wallet_address = wallet_address
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    async def _get_account(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["x-api-key"] = self.api_key

        # Address must keep its checksummed case
        params = {"by": "l1_address", "value": self.wallet_address}

        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            resp = await client.get("/api/v1/account", params=params, headers=headers)
            resp.raise_for_status()
            return resp.json()

    async def fetch_open_positions(self) -> List[LivePosition]:
        try:
            data = await self._get_account()
        except httpx.HTTPError as exc:
            logger.warning("Live feed request failed: %s", exc)
            return []
        except ValueError as exc:
            logger.warning("Live feed returned non-JSON body: %s", exc)
            return []

        accounts = data.get("accounts") if isinstance(data, dict) else None
        if not isinstance(accounts, list) or not accounts:
            logger.info("No live account found for %s", self.wallet_address)
            return []

        raw_positions = accounts[0].get("positions") if isinstance(accounts[0], dict) else None
        if not isinstance(raw_positions, list):
            logger.warning("Live feed positions is not a list: %r", raw_positions)
            return []

        out: List[LivePosition] = []
        for raw in raw_positions:
            try:
                out.append(LivePosition.model_validate(raw))
            except ValidationError as exc:
                logger.warning("Skipping malformed live position %r: %s", raw, exc)

        return out


def live_feed_from_settings(settings: Settings | None = None) -> LiveFeed:
    settings = settings or get_settings()
    if not settings.lighter_configured:
        return NullLiveFeed()
    return LighterLiveFeed(
        base_url=settings.lighter_api_url,
        wallet_address=settings.lighter_wallet_address,
        api_key=settings.lighter_api_key,
        timeout=settings.live_feed_timeout_sec,
    )


async def get_live_feed() -> LiveFeed:
    return live_feed_from_settings()

"""Kalshi trade API v2 adapter - cursor-paginated market listing."""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any

import httpx
import structlog

from predscan.ingestion.base import (
    MarketFetchError,
    PlatformAdapter,
    in_window,
    parse_datetime,
    sort_by_end_date,
    to_float,
    window,
)
from predscan.ingestion.rate_limit import TokenBucket, backoff_on_429
from predscan.models import Market, Outcome

log = structlog.get_logger(__name__)

KALSHI_API_BASE = "https://api.elections.kalshi.com/trade-api/v2"


def yes_probability(raw: dict[str, Any]) -> float:
    """Yes price in cents (0-100): last trade, else bid/ask mid."""
    last = to_float(raw.get("last_price"))
    if last:
        return last
    return (to_float(raw.get("yes_bid")) + to_float(raw.get("yes_ask"))) / 2.0


def parse_market(raw: dict[str, Any]) -> Market:
    """Convert Kalshi market object to canonical Market (binary Yes/No)."""
    yes = yes_probability(raw)
    return Market(
        id=str(raw["ticker"]),
        platform=KalshiAdapter.name,
        question=raw.get("title") or "",
        url=f"https://kalshi.com/markets/{raw.get('event_ticker') or raw['ticker']}",
        end_date=parse_datetime(raw.get("expected_expiration_time") or raw.get("expiration_time")),
        outcomes=[Outcome(name="Yes", probability=yes), Outcome(name="No", probability=100.0 - yes)],
        volume_24h=to_float(raw.get("volume_24h")),
        liquidity=to_float(raw.get("liquidity")),
    )


def select_markets(rows: list[Any], now: datetime, cutoff: datetime) -> list[Market]:
    markets = []
    for row in rows:
        if not isinstance(row, dict) or row.get("status") not in ("active", "open"):
            continue
        try:
            market = parse_market(row)
        except (KeyError, ValueError, TypeError) as e:
            log.warning("skip_market", platform="kalshi", market_id=row.get("ticker"), error=str(e))
            continue
        if in_window(market.end_date, now, cutoff):
            markets.append(market)
    return markets


class KalshiAdapter(PlatformAdapter):
    """Kalshi public market data. Pages are rate limited; 429s back off and retry."""

    name = "Kalshi"
    platform_id = "kalshi"
    base_url = KALSHI_API_BASE

    def __init__(
        self,
        *args: Any,
        max_pages: int = 5,
        page_size: int = 100,
        requests_per_sec: float = 5.0,
        max_retries: int = 3,
        retry_base_delay_sec: float = 1.0,
        **kwargs: Any,
    ):
        super().__init__(*args, **kwargs)
        self.max_pages = max_pages
        self.page_size = page_size
        self.max_retries = max_retries
        self.retry_base_delay_sec = retry_base_delay_sec
        self._bucket = TokenBucket(rate=requests_per_sec)

    async def _get_page(self, client: httpx.AsyncClient, params: dict[str, Any]) -> dict[str, Any]:
        retries = 0
        while True:
            await self._bucket.wait_for_token()
            resp = await client.get(f"{self.base_url}/markets", params=params)
            if resp.status_code == 429 and retries < self.max_retries:
                delay = backoff_on_429(retries, self.retry_base_delay_sec)
                log.info("rate_limited", platform="kalshi", retry_in_sec=delay)
                retries += 1
                await asyncio.sleep(delay)
                continue
            resp.raise_for_status()
            data = resp.json()
            if not isinstance(data, dict) or not isinstance(data.get("markets"), list):
                raise MarketFetchError(self.name, "unexpected response shape")
            return data

    async def fetch_markets(self, minutes_ahead: int) -> list[Market]:
        now, cutoff = window(minutes_ahead)
        markets: list[Market] = []
        cursor: str | None = None
        async with self._client() as client:
            for _ in range(self.max_pages):
                params: dict[str, Any] = {"limit": self.page_size, "status": "open"}
                if cursor:
                    params["cursor"] = cursor
                data = await self._get_page(client, params)
                markets.extend(select_markets(data["markets"], now, cutoff))
                cursor = data.get("cursor")
                if not cursor:
                    break
        return sort_by_end_date(markets)

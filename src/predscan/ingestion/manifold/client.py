"""Manifold Markets adapter (play money) - binary, unresolved markets only."""

from __future__ import annotations

from typing import Any

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
from predscan.models import Market, Outcome

log = structlog.get_logger(__name__)

MANIFOLD_API_BASE = "https://api.manifold.markets/v0"


def parse_market(raw: dict[str, Any]) -> Market:
    probability = to_float(raw.get("probability"), 0.5) * 100.0
    return Market(
        id=str(raw["id"]),
        platform=ManifoldAdapter.name,
        question=raw.get("question") or "",
        url=raw.get("url") or f"https://manifold.markets/{raw.get('slug', '')}",
        end_date=parse_datetime(raw.get("closeTime")),
        outcomes=[
            Outcome(name="Yes", probability=probability),
            Outcome(name="No", probability=100.0 - probability),
        ],
        volume_24h=to_float(raw.get("volume24Hours")),
        liquidity=to_float(raw.get("totalLiquidity")),
    )


class ManifoldAdapter(PlatformAdapter):
    name = "Manifold"
    platform_id = "manifold"
    base_url = MANIFOLD_API_BASE

    def __init__(self, *args: Any, limit: int = 500, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.limit = limit

    async def fetch_markets(self, minutes_ahead: int) -> list[Market]:
        now, cutoff = window(minutes_ahead)
        async with self._client() as client:
            data = await self._get_json(client, f"{self.base_url}/markets", params={"limit": self.limit})
        if not isinstance(data, list):
            raise MarketFetchError(self.name, "unexpected response shape")
        markets = []
        for row in data:
            if not isinstance(row, dict) or row.get("isResolved"):
                continue
            if row.get("outcomeType") != "BINARY":
                continue
            try:
                market = parse_market(row)
            except (KeyError, ValueError, TypeError) as e:
                log.warning("skip_market", platform="manifold", market_id=row.get("id"), error=str(e))
                continue
            if in_window(market.end_date, now, cutoff):
                markets.append(market)
        return sort_by_end_date(markets)

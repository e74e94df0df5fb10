"""Polymarket Gamma API adapter - markets ending inside the lookahead window."""

from __future__ import annotations

import json
from datetime import datetime
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

GAMMA_API_BASE = "https://gamma-api.polymarket.com"


def _json_list(value: str | list[Any] | None) -> list[Any]:
    """Gamma encodes arrays as JSON strings; accept either form."""
    if isinstance(value, list):
        return value
    if not value:
        return []
    parsed = json.loads(value)
    if not isinstance(parsed, list):
        raise ValueError("expected a JSON array")
    return parsed


def _parse_outcomes(
    outcomes_str: str | list[str] | None,
    prices_str: str | list[str] | None,
) -> list[Outcome]:
    """Build Outcome list from Gamma outcome fields. Prices in [0, 1] become percent.

    Raises ValueError on unparsable or misaligned arrays so the market is dropped.
    """
    names = _json_list(outcomes_str)
    prices = [float(p) * 100.0 for p in _json_list(prices_str)]
    if len(prices) != len(names):
        raise ValueError(f"{len(names)} outcomes but {len(prices)} prices")
    return [Outcome(name=str(name), probability=price) for name, price in zip(names, prices)]


def parse_market(raw: dict[str, Any]) -> Market:
    """Convert Gamma API market object to canonical Market."""
    slug = raw.get("slug") or ""
    return Market(
        id=str(raw["id"]),
        platform=PolymarketAdapter.name,
        question=raw.get("question") or raw.get("title") or "",
        url=f"https://polymarket.com/event/{slug}",
        end_date=parse_datetime(raw.get("endDate")),
        outcomes=_parse_outcomes(raw.get("outcomes"), raw.get("outcomePrices")),
        volume_24h=to_float(raw.get("volume24hr")),
        liquidity=to_float(raw.get("liquidityNum") or raw.get("liquidity")),
    )


def select_markets(rows: list[dict[str, Any]], now: datetime, cutoff: datetime) -> list[Market]:
    """Parse active, open rows ending inside (now, cutoff]; skip malformed ones."""
    markets = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        if row.get("closed") is True or row.get("active") is False:
            continue
        try:
            market = parse_market(row)
        except (KeyError, ValueError, TypeError) as e:
            log.warning("skip_market", platform="polymarket", market_id=row.get("id"), error=str(e))
            continue
        if in_window(market.end_date, now, cutoff):
            markets.append(market)
    return markets


class PolymarketAdapter(PlatformAdapter):
    """Polymarket via the public Gamma REST API."""

    name = "Polymarket"
    platform_id = "polymarket"
    base_url = GAMMA_API_BASE

    def __init__(self, *args: Any, limit: int = 500, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.limit = limit

    async def fetch_markets(self, minutes_ahead: int) -> list[Market]:
        now, cutoff = window(minutes_ahead)
        params = {
            "closed": "false",
            "active": "true",
            "limit": self.limit,
            "end_date_min": now.isoformat(),
            "end_date_max": cutoff.isoformat(),
        }
        async with self._client() as client:
            data = await self._get_json(client, f"{self.base_url}/markets", params=params)
        if isinstance(data, dict):
            data = data.get("data")
        if not isinstance(data, list):
            raise MarketFetchError(self.name, "unexpected response shape")
        return sort_by_end_date(select_markets(data, now, cutoff))

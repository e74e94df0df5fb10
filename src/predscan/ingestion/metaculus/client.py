"""Metaculus adapter (forecasting, no money) - community median as Yes probability."""

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

METACULUS_API_BASE = "https://www.metaculus.com/api2"


def community_median(raw: dict[str, Any]) -> float | None:
    prediction = ((raw.get("community_prediction") or {}).get("full") or {}).get("q2")
    return None if prediction is None else float(prediction)


def parse_market(raw: dict[str, Any]) -> Market:
    median = community_median(raw)
    yes = median * 100.0 if median is not None else 50.0
    return Market(
        id=str(raw["id"]),
        platform=MetaculusAdapter.name,
        question=raw.get("title") or "",
        url=f"https://www.metaculus.com{raw.get('url') or ''}",
        end_date=parse_datetime(raw.get("close_time")),
        outcomes=[Outcome(name="Yes", probability=yes), Outcome(name="No", probability=100.0 - yes)],
        # Prediction count stands in for activity
        volume_24h=to_float(raw.get("prediction_count")),
        liquidity=0.0,
    )


class MetaculusAdapter(PlatformAdapter):
    name = "Metaculus"
    platform_id = "metaculus"
    base_url = METACULUS_API_BASE

    async def fetch_markets(self, minutes_ahead: int) -> list[Market]:
        now, cutoff = window(minutes_ahead)
        params = {"status": "open", "type": "forecast", "limit": 100, "order_by": "close_time"}
        async with self._client() as client:
            data = await self._get_json(client, f"{self.base_url}/questions/", params=params)
        rows = data.get("results") if isinstance(data, dict) else None
        if not isinstance(rows, list):
            raise MarketFetchError(self.name, "unexpected response shape")
        markets = []
        for row in rows:
            if not isinstance(row, dict):
                continue
            try:
                market = parse_market(row)
            except (KeyError, ValueError, TypeError) as e:
                log.warning("skip_market", platform="metaculus", market_id=row.get("id"), error=str(e))
                continue
            if in_window(market.end_date, now, cutoff):
                markets.append(market)
        return sort_by_end_date(markets)

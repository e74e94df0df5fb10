"""PredictIt adapter - one market per question, one outcome per open contract."""

from __future__ import annotations

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

PREDICTIT_API_BASE = "https://www.predictit.org/api/marketdata"


def parse_market(raw: dict[str, Any], now: datetime, cutoff: datetime) -> Market | None:
    """Market ends at its earliest open contract end inside the window; None if none does."""
    earliest_end: datetime | None = None
    outcomes = []
    for contract in raw.get("contracts") or []:
        if not isinstance(contract, dict) or contract.get("status") != "Open":
            continue
        contract_end = parse_datetime(contract.get("dateEnd"))
        if in_window(contract_end, now, cutoff) and (
            earliest_end is None or contract_end < earliest_end
        ):
            earliest_end = contract_end
        price = to_float(contract.get("lastTradePrice")) or to_float(contract.get("bestBuyYesCost"))
        outcomes.append(
            Outcome(
                name=str(contract.get("shortName") or contract["name"]),
                probability=price * 100.0,
            )
        )
    if earliest_end is None:
        return None
    return Market(
        id=str(raw["id"]),
        platform=PredictItAdapter.name,
        question=raw.get("name") or "",
        url=raw.get("url") or "",
        end_date=earliest_end,
        outcomes=outcomes,
        # Volume and liquidity are not published by this endpoint
        volume_24h=0.0,
        liquidity=0.0,
    )


class PredictItAdapter(PlatformAdapter):
    name = "PredictIt"
    platform_id = "predictit"
    base_url = PREDICTIT_API_BASE

    async def fetch_markets(self, minutes_ahead: int) -> list[Market]:
        now, cutoff = window(minutes_ahead)
        async with self._client() as client:
            data = await self._get_json(client, f"{self.base_url}/all/")
        rows = data.get("markets") if isinstance(data, dict) else None
        if not isinstance(rows, list):
            raise MarketFetchError(self.name, "unexpected response shape")
        markets = []
        for row in rows:
            if not isinstance(row, dict):
                continue
            try:
                market = parse_market(row, now, cutoff)
            except (KeyError, ValueError, TypeError) as e:
                log.warning("skip_market", platform="predictit", market_id=row.get("id"), error=str(e))
                continue
            if market is not None:
                markets.append(market)
        return sort_by_end_date(markets)

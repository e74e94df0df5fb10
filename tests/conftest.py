"""Shared fixtures: market factory and fake adapters."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from predscan.ingestion.base import PlatformAdapter
from predscan.models import Market, Outcome

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def make_market(
    probs: list[float] | tuple[float, ...] = (50.0, 50.0),
    *,
    id: str = "m1",
    platform: str = "Test",
    minutes: float | None = 30,
    volume_24h: float = 0.0,
    names: list[str] | None = None,
) -> Market:
    names = names or (["Yes", "No"] if len(probs) == 2 else [f"O{i}" for i in range(len(probs))])
    return Market(
        id=id,
        platform=platform,
        question=f"Question {id}?",
        url=f"https://example.com/{id}",
        end_date=None if minutes is None else NOW + timedelta(minutes=minutes),
        outcomes=[Outcome(name=n, probability=p) for n, p in zip(names, probs)],
        volume_24h=volume_24h,
    )


class FakeAdapter(PlatformAdapter):
    """Returns canned markets (or raises) after an optional delay."""

    def __init__(self, name: str, markets: Any = (), error: Exception | None = None, delay: float = 0.0):
        super().__init__()
        self.name = name
        self.platform_id = name.lower()
        self._markets = markets
        self._error = error
        self._delay = delay
        self.calls: list[int] = []

    async def fetch_markets(self, minutes_ahead: int) -> list[Market]:
        self.calls.append(minutes_ahead)
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._error is not None:
            raise self._error
        return list(self._markets) if isinstance(self._markets, tuple) else self._markets


@pytest.fixture
def market_factory():
    return make_market

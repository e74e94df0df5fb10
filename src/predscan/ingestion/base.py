"""Abstract adapter protocol for pluggable prediction-market platforms."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx

from predscan.models import Market

DEFAULT_TIMEOUT_SEC = 30.0


class MarketFetchError(Exception):
    """Unrecoverable failure fetching or decoding one platform's markets."""

    def __init__(self, platform: str, message: str):
        super().__init__(f"{platform}: {message}")
        self.platform = platform


class PlatformAdapter(ABC):
    """One source of normalized markets. Implement for each platform.

    ``fetch_markets`` must raise rather than return partial garbage, and
    return an empty list when nothing qualifies.
    """

    name: str = ""
    platform_id: str = ""
    base_url: str = ""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_SEC,
        transport: httpx.AsyncBaseTransport | None = None,
        base_url: str | None = None,
    ):
        self.timeout = timeout
        self.transport = transport
        if base_url:
            self.base_url = base_url.rstrip("/")

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            transport=self.transport,
            headers={"Accept": "application/json"},
        )

    async def _get_json(
        self, client: httpx.AsyncClient, url: str, params: dict[str, Any] | None = None
    ) -> Any:
        resp = await client.get(url, params=params)
        resp.raise_for_status()
        try:
            return resp.json()
        except ValueError as e:
            raise MarketFetchError(self.name, f"invalid JSON from {url}") from e

    @abstractmethod
    async def fetch_markets(self, minutes_ahead: int) -> list[Market]:
        """Return canonical markets ending within the next minutes_ahead minutes."""
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


def window(minutes_ahead: int, now: datetime | None = None) -> tuple[datetime, datetime]:
    """(now, cutoff) in UTC for a lookahead window."""
    now = now or datetime.now(timezone.utc)
    return now, now + timedelta(minutes=minutes_ahead)


def in_window(end_date: datetime | None, now: datetime, cutoff: datetime) -> bool:
    return end_date is not None and now < end_date <= cutoff


def parse_datetime(value: Any) -> datetime | None:
    """ISO-8601 string, epoch-ms int or datetime -> aware UTC datetime (None if unparsable)."""
    if value is None or value == "" or value == "NA":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, (int, float)):
        try:
            dt = datetime.fromtimestamp(float(value) / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_float(value: Any, default: float = 0.0) -> float:
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


_MIN_DT = datetime.min.replace(tzinfo=timezone.utc)


def sort_by_end_date(markets: list[Market]) -> list[Market]:
    """Stable sort, soonest first; markets without an end date go last."""
    return sorted(markets, key=lambda m: (m.end_date is None, m.end_date or _MIN_DT))

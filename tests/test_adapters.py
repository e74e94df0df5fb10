"""Platform adapters against canned API payloads (httpx.MockTransport, no network)."""

import asyncio
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from predscan.ingestion.base import MarketFetchError, parse_datetime
from predscan.ingestion.kalshi.client import KalshiAdapter, yes_probability
from predscan.ingestion.manifold.client import ManifoldAdapter
from predscan.ingestion.metaculus.client import MetaculusAdapter
from predscan.ingestion.polymarket.gamma import PolymarketAdapter, _parse_outcomes
from predscan.ingestion.predictit.client import PredictItAdapter
from predscan.ingestion.registry import ADAPTERS, get_adapters, parse_platforms


def _iso(minutes: float) -> str:
    return (datetime.now(timezone.utc) + timedelta(minutes=minutes)).isoformat().replace("+00:00", "Z")


def _transport(payload, seen=None):
    """Serve the same JSON payload for every request."""

    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(200, json=payload)

    return httpx.MockTransport(handler)


def _sequence(responses, seen=None):
    """Serve the given responses in order."""
    queue = list(responses)

    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return queue.pop(0)

    return httpx.MockTransport(handler)


def _fetch(adapter, minutes=60):
    return asyncio.run(adapter.fetch_markets(minutes))


# --- Polymarket ---
def test_polymarket_parses_window_and_outcomes():
    rows = [
        {
            "id": "2",
            "question": "Later?",
            "slug": "later",
            "endDate": _iso(40),
            "outcomes": '["Yes", "No"]',
            "outcomePrices": '["0.4", "0.55"]',
            "volume24hr": 1200.5,
            "liquidityNum": 300,
            "active": True,
            "closed": False,
        },
        {
            "id": "1",
            "question": "Sooner?",
            "slug": "sooner",
            "endDate": _iso(10),
            "outcomes": '["Up", "Down"]',
            "outcomePrices": '["0.98", "0.02"]',
            "active": True,
            "closed": False,
        },
        {"id": "3", "question": "Too late", "endDate": _iso(600), "outcomes": "[]", "outcomePrices": "[]"},
        {"id": "4", "question": "Closed", "endDate": _iso(5), "closed": True},
        {"id": "5", "question": "Bad prices", "endDate": _iso(5), "outcomes": '["Yes","No"]', "outcomePrices": "oops"},
    ]
    seen = []
    markets = _fetch(PolymarketAdapter(transport=_transport(rows, seen)))
    assert [m.id for m in markets] == ["1", "2"]
    later = markets[1]
    assert later.platform == "Polymarket"
    assert later.url == "https://polymarket.com/event/later"
    assert [o.name for o in later.outcomes] == ["Yes", "No"]
    assert [round(o.probability, 6) for o in later.outcomes] == [40.0, 55.0]
    assert later.volume_24h == 1200.5
    assert later.liquidity == 300
    assert seen[0].url.params["closed"] == "false"
    assert "end_date_max" in seen[0].url.params


def test_polymarket_outcome_price_mismatch_rejected():
    with pytest.raises(ValueError):
        _parse_outcomes('["Yes", "No"]', '["0.5"]')
    assert [o.probability for o in _parse_outcomes(["A", "B"], ["0.25", "0.75"])] == [25.0, 75.0]


def test_polymarket_http_error_raises():
    transport = httpx.MockTransport(lambda request: httpx.Response(503))
    with pytest.raises(httpx.HTTPStatusError):
        _fetch(PolymarketAdapter(transport=transport))


def test_invalid_json_raises_fetch_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, content=b"<html>"))
    with pytest.raises(MarketFetchError):
        _fetch(PolymarketAdapter(transport=transport))


def test_polymarket_empty_returns_empty_list():
    assert _fetch(PolymarketAdapter(transport=_transport([]))) == []


def test_polymarket_non_finite_price_skips_row():
    rows = [
        {"id": "nan", "endDate": _iso(10), "outcomes": '["Yes", "No"]', "outcomePrices": '["0.95", "NaN"]'},
        {"id": "inf", "endDate": _iso(10), "outcomes": '["Yes", "No"]', "outcomePrices": '["Infinity", "0.1"]'},
        {"id": "ok", "endDate": _iso(10), "outcomes": '["Yes", "No"]', "outcomePrices": '["0.95", "0.05"]'},
    ]
    markets = _fetch(PolymarketAdapter(transport=_transport(rows)))
    assert [m.id for m in markets] == ["ok"]


@pytest.mark.parametrize(
    "adapter_cls, payload",
    [
        (PolymarketAdapter, {"error": "rate limited"}),
        (PolymarketAdapter, "maintenance"),
        (KalshiAdapter, {"error": {"code": "internal"}}),
        (KalshiAdapter, []),
        (PredictItAdapter, {"message": "unavailable"}),
        (PredictItAdapter, []),
        (ManifoldAdapter, {"error": "bad request"}),
        (MetaculusAdapter, {"detail": "throttled"}),
        (MetaculusAdapter, 42),
    ],
)
def test_unexpected_response_shape_raises(adapter_cls, payload):
    with pytest.raises(MarketFetchError, match="unexpected response shape"):
        _fetch(adapter_cls(transport=_transport(payload)))


def test_empty_listing_is_not_a_failure():
    assert _fetch(PredictItAdapter(transport=_transport({"markets": []}))) == []
    assert _fetch(MetaculusAdapter(transport=_transport({"results": []}))) == []
    assert _fetch(PolymarketAdapter(transport=_transport({"data": []}))) == []


# --- Kalshi ---
def _kalshi_row(ticker, minutes, **extra):
    row = {
        "ticker": ticker,
        "event_ticker": f"EV-{ticker}",
        "title": f"{ticker}?",
        "status": "active",
        "expiration_time": _iso(minutes),
        "last_price": 0,
        "yes_bid": 90,
        "yes_ask": 94,
        "volume_24h": 500,
        "liquidity": 1000,
    }
    row.update(extra)
    return row


def test_kalshi_paginates_and_parses():
    pages = [
        httpx.Response(200, json={"markets": [_kalshi_row("B", 30, last_price=97)], "cursor": "c1"}),
        httpx.Response(200, json={"markets": [_kalshi_row("A", 5), _kalshi_row("Z", 5, status="closed")], "cursor": ""}),
    ]
    seen = []
    adapter = KalshiAdapter(transport=_sequence(pages, seen), requests_per_sec=1000)
    markets = _fetch(adapter)
    assert [m.id for m in markets] == ["A", "B"]
    a, b = markets
    assert [o.probability for o in a.outcomes] == [92.0, 8.0]
    assert [o.probability for o in b.outcomes] == [97.0, 3.0]
    assert a.url == "https://kalshi.com/markets/EV-A"
    assert seen[1].url.params["cursor"] == "c1"


def test_kalshi_expected_expiration_preferred():
    row = _kalshi_row("X", 600, expected_expiration_time=_iso(15))
    pages = [httpx.Response(200, json={"markets": [row]})]
    assert [m.id for m in _fetch(KalshiAdapter(transport=_sequence(pages), requests_per_sec=1000))] == ["X"]


def test_kalshi_retries_on_429():
    pages = [
        httpx.Response(429),
        httpx.Response(200, json={"markets": [_kalshi_row("A", 5)]}),
    ]
    adapter = KalshiAdapter(transport=_sequence(pages), requests_per_sec=1000, retry_base_delay_sec=0.01)
    assert len(_fetch(adapter)) == 1


def test_kalshi_respects_max_pages():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"markets": [], "cursor": "more"})

    adapter = KalshiAdapter(transport=httpx.MockTransport(handler), max_pages=3, requests_per_sec=1000)
    assert _fetch(adapter) == []
    assert len(seen) == 3


def test_kalshi_yes_probability_fallback():
    assert yes_probability({"last_price": 0, "yes_bid": 10, "yes_ask": 20}) == 15.0
    assert yes_probability({"last_price": 33}) == 33.0


# --- PredictIt ---
def test_predictit_earliest_contract_end():
    payload = {
        "markets": [
            {
                "id": 7,
                "name": "Who wins?",
                "url": "https://www.predictit.org/markets/detail/7",
                "contracts": [
                    {"name": "Alice", "shortName": "A", "status": "Open", "lastTradePrice": 0.6, "dateEnd": _iso(50)},
                    {"name": "Bob", "shortName": "", "status": "Open", "lastTradePrice": 0, "bestBuyYesCost": 0.35, "dateEnd": _iso(20)},
                    {"name": "Carol", "status": "Closed", "lastTradePrice": 0.05, "dateEnd": _iso(10)},
                ],
            },
            {"id": 8, "name": "No date", "contracts": [{"name": "X", "status": "Open", "lastTradePrice": 0.5, "dateEnd": "NA"}]},
        ]
    }
    markets = _fetch(PredictItAdapter(transport=_transport(payload)))
    assert len(markets) == 1
    m = markets[0]
    assert m.id == "7"
    assert [o.name for o in m.outcomes] == ["A", "Bob"]
    assert [round(o.probability, 6) for o in m.outcomes] == [60.0, 35.0]
    assert 19 <= (m.end_date - datetime.now(timezone.utc)).total_seconds() / 60 <= 20


# --- Manifold ---
def test_manifold_binary_unresolved_only():
    close_ms = int((datetime.now(timezone.utc) + timedelta(minutes=30)).timestamp() * 1000)
    rows = [
        {"id": "a", "question": "A?", "slug": "a", "closeTime": close_ms, "probability": 0.9, "outcomeType": "BINARY", "isResolved": False, "volume24Hours": 10},
        {"id": "b", "question": "B?", "closeTime": close_ms, "probability": 0.5, "outcomeType": "MULTIPLE_CHOICE", "isResolved": False},
        {"id": "c", "question": "C?", "closeTime": close_ms, "probability": 0.5, "outcomeType": "BINARY", "isResolved": True},
    ]
    markets = _fetch(ManifoldAdapter(transport=_transport(rows)))
    assert [m.id for m in markets] == ["a"]
    assert markets[0].url == "https://manifold.markets/a"
    assert [round(o.probability, 6) for o in markets[0].outcomes] == [90.0, 10.0]


# --- Metaculus ---
def test_metaculus_community_prediction_and_default():
    payload = {
        "results": [
            {"id": 1, "title": "One?", "url": "/questions/1/", "close_time": _iso(20), "prediction_count": 42, "community_prediction": {"full": {"q2": 0.75}}},
            {"id": 2, "title": "Two?", "url": "/questions/2/", "close_time": _iso(25)},
            {"id": 3, "title": "Three?", "url": "/questions/3/", "close_time": _iso(9000)},
        ]
    }
    markets = _fetch(MetaculusAdapter(transport=_transport(payload)))
    assert [m.id for m in markets] == ["1", "2"]
    assert [o.probability for o in markets[0].outcomes] == [75.0, 25.0]
    assert [o.probability for o in markets[1].outcomes] == [50.0, 50.0]
    assert markets[0].volume_24h == 42
    assert markets[0].url == "https://www.metaculus.com/questions/1/"


# --- Registry / helpers ---
def test_registry_lookup_and_order():
    adapters = get_adapters("Kalshi, polymarket,kalshi", options={"kalshi": {"max_pages": 2}}, timeout=5)
    assert [a.platform_id for a in adapters] == ["kalshi", "polymarket"]
    assert adapters[0].max_pages == 2
    assert all(a.timeout == 5 for a in adapters)


def test_registry_unknown_platform():
    with pytest.raises(ValueError, match="betfair"):
        get_adapters(["polymarket", "betfair"])


def test_registry_rejects_unsupported_options():
    with pytest.raises(ValueError, match="predictit: limit"):
        get_adapters(["predictit"], options={"predictit": {"limit": 5}})
    adapters = get_adapters(
        ["polymarket", "kalshi"],
        options={"polymarket": {"limit": 50}, "kalshi": {"max_pages": 1, "base_url": "http://kalshi.test"}},
    )
    assert adapters[0].limit == 50
    assert adapters[1].base_url == "http://kalshi.test"


def test_registry_covers_public_platforms():
    assert set(ADAPTERS) == {"polymarket", "kalshi", "predictit", "manifold", "metaculus"}
    assert parse_platforms(["A", " a ", ""]) == ["a"]


def test_parse_datetime_variants():
    assert parse_datetime("2026-10-19T12:00:00Z") == datetime(2026, 10, 19, 12, tzinfo=timezone.utc)
    assert parse_datetime("2026-10-19T12:00:00") == datetime(2026, 10, 19, 12, tzinfo=timezone.utc)
    assert parse_datetime(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)
    assert parse_datetime("NA") is None
    assert parse_datetime("not a date") is None
    assert parse_datetime(None) is None

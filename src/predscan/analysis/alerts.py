"""Stricter alert-path classification for high-frequency polling."""

from __future__ import annotations

from typing import Iterable

from predscan.analysis.classifier import (
    arbitrage_analysis,
    match_kind,
    near_certain_analysis,
    summarize,
)
from predscan.analysis.ranker import rank_alerts
from predscan.analysis.thresholds import ALERT, Thresholds
from predscan.models import Alert, Market


def alerts_for(market: Market, thresholds: Thresholds = ALERT) -> list[Alert]:
    """Alerts raised by one market (arbitrage is exclusive of near-certain)."""
    summary = summarize(market)
    if summary is None:
        return []
    kind = match_kind(summary, thresholds)
    if kind == "arbitrage":
        return [
            Alert(
                kind="arbitrage",
                severity="critical",
                market=market,
                analysis=arbitrage_analysis(summary),
            )
        ]
    if kind != "near-certain":
        # Mispriced markets are not alert-worthy
        return []
    # high/medium also require a low-risk lean
    if summary.max < thresholds.low_risk_threshold:
        return []
    if market.volume_24h >= thresholds.high_volume_floor:
        severity = "high"
    elif market.volume_24h >= thresholds.medium_volume_floor:
        severity = "medium"
    else:
        return []
    return [
        Alert(
            kind="near-certain",
            severity=severity,
            market=market,
            analysis=near_certain_analysis(summary, thresholds),
        )
    ]


def scan_alerts(markets: Iterable[Market], thresholds: Thresholds = ALERT) -> list[Alert]:
    """All alerts across markets, ranked by severity then edge."""
    found: list[Alert] = []
    for market in markets:
        found.extend(alerts_for(market, thresholds))
    return rank_alerts(found)


def has_critical(alerts: Iterable[Alert]) -> bool:
    return any(a.severity == "critical" for a in alerts)

"""Deterministic ordering of opportunities and alerts."""

from __future__ import annotations

from typing import Iterable

from predscan.models import Alert, Opportunity

RISK_ORDER = {"no-risk": 0, "low-risk": 1, "medium-risk": 2}
SEVERITY_ORDER = {"critical": 0, "high": 1, "medium": 2}


def rank(items: Iterable[Opportunity]) -> list[Opportunity]:
    """Risk precedence first, then descending edge. Stable for full ties."""
    return sorted(items, key=lambda o: (RISK_ORDER[o.analysis.risk_level], -o.analysis.edge))


def rank_alerts(alerts: Iterable[Alert]) -> list[Alert]:
    """Severity precedence first, then descending edge. Stable for full ties."""
    return sorted(alerts, key=lambda a: (SEVERITY_ORDER[a.severity], -a.analysis.edge))

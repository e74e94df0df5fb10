"""Probability-sum / max-outcome classification of a single market.

Pure and synchronous: no I/O, no mutation of the input market. Both the
report path (``classify``) and the alert path (``alerts.alerts_for``) build
on ``summarize`` and ``match_kind`` so the arbitrage / near-certain /
mispriced precedence is defined in one place.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable

from predscan.analysis.ranker import rank
from predscan.analysis.thresholds import REPORT, Thresholds
from predscan.models import Analysis, Market, Opportunity


@dataclass(frozen=True)
class ProbabilitySummary:
    """Aggregate view of a market's outcome distribution."""

    total: float
    max: float
    max_outcome: str
    n: int

    @property
    def uniform_prior(self) -> float:
        return 100.0 / self.n


def summarize(market: Market) -> ProbabilitySummary | None:
    """Total and leading outcome, or None for fewer than two outcomes or a non-finite total."""
    outcomes = market.outcomes
    if len(outcomes) < 2:
        return None
    total = math.fsum(o.probability for o in outcomes)
    if not math.isfinite(total):
        return None
    # First occurrence wins ties (source order)
    top = max(outcomes, key=lambda o: o.probability)
    return ProbabilitySummary(total=total, max=top.probability, max_outcome=top.name, n=len(outcomes))


def implied_odds(probability: float) -> float:
    """Decimal odds for a percent probability; inf when probability <= 0."""
    if probability <= 0:
        return math.inf
    return 100.0 / probability


def is_arbitrage(summary: ProbabilitySummary, thresholds: Thresholds) -> bool:
    return 0 < summary.total < thresholds.arbitrage_ceiling


def is_near_certain(summary: ProbabilitySummary, thresholds: Thresholds) -> bool:
    return summary.max >= thresholds.near_certain_threshold


def is_mispriced(summary: ProbabilitySummary, thresholds: Thresholds) -> bool:
    # Overpriced only; underpriced markets are caught by the arbitrage check
    return (
        abs(summary.total - 100.0) > thresholds.mispriced_tolerance
        and summary.total > thresholds.mispriced_floor
    )


def match_kind(summary: ProbabilitySummary, thresholds: Thresholds) -> str | None:
    """Highest-precedence kind the summary satisfies, or None."""
    if is_arbitrage(summary, thresholds):
        return "arbitrage"
    if is_near_certain(summary, thresholds):
        return "near-certain"
    if is_mispriced(summary, thresholds):
        return "mispriced"
    return None


def arbitrage_analysis(summary: ProbabilitySummary) -> Analysis:
    edge = 100.0 - summary.total
    return Analysis(
        total_probability=summary.total,
        edge=edge,
        risk_level="no-risk",
        confidence="GUARANTEED",
        recommendation=f"Bet on ALL outcomes proportionally. Edge: {edge:.2f}%",
    )


def near_certain_analysis(summary: ProbabilitySummary, thresholds: Thresholds) -> Analysis:
    odds = implied_odds(summary.max)
    odds_text = f"{odds:.2f}x" if math.isfinite(odds) else "n/a"
    return Analysis(
        total_probability=summary.total,
        edge=summary.max - summary.uniform_prior,
        risk_level="low-risk" if summary.max >= thresholds.low_risk_threshold else "medium-risk",
        confidence=f"{summary.max:.1f}% likely",
        recommendation=(
            f'Strong lean: "{summary.max_outcome}" at {summary.max:.1f}%. Odds: {odds_text}'
        ),
    )


def mispriced_analysis(summary: ProbabilitySummary) -> Analysis:
    overpricing = summary.total - 100.0
    return Analysis(
        total_probability=summary.total,
        edge=overpricing,
        risk_level="medium-risk",
        confidence=f"Market overpriced by {overpricing:.1f}%",
        recommendation=f"Market inefficiency detected. Total odds: {summary.total:.1f}%",
    )


def classify(market: Market, thresholds: Thresholds = REPORT) -> Opportunity | None:
    """Classify one market for the opportunity report; None if nothing actionable."""
    summary = summarize(market)
    if summary is None:
        return None
    kind = match_kind(summary, thresholds)
    if kind == "arbitrage":
        analysis = arbitrage_analysis(summary)
    elif kind == "near-certain":
        analysis = near_certain_analysis(summary, thresholds)
    elif kind == "mispriced":
        analysis = mispriced_analysis(summary)
    else:
        return None
    return Opportunity(kind=kind, market=market, analysis=analysis)


def find_opportunities(
    markets: Iterable[Market], thresholds: Thresholds = REPORT
) -> list[Opportunity]:
    """Classify every market and return the ranked opportunities."""
    found = []
    for market in markets:
        opp = classify(market, thresholds)
        if opp is not None:
            found.append(opp)
    return rank(found)

"""Plain-text and Telegram Markdown rendering of scan output."""

from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone
from typing import Sequence

from predscan.models import Alert, Market, Opportunity

RULE = "=" * 70
RISK_LABELS = {
    "no-risk": "No-risk (arbitrage)",
    "low-risk": "Low-risk",
    "medium-risk": "Medium-risk",
}
MAX_OUTCOMES_SHOWN = 5


def format_currency(value: float) -> str:
    if value >= 1_000_000:
        return f"${value / 1_000_000:.1f}M"
    if value >= 1_000:
        return f"${value / 1_000:.1f}K"
    return f"${value:.0f}"


def _bar(probability: float) -> str:
    return "#" * max(0, round(probability / 5))


def render_odds(market: Market) -> list[str]:
    lines = []
    for outcome in market.outcomes[:MAX_OUTCOMES_SHOWN]:
        lines.append(f"   {outcome.name}: {outcome.probability:.1f}% {_bar(outcome.probability)}")
    if len(market.outcomes) > MAX_OUTCOMES_SHOWN:
        lines.append(f"   ... and {len(market.outcomes) - MAX_OUTCOMES_SHOWN} more")
    return lines


def render_opportunity(opp: Opportunity, index: int, now: datetime | None = None) -> str:
    market = opp.market
    a = opp.analysis
    lines = [
        RULE,
        f"#{index + 1} | {opp.kind.upper()} | {a.risk_level} | {market.platform}",
        RULE,
        market.question,
        f"Ends: {market.ends_in(now)}",
        market.url,
        "",
        "Odds:",
        *render_odds(market),
        "",
        f"Total: {a.total_probability:.1f}% | Edge: {a.edge:.2f}%",
        a.confidence,
        a.recommendation,
    ]
    if market.volume_24h > 0 or market.liquidity > 0:
        lines.append(
            f"Volume: {format_currency(market.volume_24h)} | "
            f"Liquidity: {format_currency(market.liquidity)}"
        )
    return "\n".join(lines)


def render_summary(
    markets: Sequence[Market],
    opportunities: Sequence[Opportunity],
    failures: dict[str, str] | None = None,
) -> str:
    by_platform = Counter(m.platform for m in markets)
    by_risk = Counter(o.analysis.risk_level for o in opportunities)
    lines = [RULE, "SUMMARY", RULE, f"Total markets found: {len(markets)}"]
    for platform, count in by_platform.items():
        lines.append(f"   {platform}: {count}")
    for platform, error in (failures or {}).items():
        lines.append(f"   {platform}: FAILED ({error})")
    lines.append("")
    lines.append("Opportunities:")
    for level, label in RISK_LABELS.items():
        lines.append(f"   {label}: {by_risk.get(level, 0)}")
    lines.append(f"   Total: {len(opportunities)}")
    return "\n".join(lines)


def render_report(
    markets: Sequence[Market],
    opportunities: Sequence[Opportunity],
    failures: dict[str, str] | None = None,
    top: int = 10,
    now: datetime | None = None,
) -> str:
    parts = [render_summary(markets, opportunities, failures)]
    if opportunities:
        parts.append("\nTOP OPPORTUNITIES:")
        for i, opp in enumerate(opportunities[:top]):
            parts.append(render_opportunity(opp, i, now))
    else:
        parts.append("\nNo opportunities found matching criteria.")
    parts.append(RULE)
    parts.append("DISCLAIMER: Statistical analysis only. Not financial advice.")
    return "\n".join(parts)


def render_alert(alert: Alert, now: datetime | None = None) -> str:
    market = alert.market
    a = alert.analysis
    if alert.kind == "arbitrage":
        return "\n".join(
            [
                f"[CRITICAL] ARBITRAGE: {market.question}",
                f"   Platform: {market.platform}",
                f"   Total odds: {a.total_probability:.2f}% ({a.edge:.2f}% edge)",
                "   Bet ALL outcomes for guaranteed profit!",
                f"   {market.url}",
            ]
        )
    return "\n".join(
        [
            f"[{alert.severity.upper()}] NEAR-CERTAIN: {market.question}",
            f"   Platform: {market.platform}",
            f"   {a.recommendation}",
            f"   24h Volume: {format_currency(market.volume_24h)}",
            f"   Ends: {market.ends_in(now)}",
            f"   {market.url}",
        ]
    )


def render_alert_summary(alerts: Sequence[Alert]) -> str:
    counts = Counter(a.severity for a in alerts)
    return "\n".join(
        [
            "Alert Summary:",
            f"   Critical (arbitrage): {counts.get('critical', 0)}",
            f"   High (near-certain + volume): {counts.get('high', 0)}",
            f"   Medium: {counts.get('medium', 0)}",
        ]
    )


def render_telegram_alerts(alerts: Sequence[Alert], now: datetime | None = None) -> str:
    """Telegram Markdown message; empty string unless critical or high alerts exist."""
    critical = [a for a in alerts if a.severity == "critical"]
    high = [a for a in alerts if a.severity == "high"]
    if not critical and not high:
        return ""
    now = now or datetime.now(timezone.utc)
    lines = ["*BETTING ALERTS*", now.strftime("%Y-%m-%d %H:%M UTC"), ""]
    if critical:
        lines.append("*ARBITRAGE OPPORTUNITIES:*")
        for alert in critical:
            lines += [
                "",
                f"*{alert.market.question[:50]}*",
                f"   {alert.market.platform}",
                f"   Edge: {alert.analysis.edge:.2f}%",
                f"   [View]({alert.market.url})",
            ]
        lines.append("")
    if high:
        lines.append("*HIGH-VOLUME NEAR-CERTAIN:*")
        for alert in high[:5]:
            lines += [
                "",
                f"*{alert.market.question[:45]}...*",
                f"   {alert.market.platform} | {alert.market.ends_in(now)}",
                f"   {alert.analysis.confidence}",
                f"   Vol: {format_currency(alert.market.volume_24h)}",
                f"   [View]({alert.market.url})",
            ]
    lines.append("")
    lines.append("_Act fast - markets move quickly!_")
    return "\n".join(lines)

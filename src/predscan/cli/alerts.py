"""Alerts command: strict, high-frequency scan. Exit status 1 signals arbitrage."""

from __future__ import annotations

from pathlib import Path

import typer

from predscan.analysis.alerts import has_critical, scan_alerts
from predscan.cli.common import (
    build_adapters,
    check_minutes,
    collect_markets,
    load_thresholds,
    select_platforms,
)
from predscan.report.export import build_scan_result, write_scan_result
from predscan.report.render import render_alert, render_alert_summary, render_telegram_alerts


def alerts(
    ctx: typer.Context,
    minutes: int = typer.Option(None, "--minutes", "-m", help="Look ahead N minutes (overrides config)"),
    platforms: str | None = typer.Option(None, "--platforms", help="Comma-separated platform ids"),
    deadline: float | None = typer.Option(None, "--deadline", help="Overall scan deadline in seconds"),
    telegram: bool = typer.Option(False, "--telegram", help="Telegram Markdown (critical/high only)"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress the summary"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Save alerts JSON here"),
) -> None:
    """Scan for arbitrage and high-volume near-certain markets.

    Exits with status 1 when any critical (arbitrage) alert is found.
    """
    settings = ctx.obj["settings"]
    minutes = check_minutes(minutes if minutes is not None else settings.alert_lookahead_minutes)
    thresholds = load_thresholds(settings, settings.alert_profile)
    adapters = build_adapters(settings, select_platforms(platforms, settings.alert_platforms))

    markets, context = collect_markets(adapters, minutes, deadline or settings.deadline_sec)
    found = scan_alerts(markets, thresholds)

    if not quiet:
        typer.echo(render_alert_summary(found), err=True)
    if telegram:
        message = render_telegram_alerts(found)
        if message:
            typer.echo(message)
    else:
        for alert in found:
            typer.echo(render_alert(alert))
            typer.echo("")

    destination = output or settings.alerts_output
    if destination:
        write_scan_result(build_scan_result(markets, alerts=found, context=context), destination)

    if has_critical(found):
        raise typer.Exit(1)

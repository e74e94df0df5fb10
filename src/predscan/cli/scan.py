"""Scan command: aggregate, classify, rank, report."""

from __future__ import annotations

from pathlib import Path

import typer

from predscan.analysis.classifier import find_opportunities
from predscan.cli.common import (
    build_adapters,
    check_minutes,
    collect_markets,
    load_thresholds,
    select_platforms,
)
from predscan.report.export import build_scan_result, write_scan_result
from predscan.report.render import render_report


def scan(
    ctx: typer.Context,
    minutes: int = typer.Option(None, "--minutes", "-m", help="Look ahead N minutes (overrides config)"),
    platforms: str | None = typer.Option(
        None, "--platforms", help="Comma-separated platform ids, e.g. polymarket,kalshi"
    ),
    threshold: float | None = typer.Option(
        None, "--threshold", "-t", help="Near-certain threshold in percent (overrides profile)"
    ),
    thresholds_profile: str | None = typer.Option(
        None, "--profile-name", help="Threshold profile: report, alert or loose"
    ),
    deadline: float | None = typer.Option(
        None, "--deadline", help="Overall scan deadline in seconds"
    ),
    output: Path | None = typer.Option(None, "--output", "-o", help="Save ScanResult JSON here"),
    as_json: bool = typer.Option(False, "--json", help="Print ScanResult JSON only"),
    top: int = typer.Option(None, "--top", "-n", help="Opportunities to print in the text report"),
) -> None:
    """Fetch markets ending soon from all selected platforms and rank opportunities."""
    settings = ctx.obj["settings"]
    minutes = check_minutes(minutes if minutes is not None else settings.lookahead_minutes)
    thresholds = load_thresholds(settings, thresholds_profile or settings.report_profile, threshold)
    adapters = build_adapters(settings, select_platforms(platforms, settings.scan_platforms))

    markets, context = collect_markets(adapters, minutes, deadline or settings.deadline_sec)
    opportunities = find_opportunities(markets, thresholds)
    result = build_scan_result(markets, opportunities, context=context)

    if output is not None:
        path = write_scan_result(result, output)
    if as_json:
        typer.echo(result.model_dump_json(indent=2))
        return
    typer.echo(
        render_report(
            markets,
            opportunities,
            failures=context.failures,
            top=top if top is not None else settings.top_n,
        )
    )
    if output is not None:
        typer.echo(f"Results saved to: {path}")

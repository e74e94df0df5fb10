"""Analyze command: reclassify a saved market list offline."""

from __future__ import annotations

from pathlib import Path

import typer

from predscan.analysis.classifier import find_opportunities
from predscan.cli.common import load_thresholds
from predscan.report.export import build_scan_result, load_markets
from predscan.report.render import render_report


def analyze(
    ctx: typer.Context,
    input_path: Path = typer.Option(Path("markets.json"), "--input", "-i", help="Saved scan or market list"),
    threshold: float | None = typer.Option(None, "--threshold", "-t", help="Near-certain threshold in percent"),
    thresholds_profile: str | None = typer.Option(None, "--profile-name", help="Threshold profile"),
    as_json: bool = typer.Option(False, "--json", help="Print ScanResult JSON only"),
) -> None:
    """Classify and rank markets from a previous 'predscan scan --output' file."""
    settings = ctx.obj["settings"]
    thresholds = load_thresholds(settings, thresholds_profile or settings.report_profile, threshold)
    try:
        markets = load_markets(input_path)
    except FileNotFoundError:
        typer.echo(f'Error: input file "{input_path}" not found.', err=True)
        typer.echo("Run the scanner first: predscan scan --output markets.json", err=True)
        raise typer.Exit(1)
    except ValueError as e:
        typer.echo(f"Error: could not read markets from {input_path}: {e}", err=True)
        raise typer.Exit(1)

    opportunities = find_opportunities(markets, thresholds)
    if as_json:
        typer.echo(build_scan_result(markets, opportunities).model_dump_json(indent=2))
        return
    typer.echo(f"Input: {input_path}  Markets analyzed: {len(markets)}")
    typer.echo(render_report(markets, opportunities, top=len(opportunities) or 1))

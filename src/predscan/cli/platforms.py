"""Platforms command: list registered adapters."""

from __future__ import annotations

import typer

from predscan.ingestion.registry import ADAPTERS


def list_platforms(ctx: typer.Context) -> None:
    """List available platform adapters; '*' marks those enabled for scan."""
    settings = ctx.obj["settings"]
    enabled = set(settings.scan_platforms)
    for platform_id, cls in ADAPTERS.items():
        mark = "*" if platform_id in enabled else " "
        typer.echo(f" {mark} {platform_id:<12} {cls.name:<12} {cls.base_url}")
    typer.echo(f"Total: {len(ADAPTERS)} platforms")

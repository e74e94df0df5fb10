"""Shared CLI plumbing: adapter selection, scan execution, threshold overrides."""

from __future__ import annotations

import asyncio

import typer

from predscan.analysis.thresholds import Thresholds
from predscan.config import Settings
from predscan.ingestion.aggregator import ScanContext, aggregate
from predscan.ingestion.base import PlatformAdapter
from predscan.ingestion.registry import check_options, get_adapters, parse_platforms
from predscan.models import Market


def build_adapters(settings: Settings, names: list[str]) -> list[PlatformAdapter]:
    options = settings.platform_options()
    try:
        check_options(options)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="[platforms] config") from e
    try:
        return get_adapters(
            names,
            options=options,
            timeout=settings.http_timeout_sec,
        )
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--platforms") from e


def select_platforms(option: str | None, default: list[str]) -> list[str]:
    return parse_platforms(option) if option else list(default)


def check_minutes(minutes: int) -> int:
    if minutes <= 0:
        raise typer.BadParameter(f"must be a positive integer, got {minutes}", param_hint="--minutes")
    return minutes


def load_thresholds(settings: Settings, profile: str, near_certain: float | None = None) -> Thresholds:
    try:
        thresholds = settings.get_thresholds(profile)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--profile-name") from e
    if near_certain is None:
        return thresholds
    try:
        return thresholds.with_overrides({"near_certain_threshold": near_certain})
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--threshold") from e


def collect_markets(
    adapters: list[PlatformAdapter],
    minutes: int,
    deadline_sec: float | None = None,
) -> tuple[list[Market], ScanContext]:
    """Run one scan with a fresh context."""
    if deadline_sec is not None and deadline_sec <= 0:
        raise typer.BadParameter(f"must be positive, got {deadline_sec}", param_hint="--deadline")
    context = ScanContext(lookahead_minutes=minutes)
    markets = asyncio.run(aggregate(adapters, minutes, deadline_sec=deadline_sec, context=context))
    return markets, context

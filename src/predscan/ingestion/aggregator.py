"""Concurrent fan-out over platform adapters with per-adapter failure isolation."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Sequence

import structlog

from predscan.ingestion.base import MarketFetchError, PlatformAdapter, sort_by_end_date
from predscan.models import Market

log = structlog.get_logger(__name__)


@dataclass
class ScanContext:
    """State of one scan. Create at scan start, discard at scan end; never share."""

    lookahead_minutes: int
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    counts: dict[str, int] = field(default_factory=dict)
    elapsed_ms: dict[str, int] = field(default_factory=dict)
    failures: dict[str, str] = field(default_factory=dict)
    duplicates: int = 0

    def record_success(self, platform: str, count: int, elapsed_ms: int) -> None:
        self.counts[platform] = count
        self.elapsed_ms[platform] = elapsed_ms

    def record_failure(self, platform: str, error: str, elapsed_ms: int) -> None:
        self.counts[platform] = 0
        self.elapsed_ms[platform] = elapsed_ms
        self.failures[platform] = error

    @property
    def total_markets(self) -> int:
        return sum(self.counts.values()) - self.duplicates

    def summary(self) -> dict[str, Any]:
        return {
            "lookahead_minutes": self.lookahead_minutes,
            "started_at": self.started_at.isoformat(),
            "counts": dict(self.counts),
            "failures": dict(self.failures),
            "duplicates": self.duplicates,
        }


def _validate_result(adapter: PlatformAdapter, result: Any) -> list[Market]:
    if not isinstance(result, list) or not all(isinstance(m, Market) for m in result):
        raise MarketFetchError(adapter.name, f"malformed payload ({type(result).__name__})")
    return result


async def _timed_fetch(
    adapter: PlatformAdapter, lookahead_minutes: int, timings: dict[int, int], index: int
) -> Any:
    start = time.monotonic()
    try:
        return await adapter.fetch_markets(lookahead_minutes)
    finally:
        timings[index] = int((time.monotonic() - start) * 1000)


def _describe(exc: BaseException) -> str:
    text = str(exc)
    return f"{type(exc).__name__}: {text}" if text else type(exc).__name__


def dedupe(markets: Sequence[Market]) -> list[Market]:
    """Drop repeated (platform, id) keys, keeping the first occurrence."""
    seen: set[tuple[str, str]] = set()
    unique = []
    for market in markets:
        if market.key in seen:
            continue
        seen.add(market.key)
        unique.append(market)
    return unique


async def aggregate(
    adapters: Sequence[PlatformAdapter],
    lookahead_minutes: int,
    *,
    deadline_sec: float | None = None,
    context: ScanContext | None = None,
) -> list[Market]:
    """Run all adapters concurrently and fold their markets into one list.

    Every adapter is started before any is awaited, and all are allowed to
    settle. A failing adapter contributes nothing and is recorded on the
    context. With ``deadline_sec`` set, adapters still running at the deadline
    are cancelled and counted as failed. Output is deduplicated by
    (platform, id) and sorted by end date (None last), ties in adapter order.
    """
    if isinstance(lookahead_minutes, bool) or not isinstance(lookahead_minutes, int):
        raise ValueError(f"lookahead_minutes must be an integer, got {lookahead_minutes!r}")
    if lookahead_minutes <= 0:
        raise ValueError(f"lookahead_minutes must be positive, got {lookahead_minutes}")
    if deadline_sec is not None and deadline_sec <= 0:
        raise ValueError(f"deadline_sec must be positive, got {deadline_sec}")
    ctx = context or ScanContext(lookahead_minutes=lookahead_minutes)
    if not adapters:
        log.warning("no_adapters")
        return []

    start = time.monotonic()
    timings: dict[int, int] = {}
    tasks = [
        asyncio.create_task(
            _timed_fetch(adapter, lookahead_minutes, timings, i), name=f"fetch:{adapter.name}"
        )
        for i, adapter in enumerate(adapters)
    ]
    _, pending = await asyncio.wait(tasks, timeout=deadline_sec)
    for task in pending:
        task.cancel()
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)
    elapsed_ms = int((time.monotonic() - start) * 1000)

    collected: list[Market] = []
    for i, (adapter, task) in enumerate(zip(adapters, tasks)):
        adapter_ms = timings.get(i, elapsed_ms)
        if task in pending:
            error = f"TimeoutError: no result within {deadline_sec}s deadline"
        elif task.cancelled():
            error = "CancelledError"
        elif task.exception() is not None:
            error = _describe(task.exception())
        else:
            try:
                markets = _validate_result(adapter, task.result())
            except MarketFetchError as e:
                error = str(e)
            else:
                ctx.record_success(adapter.name, len(markets), adapter_ms)
                log.info(
                    "adapter_ok", platform=adapter.name, markets=len(markets), elapsed_ms=adapter_ms
                )
                collected.extend(markets)
                continue
        ctx.record_failure(adapter.name, error, adapter_ms)
        log.warning("adapter_failed", platform=adapter.name, error=error, elapsed_ms=adapter_ms)

    unique = dedupe(collected)
    ctx.duplicates += len(collected) - len(unique)
    result = sort_by_end_date(unique)
    log.info(
        "scan_complete",
        markets=len(result),
        failed=len(ctx.failures),
        duplicates=ctx.duplicates,
        elapsed_ms=elapsed_ms,
    )
    return result

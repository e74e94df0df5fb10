"""Write and read ScanResult JSON."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Sequence

from pydantic import TypeAdapter

from predscan.ingestion.aggregator import ScanContext
from predscan.models import Alert, Market, Opportunity, ScanResult

_MARKET_LIST = TypeAdapter(list[Market])


def build_scan_result(
    markets: Sequence[Market],
    opportunities: Sequence[Opportunity] = (),
    alerts: Sequence[Alert] = (),
    context: ScanContext | None = None,
) -> ScanResult:
    return ScanResult(
        generated_at=datetime.now(timezone.utc),
        lookahead_minutes=context.lookahead_minutes if context else None,
        markets=list(markets),
        opportunities=list(opportunities),
        alerts=list(alerts),
        failures=dict(context.failures) if context else {},
    )


def write_scan_result(result: ScanResult, output_path: str | Path) -> Path:
    """Write result as indented JSON, creating parent directories. Returns the path."""
    path = Path(output_path).resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(result.model_dump_json(indent=2), encoding="utf-8")
    return path


def load_scan_result(input_path: str | Path) -> ScanResult:
    return ScanResult.model_validate_json(Path(input_path).read_text(encoding="utf-8"))


def load_markets(input_path: str | Path) -> list[Market]:
    """Markets from a saved ScanResult or a bare JSON list of markets."""
    raw = json.loads(Path(input_path).read_text(encoding="utf-8"))
    if isinstance(raw, dict):
        raw = raw.get("markets", [])
    return _MARKET_LIST.validate_python(raw)

"""Threshold profiles for the report and alert classification paths."""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Thresholds(BaseModel):
    """Numeric cut-offs on the 0-100 probability scale."""

    model_config = ConfigDict(frozen=True)

    arbitrage_ceiling: float = 98.0
    near_certain_threshold: float = 90.0
    low_risk_threshold: float = 97.0
    mispriced_tolerance: float = 2.0
    mispriced_floor: float = 102.0
    high_volume_floor: float = Field(10_000.0, ge=0)
    medium_volume_floor: float = Field(1_000.0, ge=0)

    @field_validator(
        "arbitrage_ceiling",
        "near_certain_threshold",
        "low_risk_threshold",
        "mispriced_tolerance",
        "mispriced_floor",
    )
    @classmethod
    def _finite(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("threshold must be a finite number")
        return value

    def with_overrides(self, overrides: dict[str, Any] | None) -> Thresholds:
        """Return a copy with the given fields replaced (unknown keys rejected)."""
        if not overrides:
            return self
        unknown = set(overrides) - set(type(self).model_fields)
        if unknown:
            raise ValueError(f"unknown threshold field(s): {', '.join(sorted(unknown))}")
        return type(self).model_validate({**self.model_dump(), **overrides})


REPORT = Thresholds()
ALERT = Thresholds(near_certain_threshold=97.0)
# Older analyzer band: flag anything outside 99..101
LOOSE = Thresholds(arbitrage_ceiling=99.0, mispriced_tolerance=1.0, mispriced_floor=101.0)

PROFILES: dict[str, Thresholds] = {
    "report": REPORT,
    "alert": ALERT,
    "loose": LOOSE,
}


def get_profile(name: str, overrides: dict[str, Any] | None = None) -> Thresholds:
    """Look up a named profile and apply config overrides."""
    try:
        base = PROFILES[name]
    except KeyError:
        raise ValueError(
            f"unknown threshold profile {name!r} (known: {', '.join(PROFILES)})"
        ) from None
    return base.with_overrides(overrides)

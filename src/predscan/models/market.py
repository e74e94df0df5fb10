"""Market, Outcome - canonical venue-agnostic entities."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Outcome(BaseModel):
    """Single possible resolution of a market and its implied probability."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    # Percent scale; out-of-range values pass, NaN and inf do not
    probability: float = Field(..., allow_inf_nan=False)


class Market(BaseModel):
    """Canonical market - identity is (platform, id), never id alone."""

    model_config = ConfigDict(frozen=True)

    id: str
    platform: str
    question: str = ""
    url: str = ""
    end_date: datetime | None = None
    outcomes: tuple[Outcome, ...] = ()
    volume_24h: float = Field(0.0, ge=0)
    liquidity: float = Field(0.0, ge=0)

    @field_validator("end_date")
    @classmethod
    def _aware_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def key(self) -> tuple[str, str]:
        return (self.platform, self.id)

    def ends_in(self, now: datetime | None = None) -> str:
        """Human duration until end_date ("45 minutes", "2h 5m", "ended")."""
        if self.end_date is None:
            return "unknown"
        now = now or datetime.now(timezone.utc)
        return format_duration((self.end_date - now).total_seconds())


def format_duration(seconds: float) -> str:
    if seconds < 0:
        return "ended"
    minutes = int(seconds // 60)
    if minutes < 1:
        return "less than a minute"
    if minutes == 1:
        return "1 minute"
    if minutes < 60:
        return f"{minutes} minutes"
    hours, rem_minutes = divmod(minutes, 60)
    if hours < 24:
        if rem_minutes == 0:
            return f"{hours} hour{'s' if hours > 1 else ''}"
        return f"{hours}h {rem_minutes}m"
    days, rem_hours = divmod(hours, 24)
    if rem_hours == 0:
        return f"{days} day{'s' if days > 1 else ''}"
    return f"{days}d {rem_hours}h"

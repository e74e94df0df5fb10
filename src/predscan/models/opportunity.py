"""Opportunity, Alert - derived classifications; ScanResult - report boundary payload."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from predscan.models.market import Market

OpportunityKind = Literal["arbitrage", "near-certain", "mispriced"]
RiskLevel = Literal["no-risk", "low-risk", "medium-risk"]
Severity = Literal["critical", "high", "medium"]


class Analysis(BaseModel):
    """Numbers behind a classification."""

    model_config = ConfigDict(frozen=True)

    total_probability: float
    edge: float
    risk_level: RiskLevel
    recommendation: str = ""
    confidence: str = ""


class Opportunity(BaseModel):
    """Report-path classification of exactly one market."""

    model_config = ConfigDict(frozen=True)

    kind: OpportunityKind
    market: Market
    analysis: Analysis


class Alert(BaseModel):
    """Alert-path classification with a severity used for escalation."""

    model_config = ConfigDict(frozen=True)

    kind: OpportunityKind
    severity: Severity
    market: Market
    analysis: Analysis


class ScanResult(BaseModel):
    """Everything a report renderer needs; JSON round-trippable."""

    generated_at: datetime
    lookahead_minutes: int | None = None
    markets: list[Market] = Field(default_factory=list)
    opportunities: list[Opportunity] = Field(default_factory=list)
    alerts: list[Alert] = Field(default_factory=list)
    failures: dict[str, str] = Field(default_factory=dict)  # platform -> error

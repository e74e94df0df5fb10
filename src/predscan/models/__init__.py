"""Canonical schema (Pydantic) - Market, Outcome, Opportunity, Alert, ScanResult."""

from predscan.models.market import Market, Outcome
from predscan.models.opportunity import Alert, Analysis, Opportunity, ScanResult

__all__ = [
    "Market",
    "Outcome",
    "Analysis",
    "Opportunity",
    "Alert",
    "ScanResult",
]

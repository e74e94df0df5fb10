"""Classification and ranking of aggregated markets."""

from predscan.analysis.alerts import alerts_for, has_critical, scan_alerts
from predscan.analysis.classifier import classify, find_opportunities
from predscan.analysis.ranker import rank, rank_alerts
from predscan.analysis.thresholds import ALERT, LOOSE, REPORT, Thresholds

__all__ = [
    "Thresholds",
    "REPORT",
    "ALERT",
    "LOOSE",
    "classify",
    "find_opportunities",
    "rank",
    "rank_alerts",
    "alerts_for",
    "scan_alerts",
    "has_critical",
]

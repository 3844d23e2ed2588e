"""
Trade Journal Core Module

This module contains the analytics side of the journal:
- Trade record model and validation
- Aggregation engine (win rate, P&L, grouped breakdowns)
- Performance reports and recommendations
"""

from .aggregation import (
    ANALYTICS_RR_BUCKETS,
    DASHBOARD_RR_BUCKETS,
    AggregatedStats,
    GroupStats,
    RiskRewardBucket,
    aggregate,
)
from .models import Outcome, TradeFilter, TradeRecord, TradeValidationError
from .utils import setup_logging

__all__ = [
    "ANALYTICS_RR_BUCKETS",
    "DASHBOARD_RR_BUCKETS",
    "AggregatedStats",
    "GroupStats",
    "RiskRewardBucket",
    "aggregate",
    "Outcome",
    "TradeFilter",
    "TradeRecord",
    "TradeValidationError",
    "setup_logging",
]

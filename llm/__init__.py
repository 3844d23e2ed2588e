"""
LLM Module

Prompt building, the text-generation client and the Journaler that
turns trade history into narrative insights.
"""

from .insight_client import (
    ConfigurationMissing,
    InsightClient,
    InsightError,
    UpstreamFailure,
    UpstreamPaymentRequired,
    UpstreamRateLimited,
)
from .journaler import InsightReport, Journaler
from .prompts import NoTradeDataError, parse_insight_response

__all__ = [
    "ConfigurationMissing",
    "InsightClient",
    "InsightError",
    "UpstreamFailure",
    "UpstreamPaymentRequired",
    "UpstreamRateLimited",
    "InsightReport",
    "Journaler",
    "NoTradeDataError",
    "parse_insight_response",
]

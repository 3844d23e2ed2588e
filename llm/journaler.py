"""
Journaler: LLM-based trade journal insights.

Generates:
- Narrative analysis of a set of raw trades
- Narrative analysis of a precomputed performance report
- Owner-level analysis, fetching trades through an injected source

Empty input is refused before the text-generation endpoint is called.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol, Sequence

from core.models import TradeFilter, TradeRecord
from core.reports import PerformanceReport

from .insight_client import InsightClient
from .prompts import (
    InsightLine,
    InsightPrompt,
    NoTradeDataError,
    build_stats_prompt,
    build_trade_prompt,
    parse_insight_response,
)

logger = logging.getLogger(__name__)


class TradeSource(Protocol):
    """Anything that can fetch an owner's trades (e.g. db.TradeStore)."""

    def fetch_trades(
        self, owner: str, trade_filter: Optional[TradeFilter] = None
    ) -> list[TradeRecord]:
        ...


@dataclass
class InsightReport:
    """Raw response text plus its rendered lines."""

    text: str
    lines: list[InsightLine] = field(default_factory=list)

    @property
    def headings(self) -> list[str]:
        return [line.text for line in self.lines if line.kind == "heading"]


class Journaler:
    """
    LLM-based trading journal analyst.
    """

    def __init__(
        self,
        client: InsightClient,
        source: Optional[TradeSource] = None,
    ):
        """
        Initialize the journaler.

        Args:
            client: Text-generation client
            source: Trade source used by analyze_owner()
        """
        self.client = client
        self.source = source

    def analyze_trades(self, trades: Sequence[TradeRecord]) -> InsightReport:
        """
        Generate insights from raw trades.

        Raises:
            NoTradeDataError: If trades is empty
            InsightError: If the endpoint call fails
        """
        trades = list(trades)
        if not trades:
            logger.warning("Insight request refused: no trades")
            raise NoTradeDataError()
        return self._run(build_trade_prompt(trades))

    def analyze_performance(self, report: PerformanceReport) -> InsightReport:
        """
        Generate insights from a performance report.

        Raises:
            NoTradeDataError: If the report covers no trades
            InsightError: If the endpoint call fails
        """
        if report.total_trades == 0:
            logger.warning("Insight request refused: empty report")
            raise NoTradeDataError()
        return self._run(build_stats_prompt(report))

    def analyze_owner(
        self,
        owner: str,
        trade_filter: Optional[TradeFilter] = None,
    ) -> InsightReport:
        """
        Fetch owner's trades from the source and analyze them.

        Raises:
            ValueError: If no source was configured
            NoTradeDataError: If no trades match
        """
        if self.source is None:
            raise ValueError("Journaler has no trade source configured")
        trades = self.source.fetch_trades(owner, trade_filter)
        logger.info(f"Analyzing {len(trades)} trades for {owner}")
        return self.analyze_trades(trades)

    def _run(self, prompt: InsightPrompt) -> InsightReport:
        text = self.client.complete(prompt.to_messages())
        return InsightReport(text=text, lines=parse_insight_response(text))

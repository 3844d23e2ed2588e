"""
Prompt templates for trade insights.

Builds the system + user messages sent to the text-generation endpoint,
and splits the returned markdown into heading/bullet/paragraph lines.
"""

import json
import re
from dataclasses import dataclass
from typing import Optional, Sequence

from core.aggregation import trade_hour
from core.models import Outcome, TradeRecord
from core.reports import PerformanceReport

SYSTEM_PROMPT = """You are an expert trading performance analyst. Analyze the provided trading data and give specific, actionable insights to help the trader improve their performance.

Focus on:
1. Most profitable sessions (times of day)
2. Best performing currency pairs
3. Most successful risk-reward ratios
4. Best performing trading setups
5. Time patterns (which hours produce best results)
6. Specific recommendations for improvement

Be concise, data-driven, and actionable. Format your response in clear sections."""

NO_DATA_MESSAGE = "No trade data provided"

_HEADING_RE = re.compile(r"^(#+)\s*")
_BULLET_RE = re.compile(r"^[\s\-*]+")


class NoTradeDataError(ValueError):
    """Raised when insights are requested for zero trades."""

    def __init__(self, message: str = NO_DATA_MESSAGE):
        super().__init__(message)


@dataclass
class InsightPrompt:
    """System instruction plus serialized statistics."""

    system: str
    user: str

    def to_messages(self) -> list[dict]:
        return [
            {"role": "system", "content": self.system},
            {"role": "user", "content": self.user},
        ]


@dataclass
class InsightLine:
    """One rendered line of an insight response."""

    kind: str  # heading, bullet, paragraph
    text: str
    level: Optional[int] = None  # heading depth (number of '#')


def _pretty(data) -> str:
    return json.dumps(data, indent=2)


def _percent(part: int, whole: int) -> str:
    return f"{part / whole * 100:.1f}"


def build_trade_prompt(trades: Sequence[TradeRecord]) -> InsightPrompt:
    """
    Build a prompt from raw trades.

    Per-trade outcomes are listed by pair, session, setup, R:R and hour.
    Hours use local time, as in the hourly analytics view.

    Raises:
        NoTradeDataError: If trades is empty
    """
    if not trades:
        raise NoTradeDataError()

    total = len(trades)
    wins = sum(1 for t in trades if t.outcome is Outcome.WIN)
    losses = sum(1 for t in trades if t.outcome is Outcome.LOSS)
    breakevens = total - wins - losses

    pairs = [{"pair": t.pair, "outcome": t.outcome.value} for t in trades]
    sessions = [{"session": t.session_name, "outcome": t.outcome.value} for t in trades]
    setups = [{"setup": t.setup, "outcome": t.outcome.value} for t in trades if t.setup]
    rr_ratios = [
        {"rr": round(t.risk_reward_ratio, 2), "outcome": t.outcome.value}
        for t in trades
        if t.risk_reward_ratio is not None
    ]
    hours = [
        {"hour": trade_hour(t), "outcome": t.outcome.value}
        for t in trades
    ]

    user = f"""Analyze this trading data and provide insights:

Total Trades: {total}
Wins: {wins} ({_percent(wins, total)}%)
Losses: {losses} ({_percent(losses, total)}%)
Breakevens: {breakevens}

Trading Pairs Performance:
{_pretty(pairs)}

Session Performance:
{_pretty(sessions)}

Setup Performance:
{_pretty(setups)}

Risk-Reward Analysis:
{_pretty(rr_ratios)}

Hourly Performance:
{_pretty(hours)}"""

    return InsightPrompt(system=SYSTEM_PROMPT, user=user)


def build_stats_prompt(report: PerformanceReport) -> InsightPrompt:
    """
    Build a prompt from a precomputed performance report.

    Raises:
        NoTradeDataError: If the report covers no trades
    """
    if report.total_trades == 0:
        raise NoTradeDataError()

    data = report.to_dict()
    user = f"""Analyze these aggregated trading statistics and provide insights:

Total Trades: {report.total_trades}

Session Performance (ranked by P&L):
{_pretty(data["sessions"])}

Risk-Reward Performance:
{_pretty(data["rrData"])}

Hourly Performance (ranked by P&L):
{_pretty(data["hours"])}

Pair Performance (ranked by P&L):
{_pretty(data["pairs"])}"""

    return InsightPrompt(system=SYSTEM_PROMPT, user=user)


def parse_insight_response(text: str) -> list[InsightLine]:
    """
    Split a markdown response into renderable lines.

    - "#", "##", ... at line start: heading (level = number of '#')
    - "-" or "*" after leading whitespace: bullet
    - any other non-blank line: paragraph
    Blank lines are dropped.
    """
    lines = []
    for line in (text or "").split("\n"):
        heading = _HEADING_RE.match(line)
        if heading:
            lines.append(InsightLine(
                kind="heading",
                text=line[heading.end():].rstrip(),
                level=len(heading.group(1)),
            ))
        elif line.strip().startswith(("-", "*")):
            lines.append(InsightLine(kind="bullet", text=_BULLET_RE.sub("", line).rstrip()))
        elif line.strip():
            lines.append(InsightLine(kind="paragraph", text=line.rstrip()))
    return lines

"""
Performance reports built on the aggregation engine.

Two views over the same trades:
- AnalyticsReport: counts, win rate, P&L, setups, pairs, 24h view, R:R distribution
- PerformanceReport: what is profitable (sessions, R:R, hours, pairs),
  losing/winning patterns and plain-language recommendations
"""

import logging
from dataclasses import dataclass, field
from datetime import tzinfo
from typing import Iterable, Optional, Sequence

import pandas as pd

from .aggregation import (
    ANALYTICS_RR_BUCKETS,
    DASHBOARD_RR_BUCKETS,
    GroupStats,
    RiskRewardBucket,
    aggregate,
    group_by_hour,
    group_by_pair,
    group_by_rr_bucket,
    group_by_session,
    rank_by_pnl,
    top_by_count,
)
from .models import Outcome, TradeRecord

logger = logging.getLogger(__name__)

LOW_RR_THRESHOLD = 1.5
HIGH_RR_THRESHOLD = 2.0
TOP_SETUPS = 10


@dataclass
class AnalyticsReport:
    """Summary and breakdowns for the analytics view."""

    total_trades: int
    wins: int
    losses: int
    breakevens: int
    win_rate: float
    total_pnl: float
    avg_risk_reward: float
    session_stats: list = field(default_factory=list)
    setup_stats: list = field(default_factory=list)
    pair_stats: list = field(default_factory=list)
    hourly_stats: list = field(default_factory=list)
    rr_distribution: list = field(default_factory=list)


@dataclass
class PerformanceReport:
    """Profitability rankings, patterns and recommendations."""

    total_trades: int
    profitable_sessions: list = field(default_factory=list)
    profitable_rr: list = field(default_factory=list)
    profitable_hours: list = field(default_factory=list)
    profitable_pairs: list = field(default_factory=list)
    losing_patterns: dict = field(default_factory=dict)
    winning_patterns: dict = field(default_factory=dict)
    recommendations: list = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "sessions": [_ranked_row(g, "session") for g in self.profitable_sessions],
            "rrData": [
                {
                    "range": g.key,
                    "pnl": g.pnl,
                    "count": g.total,
                    "avgWinRate": g.win_rate,
                }
                for g in self.profitable_rr
            ],
            "hours": [_ranked_row(g, "hour") for g in self.profitable_hours],
            "pairs": [_ranked_row(g, "pair") for g in self.profitable_pairs],
        }


def _ranked_row(group: GroupStats, key_name: str) -> dict:
    return {
        key_name: group.key,
        "pnl": group.pnl,
        "winRate": group.win_rate,
        "count": group.total,
    }


def _percent(part: int, whole: int) -> float:
    return part / whole * 100 if whole else 0.0


def build_analytics_report(
    trades: Iterable[TradeRecord],
    rr_buckets: Sequence[RiskRewardBucket] = ANALYTICS_RR_BUCKETS,
    tz: Optional[tzinfo] = None,
) -> AnalyticsReport:
    """
    Build the analytics view.

    Setups are the top 10 by trade count; pairs are ordered by trade count.
    """
    stats = aggregate(trades, rr_buckets=rr_buckets, tz=tz)

    return AnalyticsReport(
        total_trades=stats.total_trades,
        wins=stats.wins,
        losses=stats.losses,
        breakevens=stats.breakevens,
        win_rate=stats.win_rate,
        total_pnl=stats.total_pnl,
        avg_risk_reward=stats.avg_risk_reward,
        session_stats=list(stats.by_session.values()),
        setup_stats=top_by_count(stats.by_setup.values(), limit=TOP_SETUPS),
        pair_stats=top_by_count(stats.by_pair.values(), limit=None),
        hourly_stats=stats.by_hour,
        rr_distribution=stats.by_rr_bucket,
    )


def build_performance_report(
    trades: Iterable[TradeRecord],
    rr_buckets: Sequence[RiskRewardBucket] = DASHBOARD_RR_BUCKETS,
    tz: Optional[tzinfo] = None,
) -> PerformanceReport:
    """
    Build the profitability dashboard.

    Sessions, hours and pairs are ranked by P&L. Only hours that have
    trades are listed.
    """
    trades = list(trades)

    sessions = rank_by_pnl(group_by_session(trades).values())
    rr_groups = group_by_rr_bucket(trades, rr_buckets)
    hours = rank_by_pnl(group_by_hour(trades, tz=tz, full_day=False))
    pairs = rank_by_pnl(group_by_pair(trades).values())

    losing = [t for t in trades if t.outcome is Outcome.LOSS]
    winning = [t for t in trades if t.outcome is Outcome.WIN]

    losing_low_rr = sum(
        1 for t in losing
        if t.risk_reward_ratio is not None and t.risk_reward_ratio < LOW_RR_THRESHOLD
    )
    losing_no_setup = sum(1 for t in losing if not t.setup)
    best_session_count = sessions[0].total if sessions else 0
    if losing:
        wrong_session = (len(losing) - best_session_count) / len(losing) * 30
    else:
        wrong_session = 0.0

    losing_patterns = {
        "Poor R:R": _percent(losing_low_rr, len(losing)),
        "No Setup": _percent(losing_no_setup, len(losing)),
        "Wrong Session": wrong_session,
    }

    winning_high_rr = sum(
        1 for t in winning
        if t.risk_reward_ratio is not None and t.risk_reward_ratio >= HIGH_RR_THRESHOLD
    )
    winning_with_setup = sum(1 for t in winning if t.setup)
    winning_patterns = {
        "Good R:R": _percent(winning_high_rr, len(winning)),
        "Has Setup": _percent(winning_with_setup, len(winning)),
        "Best Session": sessions[0].win_rate if sessions else 0.0,
    }

    report = PerformanceReport(
        total_trades=len(trades),
        profitable_sessions=sessions,
        profitable_rr=rr_groups,
        profitable_hours=hours,
        profitable_pairs=pairs,
        losing_patterns=losing_patterns,
        winning_patterns=winning_patterns,
    )
    report.recommendations = build_recommendations(
        report, low_rr_losses=losing_low_rr, total_losses=len(losing)
    )
    logger.debug(
        f"Performance report: {len(trades)} trades, "
        f"{len(report.recommendations)} recommendations"
    )
    return report


def build_recommendations(
    report: PerformanceReport,
    low_rr_losses: int = 0,
    total_losses: int = 0,
) -> list[str]:
    """Plain-language suggestions derived from a PerformanceReport."""
    recommendations = []

    if report.profitable_sessions:
        best = report.profitable_sessions[0]
        recommendations.append(
            f"Focus on {best.key} session "
            f"({best.win_rate:.1f}% win rate, ${best.pnl:.2f} profit)"
        )

    if report.profitable_rr:
        # First bucket wins ties
        best_rr = report.profitable_rr[0]
        for group in report.profitable_rr[1:]:
            if group.pnl > best_rr.pnl:
                best_rr = group
        if best_rr.total > 0:
            recommendations.append(
                f"Target R:R ratio of {best_rr.key} ({best_rr.win_rate:.1f}% win rate)"
            )

    if report.profitable_hours:
        hour = report.profitable_hours[0].key
        recommendations.append(f"Trade during {hour}:00-{hour + 1}:00 hours for best results")

    if report.profitable_pairs and report.profitable_pairs[0].pnl > 0:
        best_pair = report.profitable_pairs[0]
        recommendations.append(
            f"{best_pair.key} is your most profitable pair (${best_pair.pnl:.2f})"
        )

    if total_losses and low_rr_losses / total_losses > 0.5:
        recommendations.append(
            f"Avoid trades with R:R below {LOW_RR_THRESHOLD} - they account for most losses"
        )

    return recommendations


def stats_to_frame(groups: Iterable[GroupStats], key_name: str = "key") -> pd.DataFrame:
    """
    Convert grouped stats to a DataFrame.

    Columns: key_name, total, wins, losses, breakevens, win_rate, pnl
    """
    rows = []
    for group in groups:
        row = group.to_dict()
        row[key_name] = row.pop("key")
        rows.append(row)
    columns = [key_name, "total", "wins", "losses", "breakevens", "win_rate", "pnl"]
    return pd.DataFrame(rows, columns=columns)


def format_stats_table(df: pd.DataFrame) -> str:
    """
    Format a stats DataFrame as a readable table.

    Args:
        df: DataFrame from stats_to_frame

    Returns:
        Formatted string table
    """
    if df.empty:
        return "No trades to display"

    display_df = df.copy()
    display_df["win_rate"] = display_df["win_rate"].apply(lambda x: f"{x:.1f}%")
    display_df["pnl"] = display_df["pnl"].apply(lambda x: f"${x:,.2f}")

    return display_df.to_string(index=False)

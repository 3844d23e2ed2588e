"""
Aggregation engine: trade performance statistics.

Turns a collection of TradeRecord into win/loss counts, win rate and P&L,
overall and grouped by session, instrument, setup, hour of day and
risk-reward bucket.

Every function here is pure. Input order never changes a result, except
that groups are listed in first-encountered key order and ranking ties
keep that order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import tzinfo
from typing import Callable, Hashable, Iterable, Optional, Sequence

from .models import Outcome, TradeRecord

HOURS_PER_DAY = 24


@dataclass
class GroupStats:
    """Win/loss/P&L sub-aggregate for one grouping key."""

    key: Hashable
    total: int = 0
    wins: int = 0
    losses: int = 0
    breakevens: int = 0
    pnl: float = 0.0
    rr_sum: float = 0.0
    rr_count: int = 0

    @property
    def win_rate(self) -> float:
        if self.total == 0:
            return 0.0
        return self.wins / self.total * 100

    @property
    def avg_risk_reward(self) -> float:
        if self.rr_count == 0:
            return 0.0
        return self.rr_sum / self.rr_count

    def add(self, trade: TradeRecord) -> None:
        self.total += 1
        if trade.outcome is Outcome.WIN:
            self.wins += 1
        elif trade.outcome is Outcome.LOSS:
            self.losses += 1
        else:
            self.breakevens += 1
        self.pnl += trade.pnl
        ratio = trade.risk_reward_ratio
        if ratio is not None:
            self.rr_sum += ratio
            self.rr_count += 1

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "total": self.total,
            "wins": self.wins,
            "losses": self.losses,
            "breakevens": self.breakevens,
            "win_rate": self.win_rate,
            "pnl": self.pnl,
        }


@dataclass(frozen=True)
class RiskRewardBucket:
    """Half-open ratio range [lower, upper). upper=None means unbounded."""

    label: str
    lower: float
    upper: Optional[float] = None

    def contains(self, ratio: Optional[float]) -> bool:
        if ratio is None or ratio < self.lower:
            return False
        return self.upper is None or ratio < self.upper


# Analytics page distribution
ANALYTICS_RR_BUCKETS: tuple[RiskRewardBucket, ...] = (
    RiskRewardBucket("0-0.5", 0.0, 0.5),
    RiskRewardBucket("0.5-1", 0.5, 1.0),
    RiskRewardBucket("1-1.5", 1.0, 1.5),
    RiskRewardBucket("1.5-2", 1.5, 2.0),
    RiskRewardBucket("2-3", 2.0, 3.0),
    RiskRewardBucket("3+", 3.0),
)

# Dashboard profitability ranges
DASHBOARD_RR_BUCKETS: tuple[RiskRewardBucket, ...] = (
    RiskRewardBucket("< 1", 0.0, 1.0),
    RiskRewardBucket("1-1.5", 1.0, 1.5),
    RiskRewardBucket("1.5-2", 1.5, 2.0),
    RiskRewardBucket("2-3", 2.0, 3.0),
    RiskRewardBucket("> 3", 3.0),
)


def buckets_from_edges(
    edges: Sequence[float],
    labels: Optional[Sequence[str]] = None,
) -> tuple[RiskRewardBucket, ...]:
    """
    Build a bucket set from ascending edges.

    Edges [0, 1, 2] give [0,1) [1,2) [2,inf). Default labels are "0-1",
    "1-2", "2+".

    Args:
        edges: Ascending lower bounds; the last one opens the unbounded bucket
        labels: Optional labels, one per bucket

    Returns:
        Tuple of RiskRewardBucket

    Raises:
        ValueError: If edges are empty, not ascending, or labels mismatch
    """
    if not edges:
        raise ValueError("At least one bucket edge is required")
    edges = [float(e) for e in edges]
    if any(b <= a for a, b in zip(edges, edges[1:])):
        raise ValueError(f"Bucket edges must be strictly ascending: {edges}")
    if labels is not None and len(labels) != len(edges):
        raise ValueError(f"Expected {len(edges)} labels, got {len(labels)}")

    buckets = []
    for i, lower in enumerate(edges):
        upper = edges[i + 1] if i + 1 < len(edges) else None
        if labels is not None:
            label = labels[i]
        elif upper is None:
            label = f"{lower:g}+"
        else:
            label = f"{lower:g}-{upper:g}"
        buckets.append(RiskRewardBucket(label, lower, upper))
    return tuple(buckets)


@dataclass
class AggregatedStats:
    """Overall summary plus grouped breakdowns."""

    total_trades: int = 0
    wins: int = 0
    losses: int = 0
    breakevens: int = 0
    total_pnl: float = 0.0
    avg_risk_reward: float = 0.0
    by_session: dict = field(default_factory=dict)
    by_pair: dict = field(default_factory=dict)
    by_setup: dict = field(default_factory=dict)
    by_hour: list = field(default_factory=list)
    by_rr_bucket: list = field(default_factory=list)

    @property
    def win_rate(self) -> float:
        if self.total_trades == 0:
            return 0.0
        return self.wins / self.total_trades * 100


def trade_hour(trade: TradeRecord, tz: Optional[tzinfo] = None) -> int:
    """
    Hour of day (0-23) a trade was taken.

    With tz=None the caller's local time is used, the same way the
    journal UI displayed it. Naive datetimes are taken as already local.
    """
    dt = trade.trade_datetime
    if dt.tzinfo is None:
        return dt.hour
    return dt.astimezone(tz).hour


def group_by(
    trades: Iterable[TradeRecord],
    key_func: Callable[[TradeRecord], Hashable],
) -> dict:
    """Group trades by key_func. Keys appear in first-encountered order."""
    groups: dict = {}
    for trade in trades:
        key = key_func(trade)
        if key not in groups:
            groups[key] = GroupStats(key=key)
        groups[key].add(trade)
    return groups


def group_by_session(trades: Iterable[TradeRecord]) -> dict:
    return group_by(trades, lambda t: t.session_name)


def group_by_pair(trades: Iterable[TradeRecord]) -> dict:
    return group_by(trades, lambda t: t.pair)


def group_by_setup(trades: Iterable[TradeRecord]) -> dict:
    return group_by(trades, lambda t: t.setup_label)


def group_by_hour(
    trades: Iterable[TradeRecord],
    tz: Optional[tzinfo] = None,
    full_day: bool = True,
) -> list:
    """
    Group trades by hour of day.

    Args:
        trades: Trade records
        tz: Explicit timezone; None means local time
        full_day: Return all 24 hours (empty ones zero-valued) when True,
            otherwise only hours that have trades, in first-encountered order

    Returns:
        List of GroupStats keyed by int hour
    """
    groups = group_by(trades, lambda t: trade_hour(t, tz))
    if not full_day:
        return list(groups.values())
    return [groups.get(hour) or GroupStats(key=hour) for hour in range(HOURS_PER_DAY)]


def group_by_rr_bucket(
    trades: Iterable[TradeRecord],
    buckets: Sequence[RiskRewardBucket] = ANALYTICS_RR_BUCKETS,
) -> list:
    """
    Group trades into risk-reward buckets, one GroupStats per bucket.

    Trades without a defined ratio are left out of every bucket.
    """
    result = [GroupStats(key=bucket.label) for bucket in buckets]
    for trade in trades:
        ratio = trade.risk_reward_ratio
        if ratio is None:
            continue
        for stats, bucket in zip(result, buckets):
            if bucket.contains(ratio):
                stats.add(trade)
                break
    return result


def top_by_count(groups: Iterable[GroupStats], limit: Optional[int] = 10) -> list:
    """Sort by trade count, highest first. Ties keep their order."""
    ranked = sorted(groups, key=lambda g: g.total, reverse=True)
    return ranked if limit is None else ranked[:limit]


def rank_by_pnl(groups: Iterable[GroupStats], limit: Optional[int] = None) -> list:
    """Sort by total P&L, most profitable first. Ties keep their order."""
    ranked = sorted(groups, key=lambda g: g.pnl, reverse=True)
    return ranked if limit is None else ranked[:limit]


def aggregate(
    trades: Iterable[TradeRecord],
    rr_buckets: Sequence[RiskRewardBucket] = ANALYTICS_RR_BUCKETS,
    tz: Optional[tzinfo] = None,
) -> AggregatedStats:
    """
    Compute the full statistics for a set of trades.

    Args:
        trades: Trade records (not modified)
        rr_buckets: Risk-reward bucket set
        tz: Timezone for the hourly view; None means local time

    Returns:
        AggregatedStats. Empty input gives zero counts, 24 empty hours
        and empty buckets.
    """
    trades = list(trades)
    overall = GroupStats(key="all")
    for trade in trades:
        overall.add(trade)

    return AggregatedStats(
        total_trades=overall.total,
        wins=overall.wins,
        losses=overall.losses,
        breakevens=overall.breakevens,
        total_pnl=overall.pnl,
        avg_risk_reward=overall.avg_risk_reward,
        by_session=group_by_session(trades),
        by_pair=group_by_pair(trades),
        by_setup=group_by_setup(trades),
        by_hour=group_by_hour(trades, tz=tz),
        by_rr_bucket=group_by_rr_bucket(trades, rr_buckets),
    )

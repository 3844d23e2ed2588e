#!/usr/bin/env python3
"""
Trade journal command line.

Usage:
    # Create tables and reference data
    python scripts/journal.py init-db

    # Record a trade
    python scripts/journal.py add --pair EURUSD --session London \
        --time 2025-09-28T09:30:00Z --outcome Win --risk 100 --reward 200 --setup Breakout

    # Analytics for the last 30 days
    python scripts/journal.py analytics --start 2025-09-01 --end 2025-09-30

    # Profitability dashboard and AI insights
    python scripts/journal.py dashboard
    python scripts/journal.py insights --from-stats
"""

import argparse
import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.aggregation import ANALYTICS_RR_BUCKETS, buckets_from_edges
from core.models import TradeFilter, TradeRecord, TradeValidationError
from core.reports import (
    build_analytics_report,
    build_performance_report,
    format_stats_table,
    stats_to_frame,
)
from core.utils import load_yaml_config, parse_timestamp, setup_logging
from db import TradeStore, init_db
from llm import InsightClient, InsightError, Journaler, NoTradeDataError

DEFAULT_CONFIG = "config/journal.yaml"

logger = logging.getLogger("trade-journal")


def _timestamp(value: str) -> datetime:
    try:
        return parse_timestamp(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid timestamp: {value}") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Trading journal: record trades and analyze performance",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", default=DEFAULT_CONFIG, help=f"YAML config (default: {DEFAULT_CONFIG})")
    parser.add_argument("--db-url", help="Database URL override (default: from TRADE_JOURNAL_DB_URL env)")
    parser.add_argument("--owner", default="default", help="Journal owner (default: default)")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create tables and seed sessions/instruments")

    add = sub.add_parser("add", help="Record a trade")
    add.add_argument("--pair", required=True, help="Instrument symbol (e.g. EURUSD)")
    add.add_argument("--session", required=True, help="Trading session (Asia, London, New York)")
    add.add_argument("--time", required=True, type=_timestamp, help="Trade time, ISO-8601")
    add.add_argument("--outcome", required=True, help="Win, Loss or BE")
    add.add_argument("--setup", help="Strategy/setup label")
    add.add_argument("--risk", type=float, help="Amount risked")
    add.add_argument("--reward", type=float, help="Amount gained if the trade wins")
    add.add_argument("--notes", help="Free-text notes")
    add.add_argument("--screenshot-url", help="Screenshot reference")

    delete = sub.add_parser("delete", help="Delete a trade")
    delete.add_argument("trade_id")

    for name, help_text in (
        ("list", "List trades"),
        ("analytics", "Win rate, P&L and grouped statistics"),
        ("dashboard", "Profitability rankings and recommendations"),
        ("insights", "AI-generated narrative insights"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("--start", type=_timestamp, help="From (inclusive), ISO-8601")
        cmd.add_argument("--end", type=_timestamp, help="To (inclusive), ISO-8601")
        cmd.add_argument("--pair", help="Only this instrument")
        cmd.add_argument("--session", help="Only this session")
        if name == "insights":
            cmd.add_argument(
                "--from-stats",
                action="store_true",
                help="Send the aggregated dashboard instead of raw trades",
            )

    return parser


def _filter_from_args(args) -> TradeFilter:
    return TradeFilter(
        start=args.start,
        end=args.end,
        pair=args.pair,
        session_name=args.session,
    )


def _rr_buckets(config: dict):
    analytics = config.get("analytics", {}) or {}
    edges = analytics.get("rr_bucket_edges")
    if not edges:
        return ANALYTICS_RR_BUCKETS
    return buckets_from_edges(edges, analytics.get("rr_bucket_labels"))


def _print_section(title: str, body: str) -> None:
    print("\n" + "=" * 60)
    print(title)
    print("=" * 60)
    print(body)


def cmd_add(store: TradeStore, args) -> None:
    record = TradeRecord.from_mapping({
        "pair": args.pair,
        "session_name": args.session,
        "trade_datetime": args.time,
        "outcome": args.outcome,
        "setup": args.setup,
        "risk": args.risk,
        "reward": args.reward,
        "notes": args.notes,
        "screenshot_url": args.screenshot_url,
    })
    trade_id = store.add_trade(args.owner, record)
    print(f"Saved trade {trade_id}")


def cmd_list(store: TradeStore, args) -> None:
    trades = store.fetch_trades(args.owner, _filter_from_args(args))
    if not trades:
        print("No trades found for the selected filters.")
        return
    for t in trades:
        rr = f"{t.risk_reward_ratio:.2f}" if t.risk_reward_ratio is not None else "N/A"
        print(
            f"{t.id}  {t.trade_datetime:%Y-%m-%d %H:%M}  {t.pair:<8} {t.session_name:<9} "
            f"{t.outcome.value:<4} R:R {rr:<5} {t.setup or ''}"
        )


def cmd_analytics(store: TradeStore, args, config: dict) -> None:
    trades = store.fetch_trades(args.owner, _filter_from_args(args))
    report = build_analytics_report(trades, rr_buckets=_rr_buckets(config))

    print(f"Total trades: {report.total_trades}")
    print(f"Win rate:     {report.win_rate:.1f}%")
    print(f"Total P&L:    ${report.total_pnl:,.2f}")
    print(f"Avg R:R:      {report.avg_risk_reward:.2f}")

    _print_section("SESSIONS", format_stats_table(stats_to_frame(report.session_stats, "session")))
    _print_section("TOP SETUPS", format_stats_table(stats_to_frame(report.setup_stats, "setup")))
    _print_section("PAIRS", format_stats_table(stats_to_frame(report.pair_stats, "pair")))
    _print_section("HOURS", format_stats_table(stats_to_frame(report.hourly_stats, "hour")))
    _print_section("R:R DISTRIBUTION", format_stats_table(stats_to_frame(report.rr_distribution, "range")))


def cmd_dashboard(store: TradeStore, args) -> None:
    trades = store.fetch_trades(args.owner, _filter_from_args(args))
    if not trades:
        print("No trades yet. Add some trades to see the dashboard.")
        return
    report = build_performance_report(trades)

    _print_section("MOST PROFITABLE SESSIONS", format_stats_table(stats_to_frame(report.profitable_sessions, "session")))
    _print_section("R:R PROFITABILITY", format_stats_table(stats_to_frame(report.profitable_rr, "range")))
    _print_section("BEST HOURS", format_stats_table(stats_to_frame(report.profitable_hours, "hour")))
    _print_section("MOST PROFITABLE PAIRS", format_stats_table(stats_to_frame(report.profitable_pairs, "pair")))

    patterns = [f"  {k}: {v:.1f}" for k, v in report.losing_patterns.items()]
    patterns += [f"  {k}: {v:.1f}" for k, v in report.winning_patterns.items()]
    _print_section("PATTERNS (losing, then winning)", "\n".join(patterns))
    _print_section("RECOMMENDATIONS", "\n".join(f"- {r}" for r in report.recommendations))


def cmd_insights(store: TradeStore, args, config: dict) -> None:
    journaler = Journaler(InsightClient.from_config(config), source=store)
    trade_filter = _filter_from_args(args)

    if args.from_stats:
        trades = store.fetch_trades(args.owner, trade_filter)
        insights = journaler.analyze_performance(build_performance_report(trades))
    else:
        insights = journaler.analyze_owner(args.owner, trade_filter)

    for line in insights.lines:
        if line.kind == "heading":
            print(f"\n{line.text.upper()}")
        elif line.kind == "bullet":
            print(f"  * {line.text}")
        else:
            print(line.text)


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = load_yaml_config(args.config)
    setup_logging((config.get("logging", {}) or {}).get("level", "INFO"))

    db_url = args.db_url or os.getenv("TRADE_JOURNAL_DB_URL") or (config.get("database", {}) or {}).get("url")

    try:
        if args.command == "init-db":
            init_db(db_url)
            print("Database initialized")
            return 0

        store = TradeStore(db_url)
        if args.command == "add":
            cmd_add(store, args)
        elif args.command == "delete":
            if not store.delete_trade(args.owner, args.trade_id):
                logger.error(f"Trade {args.trade_id} not found")
                return 1
            print(f"Deleted trade {args.trade_id}")
        elif args.command == "list":
            cmd_list(store, args)
        elif args.command == "analytics":
            cmd_analytics(store, args, config)
        elif args.command == "dashboard":
            cmd_dashboard(store, args)
        elif args.command == "insights":
            cmd_insights(store, args, config)

    except NoTradeDataError as e:
        logger.error(f"{e}. Add some trades first to get AI insights")
        return 1
    except TradeValidationError as e:
        logger.error(f"Invalid trade: {e}")
        return 1
    except InsightError as e:
        logger.error(f"Insight generation failed: {e}")
        return 1
    except ValueError as e:
        logger.error(f"Error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())

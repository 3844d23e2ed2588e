"""
Trade store: owner-scoped persistence for journal entries.

Provides:
- add / update / delete of a user's trades
- filtered fetches (date range, instrument, session) returned as TradeRecord
- reference lookups for sessions and instruments

Every query is restricted to the requesting owner's rows.
"""

import logging
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from core.models import Outcome, TradeFilter, TradeRecord, TradeValidationError
from core.utils import ensure_utc, to_utc

from .init_db import get_engine
from .models import Instrument, Trade, TradingSession

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "pair",
    "session_name",
    "trade_datetime",
    "setup",
    "risk",
    "reward",
    "outcome",
    "notes",
    "screenshot_url",
    "entry_price",
    "exit_price",
)


class TradeStore:
    """
    SQLAlchemy-backed trade store.

    Usage::

        store = TradeStore("sqlite:///data/trade_journal.db")
        trade_id = store.add_trade("user-1", record)
        trades = store.fetch_trades("user-1", TradeFilter(pair="EURUSD"))
    """

    def __init__(self, db_url: Optional[str] = None, engine: Optional[Engine] = None):
        """
        Args:
            db_url: SQLAlchemy database URL (defaults to TRADE_JOURNAL_DB_URL env var)
            engine: Existing engine; takes precedence over db_url
        """
        self.engine = engine if engine is not None else get_engine(db_url)

    # ------------------------------------------------------------------
    # Reference data
    # ------------------------------------------------------------------

    def list_sessions(self) -> list[dict]:
        """Return trading sessions ordered by start time."""
        with Session(self.engine) as session:
            rows = session.execute(
                select(TradingSession).order_by(TradingSession.start_time)
            ).scalars().all()
            return [
                {
                    "id": row.id,
                    "name": row.name,
                    "start_time": row.start_time,
                    "end_time": row.end_time,
                    "timezone": row.timezone,
                }
                for row in rows
            ]

    def list_instruments(self) -> list[dict]:
        """Return instruments ordered by symbol."""
        with Session(self.engine) as session:
            rows = session.execute(
                select(Instrument).order_by(Instrument.symbol)
            ).scalars().all()
            return [
                {"symbol": row.symbol, "name": row.name, "category": row.category}
                for row in rows
            ]

    def _session_id(self, session: Session, name: str) -> str:
        session_id = session.execute(
            select(TradingSession.id).where(TradingSession.name == name)
        ).scalar_one_or_none()
        if session_id is None:
            raise TradeValidationError("session_name", f"unknown trading session {name!r}")
        return session_id

    def _check_instrument(self, session: Session, symbol: str) -> None:
        found = session.execute(
            select(Instrument.id).where(Instrument.symbol == symbol)
        ).scalar_one_or_none()
        if found is None:
            raise TradeValidationError("pair", f"unknown instrument {symbol!r}")

    # ------------------------------------------------------------------
    # Trades
    # ------------------------------------------------------------------

    def add_trade(
        self,
        owner: str,
        record: TradeRecord,
        entry_price: Optional[float] = None,
        exit_price: Optional[float] = None,
    ) -> str:
        """
        Save a trade for owner.

        Args:
            owner: User identifier the trade belongs to
            record: Validated trade record
            entry_price: Optional entry price
            exit_price: Optional exit price

        Returns:
            The trade ID

        Raises:
            TradeValidationError: If the instrument or session is unknown
        """
        with Session(self.engine) as session:
            self._check_instrument(session, record.pair)
            row = Trade(
                id=record.id,
                user_id=owner,
                pair=record.pair,
                session_id=self._session_id(session, record.session_name),
                trade_datetime=to_utc(record.trade_datetime),
                setup=record.setup,
                entry_price=entry_price,
                exit_price=exit_price,
                risk=record.risk,
                reward=record.reward,
                outcome=record.outcome.value,
                notes=record.notes,
                screenshot_url=record.screenshot_url,
            )
            session.add(row)
            session.commit()
            trade_id = row.id

        logger.info(f"Saved trade {trade_id} ({record.pair} {record.outcome.value}) for {owner}")
        return trade_id

    def fetch_trades(
        self,
        owner: str,
        trade_filter: Optional[TradeFilter] = None,
    ) -> list[TradeRecord]:
        """
        Fetch owner's trades matching the filter, newest first.

        Raises:
            TradeValidationError: If a stored row is malformed
        """
        trade_filter = trade_filter or TradeFilter()

        stmt = (
            select(Trade, TradingSession.name)
            .join(TradingSession, Trade.session_id == TradingSession.id)
            .where(Trade.user_id == owner)
        )
        if trade_filter.start is not None:
            stmt = stmt.where(Trade.trade_datetime >= to_utc(trade_filter.start))
        if trade_filter.end is not None:
            stmt = stmt.where(Trade.trade_datetime <= to_utc(trade_filter.end))
        if trade_filter.pair is not None:
            stmt = stmt.where(Trade.pair == trade_filter.pair)
        if trade_filter.session_name is not None:
            stmt = stmt.where(TradingSession.name == trade_filter.session_name)
        stmt = stmt.order_by(Trade.trade_datetime.desc())

        with Session(self.engine) as session:
            rows = session.execute(stmt).all()
            records = [self._to_record(trade, session_name) for trade, session_name in rows]

        logger.debug(f"Fetched {len(records)} trades for {owner}")
        return records

    def get_trade(self, owner: str, trade_id: str) -> Optional[TradeRecord]:
        with Session(self.engine) as session:
            trade = session.get(Trade, trade_id)
            if trade is None or trade.user_id != owner:
                return None
            return self._to_record(trade, trade.session.name if trade.session else None)

    def update_trade(self, owner: str, trade_id: str, **fields: Any) -> bool:
        """
        Update fields on one of owner's trades.

        The merged result is re-validated as a TradeRecord before saving.

        Returns:
            True if the trade existed and was updated

        Raises:
            ValueError: On an unknown field name
            TradeValidationError: If the updated trade is invalid
        """
        unknown = set(fields) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update fields: {sorted(unknown)}")

        with Session(self.engine) as session:
            trade = session.get(Trade, trade_id)
            if trade is None or trade.user_id != owner:
                return False

            current = self._to_record(trade, trade.session.name if trade.session else None)
            merged = current.to_dict()
            merged.update({k: v for k, v in fields.items() if k not in ("entry_price", "exit_price")})
            record = TradeRecord.from_mapping(merged)

            if record.pair != trade.pair:
                self._check_instrument(session, record.pair)
            if record.session_name != current.session_name:
                trade.session_id = self._session_id(session, record.session_name)

            trade.pair = record.pair
            trade.trade_datetime = to_utc(record.trade_datetime)
            trade.setup = record.setup
            trade.risk = record.risk
            trade.reward = record.reward
            trade.outcome = record.outcome.value
            trade.notes = record.notes
            trade.screenshot_url = record.screenshot_url
            if "entry_price" in fields:
                trade.entry_price = fields["entry_price"]
            if "exit_price" in fields:
                trade.exit_price = fields["exit_price"]
            session.commit()

        logger.info(f"Updated trade {trade_id} for {owner}")
        return True

    def delete_trade(self, owner: str, trade_id: str) -> bool:
        """Delete one of owner's trades. Returns False if not found."""
        with Session(self.engine) as session:
            trade = session.get(Trade, trade_id)
            if trade is None or trade.user_id != owner:
                return False
            session.delete(trade)
            session.commit()

        logger.info(f"Deleted trade {trade_id} for {owner}")
        return True

    @staticmethod
    def _to_record(trade: Trade, session_name: Optional[str]) -> TradeRecord:
        return TradeRecord.from_mapping({
            "id": trade.id,
            "pair": trade.pair,
            "session_name": session_name,
            "trade_datetime": ensure_utc(trade.trade_datetime),
            "setup": trade.setup,
            "risk": trade.risk,
            "reward": trade.reward,
            "outcome": Outcome.parse(trade.outcome),
            "notes": trade.notes,
            "screenshot_url": trade.screenshot_url,
        })

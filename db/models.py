"""
SQLAlchemy models for the trade journal database.

Tables:
- TradingSession: Reference list of named trading sessions
- Instrument: Reference list of tradable symbols
- Trade: Journal entries, one row per trade, scoped by user_id
"""

import uuid
from datetime import time

from sqlalchemy import (
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    String,
    Text,
    Time,
)
from sqlalchemy.orm import relationship

from core.utils import utc_now

from .base import Base


def _new_id() -> str:
    return uuid.uuid4().hex


class TradingSession(Base):
    """
    Named time-of-day trading window (Asia, London, New York).
    """
    __tablename__ = "trading_sessions"

    id = Column(String(32), primary_key=True, default=_new_id)
    name = Column(String(50), nullable=False, unique=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    timezone = Column(String(50), nullable=False, default="UTC")
    created_at = Column(DateTime(timezone=True), default=utc_now)

    trades = relationship("Trade", back_populates="session")

    def __repr__(self) -> str:
        return f"<TradingSession {self.name} {self.start_time}-{self.end_time}>"


class Instrument(Base):
    """
    Tradable instrument. Trades may only reference symbols listed here.
    """
    __tablename__ = "instruments"

    id = Column(String(32), primary_key=True, default=_new_id)
    symbol = Column(String(20), nullable=False, unique=True)
    name = Column(String(100), nullable=False)
    category = Column(String(20), nullable=False, default="forex")
    created_at = Column(DateTime(timezone=True), default=utc_now)

    def __repr__(self) -> str:
        return f"<Instrument {self.symbol} ({self.category})>"


class Trade(Base):
    """
    A single journal entry.

    trade_datetime is stored in UTC. risk_reward_ratio is not stored;
    it is derived on the TradeRecord.
    """
    __tablename__ = "trades"

    id = Column(String(32), primary_key=True, default=_new_id)
    user_id = Column(String(64), nullable=False)
    pair = Column(String(20), nullable=False)
    session_id = Column(String(32), ForeignKey("trading_sessions.id"))
    trade_datetime = Column(DateTime(timezone=True), nullable=False)
    setup = Column(Text)
    entry_price = Column(Float)
    exit_price = Column(Float)
    risk = Column(Float)
    reward = Column(Float)
    outcome = Column(String(10), nullable=False)  # Win, Loss, BE
    notes = Column(Text)
    screenshot_url = Column(Text)
    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    session = relationship("TradingSession", back_populates="trades")

    __table_args__ = (
        Index("ix_trades_user_datetime", "user_id", "trade_datetime"),
    )

    def __repr__(self) -> str:
        return f"<Trade {self.id} {self.pair} {self.outcome}>"


DEFAULT_SESSIONS = [
    {"name": "Asia", "start_time": time(0, 0), "end_time": time(9, 0)},
    {"name": "London", "start_time": time(8, 0), "end_time": time(16, 0)},
    {"name": "New York", "start_time": time(13, 0), "end_time": time(22, 0)},
]

DEFAULT_INSTRUMENTS = [
    ("EURUSD", "Euro/US Dollar", "forex"),
    ("GBPUSD", "British Pound/US Dollar", "forex"),
    ("USDJPY", "US Dollar/Japanese Yen", "forex"),
    ("AUDUSD", "Australian Dollar/US Dollar", "forex"),
    ("USDCAD", "US Dollar/Canadian Dollar", "forex"),
    ("NZDUSD", "New Zealand Dollar/US Dollar", "forex"),
    ("EURGBP", "Euro/British Pound", "forex"),
    ("EURJPY", "Euro/Japanese Yen", "forex"),
    ("GBPJPY", "British Pound/Japanese Yen", "forex"),
    ("XAUUSD", "Gold/US Dollar", "commodities"),
    ("US30", "Dow Jones Industrial Average", "indices"),
    ("SPX500", "S&P 500", "indices"),
    ("NAS100", "NASDAQ 100", "indices"),
]

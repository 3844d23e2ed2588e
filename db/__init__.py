"""
Database package for the trade journal.

Provides SQLAlchemy models, database utilities and the trade store.
"""

from .base import Base
from .models import Instrument, Trade, TradingSession
from .init_db import init_db, get_db_url, get_engine, seed_reference_data
from .trade_store import TradeStore

__all__ = [
    "Base",
    "Instrument",
    "Trade",
    "TradingSession",
    "init_db",
    "get_db_url",
    "get_engine",
    "seed_reference_data",
    "TradeStore",
]

"""
Database initialization utilities.

Provides functions for:
- Getting database URL from environment
- Creating database engine and tables
- Seeding reference data (sessions, instruments)
- Getting database sessions
"""

import logging
import os
from pathlib import Path
from typing import Optional

from sqlalchemy import create_engine, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from .base import Base
from .models import DEFAULT_INSTRUMENTS, DEFAULT_SESSIONS, Instrument, TradingSession

logger = logging.getLogger(__name__)

DEFAULT_DB_URL = "sqlite:///data/trade_journal.db"


def get_db_url(db_url: Optional[str] = None) -> str:
    """
    Get the database URL.

    Priority:
    1. Explicit db_url argument
    2. TRADE_JOURNAL_DB_URL environment variable
    3. Default SQLite path

    Args:
        db_url: Optional explicit database URL

    Returns:
        Database URL string
    """
    if db_url:
        return db_url
    return os.getenv("TRADE_JOURNAL_DB_URL", DEFAULT_DB_URL)


def get_engine(db_url: Optional[str] = None) -> Engine:
    """
    Get a database engine.

    In-memory SQLite URLs share one connection so every session sees the
    same database.

    Args:
        db_url: Optional database URL override

    Returns:
        SQLAlchemy Engine instance
    """
    url = get_db_url(db_url)
    if url in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(
            url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(url, echo=False)


def seed_reference_data(engine: Engine) -> None:
    """Insert default sessions and instruments that are not there yet."""
    with Session(engine) as session:
        existing_sessions = set(session.execute(select(TradingSession.name)).scalars())
        for row in DEFAULT_SESSIONS:
            if row["name"] not in existing_sessions:
                session.add(TradingSession(timezone="UTC", **row))

        existing_symbols = set(session.execute(select(Instrument.symbol)).scalars())
        for symbol, name, category in DEFAULT_INSTRUMENTS:
            if symbol not in existing_symbols:
                session.add(Instrument(symbol=symbol, name=name, category=category))

        session.commit()


def init_db(db_url: Optional[str] = None, engine: Optional[Engine] = None) -> Engine:
    """
    Initialize the database, creating tables and reference rows.

    For SQLite databases, also ensures the directory exists.

    Args:
        db_url: Optional database URL override
        engine: Existing engine to initialize instead of creating one

    Returns:
        SQLAlchemy Engine instance
    """
    if engine is None:
        url = get_db_url(db_url)
        logger.info(f"Initializing database: {url}")

        # For SQLite, ensure directory exists
        if url.startswith("sqlite:///"):
            db_path = url.replace("sqlite:///", "")
            if not db_path.startswith(":"):  # Not an in-memory DB
                db_dir = Path(db_path).parent
                db_dir.mkdir(parents=True, exist_ok=True)
                logger.info(f"Ensured directory exists: {db_dir}")

        engine = get_engine(url)

    Base.metadata.create_all(engine)
    seed_reference_data(engine)

    logger.info("Database tables created successfully")
    return engine


if __name__ == "__main__":
    # Allow running as script: python -m db.init_db
    logging.basicConfig(level=logging.INFO)
    init_db()
    print(f"Database initialized: {get_db_url()}")

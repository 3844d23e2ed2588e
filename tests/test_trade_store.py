"""
Tests for db/trade_store.py: owner-scoped persistence and filters.
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy.orm import Session

from core.models import Outcome, TradeFilter, TradeRecord, TradeValidationError
from db import Trade, TradeStore, init_db


@pytest.fixture
def store():
    engine = init_db("sqlite://")
    return TradeStore(engine=engine)


def _record(pair="EURUSD", session="London", when="2025-09-10T09:00:00+00:00",
            outcome="Win", risk=100, reward=200, setup=None):
    return TradeRecord.from_mapping({
        "pair": pair,
        "session_name": session,
        "trade_datetime": when,
        "outcome": outcome,
        "risk": risk,
        "reward": reward,
        "setup": setup,
    })


class TestReferenceData:
    def test_sessions_seeded(self, store):
        names = [s["name"] for s in store.list_sessions()]
        assert names == ["Asia", "London", "New York"]

    def test_instruments_seeded(self, store):
        symbols = {i["symbol"] for i in store.list_instruments()}
        assert len(symbols) == 13
        assert {"EURUSD", "XAUUSD", "NAS100"} <= symbols

    def test_seeding_is_idempotent(self, store):
        init_db(engine=store.engine)
        assert len(store.list_sessions()) == 3
        assert len(store.list_instruments()) == 13


class TestTrades:
    def test_round_trip(self, store):
        record = _record(setup="Breakout")
        trade_id = store.add_trade("alice", record)

        [loaded] = store.fetch_trades("alice")
        assert loaded.id == trade_id
        assert loaded.pair == "EURUSD"
        assert loaded.session_name == "London"
        assert loaded.outcome is Outcome.WIN
        assert loaded.risk_reward_ratio == 2.0
        assert loaded.setup == "Breakout"
        assert loaded.trade_datetime == datetime(2025, 9, 10, 9, 0, tzinfo=timezone.utc)

    def test_owner_isolation(self, store):
        store.add_trade("alice", _record())
        store.add_trade("bob", _record(pair="GBPUSD"))

        assert [t.pair for t in store.fetch_trades("alice")] == ["EURUSD"]
        assert [t.pair for t in store.fetch_trades("bob")] == ["GBPUSD"]
        assert store.fetch_trades("carol") == []

    def test_newest_first(self, store):
        store.add_trade("alice", _record(when="2025-09-01T10:00:00+00:00"))
        store.add_trade("alice", _record(when="2025-09-03T10:00:00+00:00"))
        store.add_trade("alice", _record(when="2025-09-02T10:00:00+00:00"))

        days = [t.trade_datetime.day for t in store.fetch_trades("alice")]
        assert days == [3, 2, 1]

    def test_date_range_inclusive(self, store):
        for day in (1, 5, 10):
            store.add_trade("alice", _record(when=f"2025-09-{day:02d}T12:00:00+00:00"))

        trade_filter = TradeFilter(
            start=datetime(2025, 9, 1, 12, tzinfo=timezone.utc),
            end=datetime(2025, 9, 5, 12, tzinfo=timezone.utc),
        )
        days = sorted(t.trade_datetime.day for t in store.fetch_trades("alice", trade_filter))
        assert days == [1, 5]

    def test_pair_and_session_filters(self, store):
        store.add_trade("alice", _record(pair="EURUSD", session="London"))
        store.add_trade("alice", _record(pair="EURUSD", session="Asia"))
        store.add_trade("alice", _record(pair="USDJPY", session="Asia"))

        assert len(store.fetch_trades("alice", TradeFilter(pair="EURUSD"))) == 2
        assert len(store.fetch_trades("alice", TradeFilter(session_name="Asia"))) == 2
        both = store.fetch_trades("alice", TradeFilter(pair="EURUSD", session_name="Asia"))
        assert [(t.pair, t.session_name) for t in both] == [("EURUSD", "Asia")]

    def test_unknown_instrument_rejected(self, store):
        with pytest.raises(TradeValidationError) as exc:
            store.add_trade("alice", _record(pair="DOGEUSD"))
        assert exc.value.field_name == "pair"
        assert store.fetch_trades("alice") == []

    def test_unknown_session_rejected(self, store):
        with pytest.raises(TradeValidationError):
            store.add_trade("alice", _record(session="Sydney"))

    def test_row_timestamps_set(self, store):
        trade_id = store.add_trade("alice", _record())
        with Session(store.engine) as session:
            row = session.get(Trade, trade_id)
            assert row.user_id == "alice"
            assert row.created_at is not None
            assert row.updated_at is not None

    def test_breakeven_stored_as_be(self, store):
        store.add_trade("alice", _record(outcome="Breakeven", risk=None, reward=None))
        [loaded] = store.fetch_trades("alice")
        assert loaded.outcome is Outcome.BREAKEVEN
        assert loaded.risk_reward_ratio is None


class TestUpdateDelete:
    def test_delete_own_trade(self, store):
        trade_id = store.add_trade("alice", _record())
        assert store.delete_trade("alice", trade_id)
        assert store.fetch_trades("alice") == []

    def test_cannot_delete_others_trade(self, store):
        trade_id = store.add_trade("alice", _record())
        assert not store.delete_trade("bob", trade_id)
        assert len(store.fetch_trades("alice")) == 1

    def test_delete_missing(self, store):
        assert not store.delete_trade("alice", "nope")

    def test_update(self, store):
        trade_id = store.add_trade("alice", _record())
        assert store.update_trade("alice", trade_id, outcome="Loss", session_name="Asia", notes="moved stop")

        loaded = store.get_trade("alice", trade_id)
        assert loaded.outcome is Outcome.LOSS
        assert loaded.session_name == "Asia"
        assert loaded.notes == "moved stop"
        assert loaded.pnl == -100

    def test_update_validates(self, store):
        trade_id = store.add_trade("alice", _record())
        with pytest.raises(TradeValidationError):
            store.update_trade("alice", trade_id, risk=-1)
        with pytest.raises(TradeValidationError):
            store.update_trade("alice", trade_id, pair="DOGEUSD")
        with pytest.raises(ValueError):
            store.update_trade("alice", trade_id, user_id="bob")

    def test_update_others_trade(self, store):
        trade_id = store.add_trade("alice", _record())
        assert not store.update_trade("bob", trade_id, outcome="Loss")
        assert store.get_trade("bob", trade_id) is None

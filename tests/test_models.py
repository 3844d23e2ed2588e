"""
Tests for core/models.py: trade record validation.
"""

from datetime import datetime, timedelta, timezone

import pytest

from core.models import Outcome, TradeFilter, TradeRecord, TradeValidationError


def _data(**overrides):
    data = {
        "pair": "EURUSD",
        "session_name": "London",
        "trade_datetime": "2025-09-28T09:30:00Z",
        "outcome": "Win",
        "risk": "100",
        "reward": "250",
    }
    data.update(overrides)
    return data


class TestTradeRecord:
    """Tests for TradeRecord.from_mapping."""

    def test_parses_form_input(self):
        record = TradeRecord.from_mapping(_data(setup="Breakout"))

        assert record.pair == "EURUSD"
        assert record.trade_datetime == datetime(2025, 9, 28, 9, 30, tzinfo=timezone.utc)
        assert record.outcome is Outcome.WIN
        assert record.risk == 100.0
        assert record.reward == 250.0
        assert record.risk_reward_ratio == 2.5
        assert record.setup == "Breakout"
        assert record.id  # generated

    def test_session_alias(self):
        data = _data()
        data["session"] = data.pop("session_name")
        assert TradeRecord.from_mapping(data).session_name == "London"

    @pytest.mark.parametrize("value", ["BE", "Breakeven", "BreakEven", "break even", "be"])
    def test_breakeven_aliases(self, value):
        assert TradeRecord.from_mapping(_data(outcome=value)).outcome is Outcome.BREAKEVEN

    def test_unknown_outcome_rejected(self):
        with pytest.raises(TradeValidationError) as exc:
            TradeRecord.from_mapping(_data(outcome="Partial"))
        assert exc.value.field_name == "outcome"

    def test_bad_timestamp_rejected(self):
        with pytest.raises(TradeValidationError) as exc:
            TradeRecord.from_mapping(_data(trade_datetime="yesterday"))
        assert exc.value.field_name == "trade_datetime"

    def test_missing_timestamp_rejected(self):
        with pytest.raises(TradeValidationError):
            TradeRecord.from_mapping(_data(trade_datetime=None))

    def test_negative_risk_rejected(self):
        with pytest.raises(TradeValidationError):
            TradeRecord.from_mapping(_data(risk=-5))

    def test_nan_reward_rejected(self):
        with pytest.raises(TradeValidationError):
            TradeRecord.from_mapping(_data(reward=float("nan")))

    def test_non_numeric_risk_rejected(self):
        with pytest.raises(TradeValidationError):
            TradeRecord.from_mapping(_data(risk="lots"))

    def test_missing_pair_rejected(self):
        with pytest.raises(TradeValidationError) as exc:
            TradeRecord.from_mapping(_data(pair=""))
        assert exc.value.field_name == "pair"

    def test_empty_strings_become_none(self):
        record = TradeRecord.from_mapping(_data(risk="", reward="", setup="", notes=" "))
        assert record.risk is None
        assert record.reward is None
        assert record.setup is None
        assert record.notes is None
        assert record.setup_label == "Unknown"

    def test_ratio_undefined_when_risk_zero(self):
        assert TradeRecord.from_mapping(_data(risk=0)).risk_reward_ratio is None

    def test_ratio_undefined_without_reward(self):
        assert TradeRecord.from_mapping(_data(reward=None)).risk_reward_ratio is None

    def test_pnl(self):
        assert TradeRecord.from_mapping(_data(outcome="Win")).pnl == 250
        assert TradeRecord.from_mapping(_data(outcome="Loss")).pnl == -100
        assert TradeRecord.from_mapping(_data(outcome="BE")).pnl == 0

    def test_record_is_frozen(self):
        record = TradeRecord.from_mapping(_data())
        with pytest.raises(AttributeError):
            record.pair = "GBPUSD"

    def test_to_dict(self):
        d = TradeRecord.from_mapping(_data(id="abc")).to_dict()
        assert d["id"] == "abc"
        assert d["outcome"] == "Win"
        assert d["risk_reward_ratio"] == 2.5
        assert d["trade_datetime"] == "2025-09-28T09:30:00+00:00"


class TestTradeFilter:
    def test_matches_inclusive_range(self):
        record = TradeRecord.from_mapping(_data())
        at = record.trade_datetime
        assert TradeFilter(start=at, end=at).matches(record)
        assert not TradeFilter(pair="GBPUSD").matches(record)
        assert TradeFilter(session_name="London").matches(record)
        assert not TradeFilter(session_name="Asia").matches(record)

    def test_naive_bounds_against_aware_record(self):
        record = TradeRecord.from_mapping(_data())
        assert TradeFilter(start=datetime(2025, 9, 1)).matches(record)
        assert not TradeFilter(end=datetime(2025, 9, 1)).matches(record)
        assert not TradeFilter(start=datetime(2025, 10, 1)).matches(record)

    def test_bounds_compared_in_utc(self):
        record = TradeRecord.from_mapping(_data())
        plus_two = timezone(timedelta(hours=2))
        # 11:30+02:00 is the same instant as 09:30Z
        assert TradeFilter(start=datetime(2025, 9, 28, 11, 30, tzinfo=plus_two)).matches(record)
        assert not TradeFilter(end=datetime(2025, 9, 28, 11, 29, tzinfo=plus_two)).matches(record)


class TestTradeRecordConstructor:
    """Tests for building TradeRecord directly."""

    def _build(self, **overrides):
        fields = {
            "id": "t1",
            "pair": "EURUSD",
            "session_name": "London",
            "trade_datetime": datetime(2025, 9, 28, 9, 30, tzinfo=timezone.utc),
            "outcome": Outcome.WIN,
        }
        fields.update(overrides)
        return TradeRecord(**fields)

    def test_string_amount_rejected(self):
        with pytest.raises(TradeValidationError) as exc:
            self._build(risk="5")
        assert exc.value.field_name == "risk"

    def test_bool_amount_rejected(self):
        with pytest.raises(TradeValidationError) as exc:
            self._build(reward=True)
        assert exc.value.field_name == "reward"

    def test_numeric_amounts_accepted(self):
        record = self._build(risk=50, reward=125.0)
        assert record.risk_reward_ratio == 2.5

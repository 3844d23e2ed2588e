"""
Trade journal domain models.

Provides:
- Outcome: the three possible trade results
- TradeRecord: a validated, immutable journal entry
- TradeFilter: query filters for fetching trades
"""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional

from .utils import parse_timestamp, to_utc

UNKNOWN_SETUP = "Unknown"


class TradeValidationError(ValueError):
    """Raised when a trade record fails validation."""

    def __init__(self, field_name: str, message: str):
        self.field_name = field_name
        super().__init__(f"{field_name}: {message}")


class Outcome(str, Enum):
    """Trade result. Values match what the trades table stores."""

    WIN = "Win"
    LOSS = "Loss"
    BREAKEVEN = "BE"

    @classmethod
    def parse(cls, value: Any) -> "Outcome":
        """
        Parse an outcome from user or database input.

        Args:
            value: Outcome instance or string ("Win", "Loss", "BE", "Breakeven"...)

        Returns:
            Matching Outcome

        Raises:
            TradeValidationError: If the value is not a known outcome
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            normalized = value.strip().lower().replace(" ", "").replace("-", "")
            if normalized in _OUTCOME_ALIASES:
                return _OUTCOME_ALIASES[normalized]
        raise TradeValidationError("outcome", f"unknown outcome {value!r}")


_OUTCOME_ALIASES = {
    "win": Outcome.WIN,
    "loss": Outcome.LOSS,
    "be": Outcome.BREAKEVEN,
    "breakeven": Outcome.BREAKEVEN,
}


def _optional_amount(field_name: str, value: Any) -> Optional[float]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, bool):
        raise TradeValidationError(field_name, f"not a number: {value!r}")
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise TradeValidationError(field_name, f"not a number: {value!r}") from None
    if math.isnan(amount) or math.isinf(amount):
        raise TradeValidationError(field_name, f"not a finite number: {value!r}")
    if amount < 0:
        raise TradeValidationError(field_name, f"must be non-negative, got {amount}")
    return amount


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _required_text(field_name: str, value: Any) -> str:
    text = _optional_text(value)
    if text is None:
        raise TradeValidationError(field_name, "is required")
    return text


@dataclass(frozen=True)
class TradeRecord:
    """
    A single journal entry.

    Records are immutable; aggregation reads them but never changes them.
    Use from_mapping() to build one from loosely-typed input.
    """

    id: str
    pair: str
    session_name: str
    trade_datetime: datetime
    outcome: Outcome
    setup: Optional[str] = None
    risk: Optional[float] = None
    reward: Optional[float] = None
    notes: Optional[str] = None
    screenshot_url: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.trade_datetime, datetime):
            raise TradeValidationError("trade_datetime", "must be a datetime")
        if not isinstance(self.outcome, Outcome):
            raise TradeValidationError("outcome", f"unknown outcome {self.outcome!r}")
        for name in ("risk", "reward"):
            amount = getattr(self, name)
            if amount is None:
                continue
            if isinstance(amount, bool) or not isinstance(amount, (int, float)):
                raise TradeValidationError(name, f"not a number: {amount!r}")
            if math.isnan(amount) or amount < 0:
                raise TradeValidationError(name, f"must be non-negative, got {amount}")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "TradeRecord":
        """
        Validate a dict-like trade (form input, JSON, database row).

        Accepts either "session_name" or "session" for the session label.
        A missing id gets a fresh uuid.

        Raises:
            TradeValidationError: On any malformed field
        """
        raw_dt = data.get("trade_datetime")
        if isinstance(raw_dt, datetime):
            trade_dt = raw_dt
        else:
            try:
                trade_dt = parse_timestamp(raw_dt)
            except (TypeError, ValueError):
                raise TradeValidationError(
                    "trade_datetime", f"unparseable timestamp {raw_dt!r}"
                ) from None

        session = data.get("session_name")
        if session is None:
            session = data.get("session")

        return cls(
            id=_optional_text(data.get("id")) or uuid.uuid4().hex,
            pair=_required_text("pair", data.get("pair")),
            session_name=_required_text("session_name", session),
            trade_datetime=trade_dt,
            outcome=Outcome.parse(data.get("outcome")),
            setup=_optional_text(data.get("setup")),
            risk=_optional_amount("risk", data.get("risk")),
            reward=_optional_amount("reward", data.get("reward")),
            notes=_optional_text(data.get("notes")),
            screenshot_url=_optional_text(data.get("screenshot_url")),
        )

    @property
    def risk_reward_ratio(self) -> Optional[float]:
        """reward / risk, or None when risk is zero/absent or reward is absent."""
        if self.risk is None or self.risk <= 0 or self.reward is None:
            return None
        return self.reward / self.risk

    @property
    def setup_label(self) -> str:
        return self.setup or UNKNOWN_SETUP

    @property
    def pnl(self) -> float:
        """Realized P&L: +reward on a win, -risk on a loss, else 0."""
        if self.outcome is Outcome.WIN and self.reward:
            return self.reward
        if self.outcome is Outcome.LOSS and self.risk:
            return -self.risk
        return 0.0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "pair": self.pair,
            "session_name": self.session_name,
            "trade_datetime": self.trade_datetime.isoformat(),
            "setup": self.setup,
            "risk": self.risk,
            "reward": self.reward,
            "risk_reward_ratio": self.risk_reward_ratio,
            "outcome": self.outcome.value,
            "notes": self.notes,
            "screenshot_url": self.screenshot_url,
        }


@dataclass
class TradeFilter:
    """Filters for fetching trades. Datetime bounds are inclusive."""

    start: Optional[datetime] = None
    end: Optional[datetime] = None
    pair: Optional[str] = None
    session_name: Optional[str] = None

    def matches(self, trade: TradeRecord) -> bool:
        """Check a record against the filter (for in-memory sources)."""
        when = to_utc(trade.trade_datetime)
        if self.start is not None and when < to_utc(self.start):
            return False
        if self.end is not None and when > to_utc(self.end):
            return False
        if self.pair is not None and trade.pair != self.pair:
            return False
        if self.session_name is not None and trade.session_name != self.session_name:
            return False
        return True

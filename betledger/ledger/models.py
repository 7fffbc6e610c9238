"""Ledger models: Pydantic records for accounts, transactions and bets.

These models are the normalization boundary between the ledger source and
the metrics engine. Records arrive as loosely-shaped mappings (camelCase
keys from the backend, missing fields, ``None`` where a number belongs) and
leave as fully-populated, frozen records:

  - missing / ``None`` numerics become ``0.0``
  - non-numeric amounts become ``NaN`` instead of raising
  - missing / ``None`` arrays become ``[]``
  - dates are parsed to timezone-aware datetimes, or ``None``

``status`` and ``type`` are never validated here; unknown values flow
through and are simply not matched by any accounting rule.
"""

from __future__ import annotations

import datetime as dt
import math
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


TRANSACTION_TYPES = (
    "deposit",
    "withdrawal",
    "bet",
    "bonus-bet",
    "bonus-credit",
    "historical-win",
    "historical-loss",
)
HISTORICAL_TYPES = frozenset({"historical-win", "historical-loss"})

BET_STATUSES = ("pending", "won", "lost")

DEFAULT_ACCOUNT_NAMES: dict[str, str] = {
    "draftkings1": "DraftKings #1",
    "draftkings2": "DraftKings #2",
    "fanduel": "FanDuel",
    "betmgm": "BetMGM",
    "bet365": "Bet365",
}

_EPOCH = dt.datetime.min.replace(tzinfo=dt.timezone.utc)


def _to_amount(value: Any) -> float:
    if value is None or value == "":
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def _to_datetime(value: Any) -> dt.datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, dt.datetime):
        parsed = value
    elif isinstance(value, dt.date):
        parsed = dt.datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = dt.datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt.timezone.utc)
    return parsed


class _LedgerRecord(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class LedgerEntry(_LedgerRecord):
    """A single transaction on an account (deposit, bonus credit, ...)."""
    id: str = ""
    type: str = ""
    amount: float = 0.0
    date: dt.datetime | None = None
    description: str = ""

    @field_validator("id", "type", "description", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, v: Any) -> float:
        return _to_amount(v)

    @field_validator("date", mode="before")
    @classmethod
    def coerce_date(cls, v: Any) -> dt.datetime | None:
        return _to_datetime(v)

    @property
    def is_historical(self) -> bool:
        return self.type in HISTORICAL_TYPES


class Bet(_LedgerRecord):
    """A wager; ``winnings`` is the total payout and only meaningful when won."""
    id: str = ""
    amount: float = 0.0
    date: dt.datetime | None = None
    status: str = "pending"
    winnings: float | None = None
    is_bonus_bet: bool = False
    description: str = ""

    @field_validator("id", "status", "description", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, v: Any) -> float:
        return _to_amount(v)

    @field_validator("winnings", mode="before")
    @classmethod
    def coerce_winnings(cls, v: Any) -> float | None:
        if v is None or v == "":
            return None
        return _to_amount(v)

    @field_validator("is_bonus_bet", mode="before")
    @classmethod
    def coerce_bonus_flag(cls, v: Any) -> bool:
        if isinstance(v, str):
            return v.strip().lower() in ("true", "1", "yes")
        return bool(v)

    @field_validator("date", mode="before")
    @classmethod
    def coerce_date(cls, v: Any) -> dt.datetime | None:
        return _to_datetime(v)

    @property
    def is_settled(self) -> bool:
        return self.status != "pending"

    @property
    def sort_key(self) -> dt.datetime:
        """Chronological key; undated bets sort first."""
        return self.date or _EPOCH


class Account(_LedgerRecord):
    """One betting-platform account and its ledger."""
    key: str = ""
    name: str = ""
    balance: float = 0.0
    total_deposits: float = 0.0
    total_withdrawals: float = 0.0
    transactions: list[LedgerEntry] = Field(default_factory=list)
    bets: list[Bet] = Field(default_factory=list)

    @field_validator("key", "name", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("balance", "total_deposits", "total_withdrawals", mode="before")
    @classmethod
    def coerce_amount(cls, v: Any) -> float:
        return _to_amount(v)

    @field_validator("transactions", "bets", mode="before")
    @classmethod
    def coerce_records(cls, v: Any) -> Any:
        return [] if v is None else v

    @property
    def has_betting_activity(self) -> bool:
        """Any bets, or any historical win/loss entries."""
        return bool(self.bets) or any(t.is_historical for t in self.transactions)


Portfolio = dict[str, Account]


def normalize_account(raw: Account | Mapping[str, Any], key: str | None = None) -> Account:
    """Build an ``Account`` from a raw mapping (or pass one through).

    ``key`` fills in the account key when the record does not carry one.
    """
    if isinstance(raw, Account):
        account = raw
    elif isinstance(raw, Mapping):
        account = Account.model_validate(dict(raw))
    else:
        raise ValueError(f"account {key!r}: expected a mapping, got {type(raw).__name__}")
    if key is not None and not account.key:
        account = account.model_copy(update={"key": key})
    return account


def normalize_portfolio(raw: Mapping[str, Account | Mapping[str, Any]] | None) -> Portfolio:
    """Normalize a mapping of account key -> account record, preserving order."""
    if not raw:
        return {}
    return {key: normalize_account(account, key=key) for key, account in raw.items()}

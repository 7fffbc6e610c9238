"""Load a portfolio snapshot from disk.

Formats:
  - ``.json`` / ``.yaml`` / ``.yml``: ``{key: account}`` or
    ``{"accounts": {key: account}}``, account records as the backend
    serves them (camelCase or snake_case keys).
  - ``.csv``: the dashboard export layout
    ``Account,Type,Amount,Description,Date,Status,Winnings,IsBonusBet``.
    Rows with a bet status (pending/won/lost) are bets, the rest are
    ledger entries. Running totals are rebuilt from the records.
"""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any, Iterable, Mapping

import yaml

from betledger.ledger.balances import with_recalculated_totals
from betledger.ledger.models import (
    BET_STATUSES,
    DEFAULT_ACCOUNT_NAMES,
    Account,
    Bet,
    LedgerEntry,
    Portfolio,
    normalize_portfolio,
)
from betledger.observability.logger import get_logger

log = get_logger(__name__)

CSV_COLUMNS = ("Account", "Type", "Amount", "Description", "Date", "Status", "Winnings", "IsBonusBet")


def _unwrap(raw: Any, source: Path) -> Mapping[str, Any]:
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise ValueError(f"{source}: expected a mapping of account key to account")
    if "accounts" in raw and isinstance(raw["accounts"], Mapping):
        return raw["accounts"]
    return raw


def parse_csv_rows(rows: Iterable[Mapping[str, str]]) -> Portfolio:
    """Group export rows into accounts, in first-seen account order."""
    grouped: dict[str, dict[str, list[Any]]] = {}
    for i, row in enumerate(rows):
        key = (row.get("Account") or "").strip()
        if not key:
            continue
        ledger = grouped.setdefault(key, {"transactions": [], "bets": []})
        status = (row.get("Status") or "").strip().lower()
        record_id = f"{key}-{i + 1}"
        if status in BET_STATUSES:
            ledger["bets"].append(Bet(
                id=record_id,
                amount=row.get("Amount"),
                date=row.get("Date"),
                status=status,
                winnings=row.get("Winnings") if status == "won" else None,
                is_bonus_bet=row.get("IsBonusBet") or False,
                description=row.get("Description"),
            ))
        else:
            ledger["transactions"].append(LedgerEntry(
                id=record_id,
                type=(row.get("Type") or "").strip().lower(),
                amount=row.get("Amount"),
                date=row.get("Date"),
                description=row.get("Description"),
            ))

    portfolio: Portfolio = {}
    for key, ledger in grouped.items():
        account = Account(
            key=key,
            name=DEFAULT_ACCOUNT_NAMES.get(key, key),
            transactions=ledger["transactions"],
            bets=ledger["bets"],
        )
        portfolio[key] = with_recalculated_totals(account)
    return portfolio


def load_portfolio(path: str | Path) -> Portfolio:
    """Read and normalize a portfolio snapshot."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"snapshot not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".json":
        with open(path) as f:
            portfolio = normalize_portfolio(_unwrap(json.load(f), path))
    elif suffix in (".yaml", ".yml"):
        with open(path) as f:
            try:
                raw = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"{path}: invalid YAML: {e}") from e
        portfolio = normalize_portfolio(_unwrap(raw, path))
    elif suffix == ".csv":
        with open(path, newline="") as f:
            reader = csv.DictReader(f)
            missing = [c for c in CSV_COLUMNS[:3] if c not in (reader.fieldnames or [])]
            if missing:
                raise ValueError(f"{path}: missing CSV columns {missing}")
            portfolio = parse_csv_rows(reader)
    else:
        raise ValueError(f"unsupported snapshot format {suffix!r} (use .json, .yaml or .csv)")

    log.debug(
        "ledger.loaded",
        path=str(path),
        accounts=len(portfolio),
        bets=sum(len(a.bets) for a in portfolio.values()),
        transactions=sum(len(a.transactions) for a in portfolio.values()),
    )
    return portfolio

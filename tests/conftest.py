"""Shared test fixtures."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import pytest

# Ensure the package is importable without installing
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))


def make_bet(
    amount: float,
    status: str,
    date: str = "2024-01-01",
    winnings: float | None = None,
    **extra: Any,
) -> dict[str, Any]:
    bet: dict[str, Any] = {"amount": amount, "status": status, "date": date}
    if winnings is not None:
        bet["winnings"] = winnings
    bet.update(extra)
    return bet


def make_txn(type_: str, amount: float, date: str = "2024-01-01", **extra: Any) -> dict[str, Any]:
    txn: dict[str, Any] = {"type": type_, "amount": amount, "date": date}
    txn.update(extra)
    return txn


@pytest.fixture
def sample_portfolio() -> dict[str, Any]:
    """Three accounts in backend (camelCase) shape."""
    return {
        "draftkings1": {
            "name": "DraftKings #1",
            "balance": 120.0,
            "totalDeposits": 200.0,
            "totalWithdrawals": 50.0,
            "transactions": [
                make_txn("deposit", 200.0),
                make_txn("historical-win", 64.0, date="2023-06-01"),
                make_txn("historical-loss", 25.0, date="2023-06-02"),
                make_txn("bonus-credit", 5.0),
            ],
            "bets": [
                make_bet(20.0, "won", date="2024-01-03", winnings=50.0),
                make_bet(50.0, "lost", date="2024-01-02"),
                make_bet(10.0, "pending", date="2024-01-04"),
            ],
        },
        "fanduel": {
            "name": "FanDuel",
            "balance": 40.0,
            "totalDeposits": 50.0,
            "totalWithdrawals": 0.0,
            "transactions": [make_txn("bonus-credit", 10.0)],
            "bets": [make_bet(10.0, "lost", date="2024-02-01")],
        },
        "betmgm": {
            "name": "BetMGM",
            "balance": 30.0,
            "totalDeposits": 50.0,
            "totalWithdrawals": 80.0,
        },
    }

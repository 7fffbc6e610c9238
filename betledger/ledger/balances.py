"""Running-total recalculation for accounts whose source has none.

The ledger backend keeps ``balance`` / ``total_deposits`` /
``total_withdrawals`` up to date as records are mutated. Sources that only
carry raw records (CSV exports) rebuild them here with the same rules.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from betledger.ledger.models import Account, Bet, LedgerEntry


@dataclass(frozen=True)
class RunningTotals:
    balance: float = 0.0
    total_deposits: float = 0.0
    total_withdrawals: float = 0.0


def recalculate_totals(
    transactions: Iterable[LedgerEntry],
    bets: Iterable[Bet],
) -> RunningTotals:
    """Rebuild an account's running totals from its ledger."""
    balance = 0.0
    deposits = 0.0
    withdrawals = 0.0

    for t in transactions:
        if t.type == "deposit":
            balance += t.amount
            deposits += t.amount
        elif t.type == "withdrawal":
            balance -= t.amount
            withdrawals += t.amount
        elif t.type in ("bonus-credit", "historical-win"):
            balance += t.amount
        elif t.type == "historical-loss":
            balance -= t.amount
        # bet / bonus-bet entries: stakes are carried by the bets themselves

    for b in bets:
        if not b.is_bonus_bet:
            balance -= b.amount
        if b.status == "won":
            balance += b.winnings or 0.0

    return RunningTotals(
        balance=balance,
        total_deposits=deposits,
        total_withdrawals=withdrawals,
    )


def with_recalculated_totals(account: Account) -> Account:
    """Return a copy of ``account`` with running totals rebuilt from its ledger."""
    totals = recalculate_totals(account.transactions, account.bets)
    return account.model_copy(update={
        "balance": totals.balance,
        "total_deposits": totals.total_deposits,
        "total_withdrawals": totals.total_withdrawals,
    })

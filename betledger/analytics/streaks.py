"""Win/loss streak tracking over settled bets.

A streak is a maximal run of consecutive settled bets with the same result.
Pending bets (and any unrecognised status) neither extend nor break a run.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping

from betledger.ledger.models import Account, Bet

WON = "won"
LOST = "lost"


@dataclass
class StreakTracker:
    """Running streak state; feed results in chronological order."""
    current: int = 0  # length of the open run
    last_result: str | None = None
    longest_win: int = 0
    longest_loss: int = 0

    def record(self, result: str) -> None:
        if result not in (WON, LOST):
            return
        if result == self.last_result:
            self.current += 1
            return
        self._close()
        self.current = 1
        self.last_result = result

    def record_bets(self, bets: Iterable[Bet]) -> None:
        for bet in bets:
            self.record(bet.status)

    def finish(self) -> StreakTracker:
        """Close the open run against the records. Safe to call more than once."""
        self._close()
        return self

    def _close(self) -> None:
        if self.last_result == WON:
            self.longest_win = max(self.longest_win, self.current)
        elif self.last_result == LOST:
            self.longest_loss = max(self.longest_loss, self.current)

    @property
    def signed_current(self) -> int:
        """Positive for a winning run, negative for a losing run, else 0."""
        if self.last_result == WON:
            return self.current
        if self.last_result == LOST:
            return -self.current
        return 0


def chronological(bets: Iterable[Bet]) -> list[Bet]:
    """Bets sorted by date; ties keep their original order."""
    return sorted(bets, key=lambda b: b.sort_key)


def portfolio_bet_sequence(portfolio: Mapping[str, Account], mode: str = "per_account") -> list[Bet]:
    """The order in which a portfolio's bets are walked for streaks.

    ``per_account``: each account's bets by date, accounts in portfolio order.
    ``chronological``: every bet merged by date; ties fall back to account
    order, then to the bet's position in its account.
    """
    per_account = [b for account in portfolio.values() for b in chronological(account.bets)]
    if mode == "per_account":
        return per_account
    if mode == "chronological":
        return chronological(per_account)
    raise ValueError(f"unknown streak mode {mode!r}")

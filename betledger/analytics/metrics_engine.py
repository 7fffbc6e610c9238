"""Portfolio metrics engine: ledger snapshot in, derived metrics out.

Two granularities:
  - ``compute_portfolio_totals``: every account's bets *and* ledger entries,
    with the withdrawal-surplus balance adjustment, historical wins/losses
    and the bonus-credit policy applied. Optionally carries a per-account
    breakdown.
  - ``compute_account_metrics``: one account's bets only.

Both are pure: inputs are normalized into fresh frozen records, nothing is
mutated, and no state survives between calls. Malformed numbers are not
rejected; they surface as NaN in the result.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from betledger.analytics.streaks import StreakTracker, chronological, portfolio_bet_sequence
from betledger.config import LedgerConfig
from betledger.ledger.models import Account, Bet, normalize_account, normalize_portfolio
from betledger.observability.logger import get_logger
from betledger.policy.bonus_policy import DEFAULT_POLICY, BonusCreditPolicy

log = get_logger(__name__)


def _ratio(numerator: float, denominator: float, scale: float = 1.0) -> float:
    """numerator / denominator * scale, or 0 for a zero denominator."""
    if denominator == 0:
        return 0.0
    return numerator / denominator * scale


def _rounded(value: float, digits: int) -> float | None:
    """Rounded for serialization; NaN serializes as None."""
    if math.isnan(value):
        return None
    return round(value, digits)


@dataclass(frozen=True)
class ProfitFactor:
    """Total wins / total losses, or the infinite marker when nothing was lost.

    ``value`` is meaningless when ``infinite`` is set.
    """
    value: float = 0.0
    infinite: bool = False

    @classmethod
    def finite(cls, value: float) -> ProfitFactor:
        return cls(value=value)

    @classmethod
    def from_totals(cls, wins: float, losses: float) -> ProfitFactor:
        if losses > 0:
            return cls.finite(wins / losses)
        if wins > 0:
            return INFINITE_PROFIT_FACTOR
        return cls.finite(0.0)

    def to_json(self) -> float | str | None:
        return "infinite" if self.infinite else _rounded(self.value, 4)

    def display(self) -> str:
        return "∞" if self.infinite else f"{self.value:.2f}"


INFINITE_PROFIT_FACTOR = ProfitFactor(infinite=True)


def risk_assessment(roi: float, win_rate: float) -> str:
    if roi > 5 and win_rate > 52:
        return "Excellent"
    if roi > 0:
        return "Good"
    return "Needs Improvement"


@dataclass
class _BetTally:
    """Accumulates settled-bet figures for one account."""
    total: int = 0
    placed: int = 0
    won: int = 0
    lost: int = 0
    pending: int = 0
    wagered: float = 0.0
    net_wins: float = 0.0  # sum of (winnings - stake) over won bets
    payouts: float = 0.0  # sum of winnings over won bets
    losses: float = 0.0
    biggest_win: float = 0.0
    biggest_loss: float = 0.0

    def add(self, bet: Bet) -> None:
        self.total += 1
        if not bet.is_settled:
            self.pending += 1
            return

        self.placed += 1
        self.wagered += bet.amount

        if bet.status == "won":
            payout = bet.winnings or 0.0
            net = payout - bet.amount
            self.won += 1
            self.payouts += payout
            self.net_wins += net
            if net > self.biggest_win:
                self.biggest_win = net
        elif bet.status == "lost":
            self.lost += 1
            self.losses += bet.amount
            if bet.amount > self.biggest_loss:
                self.biggest_loss = bet.amount


def _tally(bets: Iterable[Bet]) -> _BetTally:
    tally = _BetTally()
    for bet in bets:
        tally.add(bet)
    return tally


# ── Portfolio totals ────────────────────────────────────────────────


@dataclass(frozen=True)
class AccountBreakdown:
    """One account's contribution to the portfolio totals."""
    key: str
    name: str
    balance: float
    adjusted_balance: float
    surplus_profit: float
    bonus_credits: float
    historical_wins: float
    historical_losses: float
    bet_net_profit: float
    bet_losses: float
    net_pl: float
    total_bets: int
    pending_bets: int
    total_transactions: int
    has_betting_activity: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "name": self.name,
            "balance": _rounded(self.balance, 2),
            "adjusted_balance": _rounded(self.adjusted_balance, 2),
            "surplus_profit": _rounded(self.surplus_profit, 2),
            "bonus_credits": _rounded(self.bonus_credits, 2),
            "historical_wins": _rounded(self.historical_wins, 2),
            "historical_losses": _rounded(self.historical_losses, 2),
            "bet_net_profit": _rounded(self.bet_net_profit, 2),
            "bet_losses": _rounded(self.bet_losses, 2),
            "net_pl": _rounded(self.net_pl, 2),
            "total_bets": self.total_bets,
            "pending_bets": self.pending_bets,
            "total_transactions": self.total_transactions,
            "has_betting_activity": self.has_betting_activity,
        }


@dataclass(frozen=True)
class MetricsResult:
    """Portfolio-wide metrics. Counts include historical wins/losses."""
    total_deposits: float = 0.0
    total_withdrawals: float = 0.0
    total_balance: float = 0.0
    total_wins: float = 0.0
    total_losses: float = 0.0
    net_pl: float = 0.0
    total_bets_won: int = 0
    total_bets_lost: int = 0
    total_bets_placed: int = 0
    total_amount_wagered: float = 0.0
    win_rate: float = 0.0
    avg_bet_size: float = 0.0
    roi: float = 0.0
    avg_win: float = 0.0
    avg_loss: float = 0.0
    profit_factor: ProfitFactor = field(default_factory=ProfitFactor)
    longest_win_streak: int = 0
    longest_lose_streak: int = 0
    current_streak: int = 0  # positive = win streak, negative = loss streak
    biggest_win: float = 0.0
    biggest_loss: float = 0.0
    accounts: tuple[AccountBreakdown, ...] = ()

    @property
    def risk_assessment(self) -> str:
        return risk_assessment(self.roi, self.win_rate)

    def account(self, key: str) -> AccountBreakdown | None:
        for breakdown in self.accounts:
            if breakdown.key == key:
                return breakdown
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_deposits": _rounded(self.total_deposits, 2),
            "total_withdrawals": _rounded(self.total_withdrawals, 2),
            "total_balance": _rounded(self.total_balance, 2),
            "total_wins": _rounded(self.total_wins, 2),
            "total_losses": _rounded(self.total_losses, 2),
            "net_pl": _rounded(self.net_pl, 2),
            "total_bets_won": self.total_bets_won,
            "total_bets_lost": self.total_bets_lost,
            "total_bets_placed": self.total_bets_placed,
            "total_amount_wagered": _rounded(self.total_amount_wagered, 2),
            "win_rate": _rounded(self.win_rate, 2),
            "avg_bet_size": _rounded(self.avg_bet_size, 2),
            "roi": _rounded(self.roi, 2),
            "avg_win": _rounded(self.avg_win, 2),
            "avg_loss": _rounded(self.avg_loss, 2),
            "profit_factor": self.profit_factor.to_json(),
            "longest_win_streak": self.longest_win_streak,
            "longest_lose_streak": self.longest_lose_streak,
            "current_streak": self.current_streak,
            "biggest_win": _rounded(self.biggest_win, 2),
            "biggest_loss": _rounded(self.biggest_loss, 2),
            "risk_assessment": self.risk_assessment,
            "accounts": [a.to_dict() for a in self.accounts],
        }


def compute_portfolio_totals(
    portfolio: Mapping[str, Account | Mapping[str, Any]] | None,
    policy: BonusCreditPolicy | None = None,
    streak_mode: str = "per_account",
    include_accounts: bool = True,
) -> MetricsResult:
    """Aggregate every account's ledger into portfolio-wide metrics."""
    accounts = normalize_portfolio(portfolio)
    policy = policy or DEFAULT_POLICY

    total_deposits = 0.0
    total_withdrawals = 0.0
    total_balance = 0.0
    total_wins = 0.0
    total_losses = 0.0
    total_wagered = 0.0
    bets_won = 0
    bets_lost = 0
    bets_placed = 0
    historical_won = 0
    historical_lost = 0
    biggest_win = 0.0
    biggest_loss = 0.0
    breakdowns: list[AccountBreakdown] = []

    for key, account in accounts.items():
        total_deposits += account.total_deposits
        total_withdrawals += account.total_withdrawals

        # Withdrawal-only legacy accounts: the surplus is profit, the balance is not trusted
        active = account.has_betting_activity
        adjusted_balance = account.balance
        surplus = 0.0
        if not active:
            withdrawal_surplus = account.total_withdrawals - account.total_deposits
            if withdrawal_surplus > 0:
                surplus = withdrawal_surplus
                adjusted_balance = 0.0
        total_balance += adjusted_balance
        total_wins += surplus

        hist_wins = 0.0
        hist_losses = 0.0
        bonus = 0.0
        bonus_is_profit = policy.counts_as_profit(key)
        for t in account.transactions:
            if t.type == "historical-win":
                historical_won += 1
                hist_wins += t.amount
                if t.amount > biggest_win:
                    biggest_win = t.amount
            elif t.type == "historical-loss":
                historical_lost += 1
                hist_losses += t.amount
                total_wagered += t.amount
                if t.amount > biggest_loss:
                    biggest_loss = t.amount
            elif t.type == "bonus-credit" and bonus_is_profit:
                bonus += t.amount
        total_wins += hist_wins + bonus
        total_losses += hist_losses

        tally = _tally(chronological(account.bets))
        total_wins += tally.net_wins
        total_losses += tally.losses
        total_wagered += tally.wagered
        bets_won += tally.won
        bets_lost += tally.lost
        bets_placed += tally.placed
        if tally.biggest_win > biggest_win:
            biggest_win = tally.biggest_win
        if tally.biggest_loss > biggest_loss:
            biggest_loss = tally.biggest_loss

        if include_accounts:
            breakdowns.append(AccountBreakdown(
                key=key,
                name=account.name or key,
                balance=account.balance,
                adjusted_balance=adjusted_balance,
                surplus_profit=surplus,
                bonus_credits=bonus,
                historical_wins=hist_wins,
                historical_losses=hist_losses,
                bet_net_profit=tally.net_wins,
                bet_losses=tally.losses,
                net_pl=(tally.net_wins + hist_wins + bonus + surplus)
                - (tally.losses + hist_losses),
                total_bets=tally.total,
                pending_bets=tally.pending,
                total_transactions=len(account.transactions),
                has_betting_activity=active,
            ))

    streaks = StreakTracker()
    streaks.record_bets(portfolio_bet_sequence(accounts, streak_mode))
    streaks.finish()

    won = bets_won + historical_won
    lost = bets_lost + historical_lost
    placed = bets_placed + historical_won + historical_lost
    net_pl = total_wins - total_losses

    result = MetricsResult(
        total_deposits=total_deposits,
        total_withdrawals=total_withdrawals,
        total_balance=total_balance,
        total_wins=total_wins,
        total_losses=total_losses,
        net_pl=net_pl,
        total_bets_won=won,
        total_bets_lost=lost,
        total_bets_placed=placed,
        total_amount_wagered=total_wagered,
        win_rate=_ratio(won, placed, 100),
        avg_bet_size=_ratio(total_wagered, placed),
        roi=_ratio(net_pl, total_wagered, 100),
        avg_win=_ratio(total_wins, won),
        avg_loss=_ratio(total_losses, lost),
        profit_factor=ProfitFactor.from_totals(total_wins, total_losses),
        longest_win_streak=streaks.longest_win,
        longest_lose_streak=streaks.longest_loss,
        current_streak=streaks.signed_current,
        biggest_win=biggest_win,
        biggest_loss=biggest_loss,
        accounts=tuple(breakdowns),
    )
    log.debug(
        "metrics.portfolio_computed",
        accounts=len(accounts),
        bets_placed=placed,
        net_pl=round(net_pl, 2),
        streak_mode=streak_mode,
    )
    return result


# ── Single-account metrics ──────────────────────────────────────────


@dataclass(frozen=True)
class AccountMetrics:
    """Bet-only metrics for one account (ledger entries are not considered)."""
    total_bets: int = 0
    completed_bets: int = 0
    won_bets: int = 0
    lost_bets: int = 0
    pending_bets: int = 0
    total_wagered: float = 0.0
    total_winnings: float = 0.0  # gross payouts of won bets
    total_losses: float = 0.0
    win_rate: float = 0.0
    net_pl: float = 0.0
    roi: float = 0.0
    avg_bet_size: float = 0.0
    avg_win_amount: float = 0.0  # net profit per won bet
    avg_loss_amount: float = 0.0
    profit_factor: ProfitFactor = field(default_factory=ProfitFactor)
    longest_win_streak: int = 0
    longest_lose_streak: int = 0
    current_streak: int = 0
    biggest_win: float = 0.0
    biggest_loss: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_bets": self.total_bets,
            "completed_bets": self.completed_bets,
            "won_bets": self.won_bets,
            "lost_bets": self.lost_bets,
            "pending_bets": self.pending_bets,
            "total_wagered": _rounded(self.total_wagered, 2),
            "total_winnings": _rounded(self.total_winnings, 2),
            "total_losses": _rounded(self.total_losses, 2),
            "win_rate": _rounded(self.win_rate, 2),
            "net_pl": _rounded(self.net_pl, 2),
            "roi": _rounded(self.roi, 2),
            "avg_bet_size": _rounded(self.avg_bet_size, 2),
            "avg_win_amount": _rounded(self.avg_win_amount, 2),
            "avg_loss_amount": _rounded(self.avg_loss_amount, 2),
            "profit_factor": self.profit_factor.to_json(),
            "longest_win_streak": self.longest_win_streak,
            "longest_lose_streak": self.longest_lose_streak,
            "current_streak": self.current_streak,
            "biggest_win": _rounded(self.biggest_win, 2),
            "biggest_loss": _rounded(self.biggest_loss, 2),
        }


def compute_account_metrics(account: Account | Mapping[str, Any]) -> AccountMetrics:
    """Summarise one account's bets."""
    acct = normalize_account(account)
    bets = chronological(acct.bets)
    tally = _tally(bets)
    streaks = StreakTracker()
    streaks.record_bets(bets)
    streaks.finish()

    net_pl = tally.net_wins - tally.losses
    return AccountMetrics(
        total_bets=tally.total,
        completed_bets=tally.placed,
        won_bets=tally.won,
        lost_bets=tally.lost,
        pending_bets=tally.pending,
        total_wagered=tally.wagered,
        total_winnings=tally.payouts,
        total_losses=tally.losses,
        win_rate=_ratio(tally.won, tally.placed, 100),
        net_pl=net_pl,
        roi=_ratio(net_pl, tally.wagered, 100),
        avg_bet_size=_ratio(tally.wagered, tally.placed),
        avg_win_amount=_ratio(tally.net_wins, tally.won),
        avg_loss_amount=_ratio(tally.losses, tally.lost),
        profit_factor=ProfitFactor.from_totals(tally.net_wins, tally.losses),
        longest_win_streak=streaks.longest_win,
        longest_lose_streak=streaks.longest_loss,
        current_streak=streaks.signed_current,
        biggest_win=tally.biggest_win,
        biggest_loss=tally.biggest_loss,
    )


class MetricsEngine:
    """Config-bound front end over the two compute functions."""

    def __init__(
        self,
        policy: BonusCreditPolicy | None = None,
        streak_mode: str = "per_account",
        include_accounts: bool = True,
    ):
        self._policy = policy or DEFAULT_POLICY
        self._streak_mode = streak_mode
        self._include_accounts = include_accounts

    @classmethod
    def from_config(cls, cfg: LedgerConfig) -> MetricsEngine:
        return cls(
            policy=BonusCreditPolicy.from_config(cfg.bonus_policy),
            streak_mode=cfg.analytics.streak_mode,
            include_accounts=cfg.analytics.include_accounts,
        )

    def portfolio_totals(
        self,
        portfolio: Mapping[str, Account | Mapping[str, Any]],
        include_accounts: bool | None = None,
    ) -> MetricsResult:
        if include_accounts is None:
            include_accounts = self._include_accounts
        return compute_portfolio_totals(
            portfolio,
            policy=self._policy,
            streak_mode=self._streak_mode,
            include_accounts=include_accounts,
        )

    def account_metrics(self, account: Account | Mapping[str, Any]) -> AccountMetrics:
        return compute_account_metrics(account)

"""Bonus-credit accounting policy.

Some platforms pay promotional credits that behave like profit (FanDuel's
site credits are withdrawable), others issue credits that only unlock bets.
The policy table decides, per account key, whether a ``bonus-credit``
ledger entry counts toward total wins.

Rule lookup order:
  1. exact account-key match
  2. first matching shell-style pattern, in declaration order
  3. the default rule
"""

from __future__ import annotations

from fnmatch import fnmatchcase
from typing import Mapping

from betledger.config import BonusPolicyConfig

PROFIT = "profit"
IGNORE = "ignore"
_RULES = frozenset({PROFIT, IGNORE})


class BonusCreditPolicy:
    """Per-account rule table for ``bonus-credit`` entries."""

    def __init__(
        self,
        rules: Mapping[str, str] | None = None,
        default_rule: str = IGNORE,
    ):
        table = dict(rules) if rules is not None else {"fanduel": PROFIT}
        for pattern, rule in [*table.items(), ("<default>", default_rule)]:
            if rule not in _RULES:
                raise ValueError(
                    f"unknown bonus-credit rule {rule!r} for {pattern!r}; "
                    f"expected one of {sorted(_RULES)}"
                )
        self._rules = table
        self._default = default_rule

    @classmethod
    def from_config(cls, cfg: BonusPolicyConfig) -> BonusCreditPolicy:
        return cls(rules=cfg.rules, default_rule=cfg.default_rule)

    def rule_for(self, account_key: str) -> str:
        if account_key in self._rules:
            return self._rules[account_key]
        for pattern, rule in self._rules.items():
            if fnmatchcase(account_key, pattern):
                return rule
        return self._default

    def counts_as_profit(self, account_key: str) -> bool:
        return self.rule_for(account_key) == PROFIT


DEFAULT_POLICY = BonusCreditPolicy()

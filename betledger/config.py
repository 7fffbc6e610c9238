"""Shared configuration loader and Pydantic settings.

Supports:
  - YAML file loading with defaults for every missing section
  - Analytics options (streak mode, per-account breakdowns)
  - Bonus-credit accounting policy table
  - Observability (log level/format/file, reports directory)
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field


_PROJECT_ROOT = Path(__file__).resolve().parent.parent


class AnalyticsConfig(BaseModel):
    """Metrics engine options."""
    # per_account: streaks walked account by account, in portfolio order
    # chronological: all accounts' bets merged by date before walking
    streak_mode: Literal["per_account", "chronological"] = "per_account"
    include_accounts: bool = True


class BonusPolicyConfig(BaseModel):
    """Which accounts count bonus credits as profit.

    Keys are account keys or shell-style patterns (``draftkings*``),
    values are ``profit`` or ``ignore``.
    """
    rules: dict[str, str] = Field(default_factory=lambda: {"fanduel": "profit"})
    default_rule: str = "ignore"


class ObservabilityConfig(BaseModel):
    log_level: str = "INFO"
    log_format: str = "json"
    log_file: str = ""
    reports_dir: str = "reports/"


class LedgerConfig(BaseModel):
    analytics: AnalyticsConfig = Field(default_factory=AnalyticsConfig)
    bonus_policy: BonusPolicyConfig = Field(default_factory=BonusPolicyConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


def load_config(path: str | Path | None = None) -> LedgerConfig:
    """Load config from YAML file, falling back to defaults."""
    if path is None:
        path = _PROJECT_ROOT / "config.yaml"
    path = Path(path)
    if path.exists():
        with open(path) as f:
            try:
                raw = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"{path}: invalid YAML: {e}") from e
        if not isinstance(raw, dict):
            raise ValueError(f"{path}: expected a mapping of config sections")
        return LedgerConfig(**raw)
    return LedgerConfig()

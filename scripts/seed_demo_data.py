"""Write a demo ledger snapshot for trying out the CLI.

    python scripts/seed_demo_data.py
    betledger totals data/demo_ledger.json
"""

from __future__ import annotations

import datetime as dt
import json
import random
import uuid
from pathlib import Path

_GAMES = [
    "Lakers vs Warriors", "Celtics ML", "Chiefs -3.5", "Yankees over 8.5",
    "Man City to win", "Oilers puck line", "Bucks vs Heat", "Eagles ML",
]


def _bets(rng: random.Random, start: dt.datetime, n: int) -> list[dict]:
    bets = []
    for i in range(n):
        stake = float(rng.choice([10, 20, 25, 50]))
        status = rng.choices(["won", "lost", "pending"], weights=[45, 45, 10])[0]
        bet = {
            "id": uuid.UUID(int=rng.getrandbits(128)).hex[:8],
            "amount": stake,
            "date": (start + dt.timedelta(days=i)).date().isoformat(),
            "status": status,
            "isBonusBet": rng.random() < 0.1,
            "description": rng.choice(_GAMES),
        }
        if status == "won":
            bet["winnings"] = round(stake * rng.uniform(1.6, 2.8), 2)
        bets.append(bet)
    return bets


def seed(path: str | Path = "data/demo_ledger.json", seed_value: int = 7) -> Path:
    rng = random.Random(seed_value)
    start = dt.datetime(2025, 1, 1, tzinfo=dt.timezone.utc)

    accounts = {
        "draftkings1": {
            "name": "DraftKings #1",
            "balance": 240.0,
            "totalDeposits": 500.0,
            "totalWithdrawals": 150.0,
            "transactions": [
                {"type": "deposit", "amount": 500.0, "date": "2024-12-20"},
                {"type": "historical-win", "amount": 64.0, "date": "2024-11-02", "description": "Win ID: CB79926D"},
                {"type": "historical-loss", "amount": 25.0, "date": "2024-11-03", "description": "Bet ID: 168D1CAA"},
                {"type": "bonus-credit", "amount": 1.0, "date": "2024-12-21"},
            ],
            "bets": _bets(rng, start, 24),
        },
        "fanduel": {
            "name": "FanDuel",
            "balance": 95.0,
            "totalDeposits": 200.0,
            "totalWithdrawals": 0.0,
            "transactions": [
                {"type": "deposit", "amount": 200.0, "date": "2025-01-05"},
                {"type": "bonus-credit", "amount": 20.0, "date": "2025-01-06"},
            ],
            "bets": _bets(rng, start + dt.timedelta(days=5), 12),
        },
        "betmgm": {
            "name": "BetMGM",
            "balance": 30.0,
            "totalDeposits": 50.0,
            "totalWithdrawals": 80.0,
        },
    }

    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps({"accounts": accounts}, indent=2))
    return out


if __name__ == "__main__":
    written = seed()
    print(f"✅ Demo ledger written to {written}")

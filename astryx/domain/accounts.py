from typing import Optional

from ..persistence import accounts as repo
from .models import Account, LeaderboardRow

METRICS = ("coins", "xp")

def get(con, user_id) -> Optional[Account]:
    row = repo.get(con, str(user_id))
    return Account.from_row(row) if row else None

def ensure(con, user_id, now: int, *, display_name: str = "", is_bot: bool = False,
           starting_balance: int = 1000) -> Account:
    repo.ensure(con, str(user_id), display_name, is_bot, int(starting_balance), int(now))
    return Account.from_row(repo.get(con, str(user_id)))

def leaderboard(con, metric: str = "coins", limit: int = 10) -> list[LeaderboardRow]:
    if metric not in METRICS:
        raise ValueError(f"unknown leaderboard metric: {metric!r}")
    return [
        LeaderboardRow(rank=i, user_id=r["user_id"], display_name=r["display_name"],
                       coins=int(r["coins"]), xp=int(r["xp"]), level=int(r["level"]))
        for i, r in enumerate(repo.top(con, metric, max(1, int(limit))), start=1)
    ]

def credit(con, user_id, amount: int, now: int) -> None:
    if amount < 0:
        raise ValueError("amount must be >= 0")
    if amount:
        repo.add_coins(con, str(user_id), int(amount), int(now))

def debit(con, user_id, amount: int, now: int) -> bool:
    """Atomic conditional debit; False when the balance does not cover it."""
    if amount < 0:
        raise ValueError("amount must be >= 0")
    if not amount:
        return True
    return repo.add_coins(con, str(user_id), -int(amount), int(now))

def add_xp(con, user_id, amount: int, now: int) -> None:
    if amount < 0:
        raise ValueError("amount must be >= 0")
    if amount:
        repo.add_xp(con, str(user_id), int(amount), int(now))

def set_daily(con, user_id, streak: int, now: int) -> None:
    repo.set_daily(con, str(user_id), int(streak), int(now))

def set_last_work(con, user_id, now: int) -> None:
    repo.set_last_work(con, str(user_id), int(now))

def incr_rob_attempts(con, user_id, now: int) -> None:
    repo.incr_rob_attempts(con, str(user_id), int(now))

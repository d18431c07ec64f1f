from ..domain.progression import XP_PER_LEVEL

_COLS = ("user_id, display_name, is_bot, coins, xp, level, daily_streak, "
         "last_daily, last_work, rob_attempts, created_ts, updated_ts")

def get(con, user_id: str):
    return con.execute(f"SELECT {_COLS} FROM accounts WHERE user_id=?", (user_id,)).fetchone()

def ensure(con, user_id: str, display_name: str, is_bot: bool, starting_balance: int, now: int) -> None:
    con.execute(
        "INSERT INTO accounts(user_id, display_name, is_bot, coins, xp, level, created_ts, updated_ts) "
        "VALUES(?,?,?,?,0,1,?,?) ON CONFLICT(user_id) DO NOTHING",
        (user_id, display_name or "", int(bool(is_bot)), int(starting_balance), int(now), int(now))
    )
    if display_name:
        con.execute("UPDATE accounts SET display_name=? WHERE user_id=? AND display_name<>?",
                    (display_name, user_id, display_name))

def add_coins(con, user_id: str, delta: int, now: int) -> bool:
    # Debits only apply while the balance covers them
    cur = con.execute(
        "UPDATE accounts SET coins = coins + ?, updated_ts=? WHERE user_id=? AND coins + ? >= 0",
        (int(delta), int(now), user_id, int(delta))
    )
    return cur.rowcount == 1

def add_xp(con, user_id: str, delta: int, now: int) -> None:
    # SET sees the pre-update xp, so level is derived from the new total
    con.execute(
        "UPDATE accounts SET xp = xp + ?, level = (xp + ?) / ? + 1, updated_ts=? WHERE user_id=?",
        (int(delta), int(delta), XP_PER_LEVEL, int(now), user_id)
    )

def set_daily(con, user_id: str, streak: int, now: int) -> None:
    con.execute("UPDATE accounts SET daily_streak=?, last_daily=?, updated_ts=? WHERE user_id=?",
                (int(streak), int(now), int(now), user_id))

def set_last_work(con, user_id: str, now: int) -> None:
    con.execute("UPDATE accounts SET last_work=?, updated_ts=? WHERE user_id=?", (int(now), int(now), user_id))

def incr_rob_attempts(con, user_id: str, now: int) -> None:
    con.execute("UPDATE accounts SET rob_attempts = rob_attempts + 1, updated_ts=? WHERE user_id=?",
                (int(now), user_id))

_METRICS = {"coins": "coins", "xp": "xp"}

def top(con, metric: str, limit: int = 10):
    col = _METRICS[metric]
    return con.execute(
        f"SELECT user_id, display_name, coins, xp, level FROM accounts WHERE is_bot=0 "
        f"ORDER BY {col} DESC, user_id ASC LIMIT ?",
        (int(limit),)
    ).fetchall()

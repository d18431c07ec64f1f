def get_expiry(con, user_id: str, command: str) -> int | None:
    row = con.execute("SELECT expires_at FROM cooldowns WHERE user_id=? AND command=?", (user_id, command)).fetchone()
    return int(row[0]) if row else None

def delete_expired(con, user_id: str, command: str, now: int) -> None:
    con.execute("DELETE FROM cooldowns WHERE user_id=? AND command=? AND expires_at<=?",
                (user_id, command, int(now)))

def acquire(con, user_id: str, command: str, expires_at: int, now: int) -> bool:
    # Insert, or take over an expired row; a live row is left untouched
    cur = con.execute(
        "INSERT INTO cooldowns(user_id, command, expires_at) VALUES(?,?,?) "
        "ON CONFLICT(user_id, command) DO UPDATE SET expires_at=excluded.expires_at "
        "WHERE cooldowns.expires_at<=?",
        (user_id, command, int(expires_at), int(now))
    )
    return cur.rowcount == 1

def shift(con, user_id: str, command: str, seconds: int) -> bool:
    cur = con.execute("UPDATE cooldowns SET expires_at = expires_at - ? WHERE user_id=? AND command=?",
                      (int(seconds), user_id, command))
    return cur.rowcount == 1

def list_active(con, user_id: str, now: int):
    return con.execute(
        "SELECT command, expires_at FROM cooldowns WHERE user_id=? AND expires_at>? ORDER BY expires_at ASC",
        (user_id, int(now))
    ).fetchall()

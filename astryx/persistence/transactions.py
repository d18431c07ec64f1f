import json

def append(con, user_id: str, type_: str, amount: int | None, target_user_id: str | None,
           item_id: int | None, metadata: dict | None, ts: int) -> None:
    con.execute(
        "INSERT INTO transactions(user_id, type, amount, target_user_id, item_id, metadata_json, ts) "
        "VALUES(?,?,?,?,?,?,?)",
        (user_id, type_, amount, target_user_id, item_id,
         json.dumps(metadata or {}, ensure_ascii=False, default=str), int(ts))
    )

def recent(con, user_id: str, limit: int = 10):
    return con.execute(
        "SELECT id, user_id, type, amount, target_user_id, item_id, metadata_json, ts "
        "FROM transactions WHERE user_id=? ORDER BY ts DESC, id DESC LIMIT ?",
        (user_id, int(limit))
    ).fetchall()

def count(con, user_id: str | None = None) -> int:
    if user_id is None:
        (n,) = con.execute("SELECT COUNT(*) FROM transactions").fetchone()
    else:
        (n,) = con.execute("SELECT COUNT(*) FROM transactions WHERE user_id=?", (user_id,)).fetchone()
    return int(n)

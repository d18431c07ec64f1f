def get_inventory(con, user_id: str):
    return con.execute(
        "SELECT i.item_id, i.name, i.description, i.price, i.category, i.rarity, i.effect_json, inv.qty "
        "FROM inventory inv JOIN items i ON i.item_id = inv.item_id "
        "WHERE inv.user_id=? ORDER BY i.price DESC, i.item_id ASC",
        (user_id,)
    ).fetchall()

def get_qty(con, user_id: str, item_id: int) -> int:
    row = con.execute("SELECT qty FROM inventory WHERE user_id=? AND item_id=?", (user_id, int(item_id))).fetchone()
    return int(row[0]) if row else 0

def add_item(con, user_id: str, item_id: int, qty: int = 1):
    if qty <= 0: return
    con.execute(
        "INSERT INTO inventory(user_id, item_id, qty) VALUES(?,?,?) "
        "ON CONFLICT(user_id, item_id) DO UPDATE SET qty = qty + excluded.qty",
        (user_id, int(item_id), int(qty))
    )

def remove_item(con, user_id: str, item_id: int, qty: int = 1) -> bool:
    # Exact quantity: the row goes away, never sits at 0
    cur = con.execute("DELETE FROM inventory WHERE user_id=? AND item_id=? AND qty=?",
                      (user_id, int(item_id), int(qty)))
    if cur.rowcount == 1:
        return True
    cur = con.execute("UPDATE inventory SET qty = qty - ? WHERE user_id=? AND item_id=? AND qty > ?",
                      (int(qty), user_id, int(item_id), int(qty)))
    return cur.rowcount == 1

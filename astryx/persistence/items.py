_COLS = "item_id, name, description, price, category, rarity, effect_json"

def list_items(con, category: str | None = None):
    if category:
        return con.execute(f"SELECT {_COLS} FROM items WHERE category=? ORDER BY price ASC, item_id ASC",
                           (category,)).fetchall()
    return con.execute(f"SELECT {_COLS} FROM items ORDER BY price ASC, item_id ASC").fetchall()

def get(con, item_id: int):
    return con.execute(f"SELECT {_COLS} FROM items WHERE item_id=?", (int(item_id),)).fetchone()

def find_by_name(con, name: str):
    return con.execute(f"SELECT {_COLS} FROM items WHERE name = ? COLLATE NOCASE", (name.strip(),)).fetchone()

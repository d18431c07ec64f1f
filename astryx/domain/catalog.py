from typing import Optional

from ..persistence import items as repo
from .models import Category, Item

# Fixed recovery rate when selling back: 60%, floored
SELL_NUM, SELL_DEN = 3, 5

# Largest INTEGER sqlite can bind
MAX_ROWID = 2**63 - 1

def sell_price(item: Item) -> int:
    return item.price * SELL_NUM // SELL_DEN

def _is_item_id(s: str) -> bool:
    # ASCII only: "²".isdigit() is True but int("²") fails
    return s.isascii() and s.isdigit() and len(s) <= 19 and int(s) <= MAX_ROWID

def list_items(con, category: Category | str | None = None) -> list[Item]:
    cat = Category(category).value if category else None
    return [Item.from_row(r) for r in repo.list_items(con, cat)]

def find(con, ref) -> Optional[Item]:
    """Look an item up by numeric id or by name (case-insensitive)."""
    if ref is None:
        return None
    s = str(ref).strip()
    if not s:
        return None
    row = repo.get(con, int(s)) if _is_item_id(s) else None
    if row is None:
        row = repo.find_by_name(con, s)
    return Item.from_row(row) if row else None

from ..persistence import inventory as repo
from .models import InventoryEntry, Item

def snapshot(con, user_id) -> list[InventoryEntry]:
    return [InventoryEntry(item=Item.from_row(r), quantity=int(r["qty"])) for r in repo.get_inventory(con, str(user_id))]

def quantity(con, user_id, item_id: int) -> int:
    return repo.get_qty(con, str(user_id), int(item_id))

def add_item(con, user_id, item_id: int, qty: int = 1) -> None:
    repo.add_item(con, str(user_id), int(item_id), int(qty))

def remove_item(con, user_id, item_id: int, qty: int = 1) -> bool:
    if qty <= 0:
        raise ValueError("qty must be > 0")
    return repo.remove_item(con, str(user_id), int(item_id), int(qty))

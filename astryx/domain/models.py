# astryx/domain/models.py
from __future__ import annotations
import json
from enum import StrEnum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, TypeAdapter


class Category(StrEnum):
    TOOL = "tool"
    WEAPON = "weapon"
    COLLECTIBLE = "collectible"
    CONSUMABLE = "consumable"
    UPGRADE = "upgrade"


class Rarity(StrEnum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


class Command(StrEnum):
    """Actions gated by a cooldown."""
    DAILY = "daily"
    WORK = "work"
    ROB = "rob"


class ConsumableKind(StrEnum):
    XP_GRANT = "xp_grant"
    COIN_GRANT = "coin_grant"
    COOLDOWN_RESTORE = "cooldown_restore"


class TxType(StrEnum):
    DAILY = "daily"
    WORK = "work"
    PAY = "pay"
    ROB = "rob"
    SHOP_BUY = "shop_buy"
    SHOP_SELL = "shop_sell"
    USE_ITEM = "use_item"


# ───────── Effects (closed sum type, tagged by "type") ─────────
class WorkBoost(BaseModel):
    model_config = ConfigDict(frozen=True)
    type: Literal["work_boost"] = "work_boost"
    value: float = Field(ge=0)


class RobDefense(BaseModel):
    model_config = ConfigDict(frozen=True)
    type: Literal["rob_defense"] = "rob_defense"
    value: float = Field(ge=0)


class CooldownReduction(BaseModel):
    model_config = ConfigDict(frozen=True)
    type: Literal["cooldown_reduction"] = "cooldown_reduction"
    command: Command
    value: float = Field(gt=0)  # hours


class Consumable(BaseModel):
    model_config = ConfigDict(frozen=True)
    type: Literal["consumable"] = "consumable"
    effect: ConsumableKind
    value: int = Field(ge=0)
    # only for cooldown_restore; "all" hits every command
    command: Optional[Union[Command, Literal["all"]]] = None


class Passive(BaseModel):
    model_config = ConfigDict(frozen=True)
    type: Literal["passive"] = "passive"
    effect: str = ""


Effect = Annotated[
    Union[WorkBoost, RobDefense, CooldownReduction, Consumable, Passive],
    Field(discriminator="type"),
]

_EFFECT = TypeAdapter(Optional[Effect])

def parse_effect(raw: str | dict | None) -> Optional[Effect]:
    if raw is None or raw == "":
        return None
    if isinstance(raw, str):
        raw = json.loads(raw)
    return _EFFECT.validate_python(raw)


# ───────── Records ─────────
class Item(BaseModel):
    model_config = ConfigDict(frozen=True)

    item_id: int
    name: str
    description: str = ""
    price: PositiveInt
    category: Category
    rarity: Rarity
    effect: Optional[Effect] = None

    @classmethod
    def from_row(cls, row) -> "Item":
        return cls(
            item_id=int(row["item_id"]), name=row["name"], description=row["description"] or "",
            price=int(row["price"]), category=row["category"], rarity=row["rarity"],
            effect=parse_effect(row["effect_json"]),
        )


class InventoryEntry(BaseModel):
    item: Item
    quantity: PositiveInt


class Account(BaseModel):
    user_id: str
    display_name: str = ""
    is_bot: bool = False
    coins: int = Field(ge=0)
    xp: int = Field(ge=0)
    level: int = Field(ge=1)
    daily_streak: int = 0
    last_daily: Optional[int] = None
    last_work: Optional[int] = None
    rob_attempts: int = 0
    created_ts: int = 0
    updated_ts: int = 0

    @classmethod
    def from_row(cls, row) -> "Account":
        return cls(**{k: row[k] for k in row.keys()})


class ServerSettings(BaseModel):
    daily_amount: int = 500
    daily_cooldown_hours: int = 24
    work_min_amount: int = 100
    work_max_amount: int = 500
    work_cooldown_hours: int = 4
    rob_success_rate: float = 0.40
    rob_cooldown_hours: int = 12
    rob_penalty_percent: float = 0.20
    xp_multiplier: float = 1.00


class LeaderboardRow(BaseModel):
    rank: int
    user_id: str
    display_name: str
    coins: int
    xp: int
    level: int


class AuditEntry(BaseModel):
    user_id: str
    type: TxType
    amount: Optional[int] = None
    target_user_id: Optional[str] = None
    item_id: Optional[int] = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    ts: int = 0


class Profile(BaseModel):
    account: Account
    inventory: list[InventoryEntry] = Field(default_factory=list)
    recent: list[AuditEntry] = Field(default_factory=list)

    @property
    def inventory_value(self) -> int:
        """Shop price of everything held, quantities included."""
        return sum(e.item.price * e.quantity for e in self.inventory)

    @property
    def net_worth(self) -> int:
        return self.account.coins + self.inventory_value

    @property
    def total_items(self) -> int:
        return sum(e.quantity for e in self.inventory)

    @property
    def unique_items(self) -> int:
        return len(self.inventory)

# astryx/domain/outcomes.py
from __future__ import annotations
from datetime import timedelta
from enum import StrEnum
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, Field

from .models import Account, Command, Item


class Action(StrEnum):
    DAILY = "daily"
    WORK = "work"
    PAY = "pay"
    ROB = "rob"
    SHOP_BUY = "shop_buy"
    SHOP_SELL = "shop_sell"
    USE_ITEM = "use_item"


class ActionRequest(BaseModel):
    action: Action
    user_id: str
    display_name: str = ""
    target_id: Optional[str] = None
    target_name: str = ""
    target_is_bot: bool = False
    amount: Optional[int] = None
    item: Optional[str] = None  # id or name


# ───────── Rejections ─────────
class Rejected(BaseModel):
    @property
    def ok(self) -> bool:
        return False


class OnCooldown(Rejected):
    kind: Literal["on_cooldown"] = "on_cooldown"
    command: Command
    remaining: timedelta


class InsufficientFunds(Rejected):
    kind: Literal["insufficient_funds"] = "insufficient_funds"
    required: int
    available: int


class InvalidTarget(Rejected):
    kind: Literal["invalid_target"] = "invalid_target"
    reason: str


class InvalidAmount(Rejected):
    kind: Literal["invalid_amount"] = "invalid_amount"
    amount: Optional[int] = None


class ItemNotFound(Rejected):
    kind: Literal["item_not_found"] = "item_not_found"
    item: str = ""


class NotOwned(Rejected):
    kind: Literal["not_owned"] = "not_owned"
    item: str = ""


class NotUsable(Rejected):
    kind: Literal["not_usable"] = "not_usable"
    item: str = ""


Rejection = Union[OnCooldown, InsufficientFunds, InvalidTarget, InvalidAmount, ItemNotFound, NotOwned, NotUsable]


# ───────── Success ─────────
class Success(BaseModel):
    kind: Literal["success"] = "success"
    action: Action
    account: Account
    coins_delta: int = 0
    xp_gain: int = 0
    leveled_up: bool = False
    target: Optional[Account] = None
    item: Optional[Item] = None
    details: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return True


Outcome = Union[Success, Rejection]


class Reject(Exception):
    """Raised inside a handler to abort the transaction with a user-facing reason."""

    def __init__(self, rejection: Rejected):
        super().__init__(getattr(rejection, "kind", "rejected"))
        self.rejection = rejection

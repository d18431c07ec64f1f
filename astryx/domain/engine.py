# astryx/domain/engine.py
"""Economy transaction engine.

Every action runs as one SQLite transaction (BEGIN IMMEDIATE):
read account + settings + inventory, validate, compute, write balances,
inventory and cooldown. A rejection raises `Reject` inside the transaction so
nothing is applied. Audit records are appended after COMMIT, best effort.

Balances move through atomic `coins = coins + ?` updates (debits are
conditional), and cooldowns are armed with a conditional insert: when two
requests race past the gate, only one can arm the cooldown and the other rolls
back as `on_cooldown`.
"""
from __future__ import annotations
import logging
import math
import random
import sqlite3
from datetime import timedelta
from fractions import Fraction
from typing import Callable, Optional

from astryx.core.errors import StoreUnavailable
from . import accounts, audit, catalog, cooldowns, effects, inventory, progression, server_settings
from .clock import HOUR_S, hours_between, now_ts
from .models import (
    Account, AuditEntry, Command, Consumable, InventoryEntry, Item,
    LeaderboardRow, Profile, ServerSettings, TxType,
)
from .outcomes import (
    Action, ActionRequest, InsufficientFunds, InvalidAmount, InvalidTarget,
    ItemNotFound, NotOwned, NotUsable, OnCooldown, Outcome, Reject, Success,
)

log = logging.getLogger("astryx.engine")

# ───────── Balance (not in server_settings) ─────────
DAILY_XP = 10
WORK_XP_PER_COINS = 10       # 1 xp per 10 coins earned
ROB_MIN_TARGET_COINS = 500   # not worth robbing below this
ROB_MIN_ROBBER_COINS = 100   # skin in the game
ROB_MIN_SUCCESS = 0.10       # nobody is unrobbable
ROB_STEAL_MIN = 0.10         # steal share drawn in [0.10, 0.30)
ROB_STEAL_SPAN = 0.20


def _floor_share(amount: int, share: float) -> int:
    # Exact on the decimal value: 100 * 0.29 gives 29, not 28
    return math.floor(int(amount) * Fraction(str(share)))


class ActionEngine:
    def __init__(
        self,
        db,
        *,
        rng: Optional[random.Random] = None,
        clock: Callable[[], int] = now_ts,
        starting_balance: int = 1000,
        strict_invariants: bool = True,
    ):
        self.db = db
        self.rng = rng or random.Random()
        self.clock = clock
        self.starting_balance = int(starting_balance)
        self.strict_invariants = bool(strict_invariants)

    # ───────── Entry point ─────────
    def invoke(self, req: ActionRequest) -> Outcome:
        handler = _HANDLERS[req.action]
        now = int(self.clock())
        try:
            with self.db.atomic() as con:
                result, entries = handler(self, con, req, now)
        except Reject as r:
            log.info("%s rejected for %s: %s", req.action.value, req.user_id, r.rejection.kind)
            return r.rejection
        except sqlite3.DatabaseError as e:
            log.exception("Store failure during %s for %s", req.action.value, req.user_id)
            raise StoreUnavailable(str(e)) from e

        audit.record(self.db, entries)
        log.info("%s ok for %s (coins %+d, xp +%d)", req.action.value, req.user_id,
                 result.coins_delta, result.xp_gain)
        return result

    # Shortcuts for callers that do not build requests themselves
    def daily(self, user_id, display_name: str = "") -> Outcome:
        return self.invoke(ActionRequest(action=Action.DAILY, user_id=str(user_id), display_name=display_name))

    def work(self, user_id, display_name: str = "") -> Outcome:
        return self.invoke(ActionRequest(action=Action.WORK, user_id=str(user_id), display_name=display_name))

    def pay(self, user_id, target_id, amount: int, *, display_name: str = "",
            target_name: str = "", target_is_bot: bool = False) -> Outcome:
        return self.invoke(ActionRequest(
            action=Action.PAY, user_id=str(user_id), display_name=display_name,
            target_id=str(target_id) if target_id is not None else None,
            target_name=target_name, target_is_bot=target_is_bot, amount=amount,
        ))

    def rob(self, user_id, target_id, *, display_name: str = "",
            target_name: str = "", target_is_bot: bool = False) -> Outcome:
        return self.invoke(ActionRequest(
            action=Action.ROB, user_id=str(user_id), display_name=display_name,
            target_id=str(target_id) if target_id is not None else None,
            target_name=target_name, target_is_bot=target_is_bot,
        ))

    def buy(self, user_id, item, display_name: str = "") -> Outcome:
        return self.invoke(ActionRequest(action=Action.SHOP_BUY, user_id=str(user_id),
                                         display_name=display_name, item=str(item)))

    def sell(self, user_id, item, display_name: str = "") -> Outcome:
        return self.invoke(ActionRequest(action=Action.SHOP_SELL, user_id=str(user_id),
                                         display_name=display_name, item=str(item)))

    def use(self, user_id, item, display_name: str = "") -> Outcome:
        return self.invoke(ActionRequest(action=Action.USE_ITEM, user_id=str(user_id),
                                         display_name=display_name, item=str(item)))

    # ───────── Read side ─────────
    def _read(self, fn):
        try:
            return fn(self.db.get_conn())
        except sqlite3.DatabaseError as e:
            log.exception("Store failure on read")
            raise StoreUnavailable(str(e)) from e

    def account(self, user_id, display_name: str = "", is_bot: bool = False) -> Account:
        """Account view; creates the account on first reference."""
        now = int(self.clock())
        try:
            with self.db.atomic() as con:
                return accounts.ensure(con, user_id, now, display_name=display_name, is_bot=is_bot,
                                       starting_balance=self.starting_balance)
        except sqlite3.DatabaseError as e:
            log.exception("Store failure on account %s", user_id)
            raise StoreUnavailable(str(e)) from e

    def settings(self) -> ServerSettings:
        return self._read(server_settings.load)

    def list_catalog(self, category=None) -> list[Item]:
        return self._read(lambda con: catalog.list_items(con, category))

    def find_item(self, ref) -> Optional[Item]:
        return self._read(lambda con: catalog.find(con, ref))

    def list_inventory(self, user_id) -> list[InventoryEntry]:
        return self._read(lambda con: inventory.snapshot(con, user_id))

    def leaderboard(self, metric: str = "coins", limit: int = 10) -> list[LeaderboardRow]:
        return self._read(lambda con: accounts.leaderboard(con, metric, limit))

    def cooldowns(self, user_id) -> dict[str, timedelta]:
        now = int(self.clock())
        return self._read(lambda con: cooldowns.active(con, user_id, now))

    def profile(self, user_id, display_name: str = "", is_bot: bool = False, recent: int = 5) -> Profile:
        """Account, holdings and latest audit records read in one transaction."""
        now = int(self.clock())
        try:
            with self.db.atomic() as con:
                acc = accounts.ensure(con, user_id, now, display_name=display_name, is_bot=is_bot,
                                      starting_balance=self.starting_balance)
                return Profile(account=acc, inventory=inventory.snapshot(con, acc.user_id),
                               recent=audit.recent(con, acc.user_id, recent))
        except sqlite3.DatabaseError as e:
            log.exception("Store failure on profile %s", user_id)
            raise StoreUnavailable(str(e)) from e

    # ───────── Shared steps ─────────
    def _actor(self, con, req: ActionRequest, now: int) -> Account:
        acc = accounts.ensure(con, req.user_id, now, display_name=req.display_name,
                              starting_balance=self.starting_balance)
        # Before any write: add_xp recomputes level and would hide a bad row
        progression.check_level(acc.user_id, acc.xp, acc.level, strict=self.strict_invariants)
        return acc

    def _check_target(self, req: ActionRequest, verb: str) -> None:
        if not req.target_id:
            raise Reject(InvalidTarget(reason=f"no one to {verb}"))
        if str(req.target_id) == str(req.user_id):
            raise Reject(InvalidTarget(reason=f"you cannot {verb} yourself"))
        if req.target_is_bot:
            raise Reject(InvalidTarget(reason=f"you cannot {verb} bots"))

    def _counterparty(self, con, req: ActionRequest, now: int, verb: str) -> Account:
        self._check_target(req, verb)
        target = accounts.ensure(con, req.target_id, now, display_name=req.target_name,
                                 starting_balance=self.starting_balance)
        if target.is_bot:
            raise Reject(InvalidTarget(reason=f"you cannot {verb} bots"))
        return target

    def _gate(self, con, user_id: str, command: Command, now: int) -> None:
        status = cooldowns.is_on_cooldown(con, user_id, command, now)
        if status.blocked:
            raise Reject(OnCooldown(command=command, remaining=status.remaining))

    def _arm(self, con, user_id: str, command: Command, hours: float, now: int) -> None:
        if not cooldowns.acquire(con, user_id, command, hours, now):
            status = cooldowns.is_on_cooldown(con, user_id, command, now)
            log.warning("Lost cooldown race on %s for %s", command.value, user_id)
            raise Reject(OnCooldown(command=command, remaining=status.remaining))

    def _debit(self, con, account: Account, amount: int, now: int) -> None:
        if not accounts.debit(con, account.user_id, amount, now):
            raise Reject(InsufficientFunds(required=amount, available=account.coins))

    def _reload(self, con, user_id: str) -> Account:
        acc = accounts.get(con, user_id)
        progression.check_level(acc.user_id, acc.xp, acc.level, strict=self.strict_invariants)
        return acc

    def _item(self, con, req: ActionRequest) -> Item:
        item = catalog.find(con, req.item)
        if item is None:
            raise Reject(ItemNotFound(item=req.item or ""))
        return item

    # ───────── Handlers ─────────
    def _daily(self, con, req: ActionRequest, now: int):
        st = server_settings.load(con)
        actor = self._actor(con, req, now)
        uid = actor.user_id
        self._gate(con, uid, Command.DAILY, now)

        hours_since = None if actor.last_daily is None else hours_between(actor.last_daily, now)
        if hours_since is not None and hours_since < progression.STREAK_MIN_H:
            left = actor.last_daily + progression.STREAK_MIN_H * HOUR_S - now
            raise Reject(OnCooldown(command=Command.DAILY, remaining=timedelta(seconds=left)))

        streak = progression.next_streak(actor.daily_streak, hours_since)
        bonus = progression.streak_bonus(streak)
        reward = st.daily_amount + bonus
        xp_gain = progression.scaled_xp(DAILY_XP, st.xp_multiplier)

        accounts.credit(con, uid, reward, now)
        accounts.add_xp(con, uid, xp_gain, now)
        accounts.set_daily(con, uid, streak, now)
        self._arm(con, uid, Command.DAILY, st.daily_cooldown_hours, now)

        after = self._reload(con, uid)
        result = Success(
            action=Action.DAILY, account=after, coins_delta=reward, xp_gain=xp_gain,
            leveled_up=after.level > actor.level,
            details={"base": st.daily_amount, "streak": streak, "streak_bonus": bonus,
                     "cooldown_hours": st.daily_cooldown_hours},
        )
        entry = AuditEntry(user_id=uid, type=TxType.DAILY, amount=reward,
                           metadata={"streak": streak, "xp_gain": xp_gain}, ts=now)
        return result, [entry]

    def _work(self, con, req: ActionRequest, now: int):
        st = server_settings.load(con)
        actor = self._actor(con, req, now)
        uid = actor.user_id
        self._gate(con, uid, Command.WORK, now)

        inv = inventory.snapshot(con, uid)
        base = self.rng.randint(st.work_min_amount, st.work_max_amount)
        boost = effects.work_boost(inv)
        boost_amount = _floor_share(base, boost.value)
        total = base + boost_amount
        xp_gain = progression.scaled_xp(total // WORK_XP_PER_COINS, st.xp_multiplier)
        cooldown = effects.cooldown_hours(inv, Command.WORK, st.work_cooldown_hours)

        accounts.credit(con, uid, total, now)
        accounts.add_xp(con, uid, xp_gain, now)
        accounts.set_last_work(con, uid, now)
        self._arm(con, uid, Command.WORK, cooldown.value, now)

        after = self._reload(con, uid)
        result = Success(
            action=Action.WORK, account=after, coins_delta=total, xp_gain=xp_gain,
            leveled_up=after.level > actor.level,
            details={"base": base, "boost": boost_amount, "boost_rate": boost.value,
                     "tool": boost.source, "cooldown_hours": cooldown.value,
                     "cooldown_items": list(cooldown.sources)},
        )
        entry = AuditEntry(user_id=uid, type=TxType.WORK, amount=total,
                           metadata={"base": base, "boost": boost_amount, "tool": boost.source,
                                     "xp_gain": xp_gain}, ts=now)
        return result, [entry]

    def _pay(self, con, req: ActionRequest, now: int):
        actor = self._actor(con, req, now)
        target = self._counterparty(con, req, now, "pay")
        amount = req.amount
        if amount is None or amount <= 0:
            raise Reject(InvalidAmount(amount=amount))
        if actor.coins < amount:
            raise Reject(InsufficientFunds(required=amount, available=actor.coins))

        # Same transaction: a failed credit rolls the debit back
        self._debit(con, actor, amount, now)
        accounts.credit(con, target.user_id, amount, now)

        after = self._reload(con, actor.user_id)
        target_after = self._reload(con, target.user_id)
        result = Success(action=Action.PAY, account=after, coins_delta=-amount, target=target_after,
                         details={"amount": amount})
        entries = [
            AuditEntry(user_id=actor.user_id, type=TxType.PAY, amount=-amount,
                       target_user_id=target.user_id, ts=now),
            AuditEntry(user_id=target.user_id, type=TxType.PAY, amount=amount,
                       target_user_id=actor.user_id, ts=now),
        ]
        return result, entries

    def _rob(self, con, req: ActionRequest, now: int):
        st = server_settings.load(con)
        actor = self._actor(con, req, now)
        uid = actor.user_id
        self._check_target(req, "rob")
        self._gate(con, uid, Command.ROB, now)
        target = self._counterparty(con, req, now, "rob")

        if target.coins < ROB_MIN_TARGET_COINS:
            raise Reject(InvalidTarget(reason=f"target needs at least {ROB_MIN_TARGET_COINS} coins"))
        if actor.coins < ROB_MIN_ROBBER_COINS:
            raise Reject(InsufficientFunds(required=ROB_MIN_ROBBER_COINS, available=actor.coins))

        defense = effects.rob_defense(inventory.snapshot(con, target.user_id))
        rate = max(ROB_MIN_SUCCESS, st.rob_success_rate - defense.value)
        success = self.rng.random() < rate

        if success:
            share = ROB_STEAL_MIN + self.rng.random() * ROB_STEAL_SPAN
            amount = math.floor(target.coins * share)
            self._debit(con, target, amount, now)
            accounts.credit(con, uid, amount, now)
            delta = amount
        else:
            amount = _floor_share(actor.coins, st.rob_penalty_percent)
            self._debit(con, actor, amount, now)
            delta = -amount
        accounts.incr_rob_attempts(con, uid, now)
        # Armed on both outcomes; reduction items do not apply to rob
        self._arm(con, uid, Command.ROB, st.rob_cooldown_hours, now)

        after = self._reload(con, uid)
        target_after = self._reload(con, target.user_id)
        result = Success(
            action=Action.ROB, account=after, coins_delta=delta, target=target_after,
            details={"success": success, "amount": amount, "defense": defense.value,
                     "defense_item": defense.source, "success_rate": rate},
        )
        entry = AuditEntry(user_id=uid, type=TxType.ROB, amount=delta, target_user_id=target.user_id,
                           metadata={"success": success, "defense": defense.value}, ts=now)
        return result, [entry]

    def _shop_buy(self, con, req: ActionRequest, now: int):
        item = self._item(con, req)
        actor = self._actor(con, req, now)
        if actor.coins < item.price:
            raise Reject(InsufficientFunds(required=item.price, available=actor.coins))

        self._debit(con, actor, item.price, now)
        inventory.add_item(con, actor.user_id, item.item_id, 1)

        after = self._reload(con, actor.user_id)
        result = Success(action=Action.SHOP_BUY, account=after, coins_delta=-item.price, item=item,
                         details={"quantity": inventory.quantity(con, actor.user_id, item.item_id)})
        entry = AuditEntry(user_id=actor.user_id, type=TxType.SHOP_BUY, amount=-item.price,
                           item_id=item.item_id, ts=now)
        return result, [entry]

    def _shop_sell(self, con, req: ActionRequest, now: int):
        item = self._item(con, req)
        actor = self._actor(con, req, now)
        if not inventory.remove_item(con, actor.user_id, item.item_id, 1):
            raise Reject(NotOwned(item=item.name))

        price = catalog.sell_price(item)
        accounts.credit(con, actor.user_id, price, now)

        after = self._reload(con, actor.user_id)
        result = Success(action=Action.SHOP_SELL, account=after, coins_delta=price, item=item,
                         details={"quantity": inventory.quantity(con, actor.user_id, item.item_id)})
        entry = AuditEntry(user_id=actor.user_id, type=TxType.SHOP_SELL, amount=price,
                           item_id=item.item_id, ts=now)
        return result, [entry]

    def _use_item(self, con, req: ActionRequest, now: int):
        item = self._item(con, req)
        actor = self._actor(con, req, now)
        uid = actor.user_id
        if inventory.quantity(con, uid, item.item_id) < 1:
            raise Reject(NotOwned(item=item.name))
        if not isinstance(item.effect, Consumable):
            raise Reject(NotUsable(item=item.name))

        grant = effects.resolve_consumable(item.effect)
        accounts.credit(con, uid, grant.coins, now)
        accounts.add_xp(con, uid, grant.xp, now)
        restored = {}
        if grant.restore_commands:
            restored = cooldowns.reduce(con, uid, grant.restore_commands, grant.restore_hours, now)
        if not inventory.remove_item(con, uid, item.item_id, 1):
            raise Reject(NotOwned(item=item.name))

        after = self._reload(con, uid)
        result = Success(
            action=Action.USE_ITEM, account=after, coins_delta=grant.coins, xp_gain=grant.xp,
            leveled_up=after.level > actor.level, item=item,
            details={"effect": item.effect.effect.value, "restored": restored,
                     "quantity": inventory.quantity(con, uid, item.item_id)},
        )
        entry = AuditEntry(user_id=uid, type=TxType.USE_ITEM, amount=grant.coins or None,
                           item_id=item.item_id, metadata={"effect": item.effect.model_dump(mode="json")}, ts=now)
        return result, [entry]


Handler = Callable[[ActionEngine, sqlite3.Connection, ActionRequest, int], tuple[Success, list[AuditEntry]]]

_HANDLERS: dict[Action, Handler] = {
    Action.DAILY: ActionEngine._daily,
    Action.WORK: ActionEngine._work,
    Action.PAY: ActionEngine._pay,
    Action.ROB: ActionEngine._rob,
    Action.SHOP_BUY: ActionEngine._shop_buy,
    Action.SHOP_SELL: ActionEngine._shop_sell,
    Action.USE_ITEM: ActionEngine._use_item,
}

_missing = set(Action) - set(_HANDLERS)
if _missing:
    raise RuntimeError(f"actions without a handler: {sorted(a.value for a in _missing)}")

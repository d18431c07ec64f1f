# astryx/domain/effects.py
from __future__ import annotations
from typing import Iterable, NamedTuple, Optional

from .models import (
    Command, Consumable, ConsumableKind, CooldownReduction, InventoryEntry,
    Passive, RobDefense, WorkBoost,
)

MIN_COOLDOWN_H = 1.0


class Modifier(NamedTuple):
    value: float
    sources: tuple[str, ...] = ()

    @property
    def source(self) -> Optional[str]:
        return self.sources[0] if self.sources else None


class ConsumableGrant(NamedTuple):
    xp: int = 0
    coins: int = 0
    restore_commands: tuple[Command, ...] = ()
    restore_hours: float = 0.0


def _best(entries: Iterable[InventoryEntry], kind: type) -> Modifier:
    best_value, best_name = 0.0, None
    for entry in entries:
        match entry.item.effect:
            case WorkBoost(value=v) if kind is WorkBoost and v > best_value:
                best_value, best_name = v, entry.item.name
            case RobDefense(value=v) if kind is RobDefense and v > best_value:
                best_value, best_name = v, entry.item.name
            case WorkBoost() | RobDefense() | CooldownReduction() | Consumable() | Passive() | None:
                pass
    return Modifier(best_value, (best_name,) if best_name else ())


def work_boost(entries: Iterable[InventoryEntry]) -> Modifier:
    """Only the single best tool counts: holding 0.10 and 0.25 gives 0.25."""
    return _best(entries, WorkBoost)


def rob_defense(defender_entries: Iterable[InventoryEntry]) -> Modifier:
    """Best defense held by the *target* of a robbery."""
    return _best(defender_entries, RobDefense)


def cooldown_hours(entries: Iterable[InventoryEntry], command: Command, base_hours: float) -> Modifier:
    """Cooldown for `command` after summing every matching reduction item, never under 1h."""
    total, names = 0.0, []
    for entry in entries:
        match entry.item.effect:
            case CooldownReduction(command=c, value=v) if c == command:
                total += v
                names.append(entry.item.name)
            case WorkBoost() | RobDefense() | CooldownReduction() | Consumable() | Passive() | None:
                pass
    return Modifier(max(MIN_COOLDOWN_H, float(base_hours) - total), tuple(names))


def resolve_consumable(effect: Consumable) -> ConsumableGrant:
    match effect.effect:
        case ConsumableKind.XP_GRANT:
            return ConsumableGrant(xp=effect.value)
        case ConsumableKind.COIN_GRANT:
            return ConsumableGrant(coins=effect.value)
        case ConsumableKind.COOLDOWN_RESTORE:
            if effect.command is None or effect.command == "all":
                commands = tuple(Command)
            else:
                commands = (Command(effect.command),)
            return ConsumableGrant(restore_commands=commands, restore_hours=float(effect.value))
    raise ValueError(f"unhandled consumable effect: {effect.effect!r}")


def describe(effect) -> str:
    match effect:
        case None:
            return "No special effect"
        case WorkBoost(value=v):
            return f"+{int(v * 100)}% work earnings"
        case RobDefense(value=v):
            return f"{int(v * 100)}% robbery protection"
        case CooldownReduction(command=c, value=v):
            return f"-{v:g}h {c} cooldown"
        case Consumable(effect=ConsumableKind.XP_GRANT, value=v):
            return f"+{v:,} XP"
        case Consumable(effect=ConsumableKind.COIN_GRANT, value=v):
            return f"+{v:,} coins"
        case Consumable(effect=ConsumableKind.COOLDOWN_RESTORE, command=c, value=v):
            return f"-{v}h {c or 'all'} cooldown"
        case Passive():
            return "Collectible"
    return "Special effect"

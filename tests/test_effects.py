"""Unit tests for item effect resolution (boosts, defense, cooldown reductions)."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from astryx.domain import effects
from astryx.domain.models import (
    Category, Command, Consumable, ConsumableKind, CooldownReduction, InventoryEntry,
    Item, Passive, Rarity, RobDefense, WorkBoost, parse_effect,
)

_next_id = iter(range(1, 10_000))


def _entry(name: str, effect, qty: int = 1, category: Category = Category.TOOL) -> InventoryEntry:
    item = Item(item_id=next(_next_id), name=name, price=100, category=category,
                rarity=Rarity.COMMON, effect=effect)
    return InventoryEntry(item=item, quantity=qty)


class TestWorkBoost:
    def test_best_tool_only(self):
        inv = [_entry("Fishing Rod", WorkBoost(value=0.10)), _entry("Mining Pickaxe", WorkBoost(value=0.25))]
        boost = effects.work_boost(inv)
        assert boost.value == 0.25
        assert boost.source == "Mining Pickaxe"

    def test_quantity_does_not_stack(self):
        boost = effects.work_boost([_entry("Fishing Rod", WorkBoost(value=0.10), qty=5)])
        assert boost.value == 0.10

    def test_no_tool(self):
        boost = effects.work_boost([_entry("Trophy", Passive(effect="display")), _entry("Rock", None)])
        assert boost.value == 0.0
        assert boost.source is None


class TestRobDefense:
    def test_max_of_held_defenses(self):
        inv = [_entry("Wooden Stick", RobDefense(value=0.05), category=Category.WEAPON),
               _entry("Bank Vault", RobDefense(value=0.50), category=Category.UPGRADE),
               _entry("Fishing Rod", WorkBoost(value=0.10))]
        assert effects.rob_defense(inv).value == 0.50


class TestCooldownHours:
    def test_reductions_sum(self):
        inv = [_entry("Coffee Machine", CooldownReduction(command=Command.WORK, value=1)),
               _entry("Personal Assistant", CooldownReduction(command=Command.WORK, value=2))]
        cd = effects.cooldown_hours(inv, Command.WORK, 4)
        assert cd.value == 1.0
        assert cd.sources == ("Coffee Machine", "Personal Assistant")

    def test_floor_at_one_hour(self):
        inv = [_entry("A", CooldownReduction(command=Command.WORK, value=2)),
               _entry("B", CooldownReduction(command=Command.WORK, value=2))]
        assert effects.cooldown_hours(inv, Command.WORK, 4).value == effects.MIN_COOLDOWN_H

    def test_other_command_ignored(self):
        inv = [_entry("Alarm", CooldownReduction(command=Command.DAILY, value=3))]
        assert effects.cooldown_hours(inv, Command.WORK, 4).value == 4.0


class TestConsumables:
    def test_xp_and_coin_grants(self):
        assert effects.resolve_consumable(Consumable(effect=ConsumableKind.XP_GRANT, value=250)).xp == 250
        assert effects.resolve_consumable(Consumable(effect=ConsumableKind.COIN_GRANT, value=3000)).coins == 3000

    def test_restore_single_command(self):
        grant = effects.resolve_consumable(
            Consumable(effect=ConsumableKind.COOLDOWN_RESTORE, value=4, command=Command.WORK))
        assert grant.restore_commands == (Command.WORK,)
        assert grant.restore_hours == 4.0

    def test_restore_all(self):
        grant = effects.resolve_consumable(
            Consumable(effect=ConsumableKind.COOLDOWN_RESTORE, value=24, command="all"))
        assert set(grant.restore_commands) == set(Command)


class TestParsing:
    def test_tagged_json(self):
        eff = parse_effect('{"type": "work_boost", "value": 0.25}')
        assert isinstance(eff, WorkBoost)
        assert eff.value == 0.25

    def test_empty_means_no_effect(self):
        assert parse_effect(None) is None
        assert parse_effect("") is None

    def test_unknown_tag_rejected(self):
        with pytest.raises(ValidationError):
            parse_effect({"type": "teleport", "value": 1})

    def test_describe(self):
        assert effects.describe(WorkBoost(value=0.25)) == "+25% work earnings"
        assert effects.describe(None) == "No special effect"
        assert effects.describe(Consumable(effect=ConsumableKind.XP_GRANT, value=1000)) == "+1,000 XP"

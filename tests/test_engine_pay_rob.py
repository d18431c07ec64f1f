"""End-to-end tests for transfers and robberies."""

from __future__ import annotations

from datetime import timedelta

import pytest

from astryx.domain.outcomes import (
    InsufficientFunds, InvalidAmount, InvalidTarget, OnCooldown, Success,
)


class TestPay:
    def test_transfer_moves_both_balances(self, engine, audit_count):
        out = engine.pay("u1", "u2", 400, display_name="Alice", target_name="Bob")
        assert isinstance(out, Success)
        assert out.account.coins == 600
        assert out.target.coins == 1400
        assert out.target.display_name == "Bob"
        assert audit_count("u1") == 1
        assert audit_count("u2") == 1

    def test_whole_balance_allowed(self, engine):
        out = engine.pay("u1", "u2", 1000)
        assert out.ok
        assert out.account.coins == 0

    def test_overdraft_rejected_without_change(self, engine, audit_count):
        out = engine.pay("u1", "u2", 1500)
        assert isinstance(out, InsufficientFunds)
        assert (out.required, out.available) == (1500, 1000)
        assert engine.account("u1").coins == 1000
        assert engine.account("u2").coins == 1000
        assert audit_count() == 0

    def test_self_payment_rejected(self, engine):
        out = engine.pay("u1", "u1", 10)
        assert isinstance(out, InvalidTarget)

    def test_bot_target_rejected(self, engine):
        out = engine.pay("u1", "b1", 10, target_is_bot=True)
        assert isinstance(out, InvalidTarget)
        assert engine.account("u1").coins == 1000

    @pytest.mark.parametrize("amount", [0, -5])
    def test_non_positive_amount_rejected(self, engine, amount):
        assert isinstance(engine.pay("u1", "u2", amount), InvalidAmount)

    def test_no_target(self, engine):
        assert isinstance(engine.pay("u1", None, 10), InvalidTarget)


class TestRobPreconditions:
    def test_poor_target_rejected_without_mutation(self, engine, set_coins, audit_count):
        set_coins("v1", 400)
        out = engine.rob("u1", "v1")
        assert isinstance(out, InvalidTarget)
        assert engine.cooldowns("u1") == {}
        assert engine.account("u1").rob_attempts == 0
        assert audit_count() == 0

    def test_poor_robber_rejected(self, engine, set_coins):
        set_coins("u1", 50)
        set_coins("v1", 5000)
        out = engine.rob("u1", "v1")
        assert isinstance(out, InsufficientFunds)
        assert out.required == 100
        assert engine.account("v1").coins == 5000

    def test_self_rob_rejected(self, engine):
        assert isinstance(engine.rob("u1", "u1"), InvalidTarget)

    def test_bot_rejected_from_interaction_flag(self, engine):
        assert isinstance(engine.rob("u1", "b1", target_is_bot=True), InvalidTarget)

    def test_bot_rejected_from_stored_flag(self, engine, set_coins):
        set_coins("b1", 5000, is_bot=True)
        assert isinstance(engine.rob("u1", "b1"), InvalidTarget)


class TestRobOutcome:
    def test_success_steals_share(self, engine, rng, audit_count):
        rng.floats.extend([0.0, 0.0])  # success, then the minimum 10% share
        out = engine.rob("u1", "v1")
        assert out.details["success"] is True
        assert out.coins_delta == 100
        assert out.account.coins == 1100
        assert out.target.coins == 900
        assert out.account.rob_attempts == 1
        assert audit_count("u1") == 1

    def test_failure_pays_fine(self, engine, rng):
        rng.floats.append(0.99)
        out = engine.rob("u1", "v1")
        assert out.details["success"] is False
        assert out.coins_delta == -200
        assert out.account.coins == 800
        assert out.target.coins == 1000
        assert out.account.rob_attempts == 1

    def test_cooldown_armed_on_failure(self, engine, rng, clock):
        rng.floats.append(0.99)
        engine.rob("u1", "v1")
        clock.advance(hours=1)
        out = engine.rob("u1", "v1")
        assert isinstance(out, OnCooldown)
        assert out.remaining == timedelta(hours=11)

    def test_success_rate_never_below_floor(self, engine, rng, give_item):
        give_item("v1", "Bank Vault")
        rng.floats.extend([0.09, 0.0])
        out = engine.rob("u1", "v1")
        assert out.details["success_rate"] == pytest.approx(0.10)
        assert out.details["defense"] == 0.50
        assert out.details["success"] is True

    def test_defense_lowers_odds(self, engine, rng, give_item):
        give_item("v1", "Enchanted Sword")
        rng.floats.append(0.25)  # would succeed at the base 40%
        out = engine.rob("u1", "v1")
        assert out.details["success_rate"] == pytest.approx(0.20)
        assert out.details["success"] is False

"""Tests for the chat-facing formatting helpers."""

from __future__ import annotations

from datetime import timedelta

import pytest

from astryx.domain.models import Command
from astryx.domain.outcomes import (
    InsufficientFunds, InvalidAmount, InvalidTarget, ItemNotFound, NotOwned, NotUsable, OnCooldown,
)
from astryx.modules.common.money import fmt_coins, fmt_delta
from astryx.modules.common.render import fmt_duration, rejection_message
from astryx.modules.social.profile import _help_embed, _joined, _recent_lines


class TestMoney:
    def test_thousands_separator(self):
        assert fmt_coins(12500) == "12,500 🪙"

    def test_delta_sign(self):
        assert fmt_delta(100) == "+100 🪙"
        assert fmt_delta(-2500) == "-2,500 🪙"
        assert fmt_delta(0) == "0 🪙"


class TestDuration:
    @pytest.mark.parametrize(
        "td, text",
        [
            (timedelta(hours=3, minutes=5), "3h 05m"),
            (timedelta(minutes=2, seconds=7), "2m 07s"),
            (timedelta(seconds=42), "42s"),
            (timedelta(seconds=-5), "0s"),
        ],
    )
    def test_format(self, td, text):
        assert fmt_duration(td) == text


class TestRejectionMessage:
    def test_cooldown(self):
        msg = rejection_message(OnCooldown(command=Command.WORK, remaining=timedelta(hours=1)))
        assert "/work" in msg and "1h 00m" in msg

    def test_funds(self):
        msg = rejection_message(InsufficientFunds(required=2500, available=1500))
        assert "2,500" in msg and "1,500" in msg

    @pytest.mark.parametrize(
        "rejection, needle",
        [
            (InvalidTarget(reason="you cannot pay yourself"), "yourself"),
            (InvalidAmount(amount=0), "positive"),
            (ItemNotFound(item="Flux"), "Flux"),
            (NotOwned(item="Fishing Rod"), "Fishing Rod"),
            (NotUsable(item="Fishing Rod"), "consumables"),
        ],
    )
    def test_every_kind_has_text(self, rejection, needle):
        assert needle in rejection_message(rejection)


class TestProfileEmbeds:
    def test_joined_date(self):
        assert _joined(1_704_067_200) == "2024-01-01"
        assert _joined(0) == "unknown"

    def test_recent_activity_lines(self, engine, clock):
        assert _recent_lines(engine.profile("u1")) == "Nothing yet."
        engine.daily("u1")
        text = _recent_lines(engine.profile("u1"))
        assert f"<t:{clock.now}:R> **daily** +500 🪙" == text

    def test_help_lists_profile(self):
        e = _help_embed()
        assert any("/profile" in f.value for f in e.fields)

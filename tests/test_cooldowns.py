"""Tests for the cooldown gate against a real SQLite store."""

from __future__ import annotations

from datetime import timedelta

import pytest

from astryx.domain import accounts, cooldowns
from astryx.domain.models import Command
from astryx.persistence import cooldowns as repo

from conftest import T0


@pytest.fixture
def con(db):
    with db.atomic() as c:
        accounts.ensure(c, "u1", T0)
    return db.get_conn()


class TestGate:
    def test_no_row_is_not_blocked(self, con):
        status = cooldowns.is_on_cooldown(con, "u1", Command.WORK, T0)
        assert status.blocked is False
        assert status.remaining == timedelta(0)

    def test_live_row_blocks_with_remaining(self, con):
        cooldowns.acquire(con, "u1", Command.WORK, 4, T0)
        status = cooldowns.is_on_cooldown(con, "u1", Command.WORK, T0 + 3600)
        assert status.blocked is True
        assert status.remaining == timedelta(hours=3)

    def test_expired_row_is_deleted_on_read(self, con):
        cooldowns.acquire(con, "u1", Command.WORK, 4, T0)
        status = cooldowns.is_on_cooldown(con, "u1", Command.WORK, T0 + 4 * 3600)
        assert status.blocked is False
        assert repo.get_expiry(con, "u1", "work") is None


class TestAcquire:
    def test_second_acquire_loses(self, con):
        assert cooldowns.acquire(con, "u1", Command.ROB, 12, T0) is True
        assert cooldowns.acquire(con, "u1", Command.ROB, 12, T0 + 60) is False
        assert repo.get_expiry(con, "u1", "rob") == T0 + 12 * 3600

    def test_expired_row_is_taken_over(self, con):
        cooldowns.acquire(con, "u1", Command.ROB, 1, T0)
        assert cooldowns.acquire(con, "u1", Command.ROB, 12, T0 + 3600) is True
        assert repo.get_expiry(con, "u1", "rob") == T0 + 3600 + 12 * 3600


class TestReduce:
    def test_partial_and_full_clear(self, con):
        cooldowns.acquire(con, "u1", Command.WORK, 4, T0)
        cooldowns.acquire(con, "u1", Command.ROB, 12, T0)
        left = cooldowns.reduce(con, "u1", [Command.WORK, Command.ROB], 4, T0)
        assert left == {"work": timedelta(0), "rob": timedelta(hours=8)}
        assert repo.get_expiry(con, "u1", "work") is None
        assert cooldowns.active(con, "u1", T0) == {"rob": timedelta(hours=8)}

    def test_nothing_running(self, con):
        assert cooldowns.reduce(con, "u1", list(Command), 24, T0) == {}

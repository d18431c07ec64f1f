"""
Shared pytest fixtures for the Astryx economy test suite.

Every test gets its own SQLite file under ``tmp_path``, migrated to the
current schema and seeded with the starting catalog. The engine is built
with a controllable clock and a scripted random source so that rewards,
robbery rolls and cooldown expiry are deterministic.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Generator
from pathlib import Path

import pytest

from astryx.core.db.base import Database
from astryx.core.db.migrations import migrate_if_needed
from astryx.domain import accounts, catalog, inventory
from astryx.domain.clock import HOUR_S
from astryx.domain.engine import ActionEngine
from astryx.persistence import transactions

# Arbitrary fixed start: 2024-01-01 00:00:00 UTC
T0 = 1_704_067_200


class FakeClock:
    """Callable clock returning a settable unix timestamp."""

    def __init__(self, start: int = T0):
        self.now = int(start)

    def __call__(self) -> int:
        return self.now

    def advance(self, *, hours: float = 0, seconds: int = 0) -> int:
        self.now += int(round(hours * HOUR_S)) + int(seconds)
        return self.now


class ScriptedRandom:
    """Stand-in for ``random.Random`` that replays queued values.

    ``randint`` returns the next queued int (or the lower bound when the
    queue is empty); ``random`` returns the next queued float (or 0.99).
    """

    def __init__(self):
        self.ints: deque[int] = deque()
        self.floats: deque[float] = deque()

    def randint(self, a: int, b: int) -> int:
        value = self.ints.popleft() if self.ints else a
        assert a <= value <= b, f"scripted {value} outside [{a}, {b}]"
        return value

    def random(self) -> float:
        return self.floats.popleft() if self.floats else 0.99


# ============================================================================
# DATABASE FIXTURES
# ============================================================================


@pytest.fixture
def db(tmp_path: Path) -> Generator[Database, None, None]:
    """Fresh store migrated to the latest schema."""
    database = Database(str(tmp_path / "data" / "astryx-test.db"))
    with database.get_conn() as con:
        migrate_if_needed(con)
    yield database
    database.close()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rng() -> ScriptedRandom:
    return ScriptedRandom()


@pytest.fixture
def engine(db: Database, clock: FakeClock, rng: ScriptedRandom) -> ActionEngine:
    return ActionEngine(db, rng=rng, clock=clock, starting_balance=1000, strict_invariants=True)


# ============================================================================
# STATE HELPERS
# ============================================================================


@pytest.fixture
def set_coins(db: Database, clock: FakeClock):
    """Create the account if needed and force its balance."""

    def _set(user_id: str, coins: int, *, is_bot: bool = False) -> None:
        with db.atomic() as con:
            accounts.ensure(con, user_id, clock.now, is_bot=is_bot)
            con.execute("UPDATE accounts SET coins=? WHERE user_id=?", (int(coins), str(user_id)))

    return _set


@pytest.fixture
def give_item(db: Database, clock: FakeClock):
    """Put ``qty`` units of a catalog item (by name) in a user's inventory."""

    def _give(user_id: str, name: str, qty: int = 1) -> int:
        with db.atomic() as con:
            accounts.ensure(con, user_id, clock.now)
            item = catalog.find(con, name)
            assert item is not None, f"no catalog item {name!r}"
            inventory.add_item(con, user_id, item.item_id, qty)
            return item.item_id

    return _give


@pytest.fixture
def audit_count(db: Database):
    """Number of audit rows, optionally for one user."""

    def _count(user_id: str | None = None) -> int:
        return transactions.count(db.get_conn(), user_id)

    return _count

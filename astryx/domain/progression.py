# astryx/domain/progression.py
from __future__ import annotations
import logging
import math
from typing import Optional

from astryx.core.errors import InvariantViolation

log = logging.getLogger("astryx.progression")

XP_PER_LEVEL = 1000

# Daily streak window (hours since last claim)
STREAK_MIN_H = 24
STREAK_MAX_H = 48
STREAK_STEP = 50
STREAK_CAP = 500


def level_for(xp: int) -> int:
    return int(xp) // XP_PER_LEVEL + 1


def level_progress(xp: int) -> tuple[int, int, int]:
    """(xp earned inside the current level, xp per level, percent)."""
    into = int(xp) % XP_PER_LEVEL
    return into, XP_PER_LEVEL, into * 100 // XP_PER_LEVEL


def next_streak(previous: int, hours_since: Optional[float]) -> int:
    """Streak after a claim made `hours_since` hours after the previous one.

    No previous claim starts at 0. 24h..48h inclusive continues the streak,
    anything past 48h resets it. Under 24h the streak is left as is; callers
    are expected to refuse the claim.
    """
    if hours_since is None:
        return 0
    if STREAK_MIN_H <= hours_since <= STREAK_MAX_H:
        return int(previous) + 1
    if hours_since > STREAK_MAX_H:
        return 0
    return int(previous)


def streak_bonus(streak: int) -> int:
    return min(int(streak) * STREAK_STEP, STREAK_CAP)


def scaled_xp(base: int, multiplier: float) -> int:
    return max(0, math.floor(int(base) * float(multiplier)))


def check_level(user_id: str, xp: int, level: int, *, strict: bool = True) -> None:
    expected = level_for(xp)
    if int(level) == expected:
        return
    msg = f"level mismatch for {user_id}: stored={level} expected={expected} (xp={xp})"
    if strict:
        raise InvariantViolation(msg)
    log.error(msg)

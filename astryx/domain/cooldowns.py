# astryx/domain/cooldowns.py
from __future__ import annotations
import logging
import sqlite3
from datetime import timedelta
from typing import NamedTuple, Iterable

from ..persistence import cooldowns as repo
from .clock import HOUR_S
from .models import Command

log = logging.getLogger("astryx.cooldowns")


class CooldownStatus(NamedTuple):
    blocked: bool
    remaining: timedelta


NOT_BLOCKED = CooldownStatus(False, timedelta(0))


def hours_to_seconds(hours: float) -> int:
    return int(round(float(hours) * HOUR_S))


def is_on_cooldown(con, user_id, command: Command, now: int) -> CooldownStatus:
    uid, cmd = str(user_id), Command(command).value
    expires_at = repo.get_expiry(con, uid, cmd)
    if expires_at is None:
        return NOT_BLOCKED
    if expires_at > now:
        return CooldownStatus(True, timedelta(seconds=expires_at - now))
    # Stale row: clean it up, but a failed delete must not block the action
    try:
        repo.delete_expired(con, uid, cmd, now)
    except sqlite3.Error:
        log.warning("Stale cooldown cleanup failed (user=%s, command=%s)", uid, cmd, exc_info=True)
    return NOT_BLOCKED


def acquire(con, user_id, command: Command, hours: float, now: int) -> bool:
    """Arm the cooldown only if none is live. False means another request got there first."""
    expires_at = int(now) + hours_to_seconds(hours)
    return repo.acquire(con, str(user_id), Command(command).value, expires_at, int(now))


def reduce(con, user_id, commands: Iterable[Command], hours: float, now: int) -> dict[str, timedelta]:
    """Take `hours` off each live cooldown in `commands`; the ones that reach now are cleared.

    Returns what is left per command (timedelta(0) when cleared).
    """
    uid = str(user_id)
    seconds = hours_to_seconds(hours)
    left: dict[str, timedelta] = {}
    for command in commands:
        cmd = Command(command).value
        expires_at = repo.get_expiry(con, uid, cmd)
        if expires_at is None or expires_at <= now:
            continue
        repo.shift(con, uid, cmd, seconds)
        repo.delete_expired(con, uid, cmd, now)
        left[cmd] = timedelta(seconds=max(0, expires_at - seconds - now))
    return left


def active(con, user_id, now: int) -> dict[str, timedelta]:
    return {r["command"]: timedelta(seconds=int(r["expires_at"]) - now) for r in repo.list_active(con, str(user_id), now)}

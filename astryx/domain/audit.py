# astryx/domain/audit.py
from __future__ import annotations
import json
import logging
import sqlite3
from typing import Iterable

from astryx.core.errors import StoreUnavailable
from ..persistence import transactions as repo
from .models import AuditEntry

log = logging.getLogger("astryx.audit")


def record(db, entries: Iterable[AuditEntry]) -> int:
    """Append audit records after the economic change has been committed.

    Best effort: a failure is logged for operators and never reaches the
    caller, the balances already moved. Returns how many records were written.
    """
    entries = list(entries)
    if not entries:
        return 0
    try:
        with db.atomic() as con:
            for e in entries:
                repo.append(con, e.user_id, e.type.value, e.amount, e.target_user_id,
                            e.item_id, e.metadata, e.ts)
    except (sqlite3.Error, StoreUnavailable):
        log.exception("Audit write failed, %d record(s) lost: %s", len(entries),
                      [(e.user_id, e.type.value, e.amount) for e in entries])
        return 0
    return len(entries)


def recent(con, user_id, limit: int = 10) -> list[AuditEntry]:
    return [
        AuditEntry(user_id=r["user_id"], type=r["type"], amount=r["amount"],
                   target_user_id=r["target_user_id"], item_id=r["item_id"],
                   metadata=json.loads(r["metadata_json"] or "{}"), ts=int(r["ts"]))
        for r in repo.recent(con, str(user_id), int(limit))
    ]

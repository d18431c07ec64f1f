# astryx/core/errors.py
from __future__ import annotations


class EconomyError(Exception):
    """Base class for failures the chat layer should turn into a generic reply."""


class StoreUnavailable(EconomyError):
    """The ledger store could not be reached or locked. Nothing was applied."""


class InvariantViolation(EconomyError):
    """A derived value disagrees with its formula (e.g. level vs xp)."""

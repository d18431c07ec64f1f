# astryx/modules/common/money.py
from __future__ import annotations

COIN_EMOJI = "🪙"

def fmt_coins(amount: int) -> str:
    """
    Format a coin amount with thousands separators.
    Example: 12500 → '12,500 🪙'
    """
    return f"{int(amount):,} {COIN_EMOJI}"

def fmt_delta(amount: int) -> str:
    s = fmt_coins(abs(amount))
    if amount > 0:
        return f"+{s}"
    if amount < 0:
        return f"-{s}"
    return s

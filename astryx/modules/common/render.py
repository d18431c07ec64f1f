# astryx/modules/common/render.py
from __future__ import annotations
import logging
from datetime import timedelta

import discord
from discord import Interaction

from astryx.domain.models import Rarity
from astryx.domain.outcomes import (
    InsufficientFunds, InvalidAmount, InvalidTarget, ItemNotFound,
    NotOwned, NotUsable, OnCooldown, Rejected,
)
from astryx.modules.common.money import fmt_coins

log = logging.getLogger("astryx.render")

RARITY_EMOJIS = {
    Rarity.COMMON: "⚪",
    Rarity.UNCOMMON: "🟢",
    Rarity.RARE: "🔵",
    Rarity.EPIC: "🟣",
    Rarity.LEGENDARY: "🟠",
}

RARITY_COLORS = {
    Rarity.COMMON: discord.Color(0x95A5A6),
    Rarity.UNCOMMON: discord.Color(0x2ECC71),
    Rarity.RARE: discord.Color(0x3498DB),
    Rarity.EPIC: discord.Color(0x9B59B6),
    Rarity.LEGENDARY: discord.Color(0xF39C12),
}

GENERIC_ERROR = "❌ Something went wrong on our side. Nothing was changed, try again in a moment."


def fmt_duration(td: timedelta) -> str:
    total = max(0, int(td.total_seconds()))
    h, rem = divmod(total, 3600)
    m, s = divmod(rem, 60)
    if h:
        return f"{h}h {m:02d}m"
    if m:
        return f"{m}m {s:02d}s"
    return f"{s}s"


def rejection_message(r: Rejected) -> str:
    if isinstance(r, OnCooldown):
        return f"⏰ Slow down. You can use **/{r.command.value}** again in **{fmt_duration(r.remaining)}**."
    if isinstance(r, InsufficientFunds):
        return (f"💸 Not enough coins: you need **{fmt_coins(r.required)}** "
                f"but only have **{fmt_coins(r.available)}**.")
    if isinstance(r, InvalidTarget):
        return f"❌ Invalid target: {r.reason}."
    if isinstance(r, InvalidAmount):
        return "❌ The amount must be a positive number of coins."
    if isinstance(r, ItemNotFound):
        return f"❌ No item called **{r.item}** in the shop. Try `/shop list`."
    if isinstance(r, NotOwned):
        return f"📦 You don't own any **{r.item}**."
    if isinstance(r, NotUsable):
        return f"❌ **{r.item}** cannot be used, only consumables can."
    return "❌ That didn't work."


async def reply(inter: Interaction, content: str | None = None, *, embed: discord.Embed | None = None,
                ephemeral: bool = False) -> None:
    # The engine call already committed: a dead interaction only loses the message
    kwargs = {"ephemeral": ephemeral}
    if content is not None:
        kwargs["content"] = content
    if embed is not None:
        kwargs["embed"] = embed
    try:
        if inter.response.is_done():
            await inter.followup.send(**kwargs)
        else:
            await inter.response.send_message(**kwargs)
    except (discord.NotFound, discord.HTTPException):
        log.warning("Reply lost for interaction %s (user=%s)", getattr(inter, "id", None),
                    getattr(inter.user, "id", None), exc_info=True)


def display_name(user: discord.abc.User) -> str:
    return getattr(user, "display_name", None) or getattr(user, "global_name", None) or user.name

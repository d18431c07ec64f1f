# astryx/modules/social/profile.py
from __future__ import annotations
import logging
from datetime import datetime, timezone
from typing import Optional

import discord
from discord import app_commands, Interaction

from astryx.core.errors import EconomyError
from astryx.domain.models import Profile
from astryx.domain.progression import level_progress
from astryx.modules.common.money import fmt_coins, fmt_delta
from astryx.modules.common.render import GENERIC_ERROR, display_name, reply

log = logging.getLogger("astryx.profile")

RECENT_LINES = 5

# ─────────────────────────────
# Utils
# ─────────────────────────────
def _avatar_url(u: discord.abc.User, size: int = 256) -> str:
    try:
        return u.display_avatar.with_size(size).url
    except AttributeError:
        return ""

def _mask_id(user_id: int) -> str:
    s = str(user_id)
    return f"…{s[-4:]}" if len(s) >= 4 else "…"

def _joined(ts: int) -> str:
    if not ts:
        return "unknown"
    return datetime.fromtimestamp(int(ts), tz=timezone.utc).strftime("%Y-%m-%d")

def _recent_lines(prof: Profile) -> str:
    lines = []
    for e in prof.recent[:RECENT_LINES]:
        amount = fmt_delta(e.amount) if e.amount else "·"
        lines.append(f"<t:{e.ts}:R> **{e.type.value}** {amount}")
    return "\n".join(lines) or "Nothing yet."

# ─────────────────────────────
# Embeds
# ─────────────────────────────
def _profile_embed(prof: Profile, user: discord.abc.User) -> discord.Embed:
    acc = prof.account
    into, span, _ = level_progress(acc.xp)
    e = discord.Embed(title=f"🪪 {display_name(user)}'s Profile", color=discord.Color.blue())
    url = _avatar_url(user)
    if url:
        e.set_thumbnail(url=url)
    e.add_field(name="💰 Coins", value=fmt_coins(acc.coins), inline=True)
    e.add_field(name="💎 Net Worth", value=fmt_coins(prof.net_worth), inline=True)
    e.add_field(name="📊 Level", value=str(acc.level), inline=True)
    e.add_field(name="⭐ Total XP", value=f"{acc.xp:,}", inline=True)
    e.add_field(name="📈 Progress", value=f"{into}/{span} XP", inline=True)
    e.add_field(name="🔥 Daily Streak", value=f"{acc.daily_streak} days", inline=True)
    e.add_field(name="📦 Inventory", value=f"{prof.total_items} items ({prof.unique_items} unique)", inline=True)
    e.add_field(name="🎯 Robberies", value=f"{acc.rob_attempts} attempts", inline=True)
    e.add_field(name="📅 Joined", value=_joined(acc.created_ts), inline=True)
    e.add_field(name="🧾 Recent activity", value=_recent_lines(prof), inline=False)
    e.set_footer(text=f"Profile • UID {_mask_id(user.id)}")
    return e

def _help_embed() -> discord.Embed:
    e = discord.Embed(title="📚 Astryx Economy: Commands",
                      description="Earn coins, level up and collect items.",
                      color=discord.Color.blue())
    e.add_field(name="💰 Economy", inline=False, value=(
        "`/daily` claim your daily reward (streak bonuses!)\n"
        "`/work` work for coins (boosted by tools)\n"
        "`/balance [user]` balance and stats\n"
        "`/pay <user> <amount>` send coins\n"
        "`/rob <user>` try your luck (risky!)\n"
        "`/cooldowns` when each action is ready again"
    ))
    e.add_field(name="🏪 Shop & Inventory", inline=False, value=(
        "`/shop list [category]` browse the shop\n"
        "`/shop buy|sell|use <item>` trade and use items\n"
        "`/shop inventory` your items\n"
        "`/profile [user]` net worth and activity"
    ))
    e.add_field(name="🏆 Competition", inline=False, value="`/leaderboard [coins|xp]` top players")
    e.add_field(name="📊 Mechanics", inline=False, value=(
        "• **Levels**: 1,000 XP per level\n"
        "• **Daily streak**: claim every 24 to 48h for up to +500 coins\n"
        "• **Tools** boost work, only your best one counts\n"
        "• **Weapons** make you harder to rob\n"
        "• **Consumables** are burnt on use\n"
        "• **Selling** gives back 60% of the price"
    ))
    e.set_footer(text="Astryx Economy • Play fair!")
    return e

# ─────────────────────────────
# Slash commands
# ─────────────────────────────
def register(tree: app_commands.CommandTree, engine, guild_obj: discord.Object | None = None):
    scope = {"guild": guild_obj} if guild_obj else {}

    @tree.command(name="profile", description="Detailed profile: net worth, items, activity", **scope)
    @app_commands.describe(user="(optional) someone else")
    async def profile(inter: Interaction, user: Optional[discord.User] = None):
        target = user or inter.user
        if getattr(target, "bot", False):
            await reply(inter, "🤖 Bots don't have a profile here.", ephemeral=True)
            return
        try:
            prof = engine.profile(target.id, display_name(target))
        except EconomyError:
            log.exception("Profile lookup failed for %s", target.id)
            await reply(inter, GENERIC_ERROR, ephemeral=True)
            return
        await reply(inter, embed=_profile_embed(prof, target))

    @tree.command(name="help", description="All commands and how the economy works", **scope)
    async def help_(inter: Interaction):
        await reply(inter, embed=_help_embed(), ephemeral=True)

from __future__ import annotations
import asyncio, logging
from typing import Callable, Literal, Optional

import discord
from discord import app_commands, Interaction

from astryx.core.errors import EconomyError
from astryx.domain.engine import ActionEngine
from astryx.domain.models import Account
from astryx.domain.outcomes import Outcome, Success
from astryx.domain.progression import level_progress
from astryx.modules.common.money import fmt_coins, fmt_delta
from astryx.modules.common.render import (
    GENERIC_ERROR, display_name, fmt_duration, rejection_message, reply,
)

log = logging.getLogger("astryx.economy")

# ───────── Utils format/UX ─────────
def _medal(i: int) -> str:
    return "🥇" if i == 1 else "🥈" if i == 2 else "🥉" if i == 3 else "🏅"

def _progress_bar(elapsed: int, total: int, width: int = 10) -> tuple[str, int]:
    if total <= 0:
        return "──────────", 100
    pct = max(0.0, min(1.0, elapsed / total))
    filled = int(round(pct * width))
    return "█" * filled + "─" * (width - filled), int(pct * 100)

def _level_field(acc: Account) -> str:
    into, span, pct = level_progress(acc.xp)
    bar, _ = _progress_bar(into, span)
    return f"Level **{acc.level}**\n`{bar}` {into}/{span} XP ({pct}%)"

async def _run(inter: Interaction, fn: Callable[[], Outcome]) -> Optional[Outcome]:
    """Run one engine call; rejections are replied here and give None."""
    try:
        out = fn()
    except EconomyError:
        log.exception("Engine failure for %s (user=%s)", inter.command and inter.command.name, inter.user.id)
        await reply(inter, GENERIC_ERROR, ephemeral=True)
        return None
    if not out.ok:
        await reply(inter, rejection_message(out), ephemeral=True)
        return None
    return out

# ───────── Embeds & anim ─────────
def _daily_embed(out: Success) -> discord.Embed:
    d = out.details
    e = discord.Embed(title="💰 Daily Reward Claimed!",
                      description=f"You received **{fmt_coins(out.coins_delta)}** and **{out.xp_gain} XP**!",
                      color=discord.Color.green())
    e.add_field(name="💵 Base Reward", value=fmt_coins(d["base"]), inline=True)
    e.add_field(name="🔥 Streak Bonus", value=f"{fmt_coins(d['streak_bonus'])} ({d['streak']} days)", inline=True)
    e.add_field(name="📊 Level", value=_level_field(out.account), inline=True)
    e.set_footer(text=f"Come back in {d['cooldown_hours']} hours for your next reward!")
    return e

def _work_embed(out: Success) -> discord.Embed:
    d = out.details
    e = discord.Embed(title="💼 Work Complete!",
                      description=f"You earned **{fmt_coins(out.coins_delta)}** and **{out.xp_gain} XP**!",
                      color=discord.Color.blue())
    e.add_field(name="💵 Base Earnings", value=fmt_coins(d["base"]), inline=True)
    boost = f"+{fmt_coins(d['boost'])} ({d['tool']})" if d.get("tool") else "None"
    e.add_field(name="⚡ Boost", value=boost, inline=True)
    e.add_field(name="💰 Balance", value=fmt_coins(out.account.coins), inline=True)
    if out.leveled_up:
        e.add_field(name="🎉 Level up!", value=f"You're now level **{out.account.level}**", inline=False)
    e.set_footer(text=f"Cooldown: {d['cooldown_hours']:g} hours")
    return e

def _rob_embed(out: Success, target_label: str) -> discord.Embed:
    d = out.details
    if d["success"]:
        e = discord.Embed(title="💰 Robbery Successful!",
                          description=f"You robbed **{target_label}** and stole **{fmt_coins(d['amount'])}**!",
                          color=discord.Color.green())
        e.add_field(name="Your Balance", value=fmt_coins(out.account.coins), inline=True)
        e.add_field(name="Target Balance", value=fmt_coins(out.target.coins), inline=True)
        e.set_footer(text="Better luck next time for them!")
    else:
        e = discord.Embed(title="🚨 Robbery Failed!",
                          description=f"You were caught trying to rob **{target_label}** "
                                      f"and paid a **{fmt_coins(d['amount'])}** fine!",
                          color=discord.Color.red())
        e.add_field(name="Your Balance", value=fmt_coins(out.account.coins), inline=True)
        e.set_footer(text="Be more careful next time!")
    e.add_field(name="🛡️ Defense", value=f"{int(d['defense'] * 100)}%", inline=True)
    return e

def _balance_embed(acc: Account, user: discord.abc.User, cds: dict) -> discord.Embed:
    e = discord.Embed(title=f"{display_name(user)}'s Balance", color=discord.Color.gold())
    try:
        e.set_thumbnail(url=user.display_avatar.url)
    except AttributeError:
        pass
    e.add_field(name="💰 Coins", value=fmt_coins(acc.coins), inline=True)
    e.add_field(name="⭐ XP", value=f"{acc.xp:,}", inline=True)
    e.add_field(name="🔥 Daily Streak", value=f"{acc.daily_streak} days", inline=True)
    e.add_field(name="📊 Progress", value=_level_field(acc), inline=True)
    e.add_field(name="🎯 Rob Attempts", value=str(acc.rob_attempts), inline=True)
    if cds:
        lines = [f"/{cmd} — {fmt_duration(left)}" for cmd, left in cds.items()]
        e.add_field(name="⏳ Cooldowns", value="\n".join(lines), inline=False)
    return e

def _format_leaderboard(rows, metric: str) -> str:
    lines: list[str] = []
    for r in rows:
        value = fmt_coins(r.coins) if metric == "coins" else f"{r.xp:,} XP (lvl {r.level})"
        name = r.display_name or f"<@{r.user_id}>"
        lines.append(f"**{r.rank:>2}.** {name} — **{value}** {_medal(r.rank)}")
    return "\n".join(lines)

async def _play_anim_then_finalize(
    inter: Interaction,
    *,
    title: str,
    pre_lines: list[str],
    color: discord.Color,
    final_embed: discord.Embed,
    delay: float = 0.6
):
    try:
        anim = discord.Embed(title=title, description=pre_lines[0], color=color)
        await inter.response.send_message(embed=anim)
        msg = await inter.original_response()
        for line in pre_lines[1:]:
            await asyncio.sleep(delay)
            anim.description = line
            await msg.edit(embed=anim)
        await asyncio.sleep(delay)
        await msg.edit(embed=final_embed)
    except (discord.NotFound, discord.HTTPException):
        log.warning("Animation aborted for interaction %s", inter.id, exc_info=True)

# ───────── Slash ─────────
def register(tree: app_commands.CommandTree, engine: ActionEngine, guild_obj: discord.Object | None = None):
    scope = {"guild": guild_obj} if guild_obj else {}

    @tree.command(name="daily", description="Claim your daily reward with streak bonuses", **scope)
    async def daily(inter: Interaction):
        out = await _run(inter, lambda: engine.daily(inter.user.id, display_name(inter.user)))
        if out:
            await reply(inter, embed=_daily_embed(out))

    @tree.command(name="work", description="Work to earn coins (boosted by the tools you own)", **scope)
    async def work(inter: Interaction):
        out = await _run(inter, lambda: engine.work(inter.user.id, display_name(inter.user)))
        if out:
            await reply(inter, embed=_work_embed(out))

    @tree.command(name="pay", description="Transfer coins to another user", **scope)
    @app_commands.describe(user="Who gets the coins", amount="How many coins")
    async def pay(inter: Interaction, user: discord.User, amount: app_commands.Range[int, 1]):
        out = await _run(inter, lambda: engine.pay(
            inter.user.id, user.id, amount, display_name=display_name(inter.user),
            target_name=display_name(user), target_is_bot=user.bot,
        ))
        if not out:
            return
        e = discord.Embed(title="💸 Payment Successful!",
                          description=f"**{display_name(inter.user)}** paid **{display_name(user)}** {fmt_coins(amount)}",
                          color=discord.Color.green())
        e.add_field(name="Sender Balance", value=fmt_coins(out.account.coins), inline=True)
        e.add_field(name="Recipient Balance", value=fmt_coins(out.target.coins), inline=True)
        await reply(inter, embed=e)

    @tree.command(name="rob", description="Attempt to rob another user (risky!)", **scope)
    @app_commands.describe(user="Your victim")
    async def rob(inter: Interaction, user: discord.User):
        out = await _run(inter, lambda: engine.rob(
            inter.user.id, user.id, display_name=display_name(inter.user),
            target_name=display_name(user), target_is_bot=user.bot,
        ))
        if not out:
            return
        final_embed = _rob_embed(out, display_name(user))
        await _play_anim_then_finalize(
            inter,
            title="🦹 Robbery",
            pre_lines=["👀 You sneak up behind your target…", "🤏 Your hand slips into their pocket…",
                       f"💥 {fmt_delta(out.coins_delta)}"],
            color=discord.Color.dark_grey(),  # neutral until the outcome shows
            final_embed=final_embed,
        )

    @tree.command(name="balance", description="Check your balance and stats", **scope)
    @app_commands.describe(user="(optional) someone else")
    async def balance(inter: Interaction, user: Optional[discord.User] = None):
        target = user or inter.user
        try:
            acc = engine.account(target.id, display_name(target), is_bot=target.bot)
            cds = engine.cooldowns(target.id) if target.id == inter.user.id else {}
        except EconomyError:
            log.exception("Balance lookup failed for %s", target.id)
            await reply(inter, GENERIC_ERROR, ephemeral=True)
            return
        await reply(inter, embed=_balance_embed(acc, target, cds))

    @tree.command(name="cooldowns", description="See when your actions are available again", **scope)
    async def cooldowns(inter: Interaction):
        try:
            cds = engine.cooldowns(inter.user.id)
        except EconomyError:
            log.exception("Cooldown lookup failed for %s", inter.user.id)
            await reply(inter, GENERIC_ERROR, ephemeral=True)
            return
        lines = []
        for cmd in ("daily", "work", "rob"):
            left = cds.get(cmd)
            lines.append(f"⏳ **/{cmd}** — {fmt_duration(left)}" if left else f"✅ **/{cmd}** — ready")
        await reply(inter, "\n".join(lines), ephemeral=True)

    @tree.command(name="leaderboard", description="Top players by coins or XP", **scope)
    @app_commands.describe(metric="Rank by coins or xp")
    async def leaderboard(inter: Interaction, metric: Literal["coins", "xp"] = "coins"):
        try:
            rows = engine.leaderboard(metric, limit=10)
        except EconomyError:
            log.exception("Leaderboard failed")
            await reply(inter, GENERIC_ERROR, ephemeral=True)
            return
        if not rows:
            await reply(inter, "Nobody on the board yet. Try **/daily** or **/work**.", ephemeral=True)
            return
        e = discord.Embed(title=f"🏆 Leaderboard — {metric}", description=_format_leaderboard(rows, metric),
                          color=discord.Color.dark_gold())
        e.set_footer(text="Top 10")
        await reply(inter, embed=e)

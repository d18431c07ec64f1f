from __future__ import annotations
import logging
from typing import Optional

import discord
from discord import app_commands, Interaction

from astryx.core.errors import EconomyError
from astryx.domain.catalog import sell_price
from astryx.domain.effects import describe
from astryx.domain.engine import ActionEngine
from astryx.domain.models import Category, Consumable
from astryx.modules.common.money import fmt_coins
from astryx.modules.common.render import (
    GENERIC_ERROR, RARITY_COLORS, RARITY_EMOJIS, display_name, fmt_duration, rejection_message, reply,
)

log = logging.getLogger("astryx.shop")

CATEGORY_LABELS = {
    Category.TOOL: "🔧 Tools",
    Category.WEAPON: "⚔️ Weapons",
    Category.COLLECTIBLE: "🎨 Collectibles",
    Category.CONSUMABLE: "🧪 Consumables",
    Category.UPGRADE: "⭐ Upgrades",
}

# Discord caps an embed at 25 fields
MAX_FIELDS = 25

# --- Helpers --------------------------------------------------------

def _catalog_embed(items, category: Optional[Category], balance: int) -> discord.Embed:
    title = f"🏪 Shop — {CATEGORY_LABELS[category]}" if category else "🏪 Astryx Shop"
    e = discord.Embed(title=title, color=discord.Color.gold())
    for it in items[:MAX_FIELDS]:
        e.add_field(
            name=f"{RARITY_EMOJIS[it.rarity]} {it.name} — {fmt_coins(it.price)}",
            value=f"{it.description}\n*{describe(it.effect)}*",
            inline=False,
        )
    if not items:
        e.description = "Nothing for sale here."
    e.set_footer(text=f"Your balance: {balance:,} coins • /shop buy <item>")
    return e

def _inventory_embed(entries, user: discord.abc.User) -> discord.Embed:
    e = discord.Embed(title=f"📦 {display_name(user)}'s Inventory",
                      description=f"You have **{len(entries)}** different items",
                      color=discord.Color.purple())
    for entry in entries[:MAX_FIELDS]:
        it = entry.item
        tag = " 🧪 *Consumable*" if isinstance(it.effect, Consumable) else (" ✨ *Active*" if it.effect else "")
        e.add_field(
            name=f"{RARITY_EMOJIS[it.rarity]} {it.name} ×{entry.quantity}",
            value=f"{it.description}{tag}\n💰 Sells for {fmt_coins(sell_price(it))}",
            inline=False,
        )
    e.set_footer(text="/shop sell <item> • /shop use <item>")
    return e

async def _item_choices(engine: ActionEngine, current: str) -> list[app_commands.Choice[str]]:
    try:
        items = engine.list_catalog()
    except EconomyError:
        return []
    cur = current.lower().strip()
    return [app_commands.Choice(name=f"{it.name} ({it.price:,})", value=it.name)
            for it in items if cur in it.name.lower()][:25]

# --- Commands -------------------------------------------------------

def register(tree: app_commands.CommandTree, engine: ActionEngine, guild_obj: discord.Object | None = None):
    shop = app_commands.Group(name="shop", description="Browse, buy, sell and use items.")

    @shop.command(name="list", description="See the items for sale")
    @app_commands.describe(category="(optional) only one category")
    async def shop_list(inter: Interaction, category: Optional[Category] = None):
        try:
            items = engine.list_catalog(category)
            balance = engine.account(inter.user.id, display_name(inter.user)).coins
        except EconomyError:
            log.exception("Catalog lookup failed")
            await reply(inter, GENERIC_ERROR, ephemeral=True)
            return
        await reply(inter, embed=_catalog_embed(items, category, balance))

    @shop.command(name="buy", description="Buy an item")
    @app_commands.describe(item="Item name")
    async def shop_buy(inter: Interaction, item: str):
        try:
            out = engine.buy(inter.user.id, item, display_name(inter.user))
        except EconomyError:
            log.exception("Purchase failed for %s", inter.user.id)
            await reply(inter, GENERIC_ERROR, ephemeral=True)
            return
        if not out.ok:
            await reply(inter, rejection_message(out), ephemeral=True)
            return
        it = out.item
        e = discord.Embed(title="✅ Purchase Successful!",
                          description=f"You bought **{it.name}** for **{fmt_coins(it.price)}**!",
                          color=RARITY_COLORS[it.rarity])
        e.add_field(name="Remaining Balance", value=fmt_coins(out.account.coins), inline=True)
        e.add_field(name="Owned", value=f"×{out.details['quantity']}", inline=True)
        e.set_footer(text="Check your inventory with /shop inventory")
        await reply(inter, embed=e, ephemeral=True)

    @shop.command(name="sell", description="Sell an item back for 60% of its price")
    @app_commands.describe(item="Item name")
    async def shop_sell(inter: Interaction, item: str):
        try:
            out = engine.sell(inter.user.id, item, display_name(inter.user))
        except EconomyError:
            log.exception("Sale failed for %s", inter.user.id)
            await reply(inter, GENERIC_ERROR, ephemeral=True)
            return
        if not out.ok:
            await reply(inter, rejection_message(out), ephemeral=True)
            return
        e = discord.Embed(title="💰 Item Sold!",
                          description=f"You sold **{out.item.name}** for **{fmt_coins(out.coins_delta)}**!",
                          color=discord.Color.green())
        e.add_field(name="New Balance", value=fmt_coins(out.account.coins), inline=True)
        await reply(inter, embed=e, ephemeral=True)

    @shop.command(name="use", description="Use a consumable")
    @app_commands.describe(item="Item name")
    async def shop_use(inter: Interaction, item: str):
        try:
            out = engine.use(inter.user.id, item, display_name(inter.user))
        except EconomyError:
            log.exception("Use failed for %s", inter.user.id)
            await reply(inter, GENERIC_ERROR, ephemeral=True)
            return
        if not out.ok:
            await reply(inter, rejection_message(out), ephemeral=True)
            return
        lines = []
        if out.xp_gain:
            lines.append(f"You gained **{out.xp_gain:,} XP**!")
            if out.leveled_up:
                lines.append(f"🎉 Level up! You're now level {out.account.level}!")
        if out.coins_delta:
            lines.append(f"You received **{fmt_coins(out.coins_delta)}**!")
        restored = out.details.get("restored") or {}
        for cmd, left in restored.items():
            lines.append(f"⏳ **/{cmd}** " + (f"ready in {fmt_duration(left)}" if left.total_seconds() > 0 else "is ready!"))
        if out.details.get("effect") == "cooldown_restore" and not restored:
            lines.append("No cooldown was running.")
        e = discord.Embed(title="✨ Item Used!",
                          description=f"You used **{out.item.name}**!\n\n" + "\n".join(lines),
                          color=discord.Color.purple())
        await reply(inter, embed=e, ephemeral=True)

    @shop.command(name="inventory", description="See your items")
    async def shop_inventory(inter: Interaction):
        try:
            entries = engine.list_inventory(inter.user.id)
        except EconomyError:
            log.exception("Inventory lookup failed for %s", inter.user.id)
            await reply(inter, GENERIC_ERROR, ephemeral=True)
            return
        if not entries:
            await reply(inter, "📦 Your inventory is empty! Visit `/shop list` to buy items.", ephemeral=True)
            return
        await reply(inter, embed=_inventory_embed(entries, inter.user))

    @shop_buy.autocomplete("item")
    @shop_sell.autocomplete("item")
    @shop_use.autocomplete("item")
    async def _item_autocomplete(inter: Interaction, current: str):
        return await _item_choices(engine, current)

    if guild_obj:
        tree.add_command(shop, guild=guild_obj)
    else:
        tree.add_command(shop)

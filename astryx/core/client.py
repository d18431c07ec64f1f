# astryx/core/client.py
from __future__ import annotations
import logging, importlib, os
import discord
from discord import app_commands

from .config import settings
from .db.base import Database
from .db.migrations import migrate_if_needed
from astryx.domain.engine import ActionEngine

# ── Logging
log = logging.getLogger("astryx")

# ── Published modules: register(tree, engine, guild)
MODULES = [
    "astryx.modules.rp.economy",
    "astryx.modules.rp.shop",
    "astryx.modules.social.profile",
]

def _list_from_env(var: str) -> list[int]:
    raw = os.getenv(var, "").strip()
    if not raw:
        return []
    out: list[int] = []
    for part in raw.split(","):
        s = part.strip()
        if s.isdigit():
            out.append(int(s))
    return out

def test_guild_ids() -> list[int]:
    if settings.sync_scope not in ("guild", "both"):
        return []
    env_ids = _list_from_env("TEST_GUILD_IDS")
    if env_ids:
        return env_ids
    if getattr(settings, "guild_id", 0):
        return [int(settings.guild_id)]
    return []


class AstryxClient(discord.Client):
    def __init__(self, engine: ActionEngine):
        intents = discord.Intents.default()
        super().__init__(intents=intents)
        self.engine = engine
        self.tree = app_commands.CommandTree(self)
        self.test_guilds = [discord.Object(id=g) for g in test_guild_ids()]

    def _register_modules(self, guild_obj: discord.Object | None = None):
        for dotted in MODULES:
            try:
                mod = importlib.import_module(dotted)
                log.info("Register %s (guild=%s)", dotted, getattr(guild_obj, "id", None))
                mod.register(self.tree, self.engine, guild_obj)
            except Exception as e:
                log.exception("Failed to register module %s: %s", dotted, e)

    async def setup_hook(self):
        scope = settings.sync_scope
        log.info("Boot: SYNC_SCOPE=%s • TEST_GUILD_IDS=%s", scope, [g.id for g in self.test_guilds])
        try:
            if scope == "guild":
                if not self.test_guilds:
                    raise RuntimeError("SYNC_SCOPE=guild but no test guild is configured.")
                for g in self.test_guilds:
                    self._register_modules(g)
                    synced = await self.tree.sync(guild=g)
                    log.info("Synced %d commands on guild %s: %s", len(synced), g.id, [c.name for c in synced])
            else:  # "global" | "both"
                self._register_modules()
                g_synced = await self.tree.sync()
                log.info("Synced %d GLOBAL commands: %s", len(g_synced), [c.name for c in g_synced])
                if scope == "both":
                    for g in self.test_guilds:
                        self.tree.copy_global_to(guild=g)
                        y_synced = await self.tree.sync(guild=g)
                        log.info("Copied & synced %d commands to guild %s", len(y_synced), g.id)
        except discord.Forbidden as e:
            log.error("403 Missing Access on sync. Invite the bot with the applications.commands scope. %s", e)
        except Exception as e:
            log.exception("Sync error: %s", e)

    async def on_ready(self):
        log.info("Astryx connected as %s", self.user)


def build_engine(db: Database) -> ActionEngine:
    return ActionEngine(db, starting_balance=settings.starting_balance,
                        strict_invariants=settings.strict_invariants)

def run():
    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO),
                        format="%(asctime)s %(levelname)s %(name)s %(message)s")

    # 1) Migrations at boot
    db = Database.from_settings(settings)
    with db.get_conn() as con:
        ver = migrate_if_needed(con)
    log.info("Database %s at schema v%d", db.path, ver)

    # 2) Client
    client = AstryxClient(build_engine(db))
    client.run(settings.token, log_handler=None)

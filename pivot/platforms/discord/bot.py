from __future__ import annotations

import logging
from typing import Any

import discord
from discord import app_commands

from pivot.config.settings import Settings
from pivot.platforms.discord.commands import setup as setup_commands
from pivot.platforms.discord.events import setup as setup_events

logger = logging.getLogger(__name__)


class PivotDiscordBot(discord.Client):
    """
    Discord client for Pivot.

    Needs the message content intent: players type their moves as plain
    channel messages, and only slash commands go through the tree.
    """

    def __init__(self, *, settings: Settings, services: dict[str, Any]) -> None:
        intents = discord.Intents.default()
        intents.message_content = True
        super().__init__(intents=intents)

        self.settings = settings
        self.services = services
        self.tree = app_commands.CommandTree(self)

    async def setup_hook(self) -> None:
        await setup_commands(self)
        await setup_events(self)
        await self._sync_commands()

    async def _sync_commands(self) -> None:
        # A dev guild gets commands instantly; global sync can take up to an hour.
        guild_id = self.settings.discord_guild_id
        guild = discord.Object(id=guild_id) if guild_id else None
        if guild is not None:
            self.tree.copy_global_to(guild=guild)

        try:
            synced = await self.tree.sync(guild=guild)
        except discord.HTTPException:
            logger.exception("Slash command sync failed")
            return

        names = ", ".join(c.name for c in synced) or "(none)"
        logger.info("Synced %s command(s) %s: %s", len(synced), f"to guild {guild_id}" if guild else "globally", names)

    async def on_ready(self) -> None:
        channels = self.settings.pivot_channel_ids
        logger.info(
            "Pivot ready as %s, playing in %s",
            self.user,
            ", ".join(str(c) for c in sorted(channels)) if channels else "every channel",
        )


def build_discord_bot(*, settings: Settings, services: dict[str, Any]) -> PivotDiscordBot:
    return PivotDiscordBot(settings=settings, services=services)

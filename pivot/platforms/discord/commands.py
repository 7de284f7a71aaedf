from __future__ import annotations

import logging
from typing import Any

import discord
from discord import app_commands

from pivot.domain.errors import GameNotActive
from pivot.games.english.pivot_game import PivotGame, build_board_embed
from pivot.services.lexical_gateway import LexicalGateway
from pivot.utils.text import is_alpha_word, normalize_word

logger = logging.getLogger(__name__)


class PivotCommands(app_commands.Group):
    def __init__(self, *, game: PivotGame, gateway: LexicalGateway) -> None:
        super().__init__(name="pivot", description="Turn the start word into the target word")
        self._game = game
        self._gateway = gateway

    # -------------
    # Helpers
    # -------------

    async def _check_channel(self, interaction: discord.Interaction) -> bool:
        channel_id = int(interaction.channel_id or 0)
        if self._game.is_allowed_channel(channel_id):
            return True
        await interaction.response.send_message("Pivot isn't played in this channel.", ephemeral=True)
        return False

    # -------------
    # Commands
    # -------------

    @app_commands.command(name="start", description="Start a new random Pivot puzzle")
    async def start(self, interaction: discord.Interaction) -> None:
        if not await self._check_channel(interaction):
            return
        channel = interaction.channel
        if channel is None:
            return

        await interaction.response.defer(ephemeral=True)
        channel_id = int(interaction.channel_id or 0)
        await self._game.start(channel_id=channel_id, user_id=interaction.user.id)
        await self._game.send_board(channel=channel, channel_id=channel_id, user_id=interaction.user.id)  # type: ignore[arg-type]
        await interaction.followup.send("🔀 Pivot started! Type your words in the channel.", ephemeral=True)

    @app_commands.command(name="undo", description="Take back your last move (points are kept)")
    async def undo(self, interaction: discord.Interaction) -> None:
        if not await self._check_channel(interaction):
            return
        channel_id = int(interaction.channel_id or 0)
        try:
            undone = self._game.undo(channel_id=channel_id, user_id=interaction.user.id)
        except GameNotActive:
            await interaction.response.send_message("No Pivot puzzle in progress. Use /pivot start.", ephemeral=True)
            return

        if not undone:
            await interaction.response.send_message("Nothing to undo.", ephemeral=True)
            return

        session = self._game.get_session(channel_id=channel_id, user_id=interaction.user.id)
        if session is None:
            await interaction.response.send_message("No Pivot puzzle in progress. Use /pivot start.", ephemeral=True)
            return
        await interaction.response.send_message(
            embed=build_board_embed(session, player_id=interaction.user.id),
            ephemeral=True,
        )

    @app_commands.command(name="board", description="Show your current Pivot board")
    async def board(self, interaction: discord.Interaction) -> None:
        if not await self._check_channel(interaction):
            return
        session = self._game.get_session(channel_id=int(interaction.channel_id or 0), user_id=interaction.user.id)
        if session is None or session.puzzle is None:
            await interaction.response.send_message("No Pivot puzzle in progress. Use /pivot start.", ephemeral=True)
            return
        await interaction.response.send_message(
            embed=build_board_embed(session, player_id=interaction.user.id),
            ephemeral=True,
        )

    @app_commands.command(name="stop", description="Abandon your current Pivot puzzle")
    async def stop(self, interaction: discord.Interaction) -> None:
        if not await self._check_channel(interaction):
            return
        stopped = self._game.stop(channel_id=int(interaction.channel_id or 0), user_id=interaction.user.id)
        msg = "🛑 Pivot stopped." if stopped else "No Pivot puzzle in progress."
        await interaction.response.send_message(msg, ephemeral=True)

    @app_commands.command(name="define", description="Look up a word's definition")
    @app_commands.describe(word="The word to define")
    async def define(self, interaction: discord.Interaction, word: str) -> None:
        w = normalize_word(word)
        if not is_alpha_word(w):
            await interaction.response.send_message("Only letters allowed, no spaces or symbols", ephemeral=True)
            return

        await interaction.response.defer(ephemeral=True)
        definition = await self._gateway.get_definition(w)

        embed = discord.Embed(title=f"📖 {w.upper()}", description=definition.phonetic or None)
        for meaning in definition.meanings[:3]:
            lines = []
            for sense in meaning.definitions:
                line = f"• {sense.definition}"
                if sense.example:
                    line += f'\n  *"{sense.example}"*'
                lines.append(line)
            embed.add_field(name=meaning.part_of_speech, value="\n".join(lines) or "—", inline=False)
        await interaction.followup.send(embed=embed, ephemeral=True)


async def setup(bot: discord.Client) -> None:
    services: dict[str, Any] = getattr(bot, "services", {})
    tree: app_commands.CommandTree = getattr(bot, "tree")

    existing = {c.name for c in tree.get_commands()}

    if "pivot" not in existing:
        game = services.get("pivot")
        gateway = services.get("lexical_gateway")
        if game and gateway:
            tree.add_command(PivotCommands(game=game, gateway=gateway))
        else:
            logger.warning("pivot or lexical_gateway service not found; /pivot commands not registered")

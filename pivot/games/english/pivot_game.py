from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable

import discord

from pivot.domain.errors import GameNotActive, SubmissionInProgress
from pivot.domain.models import Accepted, Definition, MoveKind, Rejected
from pivot.games.chain_state import ERROR_DISPLAY_SECONDS
from pivot.games.session import PivotSession
from pivot.utils.text import normalize_word

logger = logging.getLogger(__name__)

MOVE_LABELS = {
    MoveKind.LETTER_CHANGE: "✏️ Letter change",
    MoveKind.SYNONYM_SWAP: "🔄 Synonym swap",
}

SessionKey = tuple[int, int]  # (channel_id, discord_user_id)

# Channels where chat messages are read as moves
PLAYABLE_CHANNEL_TYPES: tuple[type, ...] = (discord.TextChannel, discord.Thread)


def _gloss(definition: Definition | None) -> str:
    if definition is None:
        return "…"
    first = definition.first_sense()
    if first is None:
        return "—"
    pos, sense = first
    text = f"*{pos}* — {sense.definition}"
    if sense.example:
        text += f'\n> "{sense.example}"'
    return text


def _beads(used: int, total: int) -> str:
    return "●" * used + "○" * max(0, total - used)


def build_board_embed(session: PivotSession, *, player_id: int) -> discord.Embed:
    state = session.state
    puzzle = session.puzzle
    if puzzle is None:
        return discord.Embed(title="🔀 Pivot", description="Loading puzzle…")

    desc = (
        "**How to play**\n"
        "• Change exactly one letter, or swap in a synonym\n"
        "• Reach the target word within the move budget\n"
        "• No repeats\n\n"
        f"**Moves:** {_beads(state.moves_used, state.max_moves)}  (left: {state.moves_left})\n"
        f"**Score:** {state.score}"
    )

    embed = discord.Embed(title="🔀 Pivot — Your Chain", description=desc)
    embed.add_field(
        name=f"Start: {puzzle.start.upper()}",
        value=_gloss(session.definitions.get(puzzle.start)),
        inline=True,
    )
    embed.add_field(
        name=f"🎯 Target: {puzzle.target.upper()}",
        value=_gloss(session.definitions.get(puzzle.target)),
        inline=True,
    )

    lines: list[str] = []
    for i, word in enumerate(state.chain):
        if i == 0:
            lines.append(f"**{i + 1}. {word.upper()}**")
        else:
            lines.append(f"↳ {MOVE_LABELS[state.move_types[i - 1]]}\n**{i + 1}. {word.upper()}**")
    embed.add_field(name="📝 Chain", value="\n".join(lines), inline=False)

    error = state.error
    if error is not None:
        embed.add_field(name="⚠️", value=error.reason, inline=False)

    if not state.game_over:
        embed.add_field(name="Next", value="**Type your next word:**", inline=False)

    embed.set_footer(text=f"Player: {player_id}")
    return embed


def build_game_over_embed(session: PivotSession, *, player_id: int) -> discord.Embed:
    state = session.state
    puzzle = session.puzzle
    if puzzle is None:
        raise GameNotActive("No puzzle loaded")

    if state.won:
        b = state.breakdown()
        embed = discord.Embed(
            title="🏆 Brilliant!",
            description=(
                f"<@{player_id}> solved it in **{state.moves_used}** moves\n\n"
                f"**Total score:** **{state.score}**"
            ),
        )
        embed.add_field(name="⚡ Letter changes", value=f"+{b.letter_points}", inline=True)
        embed.add_field(name="🎯 Synonym swaps", value=f"+{b.synonym_points}", inline=True)
        embed.add_field(name="🏅 Unused moves", value=f"+{b.unused_moves_bonus}", inline=True)
        embed.add_field(name="Clear bonus", value=f"+{b.clear_bonus}", inline=True)
        embed.set_footer(text="Press Play again for a new puzzle.")
        return embed

    embed = discord.Embed(
        title="💭 So Close!",
        description=f"The target was **{puzzle.target.upper()}**",
    )
    embed.add_field(name="Your chain", value=" → ".join(w.upper() for w in state.chain), inline=False)
    embed.set_footer(text="Press Play again to retry the same puzzle.")
    return embed


class PivotGame:
    """
    Pivot in Discord: one private puzzle per player per channel.

    The player types words in the channel; each word is one submission.
    The board embed is edited in place (throttled), and a game-over embed
    with a Play again button is sent when the round ends. A rejection reason
    is shown on the board and wiped by a second edit once it expires.
    """

    key = "pivot"

    def __init__(
        self,
        *,
        session_factory: Callable[[], PivotSession],
        allowed_channel_ids: set[int] | frozenset[int] | None = None,
        error_display_seconds: float = ERROR_DISPLAY_SECONDS,
    ) -> None:
        self._session_factory = session_factory
        self._allowed_channel_ids = allowed_channel_ids or None
        self._error_display_seconds = float(error_display_seconds)

        self._sessions: dict[SessionKey, PivotSession] = {}
        self._board_message_id: dict[SessionKey, int] = {}

        # IMPORTANT: serialize submissions per player so the chain is never raced
        self._player_lock: dict[SessionKey, asyncio.Lock] = {}
        self._last_edit_at: dict[SessionKey, float] = {}

        # Pending "wipe the error off the board" edits, one per player
        self._error_clears: dict[SessionKey, asyncio.Task[None]] = {}

    def _lock_for(self, key: SessionKey) -> asyncio.Lock:
        if key not in self._player_lock:
            self._player_lock[key] = asyncio.Lock()
        return self._player_lock[key]

    def is_allowed_channel(self, channel_id: int) -> bool:
        return self._allowed_channel_ids is None or channel_id in self._allowed_channel_ids

    def get_session(self, *, channel_id: int, user_id: int) -> PivotSession | None:
        return self._sessions.get((channel_id, user_id))

    async def start(self, *, channel_id: int, user_id: int) -> PivotSession:
        """
        Start (or replace) this player's puzzle in the channel.
        """
        key = (channel_id, user_id)
        session = self._sessions.get(key)
        if session is None:
            session = self._session_factory()
            self._sessions[key] = session

        self._cancel_error_clear(key)
        # Outside the player lock; the latest start wins.
        await session.new_puzzle()
        self._board_message_id.pop(key, None)
        return session

    def stop(self, *, channel_id: int, user_id: int) -> bool:
        key = (channel_id, user_id)
        self._cancel_error_clear(key)
        self._board_message_id.pop(key, None)
        return self._sessions.pop(key, None) is not None

    def undo(self, *, channel_id: int, user_id: int) -> bool:
        session = self._sessions.get((channel_id, user_id))
        if session is None:
            raise GameNotActive("No Pivot puzzle in progress")
        return session.undo()

    async def play_again(self, *, channel_id: int, user_id: int) -> PivotSession | None:
        """
        Next round after a finished one. Returns None (and changes nothing)
        while the player's current round is still being played.
        """
        key = (channel_id, user_id)
        session = self._sessions.get(key)
        if session is None or session.puzzle is None:
            return await self.start(channel_id=channel_id, user_id=user_id)
        if not session.state.game_over:
            return None

        self._cancel_error_clear(key)
        await session.play_again()
        self._board_message_id.pop(key, None)
        return session

    async def close(self) -> None:
        """
        Cancel pending board edits (bot shutdown).
        """
        tasks = list(self._error_clears.values())
        self._error_clears.clear()
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    # -------------
    # Board message
    # -------------

    def remember_board(self, *, channel_id: int, user_id: int, message_id: int) -> None:
        self._board_message_id[(channel_id, user_id)] = int(message_id)
        self._last_edit_at[(channel_id, user_id)] = time.time()

    async def send_board(self, *, channel: discord.abc.Messageable, channel_id: int, user_id: int) -> None:
        key = (channel_id, user_id)
        session = self._sessions.get(key)
        if session is None:
            return
        embed = build_board_embed(session, player_id=user_id)
        msg = await channel.send(
            content=f"<@{user_id}>",
            embed=embed,
            view=BoardView(game=self, channel_id=channel_id, user_id=user_id),
        )
        self.remember_board(channel_id=channel_id, user_id=user_id, message_id=msg.id)

    async def _edit_board(
        self,
        *,
        channel: discord.abc.Messageable,
        channel_id: int,
        user_id: int,
        force: bool = False,
    ) -> None:
        key = (channel_id, user_id)
        session = self._sessions.get(key)
        msg_id = self._board_message_id.get(key)
        if session is None:
            return
        if not msg_id or not hasattr(channel, "fetch_message"):
            await self.send_board(channel=channel, channel_id=channel_id, user_id=user_id)
            return

        now = time.time()
        if not force and (now - self._last_edit_at.get(key, 0.0)) < 1.0:
            return

        try:
            msg = await channel.fetch_message(int(msg_id))  # type: ignore[attr-defined]
            await msg.edit(content=f"<@{user_id}>", embed=build_board_embed(session, player_id=user_id))
            self._last_edit_at[key] = time.time()
        except (discord.NotFound, discord.Forbidden, discord.HTTPException):
            logger.debug("Could not edit Pivot board %s for %s", msg_id, key)

    def _cancel_error_clear(self, key: SessionKey) -> None:
        task = self._error_clears.pop(key, None)
        if task is not None and not task.done():
            task.cancel()

    def _schedule_error_clear(self, *, channel: discord.abc.Messageable, channel_id: int, user_id: int) -> None:
        key = (channel_id, user_id)
        self._cancel_error_clear(key)

        async def runner() -> None:
            try:
                await asyncio.sleep(self._error_display_seconds)
                await self._edit_board(channel=channel, channel_id=channel_id, user_id=user_id, force=True)
            except asyncio.CancelledError:
                # Superseded by a newer redraw, or shutting down
                return
            except Exception:
                logger.exception("Clearing the error from Pivot board %s crashed", key)

        task = asyncio.create_task(runner())
        self._error_clears[key] = task

        def forget(done: asyncio.Task[None]) -> None:
            if self._error_clears.get(key) is done:
                del self._error_clears[key]

        task.add_done_callback(forget)

    async def _send_game_over(self, *, channel: discord.abc.Messageable, channel_id: int, user_id: int) -> None:
        session = self._sessions.get((channel_id, user_id))
        if session is None:
            return
        embed = build_game_over_embed(session, player_id=user_id)
        await channel.send(embed=embed, view=PlayAgainView(game=self, channel_id=channel_id, user_id=user_id))

    # -------------
    # Chat input
    # -------------

    async def handle_discord_message(self, message: discord.Message) -> bool:
        if not isinstance(message.channel, PLAYABLE_CHANNEL_TYPES):
            return False

        channel_id = message.channel.id
        if not self.is_allowed_channel(channel_id):
            return False

        key = (channel_id, message.author.id)
        session = self._sessions.get(key)
        if session is None or session.puzzle is None or session.state.game_over:
            return False

        # Single tokens only; anything else is ordinary chat
        content = message.content.strip()
        if not content or " " in content:
            return False

        async with self._lock_for(key):
            try:
                result = await session.submit(normalize_word(content))
            except (GameNotActive, SubmissionInProgress):
                return True

            if result is None:
                return True

            try:
                await message.delete()
            except (discord.Forbidden, discord.HTTPException):
                pass

            self._cancel_error_clear(key)
            await self._edit_board(
                channel=message.channel,
                channel_id=channel_id,
                user_id=message.author.id,
                force=True,
            )

            if isinstance(result, Rejected):
                logger.debug("Rejected %r for %s: %s", content, key, result.reason)
                self._schedule_error_clear(channel=message.channel, channel_id=channel_id, user_id=message.author.id)
            elif isinstance(result, Accepted) and session.state.game_over:
                await self._send_game_over(channel=message.channel, channel_id=channel_id, user_id=message.author.id)

            return True


class BoardView(discord.ui.View):
    def __init__(self, *, game: PivotGame, channel_id: int, user_id: int, timeout: float = 900.0) -> None:
        super().__init__(timeout=timeout)
        self._game = game
        self._channel_id = channel_id
        self._user_id = user_id

    async def interaction_check(self, interaction: discord.Interaction) -> bool:
        if interaction.user.id != self._user_id:
            await interaction.response.send_message("This board belongs to another player.", ephemeral=True)
            return False
        return True

    @discord.ui.button(label="Undo", style=discord.ButtonStyle.secondary, emoji="↩️")
    async def undo(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        session = self._game.get_session(channel_id=self._channel_id, user_id=self._user_id)
        if session is None or not session.undo():
            await interaction.response.send_message("Nothing to undo.", ephemeral=True)
            return
        await interaction.response.edit_message(embed=build_board_embed(session, player_id=self._user_id))


class PlayAgainView(discord.ui.View):
    def __init__(self, *, game: PivotGame, channel_id: int, user_id: int, timeout: float = 900.0) -> None:
        super().__init__(timeout=timeout)
        self._game = game
        self._channel_id = channel_id
        self._user_id = user_id

    def _disable_all(self) -> None:
        for child in self.children:
            if hasattr(child, "disabled"):
                child.disabled = True  # type: ignore[attr-defined]

    async def on_timeout(self) -> None:
        self._disable_all()

    @discord.ui.button(label="Play again", style=discord.ButtonStyle.success, emoji="🔁")
    async def play_again(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        if interaction.user.id != self._user_id:
            await interaction.response.send_message(
                "This button is for the player who finished this round.",
                ephemeral=True,
            )
            return

        # One use per finished round
        self._disable_all()
        self.stop()
        await interaction.response.edit_message(view=self)

        session = await self._game.play_again(channel_id=self._channel_id, user_id=self._user_id)
        if session is None:
            await interaction.followup.send("Your current round is still in progress.", ephemeral=True)
            return

        msg = await interaction.followup.send(
            content=f"<@{self._user_id}>",
            embed=build_board_embed(session, player_id=self._user_id),
            view=BoardView(game=self._game, channel_id=self._channel_id, user_id=self._user_id),
            wait=True,
        )
        self._game.remember_board(channel_id=self._channel_id, user_id=self._user_id, message_id=msg.id)

from __future__ import annotations

import asyncio
import logging
import random

import aiohttp

from pivot.config.settings import Settings
from pivot.logging.setup import setup_logging

from pivot.services.lexical_cache import LexicalCache
from pivot.services.lexical_gateway import LexicalGateway
from pivot.services.providers import DatamuseClient, DictionaryApiClient
from pivot.services.scoring_rules import ScoringRules
from pivot.services.word_source import DatamuseWordSource, WordListSource, WordSource

from pivot.games.chain_state import ChainState
from pivot.games.move_validator import MoveValidator
from pivot.games.puzzle_generator import PuzzleGenerator
from pivot.games.session import PivotSession
from pivot.games.english.pivot_game import PivotGame

from pivot.platforms.discord.bot import build_discord_bot

logger = logging.getLogger(__name__)


async def main() -> None:
    settings = Settings.load()
    setup_logging(settings)

    rng = random.Random()

    # --- HTTP (one session for every lexical provider) ---
    http = aiohttp.ClientSession(
        timeout=aiohttp.ClientTimeout(total=settings.http_timeout_seconds),
        headers={"User-Agent": "pivot-word-game"},
    )

    try:
        # --- Providers ---
        dictionary = DictionaryApiClient(session=http, base_url=settings.dictionary_api_url)
        datamuse = DatamuseClient(session=http, base_url=settings.datamuse_api_url)

        # --- Lexical gateway (process-wide cache) ---
        gateway = LexicalGateway(dictionary=dictionary, related=datamuse, cache=LexicalCache())

        # --- Word source: offline list if configured, Datamuse otherwise ---
        word_source: WordSource
        if settings.word_list_path is not None:
            word_source = WordListSource.load_from_txt(settings.word_list_path, rng=rng)
        else:
            word_source = DatamuseWordSource(provider=datamuse, rng=rng)

        # --- Engine ---
        rules = ScoringRules()
        logger.info("Scoring rules: %s", rules.snapshot())
        validator = MoveValidator(gateway)
        generator = PuzzleGenerator(word_source=word_source, gateway=gateway, rng=rng)

        def new_session() -> PivotSession:
            return PivotSession(
                generator=generator,
                state=ChainState(validator=validator, rules=rules),
                gateway=gateway,
            )

        pivot = PivotGame(
            session_factory=new_session,
            allowed_channel_ids=settings.pivot_channel_ids,
        )

        # --- DI container ---
        services = {
            "lexical_gateway": gateway,
            "word_source": word_source,
            "puzzle_generator": generator,
            "scoring_rules": rules,
            "pivot": pivot,
        }

        # --- Discord bot ---
        discord_bot = build_discord_bot(settings=settings, services=services)
        logger.info("Starting Pivot (env=%s)", settings.env)
        try:
            await discord_bot.start(settings.discord_token)
        finally:
            await pivot.close()
    finally:
        await http.close()


if __name__ == "__main__":
    asyncio.run(main())

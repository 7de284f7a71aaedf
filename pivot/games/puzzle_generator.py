from __future__ import annotations

import logging
import random

from pivot.domain.models import Puzzle
from pivot.services.lexical_gateway import LexicalGateway
from pivot.services.word_source import WordSource
from pivot.utils.text import differs_by_one_letter

logger = logging.getLogger(__name__)

PLAYABLE_LENGTHS = (4, 5, 6)

DEFAULT_START = "love"
FALLBACK_TARGETS = ("love", "time", "hand")

POOL_ATTEMPTS = 60
POOL_TARGET_SIZE = 40
FILTERED_TARGET_SIZE = 20


def _fallback_target(start: str) -> str:
    # No word is one letter away from two of these at once, so one always fits.
    for w in FALLBACK_TARGETS:
        if w != start and not differs_by_one_letter(start, w):
            return w
    raise RuntimeError("No fallback target available")  # unreachable with the words above


class PuzzleGenerator:
    """
    Builds a random START/TARGET pair of the same length.

    Trivial pairs are avoided: the target is never the start, never one letter
    away from it, and (best effort, via the lexical gateway) never a direct
    synonym in either direction. Quality depends on the word source; when it
    runs dry the generator falls back to hardcoded words.
    """

    def __init__(
        self,
        *,
        word_source: WordSource,
        gateway: LexicalGateway,
        rng: random.Random | None = None,
    ) -> None:
        self._source = word_source
        self._gateway = gateway
        self._rng = rng or random.Random()

    async def _sample(self, length: int) -> str | None:
        w = await self._source.random_word_of_length(length)
        return w or None

    async def _candidate_pool(self, start: str, length: int) -> list[str]:
        pool: dict[str, None] = {}  # insertion-ordered set
        for _ in range(POOL_ATTEMPTS):
            w = await self._sample(length)
            if w and w != start:
                pool[w] = None
            if len(pool) >= POOL_TARGET_SIZE:
                break
        return list(pool)

    async def _non_trivial(self, start: str, candidates: list[str]) -> list[str]:
        start_syns = await self._gateway.get_synonyms(start)
        filtered: list[str] = []
        for t in candidates:
            if t == start or differs_by_one_letter(start, t):
                continue
            if t in start_syns:
                continue
            if start in await self._gateway.get_synonyms(t):
                continue
            filtered.append(t)
            if len(filtered) >= FILTERED_TARGET_SIZE:
                break
        return filtered

    async def generate_random_pair(self) -> Puzzle:
        length = self._rng.choice(PLAYABLE_LENGTHS)

        start = await self._sample(length)
        if not start:
            logger.warning("No start word of length %s available, using %r", length, DEFAULT_START)
            start = DEFAULT_START
            length = len(DEFAULT_START)

        candidates = await self._candidate_pool(start, length)
        filtered = await self._non_trivial(start, candidates)

        if filtered:
            target_pool = filtered
        else:
            # Synonym rule relaxed; the one-letter rule still holds.
            target_pool = [t for t in candidates if not differs_by_one_letter(start, t)]
            if candidates:
                logger.info("No non-synonym target for %r, relaxing the synonym filter", start)

        target: str | None = self._rng.choice(target_pool) if target_pool else None

        if not target or target == start:
            safety = await self._sample(length)
            if safety and safety != start and not differs_by_one_letter(start, safety):
                target = safety
            else:
                if len(start) != len(DEFAULT_START):
                    start = DEFAULT_START
                target = _fallback_target(start)
                logger.warning("Word source exhausted, using fallback pair %r -> %r", start, target)

        puzzle = Puzzle(start=start, target=target)
        logger.info("Generated puzzle %s -> %s (pool=%s, filtered=%s)", start, target, len(candidates), len(filtered))
        return puzzle

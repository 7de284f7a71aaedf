from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Protocol

from pivot.domain.errors import ProviderError
from pivot.services.providers import FrequencyWordsProvider
from pivot.utils.text import is_alpha_word, normalize_word

logger = logging.getLogger(__name__)

# Zipf scale (~1-7); everyday vocabulary sits at or above this
COMMON_ZIPF_THRESHOLD = 4.5


class WordSource(Protocol):
    async def random_word_of_length(self, length: int) -> str | None:
        """
        A random playable word with exactly `length` letters, or None if unavailable.
        """
        ...


@dataclass(frozen=True)
class _Buckets:
    common: tuple[str, ...]
    backup: tuple[str, ...]


class DatamuseWordSource:
    """
    Random words biased toward common vocabulary using Datamuse frequency tags.

    Listings are fetched once per length and reused; a failed fetch is not
    remembered so the next call tries again.
    """

    def __init__(
        self,
        *,
        provider: FrequencyWordsProvider,
        rng: random.Random | None = None,
        common_threshold: float = COMMON_ZIPF_THRESHOLD,
    ) -> None:
        self._provider = provider
        self._rng = rng or random.Random()
        self._threshold = float(common_threshold)
        self._buckets: dict[int, _Buckets] = {}

    async def _buckets_for(self, length: int) -> _Buckets | None:
        cached = self._buckets.get(length)
        if cached is not None:
            return cached

        try:
            rows = await self._provider.words_of_length(length)
        except ProviderError as e:
            logger.warning("Word listing for length %s failed: %s", length, e)
            return None

        common: list[str] = []
        backup: list[str] = []
        seen: set[str] = set()
        for raw, zipf in rows:
            w = normalize_word(raw)
            if not is_alpha_word(w) or len(w) != length or w in seen:
                continue
            seen.add(w)
            if zipf >= self._threshold:
                common.append(w)
            else:
                backup.append(w)

        buckets = _Buckets(common=tuple(common), backup=tuple(backup))
        self._buckets[length] = buckets
        logger.info(
            "Loaded %s common / %s backup words of length %s",
            len(buckets.common),
            len(buckets.backup),
            length,
        )
        return buckets

    async def random_word_of_length(self, length: int) -> str | None:
        buckets = await self._buckets_for(int(length))
        if buckets is None:
            return None
        if buckets.common:
            return self._rng.choice(buckets.common)
        if buckets.backup:
            return self._rng.choice(buckets.backup)
        return None


class WordListSource:
    """
    Offline word source backed by an in-memory word list.

    File format (one word per line):
      cold
      gold
      ...
    """

    def __init__(self, words: Iterable[str], *, rng: random.Random | None = None) -> None:
        by_length: dict[int, list[str]] = {}
        for raw in words:
            w = normalize_word(raw)
            if not is_alpha_word(w):
                continue
            bucket = by_length.setdefault(len(w), [])
            if w not in bucket:
                bucket.append(w)
        self._by_length = {k: tuple(v) for k, v in by_length.items()}
        self._rng = rng or random.Random()

    @classmethod
    def load_from_txt(cls, path: Path, *, rng: random.Random | None = None) -> "WordListSource":
        if not path.exists():
            raise FileNotFoundError(f"Word list file not found: {path}")

        # utf-8 with errors ignored to be resilient to odd characters
        with path.open("r", encoding="utf-8", errors="ignore") as f:
            source = cls((line for line in f), rng=rng)

        logger.info("Loaded %s words from %s", len(source), path)
        return source

    def __len__(self) -> int:
        return sum(len(v) for v in self._by_length.values())

    async def random_word_of_length(self, length: int) -> str | None:
        words = self._by_length.get(int(length))
        if not words:
            return None
        return self._rng.choice(words)

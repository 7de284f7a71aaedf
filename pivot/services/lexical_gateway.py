from __future__ import annotations

import asyncio
import logging

from pivot.domain.errors import ProviderError
from pivot.domain.models import Definition
from pivot.services.lexical_cache import LexicalCache
from pivot.services.providers import DictionaryProvider, RelatedWordsProvider, parse_tab_definitions
from pivot.utils.text import is_alpha_word, normalize_word

logger = logging.getLogger(__name__)

# Provider-failure policies: validity fails open, synonyms fail closed.
VALIDITY_ON_PROVIDER_FAILURE = True
SYNONYMS_ON_PROVIDER_FAILURE: frozenset[str] = frozenset()


class LexicalGateway:
    """
    Memoized access to the external lexical providers.

    Three operations, each keyed by normalized word:
      - check_validity: dictionary first, spelling search second, fail-open
      - get_definition: dictionary, tab-delimited definitions, placeholder
      - get_synonyms: synonym + means-like relations (fetched concurrently), fail-closed

    Results are cached in the injected LexicalCache, fallbacks included, so a
    repeated query for the same word never goes back to the network.
    """

    def __init__(
        self,
        *,
        dictionary: DictionaryProvider,
        related: RelatedWordsProvider,
        cache: LexicalCache | None = None,
    ) -> None:
        self._dictionary = dictionary
        self._related = related
        self._cache = cache if cache is not None else LexicalCache()

    @property
    def cache(self) -> LexicalCache:
        return self._cache

    async def check_validity(self, word: str) -> bool:
        w = normalize_word(word)
        cached = self._cache.validity.get(w)
        if cached is not None:
            return cached

        try:
            valid = await self._lookup_validity(w)
        except ProviderError as e:
            logger.warning("Validity lookup failed for %r, allowing it: %s", w, e)
            valid = VALIDITY_ON_PROVIDER_FAILURE

        return self._cache.remember_validity(w, valid)

    async def _lookup_validity(self, w: str) -> bool:
        try:
            if await self._dictionary.fetch_entry(w) is not None:
                return True
        except ProviderError as e:
            logger.debug("Dictionary lookup failed for %r, trying spelling search: %s", w, e)

        top = await self._related.spelled_like(w, max_results=1)
        return bool(top) and normalize_word(top[0]) == w

    async def get_definition(self, word: str) -> Definition:
        w = normalize_word(word)
        cached = self._cache.definitions.get(w)
        if cached is not None:
            return cached

        definition = await self._lookup_definition(w)
        return self._cache.remember_definition(w, definition)

    async def _lookup_definition(self, w: str) -> Definition:
        try:
            entry = await self._dictionary.fetch_entry(w)
            if entry is not None:
                return entry
        except ProviderError as e:
            logger.warning("Dictionary definition failed for %r: %s", w, e)

        try:
            defs = await self._related.definitions(w)
            if defs:
                return parse_tab_definitions(w, defs)
        except ProviderError as e:
            logger.warning("Fallback definition failed for %r: %s", w, e)

        return Definition.placeholder(w)

    async def get_synonyms(self, word: str) -> frozenset[str]:
        w = normalize_word(word)
        cached = self._cache.synonyms.get(w)
        if cached is not None:
            return cached

        try:
            syn, ml = await asyncio.gather(
                self._related.synonyms(w),
                self._related.means_like(w),
            )
        except ProviderError as e:
            logger.warning("Synonym lookup failed for %r: %s", w, e)
            return self._cache.remember_synonyms(w, SYNONYMS_ON_PROVIDER_FAILURE)

        found: set[str] = set()
        for raw in (*syn, *ml):
            candidate = normalize_word(raw)
            if candidate and candidate != w and is_alpha_word(candidate):
                found.add(candidate)

        return self._cache.remember_synonyms(w, frozenset(found))

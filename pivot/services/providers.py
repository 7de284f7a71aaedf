from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol
from urllib.parse import quote

import aiohttp

from pivot.domain.errors import ProviderError
from pivot.domain.models import Definition, Meaning, Sense

logger = logging.getLogger(__name__)

# Senses kept per part of speech from the dictionary provider
MAX_SENSES_PER_MEANING = 2


# =========================================================
# Contracts (what the gateway and word sources depend on)
# =========================================================

class DictionaryProvider(Protocol):
    async def fetch_entry(self, word: str) -> Definition | None:
        """
        Structured entry for the word, or None if the provider does not know it.
        Raises ProviderError on network / status / payload failures.
        """
        ...


class RelatedWordsProvider(Protocol):
    async def spelled_like(self, word: str, *, max_results: int = 1) -> list[str]:
        ...

    async def definitions(self, word: str) -> list[str]:
        """
        Raw tab-delimited "partOfSpeech<TAB>definition" strings.
        """
        ...

    async def synonyms(self, word: str) -> list[str]:
        ...

    async def means_like(self, word: str) -> list[str]:
        ...


class FrequencyWordsProvider(Protocol):
    async def words_of_length(self, length: int) -> list[tuple[str, float]]:
        """
        (word, zipf frequency) pairs for words with exactly `length` letters.
        """
        ...


# =========================================================
# Payload parsing (pure; shared by clients and tests)
# =========================================================

def parse_dictionary_entry(payload: Any) -> Definition | None:
    """
    dictionaryapi.dev returns a JSON list of entries; only the first is used.
    """
    if not isinstance(payload, list) or not payload:
        return None
    entry = payload[0]
    if not isinstance(entry, dict):
        return None

    meanings: list[Meaning] = []
    for m in entry.get("meanings") or []:
        if not isinstance(m, dict):
            continue
        senses: list[Sense] = []
        for d in (m.get("definitions") or [])[:MAX_SENSES_PER_MEANING]:
            if not isinstance(d, dict) or not d.get("definition"):
                continue
            senses.append(Sense(definition=str(d["definition"]), example=d.get("example") or None))
        meanings.append(Meaning(part_of_speech=str(m.get("partOfSpeech") or "word"), definitions=tuple(senses)))

    return Definition(
        word=str(entry.get("word") or ""),
        phonetic=str(entry.get("phonetic") or ""),
        meanings=tuple(meanings),
    )


def parse_tab_definitions(word: str, defs: list[str]) -> Definition:
    """
    Datamuse `md=d` strings look like "n\tthe face of a clock".
    """
    meanings: list[Meaning] = []
    for raw in defs:
        parts = str(raw).split("\t")
        pos = parts[0] if parts[0] else "word"
        text = parts[1] if len(parts) > 1 and parts[1] else f'A form of the word "{word}"'
        meanings.append(Meaning(part_of_speech=pos, definitions=(Sense(definition=text),)))
    return Definition(word=word, phonetic="", meanings=tuple(meanings))


def zipf_from_tags(tags: Any) -> float:
    """
    Datamuse `md=f` adds a tag like "f:5.12". Missing or malformed tags count as 0.
    """
    if not isinstance(tags, list):
        return 0.0
    for t in tags:
        if isinstance(t, str) and t.startswith("f:"):
            try:
                return float(t[2:])
            except ValueError:
                return 0.0
    return 0.0


def words_from_payload(payload: Any) -> list[str]:
    if not isinstance(payload, list):
        raise ProviderError(f"Expected a JSON list, got {type(payload).__name__}")
    return [str(item.get("word") or "") for item in payload if isinstance(item, dict)]


# =========================================================
# HTTP clients
# =========================================================

class _JsonClient:
    def __init__(self, *, session: aiohttp.ClientSession, base_url: str) -> None:
        self._session = session
        self._base_url = base_url.rstrip("/")

    async def _get_json(
        self,
        path: str,
        params: dict[str, str] | None = None,
        *,
        missing_ok: bool = False,
    ) -> Any:
        """
        GET and decode JSON. Returns None on 404 when missing_ok is set.
        Every transport / status / decoding failure is raised as ProviderError.
        """
        url = f"{self._base_url}{path}"
        logger.debug("GET %s params=%s", url, params)
        try:
            async with self._session.get(url, params=params) as resp:
                if missing_ok and resp.status == 404:
                    return None
                if resp.status != 200:
                    raise ProviderError(f"GET {url} returned HTTP {resp.status}")
                return await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise ProviderError(f"GET {url} failed: {e!r}") from e


class DictionaryApiClient(_JsonClient):
    """
    Client for the free dictionary API (api.dictionaryapi.dev).
    """

    async def fetch_entry(self, word: str) -> Definition | None:
        payload = await self._get_json(f"/{quote(word)}", missing_ok=True)
        if payload is None:
            return None
        return parse_dictionary_entry(payload)


class DatamuseClient(_JsonClient):
    """
    Client for the Datamuse word-finding API.

    One endpoint (/words) serves spelling search, definitions, synonyms,
    means-like and frequency-tagged pattern queries.
    """

    async def _words(self, **params: str) -> Any:
        return await self._get_json("/words", params=params)

    async def spelled_like(self, word: str, *, max_results: int = 1) -> list[str]:
        return words_from_payload(await self._words(sp=word, max=str(max_results)))

    async def definitions(self, word: str) -> list[str]:
        payload = await self._words(sp=word, md="d", max="1")
        if not isinstance(payload, list) or not payload:
            return []
        first = payload[0]
        if not isinstance(first, dict):
            return []
        return [str(d) for d in first.get("defs") or []]

    async def synonyms(self, word: str) -> list[str]:
        return words_from_payload(await self._words(rel_syn=word, max="200"))

    async def means_like(self, word: str) -> list[str]:
        return words_from_payload(await self._words(ml=word, max="200"))

    async def words_of_length(self, length: int) -> list[tuple[str, float]]:
        payload = await self._words(sp="?" * int(length), md="f", max="1000")
        if not isinstance(payload, list):
            raise ProviderError("Expected a JSON list of words")
        out: list[tuple[str, float]] = []
        for item in payload:
            if not isinstance(item, dict):
                continue
            out.append((str(item.get("word") or ""), zipf_from_tags(item.get("tags"))))
        return out

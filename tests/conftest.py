"""Shared fixtures: in-memory lexical providers with canned data."""

from __future__ import annotations

import random
from collections import Counter

import pytest

from pivot.domain.errors import ProviderError
from pivot.domain.models import Definition, Meaning, Sense
from pivot.games.chain_state import ChainState
from pivot.games.move_validator import MoveValidator
from pivot.services.lexical_cache import LexicalCache
from pivot.services.lexical_gateway import LexicalGateway
from pivot.services.scoring_rules import ScoringRules


class FakeDictionary:
    def __init__(self, entries: dict[str, Definition] | None = None, *, fail: bool = False) -> None:
        self.entries = dict(entries or {})
        self.fail = fail
        self.calls: Counter[str] = Counter()

    async def fetch_entry(self, word: str) -> Definition | None:
        self.calls[word] += 1
        if self.fail:
            raise ProviderError("dictionary down")
        return self.entries.get(word)


class FakeRelated:
    def __init__(
        self,
        *,
        known: set[str] | None = None,
        synonyms: dict[str, list[str]] | None = None,
        means_like: dict[str, list[str]] | None = None,
        defs: dict[str, list[str]] | None = None,
        fail: bool = False,
    ) -> None:
        self.known = set(known or ())
        self.synonym_map = dict(synonyms or {})
        self.means_like_map = dict(means_like or {})
        self.defs = dict(defs or {})
        self.fail = fail
        self.calls: Counter[str] = Counter()

    def _maybe_fail(self) -> None:
        if self.fail:
            raise ProviderError("datamuse down")

    async def spelled_like(self, word: str, *, max_results: int = 1) -> list[str]:
        self.calls["spelled_like"] += 1
        self._maybe_fail()
        return [word] if word in self.known else []

    async def definitions(self, word: str) -> list[str]:
        self.calls["definitions"] += 1
        self._maybe_fail()
        return list(self.defs.get(word, []))

    async def synonyms(self, word: str) -> list[str]:
        self.calls["synonyms"] += 1
        self._maybe_fail()
        return list(self.synonym_map.get(word, []))

    async def means_like(self, word: str) -> list[str]:
        self.calls["means_like"] += 1
        self._maybe_fail()
        return list(self.means_like_map.get(word, []))


def simple_definition(word: str, text: str = "a thing") -> Definition:
    return Definition(
        word=word,
        phonetic=f"/{word}/",
        meanings=(Meaning(part_of_speech="noun", definitions=(Sense(definition=text),)),),
    )


# Words the dictionary knows in the scenarios below
DICTIONARY_WORDS = [
    "cold", "gold", "gilded", "bold", "bolt", "boat", "coat", "cost",
    "cast", "case", "cave", "love", "time", "warm", "chilly", "hot",
]


@pytest.fixture
def dictionary() -> FakeDictionary:
    return FakeDictionary({w: simple_definition(w) for w in DICTIONARY_WORDS})


@pytest.fixture
def related() -> FakeRelated:
    return FakeRelated(
        known={"golden"},
        synonyms={"gold": ["gilded", "Golden", "gold", "au"], "cold": ["chilly"]},
        means_like={"gold": ["yellow metal", "aureate"]},
    )


@pytest.fixture
def gateway(dictionary: FakeDictionary, related: FakeRelated) -> LexicalGateway:
    return LexicalGateway(dictionary=dictionary, related=related, cache=LexicalCache())


@pytest.fixture
def validator(gateway: LexicalGateway) -> MoveValidator:
    return MoveValidator(gateway)


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def state(validator: MoveValidator, clock: FakeClock) -> ChainState:
    return ChainState(validator=validator, rules=ScoringRules(), clock=clock)


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)

from __future__ import annotations

from dataclasses import dataclass, field

from pivot.domain.models import Definition


@dataclass
class LexicalCache:
    """
    Process-wide memo of lexical facts, keyed by normalized word.

    Lexical facts are treated as stable for the lifetime of the process:
    entries are only ever added, never evicted or replaced.
    """

    validity: dict[str, bool] = field(default_factory=dict)
    definitions: dict[str, Definition] = field(default_factory=dict)
    synonyms: dict[str, frozenset[str]] = field(default_factory=dict)

    def remember_validity(self, word: str, valid: bool) -> bool:
        return self.validity.setdefault(word, valid)

    def remember_definition(self, word: str, definition: Definition) -> Definition:
        return self.definitions.setdefault(word, definition)

    def remember_synonyms(self, word: str, synonyms: frozenset[str]) -> frozenset[str]:
        return self.synonyms.setdefault(word, synonyms)

    def stats(self) -> dict[str, int]:
        return {
            "validity": len(self.validity),
            "definitions": len(self.definitions),
            "synonyms": len(self.synonyms),
        }

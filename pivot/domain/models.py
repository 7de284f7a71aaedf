from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class MoveKind(str, Enum):
    LETTER_CHANGE = "letter"
    SYNONYM_SWAP = "synonym"


class GameStatus(str, Enum):
    PLAYING = "playing"
    WON = "won"
    LOST = "lost"


@dataclass(frozen=True)
class Sense:
    definition: str
    example: str | None = None


@dataclass(frozen=True)
class Meaning:
    part_of_speech: str
    definitions: tuple[Sense, ...] = ()


@dataclass(frozen=True)
class Definition:
    """
    Dictionary entry for one normalized word.

    Built once by the lexical gateway and cached; never mutated afterwards.
    """

    word: str
    phonetic: str = ""
    meanings: tuple[Meaning, ...] = ()

    @classmethod
    def placeholder(cls, word: str) -> "Definition":
        return cls(
            word=word,
            phonetic="",
            meanings=(
                Meaning(
                    part_of_speech="word",
                    definitions=(Sense(definition=f'An English word spelled "{word}"'),),
                ),
            ),
        )

    def first_sense(self) -> tuple[str, Sense] | None:
        """
        The (part of speech, sense) pair shown next to a word, if any.
        """
        for meaning in self.meanings:
            if meaning.definitions:
                return meaning.part_of_speech, meaning.definitions[0]
        return None


@dataclass(frozen=True)
class Accepted:
    kind: MoveKind
    gloss: str | None = None

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Rejected:
    reason: str

    @property
    def ok(self) -> bool:
        return False


ValidationResult = Union[Accepted, Rejected]


@dataclass(frozen=True)
class Puzzle:
    start: str
    target: str


@dataclass(frozen=True)
class ScoreBreakdown:
    letter_points: int
    synonym_points: int
    unused_moves_bonus: int = 0
    clear_bonus: int = 0

    @property
    def total(self) -> int:
        return (
            self.letter_points
            + self.synonym_points
            + self.unused_moves_bonus
            + self.clear_bonus
        )

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

from pivot.domain.models import (
    Accepted,
    GameStatus,
    MoveKind,
    Puzzle,
    Rejected,
    ScoreBreakdown,
    ValidationResult,
)
from pivot.games.move_validator import MoveValidator
from pivot.services.scoring_rules import MAX_MOVES, ScoreKey, ScoringRules
from pivot.utils.text import normalize_word

logger = logging.getLogger(__name__)

ERROR_DISPLAY_SECONDS = 3.0
REASON_NETWORK_ERROR = "Network error, please try again"


@dataclass(frozen=True)
class TransientError:
    reason: str
    expires_at: float


class ChainState:
    """
    One game of Pivot: the chain played so far, moves left, score and outcome.

    States: PLAYING -> WON (target reached) or PLAYING -> LOST (out of moves).
    Both end states are terminal until initialize()/reset().

    Invariants after every initialize/submit/undo:
      len(move_types) == len(chain) - 1
      moves_left == MAX_MOVES - (len(chain) - 1)

    Undo gives back the move but not the points: score never goes down.
    Not safe for overlapping submit() calls; callers serialize them.
    """

    def __init__(
        self,
        *,
        validator: MoveValidator,
        rules: ScoringRules | None = None,
        clock: Callable[[], float] = time.monotonic,
        max_moves: int = MAX_MOVES,
    ) -> None:
        self._validator = validator
        self._rules = rules or ScoringRules()
        self._clock = clock
        self.max_moves = int(max_moves)

        self.puzzle: Puzzle | None = None
        self.chain: list[str] = []
        self.move_types: list[MoveKind] = []
        self.moves_left = self.max_moves
        self.score = 0
        self.game_over = False
        self.won = False
        self._error: TransientError | None = None
        self._epoch = 0  # bumped on every state change

    # -------------
    # Lifecycle
    # -------------

    def initialize(self, puzzle: Puzzle) -> None:
        self.puzzle = puzzle
        self.chain = [normalize_word(puzzle.start)]
        self.move_types = []
        self.moves_left = self.max_moves
        self.score = 0
        self.game_over = False
        self.won = False
        self._error = None
        self._epoch += 1

    def reset(self, puzzle: Puzzle) -> None:
        self.initialize(puzzle)

    # -------------
    # Read-only views
    # -------------

    @property
    def current_word(self) -> str:
        return self.chain[-1]

    @property
    def status(self) -> GameStatus:
        if not self.game_over:
            return GameStatus.PLAYING
        return GameStatus.WON if self.won else GameStatus.LOST

    @property
    def moves_used(self) -> int:
        return len(self.chain) - 1

    @property
    def error(self) -> TransientError | None:
        if self._error is not None and self._clock() >= self._error.expires_at:
            self._error = None
        return self._error

    def clear_error(self) -> None:
        self._error = None

    def _set_error(self, reason: str) -> None:
        self._error = TransientError(reason=reason, expires_at=self._clock() + ERROR_DISPLAY_SECONDS)

    def breakdown(self) -> ScoreBreakdown:
        letters = sum(1 for k in self.move_types if k is MoveKind.LETTER_CHANGE)
        synonyms = sum(1 for k in self.move_types if k is MoveKind.SYNONYM_SWAP)
        if not self.won:
            return ScoreBreakdown(
                letter_points=letters * self._rules.amount(ScoreKey.LETTER_CHANGE),
                synonym_points=synonyms * self._rules.amount(ScoreKey.SYNONYM_SWAP),
            )
        return ScoreBreakdown(
            letter_points=letters * self._rules.amount(ScoreKey.LETTER_CHANGE),
            synonym_points=synonyms * self._rules.amount(ScoreKey.SYNONYM_SWAP),
            unused_moves_bonus=self._rules.unused_moves_bonus(self.moves_left),
            clear_bonus=self._rules.amount(ScoreKey.CLEAR_BONUS),
        )

    # -------------
    # Operations
    # -------------

    async def submit(self, candidate: str) -> ValidationResult | None:
        """
        Validate and apply one move.

        Returns None when nothing happened (game over, blank input or no puzzle),
        otherwise the validation result. A rejection is also kept as the
        transient error until it expires.
        """
        if self.puzzle is None or self.game_over or not candidate.strip():
            return None

        word = normalize_word(candidate)
        epoch = self._epoch
        try:
            result = await self._validator.validate(self.current_word, word, self.chain, self.puzzle.target)
        except Exception:
            logger.exception("Move validation failed for %r -> %r", self.current_word, word)
            self._set_error(REASON_NETWORK_ERROR)
            return Rejected(REASON_NETWORK_ERROR)

        if epoch != self._epoch:
            logger.info("Chain changed while %r was being checked, dropping the move", word)
            return None

        if isinstance(result, Rejected):
            self._set_error(result.reason)
            return result

        self._apply(word, result, target=self.puzzle.target)
        return result

    def _apply(self, word: str, result: Accepted, *, target: str) -> None:
        self._error = None
        self._epoch += 1
        self.chain.append(word)
        self.move_types.append(result.kind)
        self.moves_left -= 1
        self.score += self._rules.move_points(result.kind)

        if word == normalize_word(target):
            self.won = True
            self.game_over = True
            self.score += self._rules.unused_moves_bonus(self.moves_left) + self._rules.amount(ScoreKey.CLEAR_BONUS)
            logger.info("Puzzle solved in %s moves, score=%s", self.moves_used, self.score)
        elif self.moves_left == 0:
            self.won = False
            self.game_over = True
            logger.info("Out of moves at %r, score=%s", word, self.score)

    def undo(self) -> bool:
        """
        Take back the last move. Score is left as is.
        Returns False when there is nothing to undo or the game is over.
        """
        if len(self.chain) <= 1 or self.game_over:
            return False
        self.chain.pop()
        self.move_types.pop()
        self.moves_left += 1
        self._epoch += 1
        return True

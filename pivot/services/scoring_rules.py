from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from pivot.domain.models import MoveKind

MAX_MOVES = 5


class ScoreKey:
    LETTER_CHANGE = "move.letter_change"
    SYNONYM_SWAP = "move.synonym_swap"
    CLEAR_BONUS = "game.clear_bonus"


@dataclass(frozen=True)
class ScoreRule:
    amount: int


class ScoringRules:
    """
    Central source of truth for Pivot points.

    The engine should NOT hardcode points. It asks:
      rules.move_points(MoveKind.SYNONYM_SWAP)
      rules.amount(ScoreKey.CLEAR_BONUS) + rules.unused_moves_bonus(moves_left)
    """

    def __init__(self, overrides: Mapping[str, int] | None = None) -> None:
        base: dict[str, int] = dict(self.default_rules())
        if overrides:
            for k, v in overrides.items():
                if k not in base:
                    raise KeyError(f"Unknown score key: {k}")
                base[k] = int(v)
        self._rules: dict[str, ScoreRule] = {k: ScoreRule(int(v)) for k, v in base.items()}

    @staticmethod
    def default_rules() -> Mapping[str, int]:
        return {
            ScoreKey.LETTER_CHANGE: 1,
            ScoreKey.SYNONYM_SWAP: 2,
            ScoreKey.CLEAR_BONUS: 5,
        }

    def amount(self, key: str) -> int:
        """
        Raises KeyError if missing (catches typos early).
        """
        rule = self._rules.get(key)
        if not rule:
            raise KeyError(f"Unknown score key: {key}")
        return int(rule.amount)

    def move_points(self, kind: MoveKind) -> int:
        if kind is MoveKind.LETTER_CHANGE:
            return self.amount(ScoreKey.LETTER_CHANGE)
        return self.amount(ScoreKey.SYNONYM_SWAP)

    @staticmethod
    def unused_moves_bonus(moves_left: int) -> int:
        # 4 left => 25, 3 => 16, 2 => 9, 1 => 4, 0 => 1
        return (int(moves_left) + 1) ** 2

    def snapshot(self) -> dict[str, int]:
        return {k: int(v.amount) for k, v in self._rules.items()}

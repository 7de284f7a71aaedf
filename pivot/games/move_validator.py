from __future__ import annotations

from typing import Iterable

from pivot.domain.models import Accepted, MoveKind, Rejected, ValidationResult
from pivot.services.lexical_gateway import LexicalGateway
from pivot.utils.text import differs_by_one_letter, is_alpha_word, normalize_word

REASON_SAME_WORD = "Same word, try something different!"
REASON_ALREADY_USED = "You already used that word!"
REASON_LETTERS_ONLY = "Only letters allowed, no spaces or symbols"
REASON_NO_RELATION = "Not a valid letter change or synonym swap"


def reason_not_a_word(word: str) -> str:
    return f'"{word}" does not seem to be a valid English word'


class MoveValidator:
    """
    Decides whether `next` may follow `prev` in a chain.

    Checks run in a fixed order and stop at the first failure, so the reason
    shown to the player is always the first rule the move breaks:
      same word -> already used -> letters only -> real word
      -> one-letter change -> synonym of prev -> prev is a synonym of next
    """

    def __init__(self, gateway: LexicalGateway) -> None:
        self._gateway = gateway

    async def validate(
        self,
        prev_word: str,
        next_word: str,
        chain: Iterable[str],
        target_word: str | None = None,
    ) -> ValidationResult:
        # Reaching the target is allowed at any move; target_word is not a constraint.
        prev = normalize_word(prev_word)
        nxt = normalize_word(next_word)

        if nxt == prev:
            return Rejected(REASON_SAME_WORD)

        if nxt in {normalize_word(w) for w in chain}:
            return Rejected(REASON_ALREADY_USED)

        if not is_alpha_word(nxt):
            return Rejected(REASON_LETTERS_ONLY)

        if not await self._gateway.check_validity(nxt):
            return Rejected(reason_not_a_word(nxt))

        if differs_by_one_letter(prev, nxt):
            return Accepted(MoveKind.LETTER_CHANGE)

        if nxt in await self._gateway.get_synonyms(prev):
            return Accepted(MoveKind.SYNONYM_SWAP, gloss=f"synonym of {prev}")

        # Synonym data is often one-directional
        if prev in await self._gateway.get_synonyms(nxt):
            return Accepted(MoveKind.SYNONYM_SWAP, gloss=f"synonym of {prev}")

        return Rejected(REASON_NO_RELATION)

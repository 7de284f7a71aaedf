from __future__ import annotations

import asyncio
import logging

from pivot.domain.errors import GameNotActive, SubmissionInProgress
from pivot.domain.models import Accepted, Definition, GameStatus, Puzzle, ValidationResult
from pivot.games.chain_state import ChainState
from pivot.games.puzzle_generator import PuzzleGenerator
from pivot.services.lexical_gateway import LexicalGateway
from pivot.utils.text import normalize_word

logger = logging.getLogger(__name__)


class PivotSession:
    """
    One player's Pivot game as seen by a presentation layer.

    - new_puzzle(): the most recently started generation is the one that lands
    - submit(): one at a time; an overlapping call raises SubmissionInProgress
    - definitions of the puzzle words and every accepted word are kept for display
    """

    def __init__(
        self,
        *,
        generator: PuzzleGenerator,
        state: ChainState,
        gateway: LexicalGateway,
    ) -> None:
        self._generator = generator
        self._gateway = gateway
        self.state = state
        self.definitions: dict[str, Definition] = {}

        self._generation = 0
        self._busy = False

    @property
    def puzzle(self) -> Puzzle | None:
        return self.state.puzzle

    @property
    def busy(self) -> bool:
        return self._busy

    async def _fetch_definitions(self, *words: str) -> dict[str, Definition]:
        defs = await asyncio.gather(*(self._gateway.get_definition(w) for w in words))
        return {normalize_word(w): d for w, d in zip(words, defs)}

    async def new_puzzle(self) -> Puzzle | None:
        """
        Generate and install a new puzzle.

        Returns None if a newer new_puzzle() call started while this one was
        generating; that newer call installs its own puzzle instead.
        """
        self._generation += 1
        ticket = self._generation

        puzzle = await self._generator.generate_random_pair()
        if ticket != self._generation:
            logger.info("Discarding stale puzzle %s -> %s", puzzle.start, puzzle.target)
            return None

        installed = await self._install(puzzle, ticket)
        return puzzle if installed else None

    async def _install(self, puzzle: Puzzle, ticket: int) -> bool:
        self.state.initialize(puzzle)
        self.definitions = {}
        defs = await self._fetch_definitions(puzzle.start, puzzle.target)
        # A newer puzzle may have been installed while definitions loaded.
        if ticket != self._generation:
            return False
        self.definitions.update(defs)
        return True

    def retry(self) -> None:
        """
        Start the same puzzle over (after a loss).
        """
        if self.state.puzzle is None:
            raise GameNotActive("No puzzle loaded")
        self.state.reset(self.state.puzzle)

    async def play_again(self) -> Puzzle | None:
        """
        Win -> brand new puzzle. Loss -> same puzzle from the start.
        A round still being played is left alone (returns None).
        """
        if not self.state.game_over:
            return None
        if self.state.status is GameStatus.WON:
            return await self.new_puzzle()
        self.retry()
        return self.state.puzzle

    async def submit(self, word: str) -> ValidationResult | None:
        if self.state.puzzle is None:
            raise GameNotActive("No puzzle loaded")
        if self._busy:
            raise SubmissionInProgress("A move is already being checked")

        self._busy = True
        try:
            result = await self.state.submit(word)
            if isinstance(result, Accepted):
                ticket = self._generation
                defs = await self._fetch_definitions(self.state.current_word)
                if ticket == self._generation:
                    self.definitions.update(defs)
            return result
        finally:
            self._busy = False

    def undo(self) -> bool:
        return self.state.undo()

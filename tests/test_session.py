import asyncio

import pytest

from pivot.domain.errors import GameNotActive, SubmissionInProgress
from pivot.domain.models import Accepted, GameStatus, Puzzle
from pivot.games.session import PivotSession


class ScriptedGenerator:
    """Hands out puzzles in order; each call can be held until released."""

    def __init__(self, puzzles, *, hold=False):
        self.puzzles = list(puzzles)
        self.hold = hold
        self.gates: list[asyncio.Event] = []

    async def generate_random_pair(self):
        puzzle = self.puzzles.pop(0)
        if self.hold:
            gate = asyncio.Event()
            self.gates.append(gate)
            await gate.wait()
        return puzzle


@pytest.fixture
def session(state, gateway):
    gen = ScriptedGenerator([Puzzle("cold", "warm"), Puzzle("love", "time")])
    return PivotSession(generator=gen, state=state, gateway=gateway)


async def test_new_puzzle_installs_state_and_definitions(session):
    puzzle = await session.new_puzzle()

    assert puzzle == Puzzle("cold", "warm")
    assert session.state.chain == ["cold"]
    assert set(session.definitions) == {"cold", "warm"}


async def test_latest_new_puzzle_wins(state, gateway):
    gen = ScriptedGenerator([Puzzle("cold", "warm"), Puzzle("love", "time")], hold=True)
    session = PivotSession(generator=gen, state=state, gateway=gateway)

    first = asyncio.create_task(session.new_puzzle())
    await asyncio.sleep(0)
    second = asyncio.create_task(session.new_puzzle())
    await asyncio.sleep(0)

    # the newer generation finishes first, the stale one afterwards
    gen.gates[1].set()
    assert await second == Puzzle("love", "time")
    gen.gates[0].set()
    assert await first is None

    assert session.puzzle == Puzzle("love", "time")
    assert set(session.definitions) == {"love", "time"}


async def test_submit_without_puzzle_raises(session):
    with pytest.raises(GameNotActive):
        await session.submit("gold")
    with pytest.raises(GameNotActive):
        session.retry()


async def test_overlapping_submit_is_refused(session, dictionary):
    await session.new_puzzle()

    gate = asyncio.Event()
    real_fetch = dictionary.fetch_entry

    async def slow_fetch(word):
        await gate.wait()
        return await real_fetch(word)

    dictionary.fetch_entry = slow_fetch
    pending = asyncio.create_task(session.submit("gold"))
    await asyncio.sleep(0)
    assert session.busy

    with pytest.raises(SubmissionInProgress):
        await session.submit("bold")

    gate.set()
    assert isinstance(await pending, Accepted)
    assert not session.busy


async def test_accepted_words_get_definitions(session):
    await session.new_puzzle()
    await session.submit("gold")
    assert "gold" in session.definitions


async def test_play_again_after_loss_retries_same_puzzle(session):
    await session.new_puzzle()
    for w in ["gold", "bold", "bolt", "boat", "coat"]:
        await session.submit(w)
    assert session.state.status is GameStatus.LOST

    puzzle = await session.play_again()

    assert puzzle == Puzzle("cold", "warm")
    assert session.state.chain == ["cold"]
    assert session.state.score == 0


async def test_play_again_after_win_loads_new_puzzle(session, related):
    await session.new_puzzle()
    related.synonym_map["cold"] = ["warm", "chilly"]
    await session.submit("warm")
    assert session.state.status is GameStatus.WON

    puzzle = await session.play_again()

    assert puzzle == Puzzle("love", "time")
    assert session.state.status is GameStatus.PLAYING


async def test_play_again_mid_round_changes_nothing(session):
    await session.new_puzzle()
    await session.submit("gold")
    await session.submit("bold")

    assert await session.play_again() is None
    assert session.state.chain == ["cold", "gold", "bold"]
    assert session.state.score == 2

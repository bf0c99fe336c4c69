"""Tests for the engine facade and delayed match resolution."""
import asyncio

import pytest
from goose_match.core.engine import GameEngine
from goose_match.core.generator import LevelGenerator
from goose_match.models.level import (
    Commentary,
    GamePhase,
    InvalidConfiguration,
    LevelConfig,
    Outcome,
    Tile,
)

MATCH_DELAY = 0.05


class FixedGenerator(LevelGenerator):
    """Generator returning a predefined row of non-overlapping tiles."""

    def __init__(self, kinds):
        super().__init__()
        self.kinds_row = kinds
        self.calls = 0

    def generate_level(self, config):
        config.validate()
        self.calls += 1
        return [
            Tile(id=f"g{self.calls}-t{i}", kind=kind, x=i * 100, y=0, depth=i)
            for i, kind in enumerate(self.kinds_row)
        ]


def make_engine(kinds, dock_capacity=7, commentary=None):
    config = LevelConfig(total_count=len(kinds), dock_capacity=dock_capacity)
    return GameEngine(
        config=config,
        generator=FixedGenerator(kinds),
        match_delay=MATCH_DELAY,
        commentary=commentary,
    )


def tile_id(engine, index):
    return f"g{engine.generation}-t{index}"


class TestLifecycle:
    """Test cases for start_level and the idle phase."""

    def test_engine_starts_idle(self):
        """Test that a new engine has no level."""
        engine = make_engine("AAA")
        snapshot = engine.snapshot()

        assert snapshot.phase == GamePhase.IDLE
        assert snapshot.pile_tiles == []
        assert not engine.tap("g1-t0")

    def test_start_level_sets_playing(self):
        """Test that starting a level fills the pile and empties the dock."""
        engine = make_engine("AAABBB")
        snapshot = engine.start_level()

        assert snapshot.phase == GamePhase.PLAYING
        assert len(snapshot.pile_tiles) == 6
        assert snapshot.dock == []
        assert snapshot.covered_ids == frozenset()
        assert snapshot.generation == 1

    def test_start_level_rejects_invalid_config(self):
        """Test that bad parameters raise synchronously."""
        engine = GameEngine(generator=LevelGenerator())

        with pytest.raises(InvalidConfiguration):
            engine.start_level(LevelConfig(total_count=10))

        assert engine.phase == GamePhase.IDLE

    def test_start_level_with_real_generator(self):
        """Test the default 33-tile level."""
        engine = GameEngine(generator=LevelGenerator())
        snapshot = engine.start_level()

        assert len(snapshot.pile_tiles) == 33
        top = max(snapshot.pile_tiles, key=lambda t: t.depth)
        assert top.id not in snapshot.covered_ids

    def test_snapshot_is_idempotent(self):
        """Test that two snapshots without mutation agree."""
        engine = GameEngine(generator=LevelGenerator())
        engine.start_level()

        assert engine.snapshot().to_dict() == engine.snapshot().to_dict()


class TestTapAndResolve:
    """Test cases for taps and resolve scheduling."""

    def test_match_clears_after_delay(self):
        """Test the AAA/BBB scenario end to end."""
        async def scenario():
            engine = make_engine("AAABBB")
            engine.start_level()

            for i in range(3):
                assert engine.tap(tile_id(engine, i))

            await asyncio.sleep(0)
            during = engine.snapshot()
            after = await engine.settle()
            return during, after

        during, after = asyncio.run(scenario())

        assert during.resolving
        assert len(during.dock) == 3
        assert after.dock == []
        assert [t.kind for t in after.pile_tiles] == ["B", "B", "B"]
        assert after.phase == GamePhase.PLAYING
        assert not after.resolving

    def test_tap_ignored_while_resolving(self):
        """Test that a tap during the match delay is a no-op."""
        async def scenario():
            engine = make_engine("AAABBB")
            engine.start_level()
            for i in range(3):
                engine.tap(tile_id(engine, i))

            await asyncio.sleep(0)
            accepted = engine.tap(tile_id(engine, 3))
            await engine.settle()
            return accepted, engine.snapshot()

        accepted, snapshot = asyncio.run(scenario())

        assert not accepted
        assert len(snapshot.pile_tiles) == 3

    def test_win_after_last_match(self):
        """Test that clearing the last triplet wins the level."""
        outcomes = []

        async def scenario():
            engine = make_engine("AAA")
            engine.add_outcome_listener(outcomes.append)
            engine.start_level()
            for i in range(3):
                engine.tap(tile_id(engine, i))
            return await engine.settle()

        snapshot = asyncio.run(scenario())

        assert snapshot.phase == GamePhase.WON
        assert outcomes == [Outcome.WON]

    def test_loss_when_dock_full(self):
        """Test the capacity-3 scenario with three distinct kinds."""
        outcomes = []

        async def scenario():
            engine = make_engine("ABCABCABC", dock_capacity=3)
            engine.add_outcome_listener(outcomes.append)
            engine.start_level()
            for i in range(3):
                engine.tap(tile_id(engine, i))
            await engine.settle()
            rejected = engine.tap(tile_id(engine, 3))
            return rejected, engine.snapshot()

        rejected, snapshot = asyncio.run(scenario())

        assert snapshot.phase == GamePhase.LOST
        assert not rejected
        assert len(snapshot.dock) == 3
        assert outcomes == [Outcome.LOST]

    def test_dock_never_exceeds_capacity(self):
        """Test that taps beyond capacity are rejected before resolving."""
        async def scenario():
            engine = make_engine("ABCDABCDABCD", dock_capacity=4)
            engine.start_level()
            accepted = [engine.tap(tile_id(engine, i)) for i in range(6)]
            during = len(engine.snapshot().dock)
            await engine.settle()
            return accepted, during

        accepted, during = asyncio.run(scenario())

        assert accepted == [True, True, True, True, False, False]
        assert during == 4

    def test_nearly_full_warning(self):
        """Test the warning flag with one free slot left."""
        async def scenario():
            engine = make_engine("ABCABCABC", dock_capacity=3)
            engine.start_level()
            engine.tap(tile_id(engine, 0))
            first = engine.snapshot().dock_nearly_full
            engine.tap(tile_id(engine, 1))
            second = engine.snapshot().dock_nearly_full
            await engine.settle()
            return first, second

        first, second = asyncio.run(scenario())

        assert not first
        assert second

    def test_restart_discards_pending_match(self):
        """Test that a stale delayed match never touches the new level."""
        async def scenario():
            engine = make_engine("AAABBB")
            engine.start_level()
            for i in range(3):
                engine.tap(tile_id(engine, i))

            await asyncio.sleep(0)
            assert engine.resolving

            engine.start_level()
            await asyncio.sleep(MATCH_DELAY * 2)
            return await engine.settle()

        snapshot = asyncio.run(scenario())

        assert snapshot.generation == 2
        assert snapshot.phase == GamePhase.PLAYING
        assert len(snapshot.pile_tiles) == 6
        assert snapshot.dock == []
        assert not snapshot.resolving

    def test_restart_after_terminal_phase(self):
        """Test that a finished game can start over, skipping idle."""
        async def scenario():
            engine = make_engine("ABCABCABC", dock_capacity=3)
            engine.start_level()
            for i in range(3):
                engine.tap(tile_id(engine, i))
            await engine.settle()
            lost = engine.phase
            return lost, engine.start_level()

        lost, snapshot = asyncio.run(scenario())

        assert lost == GamePhase.LOST
        assert snapshot.phase == GamePhase.PLAYING
        assert len(snapshot.pile_tiles) == 9


class TestCommentary:
    """Test cases for the outcome commentary hook."""

    def test_commentary_stored_on_win(self):
        """Test that commentary text lands in the snapshot."""
        async def commentary(outcome):
            return Commentary(text=f"you {outcome.value}", mood="happy")

        async def scenario():
            engine = make_engine("AAA", commentary=commentary)
            engine.start_level()
            for i in range(3):
                engine.tap(tile_id(engine, i))
            return await engine.settle(include_commentary=True)

        snapshot = asyncio.run(scenario())

        assert snapshot.phase == GamePhase.WON
        assert snapshot.commentary == Commentary(text="you won", mood="happy")
        assert not snapshot.commentary_pending

    def test_commentary_failure_keeps_phase(self):
        """Test that a failing collaborator leaves the game state alone."""
        async def commentary(outcome):
            raise RuntimeError("service unavailable")

        async def scenario():
            engine = make_engine("ABCABCABC", dock_capacity=3, commentary=commentary)
            engine.start_level()
            for i in range(3):
                engine.tap(tile_id(engine, i))
            return await engine.settle(include_commentary=True)

        snapshot = asyncio.run(scenario())

        assert snapshot.phase == GamePhase.LOST
        assert snapshot.commentary is None

    def test_restart_clears_commentary(self):
        """Test that commentary from the last level doesn't leak into the next."""
        async def commentary(outcome):
            return Commentary(text="nice", mood="happy")

        async def scenario():
            engine = make_engine("AAA", commentary=commentary)
            engine.start_level()
            for i in range(3):
                engine.tap(tile_id(engine, i))
            await engine.settle(include_commentary=True)
            before = engine.snapshot().commentary
            return before, engine.start_level()

        before, snapshot = asyncio.run(scenario())

        assert before is not None
        assert snapshot.commentary is None

    def test_slow_commentary_dropped_after_restart(self):
        """Test that commentary arriving after a restart is discarded."""
        async def commentary(outcome):
            await asyncio.sleep(MATCH_DELAY)
            return Commentary(text="late", mood="happy")

        async def scenario():
            engine = make_engine("AAA", commentary=commentary)
            engine.start_level()
            for i in range(3):
                engine.tap(tile_id(engine, i))
            await engine.settle()
            pending = engine.snapshot().commentary_pending
            engine.start_level()
            await asyncio.sleep(MATCH_DELAY * 2)
            return pending, engine.snapshot()

        pending, snapshot = asyncio.run(scenario())

        assert pending
        assert snapshot.commentary is None

    def test_failing_listener_does_not_block_commentary(self):
        """Test that a raising listener neither stops commentary nor other listeners."""
        outcomes = []

        def broken(outcome):
            raise RuntimeError("listener bug")

        async def commentary(outcome):
            return Commentary(text="still here", mood="happy")

        async def scenario():
            engine = make_engine("AAA", commentary=commentary)
            engine.add_outcome_listener(broken)
            engine.add_outcome_listener(outcomes.append)
            engine.start_level()
            for i in range(3):
                engine.tap(tile_id(engine, i))
            return await engine.settle(include_commentary=True)

        snapshot = asyncio.run(scenario())

        assert snapshot.phase == GamePhase.WON
        assert snapshot.commentary == Commentary(text="still here", mood="happy")
        assert outcomes == [Outcome.WON]


class TestClose:
    """Test cases for GameEngine.close."""

    def test_close_unfreezes_pending_match(self):
        """Test that closing mid-match clears the in-flight flags."""
        async def scenario():
            engine = make_engine("AAABBB")
            engine.start_level()
            for i in range(3):
                engine.tap(tile_id(engine, i))

            await asyncio.sleep(0)
            assert engine.resolving

            engine.close()
            closed = engine.snapshot()
            accepted = engine.tap(tile_id(engine, 3))
            engine.close()
            return closed, accepted

        closed, accepted = asyncio.run(scenario())

        assert not closed.resolving
        assert len(closed.dock) == 3
        assert accepted

    def test_close_idle_engine(self):
        """Test that closing before any level is harmless."""
        engine = make_engine("AAA")
        engine.close()

        assert engine.phase == GamePhase.IDLE

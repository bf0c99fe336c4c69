"""Engine facade: level lifecycle, taps and delayed match resolution."""
import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Set

from ..models.level import (
    Commentary,
    GamePhase,
    GameSnapshot,
    LevelConfig,
    Outcome,
)
from .dock import MatchEngine, ResolveAction
from .generator import LevelGenerator, get_generator

logger = logging.getLogger(__name__)

CommentarySource = Callable[[Outcome], Awaitable[Optional[Commentary]]]
OutcomeListener = Callable[[Outcome], None]


class GameEngine:
    """
    Observable game loop over one pile.

    Mutations happen only through start_level(), tap() and the resolve passes
    that tap() schedules on the running event loop. Every delayed effect is
    keyed by the level generation and becomes a no-op once a new level starts.
    """

    def __init__(
        self,
        config: Optional[LevelConfig] = None,
        generator: Optional[LevelGenerator] = None,
        match_delay: float = 0.4,
        commentary: Optional[CommentarySource] = None,
    ):
        """
        Initialize engine in the idle phase.

        Args:
            config: Default level config used by start_level().
            generator: Level generator (inject a seeded one for tests).
            match_delay: Seconds a matched triplet stays visible before clearing.
            commentary: Async callable producing flavor text for an outcome.
        """
        self.config = config or LevelConfig()
        self.generator = generator or get_generator()
        self.match_delay = match_delay
        self.generation = 0
        self.commentary: Optional[Commentary] = None
        self.last_outcome: Optional[Outcome] = None

        self._commentary_source = commentary
        self._listeners: List[OutcomeListener] = []
        self._match: Optional[MatchEngine] = None
        self._resolving = False
        self._resolve_tasks: Set[asyncio.Task] = set()
        self._commentary_task: Optional[asyncio.Task] = None

    @property
    def phase(self) -> GamePhase:
        if self._match is None:
            return GamePhase.IDLE
        return self._match.phase

    @property
    def resolving(self) -> bool:
        return self._resolving

    def add_outcome_listener(self, listener: OutcomeListener) -> None:
        """Register a callback fired with the outcome on win or loss."""
        self._listeners.append(listener)

    def start_level(self, config: Optional[LevelConfig] = None) -> GameSnapshot:
        """
        Generate a fresh level and start playing it.

        Works from any phase and discards pending matches and commentary of
        the previous level.

        Raises:
            InvalidConfiguration: If the config can't produce a playable level.
        """
        config = config or self.config
        tiles = self.generator.generate_level(config)

        self._cancel_pending()
        self.config = config
        self.generation += 1
        self._match = MatchEngine(tiles, config)
        self._resolving = False
        self.commentary = None
        self.last_outcome = None

        logger.info(
            "Started level %d: %d tiles, dock capacity %d",
            self.generation, len(tiles), config.dock_capacity,
        )
        return self.snapshot()

    def tap(self, tile_id: str) -> bool:
        """
        Tap a pile tile. Must be called with an event loop running.

        Returns:
            True if the tile entered the dock and a resolve pass was scheduled.
        """
        if self._match is None:
            return False

        accepted = self._match.tap(tile_id)
        if accepted:
            self._schedule_resolve()
        return accepted

    def snapshot(self) -> GameSnapshot:
        """Derive the read-only view of the current state."""
        match = self._match
        if match is None:
            return GameSnapshot(
                pile_tiles=[],
                dock=[],
                covered_ids=frozenset(),
                phase=GamePhase.IDLE,
                generation=self.generation,
                dock_capacity=self.config.dock_capacity,
            )

        return GameSnapshot(
            pile_tiles=match.pile_tiles(),
            dock=match.dock.tiles,
            covered_ids=match.covered_ids(),
            phase=match.phase,
            generation=self.generation,
            dock_capacity=match.dock.capacity,
            resolving=self._resolving,
            commentary=self.commentary,
            commentary_pending=self._commentary_task is not None and not self._commentary_task.done(),
        )

    async def settle(self, include_commentary: bool = False) -> GameSnapshot:
        """Wait until no resolve pass (and optionally no commentary fetch) is pending."""
        while self._resolve_tasks:
            await asyncio.gather(*list(self._resolve_tasks), return_exceptions=True)

        if include_commentary and self._commentary_task is not None:
            await asyncio.gather(self._commentary_task, return_exceptions=True)

        return self.snapshot()

    def close(self) -> None:
        """Cancel pending resolve passes and commentary fetches."""
        self._cancel_pending()
        self._resolving = False
        if self._match is not None:
            self._match.discard_match()

    def _schedule_resolve(self) -> None:
        task = asyncio.get_running_loop().create_task(self._resolve(self.generation))
        self._resolve_tasks.add(task)
        task.add_done_callback(self._resolve_tasks.discard)

    async def _resolve(self, generation: int) -> None:
        """One resolve pass. Only one pass may be in flight at a time."""
        if generation != self.generation or self._resolving:
            return

        match = self._match
        result = match.resolve_step()

        if result.action == ResolveAction.MATCH:
            self._resolving = True
            await asyncio.sleep(self.match_delay)

            if generation != self.generation:
                logger.debug("Discarding stale match of %s from level %d", result.kind, generation)
                return

            match.apply_match(result.kind)
            self._resolving = False
            # Follow-up pass picks up a win or a further triplet
            self._schedule_resolve()

        elif result.action in (ResolveAction.WON, ResolveAction.LOST):
            self._emit(Outcome(result.action.value), generation)

    def _emit(self, outcome: Outcome, generation: int) -> None:
        self.last_outcome = outcome

        if self._commentary_source is not None:
            self._commentary_task = asyncio.get_running_loop().create_task(
                self._fetch_commentary(outcome, generation)
            )

        for listener in self._listeners:
            try:
                listener(outcome)
            except Exception:
                logger.exception("Outcome listener %r failed on %s", listener, outcome.value)

    async def _fetch_commentary(self, outcome: Outcome, generation: int) -> None:
        try:
            commentary = await self._commentary_source(outcome)
        except Exception:
            logger.warning("Commentary for %s failed", outcome.value, exc_info=True)
            commentary = None

        if generation == self.generation:
            self.commentary = commentary

    def _cancel_pending(self) -> None:
        for task in list(self._resolve_tasks):
            task.cancel()
        self._resolve_tasks.clear()

        if self._commentary_task is not None and not self._commentary_task.done():
            self._commentary_task.cancel()
        self._commentary_task = None

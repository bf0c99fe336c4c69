"""Dock intake, triplet matching and win/loss state machine."""
import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, FrozenSet

from ..models.level import (
    GamePhase,
    LevelConfig,
    Tile,
    TileLocation,
)
from .occlusion import covered_ids, is_covered

logger = logging.getLogger(__name__)

MATCH_SIZE = 3


class Dock:
    """Bounded holding area, ordered by insertion time (oldest first)."""

    def __init__(self, capacity: int = 7):
        self.capacity = capacity
        self._tiles: List[Tile] = []

    def __len__(self) -> int:
        return len(self._tiles)

    def __iter__(self):
        return iter(self._tiles)

    @property
    def tiles(self) -> List[Tile]:
        return list(self._tiles)

    @property
    def is_full(self) -> bool:
        return len(self._tiles) >= self.capacity

    def admit(self, tile: Tile) -> bool:
        """Move a pile tile into the dock. Returns False if it can't be admitted."""
        if self.is_full or tile.location != TileLocation.ON_PILE:
            return False
        tile.location = TileLocation.IN_DOCK
        self._tiles.append(tile)
        return True

    def kind_counts(self) -> Dict[str, int]:
        return Counter(t.kind for t in self._tiles)

    def triplet_kind(self) -> Optional[str]:
        """First kind (by first appearance in the dock) present at least three times."""
        counts = self.kind_counts()
        for tile in self._tiles:
            if counts[tile.kind] >= MATCH_SIZE:
                return tile.kind
        return None

    def take_triplet(self, kind: str) -> List[Tile]:
        """
        Clear the first three tiles of a kind in insertion order.

        Returns:
            The cleared tiles, or an empty list if fewer than three are docked.
        """
        chosen = [t for t in self._tiles if t.kind == kind][:MATCH_SIZE]
        if len(chosen) < MATCH_SIZE:
            return []

        chosen_ids = {t.id for t in chosen}
        self._tiles = [t for t in self._tiles if t.id not in chosen_ids]
        for tile in chosen:
            tile.location = TileLocation.CLEARED
        return chosen


class ResolveAction(str, Enum):
    """What a single resolve pass decided."""
    NONE = "none"
    MATCH = "match"
    WON = "won"
    LOST = "lost"


@dataclass
class ResolveResult:
    """Result of one resolve pass."""
    action: ResolveAction
    kind: Optional[str] = None
    cleared: List[Tile] = field(default_factory=list)


class MatchEngine:
    """State machine for one level: taps, triplet resolution and terminal phase."""

    def __init__(self, tiles: Iterable[Tile], config: Optional[LevelConfig] = None):
        """
        Initialize engine for a freshly generated level.

        Args:
            tiles: All tiles of the level.
            config: Level config (dock capacity, footprint, cover ratio).
        """
        self.config = config or LevelConfig()
        self.tiles: Dict[str, Tile] = {t.id: t for t in tiles}
        self.dock = Dock(self.config.dock_capacity)
        self.phase = GamePhase.PLAYING
        self.pending_kind: Optional[str] = None

    @property
    def match_pending(self) -> bool:
        return self.pending_kind is not None

    def pile_tiles(self) -> List[Tile]:
        """Tiles still on the pile, bottom to top."""
        return sorted(
            (t for t in self.tiles.values() if t.on_pile),
            key=lambda t: t.depth,
        )

    def covered_ids(self) -> FrozenSet[str]:
        return covered_ids(
            self.tiles.values(),
            self.config.tile_footprint,
            self.config.cover_ratio,
        )

    def tap(self, tile_id: str) -> bool:
        """
        Move an uncovered pile tile into the dock.

        Covered, docked, cleared or unknown tiles, a full dock, a pending
        match and terminal phases all make the tap a no-op.

        Returns:
            True if the tile entered the dock.
        """
        if self.phase != GamePhase.PLAYING or self.match_pending:
            return False

        tile = self.tiles.get(tile_id)
        if tile is None or not tile.on_pile:
            return False
        if self.dock.is_full:
            return False

        pile = self.pile_tiles()
        if is_covered(tile, pile, self.config.tile_footprint, self.config.cover_ratio):
            return False

        return self.dock.admit(tile)

    def resolve_step(self) -> ResolveResult:
        """
        Run one resolve pass, minus the visual delay.

        A match is only marked pending here; the caller clears it with
        apply_match() once the delay has passed. Terminal phases are only
        checked when no triplet is present.
        """
        if self.phase != GamePhase.PLAYING or self.match_pending:
            return ResolveResult(ResolveAction.NONE)

        kind = self.dock.triplet_kind()
        if kind is not None:
            self.pending_kind = kind
            return ResolveResult(ResolveAction.MATCH, kind=kind)

        if len(self.dock) == 0 and not self.pile_tiles():
            self.phase = GamePhase.WON
            logger.info("Level won")
            return ResolveResult(ResolveAction.WON)

        if self.dock.is_full:
            self.phase = GamePhase.LOST
            logger.info("Level lost with dock %s", [t.kind for t in self.dock])
            return ResolveResult(ResolveAction.LOST)

        return ResolveResult(ResolveAction.NONE)

    def apply_match(self, kind: Optional[str] = None) -> List[Tile]:
        """Clear the pending triplet and return the cleared tiles."""
        kind = kind or self.pending_kind
        self.pending_kind = None
        if kind is None:
            return []

        cleared = self.dock.take_triplet(kind)
        logger.debug("Cleared triplet of %s, dock now %d", kind, len(self.dock))
        return cleared

    def discard_match(self) -> None:
        """Forget a pending match without clearing it; the triplet stays docked."""
        self.pending_kind = None

    def resolve(self) -> ResolveResult:
        """Resolve pass with the match applied immediately (no delay)."""
        result = self.resolve_step()
        if result.action == ResolveAction.MATCH:
            result.cleared = self.apply_match(result.kind)
        return result

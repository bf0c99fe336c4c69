"""Occlusion evaluation: which pile tiles are covered by a higher tile."""
from typing import FrozenSet, Iterable

from ..models.level import Tile

DEFAULT_COVER_RATIO = 0.85


def is_covered(
    tile: Tile,
    on_pile_tiles: Iterable[Tile],
    tile_footprint: float,
    cover_ratio: float = DEFAULT_COVER_RATIO,
) -> bool:
    """
    Check whether a tile is covered by a strictly higher overlapping tile.

    Footprints are compared as axis-aligned boxes; tilt is ignored.

    Args:
        tile: Tile to test.
        on_pile_tiles: Tiles to test against. Tiles not on the pile are skipped.
        tile_footprint: Width/height of one tile.
        cover_ratio: Fraction of the footprint the centres must be within.

    Returns:
        True if the tile cannot be tapped.
    """
    if not tile.on_pile:
        return False

    threshold = tile_footprint * cover_ratio

    for other in on_pile_tiles:
        if other.id == tile.id or not other.on_pile:
            continue
        if other.depth <= tile.depth:
            continue
        if abs(other.x - tile.x) < threshold and abs(other.y - tile.y) < threshold:
            return True

    return False


def covered_ids(
    tiles: Iterable[Tile],
    tile_footprint: float,
    cover_ratio: float = DEFAULT_COVER_RATIO,
) -> FrozenSet[str]:
    """Recompute the full set of covered tile ids over the pile."""
    pile = sorted((t for t in tiles if t.on_pile), key=lambda t: t.depth, reverse=True)
    covered = set()

    for i, tile in enumerate(pile):
        # Only tiles earlier in the list are higher
        if is_covered(tile, pile[:i], tile_footprint, cover_ratio):
            covered.add(tile.id)

    return frozenset(covered)

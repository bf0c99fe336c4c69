"""Level generator producing a solvable, loosely centred pile."""
import logging
import random
from typing import List, Optional

from ..models.level import (
    InvalidConfiguration,
    LevelConfig,
    Tile,
    TILE_KINDS,
)

logger = logging.getLogger(__name__)


class LevelGenerator:
    """Generates piles where every kind appears in whole triplets."""

    # Top tiles may wander over 60% of the free area, bottom tiles over all of it
    BASE_SPREAD = 0.6
    CENTRALITY_SPREAD = 0.4
    MAX_TILT = 30.0

    def __init__(self, rng: Optional[random.Random] = None, kinds: Optional[List[str]] = None):
        """
        Initialize generator.

        Args:
            rng: Random source. Pass a seeded instance for reproducible levels.
            kinds: Symbol catalog to draw from (defaults to TILE_KINDS).
        """
        self.rng = rng or random.Random()
        self.kinds = list(kinds) if kinds is not None else list(TILE_KINDS)

    def generate(
        self,
        total_count: int,
        type_pool_size: int,
        area_size: float,
        tile_footprint: float,
    ) -> List[Tile]:
        """
        Generate the tiles of a new level.

        Args:
            total_count: Number of tiles, must be a multiple of 3.
            type_pool_size: Number of distinct kinds to use (clamped to catalog size).
            area_size: Width/height of the square play area.
            tile_footprint: Width/height of one tile.

        Returns:
            Tiles ordered by depth (index 0 is the bottom of the pile).

        Raises:
            InvalidConfiguration: If total_count is not divisible by 3 or sizes don't fit.
        """
        if total_count <= 0 or total_count % 3 != 0:
            raise InvalidConfiguration(
                f"total_count must be a positive multiple of 3, got {total_count}"
            )
        if type_pool_size < 1:
            raise InvalidConfiguration(
                f"type_pool_size must be at least 1, got {type_pool_size}"
            )
        if tile_footprint <= 0 or tile_footprint > area_size:
            raise InvalidConfiguration(
                f"tile_footprint ({tile_footprint}) must be positive and "
                f"fit inside area_size ({area_size})"
            )

        kinds = self._select_kinds(type_pool_size)
        pool = self._build_pool(kinds, total_count // 3)
        self.rng.shuffle(pool)

        max_offset = (area_size - tile_footprint) / 2
        token = f"{self.rng.getrandbits(32):08x}"
        tiles = []

        for index, kind in enumerate(pool):
            # Later (higher) tiles sit closer to the centre
            centrality = 1 - index / total_count
            half_width = max_offset * (self.BASE_SPREAD + self.CENTRALITY_SPREAD * centrality)

            tiles.append(Tile(
                id=f"tile-{index}-{token}",
                kind=kind,
                x=self.rng.uniform(-half_width, half_width),
                y=self.rng.uniform(-half_width, half_width),
                depth=index,
                tilt=self.rng.uniform(-self.MAX_TILT, self.MAX_TILT),
            ))

        logger.debug(
            "Generated %d tiles with kinds %s (token %s)", len(tiles), kinds, token
        )
        return tiles

    def generate_level(self, config: LevelConfig) -> List[Tile]:
        """Validate a full level config and generate its tiles."""
        config.validate()
        return self.generate(
            config.total_count,
            config.type_pool_size,
            config.area_size,
            config.tile_footprint,
        )

    def _select_kinds(self, type_pool_size: int) -> List[str]:
        """Pick distinct kinds at random, clamped to the catalog size."""
        count = min(type_pool_size, len(self.kinds))
        return self.rng.sample(self.kinds, count)

    @staticmethod
    def _build_pool(kinds: List[str], triplets: int) -> List[str]:
        """Build the kind multiset, cycling round-robin so counts stay even."""
        pool: List[str] = []
        for i in range(triplets):
            kind = kinds[i % len(kinds)]
            pool.extend([kind, kind, kind])
        return pool


# Singleton instance
_generator = None


def get_generator() -> LevelGenerator:
    """Get singleton generator instance."""
    global _generator
    if _generator is None:
        _generator = LevelGenerator()
    return _generator

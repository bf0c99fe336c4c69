"""Level data models and structures."""
from dataclasses import dataclass
from typing import Dict, List, Any, Optional, FrozenSet
from enum import Enum


class InvalidConfiguration(ValueError):
    """Raised when level parameters violate the divisibility or sizing rules."""


class TileLocation(str, Enum):
    """Lifecycle state of a tile."""
    ON_PILE = "on_pile"
    IN_DOCK = "in_dock"
    CLEARED = "cleared"


class GamePhase(str, Enum):
    """Game phase enumeration."""
    IDLE = "idle"
    PLAYING = "playing"
    WON = "won"
    LOST = "lost"

    @property
    def is_terminal(self) -> bool:
        return self in (GamePhase.WON, GamePhase.LOST)


class Outcome(str, Enum):
    """Outcome event forwarded to the commentary collaborator."""
    WON = "won"
    LOST = "lost"


@dataclass
class Tile:
    """A single tile of the pile."""
    id: str
    kind: str
    x: float
    y: float
    depth: int
    tilt: float = 0.0
    location: TileLocation = TileLocation.ON_PILE

    @property
    def on_pile(self) -> bool:
        return self.location == TileLocation.ON_PILE

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "kind": self.kind,
            "x": round(self.x, 2),
            "y": round(self.y, 2),
            "depth": self.depth,
            "tilt": round(self.tilt, 2),
            "location": self.location.value,
        }


@dataclass
class LevelConfig:
    """Parameters for level generation and play."""
    total_count: int = 33
    type_pool_size: int = 6
    area_size: float = 340
    tile_footprint: float = 60
    dock_capacity: int = 7
    cover_ratio: float = 0.85

    def validate(self) -> None:
        """
        Check the divisibility and sizing rules.

        Raises:
            InvalidConfiguration: If any parameter makes the level unplayable.
        """
        if self.total_count <= 0 or self.total_count % 3 != 0:
            raise InvalidConfiguration(
                f"total_count must be a positive multiple of 3, got {self.total_count}"
            )
        if self.type_pool_size < 1:
            raise InvalidConfiguration(
                f"type_pool_size must be at least 1, got {self.type_pool_size}"
            )
        if self.tile_footprint <= 0 or self.tile_footprint > self.area_size:
            raise InvalidConfiguration(
                f"tile_footprint ({self.tile_footprint}) must be positive and "
                f"fit inside area_size ({self.area_size})"
            )
        if self.dock_capacity < 3:
            raise InvalidConfiguration(
                f"dock_capacity must hold at least one triplet, got {self.dock_capacity}"
            )
        if not 0 < self.cover_ratio <= 1:
            raise InvalidConfiguration(
                f"cover_ratio must be in (0, 1], got {self.cover_ratio}"
            )

    @classmethod
    def from_settings(cls, settings: Any) -> "LevelConfig":
        """Build the default level config from application settings."""
        return cls(
            total_count=settings.item_count,
            type_pool_size=settings.type_pool_size,
            area_size=settings.area_size,
            tile_footprint=settings.tile_size,
            dock_capacity=settings.dock_capacity,
            cover_ratio=settings.cover_ratio,
        )


@dataclass
class Commentary:
    """Flavor text returned by the commentary service."""
    text: str
    mood: str = "neutral"  # neutral / happy / sarcastic

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "mood": self.mood}


@dataclass
class GameSnapshot:
    """Read-only view of the engine state, rebuilt after every mutation."""
    pile_tiles: List[Tile]
    dock: List[Tile]
    covered_ids: FrozenSet[str]
    phase: GamePhase
    generation: int = 0
    dock_capacity: int = 7
    resolving: bool = False
    commentary: Optional[Commentary] = None
    commentary_pending: bool = False

    @property
    def dock_nearly_full(self) -> bool:
        """Warning flag shown once the dock has one free slot or less."""
        return (
            self.phase == GamePhase.PLAYING
            and len(self.dock) >= self.dock_capacity - 1
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "pile_tiles": [t.to_dict() for t in self.pile_tiles],
            "dock": [t.to_dict() for t in self.dock],
            "covered_ids": sorted(self.covered_ids),
            "phase": self.phase.value,
            "generation": self.generation,
            "dock_capacity": self.dock_capacity,
            "dock_nearly_full": self.dock_nearly_full,
            "resolving": self.resolving,
            "commentary": self.commentary.to_dict() if self.commentary else None,
            "commentary_pending": self.commentary_pending,
        }


# Tile kind catalog
TILE_KINDS = {
    "🪿": "Goose",
    "🦆": "Duck",
    "🐓": "Rooster",
    "🥚": "Egg",
    "🌽": "Corn",
    "🥕": "Carrot",
    "🚜": "Tractor",
    "🛖": "Hut",
}

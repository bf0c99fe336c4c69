"""Data models package.

This package contains data models and schemas for the application.
"""
from .level import (
    InvalidConfiguration,
    TileLocation,
    GamePhase,
    Outcome,
    Tile,
    LevelConfig,
    Commentary,
    GameSnapshot,
    TILE_KINDS,
)
from .schemas import (
    LevelOverrides,
    StartRequest,
    TapRequest,
    TileSchema,
    CommentarySchema,
    SnapshotSchema,
    GameResponse,
    TapResponse,
    ErrorResponse,
)

__all__ = [
    # Level models
    "InvalidConfiguration",
    "TileLocation",
    "GamePhase",
    "Outcome",
    "Tile",
    "LevelConfig",
    "Commentary",
    "GameSnapshot",
    "TILE_KINDS",
    # API schemas
    "LevelOverrides",
    "StartRequest",
    "TapRequest",
    "TileSchema",
    "CommentarySchema",
    "SnapshotSchema",
    "GameResponse",
    "TapResponse",
    "ErrorResponse",
]

"""Pydantic schemas for API request/response validation."""
from pydantic import BaseModel, Field
from typing import List, Optional


class LevelOverrides(BaseModel):
    """Optional level parameters overriding the server defaults."""
    total_count: Optional[int] = Field(default=None, description="Number of tiles (multiple of 3)")
    type_pool_size: Optional[int] = Field(default=None, description="Distinct tile kinds to use")
    area_size: Optional[float] = Field(default=None, description="Width/height of the play area")
    tile_footprint: Optional[float] = Field(default=None, description="Width/height of one tile")
    dock_capacity: Optional[int] = Field(default=None, description="Dock slots")
    cover_ratio: Optional[float] = Field(default=None, description="Overlap ratio for covering")


class StartRequest(BaseModel):
    """Request schema for starting or restarting a level."""
    config: Optional[LevelOverrides] = Field(default=None, description="Level parameter overrides")


class TapRequest(BaseModel):
    """Request schema for tapping a tile."""
    tile_id: str = Field(..., description="Id of the tapped tile")


class TileSchema(BaseModel):
    """Tile as seen by the presentation layer."""
    id: str
    kind: str
    x: float
    y: float
    depth: int
    tilt: float
    location: str


class CommentarySchema(BaseModel):
    """End-of-game commentary."""
    text: str
    mood: str


class SnapshotSchema(BaseModel):
    """Read-only game state."""
    pile_tiles: List[TileSchema] = Field(default=[], description="Tiles on the pile, bottom to top")
    dock: List[TileSchema] = Field(default=[], description="Docked tiles, oldest first")
    covered_ids: List[str] = Field(default=[], description="Ids of pile tiles that can't be tapped")
    phase: str = Field(..., description="Game phase (idle/playing/won/lost)")
    generation: int = Field(..., description="Level identifier, bumped on every start")
    dock_capacity: int = Field(..., description="Dock slots")
    dock_nearly_full: bool = Field(default=False, description="At most one free dock slot left")
    resolving: bool = Field(default=False, description="A matched triplet is about to clear")
    commentary: Optional[CommentarySchema] = Field(default=None, description="Commentary text")
    commentary_pending: bool = Field(default=False, description="Commentary is being fetched")


class GameResponse(BaseModel):
    """Response schema for session creation and lookups."""
    session_id: str = Field(..., description="Game session id")
    snapshot: SnapshotSchema


class TapResponse(BaseModel):
    """Response schema for a tap."""
    accepted: bool = Field(..., description="Whether the tile entered the dock")
    snapshot: SnapshotSchema


class ErrorResponse(BaseModel):
    """Error response schema."""
    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(default=None, description="Detailed error information")

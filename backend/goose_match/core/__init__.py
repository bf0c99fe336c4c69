"""Core game logic package.

This package contains the level generator, occlusion evaluator, dock
state machine and the engine facade that composes them.
"""
from .generator import LevelGenerator, get_generator
from .occlusion import is_covered, covered_ids
from .dock import Dock, MatchEngine, ResolveAction, ResolveResult
from .engine import GameEngine
from .sessions import GameSessionStore, get_session_store

__all__ = [
    "LevelGenerator",
    "get_generator",
    "is_covered",
    "covered_ids",
    "Dock",
    "MatchEngine",
    "ResolveAction",
    "ResolveResult",
    "GameEngine",
    "GameSessionStore",
    "get_session_store",
]

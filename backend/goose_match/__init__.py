"""Catch the Goose: tile-matching pile puzzle engine and API."""
__version__ = "1.0.0"

"""External service clients package.

This package contains the client for the commentary text-generation service.
"""
from .commentary import (
    CommentaryClient,
    get_commentary_client,
    extract_text,
)

__all__ = [
    "CommentaryClient",
    "get_commentary_client",
    "extract_text",
]

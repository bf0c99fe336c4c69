"""Text-generation client for end-of-game commentary."""
import asyncio
import json
import logging
import aiohttp
from typing import Optional, Dict, Any

from ..config import get_settings
from ..models.level import Commentary, Outcome

logger = logging.getLogger(__name__)

PROMPTS = {
    Outcome.WON: (
        "Generate a celebratory, slightly chaotic message (max 15 words) "
        "for winning 'Catch the Goose'. Use farm emojis."
    ),
    Outcome.LOST: (
        "Generate a sarcastic roast (max 15 words) for losing 'Catch the Goose' "
        "because the basket is full. Use farm emojis."
    ),
}

MOODS = {
    Outcome.WON: "happy",
    Outcome.LOST: "sarcastic",
}


def extract_text(data: Dict[str, Any]) -> Optional[str]:
    """
    Pull the generated text out of a generateContent response.

    The response nests text as:
    {
        "candidates": [
            {"content": {"parts": [{"text": "..."}]}}
        ]
    }

    Returns:
        Stripped text of the first non-empty part, or None.
    """
    if not isinstance(data, dict):
        return None

    candidates = data.get("candidates")
    if not isinstance(candidates, list):
        return None

    for candidate in candidates:
        if not isinstance(candidate, dict):
            continue
        content = candidate.get("content")
        if not isinstance(content, dict):
            continue
        parts = content.get("parts")
        if not isinstance(parts, list):
            continue

        for part in parts:
            if not isinstance(part, dict):
                continue
            text = part.get("text")
            if isinstance(text, str) and text.strip():
                return text.strip()

    return None


class CommentaryClient:
    """Client for the Gemini generateContent REST API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize commentary client.

        Args:
            api_key: Gemini API key. Without one the client stays silent.
            model: Model name (e.g., gemini-2.5-flash).
            base_url: API root (e.g., https://generativelanguage.googleapis.com/v1beta).
            timeout: Total request timeout in seconds.
        """
        settings = get_settings()
        self.api_key = api_key or settings.gemini_api_key
        self.model = model or settings.gemini_model
        self.base_url = (base_url or settings.gemini_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.commentary_timeout

    @property
    def is_configured(self) -> bool:
        """Check if client is properly configured."""
        return bool(self.api_key and self.base_url and self.model)

    async def fetch_commentary(self, outcome: Outcome) -> Optional[Commentary]:
        """
        Ask the model for a one-liner about the outcome.

        Args:
            outcome: Won or lost.

        Returns:
            Commentary, or None when unconfigured or the request fails.
        """
        if not self.is_configured:
            return None

        endpoint = f"{self.base_url}/models/{self.model}:generateContent"
        payload = {"contents": [{"parts": [{"text": PROMPTS[outcome]}]}]}

        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    endpoint,
                    params={"key": self.api_key},
                    json=payload,
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                ) as response:
                    result_text = await response.text()

                    if response.status != 200:
                        logger.warning(
                            "Commentary request failed with status %d: %s",
                            response.status, result_text[:200],
                        )
                        return None

                    text = extract_text(json.loads(result_text))

        except (aiohttp.ClientError, asyncio.TimeoutError, json.JSONDecodeError) as e:
            logger.warning("Commentary request error: %s", e)
            return None

        if text is None:
            return None
        return Commentary(text=text, mood=MOODS[outcome])


# Singleton instance
_client = None


def get_commentary_client() -> CommentaryClient:
    """Get singleton commentary client instance."""
    global _client
    if _client is None:
        _client = CommentaryClient()
    return _client

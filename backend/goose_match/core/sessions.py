"""In-memory registry of running games."""
import logging
import time
import uuid
from collections import OrderedDict
from typing import Callable, Dict, Optional

from ..clients.commentary import get_commentary_client
from ..config import get_settings
from ..models.level import LevelConfig
from .engine import CommentarySource, GameEngine
from .generator import LevelGenerator

logger = logging.getLogger(__name__)


class GameSessionStore:
    """
    Holds one GameEngine per session id for the lifetime of the process.

    The store is bounded: sessions idle for longer than session_ttl seconds
    are dropped, and once max_sessions is reached the least recently used
    session is evicted to make room for a new one.
    """

    def __init__(
        self,
        default_config: Optional[LevelConfig] = None,
        match_delay: Optional[float] = None,
        commentary: Optional[CommentarySource] = None,
        generator: Optional[LevelGenerator] = None,
        max_sessions: Optional[int] = None,
        session_ttl: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        settings = get_settings()
        self.default_config = default_config or LevelConfig.from_settings(settings)
        self.match_delay = (
            match_delay if match_delay is not None else settings.match_delay_ms / 1000
        )
        self.commentary = commentary
        self.generator = generator
        self.max_sessions = max_sessions if max_sessions is not None else settings.max_sessions
        self.session_ttl = session_ttl if session_ttl is not None else settings.session_ttl_seconds
        self._clock = clock
        # session_id -> engine, least recently used first
        self._sessions: "OrderedDict[str, GameEngine]" = OrderedDict()
        self._last_used: Dict[str, float] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def create(self, config: Optional[LevelConfig] = None) -> str:
        """
        Create a session and start its first level.

        Raises:
            InvalidConfiguration: If the config can't produce a playable level.
        """
        engine = GameEngine(
            config=config or self.default_config,
            generator=self.generator,
            match_delay=self.match_delay,
            commentary=self.commentary,
        )
        engine.start_level()

        self.prune()
        while self._sessions and len(self._sessions) >= self.max_sessions:
            oldest = next(iter(self._sessions))
            logger.info("Evicting game session %s (store full)", oldest)
            self._drop(oldest)

        session_id = uuid.uuid4().hex
        self._sessions[session_id] = engine
        self._last_used[session_id] = self._clock()
        logger.info("Created game session %s", session_id)
        return session_id

    def get(self, session_id: str) -> Optional[GameEngine]:
        """Look up a session and mark it as recently used."""
        self.prune()
        engine = self._sessions.get(session_id)
        if engine is None:
            return None

        self._sessions.move_to_end(session_id)
        self._last_used[session_id] = self._clock()
        return engine

    def remove(self, session_id: str) -> bool:
        if session_id not in self._sessions:
            return False
        self._drop(session_id)
        return True

    def prune(self) -> int:
        """Drop sessions idle for longer than the TTL. Returns how many were dropped."""
        if self.session_ttl <= 0:
            return 0

        now = self._clock()
        expired = [
            session_id for session_id, used in self._last_used.items()
            if now - used > self.session_ttl
        ]
        for session_id in expired:
            logger.info("Expiring idle game session %s", session_id)
            self._drop(session_id)
        return len(expired)

    def _drop(self, session_id: str) -> None:
        engine = self._sessions.pop(session_id)
        self._last_used.pop(session_id, None)
        engine.close()


# Singleton instance
_store = None


def get_session_store() -> GameSessionStore:
    """Get singleton session store instance."""
    global _store
    if _store is None:
        _store = GameSessionStore(commentary=get_commentary_client().fetch_commentary)
    return _store

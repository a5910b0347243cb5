"""Manages active aura sessions."""

import asyncio
import logging
from typing import Optional, Dict

from database.manager import DatabaseManager
from database.store import GameStore
from game.session import AuraSession

logger = logging.getLogger(__name__)


class SessionManager:
    """Keeps one AuraSession per player."""

    def __init__(self, backend: Optional[DatabaseManager] = None):
        self.backend = backend
        # Dictionary mapping player_id to session
        self._sessions: Dict[str, AuraSession] = {}
        self._create_lock = asyncio.Lock()

    async def get_or_create_session(self, player_id: str) -> AuraSession:
        """Get a player's session, loading their records on first use."""
        key = str(player_id)
        async with self._create_lock:
            session = self._sessions.get(key)
            if session is not None:
                return session

            store = await GameStore(key, self.backend).load()
            session = AuraSession(key, store)
            self._sessions[key] = session
        logger.info("Created session for player %s", key)
        return session

    def get_session(self, player_id: str) -> Optional[AuraSession]:
        """Get a player's session if one exists."""
        return self._sessions.get(str(player_id))

    async def remove_session(self, player_id: str) -> Optional[AuraSession]:
        """Tear down and forget a player's session."""
        session = self._sessions.pop(str(player_id), None)
        if session:
            await session.close()
        return session

    def is_active(self, player_id: str) -> bool:
        """Check if a player has a session."""
        return self.get_session(player_id) is not None

    def get_all_sessions(self) -> list[AuraSession]:
        """Get all sessions."""
        return list(self._sessions.values())


# Global session manager instance
session_manager = SessionManager()

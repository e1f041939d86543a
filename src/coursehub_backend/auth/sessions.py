"""
In-memory registry of active admin sessions.

Admin tokens are bearer credentials; the registry makes them revocable on the
server side. Entries live only in process memory, so a restart logs every
admin out.
"""

import asyncio
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class AdminSession:
    session_id: str
    user_id: str
    created_at: datetime
    last_activity: datetime


class AdminSessionRegistry:
    """Thread safe ``session_id -> AdminSession`` table with idle expiry."""

    def __init__(
        self,
        timeout: timedelta = timedelta(hours=4),
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.timeout = timeout
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._sessions: Dict[str, AdminSession] = {}
        self._lock = threading.Lock()

    def create_session(self, user_id: str, session_id: str) -> AdminSession:
        now = self._clock()
        session = AdminSession(session_id=session_id, user_id=user_id, created_at=now, last_activity=now)
        with self._lock:
            self._sessions[session_id] = session
        logger.info(f"Admin session created for user {user_id}")
        return session

    def destroy_session(self, session_id: str) -> Optional[AdminSession]:
        with self._lock:
            return self._sessions.pop(session_id, None)

    def get_session(self, session_id: str) -> Optional[AdminSession]:
        with self._lock:
            return self._sessions.get(session_id)

    def is_session_valid(self, session_id: str, user_id: str) -> bool:
        """Check ownership and idle time; refreshes ``last_activity`` on success."""
        now = self._clock()
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None or session.user_id != user_id:
                return False
            if now - session.last_activity > self.timeout:
                del self._sessions[session_id]
                return False
            session.last_activity = now
            return True

    def sweep_expired(self) -> List[AdminSession]:
        now = self._clock()
        with self._lock:
            expired = [
                session for session in self._sessions.values()
                if now - session.last_activity > self.timeout
            ]
            for session in expired:
                del self._sessions[session.session_id]
        return expired

    def active_sessions(self) -> List[AdminSession]:
        with self._lock:
            return list(self._sessions.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


async def run_session_sweeper(
    registry: AdminSessionRegistry,
    interval_seconds: float = 60,
    on_expired: Optional[Callable[[AdminSession], None]] = None
):
    """Purge idle admin sessions every ``interval_seconds`` until cancelled."""
    while True:
        await asyncio.sleep(interval_seconds)
        expired = registry.sweep_expired()
        for session in expired:
            logger.info(f"Admin session {session.session_id[:8]} of user {session.user_id} timed out")
            if on_expired is not None:
                try:
                    on_expired(session)
                except Exception as e:
                    logger.error(f"Failed to record admin session timeout: {e}")

"""Session Tracker - lifecycle of user visits."""

import logging
from typing import Callable, List, Optional

from ..schemas import AnalyticsSession
from ..storage.base import StorageBackend
from ..utils import now_ms

logger = logging.getLogger(__name__)


class SessionService:
    """
    Sessions move Created -> Updated* -> Ended. Ended is terminal: later
    updates and end calls return the record unchanged.
    """

    def __init__(self, backend: StorageBackend, clock: Callable[[], int] = now_ms):
        self.backend = backend
        self.clock = clock

    async def create_session(
        self,
        wallet_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
        referrer: Optional[str] = None,
        entry_page: Optional[str] = None,
        chain_id: Optional[int] = None,
    ) -> AnalyticsSession:
        """Open a session with one page view (the entry page) and no interactions."""
        session = AnalyticsSession.start(
            self.clock(),
            wallet_address=wallet_address,
            user_agent=user_agent,
            ip_address=ip_address,
            referrer=referrer,
            entry_page=entry_page,
            chain_id=chain_id,
        )
        self.backend.add_session(session)
        logger.debug(f"Session {session.id} started for {wallet_address or 'anonymous'}")
        return session

    async def update_session_stats(
        self,
        session_id: str,
        page_view: bool = False,
        interaction: bool = False,
        current_page: Optional[str] = None,
    ) -> Optional[AnalyticsSession]:
        return self.backend.update_session_stats(session_id, page_view, interaction, current_page)

    async def end_session(self, session_id: str, exit_page: Optional[str] = None) -> Optional[AnalyticsSession]:
        session = self.backend.end_session(session_id, self.clock(), exit_page)
        if session is not None:
            logger.debug(f"Session {session_id} ended after {session.duration} ms")
        return session

    async def get_session_by_id(self, session_id: str) -> Optional[AnalyticsSession]:
        return self.backend.get_session(session_id)

    async def get_active_sessions(self) -> List[AnalyticsSession]:
        return self.backend.get_active_sessions()

    async def get_sessions_by_wallet_address(self, wallet_address: str) -> List[AnalyticsSession]:
        """Every session of the wallet, newest start first."""
        return self.backend.get_sessions_by_wallet(wallet_address)

    async def count_sessions_started(self, start: int, end: int) -> int:
        return self.backend.count_sessions_started(start, end)

    async def average_session_duration(self, start: int, end: int) -> float:
        """Mean duration of ended sessions started in the window, 0 when there are none."""
        durations = self.backend.session_durations(start, end)
        if not durations:
            return 0.0
        return sum(durations) / len(durations)

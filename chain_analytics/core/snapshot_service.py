"""Snapshot Aggregator - daily rollups and the real-time dashboard view."""

import logging
from collections import Counter
from datetime import date, datetime
from typing import Callable, List, Optional, Union

from ..schemas import (
    AnalyticsEventType,
    DailySnapshot,
    PageUsers,
    RealTimeAnalytics,
    RecentEvent,
)
from ..storage.base import StorageBackend
from ..utils import HOUR_MS, day_bounds, now_ms, parse_day
from .config import Settings, get_settings
from .event_service import EventService
from .session_service import SessionService
from .storage_gateway import StorageGateway
from .user_service import UserService

logger = logging.getLogger(__name__)

DayLike = Union[date, datetime, str]

TOP_CURRENT_PAGES = 10


class SnapshotService:
    """Derives snapshots from the event store, session tracker and user ledger."""

    def __init__(
        self,
        backend: StorageBackend,
        events: EventService,
        sessions: SessionService,
        users: UserService,
        settings: Optional[Settings] = None,
        gateway: Optional[StorageGateway] = None,
        clock: Callable[[], int] = now_ms,
    ):
        self.backend = backend
        self.events = events
        self.sessions = sessions
        self.users = users
        self.settings = settings or get_settings()
        self.gateway = gateway
        self.clock = clock

    async def create_daily_snapshot(self, day: DayLike) -> DailySnapshot:
        """
        Compute the rollup for one local calendar day and upsert it by date.

        Recomputing over unchanged data yields an identical snapshot; a
        recomputation always overwrites the stored one.
        """
        day = parse_day(day)
        start, end = day_bounds(day)
        top_n = self.settings.SNAPSHOT_TOP_N

        snapshot = DailySnapshot(
            date=day,
            new_users=await self.users.count_new_users(start, end),
            active_users=await self.events.count_active_wallets(start, end),
            total_sessions=await self.sessions.count_sessions_started(start, end),
            average_session_duration=await self.sessions.average_session_duration(start, end),
            total_transactions=await self.events.count_events(
                start, end, AnalyticsEventType.CONTRACT_INTERACTION
            ),
            total_gas_used=await self.events.total_gas_used(start, end),
            top_contracts=await self.events.top_contracts(start, end, top_n),
            top_events=await self.events.top_events(start, end, top_n),
        )
        saved = self.backend.save_snapshot(snapshot)
        logger.info(
            f"📊 Snapshot for {day.isoformat()}: {saved.active_users} active users, "
            f"{saved.total_transactions} transactions"
        )
        return saved

    async def get_daily_snapshot(self, day: DayLike) -> Optional[DailySnapshot]:
        return self.backend.get_snapshot(parse_day(day))

    async def get_daily_snapshots(self, start_day: DayLike, end_day: DayLike) -> List[DailySnapshot]:
        """Snapshots between two dates inclusive, oldest first."""
        return self.backend.list_snapshots(parse_day(start_day), parse_day(end_day))

    async def get_real_time_analytics(self) -> RealTimeAnalytics:
        """Dashboard view over the last hour; computed on demand and never stored."""
        now = self.clock()
        hour_ago = now - HOUR_MS

        active_users = await self.users.get_active_users()
        active_sessions = await self.sessions.get_active_sessions()

        pages = Counter(s.exit_page for s in active_sessions if s.exit_page)
        top_pages = sorted(pages.items(), key=lambda item: (-item[1], item[0]))[:TOP_CURRENT_PAGES]

        recent = await self.events.get_recent_events(hour_ago, self.settings.RECENT_EVENTS_LIMIT, until=now)

        return RealTimeAnalytics(
            active_users=len(active_users),
            active_sessions=len(active_sessions),
            transactions_in_last_hour=await self.events.count_events(
                hour_ago, now, AnalyticsEventType.CONTRACT_INTERACTION
            ),
            events_in_last_hour=await self.events.count_events(hour_ago, now),
            top_current_pages=[PageUsers(url=url, users=users) for url, users in top_pages],
            recent_events=[
                RecentEvent(
                    event_type=e.event_type,
                    timestamp=e.timestamp,
                    wallet_address=e.wallet_address,
                    metadata=e.metadata,
                )
                for e in recent
            ],
            updated_at=now,
            storage_degraded=self.gateway.degraded if self.gateway else False,
        )

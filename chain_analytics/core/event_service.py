"""Event Store - append-only log of contract and UI events."""

import logging
import uuid
from typing import Any, Dict, List, Optional, Union

from ..schemas import (
    AnalyticsEvent,
    AnalyticsEventType,
    ContractEvent,
    ContractInteractionCount,
    EventPage,
    EventQuery,
    EventSortField,
    EventTypeCount,
    SortDirection,
    UIEvent,
)
from ..storage.base import StorageBackend
from .config import Settings, get_settings

logger = logging.getLogger(__name__)


class EventService:
    """Stores, queries and deletes events; also answers window aggregates."""

    def __init__(self, backend: StorageBackend, settings: Optional[Settings] = None):
        self.backend = backend
        self.settings = settings or get_settings()

    def _store(self, event: AnalyticsEvent) -> str:
        if not event.id:
            event = event.model_copy(update={"id": str(uuid.uuid4())})
        self.backend.add_event(event)
        logger.debug(f"Stored {event.event_type.value} event {event.id}")
        return event.id

    async def store_contract_event(self, event: Union[ContractEvent, Dict[str, Any]]) -> str:
        """Persist a contract event and return its id."""
        if not isinstance(event, ContractEvent):
            event = ContractEvent.model_validate(event)
        return self._store(event)

    async def store_ui_event(self, event: Union[UIEvent, Dict[str, Any]]) -> str:
        """Persist a UI event and return its id."""
        if not isinstance(event, UIEvent):
            event = UIEvent.model_validate(event)
        return self._store(event)

    async def query_events(self, query: Optional[EventQuery] = None, **filters: Any) -> EventPage:
        """
        Page through events matching every given filter.

        Either pass an ``EventQuery`` or its fields as keyword arguments. Results
        are ordered by ``sort_by`` (timestamp descending by default), ties by id
        in the same direction, rows without a value for the sort column last.
        """
        if query is None:
            filters.setdefault("limit", self.settings.DEFAULT_QUERY_LIMIT)
            query = EventQuery(**filters)
        data, total = self.backend.query_events(query)
        return EventPage.build(data, total, query)

    async def get_event_by_id(self, event_id: str) -> Optional[AnalyticsEvent]:
        return self.backend.get_event(event_id)

    async def delete_event_by_id(self, event_id: str) -> bool:
        deleted = self.backend.delete_event(event_id)
        if deleted:
            logger.info(f"🗑️ Deleted event {event_id}")
        return deleted

    async def get_event_counts_by_type(
        self,
        start_date: Optional[int] = None,
        end_date: Optional[int] = None,
    ) -> Dict[AnalyticsEventType, int]:
        """Counts per event type in the optional window; types with no events are omitted."""
        return self.backend.count_events_by_type(start_date, end_date)

    async def count_events(
        self,
        start: Optional[int] = None,
        end: Optional[int] = None,
        event_type: Optional[AnalyticsEventType] = None,
    ) -> int:
        return self.backend.count_events(start, end, event_type)

    async def count_active_wallets(self, start: int, end: int) -> int:
        return self.backend.count_active_wallets(start, end)

    async def total_gas_used(self, start: int, end: int) -> int:
        return self.backend.total_gas_used(start, end)

    async def top_contracts(self, start: int, end: int, limit: int = 10) -> List[ContractInteractionCount]:
        return self.backend.top_contracts(start, end, limit)

    async def top_events(self, start: int, end: int, limit: int = 10) -> List[EventTypeCount]:
        return self.backend.top_event_types(start, end, limit)

    async def get_recent_events(self, since: int, limit: int, until: Optional[int] = None) -> List[AnalyticsEvent]:
        """Newest events with since <= timestamp <= until."""
        page = await self.query_events(
            start_date=since,
            end_date=until,
            limit=limit,
            sort_by=EventSortField.TIMESTAMP,
            sort_direction=SortDirection.DESC,
        )
        return page.data

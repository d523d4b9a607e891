"""In-process fallback store.

Keyed dicts mirroring the relational tables. Records are immutable models, so
every update replaces the stored object. Nothing survives the process.
"""

import logging
from collections import Counter
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Tuple

from ..schemas import (
    AnalyticsEvent,
    AnalyticsEventType,
    AnalyticsSession,
    AnalyticsUser,
    ContractAnalytics,
    ContractInteractionCount,
    DailySnapshot,
    EventQuery,
    EventTypeCount,
    SortDirection,
)
from .base import StorageBackend

logger = logging.getLogger(__name__)


class InMemoryStore:
    """The fallback data itself; one instance is shared by every service of a stack."""

    def __init__(self):
        self.events: Dict[str, AnalyticsEvent] = {}
        self.sessions: Dict[str, AnalyticsSession] = {}
        self.users: Dict[str, AnalyticsUser] = {}
        self.contracts: Dict[str, ContractAnalytics] = {}
        self.contract_users: Dict[str, Set[str]] = {}
        self.snapshots: Dict[date, DailySnapshot] = {}

    def clear(self) -> None:
        """Drop all fallback data."""
        self.events.clear()
        self.sessions.clear()
        self.users.clear()
        self.contracts.clear()
        self.contract_users.clear()
        self.snapshots.clear()
        logger.info("🧹 In-memory analytics store cleared")


def _in_window(timestamp: int, start: Optional[int], end: Optional[int]) -> bool:
    return (start is None or timestamp >= start) and (end is None or timestamp <= end)


def _sort_value(event: AnalyticsEvent, field: str) -> Any:
    value = getattr(event, field, None)
    return value.value if isinstance(value, Enum) else value


def _ranked(counts: Counter, limit: int) -> List[Tuple[str, int]]:
    """Highest count first, ties broken by key ascending."""
    return sorted(counts.items(), key=lambda item: (-item[1], item[0]))[:limit]


class InMemoryBackend(StorageBackend):
    """StorageBackend over an InMemoryStore."""

    def __init__(self, store: Optional[InMemoryStore] = None):
        self.store = store if store is not None else InMemoryStore()

    # --- Events ---
    def add_event(self, event: AnalyticsEvent) -> None:
        self.store.events[event.id] = event

    def get_event(self, event_id: str) -> Optional[AnalyticsEvent]:
        return self.store.events.get(event_id)

    def delete_event(self, event_id: str) -> bool:
        return self.store.events.pop(event_id, None) is not None

    def _events_in(self, start: Optional[int], end: Optional[int]) -> List[AnalyticsEvent]:
        return [e for e in self.store.events.values() if _in_window(e.timestamp, start, end)]

    def query_events(self, query: EventQuery) -> Tuple[List[AnalyticsEvent], int]:
        matches = [
            e for e in self._events_in(query.start_date, query.end_date)
            if (query.wallet_address is None or e.wallet_address == query.wallet_address)
            and (query.contract_address is None or getattr(e, "contract_address", None) == query.contract_address)
            and (query.event_type is None or e.event_type == query.event_type)
            and (query.chain_id is None or e.chain_id == query.chain_id)
        ]

        field = query.sort_by.value
        reverse = query.sort_direction == SortDirection.DESC
        present = [e for e in matches if _sort_value(e, field) is not None]
        missing = [e for e in matches if _sort_value(e, field) is None]
        present.sort(key=lambda e: (_sort_value(e, field), e.id), reverse=reverse)
        missing.sort(key=lambda e: e.id, reverse=reverse)
        ordered = present + missing

        return ordered[query.offset:query.offset + query.limit], len(matches)

    def count_events(
        self,
        start: Optional[int] = None,
        end: Optional[int] = None,
        event_type: Optional[AnalyticsEventType] = None,
    ) -> int:
        return sum(
            1 for e in self._events_in(start, end)
            if event_type is None or e.event_type == event_type
        )

    def count_events_by_type(self, start: Optional[int] = None, end: Optional[int] = None) -> Dict[AnalyticsEventType, int]:
        return dict(Counter(e.event_type for e in self._events_in(start, end)))

    def count_active_wallets(self, start: int, end: int) -> int:
        return len({e.wallet_address for e in self._events_in(start, end) if e.wallet_address})

    def total_gas_used(self, start: int, end: int) -> int:
        return sum(getattr(e, "gas_used", None) or 0 for e in self._events_in(start, end))

    def top_contracts(self, start: int, end: int, limit: int) -> List[ContractInteractionCount]:
        counts = Counter(
            e.contract_address for e in self._events_in(start, end)
            if getattr(e, "contract_address", None)
        )
        return [ContractInteractionCount(address=a, interactions=n) for a, n in _ranked(counts, limit)]

    def top_event_types(self, start: int, end: int, limit: int) -> List[EventTypeCount]:
        counts = Counter(e.event_type.value for e in self._events_in(start, end))
        return [EventTypeCount(event_type=t, count=n) for t, n in _ranked(counts, limit)]

    # --- Sessions ---
    def add_session(self, session: AnalyticsSession) -> None:
        self.store.sessions[session.id] = session

    def get_session(self, session_id: str) -> Optional[AnalyticsSession]:
        return self.store.sessions.get(session_id)

    def update_session_stats(
        self,
        session_id: str,
        page_view: bool,
        interaction: bool,
        current_page: Optional[str],
    ) -> Optional[AnalyticsSession]:
        session = self.store.sessions.get(session_id)
        if session is None:
            return None
        updated = session.with_stats(page_view, interaction, current_page)
        self.store.sessions[session_id] = updated
        return updated

    def end_session(self, session_id: str, end_time: int, exit_page: Optional[str]) -> Optional[AnalyticsSession]:
        session = self.store.sessions.get(session_id)
        if session is None:
            return None
        ended = session.ended(end_time, exit_page)
        self.store.sessions[session_id] = ended
        return ended

    def get_active_sessions(self) -> List[AnalyticsSession]:
        active = [s for s in self.store.sessions.values() if s.is_active]
        return sorted(active, key=lambda s: (s.start_time, s.id), reverse=True)

    def get_sessions_by_wallet(self, wallet_address: str) -> List[AnalyticsSession]:
        sessions = [s for s in self.store.sessions.values() if s.wallet_address == wallet_address]
        return sorted(sessions, key=lambda s: (s.start_time, s.id), reverse=True)

    def count_sessions_started(self, start: int, end: int) -> int:
        return sum(1 for s in self.store.sessions.values() if start <= s.start_time <= end)

    def session_durations(self, start: int, end: int) -> List[int]:
        return [
            s.duration for s in self.store.sessions.values()
            if start <= s.start_time <= end and s.duration is not None
        ]

    # --- Users ---
    def get_or_create_user(self, wallet_address: str, seen_at: int, metadata: Optional[Dict[str, Any]] = None) -> AnalyticsUser:
        user = self.store.users.get(wallet_address)
        if user is None:
            user = AnalyticsUser.new(wallet_address, seen_at, metadata)
            self.store.users[wallet_address] = user
        return user

    def get_user(self, wallet_address: str) -> Optional[AnalyticsUser]:
        return self.store.users.get(wallet_address)

    def update_user_stats(
        self,
        wallet_address: str,
        seen_at: int,
        new_session: bool,
        new_interaction: bool,
        new_transaction: bool,
        gas_spent: int,
        metadata: Optional[Dict[str, Any]],
    ) -> Optional[AnalyticsUser]:
        user = self.store.users.get(wallet_address)
        if user is None:
            return None
        updated = user.with_stats(new_session, new_interaction, new_transaction, gas_spent, metadata, seen_at)
        self.store.users[wallet_address] = updated
        return updated

    def _users_by(self, attribute: str, since: Optional[int] = None) -> List[AnalyticsUser]:
        users = [u for u in self.store.users.values() if since is None or getattr(u, attribute) >= since]
        # Newest first, ties by wallet ascending
        users.sort(key=lambda u: u.wallet_address)
        users.sort(key=lambda u: getattr(u, attribute), reverse=True)
        return users

    def list_users(self) -> List[AnalyticsUser]:
        return self._users_by("last_seen")

    def users_seen_since(self, since: int) -> List[AnalyticsUser]:
        return self._users_by("last_seen", since)

    def users_first_seen_since(self, since: int) -> List[AnalyticsUser]:
        return self._users_by("first_seen", since)

    def count_new_users(self, start: int, end: int) -> int:
        return sum(1 for u in self.store.users.values() if start <= u.first_seen <= end)

    # --- Contracts ---
    def get_or_create_contract(
        self,
        address: str,
        created_at: int,
        name: Optional[str] = None,
        type: Optional[str] = None,
        deployed_at: Optional[int] = None,
        deployer_address: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> ContractAnalytics:
        contract = self.store.contracts.get(address)
        if contract is None:
            contract = ContractAnalytics.new(
                address,
                created_at,
                name=name,
                type=type,
                deployed_at=deployed_at,
                deployer_address=deployer_address,
                metadata=metadata,
            )
            self.store.contracts[address] = contract
        return contract

    def get_contract(self, address: str) -> Optional[ContractAnalytics]:
        return self.store.contracts.get(address)

    def update_contract(
        self,
        address: str,
        event_name: str,
        seen_at: int,
        user_address: Optional[str],
        gas_used: int,
        metadata: Optional[Dict[str, Any]],
    ) -> Optional[ContractAnalytics]:
        contract = self.store.contracts.get(address)
        if contract is None:
            return None

        is_new_user = False
        if user_address:
            observed = self.store.contract_users.setdefault(address, set())
            if user_address not in observed:
                observed.add(user_address)
                is_new_user = True

        updated = contract.with_interaction(event_name, is_new_user, gas_used, metadata, seen_at)
        self.store.contracts[address] = updated
        return updated

    def list_contracts(self, limit: Optional[int] = None) -> List[ContractAnalytics]:
        contracts = sorted(self.store.contracts.values(), key=lambda c: (-c.total_interactions, c.address))
        return contracts if limit is None else contracts[:limit]

    # --- Snapshots ---
    def save_snapshot(self, snapshot: DailySnapshot) -> DailySnapshot:
        self.store.snapshots[snapshot.date] = snapshot
        return snapshot

    def get_snapshot(self, day: date) -> Optional[DailySnapshot]:
        return self.store.snapshots.get(day)

    def list_snapshots(self, start_day: date, end_day: date) -> List[DailySnapshot]:
        return [
            self.store.snapshots[day]
            for day in sorted(self.store.snapshots)
            if start_day <= day <= end_day
        ]
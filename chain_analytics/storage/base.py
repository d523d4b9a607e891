"""Storage backend interface shared by the relational and in-memory stores."""

from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

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
)


class StorageBackend(ABC):
    """
    Persistence operations the ledgers and the aggregator are built on.

    Methods are synchronous; services call them from their async operations.
    Times are epoch milliseconds and gas values are exact ints. Every
    read-modify-write operation takes the caller's timestamp so that both
    backends apply the same clock.
    """

    # --- Events ---
    @abstractmethod
    def add_event(self, event: AnalyticsEvent) -> None:
        """Persist an event that already carries its id."""

    @abstractmethod
    def get_event(self, event_id: str) -> Optional[AnalyticsEvent]:
        ...

    @abstractmethod
    def delete_event(self, event_id: str) -> bool:
        ...

    @abstractmethod
    def query_events(self, query: EventQuery) -> Tuple[List[AnalyticsEvent], int]:
        """One page of matching events and the total number of matches."""

    @abstractmethod
    def count_events(
        self,
        start: Optional[int] = None,
        end: Optional[int] = None,
        event_type: Optional[AnalyticsEventType] = None,
    ) -> int:
        ...

    @abstractmethod
    def count_events_by_type(self, start: Optional[int] = None, end: Optional[int] = None) -> Dict[AnalyticsEventType, int]:
        ...

    @abstractmethod
    def count_active_wallets(self, start: int, end: int) -> int:
        ...

    @abstractmethod
    def total_gas_used(self, start: int, end: int) -> int:
        ...

    @abstractmethod
    def top_contracts(self, start: int, end: int, limit: int) -> List[ContractInteractionCount]:
        ...

    @abstractmethod
    def top_event_types(self, start: int, end: int, limit: int) -> List[EventTypeCount]:
        ...

    # --- Sessions ---
    @abstractmethod
    def add_session(self, session: AnalyticsSession) -> None:
        ...

    @abstractmethod
    def get_session(self, session_id: str) -> Optional[AnalyticsSession]:
        ...

    @abstractmethod
    def update_session_stats(
        self,
        session_id: str,
        page_view: bool,
        interaction: bool,
        current_page: Optional[str],
    ) -> Optional[AnalyticsSession]:
        """None for unknown ids; the unchanged record for ended sessions."""

    @abstractmethod
    def end_session(self, session_id: str, end_time: int, exit_page: Optional[str]) -> Optional[AnalyticsSession]:
        """None for unknown ids; the unchanged record for ended sessions."""

    @abstractmethod
    def get_active_sessions(self) -> List[AnalyticsSession]:
        ...

    @abstractmethod
    def get_sessions_by_wallet(self, wallet_address: str) -> List[AnalyticsSession]:
        ...

    @abstractmethod
    def count_sessions_started(self, start: int, end: int) -> int:
        ...

    @abstractmethod
    def session_durations(self, start: int, end: int) -> List[int]:
        ...

    # --- Users ---
    @abstractmethod
    def get_or_create_user(self, wallet_address: str, seen_at: int, metadata: Optional[Dict[str, Any]] = None) -> AnalyticsUser:
        ...

    @abstractmethod
    def get_user(self, wallet_address: str) -> Optional[AnalyticsUser]:
        ...

    @abstractmethod
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
        ...

    @abstractmethod
    def list_users(self) -> List[AnalyticsUser]:
        """All users, most recently seen first."""

    @abstractmethod
    def users_seen_since(self, since: int) -> List[AnalyticsUser]:
        ...

    @abstractmethod
    def users_first_seen_since(self, since: int) -> List[AnalyticsUser]:
        ...

    @abstractmethod
    def count_new_users(self, start: int, end: int) -> int:
        ...

    # --- Contracts ---
    @abstractmethod
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
        ...

    @abstractmethod
    def get_contract(self, address: str) -> Optional[ContractAnalytics]:
        ...

    @abstractmethod
    def update_contract(
        self,
        address: str,
        event_name: str,
        seen_at: int,
        user_address: Optional[str],
        gas_used: int,
        metadata: Optional[Dict[str, Any]],
    ) -> Optional[ContractAnalytics]:
        ...

    @abstractmethod
    def list_contracts(self, limit: Optional[int] = None) -> List[ContractAnalytics]:
        """Contracts by total interactions, busiest first."""

    # --- Snapshots ---
    @abstractmethod
    def save_snapshot(self, snapshot: DailySnapshot) -> DailySnapshot:
        """Insert or overwrite the snapshot for its date."""

    @abstractmethod
    def get_snapshot(self, day: date) -> Optional[DailySnapshot]:
        ...

    @abstractmethod
    def list_snapshots(self, start_day: date, end_day: date) -> List[DailySnapshot]:
        ...

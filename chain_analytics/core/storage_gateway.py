"""Storage gateway: primary-with-fallback routing for every storage call."""

import logging
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar

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
    StorageStatus,
)
from ..storage.base import StorageBackend

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Only the first fallback activation in the process is reported as a warning
_fallback_notice_shown = False


def reset_fallback_notice() -> None:
    """Re-arm the first-fallback warning."""
    global _fallback_notice_shown
    _fallback_notice_shown = False


class StorageGateway:
    """
    Runs a primary operation and, if it raises, the equivalent fallback one.

    There is no retry and no circuit breaking: the next call tries the primary
    again. Fallback errors propagate to the caller.
    """

    def __init__(self, primary_enabled: bool = True):
        self.primary_enabled = primary_enabled
        self.fallback_activations = 0
        self.last_error: Optional[str] = None
        self.degraded = False

    def execute(self, primary: Callable[[], T], fallback: Callable[[], T]) -> T:
        global _fallback_notice_shown

        if not self.primary_enabled:
            return fallback()

        try:
            result = primary()
        except Exception as e:
            self.fallback_activations += 1
            self.last_error = f"{type(e).__name__}: {e}"
            self.degraded = True
            if not _fallback_notice_shown:
                _fallback_notice_shown = True
                logger.warning(f"⚠️ Primary analytics store unavailable, using in-memory fallback: {e}")
            else:
                logger.debug(f"Primary analytics store failed again, served from fallback: {e}")
            return fallback()

        self.degraded = False
        return result

    def status(self) -> StorageStatus:
        return StorageStatus(
            primary_enabled=self.primary_enabled,
            degraded=self.degraded,
            fallback_activations=self.fallback_activations,
            last_error=self.last_error,
        )


class ResilientBackend(StorageBackend):
    """StorageBackend that sends every call through a StorageGateway."""

    def __init__(self, gateway: StorageGateway, primary: Optional[StorageBackend], fallback: StorageBackend):
        self.gateway = gateway
        self.primary = primary
        self.fallback = fallback

    def _call(self, method: str, *args: Any, **kwargs: Any) -> Any:
        return self.gateway.execute(
            lambda: getattr(self.primary, method)(*args, **kwargs),
            lambda: getattr(self.fallback, method)(*args, **kwargs),
        )

    # --- Events ---
    def add_event(self, event: AnalyticsEvent) -> None:
        return self._call("add_event", event)

    def get_event(self, event_id: str) -> Optional[AnalyticsEvent]:
        return self._call("get_event", event_id)

    def delete_event(self, event_id: str) -> bool:
        return self._call("delete_event", event_id)

    def query_events(self, query: EventQuery) -> Tuple[List[AnalyticsEvent], int]:
        return self._call("query_events", query)

    def count_events(
        self,
        start: Optional[int] = None,
        end: Optional[int] = None,
        event_type: Optional[AnalyticsEventType] = None,
    ) -> int:
        return self._call("count_events", start, end, event_type)

    def count_events_by_type(self, start: Optional[int] = None, end: Optional[int] = None) -> Dict[AnalyticsEventType, int]:
        return self._call("count_events_by_type", start, end)

    def count_active_wallets(self, start: int, end: int) -> int:
        return self._call("count_active_wallets", start, end)

    def total_gas_used(self, start: int, end: int) -> int:
        return self._call("total_gas_used", start, end)

    def top_contracts(self, start: int, end: int, limit: int) -> List[ContractInteractionCount]:
        return self._call("top_contracts", start, end, limit)

    def top_event_types(self, start: int, end: int, limit: int) -> List[EventTypeCount]:
        return self._call("top_event_types", start, end, limit)

    # --- Sessions ---
    def add_session(self, session: AnalyticsSession) -> None:
        return self._call("add_session", session)

    def get_session(self, session_id: str) -> Optional[AnalyticsSession]:
        return self._call("get_session", session_id)

    def update_session_stats(
        self,
        session_id: str,
        page_view: bool,
        interaction: bool,
        current_page: Optional[str],
    ) -> Optional[AnalyticsSession]:
        return self._call("update_session_stats", session_id, page_view, interaction, current_page)

    def end_session(self, session_id: str, end_time: int, exit_page: Optional[str]) -> Optional[AnalyticsSession]:
        return self._call("end_session", session_id, end_time, exit_page)

    def get_active_sessions(self) -> List[AnalyticsSession]:
        return self._call("get_active_sessions")

    def get_sessions_by_wallet(self, wallet_address: str) -> List[AnalyticsSession]:
        return self._call("get_sessions_by_wallet", wallet_address)

    def count_sessions_started(self, start: int, end: int) -> int:
        return self._call("count_sessions_started", start, end)

    def session_durations(self, start: int, end: int) -> List[int]:
        return self._call("session_durations", start, end)

    # --- Users ---
    def get_or_create_user(self, wallet_address: str, seen_at: int, metadata: Optional[Dict[str, Any]] = None) -> AnalyticsUser:
        return self._call("get_or_create_user", wallet_address, seen_at, metadata)

    def get_user(self, wallet_address: str) -> Optional[AnalyticsUser]:
        return self._call("get_user", wallet_address)

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
        return self._call(
            "update_user_stats",
            wallet_address,
            seen_at,
            new_session,
            new_interaction,
            new_transaction,
            gas_spent,
            metadata,
        )

    def list_users(self) -> List[AnalyticsUser]:
        return self._call("list_users")

    def users_seen_since(self, since: int) -> List[AnalyticsUser]:
        return self._call("users_seen_since", since)

    def users_first_seen_since(self, since: int) -> List[AnalyticsUser]:
        return self._call("users_first_seen_since", since)

    def count_new_users(self, start: int, end: int) -> int:
        return self._call("count_new_users", start, end)

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
        return self._call(
            "get_or_create_contract",
            address,
            created_at,
            name=name,
            type=type,
            deployed_at=deployed_at,
            deployer_address=deployer_address,
            metadata=metadata,
        )

    def get_contract(self, address: str) -> Optional[ContractAnalytics]:
        return self._call("get_contract", address)

    def update_contract(
        self,
        address: str,
        event_name: str,
        seen_at: int,
        user_address: Optional[str],
        gas_used: int,
        metadata: Optional[Dict[str, Any]],
    ) -> Optional[ContractAnalytics]:
        return self._call("update_contract", address, event_name, seen_at, user_address, gas_used, metadata)

    def list_contracts(self, limit: Optional[int] = None) -> List[ContractAnalytics]:
        return self._call("list_contracts", limit)

    # --- Snapshots ---
    def save_snapshot(self, snapshot: DailySnapshot) -> DailySnapshot:
        return self._call("save_snapshot", snapshot)

    def get_snapshot(self, day: date) -> Optional[DailySnapshot]:
        return self._call("get_snapshot", day)

    def list_snapshots(self, start_day: date, end_day: date) -> List[DailySnapshot]:
        return self._call("list_snapshots", start_day, end_day)

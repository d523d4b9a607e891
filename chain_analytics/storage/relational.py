"""Relational (primary) store backed by SQLAlchemy.

Each operation runs in its own transaction through ``session_scope``; any
database error rolls the transaction back and propagates to the caller.
"""

from datetime import date
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from .. import crud
from ..core.database import session_scope
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
    parse_event,
)
from .base import StorageBackend


def _event(row) -> AnalyticsEvent:
    return parse_event(crud.row_to_dict(row))


def _session(row) -> Optional[AnalyticsSession]:
    return AnalyticsSession.model_validate(crud.row_to_dict(row)) if row is not None else None


def _user(row) -> Optional[AnalyticsUser]:
    return AnalyticsUser.model_validate(crud.row_to_dict(row)) if row is not None else None


def _contract(row) -> Optional[ContractAnalytics]:
    return ContractAnalytics.model_validate(crud.row_to_dict(row)) if row is not None else None


def _snapshot(row) -> Optional[DailySnapshot]:
    return DailySnapshot.model_validate(crud.row_to_dict(row)) if row is not None else None


class RelationalBackend(StorageBackend):
    """StorageBackend over the analytics tables."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def _scope(self):
        return session_scope(self.session_factory)

    # --- Events ---
    def add_event(self, event: AnalyticsEvent) -> None:
        with self._scope() as db:
            crud.create_event(db, event.model_dump(mode="json"))

    def get_event(self, event_id: str) -> Optional[AnalyticsEvent]:
        with self._scope() as db:
            row = crud.get_event(db, event_id)
            return _event(row) if row is not None else None

    def delete_event(self, event_id: str) -> bool:
        with self._scope() as db:
            return crud.delete_event(db, event_id)

    def query_events(self, query: EventQuery) -> Tuple[List[AnalyticsEvent], int]:
        with self._scope() as db:
            rows, total = crud.query_events(db, query)
            return [_event(row) for row in rows], total

    def count_events(
        self,
        start: Optional[int] = None,
        end: Optional[int] = None,
        event_type: Optional[AnalyticsEventType] = None,
    ) -> int:
        with self._scope() as db:
            return crud.count_events(db, start, end, event_type)

    def count_events_by_type(self, start: Optional[int] = None, end: Optional[int] = None) -> Dict[AnalyticsEventType, int]:
        with self._scope() as db:
            counts = crud.count_events_by_type(db, start, end)
        return {AnalyticsEventType(event_type): count for event_type, count in counts.items()}

    def count_active_wallets(self, start: int, end: int) -> int:
        with self._scope() as db:
            return crud.count_active_wallets(db, start, end)

    def total_gas_used(self, start: int, end: int) -> int:
        with self._scope() as db:
            return crud.total_gas_used(db, start, end)

    def top_contracts(self, start: int, end: int, limit: int) -> List[ContractInteractionCount]:
        with self._scope() as db:
            rows = crud.contract_interaction_counts(db, start, end, limit)
        return [ContractInteractionCount(address=address, interactions=count) for address, count in rows]

    def top_event_types(self, start: int, end: int, limit: int) -> List[EventTypeCount]:
        with self._scope() as db:
            rows = crud.event_type_counts(db, start, end, limit)
        return [EventTypeCount(event_type=event_type, count=count) for event_type, count in rows]

    # --- Sessions ---
    def add_session(self, session: AnalyticsSession) -> None:
        with self._scope() as db:
            crud.create_session(db, session.model_dump())

    def get_session(self, session_id: str) -> Optional[AnalyticsSession]:
        with self._scope() as db:
            return _session(crud.get_session(db, session_id))

    def update_session_stats(
        self,
        session_id: str,
        page_view: bool,
        interaction: bool,
        current_page: Optional[str],
    ) -> Optional[AnalyticsSession]:
        with self._scope() as db:
            return _session(crud.update_session_stats(db, session_id, page_view, interaction, current_page))

    def end_session(self, session_id: str, end_time: int, exit_page: Optional[str]) -> Optional[AnalyticsSession]:
        with self._scope() as db:
            return _session(crud.end_session(db, session_id, end_time, exit_page))

    def get_active_sessions(self) -> List[AnalyticsSession]:
        with self._scope() as db:
            return [_session(row) for row in crud.get_active_sessions(db)]

    def get_sessions_by_wallet(self, wallet_address: str) -> List[AnalyticsSession]:
        with self._scope() as db:
            return [_session(row) for row in crud.get_sessions_by_wallet(db, wallet_address)]

    def count_sessions_started(self, start: int, end: int) -> int:
        with self._scope() as db:
            return crud.count_sessions_started(db, start, end)

    def session_durations(self, start: int, end: int) -> List[int]:
        with self._scope() as db:
            return crud.session_durations(db, start, end)

    # --- Users ---
    def get_or_create_user(self, wallet_address: str, seen_at: int, metadata: Optional[Dict[str, Any]] = None) -> AnalyticsUser:
        with self._scope() as db:
            return _user(crud.get_or_create_user(db, wallet_address, seen_at, metadata))

    def get_user(self, wallet_address: str) -> Optional[AnalyticsUser]:
        with self._scope() as db:
            return _user(crud.get_user_by_wallet(db, wallet_address))

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
        with self._scope() as db:
            return _user(crud.update_user_stats(
                db,
                wallet_address,
                seen_at,
                new_session=new_session,
                new_interaction=new_interaction,
                new_transaction=new_transaction,
                gas_spent=gas_spent,
                metadata=metadata,
            ))

    def list_users(self) -> List[AnalyticsUser]:
        with self._scope() as db:
            return [_user(row) for row in crud.get_all_users(db)]

    def users_seen_since(self, since: int) -> List[AnalyticsUser]:
        with self._scope() as db:
            return [_user(row) for row in crud.get_users_seen_since(db, since)]

    def users_first_seen_since(self, since: int) -> List[AnalyticsUser]:
        with self._scope() as db:
            return [_user(row) for row in crud.get_users_first_seen_since(db, since)]

    def count_new_users(self, start: int, end: int) -> int:
        with self._scope() as db:
            return crud.count_new_users(db, start, end)

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
        with self._scope() as db:
            return _contract(crud.get_or_create_contract(
                db,
                address,
                created_at,
                name=name,
                type=type,
                deployed_at=deployed_at,
                deployer_address=deployer_address,
                metadata=metadata,
            ))

    def get_contract(self, address: str) -> Optional[ContractAnalytics]:
        with self._scope() as db:
            return _contract(crud.get_contract(db, address))

    def update_contract(
        self,
        address: str,
        event_name: str,
        seen_at: int,
        user_address: Optional[str],
        gas_used: int,
        metadata: Optional[Dict[str, Any]],
    ) -> Optional[ContractAnalytics]:
        with self._scope() as db:
            return _contract(crud.update_contract(
                db,
                address,
                event_name,
                seen_at,
                user_address=user_address,
                gas_used=gas_used,
                metadata=metadata,
            ))

    def list_contracts(self, limit: Optional[int] = None) -> List[ContractAnalytics]:
        with self._scope() as db:
            return [_contract(row) for row in crud.get_contracts(db, limit)]

    # --- Snapshots ---
    def save_snapshot(self, snapshot: DailySnapshot) -> DailySnapshot:
        data = snapshot.model_dump(mode="json")
        data["date"] = snapshot.date
        with self._scope() as db:
            return _snapshot(crud.upsert_snapshot(db, data))

    def get_snapshot(self, day: date) -> Optional[DailySnapshot]:
        with self._scope() as db:
            return _snapshot(crud.get_snapshot(db, day))

    def list_snapshots(self, start_day: date, end_day: date) -> List[DailySnapshot]:
        with self._scope() as db:
            return [_snapshot(row) for row in crud.get_snapshots(db, start_day, end_day)]

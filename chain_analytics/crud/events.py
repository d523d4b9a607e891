"""Event-related CRUD operations."""

from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from ..models import AnalyticsEventRecord
from ..schemas import AnalyticsEventType, EventQuery, SortDirection
from ..utils import to_gas_int
from .mapping import record_kwargs


def create_event(db: Session, data: Dict[str, Any]) -> AnalyticsEventRecord:
    """Insert one event row. ``data`` is keyed by column name and already carries the id."""
    db_event = AnalyticsEventRecord(**record_kwargs(AnalyticsEventRecord, data))
    db.add(db_event)
    db.commit()
    db.refresh(db_event)
    return db_event


def get_event(db: Session, event_id: str) -> Optional[AnalyticsEventRecord]:
    return db.query(AnalyticsEventRecord).filter(AnalyticsEventRecord.id == event_id).first()


def delete_event(db: Session, event_id: str) -> bool:
    """Delete an event by id; True only if a row was removed."""
    deleted = db.query(AnalyticsEventRecord).filter(
        AnalyticsEventRecord.id == event_id
    ).delete(synchronize_session=False)
    db.commit()
    return deleted > 0


def _window(query: Query, start: Optional[int], end: Optional[int]) -> Query:
    """Inclusive timestamp bounds; either side may be open."""
    if start is not None:
        query = query.filter(AnalyticsEventRecord.timestamp >= start)
    if end is not None:
        query = query.filter(AnalyticsEventRecord.timestamp <= end)
    return query


def query_events(db: Session, params: EventQuery) -> Tuple[List[AnalyticsEventRecord], int]:
    """Filtered, ordered page of events plus the total match count."""
    query = _window(db.query(AnalyticsEventRecord), params.start_date, params.end_date)

    if params.wallet_address is not None:
        query = query.filter(AnalyticsEventRecord.wallet_address == params.wallet_address)
    if params.contract_address is not None:
        query = query.filter(AnalyticsEventRecord.contract_address == params.contract_address)
    if params.event_type is not None:
        query = query.filter(AnalyticsEventRecord.event_type == params.event_type.value)
    if params.chain_id is not None:
        query = query.filter(AnalyticsEventRecord.chain_id == params.chain_id)

    total = query.count()

    # sort_by is an enum of mapped column names, never raw input
    column = getattr(AnalyticsEventRecord, params.sort_by.value)
    if params.sort_direction == SortDirection.ASC:
        ordering = [column.asc().nulls_last(), AnalyticsEventRecord.id.asc()]
    else:
        ordering = [column.desc().nulls_last(), AnalyticsEventRecord.id.desc()]

    rows = query.order_by(*ordering).offset(params.offset).limit(params.limit).all()
    return rows, total


def count_events(
    db: Session,
    start: Optional[int] = None,
    end: Optional[int] = None,
    event_type: Optional[AnalyticsEventType] = None,
) -> int:
    query = _window(db.query(func.count(AnalyticsEventRecord.id)), start, end)
    if event_type is not None:
        query = query.filter(AnalyticsEventRecord.event_type == event_type.value)
    return query.scalar() or 0


def count_events_by_type(db: Session, start: Optional[int] = None, end: Optional[int] = None) -> Dict[str, int]:
    """Event type -> count, for types that have at least one event in the window."""
    query = _window(
        db.query(AnalyticsEventRecord.event_type, func.count(AnalyticsEventRecord.id)),
        start,
        end,
    )
    return {event_type: count for event_type, count in query.group_by(AnalyticsEventRecord.event_type).all()}


def count_active_wallets(db: Session, start: int, end: int) -> int:
    """Distinct wallets with at least one event in the window."""
    query = _window(
        db.query(func.count(func.distinct(AnalyticsEventRecord.wallet_address))),
        start,
        end,
    ).filter(
        AnalyticsEventRecord.wallet_address.isnot(None),
        AnalyticsEventRecord.wallet_address != "",
    )
    return query.scalar() or 0


def total_gas_used(db: Session, start: int, end: int) -> int:
    """Exact gas sum; the column holds decimal strings so the sum is taken in Python."""
    query = _window(db.query(AnalyticsEventRecord.gas_used), start, end).filter(
        AnalyticsEventRecord.gas_used.isnot(None)
    )
    return sum(to_gas_int(gas) for (gas,) in query.all())


def contract_interaction_counts(db: Session, start: int, end: int, limit: int) -> List[Tuple[str, int]]:
    """(contract_address, events) pairs, busiest first, ties by address."""
    interactions = func.count(AnalyticsEventRecord.id)
    query = _window(
        db.query(AnalyticsEventRecord.contract_address, interactions),
        start,
        end,
    ).filter(
        AnalyticsEventRecord.contract_address.isnot(None),
        AnalyticsEventRecord.contract_address != "",
    )
    return (
        query.group_by(AnalyticsEventRecord.contract_address)
        .order_by(interactions.desc(), AnalyticsEventRecord.contract_address.asc())
        .limit(limit)
        .all()
    )


def event_type_counts(db: Session, start: int, end: int, limit: int) -> List[Tuple[str, int]]:
    """(event_type, count) pairs, most frequent first, ties by type name."""
    count = func.count(AnalyticsEventRecord.id)
    query = _window(db.query(AnalyticsEventRecord.event_type, count), start, end)
    return (
        query.group_by(AnalyticsEventRecord.event_type)
        .order_by(count.desc(), AnalyticsEventRecord.event_type.asc())
        .limit(limit)
        .all()
    )

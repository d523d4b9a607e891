"""Session-related CRUD operations.

Stat updates and session end are conditional on ``is_active`` in the UPDATE
itself, so an ended session can never be touched again even by concurrent
writers.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models import AnalyticsSessionRecord
from .mapping import record_kwargs


def create_session(db: Session, data: Dict[str, Any]) -> AnalyticsSessionRecord:
    db_session = AnalyticsSessionRecord(**record_kwargs(AnalyticsSessionRecord, data))
    db.add(db_session)
    db.commit()
    db.refresh(db_session)
    return db_session


def get_session(db: Session, session_id: str) -> Optional[AnalyticsSessionRecord]:
    return db.query(AnalyticsSessionRecord).filter(AnalyticsSessionRecord.id == session_id).first()


def _update_active(db: Session, session_id: str, values: Dict[Any, Any]) -> Optional[AnalyticsSessionRecord]:
    """Apply ``values`` only while the session is active, then return the current row."""
    db.query(AnalyticsSessionRecord).filter(
        AnalyticsSessionRecord.id == session_id,
        AnalyticsSessionRecord.is_active.is_(True),
    ).update(values, synchronize_session=False)
    db.commit()
    db_session = get_session(db, session_id)
    if db_session is not None:
        db.refresh(db_session)
    return db_session


def update_session_stats(
    db: Session,
    session_id: str,
    page_view: bool,
    interaction: bool,
    current_page: Optional[str] = None,
) -> Optional[AnalyticsSessionRecord]:
    """Increment page views / interactions and move the exit page of an active session."""
    if get_session(db, session_id) is None:
        return None

    values = {
        AnalyticsSessionRecord.page_views: AnalyticsSessionRecord.page_views + (1 if page_view else 0),
        AnalyticsSessionRecord.interactions: AnalyticsSessionRecord.interactions + (1 if interaction else 0),
    }
    if current_page:
        values[AnalyticsSessionRecord.exit_page] = current_page
    return _update_active(db, session_id, values)


def end_session(
    db: Session,
    session_id: str,
    end_time: int,
    exit_page: Optional[str] = None,
) -> Optional[AnalyticsSessionRecord]:
    """Close an active session; duration is computed server-side from start_time."""
    if get_session(db, session_id) is None:
        return None

    values = {
        AnalyticsSessionRecord.end_time: end_time,
        AnalyticsSessionRecord.duration: end_time - AnalyticsSessionRecord.start_time,
        AnalyticsSessionRecord.is_active: False,
    }
    if exit_page:
        values[AnalyticsSessionRecord.exit_page] = exit_page
    return _update_active(db, session_id, values)


def get_active_sessions(db: Session) -> List[AnalyticsSessionRecord]:
    return db.query(AnalyticsSessionRecord).filter(
        AnalyticsSessionRecord.is_active.is_(True)
    ).order_by(AnalyticsSessionRecord.start_time.desc(), AnalyticsSessionRecord.id.desc()).all()


def get_sessions_by_wallet(db: Session, wallet_address: str) -> List[AnalyticsSessionRecord]:
    """Sessions of one wallet, newest start first."""
    return db.query(AnalyticsSessionRecord).filter(
        AnalyticsSessionRecord.wallet_address == wallet_address
    ).order_by(AnalyticsSessionRecord.start_time.desc(), AnalyticsSessionRecord.id.desc()).all()


def count_sessions_started(db: Session, start: int, end: int) -> int:
    return db.query(func.count(AnalyticsSessionRecord.id)).filter(
        AnalyticsSessionRecord.start_time >= start,
        AnalyticsSessionRecord.start_time <= end,
    ).scalar() or 0


def session_durations(db: Session, start: int, end: int) -> List[int]:
    """Durations of sessions started in the window that have ended."""
    rows = db.query(AnalyticsSessionRecord.duration).filter(
        AnalyticsSessionRecord.start_time >= start,
        AnalyticsSessionRecord.start_time <= end,
        AnalyticsSessionRecord.duration.isnot(None),
    ).all()
    return [duration for (duration,) in rows]

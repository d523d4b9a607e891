"""Daily snapshot CRUD operations."""

from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..models import DailySnapshotRecord
from .mapping import record_kwargs


def upsert_snapshot(db: Session, data: Dict[str, Any]) -> DailySnapshotRecord:
    """Insert or overwrite the snapshot row for ``data['date']``."""
    db_snapshot = db.merge(DailySnapshotRecord(**record_kwargs(DailySnapshotRecord, data)))
    db.commit()
    db.refresh(db_snapshot)
    return db_snapshot


def get_snapshot(db: Session, day: date) -> Optional[DailySnapshotRecord]:
    return db.query(DailySnapshotRecord).filter(DailySnapshotRecord.date == day).first()


def get_snapshots(db: Session, start_day: date, end_day: date) -> List[DailySnapshotRecord]:
    """Snapshots with start_day <= date <= end_day, oldest first."""
    return db.query(DailySnapshotRecord).filter(
        DailySnapshotRecord.date >= start_day,
        DailySnapshotRecord.date <= end_day,
    ).order_by(DailySnapshotRecord.date.asc()).all()

"""User ledger CRUD operations."""

import logging
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import case, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..models import AnalyticsUserRecord
from ..schemas import merge_metadata
from ..utils import to_gas_int

logger = logging.getLogger(__name__)


def get_user_by_wallet(db: Session, wallet_address: str) -> Optional[AnalyticsUserRecord]:
    return db.query(AnalyticsUserRecord).filter(
        AnalyticsUserRecord.wallet_address == wallet_address
    ).first()


def get_or_create_user(
    db: Session,
    wallet_address: str,
    seen_at: int,
    metadata: Optional[Dict[str, Any]] = None,
) -> AnalyticsUserRecord:
    """
    Return the ledger row for a wallet, creating it with zeroed counters.
    Two writers racing on the same wallet both end up with the same row: the
    loser of the insert hits the unique key and re-reads.
    """
    existing = get_user_by_wallet(db, wallet_address)
    if existing:
        return existing

    db_user = AnalyticsUserRecord(
        id=str(uuid.uuid4()),
        wallet_address=wallet_address,
        first_seen=seen_at,
        last_seen=seen_at,
        total_sessions=0,
        total_interactions=0,
        total_transactions=0,
        total_gas_spent="0",
        assets_linked=0,
        tokens_held={},
        user_metadata=metadata,
    )
    db.add(db_user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info(f"User {wallet_address} was created concurrently, re-reading")
        return get_user_by_wallet(db, wallet_address)
    db.refresh(db_user)
    return db_user


def update_user_stats(
    db: Session,
    wallet_address: str,
    seen_at: int,
    new_session: bool = False,
    new_interaction: bool = False,
    new_transaction: bool = False,
    gas_spent: int = 0,
    metadata: Optional[Dict[str, Any]] = None,
) -> Optional[AnalyticsUserRecord]:
    """Atomic counter increments; gas and metadata are merged under a row lock."""
    db_user = db.query(AnalyticsUserRecord).filter(
        AnalyticsUserRecord.wallet_address == wallet_address
    ).with_for_update().first()
    if db_user is None:
        return None

    values = {
        AnalyticsUserRecord.last_seen: case(
            (AnalyticsUserRecord.last_seen < seen_at, seen_at),
            else_=AnalyticsUserRecord.last_seen,
        ),
        AnalyticsUserRecord.total_sessions: AnalyticsUserRecord.total_sessions + (1 if new_session else 0),
        AnalyticsUserRecord.total_interactions: AnalyticsUserRecord.total_interactions + (1 if new_interaction else 0),
        AnalyticsUserRecord.total_transactions: AnalyticsUserRecord.total_transactions + (1 if new_transaction else 0),
    }
    if gas_spent:
        values[AnalyticsUserRecord.total_gas_spent] = str(to_gas_int(db_user.total_gas_spent) + gas_spent)
    if metadata:
        values[AnalyticsUserRecord.user_metadata] = merge_metadata(db_user.user_metadata, metadata)

    db.query(AnalyticsUserRecord).filter(
        AnalyticsUserRecord.wallet_address == wallet_address
    ).update(values, synchronize_session=False)
    db.commit()
    db.refresh(db_user)
    return db_user


def get_all_users(db: Session) -> List[AnalyticsUserRecord]:
    return db.query(AnalyticsUserRecord).order_by(
        AnalyticsUserRecord.last_seen.desc(), AnalyticsUserRecord.wallet_address.asc()
    ).all()


def get_users_seen_since(db: Session, since: int) -> List[AnalyticsUserRecord]:
    return db.query(AnalyticsUserRecord).filter(
        AnalyticsUserRecord.last_seen >= since
    ).order_by(AnalyticsUserRecord.last_seen.desc(), AnalyticsUserRecord.wallet_address.asc()).all()


def get_users_first_seen_since(db: Session, since: int) -> List[AnalyticsUserRecord]:
    return db.query(AnalyticsUserRecord).filter(
        AnalyticsUserRecord.first_seen >= since
    ).order_by(AnalyticsUserRecord.first_seen.desc(), AnalyticsUserRecord.wallet_address.asc()).all()


def count_new_users(db: Session, start: int, end: int) -> int:
    return db.query(func.count(AnalyticsUserRecord.id)).filter(
        AnalyticsUserRecord.first_seen >= start,
        AnalyticsUserRecord.first_seen <= end,
    ).scalar() or 0

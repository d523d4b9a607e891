"""Contract ledger CRUD operations."""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..models import ContractAnalyticsRecord, ContractUserRecord
from ..schemas import merge_metadata
from ..utils import to_gas_int

logger = logging.getLogger(__name__)


def get_contract(db: Session, address: str) -> Optional[ContractAnalyticsRecord]:
    return db.query(ContractAnalyticsRecord).filter(ContractAnalyticsRecord.address == address).first()


def get_or_create_contract(
    db: Session,
    address: str,
    created_at: int,
    name: Optional[str] = None,
    type: Optional[str] = None,
    deployed_at: Optional[int] = None,
    deployer_address: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> ContractAnalyticsRecord:
    """Return the contract row, creating it with zeroed counters on first sight."""
    existing = get_contract(db, address)
    if existing:
        return existing

    db_contract = ContractAnalyticsRecord(
        address=address,
        name=name,
        type=type,
        deployed_at=deployed_at,
        deployer_address=deployer_address,
        total_interactions=0,
        unique_users=0,
        last_interaction=created_at,
        gas_used="0",
        events={},
        contract_metadata=metadata,
    )
    db.add(db_contract)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info(f"Contract {address} was created concurrently, re-reading")
        return get_contract(db, address)
    db.refresh(db_contract)
    return db_contract


def observe_contract_user(db: Session, address: str, wallet_address: str, seen_at: int) -> bool:
    """
    Record that ``wallet_address`` interacted with the contract.
    Returns True only the first time the pair is observed. Callers hold the
    contract row lock, which serializes observers of the same contract.
    """
    seen = db.query(ContractUserRecord).filter(
        ContractUserRecord.contract_address == address,
        ContractUserRecord.wallet_address == wallet_address,
    ).first()
    if seen is not None:
        return False
    db.add(ContractUserRecord(contract_address=address, wallet_address=wallet_address, first_seen=seen_at))
    db.flush()
    return True


def update_contract(
    db: Session,
    address: str,
    event_name: str,
    seen_at: int,
    user_address: Optional[str] = None,
    gas_used: int = 0,
    metadata: Optional[Dict[str, Any]] = None,
) -> Optional[ContractAnalyticsRecord]:
    """Fold one interaction into the contract row inside a single transaction."""
    db_contract = db.query(ContractAnalyticsRecord).filter(
        ContractAnalyticsRecord.address == address
    ).with_for_update().first()
    if db_contract is None:
        return None

    is_new_user = bool(user_address) and observe_contract_user(db, address, user_address, seen_at)

    events = dict(db_contract.events or {})
    events[event_name] = events.get(event_name, 0) + 1

    values = {
        ContractAnalyticsRecord.total_interactions: ContractAnalyticsRecord.total_interactions + 1,
        ContractAnalyticsRecord.unique_users: ContractAnalyticsRecord.unique_users + (1 if is_new_user else 0),
        ContractAnalyticsRecord.last_interaction: seen_at,
        ContractAnalyticsRecord.events: events,
    }
    if gas_used:
        values[ContractAnalyticsRecord.gas_used] = str(to_gas_int(db_contract.gas_used) + gas_used)
    if metadata:
        values[ContractAnalyticsRecord.contract_metadata] = merge_metadata(db_contract.contract_metadata, metadata)

    db.query(ContractAnalyticsRecord).filter(
        ContractAnalyticsRecord.address == address
    ).update(values, synchronize_session=False)
    db.commit()
    db.refresh(db_contract)
    return db_contract


def get_contracts(db: Session, limit: Optional[int] = None) -> List[ContractAnalyticsRecord]:
    """Contracts by interaction count, busiest first, ties by address."""
    query = db.query(ContractAnalyticsRecord).order_by(
        ContractAnalyticsRecord.total_interactions.desc(),
        ContractAnalyticsRecord.address.asc(),
    )
    if limit is not None:
        query = query.limit(limit)
    return query.all()

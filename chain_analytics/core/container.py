"""Wiring: one storage stack and the services built on it."""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from sqlalchemy.engine import Engine

from ..storage.memory import InMemoryBackend, InMemoryStore
from ..storage.relational import RelationalBackend
from ..utils import now_ms
from .activity_service import ActivityService
from .config import Settings, get_settings
from .contract_service import ContractService
from .database import create_db_engine, create_session_factory, init_db
from .event_service import EventService
from .session_service import SessionService
from .snapshot_service import SnapshotService
from .storage_gateway import ResilientBackend, StorageGateway
from .user_service import UserService

logger = logging.getLogger(__name__)


@dataclass
class AnalyticsServices:
    """Every service of one analytics stack, sharing a backend and a fallback store."""
    settings: Settings
    gateway: StorageGateway
    store: InMemoryStore
    backend: ResilientBackend
    events: EventService
    sessions: SessionService
    users: UserService
    contracts: ContractService
    snapshots: SnapshotService
    activity: ActivityService
    engine: Optional[Engine] = None


def build_services(
    settings: Optional[Settings] = None,
    engine: Optional[Engine] = None,
    clock: Callable[[], int] = now_ms,
    create_tables: bool = True,
) -> AnalyticsServices:
    """
    Build the storage stack and services.

    When the primary store is enabled an engine is created from DATABASE_URL
    unless one is passed in. Table creation failures are logged and left to
    the gateway: calls then fail over to the in-memory store.
    """
    settings = settings or get_settings()
    store = InMemoryStore()
    gateway = StorageGateway(primary_enabled=settings.primary_enabled)

    primary = None
    if settings.primary_enabled:
        engine = engine or create_db_engine(settings.DATABASE_URL, debug=settings.DEBUG)
        if create_tables:
            try:
                init_db(engine)
            except Exception as e:
                logger.warning(f"⚠️ Could not initialize analytics tables: {e}")
        primary = RelationalBackend(create_session_factory(engine))
        logger.info("✅ Relational analytics store enabled")
    else:
        logger.info("Relational analytics store disabled, serving from memory")

    backend = ResilientBackend(gateway, primary, InMemoryBackend(store))
    events = EventService(backend, settings)
    sessions = SessionService(backend, clock)
    users = UserService(backend, settings, clock)
    contracts = ContractService(backend, clock)
    snapshots = SnapshotService(backend, events, sessions, users, settings, gateway, clock)

    return AnalyticsServices(
        settings=settings,
        gateway=gateway,
        store=store,
        backend=backend,
        events=events,
        sessions=sessions,
        users=users,
        contracts=contracts,
        snapshots=snapshots,
        activity=ActivityService(events, sessions, users, contracts),
        engine=engine,
    )

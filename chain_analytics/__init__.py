# This file is the "front desk" of the 'chain_analytics' package.
# It lists the records, storage backends and services other code is expected
# to import directly from 'chain_analytics'.

# --- 1. Database Core Components ---
from .core.database import Base, create_db_engine, create_session_factory, session_scope, init_db
from .core.config import Settings, get_settings

# --- 2. Table Blueprints (from models.py) ---
from .models import (
    AnalyticsEventRecord,
    AnalyticsSessionRecord,
    AnalyticsUserRecord,
    ContractAnalyticsRecord,
    ContractUserRecord,
    DailySnapshotRecord
)

# --- 3. Records (Schemas from schemas.py) ---
from .schemas import (
    AnalyticsEventType,
    AnalyticsEvent,
    ContractEvent,
    UIEvent,
    parse_event,
    create_contract_event,
    create_ui_event,
    EventQuery,
    EventPage,
    EventSortField,
    SortDirection,
    AnalyticsSession,
    AnalyticsUser,
    ContractAnalytics,
    DailySnapshot,
    RealTimeAnalytics,
    StorageStatus
)

# --- 4. Storage ---
from .storage import StorageBackend, InMemoryStore, InMemoryBackend, RelationalBackend
from .core.storage_gateway import StorageGateway, ResilientBackend

# --- 5. Services ---
from .core.event_service import EventService
from .core.session_service import SessionService
from .core.user_service import UserService
from .core.contract_service import ContractService
from .core.snapshot_service import SnapshotService
from .core.activity_service import ActivityService
from .core.container import AnalyticsServices, build_services
from .utils import add_big_numbers

__all__ = [
    # Database Core
    'Base',
    'create_db_engine',
    'create_session_factory',
    'session_scope',
    'init_db',
    'Settings',
    'get_settings',

    # Models (Blueprints)
    'AnalyticsEventRecord',
    'AnalyticsSessionRecord',
    'AnalyticsUserRecord',
    'ContractAnalyticsRecord',
    'ContractUserRecord',
    'DailySnapshotRecord',

    # Schemas (Records)
    'AnalyticsEventType',
    'AnalyticsEvent',
    'ContractEvent',
    'UIEvent',
    'parse_event',
    'create_contract_event',
    'create_ui_event',
    'EventQuery',
    'EventPage',
    'EventSortField',
    'SortDirection',
    'AnalyticsSession',
    'AnalyticsUser',
    'ContractAnalytics',
    'DailySnapshot',
    'RealTimeAnalytics',
    'StorageStatus',

    # Storage
    'StorageBackend',
    'InMemoryStore',
    'InMemoryBackend',
    'RelationalBackend',
    'StorageGateway',
    'ResilientBackend',

    # Services
    'EventService',
    'SessionService',
    'UserService',
    'ContractService',
    'SnapshotService',
    'ActivityService',
    'AnalyticsServices',
    'build_services',
    'add_big_numbers',
]

import datetime as dt
import uuid
from enum import Enum
from typing import Annotated, Any, Dict, List, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PlainSerializer, field_validator

from .utils import now_ms, to_gas_int

# Gas quantities are exact ints in Python and decimal strings on the wire
GasInt = Annotated[
    int,
    BeforeValidator(to_gas_int),
    PlainSerializer(lambda v: str(v), return_type=str, when_used="json"),
]


# ====================================================================================
# --- Enums: fixed sets of choices for specific fields. ---
# ====================================================================================
class AnalyticsEventType(str, Enum):
    """
    Every event type the engine ingests.
    The first group is recorded from contract logs, the second from the UI.
    """
    # Contract events
    CONTRACT_INTERACTION = "contract_interaction"
    TOKEN_TRANSFER = "token_transfer"
    ASSET_LINKED = "asset_linked"
    ASSET_UNLINKED = "asset_unlinked"
    ASSET_TRANSFERRED = "asset_transferred"
    ROUTE_EXECUTED = "route_executed"
    ROUTE_REGISTERED = "route_registered"
    USER_REGISTERED = "user_registered"
    USER_LOGGED_IN = "user_logged_in"
    USER_LOGGED_OUT = "user_logged_out"
    AIRDROP_CLAIMED = "airdrop_claimed"
    NFT_MINTED = "nft_minted"

    # User interface events
    PAGE_VIEW = "page_view"
    BUTTON_CLICK = "button_click"
    FORM_SUBMISSION = "form_submission"
    WALLET_CONNECTED = "wallet_connected"
    WALLET_DISCONNECTED = "wallet_disconnected"
    ERROR_OCCURRED = "error_occurred"
    FEATURE_USED = "feature_used"


CONTRACT_EVENT_TYPES = frozenset({
    AnalyticsEventType.CONTRACT_INTERACTION,
    AnalyticsEventType.TOKEN_TRANSFER,
    AnalyticsEventType.ASSET_LINKED,
    AnalyticsEventType.ASSET_UNLINKED,
    AnalyticsEventType.ASSET_TRANSFERRED,
    AnalyticsEventType.ROUTE_EXECUTED,
    AnalyticsEventType.ROUTE_REGISTERED,
    AnalyticsEventType.USER_REGISTERED,
    AnalyticsEventType.USER_LOGGED_IN,
    AnalyticsEventType.USER_LOGGED_OUT,
    AnalyticsEventType.AIRDROP_CLAIMED,
    AnalyticsEventType.NFT_MINTED,
})
UI_EVENT_TYPES = frozenset(set(AnalyticsEventType) - CONTRACT_EVENT_TYPES)


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class EventSortField(str, Enum):
    """Columns an event query may be ordered by."""
    TIMESTAMP = "timestamp"
    ID = "id"
    EVENT_TYPE = "event_type"
    WALLET_ADDRESS = "wallet_address"
    CHAIN_ID = "chain_id"
    CONTRACT_ADDRESS = "contract_address"
    EVENT_NAME = "event_name"
    BLOCK_NUMBER = "block_number"
    LOG_INDEX = "log_index"


def _lenient_int(value: Any) -> Optional[int]:
    """Optional numeric fields: anything that is not an integer is stored as null."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def merge_metadata(existing: Optional[Dict[str, Any]], update: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Shallow merge where keys from ``update`` win."""
    if not update:
        return existing
    return {**(existing or {}), **update}


class FrozenModel(BaseModel):
    """Records are immutable; changes produce a new object via ``model_copy``."""
    model_config = ConfigDict(frozen=True)


# ====================================================================================
# --- Event Schemas: contract and UI events share one table and one base. ---
# ====================================================================================
class AnalyticsEventBase(FrozenModel):
    """Fields common to every event. ``id`` is assigned on store when missing."""
    id: Optional[str] = None
    event_type: AnalyticsEventType
    timestamp: int = Field(default_factory=now_ms)
    wallet_address: Optional[str] = None
    chain_id: Optional[int] = None
    metadata: Optional[Dict[str, Any]] = None

    @field_validator("chain_id", mode="before")
    @classmethod
    def lenient_chain_id(cls, v: Any) -> Optional[int]:
        return _lenient_int(v)


class ContractEvent(AnalyticsEventBase):
    """An event decoded from a contract log."""
    event_type: AnalyticsEventType = AnalyticsEventType.CONTRACT_INTERACTION
    contract_address: str
    event_name: str
    transaction_hash: str
    block_number: int
    log_index: int
    return_values: Dict[str, Any] = Field(default_factory=dict)
    gas_used: Optional[GasInt] = None
    gas_price: Optional[str] = None

    @field_validator("event_type")
    @classmethod
    def contract_event_type(cls, v: AnalyticsEventType) -> AnalyticsEventType:
        if v not in CONTRACT_EVENT_TYPES:
            raise ValueError(f"{v.value} is not a contract event type")
        return v

    @field_validator("return_values", mode="before")
    @classmethod
    def default_return_values(cls, v: Any) -> Any:
        return v if v is not None else {}

    @field_validator("gas_used", mode="before")
    @classmethod
    def lenient_gas_used(cls, v: Any) -> Optional[int]:
        return _lenient_int(v)

    @field_validator("gas_price", mode="before")
    @classmethod
    def lenient_gas_price(cls, v: Any) -> Optional[str]:
        if v is None or isinstance(v, str):
            return v
        return str(v) if isinstance(v, int) and not isinstance(v, bool) else None


class UIEvent(AnalyticsEventBase):
    """An event reported by the web UI."""
    event_type: AnalyticsEventType = AnalyticsEventType.PAGE_VIEW
    session_id: Optional[str] = None
    url: Optional[str] = None
    referrer: Optional[str] = None
    user_agent: Optional[str] = None
    ip_address: Optional[str] = None
    element: Optional[str] = None
    action: Optional[str] = None
    value: Optional[str] = None

    @field_validator("event_type")
    @classmethod
    def ui_event_type(cls, v: AnalyticsEventType) -> AnalyticsEventType:
        if v not in UI_EVENT_TYPES:
            raise ValueError(f"{v.value} is not a UI event type")
        return v


AnalyticsEvent = Union[ContractEvent, UIEvent]


def parse_event(data: Union[AnalyticsEvent, Dict[str, Any]]) -> AnalyticsEvent:
    """Build the right event variant from its event type."""
    if isinstance(data, (ContractEvent, UIEvent)):
        return data
    event_type = AnalyticsEventType(data["event_type"])
    if event_type in CONTRACT_EVENT_TYPES:
        return ContractEvent.model_validate(data)
    return UIEvent.model_validate(data)


def create_contract_event(
    contract_address: str,
    event_name: str,
    transaction_hash: str,
    block_number: int,
    log_index: int,
    return_values: Optional[Dict[str, Any]] = None,
    wallet_address: Optional[str] = None,
    chain_id: Optional[int] = None,
    gas_used: Union[int, str, None] = None,
    gas_price: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
    event_type: AnalyticsEventType = AnalyticsEventType.CONTRACT_INTERACTION,
) -> ContractEvent:
    """Contract event stamped with the current time."""
    return ContractEvent(
        event_type=event_type,
        timestamp=now_ms(),
        wallet_address=wallet_address,
        chain_id=chain_id,
        contract_address=contract_address,
        event_name=event_name,
        transaction_hash=transaction_hash,
        block_number=block_number,
        log_index=log_index,
        return_values=return_values or {},
        gas_used=gas_used,
        gas_price=gas_price,
        metadata=metadata,
    )


def create_ui_event(
    event_type: AnalyticsEventType,
    wallet_address: Optional[str] = None,
    session_id: Optional[str] = None,
    url: Optional[str] = None,
    referrer: Optional[str] = None,
    user_agent: Optional[str] = None,
    ip_address: Optional[str] = None,
    element: Optional[str] = None,
    action: Optional[str] = None,
    value: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> UIEvent:
    """UI event stamped with the current time."""
    return UIEvent(
        event_type=event_type,
        timestamp=now_ms(),
        wallet_address=wallet_address,
        session_id=session_id,
        url=url,
        referrer=referrer,
        user_agent=user_agent,
        ip_address=ip_address,
        element=element,
        action=action,
        value=value,
        metadata=metadata,
    )


class EventQuery(FrozenModel):
    """Conjunctive filters, ordering and pagination for event queries."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    start_date: Optional[int] = None
    end_date: Optional[int] = None
    wallet_address: Optional[str] = None
    contract_address: Optional[str] = None
    event_type: Optional[AnalyticsEventType] = None
    chain_id: Optional[int] = None
    limit: int = Field(default=100, ge=1)
    offset: int = Field(default=0, ge=0)
    sort_by: EventSortField = EventSortField.TIMESTAMP
    sort_direction: SortDirection = SortDirection.DESC


class EventPage(FrozenModel):
    data: List[AnalyticsEvent]
    total: int
    page: int
    limit: int
    has_more: bool

    @classmethod
    def build(cls, data: List[AnalyticsEvent], total: int, query: EventQuery) -> "EventPage":
        return cls(
            data=data,
            total=total,
            page=query.offset // query.limit + 1,
            limit=query.limit,
            has_more=query.offset + len(data) < total,
        )


# ====================================================================================
# --- Session Schemas ---
# ====================================================================================
class AnalyticsSession(FrozenModel):
    """
    A visit. Active while ``end_time`` is unset; once ended the record is frozen
    and every later update or end call returns it unchanged.
    """
    id: str
    user_id: Optional[str] = None
    wallet_address: Optional[str] = None
    start_time: int
    end_time: Optional[int] = None
    duration: Optional[int] = None
    is_active: bool = True
    user_agent: Optional[str] = None
    ip_address: Optional[str] = None
    referrer: Optional[str] = None
    entry_page: Optional[str] = None
    exit_page: Optional[str] = None
    page_views: int = 1
    interactions: int = 0
    chain_id: Optional[int] = None

    @classmethod
    def start(
        cls,
        started_at: int,
        wallet_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
        referrer: Optional[str] = None,
        entry_page: Optional[str] = None,
        chain_id: Optional[int] = None,
    ) -> "AnalyticsSession":
        return cls(
            id=str(uuid.uuid4()),
            wallet_address=wallet_address,
            start_time=started_at,
            is_active=True,
            user_agent=user_agent,
            ip_address=ip_address,
            referrer=referrer,
            entry_page=entry_page,
            page_views=1,
            interactions=0,
            chain_id=chain_id,
        )

    def with_stats(self, page_view: bool, interaction: bool, current_page: Optional[str]) -> "AnalyticsSession":
        if not self.is_active:
            return self
        return self.model_copy(update={
            "page_views": self.page_views + (1 if page_view else 0),
            "interactions": self.interactions + (1 if interaction else 0),
            "exit_page": current_page or self.exit_page,
        })

    def ended(self, end_time: int, exit_page: Optional[str]) -> "AnalyticsSession":
        if not self.is_active:
            return self
        return self.model_copy(update={
            "end_time": end_time,
            "duration": end_time - self.start_time,
            "is_active": False,
            "exit_page": exit_page or self.exit_page,
        })


# ====================================================================================
# --- User Ledger Schemas ---
# ====================================================================================
class AnalyticsUser(FrozenModel):
    """Per-wallet rollup. Counters only grow; ``first_seen`` never changes."""
    id: str
    wallet_address: str
    first_seen: int
    last_seen: int
    total_sessions: int = 0
    total_interactions: int = 0
    total_transactions: int = 0
    total_gas_spent: GasInt = 0
    assets_linked: int = 0
    tokens_held: Dict[str, str] = Field(default_factory=dict)
    tags: Optional[List[str]] = None
    metadata: Optional[Dict[str, Any]] = None

    @field_validator("tokens_held", mode="before")
    @classmethod
    def default_tokens_held(cls, v: Any) -> Any:
        return v if v is not None else {}

    @classmethod
    def new(cls, wallet_address: str, seen_at: int, metadata: Optional[Dict[str, Any]] = None) -> "AnalyticsUser":
        return cls(
            id=str(uuid.uuid4()),
            wallet_address=wallet_address,
            first_seen=seen_at,
            last_seen=seen_at,
            metadata=metadata,
        )

    def with_stats(
        self,
        new_session: bool,
        new_interaction: bool,
        new_transaction: bool,
        gas_spent: int,
        metadata: Optional[Dict[str, Any]],
        seen_at: int,
    ) -> "AnalyticsUser":
        return self.model_copy(update={
            "last_seen": max(self.last_seen, seen_at),
            "total_sessions": self.total_sessions + (1 if new_session else 0),
            "total_interactions": self.total_interactions + (1 if new_interaction else 0),
            "total_transactions": self.total_transactions + (1 if new_transaction else 0),
            "total_gas_spent": self.total_gas_spent + gas_spent,
            "metadata": merge_metadata(self.metadata, metadata),
        })


# ====================================================================================
# --- Contract Ledger Schemas ---
# ====================================================================================
class ContractAnalytics(FrozenModel):
    """Per-contract rollup keyed by address."""
    address: str
    name: Optional[str] = None
    type: Optional[str] = None
    deployed_at: Optional[int] = None
    deployer_address: Optional[str] = None
    total_interactions: int = 0
    unique_users: int = 0
    last_interaction: Optional[int] = None
    gas_used: GasInt = 0
    events: Dict[str, int] = Field(default_factory=dict)
    metadata: Optional[Dict[str, Any]] = None

    @field_validator("events", mode="before")
    @classmethod
    def default_events(cls, v: Any) -> Any:
        return v if v is not None else {}

    @classmethod
    def new(
        cls,
        address: str,
        created_at: int,
        name: Optional[str] = None,
        type: Optional[str] = None,
        deployed_at: Optional[int] = None,
        deployer_address: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> "ContractAnalytics":
        return cls(
            address=address,
            name=name,
            type=type,
            deployed_at=deployed_at,
            deployer_address=deployer_address,
            last_interaction=created_at,
            metadata=metadata,
        )

    def with_interaction(
        self,
        event_name: str,
        is_new_user: bool,
        gas_used: int,
        metadata: Optional[Dict[str, Any]],
        at: int,
    ) -> "ContractAnalytics":
        events = dict(self.events)
        events[event_name] = events.get(event_name, 0) + 1
        return self.model_copy(update={
            "total_interactions": self.total_interactions + 1,
            "unique_users": self.unique_users + (1 if is_new_user else 0),
            "last_interaction": at,
            "gas_used": self.gas_used + gas_used,
            "events": events,
            "metadata": merge_metadata(self.metadata, metadata),
        })


# ====================================================================================
# --- Snapshot Schemas ---
# ====================================================================================
class ContractInteractionCount(FrozenModel):
    address: str
    interactions: int


class EventTypeCount(FrozenModel):
    event_type: AnalyticsEventType
    count: int


class DailySnapshot(FrozenModel):
    """Day-bounded rollup, overwritten (never accumulated) when recomputed."""
    date: dt.date
    new_users: int = 0
    active_users: int = 0
    total_sessions: int = 0
    average_session_duration: float = 0.0
    total_transactions: int = 0
    total_gas_used: GasInt = 0
    top_contracts: List[ContractInteractionCount] = Field(default_factory=list)
    top_events: List[EventTypeCount] = Field(default_factory=list)
    metadata: Optional[Dict[str, Any]] = None

    @field_validator("top_contracts", "top_events", mode="before")
    @classmethod
    def default_rankings(cls, v: Any) -> Any:
        return v if v is not None else []


class PageUsers(FrozenModel):
    url: str
    users: int


class RecentEvent(FrozenModel):
    event_type: AnalyticsEventType
    timestamp: int
    wallet_address: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class RealTimeAnalytics(FrozenModel):
    """Dashboard view assembled on demand; never persisted."""
    active_users: int = 0
    active_sessions: int = 0
    transactions_in_last_hour: int = 0
    events_in_last_hour: int = 0
    top_current_pages: List[PageUsers] = Field(default_factory=list)
    recent_events: List[RecentEvent] = Field(default_factory=list)
    updated_at: int = Field(default_factory=now_ms)
    storage_degraded: bool = False


class StorageStatus(FrozenModel):
    """Degraded-mode signal exposed by the storage gateway."""
    primary_enabled: bool
    degraded: bool = False
    fallback_activations: int = 0
    last_error: Optional[str] = None

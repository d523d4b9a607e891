"""CRUD operations module."""

from .mapping import row_to_dict, record_kwargs
from .events import (
    create_event,
    get_event,
    delete_event,
    query_events,
    count_events,
    count_events_by_type,
    count_active_wallets,
    total_gas_used,
    contract_interaction_counts,
    event_type_counts
)
from .sessions import (
    create_session,
    get_session,
    update_session_stats,
    end_session,
    get_active_sessions,
    get_sessions_by_wallet,
    count_sessions_started,
    session_durations
)
from .users import (
    get_user_by_wallet,
    get_or_create_user,
    update_user_stats,
    get_all_users,
    get_users_seen_since,
    get_users_first_seen_since,
    count_new_users
)
from .contracts import (
    get_contract,
    get_or_create_contract,
    observe_contract_user,
    update_contract,
    get_contracts
)
from .snapshots import (
    upsert_snapshot,
    get_snapshot,
    get_snapshots
)


__all__ = [
    # Mapping
    "row_to_dict",
    "record_kwargs",

    # Events
    "create_event",
    "get_event",
    "delete_event",
    "query_events",
    "count_events",
    "count_events_by_type",
    "count_active_wallets",
    "total_gas_used",
    "contract_interaction_counts",
    "event_type_counts",

    # Sessions
    "create_session",
    "get_session",
    "update_session_stats",
    "end_session",
    "get_active_sessions",
    "get_sessions_by_wallet",
    "count_sessions_started",
    "session_durations",

    # Users
    "get_user_by_wallet",
    "get_or_create_user",
    "update_user_stats",
    "get_all_users",
    "get_users_seen_since",
    "get_users_first_seen_since",
    "count_new_users",

    # Contracts
    "get_contract",
    "get_or_create_contract",
    "observe_contract_user",
    "update_contract",
    "get_contracts",

    # Snapshots
    "upsert_snapshot",
    "get_snapshot",
    "get_snapshots",
]

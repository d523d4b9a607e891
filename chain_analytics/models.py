# models.py
# Table blueprints for the relational (primary) analytics store.
# The in-memory fallback store mirrors each of these tables with a keyed dict.

from sqlalchemy import Column, Integer, BigInteger, String, Boolean, Date, Float, JSON, Index, Text

from .core.database import Base


class AnalyticsEventRecord(Base):
    """
    Blueprint for the 'analytics_events' table.
    One row per ingested event; contract and UI columns share the table and the
    columns of the other variant stay NULL.
    """
    __tablename__ = "analytics_events"

    id = Column(String(64), primary_key=True)
    event_type = Column(String(64), nullable=False, index=True)
    timestamp = Column(BigInteger, nullable=False, index=True)
    wallet_address = Column(String(128), index=True)
    chain_id = Column(BigInteger)

    # Contract event columns
    contract_address = Column(String(128), index=True)
    event_name = Column(String(128))
    transaction_hash = Column(String(128))
    block_number = Column(BigInteger)
    log_index = Column(Integer)
    return_values = Column(JSON)
    gas_used = Column(String(80))  # decimal string, exact
    gas_price = Column(String(80))

    # UI event columns
    session_id = Column(String(64), index=True)
    url = Column(Text)
    referrer = Column(Text)
    user_agent = Column(Text)
    ip_address = Column(String(64))
    element = Column(String(255))
    action = Column(String(255))
    value = Column(Text)

    # `metadata` is reserved on declarative classes
    event_metadata = Column("metadata", JSON)

    __table_args__ = (
        Index("idx_analytics_events_contract_wallet", "contract_address", "wallet_address"),
    )


class AnalyticsSessionRecord(Base):
    """Blueprint for the 'analytics_sessions' table."""
    __tablename__ = "analytics_sessions"

    id = Column(String(64), primary_key=True)
    user_id = Column(String(64))
    wallet_address = Column(String(128), index=True)
    start_time = Column(BigInteger, nullable=False, index=True)
    end_time = Column(BigInteger)
    duration = Column(BigInteger)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    user_agent = Column(Text)
    ip_address = Column(String(64))
    referrer = Column(Text)
    entry_page = Column(Text)
    exit_page = Column(Text)
    page_views = Column(Integer, nullable=False, default=1)
    interactions = Column(Integer, nullable=False, default=0)
    chain_id = Column(BigInteger)


class AnalyticsUserRecord(Base):
    """
    Blueprint for the 'analytics_users' table.
    The unique key on wallet_address is what makes get-or-create safe under races.
    """
    __tablename__ = "analytics_users"

    id = Column(String(64), primary_key=True)
    wallet_address = Column(String(128), unique=True, nullable=False, index=True)
    first_seen = Column(BigInteger, nullable=False, index=True)
    last_seen = Column(BigInteger, nullable=False, index=True)
    total_sessions = Column(Integer, nullable=False, default=0)
    total_interactions = Column(Integer, nullable=False, default=0)
    total_transactions = Column(Integer, nullable=False, default=0)
    total_gas_spent = Column(String(80), nullable=False, default="0")
    assets_linked = Column(Integer, nullable=False, default=0)
    tokens_held = Column(JSON)
    tags = Column(JSON)
    user_metadata = Column("metadata", JSON)


class ContractAnalyticsRecord(Base):
    """Blueprint for the 'analytics_contracts' table."""
    __tablename__ = "analytics_contracts"

    address = Column(String(128), primary_key=True)
    name = Column(String(255))
    type = Column(String(64))
    deployed_at = Column(BigInteger)
    deployer_address = Column(String(128))
    total_interactions = Column(Integer, nullable=False, default=0, index=True)
    unique_users = Column(Integer, nullable=False, default=0)
    last_interaction = Column(BigInteger)
    gas_used = Column(String(80), nullable=False, default="0")
    events = Column(JSON)
    contract_metadata = Column("metadata", JSON)


class ContractUserRecord(Base):
    """
    Blueprint for the 'analytics_contract_users' table.
    One row per (contract, wallet) pair the contract ledger has observed; the
    composite primary key makes a second observation of the pair impossible.
    """
    __tablename__ = "analytics_contract_users"

    contract_address = Column(String(128), primary_key=True)
    wallet_address = Column(String(128), primary_key=True)
    first_seen = Column(BigInteger, nullable=False)


class DailySnapshotRecord(Base):
    """Blueprint for the 'analytics_daily_snapshots' table, one row per calendar date."""
    __tablename__ = "analytics_daily_snapshots"

    date = Column(Date, primary_key=True)
    new_users = Column(Integer, nullable=False, default=0)
    active_users = Column(Integer, nullable=False, default=0)
    total_sessions = Column(Integer, nullable=False, default=0)
    average_session_duration = Column(Float, nullable=False, default=0.0)
    total_transactions = Column(Integer, nullable=False, default=0)
    total_gas_used = Column(String(80), nullable=False, default="0")
    top_contracts = Column(JSON)
    top_events = Column(JSON)
    snapshot_metadata = Column("metadata", JSON)

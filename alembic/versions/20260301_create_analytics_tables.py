"""create analytics tables

Revision ID: 20260301_analytics_tables
Revises:
Create Date: 2026-03-01
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20260301_analytics_tables"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "analytics_events",
        sa.Column("id", sa.String(64), primary_key=True, nullable=False),
        sa.Column("event_type", sa.String(64), nullable=False, index=True),
        sa.Column("timestamp", sa.BigInteger(), nullable=False, index=True),
        sa.Column("wallet_address", sa.String(128), nullable=True, index=True),
        sa.Column("chain_id", sa.BigInteger(), nullable=True),
        sa.Column("contract_address", sa.String(128), nullable=True, index=True),
        sa.Column("event_name", sa.String(128), nullable=True),
        sa.Column("transaction_hash", sa.String(128), nullable=True),
        sa.Column("block_number", sa.BigInteger(), nullable=True),
        sa.Column("log_index", sa.Integer(), nullable=True),
        sa.Column("return_values", sa.JSON(), nullable=True),
        sa.Column("gas_used", sa.String(80), nullable=True),
        sa.Column("gas_price", sa.String(80), nullable=True),
        sa.Column("session_id", sa.String(64), nullable=True, index=True),
        sa.Column("url", sa.Text(), nullable=True),
        sa.Column("referrer", sa.Text(), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("ip_address", sa.String(64), nullable=True),
        sa.Column("element", sa.String(255), nullable=True),
        sa.Column("action", sa.String(255), nullable=True),
        sa.Column("value", sa.Text(), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
    )
    op.create_index(
        "idx_analytics_events_contract_wallet",
        "analytics_events",
        ["contract_address", "wallet_address"],
    )

    op.create_table(
        "analytics_sessions",
        sa.Column("id", sa.String(64), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(64), nullable=True),
        sa.Column("wallet_address", sa.String(128), nullable=True, index=True),
        sa.Column("start_time", sa.BigInteger(), nullable=False, index=True),
        sa.Column("end_time", sa.BigInteger(), nullable=True),
        sa.Column("duration", sa.BigInteger(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true(), index=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("ip_address", sa.String(64), nullable=True),
        sa.Column("referrer", sa.Text(), nullable=True),
        sa.Column("entry_page", sa.Text(), nullable=True),
        sa.Column("exit_page", sa.Text(), nullable=True),
        sa.Column("page_views", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("interactions", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("chain_id", sa.BigInteger(), nullable=True),
    )

    op.create_table(
        "analytics_users",
        sa.Column("id", sa.String(64), primary_key=True, nullable=False),
        sa.Column("wallet_address", sa.String(128), nullable=False, unique=True, index=True),
        sa.Column("first_seen", sa.BigInteger(), nullable=False, index=True),
        sa.Column("last_seen", sa.BigInteger(), nullable=False, index=True),
        sa.Column("total_sessions", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_interactions", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_transactions", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_gas_spent", sa.String(80), nullable=False, server_default="0"),
        sa.Column("assets_linked", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("tokens_held", sa.JSON(), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
    )

    op.create_table(
        "analytics_contracts",
        sa.Column("address", sa.String(128), primary_key=True, nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("type", sa.String(64), nullable=True),
        sa.Column("deployed_at", sa.BigInteger(), nullable=True),
        sa.Column("deployer_address", sa.String(128), nullable=True),
        sa.Column("total_interactions", sa.Integer(), nullable=False, server_default="0", index=True),
        sa.Column("unique_users", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_interaction", sa.BigInteger(), nullable=True),
        sa.Column("gas_used", sa.String(80), nullable=False, server_default="0"),
        sa.Column("events", sa.JSON(), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
    )

    op.create_table(
        "analytics_contract_users",
        sa.Column("contract_address", sa.String(128), primary_key=True, nullable=False),
        sa.Column("wallet_address", sa.String(128), primary_key=True, nullable=False),
        sa.Column("first_seen", sa.BigInteger(), nullable=False),
    )

    op.create_table(
        "analytics_daily_snapshots",
        sa.Column("date", sa.Date(), primary_key=True, nullable=False),
        sa.Column("new_users", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("active_users", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_sessions", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("average_session_duration", sa.Float(), nullable=False, server_default="0"),
        sa.Column("total_transactions", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_gas_used", sa.String(80), nullable=False, server_default="0"),
        sa.Column("top_contracts", sa.JSON(), nullable=True),
        sa.Column("top_events", sa.JSON(), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
    )


def downgrade() -> None:
    op.drop_table("analytics_daily_snapshots")
    op.drop_table("analytics_contract_users")
    op.drop_table("analytics_contracts")
    op.drop_table("analytics_users")
    op.drop_table("analytics_sessions")
    op.drop_index("idx_analytics_events_contract_wallet", table_name="analytics_events")
    op.drop_table("analytics_events")

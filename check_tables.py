#!/usr/bin/env python3
"""
Script to check that the analytics tables exist in the configured database.
"""

from sqlalchemy import inspect

from chain_analytics.core.config import get_settings
from chain_analytics.core.database import Base, create_db_engine
from chain_analytics import models  # noqa: F401


def check_tables():
    """Report missing analytics tables; exits non-zero when any is missing."""
    engine = create_db_engine(get_settings().DATABASE_URL)

    try:
        existing = set(inspect(engine).get_table_names())
        missing = [name for name in Base.metadata.tables if name not in existing]

        for name in Base.metadata.tables:
            print(f"{'✅' if name in existing else '❌'} {name}")

        if missing:
            print(f"❌ Missing tables: {', '.join(missing)} (run init_db.py or alembic upgrade head)")
            raise SystemExit(1)
        print("✅ All analytics tables present")
    finally:
        engine.dispose()


if __name__ == "__main__":
    check_tables()

# init_db.py
from chain_analytics.core.config import get_settings
from chain_analytics.core.database import create_db_engine, init_db
from chain_analytics.core.logging_config import configure_logging

if __name__ == "__main__":
    configure_logging()
    settings = get_settings()
    init_db(create_db_engine(settings.DATABASE_URL, debug=settings.DEBUG))
    print("Created all analytics tables")

from chain_analytics.core.config import get_settings
from chain_analytics.core.database import create_db_engine, drop_db, init_db


def reset_db():
    engine = create_db_engine(get_settings().DATABASE_URL)
    drop_db(engine)
    print("Dropped all analytics tables")
    init_db(engine)
    print("Created all analytics tables")

if __name__ == "__main__":
    reset_db()

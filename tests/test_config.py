import pytest
from pydantic import ValidationError

from chain_analytics.core.config import Settings


def test_heroku_style_url_is_rewritten():
    settings = Settings(_env_file=None, DATABASE_URL="postgres://user:pw@db:5432/analytics")
    assert settings.DATABASE_URL == "postgresql+psycopg2://user:pw@db:5432/analytics"


def test_primary_enabled_requires_url_and_flags():
    assert Settings(_env_file=None, DATABASE_URL="sqlite://").primary_enabled
    assert not Settings(_env_file=None, DATABASE_URL="").primary_enabled
    assert not Settings(_env_file=None, DATABASE_URL="sqlite://", USE_IN_MEMORY_DB=True).primary_enabled
    assert not Settings(_env_file=None, DATABASE_URL="sqlite://", ANALYTICS_DB_ENABLED=False).primary_enabled


def test_defaults():
    settings = Settings(_env_file=None)
    assert settings.DEFAULT_QUERY_LIMIT == 100
    assert settings.SNAPSHOT_TOP_N == 10
    assert settings.RECENT_EVENTS_LIMIT == 20
    assert settings.ACTIVE_WINDOW_HOURS == 24
    assert settings.SNAPSHOT_SCHEDULER_ENABLED is False


def test_log_level_is_validated():
    assert Settings(_env_file=None, LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"
    with pytest.raises(ValidationError):
        Settings(_env_file=None, LOG_LEVEL="chatty")

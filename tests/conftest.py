import asyncio
from datetime import datetime

import pytest

from chain_analytics.core.config import Settings
from chain_analytics.core.container import build_services
from chain_analytics.core.database import close_db, create_db_engine
from chain_analytics.core.storage_gateway import reset_fallback_notice
from chain_analytics.schemas import AnalyticsEventType, ContractEvent, UIEvent

# Local noon, so a few hours either way stays inside the same calendar day
BASE_TIME = int(datetime(2024, 3, 15, 12, 0, 0).timestamp() * 1000)


class FakeClock:
    """Injectable epoch-ms clock that only moves when told to."""

    def __init__(self, now: int = BASE_TIME):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> int:
        self.now += ms
        return self.now


def run(coro):
    return asyncio.run(coro)


def make_contract_event(**overrides) -> ContractEvent:
    data = dict(
        event_type=AnalyticsEventType.CONTRACT_INTERACTION,
        timestamp=BASE_TIME,
        wallet_address="0xW1",
        chain_id=1,
        contract_address="0xC1",
        event_name="Transfer",
        transaction_hash="0xT1",
        block_number=100,
        log_index=0,
    )
    data.update(overrides)
    return ContractEvent(**data)


def make_ui_event(**overrides) -> UIEvent:
    data = dict(
        event_type=AnalyticsEventType.PAGE_VIEW,
        timestamp=BASE_TIME,
        wallet_address="0xW1",
        url="/home",
    )
    data.update(overrides)
    return UIEvent(**data)


def memory_settings(**overrides) -> Settings:
    return Settings(_env_file=None, DATABASE_URL=None, USE_IN_MEMORY_DB=True, **overrides)


def sqlite_settings(url: str = "sqlite://", **overrides) -> Settings:
    return Settings(_env_file=None, DATABASE_URL=url, USE_IN_MEMORY_DB=False, ANALYTICS_DB_ENABLED=True, **overrides)


@pytest.fixture(autouse=True)
def _rearm_fallback_notice():
    reset_fallback_notice()
    yield
    reset_fallback_notice()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_services(clock):
    return build_services(memory_settings(), clock=clock)


@pytest.fixture
def relational_services(clock):
    engine = create_db_engine("sqlite://")
    services = build_services(sqlite_settings(), engine=engine, clock=clock)
    yield services
    close_db(engine)


@pytest.fixture
def failing_services(clock, tmp_path):
    """Primary enabled but unreachable: the database file lives in a directory that does not exist."""
    url = f"sqlite:///{tmp_path / 'missing' / 'analytics.db'}"
    engine = create_db_engine(url)
    services = build_services(sqlite_settings(url), engine=engine, clock=clock)
    yield services
    close_db(engine)


@pytest.fixture(params=["memory", "relational", "failing"])
def services(request):
    """The same behavior is expected from every storage stack."""
    return request.getfixturevalue(f"{request.param}_services")

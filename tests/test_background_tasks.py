import asyncio
from datetime import date, datetime

from chain_analytics.core.background_tasks import SnapshotSchedulerService
from chain_analytics.core.container import build_services
from chain_analytics.core.startup_tasks import startup_tasks

from conftest import memory_settings, run


def test_run_once_computes_yesterday_and_today(memory_services):
    scheduler = SnapshotSchedulerService(memory_services.snapshots, today=lambda: date(2024, 3, 15))

    run(scheduler.run_once())

    assert sorted(memory_services.store.snapshots) == [date(2024, 3, 14), date(2024, 3, 15)]


def test_startup_tasks_skip_scheduler_when_disabled(memory_services):
    async def scenario():
        async with startup_tasks(memory_services) as scheduler:
            return scheduler

    assert run(scenario()) is None


def test_startup_tasks_run_and_stop_scheduler(clock):
    services = build_services(memory_settings(SNAPSHOT_SCHEDULER_ENABLED=True), clock=clock)

    async def scenario():
        async with startup_tasks(services) as scheduler:
            await asyncio.sleep(0.05)
            assert scheduler.is_running
        return scheduler

    scheduler = run(scenario())

    assert scheduler.is_running is False
    assert datetime.now().date() in services.store.snapshots

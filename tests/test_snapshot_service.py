from datetime import date, datetime

from chain_analytics.schemas import AnalyticsEventType
from chain_analytics.utils import DAY_MS, HOUR_MS

from conftest import BASE_TIME, make_contract_event, make_ui_event, run

DAY = date(2024, 3, 15)


def seed_day(services, clock):
    """Two known users, three sessions (two ended), five events in the day and one the day before."""
    run(services.users.get_or_create_user("0xW1"))
    run(services.users.get_or_create_user("0xW2"))

    s1 = run(services.sessions.create_session(wallet_address="0xW1"))
    clock.advance(60_000)
    run(services.sessions.end_session(s1.id))
    s2 = run(services.sessions.create_session(wallet_address="0xW2"))
    clock.advance(120_000)
    run(services.sessions.end_session(s2.id))
    run(services.sessions.create_session())

    store = services.events
    run(store.store_contract_event(make_contract_event(wallet_address="0xW1", gas_used=100)))
    run(store.store_contract_event(make_contract_event(wallet_address="0xW2", gas_used=2 ** 70)))
    run(store.store_contract_event(make_contract_event(
        wallet_address="0xW1",
        contract_address="0xC2",
        event_type=AnalyticsEventType.TOKEN_TRANSFER,
    )))
    run(store.store_ui_event(make_ui_event(wallet_address="0xW3")))
    run(store.store_ui_event(make_ui_event(wallet_address=None, event_type=AnalyticsEventType.BUTTON_CLICK)))
    run(store.store_contract_event(make_contract_event(
        wallet_address="0xW9",
        contract_address="0xC9",
        timestamp=BASE_TIME - DAY_MS,
        gas_used=7,
    )))


def test_daily_snapshot_rollup(services, clock):
    seed_day(services, clock)

    snapshot = run(services.snapshots.create_daily_snapshot(DAY))

    assert snapshot.date == DAY
    assert snapshot.new_users == 2
    assert snapshot.active_users == 3
    assert snapshot.total_sessions == 3
    assert snapshot.average_session_duration == 90_000.0
    assert snapshot.total_transactions == 2
    assert snapshot.total_gas_used == 100 + 2 ** 70
    assert [(c.address, c.interactions) for c in snapshot.top_contracts] == [("0xC1", 2), ("0xC2", 1)]
    assert [(t.event_type, t.count) for t in snapshot.top_events] == [
        (AnalyticsEventType.CONTRACT_INTERACTION, 2),
        (AnalyticsEventType.BUTTON_CLICK, 1),
        (AnalyticsEventType.PAGE_VIEW, 1),
        (AnalyticsEventType.TOKEN_TRANSFER, 1),
    ]


def test_daily_snapshot_is_deterministic(services, clock):
    seed_day(services, clock)

    first = run(services.snapshots.create_daily_snapshot(DAY))
    clock.advance(HOUR_MS)
    second = run(services.snapshots.create_daily_snapshot(DAY))

    assert second.model_dump_json() == first.model_dump_json()
    assert run(services.snapshots.get_daily_snapshot(DAY)).model_dump_json() == first.model_dump_json()


def test_recomputed_snapshot_overwrites(services, clock):
    seed_day(services, clock)
    run(services.snapshots.create_daily_snapshot(DAY))

    run(services.events.store_contract_event(make_contract_event(wallet_address="0xW4", gas_used=1)))
    updated = run(services.snapshots.create_daily_snapshot(DAY))

    assert updated.total_transactions == 3
    assert updated.active_users == 4
    assert updated.total_gas_used == 101 + 2 ** 70
    assert run(services.snapshots.get_daily_snapshot(DAY)).total_transactions == 3
    assert len(run(services.snapshots.get_daily_snapshots(DAY, DAY))) == 1


def test_empty_day(services):
    snapshot = run(services.snapshots.create_daily_snapshot("2024-01-01"))

    assert snapshot.date == date(2024, 1, 1)
    assert snapshot.average_session_duration == 0.0
    assert snapshot.total_gas_used == 0
    assert snapshot.top_contracts == []
    assert snapshot.top_events == []


def test_snapshot_range_is_inclusive_and_ascending(services):
    for day in (date(2024, 3, 16), date(2024, 3, 14), datetime(2024, 3, 15, 18, 30), date(2024, 3, 20)):
        run(services.snapshots.create_daily_snapshot(day))

    snapshots = run(services.snapshots.get_daily_snapshots("2024-03-14", date(2024, 3, 16)))
    assert [s.date for s in snapshots] == [date(2024, 3, 14), date(2024, 3, 15), date(2024, 3, 16)]
    assert run(services.snapshots.get_daily_snapshot(date(2024, 3, 17))) is None


def test_real_time_analytics(services, clock):
    run(services.users.get_or_create_user("0xW1"))
    run(services.users.get_or_create_user("0xW2"))

    pages = ["/swap", "/swap", "/pool"]
    for page in pages:
        session = run(services.sessions.create_session(entry_page="/"))
        run(services.sessions.update_session_stats(session.id, page_view=True, current_page=page))
    gone = run(services.sessions.create_session(entry_page="/"))
    run(services.sessions.end_session(gone.id, exit_page="/swap"))
    run(services.sessions.create_session())

    for i in range(25):
        timestamp = BASE_TIME - i * 1_000
        if i % 5 == 0:
            run(services.events.store_contract_event(make_contract_event(timestamp=timestamp)))
        else:
            run(services.events.store_ui_event(make_ui_event(timestamp=timestamp)))
    run(services.events.store_contract_event(make_contract_event(timestamp=BASE_TIME - 2 * HOUR_MS)))

    view = run(services.snapshots.get_real_time_analytics())

    assert view.active_users == 2
    assert view.active_sessions == 4
    assert view.transactions_in_last_hour == 5
    assert view.events_in_last_hour == 25
    assert [(p.url, p.users) for p in view.top_current_pages] == [("/swap", 2), ("/pool", 1)]
    assert len(view.recent_events) == services.settings.RECENT_EVENTS_LIMIT
    timestamps = [e.timestamp for e in view.recent_events]
    assert timestamps == sorted(timestamps, reverse=True)
    assert timestamps[0] == BASE_TIME
    assert view.updated_at == BASE_TIME


def test_real_time_view_reports_degraded_storage(memory_services, failing_services):
    assert run(memory_services.snapshots.get_real_time_analytics()).storage_degraded is False
    assert run(failing_services.snapshots.get_real_time_analytics()).storage_degraded is True


def test_blank_addresses_are_not_counted(services):
    run(services.events.store_ui_event(make_ui_event(wallet_address="")))
    run(services.events.store_ui_event(make_ui_event(wallet_address="0xA")))
    run(services.events.store_contract_event(make_contract_event(wallet_address="0xA", contract_address="")))

    snapshot = run(services.snapshots.create_daily_snapshot(DAY))

    assert snapshot.active_users == 1
    assert snapshot.top_contracts == []


def test_future_events_stay_out_of_real_time_view(services):
    run(services.events.store_ui_event(make_ui_event(timestamp=BASE_TIME - 1_000)))
    run(services.events.store_ui_event(make_ui_event(timestamp=BASE_TIME + HOUR_MS)))

    view = run(services.snapshots.get_real_time_analytics())

    assert view.events_in_last_hour == 1
    assert [e.timestamp for e in view.recent_events] == [BASE_TIME - 1_000]

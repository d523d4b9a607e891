from conftest import BASE_TIME, run


def test_create_session_starts_active_with_entry_page_view(services):
    session = run(services.sessions.create_session(
        wallet_address="0xW1",
        user_agent="Mozilla/5.0",
        entry_page="/",
        chain_id=137,
    ))

    assert session.is_active is True
    assert session.start_time == BASE_TIME
    assert (session.page_views, session.interactions) == (1, 0)
    assert session.end_time is None and session.duration is None
    assert run(services.sessions.get_session_by_id(session.id)).model_dump() == session.model_dump()


def test_update_session_stats_increments_conditionally(services):
    session = run(services.sessions.create_session(entry_page="/"))

    updated = run(services.sessions.update_session_stats(session.id, page_view=True, current_page="/swap"))
    assert (updated.page_views, updated.interactions, updated.exit_page) == (2, 0, "/swap")

    updated = run(services.sessions.update_session_stats(session.id, interaction=True))
    assert (updated.page_views, updated.interactions, updated.exit_page) == (2, 1, "/swap")


def test_end_session_sets_duration_and_exit_page(services, clock):
    session = run(services.sessions.create_session(entry_page="/"))
    run(services.sessions.update_session_stats(session.id, page_view=True, current_page="/pool"))
    clock.advance(45_000)

    ended = run(services.sessions.end_session(session.id))

    assert ended.is_active is False
    assert ended.end_time == BASE_TIME + 45_000
    assert ended.duration == 45_000
    assert ended.exit_page == "/pool"


def test_ended_session_is_frozen(services, clock):
    session = run(services.sessions.create_session(entry_page="/"))
    clock.advance(1_000)
    ended = run(services.sessions.end_session(session.id, exit_page="/bye"))
    clock.advance(60_000)

    again = run(services.sessions.end_session(session.id, exit_page="/other"))
    touched = run(services.sessions.update_session_stats(session.id, page_view=True, interaction=True, current_page="/x"))

    assert again.model_dump() == ended.model_dump()
    assert touched.model_dump() == ended.model_dump()
    assert again.duration == 1_000


def test_unknown_session_returns_none(services):
    assert run(services.sessions.update_session_stats("nope", page_view=True)) is None
    assert run(services.sessions.end_session("nope")) is None
    assert run(services.sessions.get_session_by_id("nope")) is None


def test_active_sessions_and_wallet_history(services, clock):
    first = run(services.sessions.create_session(wallet_address="0xW1"))
    clock.advance(10_000)
    second = run(services.sessions.create_session(wallet_address="0xW1"))
    clock.advance(10_000)
    other = run(services.sessions.create_session(wallet_address="0xW2"))
    run(services.sessions.end_session(first.id))

    active_ids = {s.id for s in run(services.sessions.get_active_sessions())}
    assert active_ids == {second.id, other.id}

    history = run(services.sessions.get_sessions_by_wallet_address("0xW1"))
    assert [s.id for s in history] == [second.id, first.id]


def test_window_helpers(services, clock):
    durations = (30_000, 90_000)
    for duration in durations:
        session = run(services.sessions.create_session())
        clock.advance(duration)
        run(services.sessions.end_session(session.id))
    run(services.sessions.create_session())

    window = (BASE_TIME, BASE_TIME + 10 * 60_000)
    assert run(services.sessions.count_sessions_started(*window)) == 3
    assert run(services.sessions.average_session_duration(*window)) == 60_000.0
    assert run(services.sessions.average_session_duration(0, BASE_TIME - 1)) == 0.0

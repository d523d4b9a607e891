import json

from chain_analytics.utils import HOUR_MS

from conftest import BASE_TIME, run


def test_get_or_create_user_is_idempotent(services, clock):
    first = run(services.users.get_or_create_user("0xAAA", metadata={"ref": "twitter"}))
    clock.advance(5_000)
    second = run(services.users.get_or_create_user("0xAAA", metadata={"ref": "other"}))

    assert second.id == first.id
    assert second.first_seen == BASE_TIME
    assert second.metadata == {"ref": "twitter"}
    assert len(run(services.users.get_all_users())) == 1


def test_new_user_starts_from_zero(services):
    user = run(services.users.get_or_create_user("0xAAA"))

    assert user.first_seen == user.last_seen == BASE_TIME
    assert (user.total_sessions, user.total_interactions, user.total_transactions) == (0, 0, 0)
    assert user.total_gas_spent == 0
    assert user.assets_linked == 0
    assert user.tokens_held == {}


def test_repeated_stats_updates_accumulate(services):
    run(services.users.get_or_create_user("0xAAA"))
    for _ in range(3):
        user = run(services.users.update_user_stats(
            "0xAAA",
            new_session=True,
            new_interaction=True,
            new_transaction=False,
            gas_spent="500",
        ))

    assert user.total_sessions == 3
    assert user.total_interactions == 3
    assert user.total_transactions == 0
    assert user.total_gas_spent == 1500
    assert json.loads(user.model_dump_json())["total_gas_spent"] == "1500"


def test_counters_equal_sum_of_flags(services):
    flags = [
        (True, False, False),
        (False, True, True),
        (False, False, False),
        (True, True, True),
        (False, True, False),
    ]
    run(services.users.get_or_create_user("0xAAA"))
    previous = (0, 0, 0)
    for new_session, new_interaction, new_transaction in flags:
        user = run(services.users.update_user_stats(
            "0xAAA",
            new_session=new_session,
            new_interaction=new_interaction,
            new_transaction=new_transaction,
        ))
        current = (user.total_sessions, user.total_interactions, user.total_transactions)
        assert all(c >= p for c, p in zip(current, previous))
        previous = current

    assert previous == tuple(sum(column) for column in zip(*flags))


def test_gas_beyond_64_bits_is_exact(services):
    increments = [2 ** 64 + 1, str(2 ** 70), "18446744073709551615", 3]
    run(services.users.get_or_create_user("0xAAA"))
    for gas in increments:
        user = run(services.users.update_user_stats("0xAAA", gas_spent=gas))

    assert user.total_gas_spent == sum(int(g) for g in increments)


def test_update_unknown_wallet_returns_none_without_creating(services):
    assert run(services.users.update_user_stats("0xNOPE", new_session=True)) is None
    assert run(services.users.get_user_by_wallet_address("0xNOPE")) is None


def test_last_seen_never_moves_backwards(services, clock):
    run(services.users.get_or_create_user("0xAAA"))
    clock.advance(10_000)
    user = run(services.users.update_user_stats("0xAAA", new_interaction=True))
    assert user.last_seen == BASE_TIME + 10_000

    clock.now = BASE_TIME + 1_000
    user = run(services.users.update_user_stats("0xAAA", new_interaction=True))
    assert user.last_seen == BASE_TIME + 10_000
    assert user.first_seen == BASE_TIME


def test_metadata_is_shallow_merged(services):
    run(services.users.get_or_create_user("0xAAA", metadata={"tier": "bronze", "ref": "x"}))
    user = run(services.users.update_user_stats("0xAAA", metadata={"tier": "gold"}))
    assert user.metadata == {"tier": "gold", "ref": "x"}


def test_user_listings(services, clock):
    clock.now = BASE_TIME - 30 * HOUR_MS
    run(services.users.get_or_create_user("0xOLD"))
    clock.now = BASE_TIME - 2 * HOUR_MS
    run(services.users.get_or_create_user("0xMID"))
    clock.now = BASE_TIME
    run(services.users.get_or_create_user("0xNEW"))

    assert [u.wallet_address for u in run(services.users.get_all_users())] == ["0xNEW", "0xMID", "0xOLD"]
    assert [u.wallet_address for u in run(services.users.get_active_users())] == ["0xNEW", "0xMID"]
    assert [u.wallet_address for u in run(services.users.get_new_users())] == ["0xNEW", "0xMID"]

    # An old user seen again is active but not new
    run(services.users.update_user_stats("0xOLD", new_session=True))
    assert "0xOLD" in {u.wallet_address for u in run(services.users.get_active_users())}
    assert "0xOLD" not in {u.wallet_address for u in run(services.users.get_new_users())}
    assert run(services.users.count_new_users(BASE_TIME - 3 * HOUR_MS, BASE_TIME)) == 2

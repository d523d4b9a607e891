import json

from conftest import BASE_TIME, run


def test_interaction_scenario(services, clock):
    run(services.contracts.get_or_create_contract_analytics("0xC1", name="Router", type="dex"))
    run(services.contracts.update_contract_analytics("0xC1", "Transfer", "0xW1", "100"))
    clock.advance(1_000)
    run(services.contracts.update_contract_analytics("0xC1", "Transfer", "0xW1", "50"))
    clock.advance(1_000)
    contract = run(services.contracts.update_contract_analytics("0xC1", "Transfer", "0xW2", "25"))

    assert contract.total_interactions == 3
    assert contract.unique_users == 2
    assert contract.events == {"Transfer": 3}
    assert contract.gas_used == 175
    assert json.loads(contract.model_dump_json())["gas_used"] == "175"
    assert contract.last_interaction == BASE_TIME + 2_000
    assert (contract.name, contract.type) == ("Router", "dex")


def test_unique_users_count_each_wallet_once(services):
    run(services.contracts.get_or_create_contract_analytics("0xC1"))
    run(services.contracts.get_or_create_contract_analytics("0xC2"))

    first = run(services.contracts.update_contract_analytics("0xC1", "Swap", "0xW1"))
    second = run(services.contracts.update_contract_analytics("0xC1", "Swap", "0xW1"))
    anonymous = run(services.contracts.update_contract_analytics("0xC1", "Swap"))
    elsewhere = run(services.contracts.update_contract_analytics("0xC2", "Swap", "0xW1"))

    assert first.unique_users == 1
    assert second.unique_users == 1
    assert anonymous.unique_users == 1
    assert anonymous.total_interactions == 3
    assert elsewhere.unique_users == 1


def test_unknown_contract_returns_none(services):
    assert run(services.contracts.update_contract_analytics("0xNOPE", "Swap", "0xW1")) is None
    assert run(services.contracts.get_contract_analytics("0xNOPE")) is None


def test_get_or_create_contract_is_idempotent(services, clock):
    created = run(services.contracts.get_or_create_contract_analytics("0xC1", name="Router"))
    clock.advance(1_000)
    again = run(services.contracts.get_or_create_contract_analytics("0xC1", name="Renamed"))

    assert again.model_dump() == created.model_dump()
    assert created.total_interactions == 0
    assert created.gas_used == 0


def test_events_tally_and_metadata_merge(services):
    run(services.contracts.get_or_create_contract_analytics("0xC1", metadata={"verified": False, "chain": 1}))
    run(services.contracts.update_contract_analytics("0xC1", "Mint", gas_used=2 ** 65))
    contract = run(services.contracts.update_contract_analytics(
        "0xC1", "Burn", gas_used=2 ** 65, metadata={"verified": True}
    ))

    assert contract.events == {"Mint": 1, "Burn": 1}
    assert contract.gas_used == 2 ** 66
    assert contract.metadata == {"verified": True, "chain": 1}


def test_contract_rankings(services):
    for address, interactions in (("0xA", 1), ("0xB", 3), ("0xC", 3), ("0xD", 0)):
        run(services.contracts.get_or_create_contract_analytics(address))
        for _ in range(interactions):
            run(services.contracts.update_contract_analytics(address, "Call"))

    everything = run(services.contracts.get_all_contract_analytics())
    assert [c.address for c in everything] == ["0xB", "0xC", "0xA", "0xD"]

    top = run(services.contracts.get_top_contracts_by_interactions(limit=2))
    assert [(c.address, c.total_interactions) for c in top] == [("0xB", 3), ("0xC", 3)]

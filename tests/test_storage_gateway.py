import logging

import pytest

from chain_analytics.core.storage_gateway import StorageGateway

from conftest import make_ui_event, run

GATEWAY_LOGGER = "chain_analytics.core.storage_gateway"


def broken():
    raise ConnectionError("connection refused")


def test_primary_result_is_returned_when_healthy():
    gateway = StorageGateway(primary_enabled=True)
    assert gateway.execute(lambda: "primary", lambda: "fallback") == "primary"
    assert gateway.status().degraded is False
    assert gateway.status().fallback_activations == 0


def test_disabled_primary_is_never_called():
    gateway = StorageGateway(primary_enabled=False)
    assert gateway.execute(broken, lambda: "fallback") == "fallback"
    # Configured-off is not an outage
    assert gateway.status().fallback_activations == 0


def test_failure_is_served_by_fallback_and_not_sticky():
    gateway = StorageGateway(primary_enabled=True)

    assert gateway.execute(broken, lambda: "fallback") == "fallback"
    status = gateway.status()
    assert status.degraded is True
    assert status.fallback_activations == 1
    assert "connection refused" in status.last_error

    assert gateway.execute(lambda: "primary", lambda: "fallback") == "primary"
    assert gateway.status().degraded is False
    assert gateway.status().fallback_activations == 1


def test_only_first_fallback_warns(caplog):
    gateway = StorageGateway(primary_enabled=True)
    other = StorageGateway(primary_enabled=True)

    with caplog.at_level(logging.WARNING, logger=GATEWAY_LOGGER):
        for _ in range(3):
            gateway.execute(broken, lambda: None)
        other.execute(broken, lambda: None)

    warnings = [r for r in caplog.records if r.name == GATEWAY_LOGGER and r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert gateway.status().fallback_activations == 3


def test_fallback_errors_propagate():
    gateway = StorageGateway(primary_enabled=True)

    def fallback():
        raise KeyError("gone")

    with pytest.raises(KeyError):
        gateway.execute(broken, fallback)


def test_failing_primary_is_transparent_to_callers(failing_services):
    event_id = run(failing_services.events.store_ui_event(make_ui_event()))

    assert run(failing_services.events.get_event_by_id(event_id)) is not None
    assert event_id in failing_services.store.events
    status = failing_services.gateway.status()
    assert status.primary_enabled is True
    assert status.degraded is True
    assert status.fallback_activations >= 2


def test_clearing_the_store_drops_fallback_data(memory_services):
    event_id = run(memory_services.events.store_ui_event(make_ui_event()))
    memory_services.store.clear()
    assert run(memory_services.events.get_event_by_id(event_id)) is None

import json

import pytest
from pydantic import ValidationError

from chain_analytics.schemas import (
    AnalyticsEventType,
    AnalyticsSession,
    AnalyticsUser,
    ContractEvent,
    EventPage,
    EventQuery,
    UIEvent,
    create_contract_event,
    create_ui_event,
    parse_event,
)

from conftest import BASE_TIME, make_contract_event, make_ui_event


def test_parse_event_picks_variant_from_event_type():
    contract = parse_event(make_contract_event(event_type=AnalyticsEventType.NFT_MINTED).model_dump())
    ui = parse_event({"event_type": "button_click", "timestamp": BASE_TIME, "element": "#buy"})

    assert isinstance(contract, ContractEvent)
    assert contract.event_type == AnalyticsEventType.NFT_MINTED
    assert isinstance(ui, UIEvent)
    assert ui.element == "#buy"


def test_event_type_must_match_variant():
    with pytest.raises(ValidationError):
        make_contract_event(event_type=AnalyticsEventType.PAGE_VIEW)
    with pytest.raises(ValidationError):
        make_ui_event(event_type=AnalyticsEventType.TOKEN_TRANSFER)


def test_contract_event_requires_log_coordinates():
    with pytest.raises(ValidationError):
        ContractEvent(contract_address="0xC1", event_name="Transfer")


def test_malformed_optional_fields_become_null():
    event = make_contract_event(gas_used="lots", chain_id="mainnet", gas_price=12)
    assert event.gas_used is None
    assert event.chain_id is None
    assert event.gas_price == "12"


def test_gas_serializes_as_decimal_string():
    big = 2 ** 80
    event = make_contract_event(gas_used=str(big))

    assert event.gas_used == big
    assert json.loads(event.model_dump_json())["gas_used"] == str(big)
    assert event.model_dump()["gas_used"] == big


def test_factories_stamp_current_time():
    contract = create_contract_event("0xC1", "Transfer", "0xT", 1, 0, gas_used="21000")
    ui = create_ui_event(AnalyticsEventType.WALLET_CONNECTED, wallet_address="0xW1")

    assert contract.timestamp > BASE_TIME
    assert contract.gas_used == 21000
    assert contract.return_values == {}
    assert ui.event_type == AnalyticsEventType.WALLET_CONNECTED
    assert ui.timestamp > BASE_TIME


def test_event_query_validates_sort_and_paging():
    with pytest.raises(ValidationError):
        EventQuery(sort_by="gas_used; DROP TABLE analytics_events")
    with pytest.raises(ValidationError):
        EventQuery(limit=0)
    with pytest.raises(ValidationError):
        EventQuery(offset=-1)


def test_event_page_math():
    query = EventQuery(limit=10, offset=20)
    page = EventPage.build([make_ui_event()], total=21, query=query)
    assert page.page == 3
    assert page.has_more is False

    page = EventPage.build([make_ui_event()] * 10, total=31, query=query)
    assert page.has_more is True


def test_records_are_frozen():
    session = AnalyticsSession.start(BASE_TIME)
    with pytest.raises(ValidationError):
        session.page_views = 5


def test_ended_session_ignores_further_transitions():
    session = AnalyticsSession.start(BASE_TIME, entry_page="/")
    ended = session.with_stats(True, False, "/swap").ended(BASE_TIME + 1000, None)

    assert ended.duration == 1000
    assert ended.exit_page == "/swap"
    assert ended.ended(BASE_TIME + 9000, "/other") == ended
    assert ended.with_stats(True, True, "/other") == ended


def test_user_with_stats_keeps_last_seen_monotonic():
    user = AnalyticsUser.new("0xAAA", BASE_TIME)
    updated = user.with_stats(True, False, False, 10, {"tier": "gold"}, BASE_TIME - 5000)

    assert updated.last_seen == BASE_TIME
    assert updated.first_seen == BASE_TIME
    assert updated.total_sessions == 1
    assert updated.total_gas_spent == 10
    assert updated.metadata == {"tier": "gold"}

from datetime import date, datetime

import pytest

from chain_analytics.utils import DAY_MS, add_big_numbers, day_bounds, parse_day, to_gas_int


def test_add_big_numbers_carries_past_64_bits():
    assert add_big_numbers("999999999999999999", "1") == "1000000000000000000"
    assert add_big_numbers(str(2 ** 64), str(2 ** 64)) == str(2 ** 65)


def test_add_big_numbers_accepts_ints_and_empty_values():
    assert add_big_numbers(1500, "25") == "1525"
    assert add_big_numbers(None, "7") == "7"
    assert add_big_numbers("", "") == "0"


def test_to_gas_int_rejects_garbage():
    assert to_gas_int(" 42 ") == 42
    with pytest.raises(ValueError):
        to_gas_int("forty-two")


def test_parse_day_accepts_several_shapes():
    assert parse_day(date(2024, 3, 15)) == date(2024, 3, 15)
    assert parse_day(datetime(2024, 3, 15, 23, 59)) == date(2024, 3, 15)
    assert parse_day("2024-03-15") == date(2024, 3, 15)


def test_day_bounds_cover_one_local_day():
    start, end = day_bounds(date(2024, 3, 15))

    assert start == int(datetime(2024, 3, 15).timestamp() * 1000)
    assert end == int(datetime(2024, 3, 16).timestamp() * 1000) - 1
    # 23h or 25h on DST change days, 24h otherwise
    assert abs((end + 1 - start) - DAY_MS) <= 60 * 60 * 1000

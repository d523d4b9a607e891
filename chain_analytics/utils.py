"""Small helpers shared by the ledgers and the snapshot aggregator."""

import time
from datetime import date, datetime, time as dt_time, timedelta
from typing import Tuple, Union

from dateutil import parser

HOUR_MS = 60 * 60 * 1000
DAY_MS = 24 * HOUR_MS

GasValue = Union[int, str, None]


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


def to_gas_int(value: GasValue) -> int:
    """Decode a gas quantity (int or decimal string) into an exact int."""
    if value is None or value == "":
        return 0
    if isinstance(value, int):
        return value
    return int(str(value).strip())


def add_big_numbers(a: GasValue, b: GasValue) -> str:
    """Exact arbitrary-precision addition of two decimal quantities.

    >>> add_big_numbers("999999999999999999", "1")
    '1000000000000000000'
    """
    return str(to_gas_int(a) + to_gas_int(b))


def parse_day(value: Union[date, datetime, str]) -> date:
    """Coerce a calendar day given as date, datetime or string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parser.parse(value).date()


def day_bounds(day: date) -> Tuple[int, int]:
    """Local-time [00:00:00.000, 23:59:59.999] window for ``day`` in epoch ms."""
    start = datetime.combine(day, dt_time.min)
    next_start = datetime.combine(day + timedelta(days=1), dt_time.min)
    return int(start.timestamp() * 1000), int(next_start.timestamp() * 1000) - 1

from datetime import date, time
from decimal import Decimal

import pytest

from workforce_admin.common.datetime_utils import iter_days, parse_time, week_bounds
from workforce_admin.common.time_math import average, hours_between, net_pay, overtime_hours, payable_amount, total
from workforce_admin.core.exceptions import ValidationError


def test_hours_between_rounds_to_two_places():
    assert hours_between(time(9, 0), time(17, 20)) == Decimal("8.33")


def test_hours_between_never_negative_and_handles_missing():
    assert hours_between(time(17, 0), time(9, 0)) == Decimal("0.00")
    assert hours_between(None, time(9, 0)) == Decimal("0.00")


def test_overtime_only_counts_hours_beyond_schedule():
    assert overtime_hours(Decimal("9.5"), Decimal("8")) == Decimal("1.50")
    assert overtime_hours(Decimal("7"), Decimal("8")) == Decimal("0.00")


def test_money_helpers():
    assert payable_amount(Decimal("7.5"), Decimal("30")) == Decimal("225.00")
    assert net_pay(Decimal("100"), Decimal("12.50")) == Decimal("87.50")
    assert total(["1.10", Decimal("2.20"), None]) == Decimal("3.30")
    assert average([]) == Decimal("0.00")
    assert average([Decimal("10"), Decimal("20")]) == Decimal("15.00")


def test_week_bounds_monday_to_sunday():
    assert week_bounds(date(2025, 3, 13)) == (date(2025, 3, 10), date(2025, 3, 16))


def test_iter_days_inclusive():
    assert list(iter_days(date(2025, 1, 30), date(2025, 2, 1))) == [
        date(2025, 1, 30),
        date(2025, 1, 31),
        date(2025, 2, 1),
    ]


def test_parse_time_rejects_garbage():
    assert parse_time("08:30") == time(8, 30)
    with pytest.raises(ValidationError):
        parse_time("8h30")

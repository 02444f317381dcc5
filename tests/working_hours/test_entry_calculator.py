from datetime import time
from decimal import Decimal

from workforce_admin.working_hours.calculator import calculate_entry


def test_actual_hours_drive_overtime_and_pay():
    figures = calculate_entry(
        start_time=time(9, 0),
        end_time=time(17, 0),
        sign_in_time=time(8, 30),
        sign_out_time=time(18, 0),
        hourly_rate="30",
    )
    assert figures.total_hours == Decimal("8.00")
    assert figures.actual_hours == Decimal("9.50")
    assert figures.overtime_hours == Decimal("1.50")
    assert figures.payable_amount == Decimal("285.00")


def test_missing_sign_out_falls_back_to_schedule():
    figures = calculate_entry(start_time=time(9, 0), end_time=time(13, 0), sign_in_time=time(9, 5), hourly_rate=20)
    assert figures.actual_hours is None
    assert figures.overtime_hours == Decimal("0.00")
    assert figures.payable_amount == Decimal("80.00")

from decimal import Decimal

from workforce_admin.payroll.calculator.standard_calculator import StandardPayrollCalculator


def test_overtime_paid_at_multiplier_and_flat_deduction():
    pay = StandardPayrollCalculator().calculate(
        total_hours=Decimal("10"), overtime_hours=Decimal("2"), hourly_rate=Decimal("30")
    )
    assert pay.regular_hours == Decimal("8.00")
    assert pay.overtime_hours == Decimal("2.00")
    assert pay.gross_pay == Decimal("330.00")
    assert pay.deductions == Decimal("33.00")
    assert pay.net_pay == Decimal("297.00")


def test_overtime_is_capped_at_total_hours():
    pay = StandardPayrollCalculator(overtime_multiplier="2", deduction_rate="0").calculate(
        total_hours=Decimal("3"), overtime_hours=Decimal("5"), hourly_rate=Decimal("20")
    )
    assert pay.overtime_hours == Decimal("3.00")
    assert pay.regular_hours == Decimal("0.00")
    assert pay.gross_pay == Decimal("120.00")
    assert pay.net_pay == Decimal("120.00")

"""Notification filing decisions and deadlines."""

from __future__ import annotations

from datetime import date, timedelta

from social_insurance_engine.calculators.lifecycle import add_months
from social_insurance_engine.calculators.types import (
    AcquisitionResult,
    Employee,
    NotificationDecision,
    NotificationType,
    SuijiResult,
    TeijiResult,
)

TEIJI_DEADLINE_MONTH = 7
DEADLINE_DAY = 10
ACQUISITION_DEADLINE_DAYS = 5


def _tenth_of_next_month(year: int, month: int) -> date:
    next_year, next_month = add_months(year, month, 1)
    return date(next_year, next_month, DEADLINE_DAY)


def check_teiji_notification(result: TeijiResult, current_grade: int | None, year: int) -> NotificationDecision:
    """Periodic determination notice: required on a 2+ grade change."""
    if result.grade <= 0 or result.standard_monthly_remuneration <= 0:
        return NotificationDecision(
            type=NotificationType.TEIJI,
            required=False,
            reasons=["grade not determined"],
        )
    if not current_grade:
        return NotificationDecision(
            type=NotificationType.TEIJI,
            required=False,
            reasons=["no current grade to compare against"],
        )

    diff = abs(result.grade - current_grade)
    if diff >= 2:
        return NotificationDecision(
            type=NotificationType.TEIJI,
            required=True,
            submit_until=date(year, TEIJI_DEADLINE_MONTH, DEADLINE_DAY),
            reasons=[f"grade changes by {diff} ({current_grade} -> {result.grade})"],
        )
    return NotificationDecision(
        type=NotificationType.TEIJI,
        required=False,
        reasons=[f"grade change of {diff} is below 2"],
    )


def check_suiji_notification(result: SuijiResult) -> NotificationDecision:
    """Revision notice: required for every eligible revision."""
    if not result.is_eligible:
        return NotificationDecision(
            type=NotificationType.SUIJI,
            required=False,
            reasons=["revision not eligible"],
        )
    return NotificationDecision(
        type=NotificationType.SUIJI,
        required=True,
        submit_until=_tenth_of_next_month(result.apply_start_year, result.apply_start_month),
        reasons=[f"grade {result.current_grade} -> {result.new_grade} from month {result.apply_start_month}"],
    )


def check_bonus_notification(
    amount: int,
    pay_date: date,
    is_retired_no_last_day: bool = False,
    is_exempted: bool = False,
    is_over_age_75: bool = False,
    is_salary_instead_of_bonus: bool = False,
) -> NotificationDecision:
    """Bonus payment notice; the first matching exclusion wins."""
    if amount <= 0:
        reason = "no bonus paid"
    elif is_retired_no_last_day:
        reason = "separated before month-end in the payment month"
    elif is_exempted:
        reason = "paid during a leave exemption"
    elif is_over_age_75:
        reason = "age 75 or over"
    elif is_salary_instead_of_bonus:
        reason = "treated as salary (4 or more payments a year)"
    else:
        return NotificationDecision(
            type=NotificationType.BONUS,
            required=True,
            submit_until=_tenth_of_next_month(pay_date.year, pay_date.month),
        )
    return NotificationDecision(type=NotificationType.BONUS, required=False, reasons=[reason])


def check_acquisition_notification(
    employee: Employee,
    result: AcquisitionResult | None,
) -> NotificationDecision | None:
    """Acquisition notice, due five days after the day following hire."""
    if employee.join_date is None or result is None or not result.is_determined:
        return None
    return NotificationDecision(
        type=NotificationType.ACQUISITION,
        required=True,
        submit_until=employee.join_date + timedelta(days=1 + ACQUISITION_DEADLINE_DAYS),
        reasons=[f"acquired with grade {result.grade}"],
    )

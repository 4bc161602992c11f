"""Premium stopping rules applied on top of calculated figures."""

from __future__ import annotations

from dataclasses import dataclass

from social_insurance_engine.calculators.amounts import sanitize_amount
from social_insurance_engine.calculators.lifecycle import (
    is_childcare_leave,
    is_maternity_leave,
    is_retired_for_month,
)
from social_insurance_engine.calculators.types import Employee, PremiumBreakdown, StoppingResult

PENSION_STOP_AGE = 70
HEALTH_STOP_AGE = 75


@dataclass(frozen=True)
class StoppingFlags:
    """Which stopping rules apply to a month."""

    is_retired: bool = False
    is_maternity_leave: bool = False
    is_childcare_leave: bool = False
    is_pension_stopped: bool = False
    is_health_stopped: bool = False


def get_stopping_flags(employee: Employee, year: int, month: int, age: int) -> StoppingFlags:
    """Evaluate the stopping conditions without touching any figures."""
    retired = is_retired_for_month(employee, year, month)
    if retired:
        return StoppingFlags(is_retired=True)
    return StoppingFlags(
        is_maternity_leave=is_maternity_leave(employee, year, month),
        is_childcare_leave=is_childcare_leave(employee, year, month),
        is_pension_stopped=age >= PENSION_STOP_AGE,
        is_health_stopped=age >= HEALTH_STOP_AGE,
    )


def apply_stopping_rules(
    employee: Employee,
    year: int,
    month: int,
    age: int,
    premiums: PremiumBreakdown,
) -> StoppingResult:
    """Zero premium figures according to the stopping rules.

    Priority order:
    1) Retired: everything is zero, later rules are skipped
    2) Maternity/childcare leave: employee shares are zero
    3) Age 70+: pension is zero
    4) Age 75+: health and care are zero
    """
    flags = get_stopping_flags(employee, year, month, age)
    result = StoppingResult(
        health_employee=sanitize_amount(premiums.health_employee),
        health_employer=sanitize_amount(premiums.health_employer),
        care_employee=sanitize_amount(premiums.care_employee),
        care_employer=sanitize_amount(premiums.care_employer),
        pension_employee=sanitize_amount(premiums.pension_employee),
        pension_employer=sanitize_amount(premiums.pension_employer),
    )

    if flags.is_retired:
        return StoppingResult(is_retired=True)

    if flags.is_maternity_leave or flags.is_childcare_leave:
        result.health_employee = 0
        result.care_employee = 0
        result.pension_employee = 0
        result.is_maternity_leave = flags.is_maternity_leave
        result.is_childcare_leave = flags.is_childcare_leave

    if flags.is_pension_stopped:
        result.pension_employee = 0
        result.pension_employer = 0
        result.is_pension_stopped = True

    if flags.is_health_stopped:
        result.health_employee = 0
        result.health_employer = 0
        result.care_employee = 0
        result.care_employer = 0
        result.is_health_stopped = True

    return result

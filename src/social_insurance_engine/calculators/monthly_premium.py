"""Monthly premium calculation for one employee and month."""

from __future__ import annotations

import logging
from typing import Sequence

from social_insurance_engine.calculators.amounts import premium_share, sanitize_amount
from social_insurance_engine.calculators.eligibility import is_non_insured
from social_insurance_engine.calculators.grade_table import find_grade, grade_for_standard
from social_insurance_engine.calculators.lifecycle import (
    add_months,
    care_insurance_type,
    is_before_join_month,
    is_childcare_leave,
    is_health_stopped_in_month,
    is_join_month,
    is_last_day_eligible,
    is_maternity_leave,
    is_pension_stopped_in_month,
    month_key,
)
from social_insurance_engine.calculators.types import (
    CareInsuranceType,
    Employee,
    GradeBand,
    MonthlyPremiumResult,
    PremiumBreakdown,
    PremiumReason,
    RateTable,
    ReasonKind,
)

logger = logging.getLogger(__name__)


def _zero(kind: ReasonKind, message: str, grade: int = 0, standard: int = 0) -> MonthlyPremiumResult:
    return MonthlyPremiumResult(
        premiums=PremiumBreakdown(),
        grade=grade,
        standard_monthly_remuneration=standard,
        reasons=[PremiumReason(kind, message)],
    )


def _is_after_retire_month(employee: Employee, year: int, month: int) -> bool:
    retire = employee.retire_date
    return retire is not None and month_key(year, month) > month_key(retire.year, retire.month)


def calculate_monthly_premiums(
    employee: Employee,
    year: int,
    month: int,
    fixed_salary: int | None,
    variable_salary: int | None,
    grade_table: Sequence[GradeBand] | None,
    rates: RateTable | None,
    standard_monthly_remuneration: int | None = None,
) -> MonthlyPremiumResult:
    """Calculate the six premium figures for one month.

    Calculation pipeline (stable order):
    1) Exit with zero for retired, non-insured and leave-exempt months
    2) Resolve the base: the determined standard when given, otherwise
       a grade lookup of fixed + variable
    3) Gate by acquisition month (pension starts the month after)
    4) Gate by age milestones (care 40-64, pension until 70, health
       and care until 75)
    5) Gate health/care by month-end enrolment in a retirement month
    6) floor(base x rate) for each owed figure
    """
    if _is_after_retire_month(employee, year, month):
        return _zero(ReasonKind.RETIRED, "after the retirement month")
    if is_non_insured(employee):
        return _zero(ReasonKind.NON_INSURED, "not insured under the work conditions")
    if is_maternity_leave(employee, year, month):
        return _zero(ReasonKind.MATERNITY, "maternity leave exemption")
    if is_childcare_leave(employee, year, month):
        return _zero(ReasonKind.CHILDCARE, "childcare leave exemption")

    reasons: list[PremiumReason] = []
    total = sanitize_amount(fixed_salary) + sanitize_amount(variable_salary)
    standard = sanitize_amount(standard_monthly_remuneration)

    if standard > 0:
        base = standard
        grade = grade_for_standard(grade_table, standard)
        reasons.append(PremiumReason(ReasonKind.STANDARD_SOURCE, f"determined standard {standard} used"))
    else:
        if total <= 0:
            return _zero(ReasonKind.ZERO_SALARY, "no remuneration for the month")
        found = find_grade(grade_table, total)
        if found is None:
            return _zero(ReasonKind.NO_MATCHING_GRADE, f"no grade matches {total}")
        base = found.standard
        grade = found.grade

    if rates is None:
        return _zero(ReasonKind.NO_RATES, "no premium rates for the month", grade, base)

    if is_before_join_month(employee, year, month):
        return _zero(ReasonKind.BEFORE_ACQUISITION, "before the acquisition month", grade, base)

    health_owed = True
    pension_owed = True
    if is_join_month(employee, year, month):
        pension_owed = False
        reasons.append(PremiumReason(ReasonKind.ACQUISITION_MONTH, "acquisition month; pension starts next month"))

    care_type = care_insurance_type(employee.birth_date, year, month)
    care_owed = care_type == CareInsuranceType.TYPE2
    if care_owed:
        prev_year, prev_month = add_months(year, month, -1)
        if care_insurance_type(employee.birth_date, prev_year, prev_month) == CareInsuranceType.NONE:
            reasons.append(PremiumReason(ReasonKind.CARE_START, "care insurance starts (age 40)"))
    elif care_type == CareInsuranceType.TYPE1:
        reasons.append(PremiumReason(ReasonKind.CARE_TYPE1, "care insurance type 1 (age 65); not withheld"))

    if pension_owed and is_pension_stopped_in_month(employee.birth_date, year, month):
        pension_owed = False
        reasons.append(PremiumReason(ReasonKind.AGE_STOP_PENSION, "age 70 reached; pension stops"))

    if is_health_stopped_in_month(employee.birth_date, year, month):
        health_owed = False
        care_owed = False
        reasons.append(PremiumReason(ReasonKind.AGE_STOP_HEALTH, "age 75 reached; health and care stop"))

    if not is_last_day_eligible(employee, year, month):
        health_owed = False
        care_owed = False
        reasons.append(
            PremiumReason(ReasonKind.NOT_LAST_DAY_ELIGIBLE, "separated before month-end; health and care not owed")
        )

    premiums = PremiumBreakdown(
        health_employee=premium_share(base, rates.health_employee) if health_owed else 0,
        health_employer=premium_share(base, rates.health_employer) if health_owed else 0,
        care_employee=premium_share(base, rates.care_employee) if care_owed else 0,
        care_employer=premium_share(base, rates.care_employer) if care_owed else 0,
        pension_employee=premium_share(base, rates.pension_employee) if pension_owed else 0,
        pension_employer=premium_share(base, rates.pension_employer) if pension_owed else 0,
    )
    logger.debug(
        "Premiums for %s %s-%02d on base %s: %s",
        employee.employee_id,
        year,
        month,
        base,
        premiums.total,
    )
    return MonthlyPremiumResult(
        premiums=premiums,
        grade=grade,
        standard_monthly_remuneration=base,
        reasons=reasons,
    )

"""Insurance eligibility by employment status and age."""

from __future__ import annotations

import logging
from datetime import date

from social_insurance_engine.calculators.lifecycle import (
    age_on,
    has_reached_age_in_month,
    is_health_stopped_in_month,
    is_pension_stopped_in_month,
)
from social_insurance_engine.calculators.types import (
    AgeCategory,
    AgeFlags,
    EligibilityResult,
    Employee,
    ExpectedEmployment,
    WorkCategory,
    WorkHoursCategory,
)

logger = logging.getLogger(__name__)

SHORT_TIME_WAGE_THRESHOLD = 88000


def age_flags_for_month(birth_date: date | None, year: int, month: int) -> AgeFlags:
    """Age milestone flags for a month, using the reach-month rule."""
    reached_40 = has_reached_age_in_month(birth_date, year, month, 40)
    reached_65 = has_reached_age_in_month(birth_date, year, month, 65)
    return AgeFlags(
        is_care2=reached_40 and not reached_65,
        is_care1=reached_65,
        is_no_pension=is_pension_stopped_in_month(birth_date, year, month),
        is_no_health=is_health_stopped_in_month(birth_date, year, month),
    )


def age_category_for(flags: AgeFlags) -> AgeCategory:
    """The most advanced milestone in ``flags``."""
    if flags.is_no_health:
        return AgeCategory.HEALTH_STOPPED
    if flags.is_no_pension:
        return AgeCategory.PENSION_STOPPED
    if flags.is_care1:
        return AgeCategory.CARE_TYPE1
    if flags.is_care2:
        return AgeCategory.CARE_TYPE2
    return AgeCategory.UNDER_40


def classify_work_category(employee: Employee) -> WorkCategory:
    """Derive the insurance work category.

    Short-time workers (20-30 hours) are insured only when the monthly
    wage is at least 88,000 yen, employment is expected to exceed two
    months and the employee is not a student.
    """
    category = employee.weekly_work_hours_category
    if category == WorkHoursCategory.THIRTY_OR_MORE:
        return WorkCategory.FULL_TIME
    if category == WorkHoursCategory.TWENTY_TO_THIRTY:
        wage = employee.monthly_wage or 0
        if (
            wage >= SHORT_TIME_WAGE_THRESHOLD
            and employee.expected_employment_months == ExpectedEmployment.OVER_TWO_MONTHS
            and not employee.is_student
        ):
            return WorkCategory.SHORT_TIME
    return WorkCategory.NON_INSURED


def is_non_insured(employee: Employee) -> bool:
    return classify_work_category(employee) == WorkCategory.NON_INSURED


def check_eligibility(employee: Employee, reference_date: date) -> EligibilityResult:
    """Decide health/pension/care eligibility on ``reference_date``."""
    if employee.retire_date is not None and employee.retire_date <= reference_date:
        return EligibilityResult(
            health_eligible=False,
            pension_eligible=False,
            care_eligible=False,
            age=age_on(employee.birth_date, reference_date),
            age_category=AgeCategory.UNDER_40,
            age_flags=AgeFlags(),
            work_category=None,
            reasons=["retired"],
        )

    year, month = reference_date.year, reference_date.month
    age = age_on(employee.birth_date, reference_date)
    flags = age_flags_for_month(employee.birth_date, year, month)
    work_category = classify_work_category(employee)
    insured = work_category != WorkCategory.NON_INSURED

    reasons: list[str] = []
    if not insured:
        reasons.append("non_insured")
    if flags.is_no_health:
        reasons.append("age_75_health_stopped")
    if flags.is_no_pension:
        reasons.append("age_70_pension_stopped")
    if flags.is_care1:
        reasons.append("care_type1")

    health_eligible = insured and not flags.is_no_health
    result = EligibilityResult(
        health_eligible=health_eligible,
        pension_eligible=insured and not flags.is_no_pension,
        care_eligible=health_eligible and flags.is_care2,
        age=age,
        age_category=age_category_for(flags),
        age_flags=flags,
        work_category=work_category,
        reasons=reasons,
    )
    logger.debug(
        "Eligibility for %s on %s: health=%s pension=%s care=%s",
        employee.employee_id,
        reference_date,
        result.health_eligible,
        result.pension_eligible,
        result.care_eligible,
    )
    return result

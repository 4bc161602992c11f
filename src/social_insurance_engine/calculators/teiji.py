"""Periodic standard remuneration determination (teiji kettei).

The April-June remuneration is averaged and mapped to a grade that
applies from September of the same year.

Exclusion tests, applied per month:
- working days below 17
- absence deductions above 15% of the fixed wage
- a drop below 80% of the preceding month's total (skipped when the
  preceding month has no data)
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import ROUND_FLOOR, Decimal
from typing import Mapping, Sequence

from social_insurance_engine.calculators.amounts import average, round_to_thousand
from social_insurance_engine.calculators.grade_table import find_grade, grade_for_standard
from social_insurance_engine.calculators.types import Employee, GradeBand, SalaryMonth, TeijiResult

logger = logging.getLogger(__name__)

TEIJI_MONTHS = (4, 5, 6)
TEIJI_APPLY_MONTH = 9
MIN_WORKING_DAYS = 17
DROP_THRESHOLD = Decimal("0.8")
ABSENCE_DEDUCTION_THRESHOLD = Decimal("0.15")


def _month_total(salaries: Mapping[int, SalaryMonth], month: int) -> int:
    record = salaries.get(month)
    return record.total if record is not None else 0


def get_excluded_months(salaries: Mapping[int, SalaryMonth]) -> tuple[list[int], list[str]]:
    """Return the April-June months excluded from averaging, with reasons."""
    excluded: list[int] = []
    reasons: list[str] = []

    for month in TEIJI_MONTHS:
        record = salaries.get(month)
        total = _month_total(salaries, month)
        if total <= 0:
            excluded.append(month)
            reasons.append(f"{month}: no remuneration")
            continue

        if record.working_days is not None and record.working_days < MIN_WORKING_DAYS:
            excluded.append(month)
            reasons.append(f"{month}: {record.working_days} working days (below {MIN_WORKING_DAYS})")
            continue

        if record.fixed > 0 and Decimal(record.deduction) > Decimal(record.fixed) * ABSENCE_DEDUCTION_THRESHOLD:
            excluded.append(month)
            reasons.append(f"{month}: absence deduction above 15% of fixed wage")
            continue

        prior = _month_total(salaries, month - 1)
        if prior > 0 and Decimal(total) < Decimal(prior) * DROP_THRESHOLD:
            excluded.append(month)
            reasons.append(f"{month}: below 80% of the previous month ({total} < {prior})")

    return excluded, reasons


def _not_target_reasons(employee: Employee, year: int) -> list[str]:
    reasons: list[str] = []
    if employee.join_date is not None and employee.join_date >= date(year, 6, 1) and employee.join_date.year == year:
        reasons.append("joined on or after June 1; not a teiji target")
    if employee.retire_date is not None and employee.retire_date <= date(year, 6, 30) and employee.retire_date.year == year:
        reasons.append("retired on or before June 30; not a teiji target")
    return reasons


def calculate_teiji_kettei(
    employee_id: str,
    salaries: Mapping[int, SalaryMonth],
    grade_table: Sequence[GradeBand] | None,
    year: int,
    current_standard: int | None = None,
    employee: Employee | None = None,
) -> TeijiResult:
    """Determine the standard monthly remuneration from April-June pay.

    Args:
        employee_id: Employee the salaries belong to
        salaries: Month -> salary record for ``year``
        grade_table: Grade bands (reference table when empty)
        year: Determination year; the result applies from September
        current_standard: Standard kept when no month is usable
        employee: Enables the join/retire target checks when given

    Returns:
        The determination. Indeterminate results keep ``current_standard``.
    """
    kept_standard = current_standard if current_standard and current_standard > 0 else 0
    kept_grade = grade_for_standard(grade_table, kept_standard)

    if employee is not None:
        not_target = _not_target_reasons(employee, year)
        if not_target:
            return TeijiResult(
                employee_id=employee_id,
                year=year,
                average_salary=0,
                grade=0,
                standard_monthly_remuneration=kept_standard,
                excluded_months=list(TEIJI_MONTHS),
                apply_start_year=year,
                apply_start_month=TEIJI_APPLY_MONTH,
                is_target=False,
                reasons=not_target,
            )

    excluded, reasons = get_excluded_months(salaries)
    used = [m for m in TEIJI_MONTHS if m not in excluded]

    if not used:
        reasons.append("all of April-June excluded; average not computable")
        if kept_standard:
            reasons.append(f"current standard {kept_standard} kept")
        logger.debug("Teiji indeterminate for %s in %s", employee_id, year)
        return TeijiResult(
            employee_id=employee_id,
            year=year,
            average_salary=0,
            grade=kept_grade,
            standard_monthly_remuneration=kept_standard,
            excluded_months=excluded,
            apply_start_year=year,
            apply_start_month=TEIJI_APPLY_MONTH,
            is_indeterminate=True,
            reasons=reasons,
        )

    mean = average(_month_total(salaries, m) for m in used)
    average_salary = int(mean.to_integral_value(rounding=ROUND_FLOOR))
    reasons.append(f"averaged over months {', '.join(str(m) for m in used)}")

    rounded = round_to_thousand(average_salary)
    grade = find_grade(grade_table, rounded)
    if grade is None:
        reasons.append("no grade matches the averaged remuneration")
        return TeijiResult(
            employee_id=employee_id,
            year=year,
            average_salary=rounded,
            grade=0,
            standard_monthly_remuneration=0,
            used_months=used,
            excluded_months=excluded,
            apply_start_year=year,
            apply_start_month=TEIJI_APPLY_MONTH,
            is_indeterminate=True,
            reasons=reasons,
        )

    return TeijiResult(
        employee_id=employee_id,
        year=year,
        average_salary=rounded,
        grade=grade.grade,
        standard_monthly_remuneration=grade.standard,
        used_months=used,
        excluded_months=excluded,
        apply_start_year=year,
        apply_start_month=TEIJI_APPLY_MONTH,
        reasons=reasons,
    )

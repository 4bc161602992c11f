"""Ad-hoc standard remuneration revision (suiji kaitei).

A change in fixed wages is a revision candidate when the average total
remuneration of the change month and the two months after it lands two
or more grades away from the current grade. The revision applies from
the fourth month after the change month.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Mapping, Sequence

from social_insurance_engine.calculators.amounts import average, round_to_thousand
from social_insurance_engine.calculators.grade_table import find_grade
from social_insurance_engine.calculators.lifecycle import add_months, return_from_leave_month
from social_insurance_engine.calculators.types import Employee, GradeBand, SalaryMonth, SuijiResult

logger = logging.getLogger(__name__)

MIN_WORKING_DAYS = 17
ELIGIBLE_GRADE_DIFF = 2
APPLY_OFFSET_MONTHS = 4
POST_ACQUISITION_BLACKOUT_MONTHS = 3


def _counts_for_detection(record: SalaryMonth | None) -> bool:
    if record is None:
        return False
    return record.working_days is None or record.working_days >= MIN_WORKING_DAYS


def detect_fixed_wage_changes(
    salaries: Mapping[int, SalaryMonth],
    previous_fixed: int | None = None,
) -> list[int]:
    """Months whose fixed wage differs from the previous counted month.

    Month 1 is compared against ``previous_fixed`` (the prior December)
    only when it is given. Months without a record or with fewer than 17
    working days are skipped and the previous baseline carries over.
    """
    changes: list[int] = []
    baseline = previous_fixed if previous_fixed is not None and previous_fixed > 0 else None

    for month in range(1, 13):
        record = salaries.get(month)
        if not _counts_for_detection(record):
            continue
        if baseline is not None and record.fixed != baseline:
            changes.append(month)
        baseline = record.fixed

    return changes


def is_within_acquisition_blackout(join_date: date | None, change_month: int, year: int) -> bool:
    """True if the change falls 0-3 months after the hire month in the hire year."""
    if join_date is None or join_date.year != year:
        return False
    diff = change_month - join_date.month
    return 0 <= diff <= POST_ACQUISITION_BLACKOUT_MONTHS


def calculate_suiji_kettei(
    employee_id: str,
    change_month: int,
    salaries: Mapping[int, SalaryMonth],
    grade_table: Sequence[GradeBand] | None,
    current_grade: int | None,
    year: int,
    join_date: date | None = None,
) -> SuijiResult:
    """Evaluate a revision for a fixed-wage change in ``change_month``."""
    current = current_grade or 0
    apply_year, apply_month = add_months(year, change_month, APPLY_OFFSET_MONTHS)
    result = SuijiResult(
        employee_id=employee_id,
        year=year,
        change_month=change_month,
        average_salary=0,
        current_grade=current,
        new_grade=0,
        diff=0,
        is_eligible=False,
        apply_start_year=apply_year,
        apply_start_month=apply_month,
    )

    if change_month < 1 or change_month + 2 > 12:
        result.is_indeterminate = True
        result.reasons.append("three months from the change month are not within the year")
        return result

    months = (change_month, change_month + 1, change_month + 2)
    totals = [salaries[m].total if m in salaries else 0 for m in months]
    if any(total <= 0 for total in totals):
        result.is_indeterminate = True
        result.reasons.append("remuneration missing for part of the three-month window")
        return result

    rounded = round_to_thousand(average(totals))
    result.average_salary = rounded

    grade = find_grade(grade_table, rounded)
    if grade is None:
        result.is_indeterminate = True
        result.reasons.append("no grade matches the averaged remuneration")
        return result

    result.new_grade = grade.grade
    result.diff = abs(grade.grade - current)
    result.reasons.append(f"grade {current} -> {grade.grade} ({result.diff} grades)")

    if is_within_acquisition_blackout(join_date, change_month, year):
        result.reasons.append("within three months of acquisition; not a revision target")
        return result

    result.is_eligible = result.diff >= ELIGIBLE_GRADE_DIFF
    if result.is_eligible:
        result.reasons.append(f"applies from {apply_year}-{apply_month:02d}")
    logger.debug(
        "Suiji for %s month %s: %s -> %s eligible=%s",
        employee_id,
        change_month,
        current,
        grade.grade,
        result.is_eligible,
    )
    return result


def check_rehab_suiji(
    employee: Employee,
    salaries: Mapping[int, SalaryMonth],
    grade_table: Sequence[GradeBand] | None,
    current_grade: int | None,
    year: int,
) -> list[SuijiResult]:
    """Eligible revisions in the three months after returning from leave.

    Each of the return month and the two following months is checked
    against the month before it; a fixed-wage change triggers a revision
    evaluation for that month.
    """
    returned = return_from_leave_month(employee)
    if returned is None or returned[0] != year:
        return []

    return_month = returned[1]
    results: list[SuijiResult] = []
    for month in range(return_month, min(return_month + 2, 12) + 1):
        record = salaries.get(month)
        previous = salaries.get(month - 1)
        if record is None or previous is None or record.fixed == previous.fixed:
            continue
        result = calculate_suiji_kettei(
            employee.employee_id,
            month,
            salaries,
            grade_table,
            current_grade,
            year,
            join_date=employee.join_date,
        )
        if result.is_eligible:
            result.reasons.insert(0, "fixed wage changed after returning from leave")
            results.append(result)
    return results

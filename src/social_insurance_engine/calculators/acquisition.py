"""Acquisition-time standard remuneration determination (shikaku shutoku).

The standard remuneration at hiring is taken from the hire month's pay,
or the following month's when the hire month has none. Once determined
it is stored on the employee and never recomputed.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Mapping, Sequence
from uuid import UUID

from social_insurance_engine.calculators.amounts import round_to_thousand
from social_insurance_engine.calculators.grade_table import find_grade
from social_insurance_engine.calculators.types import (
    AcquisitionInfo,
    AcquisitionResult,
    Employee,
    GradeBand,
    SalaryMonth,
)
from social_insurance_engine.exceptions import RepositoryError

if TYPE_CHECKING:
    from social_insurance_engine.services.repository import PremiumRepository

logger = logging.getLogger(__name__)


def _positive_total(salaries: Mapping[int, SalaryMonth], month: int) -> int:
    record = salaries.get(month)
    if record is None or record.total <= 0:
        return 0
    return record.total


def determine_acquisition(
    employee: Employee,
    year: int,
    salaries: Mapping[int, SalaryMonth],
    grade_table: Sequence[GradeBand] | None,
) -> AcquisitionResult | None:
    """Compute the acquisition determination without persisting it.

    Returns None when the employee has no join date or did not join in
    ``year``.
    """
    join = employee.join_date
    if join is None or join.year != year:
        return None

    if employee.has_cached_acquisition:
        return AcquisitionResult(
            employee_id=employee.employee_id,
            year=year,
            base_salary=0,
            grade=employee.acquisition_grade,
            standard_monthly_remuneration=employee.acquisition_standard or 0,
            used_month=employee.acquisition_month or join.month,
            from_cache=True,
            reasons=["stored acquisition determination"],
        )

    used_month = join.month
    base = _positive_total(salaries, used_month)
    reasons: list[str] = []
    if base <= 0 and join.month + 1 <= 12:
        used_month = join.month + 1
        base = _positive_total(salaries, used_month)
        if base > 0:
            reasons.append(f"no pay in hire month; month {used_month} used")

    if base <= 0:
        reasons.append("no pay in the hire month or the following month")
        return AcquisitionResult(
            employee_id=employee.employee_id,
            year=year,
            base_salary=0,
            grade=0,
            standard_monthly_remuneration=0,
            used_month=0,
            reasons=reasons,
        )

    rounded = round_to_thousand(base)
    grade = find_grade(grade_table, rounded)
    if grade is None:
        reasons.append("no grade matches the hire-time remuneration")
        return AcquisitionResult(
            employee_id=employee.employee_id,
            year=year,
            base_salary=rounded,
            grade=0,
            standard_monthly_remuneration=0,
            used_month=used_month,
            reasons=reasons,
        )

    reasons.append(f"determined from month {used_month} pay ({rounded})")
    return AcquisitionResult(
        employee_id=employee.employee_id,
        year=year,
        base_salary=rounded,
        grade=grade.grade,
        standard_monthly_remuneration=grade.standard,
        used_month=used_month,
        reasons=reasons,
    )


class AcquisitionDeterminer:
    """Determines and persists acquisition-time standard remuneration.

    Persistence is write-once: the repository refuses to overwrite a
    stored determination, and a cached grade short-circuits the write.
    """

    def __init__(self, repository: PremiumRepository):
        self.repository = repository

    async def calculate_shikaku_shutoku(
        self,
        tenant_id: UUID,
        employee: Employee,
        year: int,
        salaries: Mapping[int, SalaryMonth],
        grade_table: Sequence[GradeBand] | None,
    ) -> AcquisitionResult | None:
        """Determine the acquisition grade and store it on first use."""
        result = determine_acquisition(employee, year, salaries, grade_table)
        if result is None or result.from_cache or not result.is_determined:
            return result

        info = AcquisitionInfo(
            grade=result.grade,
            standard=result.standard_monthly_remuneration,
            year=year,
            month=result.used_month,
        )
        try:
            written = await self.repository.save_acquisition_info(tenant_id, employee.employee_id, info)
        except RepositoryError:
            logger.exception(
                "Failed to save acquisition info for employee %s",
                employee.employee_id,
            )
            result.reasons.append("acquisition determination could not be saved")
            return result

        if written:
            employee.acquisition_grade = info.grade
            employee.acquisition_standard = info.standard
            employee.acquisition_year = info.year
            employee.acquisition_month = info.month
        return result

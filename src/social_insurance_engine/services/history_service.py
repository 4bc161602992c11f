"""Standard remuneration and insurance status history.

History rows are unique per (employee, apply year, apply month,
determination reason); saving the same determination twice updates the
existing row instead of adding a duplicate.
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Sequence
from uuid import UUID

from social_insurance_engine.calculators.eligibility import is_non_insured
from social_insurance_engine.calculators.engine import build_standard_timeline
from social_insurance_engine.calculators.grade_table import band_for_rank
from social_insurance_engine.calculators.lifecycle import (
    add_months,
    care_insurance_type,
    has_reached_age_in_month,
    is_childcare_leave,
    is_health_stopped_in_month,
    is_maternity_leave,
    is_pension_stopped_in_month,
    month_key,
)
from social_insurance_engine.calculators.types import (
    CareInsuranceType,
    DeterminationReason,
    Employee,
    GradeBand,
    InsuranceStatus,
    InsuranceStatusEntry,
    SalaryMonth,
    StandardRemunerationHistoryEntry,
)
from social_insurance_engine.services.repository import PremiumRepository

logger = logging.getLogger(__name__)


def standard_for_month(
    entries: Iterable[StandardRemunerationHistoryEntry],
    year: int,
    month: int,
) -> StandardRemunerationHistoryEntry | None:
    """The latest determination applying on or before ``year``/``month``."""
    target = month_key(year, month)
    selected: StandardRemunerationHistoryEntry | None = None
    for entry in sorted(entries, key=lambda e: e.apply_key):
        if entry.apply_key > target:
            break
        selected = entry
    return selected


def _milestone_for_month(employee: Employee, year: int, month: int) -> int | None:
    birth = employee.birth_date
    if birth is None:
        return None
    prev_year, prev_month = add_months(year, month, -1)
    if is_health_stopped_in_month(birth, year, month) and not is_health_stopped_in_month(birth, prev_year, prev_month):
        return 75
    for age in (70, 65, 40):
        if has_reached_age_in_month(birth, year, month, age) and not has_reached_age_in_month(
            birth, prev_year, prev_month, age
        ):
            return age
    return None


def build_insurance_status(employee: Employee, year: int, month: int) -> InsuranceStatusEntry:
    """Per-insurance status of ``employee`` for one month."""
    birth = employee.birth_date
    non_insured = is_non_insured(employee)
    retired = employee.retire_date is not None and month_key(year, month) > month_key(
        employee.retire_date.year, employee.retire_date.month
    )
    maternity = is_maternity_leave(employee, year, month)
    childcare = is_childcare_leave(employee, year, month)
    health_stopped = is_health_stopped_in_month(birth, year, month)

    if non_insured or health_stopped or retired:
        health = InsuranceStatus.LOST
    elif maternity:
        health = InsuranceStatus.EXEMPT_MATERNITY
    elif childcare:
        health = InsuranceStatus.EXEMPT_CHILDCARE
    else:
        health = InsuranceStatus.JOINED

    care_type = care_insurance_type(birth, year, month)
    if non_insured or health_stopped or retired:
        care = InsuranceStatus.LOST
    elif care_type == CareInsuranceType.TYPE1:
        care = InsuranceStatus.TYPE1
    elif care_type == CareInsuranceType.NONE:
        care = InsuranceStatus.LOST
    elif maternity:
        care = InsuranceStatus.EXEMPT_MATERNITY
    elif childcare:
        care = InsuranceStatus.EXEMPT_CHILDCARE
    else:
        care = InsuranceStatus.JOINED

    if non_insured or is_pension_stopped_in_month(birth, year, month) or retired:
        pension = InsuranceStatus.LOST
    elif maternity:
        pension = InsuranceStatus.EXEMPT_MATERNITY
    elif childcare:
        pension = InsuranceStatus.EXEMPT_CHILDCARE
    else:
        pension = InsuranceStatus.JOINED

    return InsuranceStatusEntry(
        employee_id=employee.employee_id,
        year=year,
        month=month,
        health_status=health,
        care_status=care,
        pension_status=pension,
        age_milestone=_milestone_for_month(employee, year, month),
    )


class StandardRemunerationHistoryService:
    """Service for generating and reading determination history.

    Generation derives the year's determinations (acquisition, teiji
    unless a July-September revision replaces it, and eligible suiji)
    and upserts them through the repository, so repeated generation
    never duplicates rows.
    """

    def __init__(self, repository: PremiumRepository):
        self.repository = repository

    async def generate_history(
        self,
        tenant_id: UUID,
        employee: Employee,
        year: int,
        salaries: Mapping[int, SalaryMonth],
        grade_table: Sequence[GradeBand] | None,
    ) -> list[StandardRemunerationHistoryEntry]:
        """Derive and store the determinations of ``year``."""
        timeline = build_standard_timeline(employee, year, salaries, grade_table)
        entries: list[StandardRemunerationHistoryEntry] = []

        acquisition = timeline.acquisition
        if acquisition is not None and acquisition.is_determined and employee.join_date is not None:
            entries.append(
                StandardRemunerationHistoryEntry(
                    employee_id=employee.employee_id,
                    apply_start_year=employee.join_date.year,
                    apply_start_month=employee.join_date.month,
                    grade=acquisition.grade,
                    standard_monthly_remuneration=acquisition.standard_monthly_remuneration,
                    determination_reason=DeterminationReason.ACQUISITION,
                    memo="; ".join(acquisition.reasons) or None,
                )
            )

        teiji = timeline.teiji
        if teiji is not None and timeline.teiji_month is not None:
            entries.append(
                StandardRemunerationHistoryEntry(
                    employee_id=employee.employee_id,
                    apply_start_year=teiji.apply_start_year,
                    apply_start_month=teiji.apply_start_month,
                    grade=teiji.grade,
                    standard_monthly_remuneration=teiji.standard_monthly_remuneration,
                    determination_reason=DeterminationReason.TEIJI,
                    memo=f"average {teiji.average_salary}",
                )
            )

        for suiji in timeline.suiji:
            band = band_for_rank(grade_table, suiji.new_grade)
            if band is None:
                continue
            entries.append(
                StandardRemunerationHistoryEntry(
                    employee_id=employee.employee_id,
                    apply_start_year=suiji.apply_start_year,
                    apply_start_month=suiji.apply_start_month,
                    grade=suiji.new_grade,
                    standard_monthly_remuneration=band.standard,
                    determination_reason=DeterminationReason.SUIJI,
                    memo=f"fixed wage change in month {suiji.change_month}",
                )
            )

        for entry in entries:
            await self.repository.save_standard_remuneration_history(tenant_id, entry)
        logger.info(
            "Stored %s determinations for employee %s in %s",
            len(entries),
            employee.employee_id,
            year,
        )
        return entries

    async def get_standard_for_month(
        self,
        tenant_id: UUID,
        employee_id: str,
        year: int,
        month: int,
    ) -> int | None:
        """Standard monthly remuneration in force for a month, if any."""
        entries = await self.repository.list_standard_remuneration_history(tenant_id, employee_id)
        entry = standard_for_month(entries, year, month)
        return entry.standard_monthly_remuneration if entry else None

    async def generate_insurance_status_history(
        self,
        tenant_id: UUID,
        employee: Employee,
        year: int,
    ) -> list[InsuranceStatusEntry]:
        """Build and store twelve monthly status rows for ``year``."""
        if employee.birth_date is None:
            return []
        entries = [build_insurance_status(employee, year, month) for month in range(1, 13)]
        await self.repository.save_insurance_status_history(tenant_id, entries)
        return entries

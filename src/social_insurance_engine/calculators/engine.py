"""Premium calculation engine - main orchestrator."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, Mapping, Sequence
from uuid import UUID

from social_insurance_engine.calculators.acquisition import AcquisitionDeterminer, determine_acquisition
from social_insurance_engine.calculators.aggregation import (
    aggregate_monthly_totals,
    build_company_monthly_totals,
    calculate_annual_totals,
)
from social_insurance_engine.calculators.bonus_premium import add_bonus_to_monthly_totals, get_annual_premiums
from social_insurance_engine.calculators.grade_table import band_for_rank, find_grade, grade_for_standard
from social_insurance_engine.calculators.lifecycle import age_at_month, is_join_month, return_from_leave_month
from social_insurance_engine.calculators.monthly_premium import calculate_monthly_premiums
from social_insurance_engine.calculators.notifications import check_acquisition_notification
from social_insurance_engine.calculators.rates import RateSchedule
from social_insurance_engine.calculators.stopping_rules import apply_stopping_rules
from social_insurance_engine.calculators.suiji import (
    calculate_suiji_kettei,
    check_rehab_suiji,
    detect_fixed_wage_changes,
)
from social_insurance_engine.calculators.teiji import calculate_teiji_kettei
from social_insurance_engine.calculators.types import (
    AcquisitionResult,
    Bonus,
    CalculationResult,
    Employee,
    GradeBand,
    MonthlyPremiumRow,
    PremiumBreakdown,
    RateTable,
    SalaryMonth,
    SuijiResult,
    TeijiResult,
    UncollectedPremium,
)
from social_insurance_engine.calculators.validation import collect_annual_warnings, validate_age_related_errors
from social_insurance_engine.config import Settings, get_settings

if TYPE_CHECKING:
    from social_insurance_engine.services.repository import PremiumRepository

logger = logging.getLogger(__name__)

MONTHS = range(1, 13)

# A revision taking effect in one of these months replaces that year's teiji
TEIJI_SUPERSEDED_BY_SUIJI_MONTHS = (7, 8, 9)


@dataclass
class StandardTimeline:
    """Standard monthly remuneration in force for each month of a year.

    ``base`` holds the seed and acquisition standards; teiji and suiji
    changes are layered on top in apply-month order.
    """

    year: int
    standards: dict[int, int] = field(default_factory=dict)
    base: dict[int, int] = field(default_factory=dict)
    acquisition: AcquisitionResult | None = None
    teiji: TeijiResult | None = None
    suiji: list[SuijiResult] = field(default_factory=list)
    suiji_candidates: list[SuijiResult] = field(default_factory=list)
    teiji_month: int | None = None
    suiji_months: set[int] = field(default_factory=set)
    suiji_changes: list[tuple[int, int]] = field(default_factory=list)

    def standard_for(self, month: int) -> int:
        return self.standards.get(month, 0)

    def set_base_from(self, month: int, standard: int) -> None:
        for m in MONTHS:
            if m >= month:
                self.base[m] = standard
        self.rebuild()

    def rebuild(self) -> None:
        """Recompute ``standards`` from the base and the active changes."""
        changes = list(self.suiji_changes)
        if self.teiji_month is not None and self.teiji is not None:
            changes.append((self.teiji_month, self.teiji.standard_monthly_remuneration))
        standards = dict(self.base)
        for apply_month, standard in sorted(changes, key=lambda change: change[0]):
            for m in MONTHS:
                if m >= apply_month:
                    standards[m] = standard
        self.standards = standards


def _seed_standard(employee: Employee, year: int) -> int:
    if employee.standard_monthly_remuneration:
        return employee.standard_monthly_remuneration
    join = employee.join_date
    if employee.has_cached_acquisition and join is not None and join.year < year:
        return employee.acquisition_standard or 0
    return 0


def build_standard_timeline(
    employee: Employee,
    year: int,
    salaries: Mapping[int, SalaryMonth],
    grade_table: Sequence[GradeBand] | None,
) -> StandardTimeline:
    """Derive the month-by-month standard for ``year``.

    Order of application:
    1) Seed: the employee's determined standard, else an acquisition
       stored in an earlier year
    2) Acquisition determination from the join month
    3) Teiji from September
    4) Eligible suiji revisions from their apply month, evaluated in
       change-month order against the timeline built so far

    Changes are layered by apply month, so a September teiji overrides
    a revision applying earlier in the year. A revision applying in
    July, August or September replaces the teiji altogether.
    """
    timeline = StandardTimeline(year=year)
    seed = _seed_standard(employee, year)
    timeline.base = {m: seed for m in MONTHS}
    timeline.rebuild()

    acquisition = determine_acquisition(employee, year, salaries, grade_table)
    timeline.acquisition = acquisition
    if acquisition is not None and acquisition.is_determined:
        timeline.set_base_from(employee.join_date.month, acquisition.standard_monthly_remuneration)

    teiji = calculate_teiji_kettei(
        employee.employee_id,
        salaries,
        grade_table,
        year,
        current_standard=timeline.standard_for(8) or None,
        employee=employee,
    )
    timeline.teiji = teiji
    if teiji.is_target and not teiji.is_indeterminate and teiji.grade > 0:
        timeline.teiji_month = teiji.apply_start_month
        timeline.rebuild()

    candidates: dict[int, SuijiResult] = {}
    for month in detect_fixed_wage_changes(salaries):
        current_grade = _current_grade(timeline, month, salaries, grade_table)
        result = calculate_suiji_kettei(
            employee.employee_id,
            month,
            salaries,
            grade_table,
            current_grade,
            year,
            join_date=employee.join_date,
        )
        candidates[month] = result
        _apply_suiji(timeline, result, grade_table)

    eligible = [r for r in candidates.values() if r.is_eligible]
    return_month = return_from_leave_month(employee)
    rehab_month = return_month[1] if return_month is not None and return_month[0] == year else 1
    rehab_grade = grade_for_standard(grade_table, timeline.standard_for(rehab_month))
    for result in check_rehab_suiji(employee, salaries, grade_table, rehab_grade, year):
        if result.change_month in candidates:
            continue
        candidates[result.change_month] = result
        eligible.append(result)
        _apply_suiji(timeline, result, grade_table)

    timeline.suiji = sorted(eligible, key=lambda r: r.change_month)
    timeline.suiji_candidates = sorted(candidates.values(), key=lambda r: r.change_month)
    return timeline


def _current_grade(
    timeline: StandardTimeline,
    month: int,
    salaries: Mapping[int, SalaryMonth],
    grade_table: Sequence[GradeBand] | None,
) -> int:
    """Grade in force at ``month``; without a standard, the prior month's pay grade."""
    grade = grade_for_standard(grade_table, timeline.standard_for(month))
    if grade:
        return grade
    previous = salaries.get(month - 1)
    if previous is None:
        return 0
    found = find_grade(grade_table, previous.total)
    return found.grade if found else 0


def _apply_suiji(timeline: StandardTimeline, result: SuijiResult, grade_table: Sequence[GradeBand] | None) -> None:
    if not result.is_eligible or result.apply_start_year != timeline.year:
        return
    band = band_for_rank(grade_table, result.new_grade)
    if band is None:
        return
    timeline.suiji_changes.append((result.apply_start_month, band.standard))
    timeline.suiji_months.add(result.apply_start_month)
    if timeline.teiji_month is not None and result.apply_start_month in TEIJI_SUPERSEDED_BY_SUIJI_MONTHS:
        logger.debug(
            "Teiji of %s in %s replaced by revision from month %s",
            result.employee_id,
            timeline.year,
            result.apply_start_month,
        )
        timeline.teiji.reasons.append(f"replaced by revision applying from month {result.apply_start_month}")
        timeline.teiji_month = None
    timeline.rebuild()


@dataclass
class EmployeeYearResult:
    """Premium rows and side results for one employee and year."""

    employee_id: str
    rows: list[MonthlyPremiumRow]
    timeline: StandardTimeline
    uncollected: list[UncollectedPremium] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


class PremiumEngine:
    """Main premium calculation engine.

    Calculation pipeline (stable order per employee):
    1) Build the standard remuneration timeline
    2) Calculate monthly premiums against the timeline standard
    3) Apply the stopping rules with the age of the month
    4) Build the monthly row and flag uncollectable employee shares
    5) Validate age-related figures
    Then bonuses are folded in and company totals are built.
    """

    def __init__(
        self,
        repository: PremiumRepository | None = None,
        settings: Settings | None = None,
    ):
        self.repository = repository
        self.settings = settings or get_settings()

    def calculate_employee_year(
        self,
        employee: Employee,
        year: int,
        grade_table: Sequence[GradeBand] | None,
        schedule: RateSchedule,
        salaries: Mapping[int, SalaryMonth],
    ) -> EmployeeYearResult:
        """Calculate twelve monthly rows for one employee."""
        timeline = build_standard_timeline(employee, year, salaries, grade_table)
        prefecture = employee.prefecture or self.settings.default_prefecture
        acquisition_notice = check_acquisition_notification(employee, timeline.acquisition)

        rows: list[MonthlyPremiumRow] = []
        uncollected: list[UncollectedPremium] = []
        age_cache: dict[int, int] = {}

        for month in MONTHS:
            salary = salaries.get(month)
            fixed = salary.fixed if salary is not None else 0
            variable = salary.variable if salary is not None else 0
            rates: RateTable | None = schedule.for_month(prefecture, year, month)

            monthly = calculate_monthly_premiums(
                employee,
                year,
                month,
                fixed,
                variable,
                grade_table,
                rates,
                standard_monthly_remuneration=timeline.standard_for(month) or None,
            )
            age = age_at_month(employee.birth_date, year, month)
            age_cache[month] = age
            stopped = apply_stopping_rules(employee, year, month, age, monthly.premiums)

            row = MonthlyPremiumRow(
                month=month,
                health_employee=stopped.health_employee,
                health_employer=stopped.health_employer,
                care_employee=stopped.care_employee,
                care_employer=stopped.care_employer,
                pension_employee=stopped.pension_employee,
                pension_employer=stopped.pension_employer,
                exempt=monthly.is_exempt,
                notes=monthly.notes,
                reasons=list(monthly.reasons),
                grade=monthly.grade,
                standard_monthly_remuneration=monthly.standard_monthly_remuneration,
                suiji_applied=month in timeline.suiji_months,
                teiji_applied=month == timeline.teiji_month,
                is_retired=stopped.is_retired,
                is_maternity_leave=stopped.is_maternity_leave,
                is_childcare_leave=stopped.is_childcare_leave,
                is_pension_stopped=stopped.is_pension_stopped,
                is_health_stopped=stopped.is_health_stopped,
            )

            acquisition = timeline.acquisition
            if acquisition is not None and is_join_month(employee, year, month):
                row.is_acquisition_month = True
                row.acquisition_grade = acquisition.grade
                row.acquisition_standard = acquisition.standard_monthly_remuneration
                row.acquisition_reason = "; ".join(acquisition.reasons) or None
                if acquisition_notice is not None:
                    row.shikaku_report_required = acquisition_notice.required
                    row.shikaku_report_deadline = acquisition_notice.submit_until
            rows.append(row)

            paid = salary.total if salary is not None else 0
            owed = row.premiums.total_employee
            if not row.exempt and owed > paid:
                uncollected.append(
                    UncollectedPremium(
                        employee_id=employee.employee_id,
                        year=year,
                        month=month,
                        amount=owed - paid,
                        reason=f"employee share {owed} exceeds pay {paid}",
                    )
                )

        errors = validate_age_related_errors(employee, rows, age_cache)
        return EmployeeYearResult(
            employee_id=employee.employee_id,
            rows=rows,
            timeline=timeline,
            uncollected=uncollected,
            errors=errors,
        )

    def calculate_monthly_totals(
        self,
        employees: Sequence[Employee],
        bonuses: Iterable[Bonus],
        year: int,
        grade_table: Sequence[GradeBand] | None,
        rate_tables: Iterable[RateTable] | RateSchedule,
        salaries_by_employee: Mapping[str, Mapping[int, SalaryMonth]],
    ) -> CalculationResult:
        """Calculate a company year from in-memory inputs.

        Failures are isolated per employee: an unexpected error is logged
        and recorded in ``error_messages`` and the run continues.
        """
        schedule = rate_tables if isinstance(rate_tables, RateSchedule) else RateSchedule(rate_tables)
        result = CalculationResult(year=year)
        calculated: list[Employee] = []

        for employee in employees:
            try:
                employee_result = self.calculate_employee_year(
                    employee,
                    year,
                    grade_table,
                    schedule,
                    salaries_by_employee.get(employee.employee_id, {}),
                )
            except Exception as e:
                logger.exception("Premium calculation failed for employee %s", employee.employee_id)
                result.error_messages[employee.employee_id] = [f"Unexpected error: {e}"]
                continue

            calculated.append(employee)
            result.monthly_premiums_by_employee[employee.employee_id] = employee_result.rows
            result.uncollected_premiums.extend(employee_result.uncollected)
            if employee_result.timeline.suiji:
                result.suiji_results[employee.employee_id] = employee_result.timeline.suiji
            if employee_result.errors:
                result.error_messages[employee.employee_id] = employee_result.errors

        year_bonuses = [b for b in bonuses if b.year == year]
        employees_by_id = {e.employee_id: e for e in calculated}
        bonus_premiums_by_month: dict[int, dict[str, PremiumBreakdown]] = {}
        add_bonus_to_monthly_totals(
            year_bonuses,
            employees_by_id,
            year,
            result.monthly_premiums_by_employee,
            bonus_premiums_by_month,
        )
        for bonus in year_bonuses:
            result.bonus_by_month.setdefault(bonus.month, []).append(bonus)
        result.bonus_annual_totals = get_annual_premiums(
            b for b in year_bonuses if b.employee_id in employees_by_id
        )

        result.monthly_totals = aggregate_monthly_totals(calculated, year, result.monthly_premiums_by_employee)
        result.company_monthly_totals = build_company_monthly_totals(result.monthly_totals)
        result.annual_totals = calculate_annual_totals(result.company_monthly_totals)
        result.warnings = collect_annual_warnings(
            calculated,
            year,
            result.monthly_premiums_by_employee,
            salaries_by_employee,
            (b for b in year_bonuses if b.employee_id in employees_by_id),
        )
        return result

    async def calculate_year(self, tenant_id: UUID, year: int) -> CalculationResult:
        """Load a tenant's inputs through the repository and calculate the year."""
        if self.repository is None:
            raise ValueError("A repository is required to calculate from storage")

        repository = self.repository
        employees = await repository.list_employees(tenant_id)
        grade_table = await repository.get_grade_table(tenant_id, year)
        schedule = RateSchedule(await repository.list_rate_tables(tenant_id))
        determiner = AcquisitionDeterminer(repository)
        semaphore = asyncio.Semaphore(self.settings.max_concurrency)

        async def load(employee: Employee) -> tuple[dict[int, SalaryMonth], list[Bonus]]:
            async with semaphore:
                salaries = await repository.list_salary_months(tenant_id, employee.employee_id, year)
                bonuses = await repository.list_bonuses(tenant_id, employee.employee_id, year)
            return salaries, bonuses

        loaded = await asyncio.gather(*(load(e) for e in employees))

        salaries_by_employee: dict[str, dict[int, SalaryMonth]] = {}
        all_bonuses: list[Bonus] = []
        for employee, (salaries, bonuses) in zip(employees, loaded):
            salaries_by_employee[employee.employee_id] = salaries
            all_bonuses.extend(bonuses)
            await determiner.calculate_shikaku_shutoku(tenant_id, employee, year, salaries, grade_table)

        logger.info("Calculating %s employees for tenant %s, year %s", len(employees), tenant_id, year)
        return self.calculate_monthly_totals(
            employees,
            all_bonuses,
            year,
            grade_table,
            schedule,
            salaries_by_employee,
        )

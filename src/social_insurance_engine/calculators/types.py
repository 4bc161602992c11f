"""Type definitions for the premium calculation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum


class WorkHoursCategory(str, Enum):
    """Weekly working-hours bands recorded on the employee."""

    THIRTY_OR_MORE = "30hours-or-more"
    TWENTY_TO_THIRTY = "20-30hours"
    LESS_THAN_TWENTY = "less-than-20hours"


class ExpectedEmployment(str, Enum):
    """Expected employment period."""

    WITHIN_TWO_MONTHS = "within-2months"
    OVER_TWO_MONTHS = "over-2months"


class WorkCategory(str, Enum):
    """Insurance work category derived from the eligibility inputs."""

    FULL_TIME = "full_time"
    SHORT_TIME = "short_time"
    NON_INSURED = "non_insured"


class CareInsuranceType(str, Enum):
    """Long-term care insurance classification."""

    NONE = "none"
    TYPE2 = "type2"  # 40-64, collected with health insurance
    TYPE1 = "type1"  # 65+, collected by the municipality


class AgeCategory(str, Enum):
    """Most advanced age milestone reached."""

    UNDER_40 = "under_40"
    CARE_TYPE2 = "care_type2"
    CARE_TYPE1 = "care_type1"
    PENSION_STOPPED = "pension_stopped"
    HEALTH_STOPPED = "health_stopped"


class SalaryItemType(str, Enum):
    """Salary item classification."""

    FIXED = "fixed"
    VARIABLE = "variable"
    DEDUCTION = "deduction"


class DeterminationReason(str, Enum):
    """Why a standard remuneration was determined."""

    ACQUISITION = "acquisition"
    TEIJI = "teiji"
    SUIJI = "suiji"


class InsuranceStatus(str, Enum):
    """Per-insurance enrolment status for one month."""

    JOINED = "joined"
    LOST = "lost"
    EXEMPT_MATERNITY = "exempt_maternity"
    EXEMPT_CHILDCARE = "exempt_childcare"
    TYPE1 = "type1"  # care only


class NotificationType(str, Enum):
    """Filing types decided by the notification engine."""

    TEIJI = "teiji"
    SUIJI = "suiji"
    BONUS = "bonus"
    ACQUISITION = "acquisition"


class ReasonKind(str, Enum):
    """Tag carried by every premium reason."""

    MATERNITY = "maternity"
    CHILDCARE = "childcare"
    NON_INSURED = "non_insured"
    ZERO_SALARY = "zero_salary"
    NO_MATCHING_GRADE = "no_matching_grade"
    NO_RATES = "no_rates"
    NOT_LAST_DAY_ELIGIBLE = "not_last_day_eligible"
    BEFORE_ACQUISITION = "before_acquisition"
    ACQUISITION_MONTH = "acquisition_month"
    STANDARD_SOURCE = "standard_source"
    CARE_START = "care_start"
    CARE_TYPE1 = "care_type1"
    AGE_STOP_PENSION = "age_stop_pension"
    AGE_STOP_HEALTH = "age_stop_health"
    RETIRED = "retired"


EXEMPT_REASON_KINDS = frozenset({ReasonKind.MATERNITY, ReasonKind.CHILDCARE})


# ============================================================================
# Input records
# ============================================================================


@dataclass
class Employee:
    """Employee record as seen by the calculation pipeline."""

    employee_id: str
    name: str = ""
    birth_date: date | None = None
    join_date: date | None = None
    retire_date: date | None = None
    prefecture: str | None = None

    # Leave windows
    maternity_leave_start: date | None = None
    maternity_leave_end: date | None = None
    maternity_leave_end_expected: date | None = None
    childcare_leave_start: date | None = None
    childcare_leave_end: date | None = None
    childcare_leave_end_expected: date | None = None
    leave_of_absence_start: date | None = None
    leave_of_absence_end: date | None = None
    return_from_leave_date: date | None = None
    childcare_notification_submitted: bool | None = None
    childcare_living_together: bool | None = None

    # Eligibility inputs
    weekly_work_hours_category: WorkHoursCategory | None = WorkHoursCategory.THIRTY_OR_MORE
    monthly_wage: int | None = None
    expected_employment_months: ExpectedEmployment | None = None
    is_student: bool = False
    is_short_time: bool = False

    # Determined standard (teiji/suiji) known before this run
    standard_monthly_remuneration: int | None = None

    # Acquisition cache (write-once)
    acquisition_grade: int | None = None
    acquisition_standard: int | None = None
    acquisition_year: int | None = None
    acquisition_month: int | None = None

    @property
    def has_cached_acquisition(self) -> bool:
        return bool(self.acquisition_grade) and self.acquisition_grade > 0


@dataclass
class SalaryItem:
    """Salary item master entry."""

    item_id: str
    name: str
    item_type: SalaryItemType


@dataclass
class SalaryItemEntry:
    """One itemized amount on a salary month."""

    item_id: str
    amount: int


@dataclass
class SalaryMonth:
    """Salary figures for one employee and month.

    ``total`` is always derived from ``fixed`` and ``variable``; deductions
    are tracked but never reduce the remuneration used for premiums.
    """

    employee_id: str
    year: int
    month: int
    fixed: int = 0
    variable: int = 0
    deduction: int = 0
    items: list[SalaryItemEntry] = field(default_factory=list)
    working_days: int | None = None

    @property
    def total(self) -> int:
        return self.fixed + self.variable

    @classmethod
    def from_items(
        cls,
        employee_id: str,
        year: int,
        month: int,
        items: list[SalaryItemEntry],
        master: dict[str, SalaryItem],
        working_days: int | None = None,
    ) -> SalaryMonth:
        """Build a salary month by classifying items through the master."""
        sums = {item_type: 0 for item_type in SalaryItemType}
        for entry in items:
            item = master.get(entry.item_id)
            if item is None:
                continue
            sums[item.item_type] += max(entry.amount, 0)

        return cls(
            employee_id=employee_id,
            year=year,
            month=month,
            fixed=sums[SalaryItemType.FIXED],
            variable=sums[SalaryItemType.VARIABLE],
            deduction=sums[SalaryItemType.DEDUCTION],
            items=list(items),
            working_days=working_days,
        )


@dataclass(frozen=True)
class GradeBand:
    """One band of a standard remuneration grade table."""

    rank: int
    lower: int
    upper: int
    standard: int


@dataclass(frozen=True)
class GradeResult:
    """Resolved grade for an amount."""

    grade: int
    standard: int


@dataclass
class RateTable:
    """Premium rates for one prefecture from an effective month onward."""

    prefecture: str
    effective_year: int
    effective_month: int
    health_employee: Decimal
    health_employer: Decimal
    care_employee: Decimal
    care_employer: Decimal
    pension_employee: Decimal
    pension_employer: Decimal

    @property
    def effective_key(self) -> int:
        return self.effective_year * 12 + self.effective_month - 1


# ============================================================================
# Premium figures and reasons
# ============================================================================


@dataclass
class PremiumBreakdown:
    """The six premium figures in yen."""

    health_employee: int = 0
    health_employer: int = 0
    care_employee: int = 0
    care_employer: int = 0
    pension_employee: int = 0
    pension_employer: int = 0

    @property
    def total_employee(self) -> int:
        return self.health_employee + self.care_employee + self.pension_employee

    @property
    def total_employer(self) -> int:
        return self.health_employer + self.care_employer + self.pension_employer

    @property
    def total(self) -> int:
        return self.total_employee + self.total_employer


@dataclass(frozen=True)
class PremiumReason:
    """A tagged explanation of a rule that fired."""

    kind: ReasonKind
    message: str


@dataclass
class StoppingResult(PremiumBreakdown):
    """Premium figures after the stopping rules, with the flags that fired."""

    is_retired: bool = False
    is_maternity_leave: bool = False
    is_childcare_leave: bool = False
    is_pension_stopped: bool = False
    is_health_stopped: bool = False


@dataclass
class MonthlyPremiumResult:
    """Output of the monthly premium calculator."""

    premiums: PremiumBreakdown
    grade: int = 0
    standard_monthly_remuneration: int = 0
    reasons: list[PremiumReason] = field(default_factory=list)

    @property
    def is_exempt(self) -> bool:
        return any(r.kind in EXEMPT_REASON_KINDS for r in self.reasons)

    def has_reason(self, kind: ReasonKind) -> bool:
        return any(r.kind == kind for r in self.reasons)

    @property
    def notes(self) -> list[str]:
        return [r.message for r in self.reasons]


# ============================================================================
# Eligibility
# ============================================================================


@dataclass(frozen=True)
class AgeFlags:
    """Age milestone flags for a month."""

    is_care2: bool = False
    is_care1: bool = False
    is_no_pension: bool = False
    is_no_health: bool = False


@dataclass
class EligibilityResult:
    """Per-insurance eligibility for an employee on a reference date."""

    health_eligible: bool
    pension_eligible: bool
    care_eligible: bool
    age: int
    age_category: AgeCategory
    age_flags: AgeFlags
    work_category: WorkCategory | None
    reasons: list[str] = field(default_factory=list)


# ============================================================================
# Determinations
# ============================================================================


@dataclass
class TeijiResult:
    """Periodic (April-June) standard remuneration determination."""

    employee_id: str
    year: int
    average_salary: int
    grade: int
    standard_monthly_remuneration: int
    used_months: list[int] = field(default_factory=list)
    excluded_months: list[int] = field(default_factory=list)
    apply_start_year: int = 0
    apply_start_month: int = 9
    is_indeterminate: bool = False
    is_target: bool = True
    reasons: list[str] = field(default_factory=list)


@dataclass
class SuijiResult:
    """Ad-hoc revision candidate for one fixed-wage change month."""

    employee_id: str
    year: int
    change_month: int
    average_salary: int
    current_grade: int
    new_grade: int
    diff: int
    is_eligible: bool
    apply_start_year: int = 0
    apply_start_month: int = 0
    is_indeterminate: bool = False
    reasons: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class AcquisitionInfo:
    """Acquisition determination persisted on the employee."""

    grade: int
    standard: int
    year: int
    month: int


@dataclass
class AcquisitionResult:
    """Acquisition-time (hire) determination."""

    employee_id: str
    year: int
    base_salary: int
    grade: int
    standard_monthly_remuneration: int
    used_month: int
    from_cache: bool = False
    reasons: list[str] = field(default_factory=list)

    @property
    def is_determined(self) -> bool:
        return self.grade > 0


# ============================================================================
# Bonuses
# ============================================================================


@dataclass
class Bonus:
    """A bonus payment with its premium shares and flags."""

    employee_id: str
    year: int
    month: int
    pay_date: date
    amount: int
    health_employee: int = 0
    health_employer: int = 0
    care_employee: int = 0
    care_employer: int = 0
    pension_employee: int = 0
    pension_employer: int = 0
    standard_bonus_amount: int = 0
    capped_health: int = 0
    capped_pension: int = 0
    is_exempted: bool = False
    exempt_reason: str | None = None
    is_salary_instead_of_bonus: bool = False
    is_retired_no_last_day: bool = False
    is_over_age_70: bool = False
    is_over_age_75: bool = False
    require_report: bool = False
    report_deadline: date | None = None
    reasons: list[str] = field(default_factory=list)

    @property
    def premiums(self) -> PremiumBreakdown:
        return PremiumBreakdown(
            health_employee=self.health_employee,
            health_employer=self.health_employer,
            care_employee=self.care_employee,
            care_employer=self.care_employer,
            pension_employee=self.pension_employee,
            pension_employer=self.pension_employer,
        )

    @property
    def counts_toward_totals(self) -> bool:
        return not (self.is_exempted or self.is_salary_instead_of_bonus)


# ============================================================================
# Aggregates
# ============================================================================


@dataclass
class MonthlyPremiumRow:
    """One employee's premiums for one month."""

    month: int
    health_employee: int = 0
    health_employer: int = 0
    care_employee: int = 0
    care_employer: int = 0
    pension_employee: int = 0
    pension_employer: int = 0
    exempt: bool = False
    notes: list[str] = field(default_factory=list)
    reasons: list[PremiumReason] = field(default_factory=list)
    grade: int = 0
    standard_monthly_remuneration: int = 0

    # Acquisition annotations
    is_acquisition_month: bool = False
    acquisition_grade: int | None = None
    acquisition_standard: int | None = None
    acquisition_reason: str | None = None
    shikaku_report_required: bool = False
    shikaku_report_deadline: date | None = None

    # Suiji / teiji annotations
    suiji_applied: bool = False
    teiji_applied: bool = False

    # Stopping flags
    is_retired: bool = False
    is_maternity_leave: bool = False
    is_childcare_leave: bool = False
    is_pension_stopped: bool = False
    is_health_stopped: bool = False

    @property
    def premiums(self) -> PremiumBreakdown:
        return PremiumBreakdown(
            health_employee=self.health_employee,
            health_employer=self.health_employer,
            care_employee=self.care_employee,
            care_employer=self.care_employer,
            pension_employee=self.pension_employee,
            pension_employer=self.pension_employer,
        )

    def add(self, delta: PremiumBreakdown) -> None:
        """Fold premium figures (e.g. a bonus) into this row."""
        self.health_employee += delta.health_employee
        self.health_employer += delta.health_employer
        self.care_employee += delta.care_employee
        self.care_employer += delta.care_employer
        self.pension_employee += delta.pension_employee
        self.pension_employer += delta.pension_employer


@dataclass
class MonthlyTotal:
    """Employee + employer sums for one month across employees."""

    health: int = 0
    care: int = 0
    pension: int = 0
    total: int = 0
    is_pension_stopped: bool = False
    is_health_stopped: bool = False
    is_maternity_leave: bool = False
    is_childcare_leave: bool = False
    is_retired: bool = False


@dataclass
class CompanyMonthlyTotal:
    """Company-wide totals for one month."""

    month: int
    health_total: int = 0
    care_total: int = 0
    pension_total: int = 0
    total: int = 0


@dataclass
class BonusAnnualTotal:
    """Annual bonus premium totals."""

    health_employee: int = 0
    health_employer: int = 0
    care_employee: int = 0
    care_employer: int = 0
    pension_employee: int = 0
    pension_employer: int = 0
    total_employee: int = 0
    total_employer: int = 0
    total: int = 0
    exempt_reasons: list[str] = field(default_factory=list)


@dataclass
class AnnualTotals:
    """Annual company totals."""

    health: int = 0
    care: int = 0
    pension: int = 0
    total: int = 0


@dataclass
class UncollectedPremium:
    """Employee share owed in a month with no salary to withhold from."""

    employee_id: str
    year: int
    month: int
    amount: int
    reason: str
    resolved: bool = False


# ============================================================================
# Notifications, history, validation
# ============================================================================


@dataclass
class NotificationDecision:
    """Whether a filing is required and by when."""

    type: NotificationType
    required: bool
    submit_until: date | None = None
    reasons: list[str] = field(default_factory=list)


@dataclass
class StandardRemunerationHistoryEntry:
    """One determination in the standard remuneration history."""

    employee_id: str
    apply_start_year: int
    apply_start_month: int
    grade: int
    standard_monthly_remuneration: int
    determination_reason: DeterminationReason
    memo: str | None = None

    @property
    def unique_key(self) -> tuple[str, int, int, DeterminationReason]:
        return (
            self.employee_id,
            self.apply_start_year,
            self.apply_start_month,
            self.determination_reason,
        )

    @property
    def apply_key(self) -> int:
        return self.apply_start_year * 12 + self.apply_start_month - 1


@dataclass
class InsuranceStatusEntry:
    """Insurance status of an employee for one month."""

    employee_id: str
    year: int
    month: int
    health_status: InsuranceStatus
    care_status: InsuranceStatus
    pension_status: InsuranceStatus
    age_milestone: int | None = None


@dataclass
class DateValidationResult:
    """Date consistency findings for one employee."""

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0


@dataclass
class CalculationResult:
    """Result of calculating a year for a set of employees."""

    year: int
    monthly_premiums_by_employee: dict[str, list[MonthlyPremiumRow]] = field(default_factory=dict)
    monthly_totals: dict[int, MonthlyTotal] = field(default_factory=dict)
    company_monthly_totals: list[CompanyMonthlyTotal] = field(default_factory=list)
    bonus_annual_totals: BonusAnnualTotal = field(default_factory=BonusAnnualTotal)
    bonus_by_month: dict[int, list[Bonus]] = field(default_factory=dict)
    annual_totals: AnnualTotals = field(default_factory=AnnualTotals)
    error_messages: dict[str, list[str]] = field(default_factory=dict)
    uncollected_premiums: list[UncollectedPremium] = field(default_factory=list)
    suiji_results: dict[str, list[SuijiResult]] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(self.error_messages.values())

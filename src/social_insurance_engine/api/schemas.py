"""Pydantic schemas for API request/response models."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from social_insurance_engine.calculators.types import (
    Employee,
    ExpectedEmployment,
    NotificationType,
    RateTable,
    ReasonKind,
    WorkHoursCategory,
)


# ============================================================================
# Request schemas
# ============================================================================


class EmployeeInput(BaseModel):
    """Employee attributes needed for a stateless calculation."""

    employee_id: str
    name: str = ""
    birth_date: date | None = None
    join_date: date | None = None
    retire_date: date | None = None
    prefecture: str | None = None
    maternity_leave_start: date | None = None
    maternity_leave_end: date | None = None
    childcare_leave_start: date | None = None
    childcare_leave_end: date | None = None
    childcare_notification_submitted: bool | None = None
    childcare_living_together: bool | None = None
    weekly_work_hours_category: WorkHoursCategory | None = WorkHoursCategory.THIRTY_OR_MORE
    monthly_wage: int | None = None
    expected_employment_months: ExpectedEmployment | None = None
    is_student: bool = False
    is_short_time: bool = False
    standard_monthly_remuneration: int | None = Field(default=None, ge=0)

    def to_domain(self) -> Employee:
        return Employee(**self.model_dump())


class RateInput(BaseModel):
    """Premium rates as fractions of the standard amount."""

    prefecture: str = "tokyo"
    effective_year: int = Field(ge=1900, le=2200)
    effective_month: int = Field(default=4, ge=1, le=12)
    health_employee: Decimal = Field(ge=0)
    health_employer: Decimal = Field(ge=0)
    care_employee: Decimal = Field(default=Decimal("0"), ge=0)
    care_employer: Decimal = Field(default=Decimal("0"), ge=0)
    pension_employee: Decimal = Field(ge=0)
    pension_employer: Decimal = Field(ge=0)

    def to_domain(self) -> RateTable:
        return RateTable(**self.model_dump())


class MonthlyPremiumRequest(BaseModel):
    """Stateless monthly premium calculation request."""

    employee: EmployeeInput
    year: int = Field(ge=1900, le=2200)
    month: int = Field(ge=1, le=12)
    fixed_salary: int = 0
    variable_salary: int = 0
    standard_monthly_remuneration: int | None = Field(default=None, ge=0)
    rates: RateInput | None = None


# ============================================================================
# Premium schemas
# ============================================================================


class PremiumBreakdownResponse(BaseModel):
    """The six premium figures in yen."""

    model_config = ConfigDict(from_attributes=True)

    health_employee: int
    health_employer: int
    care_employee: int
    care_employer: int
    pension_employee: int
    pension_employer: int
    total_employee: int
    total_employer: int
    total: int


class PremiumReasonResponse(BaseModel):
    """A tagged reason explaining a premium figure."""

    model_config = ConfigDict(from_attributes=True)

    kind: ReasonKind
    message: str


class MonthlyPremiumResponse(BaseModel):
    """Monthly premium calculation result."""

    model_config = ConfigDict(from_attributes=True)

    premiums: PremiumBreakdownResponse
    grade: int
    standard_monthly_remuneration: int
    is_exempt: bool
    reasons: list[PremiumReasonResponse]


# ============================================================================
# Summary schemas
# ============================================================================


class CompanyMonthlyTotalResponse(BaseModel):
    """Company totals for one month."""

    model_config = ConfigDict(from_attributes=True)

    month: int
    health_total: int
    care_total: int
    pension_total: int
    total: int


class AnnualTotalsResponse(BaseModel):
    """Company totals for the year."""

    model_config = ConfigDict(from_attributes=True)

    health: int
    care: int
    pension: int
    total: int


class BonusAnnualTotalResponse(BaseModel):
    """Bonus premium totals for the year."""

    model_config = ConfigDict(from_attributes=True)

    total_employee: int
    total_employer: int
    total: int
    exempt_reasons: list[str]


class UncollectedPremiumResponse(BaseModel):
    """An employee share that exceeds the month's pay."""

    model_config = ConfigDict(from_attributes=True)

    employee_id: str
    year: int
    month: int
    amount: int
    reason: str


class SummaryResponse(BaseModel):
    """Company calculation for a year."""

    model_config = ConfigDict(from_attributes=True)

    year: int
    company_monthly_totals: list[CompanyMonthlyTotalResponse]
    annual_totals: AnnualTotalsResponse
    bonus_annual_totals: BonusAnnualTotalResponse
    uncollected_premiums: list[UncollectedPremiumResponse]
    error_messages: dict[str, list[str]]
    warnings: list[str]


# ============================================================================
# Determination schemas
# ============================================================================


class NotificationResponse(BaseModel):
    """Whether a filing is required and by when."""

    model_config = ConfigDict(from_attributes=True)

    type: NotificationType
    required: bool
    submit_until: date | None = None
    reasons: list[str] = []


class TeijiResponse(BaseModel):
    """Periodic determination with its notification decision."""

    model_config = ConfigDict(from_attributes=True)

    employee_id: str
    year: int
    average_salary: int
    grade: int
    standard_monthly_remuneration: int
    used_months: list[int]
    excluded_months: list[int]
    apply_start_year: int
    apply_start_month: int
    is_indeterminate: bool
    is_target: bool
    reasons: list[str]
    notification: NotificationResponse


class SuijiResponse(BaseModel):
    """A revision candidate with its notification decision."""

    model_config = ConfigDict(from_attributes=True)

    change_month: int
    average_salary: int
    current_grade: int
    new_grade: int
    diff: int
    is_eligible: bool
    apply_start_year: int
    apply_start_month: int
    is_indeterminate: bool
    reasons: list[str]
    notification: NotificationResponse


class SuijiListResponse(BaseModel):
    """All revision candidates of an employee for a year."""

    employee_id: str
    year: int
    items: list[SuijiResponse]


# ============================================================================
# Error schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
    code: str | None = None

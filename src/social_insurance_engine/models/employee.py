"""Employee model."""

from __future__ import annotations

from datetime import date
from uuid import UUID, uuid4

from sqlalchemy import Boolean, CheckConstraint, Date, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from social_insurance_engine.calculators.types import Employee, ExpectedEmployment, WorkHoursCategory
from social_insurance_engine.models.base import Base, TenantOwnedMixin, TimestampMixin


class EmployeeRecord(Base, TenantOwnedMixin, TimestampMixin):
    """Employee record with lifecycle dates and the acquisition cache."""

    __tablename__ = "employee"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_id: Mapped[str] = mapped_column(String, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False, default="")
    birth_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    join_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    retire_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    prefecture: Mapped[str | None] = mapped_column(String, nullable=True)

    maternity_leave_start: Mapped[date | None] = mapped_column(Date, nullable=True)
    maternity_leave_end: Mapped[date | None] = mapped_column(Date, nullable=True)
    maternity_leave_end_expected: Mapped[date | None] = mapped_column(Date, nullable=True)
    childcare_leave_start: Mapped[date | None] = mapped_column(Date, nullable=True)
    childcare_leave_end: Mapped[date | None] = mapped_column(Date, nullable=True)
    childcare_leave_end_expected: Mapped[date | None] = mapped_column(Date, nullable=True)
    leave_of_absence_start: Mapped[date | None] = mapped_column(Date, nullable=True)
    leave_of_absence_end: Mapped[date | None] = mapped_column(Date, nullable=True)
    return_from_leave_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    childcare_notification_submitted: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    childcare_living_together: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    weekly_work_hours_category: Mapped[str | None] = mapped_column(
        String, nullable=True, default=WorkHoursCategory.THIRTY_OR_MORE.value
    )
    monthly_wage: Mapped[int | None] = mapped_column(Integer, nullable=True)
    expected_employment_months: Mapped[str | None] = mapped_column(String, nullable=True)
    is_student: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_short_time: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    standard_monthly_remuneration: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Write-once acquisition cache
    acquisition_grade: Mapped[int | None] = mapped_column(Integer, nullable=True)
    acquisition_standard: Mapped[int | None] = mapped_column(Integer, nullable=True)
    acquisition_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    acquisition_month: Mapped[int | None] = mapped_column(Integer, nullable=True)

    __table_args__ = (
        UniqueConstraint("tenant_id", "employee_id", name="employee_tenant_code_unique"),
        CheckConstraint(
            "weekly_work_hours_category IS NULL OR weekly_work_hours_category IN "
            "('30hours-or-more', '20-30hours', 'less-than-20hours')",
            name="employee_work_hours_check",
        ),
        CheckConstraint(
            "expected_employment_months IS NULL OR expected_employment_months IN "
            "('within-2months', 'over-2months')",
            name="employee_expected_employment_check",
        ),
    )

    def to_domain(self) -> Employee:
        """Convert to the calculation-side employee."""
        return Employee(
            employee_id=self.employee_id,
            name=self.name,
            birth_date=self.birth_date,
            join_date=self.join_date,
            retire_date=self.retire_date,
            prefecture=self.prefecture,
            maternity_leave_start=self.maternity_leave_start,
            maternity_leave_end=self.maternity_leave_end,
            maternity_leave_end_expected=self.maternity_leave_end_expected,
            childcare_leave_start=self.childcare_leave_start,
            childcare_leave_end=self.childcare_leave_end,
            childcare_leave_end_expected=self.childcare_leave_end_expected,
            leave_of_absence_start=self.leave_of_absence_start,
            leave_of_absence_end=self.leave_of_absence_end,
            return_from_leave_date=self.return_from_leave_date,
            childcare_notification_submitted=self.childcare_notification_submitted,
            childcare_living_together=self.childcare_living_together,
            weekly_work_hours_category=(
                WorkHoursCategory(self.weekly_work_hours_category) if self.weekly_work_hours_category else None
            ),
            monthly_wage=self.monthly_wage,
            expected_employment_months=(
                ExpectedEmployment(self.expected_employment_months) if self.expected_employment_months else None
            ),
            is_student=self.is_student,
            is_short_time=self.is_short_time,
            standard_monthly_remuneration=self.standard_monthly_remuneration,
            acquisition_grade=self.acquisition_grade,
            acquisition_standard=self.acquisition_standard,
            acquisition_year=self.acquisition_year,
            acquisition_month=self.acquisition_month,
        )

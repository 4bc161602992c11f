"""Monthly salary and bonus models."""

from __future__ import annotations

from datetime import date
from uuid import UUID, uuid4

from sqlalchemy import Boolean, CheckConstraint, Date, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, validates

from social_insurance_engine.calculators.types import Bonus, SalaryMonth
from social_insurance_engine.models.base import Base, TenantOwnedMixin, TimestampMixin


class SalaryMonthRecord(Base, TenantOwnedMixin, TimestampMixin):
    """Salary figures for one employee and month.

    ``total`` is derived from fixed + variable whenever either is set.
    """

    __tablename__ = "salary_month"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_id: Mapped[str] = mapped_column(String, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    fixed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    variable: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    deduction: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    working_days: Mapped[int | None] = mapped_column(Integer, nullable=True)

    __table_args__ = (
        UniqueConstraint("tenant_id", "employee_id", "year", "month", name="salary_month_unique"),
        CheckConstraint("month BETWEEN 1 AND 12", name="salary_month_range"),
    )

    @validates("fixed", "variable")
    def _recompute_total(self, key: str, value: int) -> int:
        value = value or 0
        other = self.variable if key == "fixed" else self.fixed
        self.total = value + (other or 0)
        return value

    def to_domain(self) -> SalaryMonth:
        return SalaryMonth(
            employee_id=self.employee_id,
            year=self.year,
            month=self.month,
            fixed=self.fixed,
            variable=self.variable,
            deduction=self.deduction,
            working_days=self.working_days,
        )


class BonusRecord(Base, TenantOwnedMixin, TimestampMixin):
    """A calculated bonus payment."""

    __tablename__ = "bonus"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_id: Mapped[str] = mapped_column(String, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    pay_date: Mapped[date] = mapped_column(Date, nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    health_employee: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    health_employer: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    care_employee: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    care_employer: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    pension_employee: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    pension_employer: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    standard_bonus_amount: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    capped_health: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    capped_pension: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_exempted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    exempt_reason: Mapped[str | None] = mapped_column(String, nullable=True)
    is_salary_instead_of_bonus: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_retired_no_last_day: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_over_age_70: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_over_age_75: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    require_report: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    report_deadline: Mapped[date | None] = mapped_column(Date, nullable=True)

    __table_args__ = (
        CheckConstraint("month BETWEEN 1 AND 12", name="bonus_month_range"),
        CheckConstraint("amount >= 0", name="bonus_amount_non_negative"),
    )

    @classmethod
    def from_domain(cls, tenant_id: UUID, bonus: Bonus) -> BonusRecord:
        return cls(
            tenant_id=tenant_id,
            employee_id=bonus.employee_id,
            year=bonus.year,
            month=bonus.month,
            pay_date=bonus.pay_date,
            amount=bonus.amount,
            health_employee=bonus.health_employee,
            health_employer=bonus.health_employer,
            care_employee=bonus.care_employee,
            care_employer=bonus.care_employer,
            pension_employee=bonus.pension_employee,
            pension_employer=bonus.pension_employer,
            standard_bonus_amount=bonus.standard_bonus_amount,
            capped_health=bonus.capped_health,
            capped_pension=bonus.capped_pension,
            is_exempted=bonus.is_exempted,
            exempt_reason=bonus.exempt_reason,
            is_salary_instead_of_bonus=bonus.is_salary_instead_of_bonus,
            is_retired_no_last_day=bonus.is_retired_no_last_day,
            is_over_age_70=bonus.is_over_age_70,
            is_over_age_75=bonus.is_over_age_75,
            require_report=bonus.require_report,
            report_deadline=bonus.report_deadline,
        )

    def to_domain(self) -> Bonus:
        return Bonus(
            employee_id=self.employee_id,
            year=self.year,
            month=self.month,
            pay_date=self.pay_date,
            amount=self.amount,
            health_employee=self.health_employee,
            health_employer=self.health_employer,
            care_employee=self.care_employee,
            care_employer=self.care_employer,
            pension_employee=self.pension_employee,
            pension_employer=self.pension_employer,
            standard_bonus_amount=self.standard_bonus_amount,
            capped_health=self.capped_health,
            capped_pension=self.capped_pension,
            is_exempted=self.is_exempted,
            exempt_reason=self.exempt_reason,
            is_salary_instead_of_bonus=self.is_salary_instead_of_bonus,
            is_retired_no_last_day=self.is_retired_no_last_day,
            is_over_age_70=self.is_over_age_70,
            is_over_age_75=self.is_over_age_75,
            require_report=self.require_report,
            report_deadline=self.report_deadline,
        )

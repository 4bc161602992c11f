"""Determination and insurance status history."""

from __future__ import annotations

from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from social_insurance_engine.calculators.types import (
    DeterminationReason,
    InsuranceStatus,
    InsuranceStatusEntry,
    StandardRemunerationHistoryEntry,
)
from social_insurance_engine.models.base import Base, TenantOwnedMixin, TimestampMixin


class StandardRemunerationHistoryRecord(Base, TenantOwnedMixin, TimestampMixin):
    """A stored determination of standard monthly remuneration."""

    __tablename__ = "standard_remuneration_history"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_id: Mapped[str] = mapped_column(String, nullable=False)
    apply_start_year: Mapped[int] = mapped_column(Integer, nullable=False)
    apply_start_month: Mapped[int] = mapped_column(Integer, nullable=False)
    grade: Mapped[int] = mapped_column(Integer, nullable=False)
    standard_monthly_remuneration: Mapped[int] = mapped_column(Integer, nullable=False)
    determination_reason: Mapped[str] = mapped_column(String, nullable=False)
    memo: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "tenant_id",
            "employee_id",
            "apply_start_year",
            "apply_start_month",
            "determination_reason",
            name="standard_remuneration_history_unique",
        ),
        CheckConstraint(
            "determination_reason IN ('acquisition', 'teiji', 'suiji')",
            name="standard_remuneration_history_reason_check",
        ),
    )

    def to_domain(self) -> StandardRemunerationHistoryEntry:
        return StandardRemunerationHistoryEntry(
            employee_id=self.employee_id,
            apply_start_year=self.apply_start_year,
            apply_start_month=self.apply_start_month,
            grade=self.grade,
            standard_monthly_remuneration=self.standard_monthly_remuneration,
            determination_reason=DeterminationReason(self.determination_reason),
            memo=self.memo,
        )


class InsuranceStatusHistoryRecord(Base, TenantOwnedMixin, TimestampMixin):
    """Per-month health, care and pension status of an employee."""

    __tablename__ = "insurance_status_history"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_id: Mapped[str] = mapped_column(String, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    health_status: Mapped[str] = mapped_column(String, nullable=False)
    care_status: Mapped[str] = mapped_column(String, nullable=False)
    pension_status: Mapped[str] = mapped_column(String, nullable=False)
    age_milestone: Mapped[int | None] = mapped_column(Integer, nullable=True)

    __table_args__ = (
        UniqueConstraint("tenant_id", "employee_id", "year", "month", name="insurance_status_history_unique"),
        CheckConstraint("month BETWEEN 1 AND 12", name="insurance_status_history_month_range"),
    )

    def to_domain(self) -> InsuranceStatusEntry:
        return InsuranceStatusEntry(
            employee_id=self.employee_id,
            year=self.year,
            month=self.month,
            health_status=InsuranceStatus(self.health_status),
            care_status=InsuranceStatus(self.care_status),
            pension_status=InsuranceStatus(self.pension_status),
            age_milestone=self.age_milestone,
        )

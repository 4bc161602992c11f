"""Reference data: standard remuneration grades and premium rates."""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from social_insurance_engine.calculators.types import GradeBand, RateTable
from social_insurance_engine.models.base import Base, TenantOwnedMixin, TimestampMixin


class GradeBandRecord(Base, TenantOwnedMixin, TimestampMixin):
    """One band of a year's standard remuneration grade table."""

    __tablename__ = "grade_band"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    rank: Mapped[int] = mapped_column(Integer, nullable=False)
    lower: Mapped[int] = mapped_column(Integer, nullable=False)
    upper: Mapped[int] = mapped_column(Integer, nullable=False)
    standard: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        UniqueConstraint("tenant_id", "year", "rank", name="grade_band_unique"),
        CheckConstraint("rank >= 1", name="grade_band_rank_positive"),
    )

    def to_domain(self) -> GradeBand:
        return GradeBand(rank=self.rank, lower=self.lower, upper=self.upper, standard=self.standard)


class RateTableRecord(Base, TenantOwnedMixin, TimestampMixin):
    """Premium rates for a prefecture effective from a year and month."""

    __tablename__ = "rate_table"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    prefecture: Mapped[str] = mapped_column(String, nullable=False)
    effective_year: Mapped[int] = mapped_column(Integer, nullable=False)
    effective_month: Mapped[int] = mapped_column(Integer, nullable=False, default=4)
    health_employee: Mapped[Decimal] = mapped_column(nullable=False)
    health_employer: Mapped[Decimal] = mapped_column(nullable=False)
    care_employee: Mapped[Decimal] = mapped_column(nullable=False)
    care_employer: Mapped[Decimal] = mapped_column(nullable=False)
    pension_employee: Mapped[Decimal] = mapped_column(nullable=False)
    pension_employer: Mapped[Decimal] = mapped_column(nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "tenant_id", "prefecture", "effective_year", "effective_month", name="rate_table_unique"
        ),
        CheckConstraint("effective_month BETWEEN 1 AND 12", name="rate_table_month_range"),
    )

    def to_domain(self) -> RateTable:
        return RateTable(
            prefecture=self.prefecture,
            effective_year=self.effective_year,
            effective_month=self.effective_month,
            health_employee=Decimal(str(self.health_employee)),
            health_employer=Decimal(str(self.health_employer)),
            care_employee=Decimal(str(self.care_employee)),
            care_employer=Decimal(str(self.care_employer)),
            pension_employee=Decimal(str(self.pension_employee)),
            pension_employer=Decimal(str(self.pension_employer)),
        )

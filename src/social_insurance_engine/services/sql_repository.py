"""SQLAlchemy implementation of the premium repository."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Sequence
from uuid import UUID, uuid4

from sqlalchemy import or_, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from social_insurance_engine.calculators.rates import RateSchedule
from social_insurance_engine.calculators.types import (
    AcquisitionInfo,
    Bonus,
    Employee,
    GradeBand,
    InsuranceStatusEntry,
    RateTable,
    SalaryMonth,
    StandardRemunerationHistoryEntry,
)
from social_insurance_engine.exceptions import EmployeeNotFoundError, RepositoryError
from social_insurance_engine.models import (
    BonusRecord,
    EmployeeRecord,
    GradeBandRecord,
    InsuranceStatusHistoryRecord,
    RateTableRecord,
    SalaryMonthRecord,
    StandardRemunerationHistoryRecord,
)

logger = logging.getLogger(__name__)


class SqlPremiumRepository:
    """Repository over an AsyncSession.

    Writes are not committed here; the caller owns the transaction
    (see ``database.get_session``). Statements are serialized so the
    engine may load employees concurrently through one session.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self._lock = asyncio.Lock()

    async def _execute(self, statement: Any) -> Any:
        # An AsyncSession does not allow concurrent statements
        async with self._lock:
            return await self.session.execute(statement)

    def _insert(self, table: Any):
        if self.session.get_bind().dialect.name == "sqlite":
            return sqlite_insert(table)
        return pg_insert(table)

    async def _get_employee_record(self, tenant_id: UUID, employee_id: str) -> EmployeeRecord:
        result = await self._execute(
            select(EmployeeRecord).where(
                EmployeeRecord.tenant_id == tenant_id,
                EmployeeRecord.employee_id == employee_id,
            )
        )
        record = result.scalar_one_or_none()
        if record is None:
            raise EmployeeNotFoundError(tenant_id, employee_id)
        return record

    async def get_employee(self, tenant_id: UUID, employee_id: str) -> Employee:
        record = await self._get_employee_record(tenant_id, employee_id)
        return record.to_domain()

    async def list_employees(self, tenant_id: UUID) -> list[Employee]:
        result = await self._execute(
            select(EmployeeRecord)
            .where(EmployeeRecord.tenant_id == tenant_id)
            .order_by(EmployeeRecord.employee_id)
        )
        return [record.to_domain() for record in result.scalars()]

    async def get_salary_month(
        self, tenant_id: UUID, employee_id: str, year: int, month: int
    ) -> SalaryMonth | None:
        result = await self._execute(
            select(SalaryMonthRecord).where(
                SalaryMonthRecord.tenant_id == tenant_id,
                SalaryMonthRecord.employee_id == employee_id,
                SalaryMonthRecord.year == year,
                SalaryMonthRecord.month == month,
            )
        )
        record = result.scalar_one_or_none()
        return record.to_domain() if record else None

    async def list_salary_months(
        self, tenant_id: UUID, employee_id: str, year: int
    ) -> dict[int, SalaryMonth]:
        result = await self._execute(
            select(SalaryMonthRecord).where(
                SalaryMonthRecord.tenant_id == tenant_id,
                SalaryMonthRecord.employee_id == employee_id,
                SalaryMonthRecord.year == year,
            )
        )
        return {record.month: record.to_domain() for record in result.scalars()}

    async def list_bonuses(self, tenant_id: UUID, employee_id: str, year: int) -> list[Bonus]:
        result = await self._execute(
            select(BonusRecord)
            .where(
                BonusRecord.tenant_id == tenant_id,
                BonusRecord.employee_id == employee_id,
                BonusRecord.year == year,
            )
            .order_by(BonusRecord.pay_date)
        )
        return [record.to_domain() for record in result.scalars()]

    async def get_grade_table(self, tenant_id: UUID, year: int) -> list[GradeBand]:
        result = await self._execute(
            select(GradeBandRecord)
            .where(GradeBandRecord.tenant_id == tenant_id, GradeBandRecord.year == year)
            .order_by(GradeBandRecord.rank)
        )
        return [record.to_domain() for record in result.scalars()]

    async def list_rate_tables(self, tenant_id: UUID) -> list[RateTable]:
        result = await self._execute(
            select(RateTableRecord).where(RateTableRecord.tenant_id == tenant_id)
        )
        return [record.to_domain() for record in result.scalars()]

    async def get_rates(
        self, tenant_id: UUID, year: int, prefecture: str, month: int | None = None
    ) -> RateTable | None:
        schedule = RateSchedule(await self.list_rate_tables(tenant_id))
        if month is None:
            return schedule.for_year(prefecture, year)
        return schedule.for_month(prefecture, year, month)

    async def save_acquisition_info(
        self, tenant_id: UUID, employee_id: str, info: AcquisitionInfo
    ) -> bool:
        """Write acquisition values only where none are stored yet."""
        # Existence check first so a missing employee is an error, not a no-op
        await self._get_employee_record(tenant_id, employee_id)
        try:
            result = await self._execute(
                update(EmployeeRecord)
                .where(
                    EmployeeRecord.tenant_id == tenant_id,
                    EmployeeRecord.employee_id == employee_id,
                    or_(
                        EmployeeRecord.acquisition_grade.is_(None),
                        EmployeeRecord.acquisition_grade == 0,
                    ),
                )
                .values(
                    acquisition_grade=info.grade,
                    acquisition_standard=info.standard,
                    acquisition_year=info.year,
                    acquisition_month=info.month,
                )
                .execution_options(synchronize_session="evaluate")
            )
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to save acquisition info for {employee_id}: {e}") from e

        written = result.rowcount > 0
        if not written:
            logger.debug("Acquisition already stored for %s; keeping it", employee_id)
        return written

    async def save_standard_remuneration_history(
        self, tenant_id: UUID, entry: StandardRemunerationHistoryEntry
    ) -> None:
        stmt = self._insert(StandardRemunerationHistoryRecord.__table__).values(
            id=uuid4(),
            tenant_id=tenant_id,
            employee_id=entry.employee_id,
            apply_start_year=entry.apply_start_year,
            apply_start_month=entry.apply_start_month,
            grade=entry.grade,
            standard_monthly_remuneration=entry.standard_monthly_remuneration,
            determination_reason=entry.determination_reason.value,
            memo=entry.memo,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[
                "tenant_id",
                "employee_id",
                "apply_start_year",
                "apply_start_month",
                "determination_reason",
            ],
            set_={
                "grade": stmt.excluded.grade,
                "standard_monthly_remuneration": stmt.excluded.standard_monthly_remuneration,
                "memo": stmt.excluded.memo,
            },
        )
        try:
            await self._execute(stmt)
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to save history for {entry.employee_id}: {e}") from e

    async def list_standard_remuneration_history(
        self, tenant_id: UUID, employee_id: str
    ) -> list[StandardRemunerationHistoryEntry]:
        result = await self._execute(
            select(StandardRemunerationHistoryRecord)
            .where(
                StandardRemunerationHistoryRecord.tenant_id == tenant_id,
                StandardRemunerationHistoryRecord.employee_id == employee_id,
            )
            .order_by(
                StandardRemunerationHistoryRecord.apply_start_year,
                StandardRemunerationHistoryRecord.apply_start_month,
                StandardRemunerationHistoryRecord.determination_reason,
            )
        )
        return [record.to_domain() for record in result.scalars()]

    async def save_insurance_status_history(
        self, tenant_id: UUID, entries: Sequence[InsuranceStatusEntry]
    ) -> None:
        for entry in entries:
            stmt = self._insert(InsuranceStatusHistoryRecord.__table__).values(
                id=uuid4(),
                tenant_id=tenant_id,
                employee_id=entry.employee_id,
                year=entry.year,
                month=entry.month,
                health_status=entry.health_status.value,
                care_status=entry.care_status.value,
                pension_status=entry.pension_status.value,
                age_milestone=entry.age_milestone,
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=["tenant_id", "employee_id", "year", "month"],
                set_={
                    "health_status": stmt.excluded.health_status,
                    "care_status": stmt.excluded.care_status,
                    "pension_status": stmt.excluded.pension_status,
                    "age_milestone": stmt.excluded.age_milestone,
                },
            )
            try:
                await self._execute(stmt)
            except SQLAlchemyError as e:
                raise RepositoryError(f"Failed to save insurance status for {entry.employee_id}: {e}") from e

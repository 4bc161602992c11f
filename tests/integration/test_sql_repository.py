"""SQL repository integration tests."""

from uuid import UUID

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from social_insurance_engine.calculators.types import (
    AcquisitionInfo,
    DeterminationReason,
    InsuranceStatus,
    InsuranceStatusEntry,
    StandardRemunerationHistoryEntry,
)
from social_insurance_engine.exceptions import EmployeeNotFoundError
from social_insurance_engine.models import Base, InsuranceStatusHistoryRecord, TenantOwnedMixin
from social_insurance_engine.services.sql_repository import SqlPremiumRepository

DEMO_TENANT_ID = UUID("11111111-1111-1111-1111-111111111111")

pytestmark = pytest.mark.asyncio


@pytest.fixture
def repo(seeded_db: AsyncSession) -> SqlPremiumRepository:
    return SqlPremiumRepository(seeded_db)


class TestReads:
    """Loading inputs as calculation types."""

    async def test_list_employees_ordered(self, repo):
        """Employees come back ordered by code."""
        employees = await repo.list_employees(DEMO_TENANT_ID)

        assert [e.employee_id for e in employees] == ["E001", "E002"]
        assert employees[0].standard_monthly_remuneration == 200000

    async def test_salary_months_keyed_by_month(self, repo):
        """Totals are derived from fixed + variable."""
        salaries = await repo.list_salary_months(DEMO_TENANT_ID, "E001", 2024)

        assert sorted(salaries) == list(range(1, 13))
        assert salaries[4].total == 300000

    async def test_get_salary_month_missing(self, repo):
        """A month without data is None."""
        assert await repo.get_salary_month(DEMO_TENANT_ID, "E002", 2024, 1) is None

    async def test_bonuses(self, repo):
        """Bonuses of the year are returned."""
        bonuses = await repo.list_bonuses(DEMO_TENANT_ID, "E001", 2024)

        assert len(bonuses) == 1
        assert bonuses[0].pension_employee == 45750

    async def test_empty_grade_table(self, repo):
        """No stored bands means the reference table is used downstream."""
        assert await repo.get_grade_table(DEMO_TENANT_ID, 2024) == []

    async def test_get_rates(self, repo):
        """Rates in force are resolved from the stored tables."""
        rates = await repo.get_rates(DEMO_TENANT_ID, 2024, "tokyo", 6)

        assert rates is not None
        assert rates.pension_employee == rates.pension_employer
        assert await repo.get_rates(DEMO_TENANT_ID, 2024, "osaka") is None

    async def test_unknown_employee(self, repo):
        """Missing employees raise."""
        with pytest.raises(EmployeeNotFoundError):
            await repo.get_employee(DEMO_TENANT_ID, "E999")


class TestAcquisitionWrites:
    """Acquisition values are written once."""

    async def test_write_once(self, repo):
        """The second write is refused and the first values stay."""
        first = await repo.save_acquisition_info(DEMO_TENANT_ID, "E002", AcquisitionInfo(22, 300000, 2024, 4))
        second = await repo.save_acquisition_info(DEMO_TENANT_ID, "E002", AcquisitionInfo(20, 260000, 2024, 5))

        assert first is True
        assert second is False
        employee = await repo.get_employee(DEMO_TENANT_ID, "E002")
        assert employee.acquisition_grade == 22
        assert employee.acquisition_standard == 300000

    async def test_unknown_employee(self, repo):
        """Writing for a missing employee raises."""
        with pytest.raises(EmployeeNotFoundError):
            await repo.save_acquisition_info(DEMO_TENANT_ID, "E999", AcquisitionInfo(22, 300000, 2024, 4))


class TestHistoryUpserts:
    """History and status rows are upserted."""

    async def test_history_upsert(self, repo):
        """Saving the same determination twice keeps one row."""
        entry = StandardRemunerationHistoryEntry(
            employee_id="E001",
            apply_start_year=2024,
            apply_start_month=9,
            grade=22,
            standard_monthly_remuneration=300000,
            determination_reason=DeterminationReason.TEIJI,
        )
        await repo.save_standard_remuneration_history(DEMO_TENANT_ID, entry)
        entry.grade = 20
        entry.standard_monthly_remuneration = 260000
        await repo.save_standard_remuneration_history(DEMO_TENANT_ID, entry)

        stored = await repo.list_standard_remuneration_history(DEMO_TENANT_ID, "E001")
        assert len(stored) == 1
        assert stored[0].grade == 20
        assert stored[0].determination_reason == DeterminationReason.TEIJI

    async def test_status_upsert(self, repo):
        """One status row per employee and month."""
        entry = InsuranceStatusEntry(
            employee_id="E001",
            year=2024,
            month=6,
            health_status=InsuranceStatus.JOINED,
            care_status=InsuranceStatus.LOST,
            pension_status=InsuranceStatus.JOINED,
        )
        await repo.save_insurance_status_history(DEMO_TENANT_ID, [entry])
        await repo.save_insurance_status_history(DEMO_TENANT_ID, [entry])

        result = await repo.session.execute(
            select(InsuranceStatusHistoryRecord).where(InsuranceStatusHistoryRecord.employee_id == "E001")
        )
        rows = result.scalars().all()
        assert len(rows) == 1
        assert rows[0].care_status == "lost"


class TestSchema:
    """Tenant ownership of stored records."""

    async def test_tenant_owned_tables_cascade_from_tenant(self):
        """Every tenant-owned table references the tenant with cascading deletes."""
        owned = [
            mapper.class_.__table__
            for mapper in Base.registry.mappers
            if issubclass(mapper.class_, TenantOwnedMixin)
        ]

        assert len(owned) == 7
        for table in owned:
            (foreign_key,) = table.c.tenant_id.foreign_keys
            assert foreign_key.target_fullname == "tenant.tenant_id"
            assert foreign_key.ondelete == "CASCADE"
            assert not table.c.tenant_id.nullable

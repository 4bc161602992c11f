"""Tests for standard remuneration and insurance status history."""

from datetime import date
from uuid import UUID

import pytest

from social_insurance_engine.calculators.types import (
    DeterminationReason,
    InsuranceStatus,
    StandardRemunerationHistoryEntry,
)
from social_insurance_engine.services.history_service import (
    StandardRemunerationHistoryService,
    build_insurance_status,
    standard_for_month,
)

TENANT_ID = UUID("11111111-1111-1111-1111-111111111111")


def _entry(year: int, month: int, standard: int, reason: DeterminationReason) -> StandardRemunerationHistoryEntry:
    return StandardRemunerationHistoryEntry(
        employee_id="E001",
        apply_start_year=year,
        apply_start_month=month,
        grade=0,
        standard_monthly_remuneration=standard,
        determination_reason=reason,
    )


class TestStandardForMonth:
    """Lookup of the determination in force."""

    def test_latest_entry_on_or_before_month(self):
        """The September teiji supersedes the April acquisition."""
        entries = [
            _entry(2024, 9, 300000, DeterminationReason.TEIJI),
            _entry(2024, 4, 260000, DeterminationReason.ACQUISITION),
        ]

        assert standard_for_month(entries, 2024, 8).standard_monthly_remuneration == 260000
        assert standard_for_month(entries, 2024, 9).standard_monthly_remuneration == 300000
        assert standard_for_month(entries, 2024, 3) is None


class TestHistoryService:
    """Generating and reading history through the repository."""

    @pytest.mark.asyncio
    async def test_generate_history_is_idempotent(self, repository, make_employee, make_salaries):
        """Regenerating updates rows instead of adding duplicates."""
        employee = make_employee(join_date=date(2024, 4, 1))
        repository.add_employee(TENANT_ID, employee)
        salaries = make_salaries("E001", {m: 300000 for m in range(4, 13)})
        service = StandardRemunerationHistoryService(repository)

        entries = await service.generate_history(TENANT_ID, employee, 2024, salaries, None)
        await service.generate_history(TENANT_ID, employee, 2024, salaries, None)

        reasons = [e.determination_reason for e in entries]
        assert reasons == [DeterminationReason.ACQUISITION, DeterminationReason.TEIJI]
        assert len(repository.history) == 2

    @pytest.mark.asyncio
    async def test_get_standard_for_month(self, repository, make_employee, make_salaries):
        """Stored history answers month lookups."""
        employee = make_employee(join_date=date(2024, 4, 1))
        salaries = make_salaries("E001", {m: 300000 for m in range(4, 13)})
        service = StandardRemunerationHistoryService(repository)
        await service.generate_history(TENANT_ID, employee, 2024, salaries, None)

        assert await service.get_standard_for_month(TENANT_ID, "E001", 2024, 5) == 300000
        assert await service.get_standard_for_month(TENANT_ID, "E001", 2024, 3) is None

    @pytest.mark.asyncio
    async def test_september_revision_stored_without_teiji(self, repository, make_employee, make_salaries):
        """A revision applying in September is stored in place of the teiji."""
        employee = make_employee(standard_monthly_remuneration=200000)
        salaries = make_salaries("E001", {m: 200000 if m < 5 else 300000 for m in range(1, 13)})
        service = StandardRemunerationHistoryService(repository)

        entries = await service.generate_history(TENANT_ID, employee, 2024, salaries, None)

        assert [(e.apply_start_month, e.determination_reason) for e in entries] == [(9, DeterminationReason.SUIJI)]
        assert await service.get_standard_for_month(TENANT_ID, "E001", 2024, 9) == 300000

    @pytest.mark.asyncio
    async def test_insurance_status_history(self, repository, make_employee):
        """Twelve rows are stored with the age-40 milestone."""
        employee = make_employee(birth_date=date(1984, 6, 15))
        service = StandardRemunerationHistoryService(repository)

        entries = await service.generate_insurance_status_history(TENANT_ID, employee, 2024)

        assert len(entries) == 12
        assert len(repository.insurance_status) == 12
        june = entries[5]
        assert june.age_milestone == 40
        assert june.care_status == InsuranceStatus.JOINED
        assert entries[4].care_status == InsuranceStatus.LOST
        assert entries[6].age_milestone is None

    @pytest.mark.asyncio
    async def test_no_birth_date(self, repository, make_employee):
        """Without a birth date nothing is generated."""
        service = StandardRemunerationHistoryService(repository)

        assert await service.generate_insurance_status_history(TENANT_ID, make_employee(birth_date=None), 2024) == []
        assert repository.insurance_status == {}


class TestInsuranceStatus:
    """Per-insurance status of a month."""

    def test_maternity_leave_exempts_all(self, make_employee):
        """Leave months are exempt across insurances."""
        employee = make_employee(
            birth_date=date(1980, 1, 1),
            maternity_leave_start=date(2024, 5, 1),
            maternity_leave_end=date(2024, 7, 31),
        )
        status = build_insurance_status(employee, 2024, 6)

        assert status.health_status == InsuranceStatus.EXEMPT_MATERNITY
        assert status.care_status == InsuranceStatus.EXEMPT_MATERNITY
        assert status.pension_status == InsuranceStatus.EXEMPT_MATERNITY

    def test_age_70_loses_pension(self, make_employee):
        """Pension is lost from the age-70 reach month; care is type 1."""
        status = build_insurance_status(make_employee(birth_date=date(1954, 6, 10)), 2024, 6)

        assert status.pension_status == InsuranceStatus.LOST
        assert status.health_status == InsuranceStatus.JOINED
        assert status.care_status == InsuranceStatus.TYPE1
        assert status.age_milestone == 70

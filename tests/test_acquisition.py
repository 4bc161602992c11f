"""Tests for the acquisition-time determination."""

from datetime import date
from uuid import UUID

import pytest

from social_insurance_engine.calculators.acquisition import AcquisitionDeterminer, determine_acquisition
from social_insurance_engine.calculators.types import AcquisitionInfo
from social_insurance_engine.exceptions import RepositoryError
from social_insurance_engine.services.repository import InMemoryPremiumRepository

TENANT_ID = UUID("11111111-1111-1111-1111-111111111111")


class FailingRepository(InMemoryPremiumRepository):
    """Repository whose acquisition writes always fail."""

    async def save_acquisition_info(self, tenant_id, employee_id, info: AcquisitionInfo) -> bool:
        raise RepositoryError("storage unavailable")


class TestDetermineAcquisition:
    """Pure acquisition determination."""

    def test_hire_month_pay(self, make_employee, make_salaries):
        """The hire month's pay sets the grade."""
        employee = make_employee(join_date=date(2024, 4, 10))
        salaries = make_salaries("E001", {4: 300000, 5: 320000})
        result = determine_acquisition(employee, 2024, salaries, None)

        assert result.grade == 22
        assert result.standard_monthly_remuneration == 300000
        assert result.used_month == 4
        assert result.is_determined

    def test_next_month_when_hire_month_empty(self, make_employee, make_salaries):
        """Without hire-month pay the following month is used."""
        employee = make_employee(join_date=date(2024, 4, 25))
        salaries = make_salaries("E001", {4: 0, 5: 250000})
        result = determine_acquisition(employee, 2024, salaries, None)

        assert result.used_month == 5
        assert result.grade == 20

    def test_no_pay_is_undetermined(self, make_employee):
        """No pay in either month leaves grade 0."""
        employee = make_employee(join_date=date(2024, 4, 25))
        result = determine_acquisition(employee, 2024, {}, None)

        assert result.grade == 0
        assert not result.is_determined
        assert result.reasons

    def test_other_year_or_no_join(self, make_employee):
        """Only the hire year is determined."""
        assert determine_acquisition(make_employee(), 2024, {}, None) is None
        assert determine_acquisition(make_employee(join_date=None), 2024, {}, None) is None

    def test_cached_value_is_returned(self, make_employee):
        """A stored determination is returned as-is."""
        employee = make_employee(
            join_date=date(2024, 4, 1),
            acquisition_grade=20,
            acquisition_standard=260000,
            acquisition_year=2024,
            acquisition_month=4,
        )
        result = determine_acquisition(employee, 2024, {}, None)

        assert result.from_cache
        assert result.grade == 20
        assert result.standard_monthly_remuneration == 260000


class TestAcquisitionDeterminer:
    """Write-once persistence."""

    @pytest.mark.asyncio
    async def test_first_calculation_persists(self, make_employee, make_salaries, repository):
        """The first determination is stored on the employee."""
        employee = make_employee(join_date=date(2024, 4, 10))
        repository.add_employee(TENANT_ID, employee)
        salaries = make_salaries("E001", {4: 300000})

        result = await AcquisitionDeterminer(repository).calculate_shikaku_shutoku(
            TENANT_ID, employee, 2024, salaries, None
        )

        assert result.grade == 22
        assert repository.acquisition_writes == 1
        assert employee.acquisition_grade == 22
        assert employee.acquisition_month == 4

    @pytest.mark.asyncio
    async def test_repeat_calculation_does_not_write(self, make_employee, make_salaries, repository):
        """A second call reads the cache and never rewrites."""
        employee = make_employee(join_date=date(2024, 4, 10))
        repository.add_employee(TENANT_ID, employee)
        determiner = AcquisitionDeterminer(repository)

        await determiner.calculate_shikaku_shutoku(
            TENANT_ID, employee, 2024, make_salaries("E001", {4: 300000}), None
        )
        second = await determiner.calculate_shikaku_shutoku(
            TENANT_ID, employee, 2024, make_salaries("E001", {4: 500000}), None
        )

        assert second.from_cache
        assert second.grade == 22
        assert repository.acquisition_writes == 1

    @pytest.mark.asyncio
    async def test_cached_grade_means_zero_writes(self, make_employee, make_salaries, repository):
        """An employee with a cached grade is never written."""
        employee = make_employee(
            join_date=date(2024, 4, 10),
            acquisition_grade=20,
            acquisition_standard=260000,
            acquisition_year=2024,
            acquisition_month=4,
        )
        repository.add_employee(TENANT_ID, employee)

        await AcquisitionDeterminer(repository).calculate_shikaku_shutoku(
            TENANT_ID, employee, 2024, make_salaries("E001", {4: 300000}), None
        )

        assert repository.acquisition_writes == 0
        assert employee.acquisition_grade == 20

    @pytest.mark.asyncio
    async def test_repository_failure_is_reported(self, make_employee, make_salaries):
        """A failed write is logged and reported, not raised."""
        repository = FailingRepository()
        employee = make_employee(join_date=date(2024, 4, 10))
        repository.add_employee(TENANT_ID, employee)

        result = await AcquisitionDeterminer(repository).calculate_shikaku_shutoku(
            TENANT_ID, employee, 2024, make_salaries("E001", {4: 300000}), None
        )

        assert result.grade == 22
        assert "acquisition determination could not be saved" in result.reasons
        assert employee.acquisition_grade is None

"""Repository contract for premium calculation inputs and outputs.

Every call is scoped by an explicit ``tenant_id`` and keyed by
employee, year and month. Two implementations exist: the in-memory one
below (tests, stateless API calls) and ``SqlPremiumRepository``.
"""

from __future__ import annotations

import logging
from typing import Protocol, Sequence
from uuid import UUID

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
from social_insurance_engine.exceptions import EmployeeNotFoundError, InvalidPeriodError, RepositoryError

logger = logging.getLogger(__name__)

__all__ = [
    "EmployeeNotFoundError",
    "InMemoryPremiumRepository",
    "InvalidPeriodError",
    "PremiumRepository",
    "RepositoryError",
]


class PremiumRepository(Protocol):
    """Persistence contract used by the engine and the acquisition determiner."""

    async def get_employee(self, tenant_id: UUID, employee_id: str) -> Employee:
        """Return the employee or raise EmployeeNotFoundError."""
        ...

    async def list_employees(self, tenant_id: UUID) -> list[Employee]:
        ...

    async def get_salary_month(
        self, tenant_id: UUID, employee_id: str, year: int, month: int
    ) -> SalaryMonth | None:
        ...

    async def list_salary_months(
        self, tenant_id: UUID, employee_id: str, year: int
    ) -> dict[int, SalaryMonth]:
        ...

    async def list_bonuses(self, tenant_id: UUID, employee_id: str, year: int) -> list[Bonus]:
        ...

    async def get_grade_table(self, tenant_id: UUID, year: int) -> list[GradeBand]:
        ...

    async def get_rates(
        self, tenant_id: UUID, year: int, prefecture: str, month: int | None = None
    ) -> RateTable | None:
        ...

    async def list_rate_tables(self, tenant_id: UUID) -> list[RateTable]:
        ...

    async def save_acquisition_info(
        self, tenant_id: UUID, employee_id: str, info: AcquisitionInfo
    ) -> bool:
        """Persist acquisition values unless already present.

        Returns True if written, False if an existing value was kept.
        """
        ...

    async def save_standard_remuneration_history(
        self, tenant_id: UUID, entry: StandardRemunerationHistoryEntry
    ) -> None:
        """Insert or update on (employee, apply year/month, reason)."""
        ...

    async def list_standard_remuneration_history(
        self, tenant_id: UUID, employee_id: str
    ) -> list[StandardRemunerationHistoryEntry]:
        ...

    async def save_insurance_status_history(
        self, tenant_id: UUID, entries: Sequence[InsuranceStatusEntry]
    ) -> None:
        ...


class InMemoryPremiumRepository:
    """Dict-backed repository."""

    def __init__(self) -> None:
        self.employees: dict[tuple[UUID, str], Employee] = {}
        self.salaries: dict[tuple[UUID, str, int, int], SalaryMonth] = {}
        self.bonuses: dict[tuple[UUID, str], list[Bonus]] = {}
        self.grade_tables: dict[tuple[UUID, int], list[GradeBand]] = {}
        self.rate_tables: dict[UUID, list[RateTable]] = {}
        self.history: dict[tuple[UUID, tuple], StandardRemunerationHistoryEntry] = {}
        self.insurance_status: dict[tuple[UUID, str, int, int], InsuranceStatusEntry] = {}
        self.acquisition_writes = 0

    # Seeding helpers

    def add_employee(self, tenant_id: UUID, employee: Employee) -> None:
        self.employees[(tenant_id, employee.employee_id)] = employee

    def add_salary_month(self, tenant_id: UUID, salary: SalaryMonth) -> None:
        self.salaries[(tenant_id, salary.employee_id, salary.year, salary.month)] = salary

    def add_bonus(self, tenant_id: UUID, bonus: Bonus) -> None:
        self.bonuses.setdefault((tenant_id, bonus.employee_id), []).append(bonus)

    def set_grade_table(self, tenant_id: UUID, year: int, bands: Sequence[GradeBand]) -> None:
        self.grade_tables[(tenant_id, year)] = list(bands)

    def add_rate_table(self, tenant_id: UUID, table: RateTable) -> None:
        self.rate_tables.setdefault(tenant_id, []).append(table)

    # Contract

    async def get_employee(self, tenant_id: UUID, employee_id: str) -> Employee:
        employee = self.employees.get((tenant_id, employee_id))
        if employee is None:
            raise EmployeeNotFoundError(tenant_id, employee_id)
        return employee

    async def list_employees(self, tenant_id: UUID) -> list[Employee]:
        return [e for (t, _), e in sorted(self.employees.items()) if t == tenant_id]

    async def get_salary_month(
        self, tenant_id: UUID, employee_id: str, year: int, month: int
    ) -> SalaryMonth | None:
        return self.salaries.get((tenant_id, employee_id, year, month))

    async def list_salary_months(
        self, tenant_id: UUID, employee_id: str, year: int
    ) -> dict[int, SalaryMonth]:
        return {
            month: salary
            for (t, e, y, month), salary in self.salaries.items()
            if t == tenant_id and e == employee_id and y == year
        }

    async def list_bonuses(self, tenant_id: UUID, employee_id: str, year: int) -> list[Bonus]:
        bonuses = self.bonuses.get((tenant_id, employee_id), [])
        return sorted((b for b in bonuses if b.year == year), key=lambda b: b.pay_date)

    async def get_grade_table(self, tenant_id: UUID, year: int) -> list[GradeBand]:
        return list(self.grade_tables.get((tenant_id, year), []))

    async def get_rates(
        self, tenant_id: UUID, year: int, prefecture: str, month: int | None = None
    ) -> RateTable | None:
        schedule = RateSchedule(self.rate_tables.get(tenant_id, []))
        if month is None:
            return schedule.for_year(prefecture, year)
        return schedule.for_month(prefecture, year, month)

    async def list_rate_tables(self, tenant_id: UUID) -> list[RateTable]:
        return list(self.rate_tables.get(tenant_id, []))

    async def save_acquisition_info(
        self, tenant_id: UUID, employee_id: str, info: AcquisitionInfo
    ) -> bool:
        employee = await self.get_employee(tenant_id, employee_id)
        if employee.has_cached_acquisition:
            logger.debug("Acquisition already stored for %s; keeping it", employee_id)
            return False

        employee.acquisition_grade = info.grade
        employee.acquisition_standard = info.standard
        employee.acquisition_year = info.year
        employee.acquisition_month = info.month
        self.acquisition_writes += 1
        return True

    async def save_standard_remuneration_history(
        self, tenant_id: UUID, entry: StandardRemunerationHistoryEntry
    ) -> None:
        self.history[(tenant_id, entry.unique_key)] = entry

    async def list_standard_remuneration_history(
        self, tenant_id: UUID, employee_id: str
    ) -> list[StandardRemunerationHistoryEntry]:
        entries = [
            entry
            for (t, key), entry in self.history.items()
            if t == tenant_id and entry.employee_id == employee_id
        ]
        return sorted(entries, key=lambda e: (e.apply_key, e.determination_reason.value))

    async def save_insurance_status_history(
        self, tenant_id: UUID, entries: Sequence[InsuranceStatusEntry]
    ) -> None:
        for entry in entries:
            self.insurance_status[(tenant_id, entry.employee_id, entry.year, entry.month)] = entry

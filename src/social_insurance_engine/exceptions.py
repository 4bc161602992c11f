"""Exceptions raised by the social insurance engine."""

from __future__ import annotations

from uuid import UUID


class RepositoryError(Exception):
    """Base class for persistence failures."""


class EmployeeNotFoundError(RepositoryError):
    """Raised when a required employee record does not exist."""

    def __init__(self, tenant_id: UUID, employee_id: str):
        self.tenant_id = tenant_id
        self.employee_id = employee_id
        super().__init__(f"Employee {employee_id} not found for tenant {tenant_id}")


class InvalidPeriodError(ValueError):
    """Raised for an out-of-range year or month at the API boundary."""

    def __init__(self, year: int, month: int | None = None):
        self.year = year
        self.month = month
        period = f"{year}" if month is None else f"{year}-{month}"
        super().__init__(f"Invalid period {period}")

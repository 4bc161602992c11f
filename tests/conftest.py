"""Pytest fixtures for social insurance engine tests."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import AsyncGenerator, Callable
from uuid import UUID

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from social_insurance_engine.calculators.types import Employee, RateTable, SalaryMonth
from social_insurance_engine.models import Base, Tenant
from social_insurance_engine.services.repository import InMemoryPremiumRepository

# In-memory SQLite keeps the suite self-contained
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TENANT_ID = UUID("11111111-1111-1111-1111-111111111111")
YEAR = 2024


@pytest.fixture
def rates() -> RateTable:
    """Tokyo rates effective from March 2023 (round figures for easy math)."""
    return RateTable(
        prefecture="tokyo",
        effective_year=2023,
        effective_month=3,
        health_employee=Decimal("0.05"),
        health_employer=Decimal("0.05"),
        care_employee=Decimal("0.009"),
        care_employer=Decimal("0.009"),
        pension_employee=Decimal("0.0915"),
        pension_employer=Decimal("0.0915"),
    )


@pytest.fixture
def make_employee() -> Callable[..., Employee]:
    """Factory for a full-time employee born 1990, hired 2020."""

    def _make(employee_id: str = "E001", **overrides) -> Employee:
        values = {
            "name": "Test Employee",
            "birth_date": date(1990, 1, 15),
            "join_date": date(2020, 4, 1),
            "prefecture": "tokyo",
        }
        values.update(overrides)
        return Employee(employee_id=employee_id, **values)

    return _make


@pytest.fixture
def make_salaries() -> Callable[..., dict[int, SalaryMonth]]:
    """Factory for a month -> SalaryMonth mapping from fixed amounts."""

    def _make(
        employee_id: str,
        fixed_by_month: dict[int, int],
        year: int = YEAR,
        working_days: int | None = None,
    ) -> dict[int, SalaryMonth]:
        return {
            month: SalaryMonth(
                employee_id=employee_id,
                year=year,
                month=month,
                fixed=fixed,
                working_days=working_days,
            )
            for month, fixed in fixed_by_month.items()
        }

    return _make


@pytest.fixture
def repository() -> InMemoryPremiumRepository:
    """Empty in-memory repository."""
    return InMemoryPremiumRepository()


@pytest_asyncio.fixture
async def engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def test_tenant(session: AsyncSession) -> Tenant:
    """Create a test tenant."""
    tenant = Tenant(
        tenant_id=TENANT_ID,
        name="Test Company",
        status="active",
    )
    session.add(tenant)
    await session.flush()
    return tenant

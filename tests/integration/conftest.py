"""Integration test fixtures with a real (in-memory) database."""

from collections.abc import AsyncGenerator
from datetime import date
from decimal import Decimal
from uuid import UUID

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from social_insurance_engine.api.app import create_app
from social_insurance_engine.api.dependencies import get_db_session
from social_insurance_engine.models import (
    BonusRecord,
    EmployeeRecord,
    RateTableRecord,
    SalaryMonthRecord,
    Tenant,
)

DEMO_TENANT_ID = UUID("11111111-1111-1111-1111-111111111111")

# E001: long-standing employee with a determined standard and an April raise
# E002: hired April 2024, no determination stored yet
SEED_YEAR = 2024


@pytest_asyncio.fixture
async def seeded_db(session: AsyncSession, test_tenant: Tenant) -> AsyncSession:
    """Seed two employees, a year of salaries, a bonus and Tokyo rates."""
    session.add_all(
        [
            EmployeeRecord(
                tenant_id=DEMO_TENANT_ID,
                employee_id="E001",
                name="山田 太郎",
                birth_date=date(1990, 1, 15),
                join_date=date(2020, 4, 1),
                prefecture="tokyo",
                weekly_work_hours_category="30hours-or-more",
                standard_monthly_remuneration=200000,
            ),
            EmployeeRecord(
                tenant_id=DEMO_TENANT_ID,
                employee_id="E002",
                name="佐藤 花子",
                birth_date=date(1995, 8, 1),
                join_date=date(2024, 4, 1),
                prefecture="tokyo",
                weekly_work_hours_category="30hours-or-more",
            ),
        ]
    )
    for month in range(1, 13):
        session.add(
            SalaryMonthRecord(
                tenant_id=DEMO_TENANT_ID,
                employee_id="E001",
                year=SEED_YEAR,
                month=month,
                fixed=200000 if month < 4 else 300000,
                variable=0,
            )
        )
    for month in range(4, 13):
        session.add(
            SalaryMonthRecord(
                tenant_id=DEMO_TENANT_ID,
                employee_id="E002",
                year=SEED_YEAR,
                month=month,
                fixed=300000,
                variable=0,
            )
        )
    session.add(
        BonusRecord(
            tenant_id=DEMO_TENANT_ID,
            employee_id="E001",
            year=SEED_YEAR,
            month=7,
            pay_date=date(2024, 7, 10),
            amount=500000,
            standard_bonus_amount=500000,
            capped_health=500000,
            capped_pension=500000,
            health_employee=25000,
            health_employer=25000,
            pension_employee=45750,
            pension_employer=45750,
        )
    )
    session.add(
        RateTableRecord(
            tenant_id=DEMO_TENANT_ID,
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
    )
    await session.flush()
    return session


@pytest_asyncio.fixture
async def client(session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the test session."""
    app = create_app()

    async def override_session() -> AsyncGenerator[AsyncSession, None]:
        yield session

    app.dependency_overrides[get_db_session] = override_session

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

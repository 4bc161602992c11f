"""Premium calculation and determination endpoints."""

import logging
from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Path, status

from social_insurance_engine.api.dependencies import Repository, TenantId
from social_insurance_engine.api.schemas import (
    ErrorResponse,
    MonthlyPremiumRequest,
    MonthlyPremiumResponse,
    NotificationResponse,
    SuijiListResponse,
    SuijiResponse,
    SummaryResponse,
    TeijiResponse,
)
from social_insurance_engine.calculators.engine import PremiumEngine, build_standard_timeline
from social_insurance_engine.calculators.grade_table import grade_for_standard
from social_insurance_engine.calculators.monthly_premium import calculate_monthly_premiums
from social_insurance_engine.calculators.notifications import (
    check_suiji_notification,
    check_teiji_notification,
)
from social_insurance_engine.config import get_settings
from social_insurance_engine.exceptions import InvalidPeriodError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["premiums"])

MIN_YEAR = 1900
MAX_YEAR = 2200

YearPath = Annotated[int, Path(description="Calendar year")]


def _check_year(year: int) -> None:
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise InvalidPeriodError(year)


# ============================================================================
# Stateless calculation
# ============================================================================


@router.post(
    "/premiums/monthly",
    response_model=MonthlyPremiumResponse,
    status_code=status.HTTP_200_OK,
)
async def calculate_monthly(payload: MonthlyPremiumRequest) -> MonthlyPremiumResponse:
    """Calculate one month of premiums for a posted employee and wage.

    The reference grade table is used; rates come from the request.
    """
    employee = payload.employee.to_domain()
    rates = payload.rates.to_domain() if payload.rates else None
    standard = payload.standard_monthly_remuneration or employee.standard_monthly_remuneration
    result = calculate_monthly_premiums(
        employee,
        payload.year,
        payload.month,
        payload.fixed_salary,
        payload.variable_salary,
        None,
        rates,
        standard_monthly_remuneration=standard,
    )
    return MonthlyPremiumResponse.model_validate(result)


# ============================================================================
# Stored data
# ============================================================================


@router.get(
    "/summaries/{year}",
    response_model=SummaryResponse,
    responses={422: {"model": ErrorResponse}},
)
async def get_summary(
    repository: Repository,
    tenant_id: TenantId,
    year: YearPath,
) -> SummaryResponse:
    """Calculate the tenant's company totals for a year."""
    _check_year(year)
    engine = PremiumEngine(repository=repository, settings=get_settings())
    result = await engine.calculate_year(tenant_id, year)
    return SummaryResponse.model_validate(result)


@router.get(
    "/employees/{employee_id}/teiji/{year}",
    response_model=TeijiResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def get_teiji(
    repository: Repository,
    tenant_id: TenantId,
    employee_id: Annotated[str, Path()],
    year: YearPath,
) -> TeijiResponse:
    """Periodic determination of an employee with its notification decision."""
    _check_year(year)
    employee = await repository.get_employee(tenant_id, employee_id)
    salaries = await repository.list_salary_months(tenant_id, employee_id, year)
    grade_table = await repository.get_grade_table(tenant_id, year)

    timeline = build_standard_timeline(employee, year, salaries, grade_table)
    teiji = timeline.teiji
    current_grade = grade_for_standard(grade_table, timeline.standard_for(teiji.apply_start_month - 1))
    notification = check_teiji_notification(teiji, current_grade, year)
    return TeijiResponse(
        **asdict(teiji),
        notification=NotificationResponse.model_validate(notification),
    )


@router.get(
    "/employees/{employee_id}/suiji/{year}",
    response_model=SuijiListResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def get_suiji(
    repository: Repository,
    tenant_id: TenantId,
    employee_id: Annotated[str, Path()],
    year: YearPath,
) -> SuijiListResponse:
    """Revision candidates of an employee with their notification decisions."""
    _check_year(year)
    employee = await repository.get_employee(tenant_id, employee_id)
    salaries = await repository.list_salary_months(tenant_id, employee_id, year)
    grade_table = await repository.get_grade_table(tenant_id, year)

    timeline = build_standard_timeline(employee, year, salaries, grade_table)
    items = [
        SuijiResponse(
            **asdict(result),
            notification=NotificationResponse.model_validate(check_suiji_notification(result)),
        )
        for result in timeline.suiji_candidates
    ]
    logger.debug("Employee %s has %s revision candidates in %s", employee_id, len(items), year)
    return SuijiListResponse(employee_id=employee_id, year=year, items=items)

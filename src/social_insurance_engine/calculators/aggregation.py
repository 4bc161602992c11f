"""Company-wide monthly and annual premium aggregation.

Totals are immutable in use: every ``add_*`` helper returns a new total
and leaves its inputs untouched.
"""

from __future__ import annotations

from typing import Iterable, Mapping, Sequence

from social_insurance_engine.calculators.types import (
    AnnualTotals,
    CompanyMonthlyTotal,
    Employee,
    MonthlyPremiumRow,
    MonthlyTotal,
)

MONTHS = range(1, 13)


def add_to_monthly_total(total: MonthlyTotal, row: MonthlyPremiumRow) -> MonthlyTotal:
    """Return ``total`` plus the employee + employer figures of ``row``."""
    health = row.health_employee + row.health_employer
    care = row.care_employee + row.care_employer
    pension = row.pension_employee + row.pension_employer
    return MonthlyTotal(
        health=total.health + health,
        care=total.care + care,
        pension=total.pension + pension,
        total=total.total + health + care + pension,
        is_pension_stopped=total.is_pension_stopped or row.is_pension_stopped,
        is_health_stopped=total.is_health_stopped or row.is_health_stopped,
        is_maternity_leave=total.is_maternity_leave or row.is_maternity_leave,
        is_childcare_leave=total.is_childcare_leave or row.is_childcare_leave,
        is_retired=total.is_retired or row.is_retired,
    )


def add_to_company_monthly_total(total: CompanyMonthlyTotal, monthly: MonthlyTotal) -> CompanyMonthlyTotal:
    """Return ``total`` plus one month's aggregate."""
    return CompanyMonthlyTotal(
        month=total.month,
        health_total=total.health_total + monthly.health,
        care_total=total.care_total + monthly.care,
        pension_total=total.pension_total + monthly.pension,
        total=total.total + monthly.total,
    )


def aggregate_monthly_totals(
    employees: Iterable[Employee],
    year: int,
    monthly_premiums_by_employee: Mapping[str, Sequence[MonthlyPremiumRow]],
) -> dict[int, MonthlyTotal]:
    """Sum every employee's rows into twelve monthly totals.

    Stopping flags are OR-ed across employees.
    """
    totals = {month: MonthlyTotal() for month in MONTHS}
    for employee in employees:
        for row in monthly_premiums_by_employee.get(employee.employee_id, ()):
            if row.month not in totals:
                continue
            totals[row.month] = add_to_monthly_total(totals[row.month], row)
    return totals


def build_company_monthly_totals(monthly_totals: Mapping[int, MonthlyTotal]) -> list[CompanyMonthlyTotal]:
    """One company total per month, January to December."""
    return [
        add_to_company_monthly_total(CompanyMonthlyTotal(month=month), monthly_totals.get(month, MonthlyTotal()))
        for month in MONTHS
    ]


def calculate_annual_totals(company_totals: Iterable[CompanyMonthlyTotal]) -> AnnualTotals:
    """Sum the company monthly totals over the year."""
    annual = AnnualTotals()
    for month_total in company_totals:
        annual = AnnualTotals(
            health=annual.health + month_total.health_total,
            care=annual.care + month_total.care_total,
            pension=annual.pension + month_total.pension_total,
            total=annual.total + month_total.total,
        )
    return annual

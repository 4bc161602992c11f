"""Bonus premium calculation and aggregation.

Caps on the standard bonus amount:
- health/care: 5,730,000 yen cumulative per fiscal year (April-March)
- pension: 1,500,000 yen per payment

A fourth payment within twelve months is treated as salary and carries
no bonus premium.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Mapping, Sequence

from social_insurance_engine.calculators.amounts import floor_to_thousand, premium_share, sanitize_amount
from social_insurance_engine.calculators.lifecycle import (
    age_at_month,
    care_insurance_type,
    is_childcare_leave,
    is_health_stopped_in_month,
    is_maternity_leave,
    is_pension_stopped_in_month,
    is_retired_for_month,
    month_key,
)
from social_insurance_engine.calculators.notifications import check_bonus_notification
from social_insurance_engine.calculators.stopping_rules import apply_stopping_rules
from social_insurance_engine.calculators.types import (
    Bonus,
    BonusAnnualTotal,
    CareInsuranceType,
    Employee,
    MonthlyPremiumRow,
    PremiumBreakdown,
    RateTable,
)

logger = logging.getLogger(__name__)

HEALTH_ANNUAL_CAP = 5_730_000
PENSION_PER_PAYMENT_CAP = 1_500_000
SALARY_INSTEAD_COUNT = 4


def fiscal_year_of(day: date) -> int:
    """Fiscal year (April start) containing ``day``."""
    return day.year if day.month >= 4 else day.year - 1


def count_bonuses_in_window(
    pay_date: date,
    prior_bonuses: Iterable[Bonus],
    recalculated: Bonus | None = None,
) -> int:
    """Payments in the twelve months ending with the pay month, this one included.

    Other payments on the same day count; ``recalculated`` (the stored
    record of this payment, if any) is skipped by identity.
    """
    current = month_key(pay_date.year, pay_date.month)
    count = 1
    for prior in prior_bonuses:
        if prior is recalculated or prior.amount <= 0 or prior.pay_date > pay_date:
            continue
        key = month_key(prior.pay_date.year, prior.pay_date.month)
        if current - 12 < key <= current:
            count += 1
    return count


def _cumulative_health_base(
    pay_date: date,
    prior_bonuses: Iterable[Bonus],
    recalculated: Bonus | None = None,
) -> int:
    fiscal_year = fiscal_year_of(pay_date)
    return sum(
        prior.capped_health
        for prior in prior_bonuses
        if prior is not recalculated
        and prior.pay_date <= pay_date
        and fiscal_year_of(prior.pay_date) == fiscal_year
        and not prior.is_salary_instead_of_bonus
    )


def calculate_bonus(
    employee: Employee,
    amount: int | None,
    pay_date: date,
    rates: RateTable | None,
    prior_bonuses: Sequence[Bonus] = (),
    recalculated: Bonus | None = None,
) -> Bonus:
    """Build a bonus with its caps, flags, premiums and report decision.

    ``prior_bonuses`` are the employee's other payments; when it also
    holds the stored record being recalculated, pass that record as
    ``recalculated`` so it is not counted against itself.
    """
    year, month = pay_date.year, pay_date.month
    bonus = Bonus(
        employee_id=employee.employee_id,
        year=year,
        month=month,
        pay_date=pay_date,
        amount=sanitize_amount(amount),
    )

    if bonus.amount > 0:
        standard = floor_to_thousand(bonus.amount)
        bonus.standard_bonus_amount = standard

        cumulative = _cumulative_health_base(pay_date, prior_bonuses, recalculated)
        bonus.capped_health = max(0, min(standard, HEALTH_ANNUAL_CAP - cumulative))
        if bonus.capped_health < standard:
            bonus.reasons.append("fiscal-year health/care cap (5,730,000) applied")
        bonus.capped_pension = min(standard, PENSION_PER_PAYMENT_CAP)
        if bonus.capped_pension < standard:
            bonus.reasons.append("per-payment pension cap (1,500,000) applied")

        bonus.is_retired_no_last_day = is_retired_for_month(employee, year, month)
        bonus.is_over_age_70 = is_pension_stopped_in_month(employee.birth_date, year, month)
        bonus.is_over_age_75 = is_health_stopped_in_month(employee.birth_date, year, month)

        if is_maternity_leave(employee, year, month):
            bonus.is_exempted = True
            bonus.exempt_reason = "maternity leave exemption"
        elif is_childcare_leave(employee, year, month):
            bonus.is_exempted = True
            bonus.exempt_reason = "childcare leave exemption"

        bonus.is_salary_instead_of_bonus = count_bonuses_in_window(pay_date, prior_bonuses, recalculated) >= SALARY_INSTEAD_COUNT
        _apply_bonus_premiums(employee, bonus, rates)

    decision = check_bonus_notification(
        bonus.amount,
        pay_date,
        is_retired_no_last_day=bonus.is_retired_no_last_day,
        is_exempted=bonus.is_exempted,
        is_over_age_75=bonus.is_over_age_75,
        is_salary_instead_of_bonus=bonus.is_salary_instead_of_bonus,
    )
    bonus.require_report = decision.required
    bonus.report_deadline = decision.submit_until
    bonus.reasons.extend(decision.reasons)
    return bonus


def _apply_bonus_premiums(employee: Employee, bonus: Bonus, rates: RateTable | None) -> None:
    if bonus.is_retired_no_last_day:
        bonus.reasons.append("separated before month-end; no bonus premium")
        return
    if bonus.is_exempted:
        bonus.reasons.append(bonus.exempt_reason)
        return
    if bonus.is_salary_instead_of_bonus:
        bonus.reasons.append("fourth payment within 12 months; treated as salary")
        return
    if rates is None:
        bonus.reasons.append("no premium rates for the payment month")
        return

    health_owed = not bonus.is_over_age_75
    care_owed = health_owed and care_insurance_type(employee.birth_date, bonus.year, bonus.month) == CareInsuranceType.TYPE2
    pension_owed = not bonus.is_over_age_70

    health_base = bonus.capped_health
    pension_base = bonus.capped_pension
    bonus.health_employee = premium_share(health_base, rates.health_employee) if health_owed else 0
    bonus.health_employer = premium_share(health_base, rates.health_employer) if health_owed else 0
    bonus.care_employee = premium_share(health_base, rates.care_employee) if care_owed else 0
    bonus.care_employer = premium_share(health_base, rates.care_employer) if care_owed else 0
    bonus.pension_employee = premium_share(pension_base, rates.pension_employee) if pension_owed else 0
    bonus.pension_employer = premium_share(pension_base, rates.pension_employer) if pension_owed else 0


def _add_to_annual(total: BonusAnnualTotal, premiums: PremiumBreakdown) -> BonusAnnualTotal:
    health_employee = total.health_employee + premiums.health_employee
    health_employer = total.health_employer + premiums.health_employer
    care_employee = total.care_employee + premiums.care_employee
    care_employer = total.care_employer + premiums.care_employer
    pension_employee = total.pension_employee + premiums.pension_employee
    pension_employer = total.pension_employer + premiums.pension_employer
    total_employee = health_employee + care_employee + pension_employee
    total_employer = health_employer + care_employer + pension_employer
    return BonusAnnualTotal(
        health_employee=health_employee,
        health_employer=health_employer,
        care_employee=care_employee,
        care_employer=care_employer,
        pension_employee=pension_employee,
        pension_employer=pension_employer,
        total_employee=total_employee,
        total_employer=total_employer,
        total=total_employee + total_employer,
        exempt_reasons=list(total.exempt_reasons),
    )


def get_annual_premiums(bonuses: Iterable[Bonus]) -> BonusAnnualTotal:
    """Sum bonus premiums, skipping exempted and salary-instead bonuses.

    Exemption reasons of the skipped exempted bonuses are collected.
    """
    total = BonusAnnualTotal()
    reasons: list[str] = []
    for bonus in bonuses:
        if bonus.is_exempted:
            if bonus.exempt_reason:
                reasons.append(bonus.exempt_reason)
            continue
        if bonus.is_salary_instead_of_bonus:
            continue
        total = _add_to_annual(total, bonus.premiums)
    total.exempt_reasons = reasons
    return total


def _row_for_month(rows: list[MonthlyPremiumRow], month: int) -> MonthlyPremiumRow:
    for row in rows:
        if row.month == month:
            return row
    row = MonthlyPremiumRow(month=month)
    rows.append(row)
    rows.sort(key=lambda r: r.month)
    return row


def add_bonus_to_monthly_totals(
    bonuses: Iterable[Bonus],
    employees: Mapping[str, Employee],
    year: int,
    monthly_premiums_by_employee: dict[str, list[MonthlyPremiumRow]],
    bonus_premiums_by_month: dict[int, dict[str, PremiumBreakdown]],
    annual_total: BonusAnnualTotal | None = None,
) -> BonusAnnualTotal:
    """Fold bonus premiums into the monthly rows of ``year``.

    For each counted bonus, the stopping rules for its month are applied
    first; the surviving figures are added to the employee's monthly
    row, to the per-month employee map and to the returned annual total.
    """
    total = annual_total if annual_total is not None else BonusAnnualTotal()
    for bonus in bonuses:
        if bonus.year != year or not bonus.counts_toward_totals:
            continue
        employee = employees.get(bonus.employee_id)
        if employee is None:
            logger.warning("Bonus for unknown employee %s skipped", bonus.employee_id)
            continue

        age = age_at_month(employee.birth_date, bonus.year, bonus.month)
        stopped = apply_stopping_rules(employee, bonus.year, bonus.month, age, bonus.premiums)
        figures = PremiumBreakdown(
            health_employee=stopped.health_employee,
            health_employer=stopped.health_employer,
            care_employee=stopped.care_employee,
            care_employer=stopped.care_employer,
            pension_employee=stopped.pension_employee,
            pension_employer=stopped.pension_employer,
        )

        rows = monthly_premiums_by_employee.setdefault(bonus.employee_id, [])
        _row_for_month(rows, bonus.month).add(figures)

        month_map = bonus_premiums_by_month.setdefault(bonus.month, {})
        existing = month_map.get(bonus.employee_id, PremiumBreakdown())
        month_map[bonus.employee_id] = PremiumBreakdown(
            health_employee=existing.health_employee + figures.health_employee,
            health_employer=existing.health_employer + figures.health_employer,
            care_employee=existing.care_employee + figures.care_employee,
            care_employer=existing.care_employer + figures.care_employer,
            pension_employee=existing.pension_employee + figures.pension_employee,
            pension_employer=existing.pension_employer + figures.pension_employer,
        )

        total = _add_to_annual(total, figures)
    return total

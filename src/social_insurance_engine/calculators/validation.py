"""Consistency checks over calculated premiums and employee dates.

Checks only report; they never alter figures.
"""

from __future__ import annotations

from typing import Iterable, Mapping, Sequence

from social_insurance_engine.calculators.lifecycle import (
    age_at_month,
    is_childcare_leave,
    is_maternity_leave,
    month_key,
)
from social_insurance_engine.calculators.types import (
    Bonus,
    DateValidationResult,
    Employee,
    MonthlyPremiumRow,
    SalaryMonth,
)

MATERNITY_TO_CHILDCARE_MAX_GAP_DAYS = 30


def validate_age_related_errors(
    employee: Employee,
    monthly_premiums: Iterable[MonthlyPremiumRow],
    age_cache: Mapping[int, int],
) -> list[str]:
    """Flag pension after 70 and health/care after 75."""
    errors: list[str] = []
    for row in monthly_premiums:
        age = age_cache.get(row.month, 0)
        if age >= 70 and row.pension_employee > 0:
            errors.append(f"{row.month}月：70歳以上は厚生年金保険料は発生しません")
        if age >= 75 and (row.health_employee > 0 or row.care_employee > 0):
            errors.append(f"{row.month}月：75歳以上は健康保険・介護保険は発生しません")
    return errors


def _is_enrolled_month(employee: Employee, year: int, month: int) -> bool:
    key = month_key(year, month)
    join = employee.join_date
    if join is not None and key < month_key(join.year, join.month):
        return False
    retire = employee.retire_date
    if retire is not None and key > month_key(retire.year, retire.month):
        return False
    return True


def _is_leave_month(employee: Employee, year: int, month: int) -> bool:
    return is_maternity_leave(employee, year, month) or is_childcare_leave(employee, year, month)


def collect_annual_warnings(
    employees: Iterable[Employee],
    year: int,
    monthly_premiums_by_employee: Mapping[str, Sequence[MonthlyPremiumRow]],
    salaries_by_employee: Mapping[str, Mapping[int, SalaryMonth]],
    bonuses: Iterable[Bonus] = (),
) -> list[str]:
    """Collect de-duplicated annual warnings for the company."""
    warnings: list[str] = []
    employee_list = list(employees)
    names = {e.employee_id: e.name or e.employee_id for e in employee_list}

    for employee in employee_list:
        name = names[employee.employee_id]
        rows = monthly_premiums_by_employee.get(employee.employee_id, ())
        salaries = salaries_by_employee.get(employee.employee_id, {})
        retire = employee.retire_date

        for row in rows:
            if retire is not None and retire.year == year and retire.month == row.month and row.premiums.total > 0:
                warnings.append(
                    f"従業員「{name}」の退職月（{row.month}月）に保険料が発生しています。資格喪失月の取り扱いを確認してください。"
                )
            age = age_at_month(employee.birth_date, year, row.month)
            if age >= 70 and row.pension_employee > 0:
                warnings.append(f"従業員「{name}」は70歳以上ですが、{row.month}月の厚生年金保険料が発生しています。")
            if age >= 75 and (row.health_employee > 0 or row.care_employee > 0):
                warnings.append(f"従業員「{name}」は75歳以上ですが、{row.month}月の健康保険・介護保険料が発生しています。")
            if _is_leave_month(employee, year, row.month) and row.premiums.total_employee > 0:
                leave_type = "産休" if is_maternity_leave(employee, year, row.month) else "育休"
                warnings.append(f"従業員「{name}」の{row.month}月は{leave_type}中ですが、本人負担分の保険料が残っています。")

        missing: list[int] = []
        for month in range(1, 13):
            if not _is_enrolled_month(employee, year, month) or _is_leave_month(employee, year, month):
                continue
            salary = salaries.get(month)
            if salary is None:
                missing.append(month)
                continue
            if salary.fixed < 0 or salary.variable < 0 or salary.deduction < 0:
                warnings.append(f"従業員「{name}」の{month}月：負の金額が入力されています")
        if missing:
            if any(m in missing for m in (4, 5, 6)):
                warnings.append(f"従業員「{name}」の4〜6月のいずれかに給与データがなく、定時決定（算定基礎）の判定が困難です。")
            warnings.append(f"従業員「{name}」の{'・'.join(str(m) for m in missing)}月に給与データが登録されていません。")

    by_id = {e.employee_id: e for e in employee_list}
    for bonus in bonuses:
        employee = by_id.get(bonus.employee_id)
        if employee is None or bonus.year != year:
            continue
        name = names[employee.employee_id]
        retire = employee.retire_date
        if retire is not None and (retire.year, retire.month) == (bonus.year, bonus.month):
            warnings.append(f"{name}：退職月({bonus.month}月)に賞与が支給されています")
        if bonus.capped_health < bonus.standard_bonus_amount:
            warnings.append(f"従業員「{name}」の年度累計賞与額が健保・介保の上限（573万円）を超えています。")
        if bonus.capped_pension < bonus.standard_bonus_amount:
            warnings.append(f"従業員「{name}」の賞与が厚生年金の上限額（1回150万円）を超えています。")

    return list(dict.fromkeys(warnings))


def validate_employee_dates(employee: Employee) -> DateValidationResult:
    """Check the ordering of an employee's lifecycle dates."""
    result = DateValidationResult()
    birth, join, retire = employee.birth_date, employee.join_date, employee.retire_date

    if birth and join and join < birth:
        result.errors.append("入社日は生年月日より後である必要があります")
    if join and retire and retire < join:
        result.errors.append("退職日は入社日より後である必要があります")
    if employee.maternity_leave_start and employee.maternity_leave_end:
        if employee.maternity_leave_end < employee.maternity_leave_start:
            result.errors.append("産休終了日は開始日より後である必要があります")
    if employee.childcare_leave_start and employee.childcare_leave_end:
        if employee.childcare_leave_end < employee.childcare_leave_start:
            result.errors.append("育休終了日は開始日より後である必要があります")
    if employee.maternity_leave_end and employee.childcare_leave_start:
        gap = (employee.childcare_leave_start - employee.maternity_leave_end).days
        if gap > MATERNITY_TO_CHILDCARE_MAX_GAP_DAYS:
            result.errors.append(
                "産休・育休の設定が矛盾しています（産休終了日と育休開始日の間が30日を超えています）"
            )
    returned = employee.return_from_leave_date
    if returned and join and returned < join:
        result.errors.append("復職日は入社日より後である必要があります")
    if returned and retire and returned >= retire:
        result.errors.append("復職日は退職日より前である必要があります")
    if employee.leave_of_absence_start and employee.leave_of_absence_end:
        if employee.leave_of_absence_end < employee.leave_of_absence_start:
            result.errors.append("休職終了日は開始日より後である必要があります")

    if employee.childcare_leave_start and (employee.childcare_leave_end or employee.childcare_leave_end_expected):
        if employee.childcare_notification_submitted is not True or employee.childcare_living_together is not True:
            result.warnings.append(
                "育休期間が設定されていますが、届出未提出または子と同居していない場合、保険料免除の対象外となります"
            )
    return result

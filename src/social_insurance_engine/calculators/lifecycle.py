"""Age and lifecycle date rules.

All predicates are total: missing or invalid dates yield 0/False rather
than raising, so batch calculations never abort on one bad record.

Age reckoning follows the civil rule: a person turns N on the day before
the Nth birthday. A milestone age is "reached in a month" when it is
reached on or before the last day of that month (the reach month).
"""

from __future__ import annotations

import calendar
from datetime import date, timedelta

from social_insurance_engine.calculators.types import CareInsuranceType, Employee

MAX_AGE = 150
CHILDCARE_MIN_DAYS = 14


def month_key(year: int, month: int) -> int:
    """Linear month index used for month comparisons."""
    return year * 12 + (month - 1)


def is_valid_month(year: int, month: int) -> bool:
    return isinstance(year, int) and isinstance(month, int) and 1 <= month <= 12 and 1 <= year <= 9998


def last_day_of_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def add_months(year: int, month: int, offset: int) -> tuple[int, int]:
    """Shift (year, month) by ``offset`` months."""
    key = month_key(year, month) + offset
    return key // 12, key % 12 + 1


def age_on(birth_date: date | None, day: date | None) -> int:
    """Age on ``day``; the age increases on the day before the birthday."""
    if birth_date is None or day is None or day < birth_date:
        return 0
    effective = day + timedelta(days=1)
    age = effective.year - birth_date.year
    if (effective.month, effective.day) < (birth_date.month, birth_date.day):
        age -= 1
    if age < 0 or age > MAX_AGE:
        return 0
    return age


def age_at_month(birth_date: date | None, year: int, month: int) -> int:
    """Age as of the 1st of the month."""
    if not is_valid_month(year, month):
        return 0
    return age_on(birth_date, date(year, month, 1))


def has_reached_age_in_month(birth_date: date | None, year: int, month: int, age: int) -> bool:
    """True if ``age`` is reached on or before the month's last day."""
    if birth_date is None or not is_valid_month(year, month):
        return False
    month_end = date(year, month, last_day_of_month(year, month))
    return age_on(birth_date, month_end) >= age


def is_on_or_after_birthday_month(birth_date: date | None, year: int, month: int, age: int) -> bool:
    """True from the month of the ``age``-th birthday, whatever its day."""
    if birth_date is None or not is_valid_month(year, month):
        return False
    return month_key(year, month) >= month_key(birth_date.year + age, birth_date.month)


def is_pension_stopped_in_month(birth_date: date | None, year: int, month: int) -> bool:
    return has_reached_age_in_month(birth_date, year, month, 70)


def is_health_stopped_in_month(birth_date: date | None, year: int, month: int) -> bool:
    return is_on_or_after_birthday_month(birth_date, year, month, 75)


def care_insurance_type(birth_date: date | None, year: int, month: int) -> CareInsuranceType:
    """Care insurance class for the month.

    type2 from the 40 reach month, type1 from the 65 reach month, and
    none again from the 75th-birthday month.
    """
    if birth_date is None or not is_valid_month(year, month):
        return CareInsuranceType.NONE
    if is_health_stopped_in_month(birth_date, year, month):
        return CareInsuranceType.NONE
    if has_reached_age_in_month(birth_date, year, month, 65):
        return CareInsuranceType.TYPE1
    if has_reached_age_in_month(birth_date, year, month, 40):
        return CareInsuranceType.TYPE2
    return CareInsuranceType.NONE


def _leave_end(actual: date | None, expected: date | None) -> date | None:
    return actual if actual is not None else expected


def _leave_covers_month(start: date | None, end: date | None, year: int, month: int) -> bool:
    if start is None or end is None or end < start or not is_valid_month(year, month):
        return False

    target = month_key(year, month)
    start_key = month_key(start.year, start.month)
    end_key = month_key(end.year, end.month)
    if target < start_key or target > end_key:
        return False
    if target == start_key:
        return True
    if target == end_key:
        # Mid-month resumption: the end month is liable
        return end.day == last_day_of_month(end.year, end.month)
    return True


def is_maternity_leave(employee: Employee, year: int, month: int) -> bool:
    """True if the month is a maternity-leave exemption month."""
    end = _leave_end(employee.maternity_leave_end, employee.maternity_leave_end_expected)
    return _leave_covers_month(employee.maternity_leave_start, end, year, month)


def childcare_leave_days(employee: Employee) -> int:
    """Inclusive length of the childcare leave window (0 if not set)."""
    start = employee.childcare_leave_start
    end = _leave_end(employee.childcare_leave_end, employee.childcare_leave_end_expected)
    if start is None or end is None or end < start:
        return 0
    return (end - start).days + 1


def is_childcare_leave(employee: Employee, year: int, month: int) -> bool:
    """True if the month is a childcare-leave exemption month.

    Leave spans shorter than 14 days never exempt.
    """
    if childcare_leave_days(employee) < CHILDCARE_MIN_DAYS:
        return False
    end = _leave_end(employee.childcare_leave_end, employee.childcare_leave_end_expected)
    return _leave_covers_month(employee.childcare_leave_start, end, year, month)


def is_retired_in_month(employee: Employee, year: int, month: int) -> bool:
    """True iff the retire date falls in the given month."""
    retire = employee.retire_date
    if retire is None or not is_valid_month(year, month):
        return False
    return retire.year == year and retire.month == month


def is_last_day_eligible(employee: Employee, year: int, month: int) -> bool:
    """Whether health/care premiums are owed for the month.

    False only for a mid-month separation in the retirement month, unless
    the employee was also hired in that same month.
    """
    if not is_retired_in_month(employee, year, month):
        return True

    retire = employee.retire_date
    if retire.day >= last_day_of_month(retire.year, retire.month):
        return True

    join = employee.join_date
    if join is not None and (join.year, join.month) == (retire.year, retire.month):
        return True
    return False


def is_retired_for_month(employee: Employee, year: int, month: int) -> bool:
    """Retired for premium purposes: after the retire month, or in it without month-end."""
    retire = employee.retire_date
    if retire is None or not is_valid_month(year, month):
        return False
    target = month_key(year, month)
    retire_key = month_key(retire.year, retire.month)
    if target > retire_key:
        return True
    if target == retire_key:
        return not is_last_day_eligible(employee, year, month)
    return False


def is_before_join_month(employee: Employee, year: int, month: int) -> bool:
    join = employee.join_date
    if join is None:
        return False
    return month_key(year, month) < month_key(join.year, join.month)


def is_join_month(employee: Employee, year: int, month: int) -> bool:
    join = employee.join_date
    return join is not None and (join.year, join.month) == (year, month)


def return_from_leave_date(employee: Employee) -> date | None:
    """First working day after maternity/childcare leave."""
    if employee.return_from_leave_date is not None:
        return employee.return_from_leave_date

    ends = [
        end
        for end in (
            _leave_end(employee.childcare_leave_end, employee.childcare_leave_end_expected),
            _leave_end(employee.maternity_leave_end, employee.maternity_leave_end_expected),
        )
        if end is not None
    ]
    if not ends:
        return None
    return max(ends) + timedelta(days=1)


def return_from_leave_month(employee: Employee) -> tuple[int, int] | None:
    """(year, month) of the first working day after leave, if known."""
    returned = return_from_leave_date(employee)
    if returned is None:
        return None
    return returned.year, returned.month

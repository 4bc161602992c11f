"""Unit tests for the monthly premium calculator."""

from datetime import date

from social_insurance_engine.calculators.monthly_premium import calculate_monthly_premiums
from social_insurance_engine.calculators.types import ReasonKind, WorkHoursCategory


class TestMonthlyPremiumBasics:
    """Standard cases."""

    def test_full_time_employee_under_40(self, make_employee, rates):
        """300,000 yen maps to grade 22; no care under 40."""
        result = calculate_monthly_premiums(make_employee(), 2024, 6, 280000, 20000, None, rates)

        assert result.grade == 22
        assert result.standard_monthly_remuneration == 300000
        assert result.premiums.health_employee == 15000
        assert result.premiums.health_employer == 15000
        assert result.premiums.care_employee == 0
        assert result.premiums.pension_employee == 27450
        assert result.premiums.pension_employer == 27450
        assert result.reasons == []

    def test_shares_are_floored(self, make_employee, rates):
        """floor(base x rate) per figure."""
        result = calculate_monthly_premiums(make_employee(), 2024, 6, 98000, 0, None, rates)

        # 98,000 x 0.0915 = 8967.0
        assert result.premiums.pension_employee == 8967
        # 98,000 x 0.05 = 4900
        assert result.premiums.health_employee == 4900

    def test_care_from_age_40(self, make_employee, rates):
        """Type-2 care is owed from the 40 reach month."""
        employee = make_employee(birth_date=date(1984, 6, 15))
        june = calculate_monthly_premiums(employee, 2024, 6, 300000, 0, None, rates)
        may = calculate_monthly_premiums(employee, 2024, 5, 300000, 0, None, rates)

        assert june.premiums.care_employee == 2700
        assert june.has_reason(ReasonKind.CARE_START)
        assert may.premiums.care_employee == 0

    def test_supplied_standard_overrides_pay(self, make_employee, rates):
        """A determined standard is the base even with zero pay."""
        result = calculate_monthly_premiums(
            make_employee(), 2024, 6, 0, 0, None, rates, standard_monthly_remuneration=300000
        )

        assert result.premiums.health_employee == 15000
        assert result.grade == 22
        assert result.has_reason(ReasonKind.STANDARD_SOURCE)


class TestMonthlyPremiumExits:
    """Zero-premium exits carry a tagged reason."""

    def test_zero_salary(self, make_employee, rates):
        """No pay and no standard gives nothing."""
        result = calculate_monthly_premiums(make_employee(), 2024, 6, 0, None, None, rates)

        assert result.premiums.total == 0
        assert result.has_reason(ReasonKind.ZERO_SALARY)

    def test_no_rates(self, make_employee):
        """Missing rates keep the grade but zero the premiums."""
        result = calculate_monthly_premiums(make_employee(), 2024, 6, 300000, 0, None, None)

        assert result.premiums.total == 0
        assert result.grade == 22
        assert result.has_reason(ReasonKind.NO_RATES)

    def test_after_retirement_month(self, make_employee, rates):
        """Nothing is owed after the retirement month."""
        employee = make_employee(retire_date=date(2024, 5, 31))
        result = calculate_monthly_premiums(employee, 2024, 6, 300000, 0, None, rates)

        assert result.premiums.total == 0
        assert result.has_reason(ReasonKind.RETIRED)

    def test_non_insured(self, make_employee, rates):
        """Non-insured employees owe nothing."""
        employee = make_employee(weekly_work_hours_category=WorkHoursCategory.LESS_THAN_TWENTY)
        result = calculate_monthly_premiums(employee, 2024, 6, 300000, 0, None, rates)

        assert result.premiums.total == 0
        assert result.has_reason(ReasonKind.NON_INSURED)

    def test_maternity_leave_is_exempt(self, make_employee, rates):
        """Leave months exit with an exemption reason."""
        employee = make_employee(maternity_leave_start=date(2024, 5, 1), maternity_leave_end=date(2024, 7, 31))
        result = calculate_monthly_premiums(employee, 2024, 6, 300000, 0, None, rates)

        assert result.premiums.total == 0
        assert result.is_exempt
        assert result.has_reason(ReasonKind.MATERNITY)

    def test_childcare_leave_is_exempt(self, make_employee, rates):
        """Childcare leave months are exempt."""
        employee = make_employee(childcare_leave_start=date(2024, 5, 1), childcare_leave_end=date(2024, 7, 31))
        result = calculate_monthly_premiums(employee, 2024, 6, 300000, 0, None, rates)

        assert result.is_exempt
        assert result.has_reason(ReasonKind.CHILDCARE)

    def test_before_join_month(self, make_employee, rates):
        """Months before hiring owe nothing."""
        employee = make_employee(join_date=date(2024, 7, 1))
        result = calculate_monthly_premiums(employee, 2024, 6, 300000, 0, None, rates)

        assert result.premiums.total == 0
        assert result.has_reason(ReasonKind.BEFORE_ACQUISITION)


class TestMonthlyPremiumGates:
    """Partial gates."""

    def test_acquisition_month_has_no_pension(self, make_employee, rates):
        """Pension starts the month after hiring."""
        employee = make_employee(join_date=date(2024, 6, 1))
        result = calculate_monthly_premiums(employee, 2024, 6, 300000, 0, None, rates)

        assert result.premiums.pension_employee == 0
        assert result.premiums.health_employee == 15000
        assert result.has_reason(ReasonKind.ACQUISITION_MONTH)

    def test_age_70_reach_month(self, make_employee, rates):
        """Pension stops in the month age 70 is reached."""
        employee = make_employee(birth_date=date(1954, 6, 10))
        result = calculate_monthly_premiums(employee, 2024, 6, 300000, 0, None, rates)

        assert result.premiums.pension_employee == 0
        assert result.premiums.pension_employer == 0
        assert result.premiums.health_employee == 15000
        assert result.premiums.care_employee == 0
        assert result.has_reason(ReasonKind.AGE_STOP_PENSION)
        assert result.has_reason(ReasonKind.CARE_TYPE1)

    def test_age_75_birthday_month(self, make_employee, rates):
        """Health and care stop from the 75th-birthday month."""
        employee = make_employee(birth_date=date(1949, 6, 10))
        result = calculate_monthly_premiums(employee, 2024, 6, 300000, 0, None, rates)

        assert result.premiums.total == 0
        assert result.has_reason(ReasonKind.AGE_STOP_HEALTH)

    def test_mid_month_separation(self, make_employee, rates):
        """Separating mid-month keeps pension but drops health and care."""
        employee = make_employee(birth_date=date(1979, 1, 10), retire_date=date(2024, 6, 15))
        result = calculate_monthly_premiums(employee, 2024, 6, 300000, 0, None, rates)

        assert result.premiums.health_employee == 0
        assert result.premiums.care_employee == 0
        assert result.premiums.pension_employee == 27450
        assert result.has_reason(ReasonKind.NOT_LAST_DAY_ELIGIBLE)

"""Unit tests for company premium aggregation."""

from social_insurance_engine.calculators.aggregation import (
    add_to_monthly_total,
    aggregate_monthly_totals,
    build_company_monthly_totals,
    calculate_annual_totals,
)
from social_insurance_engine.calculators.types import MonthlyPremiumRow, MonthlyTotal


def _row(month: int, **overrides) -> MonthlyPremiumRow:
    values = {
        "health_employee": 10,
        "health_employer": 20,
        "care_employee": 30,
        "care_employer": 40,
        "pension_employee": 50,
        "pension_employer": 60,
    }
    values.update(overrides)
    return MonthlyPremiumRow(month=month, **values)


class TestAddToMonthlyTotal:
    """Adding one employee row to a month total."""

    def test_employee_and_employer_shares_summed(self):
        """Each insurance total is employee + employer."""
        total = add_to_monthly_total(MonthlyTotal(), _row(1))

        assert total.health == 30
        assert total.care == 70
        assert total.pension == 110
        assert total.total == 210

    def test_two_rows(self):
        """Two identical rows double the figures."""
        total = add_to_monthly_total(add_to_monthly_total(MonthlyTotal(), _row(1)), _row(1))

        assert (total.health, total.care, total.pension, total.total) == (60, 140, 220, 420)

    def test_input_not_mutated(self):
        """A new total is returned."""
        original = MonthlyTotal(health=5)
        result = add_to_monthly_total(original, _row(1))

        assert original.health == 5
        assert result is not original

    def test_flags_are_or_ed(self):
        """A stop flag on any row marks the month."""
        total = add_to_monthly_total(MonthlyTotal(), _row(1, is_pension_stopped=True))
        total = add_to_monthly_total(total, _row(1))

        assert total.is_pension_stopped
        assert not total.is_health_stopped


class TestCompanyTotals:
    """Twelve monthly company totals and the annual sum."""

    def test_aggregate_and_annual(self, make_employee):
        """Rows flow into their month; the year sums every month."""
        employees = [make_employee("E001"), make_employee("E002")]
        rows = {
            "E001": [_row(1), _row(2)],
            "E002": [_row(1)],
        }

        monthly = aggregate_monthly_totals(employees, 2024, rows)
        company = build_company_monthly_totals(monthly)
        annual = calculate_annual_totals(company)

        assert len(company) == 12
        assert [c.month for c in company] == list(range(1, 13))
        assert company[0].total == 420
        assert company[1].total == 210
        assert company[2].total == 0
        assert annual.health == 90
        assert annual.total == 630

    def test_rows_of_unlisted_employees_ignored(self, make_employee):
        """Only listed employees are aggregated."""
        monthly = aggregate_monthly_totals([make_employee("E001")], 2024, {"E999": [_row(1)]})

        assert monthly[1].total == 0

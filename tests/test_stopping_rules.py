"""Unit tests for the premium stopping rules."""

from datetime import date

from social_insurance_engine.calculators.stopping_rules import apply_stopping_rules, get_stopping_flags
from social_insurance_engine.calculators.types import PremiumBreakdown


def _premiums() -> PremiumBreakdown:
    return PremiumBreakdown(
        health_employee=15000,
        health_employer=15000,
        care_employee=2700,
        care_employer=2700,
        pension_employee=27450,
        pension_employer=27450,
    )


class TestStoppingRules:
    """Priority-ordered zeroing."""

    def test_no_rule_applies(self, make_employee):
        """Figures pass through untouched."""
        result = apply_stopping_rules(make_employee(), 2024, 6, 34, _premiums())

        assert result.total == _premiums().total
        assert not result.is_retired

    def test_retired_dominates_age_75(self, make_employee):
        """A retired 75-year-old is reported as retired only."""
        employee = make_employee(birth_date=date(1949, 1, 1), retire_date=date(2024, 3, 31))
        result = apply_stopping_rules(employee, 2024, 5, 75, _premiums())

        assert result.total == 0
        assert result.is_retired
        assert not result.is_health_stopped
        assert not result.is_pension_stopped

    def test_maternity_keeps_employer_share(self, make_employee):
        """Maternity leave zeroes employee shares only."""
        employee = make_employee(maternity_leave_start=date(2024, 4, 1), maternity_leave_end=date(2024, 6, 30))
        result = apply_stopping_rules(employee, 2024, 5, 34, _premiums())

        assert result.total_employee == 0
        assert result.health_employer == 15000
        assert result.care_employer == 2700
        assert result.pension_employer == 27450
        assert result.is_maternity_leave

    def test_childcare_leave_flag(self, make_employee):
        """Childcare leave behaves like maternity leave."""
        employee = make_employee(childcare_leave_start=date(2024, 4, 1), childcare_leave_end=date(2024, 6, 30))
        result = apply_stopping_rules(employee, 2024, 5, 34, _premiums())

        assert result.total_employee == 0
        assert result.is_childcare_leave

    def test_age_70_stops_pension(self, make_employee):
        """Pension stops at 70; health continues."""
        result = apply_stopping_rules(make_employee(), 2024, 6, 70, _premiums())

        assert result.pension_employee == 0
        assert result.pension_employer == 0
        assert result.health_employee == 15000
        assert result.is_pension_stopped
        assert not result.is_health_stopped

    def test_age_75_stops_everything(self, make_employee):
        """At 75 health, care and pension are all zero."""
        result = apply_stopping_rules(make_employee(), 2024, 6, 75, _premiums())

        assert result.total == 0
        assert result.is_health_stopped
        assert result.is_pension_stopped

    def test_invalid_figures_are_sanitized(self, make_employee):
        """Negative figures become zero."""
        premiums = PremiumBreakdown(health_employee=-100, health_employer=500)
        result = apply_stopping_rules(make_employee(), 2024, 6, 34, premiums)

        assert result.health_employee == 0
        assert result.health_employer == 500

    def test_flags_without_figures(self, make_employee):
        """Flags can be inspected on their own."""
        flags = get_stopping_flags(make_employee(retire_date=date(2024, 1, 31)), 2024, 3, 40)
        assert flags.is_retired

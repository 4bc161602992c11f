"""Unit tests for the revision (suiji) determination."""

from datetime import date

from social_insurance_engine.calculators.suiji import (
    calculate_suiji_kettei,
    check_rehab_suiji,
    detect_fixed_wage_changes,
    is_within_acquisition_blackout,
)


class TestDetectFixedWageChanges:
    """Fixed-wage change detection."""

    def test_change_detected(self, make_salaries):
        """A raise in April is detected in April only."""
        salaries = make_salaries("E001", {m: 200000 if m < 4 else 250000 for m in range(1, 13)})
        assert detect_fixed_wage_changes(salaries) == [4]

    def test_january_compared_with_previous_december(self, make_salaries):
        """January is compared only when the prior December is given."""
        salaries = make_salaries("E001", {m: 200000 for m in range(1, 13)})
        assert detect_fixed_wage_changes(salaries) == []
        assert detect_fixed_wage_changes(salaries, previous_fixed=190000) == [1]

    def test_short_months_skipped(self, make_salaries):
        """Months under 17 working days do not count, and the baseline carries over."""
        salaries = make_salaries("E001", {1: 200000, 2: 150000, 3: 200000}, working_days=20)
        salaries[2].working_days = 5
        assert detect_fixed_wage_changes(salaries) == []


class TestSuijiKettei:
    """Revision evaluation."""

    def test_two_grade_change_is_eligible_and_wraps_year(self, make_salaries):
        """Grade 5 -> 7 from October applies from February next year."""
        salaries = make_salaries("E001", {10: 110000, 11: 110000, 12: 110000})
        result = calculate_suiji_kettei("E001", 10, salaries, None, 5, 2024)

        assert result.is_eligible
        assert result.new_grade == 7
        assert result.diff == 2
        assert (result.apply_start_year, result.apply_start_month) == (2025, 2)

    def test_one_grade_change_not_eligible(self, make_salaries):
        """A single-grade change is not a revision."""
        salaries = make_salaries("E001", {4: 104000, 5: 104000, 6: 104000})
        result = calculate_suiji_kettei("E001", 4, salaries, None, 5, 2024)

        assert not result.is_eligible
        assert result.diff == 1
        assert not result.is_indeterminate

    def test_window_past_december_is_indeterminate(self, make_salaries):
        """A November change cannot be evaluated within the year."""
        salaries = make_salaries("E001", {11: 300000, 12: 300000})
        result = calculate_suiji_kettei("E001", 11, salaries, None, 5, 2024)

        assert result.is_indeterminate
        assert not result.is_eligible
        assert result.new_grade == 0

    def test_missing_month_is_indeterminate(self, make_salaries):
        """Any month without pay leaves the revision undecided."""
        salaries = make_salaries("E001", {4: 300000, 6: 300000})
        result = calculate_suiji_kettei("E001", 4, salaries, None, 5, 2024)

        assert result.is_indeterminate

    def test_acquisition_blackout(self, make_salaries):
        """Changes within three months of hiring are not revisions."""
        salaries = make_salaries("E001", {6: 300000, 7: 300000, 8: 300000})
        result = calculate_suiji_kettei("E001", 6, salaries, None, 5, 2024, join_date=date(2024, 4, 1))

        assert result.diff >= 2
        assert not result.is_eligible

    def test_blackout_window(self):
        """The blackout covers the hire month and the three after it."""
        join = date(2024, 4, 15)
        assert is_within_acquisition_blackout(join, 4, 2024)
        assert is_within_acquisition_blackout(join, 7, 2024)
        assert not is_within_acquisition_blackout(join, 8, 2024)
        assert not is_within_acquisition_blackout(join, 7, 2025)


class TestRehabSuiji:
    """Revision after returning from leave."""

    def test_raise_after_return(self, make_employee, make_salaries):
        """A fixed-wage jump in the return month triggers a revision."""
        employee = make_employee(childcare_leave_start=date(2024, 1, 1), childcare_leave_end=date(2024, 5, 31))
        salaries = make_salaries("E001", {5: 100000, 6: 200000, 7: 200000, 8: 200000})
        results = check_rehab_suiji(employee, salaries, None, 5, 2024)

        assert len(results) == 1
        assert results[0].change_month == 6
        assert results[0].new_grade == 17
        assert results[0].apply_start_month == 10
        assert results[0].reasons[0] == "fixed wage changed after returning from leave"

    def test_return_in_another_year(self, make_employee, make_salaries):
        """Only returns within the year are considered."""
        employee = make_employee(childcare_leave_start=date(2023, 1, 1), childcare_leave_end=date(2023, 5, 31))
        salaries = make_salaries("E001", {5: 100000, 6: 200000, 7: 200000, 8: 200000})
        assert check_rehab_suiji(employee, salaries, None, 5, 2024) == []

    def test_no_leave(self, make_employee, make_salaries):
        """Employees without leave have no rehab revisions."""
        salaries = make_salaries("E001", {5: 100000, 6: 200000, 7: 200000, 8: 200000})
        assert check_rehab_suiji(make_employee(), salaries, None, 5, 2024) == []

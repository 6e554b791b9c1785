"""Tests for per-year income evaluation."""

import pytest

from lifecalc.sdk.income import (
    active_fraction,
    annual_income_for_year,
    base_annual_amount,
    income_range,
    is_salary_income,
    work_hours_for_year,
)
from lifecalc.sdk.schemas import Income, MonthYear


def make_income(**overrides) -> Income:
    defaults = {"id": "job", "name": "Job", "type": "salary", "amount": 10_000_000}
    defaults.update(overrides)
    return Income(**defaults)


class TestAnnualIncome:

    def test_year_zero_is_stated_amount(self):
        assert annual_income_for_year(make_income(), 0, 2025, default_growth=0.05) == 10_000_000

    def test_explicit_growth_compounds(self):
        income = make_income(expected_growth=0.03)
        assert annual_income_for_year(income, 2, 2027) == 10_609_000

    def test_salary_falls_back_to_default_growth(self):
        assert annual_income_for_year(make_income(), 1, 2026, default_growth=0.02) == 10_200_000

    def test_passive_and_variable_do_not_inherit_default_growth(self):
        for kind in ("passive", "variable"):
            income = make_income(type=kind)
            assert annual_income_for_year(income, 5, 2030, default_growth=0.02) == 10_000_000

    def test_hourly_rate_is_annualized(self):
        """$25/hour x 40 hours x 52 weeks = $52,000."""
        income = make_income(type="hourly", amount=2_500, hours_per_week=40)
        assert base_annual_amount(income) == 5_200_000
        assert annual_income_for_year(income, 0, 2025) == 5_200_000

    def test_end_date_prorates_and_stops(self):
        income = make_income(end_date=MonthYear(month=6, year=2026))
        assert annual_income_for_year(income, 0, 2025) == 10_000_000
        assert annual_income_for_year(income, 1, 2026) == 5_000_000
        assert annual_income_for_year(income, 2, 2027) == 0


class TestWorkHours:

    def test_full_time(self):
        assert work_hours_for_year(make_income(), 2025) == 2080

    def test_passive_has_no_hours(self):
        assert work_hours_for_year(make_income(type="passive"), 2025) == 0

    def test_hours_prorated_in_end_year(self):
        income = make_income(hours_per_week=20, end_date=MonthYear(month=3, year=2025))
        assert work_hours_for_year(income, 2025) == pytest.approx(260)
        assert work_hours_for_year(income, 2026) == 0


class TestHelpers:

    def test_active_fraction(self):
        end = MonthYear(month=9, year=2030)
        assert active_fraction(None, 2100) == 1.0
        assert active_fraction(end, 2029) == 1.0
        assert active_fraction(end, 2030) == 0.75
        assert active_fraction(end, 2031) == 0.0

    def test_income_range(self):
        income = make_income(type="variable", variability=0.2)
        assert income_range(income) == (8_000_000, 12_000_000)

    def test_salary_income_kinds(self):
        assert is_salary_income(make_income(type="hourly"))
        assert not is_salary_income(make_income(type="passive"))

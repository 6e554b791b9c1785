"""Tests for compound growth, employer match, and retirement readiness."""

import pytest

from lifecalc.sdk.growth import (
    calculate_asset_year,
    calculate_employer_match,
    calculate_future_value,
    calculate_present_value,
    calculate_property_appreciation,
    calculate_retirement_readiness,
    calculate_yearly_growth,
    project_asset_over_years,
    required_monthly_savings,
    years_to_target,
)
from lifecalc.sdk.schemas import Asset, InvalidInputError


def make_asset(**overrides) -> Asset:
    defaults = {
        "id": "401k",
        "name": "401(k)",
        "type": "retirement_pretax",
        "balance": 1_000_000,
        "monthly_contribution": 50_000,
    }
    defaults.update(overrides)
    return Asset(**defaults)


class TestYearlyGrowth:

    def test_zero_return_is_just_contributions(self):
        result = calculate_yearly_growth(0, 10_000, 0.0)
        assert result.ending_balance == 120_000
        assert result.contributions == 120_000
        assert result.growth == 0

    def test_monthly_compounding_beats_simple_interest(self):
        result = calculate_yearly_growth(10_000_000, 0, 0.12)
        assert result.ending_balance == pytest.approx(10_000_000 * 1.01 ** 12, abs=12)
        assert result.ending_balance > 11_200_000

    def test_negative_return_shrinks_balance(self):
        result = calculate_yearly_growth(100_000, 0, -0.5)
        assert 0 <= result.ending_balance < 100_000
        assert result.growth < 0

    def test_invalid_inputs(self):
        with pytest.raises(InvalidInputError):
            calculate_yearly_growth(-1, 0, 0.05)
        with pytest.raises(InvalidInputError):
            calculate_yearly_growth(0, -1, 0.05)
        with pytest.raises(InvalidInputError):
            calculate_yearly_growth(0, 0, -1.5)


class TestEmployerMatch:

    def test_match_capped_by_salary_fraction(self):
        """$500/mo on $100k salary, 50% match up to 6% -> $3,000."""
        assert calculate_employer_match(50_000, 10_000_000, 0.5, 0.06) == 300_000

    def test_contribution_below_cap_fully_matched(self):
        assert calculate_employer_match(25_000, 10_000_000, 1.0, 0.06) == 300_000

    def test_no_salary_no_match(self):
        assert calculate_employer_match(50_000, 0, 0.5, 0.06) == 0


class TestAssetYear:

    def test_match_deposits_sum_exactly(self):
        asset = make_asset(balance=0, employer_match=0.5, match_limit=0.06, expected_return=0.0)
        result = calculate_asset_year(asset, 10_000_001, 0.0)
        assert result.employer_match == calculate_employer_match(50_000, 10_000_001, 0.5, 0.06)
        assert result.ending_balance == result.contributions + result.employer_match
        assert result.growth == 0

    def test_starting_balance_override(self):
        asset = make_asset()
        result = calculate_asset_year(asset, 0, 0.05, starting_balance=5_000_000)
        assert result.starting_balance == 5_000_000
        assert result.ending_balance == result.starting_balance + result.total_contributions + result.growth

    def test_project_over_years(self):
        projection = project_asset_over_years(0, 10_000, 0.0, 5)
        assert projection.yearly_balances == [0, 120_000, 240_000, 360_000, 480_000, 600_000]
        assert projection.total_contributions == 600_000
        assert projection.total_growth == 0


class TestPresentFutureValue:

    def test_future_value(self):
        assert calculate_future_value(100_000, 0.1, 2) == pytest.approx(121_000)

    @pytest.mark.parametrize("rate", [-0.5, -0.2, 0.0, 0.03, 0.07, 0.25, 0.5])
    @pytest.mark.parametrize("years", [0, 1, 10, 30, 75])
    def test_round_trip_recovers_value(self, rate, years):
        value = 12_345_678
        future = calculate_future_value(value, rate, years)
        assert abs(calculate_present_value(future, rate, years) - value) <= 100

    def test_present_value_rejects_total_loss(self):
        with pytest.raises(InvalidInputError):
            calculate_present_value(100, -1.0, 1)


class TestTargets:

    def test_already_at_target(self):
        assert years_to_target(1_000_000, 0, 0.05, 500_000) == 0

    def test_reaches_target(self):
        assert years_to_target(0, 10_000, 0.0, 360_000) == 3

    def test_unreachable_target(self):
        assert years_to_target(0, 0, 0.05, 100, max_years=50) is None

    def test_required_savings_never_negative(self):
        assert required_monthly_savings(10_000_000, 5_000_000, 0.05, 10) == 0

    def test_required_savings_zero_return(self):
        assert required_monthly_savings(0, 1_200_000, 0.0, 1) == 100_000

    def test_required_savings_reaches_target(self):
        monthly = required_monthly_savings(0, 100_000_000, 0.06, 20)
        projection = project_asset_over_years(0, monthly, 0.06, 20)
        assert projection.final_balance == pytest.approx(100_000_000, rel=0.01)


class TestRetirementReadiness:

    def test_ready(self):
        result = calculate_retirement_readiness(200_000_000, 8_000_000, 0.04)
        assert result.required_nest_egg == 200_000_000
        assert result.is_ready
        assert result.percentage_complete == 1.0
        assert result.sustainable_withdrawal == 8_000_000
        assert result.monthly_income == round(8_000_000 / 12)

    def test_partial(self):
        result = calculate_retirement_readiness(50_000_000, 8_000_000, 0.04)
        assert not result.is_ready
        assert result.percentage_complete == 0.25

    def test_zero_withdrawal_rate_never_ready(self):
        result = calculate_retirement_readiness(500_000_000, 8_000_000, 0.0)
        assert result.required_nest_egg == 0
        assert not result.is_ready
        assert result.percentage_complete == 0.0

    def test_no_income_needed(self):
        result = calculate_retirement_readiness(0, 0, 0.04)
        assert result.is_ready
        assert result.percentage_complete == 1.0


class TestPropertyAppreciation:

    def test_appreciation(self):
        future, gain = calculate_property_appreciation(40_000_000, 0.03, 1)
        assert future == 41_200_000
        assert gain == 1_200_000

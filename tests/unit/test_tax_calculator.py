"""Unit tests for federal, state, and FICA tax calculation.

Amounts are cents. Expected values are worked by hand from the 2024 tables.
"""

import pytest

from lifecalc.sdk.schemas import Assumptions, InvalidInputError
from lifecalc.sdk.taxes import (
    calculate_federal_tax,
    calculate_fica,
    calculate_retirement_tax_savings,
    calculate_state_tax,
    calculate_total_tax,
    distance_to_next_bracket,
    estimate_future_tax,
    get_additional_medicare_threshold,
    get_deductible_limit,
    get_marginal_bracket,
    get_next_bracket,
    get_standard_deduction,
    load_tax_rules,
)

RULES_2024 = load_tax_rules(2024)


class TestFederalTax:

    def test_single_100k(self):
        """$100k single: taxable $85,400 -> 1,160 + 4,266 + 8,415 = $13,841"""
        result = calculate_federal_tax(10_000_000, "single", rules=RULES_2024)
        assert result.taxable_income == 8_540_000
        assert result.tax == 1_384_100
        assert result.marginal_rate == 0.22
        assert result.effective_rate == pytest.approx(0.13841)

    def test_pretax_contribution_reduces_taxable_income(self):
        result = calculate_federal_tax(10_000_000, "single", 1_000_000, rules=RULES_2024)
        assert result.taxable_income == 7_540_000
        assert result.tax == 1_164_100

    def test_income_below_standard_deduction(self):
        result = calculate_federal_tax(1_000_000, "single", rules=RULES_2024)
        assert result.tax == 0
        assert result.taxable_income == 0

    def test_zero_taxable_income_has_zero_marginal_rate(self):
        """No dollar is taxed, so there is no marginal bracket."""
        result = calculate_federal_tax(0, "married_joint", rules=RULES_2024)
        assert result.marginal_rate == 0.0
        assert result.effective_rate == 0.0

    def test_married_joint_uses_wider_brackets(self):
        single = calculate_federal_tax(20_000_000, "single", rules=RULES_2024)
        joint = calculate_federal_tax(20_000_000, "married_joint", rules=RULES_2024)
        assert joint.tax < single.tax

    def test_negative_income_rejected(self):
        with pytest.raises(InvalidInputError) as exc:
            calculate_federal_tax(-1, "single", rules=RULES_2024)
        assert exc.value.field == "gross_income"

    def test_year_argument_loads_table(self):
        by_year = calculate_federal_tax(10_000_000, "single", year=2024)
        by_rules = calculate_federal_tax(10_000_000, "single", rules=RULES_2024)
        assert by_year == by_rules


class TestBracketHelpers:

    def test_standard_deduction(self):
        assert get_standard_deduction("single", rules=RULES_2024) == 1_460_000
        assert get_standard_deduction("married_joint", rules=RULES_2024) == 2_920_000

    def test_marginal_bracket(self):
        bracket = get_marginal_bracket(5_000_000, "single", rules=RULES_2024)
        assert bracket.rate == 0.22
        assert bracket.min == 4_715_000
        assert get_marginal_bracket(0, "single", rules=RULES_2024) is None

    def test_top_bracket_is_open_ended(self):
        bracket = get_marginal_bracket(100_000_000, "single", rules=RULES_2024)
        assert bracket.rate == 0.37
        assert bracket.max is None
        assert get_next_bracket(100_000_000, "single", rules=RULES_2024) is None
        assert distance_to_next_bracket(100_000_000, "single", rules=RULES_2024) is None

    def test_next_bracket_and_distance(self):
        assert get_next_bracket(5_000_000, "single", rules=RULES_2024).rate == 0.24
        assert distance_to_next_bracket(5_000_000, "single", rules=RULES_2024) == 10_052_500 - 5_000_000

    def test_additional_medicare_threshold(self):
        assert get_additional_medicare_threshold("single", rules=RULES_2024) == 20_000_000
        assert get_additional_medicare_threshold("married_joint", rules=RULES_2024) == 25_000_000


class TestDeductibleLimits:

    def test_workplace_plan_with_catch_up(self):
        assert get_deductible_limit("retirement_pretax", 49, "single", rules=RULES_2024) == 2_300_000
        assert get_deductible_limit("retirement_pretax", 50, "single", rules=RULES_2024) == 3_050_000

    def test_hsa_by_filing_status(self):
        assert get_deductible_limit("hsa", 40, "single", rules=RULES_2024) == 415_000
        assert get_deductible_limit("hsa", 40, "married_joint", rules=RULES_2024) == 830_000

    def test_follows_year(self):
        assert get_deductible_limit("retirement_pretax", 40, "single", year=2025) == 2_350_000

    def test_roth_has_no_deduction(self):
        with pytest.raises(InvalidInputError) as exc:
            get_deductible_limit("retirement_roth", 40, "single", rules=RULES_2024)
        assert exc.value.field == "account_type"


class TestFica:

    def test_100k_single(self):
        """6.2% and 1.45% of $100,000."""
        result = calculate_fica(10_000_000, "single", rules=RULES_2024)
        assert result.social_security == 620_000
        assert result.medicare == 145_000
        assert result.total == 765_000

    def test_250k_single_pays_additional_medicare(self):
        """1.45% of $250,000 plus 0.9% of the $50,000 over $200,000."""
        result = calculate_fica(25_000_000, "single", rules=RULES_2024)
        assert result.medicare == 407_500

    def test_social_security_capped_at_wage_base(self):
        result = calculate_fica(25_000_000, "single", rules=RULES_2024)
        assert result.social_security == round(16_860_000 * 0.062)

    def test_wage_base_follows_year(self):
        rules_2025 = load_tax_rules(2025)
        result = calculate_fica(50_000_000, "single", rules=rules_2025)
        assert result.social_security == round(17_610_000 * 0.062)

    def test_zero_income(self):
        result = calculate_fica(0, "single", rules=RULES_2024)
        assert result.total == 0


class TestStateTax:

    @pytest.mark.parametrize("state", ["TX", "WA", "FL", "NV", "tx"])
    def test_no_income_tax_states_return_zero(self, state):
        result = calculate_state_tax(50_000_000, state)
        assert result.tax == 0
        assert result.effective_rate == 0.0

    def test_flat_state(self):
        result = calculate_state_tax(10_000_000, "IL")
        assert result.tax == 495_000

    def test_progressive_state_uses_top_rate(self):
        """CA: ($100,000 - $5,456) x 13.3%"""
        result = calculate_state_tax(10_000_000, "CA")
        assert result.taxable_income == 9_454_400
        assert result.tax == round(9_454_400 * 0.133)

    def test_unknown_state_rejected(self):
        with pytest.raises(InvalidInputError) as exc:
            calculate_state_tax(10_000_000, "ZZ")
        assert exc.value.field == "state"


class TestTotalTax:

    def test_components_add_up(self):
        result = calculate_total_tax(10_000_000, "single", "TX", rules=RULES_2024)
        assert result.federal_tax == 1_384_100
        assert result.state_tax == 0
        assert result.total_fica == 765_000
        assert result.total_tax == 2_149_100
        assert result.net_income == 10_000_000 - 2_149_100
        assert result.effective_rate == pytest.approx(0.21491)
        assert result.marginal_rate == 0.22

    def test_zero_income_never_divides_by_zero(self):
        result = calculate_total_tax(0, "single", "CA", rules=RULES_2024)
        assert result.total_tax == 0
        assert result.net_income == 0
        assert result.effective_rate == 0.0
        assert result.marginal_rate == 0.0


class TestRetirementTaxSavings:

    @pytest.mark.parametrize("income", [0, 3_000_000, 10_000_000, 75_000_000])
    @pytest.mark.parametrize("status", ["single", "married_joint", "married_separate", "head_of_household"])
    @pytest.mark.parametrize("state", ["CA", "TX", "IL", "NY"])
    def test_zero_contribution_saves_nothing(self, income, status, state):
        assert calculate_retirement_tax_savings(income, 0, status, state, rules=RULES_2024) == 0

    def test_contribution_saves_marginal_rate(self):
        """$10k at the 22% bracket in a no-tax state; FICA is unchanged."""
        savings = calculate_retirement_tax_savings(10_000_000, 1_000_000, "single", "TX", rules=RULES_2024)
        assert savings == 220_000


class TestEstimateFutureTax:

    def test_zero_years_matches_current_table(self):
        assumptions = Assumptions(state="TX", tax_filing_status="single")
        estimate = estimate_future_tax(10_000_000, 0, assumptions, rules=RULES_2024)
        current = calculate_total_tax(10_000_000, "single", "TX", rules=RULES_2024)
        assert estimate == current

    def test_inflated_income_taxed_like_todays_income(self):
        """Income that only kept pace with inflation keeps the same effective rate."""
        assumptions = Assumptions(state="TX", inflation_rate=0.03)
        future_income = round(10_000_000 * 1.03 ** 10)
        estimate = estimate_future_tax(future_income, 10, assumptions, rules=RULES_2024)
        current = calculate_total_tax(10_000_000, "single", "TX", rules=RULES_2024)
        assert estimate.gross_income == future_income
        assert estimate.effective_rate == pytest.approx(current.effective_rate, abs=1e-4)
        assert estimate.net_income == future_income - estimate.total_tax

    def test_negative_years_rejected(self):
        with pytest.raises(InvalidInputError):
            estimate_future_tax(10_000_000, -1, Assumptions(), rules=RULES_2024)

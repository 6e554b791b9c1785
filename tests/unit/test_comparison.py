"""Tests for scenario comparison and change application."""

from datetime import datetime, timezone

import pytest
from pydantic import TypeAdapter, ValidationError

from lifecalc.sdk.comparison import (
    MINIMAL_DIFFERENCE,
    AssetContributionChange,
    AssumptionChange,
    Change,
    DebtPaymentChange,
    IncomeAmountChange,
    RetirementDelta,
    YearDelta,
    apply_changes,
    calculate_cumulative_impact,
    calculate_retirement_delta,
    compare_trajectories,
    find_break_even_year,
    find_crossover_year,
    find_max_divergence_year,
    generate_key_insight,
    get_comparison_at_year,
)
from lifecalc.sdk.projection import generate_quick_trajectory, generate_trajectory
from lifecalc.sdk.schemas import InvalidInputError, Profile

PINNED = datetime(2025, 1, 1, tzinfo=timezone.utc)


def make_profile(**assumptions) -> Profile:
    settings = {"current_age": 35, "life_expectancy": 50, "state": "TX", "tax_year": 2025}
    settings.update(assumptions)
    return Profile(
        id="base",
        name="Baseline",
        income=[{"id": "job", "name": "Job", "type": "salary", "amount": 9_000_000}],
        debts=[{"id": "car", "name": "Car", "type": "auto", "principal": 3_000_000,
                "interest_rate": 0.08, "term_months": 72}],
        assets=[{"id": "brokerage", "name": "Brokerage", "type": "investment", "balance": 2_000_000,
                 "monthly_contribution": 50_000}],
        assumptions=settings,
    )


def make_delta(year, net_worth_delta, income_delta=0, taxes_delta=0) -> YearDelta:
    return YearDelta(
        year=year,
        age=year - 1990,
        net_worth_delta=net_worth_delta,
        income_delta=income_delta,
        taxes_delta=taxes_delta,
        debt_delta=0,
        assets_delta=net_worth_delta,
    )


def with_retirement(trajectory, year):
    summary = trajectory.summary.model_copy(update={"retirement_year": year})
    return trajectory.model_copy(update={"summary": summary})


class TestApplyChanges:

    def test_applies_entity_and_assumption_changes(self):
        profile = make_profile()
        changed = apply_changes(profile, [
            IncomeAmountChange(entity_id="job", old=9_000_000, new=12_000_000),
            DebtPaymentChange(entity_id="car", old=0, new=100_000),
            AssetContributionChange(entity_id="brokerage", old=50_000, new=0),
            AssumptionChange(assumption="market_return", old=0.07, new=0.05),
        ])
        assert changed.income[0].amount == 12_000_000
        assert changed.debts[0].actual_payment == 100_000
        assert changed.assets[0].monthly_contribution == 0
        assert changed.assumptions.market_return == 0.05

    def test_original_untouched(self):
        profile = make_profile()
        apply_changes(profile, [IncomeAmountChange(entity_id="job", old=9_000_000, new=1)])
        assert profile.income[0].amount == 9_000_000

    def test_unknown_entity(self):
        with pytest.raises(InvalidInputError) as exc:
            apply_changes(make_profile(), [DebtPaymentChange(entity_id="boat", old=0, new=1)])
        assert exc.value.field == "entity_id"

    def test_invalid_result_rejected(self):
        with pytest.raises(ValidationError):
            apply_changes(make_profile(), [AssumptionChange(assumption="market_return", old=0.07, new=5.0)])

    def test_change_parsed_by_discriminator(self):
        adapter = TypeAdapter(Change)
        change = adapter.validate_python({"field": "debt_payment", "entity_id": "car", "old": 0, "new": 5})
        assert isinstance(change, DebtPaymentChange)

        with pytest.raises(ValidationError):
            adapter.validate_python({"field": "favorite_color", "entity_id": "car", "old": 0, "new": 5})


class TestCompareTrajectories:

    def test_identical_trajectories(self):
        trajectory = generate_trajectory(make_profile(), generated_at=PINNED)
        comparison = compare_trajectories(trajectory, trajectory, created_at=PINNED)

        assert len(comparison.deltas) == len(trajectory.years)
        for delta in comparison.deltas:
            assert delta.net_worth_delta == 0
            assert delta.income_delta == 0
            assert delta.taxes_delta == 0
        summary = comparison.summary
        assert summary.lifetime_interest_delta == 0
        assert summary.net_worth_at_end_delta == 0
        assert summary.work_hours_delta == 0
        assert summary.key_insight == MINIMAL_DIFFERENCE
        assert comparison.created_at == PINNED

    def test_paying_debt_faster_saves_interest(self):
        baseline_profile = make_profile()
        changes = [DebtPaymentChange(entity_id="car", old=0, new=150_000, description="Pay car faster")]
        alternate_profile = apply_changes(baseline_profile, changes)

        comparison = compare_trajectories(
            generate_trajectory(baseline_profile),
            generate_trajectory(alternate_profile),
            changes=changes,
            name="Pay car faster",
        )
        assert comparison.summary.lifetime_interest_delta < 0
        assert comparison.changes == changes
        assert comparison.name == "Pay car faster"

    def test_deltas_are_alternate_minus_baseline(self):
        baseline = generate_trajectory(make_profile())
        alternate = generate_trajectory(apply_changes(
            make_profile(), [IncomeAmountChange(entity_id="job", old=9_000_000, new=10_000_000)],
        ))
        comparison = compare_trajectories(baseline, alternate)
        first = comparison.deltas[0]
        assert first.income_delta == 1_000_000
        assert first.net_worth_delta == alternate.years[0].net_worth - baseline.years[0].net_worth
        assert first.taxes_delta > 0

    def test_different_starts_rejected(self):
        baseline = generate_quick_trajectory(make_profile(), years=3)
        alternate = generate_quick_trajectory(make_profile(start_year=2030), years=3)
        with pytest.raises(InvalidInputError):
            compare_trajectories(baseline, alternate)

    def test_only_overlapping_years_compared(self):
        baseline = generate_trajectory(make_profile())
        alternate = generate_quick_trajectory(make_profile(), years=5)
        comparison = compare_trajectories(baseline, alternate)
        assert [d.year for d in comparison.deltas] == [2025, 2026, 2027, 2028, 2029]

    def test_id_is_deterministic(self):
        trajectory = generate_quick_trajectory(make_profile(), years=2)
        first = compare_trajectories(trajectory, trajectory, name="Same")
        second = compare_trajectories(trajectory, trajectory, name="Same")
        other = compare_trajectories(trajectory, trajectory, name="Other")
        assert first.id == second.id
        assert first.id != other.id
        assert len(first.id) == 8

    def test_comparison_at_year(self):
        trajectory = generate_quick_trajectory(make_profile(), years=3)
        comparison = compare_trajectories(trajectory, trajectory)
        snapshot = get_comparison_at_year(comparison, 2026)
        assert snapshot.baseline.year == 2026
        assert snapshot.delta.net_worth_delta == 0
        missing = get_comparison_at_year(comparison, 1999)
        assert missing.baseline is None and missing.alternate is None and missing.delta is None


class TestRetirementDelta:

    def setup_method(self):
        self.trajectory = generate_quick_trajectory(make_profile(), years=2)

    def test_both_achieved(self):
        delta = calculate_retirement_delta(
            with_retirement(self.trajectory, 2040), with_retirement(self.trajectory, 2038),
        )
        assert delta == RetirementDelta(kind="both_achieved", months_earlier=24)

    def test_enabled_and_disabled(self):
        ready = with_retirement(self.trajectory, 2040)
        never = with_retirement(self.trajectory, None)
        assert calculate_retirement_delta(never, ready).kind == "enabled_by_change"
        assert calculate_retirement_delta(ready, never).kind == "disabled_by_change"
        assert calculate_retirement_delta(never, never).kind == "neither_achieved"
        assert calculate_retirement_delta(never, never).months_earlier is None


class TestKeyInsight:

    def test_minimal(self):
        none = RetirementDelta(kind="neither_achieved")
        assert generate_key_insight(none, 9_999_999, 99_999, 2079) == MINIMAL_DIFFERENCE

    def test_combined_sentence(self):
        retirement = RetirementDelta(kind="both_achieved", months_earlier=24)
        insight = generate_key_insight(retirement, 15_000_000, -500_000, -4160)
        assert insight == (
            "Retire 2.0 years earlier. $150K more net worth at end. "
            "Save $5K in interest. Work 2.0 fewer years"
        )

    def test_negative_directions(self):
        retirement = RetirementDelta(kind="both_achieved", months_earlier=-12)
        insight = generate_key_insight(retirement, -20_000_000, 300_000, 3120)
        assert insight == (
            "Retire 1.0 years later. $200K less net worth at end. "
            "Pay $3K more in interest. Work 1.5 more years"
        )

    def test_retirement_enabled_or_prevented(self):
        assert generate_key_insight(RetirementDelta(kind="enabled_by_change"), 0, 0, 0) == (
            "This change enables retirement"
        )
        assert generate_key_insight(RetirementDelta(kind="disabled_by_change"), 0, 0, 0) == (
            "This change prevents retirement"
        )


class TestDeltaAnalysis:

    def test_max_divergence(self):
        deltas = [make_delta(2025, 100), make_delta(2026, -500), make_delta(2027, 500)]
        assert find_max_divergence_year(deltas).year == 2026
        assert find_max_divergence_year([]) is None

    def test_crossover(self):
        deltas = [make_delta(2025, -300), make_delta(2026, -100), make_delta(2027, 200)]
        assert find_crossover_year(deltas) == 2027
        assert find_crossover_year([make_delta(2025, 1), make_delta(2026, 2)]) is None

    def test_break_even(self):
        deltas = [make_delta(2025, -300), make_delta(2026, 100), make_delta(2027, 250)]
        assert find_break_even_year(deltas) == 2027
        assert find_break_even_year([make_delta(2025, -1)]) is None

    def test_cumulative_impact(self):
        deltas = [
            make_delta(2025, 100, income_delta=10, taxes_delta=1),
            make_delta(2026, 200, income_delta=20, taxes_delta=2),
            make_delta(2027, 301, income_delta=30, taxes_delta=3),
        ]
        impact = calculate_cumulative_impact(deltas, 2026, 2027)
        assert impact.net_worth_delta == 301
        assert impact.income_delta == 50
        assert impact.taxes_delta == 5
        assert impact.average_yearly_benefit == 151

    def test_cumulative_impact_empty_range(self):
        impact = calculate_cumulative_impact([make_delta(2025, 100)], 2030, 2040)
        assert impact.net_worth_delta == 0
        assert impact.average_yearly_benefit == 0

"""Scenario comparison.

Diffs two trajectories year by year and summarizes the lifetime impact of a
decision. All deltas are ``alternate - baseline``.
"""

import hashlib
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Annotated, Iterable, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .money import format_cents, round_cents
from .schemas import InvalidInputError, Profile, Trajectory, TrajectoryYear

logger = logging.getLogger(__name__)

HOURS_PER_WORK_YEAR = 2080

# Materiality thresholds for the key insight (cents / hours)
NET_WORTH_INSIGHT_THRESHOLD = 10_000_000
INTEREST_INSIGHT_THRESHOLD = 100_000
WORK_HOURS_INSIGHT_THRESHOLD = HOURS_PER_WORK_YEAR

MINIMAL_DIFFERENCE = "Minimal difference between scenarios"


# =============================================================================
# Changes
# =============================================================================


class _ChangeBase(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    description: str = ""


class IncomeAmountChange(_ChangeBase):
    field: Literal["income_amount"] = "income_amount"
    entity_id: str
    old: int
    new: int = Field(..., ge=0)


class IncomeGrowthChange(_ChangeBase):
    field: Literal["income_growth"] = "income_growth"
    entity_id: str
    old: Optional[float]
    new: Optional[float]


class DebtRateChange(_ChangeBase):
    field: Literal["debt_rate"] = "debt_rate"
    entity_id: str
    old: float
    new: float = Field(..., ge=0, le=1)


class DebtPaymentChange(_ChangeBase):
    """Changes the monthly amount actually paid."""
    field: Literal["debt_payment"] = "debt_payment"
    entity_id: str
    old: int
    new: int = Field(..., ge=0)


class AssetContributionChange(_ChangeBase):
    field: Literal["asset_contribution"] = "asset_contribution"
    entity_id: str
    old: int
    new: int = Field(..., ge=0)


class AssetReturnChange(_ChangeBase):
    field: Literal["asset_return"] = "asset_return"
    entity_id: str
    old: Optional[float]
    new: Optional[float]


AssumptionName = Literal[
    "inflation_rate",
    "market_return",
    "home_appreciation",
    "salary_growth",
    "retirement_withdrawal_rate",
    "income_replacement_ratio",
]


class AssumptionChange(_ChangeBase):
    field: Literal["assumption"] = "assumption"
    assumption: AssumptionName
    old: float
    new: float


Change = Annotated[
    Union[
        IncomeAmountChange,
        IncomeGrowthChange,
        DebtRateChange,
        DebtPaymentChange,
        AssetContributionChange,
        AssetReturnChange,
        AssumptionChange,
    ],
    Field(discriminator="field"),
]

# change.field -> (profile collection, entity attribute)
_ENTITY_FIELDS = {
    "income_amount": ("income", "amount"),
    "income_growth": ("income", "expected_growth"),
    "debt_rate": ("debts", "interest_rate"),
    "debt_payment": ("debts", "actual_payment"),
    "asset_contribution": ("assets", "monthly_contribution"),
    "asset_return": ("assets", "expected_return"),
}


def apply_changes(profile: Profile, changes: Iterable[Change]) -> Profile:
    """Return a new profile with the changes applied (the input is untouched).

    Raises:
        InvalidInputError: a change names an entity the profile does not have
        pydantic.ValidationError: the changed profile is invalid
    """
    data = profile.model_dump()
    for change in changes:
        if isinstance(change, AssumptionChange):
            data["assumptions"][change.assumption] = change.new
            continue

        collection, attribute = _ENTITY_FIELDS[change.field]
        entity = next((e for e in data[collection] if e["id"] == change.entity_id), None)
        if entity is None:
            raise InvalidInputError(
                "entity_id", f"no {collection} entry with id '{change.entity_id}'"
            )
        entity[attribute] = change.new
    return Profile.model_validate(data)


# =============================================================================
# Comparison results
# =============================================================================


RetirementDeltaKind = Literal[
    "both_achieved", "enabled_by_change", "disabled_by_change", "neither_achieved"
]


class RetirementDelta(BaseModel):
    """How the retirement date moves between scenarios.

    ``months_earlier`` is set only for ``both_achieved``; positive means the
    alternate scenario retires earlier.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: RetirementDeltaKind
    months_earlier: Optional[int] = None


class YearDelta(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    year: int
    age: int
    net_worth_delta: int
    income_delta: int
    taxes_delta: int
    debt_delta: int
    assets_delta: int


class ComparisonSummary(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    retirement: RetirementDelta
    lifetime_interest_delta: int
    lifetime_taxes_delta: int
    net_worth_at_retirement_delta: int
    net_worth_at_end_delta: int
    work_hours_delta: float
    key_insight: str


class Comparison(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    name: str
    created_at: datetime
    baseline: Trajectory
    alternate: Trajectory
    changes: List[Change] = Field(default_factory=list)
    deltas: List[YearDelta]
    summary: ComparisonSummary


@dataclass(frozen=True)
class CumulativeImpact:
    """Impact over a year range. Net worth is the range's final delta, not a sum."""
    net_worth_delta: int
    income_delta: int
    taxes_delta: int
    average_yearly_benefit: int


@dataclass(frozen=True)
class YearComparison:
    baseline: Optional[TrajectoryYear]
    alternate: Optional[TrajectoryYear]
    delta: Optional[YearDelta]


# =============================================================================
# Engine
# =============================================================================


def calculate_year_delta(baseline: TrajectoryYear, alternate: TrajectoryYear) -> YearDelta:
    return YearDelta(
        year=alternate.year,
        age=alternate.age,
        net_worth_delta=alternate.net_worth - baseline.net_worth,
        income_delta=alternate.gross_income - baseline.gross_income,
        taxes_delta=alternate.total_tax - baseline.total_tax,
        debt_delta=alternate.total_debt - baseline.total_debt,
        assets_delta=alternate.total_assets - baseline.total_assets,
    )


def calculate_retirement_delta(baseline: Trajectory, alternate: Trajectory) -> RetirementDelta:
    base_year = baseline.summary.retirement_year
    alt_year = alternate.summary.retirement_year
    if base_year is not None and alt_year is not None:
        return RetirementDelta(kind="both_achieved", months_earlier=(base_year - alt_year) * 12)
    if alt_year is not None:
        return RetirementDelta(kind="enabled_by_change")
    if base_year is not None:
        return RetirementDelta(kind="disabled_by_change")
    return RetirementDelta(kind="neither_achieved")


def _format_years(hours: float) -> str:
    return f"{abs(hours) / HOURS_PER_WORK_YEAR:.1f}"


def generate_key_insight(
    retirement: RetirementDelta,
    net_worth_at_end_delta: int,
    lifetime_interest_delta: int,
    work_hours_delta: float,
) -> str:
    """One sentence built from whichever deltas are material."""
    insights = []

    if retirement.kind == "enabled_by_change":
        insights.append("This change enables retirement")
    elif retirement.kind == "disabled_by_change":
        insights.append("This change prevents retirement")
    elif retirement.kind == "both_achieved" and retirement.months_earlier:
        years = abs(retirement.months_earlier) / 12
        direction = "earlier" if retirement.months_earlier > 0 else "later"
        insights.append(f"Retire {years:.1f} years {direction}")

    if abs(net_worth_at_end_delta) >= NET_WORTH_INSIGHT_THRESHOLD:
        direction = "more" if net_worth_at_end_delta > 0 else "less"
        insights.append(
            f"{format_cents(abs(net_worth_at_end_delta), compact=True)} {direction} net worth at end"
        )

    if lifetime_interest_delta <= -INTEREST_INSIGHT_THRESHOLD:
        insights.append(f"Save {format_cents(-lifetime_interest_delta, compact=True)} in interest")
    elif lifetime_interest_delta >= INTEREST_INSIGHT_THRESHOLD:
        insights.append(f"Pay {format_cents(lifetime_interest_delta, compact=True)} more in interest")

    if abs(work_hours_delta) >= WORK_HOURS_INSIGHT_THRESHOLD:
        direction = "fewer" if work_hours_delta < 0 else "more"
        insights.append(f"Work {_format_years(work_hours_delta)} {direction} years")

    if not insights:
        return MINIMAL_DIFFERENCE
    return ". ".join(insights)


def _comparison_id(baseline: Trajectory, alternate: Trajectory, name: str) -> str:
    key = f"{baseline.profile_id}:{alternate.profile_id}:{name}"
    return hashlib.sha1(key.encode("utf-8")).hexdigest()[:8]


def compare_trajectories(
    baseline: Trajectory,
    alternate: Trajectory,
    changes: Iterable[Change] = (),
    name: str = "Comparison",
    created_at: Optional[datetime] = None,
) -> Comparison:
    """Compare two trajectories over their overlapping years.

    Raises:
        InvalidInputError: the trajectories start at different years or ages
    """
    if baseline.years and alternate.years:
        first_base, first_alt = baseline.years[0], alternate.years[0]
        if (first_base.year, first_base.age) != (first_alt.year, first_alt.age):
            raise InvalidInputError(
                "alternate",
                f"starts at {first_alt.year} (age {first_alt.age}), baseline starts at "
                f"{first_base.year} (age {first_base.age})",
            )

    baseline_by_year = {y.year: y for y in baseline.years}
    deltas = [
        calculate_year_delta(baseline_by_year[y.year], y)
        for y in alternate.years
        if y.year in baseline_by_year
    ]

    base, alt = baseline.summary, alternate.summary
    retirement = calculate_retirement_delta(baseline, alternate)
    interest_delta = alt.total_lifetime_interest - base.total_lifetime_interest
    end_delta = alt.net_worth_at_end - base.net_worth_at_end
    hours_delta = alt.total_lifetime_work_hours - base.total_lifetime_work_hours

    summary = ComparisonSummary(
        retirement=retirement,
        lifetime_interest_delta=interest_delta,
        lifetime_taxes_delta=alt.total_lifetime_taxes - base.total_lifetime_taxes,
        net_worth_at_retirement_delta=alt.net_worth_at_retirement - base.net_worth_at_retirement,
        net_worth_at_end_delta=end_delta,
        work_hours_delta=hours_delta,
        key_insight=generate_key_insight(retirement, end_delta, interest_delta, hours_delta),
    )
    logger.info(f"{name}: {len(deltas)} overlapping years; {summary.key_insight}")

    return Comparison(
        id=_comparison_id(baseline, alternate, name),
        name=name,
        created_at=created_at or datetime.now(timezone.utc),
        baseline=baseline,
        alternate=alternate,
        changes=list(changes),
        deltas=deltas,
        summary=summary,
    )


def find_max_divergence_year(deltas: List[YearDelta]) -> Optional[YearDelta]:
    """Delta with the largest absolute net worth difference (earliest on ties)."""
    if not deltas:
        return None
    return max(deltas, key=lambda d: abs(d.net_worth_delta))


def find_crossover_year(deltas: List[YearDelta]) -> Optional[int]:
    """First year the net worth delta changes sign."""
    for prev, curr in zip(deltas, deltas[1:]):
        if (prev.net_worth_delta <= 0 < curr.net_worth_delta) or (
            prev.net_worth_delta >= 0 > curr.net_worth_delta
        ):
            return curr.year
    return None


def find_break_even_year(deltas: List[YearDelta]) -> Optional[int]:
    """First year the cumulative net worth delta turns positive."""
    cumulative = 0
    for delta in deltas:
        cumulative += delta.net_worth_delta
        if cumulative > 0:
            return delta.year
    return None


def calculate_cumulative_impact(deltas: List[YearDelta], start_year: int, end_year: int) -> CumulativeImpact:
    relevant = [d for d in deltas if start_year <= d.year <= end_year]
    if not relevant:
        return CumulativeImpact(0, 0, 0, 0)

    last = relevant[-1]
    return CumulativeImpact(
        net_worth_delta=last.net_worth_delta,
        income_delta=sum(d.income_delta for d in relevant),
        taxes_delta=sum(d.taxes_delta for d in relevant),
        average_yearly_benefit=round_cents(last.net_worth_delta / len(relevant)),
    )


def get_comparison_at_year(comparison: Comparison, year: int) -> YearComparison:
    return YearComparison(
        baseline=next((y for y in comparison.baseline.years if y.year == year), None),
        alternate=next((y for y in comparison.alternate.years if y.year == year), None),
        delta=next((d for d in comparison.deltas if d.year == year), None),
    )

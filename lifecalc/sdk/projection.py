"""Multi-year trajectory projection.

Turns a Profile into a Trajectory: one TrajectoryYear per simulated year from
the current age up to life expectancy, plus detected milestones and a
summary.

The projection is a fold over immutable year states. Each simulated year:

1. Evaluate every income source (growth applied, zero past its end date)
2. Compute total tax, with pre-tax retirement contributions deducted
3. Advance each debt 12 months from the previous year's ending balance
4. Grow each asset, including employer match keyed off this year's salary
5. Aggregate totals, net worth, cash flow, and savings rate
6. Detect milestones against the previous year's state

The engine is a pure function of the profile: the only clock-derived value
is ``Trajectory.generated_at``, which callers can pin.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, FrozenSet, List, Optional, Tuple, Union

from .amortization import DebtYearResult, calculate_debt_year, calculate_ltv, should_pay_pmi
from .growth import calculate_asset_year, calculate_retirement_readiness
from .income import active_fraction, annual_income_for_year, is_salary_income, work_hours_for_year
from .money import format_cents, round_cents
from .schemas import (
    AssetState,
    Assumptions,
    DebtState,
    Goal,
    InvalidInputError,
    Milestone,
    Profile,
    Trajectory,
    TrajectorySummary,
    TrajectoryYear,
)
from .taxes import (
    TotalTaxResult,
    calculate_total_tax,
    estimate_future_tax,
    get_deductible_limit,
    latest_tax_year,
    load_tax_rules,
)

logger = logging.getLogger(__name__)

MONTHS_PER_YEAR = 12
DEFAULT_QUICK_YEARS = 10

# Net worth thresholds in cents: $100K, $250K, $500K, $1M, $2.5M, $5M, $10M
NET_WORTH_MILESTONES: Tuple[int, ...] = (
    10_000_000,
    25_000_000,
    50_000_000,
    100_000_000,
    250_000_000,
    500_000_000,
    1_000_000_000,
)


def _check_thresholds(thresholds: Tuple[int, ...]) -> Tuple[int, ...]:
    """Thresholds must be positive and strictly increasing (hence unique)."""
    for lower, upper in zip(thresholds, thresholds[1:]):
        if upper <= lower:
            raise ValueError(f"net worth thresholds must strictly increase: {lower} then {upper}")
    if thresholds and thresholds[0] <= 0:
        raise ValueError("net worth thresholds must be positive")
    return thresholds


_check_thresholds(NET_WORTH_MILESTONES)


@dataclass(frozen=True)
class YearState:
    """Everything carried from one simulated year into the next."""

    debt_balances: Dict[str, int]
    debt_months_remaining: Dict[str, Optional[int]]
    property_values: Dict[str, int]
    pmi_required: Dict[str, bool]
    asset_balances: Dict[str, int]
    total_debt: int
    net_worth: int
    reference_income: int
    retirement_ready: bool
    fired_thresholds: FrozenSet[int]


@dataclass(frozen=True)
class YearOutcome:
    """One step of the fold: the snapshot, the next state, and new milestones."""

    year: TrajectoryYear
    state: YearState
    milestones: Tuple[Milestone, ...]


def initial_state(profile: Profile) -> YearState:
    """Year-0 starting point built from the profile's balances."""
    debt_balances = {d.id: d.principal for d in profile.debts}
    asset_balances = {a.id: a.balance for a in profile.assets}
    total_debt = sum(debt_balances.values())
    net_worth = sum(asset_balances.values()) - total_debt

    pmi_required = {}
    property_values = {}
    for debt in profile.debts:
        if debt.property_value is None:
            continue
        property_values[debt.id] = debt.property_value
        pmi_required[debt.id] = (
            debt.pmi_amount > 0
            and debt.principal > 0
            and should_pay_pmi(debt.principal, debt.property_value, debt.pmi_threshold)
        )

    return YearState(
        debt_balances=debt_balances,
        debt_months_remaining={
            d.id: d.months_remaining if d.months_remaining is not None else d.term_months
            for d in profile.debts
        },
        property_values=property_values,
        pmi_required=pmi_required,
        asset_balances=asset_balances,
        total_debt=total_debt,
        net_worth=net_worth,
        reference_income=0,
        retirement_ready=False,
        fired_thresholds=frozenset(t for t in NET_WORTH_MILESTONES if net_worth > t),
    )


def deductible_contributions(profile: Profile, age: int, calendar_year: int) -> int:
    """Pre-tax contributions for the year, capped per account type.

    Contributions above the annual limit still reach the account; only the
    tax deduction is capped. Years past the last table use its limits.
    """
    by_type: Dict[str, int] = {}
    for asset in profile.assets:
        if asset.is_pretax:
            by_type[asset.type] = by_type.get(asset.type, 0) + asset.monthly_contribution * MONTHS_PER_YEAR

    rules = load_tax_rules(calendar_year)
    total = 0
    for account_type, amount in by_type.items():
        limit = get_deductible_limit(account_type, age, profile.assumptions.tax_filing_status, rules=rules)
        total += amount if limit is None else min(amount, limit)
    return total


def tax_for_year(
    gross_income: int,
    pretax_contributions: int,
    calendar_year: int,
    assumptions: Assumptions,
) -> TotalTaxResult:
    """Tax with the year's table, or an inflation-indexed estimate past the last table."""
    pretax = min(pretax_contributions, gross_income)
    latest = latest_tax_year()
    if calendar_year <= latest:
        return calculate_total_tax(
            gross_income,
            assumptions.tax_filing_status,
            assumptions.state,
            pretax,
            rules=load_tax_rules(calendar_year),
        )
    return estimate_future_tax(
        gross_income,
        calendar_year - latest,
        assumptions,
        pretax,
        rules=load_tax_rules(latest),
    )


def _asset_return(asset, assumptions: Assumptions) -> float:
    if asset.expected_return is not None:
        return asset.expected_return
    if asset.type == "property":
        return assumptions.home_appreciation
    return assumptions.market_return


def goal_milestone(goal: Goal, year: int, month: int, asset_balances: Dict[str, int], net_worth: int) -> Milestone:
    tracked = asset_balances[goal.asset_id] if goal.asset_id else net_worth
    achieved = tracked >= goal.target_amount
    return Milestone(
        type="goal_achieved" if achieved else "goal_missed",
        year=year,
        month=month,
        description=f"Goal {'achieved' if achieved else 'missed'}: {goal.name}",
        related_id=goal.id,
    )


def project_year(profile: Profile, year_index: int, previous: YearState) -> YearOutcome:
    """Advance the projection by one year."""
    assumptions = profile.assumptions
    calendar_year = assumptions.projection_start_year + year_index
    age = assumptions.current_age + year_index

    # 1. Income
    gross_income = 0
    salary = 0
    work_hours = 0.0
    for income in profile.income:
        amount = annual_income_for_year(income, year_index, calendar_year, assumptions.salary_growth)
        gross_income += amount
        if is_salary_income(income):
            salary += amount
        if amount > 0:
            work_hours += work_hours_for_year(income, calendar_year)

    # 2. Taxes
    pretax_contributions = deductible_contributions(profile, age, calendar_year)
    taxes = tax_for_year(gross_income, pretax_contributions, calendar_year, assumptions)

    # 3. Debts
    debt_states: List[DebtState] = []
    debt_results: Dict[str, DebtYearResult] = {}
    debt_balances: Dict[str, int] = {}
    months_remaining: Dict[str, Optional[int]] = {}
    property_values: Dict[str, int] = {}
    pmi_required: Dict[str, bool] = {}
    total_debt_payment = 0
    total_interest = 0

    for debt in profile.debts:
        start = previous.debt_balances[debt.id]
        result = calculate_debt_year(debt, start, previous.debt_months_remaining[debt.id])
        debt_results[debt.id] = result
        debt_balances[debt.id] = result.end_balance
        months_remaining[debt.id] = result.months_remaining

        pmi_paid = 0
        escrow_paid = debt.escrow * result.months_paid
        ltv = None
        pmi_flag = False
        value_end = None
        if debt.property_value is not None:
            value_start = previous.property_values[debt.id]
            value_end = round_cents(value_start * (1 + assumptions.home_appreciation))
            if previous.pmi_required[debt.id]:
                pmi_paid = debt.pmi_amount * result.months_paid
            ltv = calculate_ltv(result.end_balance, value_end) if value_end > 0 else None
            pmi_flag = (
                debt.pmi_amount > 0
                and result.end_balance > 0
                and value_end > 0
                and should_pay_pmi(result.end_balance, value_end, debt.pmi_threshold)
            )
            property_values[debt.id] = value_end
            pmi_required[debt.id] = pmi_flag

        payments = result.total_paid + pmi_paid + escrow_paid
        total_debt_payment += payments
        total_interest += result.interest_paid

        debt_states.append(DebtState(
            debt_id=debt.id,
            remaining_principal=result.end_balance,
            interest_paid_this_year=result.interest_paid,
            principal_paid_this_year=result.principal_paid,
            payments_this_year=payments,
            months_remaining=result.months_remaining,
            is_paid_off=result.is_paid_off,
            property_value=value_end,
            ltv=ltv,
            is_pmi_required=pmi_flag,
            pmi_paid_this_year=pmi_paid,
        ))

    # 4. Assets
    asset_states: List[AssetState] = []
    asset_balances: Dict[str, int] = {}
    total_contributions = 0
    total_match = 0
    for asset in profile.assets:
        result = calculate_asset_year(
            asset, salary, _asset_return(asset, assumptions),
            starting_balance=previous.asset_balances[asset.id],
        )
        asset_balances[asset.id] = result.ending_balance
        total_contributions += result.contributions
        total_match += result.employer_match
        asset_states.append(AssetState(
            asset_id=asset.id,
            balance=result.ending_balance,
            contributions_this_year=result.contributions,
            employer_match_this_year=result.employer_match,
            growth_this_year=result.growth,
        ))

    # 5. Aggregates
    total_debt = sum(debt_balances.values())
    total_assets = sum(asset_balances.values())
    net_worth = total_assets - total_debt

    total_obligations = sum(
        round_cents(o.monthly_amount * MONTHS_PER_YEAR * active_fraction(o.end_date, calendar_year))
        for o in profile.obligations
    )
    discretionary = taxes.net_income - total_debt_payment - total_obligations - total_contributions
    if taxes.net_income > 0:
        savings_rate = (total_contributions + max(0, discretionary)) / taxes.net_income
    else:
        savings_rate = 0.0

    mortgage_balance = sum(debt_balances[d] for d in property_values)
    mortgage_value = sum(property_values.values())
    home_equity = mortgage_value - mortgage_balance
    aggregate_ltv = mortgage_balance / mortgage_value if mortgage_value > 0 else None

    reference_income = gross_income if gross_income > 0 else previous.reference_income
    readiness_pct = 0.0
    ready_now = False
    if reference_income > 0:
        investable = sum(asset_balances[a.id] for a in profile.assets if a.is_investable)
        readiness = calculate_retirement_readiness(
            investable,
            round_cents(reference_income * assumptions.income_replacement_ratio),
            assumptions.retirement_withdrawal_rate,
        )
        readiness_pct = readiness.percentage_complete
        ready_now = readiness.is_ready

    # 6. Milestones
    milestones: List[Milestone] = []

    for debt in profile.debts:
        result = debt_results[debt.id]
        if result.start_balance > 0 and result.end_balance == 0:
            milestones.append(Milestone(
                type="debt_payoff",
                year=calendar_year,
                month=result.payoff_month or MONTHS_PER_YEAR,
                description=f"{debt.name} paid off",
                related_id=debt.id,
            ))
    if len(profile.debts) > 1 and previous.total_debt > 0 and total_debt == 0:
        milestones.append(Milestone(
            type="debt_payoff",
            year=calendar_year,
            month=max(r.payoff_month or MONTHS_PER_YEAR for r in debt_results.values()
                      if r.start_balance > 0),
            description="All debts paid off",
        ))

    for debt_id, required_before in previous.pmi_required.items():
        if required_before and not pmi_required[debt_id]:
            debt = next(d for d in profile.debts if d.id == debt_id)
            milestones.append(Milestone(
                type="pmi_removed",
                year=calendar_year,
                month=MONTHS_PER_YEAR,
                description=f"PMI removed from {debt.name}",
                related_id=debt_id,
            ))

    fired = set(previous.fired_thresholds)
    if net_worth > 0:
        for threshold in NET_WORTH_MILESTONES:
            if threshold in fired or net_worth <= threshold:
                continue
            fired.add(threshold)
            milestones.append(Milestone(
                type="net_worth_milestone",
                year=calendar_year,
                month=MONTHS_PER_YEAR,
                description=f"Net worth exceeded {format_cents(threshold, compact=True)}",
            ))

    if ready_now and not previous.retirement_ready:
        milestones.append(Milestone(
            type="retirement_ready",
            year=calendar_year,
            month=MONTHS_PER_YEAR,
            description=f"Retirement ready at age {age}",
        ))

    for goal in profile.goals:
        target_year = goal.target_date.year
        due = target_year == calendar_year or (year_index == 0 and target_year < calendar_year)
        if due:
            milestones.append(goal_milestone(
                goal, calendar_year, goal.target_date.month, asset_balances, net_worth,
            ))

    year = TrajectoryYear(
        year=calendar_year,
        age=age,
        gross_income=gross_income,
        net_income=taxes.net_income,
        tax_federal=taxes.federal_tax,
        tax_state=taxes.state_tax,
        tax_fica=taxes.total_fica,
        total_tax=taxes.total_tax,
        effective_tax_rate=taxes.effective_rate,
        marginal_tax_rate=taxes.marginal_rate,
        total_work_hours=work_hours,
        effective_hourly_rate=round_cents(taxes.net_income / work_hours) if work_hours > 0 else 0,
        debts=debt_states,
        assets=asset_states,
        total_debt=total_debt,
        total_assets=total_assets,
        net_worth=net_worth,
        total_debt_payment=total_debt_payment,
        total_interest_paid=total_interest,
        total_contributions=total_contributions,
        total_employer_match=total_match,
        total_obligations=total_obligations,
        discretionary_income=discretionary,
        savings_rate=savings_rate,
        home_equity=home_equity,
        ltv=aggregate_ltv,
        is_pmi_required=any(pmi_required.values()),
        retirement_readiness=readiness_pct,
    )

    logger.debug(
        f"{calendar_year} (age {age}): gross={gross_income} tax={taxes.total_tax} "
        f"debt={total_debt} assets={total_assets} net_worth={net_worth}"
    )

    state = YearState(
        debt_balances=debt_balances,
        debt_months_remaining=months_remaining,
        property_values=property_values,
        pmi_required=pmi_required,
        asset_balances=asset_balances,
        total_debt=total_debt,
        net_worth=net_worth,
        reference_income=reference_income,
        retirement_ready=previous.retirement_ready or ready_now,
        fired_thresholds=frozenset(fired),
    )
    return YearOutcome(year=year, state=state, milestones=tuple(milestones))


def summarize(years: List[TrajectoryYear], milestones: List[Milestone]) -> TrajectorySummary:
    """Aggregate a list of projected years.

    Work hours (and the hourly rate derived from them) count only the years
    before retirement readiness; every other total covers the whole run.
    """
    retirement = next((m for m in milestones if m.type == "retirement_ready"), None)
    retirement_row = next((y for y in years if retirement and y.year == retirement.year), None)

    working_years = [
        y for y in years if retirement_row is None or y.year < retirement_row.year
    ]
    work_hours = sum(y.total_work_hours for y in working_years)
    working_net = sum(y.net_income for y in working_years)

    return TrajectorySummary(
        total_years=len(years),
        retirement_year=retirement_row.year if retirement_row else None,
        retirement_age=retirement_row.age if retirement_row else None,
        total_lifetime_income=sum(y.gross_income for y in years),
        total_lifetime_taxes=sum(y.total_tax for y in years),
        total_lifetime_interest=sum(y.total_interest_paid for y in years),
        net_worth_at_retirement=retirement_row.net_worth if retirement_row else 0,
        net_worth_at_end=years[-1].net_worth if years else 0,
        total_lifetime_work_hours=work_hours,
        average_effective_hourly_rate=round_cents(working_net / work_hours) if work_hours > 0 else 0,
        goals_achieved=sum(1 for m in milestones if m.type == "goal_achieved"),
        goals_missed=sum(1 for m in milestones if m.type == "goal_missed"),
    )


def _coerce_profile(profile: Union[Profile, dict]) -> Profile:
    if isinstance(profile, Profile):
        return profile
    return Profile.model_validate(profile)


def _settle_open_goals(profile: Profile, last_year: int, state: YearState) -> List[Milestone]:
    """Goals dated after the final projected year, judged on the ending balances."""
    return [
        goal_milestone(goal, last_year, MONTHS_PER_YEAR, state.asset_balances, state.net_worth)
        for goal in profile.goals
        if goal.target_date.year > last_year
    ]


def _run(profile: Profile, year_count: int, generated_at: Optional[datetime]) -> Trajectory:
    state = initial_state(profile)
    years: List[TrajectoryYear] = []
    milestones: List[Milestone] = []

    for index in range(year_count):
        outcome = project_year(profile, index, state)
        years.append(outcome.year)
        milestones.extend(outcome.milestones)
        state = outcome.state

    # A preview that stops short of life expectancy leaves later goals open
    if years and year_count == profile.assumptions.projection_years:
        milestones.extend(_settle_open_goals(profile, years[-1].year, state))

    summary = summarize(years, milestones)
    logger.info(
        f"Projected profile {profile.id}: {len(years)} years, {len(milestones)} milestones, "
        f"net worth at end {format_cents(summary.net_worth_at_end)}"
    )

    return Trajectory(
        profile_id=profile.id,
        generated_at=generated_at or datetime.now(timezone.utc),
        years=years,
        milestones=milestones,
        summary=summary,
    )


def generate_trajectory(
    profile: Union[Profile, dict],
    generated_at: Optional[datetime] = None,
) -> Trajectory:
    """Project a profile from current age to life expectancy.

    Args:
        profile: Profile (or a dict that validates as one)
        generated_at: Timestamp to stamp on the result (defaults to now, UTC)

    Returns:
        Trajectory with one year per age in [current_age, life_expectancy)
        Goals dated after the last year are judged on its ending balances.

    Raises:
        pydantic.ValidationError: profile dict is malformed
        InvalidInputError: an entity violates a calculation precondition
    """
    profile = _coerce_profile(profile)
    return _run(profile, profile.assumptions.projection_years, generated_at)


def generate_quick_trajectory(
    profile: Union[Profile, dict],
    years: int = DEFAULT_QUICK_YEARS,
    generated_at: Optional[datetime] = None,
) -> Trajectory:
    """Same projection truncated to ``years`` (for fast previews)."""
    if years <= 0:
        raise InvalidInputError("years", f"must be > 0, got {years}")
    profile = _coerce_profile(profile)
    return _run(profile, min(years, profile.assumptions.projection_years), generated_at)

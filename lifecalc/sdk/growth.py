"""Asset growth, compound interest, and retirement readiness.

Rounding point: balances are rounded to whole cents once per month, right
after that month's return is applied. Over long horizons this matters, so
every yearly routine here goes through the same monthly loop.
"""

from dataclasses import dataclass
from typing import List, Optional

from .money import round_cents
from .schemas import Asset, InvalidInputError

MONTHS_PER_YEAR = 12


@dataclass(frozen=True)
class YearlyGrowth:
    ending_balance: int
    growth: int
    contributions: int


@dataclass(frozen=True)
class AssetGrowthResult:
    """Result of a single year's asset growth calculation."""
    starting_balance: int
    ending_balance: int
    contributions: int
    employer_match: int
    total_contributions: int
    growth: int


@dataclass(frozen=True)
class AssetProjection:
    yearly_balances: List[int]
    final_balance: int
    total_contributions: int
    total_growth: int


@dataclass(frozen=True)
class RetirementReadiness:
    current_assets: int
    required_nest_egg: int
    percentage_complete: float
    is_ready: bool
    sustainable_withdrawal: int
    monthly_income: int


def _check_return(annual_return: float) -> None:
    if annual_return < -1:
        raise InvalidInputError("annual_return", f"must be >= -1, got {annual_return}")


def _compound_months(balance: int, monthly_deposits: List[int], annual_return: float) -> int:
    """Deposit at the start of each month, then apply that month's return."""
    factor = 1 + annual_return / MONTHS_PER_YEAR
    for deposit in monthly_deposits:
        balance = max(0, round_cents((balance + deposit) * factor))
    return balance


def calculate_yearly_growth(
    starting_balance: int,
    monthly_contribution: int,
    annual_return: float,
) -> YearlyGrowth:
    """Compound one year monthly, with contributions at the start of each month."""
    _check_return(annual_return)
    if starting_balance < 0:
        raise InvalidInputError("starting_balance", f"must be >= 0, got {starting_balance}")
    if monthly_contribution < 0:
        raise InvalidInputError("monthly_contribution", f"must be >= 0, got {monthly_contribution}")

    contributions = monthly_contribution * MONTHS_PER_YEAR
    ending = _compound_months(starting_balance, [monthly_contribution] * MONTHS_PER_YEAR, annual_return)
    return YearlyGrowth(
        ending_balance=ending,
        growth=ending - starting_balance - contributions,
        contributions=contributions,
    )


def calculate_employer_match(
    monthly_contribution: int,
    annual_salary: int,
    match_rate: float,
    match_limit: float,
) -> int:
    """Employer match for a year.

    Only contributions up to ``match_limit`` x salary are matched.
    Example: $500/mo, $100k salary, 50% match up to 6% -> min(6000, 6000) * 0.5 = $3,000
    """
    annual_contribution = monthly_contribution * MONTHS_PER_YEAR
    max_matchable = round_cents(max(0, annual_salary) * match_limit)
    return round_cents(min(annual_contribution, max_matchable) * match_rate)


def calculate_asset_year(asset: Asset, annual_salary: int, annual_return: float,
                         starting_balance: Optional[int] = None) -> AssetGrowthResult:
    """One year of growth for an asset, including employer match.

    The match is deposited alongside the holder's own monthly contributions,
    spread so the 12 deposits add up to the exact annual match.
    """
    _check_return(annual_return)
    start = asset.balance if starting_balance is None else starting_balance
    if start < 0:
        raise InvalidInputError("balance", f"must be >= 0, got {start}")

    contributions = asset.monthly_contribution * MONTHS_PER_YEAR
    match = 0
    if asset.employer_match is not None and asset.match_limit is not None:
        match = calculate_employer_match(
            asset.monthly_contribution, annual_salary, asset.employer_match, asset.match_limit
        )

    base, remainder = divmod(match, MONTHS_PER_YEAR)
    deposits = [
        asset.monthly_contribution + base + (1 if month < remainder else 0)
        for month in range(MONTHS_PER_YEAR)
    ]
    ending = _compound_months(start, deposits, annual_return)
    total_contributions = contributions + match

    return AssetGrowthResult(
        starting_balance=start,
        ending_balance=ending,
        contributions=contributions,
        employer_match=match,
        total_contributions=total_contributions,
        growth=ending - start - total_contributions,
    )


def project_asset_over_years(
    starting_balance: int,
    monthly_contribution: int,
    annual_return: float,
    years: int,
) -> AssetProjection:
    """Project a balance forward; yearly_balances[0] is the starting balance."""
    balances = [starting_balance]
    balance = starting_balance
    total_contributions = 0
    total_growth = 0

    for _ in range(years):
        result = calculate_yearly_growth(balance, monthly_contribution, annual_return)
        balance = result.ending_balance
        total_contributions += result.contributions
        total_growth += result.growth
        balances.append(balance)

    return AssetProjection(
        yearly_balances=balances,
        final_balance=balance,
        total_contributions=total_contributions,
        total_growth=total_growth,
    )


def calculate_future_value(present_value: float, annual_return: float, years: float) -> float:
    """Future value of a lump sum with annual compounding.

    Unrounded (fractional cents) so that present/future value round-trip
    exactly; round with ``round_cents`` when storing.
    """
    _check_return(annual_return)
    return present_value * (1 + annual_return) ** years


def calculate_present_value(future_value: float, annual_return: float, years: float) -> float:
    """Present value of a future amount. Unrounded, like calculate_future_value."""
    if annual_return <= -1:
        raise InvalidInputError("annual_return", f"must be > -1, got {annual_return}")
    return future_value / (1 + annual_return) ** years


def years_to_target(
    starting_balance: int,
    monthly_contribution: int,
    annual_return: float,
    target_balance: int,
    max_years: int = 100,
) -> Optional[int]:
    """Whole years until a balance reaches target; 0 if already there, None if never."""
    balance = starting_balance
    for year in range(max_years):
        if balance >= target_balance:
            return year
        balance = calculate_yearly_growth(balance, monthly_contribution, annual_return).ending_balance
    return max_years if balance >= target_balance else None


def required_monthly_savings(
    starting_balance: int,
    target_balance: int,
    annual_return: float,
    years: int,
) -> int:
    """Monthly contribution needed to reach a target. Never negative.

    Solves the future value of an annuity, FV = PMT * ((1+r)^n - 1) / r, for PMT.
    """
    if years <= 0:
        return max(0, target_balance - starting_balance)

    needed = target_balance - calculate_future_value(starting_balance, annual_return, years)
    if needed <= 0:
        return 0

    monthly_rate = annual_return / MONTHS_PER_YEAR
    months = years * MONTHS_PER_YEAR
    factor = (1 + monthly_rate) ** months - 1
    if factor == 0:
        return round_cents(needed / months)
    return max(0, round_cents(needed * monthly_rate / factor))


def calculate_retirement_readiness(
    retirement_assets: int,
    desired_annual_income: int,
    withdrawal_rate: float,
) -> RetirementReadiness:
    """Compare assets to the nest egg needed for a desired income.

    A withdrawal rate of 0 can never fund any income: the required nest egg is
    reported as 0 and the result is never ready.
    """
    if withdrawal_rate > 0:
        required = round_cents(desired_annual_income / withdrawal_rate)
        if required > 0:
            percentage = min(1.0, retirement_assets / required)
        else:
            percentage = 1.0
        is_ready = retirement_assets >= required
    else:
        required = 0
        percentage = 0.0
        is_ready = False

    sustainable = round_cents(retirement_assets * withdrawal_rate)
    return RetirementReadiness(
        current_assets=retirement_assets,
        required_nest_egg=required,
        percentage_complete=percentage,
        is_ready=is_ready,
        sustainable_withdrawal=sustainable,
        monthly_income=round_cents(sustainable / MONTHS_PER_YEAR),
    )


def calculate_property_appreciation(current_value: int, appreciation_rate: float, years: int) -> tuple:
    """Returns (future_value, total_appreciation) in whole cents."""
    future = round_cents(calculate_future_value(current_value, appreciation_rate, years))
    return future, future - current_value

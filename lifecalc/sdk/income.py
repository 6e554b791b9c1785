"""Per-year income evaluation.

SDK layer - pure logic. Given an income source, a year index and the
calendar year, returns the gross amount and hours worked for that year.

Rules:
- Growth compounds from year index 0 (year 0 is the stated amount).
- Salary and hourly income fall back to the salary growth assumption when
  no growth rate is set; variable and passive income default to no growth.
- Income with an end date is prorated by end month / 12 in its end year and
  is 0 afterwards.
- Hourly amounts are rates: annual = rate x hours/week x 52.
- Passive income involves no work hours.
"""

from typing import Optional, Tuple

from .money import round_cents
from .schemas import WEEKS_PER_YEAR, Income, MonthYear

MONTHS_PER_YEAR = 12


def active_fraction(end_date: Optional[MonthYear], calendar_year: int) -> float:
    """Share of a calendar year before an end date (1.0 when open-ended)."""
    if end_date is None or calendar_year < end_date.year:
        return 1.0
    if calendar_year == end_date.year:
        return end_date.month / MONTHS_PER_YEAR
    return 0.0


def growth_rate_for(income: Income, default_growth: float) -> float:
    if income.expected_growth is not None:
        return income.expected_growth
    if income.type in ("salary", "hourly"):
        return default_growth
    return 0.0


def base_annual_amount(income: Income) -> int:
    """Annualized amount before growth and proration."""
    if income.type == "hourly":
        return round_cents(income.amount * income.hours_per_week * WEEKS_PER_YEAR)
    return income.amount


def annual_income_for_year(
    income: Income,
    year_index: int,
    calendar_year: int,
    default_growth: float = 0.0,
) -> int:
    """Gross income from one source for one projected year, in cents."""
    fraction = active_fraction(income.end_date, calendar_year)
    if fraction == 0:
        return 0
    growth = (1 + growth_rate_for(income, default_growth)) ** year_index
    return round_cents(base_annual_amount(income) * growth * fraction)


def work_hours_for_year(income: Income, calendar_year: int) -> float:
    if income.type == "passive":
        return 0.0
    return income.hours_per_week * WEEKS_PER_YEAR * active_fraction(income.end_date, calendar_year)


def is_salary_income(income: Income) -> bool:
    """Income that an employer match is keyed off."""
    return income.type in ("salary", "hourly")


def income_range(income: Income) -> Tuple[int, int]:
    """(low, high) annual amount implied by the variability factor.

    Projections always use the expected (stated) amount; this range is
    informational for variable income.
    """
    base = base_annual_amount(income)
    return (
        round_cents(base * (1 - income.variability)),
        round_cents(base * (1 + income.variability)),
    )

"""Loan amortization.

Interest is computed monthly on the remaining balance and rounded to cents
once per month. The final payment of a schedule (or any payment that would
overshoot) is clipped so the balance lands on exactly 0 cents; per-month
rounding never leaves a residual balance behind.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, Optional

from .money import round_cents
from .schemas import Debt, InvalidInputError

logger = logging.getLogger(__name__)

MONTHS_PER_YEAR = 12


@dataclass(frozen=True)
class AmortizationPayment:
    """One month of a schedule."""
    month: int
    payment: int
    principal: int
    interest: int
    balance: int


@dataclass(frozen=True)
class DebtYearResult:
    """Twelve months (or fewer, if paid off) of a single debt."""
    start_balance: int
    end_balance: int
    interest_paid: int
    principal_paid: int
    total_paid: int
    months_paid: int
    is_paid_off: bool
    payoff_month: Optional[int]
    months_remaining: Optional[int]


def _check_loan(principal: int, annual_rate: float, term_months: Optional[int] = None) -> None:
    if principal < 0:
        raise InvalidInputError("principal", f"must be >= 0, got {principal}")
    if annual_rate < 0:
        raise InvalidInputError("interest_rate", f"must be >= 0, got {annual_rate}")
    if term_months is not None and term_months <= 0:
        raise InvalidInputError("term_months", f"must be > 0, got {term_months}")


def calculate_monthly_payment(principal: int, annual_rate: float, term_months: int) -> int:
    """Level monthly payment that retires ``principal`` over ``term_months``.

    P * r / (1 - (1 + r)^-n), or P / n when the rate is 0.
    """
    _check_loan(principal, annual_rate, term_months)
    if principal == 0:
        return 0

    monthly_rate = annual_rate / MONTHS_PER_YEAR
    if monthly_rate == 0:
        return round_cents(principal / term_months)
    return round_cents(principal * monthly_rate / (1 - (1 + monthly_rate) ** -term_months))


class AmortizationSchedule:
    """Month-by-month schedule for a level-payment loan.

    Iterable and restartable: each ``iter()`` starts over from month 1.
    Ends when the balance reaches exactly 0, which happens no later than
    ``term_months``.
    """

    def __init__(self, principal: int, annual_rate: float, term_months: int, extra_payment: int = 0):
        _check_loan(principal, annual_rate, term_months)
        if extra_payment < 0:
            raise InvalidInputError("extra_payment", f"must be >= 0, got {extra_payment}")
        self.principal = principal
        self.annual_rate = annual_rate
        self.term_months = term_months
        self.extra_payment = extra_payment
        self.monthly_payment = calculate_monthly_payment(principal, annual_rate, term_months)

    def __iter__(self) -> Iterator[AmortizationPayment]:
        monthly_rate = self.annual_rate / MONTHS_PER_YEAR
        scheduled = self.monthly_payment + self.extra_payment
        balance = self.principal
        month = 0

        while balance > 0:
            month += 1
            interest = round_cents(balance * monthly_rate)
            due = balance + interest
            payment = due if (month >= self.term_months or scheduled >= due) else scheduled
            principal = payment - interest
            balance = due - payment
            yield AmortizationPayment(
                month=month,
                payment=payment,
                principal=principal,
                interest=interest,
                balance=balance,
            )

    @property
    def total_interest(self) -> int:
        return sum(p.interest for p in self)

    @property
    def months_to_payoff(self) -> int:
        return sum(1 for _ in self)


def amortization_schedule(principal: int, annual_rate: float, term_months: int,
                          extra_payment: int = 0) -> AmortizationSchedule:
    return AmortizationSchedule(principal, annual_rate, term_months, extra_payment)


def resolve_monthly_payment(debt: Debt, balance: int, months_remaining: Optional[int]) -> int:
    """Payment actually made each month.

    Actual payment if set, else minimum payment, else the level payment that
    retires the current balance over the remaining term.
    """
    if debt.actual_payment > 0:
        return debt.actual_payment
    if debt.minimum_payment > 0:
        return debt.minimum_payment
    if months_remaining:
        return calculate_monthly_payment(balance, debt.interest_rate, months_remaining)
    return 0


def calculate_debt_year(
    debt: Debt,
    starting_balance: int,
    months_remaining: Optional[int] = None,
) -> DebtYearResult:
    """Apply up to 12 monthly payments to a debt.

    Args:
        debt: Debt definition (rate and payment settings)
        starting_balance: Balance at the start of the year, in cents
        months_remaining: Remaining term. When it reaches its final month the
            residual balance is paid in full. None means open-ended.

    Returns:
        DebtYearResult with end balance floored at 0
    """
    _check_loan(starting_balance, debt.interest_rate)
    if months_remaining is not None and months_remaining < 0:
        raise InvalidInputError("months_remaining", f"must be >= 0, got {months_remaining}")

    payment = resolve_monthly_payment(debt, starting_balance, months_remaining)
    monthly_rate = debt.interest_rate / MONTHS_PER_YEAR

    balance = starting_balance
    interest_paid = 0
    principal_paid = 0
    total_paid = 0
    months_paid = 0
    payoff_month = None
    shortfall_logged = False

    for month in range(1, MONTHS_PER_YEAR + 1):
        if balance == 0:
            break

        interest = round_cents(balance * monthly_rate)
        due = balance + interest
        final = months_remaining is not None and months_remaining <= 1
        paid = due if (final or payment >= due) else payment

        if paid < interest and not shortfall_logged:
            logger.warning(
                f"{debt.name}: payment {paid} does not cover interest {interest}; balance will grow"
            )
            shortfall_logged = True

        interest_paid += interest
        principal_paid += paid - interest
        total_paid += paid
        balance = due - paid
        months_paid += 1
        if months_remaining is not None:
            months_remaining = max(0, months_remaining - 1)

        if balance == 0:
            payoff_month = month
            break

    end_balance = max(0, balance)
    return DebtYearResult(
        start_balance=starting_balance,
        end_balance=end_balance,
        interest_paid=interest_paid,
        principal_paid=principal_paid,
        total_paid=total_paid,
        months_paid=months_paid,
        is_paid_off=end_balance == 0,
        payoff_month=payoff_month,
        months_remaining=months_remaining,
    )


def months_to_payoff(principal: int, annual_rate: float, monthly_payment: int,
                     max_months: int = 1200) -> Optional[int]:
    """Months until a balance is retired at a fixed payment (None if never)."""
    _check_loan(principal, annual_rate)
    monthly_rate = annual_rate / MONTHS_PER_YEAR
    balance = principal
    for month in range(1, max_months + 1):
        if balance == 0:
            return month - 1
        interest = round_cents(balance * monthly_rate)
        if monthly_payment <= interest:
            return None
        balance = max(0, balance + interest - monthly_payment)
    return max_months if balance == 0 else None


def total_interest(principal: int, annual_rate: float, monthly_payment: int,
                   max_months: int = 1200) -> Optional[int]:
    """Interest paid retiring a balance at a fixed payment (None if never retired)."""
    _check_loan(principal, annual_rate)
    monthly_rate = annual_rate / MONTHS_PER_YEAR
    balance = principal
    interest_total = 0
    for _ in range(max_months):
        if balance == 0:
            return interest_total
        interest = round_cents(balance * monthly_rate)
        if monthly_payment <= interest:
            return None
        interest_total += interest
        balance = max(0, balance + interest - monthly_payment)
    return interest_total if balance == 0 else None


def calculate_ltv(balance: int, property_value: int) -> float:
    """Loan-to-value ratio."""
    if property_value <= 0:
        raise InvalidInputError("property_value", f"must be > 0, got {property_value}")
    return balance / property_value


def should_pay_pmi(balance: int, property_value: int, threshold: float = 0.80) -> bool:
    """PMI is required while LTV is above the threshold."""
    return calculate_ltv(balance, property_value) > threshold

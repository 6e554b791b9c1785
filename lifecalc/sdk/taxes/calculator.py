"""Federal, state, and FICA tax calculations.

All amounts are integer cents. Every function takes an optional ``rules``
argument so callers (the projection engine in particular) can inject the
year's table explicitly; when omitted the table for ``year`` is loaded.

Policies:
- Marginal rate at zero taxable income is 0.0 (no dollar is taxed).
- Effective rate is 0.0 when gross income is 0.
- Pre-tax retirement contributions reduce federal and state taxable income
  but never FICA wages. get_deductible_limit gives the annual cap per account.
"""

from dataclasses import dataclass, replace
from typing import Optional

from ..money import round_cents
from ..schemas import Assumptions, FilingStatus, InvalidInputError
from .rules import get_state_tax_rule, load_tax_rules
from .schemas import TaxRules

CATCH_UP_AGE = 50


@dataclass(frozen=True)
class Bracket:
    """A federal bracket in cents. ``max`` is None for the top bracket."""
    min: int
    max: Optional[int]
    rate: float


@dataclass(frozen=True)
class FederalTaxResult:
    tax: int
    taxable_income: int
    marginal_rate: float
    effective_rate: float


@dataclass(frozen=True)
class StateTaxResult:
    tax: int
    taxable_income: int
    effective_rate: float


@dataclass(frozen=True)
class FicaResult:
    social_security: int
    medicare: int
    total: int


@dataclass(frozen=True)
class TotalTaxResult:
    gross_income: int
    federal_tax: int
    state_tax: int
    social_security: int
    medicare: int
    total_fica: int
    total_tax: int
    net_income: int
    effective_rate: float
    marginal_rate: float


def _check_amounts(gross_income: int, pretax_contributions: int = 0) -> None:
    if gross_income < 0:
        raise InvalidInputError("gross_income", f"must be >= 0, got {gross_income}")
    if pretax_contributions < 0:
        raise InvalidInputError("pretax_contributions", f"must be >= 0, got {pretax_contributions}")


def _rules(year: Optional[int], rules: Optional[TaxRules]) -> TaxRules:
    return rules if rules is not None else load_tax_rules(year)


def get_brackets(filing_status: FilingStatus, year: Optional[int] = None,
                 rules: Optional[TaxRules] = None) -> list:
    """Federal brackets for a filing status, in cents."""
    status_rules = _rules(year, rules).for_status(filing_status)
    return [Bracket(lo, hi, rate) for lo, hi, rate in status_rules.bracket_bounds()]


def get_standard_deduction(filing_status: FilingStatus, year: Optional[int] = None,
                           rules: Optional[TaxRules] = None) -> int:
    return round_cents(_rules(year, rules).for_status(filing_status).standard_deduction * 100)


def get_marginal_bracket(taxable_income: int, filing_status: FilingStatus,
                         year: Optional[int] = None,
                         rules: Optional[TaxRules] = None) -> Optional[Bracket]:
    """Bracket containing the last dollar of taxable income (None at zero income)."""
    if taxable_income <= 0:
        return None
    for bracket in get_brackets(filing_status, year, rules):
        if bracket.max is None or taxable_income <= bracket.max:
            return bracket
    return None


def get_next_bracket(taxable_income: int, filing_status: FilingStatus,
                     year: Optional[int] = None,
                     rules: Optional[TaxRules] = None) -> Optional[Bracket]:
    """Bracket above the current one, or None at the top."""
    brackets = get_brackets(filing_status, year, rules)
    current = get_marginal_bracket(taxable_income, filing_status, rules=rules, year=year)
    if current is None:
        return brackets[0]
    index = brackets.index(current)
    if index == len(brackets) - 1:
        return None
    return brackets[index + 1]


def distance_to_next_bracket(taxable_income: int, filing_status: FilingStatus,
                             year: Optional[int] = None,
                             rules: Optional[TaxRules] = None) -> Optional[int]:
    """Cents of taxable income left before the next bracket starts."""
    current = get_marginal_bracket(taxable_income, filing_status, rules=rules, year=year)
    if current is None:
        return get_brackets(filing_status, year, rules)[0].max - max(0, taxable_income)
    if current.max is None:
        return None
    return current.max - taxable_income


def get_additional_medicare_threshold(filing_status: FilingStatus, year: Optional[int] = None,
                                      rules: Optional[TaxRules] = None) -> int:
    thresholds = _rules(year, rules).medicare.additional_tax_thresholds
    return round_cents(thresholds[filing_status] * 100)


def get_deductible_limit(account_type: str, age: int, filing_status: FilingStatus,
                         year: Optional[int] = None,
                         rules: Optional[TaxRules] = None) -> Optional[int]:
    """Annual pre-tax contribution limit in cents (None when the table has none).

    Workplace plans add the catch-up amount from age 50. HSA limits use the
    family figure for joint filers.
    """
    limits = _rules(year, rules).retirement_limits
    if limits is None:
        return None
    if account_type == "retirement_pretax":
        dollars = limits.employee_401k
        if age >= CATCH_UP_AGE:
            dollars += limits.catch_up_401k
    elif account_type == "hsa":
        dollars = limits.hsa_family if filing_status == "married_joint" else limits.hsa_individual
    else:
        raise InvalidInputError("account_type", f"no pre-tax limit for '{account_type}'")
    return round_cents(dollars * 100)


def calculate_federal_tax(
    gross_income: int,
    filing_status: FilingStatus,
    pretax_contributions: int = 0,
    year: Optional[int] = None,
    rules: Optional[TaxRules] = None,
) -> FederalTaxResult:
    """Calculate federal income tax with progressive brackets.

    Taxable income = max(0, gross - pretax contributions - standard deduction).
    Each bracket taxes the slice of taxable income between its bounds.
    """
    _check_amounts(gross_income, pretax_contributions)
    rules = _rules(year, rules)

    deduction = get_standard_deduction(filing_status, rules=rules)
    taxable_income = max(0, gross_income - pretax_contributions - deduction)

    tax = 0.0
    for bracket in get_brackets(filing_status, rules=rules):
        if taxable_income <= bracket.min:
            break
        upper = taxable_income if bracket.max is None else min(taxable_income, bracket.max)
        tax += (upper - bracket.min) * bracket.rate

    marginal = get_marginal_bracket(taxable_income, filing_status, rules=rules)
    tax_cents = round_cents(tax)

    return FederalTaxResult(
        tax=tax_cents,
        taxable_income=taxable_income,
        marginal_rate=marginal.rate if marginal else 0.0,
        effective_rate=tax_cents / gross_income if gross_income > 0 else 0.0,
    )


def calculate_state_tax(
    gross_income: int,
    state_code: str,
    pretax_contributions: int = 0,
) -> StateTaxResult:
    """Approximate state income tax.

    Flat states apply their rate; progressive states apply their top marginal
    rate to the whole taxable base. No-income-tax states always return 0.
    """
    _check_amounts(gross_income, pretax_contributions)
    rule = get_state_tax_rule(state_code)
    if rule is None:
        raise InvalidInputError("state", f"unknown state code '{state_code}'")

    if not rule.has_income_tax:
        return StateTaxResult(tax=0, taxable_income=0, effective_rate=0.0)

    deduction = round_cents(rule.standard_deduction * 100)
    taxable_income = max(0, gross_income - pretax_contributions - deduction)
    tax = round_cents(taxable_income * rule.rate)

    return StateTaxResult(
        tax=tax,
        taxable_income=taxable_income,
        effective_rate=tax / gross_income if gross_income > 0 else 0.0,
    )


def calculate_fica(
    gross_income: int,
    filing_status: FilingStatus,
    year: Optional[int] = None,
    rules: Optional[TaxRules] = None,
) -> FicaResult:
    """Calculate Social Security and Medicare (including Additional Medicare Tax).

    Social Security is capped at the year's wage base. Medicare has no cap;
    the additional rate applies to wages above the filing-status threshold.
    """
    _check_amounts(gross_income)
    rules = _rules(year, rules)

    wage_cap = round_cents(rules.social_security.wage_cap * 100)
    social_security = round_cents(min(gross_income, wage_cap) * rules.social_security.tax_rate)

    threshold = get_additional_medicare_threshold(filing_status, rules=rules)
    excess = max(0, gross_income - threshold)
    medicare = round_cents(
        gross_income * rules.medicare.tax_rate + excess * rules.medicare.additional_tax_rate
    )

    return FicaResult(
        social_security=social_security,
        medicare=medicare,
        total=social_security + medicare,
    )


def calculate_total_tax(
    gross_income: int,
    filing_status: FilingStatus,
    state_code: str,
    pretax_contributions: int = 0,
    year: Optional[int] = None,
    rules: Optional[TaxRules] = None,
) -> TotalTaxResult:
    """Combine federal, state, and FICA taxes for one year."""
    rules = _rules(year, rules)

    federal = calculate_federal_tax(gross_income, filing_status, pretax_contributions, rules=rules)
    state = calculate_state_tax(gross_income, state_code, pretax_contributions)
    fica = calculate_fica(gross_income, filing_status, rules=rules)

    total_tax = federal.tax + state.tax + fica.total

    return TotalTaxResult(
        gross_income=gross_income,
        federal_tax=federal.tax,
        state_tax=state.tax,
        social_security=fica.social_security,
        medicare=fica.medicare,
        total_fica=fica.total,
        total_tax=total_tax,
        net_income=gross_income - total_tax,
        effective_rate=total_tax / gross_income if gross_income > 0 else 0.0,
        marginal_rate=federal.marginal_rate,
    )


def calculate_retirement_tax_savings(
    gross_income: int,
    contribution: int,
    filing_status: FilingStatus,
    state_code: str,
    year: Optional[int] = None,
    rules: Optional[TaxRules] = None,
) -> int:
    """Tax saved by making a pre-tax retirement contribution. 0 for no contribution."""
    if contribution == 0:
        return 0
    rules = _rules(year, rules)
    without = calculate_total_tax(gross_income, filing_status, state_code, 0, rules=rules)
    with_contribution = calculate_total_tax(
        gross_income, filing_status, state_code, contribution, rules=rules
    )
    return without.total_tax - with_contribution.total_tax


def estimate_future_tax(
    gross_income: int,
    years_out: int,
    assumptions: Assumptions,
    pretax_contributions: int = 0,
    rules: Optional[TaxRules] = None,
) -> TotalTaxResult:
    """Estimate tax for a year beyond the last tabulated tax year.

    Approximates bracket indexing: deflate income to today's dollars at the
    inflation assumption, tax it with the current table, then reflate the
    resulting amounts. Rates carry over unchanged.
    """
    if years_out < 0:
        raise InvalidInputError("years_out", f"must be >= 0, got {years_out}")
    _check_amounts(gross_income, pretax_contributions)
    rules = _rules(assumptions.tax_year, rules)

    factor = (1 + assumptions.inflation_rate) ** years_out
    present = calculate_total_tax(
        round_cents(gross_income / factor),
        assumptions.tax_filing_status,
        assumptions.state,
        round_cents(pretax_contributions / factor),
        rules=rules,
    )

    federal = round_cents(present.federal_tax * factor)
    state = round_cents(present.state_tax * factor)
    social_security = round_cents(present.social_security * factor)
    medicare = round_cents(present.medicare * factor)
    total_fica = social_security + medicare
    total_tax = federal + state + total_fica

    return replace(
        present,
        gross_income=gross_income,
        federal_tax=federal,
        state_tax=state,
        social_security=social_security,
        medicare=medicare,
        total_fica=total_fica,
        total_tax=total_tax,
        net_income=gross_income - total_tax,
        effective_rate=total_tax / gross_income if gross_income > 0 else 0.0,
    )

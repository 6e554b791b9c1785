"""taxes - Tax calculation for projected years.

Scope:
- Federal tax rules and brackets, one table per tax year
- Social Security and Medicare (FICA), including the Additional Medicare Tax
- State income tax approximations (flat or top-marginal-rate)
- Future-year estimates beyond the last tabulated year

Constraints:
- Pure calculation - receives amounts in cents, returns results
- Year-specific rules loaded from taxes/rules/{year}.yaml and injected
  into every calculation via the ``rules`` argument

Modules:
- rules: table loading and year fallback
- calculator: federal/state/FICA/total calculations

Usage:
    from lifecalc.sdk.taxes import calculate_total_tax, load_tax_rules

    rules = load_tax_rules(2025)
    result = calculate_total_tax(10_000_000, "single", "CA", rules=rules)
"""

from .schemas import TaxRules, StateTaxRule

from .rules import (
    load_tax_rules,
    load_state_taxes,
    get_available_years,
    latest_tax_year,
    resolve_tax_year,
    get_state_tax_rule,
    state_has_income_tax,
    get_no_income_tax_states,
    get_flat_tax_states,
    get_all_state_codes,
)

from .calculator import (
    Bracket,
    FederalTaxResult,
    StateTaxResult,
    FicaResult,
    TotalTaxResult,
    calculate_federal_tax,
    calculate_state_tax,
    calculate_fica,
    calculate_total_tax,
    calculate_retirement_tax_savings,
    estimate_future_tax,
    get_brackets,
    get_standard_deduction,
    get_marginal_bracket,
    get_next_bracket,
    distance_to_next_bracket,
    get_additional_medicare_threshold,
    get_deductible_limit,
)

__all__ = [
    # Rules
    "TaxRules",
    "StateTaxRule",
    "load_tax_rules",
    "load_state_taxes",
    "get_available_years",
    "latest_tax_year",
    "resolve_tax_year",
    "get_state_tax_rule",
    "state_has_income_tax",
    "get_no_income_tax_states",
    "get_flat_tax_states",
    "get_all_state_codes",
    # Calculations
    "Bracket",
    "FederalTaxResult",
    "StateTaxResult",
    "FicaResult",
    "TotalTaxResult",
    "calculate_federal_tax",
    "calculate_state_tax",
    "calculate_fica",
    "calculate_total_tax",
    "calculate_retirement_tax_savings",
    "estimate_future_tax",
    "get_brackets",
    "get_standard_deduction",
    "get_marginal_bracket",
    "get_next_bracket",
    "distance_to_next_bracket",
    "get_additional_medicare_threshold",
    "get_deductible_limit",
]

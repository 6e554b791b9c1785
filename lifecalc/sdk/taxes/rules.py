"""Year-versioned tax rule tables.

Rules live in taxes/rules/YYYY.yaml (federal, FICA, limits) and
taxes/rules/states.yaml (state approximations).

Year fallback policy:
- Exact year if a table exists for it.
- Otherwise the latest table not after the requested year
  (so every future year uses the newest table).
- A year earlier than every table uses the earliest table.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Tuple

import yaml

from .schemas import StateTaxRule, StateTaxTable, TaxRules

logger = logging.getLogger(__name__)

STATES_FILENAME = "states.yaml"


def _get_tax_rules_dir() -> Path:
    """Get the bundled tax rules directory path."""
    return Path(__file__).parent / "rules"


@lru_cache(maxsize=None)
def get_available_years() -> Tuple[int, ...]:
    """Available tax rule years, ascending."""
    rules_dir = _get_tax_rules_dir()
    years = [int(p.stem) for p in rules_dir.glob("*.yaml") if p.stem.isdigit()]
    if not years:
        raise FileNotFoundError(f"No tax rules found in {rules_dir}")
    return tuple(sorted(years))


def latest_tax_year() -> int:
    return get_available_years()[-1]


def resolve_tax_year(year: Optional[int] = None) -> int:
    """Map a requested year onto the table that will be used for it."""
    available = get_available_years()
    if year is None:
        return available[-1]

    candidates = [y for y in available if y <= year]
    if not candidates:
        return available[0]
    return candidates[-1]


@lru_cache(maxsize=None)
def _load_rules_file(year: int) -> TaxRules:
    config_file = _get_tax_rules_dir() / f"{year}.yaml"
    with open(config_file, "r") as f:
        data = yaml.safe_load(f)
    logger.debug(f"loaded tax rules from {config_file.name}")
    return TaxRules.model_validate(data)


def load_tax_rules(year: Optional[int] = None) -> TaxRules:
    """Load tax rules for a year, applying the fallback policy.

    Args:
        year: Tax year (e.g., 2025). None means the latest available table.

    Returns:
        Validated TaxRules. ``rules.year`` is the table actually used.
    """
    resolved = resolve_tax_year(year)
    if year is not None and resolved != year:
        logger.debug(f"no tax rules for {year}, using {resolved}")
    return _load_rules_file(resolved)


@lru_cache(maxsize=None)
def load_state_taxes() -> StateTaxTable:
    """Load state income tax approximations."""
    config_file = _get_tax_rules_dir() / STATES_FILENAME
    with open(config_file, "r") as f:
        return StateTaxTable.model_validate(yaml.safe_load(f))


def get_state_tax_rule(state_code: str) -> Optional[StateTaxRule]:
    """Get a state's rule by code (case-insensitive), or None if unknown."""
    return load_state_taxes().states.get(state_code.upper())


def state_has_income_tax(state_code: str) -> bool:
    rule = get_state_tax_rule(state_code)
    return rule.has_income_tax if rule else False


def get_no_income_tax_states() -> List[str]:
    return sorted(code for code, rule in load_state_taxes().states.items() if not rule.has_income_tax)


def get_flat_tax_states() -> List[str]:
    return sorted(code for code, rule in load_state_taxes().states.items() if rule.type == "flat")


def get_all_state_codes() -> List[str]:
    return sorted(load_state_taxes().states)

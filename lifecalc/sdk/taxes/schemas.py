"""Pydantic schemas for tax rules validation.

These schemas validate the taxes/rules/*.yaml files and provide typed access
to tax parameters like SS wage cap, Medicare thresholds, and tax brackets.
Dollar amounts in the YAML stay in dollars here; the calculator converts to
cents at the point of use.
"""

from typing import Dict, List, Literal, Optional, Tuple, get_args

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..schemas import FilingStatus, InvalidInputError


class TaxBracket(BaseModel):
    """Single tax bracket entry."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    up_to: Optional[float] = Field(default=None, description="Upper bound (None if 'over' bracket)")
    over: Optional[float] = Field(default=None, description="Lower bound for top bracket")
    rate: float = Field(..., ge=0, le=1, description="Tax rate as decimal")


class FilingStatusRules(BaseModel):
    """Tax rules for a filing status (single, married_joint, etc.)."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    standard_deduction: float = Field(..., ge=0)
    tax_brackets: List[TaxBracket]

    @model_validator(mode="after")
    def check_brackets(self) -> "FilingStatusRules":
        """Brackets must be 'up_to' entries in increasing order, then one 'over'."""
        if not self.tax_brackets:
            raise ValueError("tax_brackets must not be empty")
        *lower, top = self.tax_brackets
        if top.over is None or top.up_to is not None:
            raise ValueError("last bracket must be an 'over' bracket")
        previous = 0.0
        for bracket in lower:
            if bracket.up_to is None or bracket.over is not None:
                raise ValueError("only the last bracket may use 'over'")
            if bracket.up_to <= previous:
                raise ValueError(f"bracket bounds must increase (got {bracket.up_to} after {previous})")
            previous = bracket.up_to
        if top.over != previous:
            raise ValueError(f"top bracket 'over' ({top.over}) must equal last 'up_to' ({previous})")
        return self

    def bracket_bounds(self) -> List[Tuple[int, Optional[int], float]]:
        """Brackets as (min_cents, max_cents, rate); max is None for the top bracket."""
        bounds = []
        lower = 0
        for bracket in self.tax_brackets:
            if bracket.up_to is not None:
                upper = int(round(bracket.up_to * 100))
                bounds.append((lower, upper, bracket.rate))
                lower = upper
            else:
                bounds.append((int(round(bracket.over * 100)), None, bracket.rate))
        return bounds


class SocialSecurityRules(BaseModel):
    """Social Security tax rules."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    wage_cap: float = Field(..., gt=0, description="SS wage base (max taxable)")
    tax_rate: float = Field(..., ge=0, le=1, description="SS tax rate (employee portion)")


class MedicareRules(BaseModel):
    """Medicare tax rules including the Additional Medicare Tax."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    tax_rate: float = Field(..., ge=0, le=1)
    additional_tax_rate: float = Field(..., ge=0, le=1)
    additional_tax_thresholds: Dict[FilingStatus, float]


class RetirementLimits(BaseModel):
    """Annual contribution limits."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    employee_401k: float = Field(..., ge=0)
    catch_up_401k: float = Field(..., ge=0)
    ira: float = Field(..., ge=0)
    ira_catch_up: float = Field(..., ge=0)
    hsa_individual: float = Field(..., ge=0)
    hsa_family: float = Field(..., ge=0)


class TaxRules(BaseModel):
    """Complete federal tax rules for a year."""
    model_config = ConfigDict(extra="ignore", frozen=True)  # Allow unknown fields for forward compat

    year: int
    single: FilingStatusRules
    married_joint: FilingStatusRules
    married_separate: FilingStatusRules
    head_of_household: FilingStatusRules
    social_security: SocialSecurityRules
    medicare: MedicareRules
    retirement_limits: Optional[RetirementLimits] = None

    def for_status(self, filing_status: FilingStatus) -> FilingStatusRules:
        if filing_status not in get_args(FilingStatus):
            raise InvalidInputError("filing_status", f"unknown filing status '{filing_status}'")
        return getattr(self, filing_status)


class StateTaxRule(BaseModel):
    """Income tax configuration for one state."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    type: Literal["none", "flat", "progressive"]
    rate: float = Field(..., ge=0, le=1, description="Flat rate, or top marginal rate for progressive")
    standard_deduction: float = Field(default=0, ge=0)

    @property
    def has_income_tax(self) -> bool:
        return self.type != "none"


class StateTaxTable(BaseModel):
    """All states keyed by two-letter code."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    states: Dict[str, StateTaxRule]

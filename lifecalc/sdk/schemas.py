"""Pydantic schemas for life-calc profiles and trajectories.

All money fields are integer cents. Rates are decimals (0.05 = 5%).

Input schemas (Profile and its entities) use extra='forbid' so that a typo in
a profile file causes a clear error rather than being silently ignored.
Output schemas (Trajectory and its parts) are frozen: the engine builds them
once and nobody mutates them afterwards.
"""

import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


FilingStatus = Literal["single", "married_joint", "married_separate", "head_of_household"]
IncomeType = Literal["salary", "hourly", "variable", "passive"]
DebtType = Literal["mortgage", "student", "auto", "credit", "personal", "other"]
AssetType = Literal[
    "retirement_pretax",
    "retirement_roth",
    "savings",
    "investment",
    "hsa",
    "property",
    "other",
]
MilestoneType = Literal[
    "debt_payoff",
    "goal_achieved",
    "goal_missed",
    "retirement_ready",
    "pmi_removed",
    "net_worth_milestone",
]

WEEKS_PER_YEAR = 52


class InvalidInputError(ValueError):
    """Raised when an input violates a basic precondition.

    The offending field is kept on the exception so callers can point at it.
    """

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"{field}: {message}")


def generate_id() -> str:
    """Short random identifier for profile entities."""
    return uuid.uuid4().hex[:8]


# =============================================================================
# Profile (input) schemas
# =============================================================================


class MonthYear(BaseModel):
    """A calendar month, used for end dates and goal targets."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=1900, le=2200)


class Income(BaseModel):
    """A single income source."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str = Field(default_factory=generate_id)
    name: str
    type: IncomeType = "salary"
    amount: int = Field(
        ..., ge=0,
        description="Annual amount in cents (hourly rate in cents for hourly income)",
    )
    hours_per_week: float = Field(default=40, ge=0, le=168)
    variability: float = Field(default=0, ge=0, le=1)
    expected_growth: Optional[float] = Field(
        default=None, ge=-1,
        description="Annual growth rate; None falls back to the salary growth assumption",
    )
    end_date: Optional[MonthYear] = None


class Debt(BaseModel):
    """A single debt (loan, card, mortgage)."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str = Field(default_factory=generate_id)
    name: str
    type: DebtType = "other"
    principal: int = Field(..., ge=0, description="Current balance in cents")
    interest_rate: float = Field(..., ge=0, le=1, description="Annual rate (APR)")
    minimum_payment: int = Field(default=0, ge=0)
    actual_payment: int = Field(default=0, ge=0)
    term_months: Optional[int] = Field(default=None, gt=0)
    months_remaining: Optional[int] = Field(default=None, ge=0)
    # Mortgage-only fields
    property_value: Optional[int] = Field(default=None, gt=0)
    pmi_threshold: float = Field(default=0.80, gt=0, le=1)
    pmi_amount: int = Field(default=0, ge=0, description="Monthly PMI in cents")
    escrow: int = Field(default=0, ge=0, description="Monthly escrow in cents")

    @property
    def is_mortgage(self) -> bool:
        return self.property_value is not None


class Asset(BaseModel):
    """An account or holding that grows over time."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str = Field(default_factory=generate_id)
    name: str
    type: AssetType = "other"
    balance: int = Field(..., ge=0)
    monthly_contribution: int = Field(default=0, ge=0)
    expected_return: Optional[float] = Field(
        default=None, ge=-1,
        description="Annual return; None falls back to market return (home appreciation for property)",
    )
    employer_match: Optional[float] = Field(default=None, ge=0, le=10)
    match_limit: Optional[float] = Field(default=None, ge=0, le=1)

    @property
    def is_retirement(self) -> bool:
        return self.type in ("retirement_pretax", "retirement_roth")

    @property
    def is_pretax(self) -> bool:
        """Contributions reduce federal and state taxable income."""
        return self.type in ("retirement_pretax", "hsa")

    @property
    def is_investable(self) -> bool:
        """Counts toward retirement readiness."""
        return self.type not in ("property", "other")


class Obligation(BaseModel):
    """A fixed monthly cost (rent, insurance, child care)."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str = Field(default_factory=generate_id)
    name: str
    monthly_amount: int = Field(..., ge=0)
    end_date: Optional[MonthYear] = None


class Goal(BaseModel):
    """A savings target to hit by a given month."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str = Field(default_factory=generate_id)
    name: str
    target_amount: int = Field(..., ge=0)
    target_date: MonthYear
    asset_id: Optional[str] = Field(
        default=None, description="Asset whose balance is tracked (net worth if None)",
    )


class Assumptions(BaseModel):
    """Simulation-wide configuration. Immutable per run."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    inflation_rate: float = Field(default=0.03, ge=-0.5, le=1)
    market_return: float = Field(default=0.07, ge=-1, le=1)
    home_appreciation: float = Field(default=0.03, ge=-1, le=1)
    salary_growth: float = Field(default=0.02, ge=-1, le=1)
    retirement_withdrawal_rate: float = Field(default=0.04, ge=0, le=1)
    income_replacement_ratio: float = Field(default=0.80, ge=0, le=5)
    life_expectancy: int = Field(default=85, gt=0, le=130)
    current_age: int = Field(default=30, ge=0, le=129)
    tax_filing_status: FilingStatus = "single"
    state: str = Field(default="CA", min_length=2, max_length=2)
    tax_year: int = Field(default=2024, ge=1900, le=2200)
    start_year: Optional[int] = Field(
        default=None, ge=1900, le=2200,
        description="First projected calendar year (defaults to tax_year)",
    )

    @model_validator(mode="after")
    def check_ages(self) -> "Assumptions":
        if self.life_expectancy <= self.current_age:
            raise ValueError(
                f"life_expectancy ({self.life_expectancy}) must be greater than "
                f"current_age ({self.current_age})"
            )
        return self

    @property
    def projection_start_year(self) -> int:
        return self.start_year if self.start_year is not None else self.tax_year

    @property
    def projection_years(self) -> int:
        return self.life_expectancy - self.current_age


class Profile(BaseModel):
    """A person's complete financial snapshot. Owned by the caller."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str = Field(default_factory=generate_id)
    name: str = "My Profile"
    income: List[Income] = Field(default_factory=list)
    debts: List[Debt] = Field(default_factory=list)
    assets: List[Asset] = Field(default_factory=list)
    obligations: List[Obligation] = Field(default_factory=list)
    goals: List[Goal] = Field(default_factory=list)
    assumptions: Assumptions = Field(default_factory=Assumptions)

    @model_validator(mode="after")
    def check_references(self) -> "Profile":
        """Entity ids must be unique and goals must point at real assets."""
        errors = []
        for label, items in (
            ("income", self.income),
            ("debts", self.debts),
            ("assets", self.assets),
            ("obligations", self.obligations),
            ("goals", self.goals),
        ):
            ids = [item.id for item in items]
            dupes = sorted({i for i in ids if ids.count(i) > 1})
            if dupes:
                errors.append(f"{label}: duplicate ids {dupes}")

        asset_ids = {a.id for a in self.assets}
        for goal in self.goals:
            if goal.asset_id is not None and goal.asset_id not in asset_ids:
                errors.append(f"goals.{goal.id}.asset_id: unknown asset '{goal.asset_id}'")

        if errors:
            raise ValueError("; ".join(errors))
        return self


# =============================================================================
# Trajectory (output) schemas
# =============================================================================


class DebtState(BaseModel):
    """A debt at the end of one simulated year."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    debt_id: str
    remaining_principal: int = Field(..., ge=0)
    interest_paid_this_year: int
    principal_paid_this_year: int
    payments_this_year: int = Field(..., description="Loan payments plus PMI and escrow")
    months_remaining: Optional[int] = None
    is_paid_off: bool
    property_value: Optional[int] = None
    ltv: Optional[float] = None
    is_pmi_required: bool = False
    pmi_paid_this_year: int = 0


class AssetState(BaseModel):
    """An asset at the end of one simulated year."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    asset_id: str
    balance: int = Field(..., ge=0)
    contributions_this_year: int
    employer_match_this_year: int
    growth_this_year: int


class TrajectoryYear(BaseModel):
    """Complete snapshot of one simulated year."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    year: int
    age: int

    # Income and taxes
    gross_income: int
    net_income: int
    tax_federal: int
    tax_state: int
    tax_fica: int
    total_tax: int
    effective_tax_rate: float
    marginal_tax_rate: float
    total_work_hours: float
    effective_hourly_rate: int

    # Entities
    debts: List[DebtState]
    assets: List[AssetState]

    # Totals
    total_debt: int
    total_assets: int
    net_worth: int
    total_debt_payment: int
    total_interest_paid: int
    total_contributions: int
    total_employer_match: int

    # Cash flow
    total_obligations: int
    discretionary_income: int
    savings_rate: float

    # Mortgage
    home_equity: int = 0
    ltv: Optional[float] = None
    is_pmi_required: bool = False

    retirement_readiness: float = Field(default=0, ge=0, le=1)

    @model_validator(mode="after")
    def check_net_worth(self) -> "TrajectoryYear":
        if self.net_worth != self.total_assets - self.total_debt:
            raise ValueError(
                f"net_worth ({self.net_worth}) != total_assets - total_debt "
                f"({self.total_assets - self.total_debt})"
            )
        return self


class Milestone(BaseModel):
    """A point-in-time event detected during projection."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    type: MilestoneType
    year: int
    month: int = Field(..., ge=1, le=12)
    description: str
    related_id: Optional[str] = None


class TrajectorySummary(BaseModel):
    """Aggregate statistics over a whole projection."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    total_years: int
    retirement_year: Optional[int] = None
    retirement_age: Optional[int] = None
    total_lifetime_income: int
    total_lifetime_taxes: int
    total_lifetime_interest: int
    net_worth_at_retirement: int = Field(
        ..., description="Net worth in the retirement year (0 if never ready)",
    )
    net_worth_at_end: int
    total_lifetime_work_hours: float
    average_effective_hourly_rate: int
    goals_achieved: int
    goals_missed: int


class Trajectory(BaseModel):
    """Full year-by-year projection for one profile."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    profile_id: str
    generated_at: datetime
    years: List[TrajectoryYear]
    milestones: List[Milestone]
    summary: TrajectorySummary

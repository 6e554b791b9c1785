"""Life Calc SDK - projection and comparison engines for personal finances."""

from .config import (
    get_config_dir,
    get_settings_path,
    load_settings,
    save_settings,
    get_setting,
    set_setting,
    get_profile_path,
    load_profile_data,
    load_financial_profile,
    save_profile_data,
    profile_from_dict,
    profile_to_dict,
    init_config,
    ConfigNotFoundError,
    ProfileNotFoundError,
)

from .schemas import (
    InvalidInputError,
    MonthYear,
    Income,
    Debt,
    Asset,
    Obligation,
    Goal,
    Assumptions,
    Profile,
    DebtState,
    AssetState,
    TrajectoryYear,
    Milestone,
    TrajectorySummary,
    Trajectory,
)

from .money import round_cents, dollars_to_cents, cents_to_dollars, format_cents

from .projection import (
    NET_WORTH_MILESTONES,
    generate_trajectory,
    generate_quick_trajectory,
    initial_state,
    project_year,
)

from .comparison import (
    Change,
    IncomeAmountChange,
    IncomeGrowthChange,
    DebtRateChange,
    DebtPaymentChange,
    AssetContributionChange,
    AssetReturnChange,
    AssumptionChange,
    RetirementDelta,
    YearDelta,
    ComparisonSummary,
    Comparison,
    apply_changes,
    compare_trajectories,
    generate_key_insight,
    find_max_divergence_year,
    find_crossover_year,
    find_break_even_year,
    calculate_cumulative_impact,
    get_comparison_at_year,
)

from .dispatch import (
    GenerateRequest,
    GenerateQuickRequest,
    CompareRequest,
    TrajectoryResponse,
    ComparisonResponse,
    ErrorResponse,
    handle_request,
)

__all__ = [
    # Config
    "get_config_dir",
    "get_settings_path",
    "load_settings",
    "save_settings",
    "get_setting",
    "set_setting",
    "get_profile_path",
    "load_profile_data",
    "load_financial_profile",
    "save_profile_data",
    "profile_from_dict",
    "profile_to_dict",
    "init_config",
    "ConfigNotFoundError",
    "ProfileNotFoundError",
    # Schemas
    "InvalidInputError",
    "MonthYear",
    "Income",
    "Debt",
    "Asset",
    "Obligation",
    "Goal",
    "Assumptions",
    "Profile",
    "DebtState",
    "AssetState",
    "TrajectoryYear",
    "Milestone",
    "TrajectorySummary",
    "Trajectory",
    # Money
    "round_cents",
    "dollars_to_cents",
    "cents_to_dollars",
    "format_cents",
    # Projection
    "NET_WORTH_MILESTONES",
    "generate_trajectory",
    "generate_quick_trajectory",
    "initial_state",
    "project_year",
    # Comparison
    "Change",
    "IncomeAmountChange",
    "IncomeGrowthChange",
    "DebtRateChange",
    "DebtPaymentChange",
    "AssetContributionChange",
    "AssetReturnChange",
    "AssumptionChange",
    "RetirementDelta",
    "YearDelta",
    "ComparisonSummary",
    "Comparison",
    "apply_changes",
    "compare_trajectories",
    "generate_key_insight",
    "find_max_divergence_year",
    "find_crossover_year",
    "find_break_even_year",
    "calculate_cumulative_impact",
    "get_comparison_at_year",
    # Dispatch
    "GenerateRequest",
    "GenerateQuickRequest",
    "CompareRequest",
    "TrajectoryResponse",
    "ComparisonResponse",
    "ErrorResponse",
    "handle_request",
]

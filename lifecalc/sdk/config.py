"""Configuration management for life-calc.

Configuration is split into two files:

1. settings.json - Machine-specific settings
   - profile: path to the financial profile (optional, if not colocated)
   - quick_years: default length of quick projections

2. profile.yaml - The user's financial profile
   - income, debts, assets, obligations, goals, assumptions
   - Money is written in dollars; it is converted to integer cents on load

Config directory resolution:
1. LIFE_CALC_CONFIG_PATH environment variable (if set)
2. ~/.config/life-calc/ (XDG_CONFIG_HOME fallback)

Profile resolution:
1. Explicit path passed by the caller
2. settings.json "profile" key (if set via CLI)
3. profile.yaml in the config directory
"""

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml

from .money import cents_to_dollars, dollars_to_cents
from .schemas import InvalidInputError, Profile

logger = logging.getLogger(__name__)

APP_NAME = "life-calc"
SETTINGS_FILENAME = "settings.json"
PROFILE_FILENAME = "profile.yaml"

# Dollar-denominated fields per profile collection
MONEY_FIELDS = {
    "income": ("amount",),
    "debts": ("principal", "minimum_payment", "actual_payment", "property_value", "pmi_amount", "escrow"),
    "assets": ("balance", "monthly_contribution"),
    "obligations": ("monthly_amount",),
    "goals": ("target_amount",),
}

SAMPLE_PROFILE = {
    "name": "My Profile",
    "income": [
        {"id": "salary", "name": "Salary", "type": "salary", "amount": 85000},
    ],
    "debts": [
        {
            "id": "mortgage",
            "name": "Mortgage",
            "type": "mortgage",
            "principal": 320000,
            "interest_rate": 0.065,
            "term_months": 360,
            "property_value": 400000,
            "escrow": 450,
        },
        {
            "id": "car",
            "name": "Car Loan",
            "type": "auto",
            "principal": 18000,
            "interest_rate": 0.059,
            "term_months": 48,
        },
    ],
    "assets": [
        {
            "id": "401k",
            "name": "401(k)",
            "type": "retirement_pretax",
            "balance": 45000,
            "monthly_contribution": 700,
            "employer_match": 0.5,
            "match_limit": 0.06,
        },
        {"id": "savings", "name": "Emergency Fund", "type": "savings", "balance": 12000,
         "monthly_contribution": 200, "expected_return": 0.04},
    ],
    "obligations": [
        {"id": "insurance", "name": "Insurance", "monthly_amount": 250},
    ],
    "goals": [
        {"id": "emergency", "name": "Six-month emergency fund", "target_amount": 30000,
         "target_date": {"month": 12, "year": 2030}, "asset_id": "savings"},
    ],
    "assumptions": {
        "current_age": 32,
        "life_expectancy": 90,
        "tax_filing_status": "single",
        "state": "CA",
        "tax_year": 2025,
    },
}


class ConfigNotFoundError(Exception):
    """Raised when no configuration is found."""
    pass


class ProfileNotFoundError(Exception):
    """Raised when no profile is found."""
    pass


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Resolution order:
    1. LIFE_CALC_CONFIG_PATH environment variable
    2. ~/.config/life-calc/ (XDG_CONFIG_HOME)
    """
    env_path = os.environ.get("LIFE_CALC_CONFIG_PATH")
    if env_path:
        return Path(env_path)

    xdg_config_home = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
    return Path(xdg_config_home) / APP_NAME


def get_settings_path() -> Path:
    return get_config_dir() / SETTINGS_FILENAME


def load_settings() -> dict:
    """Load settings.json (empty dict if it doesn't exist)."""
    settings_file = get_settings_path()
    if not settings_file.exists():
        return {}

    with open(settings_file, "r") as f:
        return json.load(f)


def save_settings(settings: dict) -> Path:
    config_dir = get_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)

    settings_file = config_dir / SETTINGS_FILENAME
    with open(settings_file, "w") as f:
        json.dump(settings, f, indent=2)

    return settings_file


def get_setting(key: str, default: Any = None) -> Any:
    return load_settings().get(key, default)


def set_setting(key: str, value: Any) -> Path:
    settings = load_settings()
    settings[key] = value
    return save_settings(settings)


def get_profile_path(path: Optional[Path] = None, require_exists: bool = False) -> Path:
    """Get the path to the financial profile.

    Args:
        path: Explicit path (wins over settings and the config directory)
        require_exists: If True, raises ProfileNotFoundError if not found

    Raises:
        ProfileNotFoundError: If require_exists=True and no profile found
    """
    if path is not None:
        profile_path = Path(path)
        if require_exists and not profile_path.exists():
            raise ProfileNotFoundError(f"Profile not found: {profile_path}")
        return profile_path

    custom_profile = get_setting("profile")
    if custom_profile:
        profile_path = Path(custom_profile)
        if require_exists and not profile_path.exists():
            raise ProfileNotFoundError(
                f"Profile not found at configured path: {profile_path}\n\n"
                f"Update with: life-calc config set-profile /path/to/profile.yaml"
            )
        return profile_path

    profile_path = get_config_dir() / PROFILE_FILENAME
    if require_exists and not profile_path.exists():
        raise ProfileNotFoundError(
            f"No profile found. Checked:\n"
            f"  1. settings.json 'profile' key (not set)\n"
            f"  2. {profile_path} (not found)\n\n"
            f"Create a profile with: life-calc config init\n"
            f"Or set a custom path: life-calc config set-profile /path/to/profile.yaml"
        )
    return profile_path


def _convert_money(data: dict, convert) -> dict:
    result = copy.deepcopy(data)
    for collection, fields in MONEY_FIELDS.items():
        entities = result.get(collection)
        if not isinstance(entities, list):
            continue
        for index, entity in enumerate(entities):
            if not isinstance(entity, dict):
                continue
            for name in fields:
                if entity.get(name) is None:
                    continue
                try:
                    entity[name] = convert(entity[name])
                except InvalidInputError as e:
                    label = entity.get("name") or f"#{index + 1}"
                    raise InvalidInputError(
                        f"{collection}[{index}].{name}",
                        f"{label}: must be a number, got {entity[name]!r}",
                    ) from e
    return result


def profile_from_dict(data: dict) -> Profile:
    """Build a Profile from a dollar-denominated dict (as written in profile.yaml).

    Raises:
        InvalidInputError: the document is not a mapping or a money field is not a number
        pydantic.ValidationError: the profile is malformed
    """
    if not isinstance(data, dict):
        raise InvalidInputError("profile", f"must be a mapping, got {type(data).__name__}")
    return Profile.model_validate(_convert_money(data, dollars_to_cents))


def profile_to_dict(profile: Profile) -> dict:
    """Inverse of profile_from_dict: a plain dict with money in dollars."""
    return _convert_money(profile.model_dump(mode="json", exclude_none=True), cents_to_dollars)


def load_profile_data(path: Optional[Path] = None) -> dict:
    """Raw profile YAML as a dict.

    Raises:
        ProfileNotFoundError: no profile at the resolved path
    """
    profile_path = get_profile_path(path, require_exists=True)
    with open(profile_path, "r") as f:
        return yaml.safe_load(f) or {}


def load_financial_profile(path: Optional[Path] = None) -> Profile:
    """Load and validate the financial profile."""
    profile_path = get_profile_path(path, require_exists=True)
    logger.debug(f"Loading profile from {profile_path}")
    return profile_from_dict(load_profile_data(profile_path))


def save_profile_data(data: dict, path: Optional[Path] = None) -> Path:
    if path is None:
        path = get_profile_path()
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    return path


def init_config(force: bool = False) -> Path:
    """Write a sample profile.yaml into the config directory.

    Raises:
        FileExistsError: a profile already exists and force is False
    """
    profile_path = get_config_dir() / PROFILE_FILENAME
    if profile_path.exists() and not force:
        raise FileExistsError(f"Profile already exists: {profile_path}")
    return save_profile_data(SAMPLE_PROFILE, profile_path)


def require_config_dir() -> Path:
    """Config directory, which must already exist.

    Raises:
        ConfigNotFoundError: the directory has not been created yet
    """
    config_dir = get_config_dir()
    if not config_dir.is_dir():
        raise ConfigNotFoundError(
            f"No configuration directory at {config_dir}\n\n"
            f"Create one with: life-calc config init"
        )
    return config_dir

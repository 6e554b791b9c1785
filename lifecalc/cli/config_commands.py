"""Config CLI commands for Life Calc.

- settings.json: machine-specific settings (profile path, quick_years)
- profile.yaml: the financial profile itself
"""

import json
import os
from pathlib import Path

import click
import yaml
from pydantic import ValidationError

from lifecalc.sdk.config import (
    ConfigNotFoundError,
    ProfileNotFoundError,
    get_profile_path,
    get_settings_path,
    init_config,
    load_financial_profile,
    load_settings,
    require_config_dir,
    set_setting,
)
from lifecalc.sdk.schemas import InvalidInputError, Profile

# Settings stored as positive integers
INTEGER_SETTINGS = ("quick_years",)


def _describe(profile: Profile) -> str:
    return (
        f"{len(profile.income)} income, {len(profile.debts)} debts, "
        f"{len(profile.assets)} assets, {len(profile.obligations)} obligations, "
        f"{len(profile.goals)} goals"
    )


@click.group()
def config():
    """Manage settings (settings.json) and the default profile.

    Settings include:
    - profile: path to your profile.yaml
    - quick_years: length of 'project --quick' previews
    """
    pass


@config.command("show")
def config_show():
    """Show configuration paths, settings and profile status."""
    source = "from LIFE_CALC_CONFIG_PATH" if os.environ.get("LIFE_CALC_CONFIG_PATH") else "XDG default"
    try:
        config_dir = require_config_dir()
    except ConfigNotFoundError as e:
        click.echo(str(e))
        return
    click.echo(f"Config directory: {config_dir} ({source})")

    settings = load_settings()
    if settings:
        click.echo(f"Settings: {get_settings_path()}")
        click.echo(json.dumps(settings, indent=2))
    else:
        click.echo(f"Settings: {get_settings_path()} (none configured)")

    profile_path = get_profile_path()
    try:
        profile = load_financial_profile()
    except ProfileNotFoundError:
        click.echo(f"Profile: {profile_path} (not found)")
        click.echo("Create a sample profile with: life-calc config init")
        return
    except (ValidationError, InvalidInputError, yaml.YAMLError) as e:
        click.echo(f"Profile: {profile_path} [INVALID]")
        click.echo(str(e))
        return

    click.echo(f"Profile: {profile_path} [OK]")
    click.echo(f"  {profile.name}: {_describe(profile)}")


@config.command("init")
@click.option("--force", is_flag=True, help="Overwrite an existing profile.yaml")
def config_init(force: bool):
    """Write a sample profile.yaml to the config directory."""
    try:
        path = init_config(force=force)
    except FileExistsError as e:
        raise click.ClickException(f"{e} (use --force to overwrite)")
    click.echo(f"Sample profile written to: {path}")
    click.echo("Edit it, then run: life-calc project")


@config.command("set-profile")
@click.argument("profile_path", type=click.Path(dir_okay=False))
def config_set_profile(profile_path):
    """Make PROFILE_PATH the default profile for 'project'.

    An existing file is validated first. A missing file is accepted so the
    path can be set before the profile is written.

    Example:
        life-calc config set-profile ~/finances/profile.yaml
    """
    path = Path(profile_path).expanduser().resolve()
    if path.exists():
        try:
            profile = load_financial_profile(path)
        except (ValidationError, InvalidInputError, yaml.YAMLError) as e:
            raise click.ClickException(f"Invalid profile at {path}: {e}")
        click.echo(f"{profile.name}: {_describe(profile)}")
    else:
        click.echo(f"Note: {path} does not exist yet", err=True)

    settings_file = set_setting("profile", str(path))
    click.echo(f"Default profile: {path} (saved to {settings_file})")


@config.command("set")
@click.argument("key")
@click.argument("value")
def config_set(key, value):
    """Store a machine setting, e.g. 'quick_years 15'."""
    if key == "profile":
        raise click.ClickException("The profile path has its own command: life-calc config set-profile PATH")

    if key in INTEGER_SETTINGS:
        try:
            value = int(value)
        except ValueError:
            raise click.ClickException(f"{key} must be a whole number, got '{value}'")
        if value <= 0:
            raise click.ClickException(f"{key} must be positive, got {value}")

    settings_file = set_setting(key, value)
    click.echo(f"{key} = {value} (saved to {settings_file})")


@config.command("get")
@click.argument("key")
def config_get(key):
    """Print one machine setting."""
    settings = load_settings()
    if key not in settings:
        known = ", ".join(sorted(settings)) or "none"
        raise click.ClickException(f"'{key}' is not set (configured: {known})")
    click.echo(settings[key])

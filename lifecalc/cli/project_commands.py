"""Project command: run a trajectory for a profile."""

import json
from pathlib import Path
from typing import Optional

import click
import yaml
from pydantic import ValidationError
from rich.console import Console

from lifecalc.sdk.config import ProfileNotFoundError, get_setting, load_financial_profile
from lifecalc.sdk.projection import DEFAULT_QUICK_YEARS, generate_quick_trajectory, generate_trajectory
from lifecalc.sdk.schemas import InvalidInputError, Profile, Trajectory

from .renderers import render_trajectory


def load_profile_or_fail(path: Optional[str]) -> Profile:
    """Load a profile for a command, mapping failures to ClickException."""
    try:
        return load_financial_profile(Path(path) if path else None)
    except ProfileNotFoundError as e:
        raise click.ClickException(str(e))
    except (ValidationError, InvalidInputError) as e:
        raise click.ClickException(f"Invalid profile: {e}")
    except yaml.YAMLError as e:
        raise click.ClickException(f"Profile is not valid YAML: {e}")


def run_projection(profile: Profile, years: Optional[int]) -> Trajectory:
    try:
        if years is None:
            return generate_trajectory(profile)
        return generate_quick_trajectory(profile, years=years)
    except InvalidInputError as e:
        raise click.ClickException(str(e))


@click.command()
@click.argument("profile_path", metavar="[PROFILE]", required=False, type=click.Path(dir_okay=False))
@click.option("--years", "-y", type=int, default=None, help="Project only the first N years")
@click.option("--quick", is_flag=True, help="Quick preview (settings.json 'quick_years', default 10)")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def project(profile_path: Optional[str], years: Optional[int], quick: bool, output_json: bool):
    """Project a profile year by year to life expectancy.

    Examples:

    \b
      life-calc project
      life-calc project scenarios/pay-off-car.yaml --years 15
      life-calc project --quick --json
    """
    if quick and years is None:
        years = int(get_setting("quick_years", DEFAULT_QUICK_YEARS))

    profile = load_profile_or_fail(profile_path)
    trajectory = run_projection(profile, years)

    if output_json:
        click.echo(json.dumps(trajectory.model_dump(mode="json"), indent=2))
    else:
        console = Console(width=140)
        console.print(f"\n[bold]{profile.name}[/bold]")
        render_trajectory(console, trajectory)

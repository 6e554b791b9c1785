"""Compare command: project two profiles and diff the results."""

import json
from typing import Optional

import click
from rich.console import Console

from lifecalc.sdk.comparison import compare_trajectories
from lifecalc.sdk.schemas import InvalidInputError

from .project_commands import load_profile_or_fail, run_projection
from .renderers import render_comparison


@click.command()
@click.argument("baseline_path", metavar="BASELINE", type=click.Path(exists=True, dir_okay=False))
@click.argument("alternate_path", metavar="ALTERNATE", type=click.Path(exists=True, dir_okay=False))
@click.option("--name", "-n", default="Comparison", help="Label for the comparison")
@click.option("--years", "-y", type=int, default=None, help="Compare only the first N years")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def compare(baseline_path: str, alternate_path: str, name: str, years: Optional[int], output_json: bool):
    """Compare two profiles (e.g. before and after a decision).

    Deltas are ALTERNATE minus BASELINE. Both profiles must start at the same
    age and year.

    Example:

    \b
      life-calc compare current.yaml refinance.yaml --name "Refinance at 5.5%"
    """
    baseline = run_projection(load_profile_or_fail(baseline_path), years)
    alternate = run_projection(load_profile_or_fail(alternate_path), years)

    try:
        comparison = compare_trajectories(baseline, alternate, name=name)
    except InvalidInputError as e:
        raise click.ClickException(str(e))

    if output_json:
        data = comparison.model_dump(mode="json", exclude={"baseline", "alternate"})
        click.echo(json.dumps(data, indent=2))
    else:
        render_comparison(Console(width=140), comparison)

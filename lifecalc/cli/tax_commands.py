"""Tax command: one-off tax calculation for an income."""

import json
from dataclasses import asdict
from typing import Optional

import click
from rich.console import Console

from lifecalc.sdk.money import dollars_to_cents
from lifecalc.sdk.schemas import InvalidInputError
from lifecalc.sdk.taxes import calculate_total_tax, load_tax_rules

from .renderers import render_tax

FILING_STATUSES = ["single", "married_joint", "married_separate", "head_of_household"]


@click.command()
@click.argument("income", type=float)
@click.option("--status", "-s", type=click.Choice(FILING_STATUSES), default="single", help="Filing status")
@click.option("--state", default="CA", help="Two-letter state code")
@click.option("--contribution", "-c", type=float, default=0.0, help="Pre-tax retirement contribution ($)")
@click.option("--year", type=int, default=None, help="Tax year (latest available if omitted)")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON (amounts in cents)")
def tax(income: float, status: str, state: str, contribution: float, year: Optional[int], output_json: bool):
    """Federal, state and FICA tax for an annual INCOME in dollars.

    Example:

    \b
      life-calc tax 120000 --status married_joint --state TX --contribution 23000
    """
    rules = load_tax_rules(year)
    try:
        result = calculate_total_tax(
            dollars_to_cents(income),
            status,
            state,
            dollars_to_cents(contribution),
            rules=rules,
        )
    except InvalidInputError as e:
        raise click.ClickException(str(e))

    if output_json:
        click.echo(json.dumps({"year": rules.year, **asdict(result)}, indent=2))
    else:
        render_tax(Console(), result, rules.year)

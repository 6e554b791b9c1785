"""Rich renderers for trajectories, comparisons and tax breakdowns.

Transforms SDK models into formatted Rich tables.
"""

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from lifecalc.sdk.comparison import Comparison
from lifecalc.sdk.money import format_cents
from lifecalc.sdk.schemas import Trajectory
from lifecalc.sdk.taxes import TotalTaxResult


def _signed(cents: int) -> str:
    if cents > 0:
        return f"[green]+{format_cents(cents)}[/green]"
    if cents < 0:
        return f"[red]{format_cents(cents)}[/red]"
    return format_cents(0)


def render_trajectory(console: Console, trajectory: Trajectory) -> None:
    """Render a trajectory as a yearly table, milestones and a summary panel."""
    table = Table(title="Trajectory", box=box.SIMPLE_HEAD, header_style="bold")
    table.add_column("Year")
    table.add_column("Age", justify="right")
    table.add_column("Gross", justify="right")
    table.add_column("Tax", justify="right")
    table.add_column("Net", justify="right")
    table.add_column("Debt", justify="right")
    table.add_column("Assets", justify="right")
    table.add_column("Net Worth", justify="right")
    table.add_column("Ready", justify="right")

    for year in trajectory.years:
        net_worth = format_cents(year.net_worth, compact=True)
        if year.net_worth < 0:
            net_worth = f"[red]{net_worth}[/red]"
        table.add_row(
            str(year.year),
            str(year.age),
            format_cents(year.gross_income, compact=True),
            format_cents(year.total_tax, compact=True),
            format_cents(year.net_income, compact=True),
            format_cents(year.total_debt, compact=True),
            format_cents(year.total_assets, compact=True),
            net_worth,
            f"{year.retirement_readiness:.0%}",
        )
    console.print(table)

    if trajectory.milestones:
        milestones = Table(title="Milestones", box=box.SIMPLE_HEAD, header_style="bold")
        milestones.add_column("When")
        milestones.add_column("Event")
        for m in trajectory.milestones:
            style = "red" if m.type == "goal_missed" else None
            milestones.add_row(f"{m.year}-{m.month:02d}", m.description, style=style)
        console.print(milestones)

    _render_summary(console, trajectory)


def _render_summary(console: Console, trajectory: Trajectory) -> None:
    s = trajectory.summary
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("key", style="dim")
    table.add_column("value", justify="right")

    if s.retirement_year is not None:
        retirement = f"{s.retirement_year} (age {s.retirement_age})"
    else:
        retirement = "[yellow]not reached[/yellow]"

    table.add_row("Years projected", str(s.total_years))
    table.add_row("Retirement ready", retirement)
    table.add_row("Lifetime income", format_cents(s.total_lifetime_income))
    table.add_row("Lifetime taxes", format_cents(s.total_lifetime_taxes))
    table.add_row("Lifetime interest", format_cents(s.total_lifetime_interest))
    table.add_row("Net worth at retirement", format_cents(s.net_worth_at_retirement))
    table.add_row("Net worth at end", format_cents(s.net_worth_at_end))
    table.add_row("Work hours", f"{s.total_lifetime_work_hours:,.0f}")
    table.add_row("Effective hourly rate", format_cents(s.average_effective_hourly_rate))
    table.add_row("Goals achieved / missed", f"{s.goals_achieved} / {s.goals_missed}")

    console.print(Panel(table, title="Summary", border_style="dim"))


def render_comparison(console: Console, comparison: Comparison) -> None:
    """Render yearly deltas and the comparison summary."""
    table = Table(title=comparison.name, box=box.SIMPLE_HEAD, header_style="bold")
    table.add_column("Year")
    table.add_column("Age", justify="right")
    table.add_column("Net Worth Δ", justify="right")
    table.add_column("Income Δ", justify="right")
    table.add_column("Taxes Δ", justify="right")
    table.add_column("Debt Δ", justify="right")

    for d in comparison.deltas:
        table.add_row(
            str(d.year),
            str(d.age),
            _signed(d.net_worth_delta),
            _signed(d.income_delta),
            format_cents(d.taxes_delta),
            format_cents(d.debt_delta),
        )
    console.print(table)

    s = comparison.summary
    retirement = {
        "enabled_by_change": "[green]enabled by change[/green]",
        "disabled_by_change": "[red]prevented by change[/red]",
        "neither_achieved": "not reached in either",
    }.get(s.retirement.kind)
    if retirement is None:
        retirement = f"{s.retirement.months_earlier:+d} months earlier"

    summary = Table(show_header=False, box=None, padding=(0, 2))
    summary.add_column("key", style="dim")
    summary.add_column("value", justify="right")
    summary.add_row("Retirement", retirement)
    summary.add_row("Lifetime interest Δ", format_cents(s.lifetime_interest_delta))
    summary.add_row("Lifetime taxes Δ", format_cents(s.lifetime_taxes_delta))
    summary.add_row("Net worth at retirement Δ", _signed(s.net_worth_at_retirement_delta))
    summary.add_row("Net worth at end Δ", _signed(s.net_worth_at_end_delta))
    summary.add_row("Work hours Δ", f"{s.work_hours_delta:+,.0f}")

    console.print(Panel(summary, title="Summary", border_style="dim"))
    console.print(Panel(f"[bold]{s.key_insight}[/bold]", title="Key insight", border_style="cyan"))


def render_tax(console: Console, result: TotalTaxResult, year: int) -> None:
    table = Table(title=f"Tax ({year})", show_header=True, header_style="bold")
    table.add_column("Component")
    table.add_column("Amount", justify="right")

    table.add_row("Gross income", format_cents(result.gross_income))
    table.add_row("Federal", format_cents(result.federal_tax))
    table.add_row("State", format_cents(result.state_tax))
    table.add_row("Social Security", format_cents(result.social_security))
    table.add_row("Medicare", format_cents(result.medicare))
    table.add_row("Total tax", format_cents(result.total_tax), style="bold")
    table.add_row("Net income", f"[green]{format_cents(result.net_income)}[/green]")
    table.add_row("Effective rate", f"{result.effective_rate:.2%}")
    table.add_row("Marginal rate", f"{result.marginal_rate:.0%}")

    console.print(table)

"""Life Calc CLI - Command-line interface for financial trajectory projections."""

import logging
import os

import click

from lifecalc import __version__

from .compare_commands import compare
from .config_commands import config as config_group
from .project_commands import project
from .tax_commands import tax


@click.group()
@click.version_option(version=__version__, prog_name="life-calc")
def cli():
    """Life Calc - Project personal finances forward and compare decisions.

    Profiles are YAML files with dollar amounts. The default profile is
    loaded from (in order):

    \b
    1. settings.json 'profile' key (if set via CLI)
    2. LIFE_CALC_CONFIG_PATH/profile.yaml
    3. ~/.config/life-calc/profile.yaml (XDG default)

    Set LOG_LEVEL=DEBUG to trace each projected year.
    """
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(levelname)s %(name)s: %(message)s",
    )


cli.add_command(project)
cli.add_command(compare)
cli.add_command(tax)
cli.add_command(config_group)


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()

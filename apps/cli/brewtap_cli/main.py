"""brewtap CLI entry point.

Orchestrator for the brewtap command-line interface. Registers all
command modules and provides the main entry point.

Execution Context:
    CLI application - run via `python main.py` or `brewtap` command

Dependencies:
    - click: CLI framework
    - brewtap_core: Core library

Metadata:
    Version: 0.1.0
    Author: brewtap Team
"""
from __future__ import annotations

import sys

import click

from brewtap_cli import __version__
from brewtap_cli.commands.check import check
from brewtap_cli.commands.config import config
from brewtap_cli.commands.install_key import install_key
from brewtap_cli.commands.publish import publish
from brewtap_cli.commands.utils import setup_logging
from brewtap_cli.commands.version import version


# ---- CLI Group ----------------------------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="brewtap")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable debug logging.",
)
def cli(
        verbose: bool,
) -> None:
    """brewtap - Publish Homebrew formula bumps from CI.

    Installs SSH credentials, reads the version from the project
    manifest, and pushes the updated formula to a Homebrew tap when
    the build comes from the main branch.
    """
    setup_logging(verbose)


# ---- Register Commands --------------------------------------------------------------------------------------


cli.add_command(install_key)
cli.add_command(publish)
cli.add_command(version)
cli.add_command(check)
cli.add_command(config)


# ---- Main Function ------------------------------------------------------------------------------------------


def main() -> int:
    """Main entry point for brewtap CLI.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    try:
        cli()
        return 0
    except Exception as cli_error:
        click.echo(f"Error: {cli_error}", err=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())

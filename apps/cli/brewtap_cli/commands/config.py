"""brewtap config command.

Shows the effective configuration or writes a brewtap.json.

Execution Context:
    CLI command - invoked via `brewtap config`

Dependencies:
    - click: CLI framework
    - rich: Terminal output
    - brewtap_core: Configuration

Metadata:
    Version: 0.1.0
    Author: brewtap Team
"""
from __future__ import annotations

from pathlib import Path

import click

from brewtap_core.settings import CONFIG_FILE

from .utils import console
from .utils import resolve_config


# ---- Config Command -----------------------------------------------------------------------------------------


@click.command()
@click.option(
    "--init",
    "write_file",
    is_flag=True,
    help="Write the effective configuration to brewtap.json.",
)
@click.option(
    "--tap-url",
    "-t",
    default="",
    help="Tap clone URL.",
)
@click.option(
    "--email",
    default="",
    help="Commit email.",
)
@click.option(
    "--name",
    default="",
    help="Committer name.",
)
@click.option(
    "--name-key",
    type=click.Choice(["user.email", "user.name"]),
    default=None,
    help="Git config key receiving the committer name.",
)
@click.option(
    "--main-branch",
    default="",
    help="Branch allowed to publish.",
)
def config(
        write_file: bool,
        tap_url: str,
        email: str,
        name: str,
        name_key: str | None,
        main_branch: str,
) -> None:
    """Show or initialize publish configuration.

    Examples:
        brewtap config
        brewtap config --init --tap-url git@github.com:owner/homebrew-tap.git --email ci@example.com
        brewtap config --init --name "CI Bot" --name-key user.name
    """
    try:
        config_obj = resolve_config(tap_url=tap_url, main_branch=main_branch)
        config_obj.identity.email = email or config_obj.identity.email
        config_obj.identity.name = name or config_obj.identity.name
        config_obj.identity.name_key = name_key or config_obj.identity.name_key

        if write_file:
            config_path = Path.cwd() / CONFIG_FILE
            config_obj.save(config_path)
            console.print(f"[green]Wrote {config_path}[/green]")

        console.print("[bold]Publish Configuration:[/bold]")
        console.print()
        console.print(f"  [bold]Tap URL:[/bold] {config_obj.tap.url or '[dim](not set)[/dim]'}")
        console.print(f"  [bold]Formula:[/bold] {config_obj.formula_file} -> {config_obj.tap.formula_dir}/")
        console.print(f"  [bold]Manifest:[/bold] {config_obj.manifest_file}")
        console.print(f"  [bold]Main Branch:[/bold] {config_obj.main_branch}")
        console.print(f"  [bold]Git Email:[/bold] {config_obj.identity.email or '[dim](not set)[/dim]'}")
        console.print(f"  [bold]Git Name:[/bold] {config_obj.identity.name} ({config_obj.identity.name_key})")
        console.print(f"  [bold]SSH Dir:[/bold] {config_obj.ssh_dir}")

        problems = config_obj.validate()
        if problems:
            console.print()
            for problem in problems:
                console.print(f"[yellow]Warning: {problem}[/yellow]")
        console.print()

    except Exception as config_error:
        msg = f"Config operation failed: {config_error}"
        raise click.ClickException(msg) from config_error

"""brewtap version command.

Shows the version extracted from the manifest and the resulting
commit message.

Execution Context:
    CLI command - invoked via `brewtap version`

Dependencies:
    - click: CLI framework
    - rich: Terminal output
    - brewtap_core: Manifest parsing

Metadata:
    Version: 0.1.0
    Author: brewtap Team
"""
from __future__ import annotations

import click

from brewtap_core.manifest import build_commit_message
from brewtap_core.manifest import read_manifest_version

from .utils import console
from .utils import resolve_config


# ---- Version Command ----------------------------------------------------------------------------------------


@click.command()
@click.option(
    "--manifest",
    "-m",
    default="",
    help="Manifest holding the version (default: Cargo.toml).",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    help="Print only the version.",
)
def version(
        manifest: str,
        quiet: bool,
) -> None:
    """Show the manifest version and commit message.

    Examples:
        brewtap version
        brewtap version --manifest pyproject.toml -q
    """
    try:
        config = resolve_config(manifest=manifest)
        found = read_manifest_version(config.manifest_path)

        if quiet:
            click.echo(found)
            return

        console.print(f"  [bold]Manifest:[/bold] {config.manifest_path}")
        console.print(f"  [bold]Version:[/bold] {found or '[yellow](none)[/yellow]'}")
        console.print(f"  [bold]Commit message:[/bold] {build_commit_message(found)}")

    except Exception as version_error:
        msg = f"Version lookup failed: {version_error}"
        raise click.ClickException(msg) from version_error

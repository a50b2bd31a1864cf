"""brewtap check command.

Reports whether the publish guard passes for this build.

Execution Context:
    CLI command - invoked via `brewtap check`

Dependencies:
    - click: CLI framework
    - rich: Terminal output
    - brewtap_core: Build context

Metadata:
    Version: 0.1.0
    Author: brewtap Team
"""
from __future__ import annotations

import click

from brewtap_core.build import BuildContext
from brewtap_core.build import should_publish

from .utils import console
from .utils import resolve_config


# ---- Check Command ------------------------------------------------------------------------------------------


@click.command()
@click.option(
    "--branch",
    "-b",
    default="",
    help="Source branch of this build (defaults to the CI environment).",
)
@click.option(
    "--main-branch",
    default="",
    help="Branch allowed to publish (default: master).",
)
@click.pass_context
def check(
        ctx: click.Context,
        branch: str,
        main_branch: str,
) -> None:
    """Check whether this build would publish.

    Exits with status 0 when the guard passes and 1 otherwise.

    Examples:
        brewtap check
        brewtap check --branch refs/heads/master
    """
    try:
        config = resolve_config(main_branch=main_branch)
        build = BuildContext.from_env()
        if branch:
            build.source_branch = branch

        should_run, reason = should_publish(build, config.main_branch)
    except Exception as check_error:
        msg = f"Check failed: {check_error}"
        raise click.ClickException(msg) from check_error

    if build.provider:
        console.print(f"[dim]Branch from {build.provider}: {build.source_branch}[/dim]")

    if should_run:
        console.print(f"[green]Would publish: {reason}[/green]")
        return

    console.print(f"[yellow]Would skip: {reason}[/yellow]")
    ctx.exit(1)

"""brewtap publish command.

Publishes the checkout's formula to the Homebrew tap.

Execution Context:
    CLI command - invoked via `brewtap publish`

Dependencies:
    - click: CLI framework
    - rich: Terminal output
    - brewtap_core: Publish pipeline

Metadata:
    Version: 0.1.0
    Author: brewtap Team
"""
from __future__ import annotations

import click

from brewtap_core.build import BuildContext
from brewtap_core.publish import PublishOperations
from brewtap_core.runner import CommandRunner
from brewtap_core.settings import load_credentials

from .utils import console
from .utils import echo_command
from .utils import resolve_config


# ---- Publish Command ----------------------------------------------------------------------------------------


@click.command()
@click.option(
    "--config",
    "config_path",
    default="",
    help="Path to brewtap.json (defaults to ./brewtap.json if present).",
)
@click.option(
    "--tap-url",
    "-t",
    default="",
    help="Tap clone URL (or BREWTAP_TAP_URL).",
)
@click.option(
    "--formula",
    "-f",
    default="",
    help="Formula file in the checkout (default: espanso.rb).",
)
@click.option(
    "--manifest",
    "-m",
    default="",
    help="Manifest holding the version (default: Cargo.toml).",
)
@click.option(
    "--main-branch",
    default="",
    help="Branch allowed to publish (default: master).",
)
@click.option(
    "--branch",
    "-b",
    default="",
    help="Source branch of this build (defaults to the CI environment).",
)
@click.option(
    "--force",
    is_flag=True,
    help="Publish even when the branch guard fails.",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Clone and replace the formula, but do not commit or push.",
)
@click.option(
    "--provision",
    is_flag=True,
    help="Install SSH credentials before publishing.",
)
@click.option(
    "--known-hosts",
    default="",
    help="Known-hosts entry for --provision (or BREWTAP_KNOWN_HOSTS).",
)
@click.option(
    "--public-key",
    default="",
    help="Public key for --provision (or BREWTAP_SSH_PUBLIC_KEY).",
)
@click.option(
    "--key-file",
    default="",
    help="Private key secure file for --provision (or BREWTAP_SSH_KEY_FILE).",
)
def publish(
        config_path: str,
        tap_url: str,
        formula: str,
        manifest: str,
        main_branch: str,
        branch: str,
        force: bool,
        dry_run: bool,
        provision: bool,
        known_hosts: str,
        public_key: str,
        key_file: str,
) -> None:
    """Publish the formula to the Homebrew tap.

    Clones the tap, replaces its formula with the one in the checkout,
    and pushes a commit named after the manifest version. Only runs on
    builds of the main branch unless --force is given.

    Examples:
        brewtap publish
        brewtap publish --tap-url git@github.com:owner/homebrew-tap.git
        brewtap publish --provision --public-key "ssh-rsa ..." --key-file azuressh
        brewtap publish --branch master --dry-run
    """
    try:
        config = resolve_config(
            config_path=config_path,
            tap_url=tap_url,
            formula=formula,
            manifest=manifest,
            main_branch=main_branch,
        )

        build = BuildContext.from_env()
        if branch:
            build.source_branch = branch

        runner = CommandRunner(cwd=config.work_path, echo=echo_command)
        ops = PublishOperations(config, runner, build)

        if provision:
            bundle = load_credentials(known_hosts, public_key, key_file)
            installed = ops.provision(bundle)
            console.print(f"[dim]Installed SSH key {installed.private_key_path}[/dim]")

        result = ops.publish(force=force, dry_run=dry_run)

        if result.skipped:
            console.print(f"[yellow]Publish skipped: {result.reason}[/yellow]")
            return

        console.print()
        if result.pushed:
            console.print(f"[green]Published version {result.version or '(empty)'} to {config.tap.url}[/green]")
        else:
            console.print("[yellow]Dry run: formula replaced, nothing committed[/yellow]")
        console.print()
        console.print(f"  [bold]Commit:[/bold] {result.commit_message}")
        console.print(f"  [bold]Formula:[/bold] {result.formula_path}")

        if not result.version:
            console.print("[yellow]Warning: no version found in manifest[/yellow]")

    except Exception as publish_error:
        msg = f"Publish failed: {publish_error}"
        raise click.ClickException(msg) from publish_error

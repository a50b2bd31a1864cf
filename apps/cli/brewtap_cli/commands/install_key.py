"""brewtap install-key command.

Installs SSH credentials into the build agent.

Execution Context:
    CLI command - invoked via `brewtap install-key`

Dependencies:
    - click: CLI framework
    - rich: Terminal output
    - brewtap_core: Credential provisioning

Metadata:
    Version: 0.1.0
    Author: brewtap Team
"""
from __future__ import annotations

import click

from brewtap_core.credentials import git_ssh_command
from brewtap_core.credentials import install_ssh_key
from brewtap_core.settings import load_credentials

from .utils import console
from .utils import resolve_config


# ---- Install Key Command ------------------------------------------------------------------------------------


@click.command("install-key")
@click.option(
    "--known-hosts",
    default="",
    help="Known-hosts entry (or BREWTAP_KNOWN_HOSTS).",
)
@click.option(
    "--public-key",
    default="",
    help="Public key text (or BREWTAP_SSH_PUBLIC_KEY).",
)
@click.option(
    "--key-file",
    default="",
    help="Private key secure file (or BREWTAP_SSH_KEY_FILE).",
)
@click.option(
    "--ssh-dir",
    default="",
    help="SSH directory to install into (default: ~/.ssh).",
)
def install_key(
        known_hosts: str,
        public_key: str,
        key_file: str,
        ssh_dir: str,
) -> None:
    """Install an SSH key pair and known-hosts entry.

    Examples:
        brewtap install-key --public-key "ssh-rsa AAAA..." --key-file azuressh
        brewtap install-key --known-hosts "github.com ssh-rsa AAAA..." --ssh-dir /tmp/ssh
    """
    try:
        config = resolve_config(ssh_dir=ssh_dir)
        bundle = load_credentials(known_hosts, public_key, key_file)
        installed = install_ssh_key(bundle, config.ssh_path)

        console.print(f"[green]Installed SSH key into {installed.ssh_dir}[/green]")
        console.print()
        console.print(f"  [bold]Private key:[/bold] {installed.private_key_path}")
        console.print(f"  [bold]Public key:[/bold] {installed.public_key_path}")
        console.print(f"  [bold]Known hosts:[/bold] {installed.known_hosts_path}")
        if ssh_dir:
            console.print()
            console.print("[dim]For git outside ~/.ssh:[/dim]")
            console.print(f'[dim]export GIT_SSH_COMMAND="{git_ssh_command(installed)}"[/dim]')

    except Exception as install_error:
        msg = f"Key installation failed: {install_error}"
        raise click.ClickException(msg) from install_error

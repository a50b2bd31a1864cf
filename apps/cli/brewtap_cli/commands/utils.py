"""Utility functions for brewtap CLI commands.

Execution Context:
    CLI command utilities - imported by command modules

Dependencies:
    - rich: Console output and log handler
    - brewtap_core.settings: Configuration loading

Metadata:
    Version: 0.1.0
    Author: brewtap Team
"""
from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

from brewtap_core.models import PublishConfig
from brewtap_core.settings import load_config

console = Console()


def setup_logging(
        verbose: bool = False,
) -> None:
    """Configure root logging for the CLI.

    Args:
        verbose: Log at DEBUG instead of WARNING.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def echo_command(
        line: str,
) -> None:
    """Print a command trace line without rich markup."""
    console.print(line, markup=False, highlight=False, style="dim")


def resolve_config(
        config_path: str = "",
        tap_url: str = "",
        formula: str = "",
        manifest: str = "",
        main_branch: str = "",
        work_dir: str = "",
        ssh_dir: str = "",
) -> PublishConfig:
    """Load config and apply CLI option overrides.

    Args:
        config_path: Explicit brewtap.json path.
        tap_url: Tap clone URL.
        formula: Formula file in the checkout.
        manifest: Manifest file in the checkout.
        main_branch: Branch allowed to publish.
        work_dir: Source checkout directory.
        ssh_dir: SSH directory for credentials.

    Returns:
        Effective PublishConfig.
    """
    config = load_config(config_path or None)
    config.tap.url = tap_url or config.tap.url
    config.formula_file = formula or config.formula_file
    config.manifest_file = manifest or config.manifest_file
    config.main_branch = main_branch or config.main_branch
    config.work_dir = work_dir or config.work_dir
    config.ssh_dir = ssh_dir or config.ssh_dir
    return config

"""Publish pipeline for Homebrew formula bumps.

Runs the publish job end to end: guard on the build branch, print the
known hosts, configure the commit identity, read the version, clone the
tap, replace the formula, then commit and push. Steps run in order and
the first failure propagates; nothing is retried or rolled back.

Execution Context:
    Library module - imported by the publish CLI command

Dependencies:
    - brewtap_core.build: Publish guard
    - brewtap_core.credentials: SSH provisioning
    - brewtap_core.manifest: Version extraction
    - brewtap_core.tap: Tap git operations

Metadata:
    Version: 0.1.0
    Author: brewtap Team
"""
from __future__ import annotations

import logging
from pathlib import Path

from brewtap_core.build import BuildContext
from brewtap_core.build import should_publish
from brewtap_core.credentials import KNOWN_HOSTS_FILE
from brewtap_core.credentials import git_ssh_command
from brewtap_core.credentials import install_ssh_key
from brewtap_core.credentials import show_known_hosts
from brewtap_core.manifest import build_commit_message
from brewtap_core.manifest import read_manifest_version
from brewtap_core.models import DEFAULT_SSH_DIR
from brewtap_core.models import CredentialBundle
from brewtap_core.models import InstalledCredentials
from brewtap_core.models import PublishConfig
from brewtap_core.models import PublishResult
from brewtap_core.runner import CommandRunner
from brewtap_core.tap import TapRepository

logger = logging.getLogger(__name__)


# ---- Publish Operations Class -------------------------------------------------------------------------------


class PublishOperations:
    """Runs a formula publish job.

    Attributes:
        config: Publish configuration.
        runner: Command runner shared by all steps.
        build: Build context used by the branch guard.
    """

    def __init__(
            self,
            config: PublishConfig,
            runner: CommandRunner | None = None,
            build: BuildContext | None = None,
    ) -> None:
        """Initialize publish operations.

        Args:
            config: Publish configuration.
            runner: Command runner (defaults to one rooted at the checkout).
            build: Build context (defaults to the CI environment).
        """
        self.config = config
        self.runner = runner or CommandRunner(cwd=config.work_path)
        self.build = build or BuildContext.from_env()

    @property
    def tap(
            self,
    ) -> TapRepository:
        """Tap repository cloned into the checkout."""
        return TapRepository(self.config.tap, self.config.work_path, self.runner)

    # ---- Steps ----------------------------------------------------------------------------------------------

    def check(
            self,
    ) -> tuple[bool, str]:
        """Evaluate the branch guard.

        Returns:
            Tuple of (should run, reason).
        """
        return should_publish(self.build, self.config.main_branch)

    def provision(
            self,
            bundle: CredentialBundle,
    ) -> InstalledCredentials:
        """Install SSH credentials for the job.

        When the SSH directory is not the default one, git is pointed at
        the installed key through GIT_SSH_COMMAND.

        Args:
            bundle: Credentials to install.

        Returns:
            Installed credential paths.
        """
        installed = install_ssh_key(bundle, self.config.ssh_path)
        if self.config.ssh_path != Path(DEFAULT_SSH_DIR).expanduser():
            self.runner.env["GIT_SSH_COMMAND"] = git_ssh_command(installed)
            logger.debug(f"Using GIT_SSH_COMMAND for {installed.private_key_path}")
        return installed

    def show_known_hosts(
            self,
    ) -> str:
        """Print known_hosts for diagnostics."""
        self.runner.trace(f"+ cat {self.config.ssh_path / KNOWN_HOSTS_FILE}")
        content = show_known_hosts(self.config.ssh_path)
        if content.strip():
            self.runner.emit(content.rstrip())
        return content

    # ---- Pipeline -------------------------------------------------------------------------------------------

    def publish(
            self,
            force: bool = False,
            dry_run: bool = False,
    ) -> PublishResult:
        """Run the publish job.

        Args:
            force: Run even when the branch guard fails.
            dry_run: Stop after replacing the formula (no commit or push).

        Returns:
            PublishResult describing what happened.

        Raises:
            ValueError: If the configuration is incomplete.
            CommandError: If a git command fails.
            RuntimeError: If a file step fails.
        """
        should_run, reason = self.check()
        if not should_run and not force:
            logger.info(f"Skipping publish: {reason}")
            return PublishResult(skipped=True, reason=reason)

        if not should_run:
            reason = f"forced ({reason})"
            logger.warning(f"Publishing despite guard: {reason}")

        problems = self.config.validate()
        if problems:
            msg = f"Invalid configuration: {'; '.join(problems)}"
            raise ValueError(msg)

        result = PublishResult(reason=reason, commands=self.runner.history)

        self.show_known_hosts()

        tap = self.tap
        tap.configure_identity(self.config.identity)

        result.version = read_manifest_version(self.config.manifest_path)
        result.commit_message = build_commit_message(result.version)

        result.tap_dir = tap.clone()
        result.formula_path = tap.replace_formula(self.config.formula_path)

        if dry_run:
            logger.info("Dry run: not committing or pushing")
            return result

        tap.commit_and_push(result.commit_message)
        result.pushed = True
        return result


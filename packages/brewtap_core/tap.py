"""Homebrew tap repository operations.

Clones the tap, swaps the formula file for the one in the source
checkout, and commits and pushes the bump. Every git call goes through
a CommandRunner, so the first failure stops the sequence.

Execution Context:
    Library module - imported by publish operations

Dependencies:
    - git: Invoked as an external command
    - brewtap_core.runner: Fail-fast command execution

Metadata:
    Version: 0.1.0
    Author: brewtap Team
"""
from __future__ import annotations

import logging
import shutil
from pathlib import Path

from brewtap_core.models import GitIdentity
from brewtap_core.models import TapRemote
from brewtap_core.runner import CommandRunner
from brewtap_core.runner import format_command

logger = logging.getLogger(__name__)


# ---- Tap Repository Class -----------------------------------------------------------------------------------


class TapRepository:
    """Working copy of a Homebrew tap.

    Attributes:
        remote: Tap remote definition.
        parent_dir: Directory the tap is cloned into.
        runner: Command runner used for git.
    """

    def __init__(
            self,
            remote: TapRemote,
            parent_dir: Path | str,
            runner: CommandRunner,
    ) -> None:
        self.remote = remote
        self.parent_dir = Path(parent_dir)
        self.runner = runner

    @property
    def path(
            self,
    ) -> Path:
        """Path of the clone."""
        return self.parent_dir / self.remote.directory_name

    def formula_path(
            self,
            formula_name: str,
    ) -> Path:
        """Path of a formula file inside the tap."""
        return self.path / self.remote.formula_dir / formula_name

    # ---- Git Operations -------------------------------------------------------------------------------------

    def configure_identity(
            self,
            identity: GitIdentity,
    ) -> None:
        """Write the commit identity to the global git config.

        Args:
            identity: Identity to configure.
        """
        if identity.name_key == "user.email":
            logger.warning("Committer name is written to user.email and replaces the email")
        self.runner.run(["git", "config", "--global", "user.email", identity.email])
        self.runner.run(["git", "config", "--global", identity.name_key, identity.name])

    def clone(
            self,
    ) -> Path:
        """Clone the tap into parent_dir.

        Returns:
            Path of the clone.

        Raises:
            CommandError: If git clone fails.
        """
        self.runner.run(["git", "clone", self.remote.url], cwd=self.parent_dir)
        logger.info(f"Cloned {self.remote.url} into {self.path}")
        return self.path

    def replace_formula(
            self,
            source: Path | str,
    ) -> Path:
        """Delete the tap's formula and copy source in its place.

        The deletion happens first and is not undone if the copy fails.

        Args:
            source: Formula file from the source checkout.

        Returns:
            Path of the replaced formula inside the tap.

        Raises:
            RuntimeError: If the tap formula or the source file is missing.
        """
        source_path = Path(source)
        target = self.formula_path(source_path.name)

        self.runner.trace(f"+ {format_command(['rm', target])}")
        try:
            target.unlink()
        except OSError as remove_error:
            msg = f"Cannot remove {target}: {remove_error}"
            raise RuntimeError(msg) from remove_error

        self.runner.trace(f"+ {format_command(['cp', source_path, target])}")
        try:
            shutil.copyfile(source_path, target)
        except OSError as copy_error:
            msg = f"Cannot copy {source_path} to {target}: {copy_error}"
            raise RuntimeError(msg) from copy_error

        logger.info(f"Replaced formula {target}")
        return target

    def commit_and_push(
            self,
            message: str,
    ) -> None:
        """Stage everything, commit, and push to the default remote.

        Args:
            message: Commit message.

        Raises:
            CommandError: If any git step fails.
        """
        self.runner.run(["git", "add", "-A"], cwd=self.path)
        self.runner.run(["git", "commit", "-m", message], cwd=self.path)
        self.runner.run(["git", "push"], cwd=self.path)
        logger.info(f"Pushed '{message}' to {self.remote.url}")

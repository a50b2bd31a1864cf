"""Data models for brewtap publishing.

Defines the transient structures used by a publish job: the SSH
credential bundle, commit identity, tap remote, publish configuration,
and the result of a run.

Execution Context:
    Library module - imported by other brewtap_core modules

Dependencies:
    - dataclasses: Data class decorators
    - typing: Type annotations

Metadata:
    Version: 0.1.0
    Author: brewtap Team
"""
from __future__ import annotations

import json
from dataclasses import asdict
from dataclasses import dataclass
from dataclasses import field
from pathlib import Path
from typing import Any


# ---- Constants ----------------------------------------------------------------------------------------------


DEFAULT_FORMULA_DIR = "Formula"
DEFAULT_FORMULA_FILE = "espanso.rb"
DEFAULT_MANIFEST_FILE = "Cargo.toml"
DEFAULT_MAIN_BRANCH = "master"
DEFAULT_SSH_DIR = "~/.ssh"


# ---- Credential Models --------------------------------------------------------------------------------------


@dataclass
class CredentialBundle:
    """SSH credentials provisioned before the publish script runs.

    Attributes:
        known_hosts_entry: Line to add to known_hosts (e.g., 'github.com ssh-rsa ...').
        public_key: Public key text.
        private_key_file: Path to the securely stored private key.
    """

    known_hosts_entry: str
    public_key: str
    private_key_file: str

    def to_dict(
            self,
    ) -> dict[str, str]:
        """Convert bundle to dictionary.

        Returns:
            Dictionary representation.
        """
        return asdict(self)

    @classmethod
    def from_dict(
            cls,
            data: dict[str, str],
    ) -> CredentialBundle:
        """Create bundle from dictionary."""
        return cls(**data)


@dataclass
class InstalledCredentials:
    """Locations written by credential provisioning.

    Attributes:
        ssh_dir: SSH directory the credentials were installed into.
        known_hosts_path: Path to the known_hosts file.
        public_key_path: Path to the installed public key.
        private_key_path: Path to the installed private key.
    """

    ssh_dir: Path
    known_hosts_path: Path
    public_key_path: Path
    private_key_path: Path


# ---- Git Models ---------------------------------------------------------------------------------------------


@dataclass
class GitIdentity:
    """Commit identity configured before committing to the tap.

    Attributes:
        email: Value written to user.email.
        name: Committer name.
        name_key: Git config key that receives ``name``. Defaults to
            'user.email', which overwrites the email as the historical
            pipeline did; set to 'user.name' to keep both.
    """

    email: str = ""
    name: str = ""
    name_key: str = "user.email"

    def to_dict(
            self,
    ) -> dict[str, str]:
        """Convert identity to dictionary.

        Returns:
            Dictionary representation.
        """
        return asdict(self)

    @classmethod
    def from_dict(
            cls,
            data: dict[str, str],
    ) -> GitIdentity:
        """Create identity from dictionary."""
        return cls(
            email=data.get("email", ""),
            name=data.get("name", ""),
            name_key=data.get("name_key", "user.email"),
        )


@dataclass
class TapRemote:
    """Homebrew tap repository to publish into.

    Attributes:
        url: Clone URL (usually SSH, e.g. 'git@github.com:owner/homebrew-tap.git').
        formula_dir: Directory inside the tap holding formula files.
    """

    url: str = ""
    formula_dir: str = DEFAULT_FORMULA_DIR

    @property
    def directory_name(
            self,
    ) -> str:
        """Directory name ``git clone`` creates for this URL."""
        tail = self.url.rstrip("/")
        for separator in ("/", ":"):
            tail = tail.rsplit(separator, 1)[-1]
        if tail.endswith(".git"):
            tail = tail[:-4]
        return tail

    def to_dict(
            self,
    ) -> dict[str, str]:
        """Convert remote to dictionary.

        Returns:
            Dictionary representation.
        """
        return asdict(self)

    @classmethod
    def from_dict(
            cls,
            data: dict[str, str],
    ) -> TapRemote:
        """Create remote from dictionary."""
        return cls(
            url=data.get("url", ""),
            formula_dir=data.get("formula_dir", DEFAULT_FORMULA_DIR),
        )


# ---- Configuration ------------------------------------------------------------------------------------------


@dataclass
class PublishConfig:
    """Configuration for one publish job, stored in brewtap.json.

    Attributes:
        tap: Tap repository to clone and push to.
        identity: Commit identity.
        formula_file: Formula file in the source checkout.
        manifest_file: Manifest holding the version line.
        main_branch: Branch whose builds are allowed to publish.
        work_dir: Source checkout directory; the tap is cloned inside it.
        ssh_dir: Directory credentials are installed into.
    """

    tap: TapRemote = field(default_factory=TapRemote)
    identity: GitIdentity = field(default_factory=GitIdentity)
    formula_file: str = DEFAULT_FORMULA_FILE
    manifest_file: str = DEFAULT_MANIFEST_FILE
    main_branch: str = DEFAULT_MAIN_BRANCH
    work_dir: str = "."
    ssh_dir: str = DEFAULT_SSH_DIR

    @property
    def work_path(
            self,
    ) -> Path:
        """Resolved source checkout directory."""
        return Path(self.work_dir).expanduser().resolve()

    @property
    def ssh_path(
            self,
    ) -> Path:
        """Expanded SSH directory."""
        return Path(self.ssh_dir).expanduser()

    @property
    def manifest_path(
            self,
    ) -> Path:
        """Manifest path relative to the checkout."""
        return self.work_path / self.manifest_file

    @property
    def formula_path(
            self,
    ) -> Path:
        """Formula path relative to the checkout."""
        return self.work_path / self.formula_file

    def validate(
            self,
    ) -> list[str]:
        """Check the configuration for missing values.

        Returns:
            List of problems (empty when the config is usable).
        """
        problems = []
        if not self.tap.url:
            problems.append("tap URL is not set")
        if not self.identity.email:
            problems.append("git identity email is not set")
        if not self.formula_file:
            problems.append("formula file is not set")
        if not self.manifest_file:
            problems.append("manifest file is not set")
        return problems

    def to_dict(
            self,
    ) -> dict[str, Any]:
        """Convert config to dictionary for JSON serialization.

        Returns:
            Dictionary representation.
        """
        return {
            "tap": self.tap.to_dict(),
            "identity": self.identity.to_dict(),
            "formula_file": self.formula_file,
            "manifest_file": self.manifest_file,
            "main_branch": self.main_branch,
            "work_dir": self.work_dir,
            "ssh_dir": self.ssh_dir,
        }

    @classmethod
    def from_dict(
            cls,
            data: dict[str, Any],
    ) -> PublishConfig:
        """Create config from dictionary.

        Args:
            data: Dictionary with config fields.

        Returns:
            PublishConfig instance.
        """
        return cls(
            tap=TapRemote.from_dict(data.get("tap") or {}),
            identity=GitIdentity.from_dict(data.get("identity") or {}),
            formula_file=data.get("formula_file", DEFAULT_FORMULA_FILE),
            manifest_file=data.get("manifest_file", DEFAULT_MANIFEST_FILE),
            main_branch=data.get("main_branch", DEFAULT_MAIN_BRANCH),
            work_dir=data.get("work_dir", "."),
            ssh_dir=data.get("ssh_dir", DEFAULT_SSH_DIR),
        )

    def save(
            self,
            config_path: Path,
    ) -> None:
        """Save config to file.

        Args:
            config_path: Path to brewtap.json.
        """
        config_path.write_text(json.dumps(self.to_dict(), indent=2))

    @classmethod
    def load(
            cls,
            config_path: Path,
    ) -> PublishConfig:
        """Load config from file.

        Args:
            config_path: Path to brewtap.json.

        Returns:
            PublishConfig instance.

        Raises:
            RuntimeError: If config file cannot be loaded.
        """
        try:
            data = json.loads(config_path.read_text())
            return cls.from_dict(data)
        except Exception as file_error:
            msg = f"Failed to load config from {config_path}: {file_error}"
            raise RuntimeError(msg) from file_error


# ---- Results ------------------------------------------------------------------------------------------------


@dataclass
class PublishResult:
    """Outcome of a publish run.

    Attributes:
        version: Version extracted from the manifest ('' if none found).
        commit_message: Commit message used (or that would be used).
        tap_dir: Path to the cloned tap (None if skipped).
        formula_path: Formula path inside the tap (None if skipped).
        pushed: Whether the commit was pushed.
        skipped: Whether the branch guard prevented the run.
        reason: Why the guard allowed or blocked the run.
        commands: Echoed command trace.
    """

    version: str = ""
    commit_message: str = ""
    tap_dir: Path | None = None
    formula_path: Path | None = None
    pushed: bool = False
    skipped: bool = False
    reason: str = ""
    commands: list[str] = field(default_factory=list)

"""SSH credential provisioning.

Installs a known-hosts entry and an SSH key pair into the build agent
so that git over SSH works without prompting. The private key is copied
from a securely stored file; its contents are not validated.

Execution Context:
    Library module - imported by publish operations and the install-key command

Dependencies:
    - brewtap_core.models: Credential models

Metadata:
    Version: 0.1.0
    Author: brewtap Team
"""
from __future__ import annotations

import logging
import os
import shlex
import shutil
import stat
from pathlib import Path

from brewtap_core.models import CredentialBundle
from brewtap_core.models import InstalledCredentials

logger = logging.getLogger(__name__)


# ---- Constants ----------------------------------------------------------------------------------------------


KNOWN_HOSTS_FILE = "known_hosts"
DEFAULT_KEY_NAME = "id_rsa"
KEY_NAMES = {
    "ssh-rsa": "id_rsa",
    "ssh-ed25519": "id_ed25519",
    "ssh-dss": "id_dsa",
}


# ---- Helpers ------------------------------------------------------------------------------------------------


def key_file_name(
        public_key: str,
) -> str:
    """Pick the conventional key file name for a public key.

    Args:
        public_key: Public key text ('<type> <base64> [comment]').

    Returns:
        File name such as 'id_rsa' or 'id_ed25519'.
    """
    parts = public_key.split()
    key_type = parts[0] if parts else ""
    if key_type.startswith("ecdsa-"):
        return "id_ecdsa"
    return KEY_NAMES.get(key_type, DEFAULT_KEY_NAME)


def _append_known_host(
        known_hosts_path: Path,
        entry: str,
) -> bool:
    """Append entry to known_hosts unless an identical line exists.

    Returns:
        True if the entry was written.
    """
    entry = entry.strip()
    existing = known_hosts_path.read_text() if known_hosts_path.exists() else ""
    if entry in (line.strip() for line in existing.splitlines()):
        logger.debug(f"Known-hosts entry already present in {known_hosts_path}")
        return False

    prefix = "" if not existing or existing.endswith("\n") else "\n"
    with open(known_hosts_path, "a") as known_hosts:
        known_hosts.write(f"{prefix}{entry}\n")
    return True


# ---- Provisioning -------------------------------------------------------------------------------------------


def install_ssh_key(
        bundle: CredentialBundle,
        ssh_dir: Path | str,
) -> InstalledCredentials:
    """Install known-hosts entry and key pair into ssh_dir.

    Args:
        bundle: Credentials to install.
        ssh_dir: Target SSH directory (created with mode 0700 if missing).

    Returns:
        Paths of the installed files.

    Raises:
        RuntimeError: If the private key file is missing or cannot be copied.
    """
    ssh_path = Path(ssh_dir).expanduser()
    private_source = Path(bundle.private_key_file).expanduser()

    if not private_source.is_file():
        msg = f"Private key file not found: {private_source}"
        raise RuntimeError(msg)

    try:
        ssh_path.mkdir(parents=True, exist_ok=True)
        os.chmod(ssh_path, 0o700)

        known_hosts_path = ssh_path / KNOWN_HOSTS_FILE
        if bundle.known_hosts_entry.strip():
            _append_known_host(known_hosts_path, bundle.known_hosts_entry)

        key_name = key_file_name(bundle.public_key)
        public_key_path = ssh_path / f"{key_name}.pub"
        private_key_path = ssh_path / key_name

        public_key_path.write_text(bundle.public_key.strip() + "\n")
        os.chmod(public_key_path, 0o644)

        # Open with 0600 so the key is never group or world readable; chmod covers an existing file
        key_fd = os.open(private_key_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(key_fd, "wb") as target, open(private_source, "rb") as source:
            shutil.copyfileobj(source, target)
        os.chmod(private_key_path, 0o600)

    except Exception as install_error:
        msg = f"Failed to install SSH key into {ssh_path}: {install_error}"
        raise RuntimeError(msg) from install_error

    logger.info(f"Installed SSH key {private_key_path.name} into {ssh_path}")
    return InstalledCredentials(
        ssh_dir=ssh_path,
        known_hosts_path=known_hosts_path,
        public_key_path=public_key_path,
        private_key_path=private_key_path,
    )


class SSHKeyInstallation:
    """Context manager that installs credentials and removes them on exit.

    Key files that existed before are written back with their original
    content and mode, new key files are deleted, and known_hosts is
    restored to its previous content (or removed if it did not exist).
    The same restore runs when the installation itself fails.

    Attributes:
        bundle: Credentials to install.
        ssh_dir: Target SSH directory.
        installed: Installed paths, set on enter.
    """

    def __init__(
            self,
            bundle: CredentialBundle,
            ssh_dir: Path | str,
    ) -> None:
        self.bundle = bundle
        self.ssh_dir = Path(ssh_dir).expanduser()
        self.installed: InstalledCredentials | None = None
        self._known_hosts_backup: str | None = None
        self._key_paths: list[Path] = []
        self._key_backups: dict[Path, tuple[bytes, int]] = {}

    def __enter__(
            self,
    ) -> InstalledCredentials:
        known_hosts_path = self.ssh_dir / KNOWN_HOSTS_FILE
        if known_hosts_path.is_file():
            self._known_hosts_backup = known_hosts_path.read_text()

        key_name = key_file_name(self.bundle.public_key)
        self._key_paths = [self.ssh_dir / key_name, self.ssh_dir / f"{key_name}.pub"]
        for key_path in self._key_paths:
            if key_path.is_file():
                self._key_backups[key_path] = (
                    key_path.read_bytes(),
                    stat.S_IMODE(key_path.stat().st_mode),
                )

        try:
            self.installed = install_ssh_key(self.bundle, self.ssh_dir)
        except Exception:
            self._restore()
            raise
        return self.installed

    def __exit__(
            self,
            exc_type,
            exc,
            tb,
    ) -> None:
        if self.installed is None:
            return

        self._restore()
        logger.info(f"Removed provisioned SSH credentials from {self.ssh_dir}")
        self.installed = None

    def _restore(
            self,
    ) -> None:
        """Put key files and known_hosts back the way __enter__ found them."""
        for key_path in self._key_paths:
            if key_path.is_file():
                key_path.unlink()
            if key_path in self._key_backups:
                content, mode = self._key_backups[key_path]
                key_fd = os.open(key_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
                with os.fdopen(key_fd, "wb") as restored:
                    restored.write(content)
                os.chmod(key_path, mode)

        known_hosts_path = self.ssh_dir / KNOWN_HOSTS_FILE
        if self._known_hosts_backup is not None:
            known_hosts_path.write_text(self._known_hosts_backup)
        elif known_hosts_path.is_file():
            known_hosts_path.unlink()


def git_ssh_command(
        installed: InstalledCredentials,
) -> str:
    """Build a GIT_SSH_COMMAND pinning the installed key and known_hosts.

    Args:
        installed: Result of install_ssh_key.

    Returns:
        Command string for the GIT_SSH_COMMAND environment variable.
    """
    return " ".join([
        "ssh",
        "-i", shlex.quote(str(installed.private_key_path)),
        "-o", "IdentitiesOnly=yes",
        "-o", f"UserKnownHostsFile={shlex.quote(str(installed.known_hosts_path))}",
        "-o", "StrictHostKeyChecking=yes",
    ])


def show_known_hosts(
        ssh_dir: Path | str,
) -> str:
    """Return the known_hosts content for diagnostics.

    Args:
        ssh_dir: SSH directory.

    Returns:
        File content.

    Raises:
        RuntimeError: If known_hosts does not exist or cannot be read.
    """
    known_hosts_path = Path(ssh_dir).expanduser() / KNOWN_HOSTS_FILE
    try:
        return known_hosts_path.read_text()
    except OSError as read_error:
        msg = f"Cannot read {known_hosts_path}: {read_error}"
        raise RuntimeError(msg) from read_error

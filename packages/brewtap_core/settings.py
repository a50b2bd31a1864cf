"""Configuration loading for brewtap.

Builds a PublishConfig from, in increasing precedence: defaults, a
brewtap.json file, and environment variables (including a .env file).
CLI options are applied on top by the commands themselves.

Execution Context:
    Library module - imported by CLI commands

Dependencies:
    - python-dotenv: Load environment variables from .env file
    - brewtap_core.models: Configuration models

Metadata:
    Version: 0.1.0
    Author: brewtap Team
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Mapping

from dotenv import load_dotenv

from brewtap_core.models import CredentialBundle
from brewtap_core.models import PublishConfig

logger = logging.getLogger(__name__)


# ---- Constants ----------------------------------------------------------------------------------------------


CONFIG_FILE = "brewtap.json"

ENV_PREFIX = "BREWTAP_"


# ---- Environment Loading ------------------------------------------------------------------------------------


def _load_env_file(
        env_path: Path | None = None,
) -> None:
    """Load environment variables from .env file.

    Searches for .env file in:
    1. Specified path (if provided)
    2. Current working directory
    3. Parent directories (up to 3 levels)

    Args:
        env_path: Explicit path to .env file (optional).
    """
    if env_path:
        if env_path.exists():
            load_dotenv(env_path, override=True)
        return

    cwd_env = Path.cwd() / ".env"
    if cwd_env.exists():
        load_dotenv(cwd_env, override=True)
        return

    current = Path.cwd()
    for _ in range(3):
        parent = current.parent
        parent_env = parent / ".env"
        if parent_env.exists():
            load_dotenv(parent_env, override=True)
            return
        current = parent


def _env(
        environ: Mapping[str, str],
        key: str,
) -> str | None:
    value = environ.get(f"{ENV_PREFIX}{key}")
    return value if value else None


# ---- Config Loading -----------------------------------------------------------------------------------------


def find_config_file(
        start_path: Path | str | None = None,
) -> Path | None:
    """Find brewtap.json in the given directory.

    Args:
        start_path: Directory to look in (defaults to cwd).

    Returns:
        Path if found, None otherwise.
    """
    candidate = Path(start_path or Path.cwd()) / CONFIG_FILE
    return candidate if candidate.is_file() else None


def apply_environment(
        config: PublishConfig,
        environ: Mapping[str, str],
) -> PublishConfig:
    """Overlay BREWTAP_* environment variables onto config.

    Args:
        config: Configuration to update in place.
        environ: Environment mapping.

    Returns:
        The updated configuration.
    """
    config.tap.url = _env(environ, "TAP_URL") or config.tap.url
    config.tap.formula_dir = _env(environ, "FORMULA_DIR") or config.tap.formula_dir
    config.formula_file = _env(environ, "FORMULA_FILE") or config.formula_file
    config.manifest_file = _env(environ, "MANIFEST_FILE") or config.manifest_file
    config.main_branch = _env(environ, "MAIN_BRANCH") or config.main_branch
    config.identity.email = _env(environ, "GIT_EMAIL") or config.identity.email
    config.identity.name = _env(environ, "GIT_NAME") or config.identity.name
    config.identity.name_key = _env(environ, "GIT_NAME_KEY") or config.identity.name_key
    config.ssh_dir = _env(environ, "SSH_DIR") or config.ssh_dir
    config.work_dir = _env(environ, "WORK_DIR") or config.work_dir
    return config


def load_config(
        config_path: Path | str | None = None,
        environ: Mapping[str, str] | None = None,
) -> PublishConfig:
    """Load the effective publish configuration.

    Args:
        config_path: Explicit config file (optional). When omitted,
            brewtap.json in the current directory is used if present.
        environ: Environment mapping. When omitted, .env is loaded and
            os.environ is used.

    Returns:
        PublishConfig instance.

    Raises:
        RuntimeError: If an explicit config file is missing or invalid.
    """
    if environ is None:
        _load_env_file()
        environ = os.environ

    if config_path:
        path = Path(config_path)
        if not path.is_file():
            msg = f"Config file not found: {path}"
            raise RuntimeError(msg)
    else:
        path = find_config_file()

    if path:
        logger.debug(f"Loading config from {path}")
        config = PublishConfig.load(path)
    else:
        config = PublishConfig()

    return apply_environment(config, environ)


def load_credentials(
        known_hosts: str | None = None,
        public_key: str | None = None,
        key_file: str | None = None,
        environ: Mapping[str, str] | None = None,
) -> CredentialBundle:
    """Assemble a credential bundle from arguments or environment.

    Relative key file paths are resolved against AGENT_TEMPDIRECTORY,
    where Azure Pipelines downloads secure files.

    Args:
        known_hosts: Known-hosts entry.
        public_key: Public key text.
        key_file: Path or secure file name of the private key.
        environ: Environment mapping (defaults to os.environ).

    Returns:
        CredentialBundle instance.

    Raises:
        ValueError: If the public key or private key file is missing.
    """
    env = os.environ if environ is None else environ

    known_hosts = known_hosts or _env(env, "KNOWN_HOSTS") or ""
    public_key = public_key or _env(env, "SSH_PUBLIC_KEY") or ""
    key_file = key_file or _env(env, "SSH_KEY_FILE") or ""

    if not public_key:
        msg = "SSH public key is required (--public-key or BREWTAP_SSH_PUBLIC_KEY)"
        raise ValueError(msg)
    if not key_file:
        msg = "SSH private key file is required (--key-file or BREWTAP_SSH_KEY_FILE)"
        raise ValueError(msg)

    key_path = Path(key_file).expanduser()
    secure_dir = env.get("AGENT_TEMPDIRECTORY")
    if not key_path.is_absolute() and secure_dir and not key_path.exists():
        key_path = Path(secure_dir) / key_path

    return CredentialBundle(
        known_hosts_entry=known_hosts,
        public_key=public_key,
        private_key_file=str(key_path),
    )

"""Version extraction from the project manifest.

The version is taken from the first line containing ``version`` and is
the text between the first pair of double quotes on that line. Nothing
checks that it is non-empty.

Execution Context:
    Library module - imported by publish operations and the version command

Metadata:
    Version: 0.1.0
    Author: brewtap Team
"""
from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

COMMIT_MESSAGE_PREFIX = "Update to version: "


def extract_version(
        text: str,
) -> str:
    """Extract the version string from manifest text.

    Args:
        text: Manifest content.

    Returns:
        Version string, or '' when no line contains 'version' or the
        matching line has no quoted value.
    """
    # Lines break on "\n" only, as grep reads them
    for line in text.split("\n"):
        if "version" in line:
            fields = line.split('"')
            return fields[1] if len(fields) > 1 else ""
    return ""


def read_manifest_version(
        manifest_path: Path | str,
) -> str:
    """Read a manifest file and extract its version.

    Args:
        manifest_path: Path to the manifest (e.g., Cargo.toml).

    Returns:
        Version string (possibly empty).

    Raises:
        RuntimeError: If the manifest cannot be read.
    """
    path = Path(manifest_path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as read_error:
        msg = f"Cannot read manifest {path}: {read_error}"
        raise RuntimeError(msg) from read_error

    version = extract_version(text)
    if not version:
        logger.warning(f"No version found in {path}; commit message will be incomplete")
    else:
        logger.debug(f"Extracted version {version} from {path}")
    return version


def build_commit_message(
        version: str,
) -> str:
    """Commit message for a formula bump."""
    return f"{COMMIT_MESSAGE_PREFIX}{version}"

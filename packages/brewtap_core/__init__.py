"""brewtap Core Library.

Provides the pieces of a Homebrew tap publish job: SSH credential
provisioning, manifest version extraction, the CI branch guard, and
fail-fast git operations on the tap repository.

Execution Context:
    Library package - imported by CLI and other applications

Dependencies:
    - python-dotenv: Environment configuration
    - git: External command

Metadata:
    Version: 0.1.0
    Author: brewtap Team
"""
from __future__ import annotations

from brewtap_core.models import CredentialBundle
from brewtap_core.models import GitIdentity
from brewtap_core.models import PublishConfig
from brewtap_core.models import PublishResult
from brewtap_core.models import TapRemote

__version__ = "0.1.0"

__all__ = [
    "CredentialBundle",
    "GitIdentity",
    "PublishConfig",
    "PublishResult",
    "TapRemote",
    "__version__",
]

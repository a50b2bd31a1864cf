"""CI build metadata and the publish guard.

Reads the source branch and previous-step status from CI environment
variables and decides whether the publish script should run.

Execution Context:
    Library module - imported by publish operations and the check command

Metadata:
    Version: 0.1.0
    Author: brewtap Team
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping

logger = logging.getLogger(__name__)


# ---- Constants ----------------------------------------------------------------------------------------------


HEADS_PREFIX = "refs/heads/"

# Checked in order; the first variable set wins.
BRANCH_VARIABLES = (
    ("BREWTAP_SOURCE_BRANCH", "override"),
    ("BUILD_SOURCEBRANCH", "azure"),
    ("GITHUB_REF", "github"),
    ("CI_COMMIT_REF_NAME", "gitlab"),
)

FAILED_JOB_STATUSES = {"failed", "canceled", "cancelled"}


# ---- Build Context ------------------------------------------------------------------------------------------


@dataclass
class BuildContext:
    """State of the CI build invoking the publisher.

    Attributes:
        source_branch: Branch or ref the build was triggered from.
        succeeded: Whether the previous steps of the job succeeded.
        provider: CI provider the branch was read from.
    """

    source_branch: str = ""
    succeeded: bool = True
    provider: str = ""

    @classmethod
    def from_env(
            cls,
            environ: Mapping[str, str] | None = None,
    ) -> BuildContext:
        """Build context from CI environment variables.

        Args:
            environ: Environment mapping (defaults to os.environ).

        Returns:
            BuildContext instance.
        """
        env = os.environ if environ is None else environ

        source_branch = ""
        provider = ""
        for variable, name in BRANCH_VARIABLES:
            value = env.get(variable)
            if value:
                source_branch = value
                provider = name
                break

        job_status = env.get("AGENT_JOBSTATUS", "").strip().lower()
        succeeded = job_status not in FAILED_JOB_STATUSES

        return cls(source_branch=source_branch, succeeded=succeeded, provider=provider)


def normalize_ref(
        branch: str,
) -> str:
    """Turn a branch name into a full ref ('master' -> 'refs/heads/master')."""
    branch = branch.strip()
    if not branch or branch.startswith("refs/"):
        return branch
    return f"{HEADS_PREFIX}{branch}"


def should_publish(
        context: BuildContext,
        main_branch: str,
) -> tuple[bool, str]:
    """Decide whether the publish script runs.

    Runs only when previous steps succeeded and the source branch is the
    main branch.

    Args:
        context: Current build context.
        main_branch: Main branch name or ref.

    Returns:
        Tuple of (should run, human-readable reason).
    """
    if not context.succeeded:
        return False, "previous steps did not succeed"

    source_ref = normalize_ref(context.source_branch)
    main_ref = normalize_ref(main_branch)

    if not source_ref:
        return False, "source branch is unknown"

    if source_ref != main_ref:
        return False, f"source branch {source_ref} is not {main_ref}"

    logger.debug(f"Publish guard passed for {source_ref}")
    return True, f"source branch is {main_ref}"

"""External command execution for brewtap.

Runs git and friends with shell ``set -ex`` semantics: every command
is echoed before it runs and the first non-zero exit raises.

Execution Context:
    Library module - imported by tap and publish operations

Dependencies:
    - subprocess: Process execution

Metadata:
    Version: 0.1.0
    Author: brewtap Team
"""
from __future__ import annotations

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable
from typing import Sequence

logger = logging.getLogger(__name__)


# ---- Exceptions ---------------------------------------------------------------------------------------------


class CommandError(RuntimeError):
    """Raised when an external command exits with a non-zero status.

    Attributes:
        args_list: Command line that failed.
        returncode: Exit status (127 if the executable was not found).
        stderr: Captured standard error.
    """

    def __init__(
            self,
            args_list: Sequence[str],
            returncode: int,
            stderr: str = "",
    ) -> None:
        self.args_list = list(args_list)
        self.returncode = returncode
        self.stderr = stderr
        msg = f"Command '{format_command(args_list)}' exited with status {returncode}"
        detail = stderr.strip()
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)


# ---- Results ------------------------------------------------------------------------------------------------


@dataclass
class CommandResult:
    """Completed command.

    Attributes:
        args: Command line.
        returncode: Exit status.
        stdout: Captured standard output.
        stderr: Captured standard error.
    """

    args: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(
            self,
    ) -> bool:
        """True when the command exited with status 0."""
        return self.returncode == 0


def format_command(
        args: Sequence[str],
) -> str:
    """Render a command line the way ``set -x`` would echo it."""
    return " ".join(shlex.quote(str(arg)) for arg in args)


# ---- Runner -------------------------------------------------------------------------------------------------


class CommandRunner:
    """Sequential, fail-fast command runner.

    Attributes:
        cwd: Default working directory for commands.
        env: Extra environment variables layered over os.environ.
        echo: Callback receiving each '+ <command>' trace line.
        history: Trace lines of every command run so far.
    """

    def __init__(
            self,
            cwd: Path | str | None = None,
            env: dict[str, str] | None = None,
            echo: Callable[[str], None] | None = None,
    ) -> None:
        self.cwd = Path(cwd) if cwd else None
        self.env = dict(env or {})
        self.echo = echo
        self.history: list[str] = []

    def trace(
            self,
            line: str,
    ) -> None:
        """Record and echo a trace line."""
        self.history.append(line)
        logger.info(line)
        if self.echo:
            self.echo(line)

    def emit(
            self,
            text: str,
    ) -> None:
        """Echo command output without recording it in history."""
        logger.debug(text)
        if self.echo:
            self.echo(text)

    def run(
            self,
            args: Sequence[str],
            cwd: Path | str | None = None,
            check: bool = True,
    ) -> CommandResult:
        """Run a command and wait for it.

        Args:
            args: Command line.
            cwd: Working directory (defaults to the runner's).
            check: Raise CommandError on non-zero exit.

        Returns:
            CommandResult for the finished command.

        Raises:
            CommandError: If the command fails and ``check`` is set.
        """
        args = [str(arg) for arg in args]
        self.trace(f"+ {format_command(args)}")

        run_cwd = Path(cwd) if cwd else self.cwd
        env = {**os.environ, **self.env} if self.env else None

        try:
            completed = subprocess.run(
                args,
                cwd=run_cwd,
                env=env,
                capture_output=True,
                text=True,
            )
        except FileNotFoundError as missing_error:
            logger.error(f"Executable not found: {args[0]}")
            raise CommandError(args, 127, str(missing_error)) from missing_error

        result = CommandResult(
            args=args,
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )
        if result.stdout.strip():
            logger.debug(result.stdout.rstrip())

        if check and not result.ok:
            logger.error(f"Command failed with status {result.returncode}: {format_command(args)}")
            raise CommandError(args, result.returncode, result.stderr)

        return result

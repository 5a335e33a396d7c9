"""Command execution for the backing-system CLIs (docker, kubectl, minikube)."""

import json
import logging
import shutil
import subprocess
from dataclasses import dataclass
from typing import Any, Optional, Sequence

logger = logging.getLogger(__name__)


class CommandError(Exception):
    """Raised when a backing-system command exits with a non-zero status."""

    def __init__(
        self,
        args: Sequence[str],
        returncode: Optional[int] = None,
        stderr: str = "",
        message: Optional[str] = None,
    ):
        self.command = list(args)
        self.returncode = returncode
        self.stderr = stderr.strip()
        if message is None:
            message = f"'{' '.join(self.command)}' exited with status {returncode}"
            if self.stderr:
                message += f": {self.stderr}"
        self.message = message
        super().__init__(message)


class CommandTimeoutError(CommandError):
    """Raised when a command does not finish within its timeout."""

    def __init__(self, args: Sequence[str], timeout: float):
        self.timeout = timeout
        super().__init__(
            args,
            message=f"'{' '.join(args)}' timed out after {timeout:g}s",
        )


class CommandNotFoundError(CommandError):
    """Raised when the binary is not on PATH."""

    def __init__(self, args: Sequence[str]):
        super().__init__(args, message=f"'{args[0]}' not found on PATH")


class OutputParseError(CommandError):
    """Raised when structured command output cannot be parsed."""

    def __init__(self, args: Sequence[str], reason: str):
        super().__init__(
            args,
            message=f"Could not parse output of '{' '.join(args)}': {reason}",
        )


@dataclass
class CommandResult:
    """Captured result of a finished command."""

    args: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def lines(self) -> list[str]:
        """Non-empty stripped stdout lines."""
        return [line.strip() for line in self.stdout.splitlines() if line.strip()]

    def json(self) -> Any:
        """Parse stdout as a single JSON document."""
        try:
            return json.loads(self.stdout)
        except ValueError as e:
            raise OutputParseError(self.args, str(e)) from e

    def json_lines(self) -> list[Any]:
        """Parse stdout as one JSON document per line (docker --format '{{json .}}')."""
        documents = []
        for line in self.lines():
            try:
                documents.append(json.loads(line))
            except ValueError as e:
                raise OutputParseError(self.args, str(e)) from e
        return documents


class CommandRunner:
    """Runs CLI commands with captured output and optional timeouts.

    One runner is shared by all backing-system managers. It never retries:
    every reclaim action is attempted once.
    """

    def __init__(self, default_timeout: Optional[float] = None):
        self.default_timeout = default_timeout

    def which(self, binary: str) -> Optional[str]:
        """Return the full path of a binary, or None if it is not on PATH."""
        return shutil.which(binary)

    def run(
        self,
        args: Sequence[str],
        timeout: Optional[float] = None,
        check: bool = True,
    ) -> CommandResult:
        """
        Run a command and capture its output.

        Args:
            args: Command and arguments, no shell involved
            timeout: Seconds before the command is killed; falls back to
                the runner default, None waits forever
            check: If True, raise CommandError on a non-zero exit status

        Returns:
            CommandResult with the exit status and captured output

        Raises:
            CommandNotFoundError: If the binary does not exist
            CommandTimeoutError: If the timeout expired
            CommandError: If check is True and the command failed
        """
        args = list(args)
        effective_timeout = timeout if timeout is not None else self.default_timeout
        logger.debug(f"Running: {' '.join(args)} (timeout={effective_timeout})")

        try:
            completed = subprocess.run(
                args,
                capture_output=True,
                text=True,
                timeout=effective_timeout,
                check=False,
            )
        except FileNotFoundError as e:
            raise CommandNotFoundError(args) from e
        except subprocess.TimeoutExpired as e:
            raise CommandTimeoutError(args, e.timeout) from e

        result = CommandResult(
            args=args,
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )

        if check and not result.ok:
            raise CommandError(args, result.returncode, result.stderr)

        return result

    def succeeds(self, args: Sequence[str], timeout: Optional[float] = None) -> bool:
        """Run a no-op status command and report whether it succeeded."""
        try:
            return self.run(args, timeout=timeout, check=False).ok
        except CommandError as e:
            logger.debug(f"Status command failed: {e}")
            return False

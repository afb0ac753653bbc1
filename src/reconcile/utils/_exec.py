"""Execution utilities for VCS command lines.

This module runs external commands with output capture and environment
handling. Nothing here interprets the output: callers decide what a
failure means.
"""

import os
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from reconcile.exceptions import CommandError

# Cap on command output copied into log entries
MAX_OUTPUT_BYTES: int = 64 * 1024

# Variables that would point git at another repository than the working copy
GIT_ENV_OVERRIDES: tuple[str, ...] = ("GIT_DIR", "GIT_WORK_TREE", "GIT_INDEX_FILE")


@dataclass(frozen=True, slots=True)
class CommandConfig:
    """One VCS invocation.

    ``args`` starts with the program name. ``env`` is layered over the
    inherited environment after the names in ``unset_env`` are removed;
    ``stdin`` is fed to the process when given. A ``timeout_ms`` of None
    waits for the process however long it takes.
    """

    args: tuple[str, ...]
    cwd: str | Path | None = None
    env: Mapping[str, str] = field(default_factory=dict)
    unset_env: tuple[str, ...] = ()
    stdin: bytes | None = None
    timeout_ms: int | None = None


@dataclass(frozen=True, slots=True)
class CommandResult:
    """What a command did.

    ``exit_code`` is None when the process never ran; ``error`` then says
    why, and ``command_not_found`` or ``timed_out`` flags the common causes.
    """

    command: tuple[str, ...] = ()
    exit_code: int | None = None
    stdout: str = ""
    stderr: str = ""
    error: str | None = None
    timed_out: bool = False
    command_not_found: bool = False

    @property
    def ok(self) -> bool:
        """Whether the command ran and exited with status 0."""
        return self.exit_code == 0

    @property
    def error_output(self) -> str:
        """Best available diagnostic text: stderr, spawn error, then stdout."""
        return self.stderr or self.error or self.stdout

    def describe(self) -> str:
        """Return the command line as a single string."""
        return " ".join(self.command)


def truncate_output(output: str, max_bytes: int = MAX_OUTPUT_BYTES) -> str:
    """Cap ``output`` at ``max_bytes`` of UTF-8 for log entries, marking the cut."""
    if not output:
        return output

    encoded = output.encode("utf-8")
    if len(encoded) <= max_bytes:
        return output

    # a split multi-byte sequence at the cut is dropped
    head = encoded[:max_bytes].decode("utf-8", errors="ignore")
    return f"{head}\n... [truncated {len(encoded) - max_bytes} bytes]"


def build_env(config: CommandConfig) -> dict[str, str]:
    """Inherited environment minus ``unset_env``, with ``env`` applied on top."""
    env = {k: v for k, v in os.environ.items() if k not in config.unset_env}
    env.update(config.env)
    return env


def run_command(config: CommandConfig) -> CommandResult:
    """Execute a command and capture its output.

    Blocks until the command exits. Spawn failures are reported in the
    result rather than raised so callers can surface them like any other
    failed command.
    """
    if not config.args:
        return CommandResult(error="No command specified")

    timeout_seconds = config.timeout_ms / 1000.0 if config.timeout_ms else None

    try:
        result = subprocess.run(  # noqa: S603
            list(config.args),
            env=build_env(config),
            cwd=config.cwd or None,
            input=config.stdin,
            capture_output=True,
            timeout=timeout_seconds,
            check=False,
        )
    except subprocess.TimeoutExpired:
        return CommandResult(
            command=config.args,
            error=f"Command timed out after {config.timeout_ms}ms",
            timed_out=True,
        )
    except FileNotFoundError as e:
        return CommandResult(
            command=config.args,
            error=str(e),
            command_not_found=True,
        )
    except OSError as e:
        return CommandResult(command=config.args, error=str(e))

    return CommandResult(
        command=config.args,
        exit_code=result.returncode,
        stdout=result.stdout.decode("utf-8", errors="replace"),
        stderr=result.stderr.decode("utf-8", errors="replace"),
    )


def check_result[E: CommandError](
    result: CommandResult, error_type: type[E] = CommandError, *, message: str | None = None
) -> CommandResult:
    """Raise if a command failed, carrying its raw output.

    Args:
        result: The command result to check.
        error_type: Exception class to raise.
        message: Message prefix; defaults to ``Failed to execute <command>``.

    Returns:
        The result unchanged when the command succeeded.

    Raises:
        CommandError: An ``error_type`` instance whose message ends with the
            command's raw error output.
    """
    if result.ok:
        return result

    prefix = message or f"Failed to execute {result.describe()}"
    raise error_type(
        f"{prefix}\n\n{result.error_output}",
        command=result.command,
        output=result.error_output,
    )

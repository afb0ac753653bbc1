"""Reconcile exceptions."""

from collections.abc import Sequence
from pathlib import Path
from typing import Any


class ReconcileError(Exception):
    """Base exception for reconcile errors."""


# ---------------------------------------------------------------------------
# Command Exceptions
# ---------------------------------------------------------------------------


class CommandError(ReconcileError):
    """Raised when a VCS command exits with a failure status.

    The message always carries the raw output of the failing command so the
    operator can diagnose tool-specific failures.

    Attributes:
        command: The argument vector that was executed.
        output: Raw captured stderr (or stdout when stderr was empty).
    """

    def __init__(
        self,
        message: str,
        *,
        command: Sequence[str] = (),
        output: str = "",
    ) -> None:
        """Initialize with error message and command context.

        Args:
            message: Human-readable error message.
            command: The argument vector that was executed.
            output: Raw captured output of the command.
        """
        super().__init__(message)
        self.command: tuple[str, ...] = tuple(command)
        self.output: str = output


class DiscardError(CommandError):
    """Raised when discarding local changes fails."""


class StashError(CommandError):
    """Raised when stashing local changes fails."""


class ReapplyError(CommandError):
    """Raised when popping previously stashed changes fails."""


class RemoteSyncError(CommandError):
    """Raised when a remote clone or sync fails."""


class CheckoutError(CommandError):
    """Raised when every checkout strategy failed.

    Attributes:
        reference: The reference that could not be checked out.
    """

    def __init__(
        self,
        message: str,
        *,
        reference: str,
        command: Sequence[str] = (),
        output: str = "",
    ) -> None:
        """Initialize with error message and reference context."""
        super().__init__(message, command=command, output=output)
        self.reference: str = reference


class HistoryRewrittenError(CheckoutError):
    """Raised when the target reference is no longer part of the history.

    Attributes:
        hint: Remediation hint for the operator.
    """

    def __init__(
        self,
        message: str,
        *,
        reference: str,
        hint: str,
        command: Sequence[str] = (),
        output: str = "",
    ) -> None:
        """Initialize with error message, reference and remediation hint."""
        super().__init__(message, reference=reference, command=command, output=output)
        self.hint: str = hint


# ---------------------------------------------------------------------------
# Working Copy Exceptions
# ---------------------------------------------------------------------------


class WorkingCopyError(ReconcileError):
    """Base exception for working copy state errors.

    Attributes:
        path: The working copy path.
        changes: The change summary that caused the error, if any.
    """

    def __init__(
        self, message: str, *, path: Path | None = None, changes: str | None = None
    ) -> None:
        super().__init__(message)
        self.path: Path | None = path
        self.changes: str | None = changes


class UnpushedChangesError(WorkingCopyError):
    """The current branch has commits that are not on any remote."""


class UncommittedChangesError(WorkingCopyError):
    """The working copy has uncommitted changes and no policy allows removing them."""


class UpdateAbortedError(ReconcileError):
    """Raised when the user explicitly aborts an update or uninstall.

    Callers can check ``user_triggered`` to suppress a stack trace.
    """

    user_triggered: bool = True


class ReconcileStateError(ReconcileError):
    """Raised when a reconciliation session invariant would be violated."""


class WorkingCopyBusyError(ReconcileStateError):
    """Raised when a working copy already has an open reconciliation session."""


# ---------------------------------------------------------------------------
# Configuration Exceptions
# ---------------------------------------------------------------------------


class ConfigError(ReconcileError):
    """A config file or value could not be used."""


class ConfigLoadError(ConfigError):
    """A config file could not be read or is not valid TOML."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        """Record where in the file parsing failed, when known."""
        super().__init__(message)
        self.path: Path | None = path
        self.line: int | None = line
        self.column: int | None = column


class ConfigValidationError(ConfigError):
    """A config value has the wrong type or an unknown choice."""

    def __init__(
        self,
        message: str,
        *,
        key: str,
        value: Any,  # pyright: ignore[reportAny,reportExplicitAny]
        expected: str,
        source: str | None = None,
    ) -> None:
        """Record the offending key, value and what was expected."""
        super().__init__(message)
        self.key: str = key
        self.value: Any = value  # pyright: ignore[reportExplicitAny]
        self.expected: str = expected
        self.source: str | None = source

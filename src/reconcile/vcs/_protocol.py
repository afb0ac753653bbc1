# ruff: noqa: TC003  # Path needed at runtime for Protocol method signatures
"""Sync adapter protocol for type-safe dependency injection.

This module defines a runtime-checkable Protocol that every VCS backend
satisfies. The detector, reconciler, checkout executor and reapplier only
talk to the working copy through it, which lets tests drive them with
``FakeSyncAdapter`` instead of a real repository.
"""

from pathlib import Path
from typing import Protocol, runtime_checkable

from reconcile.utils import CommandResult


@runtime_checkable
class SyncAdapterProtocol(Protocol):
    """Protocol for the primitives run against a working copy.

    Every primitive returns the raw ``CommandResult``; deciding whether a
    failure is fatal is left to the caller.

    Example:
        >>> def is_dirty(adapter: SyncAdapterProtocol, path: Path) -> bool:
        ...     return bool(adapter.status(path).stdout.strip())
    """

    def is_repository(self, path: Path) -> bool:
        """Check whether the path holds VCS metadata."""
        ...

    def status(self, path: Path, *, tracked_only: bool = True) -> CommandResult:
        """Porcelain status of the working copy.

        Args:
            path: Working copy directory.
            tracked_only: Ignore untracked files.
        """
        ...

    def list_refs(
        self, path: Path, *, include_head: bool = True, dereference_tags: bool = True
    ) -> CommandResult:
        """List every ref with the commit it points at, one ``<hash> <ref>`` per line."""
        ...

    def list_remote_branches(self, path: Path) -> CommandResult:
        """List remote-tracking branches, one per line."""
        ...

    def list_branches(self, path: Path) -> CommandResult:
        """List local branches with their commit hashes."""
        ...

    def list_tags(self, path: Path) -> CommandResult:
        """List tags with the commits they point at."""
        ...

    def diff(
        self,
        path: Path,
        base: str,
        head: str | None = None,
        *,
        name_status_only: bool = False,
    ) -> CommandResult:
        """Diff the working copy.

        Args:
            path: Working copy directory.
            base: Base ref. Compared against the working tree if ``head`` is None.
            head: Head ref. When given, the three-dot ``base...head`` range is used.
            name_status_only: Only list changed file names and their status.
        """
        ...

    def fetch_all(self, path: Path) -> CommandResult:
        """Fetch from every configured remote."""
        ...

    def stash(self, path: Path, *, include_untracked: bool = True) -> CommandResult:
        """Stash local changes."""
        ...

    def stash_pop(self, path: Path) -> CommandResult:
        """Pop the most recent stash entry."""
        ...

    def clean_and_reset(self, path: Path) -> CommandResult:
        """Remove untracked files and hard-reset tracked ones to HEAD."""
        ...

    def checkout(self, path: Path, ref: str, *, force: bool = False) -> CommandResult:
        """Check out a ref, never interpreting it as a file path."""
        ...

    def create_branch_from(
        self, path: Path, name: str, source: str, *, force: bool = False
    ) -> CommandResult:
        """Create or reset a local branch from ``source`` and check it out."""
        ...

    def reset_hard(self, path: Path, ref: str) -> CommandResult:
        """Hard-reset the current branch to a ref."""
        ...

    def set_remote_url(self, path: Path, remote: str, url: str) -> CommandResult:
        """Point a remote at a new URL."""
        ...

"""Reconciliation sessions.

A session is one update (or removal) transaction on one working copy. It
owns the flags recording whether local changes were discarded or stashed,
so the checkout executor and the reapplier receive them explicitly instead
of looking them up in shared state.
"""

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path

from reconcile.exceptions import ReconcileStateError, WorkingCopyBusyError
from reconcile.utils import normalize_path


@dataclass(slots=True)
class ReconciliationSession:
    """State of one reconciliation cycle for a working copy.

    At most one destructive action (discard or stash) may happen per cycle.

    Attributes:
        path: Normalized working copy path.
        has_stashed_changes: Local changes were stashed and must be reapplied.
        has_discarded_changes: Local changes were thrown away.
    """

    path: Path
    has_stashed_changes: bool = False
    has_discarded_changes: bool = False
    closed: bool = field(default=False, repr=False)

    @property
    def force_checkout(self) -> bool:
        """Whether checkouts may override local safety checks.

        True once the working copy was discarded or stashed, since the data
        loss or preservation has already been authorized.
        """
        return self.has_discarded_changes or self.has_stashed_changes

    def ensure_reconcilable(self) -> None:
        """Check that a discard or stash may still happen in this cycle.

        Raises:
            ReconcileStateError: If the session is closed or changes were
                already discarded or stashed.
        """
        if self.closed:
            msg = f"Reconciliation session for {self.path} is closed"
            raise ReconcileStateError(msg)
        if self.force_checkout:
            msg = f"Local changes in {self.path} were already reconciled in this cycle"
            raise ReconcileStateError(msg)

    def mark_discarded(self) -> None:
        """Record that local changes were discarded.

        Raises:
            ReconcileStateError: If the session is closed or changes were
                already discarded or stashed.
        """
        self.ensure_reconcilable()
        self.has_discarded_changes = True

    def mark_stashed(self) -> None:
        """Record that local changes were stashed.

        Raises:
            ReconcileStateError: If the session is closed or changes were
                already discarded or stashed.
        """
        self.ensure_reconcilable()
        self.has_stashed_changes = True

    def clear(self) -> None:
        """Reset both flags."""
        self.has_stashed_changes = False
        self.has_discarded_changes = False

    def close(self) -> None:
        """End the cycle, clearing both flags."""
        self.clear()
        self.closed = True


class SessionRegistry:
    """Process-wide set of open sessions, keyed by normalized path.

    A working copy can only take part in one reconciliation at a time, even
    when several packages are updated concurrently.
    """

    def __init__(self) -> None:
        self._lock: threading.Lock = threading.Lock()
        self._sessions: dict[Path, ReconciliationSession] = {}

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, Path)):
            return False
        with self._lock:
            return normalize_path(path) in self._sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def get(self, path: str | Path) -> ReconciliationSession | None:
        with self._lock:
            return self._sessions.get(normalize_path(path))

    def acquire(self, path: str | Path) -> ReconciliationSession:
        """Open a session for a working copy.

        Raises:
            WorkingCopyBusyError: If the working copy already has one.
        """
        key = normalize_path(path)
        with self._lock:
            if key in self._sessions:
                msg = f"{key} is already being reconciled"
                raise WorkingCopyBusyError(msg)
            session = ReconciliationSession(key)
            self._sessions[key] = session
            return session

    def release(self, session: ReconciliationSession) -> None:
        """Close a session and forget it."""
        session.close()
        with self._lock:
            if self._sessions.get(session.path) is session:
                del self._sessions[session.path]

    @contextmanager
    def open(self, path: str | Path) -> Iterator[ReconciliationSession]:
        """Hold a session for the duration of a ``with`` block.

        Example:
            >>> registry = SessionRegistry()
            >>> with registry.open("vendor/acme/lib") as session:
            ...     session.mark_stashed()
        """
        session = self.acquire(path)
        try:
            yield session
        finally:
            self.release(session)

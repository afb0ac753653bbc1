"""Restoring stashed changes after a successful update."""

from typing import TYPE_CHECKING

from reconcile.exceptions import ReapplyError
from reconcile.utils import check_result, create_null_logger

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from reconcile.io import IOProtocol
    from reconcile.session import ReconciliationSession
    from reconcile.vcs import SyncAdapterProtocol


class Reapplier:
    """Pops the stash a reconciliation left behind.

    Conflicts are not resolved automatically: a failing pop surfaces git's
    output as is and leaves the working copy for the operator.
    """

    def __init__(
        self,
        adapter: "SyncAdapterProtocol",
        io: "IOProtocol",
        *,
        logger: "FilteringBoundLogger | None" = None,
    ) -> None:
        self._adapter: SyncAdapterProtocol = adapter
        self._io: IOProtocol = io
        self._logger: FilteringBoundLogger = logger or create_null_logger()

    def reapply_changes(self, session: "ReconciliationSession") -> None:
        """Pop stashed changes, if any, and clear the session flags.

        Both flags are cleared even when the pop fails.

        Raises:
            ReapplyError: If ``stash pop`` failed.
        """
        stashed = session.has_stashed_changes
        session.clear()
        if not stashed:
            return

        self._io.write_error("    Re-applying stashed changes")
        result = self._adapter.stash_pop(session.path)
        if not result.ok:
            self._logger.warning(
                "stash_pop_failed", path=str(session.path), output=result.error_output
            )
        check_result(result, ReapplyError, message="Failed to apply stashed changes:")
        self._logger.info("stashed_changes_reapplied", path=str(session.path))

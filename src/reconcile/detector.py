"""Detection of local and unpushed changes in a working copy.

Local changes come straight from a tracked-files status query. Unpushed
changes need more work: the branch checked out at HEAD is matched against
remote-tracking refs and diffed against each of them. The smallest diff
wins, on the grounds that the remote most likely to already hold the work
produces the smallest delta. This is a heuristic: when several remotes
diverge in unrelated ways it can report no changes while some exist.

A branch that no remote knows about may only mean the remote-tracking refs
are stale, so the first such miss triggers a single fetch and a second pass.
"""

from pathlib import Path
from typing import TYPE_CHECKING, Final

from reconcile.models import ChangeSet
from reconcile.refs import RemoteRefTable
from reconcile.utils import check_result, create_null_logger

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from reconcile.vcs import SyncAdapterProtocol

# A first pass plus at most one pass after fetching
_MAX_PASSES: Final = 2


def branch_not_found_message(branch: str) -> str:
    return f"Branch {branch} could not be found on any remote and appears to be unpushed"


class ChangeDetector:
    """Reports local and unpushed changes of a working copy.

    Both queries are read-only, except that unpushed detection may fetch
    from remotes once.
    """

    def __init__(
        self,
        adapter: "SyncAdapterProtocol",
        logger: "FilteringBoundLogger | None" = None,
    ) -> None:
        self._adapter: SyncAdapterProtocol = adapter
        self._logger: FilteringBoundLogger = logger or create_null_logger()

    def local_changes(self, path: Path) -> ChangeSet | None:
        """Uncommitted changes to tracked files.

        Args:
            path: Normalized working copy path.

        Returns:
            The trimmed status output, or None when the working copy is clean
            or is not a repository.

        Raises:
            CommandError: If the status query fails.
        """
        if not self._adapter.is_repository(path):
            return None

        result = check_result(self._adapter.status(path, tracked_only=True))
        output = result.stdout.strip()
        return ChangeSet(output) if output else None

    def unpushed_changes(self, path: Path) -> ChangeSet | None:
        """Committed changes of the current branch that no remote has.

        Args:
            path: Normalized working copy path.

        Returns:
            A name-status summary of the unpushed commits, a message saying the
            branch is assumed unpushed, or None if nothing is unpushed or
            there is no branch to compare.

        Raises:
            CommandError: If listing refs or diffing fails.
        """
        if not self._adapter.is_repository(path):
            return None

        changes: ChangeSet | None = None
        for attempt in range(1, _MAX_PASSES + 1):
            table = RemoteRefTable.parse(check_result(self._adapter.list_refs(path)).stdout)

            head = table.head
            if head is None:
                self._logger.info("head_ref_not_found", path=str(path))
                return None

            candidates = table.branches_at(head)
            if not candidates:
                self._logger.debug("no_branch_at_head", path=str(path), head=head)
                return None

            branch, remote_refs = self._match_remote_refs(table, candidates)
            if not remote_refs:
                changes = ChangeSet(branch_not_found_message(branch), assumed=True)
                if attempt < _MAX_PASSES:
                    self._fetch(path, branch)
                    continue
                break

            # Any fallback message from the previous pass is superseded
            changes = self._shortest_diff(path, branch, remote_refs)
            break

        return changes

    def _match_remote_refs(
        self, table: RemoteRefTable, candidates: list[str]
    ) -> tuple[str, list[str]]:
        for candidate in candidates:
            remote_refs = table.remote_refs_for(candidate)
            if remote_refs:
                return candidate, remote_refs
        return candidates[0], []

    def _fetch(self, path: Path, branch: str) -> None:
        self._logger.info("branch_not_on_remote_fetching", path=str(path), branch=branch)
        result = self._adapter.fetch_all(path)
        if not result.ok:
            # The second pass still reports the branch as unpushed
            self._logger.warning(
                "fetch_failed",
                path=str(path),
                command=result.describe(),
                output=result.error_output,
            )

    def _shortest_diff(self, path: Path, branch: str, remote_refs: list[str]) -> ChangeSet | None:
        shortest: str | None = None
        for remote_ref in remote_refs:
            result = check_result(
                self._adapter.diff(path, remote_ref, branch, name_status_only=True)
            )
            output = result.stdout.strip()
            if shortest is None or len(output) < len(shortest):
                shortest = output
            self._logger.debug(
                "unpushed_diff_computed", path=str(path), remote_ref=remote_ref, size=len(output)
            )
        return ChangeSet(shortest) if shortest else None

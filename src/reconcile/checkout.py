"""Moving a working copy to a resolved reference.

A reference may be a commit hash, a branch or a tag, and the working copy
may be missing the branch, hold a renamed tag, or sit on history that was
rewritten upstream. Three strategies are tried in order and the first one
that succeeds wins:

1. An exact match among the tracking remote's branches: the local branch
   is recreated from it.
2. A commit hash: the branch named by the pretty version is checked out
   (or recreated from the tracking remote) and hard-reset to the commit.
3. A generic checkout of the reference, then a hard reset to it.

All checkouts pass ``--`` so git never mistakes a reference for a file of
the same name.
"""

from typing import TYPE_CHECKING, Final, NoReturn

from reconcile.exceptions import CheckoutError, HistoryRewrittenError
from reconcile.reference import is_commit_hash, strip_dev_decoration
from reconcile.refs import parse_remote_branches
from reconcile.utils import CommandResult, create_null_logger

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from reconcile.io import IOProtocol
    from reconcile.session import ReconciliationSession
    from reconcile.vcs import SyncAdapterProtocol

DEFAULT_REMOTE: Final = "composer"


def rewritten_history_hint(package_name: str, *, is_dev: bool) -> str:
    """Remediation hint for a reference that disappeared from history."""
    cause = "the commit was removed from the branch" if is_dev else "the tag was recreated"
    target = f" {package_name}" if package_name else ""
    return (
        "It looks like the commit hash is not available in the repository, "
        f"maybe {cause}? Re-resolve the dependency (update{target}) to fix this."
    )


class CheckoutExecutor:
    """Moves a working copy to a target reference.

    Attributes:
        remote: Name of the tracking remote resolved references are fetched into.
    """

    def __init__(
        self,
        adapter: "SyncAdapterProtocol",
        io: "IOProtocol",
        *,
        remote: str = DEFAULT_REMOTE,
        logger: "FilteringBoundLogger | None" = None,
    ) -> None:
        self._adapter: SyncAdapterProtocol = adapter
        self._io: IOProtocol = io
        self._logger: FilteringBoundLogger = logger or create_null_logger()
        self.remote: str = remote

    def _remote_branches(self, session: "ReconciliationSession") -> set[str] | None:
        result = self._adapter.list_remote_branches(session.path)
        if not result.ok:
            return None
        return set(parse_remote_branches(result.stdout))

    def update_to_commit(
        self,
        session: "ReconciliationSession",
        reference: str,
        pretty_version: str,
        *,
        is_dev: bool = True,
        package_name: str = "",
    ) -> str | None:
        """Check out ``reference`` in the session's working copy.

        Checkouts are forced when the session already discarded or stashed
        local changes.

        Args:
            session: The open reconciliation session.
            reference: Commit hash, branch or tag to move to.
            pretty_version: Version string the reference was resolved from,
                used to name the local branch.
            is_dev: Whether the package tracks a branch rather than a tag;
                only changes the remediation hint.
            package_name: Name used in the remediation hint.

        Returns:
            None once the working copy is at the reference.

        Raises:
            HistoryRewrittenError: If every strategy failed and git's error
                mentions the reference, meaning it is no longer reachable.
            CheckoutError: If every strategy failed for any other reason.
        """
        path = session.path
        force = session.force_checkout
        branch = strip_dev_decoration(pretty_version)
        branches = self._remote_branches(session)
        hash_shaped = is_commit_hash(reference)

        def listed(name: str) -> bool:
            return branches is not None and f"{self.remote}/{name}" in branches

        # Strategy 1: the reference is a branch of the tracking remote
        if not hash_shaped and listed(reference):
            source = f"{self.remote}/{reference}"
            if (
                self._adapter.create_branch_from(path, branch, source, force=force).ok
                and self._adapter.reset_hard(path, source).ok
            ):
                self._logger.info(
                    "checkout_completed", path=str(path), strategy="remote-branch", ref=source
                )
                return None

        # Strategy 2: a commit hash, kept on the branch named by the pretty version
        if hash_shaped:
            if branches is not None and not listed(branch) and listed(f"v{branch}"):
                branch = f"v{branch}"
            source = f"{self.remote}/{branch}"
            on_branch = (
                self._adapter.checkout(path, branch).ok
                or self._adapter.create_branch_from(path, branch, source, force=force).ok
            )
            if on_branch and self._adapter.reset_hard(path, reference).ok:
                self._logger.info(
                    "checkout_completed",
                    path=str(path),
                    strategy="commit-on-branch",
                    ref=reference,
                    branch=branch,
                )
                return None

        # Strategy 3: whatever git makes of the reference
        checkout = self._adapter.checkout(path, reference, force=force)
        last = checkout
        if checkout.ok:
            last = self._adapter.reset_hard(path, reference)
            if last.ok:
                self._logger.info(
                    "checkout_completed", path=str(path), strategy="generic", ref=reference
                )
                return None

        self._raise_failure(
            session, reference, checkout, last, is_dev=is_dev, package_name=package_name
        )

    def _raise_failure(
        self,
        session: "ReconciliationSession",
        reference: str,
        checkout: CommandResult,
        last: CommandResult,
        *,
        is_dev: bool,
        package_name: str,
    ) -> NoReturn:
        error_output = last.error_output
        message = f"Failed to execute {checkout.describe()}\n\n{error_output}"

        # git prints "fatal: reference is not a tree: <ref>" for a vanished commit
        if reference in error_output:
            hint = rewritten_history_hint(package_name, is_dev=is_dev)
            self._io.write_error(f"    {reference} is gone (history was rewritten?)")
            self._logger.warning(
                "history_rewritten", path=str(session.path), ref=reference, output=error_output
            )
            raise HistoryRewrittenError(
                f"{message}\n{hint}",
                reference=reference,
                hint=hint,
                command=checkout.command,
                output=error_output,
            )

        self._logger.warning(
            "checkout_failed", path=str(session.path), ref=reference, output=error_output
        )
        raise CheckoutError(
            message, reference=reference, command=checkout.command, output=error_output
        )

"""Update transactions on a working copy.

``WorkingCopyDownloader`` strings the components together for one package:
the path is normalized once, a session is opened for it, local changes are
reconciled, the remote is synced if asked, the working copy is checked out
and stashed changes are reapplied. Once local changes have been discarded
or stashed, the transaction always runs until the checkout succeeds or an
error is raised.
"""

from typing import TYPE_CHECKING

from reconcile.checkout import CheckoutExecutor
from reconcile.detector import ChangeDetector
from reconcile.exceptions import ReconcileError, RemoteSyncError
from reconcile.reapply import Reapplier
from reconcile.reconciler import ChangeReconciler
from reconcile.refs import parse_branches, parse_tags
from reconcile.session import SessionRegistry
from reconcile.utils import check_result, normalize_path
from reconcile.vcs import RadicleAdapter

if TYPE_CHECKING:
    from pathlib import Path

    from reconcile.context import ToolContext
    from reconcile.io import IOProtocol
    from reconcile.models import ChangeSet
    from reconcile.session import ReconciliationSession
    from reconcile.utils import CommandResult
    from reconcile.vcs import SyncAdapterProtocol

# Registry shared by every downloader of the process
_default_registry = SessionRegistry()


class WorkingCopyDownloader:
    """Runs update and removal transactions on working copies."""

    def __init__(
        self,
        context: "ToolContext",
        io: "IOProtocol",
        *,
        adapter: "SyncAdapterProtocol | None" = None,
        registry: SessionRegistry | None = None,
    ) -> None:
        config = context.config
        self._io: IOProtocol = io
        self._logger = context.logger
        self._adapter: SyncAdapterProtocol = adapter or context.radicle_adapter()
        self._registry: SessionRegistry = registry or _default_registry

        self.detector: ChangeDetector = ChangeDetector(self._adapter, self._logger)
        self.reconciler: ChangeReconciler = ChangeReconciler(
            self._adapter,
            io,
            detector=self.detector,
            policy=config.discard_changes,
            preview_limit=config.checkout.preview_limit,
            logger=self._logger,
        )
        self.executor: CheckoutExecutor = CheckoutExecutor(
            self._adapter, io, remote=config.checkout.remote, logger=self._logger
        )
        self.reapplier: Reapplier = Reapplier(self._adapter, io, logger=self._logger)

    def is_working_copy(self, path: "str | Path") -> bool:
        """Whether the path holds VCS metadata."""
        return self._adapter.is_repository(normalize_path(path))

    def get_local_changes(self, path: "str | Path") -> "ChangeSet | None":
        """Uncommitted changes to tracked files of a working copy."""
        return self.detector.local_changes(normalize_path(path))

    def get_unpushed_changes(self, path: "str | Path") -> "ChangeSet | None":
        """Commits of the current branch that no remote has."""
        return self.detector.unpushed_changes(normalize_path(path))

    def tags(self, path: "str | Path") -> dict[str, str]:
        """Tags of a working copy mapped to the commits they point at."""
        result = self._adapter.list_tags(normalize_path(path))
        # show-ref exits 1 without output when there is no tag at all
        if _is_empty_listing(result):
            return {}
        return parse_tags(check_result(result).stdout)

    def branches(self, path: "str | Path") -> dict[str, str]:
        """Local branches of a working copy mapped to their head commits."""
        result = check_result(self._adapter.list_branches(normalize_path(path)))
        return parse_branches(result.stdout)

    def update(
        self,
        path: "str | Path",
        reference: str,
        pretty_version: str,
        *,
        package_name: str = "",
        is_dev: bool = True,
        url: str | None = None,
    ) -> str | None:
        """Move a working copy to a new reference, preserving local work.

        Args:
            path: Working copy directory.
            reference: Resolved commit hash, branch or tag.
            pretty_version: Version string the reference was resolved from.
            package_name: Name shown to the operator.
            is_dev: Whether the package tracks a branch.
            url: Repository URL to sync the remote from before checking out.

        Returns:
            None once the working copy is at the reference.

        Raises:
            UnpushedChangesError: If unpushed commits block the update.
            UncommittedChangesError: If local changes block the update.
            UpdateAbortedError: If the operator aborted.
            CheckoutError: If the working copy could not be moved.
            ReapplyError: If stashed changes could not be reapplied.
            RemoteSyncError: If ``url`` is a Radicle ID and rad is not in use.
        """
        if url is not None:
            self._require_sync_support(url)

        with self._registry.open(path) as session:
            log = self._logger.bind(path=str(session.path), reference=reference)
            log.info("update_started", pretty_version=pretty_version, package=package_name)
            try:
                self.reconciler.clean_changes(session, update=True, package_name=package_name)
                if url is not None:
                    self._sync_remote(session, url)
                result = self.executor.update_to_commit(
                    session,
                    reference,
                    pretty_version,
                    is_dev=is_dev,
                    package_name=package_name,
                )
            except ReconcileError as e:
                self._report_leftover_stash(session)
                log.warning("update_failed", error=str(e), error_type=type(e).__name__)
                raise

            self.reapplier.reapply_changes(session)
            log.info("update_completed")
            return result

    def prepare_removal(self, path: "str | Path", *, package_name: str = "") -> None:
        """Reconcile local changes before a working copy is removed.

        Stashing is not offered since nothing would reapply the stash.
        """
        with self._registry.open(path) as session:
            self.reconciler.clean_changes(session, update=False, package_name=package_name)
            self._logger.info("removal_prepared", path=str(session.path))

    def install(self, path: "str | Path", url: str, *, package_name: str = "") -> str:
        """Clone a Radicle repository into an empty or missing directory.

        ``rad clone`` creates a directory named after the project next to
        ``path``; it is moved into place when the names differ.

        Returns:
            The project's default branch.

        Raises:
            RemoteSyncError: If the URL is not a Radicle ID, rad is not in use,
                ``path`` holds files, or rad fails.
        """
        radicle = self._require_radicle(url)
        with self._registry.open(path) as session:
            target = session.path
            if target.exists() and any(target.iterdir()):
                msg = f"Cannot clone {url} into {target}: the directory is not empty"
                raise RemoteSyncError(msg)

            if target.exists():
                target.rmdir()
            target.parent.mkdir(parents=True, exist_ok=True)
            cloned = target.parent / radicle.project_name(url)
            _ = radicle.clone(url, target.parent)
            if cloned != target:
                _ = cloned.rename(target)

            branch = radicle.default_branch(url)
            self._logger.info(
                "install_completed", path=str(target), package=package_name, default_branch=branch
            )
            return branch

    def _require_radicle(self, url: str) -> RadicleAdapter:
        if not RadicleAdapter.supports(url):
            msg = f"{url} is not a Radicle repository ID"
            raise RemoteSyncError(msg)
        if not isinstance(self._adapter, RadicleAdapter):
            msg = f"Cannot reach {url}: Radicle repositories need the rad tool"
            raise RemoteSyncError(msg)
        return self._adapter

    def _require_sync_support(self, url: str) -> None:
        if RadicleAdapter.supports(url):
            _ = self._require_radicle(url)

    def _sync_remote(self, session: "ReconciliationSession", url: str) -> None:
        if isinstance(self._adapter, RadicleAdapter) and RadicleAdapter.supports(url):
            self._adapter.sync(session.path)
            return

        check_result(self._adapter.set_remote_url(session.path, self.executor.remote, url))
        origin = self._adapter.set_remote_url(session.path, "origin", url)
        if not origin.ok:
            # Clones made by other tools may have no origin remote
            self._logger.debug(
                "origin_url_not_updated", path=str(session.path), output=origin.error_output
            )
        check_result(self._adapter.fetch_all(session.path))

    def _report_leftover_stash(self, session: "ReconciliationSession") -> None:
        if session.has_stashed_changes:
            self._io.write_error(
                f"    Local changes of {session.path} were stashed and not reapplied, "
                'run "git stash pop" there to recover them'
            )


def _is_empty_listing(result: "CommandResult") -> bool:
    return result.exit_code == 1 and not result.stdout.strip() and not result.stderr.strip()

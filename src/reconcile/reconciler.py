"""Reconciliation of local changes before a destructive checkout.

Before a working copy is moved to another reference, or removed, local
changes must be dealt with: aborted on, discarded, stashed, or resolved by
asking the operator. Unpushed commits are never thrown away silently.
"""

from typing import TYPE_CHECKING, Final

from reconcile.detector import ChangeDetector
from reconcile.enums import DiscardPolicy, PromptState
from reconcile.exceptions import (
    DiscardError,
    StashError,
    UncommittedChangesError,
    UnpushedChangesError,
    UpdateAbortedError,
)
from reconcile.utils import check_result, create_null_logger

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from reconcile.io import IOProtocol
    from reconcile.models import ChangeSet
    from reconcile.session import ReconciliationSession
    from reconcile.vcs import SyncAdapterProtocol

DEFAULT_PREVIEW_LIMIT: Final = 10

_INDENT: Final = "    "

_ANSWERS: Final[dict[str, PromptState]] = {
    "y": PromptState.DISCARD,
    "s": PromptState.STASH,
    "n": PromptState.ABORT,
    "v": PromptState.LIST,
    "d": PromptState.DIFF,
    "?": PromptState.HELP,
}


def _help_lines(*, update: bool) -> list[str]:
    action = "update" if update else "uninstall"
    lines = [
        f"{_INDENT}y - discard changes and apply the {action}",
        f"{_INDENT}n - abort the {action} and let you manually clean things up",
        f"{_INDENT}v - view modified files",
        f"{_INDENT}d - view local modifications (diff)",
    ]
    if update:
        lines.append(f"{_INDENT}s - stash changes and try to reapply them after the update")
    lines.append(f"{_INDENT}? - print help")
    return lines


def next_prompt_state(answer: str, *, update: bool) -> PromptState:
    """Map an answer to the discard prompt onto the next state.

    Unknown answers, and ``s`` outside of an update, lead to the help state.

    Examples:
        >>> next_prompt_state("y", update=True)
        <PromptState.DISCARD: 'discard'>
        >>> next_prompt_state("s", update=False)
        <PromptState.HELP: 'help'>
    """
    state = _ANSWERS.get(answer.strip().lower(), PromptState.HELP)
    if state is PromptState.STASH and not update:
        return PromptState.HELP
    return state


class ChangeReconciler:
    """Decides what happens to local changes and carries it out.

    Attributes:
        policy: What to do with local changes when nobody can be asked.
        preview_limit: Number of modified files shown before the prompt.
    """

    def __init__(
        self,
        adapter: "SyncAdapterProtocol",
        io: "IOProtocol",
        *,
        detector: ChangeDetector | None = None,
        policy: DiscardPolicy = DiscardPolicy.NEVER,
        preview_limit: int = DEFAULT_PREVIEW_LIMIT,
        logger: "FilteringBoundLogger | None" = None,
    ) -> None:
        self._adapter: SyncAdapterProtocol = adapter
        self._io: IOProtocol = io
        self._logger: FilteringBoundLogger = logger or create_null_logger()
        self._detector: ChangeDetector = detector or ChangeDetector(adapter, self._logger)
        self.policy: DiscardPolicy = policy
        self.preview_limit: int = preview_limit

    def clean_changes(
        self,
        session: "ReconciliationSession",
        *,
        update: bool,
        package_name: str = "",
    ) -> None:
        """Make the working copy safe to overwrite.

        Args:
            session: The open reconciliation session of the working copy.
            update: True for an update, False for a removal. Stashing is only
                offered during updates.
            package_name: Name shown to the operator.

        Raises:
            UnpushedChangesError: If the current branch has unpushed commits
                and discarding them was not explicitly allowed.
            UncommittedChangesError: If local changes remain and the policy
                defers to the default refusal.
            UpdateAbortedError: If the operator chose to abort.
            DiscardError: If discarding failed.
            StashError: If stashing failed.
        """
        path = session.path
        interactive = self._io.is_interactive()

        unpushed = self._detector.unpushed_changes(path)
        if unpushed is not None and (interactive or self.policy is not DiscardPolicy.ALWAYS):
            msg = (
                f"Source directory {path} has unpushed changes on the current branch: \n{unpushed}"
            )
            raise UnpushedChangesError(msg, path=path, changes=unpushed.text)

        changes = self._detector.local_changes(path)
        if changes is None:
            return

        self._logger.info(
            "local_changes_found",
            path=str(path),
            files=len(changes.lines),
            interactive=interactive,
            policy=self.policy.value,
        )

        if not interactive:
            self._clean_non_interactive(session, changes, update=update)
            return

        self._prompt(session, changes, update=update, package_name=package_name)

    def _clean_non_interactive(
        self, session: "ReconciliationSession", changes: "ChangeSet", *, update: bool
    ) -> None:
        match self.policy:
            case DiscardPolicy.ALWAYS:
                self.discard_changes(session)
            case DiscardPolicy.STASH if update:
                self.stash_changes(session)
            case _:
                self._refuse(session, changes)

    def _refuse(self, session: "ReconciliationSession", changes: "ChangeSet") -> None:
        msg = f"Source directory {session.path} has uncommitted changes."
        raise UncommittedChangesError(msg, path=session.path, changes=changes.text)

    def _prompt(
        self,
        session: "ReconciliationSession",
        changes: "ChangeSet",
        *,
        update: bool,
        package_name: str,
    ) -> None:
        files = [f"{_INDENT}{line.strip()}" for line in changes.lines]
        label = package_name or str(session.path)
        self._io.write_error(f"{_INDENT}{label} has modified files:")
        self._io.write_error(files[: self.preview_limit])
        if len(files) > self.preview_limit:
            remaining = len(files) - self.preview_limit
            self._io.write_error(
                f'{_INDENT}{remaining} more files modified, choose "v" to view the full list'
            )

        question = f"{_INDENT}Discard changes [y,n,v,d,{'s,' if update else ''}?]? "
        state = PromptState.ASK
        while True:
            match state:
                case PromptState.ASK:
                    state = next_prompt_state(self._io.ask(question, "?"), update=update)
                case PromptState.LIST:
                    self._io.write_error(files)
                    state = PromptState.ASK
                case PromptState.DIFF:
                    self.view_diff(session)
                    state = PromptState.ASK
                case PromptState.HELP:
                    self._io.write_error(_help_lines(update=update))
                    state = PromptState.ASK
                case PromptState.DISCARD:
                    self.discard_changes(session)
                    return
                case PromptState.STASH:
                    self.stash_changes(session)
                    return
                case PromptState.ABORT:
                    self._logger.info("update_aborted_by_user", path=str(session.path))
                    msg = "Update aborted"
                    raise UpdateAbortedError(msg)

    def view_diff(self, session: "ReconciliationSession") -> None:
        """Show the working copy's local modifications."""
        result = check_result(self._adapter.diff(session.path, "HEAD"))
        self._io.write_error(result.stdout.rstrip("\n").splitlines())

    def discard_changes(self, session: "ReconciliationSession") -> None:
        """Remove untracked files and reset tracked ones, then flag the session.

        Raises:
            ReconcileStateError: If the session already discarded or stashed.
            DiscardError: If the clean or reset failed.
        """
        session.ensure_reconcilable()
        check_result(
            self._adapter.clean_and_reset(session.path),
            DiscardError,
            message="Could not reset changes",
        )
        session.mark_discarded()
        self._logger.info("local_changes_discarded", path=str(session.path))

    def stash_changes(self, session: "ReconciliationSession") -> None:
        """Stash local changes, untracked files included, then flag the session.

        Raises:
            ReconcileStateError: If the session already discarded or stashed.
            StashError: If the stash failed.
        """
        session.ensure_reconcilable()
        check_result(
            self._adapter.stash(session.path, include_untracked=True),
            StashError,
            message="Could not stash changes",
        )
        session.mark_stashed()
        self._logger.info("local_changes_stashed", path=str(session.path))

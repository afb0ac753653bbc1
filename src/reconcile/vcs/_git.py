"""Git sync adapter.

Runs git command lines against a working copy and returns their raw
results. This is the only place that knows git's command-line syntax.
"""

import re
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar, Final

from reconcile.utils import (
    GIT_ENV_OVERRIDES,
    CommandConfig,
    CommandResult,
    create_null_logger,
    has_metadata_repository,
    run_command,
    truncate_output,
)

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

type CommandRunner = Callable[[CommandConfig], CommandResult]

_GIT_VERSION_RE: Final = re.compile(r"^git version (\d+(?:\.\d+)+)", re.MULTILINE)

# Output kept in debug log entries per command
_LOGGED_OUTPUT_BYTES: Final = 4096


def parse_version(version: str) -> tuple[int, ...]:
    """Parse a dotted version string into a comparable tuple."""
    return tuple(int(part) for part in version.split(".") if part.isdigit())


class GitAdapter:
    """Sync adapter backed by the git command-line tool.

    Commands run with a predictable environment: ``GIT_DIR`` and friends are
    removed so the working copy argument is always honoured, and
    ``LANGUAGE=C`` keeps error messages in English so callers can search
    them for the reference they asked for.

    Attributes:
        version: Git version detected at startup, or None if unknown.
    """

    name: ClassVar[str] = "git"
    program: ClassVar[str] = "git"

    # git stash --include-untracked appeared in 1.7.7
    _STASH_UNTRACKED_MIN: ClassVar[tuple[int, ...]] = (1, 7, 7)

    def __init__(
        self,
        *,
        version: str | None = None,
        runner: CommandRunner = run_command,
        logger: "FilteringBoundLogger | None" = None,
    ) -> None:
        self.version: str | None = version
        self._runner: CommandRunner = runner
        self._logger: FilteringBoundLogger = logger or create_null_logger()

    @classmethod
    def probe_version(cls, runner: CommandRunner = run_command) -> str | None:
        """Run ``git --version`` and parse the version number.

        Args:
            runner: Command runner to use.

        Returns:
            The version string, or None if git is missing or unparseable.
        """
        result = runner(CommandConfig(args=(cls.program, "--version")))
        if not result.ok:
            return None
        match = _GIT_VERSION_RE.search(result.stdout)
        return match.group(1) if match else None

    def _run(self, path: Path | None, *args: str) -> CommandResult:
        config = CommandConfig(
            args=(self.program, *args),
            cwd=path,
            env={"LANGUAGE": "C"},
            unset_env=GIT_ENV_OVERRIDES,
        )
        result = self._runner(config)
        self._logger.debug(
            "command_executed",
            command=result.describe() or " ".join(config.args),
            cwd=str(path) if path else None,
            exit_code=result.exit_code,
            stdout=truncate_output(result.stdout, _LOGGED_OUTPUT_BYTES),
            stderr=truncate_output(result.stderr, _LOGGED_OUTPUT_BYTES),
        )
        return result

    def supports_stash_untracked(self) -> bool:
        """Whether this git can stash untracked files.

        An unknown version is assumed to be recent.
        """
        if self.version is None:
            return True
        return parse_version(self.version) >= self._STASH_UNTRACKED_MIN

    # Queries
    # =======

    def is_repository(self, path: Path) -> bool:
        return has_metadata_repository(path)

    def status(self, path: Path, *, tracked_only: bool = True) -> CommandResult:
        args = ["status", "--porcelain"]
        if tracked_only:
            args.append("--untracked-files=no")
        return self._run(path, *args)

    def list_refs(
        self, path: Path, *, include_head: bool = True, dereference_tags: bool = True
    ) -> CommandResult:
        args = ["show-ref"]
        if include_head:
            args.append("--head")
        if dereference_tags:
            args.append("-d")
        return self._run(path, *args)

    def list_remote_branches(self, path: Path) -> CommandResult:
        return self._run(path, "branch", "-r")

    def list_branches(self, path: Path) -> CommandResult:
        return self._run(path, "branch", "--no-color", "--no-abbrev", "-v")

    def list_tags(self, path: Path) -> CommandResult:
        return self._run(path, "show-ref", "--tags", "--dereference")

    def diff(
        self,
        path: Path,
        base: str,
        head: str | None = None,
        *,
        name_status_only: bool = False,
    ) -> CommandResult:
        args = ["diff"]
        if name_status_only:
            args.append("--name-status")
        args.append(f"{base}...{head}" if head is not None else base)
        args.append("--")
        return self._run(path, *args)

    # Mutations
    # =========

    def fetch_all(self, path: Path) -> CommandResult:
        return self._run(path, "fetch", "--all")

    def stash(self, path: Path, *, include_untracked: bool = True) -> CommandResult:
        if include_untracked and self.supports_stash_untracked():
            return self._run(path, "stash", "--include-untracked")
        return self._run(path, "stash")

    def stash_pop(self, path: Path) -> CommandResult:
        return self._run(path, "stash", "pop")

    def clean_and_reset(self, path: Path) -> CommandResult:
        clean = self._run(path, "clean", "-df")
        if not clean.ok:
            return clean
        return self._run(path, "reset", "--hard")

    def checkout(self, path: Path, ref: str, *, force: bool = False) -> CommandResult:
        # "--" keeps git from checking out a file that happens to share the ref's name
        args = ["checkout"]
        if force:
            args.append("-f")
        return self._run(path, *args, ref, "--")

    def create_branch_from(
        self, path: Path, name: str, source: str, *, force: bool = False
    ) -> CommandResult:
        args = ["checkout"]
        if force:
            args.append("-f")
        return self._run(path, *args, "-B", name, source, "--")

    def reset_hard(self, path: Path, ref: str) -> CommandResult:
        return self._run(path, "reset", "--hard", ref, "--")

    def set_remote_url(self, path: Path, remote: str, url: str) -> CommandResult:
        return self._run(path, "remote", "set-url", remote, "--", url)

# ruff: noqa: TC003  # Path needed at runtime for method signatures
"""Fake sync adapter for testing.

This module provides a FakeSyncAdapter class that implements
SyncAdapterProtocol for use in tests without spawning any process.
"""

from dataclasses import dataclass, field
from pathlib import Path

from reconcile.utils import CommandResult


@dataclass(slots=True)
class FakeSyncAdapter:
    """In-memory sync adapter.

    Every primitive answers from the canned outputs below and records its
    call in ``calls``, so tests can assert on exactly which commands ran.
    Results carry the git argument vector the real adapter would have run.

    Failure injection:
    - ``failing_refs`` maps a ref to the stderr of any checkout, branch
      creation or reset that targets it.
    - ``failing_operations`` maps a primitive name (``"stash"``,
      ``"fetch_all"`` ...) to the stderr it fails with.

    Example:
        >>> adapter = FakeSyncAdapter(status_output=" M README.md\\n")
        >>> adapter.status(Path("/fake/wc")).stdout.strip()
        'M README.md'
        >>> adapter.calls
        [('status', '/fake/wc')]
    """

    refs: str = ""
    refs_after_fetch: str | None = None
    status_output: str = ""
    remote_branches: list[str] = field(default_factory=list)
    branches_output: str = ""
    tags_output: str = ""
    diffs: dict[str, str] = field(default_factory=dict)
    working_diff: str = ""
    failing_refs: dict[str, str] = field(default_factory=dict)
    failing_operations: dict[str, str] = field(default_factory=dict)
    is_repo: bool = True
    head: str | None = None
    stash_entries: int = 0
    calls: list[tuple[str, ...]] = field(default_factory=list)

    def _result(
        self, operation: str, command: tuple[str, ...], *, stdout: str = "", ref: str | None = None
    ) -> CommandResult:
        stderr = self.failing_operations.get(operation)
        if stderr is None and ref is not None:
            stderr = self.failing_refs.get(ref)
        if stderr is not None:
            return CommandResult(command=("git", *command), exit_code=1, stderr=stderr)
        return CommandResult(command=("git", *command), exit_code=0, stdout=stdout)

    def calls_to(self, operation: str) -> list[tuple[str, ...]]:
        """Recorded calls of one primitive."""
        return [call for call in self.calls if call[0] == operation]

    # =========================================================================
    # Queries
    # =========================================================================

    def is_repository(self, path: Path) -> bool:
        self.calls.append(("is_repository", str(path)))
        return self.is_repo

    def status(self, path: Path, *, tracked_only: bool = True) -> CommandResult:
        self.calls.append(("status", str(path)))
        args = ("status", "--porcelain", "--untracked-files=no") if tracked_only else (
            "status",
            "--porcelain",
        )
        return self._result("status", args, stdout=self.status_output)

    def list_refs(
        self, path: Path, *, include_head: bool = True, dereference_tags: bool = True
    ) -> CommandResult:
        self.calls.append(("list_refs", str(path)))
        return self._result("list_refs", ("show-ref", "--head", "-d"), stdout=self.refs)

    def list_remote_branches(self, path: Path) -> CommandResult:
        self.calls.append(("list_remote_branches", str(path)))
        output = "".join(f"  {name}\n" for name in self.remote_branches)
        return self._result("list_remote_branches", ("branch", "-r"), stdout=output)

    def list_branches(self, path: Path) -> CommandResult:
        self.calls.append(("list_branches", str(path)))
        return self._result(
            "list_branches",
            ("branch", "--no-color", "--no-abbrev", "-v"),
            stdout=self.branches_output,
        )

    def list_tags(self, path: Path) -> CommandResult:
        self.calls.append(("list_tags", str(path)))
        return self._result(
            "list_tags", ("show-ref", "--tags", "--dereference"), stdout=self.tags_output
        )

    def diff(
        self,
        path: Path,
        base: str,
        head: str | None = None,
        *,
        name_status_only: bool = False,
    ) -> CommandResult:
        rev_range = f"{base}...{head}" if head is not None else base
        self.calls.append(("diff", str(path), rev_range))
        stdout = self.working_diff if head is None else self.diffs.get(rev_range, "")
        flags = ("--name-status",) if name_status_only else ()
        args = ("diff", *flags, rev_range, "--")
        return self._result("diff", args, stdout=stdout)

    # =========================================================================
    # Mutations
    # =========================================================================

    def fetch_all(self, path: Path) -> CommandResult:
        self.calls.append(("fetch_all", str(path)))
        result = self._result("fetch_all", ("fetch", "--all"))
        if result.ok and self.refs_after_fetch is not None:
            self.refs = self.refs_after_fetch
        return result

    def stash(self, path: Path, *, include_untracked: bool = True) -> CommandResult:
        self.calls.append(("stash", str(path)))
        args = ("stash", "--include-untracked") if include_untracked else ("stash",)
        result = self._result("stash", args)
        if result.ok:
            self.stash_entries += 1
            self.status_output = ""
        return result

    def stash_pop(self, path: Path) -> CommandResult:
        self.calls.append(("stash_pop", str(path)))
        result = self._result("stash_pop", ("stash", "pop"))
        if result.ok and self.stash_entries:
            self.stash_entries -= 1
        return result

    def clean_and_reset(self, path: Path) -> CommandResult:
        self.calls.append(("clean_and_reset", str(path)))
        result = self._result("clean_and_reset", ("clean", "-df"))
        if result.ok:
            self.status_output = ""
        return result

    def checkout(self, path: Path, ref: str, *, force: bool = False) -> CommandResult:
        self.calls.append(("checkout", str(path), ref, "force" if force else ""))
        args = ("checkout", "-f", ref, "--") if force else ("checkout", ref, "--")
        result = self._result("checkout", args, ref=ref)
        if result.ok:
            self.head = ref
        return result

    def create_branch_from(
        self, path: Path, name: str, source: str, *, force: bool = False
    ) -> CommandResult:
        self.calls.append(("create_branch_from", str(path), name, source, "force" if force else ""))
        args = ("checkout", *(("-f",) if force else ()), "-B", name, source, "--")
        result = self._result("create_branch_from", args, ref=source)
        if result.ok:
            self.head = source
        return result

    def reset_hard(self, path: Path, ref: str) -> CommandResult:
        self.calls.append(("reset_hard", str(path), ref))
        result = self._result("reset_hard", ("reset", "--hard", ref, "--"), ref=ref)
        if result.ok:
            self.head = ref
        return result

    def set_remote_url(self, path: Path, remote: str, url: str) -> CommandResult:
        self.calls.append(("set_remote_url", str(path), remote, url))
        return self._result("set_remote_url", ("remote", "set-url", remote, "--", url))

"""Parsing of ref listings produced by the VCS tool.

The ref table is rebuilt from raw output every time it is needed: after a
fetch the remote-tracking refs change, so a cached table would be stale.
"""

import re
from dataclasses import dataclass, field
from typing import Final, Self

from reconcile.enums import RefKind

_SHOW_REF_LINE_RE: Final = re.compile(r"^([a-f0-9]+) (\S+)$", re.IGNORECASE)
_BRANCH_LINE_RE: Final = re.compile(r"^(?:\* )? *(\S+) *([a-f0-9]+)(?: .*)?$")
_REMOTE_HEAD_RE: Final = re.compile(r"^ *[^/]+/HEAD ")
_TAG_LINE_RE: Final = re.compile(r"^([a-f0-9]{40}) refs/tags/(\S+?)(\^\{\})?$")

HEADS_PREFIX: Final = "refs/heads/"
REMOTES_PREFIX: Final = "refs/remotes/"
TAGS_PREFIX: Final = "refs/tags/"


@dataclass(frozen=True, slots=True)
class RefEntry:
    """A single entry in a ref listing.

    Attributes:
        name: Short ref name (``main``, ``origin/main``, ``v1.0``, ``HEAD``).
        commit: Commit hash the ref points at.
        kind: What sort of ref this is.
    """

    name: str
    commit: str
    kind: RefKind


@dataclass(frozen=True, slots=True)
class RemoteRefTable:
    """Refs of a working copy parsed from ``show-ref --head -d`` output."""

    entries: tuple[RefEntry, ...] = field(default_factory=tuple)

    @classmethod
    def parse(cls, output: str) -> Self:
        """Parse a ref listing.

        Lines that are not ``<hash> <ref>`` pairs are ignored, as are the
        dereferenced ``^{}`` lines of annotated tags.

        Args:
            output: Raw ref listing output.

        Returns:
            The parsed table.
        """
        entries: list[RefEntry] = []
        for raw_line in output.strip().splitlines():
            match = _SHOW_REF_LINE_RE.match(raw_line.strip())
            if match is None:
                continue
            commit, ref = match.group(1), match.group(2)
            if ref.endswith("^{}"):
                continue
            if ref == "HEAD":
                entries.append(RefEntry("HEAD", commit, RefKind.HEAD))
            elif ref.startswith(HEADS_PREFIX):
                entries.append(
                    RefEntry(ref[len(HEADS_PREFIX) :], commit, RefKind.LOCAL_BRANCH)
                )
            elif ref.startswith(REMOTES_PREFIX):
                entries.append(
                    RefEntry(ref[len(REMOTES_PREFIX) :], commit, RefKind.REMOTE_BRANCH)
                )
            elif ref.startswith(TAGS_PREFIX):
                entries.append(RefEntry(ref[len(TAGS_PREFIX) :], commit, RefKind.TAG))
        return cls(tuple(entries))

    @property
    def head(self) -> str | None:
        """Commit hash of HEAD, or None if HEAD is not listed."""
        for entry in self.entries:
            if entry.kind is RefKind.HEAD:
                return entry.commit
        return None

    def branches_at(self, commit: str) -> list[str]:
        """Local branch names pointing at the given commit, in listing order."""
        return [
            entry.name
            for entry in self.entries
            if entry.kind is RefKind.LOCAL_BRANCH and entry.commit == commit
        ]

    def remote_refs_for(self, branch: str) -> list[str]:
        """Remote-tracking refs named ``<remote>/<branch>``.

        The remote name itself never contains a slash, so ``origin/feature/x``
        matches branch ``feature/x`` but ``a/b/x`` does not match branch ``x``.
        """
        matches: list[str] = []
        for entry in self.entries:
            if entry.kind is not RefKind.REMOTE_BRANCH:
                continue
            remote, sep, name = entry.name.partition("/")
            if sep and remote and name == branch:
                matches.append(entry.name)
        return matches


def parse_remote_branches(output: str) -> list[str]:
    """Parse ``git branch -r`` output into remote branch names.

    Symbolic ``<remote>/HEAD -> <remote>/main`` lines are skipped.
    """
    branches: list[str] = []
    for raw_line in output.splitlines():
        line = raw_line.strip()
        if not line or "->" in line:
            continue
        branches.append(line)
    return branches


def parse_branches(output: str) -> dict[str, str]:
    """Parse ``git branch --no-color --no-abbrev -v`` output.

    Returns:
        Mapping of branch name to commit hash.
    """
    branches: dict[str, str] = {}
    for line in output.splitlines():
        if not line or _REMOTE_HEAD_RE.match(line):
            continue
        match = _BRANCH_LINE_RE.match(line)
        if match is not None and not match.group(1).startswith("-"):
            branches[match.group(1)] = match.group(2)
    return branches


def parse_tags(output: str) -> dict[str, str]:
    """Parse ``git show-ref --tags --dereference`` output.

    For annotated tags the dereferenced ``^{}`` line follows the tag object
    line, so the commit hash wins.

    Returns:
        Mapping of tag name to commit hash.
    """
    tags: dict[str, str] = {}
    for line in output.splitlines():
        match = _TAG_LINE_RE.match(line.strip())
        if match is not None:
            tags[match.group(2)] = match.group(1)
    return tags

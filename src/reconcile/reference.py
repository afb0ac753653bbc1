"""Reference classification and branch name normalization.

A resolved version string can name a commit, a branch or a tag, and nothing
in the string itself says which. Classification applies a fixed precedence:
a 40-character hexadecimal string is always a commit hash (even though a
branch could technically carry such a name), then known tag names, then
everything else is a branch.
"""

import re
from collections.abc import Collection
from dataclasses import dataclass
from typing import Final

from reconcile.enums import ReferenceKind

_COMMIT_HASH_RE: Final = re.compile(r"^[a-f0-9]{40}$", re.IGNORECASE)
_DEV_DECORATION_RE: Final = re.compile(r"(?:^dev-|(?:\.x)?-dev$)", re.IGNORECASE)
_RADICLE_NODE_RE: Final = re.compile(r"@.{48}/(.*)")
_NUMERIC_BRANCH_RE: Final = re.compile(
    r"^v?(\d+)(\.(?:\d+|[xX*]))?(\.(?:\d+|[xX*]))?(\.(?:\d+|[xX*]))?$",
    re.IGNORECASE,
)


@dataclass(frozen=True, slots=True)
class CommitHash:
    """A full 40-character commit hash."""

    value: str
    kind: ReferenceKind = ReferenceKind.COMMIT


@dataclass(frozen=True, slots=True)
class BranchName:
    """A branch name with any dev decoration removed."""

    value: str
    kind: ReferenceKind = ReferenceKind.BRANCH


@dataclass(frozen=True, slots=True)
class TagName:
    """A tag name."""

    value: str
    kind: ReferenceKind = ReferenceKind.TAG


type Reference = CommitHash | BranchName | TagName


def is_commit_hash(value: str) -> bool:
    """Check whether a string has the shape of a full commit hash."""
    return _COMMIT_HASH_RE.match(value) is not None


def strip_dev_decoration(version: str) -> str:
    """Strip dev-style decoration from a pretty version.

    Removes a leading ``dev-`` or a trailing ``-dev`` / ``.x-dev``.

    Examples:
        >>> strip_dev_decoration("dev-main")
        'main'
        >>> strip_dev_decoration("2.x-dev")
        '2'
    """
    return _DEV_DECORATION_RE.sub("", version)


def classify(version: str, *, tags: Collection[str] | None = None) -> Reference:
    """Classify a version string as a commit hash, tag or branch.

    Args:
        version: The version or reference string.
        tags: Known tag names in the repository, if available.

    Returns:
        The classified reference.
    """
    if is_commit_hash(version):
        return CommitHash(version)

    name = strip_dev_decoration(version)
    if tags is not None and (name in tags or version in tags):
        return TagName(name if name in tags else version)
    return BranchName(name)


def normalize_branch(name: str) -> str:
    """Normalize a branch name so it can be compared with versions.

    Radicle branch names may be prefixed by a peer alias and node ID
    (``alias@<48 character node id>/branch``); the prefix is dropped.
    Numeric branches such as ``1.2`` or ``v2.x`` become padded dev versions
    (``1.2.9999999.9999999-dev``); any other name becomes ``dev-<name>``.

    Args:
        name: The raw branch name.

    Returns:
        The normalized version string.
    """
    name = name.strip()

    if match := _RADICLE_NODE_RE.search(name):
        name = match.group(1)

    if match := _NUMERIC_BRANCH_RE.match(name):
        version = ""
        for group in match.groups():
            if group is None:
                version += ".x"
            else:
                version += group.replace("*", "x").replace("X", "x")
        return version.replace("x", "9999999") + "-dev"

    return f"dev-{name}"

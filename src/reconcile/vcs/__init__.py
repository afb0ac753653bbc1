"""Sync adapters.

This package holds the process boundary of the reconciliation engine: the
adapters that run VCS command lines against a working copy and hand back the
raw results.

Classes:
    SyncAdapterProtocol: Runtime-checkable protocol for dependency injection.
    GitAdapter: Adapter backed by the git command-line tool.
    RadicleAdapter: Git adapter that also speaks to the ``rad`` tool.
    FakeSyncAdapter: In-memory adapter for tests.

Example:
    >>> from reconcile.vcs import GitAdapter
    >>> adapter = GitAdapter(version=GitAdapter.probe_version())
    >>> adapter.status(Path("vendor/acme/lib")).stdout
"""

from reconcile.vcs._fake import FakeSyncAdapter
from reconcile.vcs._git import CommandRunner, GitAdapter, parse_version
from reconcile.vcs._protocol import SyncAdapterProtocol
from reconcile.vcs._radicle import RadicleAdapter

__all__ = [
    "CommandRunner",
    "FakeSyncAdapter",
    "GitAdapter",
    "RadicleAdapter",
    "SyncAdapterProtocol",
    "parse_version",
]

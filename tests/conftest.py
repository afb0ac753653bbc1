"""Shared test fixtures for reconcile tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
from rich.console import Console

from reconcile.config import Config
from reconcile.context import ToolContext
from reconcile.io import BufferedIO
from reconcile.session import ReconciliationSession
from reconcile.utils import create_null_logger
from reconcile.vcs import FakeSyncAdapter

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

HEAD_SHA = "a" * 40
OTHER_SHA = "b" * 40
THIRD_SHA = "c" * 40

WORKING_COPY = Path("/fake/vendor/acme/lib")


def ref_listing(*lines: tuple[str, str], head: str | None = HEAD_SHA) -> str:
    """Build ``show-ref --head -d`` output.

    Args:
        lines: ``(sha, ref)`` pairs, e.g. ``(HEAD_SHA, "refs/heads/main")``.
        head: Commit of HEAD, or None to leave HEAD out.
    """
    entries = [f"{head} HEAD"] if head is not None else []
    entries.extend(f"{sha} {ref}" for sha, ref in lines)
    return "\n".join(entries) + "\n"


@pytest.fixture
def console() -> Console:
    return Console(
        width=70,
        force_terminal=True,
        highlight=False,
        color_system=None,
        legacy_windows=False,
    )


@pytest.fixture
def null_logger() -> FilteringBoundLogger:
    return create_null_logger()


@pytest.fixture
def adapter() -> FakeSyncAdapter:
    """A fake working copy on ``main``, pushed to ``composer/main``."""
    return FakeSyncAdapter(
        refs=ref_listing(
            (HEAD_SHA, "refs/heads/main"),
            (HEAD_SHA, "refs/remotes/composer/main"),
        ),
        remote_branches=["composer/main"],
    )


@pytest.fixture
def io() -> BufferedIO:
    return BufferedIO()


@pytest.fixture
def session() -> ReconciliationSession:
    return ReconciliationSession(WORKING_COPY)


@pytest.fixture
def make_context(null_logger: FilteringBoundLogger) -> Callable[..., ToolContext]:
    """Return a factory building a ToolContext from config values."""

    def _make(**values: object) -> ToolContext:
        return ToolContext(
            config=Config.from_dict(dict(values)),
            git_version="2.43.0",
            logger=null_logger,
        )

    return _make

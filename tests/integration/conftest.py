import subprocess
from dataclasses import dataclass
from pathlib import Path

import pytest


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        if Path(item.path).is_relative_to(Path(__file__).parent):
            item.add_marker(pytest.mark.integration)


def run_git(path: Path, *args: str) -> str:
    """Run a git command in ``path`` and return its stripped stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=str(path),
        capture_output=True,
        check=True,
        text=True,
    )
    return result.stdout.strip()


def configure_identity(path: Path) -> None:
    run_git(path, "config", "user.email", "test@example.com")
    run_git(path, "config", "user.name", "Test User")
    run_git(path, "config", "commit.gpgsign", "false")
    run_git(path, "config", "tag.gpgsign", "false")


def init_git_repo(path: Path) -> None:
    """Initialize a minimal git repository on ``main`` in the given path."""
    run_git(path, "init")
    run_git(path, "symbolic-ref", "HEAD", "refs/heads/main")
    configure_identity(path)


def commit_file(repo: Path, name: str, content: str, message: str | None = None) -> str:
    """Write a file, commit it and return the new commit hash."""
    (repo / name).write_text(content)
    run_git(repo, "add", name)
    run_git(repo, "commit", "-m", message or f"Update {name}")
    return run_git(repo, "rev-parse", "HEAD")


@dataclass(frozen=True, slots=True)
class RepoSet:
    """An upstream repository, a clone that publishes to it and a working copy.

    The working copy is cloned with ``--origin composer`` like a dependency
    installed from source, so it has no ``origin`` remote.
    """

    upstream: Path
    seed: Path
    working_copy: Path
    initial_commit: str

    def publish(self, name: str, content: str) -> str:
        """Commit in the seed clone and push to upstream."""
        sha = commit_file(self.seed, name, content)
        run_git(self.seed, "push", "origin", "main")
        return sha

    def head(self) -> str:
        return run_git(self.working_copy, "rev-parse", "HEAD")


@pytest.fixture
def repos(tmp_path: Path) -> RepoSet:
    upstream = tmp_path / "upstream.git"
    upstream.mkdir()
    run_git(upstream, "init", "--bare")
    run_git(upstream, "symbolic-ref", "HEAD", "refs/heads/main")

    seed = tmp_path / "seed"
    seed.mkdir()
    init_git_repo(seed)
    initial = commit_file(seed, "README.md", "# acme/lib\n", "Initial commit")
    run_git(seed, "remote", "add", "origin", str(upstream))
    run_git(seed, "push", "origin", "main")

    working_copy = tmp_path / "vendor" / "acme" / "lib"
    working_copy.parent.mkdir(parents=True)
    run_git(tmp_path, "clone", "--origin", "composer", str(upstream), str(working_copy))
    configure_identity(working_copy)

    return RepoSet(
        upstream=upstream, seed=seed, working_copy=working_copy, initial_commit=initial
    )

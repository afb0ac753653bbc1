"""Working copy repository detection."""

from pathlib import Path

from dulwich.errors import NotGitRepository
from dulwich.repo import Repo


def open_repo(path: Path | str) -> Repo | None:
    """Open the git repository rooted at the given directory.

    Unlike discovery, parent directories are not searched: a dependency
    checkout nested inside another repository must have its own metadata.

    Args:
        path: The working copy directory.

    Returns:
        Repo instance if the directory holds a repository, None otherwise.
    """
    try:
        return Repo(str(path))
    except (NotGitRepository, FileNotFoundError, NotADirectoryError):
        return None


def has_metadata_repository(path: Path | str) -> bool:
    """Check whether a working copy has git metadata.

    Args:
        path: The working copy directory.

    Returns:
        True if the directory is the root of a git repository.
    """
    repo = open_repo(path)
    if repo is None:
        return False
    repo.close()
    return True

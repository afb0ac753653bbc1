import os
from pathlib import Path

import platformdirs

APP_NAME = "reconcile"


def normalize_path(path: str | Path) -> Path:
    """Normalize a working copy path so it can be used as a stable key.

    Expands ``~``, makes the path absolute and resolves symlinks and
    junctions, so two spellings of the same directory map to one key.
    The path does not need to exist.

    Args:
        path: The working copy path as given by the caller.

    Returns:
        The normalized absolute path.
    """
    return Path(os.path.realpath(Path(path).expanduser()))


def get_log_dir() -> Path:
    """Get the platform-specific directory for reconcile log files."""
    return platformdirs.user_log_path(APP_NAME)


def get_default_log_file() -> Path:
    """Get the path to the default log file."""
    return get_log_dir() / "reconcile.log"

"""Utilities for reconcile."""

from ._exec import (
    GIT_ENV_OVERRIDES,
    CommandConfig,
    CommandResult,
    build_env,
    check_result,
    run_command,
    truncate_output,
)
from ._logging import create_logger, create_null_logger
from ._paths import get_default_log_file, get_log_dir, normalize_path
from ._repo import has_metadata_repository, open_repo

__all__ = [
    "GIT_ENV_OVERRIDES",
    "CommandConfig",
    "CommandResult",
    "build_env",
    "check_result",
    "create_logger",
    "create_null_logger",
    "get_default_log_file",
    "get_log_dir",
    "has_metadata_repository",
    "normalize_path",
    "open_repo",
    "run_command",
    "truncate_output",
]

"""Exit codes for reconcile commands."""

from enum import IntEnum


class ExitCode(IntEnum):
    """Standard exit codes for reconcile CLI commands."""

    SUCCESS = 0
    LOAD_ERROR = 1
    VALIDATION_ERROR = 2
    NOT_FOUND = 3
    IO_ERROR = 4
    INTERNAL_ERROR = 5
    ABORTED = 6
    CHANGES_BLOCK_UPDATE = 7

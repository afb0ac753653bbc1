"""Structured logging for reconcile runs.

Loggers are standalone: each one wraps its own file sink and never touches
the global structlog configuration, so applications embedding reconcile
keep control of theirs.
"""

import logging
from logging.handlers import RotatingFileHandler
from os import getenv
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal, cast

import structlog

from ._paths import get_default_log_file

if TYPE_CHECKING:
    from structlog.typing import EventDict, FilteringBoundLogger, Processor, WrappedLogger

LogFormatType = Literal["json", "text"]

DEBUG_ENV = "RECONCILE_DEBUG"
LEVEL_ENV = "RECONCILE_LOG_LEVEL"


def resolve_level(level: str | None = None) -> int:
    """Resolve the effective level threshold.

    ``RECONCILE_DEBUG`` wins over everything. Otherwise the given level is
    used, then ``RECONCILE_LOG_LEVEL``, then INFO. Unknown names resolve to
    INFO.

    Examples:
        >>> resolve_level("warning") == logging.WARNING
        True
    """
    if getenv(DEBUG_ENV):
        return logging.DEBUG
    name = level or getenv(LEVEL_ENV) or "info"
    return logging.getLevelNamesMapping().get(name.upper(), logging.INFO)


def _stringify_paths(
    _logger: "WrappedLogger", _method: str, event_dict: "EventDict"
) -> "EventDict":
    # JSONRenderer would repr() them
    for key, value in event_dict.items():
        if isinstance(value, Path):
            event_dict[key] = str(value)
    return event_dict


def _processors(log_format: LogFormatType) -> list["Processor"]:
    common: list[Processor] = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        _stringify_paths,
    ]
    if log_format == "json":
        return [*common, structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    # "timestamp [level] event key=value ..."
    return [*common, structlog.dev.ConsoleRenderer(colors=False)]


def _open_sink(
    log_path: Path, level: int, *, max_bytes: int | None, backup_count: int | None
) -> Any:  # noqa: ANN401
    """Open the raw logger entries are written to.

    Rotation needs both ``max_bytes`` and ``backup_count`` and goes through a
    private stdlib logger; without it the file is appended to directly.
    """
    log_path.parent.mkdir(parents=True, exist_ok=True)
    if max_bytes is None or backup_count is None:
        return structlog.WriteLogger(log_path.open("a"))

    sink = logging.getLogger(f"reconcile.{log_path.stem}.{id(log_path)}")
    sink.handlers.clear()
    sink.propagate = False
    sink.setLevel(level)

    handler = RotatingFileHandler(log_path, maxBytes=max_bytes, backupCount=backup_count)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    sink.addHandler(handler)
    return sink


def create_logger(
    *,
    level: str | None = None,
    log_format: LogFormatType = "json",
    log_file: str = "",
    max_bytes: int | None = None,
    backup_count: int | None = None,
    **context: object,
) -> "FilteringBoundLogger":
    """Create a logger for reconciliation runs.

    Args:
        level: Level threshold (debug, info, warning, error). See
            `resolve_level` for the environment overrides.
        log_format: ``"json"`` or ``"text"``.
        log_file: Log file path; the platform log directory is used if empty.
        max_bytes: Size in bytes before the file is rotated.
        backup_count: Number of rotated files to keep.
        **context: Key/value pairs bound to every entry.
    """
    effective_level = resolve_level(level)
    log_path = Path(log_file) if log_file else get_default_log_file()
    sink = _open_sink(log_path, effective_level, max_bytes=max_bytes, backup_count=backup_count)

    logger = cast(
        "FilteringBoundLogger",
        structlog.wrap_logger(
            sink,
            processors=_processors(log_format),
            wrapper_class=structlog.make_filtering_bound_logger(effective_level),
            context_class=dict,
        ),
    )
    return logger.bind(**context) if context else logger


def create_null_logger() -> "FilteringBoundLogger":
    """Create a logger that drops every entry.

    The default for components constructed without a logger.
    """
    return cast(
        "FilteringBoundLogger",
        structlog.wrap_logger(
            structlog.ReturnLogger(),
            processors=[],
            wrapper_class=structlog.make_filtering_bound_logger(logging.CRITICAL),
            context_class=dict,
        ),
    )

# pyright: reportUnusedCallResult=false
# ruff: noqa: TC003  # Path needed at runtime for dataclass field
"""Per-invocation state shared by the reconcile commands.

The root command builds a CLIContext from the global options and publishes
it through a context variable that subcommands read.
"""

import contextvars
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Self

from reconcile.config import Config, safe_load_config

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

_current_cli_context: contextvars.ContextVar["CLIContext | None"] = contextvars.ContextVar(
    "cli_context", default=None
)


@dataclass(frozen=True, slots=True)
class CLIContext:
    """Config and logger for the running command.

    ``config_error`` holds the warning text when loading fell back to the
    defaults. The logger writes to the log file only, never the console.
    """

    config: Config = field(repr=False)
    project_root: Path | None = None
    config_error: str | None = None
    logger: "FilteringBoundLogger | None" = field(default=None, repr=False)

    @classmethod
    def get_current(cls) -> Self:
        """Get the active CLIContext, loading configuration if none is set."""
        ctx = _current_cli_context.get()
        if ctx is not None:
            return ctx  # pyright: ignore[reportReturnType]

        config, config_error = safe_load_config()
        return cls(config=config, config_error=config_error)

    @classmethod
    def set_current(cls, ctx: "CLIContext") -> None:
        _current_cli_context.set(ctx)

    @classmethod
    def reset(cls) -> None:
        """Forget the active context. Mostly useful between tests."""
        _current_cli_context.set(None)

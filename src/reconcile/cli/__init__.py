"""The reconcile command-line interface."""

from ._app import create_app, exit_code_for, main
from ._context import CLIContext
from ._exit_codes import ExitCode

__all__ = ["CLIContext", "ExitCode", "create_app", "exit_code_for", "main"]

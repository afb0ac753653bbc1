# pyright: reportUnusedFunction=false
# ruff: noqa: TC003  # Path needed at runtime for cyclopts parameter parsing
"""The command-line interface for reconcile."""

from pathlib import Path
from typing import TYPE_CHECKING, Annotated

from cyclopts import App, Parameter
from rich.console import Console
from rich.markup import escape

from reconcile.config import safe_load_config
from reconcile.context import ToolContext
from reconcile.downloader import WorkingCopyDownloader
from reconcile.exceptions import (
    CommandError,
    ConfigLoadError,
    ConfigValidationError,
    ReconcileError,
    UncommittedChangesError,
    UnpushedChangesError,
    UpdateAbortedError,
)
from reconcile.io import ConsoleIO
from reconcile.reference import classify, normalize_branch
from reconcile.utils import create_logger, run_command

from ._context import CLIContext
from ._exit_codes import ExitCode

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from reconcile.io import IOProtocol
    from reconcile.vcs import CommandRunner, SyncAdapterProtocol

_HELP = "Reconcile local changes and check out resolved references in VCS working copies."


def exit_code_for(error: ReconcileError) -> ExitCode:
    """Map a reconcile error onto a CLI exit code."""
    match error:
        case UpdateAbortedError():
            return ExitCode.ABORTED
        case UnpushedChangesError() | UncommittedChangesError():
            return ExitCode.CHANGES_BLOCK_UPDATE
        case ConfigLoadError():
            return ExitCode.LOAD_ERROR
        case ConfigValidationError():
            return ExitCode.VALIDATION_ERROR
        case CommandError():
            return ExitCode.IO_ERROR
        case _:
            return ExitCode.INTERNAL_ERROR


def create_app(  # noqa: C901
    console: Console | None = None,
    error_console: Console | None = None,
    *,
    exit_on_error: bool = True,
    adapter: "SyncAdapterProtocol | None" = None,
    io: "IOProtocol | None" = None,
    runner: "CommandRunner" = run_command,
    logger: "FilteringBoundLogger | None" = None,
) -> App:
    """Build the CLI application.

    Args:
        console: Console for regular output.
        error_console: Console for errors and prompts.
        exit_on_error: Exit on parse errors instead of raising.
        adapter: Sync adapter to use instead of the probed git/Radicle one.
        io: IO collaborator to use instead of the console one.
        runner: Command runner used to probe tool versions.
        logger: Logger to use instead of the one built from config.
    """
    if console is None:
        console = Console()
    if error_console is None:
        error_console = Console(stderr=True)

    app = App(
        name="reconcile",
        help=_HELP,
        help_on_error=True,
        console=console,
        error_console=error_console,
        exit_on_error=exit_on_error,
    )

    @app.meta.default
    def _default(
        *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
        config: Annotated[
            Path | None, Parameter(name="--config", help="Path to config file")
        ] = None,
        project_root: Annotated[
            Path | None,
            Parameter(name="--project-root", help="Directory holding .reconcile.toml"),
        ] = None,
        no_interaction: Annotated[
            bool, Parameter(name="--no-interaction", help="Never ask questions")
        ] = False,
    ) -> None:
        """Run reconcile with global options.

        Args:
            tokens: Command tokens to pass to subcommands.
            config: Explicit path to config file.
            project_root: Directory holding the project config.
            no_interaction: Apply the configured discard policy instead of prompting.
        """
        loaded_config, config_error = safe_load_config(
            config_path=config, project_root=project_root
        )
        if no_interaction:
            loaded_config = loaded_config.model_copy(update={"interactive": False})

        cli_logger = logger or create_logger(
            level=loaded_config.logging.level.value,
            log_format=loaded_config.logging.format.value,  # type: ignore[arg-type]
            log_file=loaded_config.logging.file,
        )
        if config_error is not None:
            cli_logger.warning("config_defaults_used", error=config_error)

        CLIContext.set_current(
            CLIContext(
                config=loaded_config,
                project_root=project_root,
                config_error=config_error,
                logger=cli_logger,
            )
        )
        try:
            app(tokens)
        finally:
            CLIContext.reset()

    def _downloader() -> WorkingCopyDownloader:
        ctx = CLIContext.get_current()
        tool_context = ToolContext.create(ctx.config, runner=runner, logger=logger or ctx.logger)
        cli_io = io or ConsoleIO(console, error_console, interactive=ctx.config.interactive)
        return WorkingCopyDownloader(tool_context, cli_io, adapter=adapter)

    def _fail(error: ReconcileError) -> SystemExit:
        code = exit_code_for(error)
        if code is ExitCode.ABORTED:
            error_console.print(
                f"[yellow]Aborted:[/yellow] {escape(str(error))}", highlight=False
            )
        else:
            error_console.print(f"[red]Error:[/red] {escape(str(error))}", highlight=False)
        return SystemExit(code)

    def _not_a_working_copy(path: Path) -> SystemExit:
        error_console.print(f"[red]Error:[/red] {escape(str(path))} is not a VCS working copy")
        return SystemExit(ExitCode.NOT_FOUND)

    @app.command(name="classify")
    def _classify(
        version: str,
        *,
        tag: Annotated[
            list[str] | None, Parameter(name="--tag", help="Known tag name (repeatable)")
        ] = None,
        path: Annotated[
            Path | None, Parameter(name="--path", help="Working copy to read tags from")
        ] = None,
    ) -> None:
        """Classify a version string as a commit, branch or tag.

        Args:
            version: Version or reference string.
            tag: Tag names known to exist in the repository.
            path: Working copy whose tags are known to exist.
        """
        tags = list(tag) if tag else None
        if path is not None:
            downloader = _downloader()
            if not downloader.is_working_copy(path):
                raise _not_a_working_copy(path)
            try:
                tags = [*(tags or []), *downloader.tags(path)]
            except ReconcileError as e:
                raise _fail(e) from None

        reference = classify(version, tags=tags)
        console.print(f"{reference.kind.value} {reference.value}", markup=False, highlight=False)

    @app.command(name="status")
    def _status(path: Path) -> None:
        """Show local and unpushed changes of a working copy.

        Args:
            path: Working copy directory.
        """
        downloader = _downloader()
        if not downloader.is_working_copy(path):
            raise _not_a_working_copy(path)

        try:
            local = downloader.get_local_changes(path)
            unpushed = downloader.get_unpushed_changes(path)
        except ReconcileError as e:
            raise _fail(e) from None

        if local is None and unpushed is None:
            console.print("[dim]No local or unpushed changes[/dim]")
            return

        if local is not None:
            console.print("[bold yellow]Local changes:[/bold yellow]")
            for line in local.lines:
                console.print(f"  {line}", markup=False, highlight=False)

        if unpushed is not None:
            console.print("[bold red]Unpushed changes:[/bold red]")
            for line in unpushed.lines:
                console.print(f"  {line}", markup=False, highlight=False)

    @app.command(name="refs")
    def _refs(path: Path) -> None:
        """List the branches and tags of a working copy.

        Branches are shown with the dev version they resolve to.

        Args:
            path: Working copy directory.
        """
        downloader = _downloader()
        if not downloader.is_working_copy(path):
            raise _not_a_working_copy(path)

        try:
            branches = downloader.branches(path)
            tags = downloader.tags(path)
        except ReconcileError as e:
            raise _fail(e) from None

        for name, commit in branches.items():
            line = f"branch {name} {normalize_branch(name)} {commit}"
            console.print(line, markup=False, highlight=False, soft_wrap=True)
        for name, commit in tags.items():
            console.print(f"tag {name} {commit}", markup=False, highlight=False, soft_wrap=True)

    @app.command(name="install")
    def _install(
        path: Path,
        url: str,
        *,
        package: Annotated[str, Parameter(name="--package", help="Package name")] = "",
    ) -> None:
        """Clone a Radicle repository into a new working copy.

        Args:
            path: Directory to create the working copy in.
            url: Radicle repository ID (rad:...).
            package: Package name shown in messages.
        """
        try:
            branch = _downloader().install(path, url, package_name=package)
        except ReconcileError as e:
            raise _fail(e) from None

        target = escape(package or str(path))
        console.print(
            f"[green]Installed[/green] {target} from {escape(url)} (default branch "
            f"{escape(branch)})",
            highlight=False,
        )

    @app.command(name="update")
    def _update(
        path: Path,
        reference: str,
        pretty_version: str,
        *,
        package: Annotated[str, Parameter(name="--package", help="Package name")] = "",
        url: Annotated[
            str | None, Parameter(name="--url", help="Repository URL to sync before checkout")
        ] = None,
        stable: Annotated[
            bool, Parameter(name="--stable", help="The package tracks a tag, not a branch")
        ] = False,
    ) -> None:
        """Move a working copy to a resolved reference.

        Args:
            path: Working copy directory.
            reference: Commit hash, branch or tag to check out.
            pretty_version: Version string the reference was resolved from.
            package: Package name shown in prompts and hints.
            url: Repository URL to sync from first.
            stable: The package tracks a tag rather than a branch.
        """
        downloader = _downloader()
        if not downloader.is_working_copy(path):
            raise _not_a_working_copy(path)

        try:
            downloader.update(
                path,
                reference,
                pretty_version,
                package_name=package,
                is_dev=not stable,
                url=url,
            )
        except ReconcileError as e:
            raise _fail(e) from None

        target = escape(package or str(path))
        console.print(f"[green]Updated[/green] {target} to {escape(reference)}", highlight=False)

    return app


def main() -> None:
    """Default entrypoint for the `reconcile` CLI."""
    app = create_app()
    app.meta()

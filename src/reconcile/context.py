"""Tool context created once at startup.

The versions of the VCS tools are probed a single time when the context is
created and handed to the adapters from there, instead of being memoized in
module globals.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Self

from reconcile.config import Config
from reconcile.utils import create_logger, create_null_logger, run_command
from reconcile.vcs import CommandRunner, GitAdapter, RadicleAdapter

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger


@dataclass(frozen=True, slots=True)
class ToolContext:
    """Configuration, probed tool versions and logger for one process.

    Attributes:
        config: Loaded configuration.
        git_version: Version of git, or None if git was not found.
        rad_version: Version of rad, or None if rad was not found.
        logger: Structured logger shared by every component.
        runner: Command runner the adapters spawn processes with.
    """

    config: Config = field(repr=False)
    git_version: str | None = None
    rad_version: str | None = None
    logger: "FilteringBoundLogger" = field(default_factory=create_null_logger, repr=False)
    runner: CommandRunner = field(default=run_command, repr=False)

    @classmethod
    def create(
        cls,
        config: Config | None = None,
        *,
        runner: CommandRunner = run_command,
        logger: "FilteringBoundLogger | None" = None,
    ) -> Self:
        """Create a context, probing the tool versions once.

        Args:
            config: Loaded configuration; defaults are used when None.
            runner: Command runner used for probing and by the adapters.
            logger: Logger to use; one is created from the logging config
                when None.
        """
        config = config or Config.from_dict({})
        if logger is None:
            logger = create_logger(
                level=config.logging.level.value,
                log_format=config.logging.format.value,
                log_file=config.logging.file,
            )

        git_version = GitAdapter.probe_version(runner)
        rad_version = RadicleAdapter.probe_rad_version(runner)
        logger.debug("tool_versions_probed", git=git_version, rad=rad_version)

        return cls(
            config=config,
            git_version=git_version,
            rad_version=rad_version,
            logger=logger,
            runner=runner,
        )

    def git_adapter(self) -> GitAdapter:
        """Git adapter using the probed version."""
        return GitAdapter(version=self.git_version, runner=self.runner, logger=self.logger)

    def radicle_adapter(self) -> RadicleAdapter:
        """Radicle adapter using the probed versions."""
        return RadicleAdapter(
            version=self.git_version,
            rad_version=self.rad_version,
            runner=self.runner,
            logger=self.logger,
        )

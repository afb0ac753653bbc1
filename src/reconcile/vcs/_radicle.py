"""Radicle sync adapter.

Radicle repositories are plain git repositories replicated over a
peer-to-peer network. Local primitives are inherited from ``GitAdapter``;
cloning, syncing and project metadata go through the ``rad`` tool.
"""

import re
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar, Final

import orjson

from reconcile.exceptions import RemoteSyncError
from reconcile.utils import CommandConfig, CommandResult, run_command

from ._git import CommandRunner, GitAdapter

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

_RAD_VERSION_RE: Final = re.compile(r"^rad (\d+(?:\.\d+)+)", re.MULTILINE)
_RAD_URL_RE: Final = re.compile(r"^rad:.+")

# Every seed is already in sync with the local node
_BENIGN_SYNC_ERRORS: Final = ("Error: all seeds timed out",)

PROJECT_PAYLOAD: Final = "xyz.radicle.project"


class RadicleAdapter(GitAdapter):
    """Sync adapter for Radicle-hosted repositories.

    Attributes:
        version: Git version detected at startup, or None if unknown.
        rad_version: rad version detected at startup, or None if rad is missing.
    """

    name: ClassVar[str] = "radicle"

    def __init__(
        self,
        *,
        version: str | None = None,
        rad_version: str | None = None,
        runner: CommandRunner = run_command,
        logger: "FilteringBoundLogger | None" = None,
    ) -> None:
        super().__init__(version=version, runner=runner, logger=logger)
        self.rad_version: str | None = rad_version

    @staticmethod
    def supports(url: str) -> bool:
        """Whether a repository URL is a Radicle ID (``rad:...``)."""
        return _RAD_URL_RE.match(url) is not None

    @classmethod
    def probe_rad_version(cls, runner: CommandRunner = run_command) -> str | None:
        """Run ``rad --version`` and parse the version number.

        Returns:
            The version string, or None if rad is missing or unparseable.
        """
        result = runner(CommandConfig(args=("rad", "--version")))
        if not result.ok:
            return None
        match = _RAD_VERSION_RE.search(result.stdout)
        return match.group(1) if match else None

    def _run_rad(self, cwd: Path | None, *args: str) -> CommandResult:
        result = self._runner(CommandConfig(args=("rad", *args), cwd=cwd))
        self._logger.debug(
            "command_executed",
            command=" ".join(("rad", *args)),
            cwd=str(cwd) if cwd else None,
            exit_code=result.exit_code,
        )
        return result

    def _check(self, result: CommandResult, action: str) -> CommandResult:
        output = result.stdout + result.stderr
        if any(marker in output for marker in _BENIGN_SYNC_ERRORS):
            self._logger.info("radicle_seeds_in_sync", action=action)
            return result
        if result.ok:
            return result

        if self.rad_version is None or result.command_not_found:
            msg = (
                f"Failed to {action}. rad was not found, check that it is installed "
                f"and in your PATH env.\n\n{result.error_output}"
            )
        else:
            msg = f"Failed to {action}\n\n{result.error_output}"
        raise RemoteSyncError(msg, command=result.command, output=result.error_output)

    def clone(self, rid: str, cwd: Path) -> CommandResult:
        """Clone a Radicle repository into ``cwd``.

        Raises:
            RemoteSyncError: If the clone fails.
        """
        return self._check(self._run_rad(cwd, "clone", rid), f"clone {rid}")

    def sync(self, path: Path) -> CommandResult:
        """Sync the working copy's node with the network.

        A sync where every seed timed out means nothing was left to sync and
        counts as success.

        Raises:
            RemoteSyncError: If the sync fails for any other reason.
        """
        return self._check(self._run_rad(path, "sync"), "sync")

    def inspect(self, rid: str) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
        """Read the identity payload of a repository.

        Raises:
            RemoteSyncError: If rad fails or prints something other than JSON.
        """
        result = self._check(self._run_rad(None, "inspect", "--payload", rid), "inspect")
        try:
            payload = orjson.loads(result.stdout)
        except orjson.JSONDecodeError as e:
            msg = f"Could not parse payload of {rid}: {e}"
            raise RemoteSyncError(msg, command=result.command, output=result.stdout) from e
        if not isinstance(payload, dict):
            msg = f"Unexpected payload for {rid}"
            raise RemoteSyncError(msg, command=result.command, output=result.stdout)
        return payload

    def project_name(self, rid: str) -> str:
        """Name of the project identified by ``rid``."""
        return str(self.inspect(rid)[PROJECT_PAYLOAD]["name"])

    def default_branch(self, rid: str) -> str:
        """Default branch of the project identified by ``rid``."""
        return str(self.inspect(rid)[PROJECT_PAYLOAD]["defaultBranch"])

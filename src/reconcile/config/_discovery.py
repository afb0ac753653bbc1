# pyright: reportExplicitAny=false
"""Project and user config path discovery.

The project config is a ``.reconcile.toml`` file found by searching upward
from the working directory; the user config lives in the platform config
directory.
"""

from pathlib import Path
from typing import Any, Final

import platformdirs

from reconcile.utils._paths import APP_NAME

from ._defaults import DEFAULT_CONFIG
from ._models import ConfigSource, ConfigSourceName

PROJECT_CONFIG_NAME: Final = ".reconcile.toml"


def find_project_root(start: Path | None = None) -> Path | None:
    """Return the nearest directory at or above ``start`` with a ``.reconcile.toml``.

    ``start`` defaults to the working directory. None when no ancestor has one.
    """
    origin = (start or Path.cwd()).resolve()
    return next(
        (d for d in (origin, *origin.parents) if _file_exists(d / PROJECT_CONFIG_NAME)), None
    )


def get_user_config_path() -> Path:
    r"""Get the platform-specific user config file path.

    - Linux: ``~/.config/reconcile/config.toml``
    - macOS: ``~/Library/Application Support/reconcile/config.toml``
    - Windows: ``%APPDATA%\reconcile\config.toml``

    The path is returned whether or not it exists.
    """
    return platformdirs.user_config_path(APP_NAME) / "config.toml"


def _file_exists(path: Path) -> bool:
    try:
        return path.is_file()
    except OSError:
        return False


def discover_sources(
    project_root: Path | None = None,
    *,
    include_env: bool = True,
    overrides: dict[str, Any] | None = None,
) -> list[ConfigSource]:
    """Discover all configuration sources, highest precedence first.

    File sources are listed even when the file is missing, with
    ``exists=False``.

    Args:
        project_root: Directory holding the project config. Searched
            upward from the current directory when None.
        include_env: Include environment variables as a source.
        overrides: Explicit overrides, the highest precedence source.
    """
    sources: list[ConfigSource] = []

    if overrides:
        sources.append(
            ConfigSource(
                name=ConfigSourceName.OVERRIDE, path=None, exists=True, values=overrides
            )
        )

    if include_env:
        # Values are parsed while loading
        sources.append(ConfigSource(name=ConfigSourceName.ENV, path=None, exists=True, values={}))

    resolved_root = project_root or find_project_root()
    if resolved_root is not None:
        project_path = resolved_root / PROJECT_CONFIG_NAME
        sources.append(
            ConfigSource(
                name=ConfigSourceName.PROJECT,
                path=project_path,
                exists=_file_exists(project_path),
                values={},
            )
        )

    user_path = get_user_config_path()
    sources.append(
        ConfigSource(
            name=ConfigSourceName.USER, path=user_path, exists=_file_exists(user_path), values={}
        )
    )

    sources.append(
        ConfigSource(name=ConfigSourceName.DEFAULT, path=None, exists=True, values=DEFAULT_CONFIG)
    )

    return sources

import os
import sys
from pathlib import Path  # noqa: TC003
from typing import Any

from reconcile.exceptions import ConfigError

from ._models import Config


def safe_load_config(
    *,
    config_path: Path | None = None,
    project_root: Path | None = None,
    overrides: dict[str, Any] | None = None,  # pyright: ignore[reportExplicitAny]
) -> tuple[Config, str | None]:
    """Load the config for a CLI run, never raising on bad input.

    A broken config prints a warning and yields the defaults together with
    the error text. With ``RECONCILE_STRICT_CONFIG=1`` it prints the error
    and exits with status 1 instead. An explicit ``config_path`` that does
    not exist always exits.
    """
    strict_mode = os.environ.get("RECONCILE_STRICT_CONFIG", "0") == "1"

    try:
        if config_path is not None:
            if not config_path.exists():
                print(f"Error: Config file not found: {config_path}", file=sys.stderr)  # noqa: T201
                sys.exit(1)
            return Config.from_file(config_path), None

        config = Config.load(project_root=project_root, overrides=overrides)
    except (ConfigError, OSError) as e:
        if strict_mode:
            print(f"Error: {e}", file=sys.stderr)  # noqa: T201
            sys.exit(1)
        print(f"Warning: Failed to load config: {e}", file=sys.stderr)  # noqa: T201
        return Config.from_dict({}), str(e)
    else:
        return config, None

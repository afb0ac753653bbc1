"""Default configuration values.

DEFAULT_CONFIG is a plain dict so it can be fed to ``deep_merge``, which
copies it rather than mutating it.
"""

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {  # pyright: ignore[reportExplicitAny]
    "discard_changes": False,
    "interactive": None,
    "checkout": {
        "remote": "composer",
        "preview_limit": 10,
    },
    "logging": {
        "level": "info",
        "format": "json",
        "file": "",
    },
}

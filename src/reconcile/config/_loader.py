# pyright: reportAny=false, reportUnknownVariableType=false, reportUnknownArgumentType=false
"""TOML configuration file loading and merging."""

import os
import tomllib
from pathlib import Path  # noqa: TC003
from typing import Any, Final

import orjson

from reconcile.exceptions import ConfigLoadError

ENV_PREFIX: Final = "RECONCILE_"

# Variables read by the logging and loading code, not config keys
_RESERVED_ENV_VARS: Final = frozenset(
    {"RECONCILE_DEBUG", "RECONCILE_LOG_LEVEL", "RECONCILE_STRICT_CONFIG"}
)


def read_toml_file(path: Path) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Read a TOML config file into a dict.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigLoadError: If the file cannot be parsed.
    """
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Failed to parse TOML file {path}: {e}"
        raise ConfigLoadError(msg, path=path, line=e.lineno, column=e.colno) from e


def copy_value(value: Any) -> Any:  # pyright: ignore[reportExplicitAny]
    """Deep copy a configuration value made of dicts, lists and scalars."""
    if isinstance(value, dict):
        return {k: copy_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [copy_value(item) for item in value]
    return value


def deep_merge(
    base: dict[str, Any],  # pyright: ignore[reportExplicitAny]
    override: dict[str, Any],  # pyright: ignore[reportExplicitAny]
) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Layer ``override`` on top of ``base`` and return the result as a new dict.

    Tables merge key by key; any other value in ``override``, lists
    included, replaces what ``base`` had. Neither input is modified.

    Example:
        >>> deep_merge({"checkout": {"remote": "composer"}}, {"checkout": {"preview_limit": 5}})
        {'checkout': {'remote': 'composer', 'preview_limit': 5}}
    """
    result: dict[str, Any] = {k: copy_value(v) for k, v in base.items()}  # pyright: ignore[reportExplicitAny]

    for key, override_val in override.items():
        base_val = result.get(key)
        if isinstance(base_val, dict) and isinstance(override_val, dict):
            result[key] = deep_merge(base_val, override_val)
        else:
            result[key] = copy_value(override_val)

    return result


def parse_env_value(value: str) -> Any:  # pyright: ignore[reportExplicitAny]
    """Turn an environment variable value into a config value.

    ``true``/``false`` in any case become booleans, integers become ints,
    bracketed or braced text is tried as JSON, and anything else stays a
    string.

    Examples:
        >>> parse_env_value("true")
        True
        >>> parse_env_value("10")
        10
        >>> parse_env_value("stash")
        'stash'
    """
    match value.lower():
        case "true":
            return True
        case "false":
            return False
        case _:
            pass

    try:
        return int(value)
    except ValueError:
        pass

    if (value.startswith("[") and value.endswith("]")) or (
        value.startswith("{") and value.endswith("}")
    ):
        try:
            return orjson.loads(value)
        except orjson.JSONDecodeError:
            pass

    return value


def set_nested_key(
    d: dict[str, Any],  # pyright: ignore[reportExplicitAny]
    key_path: str,
    value: Any,  # pyright: ignore[reportExplicitAny]
) -> None:
    """Assign ``value`` at a dotted path such as ``checkout.remote``.

    Missing tables are created; a scalar sitting where a table is needed is
    replaced.

    Example:
        >>> d = {}
        >>> set_nested_key(d, "checkout.remote", "upstream")
        >>> d
        {'checkout': {'remote': 'upstream'}}
    """
    parts = key_path.split(".")
    current = d

    for part in parts[:-1]:
        if not isinstance(current.get(part), dict):
            current[part] = {}
        current = current[part]

    current[parts[-1]] = value


def parse_env_vars(prefix: str = ENV_PREFIX) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Parse environment variables into a config dictionary.

    ``RECONCILE_CHECKOUT__REMOTE=upstream`` becomes
    ``{"checkout": {"remote": "upstream"}}``. The variables that control
    logging and strict loading are skipped.

    Args:
        prefix: Environment variable prefix.

    Returns:
        Dictionary of parsed values with nested structure.
    """
    values: dict[str, Any] = {}  # pyright: ignore[reportExplicitAny]
    names = sorted(
        name for name in os.environ if name.startswith(prefix) and name not in _RESERVED_ENV_VARS
    )
    for name in names:
        dotted = name.removeprefix(prefix).replace("__", ".").lower()
        if dotted:
            set_nested_key(values, dotted, parse_env_value(os.environ[name]))
    return values

"""
Loading of YAML supervisor configuration.

Values can reference other values with ``${section.key}`` and can be
overridden by environment variables named ``DAEMONCTL_<SECTION>_<KEY>``:

    DAEMONCTL_DAEMON_ADDRESS=tcp://127.0.0.1:9100
    DAEMONCTL_PROBE_TIMEOUT=30
    DAEMONCTL_LOGGING_LEVEL=debug

Keys containing underscores (e.g. ``shutdown_timeout``) are matched against
the schema's field names before splitting further.
"""

import copy
import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import pydantic
import yaml

from ..exceptions import ConfigError
from .constants import ENV_PREFIX, MAX_CONFIG_SIZE_BYTES
from .schemas import SupervisorConfig

_VAR_PATTERN = re.compile(r"\$\{([a-zA-Z0-9_.]+)\}")


def _check_file_size(path: Path) -> None:
    size = path.stat().st_size
    if size > MAX_CONFIG_SIZE_BYTES:
        raise ConfigError(
            "configuration file too large",
            path=str(path),
            size=size,
            limit=MAX_CONFIG_SIZE_BYTES,
        )


def convert_env_value(value: str) -> bool | int | float | str | list | None:
    """
    Convert an environment variable string to a typed value.

    "null"/"none"/"" become None, "true"/"false" booleans, comma separated
    values lists, numbers int or float; anything else stays a string.
    """
    if value.lower() in ("null", "none", ""):
        return None
    if value.lower() in ("true", "false"):
        return value.lower() == "true"
    if "," in value:
        return [convert_env_value(v.strip()) for v in value.split(",")]
    try:
        return float(value) if "." in value else int(value)
    except ValueError:
        return value


def schema_keys(model: type[pydantic.BaseModel] = SupervisorConfig) -> dict[str, Any]:
    """Return the tree of field names of ``model`` (leaves are None)."""
    keys: dict[str, Any] = {}
    for name, field in model.model_fields.items():
        ann = field.annotation
        if isinstance(ann, type) and issubclass(ann, pydantic.BaseModel):
            keys[name] = schema_keys(ann)
        else:
            keys[name] = None
    return keys


def _env_key_to_path(keys: Mapping[str, Any], key: str) -> list[str]:
    """
    Map ``daemon_shutdown_timeout`` to ``["daemon", "shutdown_timeout"]``.

    At each level the longest run of parts naming a known key wins; the
    remainder is used verbatim as the final key.
    """
    parts = key.lower().split("_")
    path: list[str] = []
    current: Any = keys
    i = 0
    while i < len(parts):
        match = None
        if isinstance(current, Mapping):
            for j in range(len(parts), i, -1):
                candidate = "_".join(parts[i:j])
                if candidate in current:
                    match = (candidate, j)
                    break
        if match is None:
            path.append("_".join(parts[i:]))
            break
        path.append(match[0])
        current = current[match[0]]
        i = match[1]
    return path


def _set_nested_value(data: dict, path: list[str], value: Any) -> None:
    current = data
    for part in path[:-1]:
        if not isinstance(current.get(part), dict):
            current[part] = {}
        current = current[part]
    current[path[-1]] = value


def apply_env_overrides(
    data: dict[str, Any],
    environ: Mapping[str, str] | None = None,
    prefix: str = ENV_PREFIX,
) -> dict[str, Any]:
    """Apply ``<prefix><SECTION>_<KEY>`` environment overrides to ``data``."""
    environ = os.environ if environ is None else environ
    keys = schema_keys()
    for key in sorted(environ):
        if not key.startswith(prefix):
            continue
        path = _env_key_to_path(keys, key[len(prefix) :])
        _set_nested_value(data, path, convert_env_value(environ[key]))
    return data


def _lookup(data: Mapping[str, Any], dotted: str) -> Any:
    current: Any = data
    for part in dotted.split("."):
        if not isinstance(current, Mapping) or part not in current:
            raise ConfigError("undefined variable in configuration", variable=dotted)
        current = current[part]
    return current


def resolve_variables(content: Any, root: Mapping[str, Any]) -> Any:
    """Recursively replace ``${a.b}`` references with values from ``root``."""
    if isinstance(content, dict):
        return {k: resolve_variables(v, root) for k, v in content.items()}
    if isinstance(content, list):
        return [resolve_variables(v, root) for v in content]
    if isinstance(content, str):
        return _VAR_PATTERN.sub(lambda m: str(_lookup(root, m.group(1))), content)
    return content


def parse_config(
    data: Mapping[str, Any],
    environ: Mapping[str, str] | None = None,
    enable_env_overrides: bool = True,
) -> SupervisorConfig:
    """
    Validate a configuration mapping.

    Raises:
        ConfigError: If the configuration does not match the schema
    """
    raw = copy.deepcopy(dict(data))
    if enable_env_overrides:
        raw = apply_env_overrides(raw, environ)
    raw = resolve_variables(raw, raw)
    try:
        return SupervisorConfig.model_validate(raw)
    except pydantic.ValidationError as e:
        raise ConfigError(f"invalid configuration: {e}") from e


def load_config(
    fname: str | Path,
    environ: Mapping[str, str] | None = None,
    enable_env_overrides: bool = True,
) -> SupervisorConfig:
    """
    Load and validate a YAML supervisor configuration file.

    Args:
        fname: Path to the YAML file
        environ: Environment used for overrides (defaults to os.environ)
        enable_env_overrides: Whether to apply DAEMONCTL_* overrides

    Raises:
        ConfigError: If the file is missing, too large, malformed or invalid
    """
    path = Path(fname)
    try:
        _check_file_size(path)
        with open(path) as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"cannot read configuration: {e}", path=str(path)) from e
    except yaml.YAMLError as e:
        raise ConfigError(f"malformed configuration: {e}", path=str(path)) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("configuration root must be a mapping", path=str(path))
    return parse_config(data, environ, enable_env_overrides)

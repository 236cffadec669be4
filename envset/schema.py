"""Declare variables from a YAML file.

    name: myservice
    variables:
      PORT:
        type: int
        default: 8080
        description: listen `port`
      DEBUG: {type: bool}

Defaults are YAML scalars, parsed by the variable's own kind so "1h30m" is a
valid duration default and 0x1f a valid int default.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError, InvalidValueError
from .registry import EnvSet
from .types import ErrorHandling
from .values import (
    BoolValue,
    DurationValue,
    Float64Value,
    Int64Value,
    IntValue,
    Ref,
    StringValue,
    Uint64Value,
    UintValue,
)

_VALUE_TYPES: dict[str, type[Any]] = {
    "bool": BoolValue,
    "int": IntValue,
    "int64": Int64Value,
    "uint": UintValue,
    "uint64": Uint64Value,
    "float64": Float64Value,
    "string": StringValue,
    "duration": DurationValue,
}


def _default_text(raw: Any) -> str:
    if isinstance(raw, bool):
        return "true" if raw else "false"
    return str(raw)


def declare(env: EnvSet, name: str, entry: Any, *, path: str) -> Ref[Any]:
    """Declare one schema entry on `env` and return its storage cell."""

    key_path = f"variables.{name}"
    if entry is None:
        entry = {}
    if not isinstance(entry, dict):
        raise ConfigError(f"{key_path} must be a mapping", path=path)

    type_name = entry.get("type", "string")
    if not isinstance(type_name, str):
        raise ConfigError(f"{key_path}.type must be a string", path=path)
    value_type = _VALUE_TYPES.get(type_name)
    if value_type is None:
        raise ConfigError(f"{key_path}.type: unsupported type {type_name!r}", path=path)

    ref: Ref[Any] = Ref(value_type.zero)
    value = value_type(ref)
    if entry.get("default") is not None:
        try:
            value.set(_default_text(entry["default"]))
        except InvalidValueError as exc:
            raise ConfigError(f"{key_path}.default: invalid {type_name} {entry['default']!r}: {exc}", path=path) from exc

    description = entry.get("description", "")
    if not isinstance(description, str):
        raise ConfigError(f"{key_path}.description must be a string", path=path)

    env.var(value, name, description)
    return ref


def load_schema(
    path: str | Path,
    *,
    name: str | None = None,
    error_handling: ErrorHandling = ErrorHandling.CONTINUE_ON_ERROR,
) -> tuple[EnvSet, dict[str, Ref[Any]]]:
    """Build an EnvSet from a YAML schema.

    Returns:
        The EnvSet and the storage cell of each declared variable.

    Raises:
        ConfigError: If the file is missing or malformed.
    """

    schema_path = Path(path)
    if not schema_path.is_file():
        raise ConfigError("schema file not found", path=str(schema_path))

    try:
        raw = yaml.safe_load(schema_path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"failed to parse YAML: {exc}", path=str(schema_path)) from exc

    if not isinstance(raw, dict):
        raise ConfigError("top-level YAML must be a mapping", path=str(schema_path))

    variables = raw.get("variables") or {}
    if not isinstance(variables, dict):
        raise ConfigError("variables must be a mapping", path=str(schema_path))

    env = EnvSet(name if name is not None else str(raw.get("name") or ""), error_handling)
    refs: dict[str, Ref[Any]] = {}
    for var_name, entry in variables.items():
        var_name = str(var_name)
        if "=" in var_name:
            raise ConfigError(f"variable name {var_name!r} contains =", path=str(schema_path))
        refs[var_name] = declare(env, var_name, entry, path=str(schema_path))
    return env, refs

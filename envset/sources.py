"""Producers of `NAME=VALUE` lists for `EnvSet.parse`.

Lists compose by concatenation: parsing is last-write-wins, so later
entries override earlier ones. No `${VAR}` interpolation is performed.
"""

from __future__ import annotations

import os
from datetime import date
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import dotenv_values

from .errors import ConfigError


def os_environ() -> list[str]:
    """The current process environment."""

    return [f"{k}={v}" for k, v in os.environ.items()]


def mapping_environ(values: Mapping[str, str | None]) -> list[str]:
    """Entries for a mapping; a None value yields a bare NAME entry."""

    return [k if v is None else f"{k}={v}" for k, v in values.items()]


def dotenv_environ(path: str | Path) -> list[str]:
    """Read a `.env` file.

    Raises:
        ConfigError: If the file does not exist.
    """

    dotenv_path = Path(path)
    if not dotenv_path.is_file():
        raise ConfigError("dotenv file not found", path=str(dotenv_path))
    return mapping_environ(dotenv_values(dotenv_path, interpolate=False))


def _scalar_text(value: Any, *, key: str, path: str) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, date):
        # YAML timestamps load as date or datetime objects.
        return value.isoformat()
    if isinstance(value, (str, int, float)):
        return str(value)
    raise ConfigError(f"value for {key!r} must be a scalar, got {type(value).__name__}", path=path)


def yaml_environ(path: str | Path) -> list[str]:
    """Read a flat YAML mapping of scalars.

    Raises:
        ConfigError: If the file is missing, invalid YAML, not a mapping, or
            holds nested values.
    """

    yaml_path = Path(path)
    if not yaml_path.is_file():
        raise ConfigError("environment file not found", path=str(yaml_path))

    try:
        raw = yaml.safe_load(yaml_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"failed to parse YAML: {exc}", path=str(yaml_path)) from exc

    if raw is None:
        return []
    if not isinstance(raw, dict):
        raise ConfigError("top-level YAML must be a mapping", path=str(yaml_path))

    out: list[str] = []
    for k, v in raw.items():
        key = str(k)
        if "=" in key:
            raise ConfigError(f"variable name {key!r} contains =", path=str(yaml_path))
        out.append(f"{key}={_scalar_text(v, key=key, path=str(yaml_path))}")
    return out

"""Typed environment variables, declared and parsed like command-line flags.

- Declare variables on an EnvSet (or the process-wide one in envset.default).
- Parse a list of NAME=VALUE entries, usually the process environment.
- HELP or H in the environment prints the usage listing.
"""

from __future__ import annotations

from .bridge import link
from .errors import (
    ConfigError,
    DefinitionError,
    EnvSetError,
    EnvSetPanic,
    HelpRequested,
    InvalidValueError,
    ParseError,
    RangeError,
)
from .registry import EnvSet
from .types import ErrorHandling, Spec
from .usage import unquote_usage
from .values import KINDS, Kind, Ref, TextMarshaler, TextUnmarshaler, Value

__all__ = [
    "KINDS",
    "ConfigError",
    "DefinitionError",
    "EnvSet",
    "EnvSetError",
    "EnvSetPanic",
    "ErrorHandling",
    "HelpRequested",
    "InvalidValueError",
    "Kind",
    "ParseError",
    "RangeError",
    "Ref",
    "Spec",
    "TextMarshaler",
    "TextUnmarshaler",
    "Value",
    "link",
    "unquote_usage",
]

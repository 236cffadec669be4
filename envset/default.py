"""The process-wide EnvSet and module-level shortcuts for it.

Lifecycle: call `init_environment()` once during single-threaded startup,
declare variables, then `parse()`. Nothing is created or linked to a command
line parser implicitly; `link_command_line` is an explicit opt-in.

Typical use::

    from envset import default as env

    env.init_environment()
    port = env.int("PORT", 8080, "listen `port`")
    env.parse()

This module defines functions named after builtins (``bool``, ``int``), so
import the module rather than its names.
"""

from __future__ import annotations

import argparse
import sys
from datetime import timedelta
from typing import Any, Callable, Iterable

from . import bridge
from .errors import DefinitionError
from .observability import get_logger
from .registry import EnvSet
from .sources import os_environ
from .types import ErrorHandling, Spec
from .values import Ref, TextUnmarshaler, Value

log = get_logger("envset.default")

_environment: EnvSet | None = None


def init_environment(
    name: str | None = None,
    error_handling: ErrorHandling = ErrorHandling.EXIT_ON_ERROR,
) -> EnvSet:
    """Create the process-wide EnvSet.

    `name` defaults to the program's invocation name (``sys.argv[0]``).

    Raises:
        DefinitionError: If the default EnvSet already exists.
    """

    global _environment
    if _environment is not None:
        raise DefinitionError("default environment already initialized")
    if name is None:
        name = sys.argv[0] if sys.argv else ""
    _environment = EnvSet(name, error_handling)
    log.debug("default_environment_initialized", env_name=name, policy=error_handling.value)
    return _environment


def environment() -> EnvSet:
    """Return the process-wide EnvSet.

    Raises:
        DefinitionError: If `init_environment` has not been called.
    """

    if _environment is None:
        raise DefinitionError("default environment not initialized; call init_environment() first")
    return _environment


def link_command_line(parser: argparse.ArgumentParser) -> None:
    """Show the default EnvSet's listing after `parser`'s help and usage."""

    bridge.link(parser, environment())


def parse(environ: Iterable[str] | None = None) -> None:
    """Parse `environ`, or the process environment when omitted."""

    environment().parse(os_environ() if environ is None else environ)


def parsed() -> bool:
    return environment().parsed


def visit(fn: Callable[[Spec], Any]) -> None:
    environment().visit(fn)


def visit_all(fn: Callable[[Spec], Any]) -> None:
    environment().visit_all(fn)


def lookup(name: str) -> Spec | None:
    return environment().lookup(name)


def print_defaults() -> None:
    environment().print_defaults()


def var(value: Value, name: str, description: str) -> None:
    environment().var(value, name, description)


def bool_var(ref: Ref[bool], name: str, value: bool, description: str) -> None:
    environment().bool_var(ref, name, value, description)


def bool(name: str, value: bool, description: str) -> Ref[bool]:
    return environment().bool(name, value, description)


def int_var(ref: Ref[int], name: str, value: int, description: str) -> None:
    environment().int_var(ref, name, value, description)


def int(name: str, value: int, description: str) -> Ref[int]:
    return environment().int(name, value, description)


def int64_var(ref: Ref[int], name: str, value: int, description: str) -> None:
    environment().int64_var(ref, name, value, description)


def int64(name: str, value: int, description: str) -> Ref[int]:
    return environment().int64(name, value, description)


def uint_var(ref: Ref[int], name: str, value: int, description: str) -> None:
    environment().uint_var(ref, name, value, description)


def uint(name: str, value: int, description: str) -> Ref[int]:
    return environment().uint(name, value, description)


def uint64_var(ref: Ref[int], name: str, value: int, description: str) -> None:
    environment().uint64_var(ref, name, value, description)


def uint64(name: str, value: int, description: str) -> Ref[int]:
    return environment().uint64(name, value, description)


def float64_var(ref: Ref[float], name: str, value: float, description: str) -> None:
    environment().float64_var(ref, name, value, description)


def float64(name: str, value: float, description: str) -> Ref[float]:
    return environment().float64(name, value, description)


def string_var(ref: Ref[str], name: str, value: str, description: str) -> None:
    environment().string_var(ref, name, value, description)


def string(name: str, value: str, description: str) -> Ref[str]:
    return environment().string(name, value, description)


def duration_var(ref: Ref[timedelta], name: str, value: timedelta, description: str) -> None:
    environment().duration_var(ref, name, value, description)


def duration(name: str, value: timedelta, description: str) -> Ref[timedelta]:
    return environment().duration(name, value, description)


def text_var(ref: Ref[Any], name: str, value: TextUnmarshaler, description: str) -> None:
    environment().text_var(ref, name, value, description)


def text(name: str, value: TextUnmarshaler, description: str) -> Ref[Any]:
    return environment().text(name, value, description)


def func(name: str, description: str, fn: Callable[[str], None]) -> None:
    environment().func(name, description, fn)


def bool_func(name: str, description: str, fn: Callable[[str], None]) -> None:
    environment().bool_func(name, description, fn)

from __future__ import annotations

import argparse
import sys
from contextlib import contextmanager
from typing import IO, Iterator

from .registry import EnvSet


@contextmanager
def _output_to(env: EnvSet, stream: IO[str]) -> Iterator[None]:
    previous = env._output
    env.output = stream  # type: ignore[assignment]
    try:
        yield
    finally:
        env.output = previous


def link(parser: argparse.ArgumentParser, env: EnvSet) -> None:
    """Append `env`'s usage listing to `parser`'s help and error usage.

    argparse prints the full help for -h/--help and the short usage before
    an error exit; both are followed by the variable listing, written to the
    stream argparse used (stdout unless a file is given, stderr on errors).
    """

    print_help = parser.print_help
    print_usage = parser.print_usage

    def _print_help(file: IO[str] | None = None) -> None:
        print_help(file)
        with _output_to(env, sys.stdout if file is None else file):
            env.print_usage()

    def _print_usage(file: IO[str] | None = None) -> None:
        print_usage(file)
        with _output_to(env, sys.stdout if file is None else file):
            env.print_usage()

    parser.print_help = _print_help  # type: ignore[method-assign]
    parser.print_usage = _print_usage  # type: ignore[method-assign]

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any

from .bridge import link
from .errors import ConfigError
from .observability import configure_logging, get_logger
from .registry import EnvSet
from .schema import load_schema
from .sources import dotenv_environ, os_environ
from .types import ErrorHandling, Spec
from .values import Ref


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="envset", description="Check environment variables against a YAML schema")
    p.add_argument("--schema", required=True, help="YAML file declaring the variables")
    p.add_argument(
        "--dotenv",
        action="append",
        default=[],
        help=".env file parsed before the process environment (repeatable)",
    )
    p.add_argument("--ignore-environ", action="store_true", help="do not read the process environment")
    p.add_argument("--log-level", default="WARNING", help="log level")
    p.add_argument("command", choices=["check", "usage"], help="check: print resolved values; usage: print the listing")
    return p


def _schema_path(argv: list[str] | None) -> str | None:
    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument("--schema")
    known, _ = pre.parse_known_args(argv)
    return known.schema


def _load(schema: str) -> tuple[EnvSet, dict[str, Ref[Any]]]:
    return load_schema(Path(schema), error_handling=ErrorHandling.EXIT_ON_ERROR)


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()

    # Link the schema's listing into --help when the schema is readable.
    env: EnvSet | None = None
    schema = _schema_path(argv)
    if schema is not None:
        try:
            env, _ = _load(schema)
        except ConfigError:
            env = None
        else:
            env.output = sys.stdout
            link(parser, env)

    args = parser.parse_args(argv)
    configure_logging(level=args.log_level)
    log = get_logger("envset.cli")

    if env is None:
        try:
            env, _ = _load(args.schema)
        except ConfigError as exc:
            log.error("schema_invalid", path=exc.path, error=str(exc))
            print(f"envset: {exc}", file=sys.stderr)
            return 1
        env.output = sys.stdout

    if args.command == "usage":
        env.print_usage()
        return 0

    environ: list[str] = []
    try:
        for path in args.dotenv:
            environ.extend(dotenv_environ(path))
    except ConfigError as exc:
        log.error("dotenv_invalid", path=exc.path, error=str(exc))
        print(f"envset: {exc}", file=sys.stderr)
        return 1
    if not args.ignore_environ:
        environ.extend(os_environ())

    # Exits with 2 on an invalid value and 0 on HELP.
    env.parse(environ)

    observed: set[str] = set()
    env.visit(lambda spec: observed.add(spec.name))

    def _show(spec: Spec) -> None:
        origin = "set" if spec.name in observed else "default"
        print(f"{spec.name}={spec.value} ({origin})")

    env.visit_all(_show)
    log.info("check_complete", observed=len(observed), schema=args.schema)
    return 0

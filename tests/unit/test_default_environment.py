from __future__ import annotations

import argparse
import io
import sys

import pytest

from envset import DefinitionError, ErrorHandling, Spec
from envset import default as env

pytestmark = pytest.mark.usefixtures("fresh_default")


def test_environment_requires_init() -> None:
    with pytest.raises(DefinitionError, match="not initialized"):
        env.environment()
    with pytest.raises(DefinitionError):
        env.int("PORT", 0, "")


def test_init_twice_is_an_error() -> None:
    env.init_environment("prog")
    with pytest.raises(DefinitionError, match="already initialized"):
        env.init_environment("prog")


def test_init_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sys, "argv", ["/usr/bin/mytool", "--x"])
    e = env.init_environment()
    assert e.name == "/usr/bin/mytool"
    assert e.error_handling is ErrorHandling.EXIT_ON_ERROR
    assert env.environment() is e


def test_module_level_declarations_and_parse() -> None:
    env.init_environment("prog", ErrorHandling.CONTINUE_ON_ERROR)
    port = env.int("PORT", 80, "port")
    name = env.string("NAME", "", "name")
    seen: list[str] = []
    env.func("TAG", "tag", seen.append)

    env.parse(["PORT=81", "TAG=x"])
    assert env.parsed()
    assert port.value == 81
    assert name.value == ""
    assert seen == ["x"]

    observed: list[str] = []
    env.visit(lambda spec: observed.append(spec.name))
    assert observed == ["PORT", "TAG"]

    declared: list[Spec] = []
    env.visit_all(declared.append)
    assert [s.name for s in declared] == ["NAME", "PORT", "TAG"]
    assert env.lookup("PORT") is declared[1]


def test_parse_reads_process_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    env.init_environment("prog")
    monkeypatch.setenv("ENVSET_DEFAULT_PORT", "1234")
    port = env.uint("ENVSET_DEFAULT_PORT", 0, "")
    env.parse()
    assert port.value == 1234


def test_parse_exits_with_status_2() -> None:
    e = env.init_environment("prog")
    e.output = io.StringIO()
    env.int("PORT", 0, "")
    with pytest.raises(SystemExit) as ei:
        env.parse(["PORT=notanumber"])
    assert ei.value.code == 2


def test_link_command_line_is_opt_in(capsys: pytest.CaptureFixture[str]) -> None:
    e = env.init_environment("prog")
    out = io.StringIO()
    e.output = out
    env.bool("VERBOSE", True, "chatty")

    parser = argparse.ArgumentParser(prog="prog")
    before = io.StringIO()
    parser.print_help(before)
    assert "VERBOSE" not in before.getvalue()

    env.link_command_line(parser)
    after = io.StringIO()
    parser.print_help(after)
    assert after.getvalue().endswith("Environment of prog:\n  VERBOSE  boolean\n    \tchatty (default true)\n")
    assert out.getvalue() == ""

    out.truncate(0)
    out.seek(0)
    env.print_defaults()
    assert out.getvalue() == "  VERBOSE  boolean\n    \tchatty (default true)\n"

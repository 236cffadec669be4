from __future__ import annotations

import io

import pytest

from envset import EnvSet, ErrorHandling
from envset import default as default_env


@pytest.fixture
def out() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def env(out: io.StringIO) -> EnvSet:
    e = EnvSet("test", ErrorHandling.CONTINUE_ON_ERROR)
    e.output = out
    return e


@pytest.fixture
def fresh_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(default_env, "_environment", None)

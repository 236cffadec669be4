"""The EnvSet registry: declarations, parsing and error-handling policy.

An EnvSet holds the declared ("formal") variables and the ones observed by
the most recent `parse` ("actual"). Declaration mistakes raise
DefinitionError immediately. Bad values found while parsing go through the
set's ErrorHandling policy.

Not thread-safe: finish all declarations and the parse before other threads
read the stored values.
"""

from __future__ import annotations

import sys
from collections import deque
from datetime import timedelta
from typing import Any, Callable, Iterable, TextIO

from .errors import DefinitionError, EnvSetError, EnvSetPanic, HelpRequested, InvalidValueError, ParseError, RangeError
from .observability import get_logger
from .types import ErrorHandling, Spec
from .usage import quote, write_defaults
from .values import (
    BoolFuncValue,
    BoolValue,
    DurationValue,
    Float64Value,
    FuncValue,
    Int64Value,
    IntValue,
    Kind,
    Ref,
    StringValue,
    TextUnmarshaler,
    TextValue,
    Uint64Value,
    UintValue,
    Value,
    is_bool_var,
)

log = get_logger("envset.registry")

HELP_NAMES = frozenset({"HELP", "H"})


class EnvSet:
    """A named set of environment variable declarations."""

    def __init__(self, name: str = "", error_handling: ErrorHandling = ErrorHandling.CONTINUE_ON_ERROR) -> None:
        self._name = name
        self._error_handling = error_handling
        self._output: TextIO | None = None
        self._formal: dict[str, Spec] = {}
        self._actual: dict[str, Spec] = {}
        self._remaining: deque[str] = deque()
        self._ignored = 0
        self._parsed = False
        # Called instead of the default listing when set.
        self.usage: Callable[[], None] | None = None

    def __repr__(self) -> str:
        return f"EnvSet(name={self._name!r}, error_handling={self._error_handling.name}, variables={len(self._formal)})"

    @property
    def name(self) -> str:
        return self._name

    @property
    def error_handling(self) -> ErrorHandling:
        return self._error_handling

    @property
    def parsed(self) -> bool:
        return self._parsed

    @property
    def output(self) -> TextIO:
        """Destination for usage and error messages; stderr unless set."""

        return sys.stderr if self._output is None else self._output

    @output.setter
    def output(self, stream: TextIO | None) -> None:
        self._output = stream

    def lookup(self, name: str) -> Spec | None:
        return self._formal.get(name)

    def visit_all(self, fn: Callable[[Spec], Any]) -> None:
        """Call `fn` for every declared variable, in lexicographical order."""

        for name in sorted(self._formal):
            fn(self._formal[name])

    def visit(self, fn: Callable[[Spec], Any]) -> None:
        """Call `fn` for every variable seen by the last parse, in lexicographical order."""

        for name in sorted(self._actual):
            fn(self._actual[name])

    # -- usage

    def print_defaults(self) -> None:
        specs: list[Spec] = []
        self.visit_all(specs.append)
        write_defaults(specs, self.output)

    def default_usage(self) -> None:
        if self._name:
            self.output.write(f"Environment of {self._name}:\n")
        else:
            self.output.write("Environment:\n")
        self.print_defaults()

    def print_usage(self) -> None:
        """Run the custom `usage` callback, or the default listing."""

        if self.usage is None:
            self.default_usage()
        else:
            self.usage()

    # -- declarations

    def var(self, value: Value, name: str, description: str) -> None:
        """Declare a variable backed by any Value implementation.

        Raises:
            DefinitionError: If `name` contains "=" or is already declared.
        """

        if not isinstance(value, Value):
            raise DefinitionError(self._report(f"variable {name} value {type(value).__name__} is not a Value"))
        if "=" in name:
            raise DefinitionError(self._report(f"variable {quote(name)} contains ="))
        if name in self._formal:
            if self._name:
                msg = f"{self._name} variable redefined: {name}"
            else:
                msg = f"variable redefined: {name}"
            raise DefinitionError(self._report(msg))

        self._formal[name] = Spec(name=name, description=description, value=value, def_value=str(value))
        kind = getattr(type(value), "kind", None)
        log.debug("variable_defined", variable=name, kind=kind.tag if isinstance(kind, Kind) else type(value).__name__)

    def bool_var(self, ref: Ref[bool], name: str, value: bool, description: str) -> None:
        self.var(BoolValue.bind(ref, value), name, description)

    def bool(self, name: str, value: bool, description: str) -> Ref[bool]:
        ref: Ref[bool] = Ref(value)
        self.bool_var(ref, name, value, description)
        return ref

    def int_var(self, ref: Ref[int], name: str, value: int, description: str) -> None:
        self.var(IntValue.bind(ref, value), name, description)

    def int(self, name: str, value: int, description: str) -> Ref[int]:
        ref: Ref[int] = Ref(value)
        self.int_var(ref, name, value, description)
        return ref

    def int64_var(self, ref: Ref[int], name: str, value: int, description: str) -> None:
        self.var(Int64Value.bind(ref, value), name, description)

    def int64(self, name: str, value: int, description: str) -> Ref[int]:
        ref: Ref[int] = Ref(value)
        self.int64_var(ref, name, value, description)
        return ref

    def uint_var(self, ref: Ref[int], name: str, value: int, description: str) -> None:
        self.var(UintValue.bind(ref, value), name, description)

    def uint(self, name: str, value: int, description: str) -> Ref[int]:
        ref: Ref[int] = Ref(value)
        self.uint_var(ref, name, value, description)
        return ref

    def uint64_var(self, ref: Ref[int], name: str, value: int, description: str) -> None:
        self.var(Uint64Value.bind(ref, value), name, description)

    def uint64(self, name: str, value: int, description: str) -> Ref[int]:
        ref: Ref[int] = Ref(value)
        self.uint64_var(ref, name, value, description)
        return ref

    def float64_var(self, ref: Ref[float], name: str, value: float, description: str) -> None:
        self.var(Float64Value.bind(ref, value), name, description)

    def float64(self, name: str, value: float, description: str) -> Ref[float]:
        ref: Ref[float] = Ref(value)
        self.float64_var(ref, name, value, description)
        return ref

    def string_var(self, ref: Ref[str], name: str, value: str, description: str) -> None:
        self.var(StringValue.bind(ref, value), name, description)

    def string(self, name: str, value: str, description: str) -> Ref[str]:
        ref: Ref[str] = Ref(value)
        self.string_var(ref, name, value, description)
        return ref

    def duration_var(self, ref: Ref[timedelta], name: str, value: timedelta, description: str) -> None:
        """The value accepts the compact duration syntax, e.g. "1h30m"."""

        self.var(DurationValue.bind(ref, value), name, description)

    def duration(self, name: str, value: timedelta, description: str) -> Ref[timedelta]:
        ref: Ref[timedelta] = Ref(value)
        self.duration_var(ref, name, value, description)
        return ref

    def text_var(self, ref: Ref[Any], name: str, value: TextUnmarshaler, description: str) -> None:
        """Declare a variable decoded by the stored object's `unmarshal_text`.

        `value` is copied into `ref`. When `ref` already holds an object, its
        type must be exactly the type of `value`.
        """

        try:
            text_value = TextValue.bind(ref, value)
        except DefinitionError as exc:
            raise DefinitionError(self._report(str(exc))) from None
        self.var(text_value, name, description)

    def text(self, name: str, value: TextUnmarshaler, description: str) -> Ref[Any]:
        ref: Ref[Any] = Ref(None)
        self.text_var(ref, name, value, description)
        return ref

    def func(self, name: str, description: str, fn: Callable[[str], None]) -> None:
        """Call `fn` with the value each time `name` is seen.

        An exception raised by `fn` is treated as an invalid value.
        """

        self.var(FuncValue(fn), name, description)

    def bool_func(self, name: str, description: str, fn: Callable[[str], None]) -> None:
        """Like `func`, but an empty value is passed to `fn` as "true"."""

        self.var(BoolFuncValue(fn), name, description)

    # -- parsing

    def _report(self, msg: str) -> str:
        self.output.write(msg + "\n")
        return msg

    def _fail(self, err: InvalidValueError) -> InvalidValueError:
        self._report(str(err))
        self.print_usage()
        return err

    def _parse_one(self) -> bool:
        """Consume one entry. Returns True once the input is drained."""

        if not self._remaining:
            return True
        entry = self._remaining.popleft()
        name, _, value = entry.partition("=")

        if name in HELP_NAMES:
            self.print_usage()
            raise HelpRequested()

        spec = self._formal.get(name)
        if spec is None:
            # Environments routinely carry unrelated variables.
            self._ignored += 1
            return False

        if value == "" and is_bool_var(spec.value):
            value = "true"

        try:
            spec.value.set(value)
        except Exception as exc:  # noqa: BLE001
            msg = f"invalid value {quote(value)} for variable {name}: {exc}"
            if isinstance(exc, RangeError):
                err: InvalidValueError = RangeError(msg, variable=name, value=value)
            elif isinstance(exc, ParseError):
                err = ParseError(msg, variable=name, value=value)
            else:
                err = InvalidValueError(msg, variable=name, value=value)
            raise self._fail(err) from exc

        self._actual[name] = spec
        log.debug("variable_set", variable=name)
        return False

    def parse(self, environ: Iterable[str]) -> None:
        """Parse `NAME=VALUE` entries, in order, into the declared variables.

        Unknown names are ignored. A repeated name is set again; the last
        occurrence wins. HELP or H prints the usage listing and stops.

        Raises:
            EnvSetError: Under CONTINUE_ON_ERROR, HelpRequested or an
                InvalidValueError (ParseError / RangeError by kind).
            EnvSetPanic: Under PANIC_ON_ERROR.
            SystemExit: Under EXIT_ON_ERROR, code 0 for help, 2 otherwise.
        """

        self._parsed = True
        self._actual = {}
        self._remaining = deque(environ)
        self._ignored = 0

        try:
            while not self._parse_one():
                pass
        except EnvSetError as err:
            self._remaining.clear()
            self._handle(err)
            return

        log.debug("parse_complete", observed=len(self._actual), ignored=self._ignored)

    def _handle(self, err: EnvSetError) -> None:
        log.debug(
            "parse_failed",
            error_type=type(err).__name__,
            variable=getattr(err, "variable", None),
            policy=self._error_handling.value,
        )
        if self._error_handling is ErrorHandling.CONTINUE_ON_ERROR:
            raise err
        if self._error_handling is ErrorHandling.EXIT_ON_ERROR:
            sys.exit(0 if isinstance(err, HelpRequested) else 2)
        raise EnvSetPanic(str(err)) from err

"""Value variants: one parse/format contract over many scalar kinds.

Every variant writes into a caller-visible `Ref` cell. A variant built
without a cell (``IntValue()``) renders its kind's zero value, which is what
the usage formatter relies on.
"""

from __future__ import annotations

import copy
import sys
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable, ClassVar, Generic, Protocol, TypeVar, runtime_checkable

from .duration import format_duration, parse_duration
from .errors import DefinitionError, ParseError, RangeError

T = TypeVar("T")

# Width of the interpreter's native int, 64 on every current platform.
_NATIVE_BITS = sys.maxsize.bit_length() + 1


@dataclass(slots=True)
class Ref(Generic[T]):
    """A mutable storage cell for a parsed variable."""

    value: T


@dataclass(frozen=True, slots=True)
class Kind:
    """Display metadata for a Value variant."""

    tag: str
    type_name: str
    zero_text: str
    quote_default: bool = False


BOOL = Kind("bool", "boolean", "false")
INT = Kind("int", "int", "0")
INT64 = Kind("int64", "int", "0")
UINT = Kind("uint", "uint", "0")
UINT64 = Kind("uint64", "uint", "0")
FLOAT64 = Kind("float64", "float", "0.0")
STRING = Kind("string", "string", "", quote_default=True)
DURATION = Kind("duration", "duration", "0s")
TEXT = Kind("text", "value", "")
FUNC = Kind("func", "value", "")
BOOL_FUNC = Kind("boolfunc", "value", "")

KINDS: dict[str, Kind] = {
    k.tag: k for k in (BOOL, INT, INT64, UINT, UINT64, FLOAT64, STRING, DURATION, TEXT, FUNC, BOOL_FUNC)
}


@runtime_checkable
class Value(Protocol):
    """The dynamic value stored in a Spec.

    `set` is called once per occurrence, in the order occurrences are parsed.
    `__str__` must work on an instance built with no arguments.
    Implementations may also define ``is_bool_var()`` returning True, in which
    case an empty value is parsed as "true".
    """

    def set(self, text: str) -> None: ...

    def get(self) -> Any: ...

    def __str__(self) -> str: ...


def is_bool_var(value: Value) -> bool:
    marker = getattr(value, "is_bool_var", None)
    return bool(marker()) if callable(marker) else False


class _RefValue(Generic[T]):
    kind: ClassVar[Kind]
    zero: ClassVar[Any]

    __slots__ = ("_ref",)

    def __init__(self, ref: Ref[T] | None = None) -> None:
        self._ref = ref

    @classmethod
    def bind(cls, ref: Ref[T], default: T):
        ref.value = default
        return cls(ref)

    def _parse(self, text: str) -> T:
        raise NotImplementedError

    def _format(self, value: T) -> str:
        return str(value)

    def set(self, text: str) -> None:
        parsed = self._parse(text)
        if self._ref is None:
            self._ref = Ref(parsed)
        else:
            self._ref.value = parsed

    def get(self) -> T:
        return self.zero if self._ref is None else self._ref.value

    def __str__(self) -> str:
        if self._ref is None or self._ref.value is None:
            return self.kind.zero_text
        return self._format(self._ref.value)


_TRUE_LITERALS = frozenset({"1", "t", "T", "true", "TRUE", "True"})
_FALSE_LITERALS = frozenset({"0", "f", "F", "false", "FALSE", "False"})


class BoolValue(_RefValue[bool]):
    kind = BOOL
    zero = False

    def _parse(self, text: str) -> bool:
        if text in _TRUE_LITERALS:
            return True
        if text in _FALSE_LITERALS:
            return False
        raise ParseError()

    def _format(self, value: bool) -> str:
        return "true" if value else "false"

    def is_bool_var(self) -> bool:
        return True


def _check_numeric(text: str) -> None:
    # int() and float() strip whitespace and accept non-ASCII digits.
    if not text.isascii() or text != text.strip():
        raise ParseError()


def _parse_signed(text: str, bits: int) -> int:
    _check_numeric(text)
    try:
        v = int(text, 0)
    except ValueError:
        raise ParseError() from None
    if not -(2 ** (bits - 1)) <= v < 2 ** (bits - 1):
        raise RangeError()
    return v


def _parse_unsigned(text: str, bits: int) -> int:
    _check_numeric(text)
    # int() accepts a sign; an unsigned literal never has one.
    if text[:1] in ("-", "+"):
        raise ParseError()
    try:
        v = int(text, 0)
    except ValueError:
        raise ParseError() from None
    if v >= 2**bits:
        raise RangeError()
    return v


class IntValue(_RefValue[int]):
    kind = INT
    zero = 0

    def _parse(self, text: str) -> int:
        return _parse_signed(text, _NATIVE_BITS)


class Int64Value(_RefValue[int]):
    kind = INT64
    zero = 0

    def _parse(self, text: str) -> int:
        return _parse_signed(text, 64)


class UintValue(_RefValue[int]):
    kind = UINT
    zero = 0

    def _parse(self, text: str) -> int:
        return _parse_unsigned(text, _NATIVE_BITS)


class Uint64Value(_RefValue[int]):
    kind = UINT64
    zero = 0

    def _parse(self, text: str) -> int:
        return _parse_unsigned(text, 64)


class Float64Value(_RefValue[float]):
    kind = FLOAT64
    zero = 0.0

    def _parse(self, text: str) -> float:
        _check_numeric(text)
        try:
            v = float(text)
        except ValueError:
            raise ParseError() from None
        if v in (float("inf"), float("-inf")) and "inf" not in text.lower():
            raise RangeError()
        return v

    def _format(self, value: float) -> str:
        return repr(float(value))


class StringValue(_RefValue[str]):
    kind = STRING
    zero = ""

    def _parse(self, text: str) -> str:
        return text


class DurationValue(_RefValue[timedelta]):
    kind = DURATION
    zero = timedelta(0)

    def _parse(self, text: str) -> timedelta:
        try:
            return parse_duration(text)
        except ParseError:
            raise ParseError() from None

    def _format(self, value: timedelta) -> str:
        return format_duration(value)


@runtime_checkable
class TextUnmarshaler(Protocol):
    def unmarshal_text(self, data: bytes) -> None: ...


@runtime_checkable
class TextMarshaler(Protocol):
    def marshal_text(self) -> bytes: ...


class TextValue:
    """Delegates to the stored object's unmarshal_text / marshal_text."""

    kind = TEXT

    __slots__ = ("_ref",)

    def __init__(self, ref: Ref[Any] | None = None) -> None:
        self._ref = ref

    @classmethod
    def bind(cls, ref: Ref[Any], default: TextUnmarshaler) -> TextValue:
        if not isinstance(ref, Ref):
            raise DefinitionError(f"variable storage must be a Ref, not {type(ref).__name__}")
        if not isinstance(default, TextUnmarshaler):
            raise DefinitionError(f"{type(default).__name__} does not implement unmarshal_text")
        if ref.value is not None and type(ref.value) is not type(default):
            raise DefinitionError(
                "default type value does not match variable type: "
                f"{type(default).__name__} != {type(ref.value).__name__}"
            )
        ref.value = copy.deepcopy(default)
        return cls(ref)

    def set(self, text: str) -> None:
        if self._ref is None or self._ref.value is None:
            raise ParseError("no value to unmarshal into")
        self._ref.value.unmarshal_text(text.encode("utf-8"))

    def get(self) -> Any:
        return None if self._ref is None else self._ref.value

    def __str__(self) -> str:
        target = self.get()
        if isinstance(target, TextMarshaler):
            try:
                return target.marshal_text().decode("utf-8")
            except Exception:  # noqa: BLE001
                return ""
        return ""


class FuncValue:
    """Calls `fn` with the raw text every time the variable is seen."""

    kind = FUNC

    __slots__ = ("_fn",)

    def __init__(self, fn: Callable[[str], None] | None = None) -> None:
        self._fn = fn

    def set(self, text: str) -> None:
        if self._fn is not None:
            self._fn(text)

    def get(self) -> None:
        return None

    def __str__(self) -> str:
        return ""


class BoolFuncValue(FuncValue):
    """Like FuncValue, but the variable may be given without a value."""

    kind = BOOL_FUNC

    __slots__ = ()

    def is_bool_var(self) -> bool:
        return True

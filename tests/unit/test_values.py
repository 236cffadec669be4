from __future__ import annotations

from datetime import timedelta

import pytest

from envset.errors import DefinitionError, ParseError, RangeError
from envset.values import (
    KINDS,
    BoolFuncValue,
    BoolValue,
    DurationValue,
    Float64Value,
    FuncValue,
    Int64Value,
    IntValue,
    Ref,
    StringValue,
    TextValue,
    Uint64Value,
    UintValue,
    Value,
    is_bool_var,
)


class Level:
    """A text-marshaled test type."""

    _NAMES = ("debug", "info", "warn")

    def __init__(self, n: int = 0) -> None:
        self.n = n

    def unmarshal_text(self, data: bytes) -> None:
        try:
            self.n = self._NAMES.index(data.decode())
        except ValueError:
            raise ParseError(f"unknown level {data!r}") from None

    def marshal_text(self) -> bytes:
        return self._NAMES[self.n].encode()


class Opaque:
    def unmarshal_text(self, data: bytes) -> None:
        self.data = data


@pytest.mark.parametrize("text", ["1", "t", "T", "true", "TRUE", "True"])
def test_bool_true_literals(text: str) -> None:
    ref = Ref(False)
    BoolValue(ref).set(text)
    assert ref.value is True


@pytest.mark.parametrize("text", ["0", "f", "F", "false", "FALSE", "False"])
def test_bool_false_literals(text: str) -> None:
    ref = Ref(True)
    BoolValue(ref).set(text)
    assert ref.value is False


@pytest.mark.parametrize("text", ["yes", "on", "", "tRUE"])
def test_bool_rejects_other_text(text: str) -> None:
    ref = Ref(True)
    with pytest.raises(ParseError):
        BoolValue(ref).set(text)
    assert ref.value is True


@pytest.mark.parametrize(
    ("text", "expected"),
    [("42", 42), ("-7", -7), ("0x1f", 31), ("0o17", 15), ("0b101", 5), ("1_000", 1000)],
)
def test_int_base_detection(text: str, expected: int) -> None:
    ref = Ref(0)
    IntValue(ref).set(text)
    assert ref.value == expected
    assert str(IntValue(ref)) == str(expected)


def test_int_parse_and_range_kinds_differ() -> None:
    ref = Ref(3)
    with pytest.raises(ParseError):
        Int64Value(ref).set("12abc")
    with pytest.raises(RangeError):
        Int64Value(ref).set(str(2**63))
    assert ref.value == 3

    Int64Value(ref).set(str(-(2**63)))
    assert ref.value == -(2**63)


def test_uint_rejects_sign_as_parse_error() -> None:
    ref = Ref(1)
    with pytest.raises(ParseError):
        UintValue(ref).set("-1")
    with pytest.raises(ParseError):
        Uint64Value(ref).set("+1")
    assert ref.value == 1


def test_uint64_bounds() -> None:
    ref = Ref(0)
    Uint64Value(ref).set(str(2**64 - 1))
    assert ref.value == 2**64 - 1
    with pytest.raises(RangeError):
        Uint64Value(ref).set("99999999999999999999")


def test_float64() -> None:
    ref = Ref(0.0)
    v = Float64Value(ref)
    v.set("1.5")
    assert ref.value == 1.5
    assert str(v) == "1.5"

    v.set("-inf")
    assert ref.value == float("-inf")

    with pytest.raises(RangeError):
        v.set("1e400")
    with pytest.raises(ParseError):
        v.set("one")


def test_string_accepts_anything() -> None:
    ref = Ref("x")
    v = StringValue(ref)
    v.set("")
    assert ref.value == ""
    v.set("a=b c")
    assert v.get() == "a=b c"


def test_duration_round_trip() -> None:
    ref = Ref(timedelta(0))
    v = DurationValue.bind(ref, timedelta(0))
    assert str(v) == "0s"

    v.set("1h30m0s")
    assert ref.value == timedelta(seconds=5400)
    assert str(v) == "1h30m0s"

    v.set(str(v))
    assert ref.value == timedelta(seconds=5400)

    with pytest.raises(ParseError):
        v.set("soon")


@pytest.mark.parametrize(
    "cls",
    [BoolValue, IntValue, Int64Value, UintValue, Uint64Value, Float64Value, StringValue, DurationValue],
)
def test_zero_instance_renders_kind_zero_text(cls: type) -> None:
    v = cls()
    assert str(v) == cls.kind.zero_text
    assert str(cls(Ref(cls.zero))) == cls.kind.zero_text
    assert KINDS[cls.kind.tag] is cls.kind


def test_zero_instance_can_still_be_set() -> None:
    v = IntValue()
    v.set("9")
    assert v.get() == 9


@pytest.mark.parametrize(
    ("cls", "expected"),
    [(IntValue, "0"), (UintValue, "0"), (Float64Value, "0.0"), (StringValue, ""), (DurationValue, "0s"), (BoolValue, "false")],
)
def test_empty_cell_renders_kind_zero_text(cls: type, expected: str) -> None:
    assert str(cls(Ref(None))) == expected


@pytest.mark.parametrize("cls", [IntValue, Int64Value, UintValue, Uint64Value, Float64Value])
@pytest.mark.parametrize("text", [" 8080", "8080\n", "\t1", "٣", "１２", "8\u00a0"])
def test_numbers_reject_whitespace_and_non_ascii_digits(cls: type, text: str) -> None:
    ref = Ref(cls.zero)
    with pytest.raises(ParseError):
        cls(ref).set(text)
    assert ref.value == cls.zero


def test_float_rejects_padded_literal() -> None:
    with pytest.raises(ParseError):
        Float64Value().set(" 1.5 ")


def test_text_value_delegates() -> None:
    ref = Ref(Level())
    v = TextValue.bind(ref, Level(1))
    assert str(v) == "info"

    v.set("warn")
    assert ref.value.n == 2
    assert str(v) == "warn"

    with pytest.raises(ParseError):
        v.set("loud")


def test_text_value_copies_default() -> None:
    default = Level(1)
    ref = Ref(None)
    TextValue.bind(ref, default).set("debug")
    assert ref.value.n == 0
    assert default.n == 1


def test_text_value_type_mismatch_is_definition_error() -> None:
    with pytest.raises(DefinitionError):
        TextValue.bind(Ref(Opaque()), Level())


def test_text_value_without_marshal_renders_empty() -> None:
    v = TextValue.bind(Ref(None), Opaque())
    assert str(v) == ""
    assert str(TextValue()) == ""


def test_func_values_are_inert() -> None:
    seen: list[str] = []
    f = FuncValue(seen.append)
    f.set("a")
    f.set("b")
    assert seen == ["a", "b"]
    assert f.get() is None
    assert str(f) == ""
    assert str(FuncValue()) == ""


def test_bool_var_marker() -> None:
    assert is_bool_var(BoolValue())
    assert is_bool_var(BoolFuncValue(lambda s: None))
    assert not is_bool_var(FuncValue(lambda s: None))
    assert not is_bool_var(StringValue())


def test_builtin_variants_satisfy_value_protocol() -> None:
    for v in (BoolValue(), IntValue(), TextValue(), FuncValue(), BoolFuncValue()):
        assert isinstance(v, Value)

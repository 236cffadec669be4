"""Help text for declared variables.

For an integer variable PORT the listing looks like::

  PORT  int
    	listen port (default 8080)

The parenthetical default is omitted when it is the zero value of the
variable's kind. A back-quoted word in the description replaces the type
name: "search `directory` for files" shows ``directory`` instead of
``string``.
"""

from __future__ import annotations

import json
from typing import Iterable, TextIO

from .types import Spec
from .values import Kind


class ZeroValueError(Exception):
    """Rendering the zero value of a custom Value failed."""


def _kind_of(spec: Spec) -> Kind | None:
    kind = getattr(type(spec.value), "kind", None)
    return kind if isinstance(kind, Kind) else None


def unquote_usage(spec: Spec) -> tuple[str, str]:
    """Return the placeholder name and the description with back quotes removed.

    Given "a `name` to show" it returns ("name", "a name to show"). Without a
    matched pair of back quotes the name is derived from the value's kind.
    """

    description = spec.description
    start = description.find("`")
    if start >= 0:
        end = description.find("`", start + 1)
        if end >= 0:
            name = description[start + 1 : end]
            return name, description[:start] + name + description[end + 1 :]

    kind = _kind_of(spec)
    return (kind.type_name if kind is not None else "value"), description


def zero_text(spec: Spec) -> str:
    """Render the zero value of the spec's Value type.

    Raises:
        ZeroValueError: If a custom Value cannot be built or rendered empty.
    """

    kind = _kind_of(spec)
    if kind is not None:
        return kind.zero_text

    typ = type(spec.value)
    try:
        return str(typ())
    except Exception as exc:  # noqa: BLE001
        raise ZeroValueError(
            f"error calling __str__ on zero {typ.__name__} for variable {spec.name}: {exc}"
        ) from exc


def is_zero_value(spec: Spec, value: str) -> bool:
    return value == zero_text(spec)


def quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def _format_entry(spec: Spec) -> str:
    name, description = unquote_usage(spec)
    head = f"  {spec.name}"
    if name:
        head += f"  {name}"
    return head + "\n    \t" + description.replace("\n", "\n    \t")


def _format_default(spec: Spec) -> str:
    if is_zero_value(spec, spec.def_value):
        return ""
    kind = _kind_of(spec)
    if kind is not None and kind.quote_default:
        return f" (default {quote(spec.def_value)})"
    return f" (default {spec.def_value})"


def format_spec(spec: Spec) -> str:
    """Render one entry of the listing, without the trailing newline."""

    return _format_entry(spec) + _format_default(spec)


def write_defaults(specs: Iterable[Spec], out: TextIO) -> None:
    """Write every spec's entry to `out`, in the order given.

    Zero-value failures do not stop the listing; they are reported after it.
    """

    errors: list[ZeroValueError] = []
    for spec in specs:
        line = _format_entry(spec)
        try:
            line += _format_default(spec)
        except ZeroValueError as exc:
            errors.append(exc)
        out.write(line + "\n")

    if errors:
        out.write("\n")
        for err in errors:
            out.write(f"{err}\n")

"""Compact duration syntax, e.g. "1h30m", "500ms", "-1.5s".

Durations are stored as `datetime.timedelta`, so anything finer than a
microsecond is truncated toward zero when parsing.
"""

from __future__ import annotations

import re
from datetime import timedelta
from decimal import Decimal

from .errors import ParseError

_NS_PER_UNIT: dict[str, int] = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,  # U+00B5 micro sign
    "μs": 1_000,  # U+03BC greek mu
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}

_COMPONENT_RE = re.compile(r"([0-9]*)(?:\.([0-9]*))?([^0-9.]*)")

# Same bound as a signed 64-bit nanosecond counter (about 292 years).
_MAX_NS = 2**63 - 1


def parse_duration(text: str) -> timedelta:
    """Parse a signed sequence of decimal numbers, each with a unit suffix."""

    s = text
    negative = False
    if s[:1] in ("-", "+"):
        negative = s[0] == "-"
        s = s[1:]
    if s == "0":
        return timedelta(0)
    if not s:
        raise ParseError(f"invalid duration {text!r}")

    total = Decimal(0)
    while s:
        match = _COMPONENT_RE.match(s)
        whole, frac, unit = match.group(1), match.group(2), match.group(3)
        if not whole and not frac:
            raise ParseError(f"invalid duration {text!r}")
        if not unit:
            raise ParseError(f"missing unit in duration {text!r}")
        scale = _NS_PER_UNIT.get(unit)
        if scale is None:
            raise ParseError(f"unknown unit {unit!r} in duration {text!r}")
        total += Decimal(f"{whole or '0'}.{frac or '0'}") * scale
        s = s[match.end():]

    ns = int(total)
    if ns > _MAX_NS:
        raise ParseError(f"invalid duration {text!r}")
    us = ns // 1_000
    return timedelta(microseconds=-us if negative else us)


def _fmt_frac(value: int, digits: int) -> str:
    whole, frac = divmod(value, 10**digits)
    if frac == 0:
        return str(whole)
    return f"{whole}.{str(frac).rjust(digits, '0').rstrip('0')}"


def format_duration(value: timedelta) -> str:
    """Render `value` in its canonical compact form, e.g. "1h30m0s"."""

    ns = ((value.days * 86_400 + value.seconds) * 1_000_000 + value.microseconds) * 1_000
    if ns == 0:
        return "0s"

    sign = "-" if ns < 0 else ""
    u = abs(ns)

    if u < 1_000_000_000:
        if u < 1_000:
            return f"{sign}{u}ns"
        if u < 1_000_000:
            return f"{sign}{_fmt_frac(u, 3)}µs"
        return f"{sign}{_fmt_frac(u, 6)}ms"

    minutes, rem = divmod(u, 60 * 1_000_000_000)
    out = f"{_fmt_frac(rem, 9)}s"
    if minutes:
        hours, minutes = divmod(minutes, 60)
        out = f"{minutes}m{out}"
        if hours:
            out = f"{hours}h{out}"
    return sign + out

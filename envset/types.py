from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .values import Value


class ErrorHandling(Enum):
    """How `EnvSet.parse` behaves when a variable fails to parse."""

    CONTINUE_ON_ERROR = "continue"  # re-raise the error to the caller
    EXIT_ON_ERROR = "exit"  # sys.exit(2), or sys.exit(0) on a help request
    PANIC_ON_ERROR = "panic"  # raise EnvSetPanic


@dataclass(frozen=True, slots=True)
class Spec:
    """The state of one declared environment variable."""

    name: str
    description: str
    value: Value
    # Rendered once at declaration time; never recomputed.
    def_value: str

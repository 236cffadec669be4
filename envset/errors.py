from __future__ import annotations


class EnvSetError(Exception):
    """Base exception for recoverable environment parsing errors."""


class HelpRequested(EnvSetError):
    """Raised when HELP or H is present in the parsed environment."""

    def __init__(self, message: str = "env: help requested"):
        super().__init__(message)


class InvalidValueError(EnvSetError):
    """Raised when a variable's value is rejected.

    `Value.set` implementations raise the bare error; the parser re-raises it
    with the diagnostic message and the offending variable attached.
    """

    default_message = "invalid value"

    def __init__(self, message: str | None = None, *, variable: str | None = None, value: str | None = None):
        super().__init__(message or self.default_message)
        self.variable = variable
        self.value = value


class ParseError(InvalidValueError):
    """The text is not valid syntax for the variable's kind."""

    default_message = "parse error"


class RangeError(InvalidValueError):
    """The text is well-formed but does not fit the variable's kind."""

    default_message = "value out of range"


class ConfigError(EnvSetError):
    """Raised when an environment source or schema file is invalid."""

    def __init__(self, message: str, *, path: str | None = None):
        super().__init__(f"{path}: {message}" if path else message)
        self.path = path


class DefinitionError(RuntimeError):
    """Raised for declaration mistakes in the calling program.

    Duplicate names, names containing "=", and mismatched storage types are
    bugs, not bad input, so this is deliberately not an EnvSetError.
    """


class EnvSetPanic(RuntimeError):
    """Raised by the PANIC_ON_ERROR policy; chained from the parse error."""

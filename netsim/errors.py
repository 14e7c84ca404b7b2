"""Exceptions raised by the configuration layer."""

from typing import Optional


class ConfigParseError(ValueError):
    """Base class for command line parsing failures.

    :param message: Human-readable diagnostic.
    :param option: The offending flag or value, when known.
    """

    def __init__(self, message: str, option: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.option = option


class MalformedOptionError(ConfigParseError):
    """A typed option received a value that could not be parsed or is out of range."""


class UnknownOptionError(ConfigParseError):
    """An unrecognized flag was given."""


class MissingRequiredValueError(ConfigParseError):
    """A flag that takes a value was given without one."""


class LivenessViolation(AssertionError):
    """A guarded object was used after it was released, or was never initialized."""


__all__ = [
    "ConfigParseError",
    "MalformedOptionError",
    "UnknownOptionError",
    "MissingRequiredValueError",
    "LivenessViolation",
]

"""scryptpass exception hierarchy."""

from __future__ import annotations


class ScryptPassError(Exception):
    """Base exception for all scryptpass errors."""


class ConfigError(ScryptPassError):
    """Invalid option value, unknown option, or unreadable config file."""


class RecordError(ScryptPassError):
    """Base for every reason a hash record is rejected."""


class MalformedRecord(RecordError):
    """Wrong field count, bad base64, or non-numeric parameter field."""


class InvalidParameter(RecordError):
    """A numeric record field is present but not a positive integer."""

    def __init__(self, name: str, value=None):
        self.name = name
        self.value = value
        super().__init__(f"Invalid parameter {name}")


class ParameterMismatch(RecordError):
    """A well-formed record field differs from the strict policy."""

    def __init__(self, name: str, expected=None, actual=None):
        self.name = name
        self.expected = expected
        self.actual = actual
        super().__init__(f"Parameter {name} does not match")


class DerivationError(ScryptPassError):
    """The scrypt primitive refused the requested parameters."""


class ResourceExceeded(DerivationError):
    """The parameters need more memory than max_memory allows."""

    def __init__(self, required: int, limit: int):
        self.required = required
        self.limit = limit
        super().__init__(
            f"scrypt needs {required} bytes of memory, max_memory is {limit}"
        )

"""Parameter data classes and option names."""

from dataclasses import dataclass, fields
from typing import Literal

from scryptpass.exceptions import ConfigError


class _Unset:
    """Marker for an option that should revert to its default."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET = _Unset()

RECORD_FORMATS = ("native", "phc")

# Short-hand option name -> canonical field name
ALIASES = {
    "N": "cost",
    "r": "block_size",
    "p": "parallelization",
    "permissive": "strict",
}

# Aliases whose value is the negation of the canonical field
INVERTED_ALIASES = frozenset({"permissive"})

# Work-factor fields embedded in every record
WORK_FACTORS = ("cost", "block_size", "parallelization")

POSITIVE_INT_FIELDS = (
    "hash_length",
    "salt_length",
    "cost",
    "block_size",
    "parallelization",
    "max_memory",
)


def validate_option(name: str, value) -> None:
    """Raise ConfigError if value breaks the ParameterSet invariants."""
    if name in POSITIVE_INT_FIELDS:
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ConfigError(f"Option {name} must be a positive integer, got {value!r}")
    elif name == "pepper":
        if not isinstance(value, str):
            raise ConfigError(f"Option pepper must be a string, got {type(value).__name__}")
    elif name == "strict":
        if not isinstance(value, bool):
            raise ConfigError(f"Option strict must be a boolean, got {value!r}")
    elif name == "record_format":
        if value not in RECORD_FORMATS:
            raise ConfigError(
                f"Option record_format must be one of {', '.join(RECORD_FORMATS)}, got {value!r}"
            )


@dataclass(frozen=True)
class ParameterSet:
    """Resolved configuration for one hash/verify operation."""
    hash_length: int = 32
    salt_length: int = 16
    pepper: str = ""
    cost: int = 16384
    block_size: int = 8
    parallelization: int = 1
    max_memory: int = 64 * 1024 * 1024
    strict: bool = False
    record_format: Literal["native", "phc"] = "native"

    def __post_init__(self):
        for f in fields(self):
            validate_option(f.name, getattr(self, f.name))

    @property
    def permissive(self) -> bool:
        return not self.strict

    def as_dict(self, include_pepper: bool = True) -> dict:
        """Return the fields as a plain dict, optionally without the pepper."""
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        if not include_pepper:
            data.pop("pepper")
        return data


@dataclass(frozen=True)
class HashRecord:
    """Typed contents of a parsed hash record."""
    derived_key: bytes
    salt: bytes
    cost: int
    block_size: int
    parallelization: int
    record_format: Literal["native", "phc"] = "native"

    @property
    def hash_length(self) -> int:
        return len(self.derived_key)

    @property
    def salt_length(self) -> int:
        return len(self.salt)


DEFAULTS = ParameterSet()

FIELD_NAMES = frozenset(f.name for f in fields(ParameterSet))

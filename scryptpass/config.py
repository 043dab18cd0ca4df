"""Hashing options loaded from environment variables."""

import os
from typing import Mapping, Optional

from dotenv import find_dotenv, load_dotenv

from scryptpass.exceptions import ConfigError
from scryptpass.params import POSITIVE_INT_FIELDS

ENV_PREFIX = "SCRYPTPASS_"

# Env var suffix -> option name
ENV_OPTIONS = {
    "HASH_LENGTH": "hash_length",
    "SALT_LENGTH": "salt_length",
    "PEPPER": "pepper",
    "COST": "cost",
    "BLOCK_SIZE": "block_size",
    "PARALLELIZATION": "parallelization",
    "MAX_MEMORY": "max_memory",
    "STRICT": "strict",
    "PERMISSIVE": "permissive",
    "RECORD_FORMAT": "record_format",
}

BOOL_OPTIONS = ("strict", "permissive")
_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")


def coerce_value(name: str, value):
    """Convert a textual option value to the type the option expects."""
    if not isinstance(value, str):
        return value

    if name in POSITIVE_INT_FIELDS or name in ("N", "r", "p"):
        try:
            return int(value.strip())
        except ValueError:
            raise ConfigError(f"Option {name} must be an integer, got {value!r}")

    if name in BOOL_OPTIONS:
        lowered = value.strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        raise ConfigError(f"Option {name} must be a boolean, got {value!r}")

    return value


def options_from_env(environ: Optional[Mapping[str, str]] = None, dotenv: bool = True) -> dict:
    """Collect SCRYPTPASS_* variables into an override mapping.

    Args:
        environ: Mapping to read instead of os.environ.
        dotenv: Load a .env file into os.environ first.
    """
    if environ is None:
        if dotenv:
            load_dotenv(find_dotenv(usecwd=True))
        environ = os.environ

    overrides = {}
    for suffix, name in ENV_OPTIONS.items():
        value = environ.get(ENV_PREFIX + suffix)
        if value is None or value == "":
            continue
        overrides[name] = coerce_value(name, value)
    return overrides

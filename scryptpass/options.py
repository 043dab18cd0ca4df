"""Option resolution: aliases, defaults and the process-wide option store.

Overrides are plain mappings. A key may use its canonical name
(``cost``) or its short-hand (``N``); when both are given the short-hand
wins. A value of ``UNSET`` (or ``None``) resets that field to the
documented default instead of leaving it unchanged.
"""

import dataclasses
import logging
import threading
from typing import Mapping, Optional

from scryptpass.exceptions import ConfigError
from scryptpass.params import (
    ALIASES,
    DEFAULTS,
    FIELD_NAMES,
    INVERTED_ALIASES,
    UNSET,
    ParameterSet,
    validate_option,
)

logger = logging.getLogger("scryptpass")


def normalize(overrides: Optional[Mapping] = None) -> dict:
    """Resolve short-hand names and reject unknown options.

    Returns a new dict keyed by canonical field names. Values are not
    validated here, except that inverted aliases (``permissive``) are
    flipped once they are known to be booleans.
    """
    opts = dict(overrides or {})

    for alias, canonical in ALIASES.items():
        if alias not in opts:
            continue
        value = opts.pop(alias)
        if alias in INVERTED_ALIASES and _is_set(value):
            if not isinstance(value, bool):
                raise ConfigError(f"Option {alias} must be a boolean, got {value!r}")
            value = not value
        opts[canonical] = value

    unknown = sorted(str(k) for k in opts if k not in FIELD_NAMES)
    if unknown:
        raise ConfigError(f"Unknown option(s): {', '.join(unknown)}")

    return opts


def merge(base: ParameterSet, overrides: Optional[Mapping] = None) -> ParameterSet:
    """Apply overrides over a complete parameter set."""
    opts = normalize(overrides)
    if not opts:
        return base

    changes = {}
    for name, value in opts.items():
        if not _is_set(value):
            changes[name] = getattr(DEFAULTS, name)
        else:
            validate_option(name, value)
            changes[name] = value

    return dataclasses.replace(base, **changes)


def _is_set(value) -> bool:
    return value is not UNSET and value is not None


class OptionStore:
    """Holds the current ParameterSet as an immutable snapshot.

    Readers take ``current`` in a single attribute read and always see a
    complete set. Writers build a new snapshot under a lock and swap the
    reference, so concurrent reads never observe a half-applied update.
    """

    def __init__(self, initial: Optional[ParameterSet] = None):
        if initial is not None and not isinstance(initial, ParameterSet):
            raise ConfigError(f"initial must be a ParameterSet, got {type(initial).__name__}")
        self._current = initial if initial is not None else DEFAULTS
        self._lock = threading.Lock()

    @property
    def current(self) -> ParameterSet:
        return self._current

    def resolve(self, overrides: Optional[Mapping] = None) -> ParameterSet:
        """Return current options with overrides applied, without storing them."""
        return merge(self._current, overrides)

    def update(self, overrides: Mapping) -> ParameterSet:
        """Merge overrides into the stored options and return the new snapshot."""
        with self._lock:
            updated = merge(self._current, overrides)
            self._current = updated
        return updated

    def reset(self) -> ParameterSet:
        with self._lock:
            self._current = DEFAULTS
        return DEFAULTS


_store = OptionStore()


def get_store() -> OptionStore:
    """Return the process-wide option store."""
    return _store


def resolve(overrides: Optional[Mapping] = None, store: Optional[OptionStore] = None) -> ParameterSet:
    """Combine defaults, the current options and per-call overrides."""
    return (store or _store).resolve(overrides)


def reconfigure(overrides: Optional[Mapping] = None, store: Optional[OptionStore] = None) -> ParameterSet:
    """Complement or read the current options.

    With no overrides this is a pure read. Otherwise the overrides are
    merged into the stored options, which are replaced in one step.
    """
    store = store or _store
    if not overrides:
        return store.current

    updated = store.update(overrides)
    logger.info(
        f"Hashing options updated: cost={updated.cost}, "
        f"block_size={updated.block_size}, parallelization={updated.parallelization}, "
        f"hash_length={updated.hash_length}, salt_length={updated.salt_length}, "
        f"strict={updated.strict}, record_format={updated.record_format}"
    )
    return updated


opts = reconfigure


def reset(store: Optional[OptionStore] = None) -> ParameterSet:
    """Restore the documented defaults."""
    logger.debug("Hashing options reset to defaults.")
    return (store or _store).reset()

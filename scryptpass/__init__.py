"""scryptpass - scrypt password hashing with evolving parameters.

Records carry their own salt and work factors, so hashes issued under
older options stay verifiable after the options change.
"""

__description__ = "scrypt password hashing with evolving parameters."
__version__ = "1.0.0"

from scryptpass.engine import (
    Hasher,
    compute_hash,
    compute_hash_async,
    get_hasher,
    hash_password,
    looks_good,
    needs_rehash,
    parse_record as parse,
    verify,
    verify_async,
)
from scryptpass.exceptions import (
    ConfigError,
    DerivationError,
    InvalidParameter,
    MalformedRecord,
    ParameterMismatch,
    RecordError,
    ResourceExceeded,
    ScryptPassError,
)
from scryptpass.options import OptionStore, get_store, opts, reconfigure, reset, resolve
from scryptpass.params import DEFAULTS, UNSET, HashRecord, ParameterSet

__all__ = [
    "Hasher",
    "compute_hash",
    "compute_hash_async",
    "get_hasher",
    "hash_password",
    "looks_good",
    "needs_rehash",
    "parse",
    "verify",
    "verify_async",
    "OptionStore",
    "get_store",
    "opts",
    "reconfigure",
    "reset",
    "resolve",
    "DEFAULTS",
    "UNSET",
    "HashRecord",
    "ParameterSet",
    "ScryptPassError",
    "ConfigError",
    "RecordError",
    "MalformedRecord",
    "InvalidParameter",
    "ParameterMismatch",
    "DerivationError",
    "ResourceExceeded",
]

"""Hash record encoding and decoding.

Two record formats are understood:

native
    ``<b64(key)>$<b64(salt)>$<cost>$<block_size>$<parallelization>``
    using padded standard base64.

phc
    ``$scrypt$n=<cost>,r=<block_size>,p=<parallelization>$<b64(salt)>$<b64(key)>``
    using unpadded standard base64, as in the PHC string format.

``decode`` never raises: it returns either a ``HashRecord`` or the
``RecordError`` describing why the text was rejected. ``parse`` is the
raising counterpart.
"""

from __future__ import annotations

import base64
import binascii
import re
from typing import Union

from scryptpass.exceptions import (
    InvalidParameter,
    MalformedRecord,
    ParameterMismatch,
    RecordError,
)
from scryptpass.params import WORK_FACTORS, HashRecord, ParameterSet

DELIMITER = "$"
PHC_PREFIX = "$scrypt$"
NATIVE_FIELDS = 5

# PHC parameter names -> work-factor fields
PHC_PARAMS = {"n": "cost", "r": "block_size", "p": "parallelization"}

_DECIMAL = re.compile(r"-?[0-9]+")

DecodeResult = Union[HashRecord, RecordError]


def _b64encode(data: bytes, padded: bool = True) -> str:
    text = base64.b64encode(data).decode("ascii")
    return text if padded else text.rstrip("=")


def encode(derived_key: bytes, salt: bytes, cost: int, block_size: int, parallelization: int) -> str:
    """Serialize a derived key, its salt and work factors as a native record."""
    return DELIMITER.join([
        _b64encode(derived_key),
        _b64encode(salt),
        str(cost),
        str(block_size),
        str(parallelization),
    ])


def encode_phc(derived_key: bytes, salt: bytes, cost: int, block_size: int, parallelization: int) -> str:
    """Serialize as a PHC-style ``$scrypt$`` string."""
    return (
        f"{PHC_PREFIX}n={cost},r={block_size},p={parallelization}"
        f"${_b64encode(salt, padded=False)}${_b64encode(derived_key, padded=False)}"
    )


def encode_record(record: HashRecord) -> str:
    """Serialize a HashRecord in its own record format."""
    encoder = encode_phc if record.record_format == "phc" else encode
    return encoder(
        record.derived_key,
        record.salt,
        record.cost,
        record.block_size,
        record.parallelization,
    )


def _b64decode(text: str, label: str, padded: bool = True) -> bytes:
    if not padded:
        text += "=" * (-len(text) % 4)
    try:
        data = base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError):
        raise MalformedRecord(f"Invalid base64 encoding for {label}")
    if not data:
        raise MalformedRecord(f"Empty {label}")
    return data


def _parse_int(text: str, name: str) -> int:
    if not _DECIMAL.fullmatch(text):
        raise MalformedRecord(f"Parameter {name} is not a number")
    try:
        value = int(text)
    except ValueError:
        raise MalformedRecord(f"Parameter {name} is not a number")
    if value <= 0:
        raise InvalidParameter(name, value)
    return value


def _split_native(text: str) -> HashRecord:
    parts = text.split(DELIMITER)
    if len(parts) != NATIVE_FIELDS:
        raise MalformedRecord("Invalid hash format")

    key_text, salt_text, *factors = parts
    derived_key = _b64decode(key_text, "hashed password")
    salt = _b64decode(salt_text, "salt")
    values = {name: _parse_int(raw, name) for name, raw in zip(WORK_FACTORS, factors)}

    return HashRecord(derived_key=derived_key, salt=salt, record_format="native", **values)


def _split_phc(text: str) -> HashRecord:
    parts = text.split(DELIMITER)
    if len(parts) != 5 or parts[0] != "" or parts[1] != "scrypt":
        raise MalformedRecord("Invalid PHC hash format")

    raw_params = {}
    for item in parts[2].split(","):
        key, sep, value = item.partition("=")
        if not sep or key not in PHC_PARAMS or key in raw_params:
            raise MalformedRecord(f"Invalid PHC parameter segment: {parts[2]!r}")
        raw_params[key] = value
    if set(raw_params) != set(PHC_PARAMS):
        raise MalformedRecord("PHC record must carry n, r and p")

    values = {PHC_PARAMS[key]: _parse_int(raw, PHC_PARAMS[key]) for key, raw in raw_params.items()}
    salt = _b64decode(parts[3], "salt", padded=False)
    derived_key = _b64decode(parts[4], "hashed password", padded=False)

    return HashRecord(derived_key=derived_key, salt=salt, record_format="phc", **values)


def _check_policy(record: HashRecord, policy: ParameterSet) -> None:
    """Strict-mode comparison of a decoded record against the policy."""
    if record.hash_length != policy.hash_length:
        raise ParameterMismatch("hash_length", policy.hash_length, record.hash_length)
    if record.salt_length != policy.salt_length:
        raise ParameterMismatch("salt_length", policy.salt_length, record.salt_length)
    for name in WORK_FACTORS:
        expected, actual = getattr(policy, name), getattr(record, name)
        if actual != expected:
            raise ParameterMismatch(name, expected, actual)
    if record.record_format != policy.record_format:
        raise ParameterMismatch("record_format", policy.record_format, record.record_format)


def decode(text, policy: ParameterSet) -> DecodeResult:
    """Decode a record, returning the HashRecord or the rejection reason."""
    if not isinstance(text, str):
        return MalformedRecord(f"Hash must be a string, got {type(text).__name__}")

    try:
        if text.startswith(PHC_PREFIX):
            record = _split_phc(text)
        else:
            record = _split_native(text)
        if policy.strict:
            _check_policy(record, policy)
    except RecordError as e:
        return e

    return record


def parse(text, policy: ParameterSet) -> HashRecord:
    """Decode a record, raising the specific RecordError on rejection."""
    result = decode(text, policy)
    if isinstance(result, RecordError):
        raise result
    return result

"""Password hashing, verification and rehash detection."""

import asyncio
import dataclasses
import functools
import hmac
import logging
import secrets
from concurrent.futures import Executor
from typing import Mapping, Optional, Union

from scryptpass import kdf
from scryptpass.exceptions import DerivationError, RecordError
from scryptpass.options import OptionStore, get_store
from scryptpass.params import HashRecord, ParameterSet
from scryptpass.record import decode, encode, encode_phc, parse

logger = logging.getLogger("scryptpass")

Password = Union[str, bytes]


def _encode_text(text: str) -> bytes:
    # Lone surrogates are valid in str; keep them distinct instead of failing
    return text.encode("utf-8", errors="surrogatepass")


def _password_material(password: Password, pepper: str) -> bytes:
    """Append the pepper to the password and encode as UTF-8."""
    if isinstance(password, bytes):
        return password + _encode_text(pepper)
    if isinstance(password, str):
        return _encode_text(password + pepper)
    raise TypeError(f"password must be str or bytes, got {type(password).__name__}")


class Hasher:
    """Hashes and checks passwords against an option store.

    Args:
        store: Option store to read the current options from. Defaults
            to the process-wide store.
        executor: Executor for the async wrappers. ``None`` uses the
            event loop's default thread pool.
    """

    def __init__(self, store: Optional[OptionStore] = None, executor: Optional[Executor] = None):
        self.store = store or get_store()
        self.executor = executor

    def options(self, overrides: Optional[Mapping] = None) -> ParameterSet:
        return self.store.resolve(overrides)

    def compute_hash(self, password: Password, overrides: Optional[Mapping] = None) -> str:
        """Hash a password with a fresh random salt.

        Returns:
            The encoded record, in the configured ``record_format``.

        Raises:
            ConfigError: an override is invalid.
            ResourceExceeded: the work factors exceed ``max_memory``.
            DerivationError: scrypt rejected the work factors.
        """
        params = self.options(overrides)
        salt = secrets.token_bytes(params.salt_length)

        derived_key = kdf.derive(
            _password_material(password, params.pepper),
            salt,
            params.hash_length,
            params.cost,
            params.block_size,
            params.parallelization,
            params.max_memory,
        )

        encoder = encode_phc if params.record_format == "phc" else encode
        logger.debug(
            f"Issued {params.record_format} hash: N={params.cost}, r={params.block_size}, "
            f"p={params.parallelization}, key={params.hash_length}B, salt={params.salt_length}B"
        )
        return encoder(derived_key, salt, params.cost, params.block_size, params.parallelization)

    def parse(self, record: str, overrides: Optional[Mapping] = None) -> HashRecord:
        """Parse a record under the current policy, raising RecordError on rejection."""
        return parse(record, self.options(overrides))

    def looks_good(self, record: str, overrides: Optional[Mapping] = None) -> bool:
        """Return True if the record is acceptable under the caller's policy.

        Honors the ``strict`` setting as given, so with the default
        permissive policy any well-formed record looks good. This is not
        the negation of ``needs_rehash``.
        """
        return not isinstance(decode(record, self.options(overrides)), RecordError)

    def needs_rehash(self, record: str, overrides: Optional[Mapping] = None) -> bool:
        """Return True if the record does not match today's policy exactly."""
        policy = dataclasses.replace(self.options(overrides), strict=True)
        result = decode(record, policy)
        if isinstance(result, RecordError):
            logger.debug(f"Record needs rehash: {result}")
            return True
        return False

    def verify(self, password: Password, record: str, overrides: Optional[Mapping] = None) -> bool:
        """Check a password against a record.

        The key is re-derived with the record's own salt, length and work
        factors; only the pepper and ``max_memory`` come from the current
        options. Any rejected record or refused derivation reads as a
        wrong password.
        """
        policy = self.options(overrides)
        parsed = decode(record, policy)
        if isinstance(parsed, RecordError):
            logger.debug(f"Verification rejected record: {parsed}")
            return False

        try:
            candidate = kdf.derive(
                _password_material(password, policy.pepper),
                parsed.salt,
                parsed.hash_length,
                parsed.cost,
                parsed.block_size,
                parsed.parallelization,
                policy.max_memory,
            )
        except DerivationError as e:
            logger.debug(f"Verification derivation failed: {e}")
            return False

        return hmac.compare_digest(candidate, parsed.derived_key)

    async def compute_hash_async(self, password: Password, overrides: Optional[Mapping] = None) -> str:
        """Run ``compute_hash`` in the executor."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            self.executor,
            functools.partial(self.compute_hash, password, overrides),
        )

    async def verify_async(self, password: Password, record: str, overrides: Optional[Mapping] = None) -> bool:
        """Run ``verify`` in the executor."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            self.executor,
            functools.partial(self.verify, password, record, overrides),
        )


_hasher = Hasher()


def get_hasher() -> Hasher:
    """Return the Hasher bound to the process-wide option store."""
    return _hasher


def compute_hash(password: Password, overrides: Optional[Mapping] = None) -> str:
    return _hasher.compute_hash(password, overrides)


hash_password = compute_hash


def verify(password: Password, record: str, overrides: Optional[Mapping] = None) -> bool:
    return _hasher.verify(password, record, overrides)


def needs_rehash(record: str, overrides: Optional[Mapping] = None) -> bool:
    return _hasher.needs_rehash(record, overrides)


def looks_good(record: str, overrides: Optional[Mapping] = None) -> bool:
    return _hasher.looks_good(record, overrides)


def parse_record(record: str, overrides: Optional[Mapping] = None) -> HashRecord:
    return _hasher.parse(record, overrides)


async def compute_hash_async(password: Password, overrides: Optional[Mapping] = None) -> str:
    return await _hasher.compute_hash_async(password, overrides)


async def verify_async(password: Password, record: str, overrides: Optional[Mapping] = None) -> bool:
    return await _hasher.verify_async(password, record, overrides)

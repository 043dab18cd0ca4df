"""scrypt key derivation with a memory ceiling."""

import logging

from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from scryptpass.exceptions import DerivationError, ResourceExceeded

logger = logging.getLogger("scryptpass")

# RFC 7914 limits: dkLen <= (2^32 - 1) * hLen, p * r < 2^30, N < 2^(128 * r / 8)
MAX_LENGTH = (2 ** 32 - 1) * 32
MAX_BLOCKS = 2 ** 30


def memory_required(cost: int, block_size: int, parallelization: int) -> int:
    """Bytes of working memory scrypt needs for the given work factors.

    Same estimate OpenSSL uses for its maxmem check: the V array
    (128 * r * (N + 2)) plus the B buffer (128 * r * p).
    """
    return 128 * block_size * (cost + 2) + 128 * block_size * parallelization


def check_parameters(length: int, cost: int, block_size: int, parallelization: int) -> None:
    """Raise DerivationError for parameters outside scrypt's valid range."""
    if cost < 2 or cost & (cost - 1):
        raise DerivationError(f"scrypt rejected parameters: N={cost} is not a power of 2 greater than 1")
    if cost >= 2 ** (16 * block_size):
        raise DerivationError(f"scrypt rejected parameters: N={cost} too large for r={block_size}")
    if block_size * parallelization >= MAX_BLOCKS:
        raise DerivationError(
            f"scrypt rejected parameters: r*p={block_size * parallelization} must be below 2^30"
        )
    if length > MAX_LENGTH:
        raise DerivationError(f"scrypt rejected parameters: output length {length} too large")


def derive(
    password: bytes,
    salt: bytes,
    length: int,
    cost: int,
    block_size: int,
    parallelization: int,
    max_memory: int,
) -> bytes:
    """Derive a key of ``length`` bytes.

    Raises:
        DerivationError: the parameters are outside scrypt's valid range,
            or scrypt refused them for another reason.
        ResourceExceeded: the work factors need more than ``max_memory``.
    """
    check_parameters(length, cost, block_size, parallelization)

    required = memory_required(cost, block_size, parallelization)
    if required > max_memory:
        logger.warning(
            f"scrypt refused: N={cost}, r={block_size}, p={parallelization} "
            f"needs {required} bytes, limit is {max_memory}"
        )
        raise ResourceExceeded(required, max_memory)

    try:
        kdf = Scrypt(
            salt=salt,
            length=length,
            n=cost,
            r=block_size,
            p=parallelization,
        )
        return kdf.derive(password)
    except (MemoryError, ValueError, TypeError, OverflowError) as e:
        raise DerivationError(f"scrypt rejected parameters: {e!r}") from e

"""
hashing.py — SHA-256 and HMAC-SHA256 Hashing Module
=====================================================
Provides the digests used throughout the PDP engine:
plain SHA-256 for Merkle leaves, nodes and proof hashes,
and keyed HMAC-SHA256 for challenge responses.

Uses PyCryptodome for the keyed hash.
"""

import hashlib
import logging

from Crypto.Hash import HMAC, SHA256

logger = logging.getLogger(__name__)

# Length of a hex-encoded SHA-256 digest
DIGEST_HEX_LENGTH = 64


def sha256_hash(data: bytes) -> str:
    """
    Compute the SHA-256 hash of the given data.

    Args:
        data: Raw bytes to hash.

    Returns:
        Hexadecimal string of the SHA-256 digest (64 characters).

    Raises:
        TypeError: If data is not bytes.
    """
    if not isinstance(data, (bytes, bytearray)):
        raise TypeError(f"Expected bytes, got {type(data).__name__}")

    digest = hashlib.sha256(data).hexdigest()
    logger.debug("SHA-256: %s... (%d bytes)", digest[:16], len(data))
    return digest


def hmac_sha256(key: bytes, message: bytes) -> str:
    """
    Compute HMAC-SHA256 of a message under the given key.

    Args:
        key: Secret key bytes (any length).
        message: Bytes to authenticate.

    Returns:
        Hexadecimal string of the HMAC digest (64 characters).
    """
    mac = HMAC.new(key, msg=bytes(message), digestmod=SHA256)
    return mac.hexdigest()


def is_sha256_hex(value: str) -> bool:
    """Check whether a string looks like a lowercase hex SHA-256 digest."""
    if not isinstance(value, str) or len(value) != DIGEST_HEX_LENGTH:
        return False
    return all(c in "0123456789abcdef" for c in value)

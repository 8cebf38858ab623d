"""
challenge.py — Random Challenge Generator
===========================================
Produces the sample locations and nonces for one proof round.

Each challenge names a block index drawn from a bounded domain
and carries a fresh random nonce, which later keys the HMAC
response over the sampled block. Challenges live only for the
duration of a single proof round and are never persisted.
"""

import logging
import secrets
from dataclasses import dataclass
from typing import Dict, List

logger = logging.getLogger(__name__)

DEFAULT_CHALLENGE_COUNT = 10

# Block indices are drawn from [0, DEFAULT_INDEX_DOMAIN)
DEFAULT_INDEX_DOMAIN = 1000

# Nonce size in bytes (hex-encoded to twice this length)
DEFAULT_NONCE_SIZE = 32


@dataclass(frozen=True)
class Challenge:
    """A single sampling challenge: which block to read and the key to prove it with."""

    block_index: int
    nonce: str  # hex-encoded random bytes

    def to_dict(self) -> Dict[str, object]:
        # Field names match the serialized proof format
        return {"blockIndex": self.block_index, "randomValue": self.nonce}


def generate_challenges(
    count: int = DEFAULT_CHALLENGE_COUNT,
    index_domain: int = DEFAULT_INDEX_DOMAIN,
    nonce_size: int = DEFAULT_NONCE_SIZE,
) -> List[Challenge]:
    """
    Generate a batch of random challenges.

    Args:
        count: Number of challenges to produce.
        index_domain: Exclusive upper bound for block indices.
        nonce_size: Nonce length in bytes.

    Returns:
        List of exactly `count` challenges.

    Raises:
        ValueError: If count is negative or the domain/nonce size is not positive.
    """
    if count < 0:
        raise ValueError(f"Challenge count must be non-negative, got {count}")
    if index_domain <= 0:
        raise ValueError("Index domain must be a positive integer")
    if nonce_size <= 0:
        raise ValueError("Nonce size must be a positive integer")

    challenges = [
        Challenge(
            block_index=secrets.randbelow(index_domain),
            nonce=secrets.token_hex(nonce_size),
        )
        for _ in range(count)
    ]
    logger.debug(
        "Generated %d challenges (domain=%d, nonce=%d bytes)",
        count,
        index_domain,
        nonce_size,
    )
    return challenges

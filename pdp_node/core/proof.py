"""
proof.py — Proof of Data Possession (PDP)
===========================================
Composes the immutable proof artifact for one round.

For each challenge, the prover answers with:
    HMAC-SHA256(key = challenge nonce, message = sampled block)

The proof bundles the challenges, their responses, the Merkle root
of the whole file and a millisecond timestamp. Its identifier is the
SHA-256 of a canonical JSON serialization of those fields.
"""

import json
import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from pdp_node.core.challenge import Challenge
from pdp_node.core.hashing import hmac_sha256, sha256_hash
from pdp_node.core.merkle import calculate_merkle_root
from pdp_node.core.sampler import DEFAULT_BLOCK_SIZE, block_count, sample_block

logger = logging.getLogger(__name__)


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def generate_response(
    data: bytes, challenge: Challenge, block_size: int = DEFAULT_BLOCK_SIZE
) -> str:
    """
    Answer a single challenge over the given file content.

    The nonce's hex text is used as the HMAC key.

    Args:
        data: Full file content.
        challenge: The challenge to answer.
        block_size: Block size used for sampling.

    Returns:
        Hex-encoded HMAC-SHA256 response.
    """
    block = sample_block(data, challenge.block_index, block_size)
    response = hmac_sha256(challenge.nonce.encode("ascii"), block)
    logger.debug(
        "Response for block %d (nonce %s...): %s...",
        challenge.block_index,
        challenge.nonce[:16],
        response[:16],
    )
    return response


def compute_responses(
    data: bytes,
    challenges: Sequence[Challenge],
    block_size: int = DEFAULT_BLOCK_SIZE,
) -> List[str]:
    """Answer every challenge in order."""
    return [generate_response(data, c, block_size) for c in challenges]


@dataclass(frozen=True)
class Proof:
    """Immutable result of one proof round."""

    challenges: Tuple[Challenge, ...]
    responses: Tuple[str, ...]
    merkle_root: str
    timestamp: int = field(default_factory=now_ms)

    def __post_init__(self) -> None:
        if len(self.challenges) != len(self.responses):
            raise ValueError(
                f"Proof has {len(self.challenges)} challenges but "
                f"{len(self.responses)} responses"
            )

    def canonical_json(self) -> str:
        """Compact JSON with a fixed key order, used as the hashing preimage."""
        payload = {
            "challenges": [c.to_dict() for c in self.challenges],
            "responses": list(self.responses),
            "merkleRoot": self.merkle_root,
            "timestamp": self.timestamp,
        }
        return json.dumps(payload, separators=(",", ":"))

    @property
    def proof_hash(self) -> str:
        """SHA-256 of the canonical serialization."""
        return sha256_hash(self.canonical_json().encode("utf-8"))


def compose_proof(
    data: bytes,
    challenges: Sequence[Challenge],
    block_size: int = DEFAULT_BLOCK_SIZE,
    timestamp: Optional[int] = None,
) -> Proof:
    """
    Build a proof for the given content and challenge batch.

    Args:
        data: Full, fully materialized file content.
        challenges: Challenges for this round.
        block_size: Block size for sampling and the Merkle tree.
        timestamp: Epoch milliseconds; defaults to now.

    Returns:
        The composed Proof.
    """
    responses = compute_responses(data, challenges, block_size)
    merkle_root = calculate_merkle_root(data, block_size)
    proof = Proof(
        challenges=tuple(challenges),
        responses=tuple(responses),
        merkle_root=merkle_root,
        timestamp=now_ms() if timestamp is None else timestamp,
    )
    logger.info(
        "Composed proof: %d challenges over %d blocks, merkle_root=%s...",
        len(proof.challenges),
        block_count(len(data), block_size),
        merkle_root[:16],
    )
    return proof

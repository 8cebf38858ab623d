"""
merkle.py — Merkle Tree Implementation
========================================
Builds a binary Merkle Tree over the fixed-size blocks of a file.
The root is a pure function of the file content and is recorded
with every generated proof so later verifications can compare it.

Hash function: SHA-256
Leaf nodes: SHA-256 hashes of individual blocks
Internal nodes: SHA-256( left_hex || right_hex ), over the hex text
Odd levels: the last node is paired with itself, never dropped
Empty file: root = SHA-256 of empty input
"""

import logging
from typing import List

from pdp_node.core.hashing import sha256_hash
from pdp_node.core.sampler import DEFAULT_BLOCK_SIZE, split_blocks

logger = logging.getLogger(__name__)

EMPTY_ROOT = sha256_hash(b"")


def _hash_pair(left: str, right: str) -> str:
    """Hash two hex-encoded hashes together as text: SHA-256(left || right)."""
    return sha256_hash((left + right).encode("ascii"))


class MerkleTree:
    """
    A binary Merkle Tree built from a list of leaf hashes.

    Attributes:
        leaves: The original leaf hashes (SHA-256 hex strings).
        root: The Merkle root hash.
        levels: All levels of the tree, from leaves (index 0) to root.
    """

    def __init__(self, hashes: List[str]):
        """
        Build a Merkle Tree from a list of SHA-256 hex-encoded hashes.

        If a level has an odd number of nodes, its last node is
        duplicated and hashed with itself. An empty hash list gives
        a tree whose root is the hash of empty input.

        Args:
            hashes: List of SHA-256 hex strings (one per block).
        """
        self.leaves: List[str] = list(hashes)
        self.levels: List[List[str]] = []
        self._build_tree()

        logger.debug(
            "Built Merkle tree with %d leaves, root=%s",
            len(self.leaves),
            self.root[:16] + "...",
        )

    @classmethod
    def from_data(
        cls, data: bytes, block_size: int = DEFAULT_BLOCK_SIZE
    ) -> "MerkleTree":
        """Build a tree whose leaves are the hashes of each block of `data`."""
        return cls([sha256_hash(block) for block in split_blocks(data, block_size)])

    def _build_tree(self) -> None:
        """Construct all tree levels from leaves up to root."""
        current_level = list(self.leaves)
        self.levels.append(current_level)

        while len(current_level) > 1:
            next_level = []
            for i in range(0, len(current_level), 2):
                left = current_level[i]
                right = current_level[i + 1] if i + 1 < len(current_level) else left
                next_level.append(_hash_pair(left, right))
            current_level = next_level
            self.levels.append(current_level)

    @property
    def root(self) -> str:
        """Return the Merkle root hash."""
        top = self.levels[-1]
        if not top:
            return EMPTY_ROOT
        return top[0]


def calculate_merkle_root(data: bytes, block_size: int = DEFAULT_BLOCK_SIZE) -> str:
    """
    Compute the Merkle root of a file.

    Args:
        data: Full file content.
        block_size: Block size used to partition the file.

    Returns:
        Hex-encoded SHA-256 Merkle root.
    """
    return MerkleTree.from_data(data, block_size).root

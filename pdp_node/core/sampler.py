"""
sampler.py — Block Sampling Module
====================================
Slices fixed-size blocks out of a fully materialized file payload.

Any non-negative block index resolves to a real block: indices past
the end of the file are remapped onto the final block.

Default block size: 1 KB (1024 bytes)
"""

import logging
from typing import List

logger = logging.getLogger(__name__)

# Default block size: 1 KB
DEFAULT_BLOCK_SIZE = 1024


def _check_block_size(block_size: int) -> None:
    if block_size <= 0:
        raise ValueError("Block size must be a positive integer")


def block_count(length: int, block_size: int = DEFAULT_BLOCK_SIZE) -> int:
    """Number of blocks a payload of `length` bytes splits into."""
    _check_block_size(block_size)
    return -(-length // block_size)


def sample_block(
    data: bytes, block_index: int, block_size: int = DEFAULT_BLOCK_SIZE
) -> bytes:
    """
    Extract the block at `block_index` from the payload.

    If the block starts at or past the end of the data, the final
    block is returned instead (the last `block_size` bytes, or the
    whole payload when it is shorter than one block).

    Args:
        data: Full file content.
        block_index: Zero-based block index.
        block_size: Size of each block in bytes.

    Returns:
        The sampled bytes. Empty when the payload is empty.

    Raises:
        ValueError: If block_index is negative or block_size is not positive.
    """
    if block_index < 0:
        raise ValueError(f"Block index must be non-negative, got {block_index}")
    _check_block_size(block_size)

    length = len(data)
    start = block_index * block_size
    if start >= length:
        # Out of range, fall back to the final block
        start = max(0, length - block_size)
    end = min(start + block_size, length)
    return bytes(data[start:end])


def split_blocks(data: bytes, block_size: int = DEFAULT_BLOCK_SIZE) -> List[bytes]:
    """
    Split a payload into ordered fixed-size blocks.

    Args:
        data: Raw file content as bytes.
        block_size: Size of each block in bytes.

    Returns:
        List of blocks; the last may be shorter than block_size.
        An empty payload yields an empty list.

    Raises:
        ValueError: If block_size is not positive.
    """
    _check_block_size(block_size)

    blocks = [
        bytes(data[offset : offset + block_size])
        for offset in range(0, len(data), block_size)
    ]
    logger.debug(
        "Split %d bytes into %d blocks (block_size=%d)",
        len(data),
        len(blocks),
        block_size,
    )
    return blocks

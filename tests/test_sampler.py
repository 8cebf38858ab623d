"""
test_sampler.py — Unit Tests for Block Sampling
=================================================
"""

import pytest

from pdp_node.core.sampler import block_count, sample_block, split_blocks


class TestSampleBlock:
    """Tests for the sample_block function."""

    def test_first_block(self):
        data = bytes(range(256)) * 10
        assert sample_block(data, 0, block_size=100) == data[:100]

    def test_middle_block(self):
        data = bytes(range(256)) * 10
        assert sample_block(data, 3, block_size=100) == data[300:400]

    def test_short_final_block(self):
        """The last in-range block may be shorter than block_size."""
        data = b"C" * 250
        assert sample_block(data, 2, block_size=100) == b"C" * 50

    def test_out_of_range_remaps_to_final_block(self):
        """Indices past the end read the last block_size bytes."""
        data = bytes(range(250))
        assert sample_block(data, 999, block_size=100) == data[150:250]

    def test_out_of_range_small_file(self):
        """On a file smaller than a block, every index yields the whole file."""
        data = b"tiny payload"
        for index in (0, 1, 57, 999):
            assert sample_block(data, index, block_size=1024) == data

    def test_empty_payload(self):
        """An empty payload always samples an empty block."""
        assert sample_block(b"", 0) == b""
        assert sample_block(b"", 500) == b""

    def test_negative_index_raises(self):
        with pytest.raises(ValueError, match="non-negative"):
            sample_block(b"data", -1)

    def test_invalid_block_size(self):
        with pytest.raises(ValueError, match="positive integer"):
            sample_block(b"data", 0, block_size=0)


class TestSplitBlocks:
    """Tests for the split_blocks function."""

    def test_split_with_remainder(self):
        data = b"B" * 150
        blocks = split_blocks(data, block_size=100)
        assert [len(b) for b in blocks] == [100, 50]

    def test_split_exact_multiple(self):
        blocks = split_blocks(b"A" * 100, block_size=50)
        assert len(blocks) == 2

    def test_split_empty(self):
        """Empty data splits into zero blocks."""
        assert split_blocks(b"") == []

    def test_block_count(self):
        assert block_count(0) == 0
        assert block_count(1) == 1
        assert block_count(1024) == 1
        assert block_count(2500, block_size=1024) == 3

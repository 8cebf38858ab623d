"""
test_challenge.py — Unit Tests for Challenge Generation
==========================================================
"""

import pytest

from pdp_node.core.challenge import Challenge, generate_challenges


class TestGenerateChallenges:
    """Tests for the generate_challenges function."""

    def test_default_count(self):
        assert len(generate_challenges()) == 10

    @pytest.mark.parametrize("count", [0, 1, 7, 100])
    def test_exact_count(self, count):
        assert len(generate_challenges(count)) == count

    def test_indices_within_domain(self):
        challenges = generate_challenges(200, index_domain=50)
        assert all(0 <= c.block_index < 50 for c in challenges)

    def test_nonce_length(self):
        """32-byte nonces are 64 hex characters."""
        challenges = generate_challenges(5, nonce_size=32)
        assert all(len(c.nonce) == 64 for c in challenges)
        assert all(int(c.nonce, 16) >= 0 for c in challenges)

    def test_nonces_are_unique(self):
        challenges = generate_challenges(500)
        assert len({c.nonce for c in challenges}) == 500

    def test_negative_count_raises(self):
        with pytest.raises(ValueError, match="non-negative"):
            generate_challenges(-1)

    def test_serialized_field_names(self):
        challenge = Challenge(block_index=3, nonce="ab")
        assert challenge.to_dict() == {"blockIndex": 3, "randomValue": "ab"}

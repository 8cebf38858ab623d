"""
test_inflight.py — Unit Tests for the In-Flight Guard
========================================================
"""

import pytest

from pdp_node.services.inflight import DocumentBusyError, InFlightGuard


class TestInFlightGuard:
    """Tests for InFlightGuard."""

    @pytest.mark.asyncio
    async def test_second_claim_rejected(self):
        guard = InFlightGuard()
        async with guard.claim("doc"):
            assert guard.is_busy("doc")
            with pytest.raises(DocumentBusyError):
                async with guard.claim("doc"):
                    pass
        assert not guard.is_busy("doc")

    @pytest.mark.asyncio
    async def test_released_on_error(self):
        guard = InFlightGuard()
        with pytest.raises(RuntimeError):
            async with guard.claim("doc"):
                raise RuntimeError("boom")
        assert not guard.is_busy("doc")

    @pytest.mark.asyncio
    async def test_different_documents_independent(self):
        guard = InFlightGuard()
        async with guard.claim("a"):
            async with guard.claim("b"):
                assert guard.is_busy("a") and guard.is_busy("b")

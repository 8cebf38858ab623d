"""
test_retrieval.py — Unit Tests for the HTTP Retrieval Client
===============================================================
"""

import hashlib

import httpx
import pytest

from pdp_node.services.retrieval import HttpRetrievalClient, InMemoryRetriever

CONTENT = b"content held by the storage node"
CONTENT_HASH = hashlib.sha256(CONTENT).hexdigest()


def _node(request: httpx.Request) -> httpx.Response:
    """Fake storage node serving a few chunks."""
    path = request.url.path
    if path == f"/chunks/{CONTENT_HASH}":
        return httpx.Response(200, content=CONTENT)
    if path == f"/chunks/{'0' * 64}":
        return httpx.Response(200, content=CONTENT)
    if path == "/chunks/bafy-opaque":
        return httpx.Response(200, content=CONTENT, headers={"X-Integrity-Verified": "true"})
    if path == "/chunks/bafy-unchecked":
        return httpx.Response(200, content=CONTENT)
    if path == "/chunks/broken":
        return httpx.Response(500)
    if request.url.raw_path == b"/chunks/bafy%2Fnested%3Fv%3D1":
        return httpx.Response(200, content=CONTENT, headers={"X-Integrity-Verified": "true"})
    return httpx.Response(404)


@pytest.fixture
def client():
    return HttpRetrievalClient(
        "http://storage-node:9000/", transport=httpx.MockTransport(_node)
    )


class TestHttpRetrievalClient:
    """Tests for HttpRetrievalClient."""

    @pytest.mark.asyncio
    async def test_hash_addressed_content_verified(self, client):
        result = await client.retrieve(CONTENT_HASH)
        assert result.data == CONTENT
        assert result.verified is True

    @pytest.mark.asyncio
    async def test_hash_mismatch_not_verified(self, client):
        result = await client.retrieve("0" * 64)
        assert result.verified is False

    @pytest.mark.asyncio
    async def test_opaque_id_uses_header(self, client):
        assert (await client.retrieve("bafy-opaque")).verified is True
        assert (await client.retrieve("bafy-unchecked")).verified is False

    @pytest.mark.asyncio
    async def test_missing_content_raises(self, client):
        with pytest.raises(KeyError):
            await client.retrieve("nope")

    @pytest.mark.asyncio
    async def test_content_id_is_path_quoted(self, client):
        """Slashes and query characters in ids stay inside one path segment."""
        result = await client.retrieve("bafy/nested?v=1")
        assert result.data == CONTENT
        assert result.verified is True

    @pytest.mark.asyncio
    async def test_server_error_raises(self, client):
        with pytest.raises(httpx.HTTPStatusError):
            await client.retrieve("broken")


class TestInMemoryRetriever:
    """Tests for InMemoryRetriever."""

    @pytest.mark.asyncio
    async def test_put_and_retrieve(self):
        retriever = InMemoryRetriever()
        retriever.put("a", b"bytes", verified=False)
        result = await retriever.retrieve("a")
        assert result.data == b"bytes"
        assert result.verified is False

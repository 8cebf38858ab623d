"""
retrieval.py — File Retrieval Clients
=======================================
Fetches previously stored file content by content identifier.

Every retriever returns the raw bytes together with a storage-layer
integrity flag. The PDP engine never trusts bytes whose flag is false.

    HttpRetrievalClient — pulls content from a storage node's REST API
    InMemoryRetriever   — dict-backed retriever for local runs and tests
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Protocol, runtime_checkable
from urllib.parse import quote

import httpx

from pdp_node.core.hashing import is_sha256_hex, sha256_hash

logger = logging.getLogger(__name__)

INTEGRITY_HEADER = "X-Integrity-Verified"


@dataclass(frozen=True)
class RetrievalResult:
    """Raw file content plus the storage layer's integrity verdict."""

    data: bytes
    verified: bool


@runtime_checkable
class ContentRetriever(Protocol):
    """Anything that can fetch stored content by its identifier."""

    async def retrieve(self, content_id: str) -> RetrievalResult:
        """
        Retrieve stored content.

        Raises:
            KeyError: If the content is unknown.
        """
        ...


class HttpRetrievalClient:
    """
    Client for a storage node's content endpoint.

    Content is fetched from ``GET {base_url}/chunks/{content_id}``.
    For SHA-256 content identifiers the integrity flag is computed
    locally by re-hashing the bytes; otherwise the node's
    ``X-Integrity-Verified`` header is trusted.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the retrieval client.

        Args:
            base_url: Base URL of the storage node.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport (used to mock the node).
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        logger.info("HttpRetrievalClient initialized with node at %s", self.base_url)

    async def retrieve(self, content_id: str) -> RetrievalResult:
        async with httpx.AsyncClient(
            timeout=self.timeout, transport=self._transport
        ) as client:
            url = f"{self.base_url}/chunks/{quote(content_id, safe='')}"
            response = await client.get(url)
            if response.status_code == 404:
                raise KeyError(f"Content {content_id} not found")
            response.raise_for_status()
            data = response.content

        if is_sha256_hex(content_id):
            verified = sha256_hash(data) == content_id
        else:
            verified = response.headers.get(INTEGRITY_HEADER, "").lower() == "true"

        if not verified:
            logger.warning(
                "Integrity check failed for content %s (%d bytes)",
                content_id[:16],
                len(data),
            )
        logger.debug("Retrieved content %s (%d bytes)", content_id[:16], len(data))
        return RetrievalResult(data=data, verified=verified)


class InMemoryRetriever:
    """Serves content from a dictionary; content ids map to bytes."""

    def __init__(self, contents: Optional[Dict[str, bytes]] = None):
        self.contents: Dict[str, bytes] = dict(contents or {})
        self.corrupted = set()

    def put(self, content_id: str, data: bytes, verified: bool = True) -> None:
        self.contents[content_id] = data
        if verified:
            self.corrupted.discard(content_id)
        else:
            self.corrupted.add(content_id)

    async def retrieve(self, content_id: str) -> RetrievalResult:
        if content_id not in self.contents:
            raise KeyError(f"Content {content_id} not found")
        return RetrievalResult(
            data=self.contents[content_id],
            verified=content_id not in self.corrupted,
        )

"""
inflight.py — Per-Document In-Flight Guard
=============================================
Advisory lock for the HTTP layer: at most one proof operation
per document at a time. The PDP engine itself stays lock-free.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Set

logger = logging.getLogger(__name__)


class DocumentBusyError(Exception):
    """Another proof operation for this document is still running."""

    def __init__(self, document_id: str):
        super().__init__(f"A proof operation for document {document_id} is in flight")
        self.document_id = document_id


class InFlightGuard:
    """Tracks documents with an operation in progress."""

    def __init__(self):
        self._in_flight: Set[str] = set()

    def is_busy(self, document_id: str) -> bool:
        return document_id in self._in_flight

    @asynccontextmanager
    async def claim(self, document_id: str) -> AsyncIterator[None]:
        """
        Hold the document for the duration of the block.

        Raises:
            DocumentBusyError: If the document is already claimed.
        """
        # No await between check and add, so this is atomic on one event loop
        if document_id in self._in_flight:
            logger.warning("Rejected concurrent operation on document %s", document_id)
            raise DocumentBusyError(document_id)
        self._in_flight.add(document_id)
        try:
            yield
        finally:
            self._in_flight.discard(document_id)

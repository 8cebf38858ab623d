"""
errors.py — PDP Error Types
=============================
Closed set of errors raised by the PDP engine.

    StorageIntegrityError  — the file could not be retrieved intact
                             (integrity flag false, timeout, retrieval error)
    ProofGenerationError   — unexpected failure while sampling, hashing
                             or assembling a proof
    PersistenceError       — the record store failed; the computed
                             outcome (if any) is attached as `outcome`

Every error carries the document id, a message and the underlying cause.
"""

from typing import Any, Optional


class PDPError(Exception):
    """Base class for all PDP engine errors."""

    def __init__(
        self,
        document_id: str,
        message: str,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.document_id = document_id
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        text = f"[{type(self).__name__}] document={self.document_id}: {self.message}"
        if self.cause is not None:
            text += f" (cause: {type(self.cause).__name__}: {self.cause})"
        return text


class StorageIntegrityError(PDPError):
    """The retrieval layer could not deliver the file intact."""


class ProofGenerationError(PDPError):
    """Sampling, hashing or proof assembly failed unexpectedly."""


class PersistenceError(PDPError):
    """The verification record store is unavailable."""

    def __init__(
        self,
        document_id: str,
        message: str,
        cause: Optional[BaseException] = None,
        outcome: Any = None,
    ):
        super().__init__(document_id, message, cause)
        self.outcome = outcome

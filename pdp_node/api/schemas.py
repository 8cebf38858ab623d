"""
schemas.py — Pydantic Request/Response Models
=================================================
Data models for the PDP node REST API.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from pdp_node.config import settings


class GenerateProofRequest(BaseModel):
    """Request to generate a PDP proof for a stored document."""

    content_id: str = Field(..., min_length=1)
    challenge_count: Optional[int] = Field(
        default=None, ge=1, le=settings.MAX_CHALLENGES
    )


class ProofResponse(BaseModel):
    """Summary of a generated proof."""

    document_id: str
    valid: bool
    proof_hash: str
    merkle_root: str
    challenge_count: int
    timestamp: int               # Epoch milliseconds


class VerifyProofRequest(BaseModel):
    """Request to verify a previously generated proof."""

    content_id: str = Field(..., min_length=1)
    proof_hash: str = Field(..., min_length=1)


class VerifyProofResponse(BaseModel):
    """Outcome of a proof verification."""

    document_id: str
    valid: bool
    proof_hash: str
    merkle_root: str
    timestamp: int
    message: str


class VerificationRecordModel(BaseModel):
    """A single entry in a document's verification history."""

    id: str
    document_id: str
    proof_type: str              # "PDP" or "PDP_VERIFY"
    proof_hash: str
    verification_result: bool
    metadata: Dict[str, Any]
    created_at: datetime


class HistoryResponse(BaseModel):
    """Verification history for a document, newest first."""

    document_id: str
    verification_status: str
    last_verified_at: Optional[datetime]
    total_records: int
    records: List[VerificationRecordModel]


class HealthResponse(BaseModel):
    """Service health check response."""

    status: str
    service: str
    block_size: int
    default_challenge_count: int

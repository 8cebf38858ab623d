"""
routes.py — PDP Node REST API Endpoints
==========================================
Thin HTTP layer over the PDP service. Adds the per-document
in-flight guard and maps engine errors to status codes.

Endpoints:
    POST /documents/{document_id}/proofs         — Generate a PDP proof
    POST /documents/{document_id}/proofs/verify  — Verify a PDP proof
    GET  /documents/{document_id}/verifications  — Verification history
    GET  /health                                 — Health check

Error mapping:
    StorageIntegrityError → 422
    ProofGenerationError  → 500
    PersistenceError      → 503
    DocumentBusyError     → 409
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from pdp_node.api.schemas import (
    GenerateProofRequest,
    HealthResponse,
    HistoryResponse,
    ProofResponse,
    VerificationRecordModel,
    VerifyProofRequest,
    VerifyProofResponse,
)
from pdp_node.core.errors import (
    PDPError,
    PersistenceError,
    ProofGenerationError,
    StorageIntegrityError,
)
from pdp_node.services.inflight import DocumentBusyError, InFlightGuard
from pdp_node.services.pdp_service import PDPService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_pdp_service(request: Request) -> PDPService:
    return request.app.state.pdp_service


def get_inflight_guard(request: Request) -> InFlightGuard:
    return request.app.state.inflight


def _to_http_error(error: Exception) -> HTTPException:
    if isinstance(error, DocumentBusyError):
        return HTTPException(status_code=409, detail=str(error))
    if isinstance(error, StorageIntegrityError):
        return HTTPException(status_code=422, detail=str(error))
    if isinstance(error, PersistenceError):
        return HTTPException(status_code=503, detail=str(error))
    if isinstance(error, ProofGenerationError):
        return HTTPException(status_code=500, detail=str(error))
    return HTTPException(status_code=500, detail="Internal error")


# ── Proof Endpoints ────────────────────────────────────

@router.post("/documents/{document_id}/proofs", response_model=ProofResponse)
async def generate_proof(
    document_id: str,
    body: GenerateProofRequest,
    service: PDPService = Depends(get_pdp_service),
    guard: InFlightGuard = Depends(get_inflight_guard),
):
    """
    Generate a Proof of Data Possession for a stored document.

    Retrieves the file, samples random blocks, answers each challenge
    with an HMAC, computes the Merkle root and records the proof hash.
    """
    try:
        async with guard.claim(document_id):
            summary = await service.generate_proof(
                document_id, body.content_id, body.challenge_count
            )
    except (DocumentBusyError, PDPError) as e:
        raise _to_http_error(e)

    return ProofResponse(
        document_id=document_id,
        valid=summary.valid,
        proof_hash=summary.proof_hash,
        merkle_root=summary.merkle_root,
        challenge_count=summary.challenge_count,
        timestamp=summary.timestamp,
    )


@router.post(
    "/documents/{document_id}/proofs/verify", response_model=VerifyProofResponse
)
async def verify_proof(
    document_id: str,
    body: VerifyProofRequest,
    service: PDPService = Depends(get_pdp_service),
    guard: InFlightGuard = Depends(get_inflight_guard),
):
    """
    Verify a previously generated proof against a fresh retrieval.

    A 200 response with `valid: false` means verification ran and the
    file no longer matches; an error status means it could not run.
    """
    try:
        async with guard.claim(document_id):
            outcome = await service.verify_proof(
                document_id, body.content_id, body.proof_hash
            )
    except (DocumentBusyError, PDPError) as e:
        raise _to_http_error(e)

    return VerifyProofResponse(
        document_id=document_id,
        valid=outcome.valid,
        proof_hash=outcome.proof_hash,
        merkle_root=outcome.merkle_root,
        timestamp=outcome.timestamp,
        message=(
            "Proof verified successfully"
            if outcome.valid
            else "Proof verification failed"
        ),
    )


@router.get(
    "/documents/{document_id}/verifications", response_model=HistoryResponse
)
async def verification_history(
    document_id: str, service: PDPService = Depends(get_pdp_service)
):
    """List a document's verification records, newest first."""
    try:
        records = await service.get_verification_history(document_id)
        status = await service.get_document_status(document_id)
        last_verified_at = await service.get_document_last_verified_at(document_id)
    except PDPError as e:
        raise _to_http_error(e)

    return HistoryResponse(
        document_id=document_id,
        verification_status=status.value,
        last_verified_at=last_verified_at,
        total_records=len(records),
        records=[VerificationRecordModel(**r.to_dict()) for r in records],
    )


# ── Health Check ───────────────────────────────────────

@router.get("/health", response_model=HealthResponse)
async def health_check(service: PDPService = Depends(get_pdp_service)):
    """Health check endpoint for the PDP node."""
    return HealthResponse(
        status="healthy",
        service="pdp-node",
        block_size=service.block_size,
        default_challenge_count=service.challenge_count,
    )

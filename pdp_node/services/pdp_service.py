"""
pdp_service.py — Proof of Data Possession Service
====================================================
Orchestrates proof generation and verification for stored documents.

Generate:
    retrieve → challenge → sample + HMAC → Merkle root → proof hash → record
Verify:
    retrieve → Merkle root → compare with the root recorded at
    generation time → record → update document status

Verification re-derives integrity from a fresh retrieval. The
per-round challenges are never persisted, so a verify call cannot
replay the original sampled-block responses; it only checks that
the file still hashes to the Merkle root anchored with the proof.

Every call writes exactly one verification record, success or not.
The service holds no per-document state and takes no locks.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from pdp_node.core.challenge import (
    DEFAULT_CHALLENGE_COUNT,
    DEFAULT_INDEX_DOMAIN,
    DEFAULT_NONCE_SIZE,
    generate_challenges,
)
from pdp_node.core.errors import (
    PDPError,
    PersistenceError,
    ProofGenerationError,
    StorageIntegrityError,
)
from pdp_node.core.hashing import is_sha256_hex
from pdp_node.core.merkle import calculate_merkle_root
from pdp_node.core.proof import compose_proof, now_ms
from pdp_node.core.sampler import DEFAULT_BLOCK_SIZE
from pdp_node.services.record_store import (
    DocumentVerificationStatus,
    ProofType,
    RecordStore,
    VerificationRecord,
)
from pdp_node.services.retrieval import ContentRetriever

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProofSummary:
    """Result of a successful generate call."""

    valid: bool
    proof_hash: str
    merkle_root: str
    timestamp: int
    challenge_count: int


@dataclass(frozen=True)
class VerificationOutcome:
    """Result of a verify call that ran to completion."""

    valid: bool
    proof_hash: str
    merkle_root: str
    timestamp: int


class PDPService:
    """
    Generates and verifies PDP proofs against injected collaborators.

    Args:
        retriever: Fetches file bytes and an integrity flag by content id.
        store: Append-only verification record store.
        block_size: Block size for sampling and Merkle leaves.
        challenge_count: Default number of challenges per proof.
        index_domain: Exclusive upper bound for challenge block indices.
        nonce_size: Challenge nonce size in bytes.
        retrieval_timeout: Seconds to wait for a retrieval before failing closed.
    """

    def __init__(
        self,
        retriever: ContentRetriever,
        store: RecordStore,
        block_size: int = DEFAULT_BLOCK_SIZE,
        challenge_count: int = DEFAULT_CHALLENGE_COUNT,
        index_domain: int = DEFAULT_INDEX_DOMAIN,
        nonce_size: int = DEFAULT_NONCE_SIZE,
        retrieval_timeout: Optional[float] = 30.0,
    ):
        self.retriever = retriever
        self.store = store
        self.block_size = block_size
        self.challenge_count = challenge_count
        self.index_domain = index_domain
        self.nonce_size = nonce_size
        self.retrieval_timeout = retrieval_timeout
        logger.info(
            "PDPService initialized (block_size=%d, challenges=%d, timeout=%s)",
            block_size,
            challenge_count,
            retrieval_timeout,
        )

    # ── Collaborator helpers ───────────────────────────────

    async def _retrieve(self, document_id: str, content_id: str) -> bytes:
        """Fetch the full payload or raise StorageIntegrityError."""
        try:
            result = await asyncio.wait_for(
                self.retriever.retrieve(content_id), timeout=self.retrieval_timeout
            )
            data = bytes(result.data)
            verified = result.verified is True
        except asyncio.TimeoutError as e:
            raise StorageIntegrityError(
                document_id,
                f"Retrieval of {content_id} timed out after {self.retrieval_timeout}s",
                e,
            ) from e
        except Exception as e:
            raise StorageIntegrityError(
                document_id, f"Retrieval of {content_id} failed", e
            ) from e

        if not verified:
            raise StorageIntegrityError(
                document_id, "File integrity verification failed during retrieval"
            )
        return data

    async def _append(self, record: VerificationRecord, outcome=None) -> None:
        try:
            await self.store.append_verification_record(record)
        except Exception as e:
            raise PersistenceError(
                record.document_id,
                f"Failed to persist {record.proof_type.value} record",
                e,
                outcome=outcome,
            ) from e

    async def _record_failure(
        self,
        document_id: str,
        proof_type: ProofType,
        proof_hash: str,
        error: PDPError,
    ) -> None:
        """
        Persist a failed record for an aborted call.

        The caller re-raises `error` afterwards; a store failure here is
        logged so it does not mask the original error.
        """
        record = VerificationRecord(
            document_id=document_id,
            proof_type=proof_type,
            proof_hash=proof_hash,
            verification_result=False,
            metadata={"timestamp": now_ms(), "error": type(error).__name__},
        )
        try:
            await self.store.append_verification_record(record)
        except Exception:
            logger.exception(
                "Could not record failed %s for document %s",
                proof_type.value,
                document_id,
            )

    async def _anchored_record(
        self, document_id: str, proof_hash: str
    ) -> Optional[VerificationRecord]:
        """Find the successful generation record for `proof_hash`, if any."""
        if not proof_hash:
            return None
        try:
            records = await self.store.list_verification_records(document_id)
        except Exception as e:
            raise PersistenceError(
                document_id, "Failed to read verification records", e
            ) from e
        for record in records:
            if (
                record.proof_type == ProofType.PDP
                and record.verification_result
                and record.proof_hash == proof_hash
            ):
                return record
        return None

    # ── Public operations ──────────────────────────────────

    async def generate_proof(
        self,
        document_id: str,
        content_id: str,
        challenge_count: Optional[int] = None,
    ) -> ProofSummary:
        """
        Generate a PDP proof for a stored document.

        Raises:
            StorageIntegrityError: Retrieval failed, timed out or was not verified.
            ProofGenerationError: Sampling, hashing or assembly failed.
            PersistenceError: The proof was built but its record was not stored;
                the summary is attached as `outcome`.
        """
        count = self.challenge_count if challenge_count is None else challenge_count
        logger.info("Generating PDP proof for document %s (%d challenges)", document_id, count)

        try:
            data = await self._retrieve(document_id, content_id)
            try:
                if count < 1:
                    raise ValueError(f"Challenge count must be at least 1, got {count}")
                challenges = generate_challenges(count, self.index_domain, self.nonce_size)
                proof = compose_proof(data, challenges, self.block_size)
                proof_hash = proof.proof_hash
            except Exception as e:
                raise ProofGenerationError(
                    document_id, f"PDP proof generation failed: {e}", e
                ) from e
        except (StorageIntegrityError, ProofGenerationError) as error:
            logger.error("Failed to generate PDP proof: %s", error)
            await self._record_failure(document_id, ProofType.PDP, "", error)
            raise

        summary = ProofSummary(
            valid=True,
            proof_hash=proof_hash,
            merkle_root=proof.merkle_root,
            timestamp=proof.timestamp,
            challenge_count=len(proof.challenges),
        )
        await self._append(
            VerificationRecord(
                document_id=document_id,
                proof_type=ProofType.PDP,
                proof_hash=proof_hash,
                verification_result=True,
                metadata={
                    "timestamp": proof.timestamp,
                    "merkleRoot": proof.merkle_root,
                    "challengeCount": len(proof.challenges),
                    "blockSize": self.block_size,
                },
            ),
            outcome=summary,
        )
        logger.info("PDP proof generated: %s...", proof_hash[:16])
        return summary

    async def verify_proof(
        self, document_id: str, content_id: str, proof_hash: str
    ) -> VerificationOutcome:
        """
        Verify a previously generated proof against a fresh retrieval.

        `valid` is true only when the file was retrieved intact and its
        recomputed Merkle root matches the root recorded with `proof_hash`.

        Raises:
            StorageIntegrityError: Retrieval failed, timed out or was not verified.
                The document is marked failed before raising.
            ProofGenerationError: Recomputing the Merkle root failed.
            PersistenceError: Records could not be read or written; a computed
                outcome is attached as `outcome`.
        """
        logger.info("Verifying PDP proof %s... for document %s", proof_hash[:16], document_id)

        try:
            data = await self._retrieve(document_id, content_id)
        except StorageIntegrityError as error:
            logger.error("Failed to verify PDP proof: %s", error)
            await self._record_failure(document_id, ProofType.PDP_VERIFY, proof_hash, error)
            try:
                await self.store.update_document_verification_status(
                    document_id, DocumentVerificationStatus.FAILED
                )
            except Exception:
                logger.exception("Could not mark document %s as failed", document_id)
            raise

        anchored = await self._anchored_record(document_id, proof_hash)
        block_size = self.block_size
        if anchored is not None:
            block_size = int(anchored.metadata.get("blockSize", self.block_size))

        try:
            merkle_root = calculate_merkle_root(data, block_size)
        except Exception as e:
            error = ProofGenerationError(
                document_id, f"Merkle root recomputation failed: {e}", e
            )
            logger.error("Failed to verify PDP proof: %s", error)
            await self._record_failure(document_id, ProofType.PDP_VERIFY, proof_hash, error)
            raise error from e

        anchored_root = anchored.metadata.get("merkleRoot") if anchored else None
        valid = is_sha256_hex(merkle_root) and anchored_root == merkle_root
        if anchored is None:
            logger.warning(
                "No generation record for proof %s... on document %s",
                proof_hash[:16],
                document_id,
            )

        outcome = VerificationOutcome(
            valid=valid,
            proof_hash=proof_hash,
            merkle_root=merkle_root,
            timestamp=now_ms(),
        )
        await self._append(
            VerificationRecord(
                document_id=document_id,
                proof_type=ProofType.PDP_VERIFY,
                proof_hash=proof_hash,
                verification_result=valid,
                metadata={
                    "timestamp": outcome.timestamp,
                    "merkleRoot": merkle_root,
                    "anchored": anchored is not None,
                },
            ),
            outcome=outcome,
        )

        status = (
            DocumentVerificationStatus.VERIFIED if valid else DocumentVerificationStatus.FAILED
        )
        try:
            await self.store.update_document_verification_status(document_id, status)
        except Exception as e:
            raise PersistenceError(
                document_id, "Failed to update document verification status", e, outcome
            ) from e

        logger.info("PDP proof verification completed: %s", "PASS" if valid else "FAIL")
        return outcome

    async def get_verification_history(
        self, document_id: str
    ) -> List[VerificationRecord]:
        """Return all verification records for a document, newest first."""
        try:
            return await self.store.list_verification_records(document_id)
        except Exception as e:
            raise PersistenceError(
                document_id, "Failed to read verification history", e
            ) from e

    async def get_document_status(self, document_id: str) -> DocumentVerificationStatus:
        try:
            return await self.store.get_document_verification_status(document_id)
        except Exception as e:
            raise PersistenceError(
                document_id, "Failed to read document verification status", e
            ) from e

    async def get_document_last_verified_at(
        self, document_id: str
    ) -> Optional[datetime]:
        try:
            return await self.store.get_document_last_verified_at(document_id)
        except Exception as e:
            raise PersistenceError(
                document_id, "Failed to read document verification time", e
            ) from e

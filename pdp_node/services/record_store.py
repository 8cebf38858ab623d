"""
record_store.py — Verification Record Storage
================================================
Append-only log of proof outcomes per document, plus each
document's aggregate verification status.

Records are never mutated once written. The aggregate status is
the only mutable value and is overwritten by the latest verify
outcome (last write wins).

    InMemoryRecordStore — process-local, for tests and single runs
    FileRecordStore     — JSON-lines on the local filesystem, one file
                          per document, statuses in statuses.json
"""

import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from pdp_node.core.hashing import sha256_hash

logger = logging.getLogger(__name__)


class ProofType(str, Enum):
    PDP = "PDP"
    PDP_VERIFY = "PDP_VERIFY"


class DocumentVerificationStatus(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    FAILED = "failed"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class VerificationRecord:
    """One proof outcome for a document."""

    document_id: str
    proof_type: ProofType
    proof_hash: str
    verification_result: bool
    metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=_utcnow)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "document_id": self.document_id,
            "proof_type": self.proof_type.value,
            "proof_hash": self.proof_hash,
            "verification_result": self.verification_result,
            "metadata": self.metadata,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "VerificationRecord":
        return cls(
            id=raw["id"],
            document_id=raw["document_id"],
            proof_type=ProofType(raw["proof_type"]),
            proof_hash=raw["proof_hash"],
            verification_result=bool(raw["verification_result"]),
            metadata=dict(raw.get("metadata") or {}),
            created_at=datetime.fromisoformat(raw["created_at"]),
        )


@runtime_checkable
class RecordStore(Protocol):
    """Persistence collaborator for verification records and statuses."""

    async def append_verification_record(self, record: VerificationRecord) -> None:
        ...

    async def update_document_verification_status(
        self, document_id: str, status: DocumentVerificationStatus
    ) -> None:
        ...

    async def get_document_verification_status(
        self, document_id: str
    ) -> DocumentVerificationStatus:
        ...

    async def get_document_last_verified_at(
        self, document_id: str
    ) -> Optional[datetime]:
        """When the status was last written, or None if never."""
        ...

    async def list_verification_records(
        self, document_id: str
    ) -> List[VerificationRecord]:
        """Return the document's records, newest first."""
        ...


class InMemoryRecordStore:
    """Keeps records and statuses in process memory."""

    def __init__(self):
        self._records: Dict[str, List[VerificationRecord]] = {}
        self._statuses: Dict[str, DocumentVerificationStatus] = {}
        self._verified_at: Dict[str, datetime] = {}

    async def append_verification_record(self, record: VerificationRecord) -> None:
        self._records.setdefault(record.document_id, []).append(record)
        logger.debug(
            "Appended %s record for document %s (result=%s)",
            record.proof_type.value,
            record.document_id,
            record.verification_result,
        )

    async def update_document_verification_status(
        self, document_id: str, status: DocumentVerificationStatus
    ) -> None:
        self._statuses[document_id] = status
        self._verified_at[document_id] = _utcnow()

    async def get_document_verification_status(
        self, document_id: str
    ) -> DocumentVerificationStatus:
        return self._statuses.get(document_id, DocumentVerificationStatus.PENDING)

    async def get_document_last_verified_at(
        self, document_id: str
    ) -> Optional[datetime]:
        return self._verified_at.get(document_id)

    async def list_verification_records(
        self, document_id: str
    ) -> List[VerificationRecord]:
        # Insertion order is chronological; reverse for newest first
        return list(reversed(self._records.get(document_id, [])))


class FileRecordStore:
    """
    Stores verification records on the local filesystem.

    Each document's records live in a JSON-lines file named by the
    SHA-256 of the document id, so arbitrary ids are safe filenames.
    """

    STATUS_FILE = "statuses.json"

    def __init__(self, data_dir: str):
        """
        Initialize the record store.

        Args:
            data_dir: Directory path where records will be stored.
        """
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        logger.info("FileRecordStore initialized at %s", self.data_dir)

    def _records_path(self, document_id: str) -> Path:
        return self.data_dir / f"{sha256_hash(document_id.encode('utf-8'))}.jsonl"

    def _read_statuses(self) -> Dict[str, Dict[str, str]]:
        path = self.data_dir / self.STATUS_FILE
        if not path.exists():
            return {}
        return json.loads(path.read_text(encoding="utf-8"))

    async def append_verification_record(self, record: VerificationRecord) -> None:
        path = self._records_path(record.document_id)
        with path.open("a", encoding="utf-8") as fh:
            fh.write(json.dumps(record.to_dict()) + "\n")
        logger.debug(
            "Appended %s record for document %s to %s",
            record.proof_type.value,
            record.document_id,
            path.name[:16],
        )

    async def update_document_verification_status(
        self, document_id: str, status: DocumentVerificationStatus
    ) -> None:
        statuses = self._read_statuses()
        statuses[document_id] = {
            "status": status.value,
            "last_verified_at": _utcnow().isoformat(),
        }
        path = self.data_dir / self.STATUS_FILE
        tmp = path.with_suffix(".tmp")
        tmp.write_text(json.dumps(statuses), encoding="utf-8")
        tmp.replace(path)
        logger.info("Document %s verification status -> %s", document_id, status.value)

    async def get_document_verification_status(
        self, document_id: str
    ) -> DocumentVerificationStatus:
        entry = self._read_statuses().get(document_id)
        if entry is None:
            return DocumentVerificationStatus.PENDING
        return DocumentVerificationStatus(entry["status"])

    async def get_document_last_verified_at(
        self, document_id: str
    ) -> Optional[datetime]:
        entry = self._read_statuses().get(document_id)
        if entry is None:
            return None
        return datetime.fromisoformat(entry["last_verified_at"])

    async def list_verification_records(
        self, document_id: str
    ) -> List[VerificationRecord]:
        path = self._records_path(document_id)
        if not path.exists():
            return []
        records = [
            VerificationRecord.from_dict(json.loads(line))
            for line in path.read_text(encoding="utf-8").splitlines()
            if line.strip()
        ]
        records.reverse()
        return records

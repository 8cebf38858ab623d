"""
test_record_store.py — Unit Tests for Verification Record Stores
===================================================================
"""

from datetime import datetime, timezone

import pytest

from pdp_node.services.record_store import (
    DocumentVerificationStatus,
    FileRecordStore,
    InMemoryRecordStore,
    ProofType,
    VerificationRecord,
)


@pytest.fixture(params=["memory", "file"])
def store(request, tmp_path):
    if request.param == "memory":
        return InMemoryRecordStore()
    return FileRecordStore(str(tmp_path / "records"))


def _record(document_id: str, proof_hash: str, result: bool = True) -> VerificationRecord:
    return VerificationRecord(
        document_id=document_id,
        proof_type=ProofType.PDP,
        proof_hash=proof_hash,
        verification_result=result,
        metadata={"merkleRoot": "00" * 32},
    )


class TestRecordStore:
    """Behaviour shared by every record store."""

    @pytest.mark.asyncio
    async def test_records_newest_first(self, store):
        for i in range(3):
            await store.append_verification_record(_record("doc", f"hash-{i}"))

        records = await store.list_verification_records("doc")
        assert [r.proof_hash for r in records] == ["hash-2", "hash-1", "hash-0"]

    @pytest.mark.asyncio
    async def test_unknown_document(self, store):
        assert await store.list_verification_records("missing") == []
        status = await store.get_document_verification_status("missing")
        assert status == DocumentVerificationStatus.PENDING

    @pytest.mark.asyncio
    async def test_status_last_write_wins(self, store):
        await store.update_document_verification_status(
            "doc", DocumentVerificationStatus.VERIFIED
        )
        await store.update_document_verification_status(
            "doc", DocumentVerificationStatus.FAILED
        )
        status = await store.get_document_verification_status("doc")
        assert status == DocumentVerificationStatus.FAILED

    @pytest.mark.asyncio
    async def test_status_update_stamps_last_verified(self, store):
        assert await store.get_document_last_verified_at("doc") is None
        before = datetime.now(timezone.utc)
        await store.update_document_verification_status(
            "doc", DocumentVerificationStatus.VERIFIED
        )
        stamped = await store.get_document_last_verified_at("doc")
        assert stamped is not None
        assert stamped >= before

    @pytest.mark.asyncio
    async def test_record_fields_preserved(self, store):
        original = _record("doc/with/slashes", "h", result=False)
        await store.append_verification_record(original)
        (loaded,) = await store.list_verification_records("doc/with/slashes")
        assert loaded == original


class TestFileRecordStore:
    """Filesystem-specific behaviour."""

    @pytest.mark.asyncio
    async def test_survives_reopen(self, tmp_path):
        data_dir = str(tmp_path / "records")
        await FileRecordStore(data_dir).append_verification_record(_record("doc", "h1"))
        await FileRecordStore(data_dir).update_document_verification_status(
            "doc", DocumentVerificationStatus.VERIFIED
        )

        reopened = FileRecordStore(data_dir)
        assert [r.proof_hash for r in await reopened.list_verification_records("doc")] == ["h1"]
        status = await reopened.get_document_verification_status("doc")
        assert status == DocumentVerificationStatus.VERIFIED

"""Proof certificates: mint, verify offline, verify against the live store."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from .errors import NotFound, ValidationError
from .hasher import digest
from .ledger import LedgerWriter
from .models.certificate import Certificate, CertificateCheck
from .privacy import ensure_visible
from .store import RecordStore, now_ms

logger = logging.getLogger(__name__)


def compute_integrity_hash(certificate: Certificate) -> str:
    return digest(certificate.signed_fields())


def generate_certificate(
    store: RecordStore,
    idea_id: str,
    caller: str,
    now: Optional[int] = None,
    ledger: Optional[LedgerWriter] = None,
) -> Certificate:
    """Mint a certificate for a record the caller is entitled to see.

    Args:
        store: Record store to read from
        idea_id: Idea to certify
        caller: Requesting identity
        now: Issuance time in epoch ms (defaults to the current time)
        ledger: Optional ledger to record the issuance in

    Raises:
        NotFound: unknown id
        Unauthorized: Private or unrevealed idea and caller is not the owner
    """
    record = ensure_visible(store.get(idea_id), caller)
    unsigned = Certificate(
        id=record.id,
        owner=record.owner,
        title=record.title,
        created_at=record.created_at,
        proof_hash=record.proof_hash,
        status=record.status,
        is_revealed=record.is_revealed,
        revealed_at=record.revealed_at,
        generated_at=now if now is not None else now_ms(),
    )
    certificate = unsigned.model_copy(update={"integrity_hash": compute_integrity_hash(unsigned)})

    logger.info(f"Issued certificate for {record.id} to {caller}")
    if ledger is not None:
        ledger.append_event(
            event_type="CERTIFICATE_ISSUED",
            idea_id=record.id,
            payload={
                "caller": caller,
                "generated_at": certificate.generated_at,
                "integrity_hash": certificate.integrity_hash,
            },
        )
    return certificate


def verify_certificate(certificate: Certificate) -> bool:
    """Offline check that the document has not been altered since issuance."""
    return bool(certificate.integrity_hash) and compute_integrity_hash(certificate) == certificate.integrity_hash


def verify_against_store(certificate: Certificate, store: RecordStore) -> CertificateCheck:
    """Check the certificate and confirm it still describes the live record.

    Returns:
        INVALID if the document is altered, the record is missing, or the
        immutable fields disagree; STALE if the record's privacy state changed
        after issuance (e.g. a later reveal); VALID otherwise.
    """
    if not verify_certificate(certificate):
        return CertificateCheck.INVALID
    try:
        record = store.get(certificate.id)
    except NotFound:
        return CertificateCheck.INVALID

    if (
        record.proof_hash != certificate.proof_hash
        or record.owner != certificate.owner
        or record.created_at != certificate.created_at
    ):
        return CertificateCheck.INVALID

    if (
        record.status != certificate.status
        or record.is_revealed != certificate.is_revealed
        or record.revealed_at != certificate.revealed_at
    ):
        return CertificateCheck.STALE
    return CertificateCheck.VALID


def write_certificate(certificate: Certificate, path: Path) -> Path:
    """Write the certificate as pretty-printed JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(certificate.model_dump_json(indent=2), encoding="utf-8")
    return path


def read_certificate(path: Path) -> Certificate:
    """Load a certificate file.

    Raises:
        ValidationError: the file is not a well-formed certificate
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return Certificate.model_validate(data)
    except (json.JSONDecodeError, PydanticValidationError) as e:
        raise ValidationError(f"Malformed certificate file {path}: {e}") from e

"""Tests for proof certificates."""

import json

import pytest

from ideavault.certificates import (
    generate_certificate,
    read_certificate,
    verify_against_store,
    verify_certificate,
    write_certificate,
)
from ideavault.errors import NotFound, Unauthorized, ValidationError
from ideavault.models.certificate import CertificateCheck
from ideavault.models.idea import IdeaStatus
from ideavault.storage import MemoryBackend
from ideavault.store import RecordStore


def test_generate_and_verify(store):
    record = store.submit("u1", "Solar kettle", "Boils with sunlight", "bafyattach")
    cert = generate_certificate(store, record.id, "u2", now=1_800_000_000_000)

    assert cert.id == record.id
    assert cert.owner == "u1"
    assert cert.proof_hash == record.proof_hash
    assert cert.created_at == record.created_at
    assert cert.status == IdeaStatus.PUBLIC
    assert cert.generated_at == 1_800_000_000_000
    assert cert.platform == "CreativeVault"
    assert cert.integrity_hash.startswith("sha256:")
    assert cert.integrity_hash != cert.proof_hash
    assert verify_certificate(cert)
    assert verify_against_store(cert, store) == CertificateCheck.VALID


@pytest.mark.parametrize(
    "update",
    [
        {"owner": "mallory"},
        {"title": "Different"},
        {"created_at": 1},
        {"proof_hash": "sha256:" + "0" * 64},
        {"status": IdeaStatus.PRIVATE},
        {"is_revealed": True},
        {"revealed_at": 5},
        {"generated_at": 7},
        {"platform": "Elsewhere"},
        {"integrity_hash": "sha256:" + "f" * 64},
        {"integrity_hash": ""},
    ],
)
def test_any_mutation_invalidates(store, update):
    record = store.submit("u1", "T", "D")
    cert = generate_certificate(store, record.id, "u1")
    tampered = cert.model_copy(update=update)

    assert not verify_certificate(tampered)
    assert verify_against_store(tampered, store) == CertificateCheck.INVALID


def test_visibility_rules(store):
    private = store.submit("u1", "T", "D", initial_status="Private")
    hidden = store.submit("u1", "T", "D", initial_status="RevealLater")

    with pytest.raises(NotFound):
        generate_certificate(store, "idea_missing", "u1")
    with pytest.raises(Unauthorized):
        generate_certificate(store, private.id, "u2")
    with pytest.raises(Unauthorized):
        generate_certificate(store, hidden.id, "u2")

    assert verify_certificate(generate_certificate(store, private.id, "u1"))
    assert verify_certificate(generate_certificate(store, hidden.id, "u1"))


def test_certificate_goes_stale_after_reveal(store):
    hidden = store.submit("u1", "T", "D", initial_status="RevealLater")
    before = generate_certificate(store, hidden.id, "u1")

    store.reveal(hidden.id, "u1")

    # Still internally consistent, but no longer describes the live record.
    assert verify_certificate(before)
    assert verify_against_store(before, store) == CertificateCheck.STALE

    after = generate_certificate(store, hidden.id, "u2")
    assert after.is_revealed is True
    assert verify_against_store(after, store) == CertificateCheck.VALID


def test_certificate_for_unknown_record_is_invalid(store, clock):
    record = store.submit("u1", "T", "D")
    cert = generate_certificate(store, record.id, "u1")

    other = RecordStore(MemoryBackend(), clock=clock)
    assert verify_certificate(cert)
    assert verify_against_store(cert, other) == CertificateCheck.INVALID


def test_write_and_read_certificate(store, tmp_path):
    record = store.submit("u1", "T", "D")
    cert = generate_certificate(store, record.id, "u1")

    path = write_certificate(cert, tmp_path / "out" / "proof.json")
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["id"] == record.id
    assert data["status"] == "Public"

    loaded = read_certificate(path)
    assert loaded == cert
    assert verify_certificate(loaded)


def test_read_certificate_edited_on_disk(store, tmp_path):
    record = store.submit("u1", "T", "D")
    path = write_certificate(generate_certificate(store, record.id, "u1"), tmp_path / "proof.json")

    data = json.loads(path.read_text(encoding="utf-8"))
    data["owner"] = "mallory"
    path.write_text(json.dumps(data), encoding="utf-8")

    assert not verify_certificate(read_certificate(path))


def test_read_certificate_malformed(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValidationError):
        read_certificate(path)

    path.write_text(json.dumps({"id": "idea_x"}), encoding="utf-8")
    with pytest.raises(ValidationError):
        read_certificate(path)

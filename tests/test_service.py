"""Tests for the caller-facing IdeaVault facade."""

import pytest

from ideavault.config import VaultConfig
from ideavault.errors import NotFound, Unauthorized
from ideavault.models.certificate import CertificateCheck
from ideavault.models.feed import FeedFilters
from ideavault.paths import VaultPaths
from ideavault.service import IdeaVault
from ideavault.storage import MemoryBackend, SqliteBackend


def test_private_idea_visible_only_to_owner(vault):
    record = vault.submit("u1", "A", "B", status="Private")

    with pytest.raises(Unauthorized) as exc:
        vault.get(record.id, "u2")
    assert exc.value.code == "unauthorized"
    assert vault.get(record.id, "u1") == record


def test_get_unknown_and_anonymous(vault):
    public = vault.submit("u1", "A", "B")
    hidden = vault.submit("u1", "A", "B", status="RevealLater")

    with pytest.raises(NotFound):
        vault.get("idea_nope", "u1")
    assert vault.get(public.id, None) == public
    with pytest.raises(Unauthorized):
        vault.get(hidden.id, None)


def test_reveal_later_flow(vault):
    record = vault.submit("u1", "A", "B", status="RevealLater", tags=["music"])
    assert vault.get_public_feed().items == []

    vault.reveal(record.id, "u1")

    page = vault.get_public_feed(filters=FeedFilters(tags=["music"]))
    assert [r.id for r in page.items] == [record.id]
    assert vault.get(record.id, "u2").is_revealed


def test_stats_and_listing(vault):
    vault.submit("u1", "A", "B")
    vault.submit("u1", "C", "D", status="Private")
    vault.submit("u2", "E", "F", status="RevealLater")

    stats = vault.get_stats()
    assert (stats.total_ideas, stats.public_ideas, stats.total_users) == (3, 1, 2)
    assert [r.title for r in vault.list_by_owner("u1")] == ["C", "A"]


def test_owner_summary_tracks_reveal(vault):
    vault.submit("u1", "A", "B")
    vault.submit("u1", "C", "D", status="Private")
    hidden = vault.submit("u1", "E", "F", status="RevealLater")
    vault.submit("u2", "G", "H", status="RevealLater")

    summary = vault.owner_summary("u1")
    assert (summary.public, summary.hidden, summary.private) == (1, 1, 1)
    assert summary.total == 3

    vault.reveal(hidden.id, "u1")

    summary = vault.owner_summary("u1")
    assert (summary.public, summary.hidden, summary.private) == (2, 0, 1)
    assert vault.owner_summary("nobody").total == 0


def test_certificates_through_facade(vault):
    record = vault.submit("u1", "A", "B")
    cert = vault.generate_certificate(record.id, "u3")

    assert IdeaVault.verify_certificate(cert)
    assert vault.verify_against_store(cert) == CertificateCheck.VALID


def test_from_config_selects_backend(temp_vault):
    sqlite_vault = IdeaVault.from_config(VaultConfig(vault_path=temp_vault))
    assert isinstance(sqlite_vault.store.backend, SqliteBackend)
    assert VaultPaths(temp_vault).db_file.exists()

    memory_vault = IdeaVault.from_config(VaultConfig(vault_path=temp_vault, backend="memory"))
    assert isinstance(memory_vault.store.backend, MemoryBackend)

"""Caller-facing facade over the record store, certificates and feed."""

from __future__ import annotations

from typing import Iterable, Optional

from .certificates import generate_certificate, verify_against_store, verify_certificate
from .config import FeedConfig, LimitsConfig, VaultConfig
from .feed import get_owner_stats, get_public_feed, get_stats
from .ledger import LedgerWriter
from .models.certificate import Certificate, CertificateCheck
from .models.feed import FeedFilters, FeedPage, OwnerStats, VaultStats
from .models.idea import IdeaRecord, IdeaStatus
from .paths import VaultPaths
from .privacy import ensure_visible
from .storage import MemoryBackend, RecordBackend, SqliteBackend
from .store import RecordStore


class IdeaVault:
    """The operations a caller layer (UI glue, CLI, RPC handler) consumes.

    Unlike ``RecordStore.get``, every read here applies visibility rules for
    the calling identity.
    """

    def __init__(
        self,
        backend: RecordBackend,
        limits: Optional[LimitsConfig] = None,
        feed_config: Optional[FeedConfig] = None,
        ledger: Optional[LedgerWriter] = None,
    ):
        self.ledger = ledger
        self.store = RecordStore(backend, limits=limits, ledger=ledger)
        self.feed_config = feed_config or FeedConfig()

    @classmethod
    def from_config(cls, config: VaultConfig) -> "IdeaVault":
        paths = VaultPaths.from_config(config)
        backend: RecordBackend
        if config.backend == "memory":
            backend = MemoryBackend()
        else:
            backend = SqliteBackend(paths.db_file)
        return cls(
            backend,
            limits=config.limits,
            feed_config=config.feed,
            ledger=LedgerWriter(paths.ledger_file),
        )

    def submit(
        self,
        owner: str,
        title: str,
        description: str,
        attachment_ref: Optional[str] = None,
        status: IdeaStatus | str = IdeaStatus.PUBLIC,
        tags: Iterable[str] = (),
    ) -> IdeaRecord:
        return self.store.submit(owner, title, description, attachment_ref, status, tags)

    def get(self, idea_id: str, caller: Optional[str]) -> IdeaRecord:
        """Fetch a record if ``caller`` may see it (NotFound / Unauthorized otherwise)."""
        return ensure_visible(self.store.get(idea_id), caller)

    def list_by_owner(self, owner: str) -> list[IdeaRecord]:
        return self.store.list_by_owner(owner)

    def owner_summary(self, owner: str) -> OwnerStats:
        """Public / hidden / private counts for one owner."""
        return get_owner_stats(self.store, owner)

    def reveal(self, idea_id: str, caller: str) -> IdeaRecord:
        return self.store.reveal(idea_id, caller)

    def generate_certificate(self, idea_id: str, caller: str, now: Optional[int] = None) -> Certificate:
        return generate_certificate(self.store, idea_id, caller, now=now, ledger=self.ledger)

    @staticmethod
    def verify_certificate(certificate: Certificate) -> bool:
        return verify_certificate(certificate)

    def verify_against_store(self, certificate: Certificate) -> CertificateCheck:
        return verify_against_store(certificate, self.store)

    def get_public_feed(
        self,
        filters: Optional[FeedFilters] = None,
        cursor: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> FeedPage:
        return get_public_feed(self.store, filters=filters, cursor=cursor, limit=limit, config=self.feed_config)

    def get_stats(self) -> VaultStats:
        return get_stats(self.store)

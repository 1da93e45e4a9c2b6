"""Pydantic models for Idea Vault."""

from .certificate import Certificate, CertificateCheck
from .feed import FeedFilters, FeedPage, OwnerStats, VaultStats
from .idea import IdeaRecord, IdeaStatus
from .ledger import LedgerEvent

__all__ = [
    "IdeaRecord",
    "IdeaStatus",
    "LedgerEvent",
    # Certificates
    "Certificate",
    "CertificateCheck",
    # Feed
    "FeedFilters",
    "FeedPage",
    "OwnerStats",
    "VaultStats",
]

"""Pydantic models for proof certificates."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from .idea import IdeaStatus

PLATFORM_NAME = "CreativeVault"
CERTIFICATE_VERSION = "1.0.0"
CERTIFICATE_TYPE = "Idea Ownership Certificate"


class Certificate(BaseModel):
    """Self-contained proof document for an idea at a point in time.

    ``integrity_hash`` covers every other field, so any post-issuance edit
    is detectable without the store.
    """

    id: str
    owner: str
    title: str
    created_at: int
    proof_hash: str
    status: IdeaStatus
    is_revealed: bool
    revealed_at: Optional[int] = None
    generated_at: int = Field(description="Issuance time (epoch milliseconds); not stored on the record")
    platform: str = Field(default=PLATFORM_NAME)
    version: str = Field(default=CERTIFICATE_VERSION)
    certificate_type: str = Field(default=CERTIFICATE_TYPE)
    integrity_hash: str = Field(default="", description="Hash over all other certificate fields")

    model_config = {"frozen": True}

    def signed_fields(self) -> dict:
        return self.model_dump(mode="json", exclude={"integrity_hash"})


class CertificateCheck(str, Enum):
    """Outcome of verifying a certificate against the live store."""

    VALID = "valid"
    STALE = "stale"
    INVALID = "invalid"

"""Pydantic models for idea records."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class IdeaStatus(str, Enum):
    """Privacy state of an idea. Closed set of exactly three cases."""

    PUBLIC = "Public"
    PRIVATE = "Private"
    REVEAL_LATER = "RevealLater"


class IdeaRecord(BaseModel):
    """A content-timestamped idea record.

    Immutable once built; the only state change (reveal) produces a new
    record that replaces the stored one atomically.
    """

    id: str = Field(description="Unique, URL-safe idea identifier")
    owner: str = Field(description="Identity of the submitting caller")
    title: str = Field(description="Idea title")
    description: str = Field(description="Idea description")
    attachment_ref: Optional[str] = Field(default=None, description="Content hash of an external blob")
    tags: tuple[str, ...] = Field(default=(), description="Normalized feed tags (not hashed)")
    created_at: int = Field(description="Creation time (epoch milliseconds)")
    status: IdeaStatus = Field(description="Privacy state")
    is_revealed: bool = Field(default=False, description="True once a RevealLater idea is revealed")
    revealed_at: Optional[int] = Field(default=None, description="Reveal time (epoch milliseconds)")
    proof_hash: str = Field(description="Fingerprint over content and metadata")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_reveal_state(self) -> "IdeaRecord":
        if self.is_revealed:
            if self.revealed_at is None:
                raise ValueError("revealed record must have revealed_at")
            if self.status != IdeaStatus.PUBLIC:
                raise ValueError("revealed record must be Public")
        elif self.revealed_at is not None:
            raise ValueError("revealed_at set on an unrevealed record")
        return self

    @property
    def is_public(self) -> bool:
        return self.status == IdeaStatus.PUBLIC

    @property
    def sort_key(self) -> tuple[int, str]:
        """Feed ordering key: created_at descending, id ascending."""
        return (-self.created_at, self.id)

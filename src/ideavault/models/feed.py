"""Pydantic models for feed queries and stats."""

from typing import Optional

from pydantic import BaseModel, Field

from .idea import IdeaRecord


class FeedFilters(BaseModel):
    """Optional narrowing of the public feed."""

    text: Optional[str] = Field(default=None, description="Case-insensitive match on title/description")
    tags: list[str] = Field(default_factory=list)
    tag_or: bool = Field(default=False, description="Match any tag instead of all tags")


class FeedPage(BaseModel):
    items: list[IdeaRecord]
    next_cursor: Optional[str] = None


class VaultStats(BaseModel):
    total_ideas: int = 0
    public_ideas: int = 0
    total_users: int = 0


class OwnerStats(BaseModel):
    """Per-owner breakdown shown alongside an owner's idea list."""

    public: int = Field(default=0, description="Public ideas, including revealed ones")
    hidden: int = Field(default=0, description="RevealLater ideas not yet revealed")
    private: int = 0

    @property
    def total(self) -> int:
        return self.public + self.hidden + self.private

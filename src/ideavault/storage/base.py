"""Storage abstraction behind the record store."""

from __future__ import annotations

from typing import Iterator, Optional, Protocol

from ideavault.models.idea import IdeaRecord

# (created_at, id) of the last record a reader has seen.
FeedKey = tuple[int, str]


class DuplicateRecord(Exception):
    """Raised when inserting an id that already exists."""


class RecordBackend(Protocol):
    """get/put/scan primitives the record store is built on.

    Implementations must make ``insert`` and ``compare_and_set`` atomic with
    respect to readers, and ``scan``/``iter_public`` must read a snapshot
    without blocking writers for the length of the scan.
    """

    def get(self, idea_id: str) -> Optional[IdeaRecord]: ...

    def insert(self, record: IdeaRecord) -> None: ...

    def compare_and_set(self, expected: IdeaRecord, new: IdeaRecord) -> bool: ...

    def list_by_owner(self, owner: str) -> list[IdeaRecord]: ...

    def iter_public(self, after: Optional[FeedKey] = None) -> Iterator[IdeaRecord]: ...

    def scan(self) -> list[IdeaRecord]: ...

    def latest_created_at(self) -> Optional[int]: ...


def is_after(record: IdeaRecord, after: Optional[FeedKey]) -> bool:
    """True if ``record`` sorts strictly after the cursor position."""
    if after is None:
        return True
    created_at, idea_id = after
    return record.sort_key > (-created_at, idea_id)

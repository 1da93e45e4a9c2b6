"""Public feed pagination and aggregate stats."""

from __future__ import annotations

import base64
import binascii
import json
from contextlib import closing
from typing import Optional

from .config import FeedConfig
from .errors import ValidationError
from .hasher import canonical_json
from .models.feed import FeedFilters, FeedPage, OwnerStats, VaultStats
from .models.idea import IdeaRecord, IdeaStatus
from .storage.base import FeedKey
from .store import RecordStore

# sqlite INTEGER is a signed 64-bit value
_MAX_CREATED_AT = 2**63 - 1


def encode_cursor(record: IdeaRecord) -> str:
    """Opaque token for the position just after ``record``."""
    raw = canonical_json({"c": record.created_at, "i": record.id}).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def decode_cursor(cursor: str) -> FeedKey:
    """Decode a cursor produced by ``encode_cursor``.

    Raises:
        ValidationError: the token is malformed
    """
    try:
        padded = cursor + "=" * (-len(cursor) % 4)
        data = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8"))
    except (ValueError, binascii.Error, UnicodeError) as e:
        raise ValidationError(f"Invalid cursor: {cursor!r}") from e

    if not isinstance(data, dict):
        raise ValidationError(f"Invalid cursor: {cursor!r}")
    created_at = data.get("c")
    idea_id = data.get("i")
    if isinstance(created_at, bool) or not isinstance(created_at, int) or not isinstance(idea_id, str):
        raise ValidationError(f"Invalid cursor: {cursor!r}")
    if not 0 <= created_at <= _MAX_CREATED_AT:
        raise ValidationError(f"Invalid cursor: {cursor!r}")
    return (created_at, idea_id)


def resolve_limit(limit: Optional[int], config: FeedConfig) -> int:
    """Apply the default and clamp to the configured maximum."""
    if limit is None:
        return min(config.default_limit, config.max_limit)
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise ValidationError(f"limit must be a positive integer, got {limit!r}")
    return min(limit, config.max_limit)


def _normalize_filter_tags(tags: list[str]) -> list[str]:
    return [t.strip().lstrip("#").strip().lower() for t in tags if t.strip().lstrip("#").strip()]


def matches_filters(record: IdeaRecord, filters: FeedFilters) -> bool:
    if filters.text and filters.text.strip():
        needle = filters.text.strip().casefold()
        if needle not in record.title.casefold() and needle not in record.description.casefold():
            return False

    tags = _normalize_filter_tags(filters.tags)
    if tags:
        if filters.tag_or:
            if not any(t in record.tags for t in tags):
                return False
        elif not all(t in record.tags for t in tags):
            return False
    return True


def get_public_feed(
    store: RecordStore,
    filters: Optional[FeedFilters] = None,
    cursor: Optional[str] = None,
    limit: Optional[int] = None,
    config: Optional[FeedConfig] = None,
) -> FeedPage:
    """One page of Public ideas, newest first (ties by id ascending).

    Raises:
        ValidationError: malformed cursor or non-positive limit
    """
    config = config or FeedConfig()
    filters = filters or FeedFilters()
    page_size = resolve_limit(limit, config)
    after = decode_cursor(cursor) if cursor else None

    items: list[IdeaRecord] = []
    has_more = False
    with closing(store.iter_public(after)) as records:
        for record in records:
            # never emit a non-Public record
            if not record.is_public or not matches_filters(record, filters):
                continue
            if len(items) == page_size:
                has_more = True
                break
            items.append(record)

    next_cursor = encode_cursor(items[-1]) if has_more else None
    return FeedPage(items=items, next_cursor=next_cursor)


def get_stats(store: RecordStore) -> VaultStats:
    """Aggregate counters recomputed from a store snapshot."""
    records = store.scan()
    return VaultStats(
        total_ideas=len(records),
        public_ideas=sum(1 for r in records if r.is_public),
        total_users=len({r.owner for r in records}),
    )


def get_owner_stats(store: RecordStore, owner: str) -> OwnerStats:
    records = store.list_by_owner(owner)
    return OwnerStats(
        public=sum(1 for r in records if r.status == IdeaStatus.PUBLIC),
        hidden=sum(1 for r in records if r.status == IdeaStatus.REVEAL_LATER),
        private=sum(1 for r in records if r.status == IdeaStatus.PRIVATE),
    )

"""In-memory record backend."""

from __future__ import annotations

import threading
from typing import Iterator, Optional

from ideavault.models.idea import IdeaRecord

from .base import DuplicateRecord, FeedKey, is_after


class MemoryBackend:
    """Dict-backed backend with per-record locks.

    Stored records are frozen models, so replacing a dict slot is the only
    write a reader can ever observe.
    """

    def __init__(self) -> None:
        self._records: dict[str, IdeaRecord] = {}
        self._by_owner: dict[str, list[str]] = {}
        self._index_lock = threading.Lock()
        self._record_locks: dict[str, threading.Lock] = {}

    def _lock_for(self, idea_id: str) -> threading.Lock:
        with self._index_lock:
            lock = self._record_locks.get(idea_id)
            if lock is None:
                lock = self._record_locks[idea_id] = threading.Lock()
            return lock

    def get(self, idea_id: str) -> Optional[IdeaRecord]:
        return self._records.get(idea_id)

    def insert(self, record: IdeaRecord) -> None:
        with self._index_lock:
            if record.id in self._records:
                raise DuplicateRecord(record.id)
            self._records[record.id] = record
            self._by_owner.setdefault(record.owner, []).append(record.id)

    def compare_and_set(self, expected: IdeaRecord, new: IdeaRecord) -> bool:
        if expected.id != new.id:
            raise ValueError("compare_and_set cannot change a record id")
        with self._lock_for(expected.id):
            current = self._records.get(expected.id)
            if current is None or current != expected:
                return False
            self._records[new.id] = new
            return True

    def list_by_owner(self, owner: str) -> list[IdeaRecord]:
        with self._index_lock:
            ids = list(self._by_owner.get(owner, ()))
        records = [self._records[i] for i in ids]
        return sorted(records, key=lambda r: r.sort_key)

    def iter_public(self, after: Optional[FeedKey] = None) -> Iterator[IdeaRecord]:
        public = [r for r in self.scan() if r.is_public and is_after(r, after)]
        public.sort(key=lambda r: r.sort_key)
        yield from public

    def scan(self) -> list[IdeaRecord]:
        with self._index_lock:
            return list(self._records.values())

    def latest_created_at(self) -> Optional[int]:
        records = self.scan()
        return max((r.created_at for r in records), default=None)

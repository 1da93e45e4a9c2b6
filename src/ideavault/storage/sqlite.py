"""SQLite record backend."""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Iterator, Optional

from ideavault.models.idea import IdeaRecord, IdeaStatus

from .base import DuplicateRecord, FeedKey

_FEED_BATCH = 100


def _row_to_record(row: sqlite3.Row) -> IdeaRecord:
    return IdeaRecord(
        id=str(row["id"]),
        owner=str(row["owner"]),
        title=str(row["title"]),
        description=str(row["description"]),
        attachment_ref=row["attachment_ref"],
        tags=tuple(json.loads(str(row["tags_json"])) or ()),
        created_at=int(row["created_at"]),
        status=IdeaStatus(str(row["status"])),
        is_revealed=bool(row["is_revealed"]),
        revealed_at=int(row["revealed_at"]) if row["revealed_at"] is not None else None,
        proof_hash=str(row["proof_hash"]),
    )


class SqliteBackend:
    """Durable backend: one ``ideas`` table keyed by id.

    Each operation opens its own connection, so the backend may be shared
    across threads. WAL mode lets feed and stats readers run alongside writers.
    """

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path), timeout=30)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        conn = self._connect()
        try:
            conn.execute("PRAGMA journal_mode=WAL")
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS ideas(
                  id TEXT PRIMARY KEY,
                  owner TEXT NOT NULL,
                  title TEXT NOT NULL,
                  description TEXT NOT NULL,
                  attachment_ref TEXT,
                  tags_json TEXT NOT NULL,
                  created_at INTEGER NOT NULL,
                  status TEXT NOT NULL CHECK(status IN ('Public', 'Private', 'RevealLater')),
                  is_revealed INTEGER NOT NULL DEFAULT 0,
                  revealed_at INTEGER,
                  proof_hash TEXT NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_ideas_owner ON ideas(owner, created_at DESC, id ASC);
                CREATE INDEX IF NOT EXISTS idx_ideas_feed ON ideas(status, created_at DESC, id ASC);
                """
            )
            conn.commit()
        finally:
            conn.close()

    def get(self, idea_id: str) -> Optional[IdeaRecord]:
        conn = self._connect()
        try:
            row = conn.execute("SELECT * FROM ideas WHERE id = ?", (idea_id,)).fetchone()
            return _row_to_record(row) if row is not None else None
        finally:
            conn.close()

    def insert(self, record: IdeaRecord) -> None:
        conn = self._connect()
        try:
            with conn:
                conn.execute(
                    """
                    INSERT INTO ideas(
                      id, owner, title, description, attachment_ref, tags_json,
                      created_at, status, is_revealed, revealed_at, proof_hash
                    )
                    VALUES(?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        record.id,
                        record.owner,
                        record.title,
                        record.description,
                        record.attachment_ref,
                        json.dumps(list(record.tags), ensure_ascii=False),
                        record.created_at,
                        record.status.value,
                        int(record.is_revealed),
                        record.revealed_at,
                        record.proof_hash,
                    ),
                )
        except sqlite3.IntegrityError as e:
            raise DuplicateRecord(record.id) from e
        finally:
            conn.close()

    def compare_and_set(self, expected: IdeaRecord, new: IdeaRecord) -> bool:
        if expected.id != new.id:
            raise ValueError("compare_and_set cannot change a record id")
        # Only the reveal fields are mutable; matching them is enough.
        conn = self._connect()
        try:
            with conn:
                cur = conn.execute(
                    """
                    UPDATE ideas
                    SET status = ?, is_revealed = ?, revealed_at = ?
                    WHERE id = ? AND status = ? AND is_revealed = ?
                    """,
                    (
                        new.status.value,
                        int(new.is_revealed),
                        new.revealed_at,
                        expected.id,
                        expected.status.value,
                        int(expected.is_revealed),
                    ),
                )
            return cur.rowcount == 1
        finally:
            conn.close()

    def list_by_owner(self, owner: str) -> list[IdeaRecord]:
        conn = self._connect()
        try:
            rows = conn.execute(
                "SELECT * FROM ideas WHERE owner = ? ORDER BY created_at DESC, id ASC",
                (owner,),
            ).fetchall()
            return [_row_to_record(r) for r in rows]
        finally:
            conn.close()

    def iter_public(self, after: Optional[FeedKey] = None) -> Iterator[IdeaRecord]:
        # Keyset pagination in batches; each batch is its own short read.
        position = after
        while True:
            conn = self._connect()
            try:
                if position is None:
                    rows = conn.execute(
                        """
                        SELECT * FROM ideas
                        WHERE status = 'Public'
                        ORDER BY created_at DESC, id ASC
                        LIMIT ?
                        """,
                        (_FEED_BATCH,),
                    ).fetchall()
                else:
                    created_at, idea_id = position
                    rows = conn.execute(
                        """
                        SELECT * FROM ideas
                        WHERE status = 'Public'
                          AND (created_at < ? OR (created_at = ? AND id > ?))
                        ORDER BY created_at DESC, id ASC
                        LIMIT ?
                        """,
                        (created_at, created_at, idea_id, _FEED_BATCH),
                    ).fetchall()
            finally:
                conn.close()

            for row in rows:
                record = _row_to_record(row)
                position = (record.created_at, record.id)
                yield record

            if len(rows) < _FEED_BATCH:
                return

    def scan(self) -> list[IdeaRecord]:
        conn = self._connect()
        try:
            rows = conn.execute("SELECT * FROM ideas ORDER BY created_at DESC, id ASC").fetchall()
            return [_row_to_record(r) for r in rows]
        finally:
            conn.close()

    def latest_created_at(self) -> Optional[int]:
        conn = self._connect()
        try:
            row = conn.execute("SELECT MAX(created_at) AS m FROM ideas").fetchone()
            return int(row["m"]) if row is not None and row["m"] is not None else None
        finally:
            conn.close()

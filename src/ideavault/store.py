"""Record store: the only owner of idea records."""

from __future__ import annotations

import logging
import threading
import time
import uuid
from typing import Callable, Iterable, Iterator, Optional

from pydantic import ValidationError as PydanticValidationError

from .config import LimitsConfig
from .errors import NotFound, ValidationError
from .hasher import fingerprint
from .ledger import LedgerWriter
from .models.idea import IdeaRecord, IdeaStatus
from .privacy import apply_reveal, validate_reveal
from .storage.base import DuplicateRecord, FeedKey, RecordBackend

logger = logging.getLogger(__name__)

_ID_PREFIX = "idea_"
_MAX_ID_ATTEMPTS = 3


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


def new_idea_id() -> str:
    return _ID_PREFIX + uuid.uuid4().hex


def parse_status(value: IdeaStatus | str) -> IdeaStatus:
    """Accept an IdeaStatus or its string value ("Public", "Private", "RevealLater")."""
    if isinstance(value, IdeaStatus):
        return value
    try:
        return IdeaStatus(str(value))
    except ValueError:
        allowed = ", ".join(s.value for s in IdeaStatus)
        raise ValidationError(f"Invalid status {value!r}; expected one of: {allowed}") from None


def normalize_tags(tags: Iterable[str], limits: LimitsConfig) -> tuple[str, ...]:
    """Lower-case, strip '#', drop blanks and duplicates (first occurrence wins)."""
    seen: list[str] = []
    for raw in tags:
        tag = str(raw).strip().lstrip("#").strip().lower()
        if not tag or tag in seen:
            continue
        if len(tag) > limits.tag_max_length:
            raise ValidationError(f"Tag '{tag}' exceeds {limits.tag_max_length} characters")
        seen.append(tag)
    if len(seen) > limits.max_tags:
        raise ValidationError(f"At most {limits.max_tags} tags are allowed")
    return tuple(seen)


def _check_text(name: str, value: str, max_length: int) -> None:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{name} is required")
    if len(value) > max_length:
        raise ValidationError(f"{name} exceeds {max_length} characters")


class RecordStore:
    """Creates, fetches and reveals idea records over a RecordBackend.

    ``get`` is a raw accessor: visibility is enforced by the caller layer
    (see ``ideavault.service.IdeaVault.get``).
    """

    def __init__(
        self,
        backend: RecordBackend,
        limits: Optional[LimitsConfig] = None,
        clock: Callable[[], int] = now_ms,
        ledger: Optional[LedgerWriter] = None,
    ):
        self.backend = backend
        self.limits = limits or LimitsConfig()
        self._clock = clock
        self._ledger = ledger
        self._ts_lock = threading.Lock()
        self._last_ts: Optional[int] = None

    def _next_timestamp(self) -> int:
        # Strictly increasing within this store, even if the clock stalls or steps back.
        with self._ts_lock:
            if self._last_ts is None:
                self._last_ts = self.backend.latest_created_at() or 0
            ts = max(int(self._clock()), self._last_ts + 1)
            self._last_ts = ts
            return ts

    def submit(
        self,
        owner: str,
        title: str,
        description: str,
        attachment_ref: Optional[str] = None,
        initial_status: IdeaStatus | str = IdeaStatus.PUBLIC,
        tags: Iterable[str] = (),
    ) -> IdeaRecord:
        """Create and persist a new idea record.

        Raises:
            ValidationError: empty or over-long fields, unknown status, bad tags
        """
        if not isinstance(owner, str) or not owner.strip():
            raise ValidationError("owner is required")
        _check_text("title", title, self.limits.title_max_length)
        _check_text("description", description, self.limits.description_max_length)
        if attachment_ref is not None:
            attachment_ref = attachment_ref.strip() or None
        if attachment_ref is not None and len(attachment_ref) > self.limits.attachment_ref_max_length:
            raise ValidationError(
                f"attachment_ref exceeds {self.limits.attachment_ref_max_length} characters"
            )
        status = parse_status(initial_status)
        norm_tags = normalize_tags(tags, self.limits)

        for _ in range(_MAX_ID_ATTEMPTS):
            created_at = self._next_timestamp()
            try:
                record = IdeaRecord(
                    id=new_idea_id(),
                    owner=owner,
                    title=title,
                    description=description,
                    attachment_ref=attachment_ref,
                    tags=norm_tags,
                    created_at=created_at,
                    status=status,
                    is_revealed=False,
                    revealed_at=None,
                    proof_hash=fingerprint(title, description, attachment_ref, created_at, owner),
                )
            except PydanticValidationError as e:
                raise ValidationError(str(e)) from e
            try:
                self.backend.insert(record)
            except DuplicateRecord:
                logger.warning(f"Idea id collision on {record.id}; retrying with a fresh id")
                continue
            break
        else:
            raise RuntimeError("Could not allocate a unique idea id")

        logger.info(f"Submitted idea {record.id} for {owner} ({status.value})")
        if self._ledger is not None:
            self._ledger.append_event(
                event_type="IDEA_SUBMITTED",
                idea_id=record.id,
                payload={
                    "owner": record.owner,
                    "status": record.status.value,
                    "created_at": record.created_at,
                    "proof_hash": record.proof_hash,
                },
            )
        return record

    def get(self, idea_id: str) -> IdeaRecord:
        """Fetch a record by id.

        Raises:
            NotFound: unknown id
        """
        record = self.backend.get(idea_id)
        if record is None:
            raise NotFound(f"Idea not found: {idea_id}", idea_id=idea_id)
        return record

    def list_by_owner(self, owner: str) -> list[IdeaRecord]:
        """All of ``owner``'s records, newest first."""
        return self.backend.list_by_owner(owner)

    def reveal(self, idea_id: str, caller: str) -> IdeaRecord:
        """Reveal a RevealLater idea: status becomes Public, exactly once.

        Raises:
            NotFound: unknown id
            Unauthorized: caller is not the owner
            InvalidTransition: not RevealLater, or already revealed
        """
        while True:
            current = self.get(idea_id)
            validate_reveal(current, caller)
            revealed = apply_reveal(current, max(int(self._clock()), current.created_at))
            if self.backend.compare_and_set(current, revealed):
                break
            # Lost a race; the re-read above will reject the second reveal.
            logger.debug(f"Reveal of {idea_id} lost a compare-and-set race; re-checking")

        logger.info(f"Revealed idea {idea_id}")
        if self._ledger is not None:
            self._ledger.append_event(
                event_type="IDEA_REVEALED",
                idea_id=idea_id,
                payload={"owner": revealed.owner, "revealed_at": revealed.revealed_at},
            )
        return revealed

    def scan(self) -> list[IdeaRecord]:
        """Snapshot of every record."""
        return self.backend.scan()

    def iter_public(self, after: Optional[FeedKey] = None) -> Iterator[IdeaRecord]:
        """Public records in feed order, strictly after ``after``."""
        return self.backend.iter_public(after)

"""Privacy state machine: reveal transition and visibility rules.

Lifecycle:
    RevealLater -> Public   (reveal, owner only, exactly once)
    Public      -> (none)   terminal, whether submitted Public or revealed
    Private     -> (none)   private ideas stay private

The machine is pure: it validates and builds the next record. Persisting
it atomically is the record store's job.
"""

from __future__ import annotations

from ideavault.errors import InvalidTransition, Unauthorized
from ideavault.models.idea import IdeaRecord, IdeaStatus

# Valid transitions: {from_state: {allowed_to_states}}
_TRANSITIONS: dict[IdeaStatus, frozenset[IdeaStatus]] = {
    IdeaStatus.REVEAL_LATER: frozenset({IdeaStatus.PUBLIC}),
    IdeaStatus.PUBLIC: frozenset(),
    IdeaStatus.PRIVATE: frozenset(),
}


def valid_transitions(status: IdeaStatus) -> frozenset[IdeaStatus]:
    """Return the set of states reachable from ``status``."""
    return _TRANSITIONS.get(status, frozenset())


def is_terminal(status: IdeaStatus) -> bool:
    return not valid_transitions(status)


def validate_reveal(record: IdeaRecord, caller: str) -> None:
    """Check that ``caller`` may reveal ``record`` now.

    Raises:
        Unauthorized: caller is not the owner
        InvalidTransition: record is not an unrevealed RevealLater idea
    """
    if caller != record.owner:
        raise Unauthorized("Only the owner can reveal this idea", idea_id=record.id)
    if record.is_revealed:
        raise InvalidTransition("Idea has already been revealed", idea_id=record.id)
    if IdeaStatus.PUBLIC not in valid_transitions(record.status):
        raise InvalidTransition(
            f"Cannot reveal an idea with status {record.status.value}; only RevealLater ideas can be revealed",
            idea_id=record.id,
        )


def apply_reveal(record: IdeaRecord, now_ms: int) -> IdeaRecord:
    """Build the revealed copy of ``record``. Caller must validate first."""
    data = record.model_dump()
    data.update(status=IdeaStatus.PUBLIC, is_revealed=True, revealed_at=int(now_ms))
    return IdeaRecord.model_validate(data)


def can_view(record: IdeaRecord, caller: str | None) -> bool:
    """Public ideas are visible to anyone; everything else only to its owner."""
    if record.status == IdeaStatus.PUBLIC:
        return True
    return caller is not None and caller == record.owner


def ensure_visible(record: IdeaRecord, caller: str | None) -> IdeaRecord:
    if not can_view(record, caller):
        raise Unauthorized("This idea is not visible to you", idea_id=record.id)
    return record

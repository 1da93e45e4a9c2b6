"""Tests for the privacy state machine and visibility rules."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from ideavault.errors import InvalidTransition, Unauthorized
from ideavault.models.idea import IdeaRecord, IdeaStatus
from ideavault.privacy import (
    apply_reveal,
    can_view,
    ensure_visible,
    is_terminal,
    valid_transitions,
    validate_reveal,
)


def _record(status: IdeaStatus, **overrides) -> IdeaRecord:
    data = dict(
        id="idea_abc",
        owner="u1",
        title="T",
        description="D",
        created_at=1000,
        status=status,
        proof_hash="sha256:00",
    )
    data.update(overrides)
    return IdeaRecord(**data)


def test_transition_table():
    assert valid_transitions(IdeaStatus.REVEAL_LATER) == {IdeaStatus.PUBLIC}
    assert is_terminal(IdeaStatus.PUBLIC)
    assert is_terminal(IdeaStatus.PRIVATE)
    assert not is_terminal(IdeaStatus.REVEAL_LATER)


def test_validate_reveal_owner_only():
    record = _record(IdeaStatus.REVEAL_LATER)
    validate_reveal(record, "u1")
    with pytest.raises(Unauthorized):
        validate_reveal(record, "u2")


@pytest.mark.parametrize("status", [IdeaStatus.PUBLIC, IdeaStatus.PRIVATE])
def test_validate_reveal_rejects_non_reveal_later(status):
    with pytest.raises(InvalidTransition):
        validate_reveal(_record(status), "u1")


def test_apply_reveal_builds_revealed_copy():
    record = _record(IdeaStatus.REVEAL_LATER)
    revealed = apply_reveal(record, 2000)

    assert revealed.status == IdeaStatus.PUBLIC
    assert revealed.is_revealed is True
    assert revealed.revealed_at == 2000
    assert record.status == IdeaStatus.REVEAL_LATER
    with pytest.raises(InvalidTransition):
        validate_reveal(revealed, "u1")


def test_record_invariants_reject_illegal_states():
    with pytest.raises(PydanticValidationError):
        _record(IdeaStatus.REVEAL_LATER, is_revealed=True, revealed_at=5)
    with pytest.raises(PydanticValidationError):
        _record(IdeaStatus.PUBLIC, is_revealed=True)
    with pytest.raises(PydanticValidationError):
        _record(IdeaStatus.PUBLIC, revealed_at=5)
    with pytest.raises(PydanticValidationError):
        _record("Hidden")


def test_can_view_rules():
    public = _record(IdeaStatus.PUBLIC)
    private = _record(IdeaStatus.PRIVATE)
    hidden = _record(IdeaStatus.REVEAL_LATER)

    assert can_view(public, "u2")
    assert can_view(public, None)
    assert can_view(private, "u1")
    assert not can_view(private, "u2")
    assert not can_view(hidden, "u2")
    assert not can_view(hidden, None)
    assert ensure_visible(hidden, "u1") is hidden
    with pytest.raises(Unauthorized):
        ensure_visible(private, "u2")

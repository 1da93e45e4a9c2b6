"""Error kinds surfaced by the Idea Vault core.

Each kind carries a stable ``code`` so caller layers can render specific
guidance ("already revealed" vs "not your idea") without string matching.
"""


class VaultError(Exception):
    """Base class for all Idea Vault errors."""

    code = "vault_error"

    def __init__(self, message: str, *, idea_id: str | None = None):
        super().__init__(message)
        self.message = message
        self.idea_id = idea_id

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "idea_id": self.idea_id}


class ValidationError(VaultError):
    """Malformed or missing input; correctable by the caller."""

    code = "validation_error"


class NotFound(VaultError):
    """Unknown idea id."""

    code = "not_found"


class Unauthorized(VaultError):
    """Caller lacks rights for the requested view or mutation."""

    code = "unauthorized"


class InvalidTransition(VaultError):
    """Privacy state machine rule violated."""

    code = "invalid_transition"

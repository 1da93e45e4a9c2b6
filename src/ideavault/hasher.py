"""Deterministic content fingerprints for idea records and certificates."""

from __future__ import annotations

import hashlib
import json
from typing import Any, Optional

HASH_PREFIX = "sha256:"


def _encode_field(tag: str, value: Optional[str]) -> bytes:
    # Length-prefixed so ("ab", "c") and ("a", "bc") never collide.
    if value is None:
        return f"{tag}:-\n".encode("utf-8")
    raw = value.encode("utf-8")
    return f"{tag}:{len(raw)}:".encode("utf-8") + raw + b"\n"


def fingerprint(
    title: str,
    description: str,
    attachment_ref: Optional[str],
    created_at: int,
    owner: str,
) -> str:
    """Compute the proof hash binding an idea's content and metadata.

    Args:
        title: Idea title
        description: Idea description
        attachment_ref: Optional external blob reference (None is distinct from "")
        created_at: Creation time in epoch milliseconds
        owner: Submitting caller identity

    Returns:
        "sha256:" followed by the hex digest
    """
    h = hashlib.sha256()
    h.update(b"ideavault.fingerprint.v1\n")
    h.update(_encode_field("title", title))
    h.update(_encode_field("description", description))
    h.update(_encode_field("attachment_ref", attachment_ref))
    h.update(_encode_field("created_at", str(int(created_at))))
    h.update(_encode_field("owner", owner))
    return HASH_PREFIX + h.hexdigest()


def canonical_json(obj: Any) -> str:
    return json.dumps(obj, ensure_ascii=False, sort_keys=True, separators=(",", ":"))


def digest(obj: Any) -> str:
    """SHA-256 over the canonical JSON form of ``obj``."""
    return HASH_PREFIX + hashlib.sha256(canonical_json(obj).encode("utf-8")).hexdigest()

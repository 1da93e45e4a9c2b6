"""Append-only JSONL audit trail of vault writes (submits, reveals, certificates)."""

import json
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path

from rich.console import Console

from .models.ledger import LedgerEvent, LedgerEventType

console = Console(stderr=True)


class LedgerWriter:
    """Appends one event per line to ``system/ledger.jsonl``.

    A writer is shared by every thread of one vault, so appends are serialized.
    """

    def __init__(self, ledger_path: Path, run_id: str | None = None):
        self.ledger_path = ledger_path
        self.run_id = run_id or str(uuid.uuid4())
        self._lock = threading.Lock()

    def append_event(
        self,
        event_type: LedgerEventType,
        payload: dict,
        idea_id: str | None = None,
    ) -> LedgerEvent:
        event = LedgerEvent(
            event_id=str(uuid.uuid4()),
            run_id=self.run_id,
            ts=datetime.now(timezone.utc),
            event_type=event_type,
            idea_id=idea_id,
            payload=payload,
        )
        line = json.dumps(event.model_dump(mode="json")) + "\n"

        with self._lock:
            self.ledger_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.ledger_path, "a", encoding="utf-8") as f:
                f.write(line)
        return event


def read_ledger_tail(ledger_path: Path, n: int = 20) -> list[LedgerEvent]:
    """Last ``n`` well-formed events, oldest first. Bad lines are reported and skipped."""
    if not ledger_path.exists() or n <= 0:
        return []

    with open(ledger_path, "r", encoding="utf-8") as f:
        lines = [line.strip() for line in f if line.strip()]

    events: list[LedgerEvent] = []
    skipped = 0
    for line in lines[-n:]:
        try:
            events.append(LedgerEvent.model_validate_json(line))
        except ValueError as e:
            skipped += 1
            console.print(f"[yellow]Warning: Skipping malformed line: {e}[/yellow]")

    if skipped:
        console.print(f"[yellow]Skipped {skipped} malformed line(s)[/yellow]")
    return events

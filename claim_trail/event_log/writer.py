"""Append-only JSONL event log for verification runs."""

from __future__ import annotations

import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from claim_trail.contracts import RunEvent


class EventLog:
    """JSONL-backed event log for a single verification run.

    Pattern follows RecordStore: file-based, directory auto-creation,
    graceful degradation on read errors.
    """

    _FILENAME = "events.jsonl"

    def __init__(self, log_dir: str | Path, run_id: str) -> None:
        self.run_id = run_id
        self._dir = Path(log_dir) / run_id
        self._dir.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self._dir / self._FILENAME

    def emit(self, event: RunEvent) -> None:
        """Append a single event as a JSON line. A failed write only warns."""
        line = json.dumps(event, ensure_ascii=False, default=str)
        try:
            with self.path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")
        except OSError as e:
            print(f"WARNING: event log write failed for {self.run_id}: {e}", file=sys.stderr)

    def read_all(self) -> list[RunEvent]:
        """Read all events. Skips corrupt lines, returns [] on missing file."""
        if not self.path.exists():
            return []
        events: list[RunEvent] = []
        try:
            for line in self.path.read_text(encoding="utf-8").splitlines():
                line = line.strip()
                if not line:
                    continue
                try:
                    events.append(json.loads(line))
                except json.JSONDecodeError:
                    continue
        except OSError:
            return []
        return events

    @staticmethod
    def make_event(
        *,
        node: str,
        run_id: str,
        elapsed_s: float,
        inputs_summary: dict[str, int] | None = None,
        outputs_summary: dict[str, int] | None = None,
        tokens: int = 0,
        cost: float = 0.0,
    ) -> RunEvent:
        """Factory for creating a RunEvent with timestamp."""
        return RunEvent(
            node=node,
            run_id=run_id,
            ts=datetime.now(timezone.utc).isoformat(),
            elapsed_s=round(elapsed_s, 3),
            inputs_summary=inputs_summary or {},
            outputs_summary=outputs_summary or {},
            tokens=tokens,
            cost=round(cost, 6),
        )

    @staticmethod
    def summarize(values: dict[str, Any]) -> dict[str, int]:
        """Size of each field: length for collections and strings, 1 for anything else set."""
        summary: dict[str, int] = {}
        for key, value in values.items():
            if isinstance(value, (list, dict, str)):
                summary[key] = len(value)
            elif value is not None:
                summary[key] = 1
        return summary

"""File-based store of verification records keyed by graph hash."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

from claim_trail.contracts import VerificationRecord
from claim_trail.errors import PersistenceError

MAX_RECENT = 50


class RecordStore:
    """JSON-backed store for verification records.

    Single JSON file, human-readable, graceful degradation on missing or
    corrupt data. Saving a record whose hash already exists replaces it.
    """

    _FILENAME = "verifications.json"

    def __init__(self, data_dir: str | Path, *, require_durability: bool = False) -> None:
        self._dir = Path(data_dir)
        self._dir.mkdir(parents=True, exist_ok=True)
        self.require_durability = require_durability

    @property
    def path(self) -> Path:
        return self._dir / self._FILENAME

    def _load(self) -> list[VerificationRecord]:
        """Load all records. Returns [] on any error."""
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            if isinstance(data, list):
                return data
            return []
        except (json.JSONDecodeError, OSError):
            return []

    def _write(self, records: list[VerificationRecord]) -> None:
        self.path.write_text(
            json.dumps(records, indent=2, ensure_ascii=False),
            encoding="utf-8",
        )

    def save(self, record: VerificationRecord) -> bool:
        """Persist one record. Returns False if the write failed and was tolerated."""
        records = [r for r in self._load() if r.get("hash") != record["hash"]]
        records.append(record)
        try:
            self._write(records)
        except OSError as e:
            if self.require_durability:
                raise PersistenceError(f"Could not write {self.path}: {e}") from e
            print(f"WARNING: verification record not saved: {e}", file=sys.stderr)
            return False
        return True

    def get_by_hash(self, graph_hash: str) -> VerificationRecord | None:
        for record in self._load():
            if record.get("hash") == graph_hash:
                return record
        return None

    def recent(self, limit: int = 20) -> list[VerificationRecord]:
        """Newest first. ``limit`` is capped at 50."""
        limit = max(0, min(limit, MAX_RECENT))
        records = sorted(self._load(), key=lambda r: r.get("created_at", ""), reverse=True)
        return records[:limit]

    def stats_by_source(self) -> dict[str, dict[str, Any]]:
        """Record count and average accuracy score per request source."""
        grouped: dict[str, list[float]] = {}
        for record in self._load():
            grouped.setdefault(record.get("source", "unknown"), []).append(
                float(record.get("accuracy_score", 0))
            )
        return {
            source: {"count": len(scores), "avg_accuracy": round(sum(scores) / len(scores), 2)}
            for source, scores in grouped.items()
        }

"""
Install ledger — append-only record of installer runs.

Every run (completed or aborted) appends one JSON line. Provisioning
is forward-only, so the ledger is the only history of what a host
went through.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)


class AuditEntry(BaseModel):
    """A single installer run."""

    timestamp: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    run_id: str = ""
    hostname: str = ""

    status: str = ""               # completed, aborted
    state: str = ""                # done or aborted
    last_state: str = ""           # last state reached
    webserver: str = ""
    steps_completed: list[str] = Field(default_factory=list)

    failed_step: str | None = None
    error_kind: str | None = None
    reason: str = ""
    duration_ms: int = 0
    mock: bool = False


class AuditWriter:
    """Append-only ledger writer.

    Each call to write() appends a single JSON line. A ledger that
    cannot be written is logged, never fatal to the install.
    """

    def __init__(self, path: Path):
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def write(self, entry: AuditEntry) -> None:
        line = json.dumps(entry.model_dump(mode="json"), ensure_ascii=False) + "\n"
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as f:
                f.write(line)
            logger.debug("Audit entry written: %s/%s", entry.run_id, entry.status)
        except OSError as e:
            logger.error("Failed to write audit entry: %s", e)

    def read_all(self) -> list[AuditEntry]:
        """All entries, oldest first. Corrupt lines are skipped."""
        try:
            lines = self._path.read_text(encoding="utf-8").splitlines()
        except FileNotFoundError:
            return []
        except OSError as e:
            logger.error("Failed to read install ledger %s: %s", self._path, e)
            return []

        parsed = (_parse_line(number, line) for number, line in enumerate(lines, start=1))
        return [entry for entry in parsed if entry is not None]


def _parse_line(number: int, line: str) -> AuditEntry | None:
    if not line.strip():
        return None
    try:
        return AuditEntry.model_validate_json(line)
    except ValidationError as e:
        logger.warning("Skipping corrupt ledger line %d: %s", number, e.errors()[0]["msg"])
        return None

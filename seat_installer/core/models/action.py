"""
Actions and Receipts — what the installer asks of the host, and the answer.

A service never touches the host directly. It builds an Action, the
adapter registry runs it, and a Receipt comes back, failed or not.
Nothing in between raises.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class Action(BaseModel):
    """A requested side effect, handled by exactly one adapter."""

    id: str                         # "packages:group:php", "apache:reload", ...
    adapter: str                    # "shell" or "filesystem"
    step: str = ""                  # pipeline step that asked for it
    description: str = ""
    params: dict[str, Any] = Field(default_factory=dict)
    mutating: bool = True           # False for read-only probes


class Receipt(BaseModel):
    """Outcome of one Action.

    ``metadata["changed"] = False`` marks work that was already done, so
    callers can skip follow-ups such as a service reload.
    """

    adapter: str
    action_id: str
    status: Literal["ok", "failed"] = "ok"
    finished_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0
    output: str = ""
    error: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @property
    def changed(self) -> bool:
        return self.ok and bool(self.metadata.get("changed", True))

    @classmethod
    def success(cls, adapter: str, action_id: str, output: str = "", **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, output=output, **kwargs)

    @classmethod
    def failure(cls, adapter: str, action_id: str, error: str, **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, status="failed", error=error, **kwargs)

    @classmethod
    def unchanged(cls, action_id: str, reason: str, adapter: str = "none") -> Receipt:
        """Success for work the host already reflects."""
        return cls(
            adapter=adapter,
            action_id=action_id,
            output=reason,
            metadata={"changed": False},
        )

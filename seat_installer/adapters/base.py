"""
Adapter protocol — how services reach the host.

Services describe a side effect as an Action and hand it to the
registry. The registry picks an adapter by name, lets it check the
params, then runs it. What comes back is always a Receipt.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field

from seat_installer.core.models.action import Action, Receipt

DEFAULT_TIMEOUT = 900


class ExecutionContext(BaseModel):
    """One action plus the params an adapter reads from it."""

    action: Action
    params: dict[str, Any] = Field(default_factory=dict)

    @property
    def working_dir(self) -> str | None:
        return self.params.get("cwd")

    @property
    def extra_env(self) -> dict[str, str]:
        """Environment overrides. May carry secrets, so never log these."""
        return self.params.get("env") or {}

    @property
    def stdin(self) -> str | None:
        return self.params.get("input")

    @property
    def timeout(self) -> int:
        return int(self.params.get("timeout", DEFAULT_TIMEOUT))

    def fail(self, adapter: str, error: str, **kwargs: Any) -> Receipt:
        """Failure receipt for this context's action."""
        return Receipt.failure(adapter=adapter, action_id=self.action.id, error=error, **kwargs)


class Adapter(ABC):
    """A single kind of host side effect.

    Implementations report every problem in the returned Receipt.
    The registry still guards against one that raises.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Registry key that Actions address, e.g. ``shell``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the host can run this adapter at all."""

    @abstractmethod
    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        """Check params before anything runs.

        Returns:
            ``(True, "")`` when the action can run, else ``(False, reason)``.
        """

    @abstractmethod
    def execute(self, context: ExecutionContext) -> Receipt:
        """Perform the action."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"

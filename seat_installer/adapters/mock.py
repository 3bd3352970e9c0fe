"""
Scriptable stand-in for any adapter.

Tests register one under the real adapter's name ("shell") and then
script what the host "says": a fixed answer per action id, or a queue
of answers consumed one call at a time (bad password, bad password,
good password). Every context it receives is kept for assertions.
"""

from __future__ import annotations

from seat_installer.adapters.base import Adapter, ExecutionContext
from seat_installer.core.models.action import Receipt


class MockAdapter(Adapter):
    """Succeeds on everything unless told otherwise."""

    def __init__(
        self,
        adapter_name: str = "mock",
        available: bool = True,
        default_output: str = "[mock] executed",
    ):
        self._name = adapter_name
        self._available = available
        self._default_output = default_output
        self._fixed: dict[str, Receipt] = {}
        self._queued: dict[str, list[Receipt]] = {}
        self.call_log: list[ExecutionContext] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_count(self) -> int:
        return len(self.call_log)

    @property
    def action_ids(self) -> list[str]:
        """Executed action ids, oldest first."""
        return [ctx.action.id for ctx in self.call_log]

    def is_available(self) -> bool:
        return self._available

    def set_response(self, action_id: str, receipt: Receipt) -> None:
        self._fixed[action_id] = receipt

    def set_failure(self, action_id: str, error: str = "Mock failure") -> None:
        self._fixed[action_id] = Receipt.failure(
            adapter=self._name, action_id=action_id, error=error,
        )

    def queue_responses(self, action_id: str, receipts: list[Receipt]) -> None:
        """Answer the next calls of ``action_id`` with ``receipts``, in order.

        A drained queue falls back to the fixed response, then to success.
        """
        self._queued.setdefault(action_id, []).extend(receipts)

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        self.call_log.append(context)
        return self._answer(context.action.id)

    def _answer(self, action_id: str) -> Receipt:
        queue = self._queued.get(action_id)
        if queue:
            return queue.pop(0)
        if action_id in self._fixed:
            return self._fixed[action_id]
        return Receipt.success(
            adapter=self._name,
            action_id=action_id,
            output=self._default_output,
            metadata={"mock": True},
        )

    def reset(self) -> None:
        """Forget calls and every scripted answer."""
        self.call_log.clear()
        self._fixed.clear()
        self._queued.clear()

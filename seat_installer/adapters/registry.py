"""
Adapter registry — the one door every host side effect goes through.

A run builds one registry and shares it across all services. In mock
mode nothing reaches a real adapter: each Action is answered with a
canned success so the whole pipeline can be walked on any machine.
"""

from __future__ import annotations

import logging
import time

from seat_installer.adapters.base import Adapter, ExecutionContext
from seat_installer.core.models.action import Action, Receipt

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """Adapters by name, plus the dispatch that turns Actions into Receipts."""

    def __init__(self, mock_mode: bool = False):
        self._adapters: dict[str, Adapter] = {}
        self._mock_mode = mock_mode
        self._mock_adapter: Adapter | None = None
        self.simulated: list[str] = []

    @property
    def mock_mode(self) -> bool:
        return self._mock_mode

    def set_mock_mode(self, enabled: bool, mock_adapter: Adapter | None = None) -> None:
        """Switch mock mode; ``mock_adapter`` replaces the canned answers."""
        self._mock_mode = enabled
        self._mock_adapter = mock_adapter

    def register(self, adapter: Adapter) -> None:
        if adapter.name in self._adapters:
            logger.warning("Replacing adapter %r", adapter.name)
        self._adapters[adapter.name] = adapter

    def unregister(self, name: str) -> None:
        self._adapters.pop(name, None)

    def get(self, name: str) -> Adapter | None:
        return self._adapters.get(name)

    def list_adapters(self) -> list[str]:
        return list(self._adapters)

    def execute(self, action: Action) -> Receipt:
        """Run ``action`` and return its Receipt. Never raises."""
        started = time.monotonic()

        if self._mock_mode and self._mock_adapter is None:
            return self._simulate(action)

        adapter = self._mock_adapter if self._mock_mode else self._adapters.get(action.adapter)
        receipt = self._dispatch(adapter, action)
        receipt.duration_ms = int((time.monotonic() - started) * 1000)

        if receipt.failed:
            logger.info("✗ %s: %s", action.description or action.id, receipt.error)
        else:
            logger.info("✓ %s", action.description or action.id)
        return receipt

    def _simulate(self, action: Action) -> Receipt:
        self.simulated.append(action.id)
        logger.info("[mock] %s", action.description or action.id)
        return Receipt.success(
            adapter=action.adapter,
            action_id=action.id,
            output=f"[mock] {action.adapter}:{action.id}",
            metadata={"mock": True},
        )

    def _dispatch(self, adapter: Adapter | None, action: Action) -> Receipt:
        context = ExecutionContext(action=action, params=action.params)

        if adapter is None:
            return context.fail(action.adapter, f"No adapter registered for '{action.adapter}'")
        if not adapter.is_available():
            return context.fail(action.adapter, f"Adapter '{adapter.name}' is not usable on this host")

        try:
            valid, reason = adapter.validate(context)
        except Exception as e:
            return context.fail(action.adapter, f"Validation error: {e}")
        if not valid:
            return context.fail(action.adapter, f"Validation failed: {reason}")

        logger.debug("→ %s:%s", action.adapter, action.id)
        try:
            return adapter.execute(context)
        except Exception as e:
            logger.error("Adapter %s raised on %s: %s", adapter.name, action.id, e)
            return context.fail(action.adapter, f"Unexpected error: {e}")


def default_registry(mock_mode: bool = False) -> AdapterRegistry:
    """Registry with the shell and filesystem adapters registered."""
    from seat_installer.adapters.shell.command import ShellCommandAdapter
    from seat_installer.adapters.shell.filesystem import FilesystemAdapter

    registry = AdapterRegistry(mock_mode=mock_mode)
    registry.register(ShellCommandAdapter())
    registry.register(FilesystemAdapter())
    return registry

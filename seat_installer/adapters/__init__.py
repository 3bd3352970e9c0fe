"""Adapters — the only code that touches the host.

Public re-exports for convenient access.
"""

from seat_installer.adapters.base import Adapter, ExecutionContext
from seat_installer.adapters.mock import MockAdapter
from seat_installer.adapters.registry import AdapterRegistry, default_registry

__all__ = [
    "Adapter",
    "AdapterRegistry",
    "ExecutionContext",
    "MockAdapter",
    "default_registry",
]

"""
Shared plumbing for the host-facing services.

Every service turns its work into Actions and dispatches them through
the run's AdapterRegistry. Nothing here runs a command directly.
"""

from __future__ import annotations

from typing import Any

from seat_installer.adapters.registry import AdapterRegistry
from seat_installer.core.data.packages import PATHS, SERVICES
from seat_installer.core.models.action import Action, Receipt
from seat_installer.core.models.config import InstallerConfig


class HostService:
    """Base for services that act on the host through the registry."""

    step = ""

    def __init__(
        self,
        config: InstallerConfig,
        registry: AdapterRegistry,
        package_manager: str = "apt",
    ):
        self.config = config
        self.registry = registry
        self.pm = package_manager

    def run_command(
        self,
        action_id: str,
        command: list[str] | str,
        description: str = "",
        mutating: bool = True,
        **params: Any,
    ) -> Receipt:
        action = Action(
            id=action_id,
            adapter="shell",
            step=self.step,
            description=description or action_id,
            params={"command": command, **params},
            mutating=mutating,
        )
        return self.registry.execute(action)

    def write_file(
        self,
        action_id: str,
        path: str,
        content: str,
        mode: int | None = None,
    ) -> Receipt:
        params: dict[str, Any] = {"operation": "write", "path": path, "content": content}
        if mode is not None:
            params["mode"] = mode
        action = Action(
            id=action_id,
            adapter="filesystem",
            step=self.step,
            description=f"write {path}",
            params=params,
        )
        return self.registry.execute(action)

    def make_dir(self, action_id: str, path: str) -> Receipt:
        action = Action(
            id=action_id,
            adapter="filesystem",
            step=self.step,
            description=f"mkdir {path}",
            params={"operation": "mkdir", "path": path},
        )
        return self.registry.execute(action)

    def service_name(self, key: str) -> str:
        return SERVICES[self.pm][key]

    def path(self, key: str) -> str:
        return PATHS[self.pm][key]

    def enable_service(self, key: str) -> Receipt:
        """Enable and start a systemd unit. A running unit is left alone."""
        name = self.service_name(key)
        return self.run_command(
            f"service:enable:{name}",
            ["systemctl", "enable", "--now", name],
            description=f"enable {name}",
        )

    def restart_service(self, key: str) -> Receipt:
        name = self.service_name(key)
        return self.run_command(
            f"service:restart:{name}",
            ["systemctl", "restart", name],
            description=f"restart {name}",
        )

    def read_file(self, action_id: str, path: str) -> Receipt:
        action = Action(
            id=action_id,
            adapter="filesystem",
            step=self.step,
            description=f"read {path}",
            params={"operation": "read", "path": path},
            mutating=False,
        )
        return self.registry.execute(action)

"""
SeAT application installer.

Creates the project with Composer, writes the database credentials
into Laravel's ``.env`` and runs the artisan setup commands.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from seat_installer.adapters.registry import AdapterRegistry
from seat_installer.core.data.packages import WEB_USER
from seat_installer.core.models.action import Receipt
from seat_installer.core.models.config import InstallerConfig
from seat_installer.core.models.credentials import Credentials
from seat_installer.core.services.base import HostService

logger = logging.getLogger(__name__)

_COMPOSER_ENV = {"COMPOSER_ALLOW_SUPERUSER": "1", "COMPOSER_NO_INTERACTION": "1"}


def render_env(existing: str, values: dict[str, str]) -> str:
    """Return ``existing`` dotenv text with ``values`` set.

    Keys already present are replaced in place; new keys are appended.
    """
    lines = existing.splitlines()
    remaining = dict(values)

    for i, line in enumerate(lines):
        match = re.match(r"^\s*([A-Za-z_][A-Za-z0-9_]*)\s*=", line)
        if match and match.group(1) in remaining:
            key = match.group(1)
            lines[i] = f"{key}={_quote(remaining.pop(key))}"

    for key, value in remaining.items():
        lines.append(f"{key}={_quote(value)}")

    return "\n".join(lines) + "\n"


def _quote(value: str) -> str:
    if value == "" or re.search(r"[\s#\"'$]", value):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return value


class SeatApp(HostService):
    """Installs and configures the SeAT web application."""

    step = "app"

    def __init__(
        self,
        config: InstallerConfig,
        registry: AdapterRegistry,
        package_manager: str = "apt",
    ):
        super().__init__(config, registry, package_manager)
        self.install_path = Path(config.install_path)

    def set_path(self, path: str | Path) -> None:
        self.install_path = Path(path)

    def is_installed(self) -> bool:
        return (self.install_path / "artisan").is_file()

    def install(self) -> Receipt:
        if self.is_installed():
            logger.info("SeAT already present at %s", self.install_path)
            return Receipt.unchanged(
                "app:create-project", f"SeAT already installed at {self.install_path}",
            )

        receipt = self.make_dir("app:mkdir", str(self.install_path.parent))
        if receipt.failed:
            return receipt

        command = ["composer", "create-project", self.config.app.package, str(self.install_path)]
        if self.config.app.version:
            command.append(self.config.app.version)
        command += ["--no-dev", "--no-interaction", "--prefer-dist"]

        return self.run_command(
            "app:create-project",
            command,
            description=f"composer create-project {self.config.app.package}",
            env=_COMPOSER_ENV,
            timeout=1800,
        )

    def configure(self, credentials: Credentials) -> Receipt:
        """Write ``.env`` from ``credentials`` and run the artisan setup."""
        env_path = self.install_path / ".env"

        current = self._read(env_path) or self._read(self.install_path / ".env.example") or ""
        values = {
            "APP_ENV": "production",
            "APP_DEBUG": "false",
            "REDIS_HOST": "127.0.0.1",
            **credentials.as_env(),
        }
        rendered = render_env(current, values)

        receipt = self.write_file("app:write-env", str(env_path), rendered, mode=0o640)
        if receipt.failed:
            return receipt

        if not re.search(r"^APP_KEY=\S+", rendered, re.MULTILINE):
            receipt = self._artisan("key:generate", "--force")
            if receipt.failed:
                return receipt

        for args in (("migrate", "--force"), ("db:seed", "--force")):
            receipt = self._artisan(*args)
            if receipt.failed:
                return receipt

        web_user = WEB_USER[self.pm]
        return self.run_command(
            "app:permissions",
            [
                "chown", "-R", f"{web_user}:{web_user}",
                str(env_path),
                str(self.install_path / "storage"),
                str(self.install_path / "bootstrap" / "cache"),
            ],
            description=f"hand storage to {web_user}",
        )

    def _artisan(self, *args: str) -> Receipt:
        return self.run_command(
            f"app:artisan:{args[0]}",
            ["php", "artisan", *args],
            description=f"php artisan {' '.join(args)}",
            cwd=str(self.install_path),
        )

    def _read(self, path: Path) -> str | None:
        receipt = self.read_file(f"app:read:{path.name}", str(path))
        return receipt.output if receipt.ok else None

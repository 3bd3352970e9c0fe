"""
MySQL / MariaDB collaborator.

Knows how to detect, install and baseline-configure the database
engine, and how to run a live connection test against a set of
credentials. Credentials can only be saved once such a test has
passed for exactly those credentials.
"""

from __future__ import annotations

import logging
import secrets
import shutil
from pathlib import Path

from seat_installer.adapters.registry import AdapterRegistry
from seat_installer.core.errors import StepFailure
from seat_installer.core.models.action import Receipt
from seat_installer.core.models.config import InstallerConfig
from seat_installer.core.models.credentials import CredentialCheck, Credentials
from seat_installer.core.observability.logging_config import register_secret
from seat_installer.core.persistence.credentials_store import (
    CREDENTIALS_MODE,
    dump_credentials,
    load_credentials,
)
from seat_installer.core.services.base import HostService
from seat_installer.core.services.packages import PackageInstaller

logger = logging.getLogger(__name__)

_SERVER_BINARIES = ("mysqld", "mariadbd")
_SBIN_DIRS = ("/usr/sbin", "/usr/libexec")

BASELINE_CNF = """\
# Managed by seat-installer
[mysqld]
character-set-server = utf8mb4
collation-server = utf8mb4_unicode_ci
bind-address = 127.0.0.1
max_allowed_packet = 64M
"""


class MySql(HostService):
    """The database engine SeAT stores its data in."""

    step = "credentials"

    def __init__(
        self,
        config: InstallerConfig,
        registry: AdapterRegistry,
        packages: PackageInstaller,
        package_manager: str = "apt",
    ):
        super().__init__(config, registry, package_manager)
        self.packages = packages
        self._credentials: Credentials | None = None
        self._verified: Credentials | None = None

    # ── Engine ──────────────────────────────────────────────────

    def is_installed(self) -> bool:
        """Whether a MySQL-compatible server already exists on this host."""
        for binary in _SERVER_BINARIES:
            if shutil.which(binary):
                return True
            if any(Path(d, binary).exists() for d in _SBIN_DIRS):
                return True
        return False

    def install(self) -> Receipt:
        receipt = self.packages.install_package_group("mysql")
        if receipt.failed:
            return receipt
        return self.enable_service("mysql")

    def configure(self) -> Receipt:
        """Apply the baseline config and create SeAT's database and user.

        Generates a fresh password each time; re-running resets the
        user's password to the new one, so the outcome is the same.
        """
        receipt = self.write_file("mysql:baseline-config", self.path("mysql_conf"), BASELINE_CNF)
        if receipt.failed:
            return receipt
        if receipt.changed:
            receipt = self.restart_service("mysql")
            if receipt.failed:
                return receipt

        db = self.config.database
        credentials = Credentials(
            username=db.username,
            password=secrets.token_urlsafe(24),
            database=db.database,
            host=db.host,
            source="generated",
        )
        self.set_credentials(credentials)

        user = f"'{credentials.username}'@'localhost'"
        sql = "\n".join([
            f"CREATE DATABASE IF NOT EXISTS `{credentials.database}`"
            " CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;",
            f"CREATE USER IF NOT EXISTS {user} IDENTIFIED BY '{credentials.password}';",
            f"ALTER USER {user} IDENTIFIED BY '{credentials.password}';",
            f"GRANT ALL PRIVILEGES ON `{credentials.database}`.* TO {user};",
            "FLUSH PRIVILEGES;",
        ])
        return self.run_command(
            "mysql:create-database",
            ["mysql", "-u", "root"],
            description=f"create database {credentials.database}",
            input=sql,
        )

    # ── Credentials ─────────────────────────────────────────────

    def set_credentials(self, credentials: Credentials) -> None:
        register_secret(credentials.password)
        self._credentials = credentials

    def get_credentials(self) -> Credentials:
        if self._credentials is None:
            raise StepFailure(self.step, "No database credentials have been set")
        return self._credentials

    def check_credentials(self) -> CredentialCheck:
        """Run a live connection test against the current credentials."""
        credentials = self.get_credentials()
        receipt = self.run_command(
            "mysql:test-credentials",
            [
                "mysql",
                "-h", credentials.host,
                "-u", credentials.username,
                credentials.database,
                "-e", "SELECT 1",
            ],
            description=f"connect as {credentials.username}@{credentials.database}",
            mutating=False,
            env={"MYSQL_PWD": credentials.password},
            timeout=15,
        )
        if receipt.failed:
            self._verified = None
            return CredentialCheck.invalid(receipt.error or "connection failed")

        self._verified = credentials
        return CredentialCheck.valid()

    def test_credentials(self) -> bool:
        return self.check_credentials().ok

    def save_credentials(self) -> Receipt:
        """Persist the current credentials. They must have passed a test."""
        credentials = self.get_credentials()
        if self._verified is not credentials:
            raise StepFailure(self.step, "Refusing to save credentials that were not verified")
        return self.write_file(
            "mysql:save-credentials",
            str(self.config.credentials_file),
            dump_credentials(credentials),
            mode=CREDENTIALS_MODE,
        )

    def saved_credentials(self) -> Credentials | None:
        """Credentials recorded by an earlier run, if any."""
        return load_credentials(self.config.credentials_file)

"""
Composer bootstrap — the PHP dependency manager SeAT is installed with.
"""

from __future__ import annotations

import logging
import shutil

from seat_installer.adapters.registry import AdapterRegistry
from seat_installer.core.models.action import Receipt
from seat_installer.core.models.config import InstallerConfig
from seat_installer.core.services.base import HostService
from seat_installer.core.services.packages import PackageInstaller

logger = logging.getLogger(__name__)

COMPOSER_BIN = "/usr/local/bin/composer"
INSTALLER_URL = "https://getcomposer.org/installer"


class Composer(HostService):
    """Makes sure a ``composer`` binary is on PATH."""

    step = "dependencies"

    def __init__(
        self,
        config: InstallerConfig,
        registry: AdapterRegistry,
        packages: PackageInstaller,
        package_manager: str = "apt",
    ):
        super().__init__(config, registry, package_manager)
        self.packages = packages

    def has_composer(self) -> bool:
        return shutil.which("composer") is not None

    def install(self) -> Receipt:
        if self.has_composer():
            return Receipt.unchanged("composer:install", "composer already installed")

        # The composer installer is itself a PHP script.
        receipt = self.packages.install_package("php-cli")
        if receipt.failed:
            return receipt

        logger.info("Installing composer to %s", COMPOSER_BIN)
        return self.run_command(
            "composer:install",
            f"curl -sS {INSTALLER_URL} | php -- --install-dir=/usr/local/bin --filename=composer",
            description="install composer",
            shell=True,
        )

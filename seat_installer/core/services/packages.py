"""
OS package management — detection, installs and system updates.

Installed-package probes are read-only and call the distro's query
tool directly; installs and upgrades are Actions on the registry.
"""

from __future__ import annotations

import logging
import shutil
import subprocess

from seat_installer.core.data.packages import APT_ENV, PACKAGE_GROUPS
from seat_installer.core.models.action import Receipt
from seat_installer.core.models.config import InstallerConfig
from seat_installer.core.services.base import HostService

logger = logging.getLogger(__name__)

_MANAGER_BINARIES = (("apt", "apt-get"), ("dnf", "dnf"), ("yum", "yum"))


def detect_package_manager(config: InstallerConfig | None = None) -> str | None:
    """Return the configured package manager, or the first one on PATH."""
    if config is not None and config.package_manager != "auto":
        return config.package_manager
    for name, binary in _MANAGER_BINARIES:
        if shutil.which(binary):
            return name
    return None


def is_pkg_installed(pkg: str, pkg_manager: str) -> bool:
    """Check if a single system package is installed.

      apt      → dpkg-query -W -f='${Status}' PKG
      dnf/yum  → rpm -q PKG

    Returns:
        True if installed, False if not installed or the check failed.
    """
    try:
        if pkg_manager == "apt":
            r = subprocess.run(
                ["dpkg-query", "-W", "-f=${Status}", pkg],
                capture_output=True, text=True, timeout=10,
            )
            return "install ok installed" in r.stdout

        if pkg_manager in ("dnf", "yum"):
            r = subprocess.run(
                ["rpm", "-q", pkg],
                capture_output=True, timeout=10,
            )
            return r.returncode == 0

    except FileNotFoundError:
        logger.warning(
            "Package checker not found for pm=%s (checking %s)",
            pkg_manager, pkg,
        )
    except subprocess.TimeoutExpired:
        logger.warning("Timeout checking package %s with pm=%s", pkg, pkg_manager)
    except OSError as exc:
        logger.warning("OS error checking package %s with pm=%s: %s", pkg, pkg_manager, exc)

    return False


def check_system_deps(packages: list[str], pkg_manager: str) -> dict[str, list[str]]:
    """Split ``packages`` into ``{"missing": [...], "installed": [...]}``."""
    missing: list[str] = []
    installed: list[str] = []
    for pkg in packages:
        if is_pkg_installed(pkg, pkg_manager):
            installed.append(pkg)
        else:
            missing.append(pkg)
    return {"missing": missing, "installed": installed}


class PackageInstaller(HostService):
    """Installs OS packages and named package groups."""

    step = "packages"

    def is_installed(self, name: str) -> bool:
        return is_pkg_installed(name, self.pm)

    def group(self, group_name: str) -> list[str]:
        try:
            return PACKAGE_GROUPS[self.pm][group_name]
        except KeyError:
            raise KeyError(f"Unknown package group '{group_name}' for {self.pm}") from None

    def install_package_group(self, group_name: str) -> Receipt:
        """Install every package of ``group_name`` that is not yet installed."""
        action_id = f"packages:group:{group_name}"
        missing = check_system_deps(self.group(group_name), self.pm)["missing"]
        if not missing:
            logger.info("Package group '%s' already installed", group_name)
            return Receipt.unchanged(action_id, f"{group_name}: already installed")
        return self._install(action_id, missing, f"install {group_name} packages")

    def install_package(self, name: str) -> Receipt:
        action_id = f"packages:install:{name}"
        if self.is_installed(name):
            return Receipt.unchanged(action_id, f"{name}: already installed")
        return self._install(action_id, [name], f"install {name}")

    def _install(self, action_id: str, packages: list[str], description: str) -> Receipt:
        if self.pm == "apt":
            command = ["apt-get", "install", "-y", *packages]
            return self.run_command(action_id, command, description, env=APT_ENV)
        return self.run_command(action_id, [self.pm, "install", "-y", *packages], description)


class OsUpdates(HostService):
    """Brings the operating system's packages up to date."""

    step = "os-update"

    def update(self) -> Receipt:
        if self.pm == "apt":
            receipt = self.run_command(
                "os:refresh", ["apt-get", "update"], "refresh package lists", env=APT_ENV,
            )
            if receipt.failed:
                return receipt
            return self.run_command(
                "os:upgrade", ["apt-get", "upgrade", "-y"], "upgrade packages", env=APT_ENV,
            )
        return self.run_command("os:upgrade", [self.pm, "upgrade", "-y"], "upgrade packages")

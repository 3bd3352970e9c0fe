"""
Requirement checker — the read-only gate in front of every mutation.

Four independent probes (software, OS packages, filesystem access,
commands) each append to one RequirementSet. None of them stops the
others and none of them raises: a missing requirement is a result,
not an error.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from seat_installer.core.models.config import InstallerConfig
from seat_installer.core.models.requirements import RequirementCategory, RequirementSet
from seat_installer.core.services.packages import check_system_deps, detect_package_manager

logger = logging.getLogger(__name__)

OS_RELEASE = Path("/etc/os-release")


def read_os_release(path: Path = OS_RELEASE) -> dict[str, str]:
    """Parse an os-release file into a dict. Empty if unreadable."""
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        logger.warning("Cannot read %s: %s", path, e)
        return {}

    info: dict[str, str] = {}
    for line in raw.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        info[key.strip()] = value.strip().strip('"').strip("'")
    return info


def nearest_existing(path: Path) -> Path:
    """The path itself, or its closest ancestor that exists."""
    current = path
    while not current.exists() and current != current.parent:
        current = current.parent
    return current


class RequirementChecker:
    """Probes the host and reports every unmet precondition at once."""

    def __init__(
        self,
        config: InstallerConfig,
        package_manager: str | None = None,
        os_release: Path = OS_RELEASE,
    ):
        self.config = config
        self.package_manager = package_manager or detect_package_manager(config)
        self.os_release = os_release
        self.requirements = RequirementSet()

    def check_all(self) -> RequirementSet:
        self.requirements = RequirementSet()
        self.check_software()
        self.check_packages()
        self.check_access()
        self.check_commands()
        logger.info(
            "Requirements: %d unsatisfied",
            len(self.requirements.unsatisfied()),
        )
        return self.requirements

    def has_all_requirements(self) -> bool:
        return self.requirements.has_all_requirements

    def check_software(self) -> None:
        reqs = self.config.requirements
        category = RequirementCategory.SOFTWARE

        info = read_os_release(self.os_release)
        ids = {info.get("ID", "").lower(), *info.get("ID_LIKE", "").lower().split()}
        ids.discard("")
        label = info.get("PRETTY_NAME") or info.get("ID") or "unknown"
        supported = bool(ids & {os_id.lower() for os_id in reqs.supported_os})
        self.requirements.add(
            category, "operating system", supported,
            label if supported else f"{label} is not one of: {', '.join(reqs.supported_os)}",
        )

        if reqs.require_root:
            is_root = os.geteuid() == 0
            self.requirements.add(
                category, "root privileges", is_root,
                "" if is_root else "the installer must run as root",
            )

        self.requirements.add(
            category, "package manager", self.package_manager is not None,
            self.package_manager or "no apt-get, dnf or yum found",
        )

    def check_packages(self) -> None:
        category = RequirementCategory.PACKAGES
        packages = self.config.requirements.packages
        if not packages:
            return

        if self.package_manager is None:
            for pkg in packages:
                self.requirements.add(category, pkg, False, "cannot check without a package manager")
            return

        result = check_system_deps(packages, self.package_manager)
        for pkg in packages:
            installed = pkg in result["installed"]
            self.requirements.add(category, pkg, installed, "" if installed else "not installed")

    def check_access(self) -> None:
        category = RequirementCategory.ACCESS
        targets = [
            *self.config.requirements.access_paths,
            str(Path(self.config.install_path).parent),
            self.config.state_dir,
        ]

        seen: set[str] = set()
        for target in targets:
            if target in seen:
                continue
            seen.add(target)

            probe = nearest_existing(Path(target))
            writable = os.access(probe, os.W_OK)
            detail = "" if writable else f"no write access to {probe}"
            self.requirements.add(category, target, writable, detail)

    def check_commands(self) -> None:
        category = RequirementCategory.COMMANDS
        for command in self.config.requirements.commands:
            found = shutil.which(command)
            self.requirements.add(category, command, found is not None, found or "not found on PATH")

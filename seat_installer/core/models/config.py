"""
Installer configuration model — loaded from seat-installer.yml.

Every field has a default, so the installer runs without a config
file. The file only needs the keys it wants to override.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

_IDENTIFIER = r"^[A-Za-z0-9_]{1,64}$"


class DatabaseSettings(BaseModel):
    """Where SeAT's database lives and how credentials are negotiated."""

    host: str = "127.0.0.1"
    username: str = Field(default="seat", pattern=_IDENTIFIER)
    database: str = Field(default="seat", pattern=_IDENTIFIER)
    # None = keep asking until a connection test succeeds
    max_attempts: int | None = Field(default=None, ge=1)


class RequirementSettings(BaseModel):
    """What the pre-install gate checks for."""

    supported_os: list[str] = Field(
        default_factory=lambda: ["ubuntu", "debian", "centos", "rhel", "rocky", "almalinux"]
    )
    require_root: bool = True
    packages: list[str] = Field(default_factory=list)
    commands: list[str] = Field(default_factory=lambda: ["curl", "git", "unzip", "crontab"])
    access_paths: list[str] = Field(default_factory=lambda: ["/var/www", "/etc"])


class AppSettings(BaseModel):
    """The Composer package that is SeAT itself."""

    package: str = "eveseat/seat"
    version: str = ""


class WebSettings(BaseModel):
    server_name: str = "_"


class InstallerConfig(BaseModel):
    """Root installer configuration."""

    install_path: str = "/var/www/seat"
    state_dir: str = "/var/lib/seat-installer"
    webserver: str = "apache"
    package_manager: Literal["auto", "apt", "dnf", "yum"] = "auto"

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    requirements: RequirementSettings = Field(default_factory=RequirementSettings)
    app: AppSettings = Field(default_factory=AppSettings)
    web: WebSettings = Field(default_factory=WebSettings)

    @property
    def credentials_file(self) -> Path:
        return Path(self.state_dir) / "mysql-credentials.json"

    @property
    def audit_file(self) -> Path:
        return Path(self.state_dir) / "audit.ndjson"

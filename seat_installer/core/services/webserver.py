"""
Web server backends — the interchangeable last stage of the install.

Each backend installs its packages, applies a hardening snippet and
writes the SeAT site. The set of backends is closed: a name that is
not in WEBSERVER_BACKENDS is a configuration error, raised before
anything on the host is touched.
"""

from __future__ import annotations

import glob
import logging
import os
from abc import ABC, abstractmethod
from typing import ClassVar

from seat_installer.adapters.registry import AdapterRegistry
from seat_installer.core.errors import ConfigurationError
from seat_installer.core.models.action import Receipt
from seat_installer.core.models.config import InstallerConfig
from seat_installer.core.services.base import HostService
from seat_installer.core.services.packages import PackageInstaller

logger = logging.getLogger(__name__)


class WebserverInstaller(HostService, ABC):
    """A web server variant. Called as install → harden → configure.

    Every stage is idempotent and may be invoked on its own.
    """

    name: ClassVar[str]
    step = "webserver"

    def __init__(
        self,
        config: InstallerConfig,
        registry: AdapterRegistry,
        packages: PackageInstaller,
        package_manager: str = "apt",
    ):
        super().__init__(config, registry, package_manager)
        self.packages = packages

    @property
    def document_root(self) -> str:
        return os.path.join(self.config.install_path, "public")

    @abstractmethod
    def install(self) -> Receipt:
        """Install and start the server."""

    @abstractmethod
    def harden(self) -> Receipt:
        """Apply the security baseline."""

    @abstractmethod
    def configure(self) -> Receipt:
        """Serve SeAT."""

    def _run_all(self, commands: list[tuple[str, list[str]]]) -> Receipt | None:
        """Run ``(action_id, command)`` pairs, stopping at the first failure."""
        for action_id, command in commands:
            receipt = self.run_command(action_id, command, " ".join(command))
            if receipt.failed:
                return receipt
        return None


# ── Apache ──────────────────────────────────────────────────────

APACHE_SECURITY = """\
# Managed by seat-installer
ServerTokens Prod
ServerSignature Off
TraceEnable Off
<IfModule mod_headers.c>
    Header always set X-Content-Type-Options "nosniff"
    Header always set X-Frame-Options "SAMEORIGIN"
</IfModule>
"""

APACHE_SITE = """\
# Managed by seat-installer
<VirtualHost *:80>
    ServerName {server_name}
    DocumentRoot {document_root}

    <Directory {document_root}>
        AllowOverride All
        Require all granted
        Options -Indexes +FollowSymLinks
    </Directory>

    ErrorLog ${{APACHE_LOG_DIR}}/seat-error.log
    CustomLog ${{APACHE_LOG_DIR}}/seat-access.log combined
</VirtualHost>
"""


class ApacheInstaller(WebserverInstaller):
    name = "apache"

    def install(self) -> Receipt:
        receipt = self.packages.install_package_group("apache")
        if receipt.failed:
            return receipt
        return self.enable_service("apache")

    def harden(self) -> Receipt:
        written = self.write_file("apache:security", self.path("apache_security"), APACHE_SECURITY)
        if written.failed:
            return written

        if self.pm == "apt":
            failed = self._run_all([
                ("apache:enable-headers", ["a2enmod", "headers"]),
                ("apache:enable-security", ["a2enconf", "seat-security"]),
            ])
            if failed:
                return failed

        return self.reload_if_changed(written)

    def configure(self) -> Receipt:
        site = APACHE_SITE.format(
            server_name=self.config.web.server_name,
            document_root=self.document_root,
        )
        if self.pm != "apt":
            site = site.replace("${APACHE_LOG_DIR}", "logs")

        written = self.write_file("apache:site", self.path("apache_site"), site)
        if written.failed:
            return written

        if self.pm == "apt":
            failed = self._run_all([
                ("apache:enable-rewrite", ["a2enmod", "rewrite"]),
                ("apache:enable-site", ["a2ensite", "seat"]),
                ("apache:disable-default", ["a2dissite", "000-default"]),
            ])
            if failed:
                return failed

        return self.reload_if_changed(written)

    def reload_if_changed(self, written: Receipt) -> Receipt:
        if not written.changed:
            return written
        check = self.run_command("apache:configtest", ["apachectl", "configtest"], "apachectl configtest")
        if check.failed:
            return check
        return self.run_command(
            "apache:reload",
            ["systemctl", "reload", self.service_name("apache")],
            "reload apache",
        )


# ── Nginx ───────────────────────────────────────────────────────

NGINX_SECURITY = """\
# Managed by seat-installer
server_tokens off;
add_header X-Content-Type-Options "nosniff" always;
add_header X-Frame-Options "SAMEORIGIN" always;
"""

NGINX_SITE = """\
# Managed by seat-installer
server {{
    listen 80;
    server_name {server_name};
    root {document_root};
    index index.php;

    location / {{
        try_files $uri $uri/ /index.php?$query_string;
    }}

    location ~ \\.php$ {{
        include fastcgi_params;
        fastcgi_param SCRIPT_FILENAME $realpath_root$fastcgi_script_name;
        fastcgi_pass unix:{fpm_socket};
    }}

    location ~ /\\.(?!well-known).* {{
        deny all;
    }}
}}
"""


class NginxInstaller(WebserverInstaller):
    name = "nginx"

    def php_fpm_service(self) -> str:
        """Debian ships versioned units (php8.1-fpm); RHEL a plain php-fpm."""
        units = sorted(glob.glob("/lib/systemd/system/php*-fpm.service"))
        if self.pm == "apt" and units:
            return os.path.basename(units[-1]).removesuffix(".service")
        return self.service_name("php-fpm")

    def install(self) -> Receipt:
        receipt = self.packages.install_package_group("nginx")
        if receipt.failed:
            return receipt

        receipt = self.enable_service("nginx")
        if receipt.failed:
            return receipt

        fpm = self.php_fpm_service()
        return self.run_command(
            f"service:enable:{fpm}",
            ["systemctl", "enable", "--now", fpm],
            description=f"enable {fpm}",
        )

    def harden(self) -> Receipt:
        written = self.write_file("nginx:security", self.path("nginx_security"), NGINX_SECURITY)
        if written.failed:
            return written
        return self.reload_if_changed(written)

    def configure(self) -> Receipt:
        site = NGINX_SITE.format(
            server_name=self.config.web.server_name,
            document_root=self.document_root,
            fpm_socket=self.path("php_fpm_socket"),
        )
        written = self.write_file("nginx:site", self.path("nginx_site"), site)
        if written.failed:
            return written

        enabled = self.path("nginx_enabled")
        if enabled:
            failed = self._run_all([
                ("nginx:enable-site", ["ln", "-sfn", self.path("nginx_site"), enabled]),
                ("nginx:disable-default", ["rm", "-f", "/etc/nginx/sites-enabled/default"]),
            ])
            if failed:
                return failed

        return self.reload_if_changed(written)

    def reload_if_changed(self, written: Receipt) -> Receipt:
        if not written.changed:
            return written
        check = self.run_command("nginx:configtest", ["nginx", "-t"], "nginx -t")
        if check.failed:
            return check
        return self.run_command("nginx:reload", ["systemctl", "reload", "nginx"], "reload nginx")


# ── Backend selection ───────────────────────────────────────────

WEBSERVER_BACKENDS: dict[str, type[WebserverInstaller]] = {
    ApacheInstaller.name: ApacheInstaller,
    NginxInstaller.name: NginxInstaller,
}


def available_webservers() -> list[str]:
    return list(WEBSERVER_BACKENDS)


def resolve_webserver(
    name: str,
    config: InstallerConfig,
    registry: AdapterRegistry,
    packages: PackageInstaller,
    package_manager: str = "apt",
) -> WebserverInstaller:
    """Map a webserver name to its installer. Touches nothing on the host.

    Raises:
        ConfigurationError: If ``name`` is not a known backend.
    """
    backend = WEBSERVER_BACKENDS.get(name.strip().lower())
    if backend is None:
        raise ConfigurationError(
            f"Unknown webserver '{name}'. Valid: {', '.join(available_webservers())}"
        )
    logger.debug("Resolved webserver '%s' → %s", name, backend.__name__)
    return backend(config, registry, packages, package_manager)

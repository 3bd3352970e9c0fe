"""
Re-running a step on a host where it already succeeded changes nothing.
"""

from pathlib import Path
from unittest.mock import patch

import pytest

from seat_installer.adapters.mock import MockAdapter
from seat_installer.core.models.credentials import Credentials
from seat_installer.core.services.composer import Composer
from seat_installer.core.services.crontab import Crontab
from seat_installer.core.services.packages import OsUpdates, PackageInstaller
from seat_installer.core.services.seat import SeatApp, render_env
from seat_installer.core.services.supervisor import Supervisor

pytestmark = pytest.mark.usefixtures("host_paths")


class TestSupervisor:
    def test_second_setup_does_not_reload(self, config, registry, shell: MockAdapter):
        supervisor = Supervisor(config, registry, "apt")
        supervisor.setup()
        assert shell.action_ids[-2:] == ["supervisor:reread", "supervisor:update"]
        shell.reset()

        receipt = supervisor.setup()

        assert receipt.ok
        assert not receipt.changed
        assert shell.action_ids == ["service:enable:supervisor"]

    def test_worker_runs_as_web_user(self, config, registry):
        conf = Supervisor(config, registry, "apt").render()
        assert "user=www-data" in conf
        assert f"{config.install_path}/artisan horizon" in conf


class TestCrontab:
    def test_second_install_is_unchanged(self, config, registry, tmp_path: Path):
        crontab = Crontab(config, registry, "apt")
        assert crontab.install().changed
        assert not crontab.install().changed

        entry = (tmp_path / "etc" / "cron.d" / "seat").read_text()
        assert f"* * * * * www-data php {config.install_path}/artisan schedule:run" in entry


class TestSeatApp:
    def test_existing_install_is_left_alone(self, config, registry, shell: MockAdapter):
        artisan = Path(config.install_path) / "artisan"
        artisan.parent.mkdir(parents=True)
        artisan.write_text("<?php")

        receipt = SeatApp(config, registry, "apt").install()

        assert receipt.ok
        assert not receipt.changed
        assert shell.call_count == 0

    def test_create_project_command(self, config, registry, shell: MockAdapter):
        config.app.version = "5.0"
        SeatApp(config, registry, "apt").install()
        command = shell.call_log[0].params["command"]
        assert command[:4] == ["composer", "create-project", "eveseat/seat", config.install_path]
        assert "5.0" in command

    def test_configure_keeps_existing_app_key(self, config, registry, shell: MockAdapter):
        env = Path(config.install_path) / ".env"
        env.parent.mkdir(parents=True)
        env.write_text("APP_KEY=base64:abc\nDB_PASSWORD=old\n")
        credentials = Credentials(username="seat", password="fresh pass", database="seat")

        receipt = SeatApp(config, registry, "apt").configure(credentials)

        assert receipt.ok
        assert "app:artisan:key:generate" not in shell.action_ids
        text = env.read_text()
        assert "APP_KEY=base64:abc" in text
        assert 'DB_PASSWORD="fresh pass"' in text
        assert "old" not in text

    def test_configure_generates_missing_key(self, config, registry, shell: MockAdapter):
        credentials = Credentials(username="seat", password="pw-123", database="seat")
        SeatApp(config, registry, "apt").configure(credentials)
        assert shell.action_ids[:3] == [
            "app:artisan:key:generate",
            "app:artisan:migrate",
            "app:artisan:db:seed",
        ]

    def test_failed_migration_stops_configure(self, config, registry, shell: MockAdapter):
        shell.set_failure("app:artisan:migrate", "SQLSTATE[HY000]")
        credentials = Credentials(username="seat", password="pw-123", database="seat")
        receipt = SeatApp(config, registry, "apt").configure(credentials)
        assert receipt.failed
        assert "app:permissions" not in shell.action_ids


class TestRenderEnv:
    def test_replaces_in_place_and_appends(self):
        out = render_env("APP_NAME=SeAT\nDB_HOST=db\n# comment\n", {"DB_HOST": "127.0.0.1", "NEW": "1"})
        assert out == "APP_NAME=SeAT\nDB_HOST=127.0.0.1\n# comment\nNEW=1\n"

    def test_quotes_when_needed(self):
        assert render_env("", {"A": "has space", "B": "", "C": 'q"uote'}).splitlines() == [
            'A="has space"',
            'B=""',
            'C="q\\"uote"',
        ]


class TestPackages:
    def test_installed_group_is_skipped(self, config, registry, shell: MockAdapter):
        with patch("seat_installer.core.services.packages.is_pkg_installed", return_value=True):
            receipt = PackageInstaller(config, registry, "apt").install_package_group("php")
        assert not receipt.changed
        assert shell.call_count == 0

    def test_only_missing_packages_are_installed(self, config, registry, shell: MockAdapter):
        installed = {"php-cli", "php-xml"}
        with patch(
            "seat_installer.core.services.packages.is_pkg_installed",
            side_effect=lambda pkg, pm: pkg in installed,
        ):
            PackageInstaller(config, registry, "apt").install_package_group("php")
        command = shell.call_log[0].params["command"]
        assert command[:3] == ["apt-get", "install", "-y"]
        assert not installed & set(command)
        assert shell.call_log[0].params["env"] == {"DEBIAN_FRONTEND": "noninteractive"}

    def test_unknown_group(self, config, registry):
        with pytest.raises(KeyError):
            PackageInstaller(config, registry, "apt").group("erlang")

    def test_dnf_install(self, config, registry, shell: MockAdapter):
        PackageInstaller(config, registry, "dnf").install_package("php-mysqlnd")
        assert shell.call_log[0].params["command"] == ["dnf", "install", "-y", "php-mysqlnd"]

    def test_os_update_apt(self, config, registry, shell: MockAdapter):
        assert OsUpdates(config, registry, "apt").update().ok
        assert shell.action_ids == ["os:refresh", "os:upgrade"]

    def test_os_update_refresh_failure(self, config, registry, shell: MockAdapter):
        shell.set_failure("os:refresh")
        assert OsUpdates(config, registry, "apt").update().failed
        assert shell.action_ids == ["os:refresh"]


class TestComposer:
    def _composer(self, config, registry) -> Composer:
        return Composer(config, registry, PackageInstaller(config, registry, "apt"), "apt")

    def test_present_composer_is_left_alone(self, config, registry, shell: MockAdapter):
        with patch("seat_installer.core.services.composer.shutil.which", return_value="/usr/local/bin/composer"):
            receipt = self._composer(config, registry).install()
        assert not receipt.changed
        assert shell.call_count == 0

    def test_installs_php_cli_first(self, config, registry, shell: MockAdapter):
        with patch("seat_installer.core.services.composer.shutil.which", return_value=None):
            self._composer(config, registry).install()
        assert shell.action_ids == ["packages:install:php-cli", "composer:install"]
        assert shell.call_log[1].params["shell"] is True

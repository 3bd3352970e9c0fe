"""
Crontab setup — drives Laravel's scheduler once a minute.
"""

from __future__ import annotations

from seat_installer.core.data.packages import WEB_USER
from seat_installer.core.models.action import Receipt
from seat_installer.core.services.base import HostService

CRON_FILE = "/etc/cron.d/seat"

CRON_TEMPLATE = """\
# Managed by seat-installer
SHELL=/bin/sh
PATH=/usr/local/sbin:/usr/local/bin:/sbin:/bin:/usr/sbin:/usr/bin

* * * * * {user} php {install_path}/artisan schedule:run >> /dev/null 2>&1
"""


class Crontab(HostService):
    """Installs the scheduler entry as a cron.d drop-in."""

    step = "cron"

    def render(self) -> str:
        return CRON_TEMPLATE.format(user=WEB_USER[self.pm], install_path=self.config.install_path)

    def install(self) -> Receipt:
        # cron.d files must not be group/world writable or cron ignores them
        return self.write_file("cron:schedule", CRON_FILE, self.render(), mode=0o644)

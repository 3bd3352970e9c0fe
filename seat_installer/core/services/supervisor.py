"""
Supervisor setup — keeps SeAT's queue workers running.
"""

from __future__ import annotations

import logging

from seat_installer.core.data.packages import WEB_USER
from seat_installer.core.models.action import Receipt
from seat_installer.core.services.base import HostService

logger = logging.getLogger(__name__)

WORKER_TEMPLATE = """\
; Managed by seat-installer
[program:seat]
command=/usr/bin/php {install_path}/artisan horizon
process_name=%(program_name)s
directory={install_path}
user={user}
autostart=true
autorestart=true
stopwaitsecs=600
stdout_logfile={install_path}/storage/logs/horizon.log
redirect_stderr=true
"""


class Supervisor(HostService):
    """Writes the worker program definition and loads it."""

    step = "supervisor"

    def render(self) -> str:
        return WORKER_TEMPLATE.format(
            install_path=self.config.install_path,
            user=WEB_USER[self.pm],
        )

    def setup(self) -> Receipt:
        receipt = self.enable_service("supervisor")
        if receipt.failed:
            return receipt

        written = self.write_file("supervisor:program", self.path("supervisor_conf"), self.render())
        if written.failed:
            return written
        if not written.changed:
            logger.info("Supervisor worker config already current")
            return written

        receipt = self.run_command("supervisor:reread", ["supervisorctl", "reread"], "supervisorctl reread")
        if receipt.failed:
            return receipt
        return self.run_command("supervisor:update", ["supervisorctl", "update"], "supervisorctl update")

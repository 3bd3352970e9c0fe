"""
Orchestrator — runs one production install from start to finish.

    Init → Confirmed → (one state per step) → Done
      ↘ Aborted  (declined, bad variant, failed gate, failed step)

The pipeline is forward-only. A failed step stops the run where it
is; steps that already completed are not undone, and re-running the
installer relies on every step being idempotent.
"""

from __future__ import annotations

import logging
import socket
import time
import uuid
from datetime import UTC, datetime

from seat_installer.adapters.registry import AdapterRegistry
from seat_installer.core.engine.steps import InstallationPlan, RunContext, Services, build_plan
from seat_installer.core.errors import (
    ConfigurationError,
    InstallerError,
    RequirementUnsatisfied,
    StepFailure,
    UserDeclined,
)
from seat_installer.core.models.config import InstallerConfig
from seat_installer.core.models.run import Outcome, RunState
from seat_installer.core.operator import Operator
from seat_installer.core.persistence.audit import AuditEntry, AuditWriter
from seat_installer.core.services.packages import detect_package_manager
from seat_installer.core.services.webserver import available_webservers, resolve_webserver

logger = logging.getLogger(__name__)

SUMMARY = [
    "Check the needed software dependencies.",
    "Check the needed commands and OS packages.",
    "Check access to the filesystem.",
    "Ensure the OS is up to date.",
    "Install or connect to MySQL, then install SeAT, Supervisor, cron and a web server.",
]


def generate_run_id() -> str:
    now = datetime.now(UTC).strftime("%Y%m%d-%H%M%S")
    return f"install-{now}-{uuid.uuid4().hex[:6]}"


class Orchestrator:
    """Drives the installation plan against one host."""

    def __init__(
        self,
        config: InstallerConfig,
        operator: Operator,
        registry: AdapterRegistry,
        *,
        package_manager: str | None = None,
        services: Services | None = None,
        plan: InstallationPlan | None = None,
        audit: AuditWriter | None = None,
        hostname: str | None = None,
    ):
        self.config = config
        self.operator = operator
        self.registry = registry
        self.package_manager = package_manager or detect_package_manager(config)
        self.services = services or Services.build(config, registry, self.package_manager)
        self.plan = plan or build_plan()
        self.audit = audit
        self.hostname = hostname or socket.gethostname()

    def run(self) -> Outcome:
        run_id = generate_run_id()
        start = time.monotonic()
        ctx = RunContext(
            config=self.config,
            operator=self.operator,
            registry=self.registry,
            services=self.services,
        )
        current = "confirm"

        self.operator.title("SeAT Installer")
        logger.info("Starting install run %s on %s", run_id, self.hostname)

        try:
            self._confirm()
            ctx.state = RunState.CONFIRMED

            current = "select-webserver"
            self._select_webserver(ctx)

            for step in self.plan:
                current = step.name
                logger.info("▶ %s", step.name)
                step.run(ctx)
                ctx.state = step.reaches
                ctx.completed.append(step.name)

        except InstallerError as e:
            failed_step = e.step if isinstance(e, StepFailure) else current
            outcome = Outcome.aborted(
                last_state=ctx.state,
                reason=str(e),
                failed_step=failed_step,
                error_kind=e.kind,
                steps_completed=ctx.completed,
            )
            ctx.state = RunState.ABORTED
            self._report_abort(e, failed_step)
        else:
            ctx.state = RunState.DONE
            outcome = Outcome.success(ctx.completed)
            self.operator.success("Installation complete!")
            self.operator.text("Remember to set an admin password with 'php artisan seat:admin:reset'")

        logger.info(
            "Install run %s ended: %s (last state %s)",
            run_id, outcome.status, outcome.last_state.value,
        )
        self._record(run_id, ctx, outcome, int((time.monotonic() - start) * 1000))
        return outcome

    def _confirm(self) -> None:
        self.operator.text(
            f"This installer will install SeAT on this server with hostname: {self.hostname}"
        )
        self.operator.text()
        self.operator.text("The following is a short summary of actions that will be performed:")
        self.operator.text()
        self.operator.listing(SUMMARY)
        self.operator.text("It may be needed to restart the installer sometimes to continue.")

        if not self.operator.confirm("Would like to continue with the installation?"):
            raise UserDeclined("Installer stopped via user cancel.")

    def _select_webserver(self, ctx: RunContext) -> None:
        choices = available_webservers()
        default = self.config.webserver.strip().lower()
        if default not in choices:
            raise ConfigurationError(
                f"Configured webserver '{self.config.webserver}' is not one of: {', '.join(choices)}"
            )
        ctx.webserver_choice = self.operator.choose(
            "Which webserver do you want to use?", choices, default,
        )
        ctx.webserver = resolve_webserver(
            ctx.webserver_choice,
            self.config,
            self.registry,
            self.services.packages,
            self.services.packages.pm,
        )

    def _report_abort(self, error: InstallerError, failed_step: str) -> None:
        if isinstance(error, UserDeclined):
            self.operator.text(str(error))
            return

        if isinstance(error, RequirementUnsatisfied):
            self.operator.error("Requirements check failed. Please fix the following and retry:")
            self.operator.listing([
                f"[{r.category.value}] {r.name}" + (f": {r.detail}" if r.detail else "")
                for r in error.requirements.unsatisfied()
            ])
            return

        self.operator.error(f"Installation aborted during '{failed_step}': {error}")

    def _record(self, run_id: str, ctx: RunContext, outcome: Outcome, duration_ms: int) -> None:
        if self.audit is None:
            return
        self.audit.write(AuditEntry(
            run_id=run_id,
            hostname=self.hostname,
            status=outcome.status,
            state=outcome.state.value,
            last_state=outcome.last_state.value,
            webserver=ctx.webserver_choice,
            steps_completed=outcome.steps_completed,
            failed_step=outcome.failed_step,
            error_kind=outcome.error_kind,
            reason=outcome.reason,
            duration_ms=duration_ms,
            mock=self.registry.mock_mode,
        ))

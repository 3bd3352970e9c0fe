"""
Step registry — the fixed, ordered provisioning pipeline.

Each Step is a named function of the RunContext that either returns
(the host reached the step's state) or raises an InstallerError.
The plan is a tuple: built once, never reordered.

Flow:
    requirements → dependencies → os-update → credentials → packages
    → app → supervisor → cron → webserver
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field

from seat_installer.adapters.registry import AdapterRegistry
from seat_installer.core.errors import RequirementUnsatisfied, StepFailure, require
from seat_installer.core.models.config import InstallerConfig
from seat_installer.core.models.credentials import Credentials
from seat_installer.core.models.requirements import RequirementSet
from seat_installer.core.models.run import RunState
from seat_installer.core.operator import Operator
from seat_installer.core.services.composer import Composer
from seat_installer.core.services.credentials import CredentialNegotiator, ensure_database_driver
from seat_installer.core.services.crontab import Crontab
from seat_installer.core.services.mysql import MySql
from seat_installer.core.services.packages import OsUpdates, PackageInstaller
from seat_installer.core.services.requirements import RequirementChecker
from seat_installer.core.services.seat import SeatApp
from seat_installer.core.services.supervisor import Supervisor
from seat_installer.core.services.webserver import WebserverInstaller

logger = logging.getLogger(__name__)

PACKAGE_GROUPS = ("php", "redis", "supervisor")


@dataclass
class Services:
    """The host collaborators one run works with."""

    requirements: RequirementChecker
    packages: PackageInstaller
    os_updates: OsUpdates
    composer: Composer
    mysql: MySql
    seat: SeatApp
    supervisor: Supervisor
    crontab: Crontab

    @classmethod
    def build(
        cls,
        config: InstallerConfig,
        registry: AdapterRegistry,
        package_manager: str | None,
    ) -> Services:
        # An undetected package manager fails the requirement gate
        # before any of these services run.
        pm = package_manager or "apt"
        packages = PackageInstaller(config, registry, pm)
        return cls(
            requirements=RequirementChecker(config, package_manager),
            packages=packages,
            os_updates=OsUpdates(config, registry, pm),
            composer=Composer(config, registry, packages, pm),
            mysql=MySql(config, registry, packages, pm),
            seat=SeatApp(config, registry, pm),
            supervisor=Supervisor(config, registry, pm),
            crontab=Crontab(config, registry, pm),
        )


@dataclass
class RunContext:
    """Everything one run shares between its steps."""

    config: InstallerConfig
    operator: Operator
    registry: AdapterRegistry
    services: Services
    webserver_choice: str = ""
    webserver: WebserverInstaller | None = None
    credentials: Credentials | None = None
    requirements: RequirementSet | None = None
    state: RunState = RunState.INIT
    completed: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class Step:
    """One idempotent unit of provisioning work."""

    name: str
    reaches: RunState
    run: Callable[[RunContext], None]
    description: str = ""


@dataclass(frozen=True)
class InstallationPlan:
    """Ordered, immutable sequence of steps."""

    steps: tuple[Step, ...]

    def __iter__(self) -> Iterator[Step]:
        return iter(self.steps)

    def __len__(self) -> int:
        return len(self.steps)

    @property
    def names(self) -> list[str]:
        return [s.name for s in self.steps]


# ── Steps ───────────────────────────────────────────────────────


def check_requirements(ctx: RunContext) -> None:
    ctx.operator.text("Checking Requirements")
    checker = ctx.services.requirements
    ctx.requirements = checker.check_all()
    logger.debug("Requirements: %s", ctx.requirements.to_dict())

    if not checker.has_all_requirements():
        raise RequirementUnsatisfied(ctx.requirements)

    ctx.operator.success("Passed requirements check")


def bootstrap_dependencies(ctx: RunContext) -> None:
    ctx.operator.text("Checking Composer installation")
    require(ctx.services.composer.install(), "dependencies", "install composer")


def update_os(ctx: RunContext) -> None:
    ctx.operator.text("Updating Operating System")
    require(ctx.services.os_updates.update(), "os-update")
    ctx.operator.success("Operating System Update Complete")


def negotiate_credentials(ctx: RunContext) -> None:
    services = ctx.services
    require(ensure_database_driver(services.packages), "credentials", "install database driver")

    negotiator = CredentialNegotiator(
        services.mysql,
        ctx.operator,
        max_attempts=ctx.config.database.max_attempts,
    )
    ctx.credentials = negotiator.negotiate()


def install_packages(ctx: RunContext) -> None:
    ctx.operator.text("Installing OS packages")
    packages = ctx.services.packages
    for group in PACKAGE_GROUPS:
        require(packages.install_package_group(group), "packages", f"package group '{group}'")
    require(packages.enable_service("redis"), "packages", "enable redis")


def install_app(ctx: RunContext) -> None:
    ctx.operator.text("Installing SeAT")
    credentials = ctx.credentials
    if credentials is None:
        logger.info("No credentials negotiated this run, reading the saved record")
        credentials = ctx.services.mysql.saved_credentials()
    if credentials is None:
        raise StepFailure("app", "No database credentials available")

    seat = ctx.services.seat
    seat.set_path(ctx.config.install_path)
    require(seat.install(), "app", "install SeAT")
    require(seat.configure(credentials), "app", "configure SeAT")


def setup_supervisor(ctx: RunContext) -> None:
    ctx.operator.text("Configuring Supervisor")
    require(ctx.services.supervisor.setup(), "supervisor")


def setup_crontab(ctx: RunContext) -> None:
    ctx.operator.text("Installing crontab entry")
    require(ctx.services.crontab.install(), "cron")


def install_webserver(ctx: RunContext) -> None:
    backend = ctx.webserver
    if backend is None:
        raise StepFailure("webserver", "No webserver backend was selected")

    ctx.operator.text(f"Installing {backend.name}")
    require(backend.install(), "webserver", f"{backend.name} install")
    require(backend.harden(), "webserver", f"{backend.name} harden")
    require(backend.configure(), "webserver", f"{backend.name} configure")


def build_plan() -> InstallationPlan:
    """The production install pipeline, in its only valid order."""
    return InstallationPlan(steps=(
        Step("requirements", RunState.REQUIREMENTS_CHECKED, check_requirements,
             "Check software, packages, filesystem access and commands"),
        Step("dependencies", RunState.DEPENDENCIES_READY, bootstrap_dependencies,
             "Make sure Composer is available"),
        Step("os-update", RunState.OS_UPDATED, update_os,
             "Bring the operating system up to date"),
        Step("credentials", RunState.CREDENTIALS_READY, negotiate_credentials,
             "Install or connect to MySQL and verify credentials"),
        Step("packages", RunState.PACKAGES_INSTALLED, install_packages,
             "Install PHP, Redis and Supervisor"),
        Step("app", RunState.APP_INSTALLED, install_app,
             "Install and configure SeAT"),
        Step("supervisor", RunState.SUPERVISOR_READY, setup_supervisor,
             "Run the queue workers under Supervisor"),
        Step("cron", RunState.CRON_READY, setup_crontab,
             "Schedule the SeAT task runner"),
        Step("webserver", RunState.WEBSERVER_READY, install_webserver,
             "Install, harden and configure the web server"),
    ))

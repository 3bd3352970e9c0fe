"""
Credential negotiation — obtain database credentials SeAT can trust.

Two branches, chosen by whether a database engine already exists:

    existing engine → ask the operator, test, re-ask until a test passes
    fresh engine    → install, configure, generate, test once

Both end the same way: a connection test against the exact
credentials has passed, they are saved, and only then returned.
"""

from __future__ import annotations

import logging

from seat_installer.core.data.packages import DATABASE_DRIVER
from seat_installer.core.errors import StepFailure, TransientCredentialFailure, require
from seat_installer.core.models.action import Receipt
from seat_installer.core.models.credentials import Credentials
from seat_installer.core.operator import Operator
from seat_installer.core.services.mysql import MySql
from seat_installer.core.services.packages import PackageInstaller

logger = logging.getLogger(__name__)

STEP = "credentials"

REQUIRED_PRIVILEGES = "CREATE, LOCK TABLES, INDEX, INSERT, SELECT, UPDATE, DELETE, DROP, ALTER"


def ensure_database_driver(packages: PackageInstaller) -> Receipt:
    """Install PHP's MySQL driver unless it is already present."""
    driver = DATABASE_DRIVER[packages.pm]
    return packages.install_package(driver)


class CredentialNegotiator:
    """Produces verified, persisted database credentials."""

    def __init__(
        self,
        mysql: MySql,
        operator: Operator,
        max_attempts: int | None = None,
    ):
        self.mysql = mysql
        self.operator = operator
        self.max_attempts = max_attempts

    def negotiate(self) -> Credentials:
        if self.mysql.is_installed():
            credentials = self._from_existing_engine()
        else:
            credentials = self._from_fresh_engine()

        require(self.mysql.save_credentials(), STEP, "save credentials")
        return credentials

    # ── Existing engine ─────────────────────────────────────────

    def _from_existing_engine(self) -> Credentials:
        self.operator.warning("MySQL appears to already be installed.")

        saved = self.mysql.saved_credentials()
        if saved is not None and self._reuse_saved(saved):
            return saved

        self._explain_privileges()

        attempt = 0
        while True:
            attempt += 1
            try:
                credentials = self._attempt()
            except TransientCredentialFailure as e:
                self.operator.error(f"Unable to connect to MySQL. Please retry. ({e})")
                if self.max_attempts is not None and attempt >= self.max_attempts:
                    raise StepFailure(
                        STEP, f"No working database credentials after {attempt} attempts",
                    ) from e
                continue

            self.operator.success("Database connected!")
            return credentials

    def _attempt(self) -> Credentials:
        self.operator.text("Please provide database details:")
        credentials = Credentials(
            username=self.operator.ask("Username"),
            password=self.operator.ask_hidden("Password"),
            database=self.operator.ask("Database"),
            host=self.mysql.config.database.host,
            source="probed",
        )
        self.mysql.set_credentials(credentials)

        check = self.mysql.check_credentials()
        if not check.ok:
            logger.info("Connection test failed for %s@%s", credentials.username, credentials.database)
            raise TransientCredentialFailure(check.reason)
        return self.mysql.get_credentials()

    def _reuse_saved(self, saved: Credentials) -> bool:
        if not self.operator.confirm(
            f"Use the saved credentials for {saved.username}@{saved.database}?",
            default=True,
        ):
            return False

        self.mysql.set_credentials(saved)
        check = self.mysql.check_credentials()
        if check.ok:
            self.operator.success("Database connected with saved credentials!")
            return True

        self.operator.error(f"Saved credentials no longer work: {check.reason}")
        return False

    def _explain_privileges(self) -> None:
        db = self.mysql.config.database
        self.operator.text(
            "Entering mode to get access details for SeAT to use. It is recommended "
            "that you create a *new* database and MySQL user for SeAT. The user must "
            "have the following MySQL privileges on the SeAT database:"
        )
        self.operator.text(REQUIRED_PRIVILEGES)
        self.operator.text("A user can be created with the following SQL statements:")
        self.operator.text(f"CREATE USER '{db.username}'@'localhost' IDENTIFIED BY 'password';")
        self.operator.text(f"GRANT ALL ON {db.database}.* TO '{db.username}'@'localhost';")
        self.operator.text()

    # ── Fresh engine ────────────────────────────────────────────

    def _from_fresh_engine(self) -> Credentials:
        self.operator.text("Installing MySQL")
        require(self.mysql.install(), STEP, "install database engine")
        require(self.mysql.configure(), STEP, "configure database engine")

        check = self.mysql.check_credentials()
        if not check.ok:
            raise StepFailure(STEP, f"Generated credentials failed the connection test: {check.reason}")

        self.operator.success("Database installed and configured!")
        return self.mysql.get_credentials()

"""
Installer error taxonomy.

Adapters never raise; services turn failed receipts into these
exceptions and the orchestrator is the only place that catches them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from seat_installer.core.models.action import Receipt
    from seat_installer.core.models.requirements import RequirementSet


class InstallerError(Exception):
    """Base class for every failure that ends an install run."""

    kind = "error"


class UserDeclined(InstallerError):
    """The operator declined to continue. Not an error, just a stop."""

    kind = "user_declined"


class RequirementUnsatisfied(InstallerError):
    """One or more host preconditions are missing."""

    kind = "requirements"

    def __init__(self, requirements: RequirementSet):
        self.requirements = requirements
        names = [f"{r.category.value}:{r.name}" for r in requirements.unsatisfied()]
        super().__init__(f"Missing requirements: {', '.join(names)}")


class ConfigurationError(InstallerError):
    """Invalid installer configuration (config file, backend variant)."""

    kind = "configuration"


class TransientCredentialFailure(InstallerError):
    """A database connection test failed. Recovered by re-prompting."""

    kind = "credentials"


class StepFailure(InstallerError):
    """A pipeline step could not complete."""

    kind = "step_failure"

    def __init__(self, step: str, message: str):
        self.step = step
        super().__init__(f"[{step}] {message}")


def require(receipt: Receipt, step: str, what: str = "") -> Receipt:
    """Return ``receipt`` if it succeeded, otherwise raise StepFailure."""
    if receipt.failed:
        detail = receipt.error or "unknown error"
        raise StepFailure(step, f"{what}: {detail}" if what else detail)
    return receipt

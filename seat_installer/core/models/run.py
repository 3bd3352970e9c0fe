"""
Run models — the orchestrator's state machine and its final outcome.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class RunState(str, Enum):
    """Where an install run is. Each step moves it exactly one state on."""

    INIT = "init"
    CONFIRMED = "confirmed"
    REQUIREMENTS_CHECKED = "requirements_checked"
    DEPENDENCIES_READY = "dependencies_ready"
    OS_UPDATED = "os_updated"
    CREDENTIALS_READY = "credentials_ready"
    PACKAGES_INSTALLED = "packages_installed"
    APP_INSTALLED = "app_installed"
    SUPERVISOR_READY = "supervisor_ready"
    CRON_READY = "cron_ready"
    WEBSERVER_READY = "webserver_ready"
    DONE = "done"
    ABORTED = "aborted"


@dataclass
class Outcome:
    """How an install run ended."""

    status: str = "completed"          # completed | aborted
    state: RunState = RunState.DONE    # DONE or ABORTED
    last_state: RunState = RunState.DONE
    reason: str = ""
    failed_step: str | None = None
    error_kind: str | None = None
    steps_completed: list[str] = field(default_factory=list)

    @property
    def completed(self) -> bool:
        return self.status == "completed"

    @classmethod
    def success(cls, steps_completed: list[str]) -> Outcome:
        return cls(
            status="completed",
            state=RunState.DONE,
            last_state=RunState.DONE,
            steps_completed=list(steps_completed),
        )

    @classmethod
    def aborted(
        cls,
        last_state: RunState,
        reason: str,
        failed_step: str | None,
        error_kind: str,
        steps_completed: list[str],
    ) -> Outcome:
        return cls(
            status="aborted",
            state=RunState.ABORTED,
            last_state=last_state,
            reason=reason,
            failed_step=failed_step,
            error_kind=error_kind,
            steps_completed=list(steps_completed),
        )

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "state": self.state.value,
            "last_state": self.last_state.value,
            "reason": self.reason,
            "failed_step": self.failed_step,
            "error_kind": self.error_kind,
            "steps_completed": self.steps_completed,
        }

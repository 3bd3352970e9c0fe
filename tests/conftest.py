"""
Shared test fixtures and configuration.
"""

from pathlib import Path

import pytest

from seat_installer.adapters.mock import MockAdapter
from seat_installer.adapters.registry import AdapterRegistry
from seat_installer.adapters.shell.filesystem import FilesystemAdapter
from seat_installer.core.data.packages import PATHS
from seat_installer.core.models.config import InstallerConfig
from seat_installer.core.operator import Operator


class ScriptedOperator(Operator):
    """Operator that answers from pre-loaded scripts and records output.

    Running out of scripted answers is a test bug, so ``ask`` and
    ``ask_hidden`` raise instead of looping forever.
    """

    def __init__(
        self,
        confirms: list[bool] | None = None,
        choices: list[str] | None = None,
        answers: list[str] | None = None,
        hidden: list[str] | None = None,
    ):
        self.confirms = list(confirms or [])
        self.choices = list(choices or [])
        self.answers = list(answers or [])
        self.hidden = list(hidden or [])
        self.messages: list[tuple[str, str]] = []
        self.questions: list[str] = []

    def said(self, kind: str) -> list[str]:
        return [msg for k, msg in self.messages if k == kind]

    def title(self, message: str) -> None:
        self.messages.append(("title", message))

    def text(self, message: str = "") -> None:
        self.messages.append(("text", message))

    def listing(self, items: list[str]) -> None:
        for item in items:
            self.messages.append(("listing", item))

    def success(self, message: str) -> None:
        self.messages.append(("success", message))

    def warning(self, message: str) -> None:
        self.messages.append(("warning", message))

    def error(self, message: str) -> None:
        self.messages.append(("error", message))

    def confirm(self, question: str, default: bool = False) -> bool:
        self.questions.append(question)
        return self.confirms.pop(0) if self.confirms else default

    def choose(self, question: str, choices: list[str], default: str) -> str:
        self.questions.append(question)
        return self.choices.pop(0) if self.choices else default

    def ask(self, question: str, default: str | None = None) -> str:
        self.questions.append(question)
        if not self.answers:
            raise AssertionError(f"Unscripted question: {question}")
        return self.answers.pop(0)

    def ask_hidden(self, question: str) -> str:
        self.questions.append(question)
        if not self.hidden:
            raise AssertionError(f"Unscripted hidden question: {question}")
        return self.hidden.pop(0)


@pytest.fixture
def config(tmp_path: Path) -> InstallerConfig:
    """Installer config rooted in a temporary directory."""
    return InstallerConfig(
        install_path=str(tmp_path / "www" / "seat"),
        state_dir=str(tmp_path / "state"),
        package_manager="apt",
    )


@pytest.fixture
def shell() -> MockAdapter:
    """Stands in for the shell adapter; records every command."""
    return MockAdapter(adapter_name="shell")


@pytest.fixture
def registry(shell: MockAdapter) -> AdapterRegistry:
    """Mocked shell, real filesystem."""
    reg = AdapterRegistry()
    reg.register(shell)
    reg.register(FilesystemAdapter())
    return reg


@pytest.fixture
def host_paths(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Redirect every managed config file into a temporary /etc."""
    etc = tmp_path / "etc"
    paths = {key: str(etc / key) for key in PATHS["apt"]}
    monkeypatch.setitem(PATHS, "apt", paths)
    monkeypatch.setattr(
        "seat_installer.core.services.crontab.CRON_FILE", str(etc / "cron.d" / "seat"),
    )
    return paths


@pytest.fixture(autouse=True)
def no_installed_packages(monkeypatch: pytest.MonkeyPatch) -> None:
    """Never shell out to dpkg/rpm from tests. Everything looks missing."""
    monkeypatch.setattr(
        "seat_installer.core.services.packages.is_pkg_installed",
        lambda pkg, pm: False,
    )

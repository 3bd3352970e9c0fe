"""
Operator I/O — how the installer talks to the person running it.

The engine only sees this interface. The CLI plugs in a click-backed
implementation; tests plug in a scripted one.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class Operator(ABC):
    """Blocking, synchronous operator interaction."""

    # ── Output ──────────────────────────────────────────────────

    @abstractmethod
    def title(self, message: str) -> None: ...

    @abstractmethod
    def text(self, message: str = "") -> None: ...

    @abstractmethod
    def listing(self, items: list[str]) -> None: ...

    @abstractmethod
    def success(self, message: str) -> None: ...

    @abstractmethod
    def warning(self, message: str) -> None: ...

    @abstractmethod
    def error(self, message: str) -> None: ...

    # ── Input ───────────────────────────────────────────────────

    @abstractmethod
    def confirm(self, question: str, default: bool = False) -> bool: ...

    @abstractmethod
    def choose(self, question: str, choices: list[str], default: str) -> str:
        """Pick one of ``choices``; ``default`` when the answer is empty."""

    @abstractmethod
    def ask(self, question: str, default: str | None = None) -> str: ...

    @abstractmethod
    def ask_hidden(self, question: str) -> str:
        """Free-text input that is not echoed."""

"""
Click-backed operator — console prompts and styled output.
"""

from __future__ import annotations

import click

from seat_installer.core.operator import Operator


class ClickOperator(Operator):
    """Operator that prompts on the terminal via click."""

    def title(self, message: str) -> None:
        click.echo()
        click.secho(message, fg="cyan", bold=True)
        click.secho("=" * len(message), fg="cyan")
        click.echo()

    def text(self, message: str = "") -> None:
        click.echo(f" {message}" if message else "")

    def listing(self, items: list[str]) -> None:
        for item in items:
            click.echo(f"  • {item}")
        click.echo()

    def success(self, message: str) -> None:
        click.secho(f"✅ {message}", fg="green", bold=True)

    def warning(self, message: str) -> None:
        click.secho(f"⚠️  {message}", fg="yellow")

    def error(self, message: str) -> None:
        click.secho(f"❌ {message}", fg="red", err=True)

    def confirm(self, question: str, default: bool = False) -> bool:
        return click.confirm(question, default=default)

    def choose(self, question: str, choices: list[str], default: str) -> str:
        return click.prompt(
            question,
            type=click.Choice(choices, case_sensitive=False),
            default=default,
            show_choices=True,
        )

    def ask(self, question: str, default: str | None = None) -> str:
        return click.prompt(question, default=default)

    def ask_hidden(self, question: str) -> str:
        return click.prompt(question, hide_input=True, default="", show_default=False)

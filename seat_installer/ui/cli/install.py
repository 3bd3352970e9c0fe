"""
CLI commands for installing SeAT.

Thin wrappers over ``seat_installer.core.engine.orchestrator``.
"""

from __future__ import annotations

import json
import sys

import click

from seat_installer.core.errors import ConfigurationError
from seat_installer.core.models.config import InstallerConfig


def _load_config(ctx: click.Context) -> InstallerConfig:
    """Load the installer config or exit with the reason."""
    from seat_installer.core.config.loader import load_config

    try:
        return load_config(ctx.obj.get("config_path"))
    except ConfigurationError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)


@click.group()
def install() -> None:
    """Install — provision SeAT on this host."""


@install.command()
@click.option("--mock", is_flag=True, help="Walk the whole install without changing the host.")
@click.pass_context
def production(ctx: click.Context, mock: bool) -> None:
    """Install SeAT for production use."""
    from seat_installer.adapters.registry import default_registry
    from seat_installer.core.engine.orchestrator import Orchestrator
    from seat_installer.core.persistence.audit import AuditWriter
    from seat_installer.ui.cli.operator import ClickOperator

    config = _load_config(ctx)
    registry = default_registry(mock_mode=mock)
    if mock:
        click.secho(
            "⚠️  Mock mode: install commands and file writes are simulated. "
            f"This run is still recorded in {config.audit_file}",
            fg="yellow",
        )

    orchestrator = Orchestrator(
        config,
        ClickOperator(),
        registry,
        audit=AuditWriter(config.audit_file),
    )
    outcome = orchestrator.run()
    if mock:
        click.secho(f"[mock] {len(registry.simulated)} host actions simulated", dim=True)
    sys.exit(0 if outcome.completed else 1)


@install.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def requirements(ctx: click.Context, as_json: bool) -> None:
    """Check this host against the install requirements. Changes nothing."""
    from seat_installer.core.services.requirements import RequirementChecker

    config = _load_config(ctx)
    checker = RequirementChecker(config)
    result = checker.check_all()

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.has_all_requirements else 1)

    for category, items in result.results.items():
        click.secho(f"📋 {category.value.title()}", fg="cyan", bold=True)
        for item in items:
            icon = "✅" if item.satisfied else "❌"
            detail = f" ({item.detail})" if item.detail else ""
            click.echo(f"   {icon} {item.name}{detail}")

    click.echo()
    if result.has_all_requirements:
        click.secho("✅ All requirements satisfied", fg="green", bold=True)
    else:
        click.secho("❌ Requirements not satisfied", fg="red", bold=True)
        sys.exit(1)

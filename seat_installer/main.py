"""
SeAT Installer — CLI entrypoint.

Usage:
    seat-installer --help
    seat-installer install production
    seat-installer install requirements --json
"""

from __future__ import annotations

from pathlib import Path

import click

from seat_installer import __version__
from seat_installer.core.observability.logging_config import setup_logging
from seat_installer.ui.cli.install import install


def _console_level(debug: bool, verbose: bool, quiet: bool, fallback: str) -> str:
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return fallback


@click.group()
@click.version_option(version=__version__, prog_name="seat-installer")
@click.option("--verbose", "-v", is_flag=True, help="Log each host action as it runs.")
@click.option("--quiet", "-q", is_flag=True, help="Only log errors.")
@click.option("--debug", is_flag=True, help="Log commands, params and source lines.")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to seat-installer.yml (default: auto-detect).",
)
@click.option(
    "--log-level",
    envvar="SEAT_INSTALLER_LOG_LEVEL",
    default="WARNING",
    show_default=True,
    help="Console level when no verbosity flag is given.",
)
@click.option(
    "--log-file",
    envvar="SEAT_INSTALLER_LOG_FILE",
    type=click.Path(dir_okay=False),
    default=None,
    help="Also write the full log here. Passwords are masked.",
)
@click.option(
    "--log-file-level",
    envvar="SEAT_INSTALLER_LOG_FILE_LEVEL",
    default=None,
    help="Level for --log-file (default: the console level).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: Path | None,
    log_level: str,
    log_file: str | None,
    log_file_level: str | None,
) -> None:
    """SeAT Installer — provision a SeAT production instance on this host."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path

    setup_logging(
        level=_console_level(debug, verbose, quiet, log_level),
        log_file=log_file,
        log_file_level=log_file_level,
    )


cli.add_command(install)


if __name__ == "__main__":
    cli()

"""
Shell command adapter — run host commands and capture output.

This is the single place where ``subprocess.run`` is called for
mutating install work (package installs, service restarts, composer).
Read-only probes used by the requirement gate call subprocess directly.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from pathlib import Path

from seat_installer.adapters.base import Adapter, ExecutionContext
from seat_installer.core.models.action import Receipt

logger = logging.getLogger(__name__)

_OUTPUT_LIMIT = 2000


class ShellCommandAdapter(Adapter):
    """Execute commands and capture output.

    Action params:
        command (list[str] | str): Argument list, or a string when ``shell`` is set.
        shell (bool): Run through ``sh -c`` (default: False).
        timeout (int): Timeout in seconds (default: 900).
        cwd (str): Working directory.
        env (dict): Extra environment variables. Never logged.
        input (str): Data piped to stdin.
    """

    @property
    def name(self) -> str:
        return "shell"

    def is_available(self) -> bool:
        return shutil.which("sh") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        command = context.params.get("command")
        if not command:
            return False, "Missing required param: 'command'"

        if isinstance(command, str) and not context.params.get("shell", False):
            return False, "String commands require shell=True"

        cwd = context.working_dir
        if cwd and not Path(cwd).is_dir():
            return False, f"Working directory does not exist: {cwd}"

        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        command = context.params["command"]
        printable = command if isinstance(command, str) else " ".join(command)
        logger.debug("Executing: %s (cwd=%s)", printable, context.working_dir)

        try:
            result = subprocess.run(
                command,
                shell=context.params.get("shell", False),
                cwd=context.working_dir,
                env={**os.environ, **context.extra_env},
                input=context.stdin,
                capture_output=True,
                text=True,
                timeout=context.timeout,
            )
        except subprocess.TimeoutExpired:
            return context.fail(
                self.name,
                f"Command timed out after {context.timeout}s",
                metadata={"command": printable, "timeout": context.timeout},
            )
        except OSError as e:
            return context.fail(
                self.name,
                f"Command execution error: {e}",
                metadata={"command": printable},
            )

        stdout = _tail(result.stdout)
        stderr = _tail(result.stderr)
        metadata = {"command": printable, "return_code": result.returncode}

        if result.returncode != 0:
            return context.fail(
                self.name,
                stderr or f"Command exited with code {result.returncode}",
                metadata={**metadata, "stdout": stdout},
            )

        return Receipt.success(
            adapter=self.name,
            action_id=context.action.id,
            output=stdout,
            metadata={**metadata, "stderr": stderr},
        )


def _tail(stream: str) -> str:
    """Last part of a captured stream; composer and apt are chatty."""
    return stream.strip()[-_OUTPUT_LIMIT:]

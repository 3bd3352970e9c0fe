"""
Filesystem adapter — managed file and directory operations.

Writes are idempotent: a file whose content already matches is left
alone and the receipt reports ``changed=False``.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from seat_installer.adapters.base import Adapter, ExecutionContext
from seat_installer.core.models.action import Receipt

logger = logging.getLogger(__name__)

_VALID_OPS = {"exists", "read", "write", "mkdir"}


class FilesystemAdapter(Adapter):
    """File and directory operations with receipts.

    Action params:
        operation (str): One of 'exists', 'read', 'write', 'mkdir'.
        path (str): Absolute target path.
        content (str): Content to write (for 'write').
        mode (int): Optional permission bits applied after write/mkdir.
    """

    @property
    def name(self) -> str:
        return "filesystem"

    def is_available(self) -> bool:
        return True

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        operation = context.params.get("operation", "")
        if not operation:
            return False, "Missing required param: 'operation'"

        if operation not in _VALID_OPS:
            return False, f"Unknown operation '{operation}'. Valid: {', '.join(sorted(_VALID_OPS))}"

        path = context.params.get("path", "")
        if not path:
            return False, "Missing required param: 'path'"
        if not Path(path).is_absolute():
            return False, f"Path must be absolute: {path}"

        if operation == "write" and "content" not in context.params:
            return False, "Missing required param: 'content' for write operation"

        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        operation = context.params["operation"]
        target = Path(context.params["path"])

        try:
            if operation == "exists":
                return self._exists(context, target)
            if operation == "read":
                return self._read(context, target)
            if operation == "write":
                return self._write(context, target)
            return self._mkdir(context, target)
        except OSError as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"Filesystem error: {e}",
                metadata={"operation": operation, "path": str(target)},
            )

    def _exists(self, ctx: ExecutionContext, target: Path) -> Receipt:
        exists = target.exists()
        return Receipt.success(
            adapter=self.name,
            action_id=ctx.action.id,
            output=str(exists),
            metadata={"exists": exists, "is_dir": target.is_dir(), "path": str(target)},
        )

    def _read(self, ctx: ExecutionContext, target: Path) -> Receipt:
        if not target.is_file():
            return Receipt.failure(
                adapter=self.name,
                action_id=ctx.action.id,
                error=f"File not found: {target}",
            )
        content = target.read_text(encoding="utf-8")
        return Receipt.success(
            adapter=self.name,
            action_id=ctx.action.id,
            output=content,
            metadata={"path": str(target), "size": len(content)},
        )

    def _write(self, ctx: ExecutionContext, target: Path) -> Receipt:
        content = ctx.params["content"]
        mode = ctx.params.get("mode")

        if target.is_file() and target.read_text(encoding="utf-8") == content:
            if mode is not None:
                os.chmod(target, mode)
            return Receipt.success(
                adapter=self.name,
                action_id=ctx.action.id,
                output=f"{target} already up to date",
                metadata={"path": str(target), "changed": False},
            )

        target.parent.mkdir(parents=True, exist_ok=True)

        # Atomic write: temp file in same directory, then rename
        fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=".seat_", suffix=".tmp")
        tmp = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(content)
            if mode is not None:
                os.chmod(tmp, mode)
            tmp.replace(target)
        except OSError:
            tmp.unlink(missing_ok=True)
            raise

        logger.debug("Wrote %d bytes to %s", len(content), target)
        return Receipt.success(
            adapter=self.name,
            action_id=ctx.action.id,
            output=f"Written {len(content)} bytes to {target}",
            metadata={"path": str(target), "size": len(content), "changed": True},
        )

    def _mkdir(self, ctx: ExecutionContext, target: Path) -> Receipt:
        existed = target.is_dir()
        target.mkdir(parents=True, exist_ok=True)
        mode = ctx.params.get("mode")
        if mode is not None:
            os.chmod(target, mode)
        return Receipt.success(
            adapter=self.name,
            action_id=ctx.action.id,
            output=f"Directory ready: {target}",
            metadata={"path": str(target), "changed": not existed},
        )

"""
Credentials record — the one piece of state that outlives a run.

Stored as JSON next to the audit ledger, mode 0600. The write itself
goes through the filesystem adapter so it can be mocked; this module
only owns the format.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from seat_installer.core.models.credentials import Credentials

logger = logging.getLogger(__name__)

CREDENTIALS_MODE = 0o600


def dump_credentials(credentials: Credentials) -> str:
    """Serialize credentials for the on-disk record."""
    return json.dumps(credentials.model_dump(mode="json"), indent=2) + "\n"


def load_credentials(path: Path) -> Credentials | None:
    """Read a saved credentials record.

    Returns:
        The credentials, or None if the file is missing or unreadable.
    """
    if not path.is_file():
        return None

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return Credentials.model_validate(data)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        logger.warning("Ignoring unreadable credentials record %s: %s", path, e)
        return None

"""
Database credentials — what SeAT uses to reach MySQL.

Credentials are only ever handed to the rest of the run after a live
connection test against them has succeeded.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class Credentials(BaseModel):
    """MySQL access details for the SeAT database."""

    username: str
    password: str = Field(default="", repr=False)
    database: str
    host: str = "127.0.0.1"
    source: Literal["probed", "generated"] = "probed"

    def as_env(self) -> dict[str, str]:
        """Laravel ``.env`` keys for these credentials."""
        return {
            "DB_CONNECTION": "mysql",
            "DB_HOST": self.host,
            "DB_DATABASE": self.database,
            "DB_USERNAME": self.username,
            "DB_PASSWORD": self.password,
        }


class CredentialCheck(BaseModel):
    """Result of one live connection test."""

    ok: bool
    reason: str = ""

    @classmethod
    def valid(cls) -> CredentialCheck:
        return cls(ok=True)

    @classmethod
    def invalid(cls, reason: str) -> CredentialCheck:
        return cls(ok=False, reason=reason)

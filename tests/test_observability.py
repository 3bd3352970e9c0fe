"""
Tests for observability — logging setup, secret masking, install ledger.
"""

import logging
from pathlib import Path

import pytest

from seat_installer.core.observability import logging_config
from seat_installer.core.observability.logging_config import (
    SecretFilter,
    _parse_level,
    register_secret,
    setup_logging,
)
from seat_installer.core.persistence.audit import AuditEntry, AuditWriter


@pytest.fixture(autouse=True)
def restore_logging(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(logging_config, "_secrets", set())
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def _record(msg: str, *args) -> logging.LogRecord:
    return logging.LogRecord("test", logging.INFO, __file__, 1, msg, args, None)


# ── Secret masking ───────────────────────────────────────────────────


class TestSecretFilter:
    def test_masks_registered_secret(self):
        register_secret("hunter2-db-pass")
        record = _record("connecting with %s", "hunter2-db-pass")
        assert SecretFilter().filter(record)
        assert record.getMessage() == "connecting with ********"

    def test_leaves_other_messages_alone(self):
        register_secret("hunter2-db-pass")
        record = _record("nothing to see, %d rows", 3)
        SecretFilter().filter(record)
        assert record.args == (3,)
        assert record.getMessage() == "nothing to see, 3 rows"

    def test_short_secret_masked_only_as_whole_token(self):
        register_secret("ab")
        record = _record("tables abandoned, password=%s", "ab")
        SecretFilter().filter(record)
        assert record.getMessage() == "tables abandoned, password=********"

    def test_short_secret_inside_words_is_kept(self):
        register_secret("e")
        record = _record("seeded the database")
        SecretFilter().filter(record)
        assert record.getMessage() == "seeded the database"

    def test_empty_secret_ignored(self):
        register_secret("")
        assert logging_config._secrets == set()


# ── setup_logging ────────────────────────────────────────────────────


class TestSetupLogging:
    def test_file_output_is_masked(self, tmp_path: Path):
        log_file = tmp_path / "install.log"
        setup_logging(level="WARNING", log_file=str(log_file), log_file_level="DEBUG")
        register_secret("s3cret-value")

        logging.getLogger("seat_installer.test").info("password is s3cret-value")
        for handler in logging.getLogger().handlers:
            handler.flush()

        text = log_file.read_text()
        assert "password is ********" in text
        assert "s3cret-value" not in text

    def test_root_level_is_lowest_handler_level(self, tmp_path: Path):
        setup_logging(level="ERROR", log_file=str(tmp_path / "x.log"), log_file_level="INFO")
        assert logging.getLogger().level == logging.INFO

    def test_log_directory_is_created(self, tmp_path: Path):
        log_file = tmp_path / "var" / "log" / "seat-installer.log"
        setup_logging(level="WARNING", log_file=str(log_file))
        assert log_file.parent.is_dir()

    def test_console_only_by_default(self):
        setup_logging(level="INFO")
        assert [type(h) for h in logging.getLogger().handlers] == [logging.StreamHandler]

    def test_parse_level(self):
        assert _parse_level("debug") == logging.DEBUG
        assert _parse_level("nonsense") == logging.WARNING
        assert _parse_level(None) == logging.WARNING


# ── Install ledger ───────────────────────────────────────────────────


class TestAuditWriter:
    def test_write_and_read(self, tmp_path: Path):
        writer = AuditWriter(tmp_path / "state" / "audit.ndjson")
        writer.write(AuditEntry(run_id="install-1", status="completed", state="done"))
        writer.write(AuditEntry(run_id="install-2", status="aborted", failed_step="packages"))

        entries = writer.read_all()
        assert [e.run_id for e in entries] == ["install-1", "install-2"]
        assert entries[1].failed_step == "packages"

    def test_corrupt_lines_are_skipped(self, tmp_path: Path):
        path = tmp_path / "audit.ndjson"
        writer = AuditWriter(path)
        writer.write(AuditEntry(run_id="good"))
        with path.open("a") as f:
            f.write("{not json\n")

        assert [e.run_id for e in writer.read_all()] == ["good"]

    def test_missing_ledger(self, tmp_path: Path):
        assert AuditWriter(tmp_path / "nope.ndjson").read_all() == []

    def test_unwritable_ledger_is_not_fatal(self, tmp_path: Path):
        blocker = tmp_path / "file"
        blocker.write_text("")
        writer = AuditWriter(blocker / "audit.ndjson")
        writer.write(AuditEntry(run_id="x"))
        assert writer.read_all() == []

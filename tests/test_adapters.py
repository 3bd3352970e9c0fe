"""
Tests for adapter protocol, registry, mock, shell and filesystem adapters.
"""

import stat
from pathlib import Path

from seat_installer.adapters.base import ExecutionContext
from seat_installer.adapters.mock import MockAdapter
from seat_installer.adapters.registry import AdapterRegistry, default_registry
from seat_installer.adapters.shell.command import ShellCommandAdapter
from seat_installer.adapters.shell.filesystem import FilesystemAdapter
from seat_installer.core.models.action import Action, Receipt

# ── Protocol Tests ───────────────────────────────────────────────────


class TestExecutionContext:
    def test_working_dir_from_params(self):
        ctx = ExecutionContext(
            action=Action(id="test", adapter="shell"),
            params={"cwd": "/var/www/seat"},
        )
        assert ctx.working_dir == "/var/www/seat"

    def test_working_dir_absent(self):
        ctx = ExecutionContext(action=Action(id="test", adapter="shell"))
        assert ctx.working_dir is None

    def test_process_params_defaults(self):
        ctx = ExecutionContext(action=Action(id="test", adapter="shell"))
        assert ctx.extra_env == {}
        assert ctx.stdin is None
        assert ctx.timeout == 900

    def test_fail_names_the_action(self):
        ctx = ExecutionContext(action=Action(id="apache:reload", adapter="shell"))
        receipt = ctx.fail("shell", "exit 1")
        assert receipt.failed
        assert receipt.action_id == "apache:reload"


# ── Mock Adapter Tests ───────────────────────────────────────────────


class TestMockAdapter:
    def test_default_success(self):
        mock = MockAdapter(adapter_name="shell")
        receipt = mock.execute(ExecutionContext(action=Action(id="op-1", adapter="shell")))
        assert receipt.ok
        assert mock.call_count == 1

    def test_set_failure(self):
        mock = MockAdapter()
        mock.set_failure("op-fail", error="Intentional failure")
        receipt = mock.execute(ExecutionContext(action=Action(id="op-fail", adapter="mock")))
        assert receipt.failed
        assert "Intentional failure" in receipt.error

    def test_set_response(self):
        mock = MockAdapter(adapter_name="shell")
        mock.set_response("php:version", Receipt.success(adapter="shell", action_id="php:version", output="8.2"))
        receipt = mock.execute(ExecutionContext(action=Action(id="php:version", adapter="shell")))
        assert receipt.output == "8.2"

    def test_queued_responses_then_fallback(self):
        mock = MockAdapter()
        mock.queue_responses("op", [
            Receipt.failure(adapter="mock", action_id="op", error="first"),
            Receipt.failure(adapter="mock", action_id="op", error="second"),
        ])
        ctx = ExecutionContext(action=Action(id="op", adapter="mock"))
        assert mock.execute(ctx).error == "first"
        assert mock.execute(ctx).error == "second"
        assert mock.execute(ctx).ok

    def test_action_ids_in_order(self):
        mock = MockAdapter()
        for i in range(3):
            mock.execute(ExecutionContext(action=Action(id=f"op-{i}", adapter="mock")))
        assert mock.action_ids == ["op-0", "op-1", "op-2"]

    def test_reset(self):
        mock = MockAdapter()
        mock.set_failure("op-1")
        mock.execute(ExecutionContext(action=Action(id="op-1", adapter="mock")))
        mock.reset()
        assert mock.call_count == 0
        assert mock.execute(ExecutionContext(action=Action(id="op-1", adapter="mock"))).ok


# ── Registry Tests ───────────────────────────────────────────────────


class TestAdapterRegistry:
    def test_register_and_get(self):
        registry = AdapterRegistry()
        mock = MockAdapter(adapter_name="shell")
        registry.register(mock)
        assert registry.get("shell") is mock
        assert registry.list_adapters() == ["shell"]

    def test_unregister(self):
        registry = AdapterRegistry()
        registry.register(MockAdapter(adapter_name="shell"))
        registry.unregister("shell")
        assert registry.get("shell") is None

    def test_missing_adapter_fails(self):
        registry = AdapterRegistry()
        receipt = registry.execute(Action(id="x", adapter="nope"))
        assert receipt.failed
        assert "No adapter registered" in receipt.error

    def test_mock_mode_never_reaches_adapter(self):
        registry = AdapterRegistry(mock_mode=True)
        real = MockAdapter(adapter_name="shell")
        registry.register(real)
        receipt = registry.execute(Action(id="x", adapter="shell"))
        assert receipt.ok
        assert receipt.metadata["mock"] is True
        assert real.call_count == 0

    def test_mock_mode_with_custom_mock(self):
        registry = AdapterRegistry()
        custom = MockAdapter(adapter_name="custom")
        registry.set_mock_mode(True, custom)
        registry.execute(Action(id="x", adapter="shell"))
        assert custom.action_ids == ["x"]

    def test_mock_mode_records_simulated_actions(self):
        registry = AdapterRegistry(mock_mode=True)
        registry.execute(Action(id="a", adapter="shell"))
        registry.execute(Action(id="b", adapter="filesystem"))
        assert registry.simulated == ["a", "b"]

    def test_unavailable_adapter_fails(self):
        registry = AdapterRegistry()
        unavailable = MockAdapter(adapter_name="shell", available=False)
        registry.register(unavailable)
        receipt = registry.execute(Action(id="x", adapter="shell"))
        assert receipt.failed
        assert "not usable" in receipt.error
        assert unavailable.call_count == 0

    def test_validation_failure(self):
        registry = AdapterRegistry()
        registry.register(ShellCommandAdapter())
        receipt = registry.execute(Action(id="x", adapter="shell", params={}))
        assert receipt.failed
        assert "Validation failed" in receipt.error

    def test_adapter_exception_becomes_receipt(self):
        class Exploding(MockAdapter):
            def execute(self, context):
                raise RuntimeError("boom")

        registry = AdapterRegistry()
        registry.register(Exploding(adapter_name="shell"))
        receipt = registry.execute(Action(id="x", adapter="shell"))
        assert receipt.failed
        assert "boom" in receipt.error

    def test_default_registry(self):
        registry = default_registry()
        assert set(registry.list_adapters()) == {"shell", "filesystem"}
        assert not registry.mock_mode
        assert default_registry(mock_mode=True).mock_mode


# ── Shell Adapter Tests ──────────────────────────────────────────────


class TestShellCommandAdapter:
    def _ctx(self, **params) -> ExecutionContext:
        return ExecutionContext(action=Action(id="cmd", adapter="shell"), params=params)

    def test_string_command_requires_shell(self):
        valid, msg = ShellCommandAdapter().validate(self._ctx(command="echo hi"))
        assert not valid
        assert "shell=True" in msg

    def test_missing_cwd_rejected(self, tmp_path: Path):
        valid, msg = ShellCommandAdapter().validate(
            self._ctx(command=["true"], cwd=str(tmp_path / "missing")),
        )
        assert not valid
        assert "does not exist" in msg

    def test_success(self):
        receipt = ShellCommandAdapter().execute(self._ctx(command=["echo", "hello"]))
        assert receipt.ok
        assert receipt.output == "hello"
        assert receipt.metadata["return_code"] == 0

    def test_failure_reports_return_code(self):
        receipt = ShellCommandAdapter().execute(self._ctx(command=["false"]))
        assert receipt.failed
        assert receipt.metadata["return_code"] != 0

    def test_stdin_and_env(self):
        receipt = ShellCommandAdapter().execute(self._ctx(
            command='cat; printf "$SEAT_TEST"',
            shell=True,
            input="piped-",
            env={"SEAT_TEST": "value"},
        ))
        assert receipt.ok
        assert receipt.output == "piped-value"

    def test_missing_binary(self):
        receipt = ShellCommandAdapter().execute(
            self._ctx(command=["definitely-not-a-command-xyz"]),
        )
        assert receipt.failed
        assert "execution error" in receipt.error


# ── Filesystem Adapter Tests ─────────────────────────────────────────


class TestFilesystemAdapter:
    def _ctx(self, **params) -> ExecutionContext:
        return ExecutionContext(action=Action(id="fs", adapter="filesystem"), params=params)

    def test_relative_path_rejected(self):
        valid, msg = FilesystemAdapter().validate(self._ctx(operation="read", path="relative"))
        assert not valid
        assert "absolute" in msg

    def test_unknown_operation(self):
        valid, _ = FilesystemAdapter().validate(self._ctx(operation="delete", path="/tmp/x"))
        assert not valid

    def test_write_creates_parents(self, tmp_path: Path):
        target = tmp_path / "a" / "b" / "seat.conf"
        receipt = FilesystemAdapter().execute(
            self._ctx(operation="write", path=str(target), content="x=1\n"),
        )
        assert receipt.ok
        assert receipt.changed
        assert target.read_text() == "x=1\n"

    def test_write_same_content_is_unchanged(self, tmp_path: Path):
        target = tmp_path / "seat.conf"
        adapter = FilesystemAdapter()
        ctx = self._ctx(operation="write", path=str(target), content="same\n")
        adapter.execute(ctx)
        receipt = adapter.execute(ctx)
        assert receipt.ok
        assert not receipt.changed

    def test_write_mode(self, tmp_path: Path):
        target = tmp_path / "secret.json"
        FilesystemAdapter().execute(
            self._ctx(operation="write", path=str(target), content="{}", mode=0o600),
        )
        assert stat.S_IMODE(target.stat().st_mode) == 0o600

    def test_write_leaves_no_temp_files(self, tmp_path: Path):
        FilesystemAdapter().execute(
            self._ctx(operation="write", path=str(tmp_path / "f"), content="data"),
        )
        assert [p.name for p in tmp_path.iterdir()] == ["f"]

    def test_read_missing_file(self, tmp_path: Path):
        receipt = FilesystemAdapter().execute(
            self._ctx(operation="read", path=str(tmp_path / "nope")),
        )
        assert receipt.failed

    def test_mkdir_reports_change_once(self, tmp_path: Path):
        adapter = FilesystemAdapter()
        ctx = self._ctx(operation="mkdir", path=str(tmp_path / "dir"))
        assert adapter.execute(ctx).changed
        assert not adapter.execute(ctx).changed

    def test_exists(self, tmp_path: Path):
        receipt = FilesystemAdapter().execute(self._ctx(operation="exists", path=str(tmp_path)))
        assert receipt.metadata["exists"] is True
        assert receipt.metadata["is_dir"] is True

"""Tests for the step runner — progress lifecycle and fail-fast commands."""

from __future__ import annotations

from typing import Any

import pytest

from xcforge.output.console import create_console, get_output
from xcforge.output.progress import ProgressReporter, ProgressStatus
from xcforge.services.errors import ProcessFailure, SpawnFault, ValidationError
from xcforge.services.steps import (
    CommandSpec,
    CommandStep,
    StepRunner,
    WorkStep,
    run_step,
    run_step_with_commands,
)


class RecordingRunner(StepRunner):
    """StepRunner that keeps every handle it opens."""

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.handles: list[Any] = []

    def _open(self, title: str) -> Any:
        handle = super()._open(title)
        self.handles.append(handle)
        return handle


def _commands(*programs: str) -> list[CommandSpec]:
    return [CommandSpec(p, ["--flag"]) for p in programs]


class TestRunStep:
    @pytest.mark.parametrize("silent", [True, False])
    def test_returns_work_result(self, silent: bool) -> None:
        reporter = ProgressReporter(create_console(no_color=True))
        assert run_step("Compute", lambda: 42, silent=silent, reporter=reporter) == 42

    @pytest.mark.parametrize("silent", [True, False])
    def test_reraises_original_error(self, silent: bool) -> None:
        err = ValidationError("missing", "/nowhere")
        reporter = ProgressReporter(create_console(no_color=True))

        def work() -> None:
            raise err

        with pytest.raises(ValidationError) as exc_info:
            run_step("Check", work, silent=silent, reporter=reporter)
        assert exc_info.value is err

    def test_handle_succeeds(self) -> None:
        runner = RecordingRunner(silent=True)
        runner.run(WorkStep("Compute", lambda: "ok"))
        assert runner.handles[0].status is ProgressStatus.SUCCEEDED

    def test_handle_fails_before_error_escapes(self) -> None:
        runner = RecordingRunner(silent=True)

        def work() -> None:
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            runner.run(WorkStep("Compute", work))
        assert runner.handles[0].status is ProgressStatus.FAILED

    def test_renders_title_when_not_silent(self) -> None:
        console = create_console(no_color=True)
        run_step("Creating XCFramework", lambda: None, reporter=ProgressReporter(console))
        output = get_output(console)
        assert "Creating XCFramework" in output
        assert "✔" in output


class TestRunStepWithCommands:
    def test_runs_all_in_order(self, spawner_factory: Any) -> None:
        spawner = spawner_factory()
        run_step_with_commands("Build", _commands("one", "two", "three"), silent=True, spawn=spawner)
        assert [argv[0] for argv in spawner.spawned] == ["one", "two", "three"]

    @pytest.mark.parametrize("failing", [1, 2, 3])
    def test_stops_at_first_failure(self, spawner_factory: Any, failing: int) -> None:
        programs = ["one", "two", "three"]
        spawner = spawner_factory({programs[failing - 1]: (1, b"error: bad")})
        with pytest.raises(ProcessFailure):
            run_step_with_commands("Build", _commands(*programs), silent=True, spawn=spawner)
        assert len(spawner.spawned) == failing

    def test_error_carries_stderr(self, spawner_factory: Any) -> None:
        spawner = spawner_factory({"cargo": (101, b"error[E0425]: cannot find value")})
        commands = _commands("cargo")
        with pytest.raises(ProcessFailure) as exc_info:
            run_step_with_commands("Build", commands, silent=True, spawn=spawner)
        assert exc_info.value.stderr == b"error[E0425]: cannot find value"
        assert str(exc_info.value) == "error[E0425]: cannot find value"
        assert exc_info.value.returncode == 101
        assert commands[0].stderr == b"error[E0425]: cannot find value"
        assert commands[0].returncode == 101

    def test_handles_on_success(self, spawner_factory: Any) -> None:
        runner = RecordingRunner(silent=True, spawn=spawner_factory())
        runner.run(CommandStep("Build", _commands("one", "two")))
        assert runner.handles[0].status is ProgressStatus.SUCCEEDED

    def test_parent_and_child_fail(self, spawner_factory: Any) -> None:
        console = create_console(no_color=True)
        spawner = spawner_factory({"two": (1, b"nope")})
        with pytest.raises(ProcessFailure):
            run_step_with_commands(
                "Build",
                _commands("one", "two", "three"),
                reporter=ProgressReporter(console),
                spawn=spawner,
            )
        output = get_output(console)
        assert "✘ Build" in output
        assert "one --flag" in output
        assert "three --flag" not in output

    def test_spawn_fault_is_outside_error_channel(self) -> None:
        def spawn(command: CommandSpec) -> Any:
            raise FileNotFoundError(2, "No such file or directory", command.program)

        with pytest.raises(SpawnFault) as exc_info:
            run_step_with_commands("Build", _commands("missing-tool"), silent=True, spawn=spawn)
        assert not isinstance(exc_info.value, ProcessFailure)
        assert exc_info.value.command == ["missing-tool", "--flag"]

    def test_empty_command_list_rejected(self) -> None:
        with pytest.raises(ValueError, match="no commands"):
            run_step_with_commands("Build", [], silent=True)

    def test_real_process_failure(self) -> None:
        commands = [CommandSpec("sh", ["-c", "echo out; echo boom >&2; exit 3"])]
        with pytest.raises(ProcessFailure) as exc_info:
            run_step_with_commands("Shell", commands, silent=True)
        assert exc_info.value.stderr.strip() == b"boom"
        assert exc_info.value.returncode == 3


class TestCommandSpec:
    def test_argv(self) -> None:
        assert CommandSpec("cargo", ["build"]).argv == ["cargo", "build"]

    def test_info_quotes_arguments(self) -> None:
        spec = CommandSpec("lipo", ["-output", "my lib.a"])
        assert spec.info() == "lipo -output 'my lib.a'"

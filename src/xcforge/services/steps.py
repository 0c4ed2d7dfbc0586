"""Step runner — progress-tracked units of orchestration work.

A step is either in-process work (:class:`WorkStep`) or an ordered list
of external commands (:class:`CommandStep`). :class:`StepRunner` gives
both the same lifecycle: open a progress handle, start it, run, then mark
it succeeded or failed before the outcome leaves the runner.

Commands run strictly one after another. The first non-zero exit fails
the step with :class:`~xcforge.services.errors.ProcessFailure` and the
remaining commands never start. A command the OS cannot launch raises
:class:`~xcforge.services.errors.SpawnFault` instead.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Generic, TypeVar

from xcforge.output.progress import ProgressHandle, ProgressReporter, open_handle
from xcforge.services.errors import ProcessFailure, SpawnFault

logger = logging.getLogger(__name__)

T = TypeVar("T")

Spawner = Callable[["CommandSpec"], "subprocess.CompletedProcess[bytes]"]


@dataclass
class CommandSpec:
    """One external process invocation.

    ``stderr`` and ``returncode`` are filled in by the runner once the
    process has exited.
    """

    program: str
    args: list[str] = field(default_factory=list)
    cwd: Path | None = None
    stderr: bytes = b""
    returncode: int | None = None

    @property
    def argv(self) -> list[str]:
        return [self.program, *self.args]

    def info(self) -> str:
        """Shell-quoted command line for display."""
        return shlex.join(self.argv)


def spawn_discarding_stdout(command: CommandSpec) -> subprocess.CompletedProcess[bytes]:
    """Run *command* to completion, dropping stdout and capturing stderr."""
    return subprocess.run(
        command.argv,
        cwd=command.cwd,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.PIPE,
        check=False,
    )


@dataclass
class WorkStep(Generic[T]):
    """In-process step: a zero-argument callable."""

    title: str
    work: Callable[[], T]


@dataclass
class CommandStep:
    """External step: commands executed in order, stopping at the first failure."""

    title: str
    commands: list[CommandSpec]

    def __post_init__(self) -> None:
        if not self.commands:
            msg = f"Step {self.title!r} has no commands"
            raise ValueError(msg)


class StepRunner:
    """Run steps under progress handles.

    Args:
        silent: Use silent handles (no terminal output).
        reporter: Shared Rich display for spinner handles. One is created
            on demand when omitted.
        spawn: Process launcher, replaceable in tests.
    """

    def __init__(
        self,
        *,
        silent: bool = False,
        reporter: ProgressReporter | None = None,
        spawn: Spawner | None = None,
    ) -> None:
        self.silent = silent
        self._reporter = reporter
        self._spawn = spawn or spawn_discarding_stdout

    def _open(self, title: str) -> ProgressHandle:
        if not self.silent and self._reporter is None:
            self._reporter = ProgressReporter()
        return open_handle(title, silent=self.silent, reporter=self._reporter)

    def run(self, step: WorkStep[T] | CommandStep) -> T | None:
        handle = self._open(step.title)
        handle.start()
        try:
            if isinstance(step, CommandStep):
                self._run_commands(handle, step.commands)
                result = None
            else:
                result = step.work()
        except BaseException:
            handle.fail()
            raise
        handle.finish()
        return result

    def _run_commands(self, parent: ProgressHandle, commands: Sequence[CommandSpec]) -> None:
        for command in commands:
            child = parent.child(command.info())
            child.start()
            logger.debug("Running %s", command.info())
            try:
                completed = self._spawn(command)
            except OSError as exc:
                child.fail()
                parent.fail()
                raise SpawnFault(command.argv, exc) from exc

            command.returncode = completed.returncode
            if completed.returncode != 0:
                command.stderr = completed.stderr or b""
                child.fail()
                parent.fail()
                logger.debug("%s exited with %d", command.info(), completed.returncode)
                raise ProcessFailure(
                    command.stderr,
                    command=command.argv,
                    returncode=completed.returncode,
                )
            child.finish()


def run_step(
    title: str,
    work: Callable[[], T],
    *,
    silent: bool = False,
    reporter: ProgressReporter | None = None,
) -> T:
    """Run *work* under a progress handle and return its result unchanged."""
    runner = StepRunner(silent=silent, reporter=reporter)
    return runner.run(WorkStep(title, work))  # type: ignore[return-value]


def run_step_with_commands(
    title: str,
    commands: list[CommandSpec],
    *,
    silent: bool = False,
    reporter: ProgressReporter | None = None,
    spawn: Spawner | None = None,
) -> None:
    """Run *commands* in order under one parent handle, failing fast."""
    runner = StepRunner(silent=silent, reporter=reporter, spawn=spawn)
    runner.run(CommandStep(title, commands))

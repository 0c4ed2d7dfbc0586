"""Progress handles — one visual indicator per logical step.

Two variants share the :class:`ProgressHandle` protocol:

- :class:`SpinnerHandle` draws a Rich spinner through a
  :class:`ProgressReporter`, nesting child handles under their parent.
- :class:`NullHandle` is the silent variant. It tracks status the same
  way but renders nothing.

Call sites pick a variant with :func:`open_handle` and never check for
``None``.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Protocol

from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn

from xcforge.output.console import create_stderr_console

if TYPE_CHECKING:
    from rich.console import Console
    from rich.progress import TaskID


class ProgressStatus(StrEnum):
    """Lifecycle of a progress handle."""

    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ProgressHandle(Protocol):
    """Start/finish/fail lifecycle shared by both handle variants."""

    label: str
    status: ProgressStatus

    def start(self) -> None: ...

    def finish(self, success: bool = True) -> None: ...

    def fail(self) -> None: ...

    def child(self, label: str) -> ProgressHandle: ...


class _HandleBase:
    def __init__(self, label: str) -> None:
        self.label = label
        self.status = ProgressStatus.PENDING

    def start(self) -> None:
        if self.status is not ProgressStatus.PENDING:
            return
        self.status = ProgressStatus.RUNNING
        self._on_start()

    def finish(self, success: bool = True) -> None:
        if self.status is not ProgressStatus.RUNNING:
            return
        self.status = ProgressStatus.SUCCEEDED if success else ProgressStatus.FAILED
        self._on_finish(success)

    def fail(self) -> None:
        self.finish(success=False)

    def _on_start(self) -> None:
        pass

    def _on_finish(self, success: bool) -> None:
        pass


class NullHandle(_HandleBase):
    """Silent handle: records transitions, draws nothing."""

    def child(self, label: str) -> NullHandle:
        return NullHandle(label)


class SpinnerHandle(_HandleBase):
    """Handle rendered as a spinner line by a :class:`ProgressReporter`."""

    def __init__(self, reporter: ProgressReporter, label: str, depth: int = 0) -> None:
        super().__init__(label)
        self._reporter = reporter
        self._depth = depth
        self._task_id: TaskID | None = None

    def child(self, label: str) -> SpinnerHandle:
        return SpinnerHandle(self._reporter, label, self._depth + 1)

    def _on_start(self) -> None:
        self._task_id = self._reporter.add(self._describe("xcf.step"))

    def _on_finish(self, success: bool) -> None:
        assert self._task_id is not None
        icon = "[xcf.ok]✔[/xcf.ok]" if success else "[xcf.error]✘[/xcf.error]"
        self._reporter.complete(self._task_id, f"{icon} {self._describe()}")

    def _describe(self, style: str | None = None) -> str:
        indent = "  " * self._depth
        text = escape(self.label)
        if self._depth:
            text = f"[xcf.command]{text}[/xcf.command]"
        elif style:
            text = f"[{style}]{text}[/{style}]"
        return f"{indent}{text}"


class ProgressReporter:
    """Owns the Rich live display that spinner handles draw into.

    The live display runs while at least one handle is running. When the
    last one completes, the final frame is left on screen and the tasks
    are dropped so the next step starts with a fresh display.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or create_stderr_console()
        self._progress = Progress(
            SpinnerColumn(finished_text=""),
            TextColumn("{task.description}"),
            console=self.console,
        )
        self._running = 0

    def handle(self, label: str) -> SpinnerHandle:
        return SpinnerHandle(self, label)

    def add(self, description: str) -> TaskID:
        if self._running == 0:
            self._progress.start()
        self._running += 1
        return self._progress.add_task(description, total=1)

    def complete(self, task_id: TaskID, description: str) -> None:
        self._progress.update(task_id, description=description, completed=1)
        self._running -= 1
        if self._running == 0:
            self._progress.stop()
            for finished in list(self._progress.task_ids):
                self._progress.remove_task(finished)


def open_handle(
    label: str,
    *,
    silent: bool = False,
    reporter: ProgressReporter | None = None,
) -> ProgressHandle:
    """Return the handle variant matching the output mode."""
    if silent:
        return NullHandle(label)
    return (reporter or ProgressReporter()).handle(label)

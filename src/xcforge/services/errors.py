"""Error taxonomy for step running and bundle patching.

Everything under :class:`XcforgeError` is the ordinary error channel:
services catch it at their boundary and turn it into a failed
:class:`~xcforge.services.result.ServiceResult`.

:class:`SpawnFault` sits outside that hierarchy. A process the OS cannot
start means the environment is broken, so it aborts the run instead.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any


class XcforgeError(Exception):
    """Base for recoverable xcforge failures."""

    code = "XCFORGE_ERROR"

    def detail(self) -> dict[str, Any]:
        return {}


class ValidationError(XcforgeError):
    """Expected filesystem structure is missing or unusable."""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        super().__init__(message)
        self.path = path

    def detail(self) -> dict[str, Any]:
        return {"path": str(self.path)} if self.path is not None else {}


class BundleNotFound(ValidationError):
    """No ``.xcframework`` entry in the searched directory."""

    code = "BUNDLE_NOT_FOUND"

    def __init__(self, searched: Path) -> None:
        super().__init__(f"failed to find .xcframework in {searched}", searched)


class ProcessFailure(XcforgeError):
    """An external command exited with a non-zero status.

    The message is the command's standard error, verbatim.
    """

    code = "PROCESS_FAILED"

    def __init__(
        self,
        stderr: bytes,
        *,
        command: Sequence[str] = (),
        returncode: int | None = None,
    ) -> None:
        self.stderr = stderr
        self.command = list(command)
        self.returncode = returncode
        super().__init__(stderr.decode("utf-8", errors="replace"))

    def detail(self) -> dict[str, Any]:
        return {"command": self.command, "returncode": self.returncode}


class IOFailure(XcforgeError):
    """A filesystem operation failed."""

    code = "IO_ERROR"

    def __init__(self, operation: str, *paths: Path) -> None:
        self.operation = operation
        self.paths = paths
        super().__init__(operation)

    def detail(self) -> dict[str, Any]:
        return {"paths": [str(p) for p in self.paths]}


class PatchFailed(XcforgeError):
    """Patching one slice (or the bundle as a whole) failed."""

    code = "PATCH_FAILED"

    def __init__(self, message: str, path: Path) -> None:
        self.path = path
        super().__init__(message)

    def __str__(self) -> str:
        cause = self.__cause__
        base = super().__str__()
        return f"{base}: {cause}" if cause is not None else base

    def detail(self) -> dict[str, Any]:
        return {"path": str(self.path)}


class SpawnFault(RuntimeError):
    """The operating system could not start a requested process."""

    def __init__(self, command: Sequence[str], reason: OSError) -> None:
        self.command = list(command)
        super().__init__(f"Failed to execute command: {' '.join(self.command)} ({reason})")

"""Shared pytest fixtures for xcforge tests."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Callable, Generator, Sequence
from pathlib import Path

import pytest
from click.testing import CliRunner

from xcforge.services.steps import CommandSpec


class FakeSpawner:
    """Records spawned commands and replays scripted exit codes.

    ``failures`` maps a program name to ``(returncode, stderr)``.
    """

    def __init__(self, failures: dict[str, tuple[int, bytes]] | None = None) -> None:
        self.failures = failures or {}
        self.spawned: list[list[str]] = []

    def __call__(self, command: CommandSpec) -> subprocess.CompletedProcess[bytes]:
        self.spawned.append(command.argv)
        code, stderr = self.failures.get(command.program, (0, b""))
        return subprocess.CompletedProcess(command.argv, code, stdout=None, stderr=stderr)


class FakeToolchain:
    """Stands in for ``xcodebuild``: optionally lays out a bundle, then exits."""

    def __init__(
        self,
        returncode: int = 0,
        stderr: bytes = b"",
        on_success: Callable[[Sequence[str]], None] | None = None,
    ) -> None:
        self.returncode = returncode
        self.stderr = stderr
        self.on_success = on_success
        self.calls: list[list[str]] = []

    def __call__(self, argv: Sequence[str]) -> subprocess.CompletedProcess[bytes]:
        self.calls.append(list(argv))
        if self.returncode == 0 and self.on_success is not None:
            self.on_success(argv)
        return subprocess.CompletedProcess(list(argv), self.returncode, b"", self.stderr)


@pytest.fixture(autouse=True)
def _restore_root_logger() -> Generator[None]:
    """CLI invocations reconfigure logging; undo it after each test."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    logging.getLogger("xcforge").setLevel(logging.NOTSET)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def spawner_factory() -> type[FakeSpawner]:
    return FakeSpawner


@pytest.fixture
def toolchain_factory() -> type[FakeToolchain]:
    return FakeToolchain


@pytest.fixture
def generated_dir(tmp_path: Path) -> Path:
    """Generated bindings with two canonical headers."""
    gen = tmp_path / "generated"
    (gen / "headers").mkdir(parents=True)
    (gen / "headers" / "A.h").write_text("// A\nvoid a(void);\n")
    (gen / "headers" / "B.h").write_text("// B\nvoid b(void);\n")
    return gen


@pytest.fixture
def make_bundle(tmp_path: Path) -> Callable[..., Path]:
    """Factory laying out ``<output>/<name>.xcframework/<slice>/headers/*.h``.

    Returns the output directory.
    """

    def _make(
        name: str = "Core",
        slices: Sequence[str] = ("ios-arm64", "ios-arm64_x86_64-simulator"),
        output_dir: Path | None = None,
    ) -> Path:
        out = output_dir or tmp_path / "out"
        bundle = out / f"{name}.xcframework"
        bundle.mkdir(parents=True)
        (bundle / "Info.plist").write_text("<plist/>")
        for slice_name in slices:
            headers = bundle / slice_name / "headers"
            headers.mkdir(parents=True)
            (headers / "A.h").write_text("// stale A\n")
            (headers / "module.modulemap").write_text("module Core {}\n")
            (bundle / slice_name / "libcore.a").write_bytes(b"!<arch>\n")
        return out

    return _make

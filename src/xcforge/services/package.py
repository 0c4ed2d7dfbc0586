"""PackageService — the full build → merge → bundle → patch pipeline.

Each stage is a progress-tracked step:

1. ``Building <target>``: ``cargo build`` once per Rust triple.
2. ``Merging universal libraries``: ``lipo -create`` for universal targets.
3. ``Removing existing XCFramework``: drop a stale bundle.
4. ``Creating XCFramework``: ``xcodebuild`` plus header patching.

Stages 1-2 are skipped with ``skip_build``.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from xcforge.domain.targets import LibType, Mode, Target
from xcforge.services.errors import IOFailure, XcforgeError
from xcforge.services.result import ServiceResult
from xcforge.services.steps import CommandSpec, CommandStep, StepRunner, WorkStep
from xcforge.services.xcframework import (
    XCFRAMEWORK_EXTENSION,
    create_xcframework,
    patch_xcframework,
)

if TYPE_CHECKING:
    from xcforge.config.settings import XcforgeSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PackageRequest:
    """Resolved inputs of one ``package`` run."""

    bundle_name: str
    lib_name: str
    targets: tuple[Target, ...]
    generated_dir: Path
    output_dir: Path
    mode: Mode = Mode.DEBUG
    lib_type: LibType = LibType.STATIC
    skip_build: bool = False


class PackageService:
    """Drives the external toolchain for one project.

    Args:
        settings: Resolved settings; supplies tool names and project root.
        runner: Step runner owning the progress display.
    """

    def __init__(self, settings: XcforgeSettings, runner: StepRunner) -> None:
        self._settings = settings
        self._runner = runner

    @property
    def _target_dir(self) -> Path:
        return self._settings.project_root / "target"

    # ------------------------------------------------------------------
    # Step builders
    # ------------------------------------------------------------------

    def build_steps(self, request: PackageRequest) -> list[CommandStep]:
        """One ``cargo build`` step per target."""
        cargo = self._settings.build.cargo
        extra = ["--release"] if request.mode is Mode.RELEASE else []
        return [
            CommandStep(
                f"Building {target.display_name}",
                [
                    CommandSpec(
                        cargo,
                        ["build", "--target", arch, *extra],
                        cwd=self._settings.project_root,
                    )
                    for arch in target.architectures
                ],
            )
            for target in request.targets
        ]

    def merge_step(self, request: PackageRequest) -> CommandStep | None:
        """A ``lipo`` step for the universal targets, if there are any."""
        commands: list[CommandSpec] = []
        for target in request.targets:
            if not target.is_universal:
                continue
            inputs = target.architecture_library_paths(
                request.lib_name, request.mode, request.lib_type, target_dir=self._target_dir
            )
            output = target.library_path(
                request.lib_name, request.mode, request.lib_type, target_dir=self._target_dir
            )
            commands.append(
                CommandSpec(
                    self._settings.build.lipo,
                    ["-create", *map(str, inputs), "-output", str(output)],
                )
            )
        if not commands:
            return None
        return CommandStep("Merging universal libraries", commands)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def package(self, request: PackageRequest) -> ServiceResult:
        """Build, bundle, and patch an XCFramework."""
        op = "package"
        warnings: list[str] = []
        try:
            if not request.skip_build:
                for step in self.build_steps(request):
                    self._runner.run(step)
                merge = self.merge_step(request)
                if merge is not None:
                    self._make_universal_dirs(request)
                    self._runner.run(merge)

            stale = request.output_dir / f"{request.bundle_name}{XCFRAMEWORK_EXTENSION}"
            if stale.exists():
                self._runner.run(
                    WorkStep("Removing existing XCFramework", lambda: _remove_tree(stale))
                )

            framework = self._runner.run(
                WorkStep(
                    "Creating XCFramework",
                    lambda: create_xcframework(
                        request.targets,
                        request.lib_name,
                        request.bundle_name,
                        request.generated_dir,
                        request.output_dir,
                        request.mode,
                        request.lib_type,
                        program=self._settings.build.xcodebuild,
                        target_dir=self._target_dir,
                        warnings=warnings,
                    ),
                )
            )
        except XcforgeError as exc:
            logger.debug("package failed", exc_info=True)
            return ServiceResult.failure(op, exc)

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "xcframework": str(framework),
                "targets": [t.name for t in request.targets],
                "mode": request.mode.value,
                "lib_type": request.lib_type.value,
            },
            warnings=warnings,
        )

    def patch(self, bundle_name: str, generated_dir: Path, output_dir: Path) -> ServiceResult:
        """Re-patch the headers of an existing XCFramework."""
        op = "patch"
        warnings: list[str] = []
        try:
            slices = self._runner.run(
                WorkStep(
                    "Patching XCFramework headers",
                    lambda: patch_xcframework(
                        output_dir, generated_dir, bundle_name, warnings=warnings
                    ),
                )
            )
        except XcforgeError as exc:
            return ServiceResult.failure(op, exc)
        return ServiceResult(
            ok=True,
            op=op,
            data={"slices": [p.name for p in slices or []]},
            warnings=warnings,
        )

    def _make_universal_dirs(self, request: PackageRequest) -> None:
        for target in request.targets:
            if not target.is_universal:
                continue
            path = target.library_path(
                request.lib_name, request.mode, request.lib_type, target_dir=self._target_dir
            )
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                msg = f"Failed to create directory {path.parent}"
                raise IOFailure(msg, path.parent) from exc


def _remove_tree(path: Path) -> None:
    try:
        if path.is_dir():
            shutil.rmtree(path)
        else:
            path.unlink()
    except OSError as exc:
        msg = f"Failed to remove existing XCFramework {path}"
        raise IOFailure(msg, path) from exc

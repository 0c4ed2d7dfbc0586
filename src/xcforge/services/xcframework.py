"""XCFramework creation and header patching.

``xcodebuild -create-xcframework`` copies the generated headers flat
into every slice (``<slice>/headers/*.h``). Two bundles built this way
collide when both are linked into one app, so each slice's header tree
is rebuilt as ``<slice>/headers/<bundle_name>/*.h``.

Patching is not transactional. If a slice fails, the slices before it
stay patched and the ones after it are left untouched.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from collections.abc import Callable, Sequence
from pathlib import Path

from xcforge.domain.targets import LibType, Mode, Target
from xcforge.services.errors import (
    BundleNotFound,
    IOFailure,
    PatchFailed,
    ProcessFailure,
    SpawnFault,
    ValidationError,
    XcforgeError,
)

logger = logging.getLogger(__name__)

XCFRAMEWORK_EXTENSION = ".xcframework"
HEADERS_DIR = "headers"

Toolchain = Callable[[Sequence[str]], "subprocess.CompletedProcess[bytes]"]


def _capture_output(argv: Sequence[str]) -> subprocess.CompletedProcess[bytes]:
    return subprocess.run(list(argv), capture_output=True, check=False)


def _as_text(path: Path, what: str) -> str:
    text = str(path)
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        msg = f"{what} has an invalid name: {text!r}"
        raise ValidationError(msg, path) from None
    return text


# ---------------------------------------------------------------------------
# Inspection
# ---------------------------------------------------------------------------


def find_xcframework(
    output_dir: Path,
    bundle_name: str | None = None,
    *,
    warnings: list[str] | None = None,
) -> Path:
    """Return the ``.xcframework`` directory inside *output_dir*.

    With *bundle_name*, only ``<bundle_name>.xcframework`` is accepted and
    any other bundles next to it are reported as ignored. Without it, the
    first directory by name wins. Ignored candidates are logged and, when
    *warnings* is given, appended to it.
    """
    try:
        matches = sorted(
            (entry for entry in output_dir.iterdir() if XCFRAMEWORK_EXTENSION in entry.name),
            key=lambda entry: entry.name,
        )
    except OSError as exc:
        msg = f"Failed to read output directory {output_dir}"
        raise IOFailure(msg, output_dir) from exc

    if not matches:
        raise BundleNotFound(output_dir)
    if bundle_name is not None:
        bundle = output_dir / f"{bundle_name}{XCFRAMEWORK_EXTENSION}"
        if bundle not in matches:
            raise BundleNotFound(output_dir)
    else:
        directories = [entry for entry in matches if entry.is_dir()]
        bundle = directories[0] if directories else matches[0]
    if not bundle.is_dir():
        msg = f"{bundle} is not a directory"
        raise ValidationError(msg, bundle)

    ignored = [entry.name for entry in matches if entry != bundle and entry.is_dir()]
    if ignored:
        message = (
            f"Multiple XCFrameworks in {output_dir}, using {bundle.name} "
            f"(ignored: {', '.join(ignored)})"
        )
        logger.warning(message)
        if warnings is not None:
            warnings.append(message)
    return bundle


def search_subframework_paths(
    output_dir: Path,
    bundle_name: str | None = None,
    *,
    warnings: list[str] | None = None,
) -> list[Path]:
    """List the platform slices of the XCFramework in *output_dir*.

    Returns the bundle's immediate subdirectories sorted by name. Files
    such as ``Info.plist`` are skipped.
    """
    bundle = find_xcframework(output_dir, bundle_name, warnings=warnings)
    try:
        return sorted(entry for entry in bundle.iterdir() if entry.is_dir())
    except OSError as exc:
        msg = f"Failed to read XCFramework {bundle}"
        raise IOFailure(msg, bundle) from exc


# ---------------------------------------------------------------------------
# Patching
# ---------------------------------------------------------------------------


def _copy_headers(source_dir: Path, dest_dir: Path) -> None:
    for source in sorted(source_dir.iterdir()):
        dest = dest_dir / source.name
        try:
            if source.is_dir():
                dest.mkdir()
                _copy_headers(source, dest)
            else:
                shutil.copyfile(source, dest)
        except OSError as exc:
            msg = f"Failed to copy header file from {source} to {dest}"
            raise IOFailure(msg, source, dest) from exc


def patch_subframework(slice_dir: Path, generated_dir: Path, bundle_name: str) -> None:
    """Replace a slice's flat header tree with a namespaced copy.

    Nested directories under ``generated_dir/headers`` are copied with
    their relative layout preserved.

    Raises:
        ValidationError: ``slice_dir/headers`` or ``generated_dir/headers``
            is missing. Nothing is modified in that case.
        IOFailure: Removing, creating, or copying failed part-way.
    """
    headers = slice_dir / HEADERS_DIR
    generated_headers = generated_dir / HEADERS_DIR
    if not headers.is_dir():
        msg = f"Unpatched header directory {headers} does not exist"
        raise ValidationError(msg, headers)
    if not generated_headers.is_dir():
        msg = f"Generated header directory {generated_headers} does not exist"
        raise ValidationError(msg, generated_headers)

    try:
        shutil.rmtree(headers)
    except OSError as exc:
        msg = f"Failed to remove unpatched directory {headers}"
        raise IOFailure(msg, headers) from exc

    patched_headers = headers / bundle_name
    try:
        patched_headers.mkdir(parents=True)
    except OSError as exc:
        msg = f"Failed to create empty patched directory {patched_headers}"
        raise IOFailure(msg, patched_headers) from exc

    try:
        _copy_headers(generated_headers, patched_headers)
    except OSError as exc:
        msg = f"Failed to read from the generated header directory {generated_headers}"
        raise IOFailure(msg, generated_headers) from exc
    logger.debug("Patched %s", slice_dir)


def patch_xcframework(
    output_dir: Path,
    generated_dir: Path,
    bundle_name: str,
    *,
    warnings: list[str] | None = None,
) -> list[Path]:
    """Patch every slice of ``<bundle_name>.xcframework`` in *output_dir*.

    Errors from locating the bundle propagate unchanged. After that, the
    first slice that fails stops the run. Returns the patched slices.
    """
    slices = search_subframework_paths(output_dir, bundle_name, warnings=warnings)

    for slice_dir in slices:
        try:
            patch_subframework(slice_dir, generated_dir, bundle_name)
        except XcforgeError as exc:
            msg = f"Failed to patch {slice_dir}"
            raise PatchFailed(msg, slice_dir) from exc
    return slices


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------


def xcodebuild_command(
    libraries: Sequence[Path],
    headers: Path,
    framework: str,
    *,
    program: str = "xcodebuild",
) -> list[str]:
    headers_name = _as_text(headers, "Directory for bindings")
    argv = [program, "-create-xcframework"]
    for lib in libraries:
        argv += ["-library", str(lib), "-headers", headers_name]
    argv += ["-output", framework]
    return argv


def create_xcframework(
    targets: Sequence[Target],
    lib_name: str,
    bundle_name: str,
    generated_dir: Path,
    output_dir: Path,
    mode: Mode,
    lib_type: LibType,
    *,
    program: str = "xcodebuild",
    target_dir: Path = Path("target"),
    toolchain: Toolchain | None = None,
    warnings: list[str] | None = None,
) -> Path:
    """Build the XCFramework with ``xcodebuild`` and patch its headers.

    Returns the path of the created bundle.

    Raises:
        ProcessFailure: ``xcodebuild`` exited non-zero. Its stderr is the
            message and the bundle is not patched.
        PatchFailed: The bundle was created but a slice could not be patched.
    """
    libraries = [t.library_path(lib_name, mode, lib_type, target_dir=target_dir) for t in targets]
    output_name = _as_text(output_dir, "Output directory")
    framework = f"{output_name}/{bundle_name}{XCFRAMEWORK_EXTENSION}"
    argv = xcodebuild_command(libraries, generated_dir / HEADERS_DIR, framework, program=program)

    logger.debug("Running %s", " ".join(argv))
    try:
        completed = (toolchain or _capture_output)(argv)
    except OSError as exc:
        raise SpawnFault(argv, exc) from exc
    if completed.returncode != 0:
        raise ProcessFailure(completed.stderr or b"", command=argv, returncode=completed.returncode)

    try:
        patch_xcframework(output_dir, generated_dir, bundle_name, warnings=warnings)
    except XcforgeError as exc:
        msg = "Failed to patch the XCFramework"
        raise PatchFailed(msg, getattr(exc, "path", None) or output_dir) from exc
    return Path(framework)

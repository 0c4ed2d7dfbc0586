"""Command: build targets and assemble a patched XCFramework."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from xcforge.commands._base import XcfCommand
from xcforge.domain.targets import KNOWN_TARGETS, LibType, Mode, resolve_target

if TYPE_CHECKING:
    from xcforge.commands._context import AppContext


def require(value: str | None, option: str) -> str:
    """Return *value* or fail with a usage error naming the CLI option."""
    if not value:
        msg = f"Missing {option} (pass it or set it in xcforge.toml)"
        raise click.UsageError(msg)
    return value


@click.command(
    cls=XcfCommand,
    examples="""\
  xcforge package --name Core --lib-name core
  xcforge package --name Core --lib-name core --target ios --target ios-sim --release
  xcforge package --skip-build --lib-type dynamic
  xcforge --silent --json package""",
)
@click.option("--name", "bundle_name", default=None, help="XCFramework name.")
@click.option("--lib-name", default=None, help="Crate library name (without lib prefix).")
@click.option(
    "-t",
    "--target",
    "target_names",
    multiple=True,
    type=click.Choice(sorted(KNOWN_TARGETS)),
    help="Platform to include (repeatable).",
)
@click.option(
    "--generated-dir",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Directory holding generated headers/.",
)
@click.option(
    "--output-dir",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Directory receiving the XCFramework.",
)
@click.option("--release/--debug", default=None, help="Cargo build profile.")
@click.option(
    "--lib-type",
    type=click.Choice([t.value for t in LibType]),
    default=None,
    help="Library kind to bundle.",
)
@click.option(
    "--skip-build/--build", default=None, help="Reuse existing cargo output instead of building."
)
@click.pass_obj
def package(
    app: AppContext,
    bundle_name: str | None,
    lib_name: str | None,
    target_names: tuple[str, ...],
    generated_dir: Path | None,
    output_dir: Path | None,
    release: bool | None,
    lib_type: str | None,
    skip_build: bool | None,
) -> None:
    """Build targets with cargo and bundle them into an XCFramework."""
    from xcforge.services.package import PackageRequest, PackageService

    settings = app.settings
    bundle = settings.bundle
    try:
        targets = tuple(resolve_target(n) for n in (target_names or bundle.targets))
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--target") from exc
    if not targets:
        raise click.UsageError("No targets selected")

    if release is None:
        release = settings.build.release
    request = PackageRequest(
        bundle_name=require(bundle_name or bundle.name, "--name"),
        lib_name=require(lib_name or bundle.lib_name, "--lib-name"),
        targets=targets,
        generated_dir=settings.resolve(generated_dir or bundle.generated_dir),
        output_dir=settings.resolve(output_dir or bundle.output_dir),
        mode=Mode.RELEASE if release else Mode.DEBUG,
        lib_type=LibType(lib_type) if lib_type else bundle.lib_type,
        skip_build=settings.build.skip_build if skip_build is None else skip_build,
    )
    app.emit(PackageService(settings, app.runner).package(request))

"""Command: namespace the headers of an existing XCFramework."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from xcforge.commands._base import XcfCommand
from xcforge.commands.package import require

if TYPE_CHECKING:
    from xcforge.commands._context import AppContext


@click.command(
    cls=XcfCommand,
    examples="""\
  xcforge patch --name Core
  xcforge patch --name Core --generated-dir build/generated --output-dir dist""",
)
@click.option("--name", "bundle_name", default=None, help="XCFramework name.")
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
    help="Directory containing the XCFramework.",
)
@click.pass_obj
def patch(
    app: AppContext,
    bundle_name: str | None,
    generated_dir: Path | None,
    output_dir: Path | None,
) -> None:
    """Move each slice's headers under headers/<name>/."""
    from xcforge.services.package import PackageService

    settings = app.settings
    bundle = settings.bundle
    svc = PackageService(settings, app.runner)
    app.emit(
        svc.patch(
            require(bundle_name or bundle.name, "--name"),
            settings.resolve(generated_dir or bundle.generated_dir),
            settings.resolve(output_dir or bundle.output_dir),
        )
    )

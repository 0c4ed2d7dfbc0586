"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to subcommands via
``@click.pass_obj``. Owns the step runner (and with it the progress
display) and centralizes result emission.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from xcforge.output.formatters import format_result

if TYPE_CHECKING:
    from xcforge.config.settings import XcforgeSettings
    from xcforge.services.result import ServiceResult
    from xcforge.services.steps import StepRunner


class AppContext:
    """Shared context flowing through Click's command hierarchy."""

    def __init__(self, settings: XcforgeSettings) -> None:
        self.settings = settings
        self._runner: StepRunner | None = None

        from xcforge.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def runner(self) -> StepRunner:
        """Step runner, silent when ``--silent`` or ``--json`` is set."""
        if self._runner is None:
            from xcforge.services.steps import StepRunner

            silent = self.settings.silent or self.settings.json_output
            self._runner = StepRunner(silent=silent)
        return self._runner

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: writes to stdout. Warnings go to stderr.
        * Failure: writes to stderr, exits with code 1.
        """
        json_output = self.settings.json_output
        output = format_result(result, json_output=json_output)
        if result.ok:
            click.echo(output)
            if not json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)

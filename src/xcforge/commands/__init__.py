"""Subcommand modules for xcforge.

Provides register_commands() which uses deferred imports to keep
``xcforge --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from xcforge.commands.package import package
    from xcforge.commands.patch import patch

    cli.add_command(package)
    cli.add_command(patch)

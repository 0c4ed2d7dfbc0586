"""Rich Console factory and theme for xcforge output.

Progress spinners draw on stderr so stdout stays clean for results.
Tests build consoles backed by a StringIO buffer instead; in non-TTY
environments Rich disables color codes automatically.
"""

from __future__ import annotations

import sys
from io import StringIO

from rich.console import Console
from rich.theme import Theme

XCF_THEME = Theme(
    {
        "xcf.ok": "bold green",
        "xcf.error": "bold red",
        "xcf.step": "bold cyan",
        "xcf.command": "dim",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=XCF_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def create_stderr_console() -> Console:
    """Console for live progress output."""
    return Console(file=sys.stderr, theme=XCF_THEME, highlight=False)


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()

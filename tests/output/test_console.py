"""Tests for Rich Console factories and theme."""

from io import StringIO

from xcforge.output.console import XCF_THEME, create_console, create_stderr_console, get_output


class TestCreateConsole:
    def test_returns_console_with_stringio(self) -> None:
        assert isinstance(create_console().file, StringIO)

    def test_no_color_disables_ansi(self) -> None:
        console = create_console(no_color=True)
        console.print("[xcf.error]failed[/xcf.error]")
        output = get_output(console)
        assert "\x1b" not in output
        assert "failed" in output

    def test_custom_width(self) -> None:
        assert create_console(width=80).width == 80


class TestTheme:
    def test_styles_defined(self) -> None:
        for name in ("xcf.ok", "xcf.error", "xcf.step", "xcf.command"):
            assert name in XCF_THEME.styles

    def test_stderr_console_uses_theme(self) -> None:
        console = create_stderr_console()
        assert console.get_style("xcf.ok") == XCF_THEME.styles["xcf.ok"]

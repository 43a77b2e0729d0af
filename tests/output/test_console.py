"""Tests for the Rich console factory."""

from themectl.output.console import create_console, get_output


class TestConsole:
    def test_renders_to_buffer(self) -> None:
        console = create_console(no_color=True)
        console.print("[themectl.ok]OK[/themectl.ok] done")
        assert get_output(console) == "OK done\n"

    def test_width_override(self) -> None:
        assert create_console(width=60).width == 60

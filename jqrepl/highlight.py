"""Terminal highlighting for generated shell scripts."""

from __future__ import annotations

import os

from pygments import highlight
from pygments.formatters import TerminalFormatter
from pygments.lexers import BashLexer


def color_enabled(stream) -> bool:
    """Color only real terminals, and respect ``NO_COLOR``."""
    if os.environ.get("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def highlight_script(script: str) -> str:
    """Colorize a bash script with ANSI escapes, keeping its trailing newline."""
    rendered = highlight(script, BashLexer(), TerminalFormatter())
    if script.endswith("\n") and not rendered.endswith("\n"):
        rendered += "\n"
    return rendered

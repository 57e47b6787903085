"""Selector (fzf) invocation assembly.

The selector runs with fuzzy matching disabled: the typed text is a filter
expression and the preview pane is the actual product. Standard input is
always the null device since the query comes from fzf's own line editor.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass

from .pipeline import PipelineSet
from .settings import SessionConfig

PREVIEW_WINDOW = "up,99%,border-bottom"
SCRIPT_SHEBANG = "#!/bin/bash"
NULL_DEVICE = "/dev/null"

# Keys without an obvious meaning, shown in the always-visible header.
HEADER_HINTS: tuple[tuple[str, str], ...] = (
    ("alt-e", "editor"),
    ("alt-v", "vd"),
    ("alt-l", "pager"),
    ("ctrl-space", "gron"),
)
HEADER_SEPARATOR = " ⁄ "

NAVIGATION_BINDINGS: tuple[tuple[str, str], ...] = (
    ("ctrl-k", "kill-line"),
    ("pgup", "preview-page-up"),
    ("pgdn", "preview-page-down"),
    ("alt-w", "toggle-preview-wrap"),
    ("home", "preview-top"),
    ("end", "preview-bottom"),
)


@dataclass(frozen=True)
class SelectorInvocation:
    """Program plus ordered arguments for one selector run."""

    program: str
    args: tuple[str, ...]
    capture_output: bool = False

    @property
    def command(self) -> list[str]:
        return [self.program, *self.args]

    def format_script(self) -> str:
        """Render as a runnable bash script, one quoted argument per line."""
        lines = [shlex.quote(part) for part in self.command]
        body = " \\\n".join(lines)
        return f"{SCRIPT_SHEBANG}\n\n{body} < {NULL_DEVICE}\n"


def key_hint(key: str) -> str:
    """Abbreviate an fzf key name the way terminal docs do (``M-e``, ``^<space>``)."""
    modifier, _, name = key.partition("-")
    if not name:
        return key
    if len(name) > 1:
        name = f"<{name}>"
    if modifier == "alt":
        return f"M-{name}"
    if modifier == "ctrl":
        return f"^{name}"
    return key


def header_text() -> str:
    return HEADER_SEPARATOR.join(f"{key_hint(key)}: {label}" for key, label in HEADER_HINTS)


def navigation_binding() -> str:
    return "--bind=" + ",".join(f"{key}:{action}" for key, action in NAVIGATION_BINDINGS)


def build_selector_invocation(config: SessionConfig, pipelines: PipelineSet) -> SelectorInvocation:
    """Assemble the selector command line.

    User pass-through arguments go last, untouched, so they can override
    anything set here.
    """
    args: list[str] = ["--disabled"]
    if config.two_phase:
        args.append("--print-query")
    args.extend(
        [
            f"--preview-window={PREVIEW_WINDOW}",
            "--info=hidden",
            "--header-first",
            f"--header={header_text()}",
            f"--history={config.history_file}",
            f"--preview={pipelines.preview.render()}",
            navigation_binding(),
        ]
    )
    args.extend(binding.to_argument() for binding in pipelines.bindings)
    args.extend(config.fzf_args)
    return SelectorInvocation(program=config.fzf_bin, args=tuple(args), capture_output=config.two_phase)

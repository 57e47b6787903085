"""``--version-verbose`` report for this program and its collaborators."""

from __future__ import annotations

import shutil
import subprocess

from . import __version__
from .settings import SessionConfig

NOT_FOUND = "not found"
PROBE_TIMEOUT_SECONDS = 5.0


def collaborators(config: SessionConfig) -> list[tuple[str, str]]:
    """Return ``(role, executable)`` for every external program a session may run."""
    return [
        ("render tool", config.jq_bin),
        ("selector", config.fzf_bin),
        ("pager", config.pager),
        ("editor", config.editor),
        ("flattener", config.gron_bin),
        ("structured viewer", config.vd_bin),
        ("syntax pager", config.bat_bin),
        ("prompt counter", config.charcounter_bin),
        ("braille renderer", config.braille_bin),
    ]


def probe_version(executable: str) -> str:
    """Return the first non-empty line of ``<executable> --version``."""
    if shutil.which(executable) is None:
        return NOT_FOUND
    try:
        proc = subprocess.run(
            [executable, "--version"],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
            timeout=PROBE_TIMEOUT_SECONDS,
        )
    except (OSError, subprocess.TimeoutExpired):
        return NOT_FOUND
    for line in proc.stdout.splitlines():
        if line.strip():
            return line.strip()
    return NOT_FOUND


def version_report(config: SessionConfig) -> str:
    lines = [f"jq-repl {__version__}"]
    for role, executable in collaborators(config):
        lines.append(f"{role} ({executable}): {probe_version(executable)}")
    return "\n".join(lines) + "\n"

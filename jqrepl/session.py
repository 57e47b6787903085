"""Selector and render process orchestration.

Single-phase sessions only start the selector: its execute bindings do the
final rendering. Two-phase sessions capture the accepted query from the
selector, then run the render tool themselves, piping into the pager when
standard output is a terminal.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
import shlex
import subprocess
import sys
from collections.abc import Sequence
from dataclasses import dataclass

from .errors import ConfigError, InputError, OutputEncodingError, ProcessSpawnError, SelectorError
from .inputs import InputLocation
from .pipeline import IDENTITY_FILTER, render_command
from .selector import SelectorInvocation
from .settings import SessionConfig

# fzf exits 1 for "no match"; with matching disabled that only means the
# list was empty, so it counts as success.
SELECTOR_OK_STATUSES = frozenset({0, 1})

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionResult:
    """Accepted query (two-phase only) and the status of the last visible process."""

    query: str | None
    returncode: int


def _spawn(command: Sequence[str], **kwargs) -> subprocess.Popen:
    logger.debug("spawning %s", " ".join(shlex.quote(part) for part in command))
    try:
        return subprocess.Popen(list(command), **kwargs)
    except OSError as exc:
        raise ProcessSpawnError(command, exc) from exc


def stdout_is_terminal() -> bool:
    try:
        return os.isatty(sys.stdout.fileno())
    except (AttributeError, OSError, ValueError):
        return False


def check_selector_status(returncode: int) -> int:
    """Normalize a selector status: success or "no match" become 0."""
    if returncode in SELECTOR_OK_STATUSES:
        return 0
    raise SelectorError(returncode)


def decode_query(output: bytes) -> str:
    """Extract the accepted query from ``--print-query`` output."""
    try:
        text = output.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise OutputEncodingError(f"selector output is not valid UTF-8: {exc}") from exc
    first_line, _, _ = text.partition("\n")
    return first_line.strip()


def run_selector(invocation: SelectorInvocation) -> tuple[int, bytes]:
    """Run the selector to completion; returns ``(status, captured stdout)``."""
    stdout = subprocess.PIPE if invocation.capture_output else None
    process = _spawn(invocation.command, stdin=subprocess.DEVNULL, stdout=stdout)
    output, _ = process.communicate()
    return process.returncode, output or b""


def pager_command(config: SessionConfig) -> list[str]:
    try:
        options = shlex.split(config.pager_options)
    except ValueError as exc:
        raise ConfigError(f"cannot parse pager options {config.pager_options!r}: {exc}") from exc
    return [config.pager, *options]


def run_render(
    config: SessionConfig,
    locations: Sequence[InputLocation],
    query: str,
    interactive: bool,
) -> int:
    """Render ``query`` and display it; returns the displaying process status.

    When ``interactive`` the render tool's stdout is handed straight to the
    pager's stdin, otherwise it is inherited so downstream pipes receive it.
    """
    command = render_command(config, locations, query, color=interactive)
    with contextlib.ExitStack() as stack:
        stdin = subprocess.DEVNULL
        if config.pass_as_stdin and locations and not config.null_input:
            try:
                stdin = stack.enter_context(locations[0].path.open("rb"))
            except OSError as exc:
                raise InputError(f"cannot read {locations[0].path}: {exc}") from exc

        if not interactive:
            return _spawn(command, stdin=stdin).wait()

        pager_argv = pager_command(config)
        render = _spawn(command, stdin=stdin, stdout=subprocess.PIPE)
        try:
            pager = _spawn(pager_argv, stdin=render.stdout)
        except ProcessSpawnError:
            render.kill()
            render.wait()
            raise
        finally:
            # The pager holds its own copy; ours must go so the render tool
            # sees SIGPIPE if the pager quits early.
            render.stdout.close()

        pager_status = pager.wait()
        render_status = render.wait()
        if render_status != 0:
            logger.info("%s exited with status %d", config.jq_bin, render_status)
        return pager_status


def run_session(
    config: SessionConfig,
    invocation: SelectorInvocation,
    locations: Sequence[InputLocation],
    interactive: bool | None = None,
) -> SessionResult:
    """Run the selector and, in two-phase mode, the render stage after it."""
    returncode, output = run_selector(invocation)
    status = check_selector_status(returncode)
    if not config.two_phase:
        return SessionResult(query=None, returncode=status)

    query = decode_query(output)
    sys.stderr.write(json.dumps(query or IDENTITY_FILTER) + "\n")
    if interactive is None:
        interactive = stdout_is_terminal()
    return SessionResult(query=query, returncode=run_render(config, locations, query, interactive))


def exit_code_for(result: SessionResult) -> int:
    """Map a finished session onto this program's exit status."""
    if result.returncode < 0:
        return 128 - result.returncode
    return result.returncode

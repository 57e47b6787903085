"""Input resolution for the render tool.

Turns positional file arguments and piped standard input into an ordered
list of addressable locations. Sources that cannot be referenced by path
(stdin, FIFOs, process substitutions, device files) are copied into temp
files owned by a ``TempFileRegistry`` and deleted when its scope ends.
"""

from __future__ import annotations

import enum
import logging
import os
import shlex
import shutil
import sys
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from .errors import InputError

STDIN_PLACEHOLDER = "-"
TEMP_PREFIX = "jq-repl-"
TEMP_SUFFIX = ".json"

logger = logging.getLogger(__name__)


class LocationKind(enum.Enum):
    EXISTING = "existing"
    MATERIALIZED = "materialized"


@dataclass(frozen=True)
class InputLocation:
    """One input the render tool reads, referenced by path."""

    path: Path
    kind: LocationKind = LocationKind.EXISTING

    @property
    def is_materialized(self) -> bool:
        return self.kind is LocationKind.MATERIALIZED

    def token(self) -> str:
        """Shell-safe token for embedding in a generated command line."""
        return shlex.quote(str(self.path))

    def __str__(self) -> str:
        return str(self.path)


class TempFileRegistry:
    """Session-scoped owner of materialized input files.

    Files are registered the moment they are created, so a failed copy still
    gets cleaned up. ``release`` deletes each registered file once; it runs
    on every exit from the ``with`` block.
    """

    def __init__(self, directory: Path | None = None) -> None:
        self.directory = directory
        self._paths: list[Path] = []

    @property
    def paths(self) -> tuple[Path, ...]:
        return tuple(self._paths)

    def materialize(self, source: BinaryIO) -> Path:
        """Copy ``source`` into a fresh temp file and return its path."""
        try:
            handle = tempfile.NamedTemporaryFile(
                prefix=TEMP_PREFIX,
                suffix=TEMP_SUFFIX,
                dir=self.directory,
                delete=False,
            )
        except OSError as exc:
            raise InputError(f"cannot create temporary file: {exc}") from exc

        path = Path(handle.name)
        self._paths.append(path)
        logger.debug("materializing input into %s", path)
        try:
            with handle:
                shutil.copyfileobj(source, handle)
        except OSError as exc:
            raise InputError(f"cannot copy input into {path}: {exc}") from exc
        return path

    def release(self) -> None:
        """Delete all registered files; safe to call more than once."""
        errors: list[str] = []
        while self._paths:
            path = self._paths.pop()
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            except OSError as exc:
                errors.append(f"{path}: {exc}")
                continue
            logger.debug("released %s", path)
        if errors:
            raise InputError("cannot remove temporary files: " + "; ".join(errors))

    def __enter__(self) -> TempFileRegistry:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.release()
        except InputError:
            # Let the in-flight exception win over a cleanup failure.
            if exc_type is None:
                raise
            logger.warning("temporary file cleanup failed while handling %s", exc_type.__name__)


def stdin_is_piped(stdin=None) -> bool:
    """Return whether standard input is redirected rather than a terminal."""
    stream = sys.stdin if stdin is None else stdin
    if stream is None:
        return False
    try:
        return not os.isatty(stream.fileno())
    except (AttributeError, OSError, ValueError):
        return not stream.isatty()


def _stdin_buffer(stdin) -> BinaryIO:
    stream = sys.stdin if stdin is None else stdin
    return getattr(stream, "buffer", stream)


def resolve_inputs(
    files: list[Path] | tuple[Path, ...],
    piped: bool,
    registry: TempFileRegistry,
    stdin=None,
) -> list[InputLocation]:
    """Resolve positional arguments into ordered input locations.

    ``-`` inserts piped stdin at that position; every ``-`` shares the same
    copy because stdin can only be read once. Regular files are referenced
    in place, anything else is copied. With no arguments, piped stdin
    becomes the single input and an interactive stdin yields no inputs at
    all (the caller switches to null-input mode).
    """
    stdin_location: InputLocation | None = None

    def materialize_stdin() -> InputLocation:
        nonlocal stdin_location
        if stdin_location is None:
            path = registry.materialize(_stdin_buffer(stdin))
            stdin_location = InputLocation(path, LocationKind.MATERIALIZED)
        return stdin_location

    if not files:
        return [materialize_stdin()] if piped else []

    locations: list[InputLocation] = []
    for raw in files:
        path = Path(raw)
        if str(raw) == STDIN_PLACEHOLDER:
            if not piped:
                raise InputError("'-' needs standard input to be piped or redirected")
            locations.append(materialize_stdin())
            continue
        if path.is_file():
            locations.append(InputLocation(path, LocationKind.EXISTING))
            continue
        try:
            source = path.open("rb")
        except OSError as exc:
            raise InputError(f"cannot read {path}: {exc}") from exc
        with source:
            copy = registry.materialize(source)
        locations.append(InputLocation(copy, LocationKind.MATERIALIZED))
    return locations

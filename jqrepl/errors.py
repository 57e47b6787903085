"""Failure taxonomy shared by the session pipeline.

Every step raises one of these to its caller; ``cli.main`` turns them into a
diagnostic line and a process exit code.
"""

from __future__ import annotations

from collections.abc import Sequence
import shlex


class JqReplError(Exception):
    """Base class for failures that end the session with a diagnostic."""

    exit_code = 1


class ConfigError(JqReplError):
    """Options that cannot be combined into a session."""


class InputError(JqReplError):
    """Temp-file creation, copy, or open failure while resolving inputs."""


class OutputEncodingError(JqReplError):
    """Subprocess output that is not valid UTF-8."""


class ProcessSpawnError(JqReplError):
    """An executable could not be found or launched."""

    def __init__(self, command: Sequence[str], reason: BaseException) -> None:
        self.command = list(command)
        self.reason = reason
        program = self.command[0] if self.command else "<empty command>"
        super().__init__(f"failed to launch {program!r}: {reason}")

    def formatted_command(self) -> str:
        return " ".join(shlex.quote(part) for part in self.command)


class SelectorError(JqReplError):
    """Selector exited with a status other than success or "no match"."""

    def __init__(self, returncode: int) -> None:
        self.returncode = returncode
        super().__init__(f"selector exited with status {returncode}")

    @property
    def exit_code(self) -> int:  # type: ignore[override]
        # Negative statuses come from signals; report them the way shells do.
        if self.returncode < 0:
            return 128 - self.returncode
        return self.returncode or 1

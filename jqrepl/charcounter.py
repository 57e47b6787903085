"""Prompt length counter.

Reads the query on stdin and prints ``count/limit``, colored by how close
the query is to the limit. Prints nothing while the query is short.
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

from . import __version__

LIMIT = 1_000

DIM_GRAY = "\x1b[2;37m"
YELLOW = "\x1b[0;33m"
RED = "\x1b[0;31m"
BOLD_RED = "\x1b[1;31m"
RESET = "\x1b[0m"


def format_count(count: int, limit: int = LIMIT) -> str:
    label = f"{count}/{limit}"
    if count < limit - 100:
        return ""
    if count < limit - 25:
        return f"{DIM_GRAY}{label}{RESET}"
    if count < limit - 10:
        return label
    if count < limit - 3:
        return f"{YELLOW}{label}{RESET}"
    if count < limit:
        return f"{RED}{label}{RESET}"
    return f"{BOLD_RED}{label}{RESET}"


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="jq-repl-charcounter",
        description="Print how many characters of the prompt limit standard input uses.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.parse_args(argv)
    text = sys.stdin.read()
    sys.stdout.write(format_count(len(text)))


if __name__ == "__main__":
    main()

"""jq-repl: type a jq filter in fzf and watch its output update live.

Only ``__version__`` and ``main`` live here; importing the package does not
pull in argparse, platformdirs or Pygments until ``main`` is called.
"""

from __future__ import annotations

__version__ = "0.4.0"


def main(*args, **kwargs):
    """Run the jq-repl command line; arguments are forwarded to ``cli.main``."""
    from .cli import main as _main

    return _main(*args, **kwargs)


__all__ = ["__version__", "main"]

"""Run jq-repl as ``python -m jqrepl [options] [FILE ...]``."""

from .cli import main


if __name__ == "__main__":
    main()

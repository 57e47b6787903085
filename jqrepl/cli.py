"""Command-line front door for jq-repl.

Parses CLI options into a frozen ``SessionConfig``, resolves inputs inside a
temp-file scope, and either prints the assembled selector command or runs
the interactive session.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Sequence
from pathlib import Path

from . import __version__
from .errors import JqReplError
from .highlight import color_enabled, highlight_script
from .inputs import TempFileRegistry, resolve_inputs, stdin_is_piped
from .pipeline import build_pipelines
from .selector import build_selector_invocation
from .session import exit_code_for, run_session
from .settings import (
    LOG_LEVEL_ENV,
    NO_DEFAULT_INCLUDE_ENV,
    SessionConfig,
    default_for,
    flag_default,
    load_config,
)
from .versions import version_report

PROG = "jq-repl"
FZF_ARGS_OPTION = "--fzf-args"
FZF_ARGS_TERMINATOR = ";"
PASSTHROUGH_SEPARATOR = "--"

logger = logging.getLogger(__name__)


def split_passthrough(argv: Sequence[str]) -> tuple[list[str], list[str], list[str]]:
    """Separate own options from selector and render-tool pass-through args.

    ``--fzf-args A B ;`` collects selector arguments up to the semicolon (or
    the end of the command line); everything after a bare ``--`` goes to the
    render tool. Both groups keep their order and duplicates. The markers
    are matched before option parsing, so an option value equal to one of
    them must be attached with ``=``.
    """
    own: list[str] = []
    fzf_args: list[str] = []
    jq_args: list[str] = []
    tokens = iter(argv)
    for token in tokens:
        if token == PASSTHROUGH_SEPARATOR:
            jq_args.extend(tokens)
            break
        if token == FZF_ARGS_OPTION:
            for value in tokens:
                if value == FZF_ARGS_TERMINATOR:
                    break
                fzf_args.append(value)
            continue
        own.append(token)
    return own, fzf_args, jq_args


def build_parser(file_config: dict[str, object]) -> argparse.ArgumentParser:
    """Build the argument parser with defaults layered from env and config file."""

    def default(name: str) -> str:
        return default_for(name, file_config)

    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Interactively build a jq filter with a live preview in fzf.",
        epilog=(
            f"Pass extra fzf arguments with '{FZF_ARGS_OPTION} ARG ... {FZF_ARGS_TERMINATOR}' and extra "
            f"render-tool arguments after '{PASSTHROUGH_SEPARATOR}'. Those two tokens are recognized "
            "anywhere on the command line, so option values starting with '-' (including a literal "
            f"'{PASSTHROUGH_SEPARATOR}' or '{FZF_ARGS_OPTION}') need the '--option=VALUE' form."
        ),
    )
    parser.add_argument(
        "files",
        nargs="*",
        type=Path,
        help="JSON files to read (defaults to standard input); '-' inserts standard input at that point.",
    )
    parser.add_argument("--bin", "--jq-bin", dest="jq_bin", default=default("jq_bin"), help="Render tool to call.")
    parser.add_argument("--fzf-bin", default=default("fzf_bin"), help="Selector executable.")
    parser.add_argument("--gron-bin", default=default("gron_bin"), help="Flattener used by ctrl-space.")
    parser.add_argument("--vd-bin", default=default("vd_bin"), help="Structured viewer used by alt-v/alt-V.")
    parser.add_argument("--bat-bin", default=default("bat_bin"), help="Syntax pager used by alt-L.")
    parser.add_argument(
        "--charcounter-bin",
        default=default("charcounter_bin"),
        help="Program that reads the query on stdin and prints how many characters are left.",
    )
    parser.add_argument(
        "--charcounter-options",
        default=default("charcounter_options"),
        help="Shell-quoted arguments for the counter (for example '-m' when using wc).",
    )
    parser.add_argument("--braille-bin", default=default("braille_bin"), help="Braille chart renderer.")
    parser.add_argument(
        "--history-file",
        type=Path,
        default=Path(default("history_file")),
        help="Selector history file (^P/^N); only accepted queries are recorded.",
    )
    parser.add_argument(
        "-n",
        "--null-input",
        action="store_true",
        help="Use null as input. Default when no file is given and stdin is a terminal.",
    )
    parser.add_argument("--null-input-flag", default=default("null_input_flag"), help="Render-tool null-input flag.")
    parser.add_argument("-R", "--raw-input", action="store_true", help="Don't interpret input as JSON.")
    parser.add_argument("--raw-input-flag", default=default("raw_input_flag"), help="Render-tool raw-input flag.")
    parser.add_argument(
        "--pass-as-stdin",
        action="store_true",
        help="Feed the input on the render tool's standard input instead of as a path.",
    )
    parser.add_argument(
        "--show-fzf-command",
        "--print-fzf-command",
        dest="show_fzf_command",
        action="store_true",
        help="Print the fzf command that would be run and exit.",
    )
    parser.add_argument(
        "--no-default-args",
        dest="use_default_args",
        action="store_false",
        help="Disable the default library search paths.",
    )
    parser.add_argument("--jq-repl-lib", default=default("jq_repl_lib"), help="Library directory for -L.")
    parser.add_argument(
        "--no-default-include",
        action="store_true",
        default=flag_default("no_default_include", file_config, NO_DEFAULT_INCLUDE_ENV),
        help="Don't add the library's '.jq' directory to the include paths.",
    )
    parser.add_argument("--color-flag", default=default("color_flag"), help="Render-tool color flag.")
    parser.add_argument("--no-color-flag", default=default("no_color_flag"), help="Render-tool monochrome flag.")
    parser.add_argument("--compact-flag", default=default("compact_flag"), help="Render-tool compact-output flag.")
    parser.add_argument("--editor", default=default("editor"), help="Editor opened by alt-e.")
    parser.add_argument(
        "--editor-options",
        default=default("editor_options"),
        help="Shell-quoted editor arguments; the editor must read standard input.",
    )
    parser.add_argument("--pager", default=default("pager"), help="Pager for alt-l and two-phase output.")
    parser.add_argument("--pager-options", default=default("pager_options"), help="Shell-quoted pager arguments.")
    parser.add_argument(
        "--two-phase",
        action="store_true",
        help="Accept the query in fzf, then render it outside fzf (through the pager on a terminal).",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--version-verbose",
        action="store_true",
        help="Show versions of all relevant executables.",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Log more (repeat for debug output).")
    return parser


def config_from_args(
    args: argparse.Namespace,
    fzf_args: Sequence[str],
    jq_args: Sequence[str],
    piped: bool,
) -> SessionConfig:
    """Freeze parsed options into a ``SessionConfig``."""
    files = tuple(args.files)
    return SessionConfig(
        jq_bin=args.jq_bin,
        fzf_bin=args.fzf_bin,
        gron_bin=args.gron_bin,
        vd_bin=args.vd_bin,
        bat_bin=args.bat_bin,
        charcounter_bin=args.charcounter_bin,
        charcounter_options=args.charcounter_options,
        braille_bin=args.braille_bin,
        history_file=args.history_file,
        files=files,
        null_input=args.null_input or (not files and not piped),
        null_input_flag=args.null_input_flag,
        raw_input=args.raw_input,
        raw_input_flag=args.raw_input_flag,
        pass_as_stdin=args.pass_as_stdin,
        use_default_args=args.use_default_args,
        jq_repl_lib=args.jq_repl_lib,
        default_include=not args.no_default_include,
        color_flag=args.color_flag,
        no_color_flag=args.no_color_flag,
        compact_flag=args.compact_flag,
        editor=args.editor,
        editor_options=args.editor_options,
        pager=args.pager,
        pager_options=args.pager_options,
        jq_args=tuple(jq_args),
        fzf_args=tuple(fzf_args),
        two_phase=args.two_phase,
        show_fzf_command=args.show_fzf_command,
        version_verbose=args.version_verbose,
    )


def early_verbosity(argv: Sequence[str]) -> int:
    """Count ``-v`` flags before the full parser exists.

    The full parser takes its defaults from the config file, and reading that
    file already logs, so logging has to be set up from a lenient pre-parse.
    """
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument("-v", "--verbose", action="count", default=0)
    # Other short switches, so bundles such as ``-vn`` still split cleanly.
    for switch in ("-h", "-n", "-R"):
        pre_parser.add_argument(switch, action="store_true")
    args, _ = pre_parser.parse_known_args(argv)
    return args.verbose


def configure_logging(verbosity: int) -> None:
    """Install the stderr handler once; later calls only adjust the level."""
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        env_level = getattr(logging, os.environ.get(LOG_LEVEL_ENV, "").strip().upper(), None)
        level = env_level if isinstance(env_level, int) else logging.WARNING
    logging.basicConfig(format="%(levelname)s: %(message)s")
    logging.getLogger().setLevel(level)


def run(config: SessionConfig, stdin=None) -> int:
    """Run one session and return the exit status.

    Materialized inputs live exactly as long as the ``with`` block, covering
    the show-command early return and every error path.
    """
    with TempFileRegistry() as registry:
        if config.null_input:
            locations = []
        else:
            locations = resolve_inputs(config.files, stdin_is_piped(stdin), registry, stdin)
        pipelines = build_pipelines(config, locations)
        invocation = build_selector_invocation(config, pipelines)
        logger.debug("selector command: %s", invocation.command)

        if config.show_fzf_command:
            script = invocation.format_script()
            if color_enabled(sys.stdout):
                script = highlight_script(script)
            sys.stdout.write(script)
            return 0

        return exit_code_for(run_session(config, invocation, locations))


def main(argv: Sequence[str] | None = None) -> None:
    """Parse CLI arguments and run jq-repl.

    Failures print a one-line diagnostic and exit non-zero; a selector that
    fails with its own status code passes that code through.
    """
    own, fzf_args, jq_args = split_passthrough(sys.argv[1:] if argv is None else argv)
    configure_logging(early_verbosity(own))
    file_config = load_config()
    args = build_parser(file_config).parse_args(own)
    configure_logging(args.verbose)
    config = config_from_args(args, fzf_args, jq_args, piped=stdin_is_piped())

    try:
        if config.version_verbose:
            sys.stdout.write(version_report(config))
            return
        exit_code = run(config)
    except JqReplError as exc:
        sys.stderr.write(f"{PROG}: error: {exc}\n")
        raise SystemExit(exc.exit_code) from None

    if exit_code:
        raise SystemExit(exit_code)


if __name__ == "__main__":
    main()

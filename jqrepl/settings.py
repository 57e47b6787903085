"""Session configuration snapshot and its layered defaults.

Defaults come from built-in values, an optional JSON config file, and
environment variables; CLI flags win over all of them. The resulting
``SessionConfig`` is frozen and never changes after startup.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

APP_NAME = "jq-repl"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

logger = logging.getLogger(__name__)

DEFAULTS: dict[str, str] = {
    "jq_bin": "gojq",
    "fzf_bin": "fzf",
    "gron_bin": "gron",
    "vd_bin": "vd",
    "bat_bin": "bat",
    "charcounter_bin": "jq-repl-charcounter",
    "charcounter_options": "",
    "braille_bin": "braille",
    "history_file": str(Path.home() / ".jq_repl_history"),
    "jq_repl_lib": "~/.jq",
    "null_input_flag": "-n",
    "raw_input_flag": "-R",
    "color_flag": "-C",
    "no_color_flag": "-M",
    "compact_flag": "-c",
    "editor": "nvim",
    "editor_options": "-c 'set ft=json' -",
    "pager": "less",
    "pager_options": "-R",
}

# Setting name -> environment variable that overrides it.
ENV_OVERRIDES: dict[str, str] = {
    "jq_bin": "JQ_BIN",
    "fzf_bin": "FZF_BIN",
    "gron_bin": "JQ_REPL_GRON_BIN",
    "vd_bin": "JQ_REPL_VD_BIN",
    "bat_bin": "JQ_REPL_BAT_BIN",
    "charcounter_bin": "JQ_REPL_CHARCOUNTER_BIN",
    "braille_bin": "JQ_REPL_BRAILLE_BIN",
    "history_file": "JQ_REPL_HISTORY",
    "jq_repl_lib": "JQ_REPL_LIB",
    "editor": "EDITOR",
    "pager": "JQ_REPL_PAGER",
}

NO_DEFAULT_INCLUDE_ENV = "JQ_REPL_NO_DEFAULT_INCLUDE"
LOG_LEVEL_ENV = "JQ_REPL_LOG_LEVEL"

_TRUTHY = {"1", "true", "yes", "on"}


def load_config() -> dict[str, object]:
    """Load the optional JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.debug("ignoring config file %s: %s", CONFIG_PATH, exc)
        return {}
    if not isinstance(data, dict):
        logger.debug("ignoring config file %s: top level is not an object", CONFIG_PATH)
        return {}
    return data


def default_for(name: str, file_config: dict[str, object]) -> str:
    """Resolve a string setting from environment, config file, then built-ins.

    Empty environment values and non-string or blank config values are
    skipped, so an override never blanks out a built-in default.
    """
    env_name = ENV_OVERRIDES.get(name)
    if env_name is not None:
        env_value = os.environ.get(env_name, "").strip()
        if env_value:
            return env_value
    value = file_config.get(name)
    if isinstance(value, str) and value.strip():
        return value
    return DEFAULTS[name]


def flag_default(name: str, file_config: dict[str, object], env_name: str | None = None) -> bool:
    """Resolve a boolean setting; explicit booleans only from the config file."""
    if env_name is not None:
        env_value = os.environ.get(env_name, "").strip().lower()
        if env_value:
            return env_value in _TRUTHY
    value = file_config.get(name)
    return value if isinstance(value, bool) else False


@dataclass(frozen=True)
class SessionConfig:
    """Immutable configuration snapshot consumed by every builder."""

    jq_bin: str = DEFAULTS["jq_bin"]
    fzf_bin: str = DEFAULTS["fzf_bin"]
    gron_bin: str = DEFAULTS["gron_bin"]
    vd_bin: str = DEFAULTS["vd_bin"]
    bat_bin: str = DEFAULTS["bat_bin"]
    charcounter_bin: str = DEFAULTS["charcounter_bin"]
    charcounter_options: str = DEFAULTS["charcounter_options"]
    braille_bin: str = DEFAULTS["braille_bin"]
    history_file: Path = Path(DEFAULTS["history_file"])
    files: tuple[Path, ...] = ()
    null_input: bool = False
    null_input_flag: str = DEFAULTS["null_input_flag"]
    raw_input: bool = False
    raw_input_flag: str = DEFAULTS["raw_input_flag"]
    pass_as_stdin: bool = False
    use_default_args: bool = True
    jq_repl_lib: str = DEFAULTS["jq_repl_lib"]
    default_include: bool = True
    color_flag: str = DEFAULTS["color_flag"]
    no_color_flag: str = DEFAULTS["no_color_flag"]
    compact_flag: str = DEFAULTS["compact_flag"]
    editor: str = DEFAULTS["editor"]
    editor_options: str = DEFAULTS["editor_options"]
    pager: str = DEFAULTS["pager"]
    pager_options: str = DEFAULTS["pager_options"]
    jq_args: tuple[str, ...] = ()
    fzf_args: tuple[str, ...] = ()
    two_phase: bool = False
    show_fzf_command: bool = False
    version_verbose: bool = False

    def library_dirs(self) -> list[str]:
        """Return library search paths injected by default-args mode.

        Values stay unexpanded (``~/.jq``) so the shell running a pipeline
        performs tilde expansion itself.
        """
        if not self.use_default_args:
            return []
        lib = self.jq_repl_lib
        dirs = [lib]
        if self.default_include:
            dirs.append(f"{lib.rstrip('/')}/.jq")
        return dirs

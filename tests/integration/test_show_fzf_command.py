"""End-to-end check of ``--show-fzf-command`` through ``python -m jqrepl``.

Runs the real entrypoint in a subprocess with a scrubbed environment and
compares the printed script line by line.
"""

from __future__ import annotations

import os
import subprocess
import sys
import tempfile
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[2]

SCRUBBED_ENV_PREFIXES = ("JQ_REPL_", "JQ_BIN", "FZF_BIN", "EDITOR", "NO_COLOR")

RENDER = "gojq -L ~/.jq -L ~/.jq/.jq --raw-output -C"


def _expected_script(target: Path) -> list[str]:
    t = str(target)
    return [
        "#!/bin/bash",
        "",
        "fzf \\",
        "--disabled \\",
        "--preview-window=up,99%,border-bottom \\",
        "--info=hidden \\",
        "--header-first \\",
        "'--header=M-e: editor ⁄ M-v: vd ⁄ M-l: pager ⁄ ^<space>: gron' \\",
        "--history=/tmp/jq_repl_history \\",
        f"'--preview={RENDER} {{q}} {t}' \\",
        "--bind=ctrl-k:kill-line,pgup:preview-page-up,pgdn:preview-page-down,"
        "alt-w:toggle-preview-wrap,home:preview-top,end:preview-bottom \\",
        f"'--bind=alt-s:change-prompt(-s> )+change-preview:{RENDER} --slurp {{q}} {t}' \\",
        f"'--bind=alt-S:change-prompt(> )+change-preview:{RENDER} {{q}} {t}' \\",
        f"'--bind=alt-c:change-prompt(-c> )+preview:{RENDER} -c {{q}} {t}' \\",
        f"'--bind=alt-C:change-prompt(> )+preview:{RENDER} {{q}} {t}' \\",
        f"'--bind=ctrl-space:change-prompt(gron> )+change-preview:{RENDER} -M {{q}} {t} | gron --colorize' \\",
        f"'--bind=alt-space:change-prompt(> )+change-preview:{RENDER} {{q}} {t}' \\",
        f"'--bind=alt-e:execute:{RENDER} -M {{q}} {t} | nvim -c '\"'\"'set ft=json'\"'\"' -' \\",
        f"'--bind=alt-v:execute:{RENDER} -M {{q}} {t} | vd --filetype json' \\",
        f"'--bind=alt-V:execute:{RENDER} -M {{q}} {t} | vd --filetype csv' \\",
        f"'--bind=alt-l:execute:{RENDER} {{q}} {t} | less -R' \\",
        f"'--bind=alt-L:execute:{RENDER} -M {{q}} {t} | bat --language json' < /dev/null",
    ]


class ShowFzfCommandTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name)
        self.target = self.root / "foo.json"
        self.target.write_text('{"items": [1, 2, 3]}\n', encoding="utf-8")
        env = {key: value for key, value in os.environ.items() if not key.startswith(SCRUBBED_ENV_PREFIXES)}
        env["XDG_CONFIG_HOME"] = str(self.root / "config")
        self.env = env

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def _run(self, *args: str) -> subprocess.CompletedProcess:
        return subprocess.run(
            [sys.executable, "-m", "jqrepl", *args],
            cwd=PROJECT_ROOT,
            env=self.env,
            stdin=subprocess.DEVNULL,
            capture_output=True,
            text=True,
            encoding="utf-8",
            check=False,
        )

    def test_script_matches_known_command_line(self) -> None:
        result = self._run("--history-file", "/tmp/jq_repl_history", "--show-fzf-command", str(self.target))

        self.assertEqual(result.returncode, 0, result.stderr)
        self.assertEqual(result.stdout.splitlines(), _expected_script(self.target))
        self.assertTrue(result.stdout.endswith("\n"))

    def test_passthrough_arguments_are_appended_and_forwarded(self) -> None:
        result = self._run(
            "--history-file",
            "/tmp/jq_repl_history",
            "--show-fzf-command",
            str(self.target),
            "--fzf-args",
            "--border",
            ";",
            "--",
            "--sort-keys",
        )

        self.assertEqual(result.returncode, 0, result.stderr)
        lines = result.stdout.splitlines()
        self.assertEqual(lines[-1], "--border < /dev/null")
        self.assertIn(f"'--preview={RENDER} --sort-keys {{q}} {self.target}' \\", lines)

    @unittest.skipUnless(sys.platform.startswith("linux"), "config location follows XDG_CONFIG_HOME on Linux")
    def test_malformed_config_file_is_visible_with_debug_logging(self) -> None:
        config_dir = self.root / "config" / "jq-repl"
        config_dir.mkdir(parents=True)
        (config_dir / "config.json").write_text("{not json", encoding="utf-8")

        result = self._run("-vv", "--history-file", "/tmp/jq_repl_history", "--show-fzf-command", str(self.target))

        self.assertEqual(result.returncode, 0, result.stderr)
        self.assertIn("DEBUG: ignoring config file", result.stderr)
        self.assertEqual(result.stdout.splitlines(), _expected_script(self.target))

    def test_missing_input_fails_without_output(self) -> None:
        result = self._run("--show-fzf-command", str(self.root / "missing.json"))

        self.assertEqual(result.returncode, 1)
        self.assertEqual(result.stdout, "")
        self.assertIn("jq-repl: error: cannot read", result.stderr)


if __name__ == "__main__":
    unittest.main()

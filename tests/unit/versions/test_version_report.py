"""Verbose version report tests."""

from __future__ import annotations

import subprocess
import unittest
from unittest import mock

from jqrepl import __version__
from jqrepl.settings import SessionConfig
from jqrepl.versions import NOT_FOUND, probe_version, version_report


class ProbeVersionTests(unittest.TestCase):
    def test_missing_executable_is_not_found(self) -> None:
        with mock.patch("jqrepl.versions.shutil.which", return_value=None), mock.patch(
            "jqrepl.versions.subprocess.run"
        ) as run:
            self.assertEqual(probe_version("gojq"), NOT_FOUND)
        run.assert_not_called()

    def test_first_non_empty_line_is_reported(self) -> None:
        completed = subprocess.CompletedProcess(["gojq", "--version"], 0, stdout="\ngojq 0.12.13 (rev: abc)\nextra\n")
        with mock.patch("jqrepl.versions.shutil.which", return_value="/usr/bin/gojq"), mock.patch(
            "jqrepl.versions.subprocess.run", return_value=completed
        ) as run:
            self.assertEqual(probe_version("gojq"), "gojq 0.12.13 (rev: abc)")
        self.assertEqual(run.call_args.args[0], ["gojq", "--version"])

    def test_launch_failure_is_not_found(self) -> None:
        with mock.patch("jqrepl.versions.shutil.which", return_value="/usr/bin/vd"), mock.patch(
            "jqrepl.versions.subprocess.run", side_effect=PermissionError("denied")
        ):
            self.assertEqual(probe_version("vd"), NOT_FOUND)


class VersionReportTests(unittest.TestCase):
    def test_report_lists_program_and_every_collaborator(self) -> None:
        config = SessionConfig(jq_bin="jq", fzf_bin="sk")
        with mock.patch("jqrepl.versions.probe_version", side_effect=lambda exe: f"{exe} 1.0"):
            report = version_report(config)

        lines = report.splitlines()
        self.assertEqual(lines[0], f"jq-repl {__version__}")
        self.assertIn("render tool (jq): jq 1.0", lines)
        self.assertIn("selector (sk): sk 1.0", lines)
        self.assertIn("pager (less): less 1.0", lines)
        self.assertIn("prompt counter (jq-repl-charcounter): jq-repl-charcounter 1.0", lines)
        self.assertIn("braille renderer (braille): braille 1.0", lines)
        self.assertEqual(len(lines), 10)

    def test_configured_counter_and_braille_helpers_are_probed(self) -> None:
        config = SessionConfig(charcounter_bin="wc", charcounter_options="-m", braille_bin="drawille")
        with mock.patch("jqrepl.versions.probe_version", return_value=NOT_FOUND) as probe:
            report = version_report(config)

        probed = [call.args[0] for call in probe.call_args_list]
        self.assertIn("wc", probed)
        self.assertIn("drawille", probed)
        self.assertIn("prompt counter (wc): not found", report.splitlines())


if __name__ == "__main__":
    unittest.main()

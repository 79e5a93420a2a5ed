from __future__ import annotations

from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path
import io
import tempfile
import textwrap
import unittest

from configure import cli


class ConfigureCommandTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.workspace = Path(self.temp_dir.name)

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def _run(self, *argv: str) -> tuple[int, str, str]:
        stdout = io.StringIO()
        stderr = io.StringIO()
        with redirect_stdout(stdout), redirect_stderr(stderr):
            code = cli.main(["--directory", str(self.workspace), *argv])
        return code, stdout.getvalue(), stderr.getvalue()

    def test_switches_override_defaults(self) -> None:
        code, _, _ = self._run("--prefix", "/opt/x", "--target", "demo", "--version", "1.4")
        self.assertEqual(code, 0)
        source = (self.workspace / "appconfig.go").read_text()
        self.assertIn('\t"/opt/x/bin",\n', source)
        self.assertIn("\t[]int{1, 4},\n", source)
        makefile = (self.workspace / "go.make").read_text()
        self.assertIn("\nprefix = /opt/x\n", makefile)
        self.assertIn("\nTARGET = demo\n", makefile)

    def test_dry_run_prints_without_writing(self) -> None:
        code, output, _ = self._run("--dry-run", "--target", "demo")
        self.assertEqual(code, 0)
        self.assertEqual(list(self.workspace.iterdir()), [])
        self.assertIn(f"==> {self.workspace / 'appconfig.go'}\n", output)
        self.assertIn(f"==> {self.workspace / 'go.make'}\n", output)
        self.assertIn("mandir = $(datarootdir)/man\n", output)

    def test_show_vars_lists_dependency_order(self) -> None:
        code, output, _ = self._run("--dry-run", "--show-vars", "--makefile", "", "--config-file", "")
        self.assertEqual(code, 0)
        lines = output.splitlines()
        self.assertEqual(lines[0], "Resolved variables:")
        self.assertEqual(lines[1], "  prefix = /usr/local")
        self.assertIn("  bindir = /usr/local/bin", lines)

    def test_config_file_adds_variables_and_settings(self) -> None:
        config = self.workspace / "configure.toml"
        config.write_text(
            textwrap.dedent(
                """
                [configure]
                package = "config"
                makefile = ""
                version = "2.0.1"

                [variables]
                prefix = "/srv"
                docdir = "${datarootdir}/doc"
                """
            ).strip()
        )
        code, output, _ = self._run("--config", str(config), "--docdir", "${prefix}/docs", "--verbose")
        self.assertEqual(code, 0, output)
        self.assertIn(f"Loaded configuration from {config}", output)
        self.assertFalse((self.workspace / "go.make").exists())
        source = (self.workspace / "appconfig.go").read_text()
        self.assertTrue(source.startswith("package config\n"))
        self.assertIn("\tDocdir string\n", source)
        self.assertIn('\t"/srv/docs",\n', source)
        self.assertIn("\t[]int{2, 0, 1},\n", source)

    def test_unknown_arguments_are_ignored(self) -> None:
        code, _, errors = self._run("--enable-debug", "--makefile", "")
        self.assertEqual(code, 0)
        self.assertIn("Warning: Ignoring unknown arguments: --enable-debug", errors)

    def test_invalid_version_is_reported(self) -> None:
        code, _, errors = self._run("--version", "one.two")
        self.assertEqual(code, 2)
        self.assertIn("Error: Invalid version component", errors)
        self.assertEqual(list(self.workspace.iterdir()), [])

    def test_variable_conflicting_with_builtin_switch(self) -> None:
        config = self.workspace / "configure.json"
        config.write_text('{"variables": {"target": "x"}}')
        code, _, errors = self._run("--config", str(config))
        self.assertEqual(code, 2)
        self.assertIn("conflicts with a built-in option", errors)

    def test_missing_config_file_is_reported(self) -> None:
        code, _, errors = self._run("--config", str(self.workspace / "absent.toml"))
        self.assertEqual(code, 1)
        self.assertIn("Error:", errors)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()

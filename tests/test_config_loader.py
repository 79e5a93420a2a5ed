from __future__ import annotations

from pathlib import Path
import tempfile
import textwrap
import unittest

from core.config_loader import FILE_LOADERS, load_config_file, load_config_files, merge_mappings, register_loader


class ConfigLoaderTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name)

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def test_supports_toml_configs(self) -> None:
        path = self.root / "configure.toml"
        path.write_text(
            textwrap.dedent(
                """
                [configure]
                target = "demo"
                version = [1, 2]

                [variables]
                prefix = "/opt/demo"
                """
            ).strip()
        )
        data = load_config_file(path)
        self.assertEqual(data["configure"]["version"], [1, 2])
        self.assertEqual(data["variables"]["prefix"], "/opt/demo")

    def test_supports_json_configs(self) -> None:
        path = self.root / "configure.json"
        path.write_text('{"variables": {"bindir": "${prefix}/sbin"}}')
        self.assertEqual(load_config_file(path), {"variables": {"bindir": "${prefix}/sbin"}})

    def test_supports_yaml_configs(self) -> None:
        path = self.root / "configure.yml"
        path.write_text(
            textwrap.dedent(
                """
                variables:
                  mandir: ${datarootdir}/man/en
                """
            ).strip()
        )
        self.assertEqual(load_config_file(path), {"variables": {"mandir": "${datarootdir}/man/en"}})

    def test_empty_yaml_is_empty_mapping(self) -> None:
        path = self.root / "empty.yaml"
        path.write_text("")
        self.assertEqual(load_config_file(path), {})

    def test_invalid_yaml_raises_value_error(self) -> None:
        path = self.root / "broken.yaml"
        path.write_text("variables: [unclosed")
        with self.assertRaises(ValueError):
            load_config_file(path)

    def test_rejects_unknown_suffix(self) -> None:
        path = self.root / "configure.ini"
        path.write_text("[variables]")
        with self.assertRaises(ValueError):
            load_config_file(path)

    def test_rejects_non_mapping_root(self) -> None:
        path = self.root / "list.json"
        path.write_text("[1, 2, 3]")
        with self.assertRaises(TypeError):
            load_config_file(path)

    def test_later_files_override_earlier_ones(self) -> None:
        base = self.root / "base.json"
        base.write_text('{"variables": {"prefix": "/usr", "libdir": "${prefix}/lib"}}')
        local = self.root / "local.toml"
        local.write_text('[variables]\nprefix = "/opt"\n')
        merged = load_config_files([base, local])
        self.assertEqual(merged, {"variables": {"prefix": "/opt", "libdir": "${prefix}/lib"}})

    def test_merge_mappings_is_deep(self) -> None:
        merged = merge_mappings({"a": {"x": 1, "y": 2}, "b": 1}, {"a": {"y": 3}, "c": 4})
        self.assertEqual(merged, {"a": {"x": 1, "y": 3}, "b": 1, "c": 4})

    def test_register_loader_requires_dot(self) -> None:
        with self.assertRaises(ValueError):
            register_loader("conf", lambda stream: {})

    def test_register_loader_adds_suffix(self) -> None:
        self.addCleanup(FILE_LOADERS.pop, ".conf", None)
        register_loader(".CONF", lambda stream: {"lines": stream.read().splitlines()})
        path = self.root / "values.conf"
        path.write_text("prefix=/usr\n")
        self.assertEqual(load_config_file(path), {"lines": ["prefix=/usr"]})


if __name__ == "__main__":  # pragma: no cover
    unittest.main()

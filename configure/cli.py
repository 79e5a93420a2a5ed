"""Command line interface for the configure generator."""
from __future__ import annotations

from argparse import ArgumentParser, Namespace
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Sequence
import sys

from core.config_loader import load_config_files

from .artifacts import render_config_source, render_makefile
from .configuration import Configuration
from .generate import config_source_name, configure, resolve_target
from .options import (
    DEFAULT_OPTIONS,
    ConfigureError,
    ConfigureSettings,
    OptionDescriptor,
    apply_overrides,
    parse_version,
    settings_from_mapping,
)


_RESERVED_SWITCHES = {
    "config",
    "package",
    "makefile",
    "config-file",
    "config-variable",
    "target",
    "version",
    "directory",
    "dry-run",
    "show-vars",
    "verbose",
    "help",
}


def _variable_dest(name: str) -> str:
    return f"var_{name}"


def _build_parser(descriptors: Sequence[OptionDescriptor]) -> ArgumentParser:
    parser = ArgumentParser(
        prog="configure",
        description="Generate a Go config source and makefile",
        allow_abbrev=False,
    )
    parser.add_argument("--config", action="append", default=[], metavar="FILE", help="Load variables and settings from FILE (toml/json/yaml)")
    parser.add_argument("--package", help="Package clause of the config source (empty to omit)")
    parser.add_argument("--makefile", help="Filename of the generated makefile (empty to skip)")
    parser.add_argument("--config-file", dest="config_file", help="Filename of the generated config source (empty to skip)")
    parser.add_argument("--config-variable", dest="config_variable", help="Variable name inside the config source")
    parser.add_argument("--target", help="Executable name to build")
    parser.add_argument("--version", dest="app_version", metavar="VERSION", help="Application version, e.g. 1.2.3")
    parser.add_argument("--directory", default=".", help="Directory to write the artifacts into")
    parser.add_argument("--dry-run", action="store_true", help="Print the artifacts without writing them")
    parser.add_argument("--show-vars", action="store_true", help="Display resolved variables in dependency order")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose output")

    group = parser.add_argument_group("installation directories")
    for descriptor in descriptors:
        if descriptor.name in _RESERVED_SWITCHES:
            raise ConfigureError(f"Variable '{descriptor.name}' conflicts with a built-in option")
        group.add_argument(
            f"--{descriptor.name}",
            dest=_variable_dest(descriptor.name),
            metavar=descriptor.name.upper(),
            help=f"{descriptor.description} [{descriptor.default}]",
        )
    return parser


def _load_config_sources(argv: List[str]) -> tuple[Mapping[str, Any], List[str]]:
    pre_parser = ArgumentParser(add_help=False, allow_abbrev=False)
    pre_parser.add_argument("--config", action="append", default=[])
    known, _ = pre_parser.parse_known_args(argv)
    if not known.config:
        return {}, []
    data = load_config_files(Path(item) for item in known.config)
    return data, list(known.config)


def _table(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = data.get(key, {})
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigureError(f"'{key}' must be a table of values")
    return value


def _settings_from_args(args: Namespace, base: ConfigureSettings) -> ConfigureSettings:
    updates: Dict[str, Any] = {}
    for key in ("package", "makefile", "config_file", "config_variable", "target"):
        value = getattr(args, key)
        if value is not None:
            updates[key] = value
    if args.app_version is not None:
        updates["version"] = parse_version(args.app_version)
    return replace(base, **updates)


def _cli_overrides(args: Namespace, descriptors: Sequence[OptionDescriptor]) -> Dict[str, str]:
    overrides: Dict[str, str] = {}
    for descriptor in descriptors:
        value = getattr(args, _variable_dest(descriptor.name))
        if value is not None:
            overrides[descriptor.name] = value
    return overrides


def _print_variables(configuration: Configuration) -> None:
    print("Resolved variables:")
    for name in configuration.ordered_names:
        print(f"  {name} = {configuration.expand(name)}")


def _emit_dry_run_output(configuration: Configuration, settings: ConfigureSettings, directory: Path) -> None:
    filename = config_source_name(settings)
    if filename:
        print(f"==> {directory / filename}")
        print(render_config_source(configuration, settings), end="")
    if settings.makefile:
        if filename:
            print()
        target = resolve_target(settings, directory)
        print(f"==> {directory / settings.makefile}")
        print(render_makefile(configuration, settings, target=target), end="")


def main(argv: Iterable[str] | None = None) -> int:
    arguments = list(sys.argv[1:] if argv is None else argv)

    try:
        data, config_paths = _load_config_sources(arguments)
        settings = settings_from_mapping(_table(data, "configure"))
        descriptors = apply_overrides(DEFAULT_OPTIONS, _table(data, "variables"))
        parser = _build_parser(descriptors)
        args, unknown = parser.parse_known_args(arguments)
        if unknown:
            print(f"Warning: Ignoring unknown arguments: {' '.join(unknown)}", file=sys.stderr)
        settings = _settings_from_args(args, settings)
        descriptors = apply_overrides(descriptors, _cli_overrides(args, descriptors))
    except (ValueError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    except OSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    directory = Path(args.directory)
    if args.verbose:
        for path in config_paths:
            print(f"Loaded configuration from {path}")

    if args.dry_run:
        configuration = Configuration.from_descriptors(descriptors)
        if args.show_vars:
            _print_variables(configuration)
        _emit_dry_run_output(configuration, settings, directory)
        return 0

    try:
        result = configure(settings, descriptors, directory=directory)
    except OSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.show_vars:
        _print_variables(result.configuration)
    if args.verbose:
        for path in result.written:
            print(f"Wrote {path}")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

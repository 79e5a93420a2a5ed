"""Declared configure options and generator settings."""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple
import re


class ConfigureError(ValueError):
    """Raised when configure settings or variables are invalid."""


@dataclass(frozen=True, slots=True)
class OptionDescriptor:
    """A configurable variable.

    ``name`` is both the variable name used in ``${name}`` references and the
    long command line switch. ``field`` is where the resolved value is stored
    in the generated config source.
    """

    name: str
    description: str
    default: str
    field: str


DEFAULT_OPTIONS: Tuple[OptionDescriptor, ...] = (
    OptionDescriptor("prefix", "install architecture-independent files in PREFIX", "/usr/local", "Prefix"),
    OptionDescriptor("execprefix", "install architecture-dependent files in EPREFIX", "${prefix}", "ExecPrefix"),
    OptionDescriptor("bindir", "user executables", "${execprefix}/bin", "BinDir"),
    OptionDescriptor("libexecdir", "program executables", "${execprefix}/libexec", "LibExecDir"),
    OptionDescriptor("sysconfdir", "read-only single-machine data", "${prefix}/etc", "SysConfDir"),
    OptionDescriptor("libdir", "program executables", "${execprefix}/lib", "LibDir"),
    OptionDescriptor("datarootdir", "read-only arch.-independent data root", "${prefix}/share", "DataRootDir"),
    OptionDescriptor("datadir", "read-only arc.-independent data", "${datarootdir}", "DataDir"),
    OptionDescriptor("mandir", "man documentation", "${datarootdir}/man", "ManDir"),
)


@dataclass(frozen=True, slots=True)
class ConfigureSettings:
    """Output names and metadata for one configure run.

    An empty ``makefile`` or ``config_file`` disables that artifact, an
    empty ``package`` omits the package clause, and a missing ``target``
    is derived from the output directory name.
    """

    package: str = "main"
    makefile: str = "go.make"
    config_file: str = "appconfig"
    config_variable: str = "AppConfig"
    target: str | None = None
    version: Tuple[int, ...] = (0, 1)

    def __post_init__(self) -> None:
        if not self.version:
            raise ConfigureError("version must contain at least one component")


_SETTING_KEYS = ("package", "makefile", "config_file", "config_variable", "target")
_WORD_SPLIT = re.compile(r"[^0-9A-Za-z]+")


def field_name_for(name: str) -> str:
    """Return the exported field name used for a variable without a declared one."""

    words = [word for word in _WORD_SPLIT.split(name) if word]
    if not words:
        raise ConfigureError(f"Cannot derive a field name from variable '{name}'")
    field = "".join(word[:1].upper() + word[1:] for word in words)
    if field[0].isdigit():
        field = f"V{field}"
    return field


def parse_version(value: Any) -> Tuple[int, ...]:
    """Coerce a dotted string or a sequence of integers into a version tuple."""

    if isinstance(value, str):
        parts: Sequence[Any] = [part.strip() for part in value.strip().split(".")]
    elif isinstance(value, Sequence):
        parts = value
    else:
        raise ConfigureError("version must be a dotted string or a list of integers")

    components: List[int] = []
    for part in parts:
        if isinstance(part, bool):
            raise ConfigureError(f"Invalid version component: {part!r}")
        if isinstance(part, int):
            components.append(part)
            continue
        if isinstance(part, str) and part.isdigit():
            components.append(int(part))
            continue
        raise ConfigureError(f"Invalid version component: {part!r}")

    if not components:
        raise ConfigureError("version must contain at least one component")
    return tuple(components)


def apply_overrides(
    descriptors: Iterable[OptionDescriptor],
    values: Mapping[str, Any],
) -> List[OptionDescriptor]:
    """Replace descriptor defaults by name and append unknown variables."""

    result = list(descriptors)
    positions = {descriptor.name: index for index, descriptor in enumerate(result)}
    for raw_name, raw_value in values.items():
        name = str(raw_name).strip()
        if not name:
            raise ConfigureError("Variable names must be non-empty strings")
        if isinstance(raw_value, (Mapping, list, tuple)) or raw_value is None:
            raise ConfigureError(f"Variable '{name}' must have a scalar value")
        value = str(raw_value)
        if name in positions:
            index = positions[name]
            result[index] = replace(result[index], default=value)
            continue
        positions[name] = len(result)
        result.append(OptionDescriptor(name, f"{name} variable", value, field_name_for(name)))

    fields: Dict[str, str] = {}
    for descriptor in result:
        other = fields.get(descriptor.field)
        if other is not None:
            raise ConfigureError(
                f"Variables '{other}' and '{descriptor.name}' map to the same field '{descriptor.field}'"
            )
        fields[descriptor.field] = descriptor.name
    return result


def settings_from_mapping(mapping: Mapping[str, Any], base: ConfigureSettings | None = None) -> ConfigureSettings:
    """Apply a ``configure`` table from a config file on top of ``base``."""

    settings = base or ConfigureSettings()
    updates: Dict[str, Any] = {}
    for key in _SETTING_KEYS:
        if key not in mapping:
            continue
        value = mapping[key]
        if value is None and key == "target":
            updates[key] = None
            continue
        if not isinstance(value, str):
            raise ConfigureError(f"configure.{key} must be a string")
        updates[key] = value
    if "version" in mapping:
        updates["version"] = parse_version(mapping["version"])

    unknown = sorted(set(mapping) - set(_SETTING_KEYS) - {"version"})
    if unknown:
        raise ConfigureError(f"Unknown configure settings: {', '.join(map(str, unknown))}")
    return replace(settings, **updates)


__all__ = [
    "ConfigureError",
    "ConfigureSettings",
    "DEFAULT_OPTIONS",
    "OptionDescriptor",
    "apply_overrides",
    "field_name_for",
    "parse_version",
    "settings_from_mapping",
]
